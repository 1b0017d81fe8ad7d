"""Deep copy of nested values with placeholder expansion."""

import logging
from typing import Any

from .exceptions import ExpansionError
from .expansion import ExpansionEngine

logger = logging.getLogger(__name__)


class DeepTranslator:
    """Copies nested dicts and sequences, expanding every string leaf.

    The shape of the value is preserved. Non-string leaves are returned
    unchanged. A string whose expansion fails is kept verbatim, so one
    dangling placeholder does not abort the whole copy.
    """

    def __init__(self, engine: ExpansionEngine) -> None:
        self.engine = engine

    def translate(self, value: Any) -> Any:
        """Return an expanded deep copy of value.

        Args:
            value: Value to process (string, dict, list, tuple, set or other)

        Returns:
            Copy of value with placeholders expanded in every string
        """
        if isinstance(value, str):
            return self._translate_string(value)
        elif isinstance(value, dict):
            # Keys are not expanded, only values
            return {key: self.translate(item) for key, item in value.items()}
        elif isinstance(value, list):
            return [self.translate(item) for item in value]
        elif isinstance(value, (tuple, set, frozenset)):
            return type(value)(self.translate(item) for item in value)
        else:
            return value

    def _translate_string(self, text: str) -> str:
        try:
            return self.engine.expand(text)
        except ExpansionError as e:
            logger.debug(f"Keeping unexpanded value {text!r}: {e}")
            return text
