"""Default values with environment variable fallback."""

import copy
import logging
import os
from typing import Any, Callable, Dict

from .exceptions import NotAMappingError
from .keypath import lookup, set_value

logger = logging.getLogger(__name__)

DEFAULT_MAX_RECURSION = 5


class DefaultTable:
    """Fallback values consulted when a key is absent from a config tree.

    A key is resolved against the table first, then against an environment
    variable derived from the key:

        prefix + key.replace(".", "_").upper()

    With prefix ``"APP_"``, the key ``"database.url"`` maps to
    ``APP_DATABASE_URL``.

    The table also holds the recursion ceiling for placeholder expansion,
    shared by every tree derived from the same root.
    """

    def __init__(
        self,
        prefix: str = "",
        values: Dict[str, Any] | None = None,
        max_recursion: int = DEFAULT_MAX_RECURSION,
        environ: Callable[[str], str | None] | None = None,
    ) -> None:
        """Initialize the default table.

        Args:
            prefix: Environment variable prefix (upper-cased)
            values: Initial default values, nested or with flat dotted keys
            max_recursion: Placeholder expansion ceiling (0 disables expansion)
            environ: Environment accessor (default: os.environ.get)
        """
        self._prefix = (prefix or "").upper()
        self._values: Dict[str, Any] = copy.deepcopy(values) if values else {}
        self._environ = environ or os.environ.get
        self.set_max_recursion(max_recursion)

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def values(self) -> Dict[str, Any]:
        return self._values

    @property
    def max_recursion(self) -> int:
        return self._max_recursion

    def set_max_recursion(self, max_recursion: int) -> None:
        """Set the placeholder expansion ceiling.

        Args:
            max_recursion: Maximum depth, 0 disables expansion

        Raises:
            ValueError: If max_recursion is negative
        """
        if max_recursion < 0:
            raise ValueError(f"max_recursion must be >= 0, got {max_recursion}")
        self._max_recursion = max_recursion

    def env_name(self, key: str) -> str:
        """Get the environment variable name for a dotted key."""
        return self._prefix + key.replace(".", "_").upper()

    def resolve(self, key: str) -> tuple[Any, bool]:
        """Resolve a key against the defaults, then the environment.

        Args:
            key: Dotted key

        Returns:
            Tuple of (value, found). Environment values are strings.
        """
        try:
            value, found = lookup(self._values, key)
        except NotAMappingError:
            found = False
        if not found and key in self._values:
            value, found = self._values[key], True
        if found:
            return value, True

        env_value = self._environ(self.env_name(key))
        if env_value is not None:
            return env_value, True
        return None, False

    def add_default(self, key: str, value: Any) -> bool:
        """Add a default value at a dotted key.

        Args:
            key: Dotted key
            value: Default value; None is rejected

        Returns:
            True if the value was stored
        """
        if value is None:
            logger.debug(f"Ignoring None default for '{key}'")
            return False
        return set_value(self._values, key, value)
