"""Recursive ``${...}`` placeholder expansion.

A placeholder is replaced by the value its key resolves to. Placeholders
may nest inside the key itself, and resolved values may contain further
placeholders:

    ```python
    # defaults: env = "dev"
    # tree:     {"dev": {"db": {"pwd": "azerty"}}}
    engine.expand("${ ${env}.db.pwd }")  # -> "azerty"
    ```

Closing braces are matched by nesting level rather than with a regular
expression, so ``${a${b}}`` is a single placeholder whose key is built from
the value of ``b``. An opening ``${`` without a matching ``}`` is kept as
literal text.

Expansion is bounded by a recursion ceiling instead of cycle detection: two
keys referencing each other fail with :class:`ExpandRecursionError` once the
ceiling is reached. A ceiling of 0 disables expansion entirely.
"""

from typing import Any, List, Protocol, runtime_checkable

from .coercion import to_string
from .exceptions import ExpandMissingKeyError, ExpandRecursionError

OPEN = "${"
CLOSE = "}"


@runtime_checkable
class KeyResolver(Protocol):
    """Source of placeholder values."""

    def find(self, key: str) -> tuple[Any, bool]:
        """Resolve a dotted key to a (value, found) pair."""
        ...


class ExpansionEngine:
    """Expands placeholders in strings against a key resolver."""

    def __init__(self, resolver: KeyResolver, max_recursion: int) -> None:
        """Initialize the engine.

        Args:
            resolver: Object resolving placeholder keys (usually a ConfigTree)
            max_recursion: Maximum nesting depth, 0 disables expansion
        """
        self.resolver = resolver
        self.max_recursion = max_recursion

    def expand(self, value: str) -> str:
        """Expand every placeholder in a string.

        Args:
            value: String potentially containing ${key} placeholders

        Returns:
            The expanded string, or value unchanged when expansion is disabled
            or there is nothing to expand

        Raises:
            ExpandMissingKeyError: If a placeholder key cannot be resolved
            ExpandRecursionError: If expansion recurses past the ceiling

            Both errors carry the original, unexpanded string in ``value``.
        """
        if self.max_recursion == 0 or OPEN not in value:
            return value
        try:
            return self._expand(value, 0)
        except ExpandMissingKeyError as e:
            raise ExpandMissingKeyError(e.key, value) from None
        except (ExpandRecursionError, RecursionError):
            # A ceiling deeper than the interpreter stack ends the same way
            raise ExpandRecursionError(self.max_recursion, value) from None

    def _expand(self, text: str, depth: int) -> str:
        if depth > self.max_recursion:
            raise ExpandRecursionError(self.max_recursion, text)

        output: List[str] = []
        pos = 0
        start = text.find(OPEN)
        while start >= 0:
            output.append(text[pos:start])
            end = self._match_end(text, start + len(OPEN))
            if end < 0:
                # Unterminated, keep the remainder as is
                pos = start
                break

            key = self._expand(text[start + len(OPEN) : end], depth + 1).strip()
            resolved, found = self.resolver.find(key)
            if not found or resolved is None:
                raise ExpandMissingKeyError(key, text)
            output.append(self._expand(to_string(resolved), depth + 1))

            pos = end + len(CLOSE)
            start = text.find(OPEN, pos)

        output.append(text[pos:])
        return "".join(output)

    @staticmethod
    def _match_end(text: str, pos: int) -> int:
        """Find the brace closing a placeholder opened just before pos.

        Returns:
            Index of the matching ``}``, or -1
        """
        level = 1
        while pos < len(text):
            if text.startswith(OPEN, pos):
                level += 1
                pos += len(OPEN)
                continue
            if text[pos] == CLOSE:
                level -= 1
                if level == 0:
                    return pos
            pos += 1
        return -1
