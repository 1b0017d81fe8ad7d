"""Exception hierarchy for the treeconf package.

All errors raised by the package derive from :class:`TreeConfError`, which
carries an optional context dictionary with structured details about the
failure (the key being resolved, the offending value, ...).

Example:
    ```python
    from dataknobs_treeconf import ConfigBuilder, TreeConfError

    config = ConfigBuilder("APP_").load({"port": "http"})
    try:
        config.get_int("port")
    except TreeConfError as e:
        logger.error(f"Error: {e}")
        if e.context:
            logger.error(f"Context: {e.context}")
    ```
"""

from typing import Any, Dict


class TreeConfError(Exception):
    """Base exception for the treeconf package.

    Attributes:
        context: Dictionary containing contextual information about the error
        details: Alias for context

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context
    """

    def __init__(self, message: str, context: Dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}
        self.details = self.context


class ConfigurationError(TreeConfError):
    """Raised when configuration data is invalid or cannot be processed."""

    pass


class NotFoundError(TreeConfError):
    """Raised when a requested item is not found."""

    pass


class ValidationError(TreeConfError):
    """Raised when a value fails validation."""

    pass


class MissingKeyError(NotFoundError, KeyError):
    """Raised when a dotted key resolves to nothing and no fallback was given."""

    def __init__(self, key: str, message: str | None = None):
        super().__init__(message or f"Key '{key}' does not exist", context={"key": key})
        self.key = key

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class NotAMappingError(ValidationError):
    """Raised when navigation through a dotted key hits a non-mapping value."""

    def __init__(self, key: str, segment: str, message: str | None = None):
        super().__init__(
            message or f"Key '{key}': '{segment}' is not a mapping",
            context={"key": key, "segment": segment},
        )
        self.key = key
        self.segment = segment


class TypeMismatchError(ValidationError, TypeError):
    """Raised when a value cannot be coerced to the requested type."""

    def __init__(self, key: str, value: Any, expected: str, message: str | None = None):
        super().__init__(
            message or f"Key '{key}': cannot convert {value!r} to {expected}",
            context={"key": key, "value": value, "expected": expected},
        )
        self.key = key
        self.value = value
        self.expected = expected


class ExpansionError(ConfigurationError):
    """Base class for placeholder expansion failures.

    Attributes:
        value: The original, unexpanded string.
    """

    def __init__(self, message: str, value: str, context: Dict[str, Any] | None = None):
        super().__init__(message, context={"value": value, **(context or {})})
        self.value = value


class ExpandMissingKeyError(ExpansionError):
    """Raised when a placeholder key cannot be resolved anywhere."""

    def __init__(self, key: str, value: str):
        super().__init__(f"Missing key '{key}'", value, context={"key": key})
        self.key = key


class ExpandRecursionError(ExpansionError):
    """Raised when placeholder expansion recurses past the configured ceiling."""

    def __init__(self, max_recursion: int, value: str):
        super().__init__(
            f"Max recursion reached: {max_recursion}",
            value,
            context={"max_recursion": max_recursion},
        )
        self.max_recursion = max_recursion


class LoadError(ConfigurationError):
    """Raised when a configuration source cannot be read or parsed."""

    def __init__(self, message: str, source: Any = None):
        super().__init__(message, context={"source": source})
        self.source = source
