"""Hierarchical configuration tree with typed getters."""

import copy
import logging
from datetime import timedelta
from typing import Any, Dict, Iterator, List

from .coercion import to_bool, to_duration, to_float, to_int, to_string, to_uint
from .defaults import DefaultTable
from .exceptions import MissingKeyError, NotAMappingError
from .expansion import ExpansionEngine
from .keypath import lookup, merge_missing, set_value, split_key
from .translator import DeepTranslator

logger = logging.getLogger(__name__)


class ConfigTree:
    """A node in a tree of nested configuration dictionaries.

    Values are addressed with dotted keys (``"database.url"``). A key missing
    from the tree is looked up in the shared :class:`DefaultTable`, then in
    the environment, then replaced by the fallback passed to the getter.
    String values have their ``${...}`` placeholders expanded before being
    returned.

    Sub-trees returned by :meth:`get_config` are views over the same
    dictionaries. They keep a reference to the tree they were taken from,
    so placeholders inside a section can refer to keys of any enclosing
    section.

    Example:
        ```python
        builder = ConfigBuilder("APP_", {"env": "dev"})
        config = builder.load_json('{"dev": {"port": "5432"}, "port": "${${env}.port}"}')

        config.get_int("port")           # 5432
        config.get_string("host", "db")  # "db"
        dev = config.get_config("dev")
        dev.get_int("port")              # 5432
        ```
    """

    def __init__(
        self,
        values: Dict[str, Any] | None = None,
        defaults: DefaultTable | None = None,
        parent: "ConfigTree | None" = None,
    ) -> None:
        """Initialize a tree node.

        Args:
            values: Nested dictionary backing this node (used as-is, not copied)
            defaults: Default table shared by every node of the tree
            parent: Node this one was extracted from
        """
        self._values: Dict[str, Any] = values if values is not None else {}
        self._defaults = defaults if defaults is not None else DefaultTable()
        self._parent = parent

    @property
    def values(self) -> Dict[str, Any]:
        return self._values

    @property
    def defaults(self) -> DefaultTable:
        return self._defaults

    @property
    def parent(self) -> "ConfigTree | None":
        return self._parent

    @property
    def root(self) -> "ConfigTree":
        node = self
        while node._parent is not None:
            node = node._parent
        return node

    @property
    def max_recursion(self) -> int:
        return self._defaults.max_recursion

    def __repr__(self) -> str:
        return f"ConfigTree(keys={list(self._values)!r}, prefix={self._defaults.prefix!r})"

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def keys(self) -> List[str]:
        """Get the top-level keys of this node."""
        return list(self._values)

    def has(self, key: str) -> bool:
        """Check whether a dotted key exists in this node (defaults excluded)."""
        try:
            return lookup(self._values, key)[1]
        except NotAMappingError:
            return False

    def find(self, key: str) -> tuple[Any, bool]:
        """Resolve a placeholder key.

        The key is searched in this node, then in every ancestor up to the
        root, then in the default table by full key and finally in the
        default table by its last segment only.

        Args:
            key: Dotted key

        Returns:
            Tuple of (raw value, found)
        """
        node: ConfigTree | None = self
        while node is not None:
            try:
                value, found = lookup(node._values, key)
            except NotAMappingError:
                found = False
            if found:
                return value, True
            node = node._parent

        value, found = self._defaults.resolve(key)
        if found:
            return value, True

        segments = split_key(key)
        if len(segments) > 1:
            return self._defaults.resolve(segments[-1])
        return None, False

    def _engine(self) -> ExpansionEngine:
        return ExpansionEngine(self, self._defaults.max_recursion)

    def expand(self, value: str) -> str:
        """Expand ``${...}`` placeholders in a string against this tree.

        Raises:
            ExpandMissingKeyError: If a placeholder key cannot be resolved
            ExpandRecursionError: If the recursion ceiling is reached
        """
        return self._engine().expand(value)

    def get(self, key: str, *fallback: Any) -> Any:
        """Get a value with placeholders expanded.

        Args:
            key: Dotted key
            *fallback: Optional value used when the key resolves to nothing

        Returns:
            The expanded value

        Raises:
            MissingKeyError: If nothing is found and no fallback was given
            NotAMappingError: If an intermediate segment is not a mapping and
                no fallback was given
            ExpansionError: If expansion of a string value fails
        """
        blocked: NotAMappingError | None = None
        try:
            value, found = lookup(self._values, key)
        except NotAMappingError as e:
            blocked = e
            value, found = None, False

        if not found:
            value, found = self._defaults.resolve(key)
        if not found:
            if fallback:
                value = fallback[0]
            elif blocked is not None:
                raise blocked
            else:
                raise MissingKeyError(key)

        if isinstance(value, str):
            return self.expand(value)
        return DeepTranslator(self._engine()).translate(value)

    def get_string(self, key: str, *fallback: Any) -> str:
        return to_string(self.get(key, *fallback))

    def get_bool(self, key: str, *fallback: Any) -> bool:
        return to_bool(key, self.get(key, *fallback))

    def get_int(self, key: str, *fallback: Any) -> int:
        return to_int(key, self.get(key, *fallback))

    def get_uint(self, key: str, *fallback: Any) -> int:
        return to_uint(key, self.get(key, *fallback))

    def get_float(self, key: str, *fallback: Any) -> float:
        return to_float(key, self.get(key, *fallback))

    def get_duration(self, key: str, *fallback: Any) -> timedelta:
        return to_duration(key, self.get(key, *fallback))

    def get_config(self, key: str) -> "ConfigTree":
        """Get a section of this tree as a new tree node.

        The returned node shares this tree's dictionaries and default table,
        and has this tree as parent.

        Args:
            key: Dotted key of a mapping value

        Returns:
            Sub-tree for the section

        Raises:
            MissingKeyError: If the key does not exist in this tree
            NotAMappingError: If the key (or an intermediate) is not a mapping
        """
        value, found = lookup(self._values, key)
        if not found:
            raise MissingKeyError(key)
        if not isinstance(value, dict):
            raise NotAMappingError(key, key)
        return ConfigTree(value, self._defaults, parent=self)

    def set_value(self, key: str, value: Any) -> bool:
        """Set a value, never overwriting an existing one.

        Existing mappings receive new mapping values through a first-wins
        merge. Any other existing value is left unchanged.

        Returns:
            True if the tree was changed
        """
        changed = set_value(self._values, key, copy.deepcopy(value))
        if not changed:
            logger.debug(f"Key '{key}' already set, ignoring new value")
        return changed

    def merge(self, data: Dict[str, Any]) -> "ConfigTree":
        """Merge a raw dictionary into this tree, keeping existing values.

        The incoming data is copied, so later merges never modify it.

        Returns:
            This tree
        """
        merge_missing(copy.deepcopy(data), self._values)
        return self

    def to_dict(self, expand: bool = True) -> Dict[str, Any]:
        """Export this node as a dictionary.

        Args:
            expand: Whether to expand placeholders in string values

        Returns:
            Deep copy of the node's values
        """
        if expand:
            result: Dict[str, Any] = DeepTranslator(self._engine()).translate(self._values)
            return result
        return copy.deepcopy(self._values)
