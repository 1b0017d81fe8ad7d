"""Builder assembling a configuration tree from several sources."""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Union

from .defaults import DEFAULT_MAX_RECURSION, DefaultTable
from .exceptions import LoadError
from .loaders import Source, load_file, load_json, load_text, load_yaml
from .tree import ConfigTree

logger = logging.getLogger(__name__)


class ConfigBuilder:
    """Loads configuration sources into a single tree.

    Each load is merged into the tree built so far without overwriting
    existing keys: the first source to define a key wins.

    Example:
        ```python
        builder = ConfigBuilder("MYAPP_")
        builder.load_file("/etc/myapp/config.json")
        # Only adds keys missing from config.json
        config = builder.load_file("/etc/default/myapp.txt")

        name = config.get_string("name", "default name")
        db = config.get_config("database")
        db_port = db.get_int("port", 1234)
        ```
    """

    def __init__(
        self,
        prefix: str = "",
        defaults: Dict[str, Any] | None = None,
        max_recursion: int = DEFAULT_MAX_RECURSION,
        environ: Callable[[str], str | None] | None = None,
    ) -> None:
        """Initialize the builder.

        Args:
            prefix: Environment variable prefix (upper-cased)
            defaults: Default values, may be None
            max_recursion: Placeholder expansion ceiling (0 disables expansion)
            environ: Environment accessor (default: os.environ.get)
        """
        self._defaults = DefaultTable(prefix, defaults, max_recursion, environ)
        self._config = ConfigTree({}, self._defaults)

    @property
    def prefix(self) -> str:
        return self._defaults.prefix

    @property
    def defaults(self) -> DefaultTable:
        return self._defaults

    @property
    def config(self) -> ConfigTree:
        return self._config

    def add_default(self, key: str, value: Any) -> bool:
        return self._defaults.add_default(key, value)

    def set_max_recursion(self, max_recursion: int) -> None:
        self._defaults.set_max_recursion(max_recursion)

    def load(self, data: Dict[str, Any]) -> ConfigTree:
        """Merge a raw dictionary into the tree.

        Raises:
            LoadError: If data is not a dictionary
        """
        if not isinstance(data, dict):
            raise LoadError(f"Invalid source type: {type(data).__name__}")
        return self._config.merge(data)

    def load_json(self, source: Source) -> ConfigTree:
        return self.load(load_json(source))

    def load_yaml(self, source: Source) -> ConfigTree:
        return self.load(load_yaml(source))

    def load_text(self, source: Source) -> ConfigTree:
        return self.load(load_text(source))

    def load_file(self, path: Union[str, Path]) -> ConfigTree:
        """Load a JSON, YAML or text file into the tree.

        Raises:
            LoadError: If the file cannot be read or parsed
        """
        data = load_file(path)
        logger.debug(f"Loaded configuration: {path}")
        return self.load(data)
