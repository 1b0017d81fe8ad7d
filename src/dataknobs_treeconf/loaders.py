"""Parsers turning configuration sources into raw nested dictionaries.

Supported formats:
- JSON documents (top level must be an object)
- YAML documents (top level must be a mapping)
- ``key = value`` text files:

    ```
    # comment.
    // other type of comment
    # comments must be alone on a line
    name = app name
    database.url = user:${db.passwd}@/dbname
    database.port = 3456
    ```

  Dotted names build nested sections; when a name appears twice the first
  value is kept. Values are kept as strings.
"""

import json
import logging
from pathlib import Path
from typing import IO, Any, Dict, Union

import yaml  # type: ignore[import-untyped]

from .exceptions import LoadError, NotAMappingError
from .keypath import set_value

logger = logging.getLogger(__name__)

Source = Union[str, bytes, IO[str], IO[bytes]]

COMMENT_PREFIXES = ("#", "//")


def _read(source: Source) -> str:
    if hasattr(source, "read"):
        source = source.read()
    if isinstance(source, bytes):
        return source.decode("utf-8")
    return str(source)


def _require_mapping(data: Any, fmt: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise LoadError(f"{fmt} configuration must contain a mapping, got {type(data).__name__}")
    return data


def load_json(source: Source) -> Dict[str, Any]:
    """Parse a JSON document.

    Args:
        source: JSON text, bytes or a readable stream

    Returns:
        Parsed dictionary

    Raises:
        LoadError: If the document is invalid or not an object
    """
    try:
        data = json.loads(_read(source))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise LoadError(f"Failed to parse JSON: {e}") from e
    return _require_mapping(data, "JSON")


def load_yaml(source: Source) -> Dict[str, Any]:
    """Parse a YAML document. An empty document yields an empty dict.

    Raises:
        LoadError: If the document is invalid or not a mapping
    """
    try:
        data = yaml.safe_load(_read(source))
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        raise LoadError(f"Failed to parse YAML: {e}") from e
    if data is None:
        return {}
    return _require_mapping(data, "YAML")


def load_text(source: Source) -> Dict[str, Any]:
    """Parse ``key = value`` lines.

    Raises:
        LoadError: If a line is neither blank, a comment nor an assignment
    """
    result: Dict[str, Any] = {}
    for lineno, raw_line in enumerate(_read(source).splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith(COMMENT_PREFIXES):
            continue

        name, sep, value = line.partition("=")
        name = name.strip()
        if not sep or not name:
            raise LoadError(f"Line {lineno}: expected 'name = value', got {raw_line!r}")

        try:
            if not set_value(result, name, value.strip()):
                logger.debug(f"Line {lineno}: '{name}' already defined, keeping first value")
        except NotAMappingError as e:
            raise LoadError(f"Line {lineno}: {e}") from e
    return result


def load_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Load a configuration file, choosing the parser from its suffix.

    ``.json`` files are parsed as JSON, ``.yaml``/``.yml`` as YAML and any
    other file as ``key = value`` text.

    Raises:
        LoadError: If the file cannot be read or parsed
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        raise LoadError(f"Failed to read configuration file {path}: {e}", source=str(path)) from e

    suffix = path.suffix.lower()
    try:
        if suffix == ".json":
            return load_json(text)
        elif suffix in (".yaml", ".yml"):
            return load_yaml(text)
        else:
            return load_text(text)
    except LoadError as e:
        raise LoadError(f"{path}: {e}", source=str(path)) from e
