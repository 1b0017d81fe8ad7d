"""Dotted key paths over nested dictionaries.

A key such as ``"database.primary.host"`` addresses a value by successive
descent into nested dicts. Empty segments are ignored, so ``"a..b"`` and
``"a.b"`` address the same value.
"""

from typing import Any, Dict, List, cast

from .exceptions import NotAMappingError


def split_key(key: str) -> List[str]:
    """Split a dotted key into its non-empty, stripped segments.

    Args:
        key: Dotted key (e.g., "database.pwd")

    Returns:
        List of path segments
    """
    return [segment.strip() for segment in key.split(".") if segment.strip()]


def navigate(
    tree: Dict[str, Any], segments: List[str], create: bool = False
) -> Dict[str, Any] | None:
    """Walk a nested dict along the given segments.

    Args:
        tree: Root dictionary
        segments: Path segments to descend through
        create: Whether to create missing sections as empty dicts

    Returns:
        The dict reached after the last segment, or None if a segment is
        missing and ``create`` is False

    Raises:
        NotAMappingError: If a segment names a non-dict value
    """
    section = tree
    for idx, segment in enumerate(segments):
        if segment not in section:
            if not create:
                return None
            section[segment] = {}
        sub = section[segment]
        if not isinstance(sub, dict):
            raise NotAMappingError(".".join(segments), ".".join(segments[: idx + 1]))
        section = sub
    return section


def lookup(tree: Dict[str, Any], key: str) -> tuple[Any, bool]:
    """Look up a dotted key without creating anything.

    Returns:
        Tuple of (value, found)

    Raises:
        NotAMappingError: If an intermediate segment is not a dict
    """
    segments = split_key(key)
    if not segments:
        return None, False
    try:
        section = navigate(tree, segments[:-1])
    except NotAMappingError as e:
        raise NotAMappingError(key, e.segment) from None
    if section is None or segments[-1] not in section:
        return None, False
    return section[segments[-1]], True


def merge_missing(source: Dict[str, Any], destination: Dict[str, Any]) -> Dict[str, Any]:
    """Merge source into destination without overwriting existing keys.

    Keys absent from ``destination`` are copied across. When both sides hold
    a dict for the same key, they are merged recursively. Any other conflict
    keeps the destination's value, so the first loaded source wins.

    Args:
        source: Dictionary providing additional keys
        destination: Dictionary updated in place

    Returns:
        The destination dictionary

    Example:
        >>> merge_missing({"a": 2, "n": {"y": 3}}, {"a": 1, "n": {"x": 1}})
        {'a': 1, 'n': {'x': 1, 'y': 3}}
    """
    for key, value in source.items():
        if key not in destination:
            destination[key] = value
        elif isinstance(destination[key], dict) and isinstance(value, dict):
            merge_missing(value, destination[key])
    return destination


def set_value(tree: Dict[str, Any], key: str, value: Any) -> bool:
    """Store a value at a dotted key, creating intermediate sections.

    An absent leaf is set; an existing dict leaf receives ``value`` through
    :func:`merge_missing` when ``value`` is itself a dict. Any other existing
    leaf is left untouched.

    Args:
        tree: Root dictionary
        key: Dotted key
        value: Value to store

    Returns:
        True if the tree was changed

    Raises:
        NotAMappingError: If an intermediate segment is not a dict
    """
    segments = split_key(key)
    if not segments:
        return False
    # navigate never returns None when creating
    section = cast(Dict[str, Any], navigate(tree, segments[:-1], create=True))
    name = segments[-1]
    if name not in section:
        section[name] = value
        return True
    if isinstance(section[name], dict) and isinstance(value, dict):
        merge_missing(value, section[name])
        return True
    return False
