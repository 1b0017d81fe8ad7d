"""DataKnobs TreeConf Package

Hierarchical configuration with dotted key lookup, defaults, environment
fallback and recursive ${...} placeholder expansion.
"""

from .builder import ConfigBuilder
from .coercion import format_duration, parse_duration
from .defaults import DEFAULT_MAX_RECURSION, DefaultTable
from .exceptions import (
    ConfigurationError,
    ExpandMissingKeyError,
    ExpandRecursionError,
    ExpansionError,
    LoadError,
    MissingKeyError,
    NotAMappingError,
    NotFoundError,
    TreeConfError,
    TypeMismatchError,
    ValidationError,
)
from .expansion import ExpansionEngine, KeyResolver
from .keypath import merge_missing, navigate, set_value, split_key
from .loaders import load_file, load_json, load_text, load_yaml
from .translator import DeepTranslator
from .tree import ConfigTree

__version__ = "0.1.0"
__all__ = [
    "ConfigBuilder",
    "ConfigTree",
    "DEFAULT_MAX_RECURSION",
    "DeepTranslator",
    "DefaultTable",
    "ExpansionEngine",
    "KeyResolver",
    # Exceptions
    "ConfigurationError",
    "ExpandMissingKeyError",
    "ExpandRecursionError",
    "ExpansionError",
    "LoadError",
    "MissingKeyError",
    "NotAMappingError",
    "NotFoundError",
    "TreeConfError",
    "TypeMismatchError",
    "ValidationError",
    # Key paths
    "merge_missing",
    "navigate",
    "set_value",
    "split_key",
    # Loaders
    "load_file",
    "load_json",
    "load_text",
    "load_yaml",
    # Durations
    "format_duration",
    "parse_duration",
]
