"""
pathwalk: read and write values deep inside nested object graphs.

Paths like `departments.0.employees.3.address.street` are followed through
any mix of sequences, mappings, numpy arrays, pydantic models, dataclasses
and plain objects. See `PathWalker` for the entry point.
"""
from importlib.metadata import version, PackageNotFoundError

from pathwalk.core.errors import ErrorCode, PathWalkerException
from pathwalk.core.keys import KeyDeserializationException, KeyDeserializer, int_keys, typed_keys
from pathwalk.core.path import Path
from pathwalk.core.walker import ObjectReader, ObjectWriter, PathWalker

try:
    __version__ = version("pathwalk")
except PackageNotFoundError:
    __version__ = "unknown"
__app_name__ = "pathwalk"

__all__ = [
    "ErrorCode",
    "KeyDeserializationException",
    "KeyDeserializer",
    "ObjectReader",
    "ObjectWriter",
    "Path",
    "PathWalker",
    "PathWalkerException",
    "int_keys",
    "typed_keys",
]
