"""
Container kinds and the classification of values into them.

Every step of a walk classifies the current value exactly once. The
capabilities are tested in a fixed order, so a type satisfying more than one
of them (say, a class that is both a Sequence and a Mapping) always lands in
the first matching kind:

    SEQUENCE > ARRAY > MAPPING > PRIMITIVE_ARRAY > OBJECT

OBJECT is the fallback for everything else, including opaque values such as
strings and numbers.
"""
from array import array
from collections.abc import Mapping, Sequence, Set, ValuesView
from enum import Enum
from typing import Any, Callable

import numpy as np


class ContainerKind(str, Enum):
    """The kinds of container a segment handler can consume a segment from."""
    SEQUENCE = "sequence"
    ARRAY = "array"
    MAPPING = "mapping"
    PRIMITIVE_ARRAY = "primitive_array"
    OBJECT = "object"


# numpy dtype kinds holding references rather than machine values:
# object, unicode string, byte string
REFERENCE_DTYPE_KINDS = frozenset("OUS")

# Sequence-like types that are either opaque or handled as arrays
_NOT_SEQUENCES = (str, bytes, bytearray, memoryview, array, np.ndarray)


def is_sequence(value: Any) -> bool:
    """Ordered (or at least iterable and sized) containers of values."""
    return (
        isinstance(value, (Sequence, Set, ValuesView))
        and not isinstance(value, _NOT_SEQUENCES)
    )


def is_array(value: Any) -> bool:
    """Fixed-size numpy arrays of references (object or string dtypes)."""
    return (
        isinstance(value, np.ndarray)
        and value.ndim >= 1
        and value.dtype.kind in REFERENCE_DTYPE_KINDS
    )


def is_mapping(value: Any) -> bool:
    """Keyed containers."""
    return isinstance(value, Mapping)


def is_primitive_array(value: Any) -> bool:
    """Fixed-size arrays of machine values."""
    if isinstance(value, (array, bytearray)):
        return True
    return (
        isinstance(value, np.ndarray)
        and value.ndim >= 1
        and value.dtype.kind not in REFERENCE_DTYPE_KINDS
    )


PRECEDENCE: tuple[tuple[ContainerKind, Callable[[Any], bool]], ...] = (
    (ContainerKind.SEQUENCE, is_sequence),
    (ContainerKind.ARRAY, is_array),
    (ContainerKind.MAPPING, is_mapping),
    (ContainerKind.PRIMITIVE_ARRAY, is_primitive_array),
)


def classify(value: Any) -> ContainerKind:
    """Container kind of a (non-None) value."""
    for kind, test in PRECEDENCE:
        if test(value):
            return kind
    return ContainerKind.OBJECT


# --- Element compatibility ---

def element_type_name(container: Any) -> str:
    """Human-readable element type of an array, for error messages."""
    if isinstance(container, np.ndarray):
        return f"{container.dtype.str} array"
    if isinstance(container, array):
        return f"'{container.typecode}' array"
    return f"{type(container).__name__}"


def accepts(container: Any, value: Any) -> bool:
    """
    Whether `value` can be stored in the array without changing its meaning.
    numpy would happily truncate 3.7 into an int array or clip a long string
    into a fixed-width string array; both are rejected here. array.array and
    bytearray do their own checking on assignment.
    """
    if not isinstance(container, np.ndarray):
        return True
    kind = container.dtype.kind
    if kind == "O":
        return True
    if kind == "U":
        return isinstance(value, str) and len(value) <= container.dtype.itemsize // 4
    if kind == "S":
        return isinstance(value, bytes) and len(value) <= container.dtype.itemsize
    if isinstance(value, (bool, np.bool_)):
        return kind == "b"
    if kind == "b":
        return False
    if kind in "iu":
        if not isinstance(value, (int, np.integer)):
            return False
        info = np.iinfo(container.dtype)
        return info.min <= int(value) <= info.max
    if kind == "f":
        return isinstance(value, (int, float, np.integer, np.floating))
    if kind == "c":
        return isinstance(value, (int, float, complex, np.number))
    # datetimes, timedeltas, structured dtypes: up to numpy
    return True
