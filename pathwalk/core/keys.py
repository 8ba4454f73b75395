"""
Converting path segments into mapping keys.

Without a KeyDeserializer a mapping is looked up with the raw segment string,
which only works for str-keyed mappings. Pass a KeyDeserializer to the
PathWalker when the graph contains mappings with other key types.
"""
from __future__ import annotations

from typing import Any, Callable, Protocol, TYPE_CHECKING

from pathwalk.core.path import is_int_segment

if TYPE_CHECKING:
    from pathwalk.core.path import Path


class KeyDeserializationException(Exception):
    """
    Raised by a KeyDeserializer that cannot turn a segment into a key. A strict
    PathWalker reports it as KEY_DESERIALIZATION_FAILED; a suppressing one just
    gives up on the path.
    """

    def __init__(self, reason: str | None = None):
        if reason is None:
            super().__init__()
        else:
            super().__init__(reason)
        self.reason = reason


class KeyDeserializer(Protocol):
    """
    Converts the segment at `segment_index` of `path` into a mapping key. Keys
    must be hashable; an unhashable key is reported as
    KEY_DESERIALIZATION_FAILED.
    """

    def __call__(self, path: "Path", segment_index: int) -> Any: ...


def int_keys(path: "Path", segment_index: int) -> int | None:
    """KeyDeserializer for int-keyed mappings. The None segment stays None."""
    segment = path.segment(segment_index)
    if segment is None:
        return None
    if not is_int_segment(segment):
        raise KeyDeserializationException(f'not an integer key: "{segment}"')
    return int(segment)


def typed_keys(converter: Callable[[str], Any]) -> KeyDeserializer:
    """
    Build a KeyDeserializer from a plain `str -> key` function, e.g.
    `typed_keys(uuid.UUID)`. ValueError and TypeError raised by the function
    become KeyDeserializationException. The None segment stays None.
    """
    def deserialize(path: "Path", segment_index: int) -> Any:
        segment = path.segment(segment_index)
        if segment is None:
            return None
        try:
            return converter(segment)
        except (ValueError, TypeError) as e:
            raise KeyDeserializationException(
                f'cannot convert "{segment}" to map key: {e}'
            ) from e
    return deserialize


# Names accepted by Settings.key_type
KEY_TYPES: dict[str, KeyDeserializer | None] = {
    "str": None,
    "int": int_keys,
}
