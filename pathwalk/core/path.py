"""
Immutable dot-paths into nested object graphs.

A Path is an ordered sequence of segments, e.g. `employee.address.street`.
Sequence and array indices are plain segments too: `employees.3.address`.
Because a segment may also be a mapping key, the Path itself puts no
constraints on what a segment looks like. A key can be anything, including
None and the empty string.

Escaping rules for path strings:
- A segment containing the separator ('.') escapes it with a circumflex:
  the key "my.awkward.key" is written `my^.awkward^.key`.
- The escape character itself is never escaped. A '^' followed by anything
  other than '.' is just that character.
- A segment that is exactly `^0` denotes the None key: `lookups.^0.name`.
- The empty-string key is a zero-length segment: `lookups..name`. A path
  string that ends with '.' therefore ends with an empty segment.

Only escape complete path strings. Segments passed individually to
`Path.of` or `Path.of_segments` are taken literally.
"""
from __future__ import annotations

from functools import total_ordering
import re
from typing import Iterable, Iterator

SEP = "."
ESC = "^"
NULL_SEGMENT = "^0"

Segment = str | None

_INT_SEGMENT = re.compile(r"-?[0-9]+")


def is_int_segment(segment: Segment) -> bool:
    """True if the segment is a plain (optionally negative) ASCII integer."""
    return segment is not None and _INT_SEGMENT.fullmatch(segment) is not None


def _parse(path: str) -> tuple[Segment, ...]:
    segments: list[Segment] = []
    buf: list[str] = []
    i = 0
    n = len(path)
    while i < n:
        ch = path[i]
        if ch == SEP:
            s = "".join(buf)
            segments.append(None if s == NULL_SEGMENT else s)
            buf.clear()
        elif ch == ESC:
            if i < n - 1 and path[i + 1] == SEP:
                buf.append(SEP)
                i += 1
            else:
                buf.append(ESC)
        else:
            buf.append(ch)
        i += 1
    if buf:
        s = "".join(buf)
        segments.append(None if s == NULL_SEGMENT else s)
    elif path.endswith(SEP):
        segments.append("")
    return tuple(segments)


def _sort_key(segment: Segment) -> tuple[int, str]:
    # None sorts before any string
    return (0, "") if segment is None else (1, segment)


@total_ordering
class Path:
    """
    An immutable, hashable sequence of path segments.

    `Path("a.b^.c.^0")` parses a path string; the derivation methods
    (`parent`, `sub_path`, `append`, ...) always return a new Path.
    """
    __slots__ = ("_segments", "_str", "_hash")

    def __init__(self, path: str = ""):
        if path is None:
            raise ValueError("path must not be None")
        if not isinstance(path, str):
            raise TypeError(f"Expected path string, got {type(path).__name__}")
        self._segments: tuple[Segment, ...] = _parse(path) if path else ()
        self._str: str | None = path
        self._hash: int | None = None

    # --- Factories ---

    @classmethod
    def _of(cls, segments: tuple[Segment, ...]) -> Path:
        if not segments:
            return _EMPTY
        obj = cls.__new__(cls)
        obj._segments = segments
        obj._str = None
        obj._hash = None
        return obj

    @classmethod
    def from_string(cls, path: str) -> Path:
        """Parse a path string. The empty string yields the empty path."""
        if path is None:
            raise ValueError("path must not be None")
        if path == "":
            return _EMPTY
        return cls(path)

    @classmethod
    def empty(cls) -> Path:
        """The shared Path with zero segments."""
        return _EMPTY

    @classmethod
    def of(cls, *segments: Segment) -> Path:
        """Path consisting of the given segments. Do not escape them."""
        return cls.of_segments(segments)

    @classmethod
    def of_segments(cls, segments: Iterable[Segment]) -> Path:
        """Path consisting of the given segments. Do not escape them."""
        if segments is None:
            raise ValueError("segments must not be None")
        segments = tuple(segments)
        for s in segments:
            if s is not None and not isinstance(s, str):
                raise TypeError(f"Path segments must be str or None, got {type(s).__name__}")
        return cls._of(segments)

    @classmethod
    def copy_of(cls, other: Path) -> Path:
        """Copy of another Path. Immutable state is shared."""
        if other is None:
            raise ValueError("other must not be None")
        if not other._segments:
            return _EMPTY
        obj = cls._of(other._segments)
        obj._str = other._str
        obj._hash = other._hash
        return obj

    @staticmethod
    def escape(segment: Segment) -> str:
        """
        Escape a single segment for use inside a path string. None becomes
        `^0` and every '.' becomes `^.`.
        """
        if segment is None:
            return NULL_SEGMENT
        if SEP not in segment:
            return segment
        return segment.replace(SEP, ESC + SEP)

    # --- Segment access ---

    @property
    def segments(self) -> tuple[Segment, ...]:
        """The raw (unescaped) segments."""
        return self._segments

    def segment(self, index: int) -> Segment:
        """
        Segment at the given index. A negative index counts back from the end,
        so -1 is the last segment.
        """
        size = len(self._segments)
        i = size + index if index < 0 else index
        if not 0 <= i < size:
            raise IndexError(f"Segment index out of range: {index} (path size {size})")
        return self._segments[i]

    def size(self) -> int:
        """Number of segments."""
        return len(self._segments)

    def is_empty(self) -> bool:
        """True for the path with zero segments."""
        return not self._segments

    # --- Derived paths ---

    def sub_path(self, offset: int, length: int | None = None) -> Path:
        """
        Path starting at segment `offset` (negative counts from the end),
        optionally limited to `length` segments.
        """
        size = len(self._segments)
        start = size + offset if offset < 0 else offset
        if length is None:
            if not 0 <= start < size:
                raise IndexError(f"Offset out of range: {offset} (path size {size})")
            return Path._of(self._segments[start:])
        if start < 0 or length < 0 or start + length > size:
            raise IndexError(
                f"Invalid offset/length for path of size {size}: offset={offset}, length={length}"
            )
        return Path._of(self._segments[start:start + length])

    def parent(self) -> Path | None:
        """
        Path minus its last segment. None for the empty path; the empty path
        for a single-segment path.
        """
        if not self._segments:
            return None
        return Path._of(self._segments[:-1])

    def canonical(self) -> Path:
        """
        Path without the segments that look like array indices. Gives the
        "shape" of a path, independent of the elements it passes through.
        """
        return Path._of(tuple(s for s in self._segments if not is_int_segment(s)))

    def append(self, other: Path | str) -> Path:
        """Concatenation of this Path and another Path or path string."""
        if other is None:
            raise ValueError("other must not be None")
        if isinstance(other, str):
            other = Path.from_string(other)
        return Path._of(self._segments + other._segments)

    def replace(self, index: int, segment: Segment) -> Path:
        """Copy of this Path with the segment at `index` replaced."""
        if not 0 <= index < len(self._segments):
            raise IndexError(f"Segment index out of range: {index} (path size {len(self._segments)})")
        segments = list(self._segments)
        segments[index] = segment
        return Path._of(tuple(segments))

    def shift(self) -> Path:
        """Path without its first segment."""
        if not self._segments:
            raise ValueError("Cannot shift an empty path")
        return Path._of(self._segments[1:])

    def reverse(self) -> Path:
        """Path with its segments in reverse order."""
        if len(self._segments) > 1:
            return Path._of(self._segments[::-1])
        return self

    # --- Dunder methods ---

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[Segment]:
        return iter(self._segments)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return Path._of(self._segments[index])
        return self.segment(index)

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Path):
            return NotImplemented
        return self._segments == other._segments

    def __lt__(self, other: Path) -> bool:
        if not isinstance(other, Path):
            return NotImplemented
        return [_sort_key(s) for s in self._segments] < [_sort_key(s) for s in other._segments]

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash(self._segments)
        return self._hash

    def __str__(self) -> str:
        if self._str is None:
            self._str = SEP.join(Path.escape(s) for s in self._segments)
        return self._str

    def __repr__(self) -> str:
        return f"Path({str(self)!r})"


_EMPTY = Path()
