"""
Failure taxonomy for reading and writing paths.

Segment handlers never raise on their own. They return a `Failure` describing
what went wrong, and `dead_end` applies the walker's suppression policy once:
suppressed walkers get a neutral sentinel (None or False), strict walkers get a
`PathWalkerException` carrying the `ErrorCode`.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from pathwalk.core.keys import KeyDeserializationException
    from pathwalk.core.path import Path

logger = logging.getLogger("pathwalk.errors")

INVALID_PATH = 'invalid path: "{path}" (segment {n}) *** '
PATH_SEGMENT = "path {path}, segment {n}: "


class ErrorCode(str, Enum):
    """Symbolic constants for read/write failures."""
    # Arrived on a sequence or array, but the segment is not an integer
    INDEX_EXPECTED = "INDEX_EXPECTED"
    # An integer segment following something other than a sequence or array
    INDEX_NOT_ALLOWED = "INDEX_NOT_ALLOWED"
    INDEX_OUT_OF_BOUNDS = "INDEX_OUT_OF_BOUNDS"
    # No accessible property on a structured object
    NO_SUCH_PROPERTY = "NO_SUCH_PROPERTY"
    # Reads only. Writes just add the key to the mapping.
    NO_SUCH_KEY = "NO_SUCH_KEY"
    KEY_DESERIALIZATION_FAILED = "KEY_DESERIALIZATION_FAILED"
    # None or empty segment while not on a mapping
    EMPTY_SEGMENT = "EMPTY_SEGMENT"
    # Path continues past None, a scalar or an opaque value like a str
    TERMINAL_VALUE = "TERMINAL_VALUE"
    TYPE_NOT_SUPPORTED = "TYPE_NOT_SUPPORTED"
    TYPE_MISMATCH = "TYPE_MISMATCH"
    # Container refused the mutation
    NOT_MODIFIABLE = "NOT_MODIFIABLE"
    # Trapped an exception from underlying code
    EXCEPTION = "EXCEPTION"


class PathWalkerException(Exception):
    """Raised by a strict PathWalker when a path cannot be read or written."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        *,
        path: "Path | None" = None,
        segment_index: int | None = None,
    ):
        super().__init__(message)
        self.error_code = error_code
        self.path = path
        self.segment_index = segment_index

    @property
    def message(self) -> str:
        """The formatted, path-addressed message."""
        return str(self)


# --- Results ---

@dataclass(frozen=True)
class Ok:
    """Successful outcome of a single segment step."""
    value: Any = None


@dataclass(frozen=True)
class Failure:
    """Unsuccessful outcome of a single segment step."""
    code: ErrorCode
    message: str
    path: "Path | None" = None
    segment_index: int | None = None
    cause: BaseException | None = None

    def exception(self) -> PathWalkerException:
        """Build (but do not raise) the matching PathWalkerException."""
        return PathWalkerException(
            self.code, self.message, path=self.path, segment_index=self.segment_index
        )


Result = Ok | Failure


def dead_end(failure: Failure, suppress_exceptions: bool, sentinel: Any = None) -> Any:
    """
    Apply the suppression policy to a failure: return `sentinel` when
    suppressing, raise PathWalkerException otherwise.
    """
    if suppress_exceptions:
        logger.debug("Suppressed %s: %s", failure.code.value, failure.message)
        return sentinel
    raise failure.exception() from failure.cause


# --- Failure factories ---

def _qualified_name(cls: type) -> str:
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def _invalid(code: ErrorCode, path: "Path", segment: int, reason: str,
             cause: BaseException | None = None) -> Failure:
    msg = INVALID_PATH.format(path=path, n=segment + 1) + reason
    return Failure(code, msg, path, segment, cause)


def _at(code: ErrorCode, path: "Path", segment: int, reason: str,
        cause: BaseException | None = None) -> Failure:
    msg = PATH_SEGMENT.format(path=path, n=segment + 1) + reason
    return Failure(code, msg, path, segment, cause)


def no_such_property(path: "Path", segment: int, owner: type,
                     cause: BaseException | None = None) -> Failure:
    """Segment names no accessible property of `owner`."""
    reason = f'no accessible property named "{path.segment(segment)}" in {_qualified_name(owner)}'
    return _invalid(ErrorCode.NO_SUCH_PROPERTY, path, segment, reason, cause)


def no_such_key(path: "Path", segment: int) -> Failure:
    """Segment is not a key of the mapping."""
    reason = f'no such key: "{path.segment(segment)}"'
    return _invalid(ErrorCode.NO_SUCH_KEY, path, segment, reason)


def index_expected(path: "Path", segment: int) -> Failure:
    """Arrived on a sequence or array but the segment is not an index."""
    reason = f'array index expected; found: "{path.segment(segment)}"'
    return _invalid(ErrorCode.INDEX_EXPECTED, path, segment, reason)


def index_out_of_bounds(path: "Path", segment: int) -> Failure:
    """Index is beyond the end of the sequence or array."""
    reason = f"index out of bounds: {path.segment(segment)}"
    return _invalid(ErrorCode.INDEX_OUT_OF_BOUNDS, path, segment, reason)


def null_value(path: "Path", segment: int) -> Failure:
    """The path continues past a None value."""
    reason = f'terminal value encountered at segment "{path.segment(segment)}": None'
    return _invalid(ErrorCode.TERMINAL_VALUE, path, segment, reason)


def terminal_value(path: "Path", segment: int, value: Any) -> Failure:
    """The path continues past a value that has no structure to walk into."""
    reason = (
        f'terminal value encountered at segment "{path.segment(segment)}": '
        f"({type(value).__name__}) {value}"
    )
    return _invalid(ErrorCode.TERMINAL_VALUE, path, segment, reason)


def empty_segment(path: "Path", segment: int) -> Failure:
    """None and "" are only meaningful as mapping keys."""
    return _invalid(ErrorCode.EMPTY_SEGMENT, path, segment, "segment must not be None or empty")


def type_mismatch(path: "Path", segment: int, message: str,
                  cause: BaseException | None = None) -> Failure:
    """Value cannot be assigned to the target property or element."""
    return _at(ErrorCode.TYPE_MISMATCH, path, segment, message, cause)


def cannot_assign(path: "Path", segment: int, value: Any, target: str,
                  cause: BaseException | None = None) -> Failure:
    """TYPE_MISMATCH with a "cannot assign X to Y" message."""
    message = f"cannot assign {type(value).__name__} to {target}"
    return _at(ErrorCode.TYPE_MISMATCH, path, segment, message, cause)


def not_modifiable(path: "Path", segment: int, container_type: type,
                   cause: BaseException | None = None) -> Failure:
    """The container refused to be modified."""
    reason = (
        f"{container_type.__name__} implementation encountered at segment "
        f'"{path.segment(segment)}" appears to be unmodifiable'
    )
    return _at(ErrorCode.NOT_MODIFIABLE, path, segment, reason, cause)


def key_deserialization_failed(path: "Path", segment: int,
                               exc: "KeyDeserializationException") -> Failure:
    """A KeyDeserializer could not turn the segment into a mapping key."""
    if exc.reason is None:
        reason = f'failed to deserialize "{path.segment(segment)}" into map key'
    else:
        reason = exc.reason
    return _invalid(ErrorCode.KEY_DESERIALIZATION_FAILED, path, segment, reason, exc)


def unhashable_key(path: "Path", segment: int, key: Any, exc: TypeError) -> Failure:
    """A KeyDeserializer produced a value that cannot be a mapping key."""
    reason = f'cannot use {type(key).__name__} as map key for segment "{path.segment(segment)}"'
    return _invalid(ErrorCode.KEY_DESERIALIZATION_FAILED, path, segment, reason, exc)


def unexpected_error(path: "Path", segment: int, exc: BaseException) -> Failure:
    """Wraps any other exception raised by underlying code."""
    return _at(ErrorCode.EXCEPTION, path, segment, f"unexpected error *** {exc!r}", exc)
