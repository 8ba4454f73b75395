"""
Segment handlers: one reader and one writer per container kind.

A reader consumes a single segment and steps one level down into the
container. A writer assigns a value at the last segment of a path. Handlers
report problems as `Failure` results (see `pathwalk.core.errors`); the public
`read` and `write` methods apply the suppression policy.

Handlers register themselves per ContainerKind:

    @reader_registry.register(ContainerKind.MAPPING)
    class MappingSegmentReader(SegmentReader):
        ...
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from itertools import islice
import re
from typing import Any, Callable, ClassVar

import numpy as np

from pathwalk.core import errors
from pathwalk.core.errors import Failure, Ok, Result, dead_end
from pathwalk.core.keys import KeyDeserializationException, KeyDeserializer
from pathwalk.core.kinds import ContainerKind, accepts, element_type_name
from pathwalk.core.path import Path
from pathwalk.core.properties import (
    IllegalAssignmentError,
    NoAccessiblePropertiesError,
    NoSuchPropertyError,
    get_accessor,
)

# Indices are non-negative ASCII integers
_INDEX = re.compile(r"[0-9]+")

# What containers raise when they refuse to be modified
_REFUSALS = (TypeError, NotImplementedError, AttributeError)


def parse_index(segment: str | None) -> int | None:
    """The segment as a sequence/array index, or None if it is not one."""
    if segment is None or _INDEX.fullmatch(segment) is None:
        return None
    return int(segment)


def _element(container: Any, idx: int) -> Any:
    value = container[idx]
    if isinstance(value, np.generic):
        # numpy scalar to the equivalent Python value
        return value.item()
    return value


# --- Base classes ---

class SegmentHandler:
    """Configuration shared by readers and writers."""
    kind: ClassVar[ContainerKind]

    def __init__(
        self,
        suppress_exceptions: bool = True,
        key_deserializer: KeyDeserializer | None = None,
    ):
        self.suppress_exceptions = suppress_exceptions
        self.key_deserializer = key_deserializer

    def __repr__(self) -> str:
        return f"{type(self).__name__}(suppress_exceptions={self.suppress_exceptions})"

    def map_key(self, path: Path, segment: int) -> Result:
        """Mapping key for the segment, via the KeyDeserializer if there is one."""
        if self.key_deserializer is None:
            return Ok(path.segment(segment))
        try:
            key = self.key_deserializer(path, segment)
        except KeyDeserializationException as e:
            return errors.key_deserialization_failed(path, segment, e)
        try:
            hash(key)
        except TypeError as e:
            return errors.unhashable_key(path, segment, key, e)
        return Ok(key)


class SegmentReader(SegmentHandler, ABC):
    """Steps one segment down into a container."""

    @abstractmethod
    def step(self, container: Any, path: Path, segment: int) -> Result:
        """Value found at `path.segment(segment)` within `container`."""

    def read(self, container: Any, path: Path, segment: int) -> Any:
        """
        Like `step`, but returns the value itself. On failure returns None or
        raises PathWalkerException, depending on `suppress_exceptions`.
        """
        result = self.step(container, path, segment)
        if isinstance(result, Failure):
            return dead_end(result, self.suppress_exceptions)
        return result.value


class SegmentWriter(SegmentHandler, ABC):
    """Assigns a value at the last segment of a path."""

    @abstractmethod
    def apply(self, container: Any, path: Path, value: Any) -> Failure | None:
        """Assign `value` within `container`. None on success."""

    def write(self, container: Any, path: Path, value: Any) -> bool:
        """
        Like `apply`, but returns True on success. On failure returns False or
        raises PathWalkerException, depending on `suppress_exceptions`.
        """
        failure = self.apply(container, path, value)
        if failure is not None:
            return dead_end(failure, self.suppress_exceptions, False)
        return True


# --- Registries ---

class HandlerRegistry:
    """Maps each ContainerKind to the handler class that deals with it."""

    def __init__(self, role: str):
        self.role = role
        self._handlers: dict[ContainerKind, type[SegmentHandler]] = {}

    def __getitem__(self, kind: ContainerKind) -> type[SegmentHandler]:
        """Allows dict-like access to handler classes"""
        if kind not in self._handlers:
            raise KeyError(f"No segment {self.role} registered for '{kind.value}'.")
        return self._handlers[kind]

    def __contains__(self, kind: object) -> bool:
        return kind in self._handlers

    def register(self, kind: ContainerKind) -> Callable[[type], type]:
        """Decorator registering a handler class for a container kind."""
        def wrapper(cls: type[SegmentHandler]) -> type[SegmentHandler]:
            if kind in self._handlers:
                raise ValueError(f"Segment {self.role} for '{kind.value}' is already registered.")
            cls.kind = kind
            self._handlers[kind] = cls
            return cls
        return wrapper

    def build(self, suppress_exceptions: bool = True,
              key_deserializer: KeyDeserializer | None = None) -> dict[ContainerKind, Any]:
        """One configured handler instance per registered kind."""
        return {
            kind: cls(suppress_exceptions, key_deserializer)
            for kind, cls in self._handlers.items()
        }


reader_registry = HandlerRegistry("reader")
writer_registry = HandlerRegistry("writer")


# --- Readers ---

@reader_registry.register(ContainerKind.SEQUENCE)
class SequenceSegmentReader(SegmentReader):
    """Reads element N of a sequence (or the Nth item a set iterates over)."""

    def step(self, container, path, segment):
        idx = parse_index(path.segment(segment))
        if idx is None:
            return errors.index_expected(path, segment)
        if idx < len(container):
            for value in islice(container, idx, None):
                return Ok(value)
        return errors.index_out_of_bounds(path, segment)


@reader_registry.register(ContainerKind.ARRAY)
class ArraySegmentReader(SegmentReader):
    """Reads element N of an object or string array."""

    def step(self, container, path, segment):
        idx = parse_index(path.segment(segment))
        if idx is None:
            return errors.index_expected(path, segment)
        if idx < len(container):
            return Ok(_element(container, idx))
        return errors.index_out_of_bounds(path, segment)


@reader_registry.register(ContainerKind.PRIMITIVE_ARRAY)
class PrimitiveArraySegmentReader(ArraySegmentReader):
    """Reads element N of an array of machine values, as a Python value."""


@reader_registry.register(ContainerKind.MAPPING)
class MappingSegmentReader(SegmentReader):
    """Reads the value stored under a key."""

    def step(self, container, path, segment):
        key = self.map_key(path, segment)
        if isinstance(key, Failure):
            return key
        value = container.get(key.value)
        # a present key may well map to None
        if value is None and key.value not in container:
            return errors.no_such_key(path, segment)
        return Ok(value)


@reader_registry.register(ContainerKind.OBJECT)
class ObjectSegmentReader(SegmentReader):
    """Reads a named property of a structured object."""

    def step(self, container, path, segment):
        name = path.segment(segment)
        if not name:
            return errors.empty_segment(path, segment)
        accessor = get_accessor(type(container))
        try:
            return Ok(accessor.read(container, name))
        except NoAccessiblePropertiesError:
            return errors.terminal_value(path, segment, container)
        except NoSuchPropertyError as e:
            return errors.no_such_property(path, segment, type(container), e)
        except Exception as e:  # pylint: disable=broad-except
            # getters can raise anything, unset slots raise AttributeError
            return errors.unexpected_error(path, segment, e)


# --- Writers ---

@writer_registry.register(ContainerKind.SEQUENCE)
class SequenceSegmentWriter(SegmentWriter):
    """Replaces element N of a mutable sequence. Never appends."""

    def apply(self, container, path, value):
        segment = path.size() - 1
        idx = parse_index(path.segment(segment))
        if idx is None:
            return errors.index_expected(path, segment)
        if idx >= len(container):
            return errors.index_out_of_bounds(path, segment)
        try:
            container[idx] = value
        except _REFUSALS as e:
            return errors.not_modifiable(path, segment, type(container), e)
        return None


@writer_registry.register(ContainerKind.ARRAY)
class ArraySegmentWriter(SegmentWriter):
    """Replaces element N of an object or string array."""

    def apply(self, container, path, value):
        segment = path.size() - 1
        # element type first, index second
        if not accepts(container, value):
            return errors.cannot_assign(path, segment, value, element_type_name(container))
        idx = parse_index(path.segment(segment))
        if idx is None:
            return errors.index_expected(path, segment)
        if idx >= len(container):
            return errors.index_out_of_bounds(path, segment)
        if not container.flags.writeable:
            return errors.not_modifiable(path, segment, type(container))
        try:
            container[idx] = value
        except ValueError as e:
            # e.g. a sequence that does not fit a row of a 2-D array
            return errors.cannot_assign(path, segment, value, element_type_name(container), e)
        return None


@writer_registry.register(ContainerKind.PRIMITIVE_ARRAY)
class PrimitiveArraySegmentWriter(SegmentWriter):
    """
    Replaces element N of an array of machine values. Values the array cannot
    hold exactly (wrong type, out of range) are a type mismatch.
    """

    def apply(self, container, path, value):
        segment = path.size() - 1
        idx = parse_index(path.segment(segment))
        if idx is None:
            return errors.index_expected(path, segment)
        if idx >= len(container):
            return errors.index_out_of_bounds(path, segment)
        if isinstance(container, np.ndarray) and not container.flags.writeable:
            return errors.not_modifiable(path, segment, type(container))
        if not accepts(container, value):
            return errors.cannot_assign(path, segment, value, element_type_name(container))
        try:
            container[idx] = value
        except (TypeError, ValueError, OverflowError) as e:
            return errors.cannot_assign(path, segment, value, element_type_name(container), e)
        return None


@writer_registry.register(ContainerKind.MAPPING)
class MappingSegmentWriter(SegmentWriter):
    """Stores a value under a key, adding the key if needed."""

    def apply(self, container, path, value):
        segment = path.size() - 1
        key = self.map_key(path, segment)
        if isinstance(key, Failure):
            return key
        try:
            container[key.value] = value
        except _REFUSALS as e:
            return errors.not_modifiable(path, segment, type(container), e)
        return None


@writer_registry.register(ContainerKind.OBJECT)
class ObjectSegmentWriter(SegmentWriter):
    """Sets a named property of a structured object."""

    def apply(self, container, path, value):
        segment = path.size() - 1
        name = path.segment(segment)
        if not name:
            return errors.empty_segment(path, segment)
        accessor = get_accessor(type(container))
        try:
            accessor.write(container, name, value)
        except NoAccessiblePropertiesError:
            return errors.terminal_value(path, segment, container)
        except NoSuchPropertyError as e:
            return errors.no_such_property(path, segment, type(container), e)
        except IllegalAssignmentError as e:
            return errors.type_mismatch(path, segment, str(e), e)
        except Exception as e:  # pylint: disable=broad-except
            # setters and validators can raise anything
            return errors.unexpected_error(path, segment, e)
        return None
