"""
Walking whole paths through object graphs.

ObjectReader and ObjectWriter chain the segment handlers of
`pathwalk.core.segments` along a Path. PathWalker is the public face: it
holds a fixed list of paths and reads or writes them against any number of
hosts.

    walker = PathWalker("departments.0.manager.last_name", "name")
    last_name, company_name = walker.read_values(company)
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, MutableMapping, MutableSequence, Sequence

from pathwalk.core.errors import Failure, Ok, PathWalkerException, Result, dead_end, null_value
from pathwalk.core.keys import KeyDeserializer
from pathwalk.core.kinds import classify
from pathwalk.core.path import Path
from pathwalk.core.segments import SegmentReader, SegmentWriter, reader_registry, writer_registry

logger = logging.getLogger("pathwalk.walker")


class ObjectReader:
    """Reads the value at the end of a path."""

    def __init__(
        self,
        suppress_exceptions: bool = True,
        key_deserializer: KeyDeserializer | None = None,
    ):
        self.suppress_exceptions = suppress_exceptions
        self.key_deserializer = key_deserializer
        self._readers: dict[Any, SegmentReader] = reader_registry.build(
            suppress_exceptions, key_deserializer
        )

    def walk(self, obj: Any, path: Path, segment: int = 0) -> Result:
        """
        Follow `path` from segment `segment` onwards. Stops at the first
        failure; a None value with segments still to go is a dead end too.
        """
        while segment < path.size():
            if obj is None:
                return null_value(path, segment)
            result = self._readers[classify(obj)].step(obj, path, segment)
            if isinstance(result, Failure):
                return result
            obj = result.value
            segment += 1
        return Ok(obj)

    def read(self, obj: Any, path: Path, segment: int = 0) -> Any:
        """Value at the end of `path`, or None for a suppressed dead end."""
        result = self.walk(obj, path, segment)
        if isinstance(result, Failure):
            return dead_end(result, self.suppress_exceptions)
        return result.value


class ObjectWriter:
    """Assigns values at the end of a path."""

    def __init__(
        self,
        suppress_exceptions: bool = True,
        key_deserializer: KeyDeserializer | None = None,
    ):
        self.suppress_exceptions = suppress_exceptions
        self.key_deserializer = key_deserializer
        # resolving the parent always raises; suppression is applied here
        self._reader = ObjectReader(False, key_deserializer)
        self._writers: dict[Any, SegmentWriter] = writer_registry.build(
            suppress_exceptions, key_deserializer
        )

    def write(self, host: Any, path: Path, value: Any) -> bool:
        """
        Assign `value` at `path`. True on success; False (or an exception)
        when the path leads nowhere or the container refuses the value.
        """
        if path.is_empty():
            raise ValueError("Cannot write to an empty path")
        if path.size() == 1:
            target, segment = host, 0
        else:
            parent = path.parent()
            try:
                target = self._reader.read(host, parent)
            except PathWalkerException as e:
                if self.suppress_exceptions:
                    logger.debug("Suppressed %s: %s", e.error_code.value, e.message)
                    return False
                raise
            segment = parent.size() - 1
        if target is None:
            return dead_end(null_value(path, segment), self.suppress_exceptions, False)
        failure = self._writers[classify(target)].apply(target, path, value)
        if failure is not None:
            return dead_end(failure, self.suppress_exceptions, False)
        return True


# --- PathWalker ---

def _to_path(path: Path | str) -> Path:
    if path is None:
        raise ValueError("paths must not contain None")
    if isinstance(path, Path):
        return path
    if isinstance(path, str):
        return Path.from_string(path)
    raise TypeError(f"Expected Path or str, got {type(path).__name__}")


class PathWalker:
    """
    Reads and writes a fixed list of paths within object graphs.

    With `suppress_exceptions` (the default) a path that leads nowhere reads
    as None and fails to write silently. Otherwise a PathWalkerException is
    raised, carrying an ErrorCode. A `key_deserializer` converts segments
    into mapping keys for graphs containing non-str-keyed mappings.
    """
    __slots__ = ("_paths", "_suppress_exceptions", "_key_deserializer", "_reader", "_writer")

    def __init__(
        self,
        *paths: Path | str,
        suppress_exceptions: bool = True,
        key_deserializer: KeyDeserializer | None = None,
    ):
        if not paths:
            raise ValueError("At least one path is required")
        checked = tuple(_to_path(p) for p in paths)
        if key_deserializer is not None:
            for p in checked:
                if p.is_empty():
                    raise ValueError("Empty paths are not allowed with a key deserializer")
        self._paths = checked
        self._suppress_exceptions = suppress_exceptions
        self._key_deserializer = key_deserializer
        self._reader = ObjectReader(suppress_exceptions, key_deserializer)
        self._writer = ObjectWriter(suppress_exceptions, key_deserializer)

    @classmethod
    def from_paths(
        cls,
        paths: Iterable[Path | str],
        *,
        suppress_exceptions: bool = True,
        key_deserializer: KeyDeserializer | None = None,
    ) -> PathWalker:
        """PathWalker for a list (or any iterable) of paths."""
        if paths is None:
            raise ValueError("paths must not be None")
        return cls(
            *paths,
            suppress_exceptions=suppress_exceptions,
            key_deserializer=key_deserializer,
        )

    def __repr__(self) -> str:
        paths = ", ".join(repr(str(p)) for p in self._paths)
        return f"PathWalker({paths}, suppress_exceptions={self._suppress_exceptions})"

    @property
    def paths(self) -> tuple[Path, ...]:
        """The paths, in the order given."""
        return self._paths

    @property
    def suppress_exceptions(self) -> bool:
        return self._suppress_exceptions

    @property
    def key_deserializer(self) -> KeyDeserializer | None:
        return self._key_deserializer

    # --- Reading ---

    def read(self, host: Any) -> Any:
        """Value of the first path."""
        return self._reader.read(host, self._paths[0])

    def read_values(self, host: Any) -> list[Any]:
        """Values of all paths, in order."""
        return [self._reader.read(host, p) for p in self._paths]

    def read_values_into(self, host: Any, output: MutableSequence[Any]) -> None:
        """Store the value of path i in `output[i]`."""
        if len(output) < len(self._paths):
            raise ValueError(
                f"Output holds {len(output)} values, {len(self._paths)} paths to read"
            )
        for i, p in enumerate(self._paths):
            output[i] = self._reader.read(host, p)

    def read_values_into_map(
        self,
        host: Any,
        output: MutableMapping[Path, Any],
    ) -> MutableMapping[Path, Any]:
        """Store the value of each path under that path. Returns `output`."""
        for p in self._paths:
            output[p] = self._reader.read(host, p)
        return output

    # --- Writing ---

    def write(self, host: Any, value: Any) -> bool:
        """Assign `value` at the first path."""
        return self._writer.write(host, self._paths[0], value)

    def write_values(self, host: Any, values: Sequence[Any]) -> int:
        """Assign `values[i]` at path i. Returns how many writes succeeded."""
        if len(values) != len(self._paths):
            raise ValueError(
                f"Got {len(values)} values for {len(self._paths)} paths"
            )
        written = 0
        for p, value in zip(self._paths, values):
            if self._writer.write(host, p, value):
                written += 1
        logger.debug("Wrote %d of %d values", written, len(self._paths))
        return written
