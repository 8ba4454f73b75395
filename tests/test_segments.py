"""
Single-segment readers and writers, one container kind at a time.
"""
from array import array
from types import MappingProxyType

import numpy as np
import pytest

from pathwalk.core.errors import ErrorCode, PathWalkerException
from pathwalk.core.keys import int_keys, typed_keys
from pathwalk.core.kinds import ContainerKind
from pathwalk.core.path import Path
from pathwalk.core.segments import (
    ArraySegmentWriter,
    HandlerRegistry,
    MappingSegmentReader,
    MappingSegmentWriter,
    ObjectSegmentReader,
    ObjectSegmentWriter,
    PrimitiveArraySegmentReader,
    PrimitiveArraySegmentWriter,
    SequenceSegmentReader,
    SequenceSegmentWriter,
    parse_index,
    reader_registry,
    writer_registry,
)


def strict(handler_cls, **kwargs):
    return handler_cls(suppress_exceptions=False, **kwargs)


@pytest.mark.parametrize("segment, expected", [
    ("0", 0),
    ("42", 42),
    ("007", 7),
    ("-1", None),
    ("1.5", None),
    ("", None),
    (None, None),
    ("٣", None),  # non-ASCII digit
])
def test_parse_index(segment, expected):
    assert parse_index(segment) == expected


def test_registries_cover_every_kind():
    for kind in ContainerKind:
        assert kind in reader_registry
        assert kind in writer_registry
    assert reader_registry[ContainerKind.MAPPING] is MappingSegmentReader
    assert writer_registry[ContainerKind.SEQUENCE] is SequenceSegmentWriter
    assert MappingSegmentReader.kind is ContainerKind.MAPPING


def test_registry_rejects_duplicates_and_unknown_kinds():
    registry = HandlerRegistry("reader")
    with pytest.raises(KeyError, match="No segment reader registered for 'object'"):
        registry[ContainerKind.OBJECT]
    registry.register(ContainerKind.OBJECT)(ObjectSegmentReader)
    with pytest.raises(ValueError, match="already registered"):
        registry.register(ContainerKind.OBJECT)(ObjectSegmentReader)


# --- Sequences ---

def test_sequence_reader():
    reader = SequenceSegmentReader()
    assert reader.read([10, 20, 30], Path("2"), 0) == 30
    assert reader.read((10, 20), Path("a.1"), 1) == 20
    assert reader.read({"only"}, Path("0"), 0) == "only"
    assert reader.read([10], Path("1"), 0) is None
    assert reader.read([10], Path("x"), 0) is None


@pytest.mark.parametrize("segment, code", [
    ("x", ErrorCode.INDEX_EXPECTED),
    ("-1", ErrorCode.INDEX_EXPECTED),
    ("3", ErrorCode.INDEX_OUT_OF_BOUNDS),
])
def test_sequence_reader_strict(segment, code):
    with pytest.raises(PathWalkerException) as exc_info:
        strict(SequenceSegmentReader).read([1, 2, 3], Path.of(segment), 0)
    assert exc_info.value.error_code is code


def test_sequence_writer_replaces_but_never_appends():
    items = [1, 2]
    writer = SequenceSegmentWriter()
    assert writer.write(items, Path("1"), 5) is True
    assert items == [1, 5]
    assert writer.write(items, Path("2"), 6) is False
    assert items == [1, 5]


def test_sequence_writer_unmodifiable():
    with pytest.raises(PathWalkerException, match="tuple implementation") as exc_info:
        strict(SequenceSegmentWriter).write((1, 2), Path("tags.0"), 5)
    assert exc_info.value.error_code is ErrorCode.NOT_MODIFIABLE
    assert isinstance(exc_info.value.__cause__, TypeError)


# --- Arrays ---

def test_array_reader_unboxes_numpy_scalars():
    names = np.array(["ab", "cd"])
    value = PrimitiveArraySegmentReader().read(np.array([1.5, 2.5]), Path("1"), 0)
    assert value == 2.5
    assert type(value) is float
    assert type(reader_registry[ContainerKind.ARRAY]().read(names, Path("0"), 0)) is str


def test_array_reader_returns_rows():
    grid = np.arange(6).reshape(2, 3)
    row = PrimitiveArraySegmentReader().read(grid, Path("1"), 0)
    assert row.tolist() == [3, 4, 5]


def test_array_writer_checks_type_before_index():
    names = np.array(["ab", "cd"])
    with pytest.raises(PathWalkerException, match="cannot assign int") as exc_info:
        strict(ArraySegmentWriter).write(names, Path("x"), 5)
    assert exc_info.value.error_code is ErrorCode.TYPE_MISMATCH
    with pytest.raises(PathWalkerException) as exc_info:
        strict(ArraySegmentWriter).write(names, Path("x"), "ef")
    assert exc_info.value.error_code is ErrorCode.INDEX_EXPECTED
    assert ArraySegmentWriter().write(names, Path("1"), "ef") is True
    assert names.tolist() == ["ab", "ef"]


def test_object_array_accepts_anything():
    things = np.array([None, None], dtype=object)
    assert ArraySegmentWriter().write(things, Path("0"), {"a": 1}) is True
    assert things[0] == {"a": 1}


@pytest.mark.parametrize("container, value", [
    (np.array([1, 2]), 2.5),
    (np.array([1, 2], dtype=np.int8), 300),
    (array("i", [1, 2]), "x"),
    (array("b", [1, 2]), 300),
    (bytearray(b"ab"), 256),
])
def test_primitive_array_type_mismatch(container, value):
    with pytest.raises(PathWalkerException) as exc_info:
        strict(PrimitiveArraySegmentWriter).write(container, Path("0"), value)
    assert exc_info.value.error_code is ErrorCode.TYPE_MISMATCH


def test_primitive_array_writer():
    sales = np.array([1.5, 2.0])
    assert PrimitiveArraySegmentWriter().write(sales, Path("1"), 3) is True
    assert sales[1] == 3.0
    codes = array("i", [1, 2])
    assert PrimitiveArraySegmentWriter().write(codes, Path("0"), 7) is True
    assert codes[0] == 7


def test_read_only_array_is_not_modifiable():
    frozen = np.array([1, 2])
    frozen.flags.writeable = False
    with pytest.raises(PathWalkerException) as exc_info:
        strict(PrimitiveArraySegmentWriter).write(frozen, Path("0"), 5)
    assert exc_info.value.error_code is ErrorCode.NOT_MODIFIABLE


# --- Mappings ---

def test_mapping_reader_distinguishes_none_from_missing():
    reader = strict(MappingSegmentReader)
    assert reader.read({"a": None}, Path("a"), 0) is None
    with pytest.raises(PathWalkerException, match='no such key: "b"') as exc_info:
        reader.read({"a": None}, Path("b"), 0)
    assert exc_info.value.error_code is ErrorCode.NO_SUCH_KEY


def test_mapping_reader_special_keys():
    reader = MappingSegmentReader()
    data = {None: "nothing", "": "empty", "a.b": "dotted"}
    assert reader.read(data, Path("^0"), 0) == "nothing"
    assert reader.read(data, Path.of(""), 0) == "empty"
    assert reader.read(data, Path("a^.b"), 0) == "dotted"


def test_mapping_key_deserializer():
    reader = strict(MappingSegmentReader, key_deserializer=int_keys)
    assert reader.read({1: "one"}, Path("1"), 0) == "one"
    with pytest.raises(PathWalkerException, match='not an integer key: "one"') as exc_info:
        reader.read({1: "one"}, Path("one"), 0)
    assert exc_info.value.error_code is ErrorCode.KEY_DESERIALIZATION_FAILED


def test_mapping_writer_adds_keys():
    data = {}
    assert MappingSegmentWriter().write(data, Path("a.b"), 1) is True
    assert data == {"b": 1}
    assert MappingSegmentWriter(key_deserializer=int_keys).write(data, Path("7"), 2) is True
    assert data[7] == 2


def test_mapping_writer_unmodifiable():
    view = MappingProxyType({"a": 1})
    assert MappingSegmentWriter().write(view, Path("a"), 2) is False
    with pytest.raises(PathWalkerException) as exc_info:
        strict(MappingSegmentWriter).write(view, Path("a"), 2)
    assert exc_info.value.error_code is ErrorCode.NOT_MODIFIABLE


# --- Objects ---

class Box:
    def __init__(self):
        self.content = "socks"

    @property
    def broken(self) -> str:
        return "fine"

    @broken.setter
    def broken(self, value: str):
        raise RuntimeError("cannot close the lid")


@pytest.mark.parametrize("path, code", [
    (Path("size"), ErrorCode.NO_SUCH_PROPERTY),
    (Path.of(""), ErrorCode.EMPTY_SEGMENT),
    (Path.of(None), ErrorCode.EMPTY_SEGMENT),
])
def test_object_reader_strict(path, code):
    with pytest.raises(PathWalkerException) as exc_info:
        strict(ObjectSegmentReader).read(Box(), path, 0)
    assert exc_info.value.error_code is code


def test_object_reader_terminal_value():
    with pytest.raises(PathWalkerException, match=r'"length": \(str\) socks') as exc_info:
        strict(ObjectSegmentReader).read("socks", Path("content.length"), 1)
    assert exc_info.value.error_code is ErrorCode.TERMINAL_VALUE


def test_object_writer():
    box = Box()
    assert ObjectSegmentWriter().write(box, Path("content"), "shoes") is True
    assert box.content == "shoes"
    with pytest.raises(PathWalkerException, match="cannot close the lid") as exc_info:
        strict(ObjectSegmentWriter).write(box, Path("broken"), "yes")
    assert exc_info.value.error_code is ErrorCode.EXCEPTION
    assert isinstance(exc_info.value.__cause__, RuntimeError)


class Slotted:
    __slots__ = ("name", "nick")

    def __init__(self):
        self.name = "Jane"


class Moody:
    @property
    def mood(self) -> str:
        raise RuntimeError("not today")


@pytest.mark.parametrize("obj, segment, cause", [
    (Slotted(), "nick", AttributeError),
    (Moody(), "mood", RuntimeError),
])
def test_object_reader_failing_getters(obj, segment, cause):
    assert ObjectSegmentReader().read(obj, Path.of(segment), 0) is None
    with pytest.raises(PathWalkerException) as exc_info:
        strict(ObjectSegmentReader).read(obj, Path.of(segment), 0)
    assert exc_info.value.error_code is ErrorCode.EXCEPTION
    assert isinstance(exc_info.value.__cause__, cause)


def test_unhashable_keys():
    split_keys = typed_keys(lambda s: s.split(","))
    data = {"a": 1}
    assert MappingSegmentReader(key_deserializer=split_keys).read(data, Path("a,b"), 0) is None
    assert MappingSegmentWriter(key_deserializer=split_keys).write(data, Path("a,b"), 2) is False
    with pytest.raises(PathWalkerException, match="cannot use list as map key") as exc_info:
        strict(MappingSegmentReader, key_deserializer=split_keys).read(data, Path("a,b"), 0)
    assert exc_info.value.error_code is ErrorCode.KEY_DESERIALIZATION_FAILED
    with pytest.raises(PathWalkerException) as exc_info:
        strict(MappingSegmentWriter, key_deserializer=split_keys).write(data, Path("a,b"), 2)
    assert exc_info.value.error_code is ErrorCode.KEY_DESERIALIZATION_FAILED
    assert data == {"a": 1}
