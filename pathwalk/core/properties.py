"""
Reading and writing named properties of structured objects.

A property is any public name an object exposes as data: pydantic model
fields (and computed fields), dataclass fields, `__slots__`, `property`
descriptors, and whatever sits in the instance `__dict__`. Names starting
with an underscore are never properties.

Property lists are derived once per class and cached. Instance attributes
are looked up per object, since they can differ between instances.
"""
from dataclasses import dataclass, fields, is_dataclass
from datetime import date, time, timedelta
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from functools import lru_cache
import logging
from pathlib import PurePath
from typing import Any, get_origin, get_type_hints
from uuid import UUID

import numpy as np
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError
from pydantic.errors import PydanticSchemaGenerationError, PydanticUserError

logger = logging.getLogger("pathwalk.properties")

# Values with no structure worth walking into, whatever attributes they have
OPAQUE_TYPES: tuple[type, ...] = (
    str, bytes, bytearray, memoryview, int, float, complex, bool,
    Decimal, Fraction, date, time, timedelta, Enum, PurePath, UUID,
    type, np.generic, np.ndarray,
)

_UNCHECKED = object()


class PropertyAccessError(Exception):
    """Base class for property access failures."""


class NoAccessiblePropertiesError(PropertyAccessError):
    """The object exposes no (readable or writable) properties at all."""

    def __init__(self, cls: type, writing: bool = False):
        kind = "writable" if writing else "readable"
        super().__init__(f"{cls.__qualname__} has no {kind} properties")
        self.cls = cls


class NoSuchPropertyError(PropertyAccessError):
    """The object has properties, but not the one asked for."""

    def __init__(self, cls: type, name: str | None, writing: bool = False):
        kind = "writable" if writing else "readable"
        super().__init__(f'{cls.__qualname__} has no {kind} property "{name}"')
        self.cls = cls
        self.name = name


class IllegalAssignmentError(PropertyAccessError):
    """The value is not of the property's declared type."""

    def __init__(self, cls: type, name: str, value: Any, annotation: Any):
        super().__init__(
            f"cannot assign {type(value).__name__} to {cls.__qualname__}.{name} "
            f"(declared as {_type_name(annotation)})"
        )
        self.cls = cls
        self.name = name


@dataclass(frozen=True)
class PropertyInfo:
    """A named property and what is known about it."""
    name: str
    annotation: Any = _UNCHECKED
    writable: bool = True


def _type_name(annotation: Any) -> str:
    if isinstance(annotation, type):
        return annotation.__qualname__
    return repr(annotation).replace("typing.", "")


def _public(name: str) -> bool:
    return not name.startswith("_")


def _class_hints(cls: type) -> dict[str, Any]:
    try:
        return get_type_hints(cls)
    except Exception:  # pylint: disable=broad-except
        # unresolvable forward references; keep what is already a real type
        hints: dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            for name, ann in getattr(klass, "__annotations__", {}).items():
                if not isinstance(ann, str):
                    hints[name] = ann
        return hints


def _setter_annotation(prop: property) -> Any:
    if prop.fset is None:
        return _UNCHECKED
    try:
        hints = get_type_hints(prop.fset)
    except Exception:  # pylint: disable=broad-except
        return _UNCHECKED
    hints.pop("return", None)
    return next(iter(hints.values()), _UNCHECKED)


def _declared_properties(cls: type) -> dict[str, PropertyInfo]:
    hints = _class_hints(cls)
    props: dict[str, PropertyInfo] = {}

    # property descriptors, most derived class wins. BaseModel internals
    # (model_extra, model_fields_set) are not properties of the model.
    for klass in reversed(cls.__mro__):
        if klass.__module__.startswith("pydantic."):
            continue
        for name, attr in vars(klass).items():
            if isinstance(attr, property) and _public(name):
                props[name] = PropertyInfo(name, _setter_annotation(attr), attr.fset is not None)

    # __slots__
    for klass in reversed(cls.__mro__):
        slots = vars(klass).get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if _public(name):
                props[name] = PropertyInfo(name, hints.get(name, _UNCHECKED))

    # dataclasses
    if is_dataclass(cls):
        frozen = cls.__dataclass_params__.frozen
        for f in fields(cls):
            if _public(f.name):
                props[f.name] = PropertyInfo(f.name, hints.get(f.name, _UNCHECKED), not frozen)

    # pydantic models
    if issubclass(cls, BaseModel):
        frozen = bool(cls.model_config.get("frozen"))
        for name, field in cls.model_fields.items():
            if _public(name):
                props[name] = PropertyInfo(name, field.annotation, not (frozen or field.frozen))
        for name, info in cls.model_computed_fields.items():
            if _public(name):
                wrapped = getattr(info, "wrapped_property", None)
                setter = getattr(wrapped, "fset", None)
                props[name] = PropertyInfo(name, _UNCHECKED, setter is not None)
    return props


# --- Type checking ---

@lru_cache(maxsize=256)
def _adapter(annotation: Any) -> TypeAdapter | None:
    try:
        return TypeAdapter(annotation, config=ConfigDict(strict=True, arbitrary_types_allowed=True))
    except (PydanticSchemaGenerationError, PydanticUserError, TypeError) as e:
        logger.debug("No type check for %r: %s", annotation, e)
        return None


def is_assignable(annotation: Any, value: Any) -> bool:
    """
    Whether `value` is acceptable for a property declared as `annotation`.
    Plain classes are checked with isinstance (an int is fine for a float).
    Anything else (unions, generics, literals) is validated by pydantic in
    strict mode. Annotations pydantic cannot handle are not checked.
    """
    if annotation is _UNCHECKED or annotation is Any:
        return True
    if get_origin(annotation) is None and isinstance(annotation, type):
        try:
            if isinstance(value, annotation):
                return True
        except TypeError:
            pass  # TypedDict, non-runtime Protocol: let pydantic decide
        else:
            if annotation is float:
                return isinstance(value, int)
            if annotation is complex:
                return isinstance(value, (int, float))
            return False
    try:
        adapter = _adapter(annotation)
    except TypeError:
        # unhashable annotation
        adapter = None
    if adapter is None:
        return True
    try:
        adapter.validate_python(value, strict=True)
    except ValidationError:
        return False
    return True


# --- Accessor ---

class PropertyAccessor:
    """Reads and writes the properties of instances of one class."""

    def __init__(self, cls: type):
        self.cls = cls
        self.opaque = issubclass(cls, OPAQUE_TYPES)
        self._declared = {} if self.opaque else _declared_properties(cls)
        self._hints = {} if self.opaque else _class_hints(cls)

    def __repr__(self) -> str:
        return f"PropertyAccessor({self.cls.__qualname__})"

    def properties(self, obj: Any) -> dict[str, PropertyInfo]:
        """All properties of `obj`, declared and instance-level."""
        if self.opaque:
            return {}
        props = dict(self._declared)
        instance_attrs = getattr(obj, "__dict__", None)
        if isinstance(instance_attrs, dict):
            for name in instance_attrs:
                if _public(name) and name not in props:
                    props[name] = PropertyInfo(name, self._hints.get(name, _UNCHECKED))
        extra = getattr(obj, "__pydantic_extra__", None)
        if isinstance(extra, dict):
            for name in extra:
                if _public(name) and name not in props:
                    props[name] = PropertyInfo(name)
        return props

    def has_properties(self, obj: Any) -> bool:
        """True if `obj` exposes at least one property."""
        return bool(self.properties(obj))

    def read(self, obj: Any, name: str | None) -> Any:
        """Value of property `name` of `obj`."""
        props = self.properties(obj)
        if not props:
            raise NoAccessiblePropertiesError(self.cls)
        if name not in props:
            raise NoSuchPropertyError(self.cls, name)
        return getattr(obj, name)

    def write(self, obj: Any, name: str | None, value: Any) -> None:
        """
        Set property `name` of `obj` to `value`. Read-only properties (getter
        only, frozen fields) count as missing.
        """
        writable = {k: v for k, v in self.properties(obj).items() if v.writable}
        if not writable:
            raise NoAccessiblePropertiesError(self.cls, writing=True)
        info = writable.get(name)
        if info is None:
            raise NoSuchPropertyError(self.cls, name, writing=True)
        if not is_assignable(info.annotation, value):
            raise IllegalAssignmentError(self.cls, info.name, value, info.annotation)
        try:
            setattr(obj, info.name, value)
        except ValidationError as e:
            # models with validate_assignment
            raise IllegalAssignmentError(self.cls, info.name, value, info.annotation) from e


@lru_cache(maxsize=None)
def get_accessor(cls: type) -> PropertyAccessor:
    """The (cached) PropertyAccessor for a class."""
    return PropertyAccessor(cls)
