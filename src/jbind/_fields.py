"""
Field tables for record types.

A record type is a (non-frozen) dataclass or a plain class whose fields are
declared with class-level annotations. Each type's annotations are resolved
once into a ``RecordSpec`` mapping field names to ``FieldSpec`` entries, so
the binders only do a dictionary lookup per JSON key.
"""

import dataclasses
import types
import typing
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any
from typing import ClassVar
from typing import NewType
from typing import Union

from ._errors import ConstructionError
from ._events import Event
from ._events import EventKind

BigNumber = NewType("BigNumber", str)
"""Out-of-range numeric literal kept as exact text (see ``big_number_text``)."""

_SCALAR_TYPES: tuple[Any, ...] = (str, int, float, bool, Decimal, BigNumber)
_GENERIC_TYPES: tuple[Any, ...] = (Any, object, dict)

# Declared types each scalar event kind may be written into
_ACCEPTED_TYPES: dict[EventKind, tuple[Any, ...]] = {
    EventKind.STRING: (str,),
    EventKind.INTEGER: (int, float),
    EventKind.DECIMAL: (float,),
    EventKind.BIG_NUMBER: (BigNumber, str, Decimal),
    EventKind.BOOLEAN: (bool,),
}


class FieldKind(Enum):
    """How a declared field participates in binding."""

    SCALAR = "scalar"
    RECORD = "record"
    LIST = "list"
    GENERIC = "generic"


def _strip_optional(tp: Any) -> Any:
    """Reduces ``T | None`` to ``T``; wider unions are left alone."""
    origin = typing.get_origin(tp)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in typing.get_args(tp) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def _is_generic(tp: Any) -> bool:
    if tp in _GENERIC_TYPES:
        return True
    origin = typing.get_origin(tp)
    return origin is dict or origin is Union or origin is types.UnionType


def _is_list(tp: Any) -> bool:
    return tp is list or typing.get_origin(tp) is list


def _item_type(tp: Any) -> Any:
    """Element type of ``list[T]``; ``None`` for bare or generic lists."""
    args = typing.get_args(tp)
    if not args:
        return None
    item = _strip_optional(args[0])
    return None if _is_generic(item) else item


@dataclass(frozen=True)
class FieldSpec:
    """
    Declared field of a record type.

    ``type`` is the declared type with ``Optional`` removed. For list fields
    ``item_type`` is the element type, or ``None`` when elements are untyped.
    """

    name: str
    kind: FieldKind
    type: Any
    item_type: Any = None

    @classmethod
    def from_annotation(cls, name: str, annotation: Any) -> "FieldSpec":
        tp = _strip_optional(annotation)
        if _is_generic(tp):
            return cls(name, FieldKind.GENERIC, tp)
        if _is_list(tp):
            return cls(name, FieldKind.LIST, list, _item_type(tp))
        if tp in _SCALAR_TYPES:
            return cls(name, FieldKind.SCALAR, tp)
        if is_record_type(tp):
            return cls(name, FieldKind.RECORD, tp)
        raise ConstructionError(
            f"Field {name!r} has unsupported declared type {tp!r}"
        )

    def accepts(self, kind: EventKind) -> bool:
        """Whether a scalar event of ``kind`` may be written into this field."""
        if self.kind is FieldKind.GENERIC:
            return True
        if self.kind is not FieldKind.SCALAR:
            return False
        return self.type in _ACCEPTED_TYPES.get(kind, ())

    def fits(self, event: Event) -> bool:
        """
        Whether this particular scalar event may be written into the field.

        Like ``accepts``, but an integer only widens into a ``float`` field
        when the double represents it exactly (always true up to 2**53).
        """
        if not self.accepts(event.kind):
            return False
        if self.type is float and event.kind is EventKind.INTEGER:
            return float(event.value) == event.value
        return True

    def coerce(self, event: Event) -> Any:
        """Converts an accepted scalar event to the field's representation."""
        if self.type is float and event.kind is EventKind.INTEGER:
            return float(event.value)
        if self.type is Decimal and event.kind is EventKind.BIG_NUMBER:
            return Decimal(event.value)
        return event.value


@dataclass(frozen=True)
class RecordSpec:
    """Resolved field table of one record type."""

    type: type
    fields: Mapping[str, FieldSpec]

    def get(self, key: str) -> FieldSpec | None:
        return self.fields.get(key)


_spec_cache: dict[type, RecordSpec] = {}


def _declared_fields(tp: type) -> dict[str, Any]:
    try:
        hints = typing.get_type_hints(tp)
    except (NameError, TypeError) as e:
        raise ConstructionError(
            f"Cannot resolve field annotations of {tp.__name__}"
        ) from e

    if dataclasses.is_dataclass(tp):
        return {f.name: hints[f.name] for f in dataclasses.fields(tp)}

    return {
        name: hint
        for name, hint in hints.items()
        if hint is not ClassVar and typing.get_origin(hint) is not ClassVar
    }


def record_spec(tp: type) -> RecordSpec:
    """
    Returns the cached field table for a record type.

    Frozen dataclasses are rejected since fields are written in place after
    construction.
    """
    spec = _spec_cache.get(tp)
    if spec is not None:
        return spec

    if not is_record_type(tp):
        raise ConstructionError(f"{tp!r} is not a record type")
    params = getattr(tp, "__dataclass_params__", None)
    if params is not None and params.frozen:
        raise ConstructionError(
            f"{tp.__name__} is frozen and cannot be populated in place"
        )

    fields = {
        name: FieldSpec.from_annotation(name, annotation)
        for name, annotation in _declared_fields(tp).items()
    }
    spec = RecordSpec(tp, types.MappingProxyType(fields))
    _spec_cache[tp] = spec
    return spec


def construct(tp: type) -> Any:
    """Builds a default instance of ``tp`` by calling it with no arguments."""
    try:
        return tp()
    except Exception as e:
        name = getattr(tp, "__name__", repr(tp))
        raise ConstructionError(
            f"Cannot construct a default instance of {name}"
        ) from e


def is_record_type(tp: Any) -> bool:
    """Whether ``tp`` is bound field by field rather than as a value."""
    return (
        isinstance(tp, type)
        and typing.get_origin(tp) is None
        and tp not in _SCALAR_TYPES
        and not _is_generic(tp)
        and not _is_list(tp)
    )


def is_generic_type(tp: Any) -> bool:
    """Whether ``tp`` takes any JSON value as a plain Python value."""
    return _is_generic(_strip_optional(tp))


def is_list_type(tp: Any) -> bool:
    return _is_list(_strip_optional(tp))


def list_item_type(tp: Any) -> Any:
    """
    Element type declared by a root list type such as ``list[Volume]``.

    Returns ``None`` for a bare ``list``. Raises ``ConstructionError`` when
    ``tp`` is not a list type at all.
    """
    tp = _strip_optional(tp)
    if not _is_list(tp):
        raise ConstructionError(
            f"{getattr(tp, '__name__', repr(tp))} cannot hold a JSON array"
        )
    return _item_type(tp)
