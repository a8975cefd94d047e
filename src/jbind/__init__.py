"""
Streaming JSON-to-object binding.

Consumes a JSON document as a flat sequence of lexical events and writes the
values straight into instances of declared record types, matching object
keys to field names. Nested objects become nested records, arrays become
lists of scalars or lists of one record type, and keys without a matching
field are consumed and dropped.
"""

import logging
from dataclasses import dataclass
from typing import IO
from typing import Any

from ._errors import BindError
from ._errors import ConstructionError
from ._errors import FieldTypeMismatch
from ._errors import JSONDecodeError
from ._errors import LexicalError
from ._errors import NestingTooDeep
from ._events import SCALAR_KINDS
from ._events import Event
from ._events import EventKind
from ._events import EventSource
from ._events import JsonEventReader
from ._events import JsonLexer
from ._events import JsonToken
from ._events import ParseState
from ._fields import BigNumber
from ._fields import FieldKind
from ._fields import FieldSpec
from ._fields import RecordSpec
from ._fields import construct
from ._fields import is_generic_type
from ._fields import is_list_type
from ._fields import is_record_type
from ._fields import list_item_type
from ._fields import record_spec
from ._ijson_source import DEFAULT_BUF_SIZE
from ._ijson_source import IjsonEventSource
from ._profile import HotPathStats
from ._profile import ProfileContext
from ._profile import clear_hot_path_stats
from ._profile import get_hot_path_stats

__version__ = "0.1.0"

logger = logging.getLogger(__name__)

_CONTAINER_STARTS = frozenset({EventKind.OBJECT_START, EventKind.ARRAY_START})
_CONTAINER_ENDS = frozenset({EventKind.OBJECT_END, EventKind.ARRAY_END})


@dataclass(frozen=True)
class BindConfig:
    """
    Configures binding behavior with immutable settings.

    ``strict`` decides what happens when a value's event kind does not fit
    its declared field: raise ``FieldTypeMismatch`` (the default) or skip
    the write and carry on. ``max_depth`` caps container nesting; ``None``
    leaves it bounded only by the interpreter's recursion limit.
    """

    strict: bool = True
    max_depth: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.strict, bool):
            raise TypeError("strict must be a boolean")
        if self.max_depth is not None and (
            isinstance(self.max_depth, bool)
            or not isinstance(self.max_depth, int)
            or self.max_depth < 1
        ):
            raise ValueError("max_depth must be a positive integer or None")


class KeyStack:
    """
    Object key waiting for its value.

    JSON objects never interleave members at one nesting level, and a
    parent's key is always popped before its nested container is entered,
    so a single slot is enough to pair every key with exactly one value.
    """

    __slots__ = ("_pending",)

    def __init__(self) -> None:
        self._pending: str | None = None

    def __bool__(self) -> bool:
        return self._pending is not None

    def push(self, key: str) -> None:
        if self._pending is not None:
            raise BindError(
                f"Key {key!r} arrived while key {self._pending!r} "
                "is still waiting for a value"
            )
        self._pending = key

    def pop(self) -> str:
        if self._pending is None:
            raise BindError("Value arrived without a pending object key")
        key, self._pending = self._pending, None
        return key


class JsonBinder:
    """
    Recursive event-to-object binder for one document.

    Owns the key stack and depth counter of a single parse; create one per
    document. ``bind_object`` and ``bind_array`` are entered after their
    start event has been consumed and return once the matching end event
    has been read.
    """

    def __init__(
        self, source: EventSource, config: BindConfig | None = None
    ) -> None:
        self.source = source
        self.config = config if config is not None else BindConfig()
        self.keys = KeyStack()
        self.depth = 0

    def _check_depth(self, depth: int) -> None:
        max_depth = self.config.max_depth
        if max_depth is not None and depth > max_depth:
            raise NestingTooDeep(depth, max_depth)

    def _enter(self) -> None:
        self.depth += 1
        self._check_depth(self.depth)

    def bind_object(self, target: Any, spec: RecordSpec) -> None:
        """Populates ``target`` from the members of the current object."""
        with ProfileContext("bind_object"):
            self._enter()
            event = self.source.next_event()
            while event.kind is not EventKind.END_OF_STREAM:
                if event.kind is EventKind.OBJECT_END:
                    break
                if event.kind is EventKind.STRING and not self.keys:
                    self.keys.push(event.value)
                else:
                    self._bind_member(target, spec, self.keys.pop(), event)
                event = self.source.next_event()
            self.depth -= 1

    def _bind_member(
        self, target: Any, spec: RecordSpec, key: str, event: Event
    ) -> None:
        kind = event.kind
        if kind is EventKind.NULL:
            return

        field = spec.get(key)
        if field is None:
            logger.debug(
                "Discarding unknown key %r on %s", key, spec.type.__name__
            )
            self.skip_value(event)
            return

        if kind in SCALAR_KINDS:
            if field.fits(event):
                setattr(target, field.name, field.coerce(event))
            else:
                self._mismatch(field.name, field.type, event)
        elif kind is EventKind.ARRAY_START:
            if field.kind is FieldKind.LIST:
                items: list[Any] = []
                self.bind_array(items, field.item_type, field.name)
                setattr(target, field.name, items)
            elif field.kind is FieldKind.GENERIC:
                setattr(target, field.name, self.read_value(event))
            else:
                self._mismatch(field.name, field.type, event)
        elif kind is EventKind.OBJECT_START:
            if field.kind is FieldKind.RECORD:
                nested_spec = record_spec(field.type)
                nested = construct(field.type)
                self.bind_object(nested, nested_spec)
                setattr(target, field.name, nested)
            elif field.kind is FieldKind.GENERIC:
                setattr(target, field.name, self.read_value(event))
            else:
                self._mismatch(field.name, field.type, event)
        else:
            raise BindError(f"Unexpected {kind.name} event for key {key!r}")

    def bind_array(
        self, target: list[Any], item_type: Any, name: str = "item"
    ) -> None:
        """
        Appends the elements of the current array to ``target``.

        ``item_type`` is only consulted for nested objects. Scalars and nulls
        are appended exactly as read, without the widening or type checks
        applied to record fields, so a ``list[float]`` keeps integers as
        ``int``. Nested arrays are consumed and dropped, contributing no
        entries.
        """
        with ProfileContext("bind_array"):
            self._enter()
            event = self.source.next_event()
            while event.kind is not EventKind.END_OF_STREAM:
                kind = event.kind
                if kind is EventKind.ARRAY_END:
                    break
                if kind in SCALAR_KINDS or kind is EventKind.NULL:
                    target.append(event.value)
                elif kind is EventKind.OBJECT_START:
                    self._bind_element(target, item_type, name, event)
                elif kind is EventKind.ARRAY_START:
                    logger.debug("Dropping nested array inside %r", name)
                    self.skip_value(event)
                else:
                    raise BindError(
                        f"Unexpected {kind.name} event inside array {name!r}"
                    )
                event = self.source.next_event()
            self.depth -= 1

    def _bind_element(
        self, target: list[Any], item_type: Any, name: str, event: Event
    ) -> None:
        if item_type is None:
            target.append(self.read_value(event))
        elif is_record_type(item_type):
            spec = record_spec(item_type)
            element = construct(item_type)
            self.bind_object(element, spec)
            target.append(element)
        else:
            self._mismatch(f"{name}[]", item_type, event)

    def _mismatch(self, name: str, declared: Any, event: Event) -> None:
        if self.config.strict:
            raise FieldTypeMismatch(name, declared, event.kind)
        logger.debug(
            "Skipping %s value for %r declared as %r",
            event.kind.name,
            name,
            declared,
        )
        self.skip_value(event)

    def skip_value(self, event: Event) -> None:
        """Consumes the rest of a value whose first event was ``event``."""
        if event.kind not in _CONTAINER_STARTS:
            return

        nested = 1
        self._check_depth(self.depth + nested)
        while nested:
            kind = self.source.next_event().kind
            if kind in _CONTAINER_STARTS:
                nested += 1
                self._check_depth(self.depth + nested)
            elif kind in _CONTAINER_ENDS:
                nested -= 1
            elif kind is EventKind.END_OF_STREAM:
                break

    def read_value(self, event: Event) -> Any:
        """Materializes a value as plain dicts, lists, and scalars."""
        if event.kind is EventKind.OBJECT_START:
            self._enter()
            obj: dict[str, Any] = {}
            event = self.source.next_event()
            while event.kind not in (
                EventKind.OBJECT_END,
                EventKind.END_OF_STREAM,
            ):
                if event.kind is not EventKind.STRING:
                    raise BindError(
                        f"Expected an object key, got {event.kind.name}"
                    )
                obj[event.value] = self.read_value(self.source.next_event())
                event = self.source.next_event()
            self.depth -= 1
            return obj

        if event.kind is EventKind.ARRAY_START:
            self._enter()
            arr: list[Any] = []
            event = self.source.next_event()
            while event.kind not in (
                EventKind.ARRAY_END,
                EventKind.END_OF_STREAM,
            ):
                arr.append(self.read_value(event))
                event = self.source.next_event()
            self.depth -= 1
            return arr

        if event.kind in _CONTAINER_ENDS:
            raise BindError(f"Unexpected {event.kind.name} event")
        return event.value


def _accepts_anything(tp: Any) -> bool:
    return tp is Any or tp is object


def bind(source: EventSource, tp: Any, config: BindConfig | None = None) -> Any:
    """
    Binds the document produced by ``source`` into an instance of ``tp``.

    An object root needs a record type (or ``dict``/``Any``); an array root
    needs ``list[T]``, and each nested object is bound into a new ``T``.
    Returns ``None`` when the source is empty. Bare scalar roots are
    rejected with ``BindError``.

    Null and missing members leave the field as constructed. For a plain
    class whose annotated field has no class-level default, that means the
    attribute stays unset and reading it raises ``AttributeError``.
    """
    binder = JsonBinder(source, config)
    event = source.next_event()

    if event.kind is EventKind.END_OF_STREAM:
        return None

    if event.kind is EventKind.OBJECT_START:
        if is_generic_type(tp):
            result = binder.read_value(event)
        elif is_list_type(tp):
            raise ConstructionError(
                f"{tp!r} cannot hold a JSON object at the document root"
            )
        else:
            spec = record_spec(tp)
            result = construct(tp)
            binder.bind_object(result, spec)
    elif event.kind is EventKind.ARRAY_START:
        if _accepts_anything(tp):
            result = binder.read_value(event)
        else:
            item_type = list_item_type(tp)
            result = []
            binder.bind_array(result, item_type, "[]")
    else:
        raise BindError("Document root must be an object or array")

    trailing = source.next_event()
    if trailing.kind is not EventKind.END_OF_STREAM:
        raise BindError(
            f"Unexpected {trailing.kind.name} event after the document root"
        )
    return result


def loads(s: str | bytes | bytearray, tp: Any, **kwargs: Any) -> Any:
    """
    Binds a JSON document held in memory into an instance of ``tp``.

    Bytes are decoded as UTF-8. Keyword arguments build the ``BindConfig``.
    Fields follow ``bind``: a null or missing member never writes, so plain
    class attributes without a default may be left unset.
    """
    if isinstance(s, bytes | bytearray):
        try:
            s = s.decode("utf-8")
        except UnicodeDecodeError as e:
            raise JSONDecodeError(
                "JSON input is not valid UTF-8", "", e.start
            ) from e
    elif not isinstance(s, str):
        raise TypeError(
            "the JSON object must be str, bytes or bytearray, "
            f"not {type(s).__name__}"
        )

    if s.startswith("\ufeff"):
        raise JSONDecodeError(
            "JSON input should not contain BOM (Byte Order Mark)", s, 0
        )

    config = BindConfig(**kwargs)
    return bind(JsonEventReader(s), tp, config)


def load(fp: IO[str] | IO[bytes], tp: Any, **kwargs: Any) -> Any:
    """
    Reads a whole file-like object and binds its JSON into ``tp``.
    """
    if not hasattr(fp, "read"):
        raise TypeError("fp must have a read() method")

    return loads(fp.read(), tp, **kwargs)


def load_stream(
    fp: IO[bytes],
    tp: Any,
    *,
    buf_size: int = DEFAULT_BUF_SIZE,
    **kwargs: Any,
) -> Any:
    """
    Binds JSON from a binary file object, reading it incrementally.

    The document is tokenized chunk by chunk through ijson rather than read
    into memory first. The caller keeps ownership of ``fp``.
    """
    if not hasattr(fp, "read"):
        raise TypeError("fp must have a read() method")

    config = BindConfig(**kwargs)
    return bind(IjsonEventSource(fp, buf_size), tp, config)


__all__ = [
    "BigNumber",
    "BindConfig",
    "BindError",
    "ConstructionError",
    "DEFAULT_BUF_SIZE",
    "Event",
    "EventKind",
    "EventSource",
    "FieldKind",
    "FieldSpec",
    "FieldTypeMismatch",
    "HotPathStats",
    "IjsonEventSource",
    "JSONDecodeError",
    "JsonBinder",
    "JsonEventReader",
    "JsonLexer",
    "JsonToken",
    "KeyStack",
    "LexicalError",
    "NestingTooDeep",
    "ParseState",
    "RecordSpec",
    "bind",
    "clear_hot_path_stats",
    "construct",
    "get_hot_path_stats",
    "list_item_type",
    "load",
    "load_stream",
    "loads",
    "record_spec",
]
