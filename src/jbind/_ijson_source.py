"""Incremental event source over binary file objects, backed by ijson."""

import logging
import math
from collections.abc import Iterator
from decimal import Decimal
from typing import IO
from typing import Any

import ijson

from ._errors import JSONDecodeError
from ._events import _INT64_MAX
from ._events import _INT64_MIN
from ._events import Event
from ._events import EventKind
from ._events import big_number_text

logger = logging.getLogger(__name__)

_EVENT_MAP = {
    "start_map": EventKind.OBJECT_START,
    "end_map": EventKind.OBJECT_END,
    "start_array": EventKind.ARRAY_START,
    "end_array": EventKind.ARRAY_END,
    "map_key": EventKind.STRING,
    "string": EventKind.STRING,
    "boolean": EventKind.BOOLEAN,
    "null": EventKind.NULL,
}

DEFAULT_BUF_SIZE = 64 * 1024

# RFC 8259 insignificant whitespace; \v and \f are not part of it
_JSON_WHITESPACE = b" \t\n\r"
_FORBIDDEN_BYTES = (b"\x0b", b"\x0c")


def _number_event(value: int | Decimal) -> Event:
    """Applies the same int64 / double classification as the text reader."""
    if isinstance(value, int):
        if _INT64_MIN <= value <= _INT64_MAX:
            return Event(EventKind.INTEGER, value)
        return Event(EventKind.BIG_NUMBER, big_number_text(value))

    as_float = float(value)
    if math.isinf(as_float):
        return Event(EventKind.BIG_NUMBER, big_number_text(value))
    return Event(EventKind.DECIMAL, as_float)


class _ByteGuard:
    """
    Passes reads through, remembering whether any byte other than JSON
    whitespace went by.

    Vertical tab and form feed are rejected outright. They are neither JSON
    whitespace nor allowed unescaped inside strings, yet ijson's pure Python
    backend skips them as whitespace.
    """

    def __init__(self, fp: IO[bytes]):
        self._fp = fp
        self._offset = 0
        self.saw_content = False

    def read(self, size: int = -1) -> bytes:
        data = self._fp.read(size)
        for ch in _FORBIDDEN_BYTES:
            idx = data.find(ch)
            if idx >= 0:
                raise JSONDecodeError(
                    f"Invalid control character {ch!r}", "", self._offset + idx
                )
        self._offset += len(data)
        if not self.saw_content and data.strip(_JSON_WHITESPACE):
            self.saw_content = True
        return data


class IjsonEventSource:
    """
    Event source reading a UTF-8 byte stream chunk by chunk.

    Keys arrive as ``STRING`` events, exactly like ``JsonEventReader``.
    Positions are not tracked by ijson, so every event reports ``pos=0``.
    An empty or whitespace-only stream yields ``END_OF_STREAM`` straight
    away; any other ijson failure surfaces as ``JSONDecodeError``.
    """

    def __init__(self, fp: IO[bytes], buf_size: int = DEFAULT_BUF_SIZE):
        self._guard = _ByteGuard(fp)
        self._events: Iterator[tuple[str, Any]] = ijson.basic_parse(
            self._guard, buf_size=buf_size, use_float=False
        )
        self._finished = False
        self._peeked: Event | None = None

    def next_event(self) -> Event:
        """Returns the next event and advances."""
        if self._peeked is not None:
            event, self._peeked = self._peeked, None
            return event
        return self._read_event()

    def peek_event(self) -> Event:
        """Returns the next event without consuming it."""
        if self._peeked is None:
            self._peeked = self._read_event()
        return self._peeked

    def _read_event(self) -> Event:
        if self._finished:
            return Event(EventKind.END_OF_STREAM)

        try:
            name, value = next(self._events)
        except StopIteration:
            self._finished = True
            return Event(EventKind.END_OF_STREAM)
        except ijson.IncompleteJSONError as e:
            if not self._guard.saw_content:
                logger.debug("Empty JSON stream: %s", e)
                self._finished = True
                return Event(EventKind.END_OF_STREAM)
            raise JSONDecodeError(f"Incomplete JSON data: {e}") from e
        except (ijson.JSONError, UnicodeDecodeError) as e:
            raise JSONDecodeError(f"Invalid JSON data: {e}") from e

        if name == "number":
            return _number_event(value)
        return Event(_EVENT_MAP[name], value)
