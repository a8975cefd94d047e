"""
Lexical JSON events and the built-in pull event source.

``JsonLexer`` scans raw text into tokens; ``JsonEventReader`` validates the
token sequence against the JSON grammar with an explicit container stack and
hands out one ``Event`` per structural token or scalar. Object keys are
delivered as ordinary ``STRING`` events; pairing them with values is the
binder's job.
"""

import math
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any
from typing import Protocol

from ._errors import JSONDecodeError
from ._errors import Position
from ._profile import ProfileContext

_DIGITS = "0123456789"
_HEX_DIGITS = "0123456789abcdefABCDEF"
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
# Longest decimal literal that can still fit a signed 64-bit integer
_INT64_MAX_DIGITS = 19

_ESCAPE_MAP = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}


class EventKind(Enum):
    """Kinds of lexical events an event source can produce."""

    END_OF_STREAM = "end_of_stream"
    OBJECT_START = "object_start"
    OBJECT_END = "object_end"
    ARRAY_START = "array_start"
    ARRAY_END = "array_end"
    STRING = "string"
    INTEGER = "integer"
    DECIMAL = "decimal"
    BIG_NUMBER = "big_number"
    BOOLEAN = "boolean"
    NULL = "null"


SCALAR_KINDS = frozenset(
    {
        EventKind.STRING,
        EventKind.INTEGER,
        EventKind.DECIMAL,
        EventKind.BIG_NUMBER,
        EventKind.BOOLEAN,
    }
)


@dataclass(frozen=True)
class Event:
    """
    One lexical unit of a JSON document.

    ``value`` carries the decoded scalar: ``str`` for strings and keys,
    ``int`` for integers, ``float`` for decimals, ``big_number_text`` for
    big numbers, ``bool`` for booleans, and ``None`` otherwise.
    """

    kind: EventKind
    value: Any = None
    pos: Position = 0


class EventSource(Protocol):
    """Anything that hands out JSON events in document order."""

    def next_event(self) -> Event: ...


class ParseState(Enum):
    """
    Grammar states of the event reader.

    Each state names what the reader expects to see next.
    """

    START = "start"
    OBJECT_START = "object_start"
    OBJECT_KEY = "object_key"
    OBJECT_COLON = "object_colon"
    OBJECT_COMMA = "object_comma"
    ARRAY_START = "array_start"
    ARRAY_VALUE = "array_value"
    ARRAY_COMMA = "array_comma"
    END = "end"


class TokenType(Enum):
    """Lexical token categories produced by ``JsonLexer``."""

    PUNCTUATION = "punctuation"
    STRING = "string"
    NUMBER = "number"
    LITERAL = "literal"


@dataclass(frozen=True)
class JsonToken:
    """Represents a JSON token with position information."""

    type: TokenType
    value: str
    start: Position
    end: Position


def big_number_text(value: int | Decimal) -> str:
    """
    Canonical ``BIG_NUMBER`` payload for an out-of-range number.

    Integers keep their digits as written. Fractional and exponent forms use
    ``Decimal``'s string form (``1e400`` -> ``1E+400``, ``1.0e400`` ->
    ``1.0E+400``): every significant digit is kept, and every event source
    produces the same text for the same literal.
    """
    return str(value)


def classify_number(raw: str) -> tuple[EventKind, Any]:
    """
    Chooses the event kind for a numeric literal.

    Whole numbers inside the signed 64-bit range become ``INTEGER``, finite
    fractional or exponent forms become ``DECIMAL``, and everything else
    becomes ``BIG_NUMBER`` text (see ``big_number_text``) so no precision
    is lost.
    """
    if "." in raw or "e" in raw or "E" in raw:
        value = float(raw)
        if math.isinf(value):
            return EventKind.BIG_NUMBER, big_number_text(Decimal(raw))
        return EventKind.DECIMAL, value

    if len(raw.lstrip("-")) > _INT64_MAX_DIGITS:
        return EventKind.BIG_NUMBER, raw
    integer = int(raw)
    if _INT64_MIN <= integer <= _INT64_MAX:
        return EventKind.INTEGER, integer
    return EventKind.BIG_NUMBER, raw


def _read_hex4(inner: str, i: int, doc: str, pos: Position) -> int:
    """Reads the four hex digits of a ``\\uXXXX`` escape starting at ``i``."""
    hex_digits = inner[i : i + 4]
    if len(hex_digits) < 4:
        raise JSONDecodeError("Incomplete unicode escape sequence", doc, pos)
    if not all(c in _HEX_DIGITS for c in hex_digits):
        raise JSONDecodeError(
            f"Invalid unicode escape sequence: \\u{hex_digits}", doc, pos
        )
    return int(hex_digits, 16)


def _process_escape_sequence(
    inner: str, i: int, doc: str, offset: Position
) -> tuple[str, int]:
    """Decodes the escape at ``inner[i]``; returns the text and next index."""
    next_char = inner[i + 1]

    if next_char in _ESCAPE_MAP:
        return _ESCAPE_MAP[next_char], i + 2

    if next_char == "u":
        code_point = _read_hex4(inner, i + 2, doc, offset + i)
        i += 6
        # Combine a UTF-16 surrogate pair into one code point
        if 0xD800 <= code_point <= 0xDBFF and inner[i : i + 2] == "\\u":
            low = _read_hex4(inner, i + 2, doc, offset + i)
            if 0xDC00 <= low <= 0xDFFF:
                code_point = 0x10000 + ((code_point - 0xD800) << 10)
                code_point += low - 0xDC00
                i += 6
        return chr(code_point), i

    raise JSONDecodeError(
        f"Invalid escape sequence: \\{next_char}", doc, offset + i
    )


def decode_string(raw: str, doc: str = "", start: Position = 0) -> str:
    """Decodes a quoted JSON string token, handling escape sequences."""
    inner = raw[1:-1]
    if "\\" not in inner:
        return inner

    # Offset of inner[0] within the document
    offset = start + 1
    result = []
    i = 0
    while i < len(inner):
        if inner[i] == "\\":
            char, i = _process_escape_sequence(inner, i, doc, offset)
            result.append(char)
        else:
            result.append(inner[i])
            i += 1

    return "".join(result)


class JsonLexer:
    """
    Tokenizes JSON input for the event reader.

    Character-by-character scanning of whitespace, strings, numbers,
    literals, and structural tokens.
    """

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.length = len(text)

    def peek(self) -> str:
        """Returns current character without advancing."""
        return self.text[self.pos] if self.pos < self.length else "\0"

    def advance(self) -> str:
        """Returns current character and advances position."""
        char = self.peek()
        if self.pos < self.length:
            self.pos += 1
        return char

    def skip_whitespace(self) -> None:
        """Skips whitespace characters according to JSON spec."""
        while self.pos < self.length and self.text[self.pos] in " \t\n\r":
            self.pos += 1

    def scan_string(self) -> JsonToken:
        """Scans a JSON string token including quotes."""
        with ProfileContext("scan_string"):
            start = self.pos
            if self.advance() != '"':
                raise JSONDecodeError("Expected string", self.text, start)

            while self.pos < self.length:
                char = self.advance()
                if char == '"':
                    return JsonToken(
                        TokenType.STRING,
                        self.text[start : self.pos],
                        start,
                        self.pos,
                    )
                elif char == "\\":
                    # Skip escaped character
                    if self.pos < self.length:
                        self.advance()
                elif char < " ":
                    raise JSONDecodeError(
                        "Invalid control character at", self.text, self.pos - 1
                    )

            raise JSONDecodeError(
                "Unterminated string starting at", self.text, start
            )

    def _scan_integer_part(self, start: Position) -> None:
        """Scans the integer part of a JSON number."""
        if self.peek() not in _DIGITS:
            raise JSONDecodeError("Invalid number", self.text, start)

        if self.peek() == "0":
            self.advance()
            if self.peek() in _DIGITS:
                raise JSONDecodeError(
                    "Leading zeros not allowed", self.text, start
                )
        else:
            while self.peek() in _DIGITS:
                self.advance()

    def _scan_decimal_part(self, start: Position) -> None:
        """Scans the decimal part of a JSON number if present."""
        if self.peek() == ".":
            self.advance()
            if self.peek() not in _DIGITS:
                raise JSONDecodeError(
                    "Invalid decimal number", self.text, start
                )
            while self.peek() in _DIGITS:
                self.advance()

    def _scan_exponent_part(self, start: Position) -> None:
        """Scans the exponent part of a JSON number if present."""
        if self.peek() in "eE":
            self.advance()
            if self.peek() in "+-":
                self.advance()
            if self.peek() not in _DIGITS:
                raise JSONDecodeError("Invalid exponent", self.text, start)
            while self.peek() in _DIGITS:
                self.advance()

    def scan_number(self) -> JsonToken:
        """Scans a JSON number token."""
        with ProfileContext("scan_number"):
            start = self.pos

            if self.peek() == "-":
                self.advance()

            self._scan_integer_part(start)
            self._scan_decimal_part(start)
            self._scan_exponent_part(start)

            return JsonToken(
                TokenType.NUMBER, self.text[start : self.pos], start, self.pos
            )

    def scan_literal(self) -> JsonToken:
        """Scans literal tokens: true, false, null."""
        start = self.pos
        for literal in ("true", "false", "null"):
            end = start + len(literal)
            if self.text[start:end] == literal:
                self.pos = end
                return JsonToken(TokenType.LITERAL, literal, start, end)
        raise JSONDecodeError("Expecting value", self.text, start)

    def next_token(self) -> JsonToken | None:
        """Returns the next token or None if at end."""
        self.skip_whitespace()

        if self.pos >= self.length:
            return None

        char = self.peek()
        start = self.pos

        if char in "{}[],:":
            self.advance()
            return JsonToken(TokenType.PUNCTUATION, char, start, self.pos)
        elif char == '"':
            return self.scan_string()
        elif char in _DIGITS or char == "-":
            return self.scan_number()
        elif char in "tfn":
            return self.scan_literal()
        else:
            raise JSONDecodeError("Expecting value", self.text, self.pos)


def _is_punct(token: JsonToken | None, value: str) -> bool:
    return (
        token is not None
        and token.type is TokenType.PUNCTUATION
        and token.value == value
    )


class JsonEventReader:
    """
    Pull event source over an in-memory JSON document.

    Validates the grammar as it goes and raises ``JSONDecodeError`` at the
    first malformed token, so a binder never sees an event sequence that
    does not correspond to well-formed JSON. Trailing content after the
    root value is reported as ``Extra data`` when the end of stream is
    requested.
    """

    def __init__(self, text: str):
        self.lexer = JsonLexer(text)
        self.state = ParseState.START
        self._containers: list[str] = []
        self._comma_pos: Position = 0
        self._peeked: Event | None = None
        self._key_cache: dict[str, str] = {}

    @property
    def text(self) -> str:
        return self.lexer.text

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

    def _error(self, msg: str, token: JsonToken | None) -> JSONDecodeError:
        pos = token.start if token is not None else self.lexer.pos
        return JSONDecodeError(msg, self.text, pos)

    def _intern_key(self, token: JsonToken) -> str:
        """
        Decodes an object key, reusing the string for repeated keys.

        Arrays of records repeat the same keys many times over.
        """
        key = self._key_cache.get(token.value)
        if key is None:
            key = decode_string(token.value, self.text, token.start)
            self._key_cache[token.value] = key
        return key

    def _after_value(self) -> None:
        if not self._containers:
            self.state = ParseState.END
        elif self._containers[-1] == "{":
            self.state = ParseState.OBJECT_COMMA
        else:
            self.state = ParseState.ARRAY_COMMA

    def _close(self, token: JsonToken) -> Event:
        opener = self._containers.pop()
        self._after_value()
        kind = (
            EventKind.OBJECT_END if opener == "{" else EventKind.ARRAY_END
        )
        return Event(kind, None, token.start)

    def _value_event(self, token: JsonToken | None) -> Event:
        """Turns the token at a value position into its event."""
        if token is None:
            raise self._error("Expecting value", None)

        if token.type is TokenType.PUNCTUATION:
            if token.value == "{":
                self._containers.append("{")
                self.state = ParseState.OBJECT_START
                return Event(EventKind.OBJECT_START, None, token.start)
            if token.value == "[":
                self._containers.append("[")
                self.state = ParseState.ARRAY_START
                return Event(EventKind.ARRAY_START, None, token.start)
            raise self._error("Expecting value", token)

        if token.type is TokenType.STRING:
            event = Event(
                EventKind.STRING,
                decode_string(token.value, self.text, token.start),
                token.start,
            )
        elif token.type is TokenType.NUMBER:
            kind, value = classify_number(token.value)
            event = Event(kind, value, token.start)
        elif token.value == "null":
            event = Event(EventKind.NULL, None, token.start)
        else:
            event = Event(EventKind.BOOLEAN, token.value == "true", token.start)

        self._after_value()
        return event

    def _read_event(self) -> Event:  # noqa: PLR0911
        state = self.state

        if state is ParseState.END:
            self.lexer.skip_whitespace()
            if self.lexer.pos < self.lexer.length:
                raise JSONDecodeError("Extra data", self.text, self.lexer.pos)
            return Event(EventKind.END_OF_STREAM, None, self.lexer.pos)

        token = self.lexer.next_token()

        if state is ParseState.START:
            if token is None:
                self.state = ParseState.END
                return Event(EventKind.END_OF_STREAM, None, self.lexer.pos)
            return self._value_event(token)

        if state in (ParseState.OBJECT_START, ParseState.OBJECT_KEY):
            if _is_punct(token, "}"):
                if state is ParseState.OBJECT_KEY:
                    raise JSONDecodeError(
                        "Illegal trailing comma before end of object",
                        self.text,
                        self._comma_pos,
                    )
                assert token is not None
                return self._close(token)
            if token is None or token.type is not TokenType.STRING:
                raise self._error(
                    "Expecting property name enclosed in double quotes", token
                )
            self.state = ParseState.OBJECT_COLON
            return Event(EventKind.STRING, self._intern_key(token), token.start)

        if state is ParseState.OBJECT_COLON:
            if not _is_punct(token, ":"):
                raise self._error("Expecting ':' delimiter", token)
            return self._value_event(self.lexer.next_token())

        if state in (ParseState.OBJECT_COMMA, ParseState.ARRAY_COMMA):
            closer = "}" if state is ParseState.OBJECT_COMMA else "]"
            if _is_punct(token, closer):
                assert token is not None
                return self._close(token)
            if not _is_punct(token, ","):
                raise self._error("Expecting ',' delimiter", token)
            assert token is not None
            self._comma_pos = token.start
            self.state = (
                ParseState.OBJECT_KEY
                if state is ParseState.OBJECT_COMMA
                else ParseState.ARRAY_VALUE
            )
            return self._read_event()

        # ARRAY_START or ARRAY_VALUE
        if _is_punct(token, "]"):
            if state is ParseState.ARRAY_VALUE:
                raise JSONDecodeError(
                    "Illegal trailing comma before end of array",
                    self.text,
                    self._comma_pos,
                )
            assert token is not None
            return self._close(token)
        return self._value_event(token)
