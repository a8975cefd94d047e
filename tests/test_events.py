"""
Event reader tests.

Validates the flat event sequence produced for well-formed documents, the
classification of numeric literals, and that plain-value materialization
agrees with the standard library decoder on the JSON_checker pass files.
"""

import json
from typing import Any

import pytest

import jbind
from jbind._events import classify_number
from jbind._events import decode_string

from .conftest import JsonTestCase

K = jbind.EventKind


def kinds_and_values(text: str) -> list[tuple[jbind.EventKind, Any]]:
    reader = jbind.JsonEventReader(text)
    out = []
    while True:
        event = reader.next_event()
        out.append((event.kind, event.value))
        if event.kind is K.END_OF_STREAM:
            return out


def test_object_event_sequence() -> None:
    """
    Validates keys arrive as ordinary STRING events ahead of their values.
    """
    events = kinds_and_values(
        '{"a": "x", "b": [1, 2.5, true, null], "c": {}}'
    )

    assert events == [
        (K.OBJECT_START, None),
        (K.STRING, "a"),
        (K.STRING, "x"),
        (K.STRING, "b"),
        (K.ARRAY_START, None),
        (K.INTEGER, 1),
        (K.DECIMAL, 2.5),
        (K.BOOLEAN, True),
        (K.NULL, None),
        (K.ARRAY_END, None),
        (K.STRING, "c"),
        (K.OBJECT_START, None),
        (K.OBJECT_END, None),
        (K.OBJECT_END, None),
        (K.END_OF_STREAM, None),
    ]


def test_scalar_document_events() -> None:
    assert kinds_and_values(" false ") == [
        (K.BOOLEAN, False),
        (K.END_OF_STREAM, None),
    ]


@pytest.mark.parametrize("text", ["", "   ", "\r\n\t"])
def test_empty_document_is_end_of_stream(text: str) -> None:
    reader = jbind.JsonEventReader(text)

    assert reader.next_event().kind is K.END_OF_STREAM
    assert reader.next_event().kind is K.END_OF_STREAM


def test_end_of_stream_repeats() -> None:
    reader = jbind.JsonEventReader("[]")
    reader.next_event()
    reader.next_event()

    for _ in range(3):
        assert reader.next_event().kind is K.END_OF_STREAM


def test_event_positions() -> None:
    reader = jbind.JsonEventReader('{"key": 12}')
    positions = [reader.next_event().pos for _ in range(4)]

    assert positions == [0, 1, 8, 10]


def test_peek_does_not_consume() -> None:
    reader = jbind.JsonEventReader("[1, 2]")
    assert reader.next_event().kind is K.ARRAY_START

    peeked = reader.peek_event()
    assert peeked == reader.peek_event()
    assert reader.next_event() == peeked
    assert reader.next_event().value == 2


def test_repeated_keys_are_interned() -> None:
    """
    Validates repeated keys reuse one string object.
    """
    reader = jbind.JsonEventReader('[{"name": 1}, {"name": 2}]')
    keys = []
    event = reader.next_event()
    while event.kind is not K.END_OF_STREAM:
        if event.kind is K.STRING:
            keys.append(event.value)
        event = reader.next_event()

    assert keys == ["name", "name"]
    assert keys[0] is keys[1]


@pytest.mark.parametrize(
    "raw,kind,value",
    [
        ("0", K.INTEGER, 0),
        ("-0", K.INTEGER, 0),
        ("42", K.INTEGER, 42),
        ("9223372036854775807", K.INTEGER, 9223372036854775807),
        ("-9223372036854775808", K.INTEGER, -9223372036854775808),
        ("9223372036854775808", K.BIG_NUMBER, "9223372036854775808"),
        ("-9223372036854775809", K.BIG_NUMBER, "-9223372036854775809"),
        ("12345678901234567890123", K.BIG_NUMBER, "12345678901234567890123"),
        ("1.5", K.DECIMAL, 1.5),
        ("1e3", K.DECIMAL, 1000.0),
        ("-2.5E-3", K.DECIMAL, -0.0025),
        ("1.0", K.DECIMAL, 1.0),
        ("1e400", K.BIG_NUMBER, "1E+400"),
        ("-1.5e999", K.BIG_NUMBER, "-1.5E+999"),
        ("1.0e400", K.BIG_NUMBER, "1.0E+400"),
    ],
)
def test_classify_number(raw: str, kind: jbind.EventKind, value: Any) -> None:
    """
    Validates range-based choice between INTEGER, DECIMAL and BIG_NUMBER.
    """
    assert classify_number(raw) == (kind, value)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ('"plain"', "plain"),
        ('"a\\"b"', 'a"b'),
        ('"\\\\ \\/ \\b\\f\\n\\r\\t"', "\\ / \b\f\n\r\t"),
        ('"\\u00e9"', "é"),
        ('"\\ud83d\\ude00"', "\U0001f600"),
        ('"\\ud800"', "\ud800"),
        ('"\\ud800x"', "\ud800x"),
        ('"\\ud800\\u0041"', "\ud800A"),
    ],
)
def test_decode_string(raw: str, expected: str) -> None:
    assert decode_string(raw) == expected


def test_invalid_escape_position() -> None:
    with pytest.raises(jbind.JSONDecodeError) as exc_info:
        decode_string('"ab\\q"', '["ab\\q"]', 1)

    assert exc_info.value.pos == 4


def test_control_character_position() -> None:
    with pytest.raises(jbind.JSONDecodeError) as exc_info:
        kinds_and_values('["ab\ncd"]')

    assert exc_info.value.msg == "Invalid control character at"
    assert exc_info.value.pos == 4


def test_pass_cases_match_stdlib(json_pass_cases: list[JsonTestCase]) -> None:
    """
    Validates generic materialization agrees with json.loads.
    """
    for case in json_pass_cases:
        assert jbind.loads(case.input_data, Any) == json.loads(
            case.input_data
        ), case.description


def test_lexer_tokens() -> None:
    lexer = jbind.JsonLexer(' {"a": -1.5e2, "b": null}')
    tokens = []
    token = lexer.next_token()
    while token is not None:
        tokens.append((token.type.value, token.value))
        token = lexer.next_token()

    assert tokens == [
        ("punctuation", "{"),
        ("string", '"a"'),
        ("punctuation", ":"),
        ("number", "-1.5e2"),
        ("punctuation", ","),
        ("string", '"b"'),
        ("punctuation", ":"),
        ("literal", "null"),
        ("punctuation", "}"),
    ]
