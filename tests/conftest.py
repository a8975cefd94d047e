"""
Pytest configuration and shared fixtures for jbind tests.

Provides the record types the binding tests populate, immutable JSON test
case containers, and the json.org JSON_checker corpus.
"""

from dataclasses import dataclass
from dataclasses import field
from decimal import Decimal
from typing import Any

import pytest

from jbind import BigNumber


@dataclass(frozen=True)
class JsonTestCase:
    """
    Immutable container for JSON test case data.

    Holds test input and expected behavior for consistent test execution.
    """

    description: str
    input_data: str
    should_fail: bool = False
    expected_output: Any = None
    skip_reason: str = ""


@dataclass
class VolumeInfo:
    title: str = ""


@dataclass
class Volume:
    id: str = ""
    volumeInfo: VolumeInfo | None = None


@dataclass
class Response:
    kind: str = ""
    totalItems: int = 0
    items: list[Volume] = field(default_factory=list)


@dataclass
class Scalars:
    text: str = ""
    count: int = 0
    ratio: float = 0.0
    flag: bool = False
    big: BigNumber = BigNumber("")


@dataclass
class Amounts:
    exact: Decimal = Decimal(0)
    label: str = ""
    digits: BigNumber = BigNumber("")


class Account:
    """Plain annotated class, no dataclass machinery."""

    owner: str
    balance: int = 0
    tags: list[str]


@dataclass
class Leaf:
    value: str = ""


@dataclass
class Branch:
    name: str = ""
    leaf: Leaf | None = None


@dataclass
class Trunk:
    name: str = ""
    branch: Branch | None = None


@dataclass
class Node:
    name: str = ""
    children: list["Node"] = field(default_factory=list)


@dataclass
class Bag:
    payload: Any = None
    extra: dict[str, Any] = field(default_factory=dict)
    values: list = field(default_factory=list)  # type: ignore[type-arg]
    either: int | str = 0


@dataclass
class Grid:
    rows: list[list[int]] = field(default_factory=list)
    names: list[str] = field(default_factory=list)
    counts: list[int] = field(default_factory=list)
    ratios: list[float] = field(default_factory=list)


@dataclass
class NeedsArgs:
    value: int


@dataclass(frozen=True)
class FrozenRecord:
    value: int = 0


@dataclass
class HoldsNeedsArgs:
    inner: NeedsArgs | None = None


# https://developers.google.com/books/docs/v1/using (trimmed volumes response)
VOLUMES_JSON = """
{
 "kind": "books#volumes",
 "totalItems": 1,
 "items": [
  {
   "kind": "books#volume",
   "id": "yZ1APgAACAAJ",
   "etag": "9jBxdPWe5Ew",
   "selfLink": "https://www.googleapis.com/books/v1/volumes/yZ1APgAACAAJ",
   "volumeInfo": {
    "title": "A theory of justice",
    "authors": ["John Rawls"],
    "publishedDate": "1999",
    "industryIdentifiers": [
     {"type": "ISBN_10", "identifier": "0674000781"},
     {"type": "ISBN_13", "identifier": "9780674000780"}
    ],
    "pageCount": 538,
    "printType": "BOOK",
    "averageRating": 4.0,
    "ratingsCount": 7,
    "contentVersion": "preview-1.0.0",
    "language": "en"
   },
   "saleInfo": {"country": "US", "saleability": "NOT_FOR_SALE", "isEbook": false},
   "accessInfo": {"viewability": "NO_PAGES", "embeddable": false, "publicDomain": false}
  }
 ]
}
"""


@pytest.fixture
def volumes_json() -> str:
    """Books API response with many fields the records do not declare."""
    return VOLUMES_JSON


@pytest.fixture
def json_fail_cases() -> list[JsonTestCase]:
    """
    Provides JSON strings that must fail lexing per JSON specification.

    These test cases from json.org JSON_checker ensure strict standards
    compliance and proper error handling for malformed JSON.
    """
    fail_docs = [
        # https://json.org/JSON_checker/test/fail1.json
        '"A JSON payload should be an object or array, not a string."',
        # https://json.org/JSON_checker/test/fail2.json
        '["Unclosed array"',
        # https://json.org/JSON_checker/test/fail3.json
        '{unquoted_key: "keys must be quoted"}',
        # https://json.org/JSON_checker/test/fail4.json
        '["extra comma",]',
        # https://json.org/JSON_checker/test/fail5.json
        '["double extra comma",,]',
        # https://json.org/JSON_checker/test/fail6.json
        '[   , "<-- missing value"]',
        # https://json.org/JSON_checker/test/fail7.json
        '["Comma after the close"],',
        # https://json.org/JSON_checker/test/fail8.json
        '["Extra close"]]',
        # https://json.org/JSON_checker/test/fail9.json
        '{"Extra comma": true,}',
        # https://json.org/JSON_checker/test/fail10.json
        '{"Extra value after close": true} "misplaced quoted value"',
        # https://json.org/JSON_checker/test/fail11.json
        '{"Illegal expression": 1 + 2}',
        # https://json.org/JSON_checker/test/fail12.json
        '{"Illegal invocation": alert()}',
        # https://json.org/JSON_checker/test/fail13.json
        '{"Numbers cannot have leading zeroes": 013}',
        # https://json.org/JSON_checker/test/fail14.json
        '{"Numbers cannot be hex": 0x14}',
        # https://json.org/JSON_checker/test/fail15.json
        '["Illegal backslash escape: \\x15"]',
        # https://json.org/JSON_checker/test/fail16.json
        "[\\naked]",
        # https://json.org/JSON_checker/test/fail17.json
        '["Illegal backslash escape: \\017"]',
        # https://json.org/JSON_checker/test/fail18.json
        '[[[[[[[[[[[[[[[[[[[["Too deep"]]]]]]]]]]]]]]]]]]]]',
        # https://json.org/JSON_checker/test/fail19.json
        '{"Missing colon" null}',
        # https://json.org/JSON_checker/test/fail20.json
        '{"Double colon":: null}',
        # https://json.org/JSON_checker/test/fail21.json
        '{"Comma instead of colon", null}',
        # https://json.org/JSON_checker/test/fail22.json
        '["Colon instead of comma": false]',
        # https://json.org/JSON_checker/test/fail23.json
        '["Bad value", truth]',
        # https://json.org/JSON_checker/test/fail24.json
        "['single quote']",
        # https://json.org/JSON_checker/test/fail25.json
        '["\ttab\tcharacter\tin\tstring\t"]',
        # https://json.org/JSON_checker/test/fail26.json
        '["tab\\   character\\   in\\  string\\  "]',
        # https://json.org/JSON_checker/test/fail27.json
        '["line\nbreak"]',
        # https://json.org/JSON_checker/test/fail28.json
        '["line\\\nbreak"]',
        # https://json.org/JSON_checker/test/fail29.json
        "[0e]",
        # https://json.org/JSON_checker/test/fail30.json
        "[0e+]",
        # https://json.org/JSON_checker/test/fail31.json
        "[0e+-1]",
        # https://json.org/JSON_checker/test/fail32.json
        '{"Comma instead if closing brace": true,',
        # https://json.org/JSON_checker/test/fail33.json
        '["mismatch"}',
        # https://code.google.com/archive/p/simplejson/issues/3
        '["A\u001fZ control characters in string"]',
    ]

    # Cases the event reader accepts on purpose
    skips = {
        1: "scalar roots are lexically valid; the binder rejects them",
        18: "nesting is limited by BindConfig.max_depth, not the lexer",
    }

    return [
        JsonTestCase(
            description=f"fail{idx + 1}.json",
            input_data=doc,
            should_fail=True,
            skip_reason=skips.get(idx + 1, ""),
        )
        for idx, doc in enumerate(fail_docs)
    ]


@pytest.fixture
def json_pass_cases() -> list[JsonTestCase]:
    """
    Provides JSON strings that must lex successfully per JSON specification.
    """
    return [
        JsonTestCase(
            description="pass1.json - complex nested structure",
            input_data="""[
    "JSON Test Pattern pass1",
    {"object with 1 member":["array with 1 element"]},
    {},
    [],
    -42,
    true,
    false,
    null,
    {
        "integer": 1234567890,
        "real": -9876.543210,
        "e": 0.123456789e-12,
        "E": 1.234567890E+34,
        "":  23456789012E66,
        "zero": 0,
        "one": 1,
        "space": " ",
        "quote": "\\"",
        "backslash": "\\\\",
        "controls": "\\b\\f\\n\\r\\t",
        "slash": "/ & \\/",
        "alpha": "abcdefghijklmnopqrstuvwyz",
        "ALPHA": "ABCDEFGHIJKLMNOPQRSTUVWYZ",
        "digit": "0123456789",
        "0123456789": "digit",
        "special": "`1~!@#$%^&*()_+-={':[,]}|;.</>?",
        "hex": "\\u0123\\u4567\\u89AB\\uCDEF\\uabcd\\uef4A",
        "true": true,
        "false": false,
        "null": null,
        "array":[  ],
        "object":{  },
        "address": "50 St. James Street",
        "url": "https://www.JSON.org/",
        "comment": "// /* <!-- --",
        "# -- --> */": " ",
        " s p a c e d " :[1,2 , 3

,

4 , 5        ,          6           ,7        ],"compact":[1,2,3,4,5,6,7],
        "jsontext": "{\\"object with 1 member\\":[\\"array with 1 element\\"]}"
    }
]""",
        ),
        JsonTestCase(
            description="pass2.json - deep nesting",
            input_data='[[[[[[[[[[[[[[[[[[["Not too deep"]]]]]]]]]]]]]]]]]]]',
        ),
        JsonTestCase(
            description="pass3.json - simple object",
            input_data='{"JSON Test Pattern pass3": {"The outermost value": "must be an object or array.", "In this test": "It is an object."}}',
        ),
    ]
