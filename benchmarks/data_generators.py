"""
Test documents and record types for binding benchmarks.

Creates JSON documents shaped like API responses, paired with the record
types they bind into:
- Catalog responses of different sizes (small/large)
- Documents dominated by keys no record declares
- Deeply nested record trees
- String-heavy records with escape sequences
"""

import json
import random
import string
from dataclasses import dataclass
from dataclasses import field
from typing import Any

_ESCAPE_PROBABILITY = 0.3


@dataclass
class Author:
    name: str = ""
    born: int = 0


@dataclass
class Edition:
    isbn: str = ""
    title: str = ""
    price: float = 0.0
    pages: int = 0
    in_print: bool = False
    authors: list[Author] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)


@dataclass
class Catalog:
    kind: str = ""
    total: int = 0
    editions: list[Edition] = field(default_factory=list)


@dataclass
class Tree:
    level: int = 0
    label: str = ""
    children: list["Tree"] = field(default_factory=list)
    first: "Tree | None" = None


@dataclass
class Note:
    description: str = ""
    content: str = ""
    path: str = ""


@dataclass
class Notebook:
    notes: list[Note] = field(default_factory=list)
    lines: list[str] = field(default_factory=list)


# Record type each generated document binds into
RECORD_TYPES: dict[str, type] = {
    "small_catalog": Catalog,
    "large_catalog": Catalog,
    "unknown_heavy": Catalog,
    "nested_tree": Tree,
    "string_heavy": Notebook,
}


def generate_test_data(data_type: str) -> str:
    """Generates a JSON document for the specified benchmark case."""
    generators = {
        "small_catalog": lambda: _generate_catalog(3),
        "large_catalog": lambda: _generate_catalog(300),
        "unknown_heavy": _generate_unknown_heavy,
        "nested_tree": _generate_nested_tree,
        "string_heavy": _generate_string_heavy,
    }

    if data_type not in generators:
        raise ValueError(f"Unknown data type: {data_type}")

    random.seed(data_type)
    return generators[data_type]()


def build_from_dict(tp: type, data: dict[str, Any]) -> Any:
    """
    Builds records from an already decoded dict, the way hand-written code
    would after ``json.loads``.
    """
    if tp is Catalog:
        return Catalog(
            kind=data.get("kind", ""),
            total=data.get("total", 0),
            editions=[_edition(e) for e in data.get("editions", [])],
        )
    if tp is Tree:
        return _tree(data)
    if tp is Notebook:
        return Notebook(
            notes=[
                Note(n["description"], n["content"], n["path"])
                for n in data.get("notes", [])
            ],
            lines=data.get("lines", []),
        )
    raise ValueError(f"No builder for {tp.__name__}")


def _edition(data: dict[str, Any]) -> Edition:
    return Edition(
        isbn=data.get("isbn", ""),
        title=data.get("title", ""),
        price=float(data.get("price", 0.0)),
        pages=data.get("pages", 0),
        in_print=data.get("in_print", False),
        authors=[
            Author(a.get("name", ""), a.get("born", 0))
            for a in data.get("authors", [])
        ],
        tags=data.get("tags", []),
    )


def _tree(data: dict[str, Any]) -> Tree:
    first = data.get("first")
    return Tree(
        level=data.get("level", 0),
        label=data.get("label", ""),
        children=[_tree(c) for c in data.get("children", [])],
        first=_tree(first) if first is not None else None,
    )


def _edition_dict(i: int) -> dict[str, Any]:
    return {
        "isbn": f"978{random.randint(1000000000, 9999999999)}",
        "title": f"{_random_string(12)} {_random_string(8)}",
        "price": round(random.uniform(1.0, 200.0), 2),
        "pages": random.randint(40, 1200),
        "in_print": random.choice([True, False]),
        "authors": [
            {"name": _random_string(10), "born": random.randint(1900, 2000)}
            for _ in range(random.randint(1, 3))
        ],
        "tags": [_random_string(6) for _ in range(4)],
        "sequence": i,
    }


def _generate_catalog(count: int) -> str:
    """Generates a catalog response with ``count`` editions."""
    data = {
        "kind": "catalog#editions",
        "total": count,
        "editions": [_edition_dict(i) for i in range(count)],
    }
    return json.dumps(data)


def _generate_unknown_heavy() -> str:
    """
    Generates a catalog where most of every edition is undeclared data.
    """
    editions = []
    for i in range(100):
        edition = _edition_dict(i)
        edition["saleInfo"] = {
            "country": random.choice(["US", "GB", "DE", "JP"]),
            "offers": [
                {
                    "finskyOfferType": random.randint(0, 3),
                    "listPrice": {"amountInMicros": random.randint(1, 10**9)},
                    "retailPrice": {"currencyCode": "USD"},
                }
                for _ in range(3)
            ],
        }
        edition["accessInfo"] = {
            "viewability": "PARTIAL",
            "epub": {"isAvailable": True, "acsTokenLink": _random_string(40)},
            "pdf": {"isAvailable": False},
        }
        edition["searchInfo"] = {"textSnippet": _random_string(120)}
        editions.append(edition)

    return json.dumps(
        {"kind": "catalog#editions", "total": 100, "editions": editions}
    )


def _generate_nested_tree() -> str:
    """Generates a deeply nested record tree."""

    def create_tree(depth: int) -> dict[str, Any]:
        if depth <= 0:
            return {"level": 0, "label": _random_string(10)}

        return {
            "level": depth,
            "label": _random_string(15),
            "children": [create_tree(depth - 1) for _ in range(3)],
            "first": create_tree(depth - 1),
        }

    return json.dumps(create_tree(7))


def _generate_string_heavy() -> str:
    """Generates records with many string escape sequences."""

    def create_escaped_string() -> str:
        chars = []
        for _ in range(50):
            if random.random() < _ESCAPE_PROBABILITY:
                chars.append(
                    random.choice(
                        ['\\"', "\\\\", "\\/", "\\b", "\\f", "\\n", "\\r", "\\t"]
                    )
                )
            else:
                chars.append(
                    random.choice(string.ascii_letters + string.digits + " ")
                )
        return "".join(chars)

    notes = ",".join(
        '{"description": "%s", "content": "%s", "path": "%s"}'
        % (
            create_escaped_string(),
            'Content with \\n newlines \\t tabs and \\" quotes',
            f"C:\\\\Users\\\\{_random_string(8)}\\\\file_{i}.txt",
        )
        for i in range(40)
    )
    lines = ",".join(
        f'"Unicode: \\u{random.randint(0x00A0, 0x07FF):04x}"'
        for _ in range(60)
    )
    return f'{{"notes": [{notes}], "lines": [{lines}]}}'


def _random_string(length: int) -> str:
    """Generates a random string of specified length."""
    return "".join(random.choices(string.ascii_letters, k=length))
