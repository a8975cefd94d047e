"""Exception hierarchy shared by the lexer, event sources, and binders."""

from typing import Any, TypeAlias

Position: TypeAlias = int


class BindError(Exception):
    """Base class for every failure raised while binding a JSON document."""


class JSONDecodeError(BindError, ValueError):
    """
    Handles JSON lexing failures with precise position and context information.

    Error state containing position, line/column numbers, and surrounding
    context to help users identify and fix JSON syntax issues.
    """

    def __init__(self, msg: str, doc: str = "", pos: Position = 0) -> None:
        if not isinstance(msg, str):
            raise TypeError("msg must be a string")
        if not isinstance(pos, int) or pos < 0:
            raise ValueError("pos must be a non-negative integer")

        self.msg = msg
        self.doc = doc
        self.pos = pos

        # Compute line and column numbers from position
        self.lineno = doc.count("\n", 0, pos) + 1 if doc else 1
        self.colno = pos - doc.rfind("\n", 0, pos) if doc else pos + 1

        super().__init__(f"{msg} at line {self.lineno}, column {self.colno}")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.msg, self.doc, self.pos)


LexicalError = JSONDecodeError


class ConstructionError(BindError, TypeError):
    """
    Raised when a declared type cannot produce a default instance.

    Covers record types whose constructor needs arguments, frozen records
    that cannot be populated in place, and root types that cannot hold the
    document's top-level container.
    """


class FieldTypeMismatch(BindError, TypeError):
    """
    Raised in strict mode when a value's event kind does not fit its field.

    Attributes identify the offending field, its declared type, and the kind
    of event that arrived for it.
    """

    def __init__(self, field: str, declared: Any, event_kind: Any) -> None:
        self.field = field
        self.declared = declared
        self.event_kind = event_kind
        declared_name = getattr(declared, "__name__", repr(declared))
        kind_name = getattr(event_kind, "name", str(event_kind))
        super().__init__(
            f"Field {field!r} declared as {declared_name} "
            f"cannot accept a {kind_name} value"
        )

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.field, self.declared, self.event_kind)


class NestingTooDeep(BindError):
    """Raised when a document nests containers deeper than ``max_depth``."""

    def __init__(self, depth: int, max_depth: int) -> None:
        self.depth = depth
        self.max_depth = max_depth
        super().__init__(
            f"Nesting depth {depth} exceeds max_depth of {max_depth}"
        )

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.depth, self.max_depth)
