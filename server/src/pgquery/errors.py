"""Typed failure objects for query files, parameterized queries and results."""

# Standard Library
import json
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

GAP = "    "


def message_gap(level: int) -> str:
    """Return the indentation used for nested diagnostic output."""

    return GAP * max(level, 0)


def _render(value: Any) -> str:
    try:
        return json.dumps(value, default=str)
    except (TypeError, ValueError):
        return repr(value)


class PgQueryError(Exception):
    """Base class for all pgquery errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_string(self, level: int = 0) -> str:
        return f'{type(self).__name__} {{\n{message_gap(level + 1)}message: "{self.message}"\n{message_gap(level)}}}'

    def __str__(self) -> str:
        return self.to_string()


class QueryFileError(PgQueryError):
    """Reading or inspecting a SQL file failed.

    Args:
        message: Human-readable description.
        file: Path of the SQL file.
        options: Options the QueryFile was built with.
        error: Underlying OSError, when there is one.
    """

    def __init__(
        self,
        message: str,
        file: str,
        options: Any = None,
        error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.file = file
        self.options = options
        self.error = error

    def to_string(self, level: int = 0) -> str:
        gap0 = message_gap(level)
        gap1 = message_gap(level + 1)
        lines = [
            "QueryFileError {",
            f'{gap1}message: "{self.message}"',
            f'{gap1}file: "{self.file}"',
        ]
        if self.options is not None:
            lines.append(f"{gap1}options: {_render(self.options.model_dump())}")
        lines.append(f"{gap0}}}")
        return "\n".join(lines)


@dataclass(frozen=True)
class ErrorPosition:
    """Location of a parse failure inside a SQL file."""

    offset: int
    line: int
    column: int


class SQLParseError(PgQueryError):
    """Minification of a SQL file failed."""

    def __init__(self, message: str, file: str | None, position: ErrorPosition) -> None:
        super().__init__(message)
        self.file = file
        self.position = position

    def to_string(self, level: int = 0) -> str:
        gap0 = message_gap(level)
        gap1 = message_gap(level + 1)
        gap2 = message_gap(level + 2)
        lines = [
            "SQLParseError {",
            f'{gap1}message: "{self.message}"',
            f"{gap1}position: {{",
            f"{gap2}line: {self.position.line}",
            f"{gap2}column: {self.position.column}",
            f"{gap1}}}",
        ]
        if self.file is not None:
            lines.insert(2, f'{gap1}file: "{self.file}"')
        lines.append(f"{gap0}}}")
        return "\n".join(lines)


class ParameterizedQueryError(PgQueryError):
    """A ParameterizedQuery failed validation.

    `result` holds the partially built ParsedQuery for diagnostics, and
    `error` the QueryFileError/SQLParseError that caused the failure, if any.
    """

    def __init__(self, message: str | PgQueryError, result: Any = None) -> None:
        error = message if isinstance(message, PgQueryError) else None
        super().__init__(error.message if error else message)
        self.result = result
        self.error = error

    def to_string(self, level: int = 0) -> str:
        gap0 = message_gap(level)
        gap1 = message_gap(level + 1)
        gap2 = message_gap(level + 2)
        lines = ["ParameterizedQueryError {"]
        if self.error is not None:
            lines.append(f"{gap1}error: {self.error.to_string(level + 1)}")
        else:
            lines.append(f'{gap1}message: "{self.message}"')
        if self.result is not None:
            lines.append(f"{gap1}result: {{")
            text = self.result.text
            if isinstance(text, str):
                lines.append(f"{gap2}text: {_render(text)}")
            if self.result.values is not None:
                lines.append(f"{gap2}values: {_render(self.result.values)}")
            if self.result.binary is not None:
                lines.append(f"{gap2}binary: {_render(self.result.binary)}")
            if self.result.row_mode is not None:
                lines.append(f"{gap2}rowMode: {_render(self.result.row_mode)}")
            lines.append(f"{gap1}}}")
        lines.append(f"{gap0}}}")
        return "\n".join(lines)


class QueryResultErrorCode(IntEnum):
    """Reasons a result did not match the expected QueryResult mask."""

    NO_DATA = 0
    NOT_EMPTY = 1
    MULTIPLE = 2


class QueryResultError(PgQueryError):
    """The rows returned by a query do not match the requested mask."""

    def __init__(
        self,
        code: QueryResultErrorCode,
        message: str,
        query: str,
        received: int,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.query = query
        self.received = received

    def to_string(self, level: int = 0) -> str:
        gap0 = message_gap(level)
        gap1 = message_gap(level + 1)
        return "\n".join(
            [
                "QueryResultError {",
                f"{gap1}code: queryResultErrorCode.{self.code.name.lower()}",
                f'{gap1}message: "{self.message}"',
                f"{gap1}received: {self.received}",
                f"{gap1}query: {_render(self.query)}",
                f"{gap0}}}",
            ]
        )
