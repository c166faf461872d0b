"""Parameterized queries: a `{text, values}` pair validated lazily for the driver."""

# Standard Library
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

# Local
from .errors import ParameterizedQueryError, PgQueryError, message_gap
from .query_file import QueryFile

logger = logging.getLogger(__name__)

TEXT_ERROR = "Property 'text' must be a non-empty text string."
VALUES_ERROR = "Property 'values' must be an array or null/undefined."

FIELDS = ("text", "values", "binary", "row_mode")


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and len(value) > 0


def _is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _differs(old: Any, new: Any) -> bool:
    if old is new:
        return False
    # containers compare by identity, so reassigning a mutated list counts
    if type(old) is not type(new) or _is_array(new):
        return True
    return bool(old != new)


@dataclass(frozen=True)
class ParsedQuery:
    """Validated query, ready to be handed to the driver.

    `text` is the resolved SQL string. Only in a ParameterizedQueryError's
    partial result can it be something else, such as the unresolved QueryFile.
    """

    text: Any
    values: list | None = None
    binary: bool | None = None
    row_mode: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return the query as a dict, omitting absent fields."""

        data: dict[str, Any] = {"text": self.text}
        for name in ("values", "binary", "row_mode"):
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        return data

    def args(self) -> tuple:
        """Return positional arguments for asyncpg: (text, *values)."""

        return (self.text, *(self.values or ()))


@dataclass
class _QueryState:
    text: Any = None
    values: Any = None
    binary: Any = None
    row_mode: Any = None
    changed: bool = True
    result: ParsedQuery | ParameterizedQueryError | None = None
    error: ParameterizedQueryError | None = None


class ParameterizedQuery:
    """A reusable parameterized query.

    Accepts either `(text, values)` or a single mapping with `text`, `values`,
    `binary` and `row_mode` (`rowMode` is accepted too). All properties can be
    changed after construction. Nothing here raises on invalid input; parse()
    returns a ParameterizedQueryError instead and query methods reject with it.

    Examples:
        find_user = ParameterizedQuery("SELECT * FROM users WHERE id = $1", [123])

        add_user = ParameterizedQuery("INSERT INTO users(name, age) VALUES($1, $2)")
        add_user.values = ["John", 30]
    """

    def __init__(self, text: Any = None, values: Any = None) -> None:
        self._state = _QueryState(text=text, values=values)
        if isinstance(text, Mapping) and "text" in text:
            self._state.text = text.get("text")
            self._state.values = text.get("values")
            self._state.binary = text.get("binary")
            self._state.row_mode = text.get("row_mode", text.get("rowMode"))

    def set_field(self, name: str, value: Any) -> None:
        """Assign a field, marking the query as changed when the value differs.

        Setting `values` to None or a list/tuple updates the cached result in
        place instead, so the next parse() can stay on the fast path.
        """

        if name not in FIELDS:
            raise AttributeError(f"ParameterizedQuery has no field '{name}'")

        state = self._state
        if not _differs(getattr(state, name), value):
            return
        setattr(state, name, value)

        if name == "values" and (value is None or _is_array(value)):
            if isinstance(state.result, ParsedQuery):
                state.result = replace(state.result, values=list(value) if value else None)
            return
        state.changed = True

    @property
    def text(self) -> Any:
        """A non-empty query string or a QueryFile."""

        return self._state.text

    @text.setter
    def text(self, value: Any) -> None:
        self.set_field("text", value)

    @property
    def values(self) -> Any:
        """Query formatting values: a list/tuple or None."""

        return self._state.values

    @values.setter
    def values(self, value: Any) -> None:
        self.set_field("values", value)

    @property
    def binary(self) -> Any:
        """Activates binary result mode. The default is text mode."""

        return self._state.binary

    @binary.setter
    def binary(self, value: Any) -> None:
        self.set_field("binary", value)

    @property
    def row_mode(self) -> Any:
        """Set to 'array' to receive rows as arrays of values instead of objects."""

        return self._state.row_mode

    @row_mode.setter
    def row_mode(self, value: Any) -> None:
        self.set_field("row_mode", value)

    @property
    def changed(self) -> bool:
        return self._state.changed

    @property
    def error(self) -> ParameterizedQueryError | None:
        """The cached ParameterizedQueryError when in an error state, else None."""

        return self._state.error

    def parse(self) -> ParsedQuery | ParameterizedQueryError:
        """Validate the query.

        Returns:
            ParsedQuery | ParameterizedQueryError: The memoized ParsedQuery when
            nothing changed and `text` is not a QueryFile. Otherwise the freshly
            validated ParsedQuery, or an error carrying the first problem found
            and the partial result.
        """

        state = self._state
        qf = state.text if isinstance(state.text, QueryFile) else None

        if not state.changed and qf is None and state.result is not None:
            return state.result

        state.changed = True
        state.error = None
        errors: list[str | PgQueryError] = []

        if qf is not None:
            qf.prepare()
            if qf.error is not None:
                text = state.text
                errors.append(qf.error)
            else:
                text = qf.query
        else:
            text = state.text

        if not _is_text(text):
            errors.append(TEXT_ERROR)

        values = None
        if state.values is not None:
            if _is_array(state.values):
                if state.values:
                    values = list(state.values)
            else:
                errors.append(VALUES_ERROR)

        result = ParsedQuery(
            text=text,
            values=values,
            binary=state.binary,
            row_mode=state.row_mode,
        )

        if errors:
            error = ParameterizedQueryError(errors[0], result)
            logger.debug("Parameterized query is invalid: %s", error.message)
            state.error = error
            state.result = error
            return error

        state.changed = False
        state.result = result
        return result

    def to_string(self, level: int = 0) -> str:
        """Return a multi-line string that represents the current state.

        Args:
            level: Nested output level, to provide visual offset.
        """

        level = max(int(level), 0)
        gap = message_gap(level + 1)
        parsed = self.parse()
        lines = ["ParameterizedQuery {"]
        if isinstance(parsed, ParameterizedQueryError):
            parsed = parsed.result
        if _is_text(parsed.text):
            lines.append(f'{gap}text: "{parsed.text}"')
        if self.values is not None:
            lines.append(f"{gap}values: {json.dumps(self.values, default=str)}")
        if self.binary is not None:
            lines.append(f"{gap}binary: {json.dumps(self.binary, default=str)}")
        if self.row_mode is not None:
            lines.append(f"{gap}rowMode: {json.dumps(self.row_mode, default=str)}")
        if self.error is not None:
            lines.append(f"{gap}error: {self.error.to_string(level + 1)}")
        lines.append(f"{message_gap(level)}}}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"ParameterizedQuery(text={self.text!r}, values={self.values!r})"
