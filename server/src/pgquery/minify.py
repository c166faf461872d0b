"""SQL minification: strip comments and flatten a query into a single line."""

# Standard Library
import re

# Local
from .errors import ErrorPosition, SQLParseError

DOLLAR_TAG = re.compile(r"\$(?:[A-Za-z_][A-Za-z0-9_]*)?\$")
IDENTIFIER_CHAR = re.compile(r"[A-Za-z0-9_$]")


def _position(sql: str, offset: int) -> ErrorPosition:
    line_start = sql.rfind("\n", 0, offset) + 1
    return ErrorPosition(
        offset=offset,
        line=sql.count("\n", 0, offset) + 1,
        column=offset - line_start + 1,
    )


def _fail(message: str, sql: str, offset: int, file: str | None) -> SQLParseError:
    return SQLParseError(message, file, _position(sql, offset))


def _is_escape_string(sql: str, quote: int) -> bool:
    """Return True when the quote at `quote` opens an E'...' literal."""

    if quote == 0 or sql[quote - 1] not in "eE":
        return False
    return quote == 1 or not IDENTIFIER_CHAR.match(sql[quote - 2])


def _end_of_text(sql: str, start: int, escaped: bool) -> int:
    """Return the index just past the closing quote of a text literal, or -1."""

    i = start + 1
    length = len(sql)
    while i < length:
        ch = sql[i]
        if escaped and ch == "\\":
            i += 2
            continue
        if ch == "'":
            if i + 1 < length and sql[i + 1] == "'":
                i += 2
                continue
            return i + 1
        i += 1
    return -1


def _end_of_identifier(sql: str, start: int) -> int:
    i = start + 1
    length = len(sql)
    while i < length:
        if sql[i] == '"':
            if i + 1 < length and sql[i + 1] == '"':
                i += 2
                continue
            return i + 1
        i += 1
    return -1


def _flatten_text(literal: str, escaped: bool) -> str:
    """Turn a multi-line text literal into a single-line E'' literal."""

    body = literal[1:-1]
    if not escaped:
        body = body.replace("\\", "\\\\")
    lines = [line.rstrip() for line in body.split("\n")]
    flat = "\\n".join(lines)
    prefix = "" if escaped else "E"
    return f"{prefix}'{flat}'"


def minify_sql(sql: str, file: str | None = None) -> str:
    """Minify a SQL query.

    1. Removes all comments
    2. Normalizes multi-line strings
    3. Removes trailing empty symbols
    4. Flattens SQL into a single line

    Args:
        sql: SQL text to minify.
        file: Path of the source file, for error attribution.

    Returns:
        str: The minified SQL.

    Raises:
        SQLParseError: If a comment, text literal or quoted identifier is
            left unclosed.
    """

    out: list[str] = []
    pending_space = False
    i = 0
    length = len(sql)

    def emit(chunk: str) -> None:
        nonlocal pending_space
        if pending_space and out:
            out.append(" ")
        pending_space = False
        out.append(chunk)

    while i < length:
        ch = sql[i]

        if ch.isspace():
            pending_space = True
            i += 1
            continue

        if sql.startswith("--", i):
            end = sql.find("\n", i)
            i = length if end < 0 else end
            pending_space = True
            continue

        if sql.startswith("/*", i):
            end = sql.find("*/", i + 2)
            if end < 0:
                raise _fail("Unclosed multi-line comment.", sql, i, file)
            i = end + 2
            pending_space = True
            continue

        if ch == "'":
            escaped = _is_escape_string(sql, i)
            end = _end_of_text(sql, i, escaped)
            if end < 0:
                raise _fail("Unclosed text block.", sql, i, file)
            literal = sql[i:end]
            if "\n" in literal:
                literal = _flatten_text(literal, escaped)
            if escaped:
                # the E prefix was already emitted as part of the previous word
                out.append(literal)
            else:
                emit(literal)
            i = end
            continue

        if ch == '"':
            end = _end_of_identifier(sql, i)
            if end < 0:
                raise _fail("Unclosed quoted identifier.", sql, i, file)
            emit(sql[i:end])
            i = end
            continue

        if ch == "$" and (i == 0 or not IDENTIFIER_CHAR.match(sql[i - 1])):
            match = DOLLAR_TAG.match(sql, i)
            if match:
                tag = match.group(0)
                end = sql.find(tag, match.end())
                if end < 0:
                    raise _fail("Unclosed text block.", sql, i, file)
                emit(sql[i : end + len(tag)])
                i = end + len(tag)
                continue

        emit(ch)
        i += 1

    return "".join(out).rstrip().rstrip(";").rstrip()
