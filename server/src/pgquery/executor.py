"""Run pgquery inputs on an asyncpg connection or pool with a result mask."""

# Standard Library
import logging
from collections.abc import Mapping, Sequence
from typing import Any

# Third-Party
from asyncpg import Connection, Pool, Record

# Local
from .errors import ParameterizedQueryError, QueryResultError, QueryResultErrorCode
from .parameterized import ParameterizedQuery, ParsedQuery
from .query_file import QueryFile
from .result import QueryResult

logger = logging.getLogger(__name__)

QueryInput = str | QueryFile | ParameterizedQuery | Mapping[str, Any]


def resolve_query(query: QueryInput, values: Sequence | None = None) -> ParsedQuery:
    """Resolve a query input into a validated ParsedQuery.

    Args:
        query: SQL text, a QueryFile, a ParameterizedQuery, or a mapping with
            `text` (and optionally `values`, `binary`, `row_mode`).
        values: Formatting values for SQL text or a QueryFile. Ignored for
            ParameterizedQuery and mapping inputs, which carry their own.

    Returns:
        ParsedQuery: The validated query.

    Raises:
        ParameterizedQueryError: If the query does not validate.
        TypeError: If the input type is not supported.
    """

    if isinstance(query, ParameterizedQuery):
        pq = query
    elif isinstance(query, Mapping):
        pq = ParameterizedQuery(query)
    elif isinstance(query, (str, QueryFile)):
        pq = ParameterizedQuery(query, values)
    else:
        raise TypeError(f"Unsupported query type: {type(query).__name__}")

    parsed = pq.parse()
    if isinstance(parsed, ParameterizedQueryError):
        raise parsed
    return parsed


def _check_rows(rows: list[Record], mask: QueryResult, text: str) -> list[Record] | Record | None:
    count = len(rows)

    def fail(code: QueryResultErrorCode, message: str) -> QueryResultError:
        logger.debug("Query result mismatch (%s rows): %s", count, message)
        return QueryResultError(code, message, text, count)

    if count == 0:
        if mask & QueryResult.NONE:
            return None if mask & QueryResult.ONE or mask == QueryResult.NONE else rows
        raise fail(QueryResultErrorCode.NO_DATA, "No data returned from the query.")

    if mask & QueryResult.MANY:
        return rows

    if mask & QueryResult.ONE:
        if count > 1:
            raise fail(QueryResultErrorCode.MULTIPLE, "Multiple rows were not expected.")
        return rows[0]

    raise fail(QueryResultErrorCode.NOT_EMPTY, "No return data was expected.")


async def query(
    conn: Connection | Pool,
    query: QueryInput,
    values: Sequence | None = None,
    mask: QueryResult | int = QueryResult.ANY,
) -> list[Record] | Record | None:
    """Execute a query and check the rows against a QueryResult mask.

    Args:
        conn: asyncpg connection or pool supplied by the caller.
        query: Any input accepted by resolve_query().
        values: Formatting values for SQL text or a QueryFile.
        mask: Expected result shape.

    Returns:
        The row list for MANY/ANY, a single Record for ONE, None when NONE
        matches an empty result. With row_mode "array" rows are tuples of
        values instead of Records.

    Raises:
        ParameterizedQueryError: If the query does not validate.
        QueryResultError: If the rows do not match the mask.
        ValueError: For MULTI, which asyncpg cannot return, or an invalid mask.
    """

    mask = QueryResult.validate(mask)
    if mask == QueryResult.MULTI:
        raise ValueError("Multiple result-sets are not supported by asyncpg")

    parsed = resolve_query(query, values)
    rows = list(await conn.fetch(*parsed.args()))
    # asyncpg picks text or binary codecs per type, so `binary` has no effect here
    if parsed.row_mode == "array":
        rows = [tuple(row) for row in rows]
    return _check_rows(rows, mask, parsed.text)


async def one(conn: Connection | Pool, q: QueryInput, values: Sequence | None = None) -> Record:
    return await query(conn, q, values, QueryResult.ONE)


async def one_or_none(conn: Connection | Pool, q: QueryInput, values: Sequence | None = None) -> Record | None:
    return await query(conn, q, values, QueryResult.ONE | QueryResult.NONE)


async def many(conn: Connection | Pool, q: QueryInput, values: Sequence | None = None) -> list[Record]:
    return await query(conn, q, values, QueryResult.MANY)


async def many_or_none(conn: Connection | Pool, q: QueryInput, values: Sequence | None = None) -> list[Record]:
    return await query(conn, q, values, QueryResult.ANY)


any_rows = many_or_none


async def none(conn: Connection | Pool, q: QueryInput, values: Sequence | None = None) -> None:
    await query(conn, q, values, QueryResult.NONE)
