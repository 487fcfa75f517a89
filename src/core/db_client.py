"""SQLite database client wrapper with CRUD operations."""

import asyncio
import json
import logging
import re
import threading
import uuid
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

import aiosqlite

from src.core.config import Constants, settings


logger = logging.getLogger(__name__)


class DatabaseError(RuntimeError):
    """Persistence failure (connection, query or timeout)."""


class RecordNotFoundError(KeyError):
    """Record with the given id does not exist."""


def _validate_collection_name(collection: str) -> None:
    """Validate that a collection name contains only alphanumeric characters and underscores."""
    if not re.match(r"^[a-zA-Z_][a-zA-Z0-9_]*$", collection):
        msg = f"Invalid collection name: {collection}. Only alphanumeric characters and underscores are allowed."
        raise ValueError(msg)


def sanitize_param(value: str | int | float | bool | None) -> str:
    """Escape a value for safe embedding in filter queries via json.dumps."""
    return json.dumps(str(value), ensure_ascii=False)[1:-1]


def new_record_id() -> str:
    """Generate an opaque record id."""
    return uuid.uuid4().hex


def get_db_path(db_path: str | None = None) -> Path:
    """Get the resolved SQLite database file path."""
    path_str = db_path or settings.sqlite_db_path
    return Path(path_str).resolve()


def _to_db_value(value: Any) -> Any:  # noqa: ANN401
    """Convert a Python value to something SQLite can store."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, dict | list):
        return json.dumps(value)
    return value


def _parse_value(value: str, *, is_like: bool = False) -> str | int | float | bool | None:
    """Parse a string value to the appropriate Python type for SQLite."""
    if is_like:
        return "%" + value.replace("%", "\\%").replace("_", "\\_") + "%"

    if value.isdigit():
        return int(value)
    if value.replace(".", "", 1).isdigit():
        return float(value)

    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False

    return value


def _get_sql_operator(op: str) -> str:
    """Map filter operator to SQL operator."""
    op_map = {
        "=": "=",
        "!=": "!=",
        ">": ">",
        "<": "<",
        ">=": ">=",
        "<=": "<=",
        "~": "LIKE",
    }
    sql_op = op_map.get(op)
    if not sql_op:
        msg = f"Unsupported operator: {op}"
        raise ValueError(msg)
    return sql_op


_COMPARISON_PATTERN = re.compile(r"""\s*(\w+)\s*(!=|>=|<=|=|>|<|~)\s*(['"])((?:\\.|(?!\3).)*)\3\s*""", re.DOTALL)


def _parse_single_comparison(comparison: str) -> tuple[str, str | int | float | None]:
    """Parse a single comparison expression into a SQL condition and parameter.

    Quoted values may contain backslash-escaped characters, as produced by sanitize_param.
    """
    match = _COMPARISON_PATTERN.fullmatch(comparison)
    if not match:
        msg = f"Invalid filter syntax: {comparison}"
        raise ValueError(msg)

    field = match.group(1)
    op = match.group(2)
    raw_value = re.sub(r"\\(.)", r"\1", match.group(4), flags=re.DOTALL)

    sql_op = _get_sql_operator(op)
    is_like = sql_op == "LIKE"
    value = _parse_value(raw_value, is_like=is_like)

    if is_like:
        return f"{field} LIKE ? ESCAPE '\\'", value
    return f"{field} {sql_op} ?", value


def _split_and_conditions(filter_query: str) -> list[str]:
    """Split filter query on && between comparisons, ignoring && inside quoted values."""
    parts = []
    pos = 0
    while True:
        match = _COMPARISON_PATTERN.match(filter_query, pos)
        if not match:
            msg = f"Invalid filter syntax: {filter_query}"
            raise ValueError(msg)
        parts.append(match.group(0).strip())

        pos = match.end()
        if pos == len(filter_query):
            return parts
        if not filter_query.startswith("&&", pos):
            msg = f"Invalid filter syntax: {filter_query}"
            raise ValueError(msg)
        pos += 2


def parse_filter(filter_query: str) -> tuple[str, list[str | int | float | None]]:
    """Parse `field op "value" && ...` filter syntax into a SQL WHERE clause and parameter list."""
    if not filter_query:
        return "", []

    conditions = []
    params = []
    for part in _split_and_conditions(filter_query):
        cond, value = _parse_single_comparison(part)
        conditions.append(cond)
        params.append(value)

    return " AND ".join(conditions), params


def parse_sort(sort: str) -> str:
    """Translate "+field" / "-field" / "field [ASC|DESC]" into an ORDER BY clause."""
    default = "created ASC, id ASC"
    if not sort:
        return default

    candidate = sort.strip()
    if candidate.startswith(("+", "-")):
        direction = "DESC" if candidate[0] == "-" else "ASC"
        candidate = f"{candidate[1:]} {direction}"

    match = re.match(r"^([A-Za-z_][A-Za-z0-9_]*)\s*(ASC|DESC)?$", candidate, re.IGNORECASE)
    if match:
        # id breaks ties between equal sort keys
        return candidate if match.group(1).lower() == "id" else f"{candidate}, id ASC"

    logger.warning("Invalid sort parameter, using default", extra={"sort": sort})
    return default


_db_connections: dict[tuple[int, int, str], aiosqlite.Connection] = {}
_db_lock = asyncio.Lock()


async def get_connection(*, db_path: str | None = None) -> aiosqlite.Connection:
    """Get or create a cached connection for the current thread, loop, and db path."""
    thread_id = threading.get_ident()
    loop = asyncio.get_running_loop()
    loop_id = id(loop)
    path = get_db_path(db_path)
    cache_key = (thread_id, loop_id, str(path))

    if cache_key in _db_connections:
        return _db_connections[cache_key]

    async with _db_lock:
        # Double-check after acquiring lock
        if cache_key in _db_connections:
            return _db_connections[cache_key]

        path.parent.mkdir(parents=True, exist_ok=True)

        conn = await aiosqlite.connect(str(path))
        conn.row_factory = aiosqlite.Row
        await conn.execute("PRAGMA foreign_keys = ON")
        await conn.execute("PRAGMA journal_mode = WAL")

        _db_connections[cache_key] = conn

        logger.info(
            "Created new SQLite connection",
            extra={"db_path": str(path), "thread_id": thread_id, "loop_id": loop_id},
        )
        return conn


async def close_connection(*, db_path: str | None = None) -> None:
    """Close the cached SQLite connection for the current thread, loop, and db path."""
    thread_id = threading.get_ident()
    loop_id = id(asyncio.get_running_loop())
    path = get_db_path(db_path)
    cache_key = (thread_id, loop_id, str(path))

    if cache_key not in _db_connections:
        return

    try:
        async with _db_lock:
            conn = _db_connections.pop(cache_key, None)
            if conn is not None:
                await conn.close()
                logger.info(
                    "Closed SQLite connection",
                    extra={"thread_id": thread_id, "loop_id": loop_id, "db_path": str(path)},
                )
    except Exception as e:
        logger.warning(
            "Error closing SQLite connection",
            extra={"error": str(e), "thread_id": thread_id, "loop_id": loop_id},
        )


async def init_db(*, db_path: str | None = None) -> None:
    """Initialize the database schema by delegating to schema.init_db()."""
    from src.core import schema

    await schema.init_db(db_path=db_path)


async def create_record(*, collection: str, data: dict[str, Any]) -> dict[str, Any]:
    """Insert a new record and return it with its assigned id."""
    try:
        _validate_collection_name(collection)
        async with asyncio.timeout(settings.db_timeout_seconds):
            conn = await get_connection()

            record_data = {"id": new_record_id(), **data}
            columns = list(record_data.keys())
            columns_str = ", ".join(columns)
            placeholders_str = ", ".join("?" for _ in columns)
            values = [_to_db_value(record_data[key]) for key in columns]

            query = f"INSERT INTO {collection} ({columns_str}) VALUES ({placeholders_str})"  # noqa: S608 - collection is validated
            await conn.execute(query, values)
            await conn.commit()

        result = await get_record(collection=collection, record_id=record_data["id"])

        logger.info("Created record", extra={"collection": collection, "record_id": record_data["id"]})
        return result
    except Exception as e:
        if isinstance(e, aiosqlite.OperationalError) and "no such table" in str(e):
            logger.error("Table not found", extra={"collection": collection})
            msg = f"Table '{collection}' does not exist. Call init_db() first."
            raise DatabaseError(msg) from e
        logger.error("create_record_failed", extra={"collection": collection, "error": str(e)})
        msg = f"Failed to create record in {collection}: {e}"
        raise DatabaseError(msg) from e


async def get_record(*, collection: str, record_id: str) -> dict[str, Any]:
    """Fetch a single record by ID, raising RecordNotFoundError if not found."""
    try:
        _validate_collection_name(collection)
        async with asyncio.timeout(settings.db_timeout_seconds):
            conn = await get_connection()

            query = f"SELECT * FROM {collection} WHERE id = ?"  # noqa: S608 - collection is validated
            cursor = await conn.execute(query, (str(record_id),))
            row = await cursor.fetchone()

        if row is None:
            msg = f"Record not found in {collection}: {record_id}"
            raise RecordNotFoundError(msg)

        logger.debug("Retrieved record", extra={"collection": collection, "record_id": record_id})
        return dict(row)
    except RecordNotFoundError:
        raise
    except Exception as e:
        logger.error("get_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        msg = f"Failed to get record from {collection}: {e}"
        raise DatabaseError(msg) from e


async def update_record(*, collection: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
    """Update a record by ID and return the updated record."""
    if not data:
        msg = "Empty update payload"
        raise ValueError(msg)

    try:
        _validate_collection_name(collection)
        async with asyncio.timeout(settings.db_timeout_seconds):
            conn = await get_connection()

            set_clause = ", ".join(f"{key} = ?" for key in data)
            values = [_to_db_value(val) for val in data.values()]
            values.append(str(record_id))

            query = f"UPDATE {collection} SET {set_clause}, updated = datetime('now') WHERE id = ?"  # noqa: S608 - collection is validated
            cursor = await conn.execute(query, values)
            await conn.commit()

        if cursor.rowcount == 0:
            msg = f"Record not found in {collection}: {record_id}"
            raise RecordNotFoundError(msg)

        logger.info("Updated record", extra={"collection": collection, "record_id": record_id})
        return await get_record(collection=collection, record_id=record_id)
    except RecordNotFoundError:
        raise
    except Exception as e:
        logger.error("update_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        msg = f"Failed to update record in {collection}: {e}"
        raise DatabaseError(msg) from e


async def conditional_update(
    *,
    collection: str,
    record_id: str,
    data: dict[str, Any],
    filter_query: str,
) -> dict[str, Any] | None:
    """Update a record only if it still matches filter_query (compare-and-set).

    Returns:
        The updated record, or None if no row matched (missing or already changed).
    """
    if not data:
        msg = "Empty update payload"
        raise ValueError(msg)

    try:
        _validate_collection_name(collection)
        where_clause, where_params = parse_filter(filter_query)
        async with asyncio.timeout(settings.db_timeout_seconds):
            conn = await get_connection()

            set_clause = ", ".join(f"{key} = ?" for key in data)
            values = [_to_db_value(val) for val in data.values()]
            values.append(str(record_id))
            values.extend(where_params)

            condition = f" AND {where_clause}" if where_clause else ""
            query = f"UPDATE {collection} SET {set_clause}, updated = datetime('now') WHERE id = ?{condition}"  # noqa: S608 - collection is validated
            cursor = await conn.execute(query, values)
            await conn.commit()

        if cursor.rowcount == 0:
            logger.info(
                "Conditional update matched no rows",
                extra={"collection": collection, "record_id": record_id, "filter_query": filter_query},
            )
            return None

        logger.info("Conditionally updated record", extra={"collection": collection, "record_id": record_id})
        return await get_record(collection=collection, record_id=record_id)
    except Exception as e:
        logger.error(
            "conditional_update_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)}
        )
        msg = f"Failed to update record in {collection}: {e}"
        raise DatabaseError(msg) from e


async def delete_record(*, collection: str, record_id: str) -> None:
    """Delete a record by ID, raising RecordNotFoundError if not found."""
    try:
        _validate_collection_name(collection)
        async with asyncio.timeout(settings.db_timeout_seconds):
            conn = await get_connection()

            query = f"DELETE FROM {collection} WHERE id = ?"  # noqa: S608 - collection is validated
            cursor = await conn.execute(query, (str(record_id),))
            await conn.commit()

        if cursor.rowcount == 0:
            msg = f"Record not found in {collection}: {record_id}"
            raise RecordNotFoundError(msg)

        logger.info("Deleted record", extra={"collection": collection, "record_id": record_id})
    except RecordNotFoundError:
        raise
    except Exception as e:
        logger.error("delete_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        msg = f"Failed to delete record from {collection}: {e}"
        raise DatabaseError(msg) from e


async def list_records(
    *,
    collection: str,
    page: int = 1,
    per_page: int = 50,
    filter_query: str = "",
    sort: str = "",
) -> list[dict[str, Any]]:
    """List records with optional filtering, sorting, and pagination."""
    try:
        _validate_collection_name(collection)

        where_clause = ""
        params: list[Any] = []
        if filter_query:
            where_clause, params = parse_filter(filter_query)
            where_clause = f"WHERE {where_clause}"

        order_by = parse_sort(sort)
        offset = (page - 1) * per_page

        query = f"SELECT * FROM {collection} {where_clause} ORDER BY {order_by} LIMIT ? OFFSET ?"  # noqa: S608 - collection is validated
        params.extend([per_page, offset])

        async with asyncio.timeout(settings.db_timeout_seconds):
            conn = await get_connection()
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()

        records = [dict(row) for row in rows]

        logger.debug("Listed records", extra={"collection": collection, "count": len(records)})
        return records
    except Exception as e:
        logger.error("list_records_failed", extra={"collection": collection, "error": str(e)})
        msg = f"Failed to list records from {collection}: {e}"
        raise DatabaseError(msg) from e


async def list_all_records(
    *,
    collection: str,
    filter_query: str = "",
    sort: str = "",
    per_page: int = Constants.DEFAULT_PER_PAGE_LIMIT,
) -> list[dict[str, Any]]:
    """List every record matching the filter by walking all pages."""
    records: list[dict[str, Any]] = []
    page = 1
    while True:
        batch = await list_records(
            collection=collection,
            page=page,
            per_page=per_page,
            filter_query=filter_query,
            sort=sort,
        )
        records.extend(batch)
        if len(batch) < per_page:
            return records
        page += 1


async def get_first_record(*, collection: str, filter_query: str) -> dict[str, Any] | None:
    """Return the first record matching the filter, or None."""
    records = await list_records(collection=collection, filter_query=filter_query, per_page=1)
    return records[0] if records else None
