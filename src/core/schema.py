"""SQLite schema management (code-first approach).

Core tables live here; feature modules contribute their own tables and
indexes through the module registry.
"""

import logging

from src.core import db_client
from src.core.module_registry import get_all_indexes, get_all_table_schemas, register_default_modules


logger = logging.getLogger(__name__)


CORE_TABLE_SCHEMAS: dict[str, str] = {
    "households": """CREATE TABLE IF NOT EXISTS households (
        id TEXT PRIMARY KEY,
        created TEXT NOT NULL DEFAULT (datetime('now')),
        updated TEXT NOT NULL DEFAULT (datetime('now')),
        name TEXT NOT NULL
    )""",
    "household_members": """CREATE TABLE IF NOT EXISTS household_members (
        id TEXT PRIMARY KEY,
        created TEXT NOT NULL DEFAULT (datetime('now')),
        updated TEXT NOT NULL DEFAULT (datetime('now')),
        household_id TEXT NOT NULL REFERENCES households(id),
        user_id TEXT NOT NULL,
        role TEXT NOT NULL DEFAULT 'CLIENT' CHECK (role IN ('ASSISTANT', 'CLIENT', 'STAFF')),
        service_type TEXT CHECK (service_type IN ('CLEANING', 'PA')),
        UNIQUE(household_id, user_id)
    )""",
}

CORE_INDEXES: list[str] = [
    "CREATE INDEX IF NOT EXISTS idx_household_members_user_id ON household_members (user_id)",
]


def get_table_schemas() -> dict[str, str]:
    """Return core and module table schemas, core tables first."""
    register_default_modules()
    return {**CORE_TABLE_SCHEMAS, **get_all_table_schemas()}


def get_collections() -> list[str]:
    """Return all collection names in creation order."""
    return list(get_table_schemas())


async def init_db(*, db_path: str | None = None) -> None:
    """Create all tables and indexes if they do not exist."""
    schemas = get_table_schemas()
    indexes = [*CORE_INDEXES, *get_all_indexes()]

    conn = await db_client.get_connection(db_path=db_path)
    for table_name, ddl in schemas.items():
        await conn.execute(ddl)
        logger.debug("Ensured table", extra={"table": table_name})
    for index_ddl in indexes:
        await conn.execute(index_ddl)
    await conn.commit()

    logger.info("Database schema initialized", extra={"tables": len(schemas), "indexes": len(indexes)})
