from .async_db import AsyncSessionLocal, async_engine, get_async_db, get_async_db_context
from .init_database import bootstrap_admin, create_tables, init_db, seed_roles

__all__ = [
    "AsyncSessionLocal",
    "async_engine",
    "get_async_db",
    "get_async_db_context",
    "bootstrap_admin",
    "create_tables",
    "init_db",
    "seed_roles",
]
