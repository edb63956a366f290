from functools import lru_cache

from adapters.db.postgres_adapter import PostgresAdapter
from app.settings import get_settings
from querygate.catalog import SchemaCatalog
from querygate.executor import QueryGateway


@lru_cache()
def get_db_adapter() -> PostgresAdapter:
    """
    Process-wide pooled adapter, built lazily on first use.

    Raises ConfigurationError when DATABASE_URL is missing.
    """
    settings = get_settings()
    return PostgresAdapter(
        settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        acquire_timeout_sec=settings.db_pool_acquire_timeout_sec,
        max_idle_sec=settings.db_pool_max_idle_sec,
    )


def get_gateway() -> QueryGateway:
    return QueryGateway(db=get_db_adapter())


def get_catalog() -> SchemaCatalog:
    return SchemaCatalog(db=get_db_adapter())
