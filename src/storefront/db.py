from sqlalchemy import BigInteger, Integer, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from storefront.core.config import DatabaseConfig

Base = declarative_base()

# SQLite only autoincrements INTEGER PRIMARY KEY, not BIGINT.
IdType = BigInteger().with_variant(Integer, "sqlite")


def create_db_engine(config: DatabaseConfig) -> Engine:
    """Build the process-wide engine; pool settings don't apply to SQLite."""
    if config.url.startswith("sqlite"):
        return create_engine(config.url, echo=config.echo)

    return create_engine(
        config.url,
        echo=config.echo,
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_timeout=config.pool_timeout,
        pool_recycle=config.pool_recycle,
        pool_pre_ping=True,
    )


def init_schema(engine: Engine) -> None:
    """Create all tables that don't exist yet."""
    # Importing the models registers them with Base.metadata.
    import storefront.models  # noqa: F401

    Base.metadata.create_all(engine)

