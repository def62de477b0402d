"""SQLAlchemy engine for the relational store."""

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from askdata.core.config import settings

logger = logging.getLogger(__name__)


# Global engine (singleton pattern for connection pooling)
_engine: Engine | None = None


def get_engine() -> Engine:
    """Get or create the SQLAlchemy engine singleton.

    On PostgreSQL every pooled connection carries a server-side
    ``statement_timeout`` so a runaway query cannot hold a worker forever.

    Returns:
        SQLAlchemy Engine instance
    """
    global _engine

    if _engine is None:
        connect_args: dict[str, object] = {}
        engine_kwargs: dict[str, object] = {"pool_pre_ping": True}

        if settings.is_postgres:
            connect_args["options"] = f"-c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}"
            engine_kwargs["pool_size"] = settings.DB_POOL_SIZE

        _engine = create_engine(
            settings.DATABASE_URL,
            connect_args=connect_args,
            **engine_kwargs,
        )
        logger.info(
            "Initialized database engine",
            extra={"dialect": _engine.dialect.name},
        )

    return _engine
