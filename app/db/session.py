from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings


def build_engine(url: Optional[str] = None) -> Engine:
    """create the engine for the current tenant; called once at process startup."""
    url = url or settings.DATABASE_URL
    engine_kwargs = {
        "echo": False,
        "pool_pre_ping": True,
        "future": True,
    }

    # sqlite is only used by the test suite
    if url.startswith("sqlite"):
        return create_engine(url, **engine_kwargs)

    # postgreSQL specific config with connection pooling
    engine_kwargs.update({
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_CONNECTION_TIMEOUT,
        "pool_recycle": 3600,  # Recycle connections every hour
        "pool_reset_on_return": "commit",
        "connect_args": {
            "connect_timeout": settings.DB_CONNECTION_TIMEOUT,
            "application_name": f"{settings.TENANT_NAME}_backend",
        }
    })

    return create_engine(url, **engine_kwargs)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


# fastAPI dependency
def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
