"""Engine and session factories for host applications and the CLI."""

from contextlib import contextmanager
from typing import Generator, Union

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from recordgate.utils.logging import get_logger

logger = get_logger(__name__)

Bind = Union[str, Engine]


def get_engine(database_url: str) -> Engine:
    return create_engine(database_url, future=True)


def session_factory(bind: Bind) -> sessionmaker:
    """
    Build a session factory for a database URL or an existing engine.

    Sessions do not autoflush: repo functions flush explicitly before reading
    generated keys, and mutations commit once per operation.
    """
    engine = get_engine(bind) if isinstance(bind, str) else bind
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@contextmanager
def session_context(bind: Bind) -> Generator[Session, None, None]:
    """
    Yield one request-scoped session.

    Work left uncommitted when the block raises is rolled back. An engine
    created here from a URL is disposed on exit; a passed-in engine is not.

    Usage:
        with session_context(engine) as session:
            access = RecordAccess(registry, session, identity)
            access.create("countries", payload)
    """
    engine = get_engine(bind) if isinstance(bind, str) else bind
    session = session_factory(engine)()
    try:
        yield session
    except Exception:
        logger.debug("Rolling back uncommitted work after an error in the session block")
        session.rollback()
        raise
    finally:
        session.close()
        if engine is not bind:
            engine.dispose()
