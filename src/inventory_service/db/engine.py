"""Database engine helpers using SQLModel."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from inventory_service.config import DatabaseSettings
from inventory_service.exceptions import ConcurrentModification, HistoryImmutable
from inventory_service.logging import logger
from inventory_service.models import History

_ATOMIC_DEPTH = "atomic_depth"


class Database:
    """Explicit store handle: built once at process start, disposed at shutdown."""

    def __init__(self, settings: DatabaseSettings) -> None:
        self.settings = settings
        self.engine = _build_engine(settings)

    @classmethod
    def from_url(cls, url: str, *, echo: bool = False) -> "Database":
        return cls(DatabaseSettings(url=url, echo=echo))

    def init_schema(self) -> None:
        SQLModel.metadata.create_all(self.engine)

    def session(self) -> Session:
        return Session(self.engine)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        session = self.session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        logger.info("Disposing database engine", url=self.engine.url.render_as_string(hide_password=True))
        self.engine.dispose()


def _build_engine(settings: DatabaseSettings) -> Engine:
    url = make_url(settings.url)
    kwargs: dict = {"echo": settings.echo}
    if settings.is_sqlite:
        kwargs["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        else:
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    else:
        kwargs["pool_size"] = settings.pool_size
        kwargs["pool_pre_ping"] = True

    engine = create_engine(settings.url, **kwargs)
    if settings.is_sqlite:
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@contextmanager
def atomic(session: Session, operation: str) -> Iterator[Session]:
    """Run ``operation`` as one unit of work on ``session``.

    The outermost scope commits on success and rolls back every change made
    inside it on failure. Nested scopes join the enclosing one, so composite
    operations commit exactly once.
    """

    depth = session.info.get(_ATOMIC_DEPTH, 0)
    session.info[_ATOMIC_DEPTH] = depth + 1
    try:
        yield session
        if depth == 0:
            session.commit()
    except StaleDataError as exc:
        if depth == 0:
            session.rollback()
            logger.warning("Unit of work lost a concurrent update", operation=operation, error=str(exc))
            raise ConcurrentModification(
                "Stock was changed by another operation, retry", operation=operation
            ) from exc
        raise
    except Exception as exc:
        if depth == 0:
            session.rollback()
            logger.warning("Unit of work rolled back", operation=operation, error=str(exc))
        raise
    finally:
        session.info[_ATOMIC_DEPTH] = depth


@event.listens_for(Session, "before_flush")
def _guard_history(session: Session, flush_context, instances) -> None:
    for instance in list(session.dirty) + list(session.deleted):
        if isinstance(instance, History) and (
            instance in session.deleted or session.is_modified(instance)
        ):
            raise HistoryImmutable("History rows cannot be changed", history_id=instance.id)
