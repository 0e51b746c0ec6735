"""SQLAlchemy-backed unit of work for ingestion and review."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from pricewatch.adapters.sqlalchemy.mappings import start_mappers
from pricewatch.adapters.sqlalchemy.migrations import upgrade_head
from pricewatch.adapters.sqlalchemy.repositories import (
    SqlAlchemyApprovalWorkflowRepository,
    SqlAlchemyAuditLogRepository,
    SqlAlchemyBrandRepository,
    SqlAlchemyCityRepository,
    SqlAlchemyCommodityRepository,
    SqlAlchemyCountryRepository,
    SqlAlchemyPriceObservationRepository,
    SqlAlchemySourceRepository,
)
from pricewatch.config import get_database_config
from pricewatch.domain.ports.unit_of_work import PricewatchRepositories, RepositoryCollection

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Connection, Engine


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call pricewatch.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def create_database_engine(database_uri: str, **kwargs: Any) -> Engine:
    """Create an engine whose transactions support SAVEPOINT on every backend.

    pysqlite defers BEGIN on its own, which breaks nested transactions. For SQLite
    the driver's transaction handling is switched off and BEGIN is emitted here.
    """

    engine = create_engine(database_uri, future=True, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _disable_pysqlite_autobegin)
        event.listen(engine, "begin", _emit_begin)
    return engine


def _disable_pysqlite_autobegin(dbapi_connection: Any, connection_record: object) -> None:
    _ = connection_record
    dbapi_connection.isolation_level = None


def _emit_begin(connection: Connection) -> None:
    connection.exec_driver_sql("BEGIN")


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine, schema, and session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or create_database_engine(
        database_uri or get_database_config().uri
    )
    start_mappers()
    upgrade_head(engine=resolved_engine)
    _STATE.engine = resolved_engine


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Generic SQLAlchemy unit of work with pluggable repository collections.

    Leaving the block without ``commit()`` discards everything written inside it.
    """

    def __init__(self) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        self._session: Session | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        self.rollback()
        self.session.close()
        self.session = None
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyUnitOfWork(BaseSqlAlchemyUnitOfWork[PricewatchRepositories]):
    """Unit of work managing SQLAlchemy sessions for ingestion and review."""

    def _build_repositories(self, session: Session) -> PricewatchRepositories:
        return PricewatchRepositories(
            countries=SqlAlchemyCountryRepository(session),
            cities=SqlAlchemyCityRepository(session),
            commodities=SqlAlchemyCommodityRepository(session),
            sources=SqlAlchemySourceRepository(session),
            brands=SqlAlchemyBrandRepository(session),
            observations=SqlAlchemyPriceObservationRepository(session),
            workflows=SqlAlchemyApprovalWorkflowRepository(session),
            audit_logs=SqlAlchemyAuditLogRepository(session),
        )


if TYPE_CHECKING:
    from pricewatch.domain.ports import PricewatchUnitOfWork

    _uow_check: PricewatchUnitOfWork = SqlAlchemyUnitOfWork()
