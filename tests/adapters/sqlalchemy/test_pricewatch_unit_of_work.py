from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import inspect

from pricewatch.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    configured_engine,
    create_database_engine,
    is_started,
    shutdown,
    startup,
)
from pricewatch.domain.model import Brand, Source, SourceType

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_sqlalchemy_unit_of_work_requires_startup() -> None:
    with pytest.raises(StartupError):
        SqlAlchemyUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_database_engine("sqlite+pysqlite:///:memory:")
    engine_b = create_database_engine("sqlite+pysqlite:///:memory:")

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b
    assert is_started()


def test_startup_applies_migrations(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    tables = set(inspect(sqlite_engine).get_table_names())

    assert {
        "country",
        "city",
        "commodity",
        "commodity_alias",
        "source",
        "brand",
        "price_observation",
        "approval_workflow",
        "audit_log",
        "alembic_version",
    } <= tables


def test_unit_of_work_commits(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with SqlAlchemyUnitOfWork() as uow:
        uow.repositories.sources.add(Source(name="Market", type=SourceType.MARKET))
        uow.commit()

    with SqlAlchemyUnitOfWork() as uow:
        source = uow.repositories.sources.find_by_name("market")
        assert source is not None
        assert source.type is SourceType.MARKET


def test_unit_of_work_discards_uncommitted_work(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with SqlAlchemyUnitOfWork() as uow:
        uow.repositories.brands.get_or_create(Brand(name="Acme"))

    with SqlAlchemyUnitOfWork() as uow:
        assert uow.repositories.brands.find_by_name("Acme") is None


def test_unit_of_work_rolls_back_on_error(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with pytest.raises(RuntimeError), SqlAlchemyUnitOfWork() as uow:
        uow.repositories.brands.add(Brand(name="Acme"))
        uow.session.flush()
        raise RuntimeError("boom")

    with SqlAlchemyUnitOfWork() as uow:
        assert uow.repositories.brands.find_by_name("Acme") is None


def test_session_is_released_after_exit(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    uow = SqlAlchemyUnitOfWork()

    with uow:
        pass

    with pytest.raises(StartupError):
        _ = uow.repositories
