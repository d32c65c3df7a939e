#tests\conftest.py

"""Pytest configuration and fixtures."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from lifecycle_engine.cluster.memory import InMemoryClusterAdapter
from lifecycle_engine.config import LifecycleSettings
from lifecycle_engine.container import build_container
from lifecycle_engine.infrastructure.memory.repository import InMemoryApplicationRepository
from lifecycle_engine.infrastructure.postgres.database import drop_db, get_session_factory, init_db
from lifecycle_engine.infrastructure.postgres.repository import PostgresApplicationRepository
from lifecycle_engine.lifecycle.controller import LifecycleController
from lifecycle_engine.reconciler.reconciler import StatusReconciler
from lifecycle_engine.reconciler.scheduler import ManualScheduler, SynchronousScheduler


@pytest.fixture
def repository():
    """In-memory record store."""
    return InMemoryApplicationRepository()


@pytest.fixture
def adapter():
    """In-memory cluster double."""
    return InMemoryClusterAdapter()


@pytest.fixture
def scheduler():
    """Scheduler that holds reconciles until run_pending()."""
    return ManualScheduler()


@pytest.fixture
def reconciler(repository, adapter):
    return StatusReconciler(repository=repository, adapter=adapter)


@pytest.fixture
def controller(repository, adapter, reconciler, scheduler):
    """Controller whose background reconciles run only on demand."""
    return LifecycleController(
        repository=repository,
        adapter=adapter,
        reconciler=reconciler,
        scheduler=scheduler,
    )


@pytest.fixture
def sync_container(repository, adapter):
    """Full object graph with reconciles run inline."""
    return build_container(
        settings=LifecycleSettings(),
        repository=repository,
        adapter=adapter,
        scheduler=SynchronousScheduler(),
    )


@pytest.fixture
def sql_engine():
    """In-memory SQLite engine with the applications table created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)

    yield engine

    drop_db(engine)
    engine.dispose()


@pytest.fixture
def sql_repository(sql_engine):
    """SQLAlchemy repository bound to the test engine."""
    return PostgresApplicationRepository(session_factory=get_session_factory(sql_engine))
