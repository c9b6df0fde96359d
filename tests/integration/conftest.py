"""
Integration test configuration with testcontainers.

This module provides a session-scoped PostgreSQL container for the
PostgreSQL task repository tests:
- The container is started once per test session (scope="session")
- Each test gets a repository over an empty tasks table

Usage:
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_example(postgres_repository: PostgresTaskRepository) -> None:
        ...

Note: Docker must be running for the PostgreSQL fixtures; tests that need
them are skipped otherwise. The in-memory flow tests need no container.
"""

from collections.abc import AsyncGenerator, Generator

import docker
import pytest
from docker.errors import DockerException
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from testcontainers.postgres import PostgresContainer

from src.bootstrap.database import to_async_url
from src.infrastructure.adapters.persistence.task_repository import (
    PostgresTaskRepository,
)
from tests.helpers import FakeTimeAuthority


def _docker_available() -> bool:
    try:
        docker.from_env().ping()
    except DockerException:
        return False
    return True


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """Session-scoped PostgreSQL 16 container.

    The container is started once and reused across all integration tests.
    """
    if not _docker_available():
        pytest.skip("Docker is not available for PostgreSQL integration tests")
    with PostgresContainer("postgres:16-alpine") as postgres:
        yield postgres


@pytest.fixture(scope="session")
def postgres_async_url(postgres_container: PostgresContainer) -> str:
    """Get async-compatible PostgreSQL connection URL.

    testcontainers returns a psycopg2 URL by default; convert to asyncpg.
    """
    sync_url = postgres_container.get_connection_url()
    return to_async_url(sync_url.replace("postgresql+psycopg2://", "postgresql://"))


@pytest.fixture
async def session_factory(
    postgres_async_url: str,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Per-test session factory; the tasks table is emptied afterwards."""
    engine = create_async_engine(postgres_async_url, echo=False)
    factory = async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False
    )

    yield factory

    async with factory() as session:
        await session.execute(text("DROP TABLE IF EXISTS tasks"))
        await session.commit()
    await engine.dispose()


@pytest.fixture
async def postgres_repository(
    session_factory: async_sessionmaker[AsyncSession],
    fake_time: FakeTimeAuthority,
) -> PostgresTaskRepository:
    repository = PostgresTaskRepository(
        session_factory=session_factory,
        time_authority=fake_time,
        poll_interval_seconds=0.05,
    )
    await repository.create_schema()
    return repository
