"""
Pytest configuration and shared fixtures.

- In-memory ports (repos, stub provider gateway, fixed clock)
- SQLite in-memory engine and session for the SQL adapters
- FastAPI TestClient running the in-memory wiring
"""

from collections.abc import AsyncGenerator, Generator
from contextlib import asynccontextmanager
from typing import Any

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from customs_ops.api.dependencies import _in_memory_bundle
from customs_ops.application.failure_log import FailureLog
from customs_ops.application.interfaces.clock import FakeClock
from customs_ops.application.interfaces.screening_gateway import ScreeningGatewaySelector
from customs_ops.application.use_cases.retry_failure import RetryFailureUseCase
from customs_ops.infrastructure.circuit_breaker import reset_breakers
from customs_ops.infrastructure.db.tables import metadata
from customs_ops.infrastructure.in_memory import (
    InMemoryAuditLogRepo,
    InMemoryFailureRepo,
    InMemoryPackageRepo,
    InMemoryShipmentRepo,
    InMemoryTrackingEventRepo,
    InMemoryTransactionManager,
    InMemoryUploadRepo,
    InMemoryUserPlatformRepo,
    StubScreeningGateway,
)
from customs_ops.main import app
from tests.factories import USER_ID

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ============================================================================
# PUERTOS IN-MEMORY
# ============================================================================


@pytest.fixture(autouse=True)
def _reset_circuit_breakers():
    reset_breakers()
    yield
    reset_breakers()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def gateway() -> StubScreeningGateway:
    return StubScreeningGateway("sandbox")


@pytest.fixture
def production_gateway() -> StubScreeningGateway:
    return StubScreeningGateway("production")


@pytest.fixture
def gateway_selector(gateway, production_gateway) -> ScreeningGatewaySelector:
    selector = ScreeningGatewaySelector()
    selector.register("sandbox", gateway)
    selector.register("production", production_gateway)
    return selector


@pytest.fixture
def failure_repo() -> InMemoryFailureRepo:
    return InMemoryFailureRepo()


@pytest.fixture
def package_repo() -> InMemoryPackageRepo:
    return InMemoryPackageRepo()


@pytest.fixture
def shipment_repo() -> InMemoryShipmentRepo:
    return InMemoryShipmentRepo()


@pytest.fixture
def upload_repo() -> InMemoryUploadRepo:
    return InMemoryUploadRepo()


@pytest.fixture
def audit_log_repo() -> InMemoryAuditLogRepo:
    return InMemoryAuditLogRepo()


@pytest.fixture
def tracking_event_repo() -> InMemoryTrackingEventRepo:
    return InMemoryTrackingEventRepo()


@pytest.fixture
def user_platform_repo() -> InMemoryUserPlatformRepo:
    return InMemoryUserPlatformRepo()


@pytest.fixture
def tx_manager() -> InMemoryTransactionManager:
    return InMemoryTransactionManager()


@pytest.fixture
def failure_log(failure_repo, clock) -> FailureLog:
    return FailureLog(failure_repo, clock)


@pytest.fixture
def retry_engine(failure_repo, package_repo, failure_log, gateway_selector, tx_manager, clock):
    return RetryFailureUseCase(
        failure_repo=failure_repo,
        package_repo=package_repo,
        failure_log=failure_log,
        gateway_selector=gateway_selector,
        transaction_manager=tx_manager,
        clock=clock,
    )


@pytest.fixture
def retry_scope(retry_engine):
    @asynccontextmanager
    async def scope():
        yield retry_engine

    return scope


# ============================================================================
# FIXTURES DE BASE DE DATOS
# ============================================================================


@pytest_asyncio.fixture
async def test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ============================================================================
# FIXTURES DE CLIENTE HTTP
# ============================================================================


@pytest.fixture
def app_bundle() -> Generator[dict[str, Any], None, None]:
    """Fresh in-memory wiring shared by the app for the duration of one test."""
    _in_memory_bundle.cache_clear()
    yield _in_memory_bundle()
    _in_memory_bundle.cache_clear()


@pytest.fixture
def client(app_bundle) -> Generator[TestClient, None, None]:
    with TestClient(app, headers={"X-User-Id": USER_ID}) as test_client:
        yield test_client


@pytest.fixture
def app_gateway(app_bundle) -> StubScreeningGateway:
    return app_bundle["gateway_selector"].for_environment("sandbox")
