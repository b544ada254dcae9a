import itertools
import uuid

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Import all models so they register with Base.metadata for create_all
import cargo_ops.models  # noqa: F401
from cargo_ops.models import Customer, CustomerTier, Hub, Shipment, ShipmentStatus
from cargo_ops.models.base import Base


@pytest.fixture
async def test_engine(tmp_path):
    # SQLite per test (no Postgres dependency needed for unit tests)
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)

    # pysqlite's implicit transactions break SAVEPOINT; emit BEGIN ourselves
    @event.listens_for(engine.sync_engine, "connect")
    def _disable_implicit_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine):
    session_factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def client(db_session):
    from cargo_ops.config import settings
    from cargo_ops.database import get_db
    from cargo_ops.dependencies import get_manifest_builder
    from cargo_ops.main import app
    from cargo_ops.manifest_builder.service import ManifestBuilder
    from cargo_ops.scanning.debounce import ScanDebouncer

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    # Requests arrive faster than any scanner; keep the throttle out of API tests
    app.dependency_overrides[get_manifest_builder] = lambda: ManifestBuilder(
        settings, debouncer=ScanDebouncer(window_ms=0)
    )

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ── Seed helpers ──


@pytest.fixture
async def hubs(db_session) -> tuple[Hub, Hub]:
    origin = Hub(id=uuid.uuid4(), code="IMF", name="Imphal Hub", city="Imphal")
    destination = Hub(id=uuid.uuid4(), code="DEL", name="New Delhi Hub", city="New Delhi")
    db_session.add_all([origin, destination])
    await db_session.flush()
    return origin, destination


@pytest.fixture
def make_shipment(db_session, hubs):
    origin, destination = hubs
    counter = itertools.count(1)

    async def _make(
        status: ShipmentStatus = ShipmentStatus.RECEIVED_AT_ORIGIN,
        destination_hub_id: uuid.UUID | None = None,
        package_count: int = 1,
        total_weight: float = 10.0,
        awb: str | None = None,
        consignee_name: str = "Ravi Kumar",
    ) -> Shipment:
        shipment = Shipment(
            id=uuid.uuid4(),
            awb_number=awb or f"TAC{48870000 + next(counter):08d}",
            status=status,
            origin_hub_id=origin.id,
            destination_hub_id=destination_hub_id or destination.id,
            consignee_name=consignee_name,
            package_count=package_count,
            total_weight=total_weight,
        )
        db_session.add(shipment)
        await db_session.flush()
        await db_session.refresh(shipment)
        return shipment

    return _make


@pytest.fixture
def make_customer(db_session):
    async def _make(tier: CustomerTier = CustomerTier.STANDARD, gstin: str | None = None) -> Customer:
        customer = Customer(id=uuid.uuid4(), name="Loktak Traders", tier=tier, gstin=gstin)
        db_session.add(customer)
        await db_session.flush()
        await db_session.refresh(customer)
        return customer

    return _make
