"""Fixtures communes / Shared fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient

from inspection_pro.api.deps import Services
from inspection_pro.database import build_engine, build_session_factory
from inspection_pro.main import app
from inspection_pro.rate_limit import limiter
from inspection_pro.schemas.inspection import (
    Defect,
    InspectionItemResult,
    InspectionRecord,
    InspectorInfo,
    VehicleInfo,
)
from inspection_pro.services.key_value_store import KeyValueStore
from inspection_pro.services.report_service import ReportService
from inspection_pro.services.share_service import UnavailableShareTarget
from inspection_pro.services.storage_service import StorageService


@pytest.fixture
async def kv_store(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    yield KeyValueStore(build_session_factory(engine))
    await engine.dispose()


@pytest.fixture
async def storage(tmp_path, kv_store):
    service = StorageService(kv_store, photos_dir=tmp_path / "photos", exports_dir=tmp_path / "exports")
    await service.initialize()
    return service


@pytest.fixture
def reports(tmp_path):
    return ReportService(tmp_path / "reports", UnavailableShareTarget())


@pytest.fixture
async def client(storage, reports):
    app.state.services = Services(storage=storage, reports=reports)
    limiter.reset()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    del app.state.services


@pytest.fixture
def make_item():
    def _make(status="pass", defects=(), notes=None, photos=()):
        return InspectionItemResult(
            status=status,
            notes=notes,
            photos=list(photos),
            defects=[
                Defect(description=description, severity=severity, location=location)
                for description, severity, location in defects
            ],
        )
    return _make


@pytest.fixture
def make_record():
    def _make(
        inspection_id="INS-1",
        vin="1HGCM82633A004352",
        make="Honda",
        model="Accord",
        plate="ABC-123",
        items=None,
        **overrides,
    ):
        return InspectionRecord(
            id=inspection_id,
            vehicle_info=VehicleInfo(
                vin=vin,
                make=make,
                model=model,
                year="2003",
                color="Silver",
                mileage="120000",
                license_plate=plate,
            ),
            inspector_info=InspectorInfo(name="John Smith", id="INS-001", company="Professional Inspections LLC"),
            inspection_items=items or {},
            **overrides,
        )
    return _make
