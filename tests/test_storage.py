"""Tests du service de stockage / Storage service tests."""

import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from inspection_pro.errors import (
    InvalidBackupError,
    PhotoWriteError,
    StorageReadError,
    StorageWriteError,
)
from inspection_pro.schemas.inspection import InspectionFilters, InspectionStatus
from inspection_pro.schemas.profile import AppSettings, InspectorProfile
from inspection_pro.services.storage_service import INSPECTIONS_KEY, StorageService


class BrokenStore:
    """Magasin toujours en echec / Always-failing store."""

    async def init_schema(self):
        pass

    async def get(self, key):
        raise OSError("disk unavailable")

    async def set(self, key, value):
        raise OSError("disk unavailable")


class UnreadableStore:
    """Lecture en echec, ecritures enregistrees / Reads fail, writes recorded."""

    def __init__(self):
        self.writes = []

    async def init_schema(self):
        pass

    async def get(self, key):
        raise OSError("read error")

    async def set(self, key, value):
        self.writes.append((key, value))


@pytest.fixture
def broken_storage(tmp_path):
    return StorageService(BrokenStore(), photos_dir=tmp_path / "photos", exports_dir=tmp_path / "exports")


# ─── Inspections ───

@pytest.mark.asyncio
async def test_empty_collection(storage):
    assert await storage.get_all_inspections() == []
    assert await storage.get_inspection_by_id("INS-1") is None


@pytest.mark.asyncio
async def test_save_derives_and_stamps(storage, make_record, make_item):
    record = make_record(items={"Brakes": make_item("warning", [("Pads", "critical", "Safety Systems")])})
    stored = await storage.save_inspection(record)

    assert stored.overall_status == InspectionStatus.FAIL
    assert stored.critical_defects == 1
    assert stored.completed_at is not None
    assert record.completed_at is None

    loaded = await storage.get_inspection_by_id("INS-1")
    assert loaded == stored


@pytest.mark.asyncio
async def test_save_is_idempotent_by_id(storage, make_record, make_item):
    await storage.save_inspection(make_record(items={"Horn": make_item("pass")}))
    await storage.save_inspection(make_record(items={"Horn": make_item("warning")}))

    records = await storage.get_all_inspections()
    assert len(records) == 1
    assert records[0].inspection_items["Horn"].status == InspectionStatus.WARNING


@pytest.mark.asyncio
async def test_newest_first(storage, make_record):
    for inspection_id in ("X", "Y", "Z"):
        await storage.save_inspection(make_record(inspection_id))
    assert [r.id for r in await storage.get_all_inspections()] == ["Z", "Y", "X"]

    # Re-sauvegarde : remonte en tete / Re-save moves to the front
    await storage.save_inspection(make_record("X"))
    assert [r.id for r in await storage.get_all_inspections()] == ["X", "Z", "Y"]


@pytest.mark.asyncio
async def test_concurrent_saves_keep_every_record(storage, make_record):
    await asyncio.gather(*(storage.save_inspection(make_record(f"INS-{i}")) for i in range(10)))
    records = await storage.get_all_inspections()
    assert sorted(r.id for r in records) == sorted(f"INS-{i}" for i in range(10))


@pytest.mark.asyncio
async def test_delete_removes_record_and_photos(storage, make_record, tmp_path):
    await storage.save_inspection(make_record("INS-1"))
    await storage.save_inspection(make_record("INS-10"))
    own_photo = await storage.save_photo_data("INS-1", b"jpeg")
    other_photo = await storage.save_photo_data("INS-10", b"jpeg")

    assert await storage.delete_inspection("INS-1") is True

    assert await storage.get_inspection_by_id("INS-1") is None
    assert await storage.get_inspection_by_id("INS-10") is not None
    assert not (tmp_path / "photos" / Path(own_photo).name).exists()
    assert (tmp_path / "photos" / Path(other_photo).name).exists()


@pytest.mark.asyncio
async def test_delete_unknown_id(storage, make_record):
    await storage.save_inspection(make_record("INS-1"))
    assert await storage.delete_inspection("INS-404") is False
    assert len(await storage.get_all_inspections()) == 1


@pytest.mark.asyncio
async def test_search(storage, make_record):
    await storage.save_inspection(make_record("INS-1", vin="1HGCM82633A004352", make="Honda"))
    await storage.save_inspection(make_record("INS-2", vin="WVWZZZ1JZXW000001", make="Volkswagen", model="Golf", plate="VW-42"))

    assert [r.id for r in await storage.search_inspections("hgcm")] == ["INS-1"]
    assert [r.id for r in await storage.search_inspections("golf")] == ["INS-2"]
    assert [r.id for r in await storage.search_inspections("vw-4")] == ["INS-2"]
    assert await storage.search_inspections("tesla") == []


@pytest.mark.asyncio
async def test_filter_by_status_and_make(storage, make_record, make_item):
    await storage.save_inspection(make_record("INS-1", items={"Horn": make_item("pass")}))
    await storage.save_inspection(make_record("INS-2", make="Ford", items={"Horn": make_item("fail", [("Dead", "minor", "Safety Systems")])}))

    failed = await storage.filter_inspections(InspectionFilters(status="fail"))
    assert [r.id for r in failed] == ["INS-2"]
    hondas = await storage.filter_inspections(InspectionFilters(make="Honda"))
    assert [r.id for r in hondas] == ["INS-1"]


@pytest.mark.asyncio
async def test_filter_by_date(storage, make_record):
    await storage.save_inspection(make_record("INS-1"))
    today = datetime.now(timezone.utc).strftime("%Y-%m-%d")

    assert len(await storage.filter_inspections(InspectionFilters(date_from="2000-01-01"))) == 1
    assert await storage.filter_inspections(InspectionFilters(date_to="2000-01-01")) == []
    # Date seule : toute la journee incluse / Date only: whole day included
    assert len(await storage.filter_inspections(InspectionFilters(date_to=today))) == 1


# ─── Echecs de lecture/ecriture / Read and write failures ───

@pytest.mark.asyncio
async def test_read_failure_yields_empty_list(broken_storage):
    assert await broken_storage.get_all_inspections() == []
    assert await broken_storage.get_inspection_by_id("INS-1") is None
    with pytest.raises(StorageReadError):
        await broken_storage.load_inspections()


@pytest.mark.asyncio
async def test_write_failure_raises(broken_storage, make_record):
    with pytest.raises(StorageWriteError):
        await broken_storage.save_inspection(make_record())
    with pytest.raises(StorageWriteError):
        await broken_storage.save_inspector_profile(InspectorProfile(name="John", id="I-1"))


@pytest.mark.asyncio
async def test_save_never_overwrites_after_failed_read(tmp_path, make_record):
    store = UnreadableStore()
    service = StorageService(store, photos_dir=tmp_path / "photos", exports_dir=tmp_path / "exports")

    with pytest.raises(StorageWriteError):
        await service.save_inspection(make_record())
    with pytest.raises(StorageWriteError):
        await service.delete_inspection("INS-1")
    assert store.writes == []


@pytest.mark.asyncio
async def test_corrupted_collection(storage, kv_store, make_record):
    await kv_store.set(INSPECTIONS_KEY, "{not json")

    assert await storage.get_all_inspections() == []
    with pytest.raises(StorageWriteError):
        await storage.save_inspection(make_record())
    assert await kv_store.get(INSPECTIONS_KEY) == "{not json"


# ─── Photos ───

@pytest.mark.asyncio
async def test_save_photo_copies_file(storage, tmp_path):
    source = tmp_path / "camera.jpg"
    source.write_bytes(b"\xff\xd8jpeg")

    path = await storage.save_photo("INS-1", source)

    saved = tmp_path / "photos" / Path(path).name
    assert saved.name.startswith("INS-1_")
    assert saved.name.endswith(".jpg")
    assert saved.read_bytes() == b"\xff\xd8jpeg"
    assert source.exists()


@pytest.mark.asyncio
async def test_save_photo_unique_names(storage):
    first = await storage.save_photo_data("INS-1", b"a")
    second = await storage.save_photo_data("INS-1", b"b")
    assert first != second


@pytest.mark.asyncio
async def test_save_photo_missing_source(storage, tmp_path):
    with pytest.raises(PhotoWriteError):
        await storage.save_photo("INS-1", tmp_path / "missing.jpg")


@pytest.mark.asyncio
async def test_save_photo_rejects_path_in_id(storage):
    with pytest.raises(PhotoWriteError):
        await storage.save_photo_data("../INS-1", b"a")


@pytest.mark.asyncio
async def test_delete_photos_without_directory(tmp_path):
    service = StorageService(BrokenStore(), photos_dir=tmp_path / "nowhere", exports_dir=tmp_path / "exports")
    assert await service.delete_inspection_photos("INS-1") == 0


# ─── Profil et reglages / Profile and settings ───

@pytest.mark.asyncio
async def test_profile_round(storage):
    assert await storage.get_inspector_profile() is None
    profile = InspectorProfile(name="John Smith", id="INS-001", company="Professional Inspections LLC")
    await storage.save_inspector_profile(profile)
    assert await storage.get_inspector_profile() == profile


@pytest.mark.asyncio
async def test_settings_defaults(storage, broken_storage):
    assert await storage.get_settings() == AppSettings()
    assert await broken_storage.get_settings() == AppSettings()

    await storage.save_settings(AppSettings(photo_quality="medium", auto_backup=True))
    loaded = await storage.get_settings()
    assert loaded.photo_quality == "medium"
    assert loaded.auto_backup is True


# ─── Export / import ───

@pytest.mark.asyncio
async def test_export_all_data(storage, make_record, tmp_path):
    await storage.save_inspection(make_record("INS-1"))
    await storage.save_inspector_profile(InspectorProfile(name="John", id="I-1"))

    path = await storage.export_all_data()

    assert Path(path).name.startswith("vehicle_inspection_backup_")
    data = json.loads((tmp_path / "exports" / Path(path).name).read_text(encoding="utf-8"))
    assert set(data) == {"inspections", "profile", "settings", "exportedAt", "version"}
    assert data["version"] == "1.0"
    assert data["inspections"][0]["id"] == "INS-1"
    assert data["profile"]["name"] == "John"


@pytest.mark.asyncio
async def test_import_restores_export(storage, make_record, make_item):
    await storage.save_inspection(make_record("INS-1", items={"Horn": make_item("warning")}))
    await storage.save_inspection(make_record("INS-2"))
    await storage.save_settings(AppSettings(photo_quality="low"))
    path = await storage.export_all_data()

    await storage.delete_inspection("INS-1")
    await storage.save_settings(AppSettings())

    result = await storage.import_data(path)

    assert result.inspections == 2
    assert result.profile is False
    assert result.settings is True
    assert [r.id for r in await storage.get_all_inspections()] == ["INS-2", "INS-1"]
    assert (await storage.get_settings()).photo_quality == "low"


@pytest.mark.asyncio
async def test_import_rejects_unknown_version(storage, tmp_path):
    path = tmp_path / "backup.json"
    path.write_text(json.dumps({"inspections": [], "exportedAt": "2024-01-01", "version": "9.9"}), encoding="utf-8")
    with pytest.raises(InvalidBackupError):
        await storage.import_data(path)


@pytest.mark.asyncio
async def test_import_rejects_garbage(storage, tmp_path):
    path = tmp_path / "backup.json"
    path.write_text("hello", encoding="utf-8")
    with pytest.raises(InvalidBackupError):
        await storage.import_data(path)
    with pytest.raises(InvalidBackupError):
        await storage.import_data(tmp_path / "missing.json")


# ─── Statistiques / Statistics ───

@pytest.mark.asyncio
async def test_storage_stats(storage, make_record):
    await storage.save_inspection(make_record("INS-1"))
    await storage.save_photo_data("INS-1", b"x" * 2048)

    stats = await storage.get_storage_stats()
    assert stats.total_inspections == 1
    assert stats.total_photos == 1
    assert stats.storage_used == "0.00 MB"


@pytest.mark.asyncio
async def test_import_with_invalid_settings_keeps_collection(storage, make_record, tmp_path):
    await storage.save_inspection(make_record("KEEP-ME"))
    backup = {
        "inspections": [make_record("IMPORTED").model_dump(mode="json", by_alias=True)],
        "settings": {"notifications": "not-a-bool"},
        "exportedAt": "2024-01-01T00:00:00.000+00:00",
        "version": "1.0",
    }
    path = tmp_path / "backup.json"
    path.write_text(json.dumps(backup), encoding="utf-8")

    with pytest.raises(InvalidBackupError):
        await storage.import_data(path)

    assert [r.id for r in await storage.get_all_inspections()] == ["KEEP-ME"]
    assert await storage.get_settings() == AppSettings()


@pytest.mark.asyncio
async def test_import_without_settings(storage, make_record, tmp_path):
    await storage.save_settings(AppSettings(photo_quality="low"))
    backup = {
        "inspections": [make_record("INS-1").model_dump(mode="json", by_alias=True)],
        "exportedAt": "2024-01-01T00:00:00.000+00:00",
        "version": "1.0",
    }
    path = tmp_path / "backup.json"
    path.write_text(json.dumps(backup), encoding="utf-8")

    result = await storage.import_data(path)

    assert result.settings is False
    assert (await storage.get_settings()).photo_quality == "low"


@pytest.mark.asyncio
async def test_filter_date_to_includes_last_millisecond(storage, kv_store, make_record):
    records = [
        make_record("LATE", completed_at="2024-03-15T23:59:59.999+00:00"),
        make_record("NEXT-DAY", completed_at="2024-03-16T00:00:00.000+00:00"),
    ]
    await kv_store.set(INSPECTIONS_KEY, json.dumps([r.model_dump(mode="json", by_alias=True) for r in records]))

    result = await storage.filter_inspections(InspectionFilters(date_to="2024-03-15"))
    assert [r.id for r in result] == ["LATE"]

    # Borne complete : comparaison inclusive / Full timestamp bound: inclusive comparison
    result = await storage.filter_inspections(InspectionFilters(date_to="2024-03-16T00:00:00.000+00:00"))
    assert [r.id for r in result] == ["LATE", "NEXT-DAY"]
