"""Tests des schemas / Schema tests."""

import pytest
from pydantic import ValidationError

from inspection_pro.schemas.inspection import (
    DefectSeverity,
    InspectionRecord,
    InspectionStatus,
)
from inspection_pro.schemas.profile import AppSettings
from inspection_pro.utils.checklist import (
    CATEGORIES,
    CHECKLIST,
    get_checklist_item,
    items_for_category,
)


def test_enum_values():
    assert [s.value for s in InspectionStatus] == ["pass", "warning", "fail"]
    assert [s.value for s in DefectSeverity] == ["critical", "major", "minor"]


def test_record_dumps_camel_case(make_record, make_item):
    record = make_record(items={"Brakes": make_item("fail", [("Worn pads", "critical", "Mechanical")])})
    data = record.model_dump(mode="json", by_alias=True)
    assert data["vehicleInfo"]["licensePlate"] == "ABC-123"
    assert data["inspectorInfo"]["name"] == "John Smith"
    assert data["inspectionItems"]["Brakes"]["defects"][0]["severity"] == "critical"
    assert "overallStatus" in data
    assert "criticalDefects" in data


def test_record_accepts_camel_case_json():
    record = InspectionRecord.model_validate({
        "id": "INS-42",
        "vehicleInfo": {"vin": "X", "make": "Ford", "model": "Focus", "year": "2019", "licensePlate": "ZZ-1"},
        "inspectorInfo": {"name": "Jane", "id": "I-2", "company": "Acme"},
        "inspectionItems": {"Tires": {"status": "warning", "notes": "Low tread"}},
        "overallStatus": "warning",
        "completedAt": "2024-05-01T10:00:00.000+00:00",
        "progress": 3.8,
    })
    assert record.vehicle_info.license_plate == "ZZ-1"
    assert record.inspection_items["Tires"].status == InspectionStatus.WARNING
    assert record.inspection_items["Tires"].photos == []


def test_record_rejects_empty_id(make_record):
    with pytest.raises(ValidationError):
        make_record(inspection_id="")


def test_record_rejects_unknown_severity(make_record, make_item):
    with pytest.raises(ValidationError):
        make_record(items={"Brakes": make_item("fail", [("Worn pads", "cosmetic", "Mechanical")])})


def test_settings_keep_unknown_keys():
    data = AppSettings.model_validate({"autoSave": False, "theme": "dark"})
    assert data.auto_save is False
    dumped = data.model_dump(by_alias=True)
    assert dumped["theme"] == "dark"
    assert dumped["photoQuality"] == "high"


def test_checklist_catalog():
    assert len(CHECKLIST) == 26
    assert len(CATEGORIES) == 6
    assert len({entry.item for entry in CHECKLIST}) == 26
    assert [entry.id for entry in CHECKLIST] == [str(i) for i in range(1, 27)]


def test_checklist_lookup():
    entry = get_checklist_item("Brakes")
    assert entry is not None
    assert entry.category in CATEGORIES
    assert get_checklist_item("Flux Capacitor") is None
    assert entry in items_for_category(entry.category)
