"""Routes inspections vehicule / Vehicle inspection routes."""

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile

from inspection_pro.api.deps import get_storage
from inspection_pro.config import settings
from inspection_pro.rate_limit import limiter
from inspection_pro.schemas.inspection import (
    ChecklistItemRead,
    InspectionFilters,
    InspectionRecord,
    InspectionStartRequest,
    InspectionStartResponse,
    InspectionStatus,
    InspectionSummary,
    PhotoRead,
)
from inspection_pro.schemas.profile import StorageStats
from inspection_pro.services.inspection_rules import InspectionRules
from inspection_pro.services.inspection_session import InspectionSession
from inspection_pro.services.storage_service import StorageService
from inspection_pro.utils.checklist import CHECKLIST

router = APIRouter()


def _to_summary(record: InspectionRecord) -> InspectionSummary:
    """Ligne d'historique / History row."""
    vi = record.vehicle_info
    return InspectionSummary(
        id=record.id,
        vin=vi.vin,
        vehicle=" ".join(part for part in (vi.year, vi.make, vi.model) if part),
        license_plate=vi.license_plate,
        completed_at=record.completed_at,
        overall_status=record.overall_status,
        total_defects=record.total_defects,
        score=InspectionRules.score(record),
    )


async def _query_inspections(
    storage: StorageService,
    q: str | None,
    filters: InspectionFilters,
) -> list[InspectionRecord]:
    """Recherche puis filtres, ordre stocke conserve / Search then filters, stored order kept."""
    records = await storage.filter_inspections(filters)
    if q:
        matching = {r.id for r in await storage.search_inspections(q)}
        records = [r for r in records if r.id in matching]
    return records


# ─── Catalogue / Checklist ───

@router.get("/checklist", response_model=list[ChecklistItemRead])
async def get_checklist():
    return [ChecklistItemRead(id=e.id, category=e.category, item=e.item) for e in CHECKLIST]


@router.post("/start", response_model=InspectionStartResponse, status_code=201)
async def start_inspection(
    data: InspectionStartRequest,
    storage: StorageService = Depends(get_storage),
):
    """Demarrer une inspection (rien n'est stocke tant qu'aucun item n'est saisi) / Start an inspection.

    Nothing is stored until an item is recorded.
    """
    session = InspectionSession.start(storage, data.vehicle_info, data.inspector_info)
    return InspectionStartResponse(
        inspection_id=session.inspection_id,
        items=[ChecklistItemRead(id=e.id, category=e.category, item=e.item) for e in CHECKLIST],
    )


# ─── Historique / History ───

@router.get("/", response_model=list[InspectionRecord])
async def list_inspections(
    q: str | None = None,
    status: InspectionStatus | None = None,
    make: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    storage: StorageService = Depends(get_storage),
):
    filters = InspectionFilters(status=status, make=make, date_from=date_from, date_to=date_to)
    return await _query_inspections(storage, q, filters)


@router.get("/history", response_model=list[InspectionSummary])
async def list_history(
    q: str | None = None,
    status: InspectionStatus | None = None,
    storage: StorageService = Depends(get_storage),
):
    records = await _query_inspections(storage, q, InspectionFilters(status=status))
    return [_to_summary(r) for r in records]


@router.get("/stats", response_model=StorageStats)
async def get_stats(storage: StorageService = Depends(get_storage)):
    return await storage.get_storage_stats()


# ─── Inspection ───

@router.get("/{inspection_id}", response_model=InspectionRecord)
async def get_inspection(inspection_id: str, storage: StorageService = Depends(get_storage)):
    record = await storage.get_inspection_by_id(inspection_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Inspection not found")
    return record


@router.put("/{inspection_id}", response_model=InspectionRecord)
async def save_inspection(
    inspection_id: str,
    data: InspectionRecord,
    storage: StorageService = Depends(get_storage),
):
    """Sauvegarde complete (remplacement par id) / Full save (replace by id)."""
    if data.id != inspection_id:
        raise HTTPException(status_code=400, detail="Inspection id mismatch")
    return await storage.save_inspection(data)


@router.delete("/{inspection_id}", status_code=204)
async def delete_inspection(inspection_id: str, storage: StorageService = Depends(get_storage)):
    """Supprimer l'inspection et ses photos / Delete the inspection and its photos."""
    if not await storage.delete_inspection(inspection_id):
        raise HTTPException(status_code=404, detail="Inspection not found")


@router.post("/{inspection_id}/photos", response_model=PhotoRead, status_code=201)
@limiter.limit(settings.RATE_LIMIT_DEFAULT)
async def upload_photo(
    request: Request,
    inspection_id: str,
    file: UploadFile = File(...),
    storage: StorageService = Depends(get_storage),
):
    """Upload photo pour une inspection / Upload inspection photo.

    L'inspection peut ne pas encore etre stockee / The inspection may not be stored yet.
    """
    mime = file.content_type or "image/jpeg"
    if not mime.startswith("image/"):
        raise HTTPException(status_code=400, detail="Only images are accepted")

    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Empty photo")
    if len(content) > settings.MAX_PHOTO_SIZE:
        raise HTTPException(status_code=400, detail="Photo too large")

    path = await storage.save_photo_data(inspection_id, content)
    return PhotoRead(inspection_id=inspection_id, path=path, file_size=len(content))
