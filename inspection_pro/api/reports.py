"""
Endpoints de rapports PDF / PDF report endpoints.
Generation a partir des inspections stockees / Generated from stored inspections.
"""

from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import FileResponse
from pydantic import BaseModel

from inspection_pro.api.deps import get_report_service, get_storage
from inspection_pro.config import settings
from inspection_pro.rate_limit import limiter
from inspection_pro.services.report_service import PDF_MIME_TYPE, ReportService
from inspection_pro.services.storage_service import StorageService

router = APIRouter()


class SummaryRequest(BaseModel):
    """Ids a inclure, dans l'ordre ; vide = tout l'historique / Ids to include, in order; empty = full history."""
    ids: list[str] = []


class ShareResponse(BaseModel):
    report: str
    shared: str


def _pdf_response(path: str) -> FileResponse:
    return FileResponse(path, media_type=PDF_MIME_TYPE, filename=Path(path).name)


@router.post("/summary")
@limiter.limit(settings.RATE_LIMIT_REPORTS)
async def generate_summary(
    request: Request,
    data: SummaryRequest | None = None,
    storage: StorageService = Depends(get_storage),
    reports: ReportService = Depends(get_report_service),
):
    """Rapport de synthese / Summary report."""
    records = await storage.load_inspections()
    if data and data.ids:
        by_id = {r.id: r for r in records}
        missing = [i for i in data.ids if i not in by_id]
        if missing:
            raise HTTPException(status_code=404, detail=f"Inspections not found: {', '.join(missing)}")
        records = [by_id[i] for i in data.ids]
    path = await reports.generate_summary_report(records)
    return _pdf_response(path)


@router.post("/{inspection_id}")
@limiter.limit(settings.RATE_LIMIT_REPORTS)
async def generate_report(
    request: Request,
    inspection_id: str,
    storage: StorageService = Depends(get_storage),
    reports: ReportService = Depends(get_report_service),
):
    """Rapport d'inspection PDF / Inspection PDF report."""
    record = await storage.get_inspection_by_id(inspection_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Inspection not found")
    path = await reports.generate_inspection_report(record)
    return _pdf_response(path)


@router.post("/{inspection_id}/share", response_model=ShareResponse)
@limiter.limit(settings.RATE_LIMIT_REPORTS)
async def share_report(
    request: Request,
    inspection_id: str,
    storage: StorageService = Depends(get_storage),
    reports: ReportService = Depends(get_report_service),
):
    """Generer puis partager le rapport / Generate then share the report."""
    record = await storage.get_inspection_by_id(inspection_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Inspection not found")
    path = await reports.generate_inspection_report(record)
    shared = await reports.share_report(path)
    return ShareResponse(report=path, shared=shared)
