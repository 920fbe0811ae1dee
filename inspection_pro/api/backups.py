"""Routes sauvegarde / export / Backup and export routes."""

import io
import tempfile
from pathlib import Path

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import FileResponse, StreamingResponse

from inspection_pro.api.deps import get_storage
from inspection_pro.schemas.profile import ImportResult
from inspection_pro.services.export_service import ExportService
from inspection_pro.services.storage_service import StorageService
from inspection_pro.utils.clock import epoch_ms

router = APIRouter()

MAX_BACKUP_SIZE = 50 * 1024 * 1024  # 50 MB


@router.post("/")
async def export_backup(storage: StorageService = Depends(get_storage)):
    """Export JSON complet / Full JSON export."""
    path = await storage.export_all_data()
    return FileResponse(path, media_type="application/json", filename=Path(path).name)


@router.post("/import", response_model=ImportResult)
async def import_backup(
    file: UploadFile = File(...),
    storage: StorageService = Depends(get_storage),
):
    """Restaurer un export JSON / Restore a JSON export."""
    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="No file provided")
    if len(content) > MAX_BACKUP_SIZE:
        raise HTTPException(status_code=400, detail="Backup file too large")

    with tempfile.TemporaryDirectory() as tmp_dir:
        path = Path(tmp_dir) / "backup.json"
        path.write_bytes(content)
        return await storage.import_data(path)


@router.get("/history")
async def export_history(
    format: str = Query("xlsx", pattern="^(csv|xlsx)$"),
    storage: StorageService = Depends(get_storage),
):
    """Historique en CSV ou XLSX / History as CSV or XLSX."""
    rows = ExportService.to_rows(await storage.load_inspections())
    filename = f"inspection_history_{epoch_ms()}.{format}"

    if format == "csv":
        content = ExportService.to_csv(rows)
        media_type = "text/csv; charset=utf-8"
    else:
        content = ExportService.to_xlsx(rows)
        media_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

    return StreamingResponse(
        io.BytesIO(content),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
