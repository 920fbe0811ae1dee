"""Routes reglages application / App settings routes."""

from fastapi import APIRouter, Depends

from inspection_pro.api.deps import get_storage
from inspection_pro.schemas.profile import AppSettings
from inspection_pro.services.storage_service import StorageService

router = APIRouter()


@router.get("/", response_model=AppSettings)
async def get_settings(storage: StorageService = Depends(get_storage)):
    return await storage.get_settings()


@router.put("/", response_model=AppSettings)
async def save_settings(data: AppSettings, storage: StorageService = Depends(get_storage)):
    await storage.save_settings(data)
    return data
