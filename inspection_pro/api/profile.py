"""Routes profil inspecteur / Inspector profile routes."""

from fastapi import APIRouter, Depends, HTTPException

from inspection_pro.api.deps import get_storage
from inspection_pro.schemas.profile import InspectorProfile
from inspection_pro.services.storage_service import StorageService

router = APIRouter()


@router.get("/", response_model=InspectorProfile)
async def get_profile(storage: StorageService = Depends(get_storage)):
    profile = await storage.get_inspector_profile()
    if profile is None:
        raise HTTPException(status_code=404, detail="Inspector profile not set")
    return profile


@router.put("/", response_model=InspectorProfile)
async def save_profile(data: InspectorProfile, storage: StorageService = Depends(get_storage)):
    await storage.save_inspector_profile(data)
    return data
