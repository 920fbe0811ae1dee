"""Schemas profil inspecteur, reglages, sauvegardes / Inspector profile, settings, backup schemas."""

from pydantic import BaseModel, ConfigDict

from inspection_pro.schemas.inspection import CAMEL_CONFIG, InspectionRecord

BACKUP_VERSION = "1.0"


class InspectorProfile(BaseModel):
    model_config = CAMEL_CONFIG

    name: str
    id: str
    company: str = ""
    email: str = ""
    phone: str = ""
    certifications: list[str] = []


class AppSettings(BaseModel):
    """Reglages application ; les cles inconnues sont conservees / Unknown keys are kept."""
    model_config = ConfigDict(**CAMEL_CONFIG, extra="allow")

    notifications: bool = True
    auto_save: bool = True
    offline_mode: bool = True
    photo_quality: str = "high"
    auto_backup: bool = False


class StorageStats(BaseModel):
    model_config = CAMEL_CONFIG

    total_inspections: int
    total_photos: int
    storage_used: str


class BackupDocument(BaseModel):
    """Export complet / Full export: {inspections, profile, settings, exportedAt, version}."""
    model_config = CAMEL_CONFIG

    inspections: list[InspectionRecord] = []
    profile: InspectorProfile | None = None
    settings: AppSettings | None = None
    exported_at: str
    version: str = BACKUP_VERSION


class ImportResult(BaseModel):
    model_config = CAMEL_CONFIG

    inspections: int
    profile: bool
    settings: bool
