"""Schemas inspection vehicule / Vehicle inspection schemas.

Les noms JSON restent en camelCase (format des sauvegardes et de l'application mobile).
JSON names stay camelCase (backup and mobile app format).
"""

import enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

CAMEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InspectionStatus(str, enum.Enum):
    """Resultat item ou global / Item or overall result."""
    PASS = "pass"
    WARNING = "warning"
    FAIL = "fail"


class DefectSeverity(str, enum.Enum):
    """Gravite d'un defaut / Defect severity."""
    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"


# --- Sous-objets / Sub-objects ---

class VehicleInfo(BaseModel):
    model_config = CAMEL_CONFIG

    vin: str = ""
    make: str = ""
    model: str = ""
    year: str = ""
    color: str = ""
    mileage: str = ""
    license_plate: str = ""


class InspectorInfo(BaseModel):
    model_config = CAMEL_CONFIG

    name: str = ""
    id: str = ""
    company: str = ""


class Location(BaseModel):
    model_config = CAMEL_CONFIG

    latitude: float
    longitude: float
    address: str | None = None


class Defect(BaseModel):
    """Defaut rattache a un seul item / Defect owned by exactly one item."""
    model_config = CAMEL_CONFIG

    description: str
    severity: DefectSeverity
    location: str  # nom de categorie / category name


class InspectionItemResult(BaseModel):
    model_config = CAMEL_CONFIG

    status: InspectionStatus
    notes: str | None = None
    photos: list[str] = []
    defects: list[Defect] = []


# --- Inspection ---

class InspectionRecord(BaseModel):
    """Inspection complete telle que stockee / Full inspection as stored.

    overall_status et les compteurs de defauts sont derives des items et
    recalcules a chaque sauvegarde / overall_status and defect counts are
    derived from the items and recomputed on every save.
    """
    model_config = CAMEL_CONFIG

    id: str = Field(min_length=1)
    vehicle_info: VehicleInfo
    inspector_info: InspectorInfo
    inspection_items: dict[str, InspectionItemResult] = {}
    overall_status: InspectionStatus = InspectionStatus.PASS
    # Horodatage de la derniere sauvegarde / Last save timestamp (ISO 8601)
    completed_at: str | None = None
    # Finalisation explicite / Explicit finalization (ISO 8601)
    finalized_at: str | None = None
    progress: float = Field(default=0, ge=0, le=100)
    total_defects: int = 0
    critical_defects: int = 0
    major_defects: int = 0
    minor_defects: int = 0
    location: Location | None = None
    signature: str | None = None


class InspectionSummary(BaseModel):
    """Ligne d'historique / History row."""
    model_config = CAMEL_CONFIG

    id: str
    vin: str
    vehicle: str
    license_plate: str
    completed_at: str | None = None
    overall_status: InspectionStatus
    total_defects: int
    score: int


class InspectionFilters(BaseModel):
    """Filtres historique / History filters.

    Bornes de date comparees en chaine ISO, incluses / ISO string date bounds, inclusive.
    """
    model_config = CAMEL_CONFIG

    status: InspectionStatus | None = None
    make: str | None = None
    date_from: str | None = None
    date_to: str | None = None


class ChecklistItemRead(BaseModel):
    model_config = CAMEL_CONFIG

    id: str
    category: str
    item: str


class InspectionStartRequest(BaseModel):
    """Demarre une inspection / Start an inspection."""
    model_config = CAMEL_CONFIG

    vehicle_info: VehicleInfo
    inspector_info: InspectorInfo


class InspectionStartResponse(BaseModel):
    """Id attribue et points a controler / Assigned id and items to check."""
    model_config = CAMEL_CONFIG

    inspection_id: str
    items: list[ChecklistItemRead]


class PhotoRead(BaseModel):
    model_config = CAMEL_CONFIG

    inspection_id: str
    path: str
    file_size: int
