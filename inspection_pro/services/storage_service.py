"""
Service de stockage / Storage service.
Collection d'inspections serialisee sous une cle unique, profil inspecteur,
reglages, et repertoire de photos indexe par id d'inspection.
Inspection collection serialized under a single key, inspector profile,
settings, and a photo directory keyed by inspection id.
"""

import asyncio
import logging
import shutil
from datetime import date, timedelta
from pathlib import Path

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.exc import SQLAlchemyError

from inspection_pro.errors import (
    InvalidBackupError,
    PhotoWriteError,
    StorageReadError,
    StorageWriteError,
)
from inspection_pro.schemas.inspection import InspectionFilters, InspectionRecord
from inspection_pro.schemas.profile import (
    BACKUP_VERSION,
    AppSettings,
    BackupDocument,
    ImportResult,
    InspectorProfile,
    StorageStats,
)
from inspection_pro.services.inspection_rules import InspectionRules
from inspection_pro.services.key_value_store import KeyValueStore
from inspection_pro.utils.clock import now_iso, unique_timestamped_path

log = logging.getLogger(__name__)

# Cles fixes / Fixed keys
INSPECTIONS_KEY = "vehicle_inspections"
INSPECTOR_PROFILE_KEY = "inspector_profile"
SETTINGS_KEY = "app_settings"

PHOTO_SUFFIX = ".jpg"
BACKUP_PREFIX = "vehicle_inspection_backup_"

_COLLECTION = TypeAdapter(list[InspectionRecord])

# Erreurs du magasin sous-jacent / Underlying store errors
_STORE_ERRORS = (SQLAlchemyError, OSError)


class StorageService:
    """Stockage des inspections et photos / Inspection and photo storage.

    Les ecritures (lecture-modification-ecriture de toute la collection) sont
    serialisees par un verrou propre a l'instance.
    Writes (read-modify-write of the whole collection) are serialized by an
    instance-owned lock.
    """

    def __init__(self, store: KeyValueStore, photos_dir: Path, exports_dir: Path):
        self._store = store
        self.photos_dir = Path(photos_dir)
        self.exports_dir = Path(exports_dir)
        self._write_lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Creer schema et repertoire photos (idempotent) / Create schema and photo dir (idempotent)."""
        await self._store.init_schema()
        try:
            self.photos_dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            # save_photo remontera PhotoWriteError / save_photo will raise PhotoWriteError
            log.exception("Failed to create photo directory %s", self.photos_dir)

    # ─── Inspections ───

    async def load_inspections(self) -> list[InspectionRecord]:
        """Collection stockee, la plus recente en tete / Stored collection, newest first.

        Leve StorageReadError si la lecture ou le decodage echoue.
        Raises StorageReadError if reading or decoding fails.
        """
        try:
            raw = await self._store.get(INSPECTIONS_KEY)
        except _STORE_ERRORS as exc:
            raise StorageReadError("Failed to load inspections") from exc
        if not raw:
            return []
        try:
            return _COLLECTION.validate_json(raw)
        except ValidationError as exc:
            raise StorageReadError("Stored inspection data is corrupted") from exc

    async def get_all_inspections(self) -> list[InspectionRecord]:
        """Comme load_inspections, mais un echec de lecture donne [] / A read failure yields []."""
        try:
            return await self.load_inspections()
        except StorageReadError:
            log.warning("Failed to load inspections, returning empty list", exc_info=True)
            return []

    async def get_inspection_by_id(self, inspection_id: str) -> InspectionRecord | None:
        for record in await self.get_all_inspections():
            if record.id == inspection_id:
                return record
        return None

    async def save_inspection(self, record: InspectionRecord) -> InspectionRecord:
        """
        Remplacer par id et placer en tete / Replace by id and prepend.
        Statut global et compteurs recalcules, completedAt horodate.
        Overall status and counts recomputed, completedAt stamped.
        """
        stored = InspectionRules.apply_derived_fields(record)
        stored.completed_at = now_iso()

        async with self._write_lock:
            existing = await self._load_for_write()
            updated = [r for r in existing if r.id != stored.id]
            updated.insert(0, stored)
            await self._write_collection(updated)

        log.info("Inspection %s saved (%s, %d defects)", stored.id, stored.overall_status.value, stored.total_defects)
        return stored

    async def delete_inspection(self, inspection_id: str) -> bool:
        """Supprimer l'inspection puis ses photos / Delete the inspection then its photos.

        Retourne False si l'id est inconnu / Returns False if the id is unknown.
        """
        async with self._write_lock:
            existing = await self._load_for_write()
            updated = [r for r in existing if r.id != inspection_id]
            found = len(updated) != len(existing)
            if found:
                await self._write_collection(updated)

        await self.delete_inspection_photos(inspection_id)
        if found:
            log.info("Inspection %s deleted", inspection_id)
        return found

    async def search_inspections(self, query: str) -> list[InspectionRecord]:
        """Recherche sous-chaine insensible a la casse / Case-insensitive substring search.

        Champs : VIN, marque, modele, immatriculation / Fields: VIN, make, model, license plate.
        """
        needle = query.lower()
        return [
            r for r in await self.get_all_inspections()
            if needle in r.vehicle_info.vin.lower()
            or needle in r.vehicle_info.make.lower()
            or needle in r.vehicle_info.model.lower()
            or needle in r.vehicle_info.license_plate.lower()
        ]

    async def filter_inspections(self, filters: InspectionFilters) -> list[InspectionRecord]:
        """Filtrer par statut, marque, dates de completion / Filter by status, make, completion dates."""
        date_to = filters.date_to
        date_to_exclusive = False
        # Date seule : borne stricte au lendemain / Date only: strict bound at the next day
        if date_to and len(date_to) == 10:
            try:
                date_to = (date.fromisoformat(date_to) + timedelta(days=1)).isoformat()
                date_to_exclusive = True
            except ValueError:
                log.warning("Invalid date_to filter %r, compared as text", date_to)

        result = []
        for r in await self.get_all_inspections():
            if filters.status is not None and r.overall_status != filters.status:
                continue
            if filters.make and r.vehicle_info.make != filters.make:
                continue
            if filters.date_from and (r.completed_at or "") < filters.date_from:
                continue
            if date_to:
                completed_at = r.completed_at or ""
                past_end = completed_at >= date_to if date_to_exclusive else completed_at > date_to
                if past_end:
                    continue
            result.append(r)
        return result

    # ─── Photos ───

    async def save_photo(self, inspection_id: str, source_path: str | Path) -> str:
        """Copier une photo dans le repertoire permanent / Copy a photo into the permanent directory.

        Nom : <inspectionId>_<timestamp>.jpg. Retourne le nouveau chemin.
        """
        target = self._new_photo_path(inspection_id)
        try:
            await asyncio.to_thread(shutil.copyfile, source_path, target)
        except OSError as exc:
            raise PhotoWriteError("Failed to save photo") from exc
        log.info("Photo saved for inspection %s: %s", inspection_id, target.name)
        return str(target)

    async def save_photo_data(self, inspection_id: str, content: bytes) -> str:
        """Ecrire une photo recue en memoire (upload) / Write an in-memory photo (upload)."""
        target = self._new_photo_path(inspection_id)
        try:
            await asyncio.to_thread(target.write_bytes, content)
        except OSError as exc:
            raise PhotoWriteError("Failed to save photo") from exc
        log.info("Photo uploaded for inspection %s: %s", inspection_id, target.name)
        return str(target)

    async def delete_inspection_photos(self, inspection_id: str) -> int:
        """Supprimer les photos <inspectionId>_* (au mieux) / Delete <inspectionId>_* photos (best effort).

        Les echecs sont journalises, jamais remontes / Failures are logged, never raised.
        """
        prefix = f"{inspection_id}_"
        try:
            candidates = [p for p in self.photos_dir.iterdir() if p.name.startswith(prefix)]
        except OSError:
            log.warning("Failed to list photo directory %s", self.photos_dir, exc_info=True)
            return 0

        deleted = 0
        for photo in candidates:
            try:
                photo.unlink(missing_ok=True)
                deleted += 1
            except OSError:
                log.warning("Failed to delete photo %s", photo, exc_info=True)
        return deleted

    def _new_photo_path(self, inspection_id: str) -> Path:
        if not inspection_id or Path(inspection_id).name != inspection_id:
            raise PhotoWriteError(f"Invalid inspection id for photo: {inspection_id!r}")
        try:
            self.photos_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PhotoWriteError("Photo directory unavailable") from exc
        return unique_timestamped_path(self.photos_dir, f"{inspection_id}_", PHOTO_SUFFIX)

    # ─── Profil inspecteur / Inspector profile ───

    async def save_inspector_profile(self, profile: InspectorProfile) -> None:
        await self._set_json(INSPECTOR_PROFILE_KEY, profile.model_dump_json(by_alias=True), "inspector profile")

    async def get_inspector_profile(self) -> InspectorProfile | None:
        try:
            raw = await self._store.get(INSPECTOR_PROFILE_KEY)
            return InspectorProfile.model_validate_json(raw) if raw else None
        except _STORE_ERRORS + (ValidationError,):
            log.warning("Failed to load inspector profile", exc_info=True)
            return None

    # ─── Reglages / Settings ───

    async def save_settings(self, app_settings: AppSettings) -> None:
        await self._set_json(SETTINGS_KEY, app_settings.model_dump_json(by_alias=True), "settings")

    async def get_settings(self) -> AppSettings:
        """Reglages stockes, ou valeurs par defaut / Stored settings, or defaults."""
        try:
            raw = await self._store.get(SETTINGS_KEY)
            return AppSettings.model_validate_json(raw) if raw else AppSettings()
        except _STORE_ERRORS + (ValidationError,):
            log.warning("Failed to load settings, using defaults", exc_info=True)
            return AppSettings()

    # ─── Export / import ───

    async def export_all_data(self) -> str:
        """Ecrire toutes les donnees dans un fichier JSON / Write all data to one JSON file.

        Fichier : vehicle_inspection_backup_<timestamp>.json. Retourne son chemin.
        """
        document = BackupDocument(
            inspections=await self.load_inspections(),
            profile=await self.get_inspector_profile(),
            settings=await self.get_settings(),
            exported_at=now_iso(),
            version=BACKUP_VERSION,
        )
        try:
            self.exports_dir.mkdir(parents=True, exist_ok=True)
            path = unique_timestamped_path(self.exports_dir, BACKUP_PREFIX, ".json")
            payload = document.model_dump_json(by_alias=True, indent=2)
            await asyncio.to_thread(path.write_text, payload, encoding="utf-8")
        except (OSError, ValueError) as exc:
            raise StorageWriteError("Failed to export data") from exc

        log.info("Exported %d inspections to %s", len(document.inspections), path.name)
        return str(path)

    async def import_data(self, path: str | Path) -> ImportResult:
        """Restaurer une sauvegarde export_all_data / Restore an export_all_data backup.

        Remplace la collection, et le profil/reglages s'ils sont presents.
        Replaces the collection, and the profile/settings when present.
        """
        try:
            raw = await asyncio.to_thread(Path(path).read_text, encoding="utf-8")
        except OSError as exc:
            raise InvalidBackupError(f"Cannot read backup file {path}") from exc
        try:
            document = BackupDocument.model_validate_json(raw)
        except ValidationError as exc:
            raise InvalidBackupError("Backup file is not a valid inspection export") from exc
        if document.version != BACKUP_VERSION:
            raise InvalidBackupError(f"Unsupported backup version: {document.version}")

        # Un seul enregistrement par id, le premier (plus recent) gagne
        # One record per id, the first (newest) wins
        records: list[InspectionRecord] = []
        seen: set[str] = set()
        for record in document.inspections:
            if record.id not in seen:
                seen.add(record.id)
                records.append(InspectionRules.apply_derived_fields(record))

        async with self._write_lock:
            await self._write_collection(records)
        if document.profile is not None:
            await self.save_inspector_profile(document.profile)
        if document.settings is not None:
            await self.save_settings(document.settings)

        log.info("Imported %d inspections from backup", len(records))
        return ImportResult(
            inspections=len(records),
            profile=document.profile is not None,
            settings=document.settings is not None,
        )

    # ─── Statistiques / Statistics ───

    async def get_storage_stats(self) -> StorageStats:
        inspections = await self.get_all_inspections()
        try:
            photos = [p for p in self.photos_dir.iterdir() if p.is_file()] if self.photos_dir.is_dir() else []
            size_bytes = sum(p.stat().st_size for p in photos)
        except OSError:
            log.warning("Failed to read photo directory stats", exc_info=True)
            photos, size_bytes = [], 0
        return StorageStats(
            total_inspections=len(inspections),
            total_photos=len(photos),
            storage_used=f"{size_bytes / 1024 / 1024:.2f} MB",
        )

    # ─── Interne / Internal ───

    async def _load_for_write(self) -> list[InspectionRecord]:
        # Ne jamais reecrire la collection sur une lecture ratee
        # Never rewrite the collection over a failed read
        try:
            return await self.load_inspections()
        except StorageReadError as exc:
            raise StorageWriteError("Failed to load existing inspections before write") from exc

    async def _write_collection(self, records: list[InspectionRecord]) -> None:
        try:
            payload = _COLLECTION.dump_json(records, by_alias=True).decode("utf-8")
        except ValueError as exc:
            raise StorageWriteError("Failed to serialize inspections") from exc
        await self._set_json(INSPECTIONS_KEY, payload, "inspection data")

    async def _set_json(self, key: str, payload: str, what: str) -> None:
        try:
            await self._store.set(key, payload)
        except _STORE_ERRORS as exc:
            raise StorageWriteError(f"Failed to save {what}") from exc
