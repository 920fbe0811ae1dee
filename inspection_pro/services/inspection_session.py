"""
Session d'edition d'une inspection / Inspection editing session.
Etat en memoire des 26 points du catalogue, sauvegarde auto differee.
In-memory state of the 26 catalog items, debounced auto-save.

Cycle d'un item / Item lifecycle: pending -> pass | warning | fail.
Un item enregistre ne revient jamais a pending ; un passage en fail exige la
saisie d'un defaut avant finalisation.
A recorded item never returns to pending; entering fail requires a defect to
be captured before finalization.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from inspection_pro.config import settings
from inspection_pro.errors import (
    DefectRequiredError,
    InspectionError,
    InvalidDefectError,
    MissingInformationError,
)
from inspection_pro.schemas.inspection import (
    Defect,
    DefectSeverity,
    InspectionItemResult,
    InspectionRecord,
    InspectionStatus,
    InspectorInfo,
    Location,
    VehicleInfo,
)
from inspection_pro.services.inspection_rules import InspectionRules
from inspection_pro.services.storage_service import StorageService
from inspection_pro.utils.checklist import CHECKLIST, get_checklist_item
from inspection_pro.utils.clock import epoch_ms, now_iso

log = logging.getLogger(__name__)

PENDING = "pending"


def new_inspection_id() -> str:
    """Identifiant horodate / Timestamp-derived id (INS-<ms>)."""
    return f"INS-{epoch_ms()}"


class AutoSaver:
    """Sauvegarde differee (debounce) / Debounced save.

    Chaque schedule() annule le minuteur en attente et le rearme. Une sauvegarde
    commencee n'est jamais annulee ; le verrou garantit au plus une sauvegarde
    en cours.
    Each schedule() cancels the pending timer and re-arms it. A started save is
    never cancelled; the lock guarantees at most one save in flight.
    """

    def __init__(self, save: Callable[[], Awaitable[Any]], delay: float):
        self._save = save
        self.delay = delay
        self._timer: asyncio.Task | None = None
        self._in_flight: set[asyncio.Task] = set()
        self._lock = asyncio.Lock()
        self.last_error: InspectionError | None = None
        self.save_count = 0

    @property
    def pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def schedule(self) -> None:
        if self.pending:
            self._timer.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._run())

    async def flush(self) -> None:
        """Annuler le minuteur et sauvegarder maintenant / Cancel the timer and save now.

        Leve l'erreur de sauvegarde / Raises the save error.
        """
        if self.pending:
            self._timer.cancel()
        await self._save_locked(raise_errors=True)

    async def close(self) -> None:
        """Abandonner le minuteur, attendre les sauvegardes en cours / Drop the timer, wait for in-flight saves."""
        if self.pending:
            self._timer.cancel()
        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)

    async def _run(self) -> None:
        await asyncio.sleep(self.delay)
        save_task = asyncio.ensure_future(self._save_locked(raise_errors=False))
        self._in_flight.add(save_task)
        save_task.add_done_callback(self._in_flight.discard)
        await asyncio.shield(save_task)

    async def _save_locked(self, raise_errors: bool) -> None:
        async with self._lock:
            try:
                await self._save()
            except InspectionError as exc:
                self.last_error = exc
                if raise_errors:
                    raise
                log.error("Auto-save failed: %s", exc)
                return
            self.last_error = None
            self.save_count += 1


@dataclass
class ItemDraft:
    """Item en cours d'edition / Item being edited."""
    category: str
    status: str = PENDING
    notes: str | None = None
    photos: list[str] = field(default_factory=list)
    defects: list[Defect] = field(default_factory=list)


def _has_defect(draft: ItemDraft) -> bool:
    # Un defaut vide (ancien enregistrement) ne compte pas / A blank defect (legacy record) does not count
    return any(d.description.strip() for d in draft.defects)


class InspectionSession:
    """Edition d'une inspection / Editing of one inspection."""

    def __init__(
        self,
        storage: StorageService,
        inspection_id: str,
        vehicle_info: VehicleInfo,
        inspector_info: InspectorInfo,
        auto_save: bool = False,
        auto_save_delay: float | None = None,
    ):
        self.storage = storage
        self.inspection_id = inspection_id
        self.vehicle_info = vehicle_info
        self.inspector_info = inspector_info
        self.location: Location | None = None
        self.signature: str | None = None
        self.finalized_at: str | None = None
        self.items: dict[str, ItemDraft] = {
            entry.item: ItemDraft(category=entry.category) for entry in CHECKLIST
        }
        self.autosaver: AutoSaver | None = None
        if auto_save:
            delay = settings.AUTO_SAVE_DELAY_SECONDS if auto_save_delay is None else auto_save_delay
            self.autosaver = AutoSaver(self.save, delay)

    # ─── Creation / reprise ───

    @classmethod
    def start(
        cls,
        storage: StorageService,
        vehicle_info: VehicleInfo,
        inspector_info: InspectorInfo,
        auto_save: bool = False,
        auto_save_delay: float | None = None,
        inspection_id: str | None = None,
    ) -> "InspectionSession":
        """Nouvelle inspection / New inspection.

        Marque, modele, annee, nom et id inspecteur obligatoires.
        Make, model, year, inspector name and id are required.
        """
        missing = [
            label for label, value in (
                ("make", vehicle_info.make),
                ("model", vehicle_info.model),
                ("year", vehicle_info.year),
                ("inspector name", inspector_info.name),
                ("inspector id", inspector_info.id),
            )
            if not value.strip()
        ]
        if missing:
            raise MissingInformationError(missing)
        return cls(
            storage, inspection_id or new_inspection_id(), vehicle_info, inspector_info,
            auto_save, auto_save_delay,
        )

    @classmethod
    async def resume(
        cls,
        storage: StorageService,
        inspection_id: str,
        auto_save: bool = False,
        auto_save_delay: float | None = None,
    ) -> "InspectionSession | None":
        """Reprendre une inspection stockee / Resume a stored inspection."""
        record = await storage.get_inspection_by_id(inspection_id)
        if record is None:
            return None

        session = cls(
            storage, record.id, record.vehicle_info, record.inspector_info, auto_save, auto_save_delay,
        )
        session.location = record.location
        session.signature = record.signature
        session.finalized_at = record.finalized_at
        for name, result in record.inspection_items.items():
            entry = get_checklist_item(name)
            # Items hors catalogue conserves a la fin / Off-catalog items kept at the end
            draft = session.items.setdefault(name, ItemDraft(category=entry.category if entry else ""))
            draft.status = result.status.value
            draft.notes = result.notes
            draft.photos = list(result.photos)
            draft.defects = list(result.defects)
        return session

    # ─── Saisie / Recording ───

    def record_status(self, item_name: str, status: InspectionStatus | str) -> bool:
        """Enregistrer le statut d'un item / Record an item status.

        Retourne True si un formulaire de defaut est requis (passage en fail sans defaut).
        Returns True when a defect form is due (entering fail without a defect).
        """
        draft = self._item(item_name)
        new_status = InspectionStatus(status)
        draft.status = new_status.value
        self._touch()
        return new_status == InspectionStatus.FAIL and not _has_defect(draft)

    def set_notes(self, item_name: str, notes: str | None) -> None:
        self._item(item_name).notes = notes or None
        self._touch()

    def add_defect(
        self,
        item_name: str,
        description: str,
        severity: DefectSeverity | str,
        location: str | None = None,
    ) -> Defect:
        """Ajouter un defaut ; location par defaut = categorie / Add a defect; location defaults to the category.

        Leve InvalidDefectError si la description est vide.
        Raises InvalidDefectError if the description is blank.
        """
        draft = self._item(item_name)
        description = description.strip()
        if not description:
            raise InvalidDefectError(f"Please provide a description for the defect on {item_name}")
        defect = Defect(
            description=description,
            severity=DefectSeverity(severity),
            location=location or draft.category,
        )
        draft.defects.append(defect)
        self._touch()
        return defect

    async def add_photo(self, item_name: str, source_path: str | Path) -> str:
        """Copier la photo puis l'attacher / Copy the photo then attach it."""
        draft = self._item(item_name)
        saved_path = await self.storage.save_photo(self.inspection_id, source_path)
        draft.photos.append(saved_path)
        self._touch()
        return saved_path

    # ─── Etat derive / Derived state ───

    @property
    def progress(self) -> float:
        recorded = sum(1 for d in self.items.values() if d.status != PENDING)
        return InspectionRules.progress(recorded, len(self.items))

    def items_missing_defects(self) -> list[str]:
        return [
            name for name, d in self.items.items()
            if d.status == InspectionStatus.FAIL.value and not _has_defect(d)
        ]

    def to_record(self) -> InspectionRecord:
        """Record complet ; items pending exclus / Full record; pending items excluded."""
        items = {
            name: InspectionItemResult(
                status=InspectionStatus(d.status),
                notes=d.notes,
                photos=list(d.photos),
                defects=list(d.defects),
            )
            for name, d in self.items.items()
            if d.status != PENDING
        }
        record = InspectionRecord(
            id=self.inspection_id,
            vehicle_info=self.vehicle_info,
            inspector_info=self.inspector_info,
            inspection_items=items,
            progress=self.progress,
            finalized_at=self.finalized_at,
            location=self.location,
            signature=self.signature,
        )
        return InspectionRules.apply_derived_fields(record)

    # ─── Sauvegarde / Saving ───

    async def save(self) -> InspectionRecord:
        return await self.storage.save_inspection(self.to_record())

    async def flush(self) -> InspectionRecord | None:
        """Sauvegarde immediate (via l'auto-save s'il existe) / Immediate save (through auto-save if any)."""
        if self.autosaver is None:
            return await self.save()
        await self.autosaver.flush()
        return await self.storage.get_inspection_by_id(self.inspection_id)

    async def finalize(self) -> InspectionRecord:
        """Finaliser et sauvegarder / Finalize and save.

        Leve DefectRequiredError si un item en echec n'a pas de defaut.
        Raises DefectRequiredError if a failed item has no defect.
        """
        missing = self.items_missing_defects()
        if missing:
            raise DefectRequiredError(missing)
        if self.finalized_at is None:
            self.finalized_at = now_iso()
        if self.autosaver is not None:
            await self.autosaver.flush()
            stored = await self.storage.get_inspection_by_id(self.inspection_id)
            if stored is not None:
                return stored
        return await self.save()

    async def close(self) -> None:
        if self.autosaver is not None:
            await self.autosaver.close()

    # ─── Interne / Internal ───

    def _item(self, item_name: str) -> ItemDraft:
        try:
            return self.items[item_name]
        except KeyError:
            raise KeyError(f"Unknown checklist item: {item_name}") from None

    def _touch(self) -> None:
        if self.autosaver is not None:
            self.autosaver.schedule()
