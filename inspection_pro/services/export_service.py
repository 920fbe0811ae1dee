"""
Service d'export CSV/Excel de l'historique / History CSV/Excel export service.
Une ligne par inspection / One row per inspection.
"""

import csv
import io
from collections.abc import Sequence
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Font

from inspection_pro.schemas.inspection import InspectionRecord
from inspection_pro.services.inspection_rules import InspectionRules

HISTORY_FIELDS = [
    "id",
    "completed_at",
    "vin",
    "make",
    "model",
    "year",
    "license_plate",
    "inspector",
    "overall_status",
    "progress",
    "score",
    "total_defects",
    "critical_defects",
    "major_defects",
    "minor_defects",
]


class ExportService:
    """Export de l'historique vers CSV/XLSX / History export to CSV/XLSX."""

    @staticmethod
    def inspection_to_row(record: InspectionRecord) -> dict[str, Any]:
        """Aplatir une inspection / Flatten an inspection."""
        derived = InspectionRules.apply_derived_fields(record)
        return {
            "id": derived.id,
            "completed_at": derived.completed_at,
            "vin": derived.vehicle_info.vin,
            "make": derived.vehicle_info.make,
            "model": derived.vehicle_info.model,
            "year": derived.vehicle_info.year,
            "license_plate": derived.vehicle_info.license_plate,
            "inspector": derived.inspector_info.name,
            "overall_status": derived.overall_status.value,
            "progress": derived.progress,
            "score": InspectionRules.score(derived),
            "total_defects": derived.total_defects,
            "critical_defects": derived.critical_defects,
            "major_defects": derived.major_defects,
            "minor_defects": derived.minor_defects,
        }

    @staticmethod
    def to_rows(records: Sequence[InspectionRecord]) -> list[dict[str, Any]]:
        return [ExportService.inspection_to_row(r) for r in records]

    @staticmethod
    def to_csv(rows: list[dict], fields: list[str] = HISTORY_FIELDS) -> bytes:
        """Générer un CSV UTF-8 BOM avec séparateur ';' / Generate UTF-8 BOM CSV with ';' separator."""
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=fields, delimiter=";", extrasaction="ignore")
        writer.writeheader()
        for row in rows:
            writer.writerow({f: row.get(f, "") for f in fields})
        return ("\ufeff" + output.getvalue()).encode("utf-8")

    @staticmethod
    def to_xlsx(rows: list[dict], fields: list[str] = HISTORY_FIELDS, sheet_name: str = "Inspections") -> bytes:
        """Générer un fichier Excel / Generate an Excel file."""
        wb = Workbook()
        ws = wb.active
        ws.title = sheet_name

        # En-têtes / Headers
        for col_idx, field in enumerate(fields, 1):
            cell = ws.cell(row=1, column=col_idx, value=field)
            cell.font = Font(bold=True)

        # Données / Data rows
        for row_idx, row in enumerate(rows, 2):
            for col_idx, field in enumerate(fields, 1):
                ws.cell(row=row_idx, column=col_idx, value=row.get(field))

        buf = io.BytesIO()
        wb.save(buf)
        return buf.getvalue()
