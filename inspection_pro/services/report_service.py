"""
Service de rapports PDF / PDF report service.
HTML genere par gabarit Jinja2 puis converti en PDF (xhtml2pdf / reportlab).
Jinja2-templated HTML converted to PDF (xhtml2pdf / reportlab).
"""

import asyncio
import io
import logging
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape
from xhtml2pdf import pisa

from inspection_pro.config import settings
from inspection_pro.errors import ReportGenerationError, SharingUnavailableError
from inspection_pro.schemas.inspection import DefectSeverity, InspectionRecord, InspectionStatus
from inspection_pro.services.inspection_rules import InspectionRules
from inspection_pro.services.share_service import ShareTarget
from inspection_pro.utils.checklist import get_checklist_item
from inspection_pro.utils.clock import unique_timestamped_path

log = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

PDF_MIME_TYPE = "application/pdf"
SHARE_DIALOG_TITLE = "Share Vehicle Inspection Report"

STATUS_COLORS = {
    InspectionStatus.PASS: "#10B981",
    InspectionStatus.WARNING: "#F59E0B",
    InspectionStatus.FAIL: "#EF4444",
}

# Glyphes presents dans Helvetica (WinAnsi), police des rapports PDF
# Glyphs available in Helvetica (WinAnsi), the PDF report font
STATUS_GLYPHS = {
    InspectionStatus.PASS: "\u2022",
    InspectionStatus.WARNING: "!",
    InspectionStatus.FAIL: "\u00d7",
}

SEVERITY_COLORS = {
    DefectSeverity.CRITICAL: "#EF4444",
    DefectSeverity.MAJOR: "#F59E0B",
    DefectSeverity.MINOR: "#6B7280",
}


def _display_date(value: str | datetime | None) -> str:
    """Date lisible YYYY-MM-DD / Readable YYYY-MM-DD date."""
    if value is None:
        return ""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    return value.strftime("%Y-%m-%d")


def _display_percent(value: float) -> str:
    return f"{round(value, 1):g}"


class ReportService:
    """Generation et partage des rapports / Report generation and sharing."""

    def __init__(self, reports_dir: Path, share_target: ShareTarget):
        self.reports_dir = Path(reports_dir)
        self.share_target = share_target
        self._env = Environment(
            loader=FileSystemLoader(TEMPLATES_DIR),
            autoescape=select_autoescape(["html"]),
        )

    # ─── Rendu HTML / HTML rendering ───

    def render_inspection_html(self, record: InspectionRecord, generated_at: datetime | None = None) -> str:
        """HTML du rapport d'inspection / Inspection report HTML.

        Statut et compteurs derives des items sur une copie ; le record n'est pas modifie.
        Status and counts derived from the items on a copy; the record is left untouched.
        """
        derived = InspectionRules.apply_derived_fields(record)
        items = []
        for name, result in derived.inspection_items.items():
            catalog_entry = get_checklist_item(name)
            items.append({
                "name": name,
                "category": catalog_entry.category if catalog_entry else None,
                "status": result.status.value.upper(),
                "glyph": STATUS_GLYPHS[result.status],
                "color": STATUS_COLORS[result.status],
                "notes": result.notes,
                "photo_count": len(result.photos),
                "defects": [
                    {
                        "severity": d.severity.value.upper(),
                        "color": SEVERITY_COLORS[d.severity],
                        "description": d.description,
                        "location": d.location,
                    }
                    for d in result.defects
                ],
            })

        location = None
        if derived.location:
            location = derived.location.address or f"{derived.location.latitude}, {derived.location.longitude}"

        template = self._env.get_template("inspection_report.html")
        return template.render(
            app_name=settings.APP_NAME,
            vehicle=derived.vehicle_info,
            inspector=derived.inspector_info,
            inspection_date=_display_date(derived.completed_at),
            generated_date=_display_date(generated_at or datetime.now()),
            location=location,
            overall_status=derived.overall_status.value.upper(),
            status_color=STATUS_COLORS[derived.overall_status],
            progress=_display_percent(derived.progress),
            critical_defects=derived.critical_defects,
            major_defects=derived.major_defects,
            minor_defects=derived.minor_defects,
            items=items,
        )

    def render_summary_html(self, records: Sequence[InspectionRecord], generated_at: datetime | None = None) -> str:
        """HTML du rapport de synthese, lignes dans l'ordre fourni / Summary HTML, rows in input order."""
        derived = [InspectionRules.apply_derived_fields(r) for r in records]
        rows = [
            {
                "vin": r.vehicle_info.vin,
                "vehicle": f"{r.vehicle_info.make} {r.vehicle_info.model}".strip(),
                "date": _display_date(r.completed_at),
                "status": r.overall_status.value.upper(),
                "color": STATUS_COLORS[r.overall_status],
                "defects": r.total_defects,
            }
            for r in derived
        ]
        template = self._env.get_template("summary_report.html")
        return template.render(
            generated_date=_display_date(generated_at or datetime.now()),
            total=len(derived),
            passed=sum(1 for r in derived if r.overall_status == InspectionStatus.PASS),
            warnings=sum(1 for r in derived if r.overall_status == InspectionStatus.WARNING),
            failed=sum(1 for r in derived if r.overall_status == InspectionStatus.FAIL),
            total_defects=sum(r.total_defects for r in derived),
            critical_defects=sum(r.critical_defects for r in derived),
            major_defects=sum(r.major_defects for r in derived),
            minor_defects=sum(r.minor_defects for r in derived),
            rows=rows,
        )

    # ─── PDF ───

    async def generate_inspection_report(self, record: InspectionRecord) -> str:
        """PDF inspection_report_<id>_<timestamp>.pdf, retourne son chemin / returns its path."""
        if not record.id or Path(record.id).name != record.id:
            raise ReportGenerationError(f"Invalid inspection id for report: {record.id!r}")
        try:
            html = self.render_inspection_html(record)
        except TemplateError as exc:
            raise ReportGenerationError("Failed to render inspection report") from exc
        path = await self._write_pdf(html, f"inspection_report_{record.id}_")
        log.info("Inspection report generated for %s: %s", record.id, path.name)
        return str(path)

    async def generate_summary_report(self, records: Sequence[InspectionRecord]) -> str:
        """PDF inspection_summary_<timestamp>.pdf, retourne son chemin / returns its path."""
        try:
            html = self.render_summary_html(records)
        except TemplateError as exc:
            raise ReportGenerationError("Failed to render summary report") from exc
        path = await self._write_pdf(html, "inspection_summary_")
        log.info("Summary report generated for %d inspections: %s", len(records), path.name)
        return str(path)

    async def share_report(self, path: str | Path) -> str:
        """Remettre le PDF a la surface de partage / Hand the PDF to the share surface."""
        if not await self.share_target.is_available():
            raise SharingUnavailableError("Sharing is not available on this device")
        pdf_path = Path(path)
        if not pdf_path.is_file():
            raise ReportGenerationError(f"Report file not found: {pdf_path.name}")
        try:
            return await self.share_target.share(pdf_path, PDF_MIME_TYPE, SHARE_DIALOG_TITLE)
        except OSError as exc:
            raise ReportGenerationError("Failed to share report") from exc

    async def _write_pdf(self, html: str, prefix: str) -> Path:
        try:
            self.reports_dir.mkdir(parents=True, exist_ok=True)
            path = unique_timestamped_path(self.reports_dir, prefix, ".pdf")
        except OSError as exc:
            raise ReportGenerationError("Report directory unavailable") from exc

        pdf_bytes = await asyncio.to_thread(self._html_to_pdf, html)
        try:
            await asyncio.to_thread(path.write_bytes, pdf_bytes)
        except OSError as exc:
            raise ReportGenerationError("Failed to write report file") from exc
        return path

    @staticmethod
    def _html_to_pdf(html: str) -> bytes:
        buf = io.BytesIO()
        try:
            status = pisa.CreatePDF(src=html, dest=buf, encoding="utf-8")
        # xhtml2pdf peut lever n'importe quelle exception interne
        # xhtml2pdf may raise any internal exception
        except Exception as exc:
            raise ReportGenerationError("PDF conversion failed") from exc
        if status.err:
            raise ReportGenerationError(f"PDF conversion failed with {status.err} error(s)")
        return buf.getvalue()
