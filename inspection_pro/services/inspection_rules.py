"""
Regles de derivation d'une inspection / Inspection derivation rules.
Statut global et compteurs de defauts, recalcules depuis les items.
Overall status and defect counts, recomputed from the items.
"""

from collections.abc import Mapping

from inspection_pro.schemas.inspection import (
    DefectSeverity,
    InspectionItemResult,
    InspectionRecord,
    InspectionStatus,
)


class InspectionRules:
    """Derivation statut/defauts / Status and defect derivation."""

    @staticmethod
    def count_defects(items: Mapping[str, InspectionItemResult]) -> dict[DefectSeverity, int]:
        """Nombre de defauts par gravite / Defect count per severity."""
        counts = {severity: 0 for severity in DefectSeverity}
        for item in items.values():
            for defect in item.defects:
                counts[defect.severity] += 1
        return counts

    @staticmethod
    def overall_status(items: Mapping[str, InspectionItemResult]) -> InspectionStatus:
        """
        Statut global / Overall status.
        fail si un item est fail ou s'il existe un defaut critique,
        sinon warning si un item est warning ou s'il existe un defaut majeur, sinon pass.
        """
        counts = InspectionRules.count_defects(items)
        statuses = [item.status for item in items.values()]
        if InspectionStatus.FAIL in statuses or counts[DefectSeverity.CRITICAL] > 0:
            return InspectionStatus.FAIL
        if InspectionStatus.WARNING in statuses or counts[DefectSeverity.MAJOR] > 0:
            return InspectionStatus.WARNING
        return InspectionStatus.PASS

    @staticmethod
    def apply_derived_fields(record: InspectionRecord) -> InspectionRecord:
        """Copie avec statut et compteurs recalcules / Copy with recomputed status and counts.

        Le record d'entree n'est jamais modifie / The input record is never mutated.
        """
        counts = InspectionRules.count_defects(record.inspection_items)
        return record.model_copy(
            deep=True,
            update={
                "overall_status": InspectionRules.overall_status(record.inspection_items),
                "critical_defects": counts[DefectSeverity.CRITICAL],
                "major_defects": counts[DefectSeverity.MAJOR],
                "minor_defects": counts[DefectSeverity.MINOR],
                "total_defects": sum(counts.values()),
            },
        )

    @staticmethod
    def score(record: InspectionRecord) -> int:
        """Pourcentage d'items conformes / Percentage of recorded items that passed."""
        total = len(record.inspection_items)
        if total == 0:
            return 0
        passed = sum(1 for item in record.inspection_items.values() if item.status == InspectionStatus.PASS)
        return round(passed / total * 100)

    @staticmethod
    def progress(recorded: int, total: int) -> float:
        """Avancement en % / Progress (%)."""
        if total <= 0:
            return 0.0
        return round(recorded / total * 100, 1)
