"""Erreurs metier / Domain errors.

Les erreurs d'ecriture remontent a l'appelant ; les lectures simples sont
absorbees par le service de stockage.
Write errors propagate to the caller; plain reads are absorbed by the storage service.
"""


class InspectionError(Exception):
    """Erreur de base / Base error."""


class StorageWriteError(InspectionError):
    """Echec de serialisation ou d'ecriture / Serialization or write failure."""


class StorageReadError(InspectionError):
    """Echec de lecture ou de decodage / Read or decode failure."""


class PhotoWriteError(InspectionError):
    """Echec de copie d'une photo / Photo copy failure."""


class ReportGenerationError(InspectionError):
    """Echec du rendu ou du placement du rapport / Report rendering or placement failure."""


class SharingUnavailableError(InspectionError):
    """Partage non supporte sur cette plateforme / Sharing not supported on this platform."""


class InvalidBackupError(InspectionError):
    """Fichier de sauvegarde illisible ou de version inconnue / Unreadable or unknown-version backup."""


class DefectRequiredError(InspectionError):
    """Item en echec sans defaut saisi / Failed item without a captured defect."""

    def __init__(self, items: list[str]):
        self.items = items
        super().__init__(f"Defect required for failed items: {', '.join(items)}")


class MissingInformationError(InspectionError):
    """Champs obligatoires manquants au demarrage / Required fields missing at start."""

    def __init__(self, fields: list[str]):
        self.fields = fields
        super().__init__(f"Missing required information: {', '.join(fields)}")


class InvalidDefectError(InspectionError):
    """Defaut sans description / Defect without a description."""
