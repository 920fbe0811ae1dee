"""Vehicle Inspection Pro - inspections vehicule / vehicle inspections backend."""

__version__ = "1.0.0"
