"""
Modeles SQLAlchemy / SQLAlchemy models.
Importer tous les modeles ici pour que create_all les detecte.
Import all models here so create_all can detect them.
"""

from inspection_pro.models.key_value import KeyValueEntry

__all__ = ["KeyValueEntry"]
