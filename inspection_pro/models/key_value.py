"""Modele entree cle-valeur / Key-value entry model.

Une ligne = une cle (collection d'inspections, profil, reglages) et sa valeur JSON.
One row = one key (inspection collection, profile, settings) and its JSON value.
"""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from inspection_pro.database import Base


class KeyValueEntry(Base):
    """Valeur serialisee sous une cle fixe / Serialized value under a fixed key."""
    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[str] = mapped_column(String(32), nullable=False)  # ISO 8601

    def __repr__(self) -> str:
        return f"<KeyValueEntry {self.key} ({len(self.value)} chars)>"
