"""
Surface de partage / Share surface.
Sur serveur, partager = deposer le fichier dans un repertoire de sortie
surveille (dossier synchronise, boite d'envoi, ...).
On a server, sharing = dropping the file into a watched outbox directory.
"""

import asyncio
import logging
import shutil
from pathlib import Path

from inspection_pro.config import settings

log = logging.getLogger(__name__)


class ShareTarget:
    """Interface de partage / Share interface."""

    async def is_available(self) -> bool:
        raise NotImplementedError

    async def share(self, path: Path, mime_type: str, dialog_title: str) -> str:
        """Partager un fichier, retourne sa reference partagee / Share a file, returns its shared reference."""
        raise NotImplementedError


class UnavailableShareTarget(ShareTarget):
    """Aucun partage configure / No sharing configured."""

    async def is_available(self) -> bool:
        return False

    async def share(self, path: Path, mime_type: str, dialog_title: str) -> str:
        raise RuntimeError("Sharing is not available")


class DirectoryShareTarget(ShareTarget):
    """Copie dans un repertoire de sortie / Copy into an outbox directory."""

    def __init__(self, outbox: Path):
        self.outbox = Path(outbox)

    async def is_available(self) -> bool:
        try:
            self.outbox.mkdir(parents=True, exist_ok=True)
        except OSError:
            log.warning("Share outbox %s cannot be created", self.outbox, exc_info=True)
            return False
        return self.outbox.is_dir()

    async def share(self, path: Path, mime_type: str, dialog_title: str) -> str:
        target = self.outbox / path.name
        await asyncio.to_thread(shutil.copyfile, path, target)
        log.info("%s: %s (%s) copied to %s", dialog_title, path.name, mime_type, self.outbox)
        return str(target)


def share_target_from_settings() -> ShareTarget:
    if settings.SHARE_DIR:
        return DirectoryShareTarget(Path(settings.SHARE_DIR))
    return UnavailableShareTarget()
