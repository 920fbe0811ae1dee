"""
Dependances des routes / Route dependencies.
Les services sont construits une fois au demarrage et injectes via Depends().
Services are built once at startup and injected through Depends().
"""

from dataclasses import dataclass

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from inspection_pro.config import settings
from inspection_pro.services.key_value_store import KeyValueStore
from inspection_pro.services.report_service import ReportService
from inspection_pro.services.share_service import ShareTarget, share_target_from_settings
from inspection_pro.services.storage_service import StorageService


@dataclass
class Services:
    storage: StorageService
    reports: ReportService


def build_services(
    session_factory: async_sessionmaker[AsyncSession],
    share_target: ShareTarget | None = None,
) -> Services:
    """Construire les services a partir des reglages / Build services from settings."""
    storage = StorageService(
        KeyValueStore(session_factory),
        photos_dir=settings.PHOTOS_DIR,
        exports_dir=settings.EXPORTS_DIR,
    )
    reports = ReportService(settings.REPORTS_DIR, share_target or share_target_from_settings())
    return Services(storage=storage, reports=reports)


def get_storage(request: Request) -> StorageService:
    return request.app.state.services.storage


def get_report_service(request: Request) -> ReportService:
    return request.app.state.services.reports
