"""
Configuration de l'application / Application configuration.
Utilise pydantic-settings pour charger depuis .env ou variables d'environnement.
"""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Vehicle Inspection Pro"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = True

    # Stockage cle-valeur - SQLite par defaut / Key-value store - SQLite by default
    DATABASE_URL: str = "sqlite+aiosqlite:///./inspection_pro.db"

    # Repertoires de donnees / Data directories
    PHOTOS_DIR: Path = Path("data/inspection_photos")
    REPORTS_DIR: Path = Path("data/reports")
    EXPORTS_DIR: Path = Path("data/exports")
    # Vide = partage indisponible / Empty = sharing unavailable
    SHARE_DIR: str = ""

    # Sauvegarde auto / Auto-save
    AUTO_SAVE_DELAY_SECONDS: float = 1.0

    # Photos
    MAX_PHOTO_SIZE: int = 10 * 1024 * 1024  # 10 MB

    # CORS - origines autorisees / allowed origins
    CORS_ORIGINS: list[str] = ["http://localhost:8081", "http://localhost:19006"]

    # Rate Limiting
    RATE_LIMIT_DEFAULT: str = "60/minute"
    RATE_LIMIT_REPORTS: str = "10/minute"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
