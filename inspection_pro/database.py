"""
Connexion a la base de donnees / Database connection.
SQLite (aiosqlite) par defaut via SQLAlchemy 2.0 async. La base ne sert que de
magasin cle-valeur / The database is only used as a key-value store.
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from inspection_pro.config import settings


class Base(DeclarativeBase):
    pass


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Creer un moteur async / Create an async engine."""
    engine_kwargs: dict = {"echo": echo}
    if not database_url.startswith("sqlite"):
        engine_kwargs.update({
            "pool_size": 5,
            "max_overflow": 10,
            "pool_recycle": 1800,
            "pool_pre_ping": True,
        })
    return create_async_engine(database_url, **engine_kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

async_session = build_session_factory(engine)


async def init_db(target: AsyncEngine | None = None):
    """Creer les tables au demarrage / Create tables on startup."""
    # Enregistrer les modeles sur Base.metadata / Register models on Base.metadata
    import inspection_pro.models  # noqa: F401

    async with (target or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
