# File: project_scopes/core/database/connection.py

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from project_scopes.core.config.settings import settings
from .base import Base

# check_same_thread=False is needed only for SQLite
connect_args = {"check_same_thread": False} if "sqlite" in settings.DATABASE_URL else {}

engine = create_engine(
    settings.DATABASE_URL,
    echo=False,
    pool_pre_ping=True,
    connect_args=connect_args
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def init_db(bind=None):
    """
    Registers all feature models and creates their tables.
    Safe to call repeatedly.
    """
    if bind is None:
        settings.ensure_dirs()
        bind = engine

    # Import models so they are registered on Base.metadata
    import project_scopes.features.configuration.data.sql_models  # noqa: F401

    Base.metadata.create_all(bind=bind)
