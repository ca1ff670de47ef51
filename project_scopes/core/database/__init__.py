from .base import Base
from .connection import engine, SessionLocal, init_db

__all__ = ["Base", "engine", "SessionLocal", "init_db"]
