from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, JSON, UniqueConstraint
from project_scopes.core.database.base import Base

def utc_now():
    return datetime.now(timezone.utc)

class ConfigEntryModel(Base):
    """
    One configuration value, addressed by (section, key).
    e.g. ("project-scopes", "activeScopes") or ("files", "exclude").
    """
    __tablename__ = "config_entries"
    __table_args__ = (
        UniqueConstraint("section", "key", name="uq_config_entries_section_key"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    section = Column(String, nullable=False, index=True)
    key = Column(String, nullable=False)
    value = Column(JSON, nullable=True)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
