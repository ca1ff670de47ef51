import copy
import logging
from typing import Any, Dict
from sqlalchemy.exc import SQLAlchemyError
from project_scopes.core.database.connection import SessionLocal
from .sql_models import ConfigEntryModel
from ..domain.interfaces import IConfigStore
from ..domain.models import ConfigWriteError

logger = logging.getLogger(__name__)

class SqlConfigRepo(IConfigStore):
    def __init__(self, session_factory=None):
        # In a full DI framework, this would be injected.
        self.session_factory = session_factory or SessionLocal

    def get(self, section: str, key: str, default: Any = None) -> Any:
        with self.session_factory() as db:
            entry = db.query(ConfigEntryModel).filter(
                ConfigEntryModel.section == section,
                ConfigEntryModel.key == key
            ).first()
            if entry is None:
                return default
            # Callers get their own copy; the JSON column value is shared with the session
            return copy.deepcopy(entry.value)

    def set_many(self, section: str, values: Dict[str, Any]) -> None:
        """
        Transactional upsert:
        1. Load the existing rows for these keys.
        2. Update in place or insert new rows.
        3. Commit once.
        """
        if not values:
            return

        with self.session_factory() as db:
            try:
                existing = {
                    entry.key: entry
                    for entry in db.query(ConfigEntryModel).filter(
                        ConfigEntryModel.section == section,
                        ConfigEntryModel.key.in_(list(values))
                    )
                }

                for key, value in values.items():
                    stored = copy.deepcopy(value)
                    if key in existing:
                        existing[key].value = stored
                    else:
                        db.add(ConfigEntryModel(section=section, key=key, value=stored))

                db.commit()
                logger.debug(f"Config write [{section}]: {sorted(values)}")
            except SQLAlchemyError as e:
                db.rollback()
                raise ConfigWriteError(f"Failed to write {section}.{sorted(values)}: {e}") from e
