from typing import Any, Dict, Optional
from ..domain.interfaces import IConfigStore
from ..data.repository import SqlConfigRepo

class ConfigSection:
    """
    Facade over one configuration section ("read named config key" /
    "write named config key").
    """
    def __init__(self, name: str, store: Optional[IConfigStore] = None):
        self.name = name
        self.store = store or SqlConfigRepo()

    def get(self, key: str, default: Any = None) -> Any:
        return self.store.get(self.name, key, default)

    def set(self, key: str, value: Any) -> None:
        self.store.set(self.name, key, value)

    def update(self, values: Dict[str, Any]) -> None:
        """Writes several keys as a single persistence write."""
        self.store.set_many(self.name, values)
