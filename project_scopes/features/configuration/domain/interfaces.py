from abc import ABC, abstractmethod
from typing import Any, Dict


class IConfigStore(ABC):
    """
    Contract for keyed configuration persistence.
    Values are JSON-compatible (bool, list, dict, str).
    """

    @abstractmethod
    def get(self, section: str, key: str, default: Any = None) -> Any:
        """Returns the stored value, or `default` when the key was never written."""
        pass

    @abstractmethod
    def set_many(self, section: str, values: Dict[str, Any]) -> None:
        """
        Writes every key in `values` as ONE logical write (single transaction).
        Raises ConfigWriteError on failure.
        """
        pass

    def set(self, section: str, key: str, value: Any) -> None:
        self.set_many(section, {key: value})
