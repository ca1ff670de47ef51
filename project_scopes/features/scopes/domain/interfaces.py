from abc import ABC, abstractmethod
from pathlib import Path
from typing import List


class IDirectoryLister(ABC):
    """
    Contract for enumerating one directory level.
    """
    @abstractmethod
    def list_siblings(self, directory: Path, exclude: Path) -> List[Path]:
        """
        Returns the absolute paths of every entry (file or directory) directly
        inside `directory`, except `exclude`.
        A missing or unreadable directory yields an empty list.
        """
        pass
