import logging
from pathlib import Path
from typing import List
from ..domain.interfaces import IDirectoryLister

logger = logging.getLogger(__name__)

class LocalDirectoryLister(IDirectoryLister):
    """
    Concrete implementation using pathlib on the local filesystem.
    """

    def __init__(self, include_hidden: bool = True):
        self.include_hidden = include_hidden

    def list_siblings(self, directory: Path, exclude: Path) -> List[Path]:
        try:
            entries = sorted(directory.iterdir())
        except OSError as e:
            # Missing, not a directory, or permission denied: this level contributes nothing
            logger.warning(f"Cannot list {directory}: {e}")
            return []

        siblings = []
        for entry in entries:
            if entry == exclude:
                continue
            if not self.include_hidden and entry.name.startswith("."):
                continue
            siblings.append(entry)
        return siblings
