# File: project_scopes/core/config/settings.py

import os
from pathlib import Path
from typing import Optional


class Settings:
    # --- Paths ---
    # project_scopes/core/config/settings.py -> config -> core -> project_scopes -> ROOT
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent.parent
    DATA_DIR: Path = Path(os.getenv("PROJECT_SCOPES_DATA_DIR", str(BASE_DIR / "data")))

    # --- Project ---
    # Root of the tree whose visibility is being filtered.
    PROJECT_ROOT: Optional[Path] = (
        Path(os.environ["PROJECT_SCOPES_ROOT"]).resolve()
        if os.getenv("PROJECT_SCOPES_ROOT")
        else None
    )
    INCLUDE_HIDDEN: bool = os.getenv("PROJECT_SCOPES_INCLUDE_HIDDEN", "true").lower() == "true"

    # --- Configuration Sections ---
    CONFIG_SECTION: str = "project-scopes"
    HOST_FILTER_SECTION: str = "files"
    HOST_FILTER_KEY: str = "exclude"

    # --- Database ---
    POSTGRES_USER: str = os.getenv("POSTGRES_USER", "postgres")
    POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "password")
    POSTGRES_SERVER: str = os.getenv("POSTGRES_SERVER", "localhost")
    POSTGRES_PORT: str = os.getenv("POSTGRES_PORT", "5432")
    POSTGRES_DB: str = os.getenv("POSTGRES_DB", "project_scopes")

    @property
    def DATABASE_URL(self) -> str:
        # Scopes are per-project state, so a local SQLite file is the default.
        if os.getenv("USE_SQLITE", "true").lower() == "true":
            return f"sqlite:///{self.DATA_DIR / 'project_scopes.db'}"

        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    def ensure_dirs(self):
        """Creates necessary data directories if they don't exist."""
        self.DATA_DIR.mkdir(parents=True, exist_ok=True)


settings = Settings()
