import logging
from pathlib import Path
from typing import Optional

from project_scopes.core.config.settings import settings
from project_scopes.features.configuration.domain.interfaces import IConfigStore
from project_scopes.features.configuration.service.api import ConfigSection
from ..data.dir_lister import LocalDirectoryLister
from ..domain.interfaces import IDirectoryLister
from .compiler import VisibilityCompiler
from .store import ScopeStore

logger = logging.getLogger(__name__)

class ScopeCommands:
    """
    Facade for the Scopes Feature.
    One method per user command. Each takes a scope name and/or a path or
    glob, returns nothing, and aborts before touching state when input is
    missing (e.g. a cancelled prompt).
    """
    def __init__(self, store: ScopeStore):
        self.store = store

    def add_scope(self, name: Optional[str]) -> None:
        if not name:
            return
        self.store.activate_scope(name)
        self.store.refresh()

    def switch_scope(self, name: Optional[str]) -> None:
        """Makes `name` the only active scope."""
        if not name:
            return
        others = [scope for scope in self.store.active_scopes if scope != name]
        if others:
            self.store.deactivate_scope(*others)
        self.store.activate_scope(name)
        self.store.refresh()

    def delete_scope(self, name: Optional[str], confirmed: bool = False) -> None:
        if not name or not confirmed:
            return
        self.store.delete_scope(name)
        self.store.refresh()

    def toggle_active_scope(self, name: Optional[str]) -> None:
        if not name:
            return
        self.store.toggle_activate_scope(name)
        self.store.refresh()

    def toggle_enabled(self) -> None:
        self.store.toggle_enabled()
        self.store.refresh()

    def refresh(self) -> None:
        self.store.refresh()

    def add_exclusion_glob(self, scope: Optional[str], glob: Optional[str]) -> None:
        if not scope or not glob:
            return
        self.store.exclude_glob(scope, glob)
        self.store.refresh()

    def add_exclusion_path(self, scope: Optional[str], path: Optional[str]) -> None:
        # Same storage as a glob; the path is normalized to project-relative form
        self.add_exclusion_glob(scope, path)

    def remove_exclusion(self, scope: Optional[str], path: Optional[str]) -> None:
        if not scope or not path:
            return
        self.store.remove_exclusion(scope, path)
        self.store.refresh()

    def edit_exclusion(self, scope: Optional[str], old: Optional[str], new: Optional[str]) -> None:
        if not scope or not old or not new:
            return
        self.store.edit_exclusion(scope, old, new)
        self.store.refresh()

    def add_inclusion_path(self, scope: Optional[str], path: Optional[str]) -> None:
        if not scope or not path:
            return
        self.store.include_path(scope, path)
        self.store.refresh()

    def remove_inclusion(self, scope: Optional[str], path: Optional[str]) -> None:
        if not scope or not path:
            return
        self.store.remove_inclusion(scope, path)
        self.store.refresh()

    def edit_inclusion(self, scope: Optional[str], old: Optional[str], new: Optional[str]) -> None:
        if not scope or not old or not new:
            return
        self.store.edit_inclusion(scope, old, new)
        self.store.refresh()


def create_scope_commands(store: Optional[IConfigStore] = None,
                          root: Optional[Path] = None,
                          lister: Optional[IDirectoryLister] = None) -> ScopeCommands:
    """
    Wires the feature together and loads persisted state.
    Defaults come from settings (SQL config backend, PROJECT_SCOPES_ROOT).
    """
    if store is None:
        from project_scopes.core.database.connection import init_db
        from project_scopes.features.configuration.data.repository import SqlConfigRepo
        init_db()
        store = SqlConfigRepo()

    root = root or settings.PROJECT_ROOT
    if root is None:
        logger.warning("PROJECT_SCOPES_ROOT is not set; the visibility filter will not be applied.")

    compiler = VisibilityCompiler(
        lister=lister or LocalDirectoryLister(include_hidden=settings.INCLUDE_HIDDEN),
        root=root
    )
    scope_store = ScopeStore(
        config=ConfigSection(settings.CONFIG_SECTION, store),
        host_filter=ConfigSection(settings.HOST_FILTER_SECTION, store),
        compiler=compiler,
        root=root
    )
    return ScopeCommands(scope_store.load())
