import logging
import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional

from project_scopes.core.common.paths import is_outside, to_relative
from project_scopes.core.config.settings import settings
from project_scopes.features.configuration.domain.models import ConfigKey, ConfigWriteError
from project_scopes.features.configuration.service.api import ConfigSection
from ..domain.models import Scope, ScopeList, ScopeRules, ScopeSnapshot
from .compiler import VisibilityCompiler

logger = logging.getLogger(__name__)

DEFAULT_SCOPES = {
    "base": {"included": [], "excluded": []},
}

class ScopeStore:
    """
    Owns every scope, the active set, the enabled flag and the global
    exclusion set.

    Lifecycle is explicit: construct, then `load()` once at startup. Every
    mutation persists before returning; `refresh()` re-reads persisted state,
    recompiles the filter, applies it and notifies subscribers.
    """

    def __init__(self,
                 config: ConfigSection,
                 host_filter: ConfigSection,
                 compiler: VisibilityCompiler,
                 root: Optional[Path] = None):
        self.config = config
        self.host_filter = host_filter
        self.compiler = compiler
        self.root = root.resolve() if root is not None else None

        self._scopes: Dict[str, Scope] = {}
        self._active: List[str] = []
        self._global_exclude: Dict[str, bool] = {}
        self._enabled: bool = True
        self._subscribers: List[Callable[[], None]] = []
        # Guards every read-modify-persist sequence
        self._lock = threading.RLock()

    # --- Lifecycle ---

    def load(self) -> "ScopeStore":
        """
        Reads persisted state. On first run, seeds the global exclusion set
        from whatever the host filter already hides.
        """
        with self._lock:
            if self.config.get(ConfigKey.GLOBAL_EXCLUDE.value) is None:
                seeded = self.host_filter.get(settings.HOST_FILTER_KEY, {}) or {}
                logger.info(f"Seeding global exclusions from host filter ({len(seeded)} entries)")
                self._persist({ConfigKey.GLOBAL_EXCLUDE: seeded})
            self._read_settings()
        return self

    def refresh(self) -> None:
        """
        Picks up out-of-process edits, recomputes the filter, applies it
        wholesale and notifies subscribers.
        """
        with self._lock:
            self._read_settings()
            snapshot = self.snapshot()

        globs = self.compiler.compile(snapshot)
        if globs is not None:
            try:
                self.host_filter.set(settings.HOST_FILTER_KEY, globs)
                logger.info(f"Applied visibility filter ({len(globs)} globs)")
            except ConfigWriteError as e:
                logger.error(f"Failed to apply visibility filter: {e}")

        for callback in list(self._subscribers):
            callback()

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """
        Registers a callback run after every refresh, in registration order.
        Returns a function that unregisters it.
        """
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # --- Read access ---

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def scopes(self) -> List[str]:
        return sorted(self._scopes)

    @property
    def active_scopes(self) -> List[str]:
        return list(self._active)

    @property
    def global_exclude(self) -> Dict[str, bool]:
        return dict(self._global_exclude)

    def scope_by_name(self, name: str) -> Optional[Scope]:
        scope = self._scopes.get(name)
        return scope.copy() if scope else None

    def snapshot(self) -> ScopeSnapshot:
        with self._lock:
            active = tuple(
                self._rules_for(name)
                for name in self._active
                if name.strip() and name in self._scopes
            )
            return ScopeSnapshot(
                enabled=self._enabled,
                global_exclude=tuple(glob for glob, hidden in self._global_exclude.items() if hidden),
                active=active,
            )

    # --- Activation ---

    def activate_scope(self, *names: str) -> None:
        with self._lock:
            changes = {}
            created = [name for name in names if name and name not in self._scopes]
            for name in created:
                self._scopes[name] = Scope()
            if created:
                changes[ConfigKey.SCOPES] = self._scopes_json()

            added = False
            for name in names:
                if name and name not in self._active:
                    self._active.append(name)
                    added = True
            if added:
                changes[ConfigKey.ACTIVE_SCOPES] = list(self._active)

            if changes:
                logger.info(f"Activated scopes: {[n for n in names if n]}")
                self._persist(changes)

    def deactivate_scope(self, *names: str) -> None:
        with self._lock:
            remaining = [name for name in self._active if name not in names]
            if remaining == self._active:
                return
            self._active = remaining
            logger.info(f"Deactivated scopes: {list(names)}")
            self._persist({ConfigKey.ACTIVE_SCOPES: list(self._active)})

    def toggle_activate_scope(self, name: str) -> None:
        with self._lock:
            if name in self._active:
                self.deactivate_scope(name)
            else:
                self.activate_scope(name)

    def delete_scope(self, name: str) -> None:
        with self._lock:
            if name not in self._scopes:
                logger.debug(f"Delete ignored, unknown scope: {name}")
                return

            del self._scopes[name]
            changes = {ConfigKey.SCOPES: self._scopes_json()}
            if name in self._active:
                self._active.remove(name)
                changes[ConfigKey.ACTIVE_SCOPES] = list(self._active)

            logger.info(f"Deleted scope: {name}")
            self._persist(changes)

    def toggle_enabled(self) -> None:
        with self._lock:
            self._enabled = not self._enabled
            logger.info(f"Scopes {'enabled' if self._enabled else 'disabled'}")
            self._persist({ConfigKey.ENABLED: self._enabled})

    # --- Path lists ---

    def include_path(self, scope: str, path: str) -> None:
        self._add(scope, ScopeList.INCLUDED, path)

    def exclude_glob(self, scope: str, path_or_glob: str) -> None:
        self._add(scope, ScopeList.EXCLUDED, path_or_glob)

    def remove_inclusion(self, scope: str, path: str) -> None:
        self._remove(scope, ScopeList.INCLUDED, path)

    def remove_exclusion(self, scope: str, path_or_glob: str) -> None:
        self._remove(scope, ScopeList.EXCLUDED, path_or_glob)

    def edit_inclusion(self, scope: str, old_path: str, new_path: str) -> None:
        self._edit(scope, ScopeList.INCLUDED, old_path, new_path)

    def edit_exclusion(self, scope: str, old_path: str, new_path: str) -> None:
        self._edit(scope, ScopeList.EXCLUDED, old_path, new_path)

    def toggle_item(self, scope: str, which: ScopeList, value: str) -> None:
        """
        Single-list toggle: removes `value` from `which` if present, otherwise
        moves it there from the other list.
        """
        path = self._normalize(value)
        with self._lock:
            target = self._scopes.get(scope)
            if target is None or not path:
                logger.debug(f"Toggle ignored for scope '{scope}': {value!r}")
                return

            if path in target.paths(which):
                target.paths(which).discard(path)
            else:
                target.paths(which.other).discard(path)
                target.paths(which).add(path)
            self._persist({ConfigKey.SCOPES: self._scopes_json()})

    # --- Internals ---

    def _add(self, scope: str, which: ScopeList, value: str) -> None:

        path = self._normalize(value)
        if not scope or not path:
            return
        if which is ScopeList.INCLUDED and is_outside(path):
            logger.warning(f"Scope '{scope}': cannot include a path outside the project: {value!r}")
            return

        with self._lock:
            # First include//exclude on an unknown name creates the scope
            created = scope not in self._scopes
            target = self._scopes.setdefault(scope, Scope())
            if path in target.paths(which) and not created:
                return
            target.paths(which).add(path)
            logger.info(f"Scope '{scope}': {which.value} += {path}")
            self._persist({ConfigKey.SCOPES: self._scopes_json()})

    def _remove(self, scope: str, which: ScopeList, value: str) -> None:
        path = self._normalize(value)
        with self._lock:
            target = self._scopes.get(scope)
            if target is None or path not in target.paths(which):
                logger.debug(f"Remove ignored for scope '{scope}': {value!r}")
                return
            target.paths(which).discard(path)
            logger.info(f"Scope '{scope}': {which.value} -= {path}")
            self._persist({ConfigKey.SCOPES: self._scopes_json()})

    def _edit(self, scope: str, which: ScopeList, old_value: str, new_value: str) -> None:
        new_path = self._normalize(new_value or "")
        if not new_path:
            # Cancelled edit
            return

        old_path = self._normalize(old_value or "")
        with self._lock:
            target = self._scopes.get(scope)
            if target is None:
                logger.debug(f"Edit ignored, unknown scope: {scope}")
                return
            if old_path not in target.paths(which):
                logger.debug(f"Edit ignored for scope '{scope}', no entry {old_path!r}")
                return
            if old_path == new_path:
                return
            if which is ScopeList.INCLUDED and is_outside(new_path):
                logger.warning(f"Scope '{scope}': cannot include a path outside the project: {new_value!r}")
                return
            target.paths(which).discard(old_path)
            target.paths(which).add(new_path)
            logger.info(f"Scope '{scope}': {which.value} {old_path} -> {new_path}")
            self._persist({ConfigKey.SCOPES: self._scopes_json()})

    def _rules_for(self, name: str) -> ScopeRules:
        scope = self._scopes[name]
        included = set()
        for path in scope.included:
            normalized = self._normalize(path)
            if is_outside(normalized):
                # Only reachable through out-of-process edits
                logger.warning(f"Scope '{name}': skipping included path outside the project: {path!r}")
                continue
            included.add(normalized)
        return ScopeRules(name=name, included=frozenset(included), excluded=frozenset(scope.excluded))

    def _normalize(self, value: str) -> str:
        return to_relative(self.root, value)

    def _scopes_json(self) -> Dict[str, Dict[str, List[str]]]:
        return {name: scope.to_json() for name, scope in self._scopes.items()}

    def _persist(self, changes: Dict[ConfigKey, object]) -> None:
        """One persistence write per logical operation, failures are logged only."""
        try:
            self.config.update({key.value: value for key, value in changes.items()})
        except ConfigWriteError as e:
            logger.error(f"Failed to persist {[key.value for key in changes]}: {e}")

    def _read_settings(self) -> None:
        self._enabled = bool(self.config.get(ConfigKey.ENABLED.value, True))
        self._active = list(self.config.get(ConfigKey.ACTIVE_SCOPES.value, []) or [])
        self._global_exclude = dict(self.config.get(ConfigKey.GLOBAL_EXCLUDE.value, {}) or {})

        stored = self.config.get(ConfigKey.SCOPES.value, DEFAULT_SCOPES) or {}
        self._scopes = {name: Scope.from_json(data) for name, data in stored.items()}
