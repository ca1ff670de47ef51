import logging
from functools import reduce
from pathlib import Path
from typing import Dict, Iterable, Optional, Set

from project_scopes.core.common.paths import (
    ROOT, ancestors, is_outside, is_root, parent_dir, to_absolute, to_relative
)
from ..domain.interfaces import IDirectoryLister
from ..domain.models import ScopeRules, ScopeSnapshot

logger = logging.getLogger(__name__)

class VisibilityCompiler:
    """
    Turns scope state into the set of globs to hide.

    A visibility filter can only hide named entries. To show just one path,
    every sibling at every ancestor level has to be hidden explicitly, and
    when several paths are included their sibling sets have to be merged
    so that one path's siblings never hide another included path.
    """

    def __init__(self, lister: IDirectoryLister, root: Optional[Path]):
        self.lister = lister
        # Sibling paths only relativize against an absolute root
        self.root = root.resolve() if root is not None else None

    def compile(self, snapshot: ScopeSnapshot) -> Optional[Dict[str, bool]]:
        """
        Returns the full path/glob -> True mapping to apply,
        or None when there is no project root to compute against.
        """
        if self.root is None:
            logger.debug("No project root resolvable, skipping compile.")
            return None

        result = {glob: True for glob in snapshot.global_exclude}
        if not snapshot.enabled:
            return result

        # Union across active scopes: hidden if ANY active scope hides it
        for rules in snapshot.active:
            for glob in self.scope_exclusions(rules):
                result[glob] = True

        return result

    def scope_exclusions(self, rules: ScopeRules) -> Set[str]:
        """
        Explicit excludes plus merged inclusion-derived exclusions, minus anything that
        would hide one of this scope's own included paths.
        """
        included = self.usable_includes(rules.included)
        result = set(rules.excluded)
        if included:
            result |= self.inclusion_exclusions(included)

        protected = set()
        for path in included:
            protected.update(ancestors(path))

        return result - protected

    def usable_includes(self, included: Iterable[str]) -> Set[str]:
        """
        Normalized included paths. Paths outside the project are dropped:
        an empty candidate set would cancel every other include in the merge.
        """
        usable = set()
        for path in included:
            normalized = to_relative(self.root, path)
            if is_outside(normalized):
                logger.warning(f"Included path is outside the project, ignoring: {path}")
                continue
            usable.add(normalized)
        return usable

    def inclusion_exclusions(self, included: Iterable[str]) -> Set[str]:
        candidates = [self.ancestor_siblings(path) for path in sorted(self.usable_includes(included))]
        if not candidates:
            return set()
        return reduce(self.merge_candidates, candidates)

    def ancestor_siblings(self, path: str) -> Set[str]:
        """
        Every sibling of `path` and of each of its ancestors, up to the root.
        The ancestor chain itself stays visible.
        """
        result = set()
        path = to_relative(self.root, path)
        if is_outside(path):
            logger.warning(f"Included path is outside the project, ignoring: {path}")
            return result

        child, parent = path, parent_dir(path)
        while child != parent:
            siblings = self.lister.list_siblings(
                to_absolute(self.root, parent),
                to_absolute(self.root, child)
            )
            for sibling in siblings:
                result.add(to_relative(self.root, sibling))

            logger.debug(f"{path}: {len(siblings)} siblings under '{parent}'")
            if is_root(parent):
                break
            child, parent = parent, parent_dir(parent)

        result.discard(ROOT)
        return result

    @staticmethod
    def merge_candidates(set_a: Set[str], set_b: Set[str]) -> Set[str]:
        """
        Prefix-aware intersection.

        A value survives when it, or any of its ancestors, is present in the
        other set. An entry that is an ancestor of the other include will not
        be in that include's set, so it gets dropped.
        """
        def survivors(values: Set[str], other: Set[str]) -> Set[str]:
            return {
                value for value in values
                if any(prefix in other for prefix in ancestors(value))
            }

        return survivors(set_a, set_b) | survivors(set_b, set_a)
