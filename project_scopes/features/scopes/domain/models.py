from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Dict, FrozenSet, List, Set, Tuple

from project_scopes.core.common.paths import is_outside


@unique
class ScopeList(str, Enum):
    INCLUDED = "included"
    EXCLUDED = "excluded"

    @property
    def other(self) -> "ScopeList":
        return ScopeList.EXCLUDED if self is ScopeList.INCLUDED else ScopeList.INCLUDED


@dataclass
class Scope:
    """
    A named visibility policy.
    Empty `included` means no positive constraint: only `excluded` applies.
    """
    included: Set[str] = field(default_factory=set)
    excluded: Set[str] = field(default_factory=set)

    def paths(self, which: ScopeList) -> Set[str]:
        return self.included if which is ScopeList.INCLUDED else self.excluded

    def copy(self) -> "Scope":
        return Scope(included=set(self.included), excluded=set(self.excluded))

    def to_json(self) -> Dict[str, List[str]]:
        return {
            ScopeList.INCLUDED.value: sorted(self.included),
            ScopeList.EXCLUDED.value: sorted(self.excluded),
        }

    @classmethod
    def from_json(cls, data: Dict[str, List[str]]) -> "Scope":
        data = data or {}
        return cls(
            included=set(data.get(ScopeList.INCLUDED.value) or []),
            excluded=set(data.get(ScopeList.EXCLUDED.value) or []),
        )


@dataclass(frozen=True)
class ScopeRules:
    """Read-only view of one scope handed to the compiler."""
    name: str
    included: FrozenSet[str]
    excluded: FrozenSet[str]

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Scope name cannot be empty.")
        for path in self.included:
            if not path:
                raise ValueError(f"Scope '{self.name}' has an empty included path.")
            if is_outside(path):
                raise ValueError(f"Scope '{self.name}' includes a path outside the project: {path}")


@dataclass(frozen=True)
class ScopeSnapshot:
    """
    Immutable copy of Scope Store state.
    The compiler only ever sees this, never the store's own containers.
    """
    enabled: bool
    global_exclude: Tuple[str, ...]
    active: Tuple[ScopeRules, ...]
