"""Change records produced by the matcher/comparator and by the classifier."""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

from semcheck.codes import ChangeKind, Severity


@dataclass(frozen=True)
class ChangeContext:
    """Flags the classifier needs beyond the change kind.

    public: the affected item (or owning type, for impls and trait items) was public in the old tree
    non_exhaustive: the owning struct/enum/variant carried the marker in the old tree
    constructible: the owning struct/variant could be built with a literal (all fields public)
    has_default: the added generic param or trait item has a default
    loosened: a qualifier/default change widens what callers may do
    """
    public: bool = True
    non_exhaustive: bool = False
    constructible: bool = True
    has_default: bool = False
    loosened: bool = False


@dataclass
class DetectedChange:
    """A structural difference before classification. Carries no severity."""
    path: Tuple[str, ...]
    kind: ChangeKind
    detail: str
    context: ChangeContext = field(default_factory=ChangeContext)
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    def_id: Optional[str] = None


class Change(BaseModel):
    """A classified structural difference."""
    path: Tuple[str, ...]
    kind: ChangeKind
    severity: Severity
    detail: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    def_id: Optional[str] = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def path_str(self) -> str:
        return "::".join(self.path)

    def sort_key(self) -> tuple:
        return (self.path, self.kind.value, self.detail, self.old_value or "", self.new_value or "")
