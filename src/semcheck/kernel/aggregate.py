"""Fold change severities bottom-up into one crate verdict."""

from __future__ import annotations

from typing import Dict, List, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field

from semcheck.codes import Severity
from semcheck.kernel.changes import Change
from semcheck.kernel.tree import APIItem, iter_items

Path = Tuple[str, ...]


class SeverityNode(BaseModel):
    """Aggregated severity of one position in the union of both trees."""
    path: Tuple[str, ...]
    own_severity: Severity
    severity: Severity
    children: List[SeverityNode] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    def walk(self):
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


SeverityNode.model_rebuild()


class CrateVerdict(BaseModel):
    """Aggregate result of one comparison run."""
    overall_severity: Severity
    changes: List[Change]
    internal_errors: List[str] = Field(default_factory=list)
    tree: SeverityNode

    model_config = ConfigDict(extra="forbid")


def sort_changes(changes: List[Change]) -> List[Change]:
    """Deterministic order: path, then kind, then the remaining fields."""
    return sorted(changes, key=lambda c: c.sort_key())


def aggregate(
    changes: List[Change],
    old_root: APIItem,
    new_root: APIItem,
    internal_errors: List[str] | None = None,
) -> CrateVerdict:
    """Post-order fold over the new tree's shape plus the old tree's removal positions.

    severity(node) = max(own changes at node, severity of each child)

    Both roots must carry the same name, so every path shares one prefix.
    """
    children_of: Dict[Path, Set[Path]] = {}
    own: Dict[Path, List[Severity]] = {}

    def insert(path: Path) -> None:
        # Register the path and all of its prefixes.
        child = None
        while True:
            known = path in children_of
            if not known:
                children_of[path] = set()
            if child is not None:
                children_of[path].add(child)
            if known or len(path) == 1:
                return
            child, path = path, path[:-1]

    for root in (old_root, new_root):
        for path, _ in iter_items(root):
            insert(path)
    for change in changes:
        insert(change.path)
        own.setdefault(change.path, []).append(change.severity)

    nodes: Dict[Path, SeverityNode] = {}
    for path in sorted(children_of, key=lambda p: (-len(p), p)):
        own_severity = Severity.highest(own.get(path, []))
        children = [nodes.pop(child) for child in sorted(children_of[path])]
        nodes[path] = SeverityNode(
            path=path,
            own_severity=own_severity,
            severity=Severity.highest([own_severity] + [c.severity for c in children]),
            children=children,
        )

    root = nodes[(new_root.name,)]
    return CrateVerdict(
        overall_severity=root.severity,
        changes=sort_changes(changes),
        internal_errors=list(internal_errors or []),
        tree=root,
    )
