"""Pair declarations between old and new trees by path identity."""

from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from semcheck.codes import ChangeKind, ItemKind
from semcheck.kernel.changes import ChangeContext, DetectedChange
from semcheck.kernel.tree import APIItem

Path = Tuple[str, ...]
PairComparator = Callable[[Path, APIItem, APIItem, Optional[APIItem], bool], List[DetectedChange]]


@dataclass
class MatchedPair:
    path: Path
    old: APIItem
    new: APIItem
    parent: APIItem  # old parent, for context flags
    reachable: bool = True  # public in the old tree and every old ancestor public


@dataclass
class MatchResult:
    changes: List[DetectedChange] = field(default_factory=list)
    pairs: List[MatchedPair] = field(default_factory=list)


def match_children(path: Path, old_parent: APIItem, new_parent: APIItem, reachable: bool = True) -> MatchResult:
    """Match the direct children of two corresponding items.

    Children are keyed by (name, namespace); declaration order is ignored.
    Unmatched items become additions/removals and are not recursed into.
    Items at the same path whose kind differs become KindChanged, whether
    or not the two kinds share a namespace. `reachable` says whether the
    parents themselves are publicly reachable.
    """
    result = MatchResult()
    old_children = old_parent.child_map()
    new_children = new_parent.child_map()

    removed = old_children.keys() - new_children.keys()
    added = new_children.keys() - old_children.keys()

    # A name held by exactly one item on each side that moved namespace.
    old_names = Counter(name for name, _ in old_children)
    new_names = Counter(name for name, _ in new_children)
    for old_key in sorted(removed):
        name = old_key[0]
        if old_names[name] != 1 or new_names[name] != 1:
            continue
        new_key = next(key for key in added if key[0] == name)
        old, new = old_children[old_key], new_children[new_key]
        result.changes.append(_kind_changed(path + (name,), old, new))
        removed = removed - {old_key}
        added = added - {new_key}

    for key in sorted(removed):
        item = old_children[key]
        result.changes.append(_removal(path + (item.name,), item, old_parent, reachable))

    for key in sorted(added):
        item = new_children[key]
        result.changes.append(_addition(path + (item.name,), item, old_parent, reachable))

    for key in sorted(old_children.keys() & new_children.keys()):
        old, new = old_children[key], new_children[key]
        child_path = path + (old.name,)
        if old.kind != new.kind:
            result.changes.append(_kind_changed(child_path, old, new))
            continue
        result.pairs.append(MatchedPair(
            path=child_path,
            old=old,
            new=new,
            parent=old_parent,
            reachable=reachable and old.is_public,
        ))

    return result


def walk_pair(pair: MatchedPair, compare_pair: PairComparator) -> List[DetectedChange]:
    """Compare a matched pair and everything matched beneath it."""
    changes: List[DetectedChange] = []
    stack = [pair]
    while stack:
        current = stack.pop()
        changes.extend(compare_pair(current.path, current.old, current.new, current.parent, current.reachable))
        matched = match_children(current.path, current.old, current.new, current.reachable)
        changes.extend(matched.changes)
        stack.extend(reversed(matched.pairs))
    return changes


def _kind_changed(path: Path, old: APIItem, new: APIItem) -> DetectedChange:
    return DetectedChange(
        path=path,
        kind=ChangeKind.KIND_CHANGED,
        detail=f"{old.kind.value} became {new.kind.value}",
        old_value=old.kind.value,
        new_value=new.kind.value,
        def_id=old.def_id or new.def_id,
    )


def _removal(path: Path, item: APIItem, parent: APIItem, reachable: bool) -> DetectedChange:
    label = item.kind.value.replace("_", " ")
    if item.kind == ItemKind.FIELD:
        kind = ChangeKind.FIELD_REMOVED
        context = ChangeContext(public=reachable and item.is_public, non_exhaustive=parent.non_exhaustive)
    elif item.kind == ItemKind.VARIANT:
        kind = ChangeKind.VARIANT_REMOVED
        context = ChangeContext(public=reachable, non_exhaustive=parent.non_exhaustive)
    elif item.kind == ItemKind.IMPL:
        kind = ChangeKind.TRAIT_IMPL_REMOVED
        context = ChangeContext(public=reachable)
        label = "trait impl"
    else:
        kind = ChangeKind.REMOVAL
        context = ChangeContext(public=reachable and item.is_public)
    return DetectedChange(
        path=path,
        kind=kind,
        detail=f"{label} `{item.name}` removed",
        context=context,
        def_id=item.def_id,
    )


def _addition(path: Path, item: APIItem, parent: APIItem, reachable: bool) -> DetectedChange:
    label = item.kind.value.replace("_", " ")
    if item.kind == ItemKind.FIELD:
        kind = ChangeKind.FIELD_ADDED
        context = ChangeContext(
            public=reachable,
            non_exhaustive=parent.non_exhaustive,
            constructible=_constructible(parent),
        )
    elif item.kind == ItemKind.VARIANT:
        kind = ChangeKind.VARIANT_ADDED
        context = ChangeContext(public=reachable, non_exhaustive=parent.non_exhaustive)
    elif item.kind == ItemKind.IMPL:
        kind = ChangeKind.TRAIT_IMPL_ADDED
        context = ChangeContext(public=reachable)
        label = "trait impl"
    elif parent.kind == ItemKind.TRAIT:
        kind = ChangeKind.TRAIT_METHOD_ADDED_WITH_DEFAULT if item.has_default else ChangeKind.TRAIT_METHOD_ADDED
        context = ChangeContext(public=reachable, has_default=item.has_default)
        label = "trait " + label
    else:
        kind = ChangeKind.ADDITION
        context = ChangeContext(public=reachable and item.is_public)
    return DetectedChange(
        path=path,
        kind=kind,
        detail=f"{label} `{item.name}` added",
        context=context,
        def_id=item.def_id,
    )


def _constructible(item: APIItem) -> bool:
    """Whether client code can build `item` with a struct/variant literal."""
    if item.non_exhaustive:
        return False
    return all(child.is_public for child in item.children if child.kind == ItemKind.FIELD)
