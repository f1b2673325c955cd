"""Run one comparison: validate, match, compare, classify, aggregate."""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional, Set

import structlog

from semcheck.config import CompareConfig
from semcheck.kernel.aggregate import CrateVerdict, aggregate, sort_changes
from semcheck.kernel.changes import Change, DetectedChange
from semcheck.kernel.classify import classify_all
from semcheck.kernel.compare import StructuralComparator
from semcheck.kernel.matcher import match_children, walk_pair
from semcheck.kernel.tree import APIItem, validate_tree
from semcheck.kernel.types import TypeArena

logger = structlog.get_logger()


def compare_trees(old_root: APIItem, new_root: APIItem, config: Optional[CompareConfig] = None) -> CrateVerdict:
    """Compare two API trees and return the aggregated verdict.

    Both trees are validated before any comparison starts; an invalid tree
    raises InvalidInputError and no partial verdict is produced. The trees
    are never mutated.
    """
    config = config or CompareConfig()

    old_count = validate_tree(old_root, max_depth=config.max_depth, max_items=config.max_items)
    new_count = validate_tree(new_root, max_depth=config.max_depth, max_items=config.max_items)

    if old_root.name != new_root.name:
        logger.warning("crate_root_renamed", old=old_root.name, new=new_root.name)
        old_root = old_root.model_copy(update={"name": new_root.name})

    logger.debug(
        "comparison_started",
        crate=new_root.name,
        old_items=old_count,
        new_items=new_count,
        max_workers=config.max_workers,
    )

    comparator = StructuralComparator(TypeArena())
    root_path = (new_root.name,)

    detected: List[DetectedChange] = comparator(root_path, old_root, new_root)
    top = match_children(root_path, old_root, new_root)
    detected.extend(top.changes)

    if config.max_workers > 1 and len(top.pairs) > 1:
        with ThreadPoolExecutor(max_workers=config.max_workers) as executor:
            futures = [executor.submit(walk_pair, pair, comparator) for pair in top.pairs]
            for future in as_completed(futures):
                detected.extend(future.result())
    else:
        for pair in top.pairs:
            detected.extend(walk_pair(pair, comparator))

    changes, internal_errors = classify_all(detected)
    if config.dedupe_reexports:
        changes = dedupe_reexports(changes)

    verdict = aggregate(changes, old_root, new_root, internal_errors)
    logger.debug(
        "comparison_finished",
        crate=new_root.name,
        changes=len(verdict.changes),
        verdict=verdict.overall_severity.value,
        internal_errors=len(verdict.internal_errors),
    )
    return verdict


def dedupe_reexports(changes: List[Change]) -> List[Change]:
    """Keep the first (in sorted order) of identical changes sharing a def_id.

    Changes without a def_id are always kept.
    """
    seen: Set[tuple] = set()
    kept: List[Change] = []
    dropped = 0
    for change in sort_changes(changes):
        if change.def_id is not None:
            key = (change.def_id, change.kind, change.detail, change.old_value, change.new_value)
            if key in seen:
                dropped += 1
                continue
            seen.add(key)
        kept.append(change)
    if dropped:
        logger.debug("reexport_changes_deduplicated", dropped=dropped)
    return kept
