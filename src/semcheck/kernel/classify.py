"""Map each change kind, plus its context flags, to a semver severity.

This is the single place severities are decided. The table is total over
ChangeKind; a kind without a rule is a comparator defect and raises
InternalInvariantViolation rather than being guessed at.
"""

from typing import Callable, Dict, List, Tuple

import structlog

from semcheck.codes import ChangeKind, Severity
from semcheck.kernel.changes import Change, ChangeContext, DetectedChange
from semcheck.kernel.errors import InternalInvariantViolation

logger = structlog.get_logger()

Rule = Callable[[ChangeContext], Severity]

BREAKING = Severity.BREAKING
TECHNICALLY_BREAKING = Severity.TECHNICALLY_BREAKING
NON_BREAKING = Severity.NON_BREAKING


def _always(severity: Severity) -> Rule:
    return lambda ctx: severity


def _if_public(severity: Severity) -> Rule:
    """Non-public items are invisible to clients, so their changes never break them."""
    return lambda ctx: severity if ctx.public else NON_BREAKING


def _field_added(ctx: ChangeContext) -> Severity:
    # Only a literal-constructible owner breaks: existing literals miss the new field.
    if ctx.non_exhaustive or not ctx.constructible:
        return NON_BREAKING
    return BREAKING if ctx.public else NON_BREAKING


def _variant_added(ctx: ChangeContext) -> Severity:
    if ctx.non_exhaustive:
        return NON_BREAKING
    return BREAKING if ctx.public else NON_BREAKING


def _unless_loosened(ctx: ChangeContext) -> Severity:
    if ctx.loosened:
        return NON_BREAKING
    return BREAKING if ctx.public else NON_BREAKING


def _generic_param_added(ctx: ChangeContext) -> Severity:
    if ctx.has_default:
        return NON_BREAKING
    return BREAKING if ctx.public else NON_BREAKING


RULES: Dict[ChangeKind, Rule] = {
    ChangeKind.ADDITION: _always(NON_BREAKING),
    ChangeKind.REMOVAL: _if_public(BREAKING),
    ChangeKind.KIND_CHANGED: _always(BREAKING),
    ChangeKind.FIELD_ADDED: _field_added,
    ChangeKind.FIELD_REMOVED: _if_public(BREAKING),
    ChangeKind.VARIANT_ADDED: _variant_added,
    ChangeKind.VARIANT_REMOVED: _always(BREAKING),
    ChangeKind.TRAIT_METHOD_ADDED: _if_public(BREAKING),
    ChangeKind.TRAIT_METHOD_ADDED_WITH_DEFAULT: _if_public(TECHNICALLY_BREAKING),
    ChangeKind.TRAIT_IMPL_ADDED: _always(NON_BREAKING),
    ChangeKind.TRAIT_IMPL_REMOVED: _if_public(BREAKING),
    ChangeKind.TYPE_CHANGED: _if_public(BREAKING),
    ChangeKind.PARAM_TYPE_CHANGED: _if_public(BREAKING),
    ChangeKind.PARAM_RENAMED: _always(NON_BREAKING),
    ChangeKind.PARAM_COUNT_CHANGED: _if_public(BREAKING),
    ChangeKind.RETURN_TYPE_CHANGED: _if_public(BREAKING),
    ChangeKind.FN_QUALIFIER_CHANGED: _unless_loosened,
    ChangeKind.VISIBILITY_LOWERED: _if_public(BREAKING),
    ChangeKind.VISIBILITY_RAISED: _always(NON_BREAKING),
    ChangeKind.BOUND_ADDED: _if_public(BREAKING),
    ChangeKind.BOUND_REMOVED: _always(NON_BREAKING),
    ChangeKind.GENERIC_PARAM_ADDED: _generic_param_added,
    ChangeKind.GENERIC_PARAM_REMOVED: _if_public(BREAKING),
    ChangeKind.DEFAULT_VALUE_CHANGED: _unless_loosened,
    ChangeKind.TRAIT_ITEM_DEFAULT_ADDED: _always(NON_BREAKING),
    ChangeKind.TRAIT_ITEM_DEFAULT_REMOVED: _if_public(BREAKING),
    ChangeKind.NON_EXHAUSTIVE_ADDED: _if_public(BREAKING),
    ChangeKind.NON_EXHAUSTIVE_REMOVED: _always(NON_BREAKING),
}


def classify(kind: ChangeKind, context: ChangeContext) -> Severity:
    """Severity of one change kind in context.

    Raises:
        InternalInvariantViolation: if no rule exists for `kind`
    """
    rule = RULES.get(kind)
    if rule is None:
        raise InternalInvariantViolation(kind)
    return rule(context)


def classify_all(detected: List[DetectedChange]) -> Tuple[List[Change], List[str]]:
    """Assign a severity to every detected change.

    A missing rule does not abort the run: the change is recorded as
    Breaking and the violation is returned alongside the changes.

    Returns:
        (classified changes, internal error messages)
    """
    changes: List[Change] = []
    internal_errors: List[str] = []
    for item in detected:
        try:
            severity = classify(item.kind, item.context)
        except InternalInvariantViolation as e:
            path = "::".join(item.path)
            logger.error("classifier_invariant_violation", path=path, kind=str(item.kind))
            internal_errors.append(f"{path}: {e}")
            severity = BREAKING
        changes.append(Change(
            path=item.path,
            kind=item.kind,
            severity=severity,
            detail=item.detail,
            old_value=item.old_value,
            new_value=item.new_value,
            def_id=item.def_id,
        ))
    return changes, sorted(set(internal_errors))
