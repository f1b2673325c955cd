"""Tests for the kind-specific structural comparator."""

import pytest

from semcheck.codes import ChangeKind
from semcheck.kernel.compare import StructuralComparator
from semcheck.kernel.tree import APIItem
from semcheck.kernel.types import ParamType, RefType, TypeArena

from helpers import const, enum, field, fn, generic, struct, trait, ty

PATH = ("mycrate", "item")


@pytest.fixture
def compare():
    comparator = StructuralComparator(TypeArena())

    def run(old, new, parent=None):
        return comparator(PATH, old, new, parent)

    return run


def _only(changes):
    assert len(changes) == 1, changes
    return changes[0]


def test_identical_items_have_no_changes(compare):
    item = fn("f", params=[("x", ty("Vec", ty("u8")))], output="bool", generics=[generic("T", "Clone")])
    assert compare(item, item) == []


def test_param_type_changed(compare):
    change = _only(compare(fn("foo", params=[("x", "i32")]), fn("foo", params=[("x", "i64")])))
    assert change.kind == ChangeKind.PARAM_TYPE_CHANGED
    assert (change.old_value, change.new_value) == ("i32", "i64")
    assert change.path == PATH


def test_param_renamed_only(compare):
    change = _only(compare(fn("foo", params=[("x", "i32")]), fn("foo", params=[("value", "i32")])))
    assert change.kind == ChangeKind.PARAM_RENAMED
    assert (change.old_value, change.new_value) == ("x", "value")


def test_params_compared_positionally(compare):
    old = fn("foo", params=[("a", "i32"), ("b", "String")])
    new = fn("foo", params=[("b", "String"), ("a", "i32")])
    kinds = sorted(c.kind for c in compare(old, new))
    assert kinds == [
        ChangeKind.PARAM_RENAMED,
        ChangeKind.PARAM_RENAMED,
        ChangeKind.PARAM_TYPE_CHANGED,
        ChangeKind.PARAM_TYPE_CHANGED,
    ]


def test_param_count_changed(compare):
    changes = compare(fn("foo", params=[("a", "i32")]), fn("foo", params=[("a", "i32"), ("b", "i32")]))
    change = _only(changes)
    assert change.kind == ChangeKind.PARAM_COUNT_CHANGED
    assert (change.old_value, change.new_value) == ("1", "2")


def test_return_type_changed(compare):
    change = _only(compare(fn("f", output="u32"), fn("f")))
    assert change.kind == ChangeKind.RETURN_TYPE_CHANGED
    assert (change.old_value, change.new_value) == ("u32", "()")


def test_nested_type_change_detected(compare):
    old = fn("f", params=[("buf", RefType(inner=ty("Vec", ty("u8"))))])
    new = fn("f", params=[("buf", RefType(mutable=True, inner=ty("Vec", ty("u8"))))])
    change = _only(compare(old, new))
    assert change.kind == ChangeKind.PARAM_TYPE_CHANGED
    assert change.new_value == "&mut Vec<u8>"


def test_fn_qualifiers(compare):
    became_unsafe = _only(compare(fn("f"), fn("f", is_unsafe=True)))
    assert became_unsafe.kind == ChangeKind.FN_QUALIFIER_CHANGED
    assert became_unsafe.context.loosened is False

    became_safe = _only(compare(fn("f", is_unsafe=True), fn("f")))
    assert became_safe.context.loosened is True

    lost_const = _only(compare(fn("f", is_const=True), fn("f")))
    assert lost_const.context.loosened is False

    became_async = _only(compare(fn("f"), fn("f", is_async=True)))
    assert became_async.detail == "function `f`: became async"


def test_value_type_changed(compare):
    change = _only(compare(field("a", "i32"), field("a", "u64")))
    assert change.kind == ChangeKind.TYPE_CHANGED
    assert (change.old_value, change.new_value) == ("i32", "u64")

    change = _only(compare(const("MAX", "u8"), const("MAX", "u16")))
    assert change.kind == ChangeKind.TYPE_CHANGED


def test_visibility_lowered_and_raised(compare):
    lowered = _only(compare(fn("f"), fn("f", vis="crate")))
    assert lowered.kind == ChangeKind.VISIBILITY_LOWERED
    assert lowered.context.public is True

    raised = _only(compare(fn("f", vis="private"), fn("f", vis="public")))
    assert raised.kind == ChangeKind.VISIBILITY_RAISED

    internal = _only(compare(fn("f", vis="crate"), fn("f", vis="private")))
    assert internal.kind == ChangeKind.VISIBILITY_LOWERED
    assert internal.context.public is False


def test_bounds_compared_as_sets(compare):
    old = fn("f", generics=[generic("T", "Clone", "Debug")])
    new = fn("f", generics=[generic("T", "Debug", "Send")])
    changes = compare(old, new)
    by_kind = {c.kind: c for c in changes}
    assert set(by_kind) == {ChangeKind.BOUND_ADDED, ChangeKind.BOUND_REMOVED}
    assert by_kind[ChangeKind.BOUND_ADDED].new_value == "Send"
    assert by_kind[ChangeKind.BOUND_REMOVED].old_value == "Clone"


def test_bound_order_is_ignored(compare):
    old = struct("S", generics=[generic("T", "Clone", "Debug")])
    new = struct("S", generics=[generic("T", "Debug", "Clone")])
    assert compare(old, new) == []


def test_generic_params_added_and_removed(compare):
    old = struct("S", generics=[generic("T")])
    new = struct("S", generics=[generic("U", default="u8")])
    changes = {c.kind: c for c in compare(old, new)}
    assert set(changes) == {ChangeKind.GENERIC_PARAM_ADDED, ChangeKind.GENERIC_PARAM_REMOVED}
    assert changes[ChangeKind.GENERIC_PARAM_ADDED].context.has_default is True


def test_generic_default_changed(compare):
    changed = _only(compare(
        struct("S", generics=[generic("T", default="u8")]),
        struct("S", generics=[generic("T", default="u16")]),
    ))
    assert changed.kind == ChangeKind.DEFAULT_VALUE_CHANGED
    assert (changed.old_value, changed.new_value) == ("u8", "u16")
    assert changed.context.loosened is False

    added = _only(compare(struct("S", generics=[generic("T")]), struct("S", generics=[generic("T", default="u8")])))
    assert added.context.loosened is True


def test_non_exhaustive_marker(compare):
    added = _only(compare(struct("S"), struct("S", non_exhaustive=True)))
    assert added.kind == ChangeKind.NON_EXHAUSTIVE_ADDED

    removed = _only(compare(enum("E", non_exhaustive=True), enum("E")))
    assert removed.kind == ChangeKind.NON_EXHAUSTIVE_REMOVED


def test_trait_item_default_body(compare):
    parent = trait("Codec")
    removed = _only(compare(fn("flush", has_default=True), fn("flush"), parent))
    assert removed.kind == ChangeKind.TRAIT_ITEM_DEFAULT_REMOVED

    added = _only(compare(fn("flush"), fn("flush", has_default=True), parent))
    assert added.kind == ChangeKind.TRAIT_ITEM_DEFAULT_ADDED


def test_associated_type_default(compare):
    old = APIItem(name="Item", kind="associated_item")
    new = APIItem(name="Item", kind="associated_item", signature={"form": "value", "ty": {"node": "path", "path": "u8"}})
    change = _only(compare(old, new, trait("Iter")))
    assert change.kind == ChangeKind.DEFAULT_VALUE_CHANGED
    assert change.context.loosened is True


def test_multiple_differences_all_reported(compare):
    old = fn("f", params=[("x", "i32")], output="u8", generics=[generic("T")])
    new = fn("f", params=[("y", "i64")], output="u16", generics=[generic("T", "Copy")], vis="crate")
    kinds = {c.kind for c in compare(old, new)}
    assert kinds == {
        ChangeKind.PARAM_TYPE_CHANGED,
        ChangeKind.PARAM_RENAMED,
        ChangeKind.RETURN_TYPE_CHANGED,
        ChangeKind.BOUND_ADDED,
        ChangeKind.VISIBILITY_LOWERED,
    }


def test_def_id_carried_onto_changes(compare):
    old = fn("f", params=[("x", "i32")], def_id="core::f")
    new = fn("f", params=[("x", ParamType(name="T"))], def_id="core::f")
    assert _only(compare(old, new)).def_id == "core::f"


def test_reachable_flag_overrides_own_visibility(compare):
    comparator = StructuralComparator(TypeArena())
    change = _only(comparator(PATH, fn("f", params=[("x", "i32")]), fn("f", params=[("x", "i64")]), None, False))
    assert change.context.public is False


def test_detail_names_the_item_kind(compare):
    change = _only(compare(const("MAX", "u8"), const("MAX", "u16")))
    assert change.detail == "const `MAX`: type changed"
