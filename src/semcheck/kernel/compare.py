"""Kind-specific structural comparison of matched item pairs."""

from typing import Dict, List, Optional, Tuple

from semcheck.codes import ChangeKind, ItemKind
from semcheck.kernel.changes import ChangeContext, DetectedChange
from semcheck.kernel.tree import APIItem, FnSignature, GenericParam, ValueSignature
from semcheck.kernel.types import TypeArena

Path = Tuple[str, ...]

_OPEN_KINDS = {ItemKind.STRUCT, ItemKind.ENUM, ItemKind.VARIANT}


class StructuralComparator:
    """Compares one matched pair at a time.

    Holds no state besides the shared type arena, so independent subtrees
    can be compared from separate threads with the same instance.
    """

    def __init__(self, arena: TypeArena):
        self.arena = arena

    def __call__(
        self,
        path: Path,
        old: APIItem,
        new: APIItem,
        parent: Optional[APIItem] = None,
        reachable: Optional[bool] = None,
    ) -> List[DetectedChange]:
        return self.compare(path, old, new, parent, reachable)

    def compare(
        self,
        path: Path,
        old: APIItem,
        new: APIItem,
        parent: Optional[APIItem] = None,
        reachable: Optional[bool] = None,
    ) -> List[DetectedChange]:
        """Every difference between `old` and `new` at `path`, children excluded.

        `reachable` is whether `old` was publicly reachable; it defaults to the
        item's own visibility when the caller does not track ancestors.
        """
        emit = _Emitter(
            path,
            old.def_id or new.def_id,
            old.is_public if reachable is None else reachable,
            f"{old.kind.value.replace('_', ' ')} `{old.name}`",
        )

        self._compare_visibility(emit, old, new)
        if old.kind in _OPEN_KINDS:
            self._compare_openness(emit, old, new)
        self._compare_generics(emit, old.generics, new.generics)

        if isinstance(old.signature, FnSignature) and isinstance(new.signature, FnSignature):
            self._compare_fn(emit, old.signature, new.signature)
        elif isinstance(old.signature, ValueSignature) and isinstance(new.signature, ValueSignature):
            self._compare_value(emit, old.signature, new.signature)
        elif (old.signature is None) != (new.signature is None):
            # Associated items may gain or lose a default type/value.
            emit(
                ChangeKind.DEFAULT_VALUE_CHANGED,
                "default added" if old.signature is None else "default removed",
                loosened=old.signature is None,
            )

        if parent is not None and parent.kind == ItemKind.TRAIT and old.has_default != new.has_default:
            if new.has_default:
                emit(ChangeKind.TRAIT_ITEM_DEFAULT_ADDED, "default body added")
            else:
                emit(ChangeKind.TRAIT_ITEM_DEFAULT_REMOVED, "default body removed")

        return emit.changes

    def _compare_visibility(self, emit: "_Emitter", old: APIItem, new: APIItem) -> None:
        if old.visibility == new.visibility:
            return
        kind = (
            ChangeKind.VISIBILITY_LOWERED
            if new.visibility.rank < old.visibility.rank
            else ChangeKind.VISIBILITY_RAISED
        )
        emit(
            kind,
            f"visibility {old.visibility.value} -> {new.visibility.value}",
            old_value=old.visibility.value,
            new_value=new.visibility.value,
        )

    def _compare_openness(self, emit: "_Emitter", old: APIItem, new: APIItem) -> None:
        if old.non_exhaustive and not new.non_exhaustive:
            emit(ChangeKind.NON_EXHAUSTIVE_REMOVED, "non-exhaustive marker removed")
        elif new.non_exhaustive and not old.non_exhaustive:
            emit(ChangeKind.NON_EXHAUSTIVE_ADDED, "non-exhaustive marker added")

    def _compare_generics(
        self,
        emit: "_Emitter",
        old_params: Tuple[GenericParam, ...],
        new_params: Tuple[GenericParam, ...],
    ) -> None:
        old_by_name: Dict[str, GenericParam] = {p.name: p for p in old_params}
        new_by_name: Dict[str, GenericParam] = {p.name: p for p in new_params}

        for name in sorted(old_by_name):
            old_p = old_by_name[name]
            new_p = new_by_name.get(name)
            if new_p is None or new_p.kind != old_p.kind:
                emit(ChangeKind.GENERIC_PARAM_REMOVED, f"{old_p.kind} parameter `{name}` removed")
                if new_p is not None:
                    emit(
                        ChangeKind.GENERIC_PARAM_ADDED,
                        f"{new_p.kind} parameter `{name}` added",
                        has_default=new_p.default is not None,
                    )
                continue

            old_bounds = {b.strip() for b in old_p.bounds}
            new_bounds = {b.strip() for b in new_p.bounds}
            for bound in sorted(new_bounds - old_bounds):
                emit(ChangeKind.BOUND_ADDED, f"bound `{name}: {bound}` added", new_value=bound)
            for bound in sorted(old_bounds - new_bounds):
                emit(ChangeKind.BOUND_REMOVED, f"bound `{name}: {bound}` removed", old_value=bound)

            old_default = self.arena.intern_optional(old_p.default)
            new_default = self.arena.intern_optional(new_p.default)
            if old_default != new_default:
                emit(
                    ChangeKind.DEFAULT_VALUE_CHANGED,
                    f"default of `{name}` changed",
                    old_value=None if old_default is None else self.arena.render(old_default),
                    new_value=None if new_default is None else self.arena.render(new_default),
                    loosened=old_default is None,
                )

        for name in sorted(new_by_name.keys() - old_by_name.keys()):
            new_p = new_by_name[name]
            emit(
                ChangeKind.GENERIC_PARAM_ADDED,
                f"{new_p.kind} parameter `{name}` added",
                has_default=new_p.default is not None,
            )

    def _compare_fn(self, emit: "_Emitter", old: FnSignature, new: FnSignature) -> None:
        if len(old.params) != len(new.params):
            emit(
                ChangeKind.PARAM_COUNT_CHANGED,
                f"parameter count {len(old.params)} -> {len(new.params)}",
                old_value=str(len(old.params)),
                new_value=str(len(new.params)),
            )

        for index, (old_p, new_p) in enumerate(zip(old.params, new.params)):
            old_ty = self.arena.intern(old_p.ty)
            new_ty = self.arena.intern(new_p.ty)
            if old_ty != new_ty:
                emit(
                    ChangeKind.PARAM_TYPE_CHANGED,
                    f"parameter {index} `{old_p.name}` type changed",
                    old_value=self.arena.render(old_ty),
                    new_value=self.arena.render(new_ty),
                )
            if old_p.name != new_p.name:
                emit(
                    ChangeKind.PARAM_RENAMED,
                    f"parameter {index} renamed",
                    old_value=old_p.name,
                    new_value=new_p.name,
                )

        old_out = self.arena.intern_optional(old.output)
        new_out = self.arena.intern_optional(new.output)
        if old_out != new_out:
            emit(
                ChangeKind.RETURN_TYPE_CHANGED,
                "return type changed",
                old_value=self.arena.render(old_out),
                new_value=self.arena.render(new_out),
            )

        if old.is_unsafe != new.is_unsafe:
            emit(
                ChangeKind.FN_QUALIFIER_CHANGED,
                "became unsafe" if new.is_unsafe else "became safe",
                loosened=not new.is_unsafe,
            )
        if old.is_const != new.is_const:
            emit(
                ChangeKind.FN_QUALIFIER_CHANGED,
                "became const" if new.is_const else "is no longer const",
                loosened=new.is_const,
            )
        if old.is_async != new.is_async:
            emit(
                ChangeKind.FN_QUALIFIER_CHANGED,
                "became async" if new.is_async else "is no longer async",
            )

    def _compare_value(self, emit: "_Emitter", old: ValueSignature, new: ValueSignature) -> None:
        old_ty = self.arena.intern(old.ty)
        new_ty = self.arena.intern(new.ty)
        if old_ty != new_ty:
            emit(
                ChangeKind.TYPE_CHANGED,
                "type changed",
                old_value=self.arena.render(old_ty),
                new_value=self.arena.render(new_ty),
            )


class _Emitter:
    """Collects changes for one item, stamping path, identity and visibility.

    Details are prefixed with the item's kind and name, so items sharing a
    path in different namespaces stay distinguishable in the report.
    """

    def __init__(self, path: Path, def_id: Optional[str], public: bool, label: str):
        self.path = path
        self.def_id = def_id
        self.public = public
        self.label = label
        self.changes: List[DetectedChange] = []

    def __call__(
        self,
        kind: ChangeKind,
        detail: str,
        old_value: Optional[str] = None,
        new_value: Optional[str] = None,
        has_default: bool = False,
        loosened: bool = False,
    ) -> None:
        self.changes.append(DetectedChange(
            path=self.path,
            kind=kind,
            detail=f"{self.label}: {detail}",
            context=ChangeContext(public=self.public, has_default=has_default, loosened=loosened),
            old_value=old_value,
            new_value=new_value,
            def_id=self.def_id,
        ))
