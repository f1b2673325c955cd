"""API tree models, structural validation and flat-record assembly."""

from __future__ import annotations

from typing import Annotated, Any, Dict, Iterator, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from semcheck.codes import ItemKind, Visibility
from semcheck.kernel.errors import CycleDetectedError, InvalidInputError, TreeLimitExceeded
from semcheck.kernel.types import TypeExpr


class GenericParam(BaseModel):
    """A generic parameter with its bound set and optional default."""
    name: str
    kind: Literal["type", "lifetime", "const"] = "type"
    bounds: Tuple[str, ...] = ()
    default: Optional[TypeExpr] = None

    model_config = ConfigDict(extra="forbid", frozen=True)


class Param(BaseModel):
    name: str
    ty: TypeExpr

    model_config = ConfigDict(extra="forbid", frozen=True)


class FnSignature(BaseModel):
    """Signature of a function or method. Parameters are positional."""
    form: Literal["fn"] = "fn"
    params: Tuple[Param, ...] = ()
    output: Optional[TypeExpr] = None
    is_unsafe: bool = False
    is_const: bool = False
    is_async: bool = False

    model_config = ConfigDict(extra="forbid", frozen=True)


class ValueSignature(BaseModel):
    """Type of a field, const, static or the target of a type alias."""
    form: Literal["value"] = "value"
    ty: TypeExpr

    model_config = ConfigDict(extra="forbid", frozen=True)


Signature = Annotated[Union[FnSignature, ValueSignature], Field(discriminator="form")]


class APIItem(BaseModel):
    """A node of one version's public surface.

    The full path is never stored; it is accumulated while walking from the
    crate root so a subtree can be compared independently of its parent.
    """
    name: str
    kind: ItemKind
    visibility: Visibility = Visibility.PUBLIC
    generics: Tuple[GenericParam, ...] = ()
    signature: Optional[Signature] = None
    non_exhaustive: bool = False
    has_default: bool = False
    def_id: Optional[str] = None
    children: Tuple[APIItem, ...] = ()

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def key(self) -> Tuple[str, str]:
        """Sibling identity: name within the kind's namespace."""
        return (self.name, self.kind.namespace)

    @property
    def is_public(self) -> bool:
        return self.visibility == Visibility.PUBLIC

    def child_map(self) -> Dict[Tuple[str, str], APIItem]:
        return {child.key: child for child in self.children}


APIItem.model_rebuild()


# Which child kinds each container may own.
_ALLOWED_CHILDREN: Dict[ItemKind, frozenset] = {
    ItemKind.MODULE: frozenset({
        ItemKind.MODULE, ItemKind.STRUCT, ItemKind.ENUM, ItemKind.TRAIT,
        ItemKind.FUNCTION, ItemKind.TYPE_ALIAS, ItemKind.CONST, ItemKind.STATIC,
    }),
    ItemKind.STRUCT: frozenset({ItemKind.FIELD, ItemKind.FUNCTION, ItemKind.CONST, ItemKind.IMPL}),
    ItemKind.ENUM: frozenset({ItemKind.VARIANT, ItemKind.FUNCTION, ItemKind.CONST, ItemKind.IMPL}),
    ItemKind.VARIANT: frozenset({ItemKind.FIELD}),
    ItemKind.TRAIT: frozenset({ItemKind.FUNCTION, ItemKind.CONST, ItemKind.ASSOCIATED_ITEM}),
    ItemKind.IMPL: frozenset({ItemKind.FUNCTION, ItemKind.CONST, ItemKind.ASSOCIATED_ITEM}),
}

_FN_KINDS = {ItemKind.FUNCTION}
_VALUE_KINDS = {ItemKind.FIELD, ItemKind.CONST, ItemKind.STATIC, ItemKind.TYPE_ALIAS}


def iter_items(root: APIItem) -> Iterator[Tuple[Tuple[str, ...], APIItem]]:
    """Yield `(path, item)` for every node, parents before children."""
    stack: List[Tuple[Tuple[str, ...], APIItem]] = [((root.name,), root)]
    while stack:
        path, item = stack.pop()
        yield path, item
        for child in reversed(item.children):
            stack.append((path + (child.name,), child))


def validate_tree(root: APIItem, max_depth: int = 64, max_items: int = 200_000) -> int:
    """Validate structural rules of an API tree (raises InvalidInputError).

    Rules:
    - Root is a module
    - Names are non-empty and contain no path separator
    - Sibling keys (name, namespace) are unique
    - Children only appear under containers that may own them
    - Functions carry a fn signature; fields, consts, statics and aliases a value signature
    - Depth and item count stay within the configured guard

    Returns:
        Number of items in the tree
    """
    if root.kind != ItemKind.MODULE:
        raise InvalidInputError(f"tree root must be a module, got {root.kind.value}: {root.name}")

    count = 0
    stack: List[Tuple[Tuple[str, ...], APIItem]] = [((root.name,), root)]
    while stack:
        path, item = stack.pop()
        count += 1
        if count > max_items:
            raise TreeLimitExceeded("max_items", count, max_items)
        if len(path) > max_depth:
            raise TreeLimitExceeded("max_depth", len(path), max_depth)

        label = "::".join(path)
        if not item.name or "::" in item.name:
            raise InvalidInputError(f"invalid item name at {label!r}")
        _check_signature(item, label)

        allowed = _ALLOWED_CHILDREN.get(item.kind, frozenset())
        seen = set()
        for child in item.children:
            if child.kind not in allowed:
                raise InvalidInputError(
                    f"{item.kind.value} {label} cannot contain {child.kind.value} {child.name}"
                )
            if child.key in seen:
                raise InvalidInputError(
                    f"duplicate {child.kind.namespace} name under {label}: {child.name}"
                )
            seen.add(child.key)
            stack.append((path + (child.name,), child))
    return count


def _check_signature(item: APIItem, label: str) -> None:
    sig = item.signature
    if item.kind in _FN_KINDS and not isinstance(sig, FnSignature):
        raise InvalidInputError(f"function {label} is missing a fn signature")
    if item.kind in _VALUE_KINDS and not isinstance(sig, ValueSignature):
        raise InvalidInputError(f"{item.kind.value} {label} is missing a value signature")
    if item.kind not in _FN_KINDS | _VALUE_KINDS and item.kind != ItemKind.ASSOCIATED_ITEM and sig is not None:
        raise InvalidInputError(f"{item.kind.value} {label} cannot carry a signature")

    generic_names = [g.name for g in item.generics]
    if len(set(generic_names)) != len(generic_names):
        raise InvalidInputError(f"duplicate generic parameter name on {label}")
    if isinstance(sig, FnSignature):
        # `_` may repeat; any other binding must be unique.
        param_names = [p.name for p in sig.params if p.name != "_"]
        if len(set(param_names)) != len(param_names):
            raise InvalidInputError(f"duplicate parameter name on {label}")


def parse_tree(data: Dict[str, Any]) -> APIItem:
    """Parse a tree dict, nested or flat-record form, into an APIItem.

    Flat form is `{"root": <id>, "items": [{"id": ..., "parent": ..., ...}]}`.
    """
    if "items" in data and "root" in data:
        return build_tree_from_records(data["root"], data["items"])
    try:
        return APIItem.model_validate(data)
    except ValidationError as e:
        raise InvalidInputError(f"Invalid API tree structure: {e}") from e


def build_tree_from_records(root_id: str, records: List[Dict[str, Any]]) -> APIItem:
    """Assemble a nested tree from flat records linked by parent ids.

    Detects duplicate ids, dangling parent references, extra roots and
    parent cycles before building anything.
    """
    by_id: Dict[str, Dict[str, Any]] = {}
    for record in records:
        if "id" not in record:
            raise InvalidInputError(f"item record without id: {record.get('name', '?')}")
        if record["id"] in by_id:
            raise InvalidInputError(f"duplicate item id: {record['id']}")
        by_id[record["id"]] = record

    if root_id not in by_id:
        raise InvalidInputError(f"root id not found among items: {root_id}")

    children_of: Dict[str, List[str]] = {item_id: [] for item_id in by_id}
    for item_id, record in by_id.items():
        parent = record.get("parent")
        if item_id == root_id:
            if parent is not None:
                raise InvalidInputError(f"root item {root_id} must not have a parent")
            continue
        if parent is None:
            raise InvalidInputError(f"item {item_id} has no parent and is not the root")
        if parent not in by_id:
            raise InvalidInputError(f"item {item_id} references missing parent: {parent}")
        children_of[parent].append(item_id)

    # Anything not reachable from the root hangs off a parent cycle.
    reachable = set()
    stack = [root_id]
    while stack:
        current = stack.pop()
        reachable.add(current)
        stack.extend(children_of[current])
    unreachable = sorted(set(by_id) - reachable)
    if unreachable:
        raise CycleDetectedError(_find_parent_cycle(unreachable[0], by_id))

    def build(item_id: str) -> Dict[str, Any]:
        fields = {k: v for k, v in by_id[item_id].items() if k not in ("id", "parent")}
        fields["children"] = [build(child_id) for child_id in children_of[item_id]]
        return fields

    try:
        return APIItem.model_validate(build(root_id))
    except ValidationError as e:
        raise InvalidInputError(f"Invalid API tree structure: {e}") from e


def _find_parent_cycle(start: str, by_id: Dict[str, Dict[str, Any]]) -> List[str]:
    path: List[str] = []
    position: Dict[str, int] = {}
    current = start
    while current not in position:
        position[current] = len(path)
        path.append(current)
        current = by_id[current]["parent"]
    return path[position[current]:]
