"""Type-expression nodes and the per-run interning arena."""

from __future__ import annotations

import threading
from typing import Annotated, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class PathType(BaseModel):
    """A named type with optional generic arguments, e.g. `Vec<u8>`."""
    node: Literal["path"] = "path"
    path: str
    args: Tuple[TypeExpr, ...] = ()

    model_config = ConfigDict(extra="forbid", frozen=True)


class ParamType(BaseModel):
    """A reference to a generic parameter in scope."""
    node: Literal["param"] = "param"
    name: str

    model_config = ConfigDict(extra="forbid", frozen=True)


class RefType(BaseModel):
    node: Literal["ref"] = "ref"
    mutable: bool = False
    inner: TypeExpr

    model_config = ConfigDict(extra="forbid", frozen=True)


class TupleType(BaseModel):
    """Tuple type; the empty tuple is the unit type."""
    node: Literal["tuple"] = "tuple"
    elems: Tuple[TypeExpr, ...] = ()

    model_config = ConfigDict(extra="forbid", frozen=True)


class ArrayType(BaseModel):
    """Fixed-size array when `len` is set, slice otherwise."""
    node: Literal["array"] = "array"
    elem: TypeExpr
    len: Optional[str] = None

    model_config = ConfigDict(extra="forbid", frozen=True)


class FnPtrType(BaseModel):
    node: Literal["fn_ptr"] = "fn_ptr"
    params: Tuple[TypeExpr, ...] = ()
    output: Optional[TypeExpr] = None

    model_config = ConfigDict(extra="forbid", frozen=True)


class ImplTraitType(BaseModel):
    node: Literal["impl_trait"] = "impl_trait"
    bounds: Tuple[str, ...]

    model_config = ConfigDict(extra="forbid", frozen=True)


class NeverType(BaseModel):
    node: Literal["never"] = "never"

    model_config = ConfigDict(extra="forbid", frozen=True)


TypeExpr = Annotated[
    Union[PathType, ParamType, RefType, TupleType, ArrayType, FnPtrType, ImplTraitType, NeverType],
    Field(discriminator="node"),
]

for _model in (PathType, RefType, TupleType, ArrayType, FnPtrType):
    _model.model_rebuild()


class TypeArena:
    """Hash-consing arena for type expressions.

    Structurally equal expressions intern to the same integer handle, so
    comparing two types is an integer comparison. One arena lives for one
    comparison run and is shared by both trees; it is safe to intern from
    several worker threads.
    """

    def __init__(self):
        self._handles: Dict[tuple, int] = {}
        self._nodes: List[TypeExpr] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._nodes)

    def intern(self, ty: TypeExpr) -> int:
        key = self._key(ty)
        with self._lock:
            handle = self._handles.get(key)
            if handle is None:
                handle = len(self._nodes)
                self._handles[key] = handle
                self._nodes.append(ty)
            return handle

    def intern_optional(self, ty: Optional[TypeExpr]) -> Optional[int]:
        return None if ty is None else self.intern(ty)

    def get(self, handle: int) -> TypeExpr:
        return self._nodes[handle]

    def _key(self, ty: TypeExpr) -> tuple:
        # Children are interned first, so a key only ever holds handles.
        if isinstance(ty, PathType):
            return ("path", ty.path, tuple(self.intern(a) for a in ty.args))
        if isinstance(ty, ParamType):
            return ("param", ty.name)
        if isinstance(ty, RefType):
            return ("ref", ty.mutable, self.intern(ty.inner))
        if isinstance(ty, TupleType):
            return ("tuple", tuple(self.intern(e) for e in ty.elems))
        if isinstance(ty, ArrayType):
            return ("array", self.intern(ty.elem), ty.len)
        if isinstance(ty, FnPtrType):
            return (
                "fn_ptr",
                tuple(self.intern(p) for p in ty.params),
                self.intern_optional(ty.output),
            )
        if isinstance(ty, ImplTraitType):
            return ("impl_trait", tuple(sorted(ty.bounds)))
        if isinstance(ty, NeverType):
            return ("never",)
        raise TypeError(f"Unsupported type expression: {type(ty).__name__}")

    def render(self, handle: Optional[int]) -> str:
        """Render an interned type in source-like syntax."""
        if handle is None:
            return "()"
        return render_type(self.get(handle))


def render_type(ty: TypeExpr) -> str:
    if isinstance(ty, PathType):
        if not ty.args:
            return ty.path
        return f"{ty.path}<{', '.join(render_type(a) for a in ty.args)}>"
    if isinstance(ty, ParamType):
        return ty.name
    if isinstance(ty, RefType):
        return ("&mut " if ty.mutable else "&") + render_type(ty.inner)
    if isinstance(ty, TupleType):
        if len(ty.elems) == 1:
            return f"({render_type(ty.elems[0])},)"
        return "(" + ", ".join(render_type(e) for e in ty.elems) + ")"
    if isinstance(ty, ArrayType):
        if ty.len is None:
            return f"[{render_type(ty.elem)}]"
        return f"[{render_type(ty.elem)}; {ty.len}]"
    if isinstance(ty, FnPtrType):
        out = f"fn({', '.join(render_type(p) for p in ty.params)})"
        if ty.output is not None:
            out += f" -> {render_type(ty.output)}"
        return out
    if isinstance(ty, ImplTraitType):
        return "impl " + " + ".join(ty.bounds)
    if isinstance(ty, NeverType):
        return "!"
    raise TypeError(f"Unsupported type expression: {type(ty).__name__}")
