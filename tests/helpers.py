"""Builders for small API trees used across the test suite."""

from semcheck.kernel.tree import APIItem, FnSignature, GenericParam, Param, ValueSignature
from semcheck.kernel.types import PathType


def ty(path, *args):
    return PathType(path=path, args=tuple(args))


def fn(name, params=(), output=None, vis="public", generics=(), has_default=False, def_id=None, **qualifiers):
    """Function item; params are (name, type-path-or-TypeExpr) pairs."""
    return APIItem(
        name=name,
        kind="function",
        visibility=vis,
        generics=tuple(generics),
        has_default=has_default,
        def_id=def_id,
        signature=FnSignature(
            params=tuple(Param(name=n, ty=_as_type(t)) for n, t in params),
            output=None if output is None else _as_type(output),
            **qualifiers,
        ),
    )


def field(name, type_="i32", vis="public"):
    return APIItem(name=name, kind="field", visibility=vis, signature=ValueSignature(ty=_as_type(type_)))


def const(name, type_="i32", vis="public"):
    return APIItem(name=name, kind="const", visibility=vis, signature=ValueSignature(ty=_as_type(type_)))


def struct(name, fields=(), non_exhaustive=False, vis="public", generics=(), children=(), def_id=None):
    return APIItem(
        name=name,
        kind="struct",
        visibility=vis,
        non_exhaustive=non_exhaustive,
        generics=tuple(generics),
        def_id=def_id,
        children=tuple(fields) + tuple(children),
    )


def variant(name, fields=(), non_exhaustive=False):
    return APIItem(name=name, kind="variant", non_exhaustive=non_exhaustive, children=tuple(fields))


def enum(name, variants=(), non_exhaustive=False, vis="public"):
    return APIItem(name=name, kind="enum", visibility=vis, non_exhaustive=non_exhaustive, children=tuple(variants))


def trait(name, items=(), vis="public", generics=()):
    return APIItem(name=name, kind="trait", visibility=vis, generics=tuple(generics), children=tuple(items))


def impl(trait_name, items=()):
    return APIItem(name=trait_name, kind="impl", children=tuple(items))


def module(name, *children, vis="public"):
    return APIItem(name=name, kind="module", visibility=vis, children=tuple(children))


def crate(*children, name="mycrate"):
    return module(name, *children)


def generic(name, *bounds, default=None, kind="type"):
    return GenericParam(
        name=name,
        kind=kind,
        bounds=tuple(bounds),
        default=None if default is None else _as_type(default),
    )


def _as_type(value):
    return ty(value) if isinstance(value, str) else value
