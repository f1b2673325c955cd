"""String enum constants shared by the kernel and the public API.

These constants prevent stringly-typed kinds and ensure client code
uses the same vocabulary as the report.
"""

from enum import Enum


class ItemKind(str, Enum):
    """Kinds of declarations in an API tree."""

    MODULE = "module"
    STRUCT = "struct"
    ENUM = "enum"
    TRAIT = "trait"
    FUNCTION = "function"
    TYPE_ALIAS = "type_alias"
    CONST = "const"
    STATIC = "static"
    IMPL = "impl"
    ASSOCIATED_ITEM = "associated_item"
    FIELD = "field"
    VARIANT = "variant"

    @property
    def namespace(self) -> str:
        """Namespace used to key siblings; kinds sharing one can replace each other."""
        return _NAMESPACES[self]


_NAMESPACES = {
    ItemKind.MODULE: "type",
    ItemKind.STRUCT: "type",
    ItemKind.ENUM: "type",
    ItemKind.TRAIT: "type",
    ItemKind.TYPE_ALIAS: "type",
    ItemKind.FUNCTION: "value",
    ItemKind.CONST: "value",
    ItemKind.STATIC: "value",
    ItemKind.FIELD: "field",
    ItemKind.VARIANT: "variant",
    ItemKind.IMPL: "impl",
    ItemKind.ASSOCIATED_ITEM: "assoc",
}


class Visibility(str, Enum):
    """Declared visibility, ordered from most to least visible."""

    PUBLIC = "public"
    CRATE = "crate"
    RESTRICTED = "restricted"
    PRIVATE = "private"

    @property
    def rank(self) -> int:
        return _VISIBILITY_RANK[self]


_VISIBILITY_RANK = {
    Visibility.PRIVATE: 0,
    Visibility.RESTRICTED: 1,
    Visibility.CRATE: 2,
    Visibility.PUBLIC: 3,
}


class Severity(str, Enum):
    """Semver severity of a change. Totally ordered by `rank`."""

    NON_BREAKING = "NonBreaking"
    TECHNICALLY_BREAKING = "TechnicallyBreaking"
    BREAKING = "Breaking"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def highest(cls, severities) -> "Severity":
        """Maximum of an iterable of severities; NonBreaking when empty."""
        return max(severities, key=lambda s: s.rank, default=cls.NON_BREAKING)


_SEVERITY_RANK = {
    Severity.NON_BREAKING: 0,
    Severity.TECHNICALLY_BREAKING: 1,
    Severity.BREAKING: 2,
}


class ChangeKind(str, Enum):
    """Every structural difference the comparator can emit."""

    # Matcher
    ADDITION = "Addition"
    REMOVAL = "Removal"
    KIND_CHANGED = "KindChanged"
    FIELD_ADDED = "FieldAdded"
    FIELD_REMOVED = "FieldRemoved"
    VARIANT_ADDED = "VariantAdded"
    VARIANT_REMOVED = "VariantRemoved"
    TRAIT_METHOD_ADDED = "TraitMethodAdded"
    TRAIT_METHOD_ADDED_WITH_DEFAULT = "TraitMethodAddedWithDefault"
    TRAIT_IMPL_ADDED = "TraitImplAdded"
    TRAIT_IMPL_REMOVED = "TraitImplRemoved"

    # Comparator
    TYPE_CHANGED = "TypeChanged"
    PARAM_TYPE_CHANGED = "ParamTypeChanged"
    PARAM_RENAMED = "ParamRenamed"
    PARAM_COUNT_CHANGED = "ParamCountChanged"
    RETURN_TYPE_CHANGED = "ReturnTypeChanged"
    FN_QUALIFIER_CHANGED = "FnQualifierChanged"
    VISIBILITY_LOWERED = "VisibilityLowered"
    VISIBILITY_RAISED = "VisibilityRaised"
    BOUND_ADDED = "BoundAdded"
    BOUND_REMOVED = "BoundRemoved"
    GENERIC_PARAM_ADDED = "GenericParamAdded"
    GENERIC_PARAM_REMOVED = "GenericParamRemoved"
    DEFAULT_VALUE_CHANGED = "DefaultValueChanged"
    TRAIT_ITEM_DEFAULT_ADDED = "TraitItemDefaultAdded"
    TRAIT_ITEM_DEFAULT_REMOVED = "TraitItemDefaultRemoved"
    NON_EXHAUSTIVE_ADDED = "NonExhaustiveAdded"
    NON_EXHAUSTIVE_REMOVED = "NonExhaustiveRemoved"


class BumpLevel(str, Enum):
    """Which version component a release increases."""

    NONE = "none"
    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"

    @property
    def rank(self) -> int:
        return _BUMP_RANK[self]


_BUMP_RANK = {
    BumpLevel.NONE: 0,
    BumpLevel.PATCH: 1,
    BumpLevel.MINOR: 2,
    BumpLevel.MAJOR: 3,
}
