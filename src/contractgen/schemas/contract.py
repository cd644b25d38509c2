"""
Contract, IR and result definitions.

These dataclasses describe every object that flows between pipeline stages:
the loaded ContractDocument, the NormalizedIR built from it, per-target
configuration, and the EmissionResult / PublishablePackage produced for each
target. Keeping them centralized gives the loader, normalizer, emitters and
assembler a single source of truth.

All of them are frozen. Mappings are exposed through read-only proxies so a
NormalizedIR can be shared between target threads without copying.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from contractgen.constants import CONTAINER_KINDS, KIND_ARRAY, KIND_MAP, PRIMITIVES


# =============================================================================
# CONTRACT DOCUMENT
# =============================================================================

@dataclass(frozen=True)
class TypeRef:
    """
    Reference to a type from a field, container, parameter or operation.

    Exactly one of ``name`` (a primitive or a declared type) or
    ``container`` + ``element`` (``array`` / ``map``) is set. Map keys are
    always strings.
    """

    name: Optional[str] = None
    container: Optional[str] = None
    element: Optional["TypeRef"] = None

    @classmethod
    def named(cls, name: str) -> "TypeRef":
        return cls(name=name)

    @classmethod
    def array_of(cls, element: "TypeRef") -> "TypeRef":
        return cls(container=KIND_ARRAY, element=element)

    @classmethod
    def map_of(cls, element: "TypeRef") -> "TypeRef":
        return cls(container=KIND_MAP, element=element)

    @property
    def is_container(self) -> bool:
        return self.container in CONTAINER_KINDS

    @property
    def is_primitive(self) -> bool:
        return self.name is not None and self.name in PRIMITIVES

    def referenced_names(self) -> List[str]:
        """Declared (non-primitive) type names reachable from this reference."""
        if self.is_container:
            return self.element.referenced_names() if self.element else []
        if self.name is None or self.is_primitive:
            return []
        return [self.name]

    def to_dict(self) -> Dict[str, object]:
        if self.is_container:
            return {"container": self.container, "element": self.element.to_dict()}
        return {"name": self.name}


@dataclass(frozen=True)
class FieldDefinition:
    """One property of an object type, in declaration order."""

    name: str
    type: TypeRef
    required: bool = False
    description: Optional[str] = None
    location: str = ""


@dataclass(frozen=True)
class TypeDefinition:
    """
    A named schema declared in the contract's ``types`` section.

    Attributes:
        name: Declared schema name.
        kind: One of primitive, object, enum, array, map.
        fields: Ordered properties (object kind).
        values: Enum members (enum kind).
        items: Element reference (array and map kinds).
        primitive: Aliased primitive name (primitive kind).
        parent: Inherited object type name.
        compose: Composed (allOf) object type names, in listed order.
        one_of: Union alternatives; emitters without unions fall back.
        description: Free text carried into generated doc comments.
        location: Dotted path in the contract for error messages.
    """

    name: str
    kind: str
    fields: Tuple[FieldDefinition, ...] = ()
    values: Tuple[str, ...] = ()
    items: Optional[TypeRef] = None
    primitive: Optional[str] = None
    parent: Optional[str] = None
    compose: Tuple[str, ...] = ()
    one_of: Tuple[TypeRef, ...] = ()
    description: Optional[str] = None
    location: str = ""

    def references(self) -> List[str]:
        """Every declared type name this definition depends on."""
        names: List[str] = []
        for fld in self.fields:
            names.extend(fld.type.referenced_names())
        if self.items is not None:
            names.extend(self.items.referenced_names())
        if self.parent:
            names.append(self.parent)
        names.extend(self.compose)
        for alt in self.one_of:
            names.extend(alt.referenced_names())
        return names


@dataclass(frozen=True)
class ParameterDefinition:
    """Path, query or header parameter of an operation."""

    name: str
    location: str
    type: TypeRef
    required: bool = False


@dataclass(frozen=True)
class OperationDefinition:
    """One (path, method) entry from the contract's ``operations`` section."""

    operation_id: str
    method: str
    path: str
    tag: str
    parameters: Tuple[ParameterDefinition, ...] = ()
    request: Optional[TypeRef] = None
    response: Optional[TypeRef] = None
    summary: Optional[str] = None
    location: str = ""

    @property
    def key(self) -> Tuple[str, str]:
        return (self.path, self.method)

    def references(self) -> List[str]:
        names: List[str] = []
        for param in self.parameters:
            names.extend(param.type.referenced_names())
        if self.request is not None:
            names.extend(self.request.referenced_names())
        if self.response is not None:
            names.extend(self.response.referenced_names())
        return names


@dataclass(frozen=True)
class ContractDocument:
    """Raw parsed contract. Immutable once loaded."""

    title: str
    version: Optional[str]
    types: Mapping[str, TypeDefinition]
    operations: Mapping[Tuple[str, str], OperationDefinition]
    source_path: Optional[Path] = None

    def __post_init__(self):
        object.__setattr__(self, "types", MappingProxyType(dict(self.types)))
        object.__setattr__(self, "operations", MappingProxyType(dict(self.operations)))


# =============================================================================
# NORMALIZED IR
# =============================================================================

@dataclass(frozen=True)
class NormalizedField:
    """A field after inheritance/composition flattening."""

    name: str
    canonical_name: str
    type: TypeRef
    required: bool
    description: Optional[str] = None
    declared_in: Optional[str] = None


@dataclass(frozen=True)
class NormalizedType:
    """A type whose references are all resolved and whose fields are flattened."""

    name: str
    canonical_name: str
    kind: str
    fields: Tuple[NormalizedField, ...] = ()
    values: Tuple[str, ...] = ()
    items: Optional[TypeRef] = None
    primitive: Optional[str] = None
    parent: Optional[str] = None
    compose: Tuple[str, ...] = ()
    one_of: Tuple[TypeRef, ...] = ()
    description: Optional[str] = None

    @property
    def is_union(self) -> bool:
        return bool(self.one_of)

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "canonical_name": self.canonical_name,
            "kind": self.kind,
            "fields": [
                {
                    "name": f.name,
                    "type": f.type.to_dict(),
                    "required": f.required,
                    "declared_in": f.declared_in,
                }
                for f in self.fields
            ],
            "values": list(self.values),
            "items": self.items.to_dict() if self.items else None,
            "primitive": self.primitive,
            "parent": self.parent,
            "compose": list(self.compose),
            "one_of": [alt.to_dict() for alt in self.one_of],
        }


@dataclass(frozen=True)
class NormalizedIR:
    """
    Reference-resolved, cycle-free graph of types and operations.

    Attributes:
        title: Contract title.
        version: Contract version from ``info`` (may be None).
        types: Name -> NormalizedType, in sorted name order.
        operations: Operations sorted by operation id.
        type_order: Dependencies before dependents, lexicographic tie-break.
        fingerprint: sha256 of the canonical IR payload.
    """

    title: str
    version: Optional[str]
    types: Mapping[str, NormalizedType]
    operations: Tuple[OperationDefinition, ...]
    type_order: Tuple[str, ...]
    fingerprint: str

    def __post_init__(self):
        object.__setattr__(self, "types", MappingProxyType(dict(self.types)))

    def ordered_types(self) -> List[NormalizedType]:
        return [self.types[name] for name in self.type_order]

    def tags(self) -> List[str]:
        return sorted({op.tag for op in self.operations})

    def operations_for_tag(self, tag: str) -> List[OperationDefinition]:
        return [op for op in self.operations if op.tag == tag]


# =============================================================================
# TARGET CONFIGURATION
# =============================================================================

@dataclass(frozen=True)
class TargetConfig:
    """
    Validated per-target options.

    Attributes:
        target: Canonical target name (java, typescript, python, go).
        naming_convention: Casing rule applied to property names.
        date_representation: epoch, iso8601 or native.
        nullability_policy: optionalWrapper or nullableField.
        package_name: Package / module name of the generated code.
        version: Semantic version stamped into descriptors.
        registry_url: Registry the package is published to.
        options: Remaining recognized options (target-specific and common).
        warnings: Messages about unrecognized options that were ignored.
    """

    target: str
    naming_convention: str
    date_representation: str
    nullability_policy: str
    package_name: str
    version: str
    registry_url: str
    options: Mapping[str, str] = field(default_factory=dict)
    warnings: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    def option(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self.options.get(key)
        return default if value in (None, "") else value


# =============================================================================
# RESULTS
# =============================================================================

@dataclass(frozen=True)
class FeatureWarning:
    """Non-fatal notice that a target fell back for an unsupported feature."""

    target: str
    subject: str
    code: str
    message: str

    def __str__(self) -> str:
        return f"[{self.target}] {self.subject}: {self.message} ({self.code})"


@dataclass(frozen=True)
class GeneratedFile:
    """A rendered file that has not been written anywhere yet."""

    path: str
    content: str


@dataclass(frozen=True)
class EmissionResult:
    """Outcome of one emitter run."""

    target: str
    success: bool
    files: Tuple[GeneratedFile, ...] = ()
    warnings: Tuple[FeatureWarning, ...] = ()
    errors: Tuple[str, ...] = ()
    dependencies: Tuple[Tuple[str, str], ...] = ()

    @property
    def paths(self) -> List[str]:
        return [f.path for f in self.files]

    @classmethod
    def failed(cls, target: str, *errors: str) -> "EmissionResult":
        return cls(target=target, success=False, errors=tuple(errors))


@dataclass(frozen=True)
class PublishablePackage:
    """An assembled output directory plus its metadata descriptor."""

    target: str
    name: str
    version: str
    registry_url: str
    path: Path
    descriptor_path: Path
    files: Tuple[str, ...] = ()
    dependencies: Tuple[str, ...] = ()
    auth_env: Tuple[str, ...] = ()


__all__ = [
    "TypeRef",
    "FieldDefinition",
    "TypeDefinition",
    "ParameterDefinition",
    "OperationDefinition",
    "ContractDocument",
    "NormalizedField",
    "NormalizedType",
    "NormalizedIR",
    "TargetConfig",
    "FeatureWarning",
    "GeneratedFile",
    "EmissionResult",
    "PublishablePackage",
]
