"""
Emitter abstraction shared by every target.

An Emitter renders a NormalizedIR into virtual files for one target
language. Subclasses supply the target's type mapping and file layout;
this module supplies the pieces every target needs the same way:

- Type and property naming with the target's casing, reserved-word escaping
  and deterministic collision suffixes
- FeatureWarning collection for unsupported features
- Cooperative cancellation between types
- Deterministic, path-sorted output
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, FrozenSet, List, Optional, Tuple

from contractgen.cancellation import CancellationToken
from contractgen.constants import (
    DATE_EPOCH,
    DATE_ISO8601,
    DATE_PRIMITIVES,
    KIND_ENUM,
    KIND_OBJECT,
    NAMING_PASCAL,
    NAMING_UPPER_SNAKE,
    NULLABILITY_OPTIONAL_WRAPPER,
    PRIM_STRING,
)
from contractgen.errors import EmissionError
from contractgen.schemas.contract import (
    EmissionResult,
    FeatureWarning,
    GeneratedFile,
    NormalizedIR,
    NormalizedType,
    TargetConfig,
    TypeRef,
)
from contractgen.utils.naming import apply_convention, disambiguate, to_camel, to_pascal

logger = logging.getLogger(__name__)

# FeatureWarning codes
WARN_NAME_COLLISION = "name_collision"
WARN_RESERVED_WORD = "reserved_word"
WARN_UNSUPPORTED_UNION = "unsupported_union"
WARN_UNSUPPORTED_BINARY = "unsupported_binary"
WARN_UNION_FIELDS = "union_fields_dropped"
WARN_NAMING_OVERRIDE = "naming_override"


class EmitContext:
    """
    Per-run state for one emitter invocation.

    Holds the IR and TargetConfig, the warnings collected so far, and the
    name assignments (computed once, so every file agrees on them).
    """

    def __init__(
        self,
        emitter: "Emitter",
        ir: NormalizedIR,
        config: TargetConfig,
        token: Optional[CancellationToken] = None,
    ):
        self.emitter = emitter
        self.ir = ir
        self.config = config
        self.token = token
        self.target = emitter.target
        self.warnings: List[FeatureWarning] = []
        self._warned = set()
        self._type_names = self._assign_type_names()
        self._field_names: Dict[str, Dict[str, str]] = {}
        self._enum_members: Dict[str, Dict[str, str]] = {}
        self._module_names: Optional[Dict[str, str]] = None
        self._api_names: Optional[Dict[str, str]] = None
        self._method_names: Dict[str, Dict[str, str]] = {}

    # -------------------------------------------------------------------------
    # warnings & cancellation
    # -------------------------------------------------------------------------

    def warn(self, subject: str, code: str, message: str) -> None:
        key = (subject, code, message)
        if key in self._warned:
            return
        self._warned.add(key)
        warning = FeatureWarning(target=self.target, subject=subject, code=code, message=message)
        logger.warning(str(warning))
        self.warnings.append(warning)

    def check(self) -> None:
        if self.token is not None:
            self.token.raise_if_cancelled()

    # -------------------------------------------------------------------------
    # policies
    # -------------------------------------------------------------------------

    @property
    def wraps_optionals(self) -> bool:
        return self.config.nullability_policy == NULLABILITY_OPTIONAL_WRAPPER

    def date_mode(self, primitive: str) -> Optional[str]:
        """epoch / iso8601 / native for date primitives, None otherwise."""
        if primitive in DATE_PRIMITIVES:
            return self.config.date_representation
        return None

    # -------------------------------------------------------------------------
    # naming
    # -------------------------------------------------------------------------

    def _escape(self, ident: str, subject: str) -> str:
        escaped = self.emitter.escape_identifier(ident)
        if escaped != ident:
            self.warn(subject, WARN_RESERVED_WORD, f"{ident!r} is reserved in {self.target}; emitted as {escaped!r}")
        return escaped

    def _assign_type_names(self) -> Dict[str, str]:
        candidates = [
            (name, self._escape(apply_convention(name, NAMING_PASCAL), name))
            for name in self.ir.types
        ]
        assigned, collisions = disambiguate(candidates)
        for source, recased, unique in collisions:
            self.warn(
                source,
                WARN_NAME_COLLISION,
                f"type name collides as {recased!r} under {self.target} casing; renamed to {unique!r}",
            )
        return assigned

    def type_name(self, name: str) -> str:
        return self._type_names[name]

    def field_names(self, ntype: NormalizedType) -> Dict[str, str]:
        """Wire name -> target property name for one object type."""
        if ntype.name not in self._field_names:
            convention = self.emitter.field_convention(self)
            candidates = [
                (f.name, self._escape(apply_convention(f.name, convention), f"{ntype.name}.{f.name}"))
                for f in ntype.fields
            ]
            assigned, collisions = disambiguate(candidates)
            for source, recased, unique in collisions:
                self.warn(
                    f"{ntype.name}.{source}",
                    WARN_NAME_COLLISION,
                    f"field name collides as {recased!r} under {convention}; renamed to {unique!r}",
                )
            self._field_names[ntype.name] = assigned
        return self._field_names[ntype.name]

    def enum_members(self, ntype: NormalizedType, convention: str = NAMING_UPPER_SNAKE) -> Dict[str, str]:
        """Enum value -> target member name."""
        if ntype.name not in self._enum_members:
            candidates = [
                (value, self._escape(apply_convention(value, convention), f"{ntype.name}.{value}"))
                for value in ntype.values
            ]
            assigned, collisions = disambiguate(candidates)
            for source, recased, unique in collisions:
                self.warn(
                    f"{ntype.name}.{source}",
                    WARN_NAME_COLLISION,
                    f"enum member collides as {recased!r}; renamed to {unique!r}",
                )
            self._enum_members[ntype.name] = assigned
        return self._enum_members[ntype.name]

    def module_name(self, name: str) -> str:
        """File stem holding a declared type, unique within the target."""
        if self._module_names is None:
            candidates = [(source, self.emitter.module_stem(self, source)) for source in self.ir.types]
            assigned, collisions = disambiguate(candidates, reserved=self.emitter.fixed_modules)
            for source, stem, unique in collisions:
                self.warn(
                    source,
                    WARN_NAME_COLLISION,
                    f"file name {stem!r} is already taken in {self.target}; emitted as {unique!r}",
                )
            self._module_names = assigned
        return self._module_names[name]

    def api_name(self, tag: str) -> str:
        """Client class name for an operation tag."""
        if self._api_names is None:
            candidates = [(t, self._escape(to_pascal(t) + "Api", t)) for t in self.ir.tags()]
            assigned, collisions = disambiguate(candidates, reserved=self._type_names.values())
            for source, recased, unique in collisions:
                self.warn(
                    source,
                    WARN_NAME_COLLISION,
                    f"tag collides as {recased!r} under {self.target} casing; renamed to {unique!r}",
                )
            self._api_names = assigned
        return self._api_names[tag]

    def method_names(self, tag: str) -> Dict[str, str]:
        """Operation id -> method name within one tag's client."""
        if tag not in self._method_names:
            candidates = [
                (op.operation_id, self._escape(to_camel(op.operation_id), op.operation_id))
                for op in self.ir.operations_for_tag(tag)
            ]
            assigned, collisions = disambiguate(candidates)
            for source, recased, unique in collisions:
                self.warn(
                    source,
                    WARN_NAME_COLLISION,
                    f"operation collides as {recased!r} in {self.api_name(tag)}; renamed to {unique!r}",
                )
            self._method_names[tag] = assigned
        return self._method_names[tag]

    # -------------------------------------------------------------------------
    # type lookup
    # -------------------------------------------------------------------------

    def resolve(self, ref: TypeRef) -> Optional[NormalizedType]:
        """The declared type behind a named reference (None for primitives/containers)."""
        if ref.is_container or ref.is_primitive or ref.name is None:
            return None
        return self.ir.types[ref.name]


class Emitter(ABC):
    """
    Base class for target emitters.

    Subclasses set ``target`` and ``reserved_words`` and implement
    :meth:`render`. :meth:`emit` is the public entry point and is safe to
    call concurrently with other emitters on the same IR.

    ``fixed_modules`` lists file stems a type may never take, such as the
    emitter's own index files.
    """

    target: str = ""
    reserved_words: FrozenSet[str] = frozenset()
    fixed_modules: FrozenSet[str] = frozenset()

    def emit(
        self,
        ir: NormalizedIR,
        config: TargetConfig,
        token: Optional[CancellationToken] = None,
    ) -> EmissionResult:
        """
        Render the IR for this target.

        Args:
            ir: Normalized IR (read-only).
            config: Validated TargetConfig for this target.
            token: Cancellation token checked between types.

        Returns:
            EmissionResult. An EmissionError becomes a failed result; a
            cancellation propagates as TargetTimeoutError.
        """
        ctx = EmitContext(self, ir, config, token)
        ctx.check()
        by_path: Dict[str, GeneratedFile] = {}
        try:
            for generated in self.render(ctx):
                if generated.path in by_path:
                    raise EmissionError(self.target, f"file emitted twice: {generated.path}")
                by_path[generated.path] = generated
        except EmissionError as e:
            logger.error(f"{self.target}: emission failed: {e}")
            return EmissionResult(
                target=self.target,
                success=False,
                warnings=tuple(ctx.warnings),
                errors=(str(e),),
            )

        logger.info(f"{self.target}: rendered {len(by_path)} files, {len(ctx.warnings)} warnings")
        return EmissionResult(
            target=self.target,
            success=True,
            files=tuple(by_path[path] for path in sorted(by_path)),
            warnings=tuple(ctx.warnings),
            dependencies=tuple(self.dependencies(ctx)),
        )

    @abstractmethod
    def render(self, ctx: EmitContext) -> List[GeneratedFile]:
        """Produce every file for this target."""

    def dependencies(self, ctx: EmitContext) -> List[Tuple[str, str]]:
        """Runtime dependencies of the generated code as (name, version) pairs."""
        return []

    def field_convention(self, ctx: EmitContext) -> str:
        return ctx.config.naming_convention

    def module_stem(self, ctx: EmitContext, name: str) -> str:
        """File stem for a declared type before collision suffixes."""
        return ctx.type_name(name)

    def escape_identifier(self, ident: str) -> str:
        if ident in self.reserved_words:
            return f"{ident}_"
        return ident

    # -------------------------------------------------------------------------
    # helpers shared by subclasses
    # -------------------------------------------------------------------------

    @staticmethod
    def date_fallback(ctx: EmitContext, primitive: str) -> Optional[str]:
        """Primitive name to render instead of a date under epoch/iso8601 policies."""
        mode = ctx.date_mode(primitive)
        if mode == DATE_EPOCH:
            return "long"
        if mode == DATE_ISO8601:
            return PRIM_STRING
        return None

    @staticmethod
    def object_types(ctx: EmitContext) -> List[NormalizedType]:
        return [t for t in ctx.ir.ordered_types() if t.kind == KIND_OBJECT]

    @staticmethod
    def enum_types(ctx: EmitContext) -> List[NormalizedType]:
        return [t for t in ctx.ir.ordered_types() if t.kind == KIND_ENUM]


__all__ = [
    "EmitContext",
    "Emitter",
    "WARN_NAME_COLLISION",
    "WARN_RESERVED_WORD",
    "WARN_UNSUPPORTED_UNION",
    "WARN_UNSUPPORTED_BINARY",
    "WARN_UNION_FIELDS",
    "WARN_NAMING_OVERRIDE",
]
