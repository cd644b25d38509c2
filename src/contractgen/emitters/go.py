"""
Go emitter: structs with json tags.

Every type lands in ``model_<type>.go`` in a single package. Exported Go
identifiers must start with an upper-case letter, so struct fields are always
PascalCase; the wire name lives in the json tag. Under ``optionalWrapper`` an
``optional.go`` with a generic ``Optional[T]`` is emitted alongside.
"""

from __future__ import annotations

import json
import re
from typing import List, Optional, Set, Tuple

from contractgen.constants import (
    GENERATED_HEADER,
    KIND_ARRAY,
    KIND_ENUM,
    KIND_MAP,
    KIND_PRIMITIVE,
    NAMING_PASCAL,
    PRIM_ANY,
    PRIM_BINARY,
    PRIM_BOOLEAN,
    PRIM_DATE,
    PRIM_DATETIME,
    PRIM_INTEGER,
    PRIM_LONG,
    PRIM_NUMBER,
    PRIM_STRING,
    PRIM_UUID,
    TARGET_GO,
)
from contractgen.emitters.base import (
    WARN_NAMING_OVERRIDE,
    WARN_RESERVED_WORD,
    WARN_UNSUPPORTED_UNION,
    EmitContext,
    Emitter,
)
from contractgen.schemas.contract import GeneratedFile, NormalizedType, TypeRef
from contractgen.utils.naming import to_snake
from contractgen.utils.templates import render_template
from contractgen.utils.text import first_line, join_lines

GO_RESERVED = frozenset({
    "break", "case", "chan", "const", "continue", "default", "defer", "else",
    "fallthrough", "for", "func", "go", "goto", "if", "import", "interface",
    "map", "package", "range", "return", "select", "struct", "switch", "type",
    "var", "Optional", "Some",
})

# primitive -> (go type, import path)
PRIMITIVE_TYPES = {
    PRIM_STRING: ("string", None),
    PRIM_INTEGER: ("int32", None),
    PRIM_LONG: ("int64", None),
    PRIM_NUMBER: ("float64", None),
    PRIM_BOOLEAN: ("bool", None),
    PRIM_UUID: ("string", None),
    PRIM_BINARY: ("[]byte", None),
    PRIM_ANY: ("interface{}", None),
    PRIM_DATE: ("time.Time", "time"),
    PRIM_DATETIME: ("time.Time", "time"),
}

PACKAGE_RX = re.compile(r"[^a-z0-9]")

# File name suffixes go build reads as constraints (_test, $GOOS, $GOARCH)
GO_FILE_CONSTRAINTS = frozenset({
    "test",
    "aix", "android", "darwin", "dragonfly", "freebsd", "hurd", "illumos",
    "ios", "js", "linux", "nacl", "netbsd", "openbsd", "plan9", "solaris",
    "wasip1", "windows", "zos",
    "386", "amd64", "amd64p32", "arm", "armbe", "arm64", "arm64be", "loong64",
    "mips", "mipsle", "mips64", "mips64le", "mips64p32", "mips64p32le", "ppc",
    "ppc64", "ppc64le", "riscv", "riscv64", "s390", "s390x", "sparc",
    "sparc64", "wasm",
})


class GoEmitter(Emitter):
    """Go structs, typed string enums and an optional helper."""

    target = TARGET_GO
    reserved_words = GO_RESERVED

    def field_convention(self, ctx: EmitContext) -> str:
        if ctx.config.naming_convention != NAMING_PASCAL:
            ctx.warn(
                "namingConvention",
                WARN_NAMING_OVERRIDE,
                f"Go exports only upper-case identifiers; {ctx.config.naming_convention} ignored, "
                f"struct fields use PascalCase and json tags keep wire names",
            )
        return NAMING_PASCAL

    def module_stem(self, ctx: EmitContext, name: str) -> str:
        stem = f"model_{to_snake(ctx.type_name(name))}"
        suffix = stem.rsplit("_", 1)[-1]
        if suffix in GO_FILE_CONSTRAINTS:
            ctx.warn(
                name,
                WARN_RESERVED_WORD,
                f"go build treats the _{suffix} file suffix as a build constraint; emitted as {stem}_.go",
            )
            stem = f"{stem}_"
        return stem

    @staticmethod
    def go_package(ctx: EmitContext) -> str:
        name = PACKAGE_RX.sub("", ctx.config.package_name.rsplit("/", 1)[-1].lower())
        if not name or name[0].isdigit():
            return "contract"
        return name

    # -------------------------------------------------------------------------
    # type mapping
    # -------------------------------------------------------------------------

    def go_type(self, ref: TypeRef, ctx: EmitContext, imports: Set[str]) -> str:
        if ref.is_container:
            inner = self.go_type(ref.element, ctx, imports)
            if ref.container == KIND_ARRAY:
                return f"[]{inner}"
            return f"map[string]{inner}"
        if ref.is_primitive:
            primitive = self.date_fallback(ctx, ref.name) or ref.name
            go, imp = PRIMITIVE_TYPES[primitive]
            if imp:
                imports.add(imp)
            return go
        return ctx.type_name(ref.name)

    def _nil_able(self, ref: TypeRef, ctx: EmitContext) -> bool:
        """Slices, maps and interfaces already have a nil value."""
        if ref.is_container:
            return True
        if ref.is_primitive:
            return ref.name in (PRIM_ANY, PRIM_BINARY)
        ntype = ctx.resolve(ref)
        if ntype.kind in (KIND_ARRAY, KIND_MAP) or ntype.is_union:
            return True
        if ntype.kind == KIND_PRIMITIVE:
            return ntype.primitive in (PRIM_ANY, PRIM_BINARY)
        return False

    # -------------------------------------------------------------------------
    # render
    # -------------------------------------------------------------------------

    def render(self, ctx: EmitContext) -> List[GeneratedFile]:
        package = self.go_package(ctx)
        files: List[GeneratedFile] = []
        uses_optional = False
        for ntype in ctx.ir.ordered_types():
            ctx.check()
            imports: Set[str] = set()
            body, wrapped = self._render_type(ntype, ctx, imports)
            uses_optional = uses_optional or wrapped
            files.append(GeneratedFile(
                path=f"{ctx.module_name(ntype.name)}.go",
                content=self._file(package, imports, body),
            ))
        if uses_optional:
            files.append(GeneratedFile(
                path="optional.go",
                content=render_template("go/optional.go.jinja2", header=GENERATED_HEADER, package=package),
            ))
        return files

    @staticmethod
    def _file(package: str, imports: Set[str], body: List[str]) -> str:
        lines = [f"// {GENERATED_HEADER}", "", f"package {package}", ""]
        if len(imports) == 1:
            lines.extend([f'import "{next(iter(imports))}"', ""])
        elif imports:
            lines.append("import (")
            lines.extend(f'\t"{imp}"' for imp in sorted(imports))
            lines.extend([")", ""])
        lines.extend(body)
        return join_lines(lines)

    @staticmethod
    def _comment(name: str, description: Optional[str]) -> List[str]:
        summary = first_line(description or "")
        return [f"// {name} {summary}"] if summary else []

    def _render_type(self, ntype: NormalizedType, ctx: EmitContext, imports: Set[str]) -> Tuple[List[str], bool]:
        name = ctx.type_name(ntype.name)
        body = self._comment(name, ntype.description)

        if ntype.kind == KIND_ENUM:
            members = ctx.enum_members(ntype, NAMING_PASCAL)
            consts = [(f"{name}{members[v]}", v) for v in ntype.values]
            width = max(len(c) for c, _ in consts)
            body.append(f"type {name} string")
            body.append("")
            body.append("const (")
            body.extend(f"\t{c.ljust(width)} {name} = {json.dumps(v)}" for c, v in consts)
            body.append(")")
            return body, False
        if ntype.kind == KIND_PRIMITIVE:
            body.append(f"type {name} = {self.go_type(TypeRef.named(ntype.primitive), ctx, imports)}")
            return body, False
        if ntype.kind in (KIND_ARRAY, KIND_MAP):
            alias = self.go_type(TypeRef(container=ntype.kind, element=ntype.items), ctx, imports)
            body.append(f"type {name} = {alias}")
            return body, False
        if ntype.is_union:
            ctx.warn(ntype.name, WARN_UNSUPPORTED_UNION, "Go has no union types; represented as interface{}")
            body.append(f"type {name} = interface{{}}")
            return body, False

        names = ctx.field_names(ntype)
        rows: List[Tuple[str, str, str]] = []
        wrapped = False
        for fld in ntype.fields:
            go = self.go_type(fld.type, ctx, imports)
            if fld.required:
                tag = f'`json:"{fld.name}"`'
            else:
                tag = f'`json:"{fld.name},omitempty"`'
                if ctx.wraps_optionals:
                    go = f"Optional[{go}]"
                    wrapped = True
                elif not self._nil_able(fld.type, ctx):
                    go = f"*{go}"
            rows.append((names[fld.name], go, tag))

        body.append(f"type {name} struct {{")
        if rows:
            name_width = max(len(r[0]) for r in rows)
            type_width = max(len(r[1]) for r in rows)
            for fld, (prop, go, tag) in zip(ntype.fields, rows):
                summary = first_line(fld.description or "")
                if summary:
                    body.append(f"\t// {prop} {summary}")
                body.append(f"\t{prop.ljust(name_width)} {go.ljust(type_width)} {tag}")
        body.append("}")
        return body, wrapped


__all__ = ["GoEmitter"]
