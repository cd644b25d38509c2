"""
TypeScript emitter: interfaces plus an axios client.

Layout:
- ``model/<type>.ts``: one exported interface, enum or type alias per type
- ``model/index.ts``: re-exports every model
- ``api/<tag>-api.ts``: one client class per operation tag
- ``base.ts``: shared BaseAPI holding the axios instance and base path
- ``index.ts``: package entry point

TypeScript supports unions natively, so ``oneOf`` types never fall back.
"""

from __future__ import annotations

from typing import List, Set, Tuple

from contractgen.constants import (
    GENERATED_HEADER,
    KIND_ARRAY,
    KIND_ENUM,
    KIND_MAP,
    KIND_PRIMITIVE,
    NAMING_PASCAL,
    NAMING_PRESERVE,
    NAMING_UPPER_SNAKE,
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
    TARGET_TYPESCRIPT,
)
from contractgen.emitters.base import WARN_UNSUPPORTED_BINARY, EmitContext, Emitter
from contractgen.schemas.contract import (
    GeneratedFile,
    NormalizedType,
    OperationDefinition,
    TypeRef,
)
from contractgen.utils.naming import to_camel, to_kebab
from contractgen.utils.templates import render_template
from contractgen.utils.text import first_line, indent, join_lines

TS_RESERVED = frozenset({
    "break", "case", "catch", "class", "const", "continue", "debugger",
    "default", "delete", "do", "else", "enum", "export", "extends", "false",
    "finally", "for", "function", "if", "import", "in", "instanceof", "new",
    "null", "return", "super", "switch", "this", "throw", "true", "try",
    "typeof", "var", "void", "while", "with", "implements", "interface",
    "let", "package", "private", "protected", "public", "static", "yield",
    "any", "boolean", "number", "string", "symbol", "type", "from", "of",
})

PRIMITIVE_TYPES = {
    PRIM_STRING: "string",
    PRIM_INTEGER: "number",
    PRIM_LONG: "number",
    PRIM_NUMBER: "number",
    PRIM_BOOLEAN: "boolean",
    PRIM_UUID: "string",
    PRIM_BINARY: "string",
    PRIM_ANY: "any",
    PRIM_DATE: "Date",
    PRIM_DATETIME: "Date",
}

# enumNaming option -> member naming convention
ENUM_NAMING = {
    "UPPERCASE": NAMING_UPPER_SNAKE,
    "PascalCase": NAMING_PASCAL,
    "original": NAMING_PRESERVE,
}


def _is_identifier(name: str) -> bool:
    return name.replace("_", "a").replace("$", "a").isalnum() and not name[:1].isdigit()


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


class TypeScriptEmitter(Emitter):
    """TypeScript interfaces and an axios-based client."""

    target = TARGET_TYPESCRIPT
    reserved_words = TS_RESERVED
    fixed_modules = frozenset({"index"})

    # -------------------------------------------------------------------------
    # type mapping
    # -------------------------------------------------------------------------

    def ts_type(self, ref: TypeRef, ctx: EmitContext, imports: Set[str]) -> str:
        if ref.is_container:
            inner = self.ts_type(ref.element, ctx, imports)
            if ref.container == KIND_ARRAY:
                return f"Array<{inner}>"
            return f"{{ [key: string]: {inner}; }}"
        if ref.is_primitive:
            primitive = self.date_fallback(ctx, ref.name) or ref.name
            if primitive == PRIM_BINARY:
                ctx.warn(PRIM_BINARY, WARN_UNSUPPORTED_BINARY, "binary has no JSON form in TypeScript; emitted as base64 string")
            return PRIMITIVE_TYPES[primitive]
        name = ctx.type_name(ref.name)
        imports.add(ref.name)
        return name

    def module_stem(self, ctx: EmitContext, name: str) -> str:
        return to_kebab(ctx.type_name(name))

    def _imports_block(self, current: str, imports: Set[str], ctx: EmitContext, prefix: str) -> List[str]:
        lines = []
        for source in sorted(imports - {current}, key=ctx.type_name):
            name = ctx.type_name(source)
            lines.append(f"import type {{ {name} }} from '{prefix}{ctx.module_name(source)}';")
        if lines:
            lines.append("")
        return lines

    @staticmethod
    def _doc(text: str, level: int = 0) -> List[str]:
        summary = first_line(text or "")
        if not summary:
            return []
        return indent(["/**", f" * {summary}", " */"], level)

    # -------------------------------------------------------------------------
    # render
    # -------------------------------------------------------------------------

    def render(self, ctx: EmitContext) -> List[GeneratedFile]:
        files: List[GeneratedFile] = []
        exports: List[str] = []
        for ntype in ctx.ir.ordered_types():
            ctx.check()
            files.append(self._render_model(ntype, ctx))
            exports.append(ctx.module_name(ntype.name))

        files.append(GeneratedFile(
            path="model/index.ts",
            content=join_lines([f"// {GENERATED_HEADER}"] + [f"export * from './{m}';" for m in sorted(exports)]),
        ))

        api_modules: List[str] = []
        for tag in ctx.ir.tags():
            ctx.check()
            module = to_kebab(ctx.api_name(tag))
            files.append(self._render_api(tag, module, ctx.ir.operations_for_tag(tag), ctx))
            api_modules.append(module)

        files.append(self._render_base())
        index = [f"// {GENERATED_HEADER}", "export * from './base';", "export * from './model';"]
        index.extend(f"export * from './api/{m}';" for m in api_modules)
        files.append(GeneratedFile(path="index.ts", content=join_lines(index)))
        return files

    def _render_model(self, ntype: NormalizedType, ctx: EmitContext) -> GeneratedFile:
        name = ctx.type_name(ntype.name)
        imports: Set[str] = set()
        body = self._doc(ntype.description)

        if ntype.kind == KIND_ENUM:
            convention = ENUM_NAMING.get(ctx.config.option("enumNaming", "UPPERCASE"), NAMING_UPPER_SNAKE)
            members = ctx.enum_members(ntype, convention)
            body.append(f"export enum {name} {{")
            body.extend(indent([f"{members[v]} = '{_quote(v)}'," for v in ntype.values], 1, 2))
            body.append("}")
        elif ntype.kind == KIND_PRIMITIVE:
            body.append(f"export type {name} = {self.ts_type(TypeRef.named(ntype.primitive), ctx, imports)};")
        elif ntype.kind in (KIND_ARRAY, KIND_MAP):
            alias = self.ts_type(TypeRef(container=ntype.kind, element=ntype.items), ctx, imports)
            body.append(f"export type {name} = {alias};")
        elif ntype.is_union:
            union = " | ".join(self.ts_type(alt, ctx, imports) for alt in ntype.one_of)
            if ntype.fields:
                body.append(f"export type {name} = ({union}) & {{")
                body.extend(indent(self._properties(ntype, ctx, imports), 1, 2))
                body.append("};")
            else:
                body.append(f"export type {name} = {union};")
        else:
            body.append(f"export interface {name} {{")
            body.extend(indent(self._properties(ntype, ctx, imports), 1, 2))
            body.append("}")

        lines = [f"// {GENERATED_HEADER}", ""]
        lines.extend(self._imports_block(ntype.name, imports, ctx, "./"))
        lines.extend(body)
        return GeneratedFile(path=f"model/{ctx.module_name(ntype.name)}.ts", content=join_lines(lines))

    def _properties(self, ntype: NormalizedType, ctx: EmitContext, imports: Set[str]) -> List[str]:
        names = ctx.field_names(ntype)
        lines: List[str] = []
        for fld in ntype.fields:
            prop = names[fld.name]
            key = prop if _is_identifier(prop) else f"'{prop}'"
            ts = self.ts_type(fld.type, ctx, imports)
            lines.extend(self._doc(fld.description))
            if fld.required:
                lines.append(f"{key}: {ts};")
            elif ctx.wraps_optionals:
                lines.append(f"{key}?: {ts};")
            else:
                lines.append(f"{key}: {ts} | null;")
        return lines

    # -------------------------------------------------------------------------
    # API client
    # -------------------------------------------------------------------------

    def _render_base(self) -> GeneratedFile:
        return GeneratedFile(
            path="base.ts",
            content=render_template("typescript/base.ts.jinja2", header=GENERATED_HEADER),
        )

    def _render_api(
        self,
        tag: str,
        module: str,
        operations: List[OperationDefinition],
        ctx: EmitContext,
    ) -> GeneratedFile:
        class_name = ctx.api_name(tag)
        imports: Set[str] = set()
        methods: List[str] = []
        for op in operations:
            methods.extend(self._render_method(op, ctx, imports))
            methods.append("")
        if methods and methods[-1] == "":
            methods.pop()

        lines = [
            f"// {GENERATED_HEADER}",
            "",
            "import type { AxiosPromise, AxiosRequestConfig } from 'axios';",
            "import { BaseAPI } from '../base';",
        ]
        lines.extend(self._imports_block("", imports, ctx, "../model/"))
        if not imports:
            lines.append("")
        lines.append(f"export class {class_name} extends BaseAPI {{")
        lines.extend(indent(methods, 1, 2))
        lines.append("}")
        return GeneratedFile(path=f"api/{module}.ts", content=join_lines(lines))

    def _render_method(self, op: OperationDefinition, ctx: EmitContext, imports: Set[str]) -> List[str]:
        required_path = [p for p in op.parameters if p.location == "path"]
        required_other = [p for p in op.parameters if p.location != "path" and p.required]
        optional = [p for p in op.parameters if p.location != "path" and not p.required]

        args: List[str] = []
        taken = set()

        def arg_name(raw: str) -> str:
            name = self.escape_identifier(to_camel(raw))
            while name in taken:
                name = f"{name}_"
            taken.add(name)
            return name

        path_expr = op.path
        for param in required_path:
            name = arg_name(param.name)
            args.append(f"{name}: {self.ts_type(param.type, ctx, imports)}")
            path_expr = path_expr.replace(f"{{{param.name}}}", f"${{encodeURIComponent(String({name}))}}")

        body_arg = None
        if op.request is not None:
            body_arg = arg_name("body")
            args.append(f"{body_arg}: {self.ts_type(op.request, ctx, imports)}")

        query: List[Tuple[str, str]] = []
        headers: List[Tuple[str, str]] = []
        for param in required_other + optional:
            name = arg_name(param.name)
            marker = "" if param.required else "?"
            args.append(f"{name}{marker}: {self.ts_type(param.type, ctx, imports)}")
            (headers if param.location == "header" else query).append((param.name, name))
        args.append("options: AxiosRequestConfig = {}")

        response = self.ts_type(op.response, ctx, imports) if op.response is not None else "void"
        method = ctx.method_names(op.tag)[op.operation_id]

        lines = self._doc(op.summary)
        lines.append(f"public {method}({', '.join(args)}): AxiosPromise<{response}> {{")
        call = [
            "return this.axios.request({",
            f"  url: this.basePath + `{path_expr}`,",
            f"  method: '{op.method}',",
        ]
        if query:
            call.append("  params: { " + ", ".join(f"'{wire}': {name}" for wire, name in query) + " },")
        if headers:
            call.append(
                "  headers: { " + ", ".join(f"'{wire}': {name}" for wire, name in headers) + " },"
            )
        if body_arg:
            call.append(f"  data: {body_arg},")
        call.extend(["  ...options,", "});"])
        lines.extend(indent(call, 1, 2))
        lines.append("}")
        return lines

    # -------------------------------------------------------------------------
    # metadata
    # -------------------------------------------------------------------------

    def dependencies(self, ctx: EmitContext) -> List[Tuple[str, str]]:
        return [("axios", "^1.6.0")]


__all__ = ["TypeScriptEmitter"]
