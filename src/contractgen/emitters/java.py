"""
Java emitter: Spring-style DTOs and interface-only API declarations.

Layout (under ``src/main/java``):
- ``<modelPackage>/<Type>.java``: one DTO class per object type, one enum per
  enum type. Jackson annotations carry wire names; jakarta validation marks
  required fields.
- ``<apiPackage>/<Tag>Api.java``: one Spring MVC interface per operation tag.

Java has no type aliases, so primitive/array/map declarations are inlined at
every use. Unions have no Java equivalent and fall back to ``Object``.
"""

from __future__ import annotations

import json
from typing import List, Set, Tuple

from contractgen.constants import (
    KIND_ARRAY,
    KIND_ENUM,
    KIND_MAP,
    KIND_OBJECT,
    KIND_PRIMITIVE,
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
    TARGET_JAVA,
    GENERATED_HEADER,
)
from contractgen.emitters.base import WARN_UNSUPPORTED_UNION, EmitContext, Emitter
from contractgen.schemas.contract import (
    GeneratedFile,
    NormalizedType,
    OperationDefinition,
    TypeRef,
)
from contractgen.utils.naming import to_camel, to_pascal
from contractgen.utils.text import first_line, indent, join_lines

JAVA_RESERVED = frozenset({
    "abstract", "assert", "boolean", "break", "byte", "case", "catch", "char",
    "class", "const", "continue", "default", "do", "double", "else", "enum",
    "extends", "final", "finally", "float", "for", "goto", "if", "implements",
    "import", "instanceof", "int", "interface", "long", "native", "new",
    "package", "private", "protected", "public", "return", "short", "static",
    "strictfp", "super", "switch", "synchronized", "this", "throw", "throws",
    "transient", "try", "void", "volatile", "while", "true", "false", "null",
    "var", "record", "yield",
})

# Simple names the generated sources import or use from java.lang
JAVA_IMPORTED = frozenset({
    "Object", "String", "Integer", "Long", "Double", "Boolean", "Void",
    "Override", "IllegalArgumentException",
    "List", "Map", "Optional", "Objects", "UUID", "LocalDate", "OffsetDateTime",
    "JsonInclude", "JsonProperty", "JsonCreator", "JsonValue",
    "NotNull", "Nullable", "Valid", "ResponseEntity",
    "GetMapping", "PostMapping", "PutMapping", "PatchMapping", "DeleteMapping",
    "RequestMapping", "RequestMethod", "PathVariable", "RequestHeader",
    "RequestParam", "RequestBody",
})

PRIMITIVE_TYPES = {
    PRIM_STRING: ("String", None),
    PRIM_INTEGER: ("Integer", None),
    PRIM_LONG: ("Long", None),
    PRIM_NUMBER: ("Double", None),
    PRIM_BOOLEAN: ("Boolean", None),
    PRIM_UUID: ("UUID", "java.util.UUID"),
    PRIM_BINARY: ("byte[]", None),
    PRIM_ANY: ("Object", None),
    PRIM_DATE: ("LocalDate", "java.time.LocalDate"),
    PRIM_DATETIME: ("OffsetDateTime", "java.time.OffsetDateTime"),
}

MAPPING_ANNOTATIONS = {
    "GET": "GetMapping",
    "POST": "PostMapping",
    "PUT": "PutMapping",
    "PATCH": "PatchMapping",
    "DELETE": "DeleteMapping",
}

JACKSON_VERSION = "2.16.0"

# Accessor suffixes that would clash with java.lang.Object methods
OBJECT_ACCESSORS = frozenset({"Class"})


class JavaEmitter(Emitter):
    """Spring Boot 3 / Jackson / jakarta DTOs."""

    target = TARGET_JAVA
    reserved_words = JAVA_RESERVED | JAVA_IMPORTED

    # -------------------------------------------------------------------------
    # packages
    # -------------------------------------------------------------------------

    def model_package(self, ctx: EmitContext) -> str:
        return ctx.config.option("modelPackage", f"{ctx.config.package_name}.model")

    def api_package(self, ctx: EmitContext) -> str:
        return ctx.config.option("apiPackage", f"{ctx.config.package_name}.api")

    @staticmethod
    def _source_path(package: str, class_name: str) -> str:
        return "src/main/java/" + package.replace(".", "/") + f"/{class_name}.java"

    # -------------------------------------------------------------------------
    # type mapping
    # -------------------------------------------------------------------------

    def java_type(self, ref: TypeRef, ctx: EmitContext, imports: Set[str]) -> str:
        if ref.is_container:
            inner = self.java_type(ref.element, ctx, imports)
            if ref.container == KIND_ARRAY:
                imports.add("java.util.List")
                return f"List<{inner}>"
            imports.add("java.util.Map")
            return f"Map<String, {inner}>"
        if ref.is_primitive:
            return self._primitive(ref.name, ctx, imports)

        ntype = ctx.resolve(ref)
        if ntype.kind == KIND_PRIMITIVE:
            return self._primitive(ntype.primitive, ctx, imports)
        if ntype.kind in (KIND_ARRAY, KIND_MAP):
            container = TypeRef(container=ntype.kind, element=ntype.items)
            return self.java_type(container, ctx, imports)
        if ntype.is_union:
            ctx.warn(ntype.name, WARN_UNSUPPORTED_UNION, "Java has no union types; represented as Object")
            return "Object"
        name = ctx.type_name(ntype.name)
        imports.add(f"{self.model_package(ctx)}.{name}")
        return name

    def _primitive(self, primitive: str, ctx: EmitContext, imports: Set[str]) -> str:
        primitive = self.date_fallback(ctx, primitive) or primitive
        java, imp = PRIMITIVE_TYPES[primitive]
        if imp:
            imports.add(imp)
        return java

    def _is_model(self, ref: TypeRef, ctx: EmitContext) -> bool:
        ntype = ctx.resolve(ref)
        return ntype is not None and ntype.kind == KIND_OBJECT and not ntype.is_union

    # -------------------------------------------------------------------------
    # render
    # -------------------------------------------------------------------------

    def render(self, ctx: EmitContext) -> List[GeneratedFile]:
        files: List[GeneratedFile] = []
        for ntype in ctx.ir.ordered_types():
            ctx.check()
            if ntype.kind == KIND_ENUM:
                files.append(self._render_enum(ntype, ctx))
            elif ntype.kind == KIND_OBJECT:
                if ntype.is_union:
                    ctx.warn(ntype.name, WARN_UNSUPPORTED_UNION, "Java has no union types; represented as Object")
                    continue
                files.append(self._render_class(ntype, ctx))
        for tag in ctx.ir.tags():
            ctx.check()
            files.append(self._render_api(tag, ctx.ir.operations_for_tag(tag), ctx))
        return files

    def _file(self, package: str, class_name: str, imports: Set[str], body: List[str]) -> GeneratedFile:
        own = {i for i in imports if i.rsplit(".", 1)[0] == package}
        lines = [f"// {GENERATED_HEADER}", f"package {package};", ""]
        external = sorted(imports - own)
        if external:
            lines.extend(f"import {imp};" for imp in external)
            lines.append("")
        lines.extend(body)
        return GeneratedFile(path=self._source_path(package, class_name), content=join_lines(lines))

    def _javadoc(self, text: str, level: int = 0) -> List[str]:
        summary = first_line(text or "")
        if not summary:
            return []
        return indent(["/**", f" * {summary}", " */"], level)

    def _render_class(self, ntype: NormalizedType, ctx: EmitContext) -> GeneratedFile:
        package = self.model_package(ctx)
        class_name = ctx.type_name(ntype.name)
        names = ctx.field_names(ntype)
        imports: Set[str] = {
            "com.fasterxml.jackson.annotation.JsonInclude",
            "com.fasterxml.jackson.annotation.JsonProperty",
        }
        if ntype.fields:
            imports.add("java.util.Objects")

        members: List[Tuple[str, str, str, bool]] = []
        declarations: List[str] = []
        for fld in ntype.fields:
            prop = names[fld.name]
            base = self.java_type(fld.type, ctx, imports)
            annotations = [f'@JsonProperty("{fld.name}")']
            if fld.required:
                imports.add("jakarta.validation.constraints.NotNull")
                annotations.append("@NotNull")
                declared = base
                initializer = ""
            elif ctx.wraps_optionals:
                imports.add("java.util.Optional")
                declared = f"Optional<{base}>"
                initializer = " = Optional.empty()"
            else:
                imports.add("jakarta.annotation.Nullable")
                annotations.append("@Nullable")
                declared = base
                initializer = ""
            if self._is_model(fld.type, ctx) or fld.type.is_container:
                imports.add("jakarta.validation.Valid")
                annotations.append("@Valid")
            declarations.extend(self._javadoc(fld.description, 1))
            declarations.extend(indent(annotations, 1))
            declarations.extend(indent([f"private {declared} {prop}{initializer};", ""], 1))
            members.append((prop, declared, fld.name, fld.required))

        body = self._javadoc(ntype.description)
        body.append("@JsonInclude(JsonInclude.Include.NON_NULL)")
        body.append(f"public class {class_name} {{")
        body.append("")
        body.extend(declarations)
        body.extend(indent([f"public {class_name}() {{", "}", ""], 1))

        for prop, declared, _, _ in members:
            accessor = to_pascal(prop) if prop[:1].islower() else prop
            if accessor in OBJECT_ACCESSORS:
                accessor = f"{accessor}_"
            body.extend(indent([
                f"public {declared} get{accessor}() {{",
                f"    return {prop};",
                "}",
                "",
                f"public void set{accessor}({declared} {prop}) {{",
                f"    this.{prop} = {prop};",
                "}",
                "",
            ], 1))

        if members:
            comparisons = " &&\n            ".join(
                f"Objects.equals(this.{prop}, other.{prop})" for prop, _, _, _ in members
            )
            hashed = ", ".join(prop for prop, _, _, _ in members)
            body.extend(indent([
                "@Override",
                "public boolean equals(Object o) {",
                "    if (this == o) {",
                "        return true;",
                "    }",
                "    if (o == null || getClass() != o.getClass()) {",
                "        return false;",
                "    }",
                f"    {class_name} other = ({class_name}) o;",
                f"    return {comparisons};",
                "}",
                "",
                "@Override",
                "public int hashCode() {",
                f"    return Objects.hash({hashed});",
                "}",
            ], 1))
        body.append("}")
        return self._file(package, class_name, imports, body)

    def _render_enum(self, ntype: NormalizedType, ctx: EmitContext) -> GeneratedFile:
        package = self.model_package(ctx)
        enum_name = ctx.type_name(ntype.name)
        members = ctx.enum_members(ntype)
        imports = {
            "com.fasterxml.jackson.annotation.JsonCreator",
            "com.fasterxml.jackson.annotation.JsonValue",
        }
        constants = [f"{members[value]}({json.dumps(value)})" for value in ntype.values]
        body = self._javadoc(ntype.description)
        body.append(f"public enum {enum_name} {{")
        body.append("")
        body.extend(indent([c + "," for c in constants[:-1]] + [constants[-1] + ";", ""], 1))
        body.extend(indent([
            "private final String value;",
            "",
            f"{enum_name}(String value) {{",
            "    this.value = value;",
            "}",
            "",
            "@JsonValue",
            "public String getValue() {",
            "    return value;",
            "}",
            "",
            "@Override",
            "public String toString() {",
            "    return String.valueOf(value);",
            "}",
            "",
            "@JsonCreator",
            f"public static {enum_name} fromValue(String value) {{",
            f"    for ({enum_name} b : {enum_name}.values()) {{",
            "        if (b.value.equals(value)) {",
            "            return b;",
            "        }",
            "    }",
            "    throw new IllegalArgumentException(\"Unexpected value '\" + value + \"'\");",
            "}",
        ], 1))
        body.append("}")
        return self._file(package, enum_name, imports, body)

    # -------------------------------------------------------------------------
    # API interfaces
    # -------------------------------------------------------------------------

    def _render_api(self, tag: str, operations: List[OperationDefinition], ctx: EmitContext) -> GeneratedFile:
        package = self.api_package(ctx)
        interface = ctx.api_name(tag)
        imports: Set[str] = {"org.springframework.http.ResponseEntity"}
        body = [f"public interface {interface} {{", ""]
        for op in operations:
            body.extend(indent(self._render_method(op, ctx, imports), 1))
            body.append("")
        if body[-1] == "":
            body.pop()
        body.append("}")
        return self._file(package, interface, imports, body)

    def _render_method(self, op: OperationDefinition, ctx: EmitContext, imports: Set[str]) -> List[str]:
        lines = []
        if op.summary:
            lines.extend(self._javadoc(op.summary))
        annotation = MAPPING_ANNOTATIONS.get(op.method)
        if annotation:
            imports.add(f"org.springframework.web.bind.annotation.{annotation}")
            lines.append(f'@{annotation}("{op.path}")')
        else:
            imports.add("org.springframework.web.bind.annotation.RequestMapping")
            imports.add("org.springframework.web.bind.annotation.RequestMethod")
            lines.append(f'@RequestMapping(method = RequestMethod.{op.method}, value = "{op.path}")')

        params: List[str] = []
        taken = set()
        for param in op.parameters:
            java = self.java_type(param.type, ctx, imports)
            name = self.escape_identifier(to_camel(param.name))
            while name in taken:
                name = f"{name}_"
            taken.add(name)
            if param.location == "path":
                imports.add("org.springframework.web.bind.annotation.PathVariable")
                params.append(f'@PathVariable("{param.name}") {java} {name}')
            elif param.location == "header":
                imports.add("org.springframework.web.bind.annotation.RequestHeader")
                params.append(f'@RequestHeader(value = "{param.name}", required = {str(param.required).lower()}) {java} {name}')
            else:
                imports.add("org.springframework.web.bind.annotation.RequestParam")
                params.append(f'@RequestParam(value = "{param.name}", required = {str(param.required).lower()}) {java} {name}')
        if op.request is not None:
            imports.add("org.springframework.web.bind.annotation.RequestBody")
            imports.add("jakarta.validation.Valid")
            body_name = "body" if "body" not in taken else "requestBody"
            params.append(f"@Valid @RequestBody {self.java_type(op.request, ctx, imports)} {body_name}")

        response = self.java_type(op.response, ctx, imports) if op.response is not None else "Void"
        method = ctx.method_names(op.tag)[op.operation_id]
        lines.append(f"ResponseEntity<{response}> {method}({', '.join(params)});")
        return lines

    # -------------------------------------------------------------------------
    # metadata
    # -------------------------------------------------------------------------

    def dependencies(self, ctx: EmitContext) -> List[Tuple[str, str]]:
        deps = [
            ("com.fasterxml.jackson.core:jackson-databind", JACKSON_VERSION),
            ("com.fasterxml.jackson.datatype:jackson-datatype-jsr310", JACKSON_VERSION),
            ("jakarta.annotation:jakarta.annotation-api", "2.1.1"),
            ("jakarta.validation:jakarta.validation-api", "3.0.2"),
        ]
        if ctx.wraps_optionals:
            deps.append(("com.fasterxml.jackson.datatype:jackson-datatype-jdk8", JACKSON_VERSION))
        if ctx.ir.operations:
            deps.append(("org.springframework:spring-web", "6.1.3"))
        return sorted(deps)


__all__ = ["JavaEmitter"]
