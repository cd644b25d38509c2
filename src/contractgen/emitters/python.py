"""
Python emitter: pydantic v2 models.

Layout (under ``<package>/``):
- ``models/<type>.py``: one BaseModel, ``(str, Enum)`` or type alias per type
- ``models/__init__.py``: re-exports every model
- ``operations.py``: the operation table (method, path, parameters, bodies)
- ``__init__.py`` and ``py.typed``

Property names follow the naming convention; the wire name is kept with a
``Field(alias=...)`` whenever the two differ. ``oneOf`` types become a
``Union[...]`` alias; fields declared next to a ``oneOf`` cannot be carried
by an alias and are dropped with a warning.
"""

from __future__ import annotations

import keyword
import pprint
from typing import Dict, List, Set, Tuple

from contractgen.constants import (
    GENERATED_HEADER,
    KIND_ARRAY,
    KIND_ENUM,
    KIND_MAP,
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
    TARGET_PYTHON,
)
from contractgen.emitters.base import WARN_UNION_FIELDS, EmitContext, Emitter
from contractgen.schemas.contract import GeneratedFile, NormalizedType, TypeRef
from contractgen.utils.naming import to_snake
from contractgen.utils.text import first_line, indent, join_lines

# Keywords plus names the generated modules import or BaseModel defines
PY_RESERVED = frozenset(keyword.kwlist) | frozenset({
    "BaseModel", "ConfigDict", "Field", "Enum",
    "Any", "Dict", "List", "Optional", "Union",
    "UUID", "date", "datetime",
    "model_config", "model_fields", "model_computed_fields", "model_extra",
    "model_dump", "model_dump_json", "model_validate", "model_validate_json",
    "model_copy", "model_construct", "model_json_schema", "model_post_init",
    "model_fields_set", "model_rebuild", "model_parametrized_name",
    "copy", "dict", "json", "schema", "schema_json", "construct", "validate",
    "parse_obj", "parse_raw", "parse_file", "from_orm", "update_forward_refs",
})

# primitive -> (annotation, import line)
PRIMITIVE_TYPES = {
    PRIM_STRING: ("str", None),
    PRIM_INTEGER: ("int", None),
    PRIM_LONG: ("int", None),
    PRIM_NUMBER: ("float", None),
    PRIM_BOOLEAN: ("bool", None),
    PRIM_UUID: ("UUID", "from uuid import UUID"),
    PRIM_BINARY: ("bytes", None),
    PRIM_ANY: ("Any", "from typing import Any"),
    PRIM_DATE: ("date", "from datetime import date"),
    PRIM_DATETIME: ("datetime", "from datetime import datetime"),
}


PYDANTIC_IMPORT = "from pydantic import BaseModel, ConfigDict, Field"


class _Imports:
    """Collects import lines for one generated module."""

    def __init__(self):
        self.typing: Set[str] = set()
        self.lines: Set[str] = set()
        self.models: Set[str] = set()

    def add(self, line: str) -> None:
        if line.startswith("from typing import "):
            self.typing.add(line[len("from typing import "):])
        else:
            self.lines.add(line)

    def render(self, ctx: EmitContext, module_of) -> List[str]:
        stdlib = set(self.lines - {PYDANTIC_IMPORT})
        if self.typing:
            stdlib.add(f"from typing import {', '.join(sorted(self.typing))}")
        out: List[str] = sorted(stdlib)
        if PYDANTIC_IMPORT in self.lines:
            if out:
                out.append("")
            out.append(PYDANTIC_IMPORT)
        if self.models:
            if out:
                out.append("")
            for source in sorted(self.models, key=ctx.type_name):
                out.append(f"from .{module_of(source)} import {ctx.type_name(source)}")
        if out:
            out.append("")
            out.append("")
        return out


class PythonEmitter(Emitter):
    """pydantic v2 model package."""

    target = TARGET_PYTHON
    reserved_words = PY_RESERVED
    # Modules are imported by name, so keywords cannot be file stems
    fixed_modules = frozenset(keyword.kwlist)

    def package_dir(self, ctx: EmitContext) -> str:
        return ctx.config.package_name.replace("-", "_").replace(".", "/")

    def module_stem(self, ctx: EmitContext, name: str) -> str:
        return to_snake(ctx.type_name(name))

    # -------------------------------------------------------------------------
    # type mapping
    # -------------------------------------------------------------------------

    def py_type(self, ref: TypeRef, ctx: EmitContext, imports: _Imports) -> str:
        if ref.is_container:
            inner = self.py_type(ref.element, ctx, imports)
            if ref.container == KIND_ARRAY:
                imports.add("from typing import List")
                return f"List[{inner}]"
            imports.add("from typing import Dict")
            return f"Dict[str, {inner}]"
        if ref.is_primitive:
            primitive = self.date_fallback(ctx, ref.name) or ref.name
            annotation, line = PRIMITIVE_TYPES[primitive]
            if line:
                imports.add(line)
            return annotation
        imports.models.add(ref.name)
        return ctx.type_name(ref.name)

    # -------------------------------------------------------------------------
    # render
    # -------------------------------------------------------------------------

    def render(self, ctx: EmitContext) -> List[GeneratedFile]:
        root = self.package_dir(ctx)
        files: List[GeneratedFile] = []
        exported: List[Tuple[str, str]] = []
        for ntype in ctx.ir.ordered_types():
            ctx.check()
            module = ctx.module_name(ntype.name)
            files.append(GeneratedFile(
                path=f"{root}/models/{module}.py",
                content=self._render_model(ntype, ctx),
            ))
            exported.append((module, ctx.type_name(ntype.name)))

        init_lines = [f"# {GENERATED_HEADER}"]
        init_lines.extend(f"from .{module} import {name}" for module, name in exported)
        init_lines.append("")
        init_lines.append("__all__ = [")
        init_lines.extend(indent([f'"{name}",' for _, name in sorted(exported, key=lambda e: e[1])], 1))
        init_lines.append("]")
        files.append(GeneratedFile(path=f"{root}/models/__init__.py", content=join_lines(init_lines)))

        files.append(GeneratedFile(path=f"{root}/operations.py", content=self._render_operations(ctx)))
        files.append(GeneratedFile(
            path=f"{root}/__init__.py",
            content=join_lines([
                f'"""{first_line(ctx.ir.title) or "Generated models"}."""',
                f"# {GENERATED_HEADER}",
                "",
                "from .models import *  # noqa: F401,F403",
                "from .operations import OPERATIONS  # noqa: F401",
                "",
                f'__version__ = "{ctx.config.version}"',
            ]),
        ))
        files.append(GeneratedFile(path=f"{root}/py.typed", content=""))
        return files

    def _render_model(self, ntype: NormalizedType, ctx: EmitContext) -> str:
        name = ctx.type_name(ntype.name)
        imports = _Imports()
        body: List[str] = []

        if ntype.kind == KIND_ENUM:
            imports.add("from enum import Enum")
            members = ctx.enum_members(ntype)
            body.append(f"class {name}(str, Enum):")
            body.extend(self._docstring(ntype.description))
            body.extend(indent([f"{members[v]} = {v!r}" for v in ntype.values], 1))
        elif ntype.kind == KIND_PRIMITIVE:
            body.append(f"{name} = {self.py_type(TypeRef.named(ntype.primitive), ctx, imports)}")
        elif ntype.kind in (KIND_ARRAY, KIND_MAP):
            alias = self.py_type(TypeRef(container=ntype.kind, element=ntype.items), ctx, imports)
            body.append(f"{name} = {alias}")
        elif ntype.is_union:
            if ntype.fields:
                ctx.warn(
                    ntype.name,
                    WARN_UNION_FIELDS,
                    "fields declared alongside oneOf cannot be carried by a Union alias; dropped",
                )
            imports.add("from typing import Union")
            alternatives = ", ".join(self.py_type(alt, ctx, imports) for alt in ntype.one_of)
            body.append(f"{name} = Union[{alternatives}]")
        else:
            imports.add(PYDANTIC_IMPORT)
            body.append(f"class {name}(BaseModel):")
            body.extend(self._docstring(ntype.description))
            body.extend(indent(["model_config = ConfigDict(populate_by_name=True)", ""], 1))
            body.extend(indent(self._fields(ntype, ctx, imports), 1))

        lines = [f"# {GENERATED_HEADER}", "from __future__ import annotations", ""]
        lines.extend(imports.render(ctx, ctx.module_name))
        lines.extend(body)
        return join_lines(lines)

    @staticmethod
    def _docstring(description: str) -> List[str]:
        summary = first_line(description or "")
        if not summary:
            return []
        return indent([f'"""{summary}"""', ""], 1)

    def _fields(self, ntype: NormalizedType, ctx: EmitContext, imports: _Imports) -> List[str]:
        names = ctx.field_names(ntype)
        lines: List[str] = []
        for fld in ntype.fields:
            prop = names[fld.name]
            annotation = self.py_type(fld.type, ctx, imports)
            aliased = prop != fld.name
            if fld.required:
                default = f" = Field(alias={fld.name!r})" if aliased else ""
            else:
                if ctx.wraps_optionals:
                    imports.add("from typing import Optional")
                    annotation = f"Optional[{annotation}]"
                else:
                    imports.add("from typing import Union")
                    annotation = f"Union[{annotation}, None]"
                default = f" = Field(default=None, alias={fld.name!r})" if aliased else " = None"
            lines.append(f"{prop}: {annotation}{default}")
        if not lines:
            lines.append("pass")
        return lines

    # -------------------------------------------------------------------------
    # operation table
    # -------------------------------------------------------------------------

    def _render_operations(self, ctx: EmitContext) -> str:
        table: Dict[str, Dict[str, object]] = {}
        for op in ctx.ir.operations:
            scratch = _Imports()
            table[op.operation_id] = {
                "method": op.method,
                "path": op.path,
                "tag": op.tag,
                "parameters": [
                    {
                        "name": p.name,
                        "in": p.location,
                        "required": p.required,
                        "type": self.py_type(p.type, ctx, scratch),
                    }
                    for p in op.parameters
                ],
                "request": self.py_type(op.request, ctx, scratch) if op.request is not None else None,
                "response": self.py_type(op.response, ctx, scratch) if op.response is not None else None,
            }
        lines = [
            f'"""Operation table for {first_line(ctx.ir.title) or "the contract"}."""',
            f"# {GENERATED_HEADER}",
            "",
            f"OPERATIONS = {pprint.pformat(table, sort_dicts=True, width=88)}",
        ]
        return join_lines(lines)

    # -------------------------------------------------------------------------
    # metadata
    # -------------------------------------------------------------------------

    def dependencies(self, ctx: EmitContext) -> List[Tuple[str, str]]:
        return [("pydantic", ">=2.0")]


__all__ = ["PythonEmitter"]
