"""
Contract document loader.

Reads a YAML (or JSON) contract document and builds a ContractDocument. The
loader is a pure read: it checks syntax and structure, never references
between types (that is the normalizer's job).

Document layout::

    info:
      title: meals
      version: 1.1.0
    types:
      Meal:
        fields:
          name: {type: string, required: true}
          calories: integer
          tags: {type: array, items: string}
      MealType:
        values: [BREAKFAST, LUNCH, DINNER]
    operations:
      createMeal:
        method: POST
        path: /meals
        request: Meal
        response: Meal

Failure modes:
- ParseError: unreadable file, malformed YAML/JSON, duplicate mapping keys
- SchemaError: missing ``types`` / ``operations`` sections, or an entry that
  does not describe a valid type, field, parameter or operation
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml
from yaml.constructor import ConstructorError

from contractgen.constants import (
    DEFAULT_TAG,
    HTTP_METHODS,
    KIND_ARRAY,
    KIND_ENUM,
    KIND_MAP,
    KIND_OBJECT,
    KIND_PRIMITIVE,
    PARAMETER_LOCATIONS,
    PRIMITIVE_ALIASES,
    PRIMITIVES,
    TYPE_KINDS,
)
from contractgen.errors import ParseError, SchemaError
from contractgen.schemas.contract import (
    ContractDocument,
    FieldDefinition,
    OperationDefinition,
    ParameterDefinition,
    TypeDefinition,
    TypeRef,
)

logger = logging.getLogger(__name__)

REQUIRED_SECTIONS = ("types", "operations")
PATH_PARAM_RX = re.compile(r"\{([^{}]+)\}")
REF_PREFIXES = ("#/components/schemas/", "#/definitions/", "#/types/")


# =============================================================================
# YAML
# =============================================================================

class _UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that rejects duplicate keys instead of keeping the last one."""

    def construct_mapping(self, node, deep=False):
        if isinstance(node, yaml.MappingNode):
            self.flatten_mapping(node)
            seen = set()
            for key_node, _ in node.value:
                key = self.construct_object(key_node, deep=deep)
                try:
                    duplicate = key in seen
                except TypeError:
                    continue
                if duplicate:
                    raise ConstructorError(
                        "while constructing a mapping",
                        node.start_mark,
                        f"found duplicate key {key!r}",
                        key_node.start_mark,
                    )
                seen.add(key)
        return super().construct_mapping(node, deep=deep)


def _parse_text(text: str, source: str) -> object:
    try:
        return yaml.load(text, Loader=_UniqueKeyLoader)
    except yaml.MarkedYAMLError as e:
        mark = e.problem_mark or e.context_mark
        location = f"{source}:{mark.line + 1}:{mark.column + 1}" if mark else source
        message = e.problem or str(e)
        raise ParseError(location, message) from e
    except yaml.YAMLError as e:
        raise ParseError(source, str(e)) from e


# =============================================================================
# PUBLIC API
# =============================================================================

def load(path) -> ContractDocument:
    """
    Load a contract document from disk.

    Args:
        path: Path to a YAML or JSON contract.

    Returns:
        ContractDocument.

    Raises:
        ParseError: File missing/unreadable or malformed syntax.
        SchemaError: Required sections missing or invalid entries.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ParseError(str(path), "contract file not found") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(str(path), f"cannot read contract file: {e}") from e

    document = loads(text, source=str(path), default_title=path.stem)
    logger.info(
        f"Loaded contract {document.title!r} from {path}: "
        f"{len(document.types)} types, {len(document.operations)} operations"
    )
    return ContractDocument(
        title=document.title,
        version=document.version,
        types=document.types,
        operations=document.operations,
        source_path=path,
    )


def loads(text: str, source: str = "<string>", default_title: str = "contract") -> ContractDocument:
    """Load a contract document from text."""
    data = _parse_text(text, source)
    return parse_document(data, source=source, default_title=default_title)


def parse_document(data: object, source: str = "<string>", default_title: str = "contract") -> ContractDocument:
    """Build a ContractDocument from already-parsed YAML/JSON data."""
    if not isinstance(data, dict):
        raise SchemaError(source, "contract document must be a mapping with 'types' and 'operations'")

    missing = [section for section in REQUIRED_SECTIONS if section not in data]
    if missing:
        raise SchemaError(source, f"missing required section(s): {', '.join(missing)}")

    title, version = _parse_info(data.get("info"))
    raw_types = _as_mapping(data.get("types"), "types")
    raw_ops = _as_mapping(data.get("operations"), "operations")

    types: Dict[str, TypeDefinition] = {}
    for name, raw in raw_types.items():
        type_name = _name(name, "types")
        types[type_name] = _parse_type(type_name, raw, f"types.{type_name}")

    operations: Dict[Tuple[str, str], OperationDefinition] = {}
    for op_id, raw in raw_ops.items():
        op_name = _name(op_id, "operations")
        op = _parse_operation(op_name, raw, f"operations.{op_name}")
        if op.key in operations:
            other = operations[op.key].operation_id
            raise SchemaError(
                op.location,
                f"{op.method} {op.path} is already declared by operation {other!r}",
            )
        operations[op.key] = op

    return ContractDocument(
        title=title or default_title,
        version=version,
        types=types,
        operations=operations,
    )


# =============================================================================
# SECTIONS
# =============================================================================

def _as_mapping(value: object, location: str) -> Dict[object, object]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise SchemaError(location, "must be a mapping")
    return value


def _name(value: object, location: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise SchemaError(location, f"names must be non-empty strings, got {value!r}")
    return value.strip()


def _parse_info(raw: object) -> Tuple[Optional[str], Optional[str]]:
    info = _as_mapping(raw, "info")
    title = info.get("title")
    version = info.get("version")
    return (
        str(title) if title is not None else None,
        str(version) if version is not None else None,
    )


# =============================================================================
# TYPE REFERENCES
# =============================================================================

def _ref_name(raw: str) -> str:
    text = raw.strip()
    for prefix in REF_PREFIXES:
        if text.startswith(prefix):
            return text[len(prefix):]
    # Case-sensitive: "Timestamp" is a declared type, "timestamp" a primitive
    if text in PRIMITIVE_ALIASES:
        return PRIMITIVE_ALIASES[text]
    return text


def _parse_type_ref(raw: object, location: str) -> TypeRef:
    """Parse ``"Meal"``, ``{type: array, items: ...}``, ``{$ref: ...}`` forms."""
    if isinstance(raw, str) and raw.strip():
        return TypeRef.named(_ref_name(raw))
    if not isinstance(raw, dict):
        raise SchemaError(location, f"expected a type name or mapping, got {raw!r}")

    if "$ref" in raw:
        return TypeRef.named(_ref_name(str(raw["$ref"])))

    kind = raw.get("type")
    if not isinstance(kind, str) or not kind.strip():
        raise SchemaError(location, "missing 'type'")
    kind = kind.strip()

    if kind == KIND_ARRAY:
        if raw.get("items") is None:
            raise SchemaError(location, "array type requires 'items'")
        return TypeRef.array_of(_parse_type_ref(raw["items"], f"{location}.items"))
    if kind == KIND_MAP:
        values = raw.get("values", raw.get("additionalProperties"))
        if values is None:
            raise SchemaError(location, "map type requires 'values'")
        return TypeRef.map_of(_parse_type_ref(values, f"{location}.values"))
    return TypeRef.named(_ref_name(kind))


# =============================================================================
# TYPES
# =============================================================================

def _infer_kind(raw: Dict[object, object]) -> str:
    if "kind" in raw:
        return str(raw["kind"]).strip()
    if "values" in raw and "fields" not in raw and raw.get("type") != KIND_MAP:
        return KIND_ENUM
    if raw.get("type") == KIND_MAP:
        return KIND_MAP
    if "items" in raw or raw.get("type") == KIND_ARRAY:
        return KIND_ARRAY
    if isinstance(raw.get("type"), str) and _ref_name(raw["type"]) in PRIMITIVES:
        return KIND_PRIMITIVE
    return KIND_OBJECT


def _parse_type(name: str, raw: object, location: str) -> TypeDefinition:
    if isinstance(raw, str):
        # Shorthand alias: "MealId: uuid"
        primitive = _ref_name(raw)
        if primitive not in PRIMITIVES:
            raise SchemaError(location, f"shorthand type must be a primitive, got {raw!r}")
        return TypeDefinition(name=name, kind=KIND_PRIMITIVE, primitive=primitive, location=location)
    if not isinstance(raw, dict):
        raise SchemaError(location, "type definition must be a mapping")

    kind = _infer_kind(raw)
    if kind not in TYPE_KINDS:
        raise SchemaError(location, f"unknown kind {kind!r}; expected one of {', '.join(sorted(TYPE_KINDS))}")
    description = str(raw["description"]) if raw.get("description") is not None else None

    if kind == KIND_ENUM:
        values = raw.get("values")
        if not isinstance(values, list) or not values:
            raise SchemaError(location, "enum requires a non-empty 'values' list")
        members = [str(v) for v in values]
        dupes = sorted({m for m in members if members.count(m) > 1})
        if dupes:
            raise SchemaError(location, f"duplicate enum values: {', '.join(dupes)}")
        return TypeDefinition(
            name=name, kind=kind, values=tuple(members), description=description, location=location,
        )

    if kind == KIND_ARRAY:
        if raw.get("items") is None:
            raise SchemaError(location, "array type requires 'items'")
        return TypeDefinition(
            name=name, kind=kind, items=_parse_type_ref(raw["items"], f"{location}.items"),
            description=description, location=location,
        )

    if kind == KIND_MAP:
        values = raw.get("values", raw.get("additionalProperties"))
        if values is None:
            raise SchemaError(location, "map type requires 'values'")
        return TypeDefinition(
            name=name, kind=kind, items=_parse_type_ref(values, f"{location}.values"),
            description=description, location=location,
        )

    if kind == KIND_PRIMITIVE:
        primitive = _ref_name(str(raw.get("type", "")))
        if primitive not in PRIMITIVES:
            raise SchemaError(location, f"primitive type requires a primitive 'type', got {raw.get('type')!r}")
        return TypeDefinition(
            name=name, kind=kind, primitive=primitive, description=description, location=location,
        )

    return _parse_object(name, raw, location, description)


def _parse_object(name: str, raw: Dict[object, object], location: str, description: Optional[str]) -> TypeDefinition:
    raw_fields = _as_mapping(raw.get("fields", raw.get("properties")), f"{location}.fields")

    required_list = raw.get("required") or []
    if not isinstance(required_list, list):
        raise SchemaError(f"{location}.required", "type-level 'required' must be a list of field names")
    required_names = {str(r) for r in required_list}
    unknown = sorted(required_names - {str(k) for k in raw_fields})
    if unknown:
        raise SchemaError(f"{location}.required", f"unknown field(s): {', '.join(unknown)}")

    fields: List[FieldDefinition] = []
    for field_name, spec in raw_fields.items():
        fname = _name(field_name, f"{location}.fields")
        floc = f"{location}.fields.{fname}"
        fields.append(_parse_field(fname, spec, floc, fname in required_names))

    parent = raw.get("extends")
    if parent is not None:
        parent = _ref_name(_name(parent, f"{location}.extends"))

    compose_raw = raw.get("allOf") or []
    if not isinstance(compose_raw, list):
        raise SchemaError(f"{location}.allOf", "must be a list of type names")
    compose = tuple(
        _ref_name(_name(c if not isinstance(c, dict) else c.get("$ref"), f"{location}.allOf"))
        for c in compose_raw
    )

    one_of_raw = raw.get("oneOf") or []
    if not isinstance(one_of_raw, list):
        raise SchemaError(f"{location}.oneOf", "must be a list of type references")
    one_of = tuple(
        _parse_type_ref(alt, f"{location}.oneOf[{idx}]") for idx, alt in enumerate(one_of_raw)
    )

    return TypeDefinition(
        name=name,
        kind=KIND_OBJECT,
        fields=tuple(fields),
        parent=parent,
        compose=compose,
        one_of=one_of,
        description=description,
        location=location,
    )


def _parse_field(name: str, spec: object, location: str, listed_required: bool) -> FieldDefinition:
    if isinstance(spec, str):
        return FieldDefinition(
            name=name, type=_parse_type_ref(spec, location), required=listed_required, location=location,
        )
    if not isinstance(spec, dict):
        raise SchemaError(location, f"field must be a type name or mapping, got {spec!r}")
    required = spec.get("required", False)
    if not isinstance(required, bool):
        raise SchemaError(f"{location}.required", f"must be true or false, got {required!r}")
    description = spec.get("description")
    return FieldDefinition(
        name=name,
        type=_parse_type_ref(spec, location),
        required=required or listed_required,
        description=str(description) if description is not None else None,
        location=location,
    )


# =============================================================================
# OPERATIONS
# =============================================================================

def _default_tag(path: str) -> str:
    for segment in path.strip("/").split("/"):
        if segment and not segment.startswith("{"):
            return segment
    return DEFAULT_TAG


def _parse_operation(op_id: str, raw: object, location: str) -> OperationDefinition:
    if not isinstance(raw, dict):
        raise SchemaError(location, "operation must be a mapping")

    method = str(raw.get("method", "")).strip().upper()
    if method not in HTTP_METHODS:
        raise SchemaError(f"{location}.method", f"expected one of {', '.join(HTTP_METHODS)}, got {raw.get('method')!r}")
    path = raw.get("path")
    if not isinstance(path, str) or not path.startswith("/"):
        raise SchemaError(f"{location}.path", f"path must start with '/', got {path!r}")

    parameters = _parse_parameters(raw.get("parameters"), f"{location}.parameters")
    declared_path = {p.name for p in parameters if p.location == "path"}
    templated = PATH_PARAM_RX.findall(path)
    undeclared = [p for p in templated if p not in declared_path]
    if undeclared:
        raise SchemaError(f"{location}.parameters", f"path parameter(s) not declared: {', '.join(undeclared)}")
    unused = sorted(declared_path - set(templated))
    if unused:
        raise SchemaError(f"{location}.parameters", f"path parameter(s) not in path template: {', '.join(unused)}")

    request = raw.get("request")
    response = raw.get("response")
    tag = raw.get("tag")
    summary = raw.get("summary")
    return OperationDefinition(
        operation_id=op_id,
        method=method,
        path=path,
        tag=str(tag).strip() if tag else _default_tag(path),
        parameters=parameters,
        request=_parse_type_ref(request, f"{location}.request") if request is not None else None,
        response=_parse_type_ref(response, f"{location}.response") if response is not None else None,
        summary=str(summary) if summary is not None else None,
        location=location,
    )


def _parse_parameters(raw: object, location: str) -> Tuple[ParameterDefinition, ...]:
    if raw is None:
        return ()
    if isinstance(raw, dict):
        entries = [dict(spec or {}, name=name) if isinstance(spec, dict) else {"name": name, "type": spec}
                   for name, spec in raw.items()]
    elif isinstance(raw, list):
        entries = raw
    else:
        raise SchemaError(location, "parameters must be a list or mapping")

    params: List[ParameterDefinition] = []
    seen = set()
    for idx, entry in enumerate(entries):
        ploc = f"{location}[{idx}]"
        if not isinstance(entry, dict):
            raise SchemaError(ploc, "parameter must be a mapping")
        name = _name(entry.get("name"), ploc)
        where = str(entry.get("in", "query")).strip().lower()
        if where not in PARAMETER_LOCATIONS:
            raise SchemaError(ploc, f"'in' must be one of {', '.join(PARAMETER_LOCATIONS)}, got {where!r}")
        if (name, where) in seen:
            raise SchemaError(ploc, f"duplicate {where} parameter {name!r}")
        seen.add((name, where))
        type_spec = entry if "type" in entry or "$ref" in entry else "string"
        required = bool(entry.get("required", False)) or where == "path"
        params.append(ParameterDefinition(
            name=name,
            location=where,
            type=_parse_type_ref(type_spec, ploc),
            required=required,
        ))
    return tuple(params)


__all__ = ["load", "loads", "parse_document"]
