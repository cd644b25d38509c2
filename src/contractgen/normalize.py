"""
IR normalization.

Turns a ContractDocument into a NormalizedIR that every emitter can consume
without further checks.

Normalizer Contract
1) Canonical names: declarations whose raw canonical identifiers coincide
   (``meal-plan`` / ``meal_plan``) fail with DuplicateNameError. Casing
   collisions that only appear under a target's convention are left to the
   emitters.
2) Resolution: one pass over every reference; all unresolved names are
   reported together (UnresolvedReferenceError).
3) Cycles: depth-first traversal with a visiting set over the reference
   graph, nodes and successors in sorted order; the first back edge fails
   with CyclicReferenceError(cycle_path).
4) Flattening: parent fields, then composed (allOf) fields, then own fields;
   a redeclared field replaces the inherited one in place.
5) Order: lexicographic topological order, dependencies first.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

import networkx as nx

from contractgen.constants import KIND_OBJECT
from contractgen.errors import (
    CyclicReferenceError,
    DuplicateNameError,
    NormalizationError,
    SchemaError,
    UnresolvedReferenceError,
)
from contractgen.schemas.contract import (
    ContractDocument,
    NormalizedField,
    NormalizedIR,
    NormalizedType,
    OperationDefinition,
    TypeRef,
)
from contractgen.utils.naming import canonical_identifier
from contractgen.utils.text import canonical_json, stable_hash

logger = logging.getLogger(__name__)


def normalize(document: ContractDocument) -> NormalizedIR:
    """
    Normalize a contract into reference-resolved, cycle-free IR.

    Args:
        document: Loaded contract.

    Returns:
        NormalizedIR.

    Raises:
        DuplicateNameError: Two declarations share a raw canonical name.
        UnresolvedReferenceError: A reference names no declared type.
        CyclicReferenceError: A type reaches itself through references.
        SchemaError: A parent or composed type is not an object.
    """
    _check_duplicates(document.types.keys(), "types")
    _check_duplicates([op.operation_id for op in document.operations.values()], "operations")
    for name in sorted(document.types):
        _check_duplicates([f.name for f in document.types[name].fields], f"types.{name}.fields")

    _resolve_references(document)

    graph = build_reference_graph(document)
    cycle = find_cycle(graph)
    if cycle:
        raise CyclicReferenceError(cycle)

    memo: Dict[str, Tuple[NormalizedField, ...]] = {}
    types: Dict[str, NormalizedType] = {}
    for name in sorted(document.types):
        tdef = document.types[name]
        fields = _flatten_fields(name, document, memo)
        _check_duplicates([f.name for f in fields], f"types.{name}.fields")
        types[name] = NormalizedType(
            name=name,
            canonical_name=canonical_identifier(name),
            kind=tdef.kind,
            fields=fields,
            values=tdef.values,
            items=tdef.items,
            primitive=tdef.primitive,
            parent=tdef.parent,
            compose=tdef.compose,
            one_of=tdef.one_of,
            description=tdef.description,
        )
        logger.debug(f"Normalized {tdef.kind} {name} ({len(fields)} fields)")

    # Edges point from a type to what it references; reverse for dependencies-first
    order = tuple(nx.lexicographical_topological_sort(graph.reverse(copy=True)))
    operations = tuple(sorted(document.operations.values(), key=lambda op: op.operation_id))

    _check_closure(types, operations)

    fingerprint = _fingerprint(document.title, document.version, types, operations)
    logger.info(
        f"Normalized {len(types)} types and {len(operations)} operations "
        f"(fingerprint {fingerprint[:12]})"
    )
    return NormalizedIR(
        title=document.title,
        version=document.version,
        types=types,
        operations=operations,
        type_order=order,
        fingerprint=fingerprint,
    )


# =============================================================================
# NAMES & REFERENCES
# =============================================================================

def _check_duplicates(names: Iterable[str], scope: str) -> None:
    groups: Dict[str, List[str]] = defaultdict(list)
    for name in names:
        groups[canonical_identifier(name)].append(name)
    for canonical in sorted(groups):
        members = groups[canonical]
        if len(members) > 1:
            raise DuplicateNameError(canonical, sorted(members), scope=scope)


def _resolve_references(document: ContractDocument) -> None:
    """Record every reference that names nothing, then fail once."""
    declared = set(document.types)
    unresolved: List[str] = []

    for name in sorted(document.types):
        tdef = document.types[name]
        for ref in tdef.references():
            if ref not in declared:
                unresolved.append(f"{ref} (from {tdef.location or 'types.' + name})")

    for op in sorted(document.operations.values(), key=lambda o: o.operation_id):
        for ref in op.references():
            if ref not in declared:
                unresolved.append(f"{ref} (from {op.location or 'operations.' + op.operation_id})")

    if unresolved:
        raise UnresolvedReferenceError(unresolved)


def build_reference_graph(document: ContractDocument) -> nx.DiGraph:
    """Directed graph with an edge A -> B whenever type A references type B."""
    graph = nx.DiGraph()
    for name in sorted(document.types):
        graph.add_node(name)
    for name in sorted(document.types):
        for ref in document.types[name].references():
            graph.add_edge(name, ref)
    return graph


def find_cycle(graph: nx.DiGraph) -> Optional[List[str]]:
    """
    Depth-first search with a visiting set.

    Returns the first cycle found as a path whose first and last entries are
    the same node (``["A", "B", "A"]``), or None. Roots and successors are
    visited in sorted order so the reported cycle is stable.
    """
    done = set()
    for root in sorted(graph.nodes):
        if root in done:
            continue
        path = [root]
        visiting = {root}
        stack = [iter(sorted(graph.successors(root)))]
        while stack:
            nxt = next(stack[-1], None)
            if nxt is None:
                stack.pop()
                node = path.pop()
                visiting.discard(node)
                done.add(node)
                continue
            if nxt in visiting:
                start = path.index(nxt)
                return path[start:] + [nxt]
            if nxt in done:
                continue
            path.append(nxt)
            visiting.add(nxt)
            stack.append(iter(sorted(graph.successors(nxt))))
    return None


# =============================================================================
# FLATTENING
# =============================================================================

def _flatten_fields(
    name: str,
    document: ContractDocument,
    memo: Dict[str, Tuple[NormalizedField, ...]],
) -> Tuple[NormalizedField, ...]:
    if name in memo:
        return memo[name]
    tdef = document.types[name]

    merged: Dict[str, NormalizedField] = {}
    sources = ([tdef.parent] if tdef.parent else []) + list(tdef.compose)
    for source in sources:
        sdef = document.types[source]
        if sdef.kind != KIND_OBJECT:
            raise SchemaError(
                tdef.location or f"types.{name}",
                f"can only extend or compose object types; {source!r} is {sdef.kind}",
            )
        for inherited in _flatten_fields(source, document, memo):
            merged[inherited.name] = inherited

    for fld in tdef.fields:
        merged[fld.name] = NormalizedField(
            name=fld.name,
            canonical_name=canonical_identifier(fld.name),
            type=fld.type,
            required=fld.required,
            description=fld.description,
            declared_in=name,
        )

    memo[name] = tuple(merged.values())
    return memo[name]


# =============================================================================
# CLOSURE & FINGERPRINT
# =============================================================================

def _check_closure(
    types: Dict[str, NormalizedType],
    operations: Tuple[OperationDefinition, ...],
) -> None:
    """Every type reachable from an operation must be in the type mapping."""
    pending = [ref for op in operations for ref in op.references()]
    seen = set()
    while pending:
        name = pending.pop()
        if name in seen:
            continue
        seen.add(name)
        ntype = types.get(name)
        if ntype is None:
            raise NormalizationError(f"Orphan reference {name!r} reachable from operations")
        for fld in ntype.fields:
            pending.extend(fld.type.referenced_names())
        if ntype.items is not None:
            pending.extend(ntype.items.referenced_names())
        for alt in ntype.one_of:
            pending.extend(alt.referenced_names())


def _ref_payload(ref: Optional[TypeRef]) -> Optional[Dict[str, object]]:
    return ref.to_dict() if ref is not None else None


def _fingerprint(
    title: str,
    version: Optional[str],
    types: Dict[str, NormalizedType],
    operations: Tuple[OperationDefinition, ...],
) -> str:
    payload = {
        "title": title,
        "version": version,
        "types": [types[name].to_dict() for name in sorted(types)],
        "operations": [
            {
                "operation_id": op.operation_id,
                "method": op.method,
                "path": op.path,
                "tag": op.tag,
                "parameters": [
                    {"name": p.name, "in": p.location, "type": p.type.to_dict(), "required": p.required}
                    for p in op.parameters
                ],
                "request": _ref_payload(op.request),
                "response": _ref_payload(op.response),
            }
            for op in operations
        ],
    }
    return stable_hash([canonical_json(payload)], length=64)


__all__ = ["normalize", "build_reference_graph", "find_cycle"]
