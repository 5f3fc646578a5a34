"""
Dependency ordering for schema type definitions.

A schema document looks like:
    {
        "types": [
            {"name": "User", "fields": [{"name": "address", "ofType": "Address"}]},
            {"name": "Address", "fields": [{"name": "street", "ofType": "String"}]}
        ],
        "query": {...}
    }

sort_types_by_dependency() reorders "types" so that every type appears after
the types its fields (and field arguments) reference, so Address comes before User.
References to names not declared in "types" (String, Int, ...) are ignored.
Uses Kahn's algorithm; a cycle raises CyclicDependencyError.
"""

import logging
from collections import deque
from typing import Iterator, Optional

from ssm_config_builder.errors import CyclicDependencyError, InvalidSchemaError
from ssm_config_builder.nodes import ConfigNode, MappingNode, ScalarNode, SequenceNode

logger = logging.getLogger(__name__)

TYPES_KEY = "types"


def _scalar_str(node: Optional[ConfigNode]) -> Optional[str]:
    if isinstance(node, ScalarNode) and isinstance(node.value, str):
        return node.value
    return None


def _mappings(node: Optional[ConfigNode]) -> Iterator[MappingNode]:
    """Mapping children of a sequence, or mapping values of a mapping."""
    if isinstance(node, SequenceNode):
        children = node.items
    elif isinstance(node, MappingNode):
        children = list(node.entries.values())
    else:
        return
    for child in children:
        if isinstance(child, MappingNode):
            yield child


def referenced_type_names(entry: MappingNode) -> list[str]:
    """
    Collect every ofType referenced by an entry's fields and their args.

    Returns:
        Names in first-seen order, without duplicates
    """
    names: list[str] = []
    for field in _mappings(entry.get("fields")):
        candidates = [field] + list(_mappings(field.get("args")))
        for item in candidates:
            of_type = _scalar_str(item.get("ofType"))
            if of_type is not None and of_type not in names:
                names.append(of_type)
    return names


def _index_types(types: SequenceNode) -> dict[str, MappingNode]:
    by_name: dict[str, MappingNode] = {}
    for entry in types:
        if not isinstance(entry, MappingNode):
            raise InvalidSchemaError("type entry is not a mapping")
        name = _scalar_str(entry.get("name"))
        if name is None:
            raise InvalidSchemaError("type entry has no string 'name'")
        if name in by_name:
            raise InvalidSchemaError("duplicate type name", name)
        by_name[name] = entry
    return by_name


def topological_order(by_name: dict[str, MappingNode]) -> list[str]:
    """
    Order type names so dependencies precede dependents (Kahn's algorithm).

    Ties are broken by declaration order.

    Raises:
        CyclicDependencyError: If the types cannot all be ordered
    """
    dependents: dict[str, list[str]] = {name: [] for name in by_name}
    in_degree: dict[str, int] = {name: 0 for name in by_name}

    for name, entry in by_name.items():
        for dependency in referenced_type_names(entry):
            if dependency not in by_name:
                continue
            dependents[dependency].append(name)
            in_degree[name] += 1

    queue = deque(name for name, degree in in_degree.items() if degree == 0)
    ordered: list[str] = []

    while queue:
        name = queue.popleft()
        ordered.append(name)
        for dependent in dependents[name]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)

    if len(ordered) < len(by_name):
        unresolved = [name for name in by_name if in_degree[name] > 0]
        raise CyclicDependencyError(unresolved)

    return ordered


def sort_types_by_dependency(document: MappingNode) -> MappingNode:
    """
    Return a copy of document with its "types" sequence in dependency order.

    Every other key ("query" and anything else) is carried over unchanged.

    Args:
        document: Merged JSON-mode tree

    Returns:
        New MappingNode with the sorted "types" sequence

    Raises:
        InvalidSchemaError: If "types" is missing, not a sequence, or has
            entries without a unique string name
        CyclicDependencyError: If the type references form a cycle
    """
    types = document.get(TYPES_KEY)
    if not isinstance(types, SequenceNode):
        raise InvalidSchemaError("'types' not found or is not a list")

    by_name = _index_types(types)
    ordered = topological_order(by_name)
    logger.debug("Sorted %d types by dependency: %s", len(ordered), ordered)

    result = MappingNode(dict(document.entries))
    result[TYPES_KEY] = SequenceNode([by_name[name] for name in ordered])
    return result
