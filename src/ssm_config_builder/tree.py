"""
Tree assembly — turns a flat list of parameters into a nested document.

JSON mode (build_structure):
1. Each parameter's key is made relative to the prefix
2. Parameters are grouped into levels by their first path segment
3. Each level becomes a value, a sequence or a nested mapping

    /app/schema/user/name = '"Ann"'       {"user": {"name": "Ann", "age": 30}}
    /app/schema/user/age  = '30'     ->

YAML rules mode (build_yaml_rules): every parameter sits directly under the
prefix and holds a YAML mapping (merged into the document) or a YAML
sequence (stored under the parameter's name).
"""

import logging
from typing import Iterable

from ssm_config_builder.base_source import Parameter
from ssm_config_builder.errors import DuplicateKeyError, UnsupportedNestingError
from ssm_config_builder.merge import deep_merge
from ssm_config_builder.nodes import ConfigNode, MappingNode, SequenceNode
from ssm_config_builder.paths import extract_relative_path, last_path_segment
from ssm_config_builder.values import parse_json_value, parse_yaml_rule_value

logger = logging.getLogger(__name__)

ROOT_LEVEL = "."       # level key for parameters that sit at the prefix itself
SELF_CHILD = "."       # child key for "the value of this level"
ROOT_ITEMS_KEY = "items"

Levels = dict[str, dict[str, Parameter]]


def organize_by_level(
    params: Iterable[Parameter], base_path: str, strip_prefix: bool
) -> Levels:
    """
    Group parameters by their first relative path segment.

    Under prefix "/p":
        /p           -> levels["."]["p"]
        /p/a         -> levels["a"]["."]
        /p/a/b/c     -> levels["a"]["b/c"]

    Returns:
        Mapping of level key to {child path: parameter}
    """
    levels: Levels = {}

    for param in params:
        relative = extract_relative_path(param.name, base_path, strip_prefix)

        if relative == "":
            levels.setdefault(ROOT_LEVEL, {})[last_path_segment(param.name)] = param
            continue

        parts = relative.split("/")
        if len(parts) == 1:
            levels.setdefault(parts[0], {})[SELF_CHILD] = param
        else:
            levels.setdefault(parts[0], {})["/".join(parts[1:])] = param

    return levels


def should_be_array(level_params: dict[str, Parameter]) -> bool:
    """
    Decide whether a level's children form a sequence.

    True only when there is more than one child and every child path has zero
    slashes (no further nesting below this level).
    """
    if len(level_params) <= 1:
        return False

    depths = {child_path.count("/") for child_path in level_params}
    return depths == {0}


def build_array(level_params: dict[str, Parameter]) -> SequenceNode:
    """Parsed values of all parameters, in the level's iteration order."""
    return SequenceNode([parse_json_value(p.value) for p in level_params.values()])


def build_nested_object(child_path: str, param: Parameter) -> MappingNode:
    """Build a chain of mappings for one path: "a/b" -> {"a": {"b": value}}."""
    parts = child_path.split("/")
    node: ConfigNode = parse_json_value(param.value)
    for part in reversed(parts):
        node = MappingNode({part: node})
    return node


def build_nested_structure(level_params: dict[str, Parameter]) -> MappingNode:
    """
    Build a mapping from several child paths, creating intermediate mappings.

    If an intermediate segment already holds a non-mapping value (a scalar set
    by a shorter path), it is replaced by a fresh mapping and the earlier value
    is dropped.
    """
    result = MappingNode()

    for child_path, param in level_params.items():
        parts = child_path.split("/")
        current = result

        for part in parts[:-1]:
            existing = current.get(part)
            if not isinstance(existing, MappingNode):
                if existing is not None:
                    logger.debug(
                        "Path conflict at %s (%s): replacing value with mapping",
                        param.name,
                        part,
                    )
                existing = MappingNode()
                current[part] = existing
            current = existing

        current[parts[-1]] = parse_json_value(param.value)

    return result


def _process_root_level(result: MappingNode, level_params: dict[str, Parameter]) -> None:
    if len(level_params) > 1:
        result[ROOT_ITEMS_KEY] = build_array(level_params)
        return
    for name, param in level_params.items():
        result[name] = parse_json_value(param.value)


def _process_nested_level(
    result: MappingNode, level_key: str, level_params: dict[str, Parameter]
) -> None:
    if len(level_params) == 1:
        child_path, param = next(iter(level_params.items()))
        if child_path == SELF_CHILD:
            result[level_key] = parse_json_value(param.value)
        else:
            result[level_key] = build_nested_object(child_path, param)
        return

    if should_be_array(level_params):
        logger.debug("Level %s: %d children -> sequence", level_key, len(level_params))
        result[level_key] = build_array(level_params)
    else:
        result[level_key] = build_nested_structure(level_params)


def build_structure(
    params: list[Parameter], base_path: str, strip_prefix: bool
) -> MappingNode:
    """
    Assemble the JSON-mode tree for one prefix.

    Args:
        params: Parameters fetched under base_path, sorted by name
        base_path: The prefix, e.g. "/app/schema"
        strip_prefix: Whether keys are made relative to base_path

    Returns:
        MappingNode for this prefix (empty when there are no parameters)
    """
    if not params:
        return MappingNode()
    return build_generic_structure(organize_by_level(params, base_path, strip_prefix))


def build_generic_structure(levels: Levels) -> MappingNode:
    """
    Turn grouped levels into a tree.

    The root level "." becomes {"items": [...]} when it holds several
    parameters, or {name: value} when it holds one. Every other level becomes
    one key of the result.
    """
    result = MappingNode()
    for level_key, level_params in levels.items():
        if level_key == ROOT_LEVEL:
            _process_root_level(result, level_params)
        else:
            _process_nested_level(result, level_key, level_params)

    return result


def build_yaml_rules(
    params: list[Parameter], base_path: str, strip_prefix: bool
) -> MappingNode:
    """
    Assemble the YAML rules document for one prefix.

    Args:
        params: Parameters fetched under base_path, sorted by name
        base_path: The prefix, e.g. "/app/rules"
        strip_prefix: Whether keys are made relative to base_path

    Returns:
        MappingNode of rule key -> rule value

    Raises:
        UnsupportedNestingError: If a parameter sits below the first level
        ValueParseError: If a value is not a YAML mapping or sequence
        DuplicateKeyError: If a sequence value's rule key is already present
    """
    result = MappingNode()

    for param in params:
        relative = extract_relative_path(param.name, base_path, strip_prefix)
        if "/" in relative:
            raise UnsupportedNestingError(param.name)
        if relative == "":
            relative = last_path_segment(param.name)

        node = parse_yaml_rule_value(param.value, param.name)

        if isinstance(node, MappingNode):
            result = deep_merge(result, node)
            continue

        if relative in result:
            raise DuplicateKeyError(relative)
        result[relative] = node

    return result
