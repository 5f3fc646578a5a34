"""
Parameter value parsing.

JSON mode: values are JSON when they decode as JSON, otherwise opaque strings.
    '30'        -> 30
    '"Ann"'     -> "Ann"
    '{"a": 1}'  -> {"a": 1}
    'hello'     -> "hello"
    '1e400'     -> "1e400"   (does not fit a finite float)

YAML rules mode: values must be a YAML mapping or a YAML sequence.
"""

import json
import math
from typing import Any

import yaml

from ssm_config_builder.errors import ValueParseError
from ssm_config_builder.nodes import ConfigNode, MappingNode, ScalarNode, from_python

MAX_VALUE_DEPTH = 100   # Dict/list nesting limit for a single parameter value


def _reject_constant(name: str) -> Any:
    # NaN / Infinity / -Infinity are not standard JSON
    raise ValueError(f"non-standard JSON constant {name}")


def _finite_float(text: str) -> float:
    number = float(text)
    if not math.isfinite(number):
        raise ValueError(f"number out of float range: {text}")
    return number


def _deeper_than(value: Any, limit: int) -> bool:
    """True when dict/list nesting in value exceeds limit. Shared containers are visited once."""
    seen: set[int] = set()
    stack = [(value, 1)]
    while stack:
        item, level = stack.pop()
        if id(item) in seen:
            continue
        if isinstance(item, dict):
            children = list(item.values())
        elif isinstance(item, list):
            children = item
        else:
            continue
        seen.add(id(item))
        if level > limit:
            return True
        stack.extend((child, level + 1) for child in children)
    return False


def parse_json_value(value: str) -> ConfigNode:
    """Decode value as JSON; fall back to the raw string when it is not JSON."""
    try:
        decoded = json.loads(
            value, parse_constant=_reject_constant, parse_float=_finite_float
        )
    except (ValueError, RecursionError):
        return ScalarNode(value)
    if _deeper_than(decoded, MAX_VALUE_DEPTH):
        return ScalarNode(value)
    return from_python(decoded)


def parse_yaml_rule_value(value: str, key: str) -> ConfigNode:
    """
    Decode value as a YAML mapping or sequence.

    An empty document counts as an empty mapping.

    Args:
        value: Raw parameter value
        key: Parameter name, used in the error message

    Returns:
        MappingNode or SequenceNode

    Raises:
        ValueParseError: If value is not valid YAML, decodes to a scalar, is nested
            too deeply, or has mapping keys that collide once converted to strings
    """
    try:
        decoded = yaml.safe_load(value)
    except (yaml.YAMLError, RecursionError) as exc:
        raise ValueParseError(key, exc) from exc

    if decoded is None:
        return MappingNode()
    if not isinstance(decoded, (dict, list)):
        raise ValueParseError(key, TypeError(f"got a {type(decoded).__name__} scalar"))
    if _deeper_than(decoded, MAX_VALUE_DEPTH):
        raise ValueParseError(key, ValueError(f"nested deeper than {MAX_VALUE_DEPTH} levels"))
    try:
        return from_python(decoded)
    except (ValueError, RecursionError) as exc:
        raise ValueParseError(key, exc) from exc
