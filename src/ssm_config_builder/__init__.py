"""
Configuration documents assembled from a hierarchical parameter store.

Parameters such as /app/schema/user/name are fetched per prefix and turned
into a nested document:
- ParameterSource / SsmParameterStore: Fetches all parameters under a path
- build_structure: Groups flat paths into a tree (JSON mode)
- build_yaml_rules: Collects flat YAML rule values (YAML rules mode)
- deep_merge: Combines the trees of several prefixes
- sort_types_by_dependency: Orders schema "types" so dependencies come first
- ConfigBuilder: Runs the whole flow and serializes to JSON or YAML
"""

from ssm_config_builder.base_source import CallContext, Parameter, ParameterSource
from ssm_config_builder.builder import BuildOptions, ConfigBuilder
from ssm_config_builder.dependency_sort import sort_types_by_dependency
from ssm_config_builder.errors import (
    BuildError,
    CyclicDependencyError,
    DuplicateKeyError,
    InvalidSchemaError,
    SourceFetchError,
    UnsupportedNestingError,
    ValueParseError,
)
from ssm_config_builder.merge import deep_merge, merge_all
from ssm_config_builder.nodes import (
    ConfigNode,
    MappingNode,
    ScalarNode,
    SequenceNode,
    from_python,
    to_python,
)
from ssm_config_builder.parameter_store import SsmParameterStore
from ssm_config_builder.tree import build_structure, build_yaml_rules

__all__ = [
    "BuildError",
    "BuildOptions",
    "CallContext",
    "ConfigBuilder",
    "ConfigNode",
    "CyclicDependencyError",
    "DuplicateKeyError",
    "InvalidSchemaError",
    "MappingNode",
    "Parameter",
    "ParameterSource",
    "ScalarNode",
    "SequenceNode",
    "SourceFetchError",
    "SsmParameterStore",
    "UnsupportedNestingError",
    "ValueParseError",
    "build_structure",
    "build_yaml_rules",
    "deep_merge",
    "from_python",
    "merge_all",
    "sort_types_by_dependency",
    "to_python",
]
