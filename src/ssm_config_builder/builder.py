"""
ConfigBuilder — fetches parameters per prefix and assembles the final document.

Orchestration:
1. For each prefix, in the given order, fetch parameters from the source
2. Assemble the prefix tree (JSON mode) or rules document (YAML rules mode)
3. Deep-merge it into the accumulated document
4. JSON mode only: optionally reorder "types" by dependency
5. Serialize to JSON or YAML bytes

Either the complete document is returned or a BuildError is raised.
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import yaml

from ssm_config_builder.base_source import CallContext, Parameter, ParameterSource
from ssm_config_builder.dependency_sort import sort_types_by_dependency
from ssm_config_builder.merge import deep_merge
from ssm_config_builder.nodes import MappingNode, to_python
from ssm_config_builder.tree import build_structure, build_yaml_rules

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildOptions:
    """
    Options for a single build. No field has a default; callers set all of them.

    prefixes are merged in the order given; later prefixes win on conflicts.
    """

    prefixes: Sequence[str]
    strip_prefix: bool
    json_output: bool
    yaml_rules: bool
    sort_by_dependencies: bool


class ConfigBuilder:
    """
    Builds configuration documents from a ParameterSource.

    Usage:
        builder = ConfigBuilder(SsmParameterStore(region="us-west-2"))
        schema = builder.build_json_from_prefix("/app/schema", sort_by_dependencies=True)
        rules = builder.build_yaml_from_prefix("/app/rules", sort_by_dependencies=False)
    """

    JSON_INDENT = 2

    def __init__(self, source: ParameterSource) -> None:
        self._source = source

    def build_from_prefixes(
        self, options: BuildOptions, context: Optional[CallContext] = None
    ) -> bytes:
        """
        Build and serialize the document for all prefixes in options.

        Args:
            options: Prefixes and output flags
            context: Optional per-call deadline/cancellation

        Returns:
            UTF-8 encoded JSON or YAML

        Raises:
            BuildError: Any fetch, parse, shape or dependency failure
        """
        mode = "yaml-rules" if options.yaml_rules else "json"
        logger.info(
            "Building config | mode=%s | prefixes=%s", mode, list(options.prefixes)
        )

        if options.yaml_rules:
            document = self._build_yaml_rules(options, context)
            if options.sort_by_dependencies:
                logger.warning(
                    "sort_by_dependencies ignored: not applicable to YAML rules output"
                )
            return self._dump_yaml(document)

        document = self._build_json_tree(options, context)
        if options.sort_by_dependencies:
            document = sort_types_by_dependency(document)
        return self._dump_json(document, pretty=options.json_output)

    def build_json_from_prefix(
        self,
        prefix: str,
        sort_by_dependencies: bool,
        context: Optional[CallContext] = None,
    ) -> bytes:
        """Indented JSON for a single prefix with the prefix stripped from keys."""
        options = BuildOptions(
            prefixes=[prefix],
            strip_prefix=True,
            json_output=True,
            yaml_rules=False,
            sort_by_dependencies=sort_by_dependencies,
        )
        return self.build_from_prefixes(options, context)

    def build_yaml_from_prefix(
        self,
        prefix: str,
        sort_by_dependencies: bool,
        context: Optional[CallContext] = None,
    ) -> bytes:
        """YAML rules document for a single prefix with the prefix stripped from keys."""
        options = BuildOptions(
            prefixes=[prefix],
            strip_prefix=True,
            json_output=False,
            yaml_rules=True,
            sort_by_dependencies=sort_by_dependencies,
        )
        return self.build_from_prefixes(options, context)

    def _fetch(self, prefix: str, context: Optional[CallContext]) -> list[Parameter]:
        params = self._source.fetch_parameters_under_path(prefix, context)
        return sorted(params, key=lambda p: p.name)

    def _build_json_tree(
        self, options: BuildOptions, context: Optional[CallContext]
    ) -> MappingNode:
        document = MappingNode()
        for prefix in options.prefixes:
            params = self._fetch(prefix, context)
            prefix_tree = build_structure(params, prefix, options.strip_prefix)
            document = deep_merge(document, prefix_tree)
        return document

    def _build_yaml_rules(
        self, options: BuildOptions, context: Optional[CallContext]
    ) -> MappingNode:
        document = MappingNode()
        for prefix in options.prefixes:
            params = self._fetch(prefix, context)
            prefix_rules = build_yaml_rules(params, prefix, options.strip_prefix)
            document = deep_merge(document, prefix_rules)
        return document

    def _dump_json(self, document: MappingNode, pretty: bool) -> bytes:
        data = to_python(document)
        if pretty:
            text = json.dumps(
                data, indent=self.JSON_INDENT, sort_keys=True, ensure_ascii=False, allow_nan=False
            )
        else:
            text = json.dumps(
                data, separators=(",", ":"), sort_keys=True, ensure_ascii=False, allow_nan=False
            )
        return text.encode("utf-8")

    def _dump_yaml(self, document: MappingNode) -> bytes:
        text = yaml.safe_dump(
            to_python(document),
            default_flow_style=False,
            sort_keys=True,
            allow_unicode=True,
        )
        return text.encode("utf-8")
