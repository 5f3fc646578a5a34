"""
Unit tests for tree assembly.

Tests cover:
- organize_by_level(): root / first-level / nested grouping
- should_be_array(): depth-0 sequence heuristic
- build_generic_structure(): root "items" sequence vs single root entry
- build_structure(): nested objects, sequences, path conflicts, empty input
- build_yaml_rules(): flat keys, mapping merge, nesting and duplicate errors
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../../src"))

from ssm_config_builder.base_source import Parameter
from ssm_config_builder.errors import (
    DuplicateKeyError,
    UnsupportedNestingError,
    ValueParseError,
)
from ssm_config_builder.nodes import MappingNode, to_python
from ssm_config_builder.tree import (
    build_generic_structure,
    build_structure,
    build_yaml_rules,
    organize_by_level,
    should_be_array,
)


def _params(pairs: list[tuple[str, str]]) -> list[Parameter]:
    return sorted((Parameter(name, value) for name, value in pairs), key=lambda p: p.name)


class TestOrganizeByLevel:
    """Test organize_by_level() grouping rules."""

    def test_key_equal_to_prefix_goes_to_root(self) -> None:
        params = _params([("/p/config", "1")])
        levels = organize_by_level(params, "/p/config", strip_prefix=True)
        assert list(levels) == ["."]
        assert levels["."]["config"].value == "1"

    def test_single_segment_uses_self_child(self) -> None:
        params = _params([("/p/a", "1")])
        levels = organize_by_level(params, "/p", strip_prefix=True)
        assert levels == {"a": {".": Parameter("/p/a", "1")}}

    def test_nested_path_uses_remainder(self) -> None:
        params = _params([("/p/a/b/c", "1")])
        levels = organize_by_level(params, "/p", strip_prefix=True)
        assert levels == {"a": {"b/c": Parameter("/p/a/b/c", "1")}}

    def test_without_strip_uses_raw_key(self) -> None:
        params = _params([("/p/a", "1")])
        levels = organize_by_level(params, "/p", strip_prefix=False)
        # the leading slash yields an empty first segment
        assert levels == {"": {"p/a": Parameter("/p/a", "1")}}


class TestShouldBeArray:
    def _level(self, *child_paths: str) -> dict[str, Parameter]:
        return {c: Parameter(f"/p/l/{c}", "1") for c in child_paths}

    def test_single_child_is_not_array(self) -> None:
        assert not should_be_array(self._level("a"))

    def test_flat_children_are_array(self) -> None:
        assert should_be_array(self._level("a", "b", "c"))

    def test_equal_but_nonzero_depth_is_not_array(self) -> None:
        assert not should_be_array(self._level("a/x", "b/y"))

    def test_mixed_depth_is_not_array(self) -> None:
        assert not should_be_array(self._level("a", "b/x"))


class TestRootLevel:
    """Test the root level rules of build_generic_structure()."""

    def test_single_root_entry_not_wrapped(self) -> None:
        levels = {".": {"config": Parameter("/p/config", '{"debug": true}')}}
        tree = build_generic_structure(levels)
        assert to_python(tree) == {"config": {"debug": True}}

    def test_multiple_root_entries_become_items(self) -> None:
        levels = {
            ".": {
                "a": Parameter("/x/a", "1"),
                "b": Parameter("/y/b", "2"),
                "c": Parameter("/z/c", "three"),
            }
        }
        tree = build_generic_structure(levels)
        result = to_python(tree)
        assert list(result) == ["items"]
        assert sorted(result["items"], key=str) == [1, 2, "three"]

    def test_prefix_parameter_itself(self) -> None:
        params = _params([("/app/flag", "true")])
        assert to_python(build_structure(params, "/app/flag", True)) == {"flag": True}


class TestBuildStructure:
    """Test build_structure() JSON-mode assembly."""

    def test_empty_params_give_empty_mapping(self) -> None:
        assert build_structure([], "/p", True) == MappingNode()

    def test_nested_user_object(self) -> None:
        params = _params([("/p/user/name", '"Ann"'), ("/p/user/age", "30")])
        assert to_python(build_structure(params, "/p", True)) == {
            "user": {"name": "Ann", "age": 30}
        }

    def test_first_level_values(self) -> None:
        params = _params([("/p/a", "1"), ("/p/b", "2")])
        assert to_python(build_structure(params, "/p", True)) == {"a": 1, "b": 2}

    def test_single_deep_path_builds_chain(self) -> None:
        params = _params([("/p/db/primary/host", '"localhost"')])
        assert to_python(build_structure(params, "/p", True)) == {
            "db": {"primary": {"host": "localhost"}}
        }

    def test_flat_children_become_sequence(self) -> None:
        params = _params(
            [("/p/hosts/h1", '"a.example"'), ("/p/hosts/h2", '"b.example"')]
        )
        result = to_python(build_structure(params, "/p", True))
        assert sorted(result["hosts"]) == ["a.example", "b.example"]

    def test_sequence_values_are_parsed(self) -> None:
        params = _params([("/p/types/A", '{"name": "A"}'), ("/p/types/B", '{"name": "B"}')])
        result = to_python(build_structure(params, "/p", True))
        assert sorted(t["name"] for t in result["types"]) == ["A", "B"]

    def test_mixed_depth_children_become_mapping(self) -> None:
        params = _params(
            [
                ("/p/db/host", '"localhost"'),
                ("/p/db/pool/max", "10"),
                ("/p/db/pool/min", "1"),
            ]
        )
        assert to_python(build_structure(params, "/p", True)) == {
            "db": {"host": "localhost", "pool": {"max": 10, "min": 1}}
        }

    def test_value_and_children_at_same_level_form_sequence(self) -> None:
        # "." and "x" are both depth 0, so the level is treated as a sequence
        params = _params([("/p/a", "1"), ("/p/a/x", "2")])
        result = to_python(build_structure(params, "/p", True))
        assert sorted(result["a"]) == [1, 2]

    def test_path_conflict_scalar_replaced_by_mapping(self) -> None:
        # "svc/port" is a scalar, then "svc/port/tcp" needs "port" as a mapping
        params = _params(
            [
                ("/p/svc/name", '"api"'),
                ("/p/svc/port", "80"),
                ("/p/svc/port/tcp", "8080"),
            ]
        )
        result = to_python(build_structure(params, "/p", True))
        assert result == {"svc": {"name": "api", "port": {"tcp": 8080}}}

    def test_unparseable_values_kept_as_strings(self) -> None:
        params = _params([("/p/msg", "hello world")])
        assert to_python(build_structure(params, "/p", True)) == {"msg": "hello world"}


class TestBuildYamlRules:
    """Test build_yaml_rules() YAML rules assembly."""

    def test_sequences_stored_under_rule_keys(self) -> None:
        params = _params(
            [("/r/blockedIps", '["1.2.3.4"]'), ("/r/blockedIps2", '["5.6.7.8"]')]
        )
        assert to_python(build_yaml_rules(params, "/r", True)) == {
            "blockedIps": ["1.2.3.4"],
            "blockedIps2": ["5.6.7.8"],
        }

    def test_mapping_values_merged(self) -> None:
        params = _params(
            [
                ("/r/a", "limits:\n  rps: 10\n"),
                ("/r/b", "limits:\n  burst: 20\nallowed: [x]\n"),
            ]
        )
        assert to_python(build_yaml_rules(params, "/r", True)) == {
            "limits": {"rps": 10, "burst": 20},
            "allowed": ["x"],
        }

    def test_duplicate_rule_key_rejected(self) -> None:
        # "/r/all" sorts first and already defines blockedIps
        params = _params(
            [
                ("/r/all", "blockedIps: ['9.9.9.9']"),
                ("/r/blockedIps", '["1.2.3.4"]'),
            ]
        )
        with pytest.raises(DuplicateKeyError) as exc_info:
            build_yaml_rules(params, "/r", True)
        assert exc_info.value.key == "blockedIps"

    def test_nested_parameter_rejected(self) -> None:
        params = _params([("/r/group/blockedIps", '["1.2.3.4"]')])
        with pytest.raises(UnsupportedNestingError) as exc_info:
            build_yaml_rules(params, "/r", True)
        assert exc_info.value.key == "/r/group/blockedIps"

    def test_scalar_value_rejected(self) -> None:
        params = _params([("/r/name", "plain")])
        with pytest.raises(ValueParseError):
            build_yaml_rules(params, "/r", True)

    def test_prefix_parameter_uses_last_segment(self) -> None:
        params = _params([("/r/blockedIps", "- 1.2.3.4\n")])
        assert to_python(build_yaml_rules(params, "/r/blockedIps", True)) == {
            "blockedIps": ["1.2.3.4"]
        }

    def test_raw_keys_are_nested(self) -> None:
        params = _params([("/r/blockedIps", "- 1.2.3.4\n")])
        with pytest.raises(UnsupportedNestingError):
            build_yaml_rules(params, "/r", False)
