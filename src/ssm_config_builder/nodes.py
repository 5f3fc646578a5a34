"""
Configuration tree node types.

A configuration document is a tree of three node kinds:
- ScalarNode: a leaf value (str, int, float, bool or None)
- MappingNode: string keys to child nodes (unordered semantics)
- SequenceNode: an ordered list of child nodes

Shape rules are checked when a node is constructed, so a tree that exists is
always well-formed. from_python() / to_python() convert between nodes and the
plain dicts/lists produced by json and yaml.
"""

from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class ScalarNode:
    """Leaf value. Never wraps a dict or list; those become Mapping/Sequence nodes."""

    value: Any

    def __post_init__(self) -> None:
        if isinstance(self.value, (dict, list, tuple)):
            raise TypeError(
                f"ScalarNode cannot hold a {type(self.value).__name__}; use from_python()"
            )


@dataclass
class MappingNode:
    entries: dict[str, "ConfigNode"] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for key, child in self.entries.items():
            _check_key(key)
            _check_child(child)

    def __contains__(self, key: str) -> bool:
        return key in self.entries

    def __getitem__(self, key: str) -> "ConfigNode":
        return self.entries[key]

    def __setitem__(self, key: str, child: "ConfigNode") -> None:
        _check_key(key)
        _check_child(child)
        self.entries[key] = child

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, key: str, default: Any = None) -> Any:
        return self.entries.get(key, default)

    def keys(self):
        return self.entries.keys()

    def items(self):
        return self.entries.items()


@dataclass
class SequenceNode:
    items: list["ConfigNode"] = field(default_factory=list)

    def __post_init__(self) -> None:
        for child in self.items:
            _check_child(child)

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def append(self, child: "ConfigNode") -> None:
        _check_child(child)
        self.items.append(child)


ConfigNode = Union[ScalarNode, MappingNode, SequenceNode]


def _check_key(key: Any) -> None:
    if not isinstance(key, str):
        raise TypeError(f"MappingNode keys must be str, got {type(key).__name__}")


def _check_child(child: Any) -> None:
    if not isinstance(child, (ScalarNode, MappingNode, SequenceNode)):
        raise TypeError(f"expected a ConfigNode, got {type(child).__name__}")


def from_python(value: Any) -> ConfigNode:
    """
    Convert a decoded JSON/YAML value into a node tree.

    Dict keys are coerced to str (YAML allows int/bool keys, the tree does not).

    Raises:
        ValueError: If two keys of one mapping coerce to the same string,
            e.g. YAML 1 and "1"
    """
    if isinstance(value, (ScalarNode, MappingNode, SequenceNode)):
        return value
    if isinstance(value, dict):
        entries: dict[str, ConfigNode] = {}
        for k, v in value.items():
            key = str(k)
            if key in entries:
                raise ValueError(f"mapping keys collide as string {key!r}")
            entries[key] = from_python(v)
        return MappingNode(entries)
    if isinstance(value, (list, tuple)):
        return SequenceNode([from_python(v) for v in value])
    return ScalarNode(value)


def to_python(node: ConfigNode) -> Any:
    """Convert a node tree into plain dicts/lists ready for json or yaml dumping."""
    if isinstance(node, MappingNode):
        return {key: to_python(child) for key, child in node.items()}
    if isinstance(node, SequenceNode):
        return [to_python(child) for child in node]
    return node.value
