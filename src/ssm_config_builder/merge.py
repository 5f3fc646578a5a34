"""
Deep merge of configuration trees.

Used to fold the trees built for several prefixes into one document, and in
YAML rules mode to fold mapping-valued parameters into the prefix document.
"""

from ssm_config_builder.nodes import MappingNode, SequenceNode


def deep_merge(dest: MappingNode, src: MappingNode) -> MappingNode:
    """
    Merge src into dest and return the result as a new mapping.

    For each key in src:
    - both values are mappings  -> merged recursively
    - both values are sequences -> dest items followed by src items
    - otherwise                 -> src value replaces dest value

    Neither input is modified. Not commutative: src wins on conflicts.

    Args:
        dest: Accumulated tree (earlier prefix)
        src: Tree to merge in (later prefix)

    Returns:
        Merged MappingNode
    """
    result = MappingNode(dict(dest.entries))

    for key, src_value in src.items():
        dest_value = result.get(key)
        if isinstance(dest_value, MappingNode) and isinstance(src_value, MappingNode):
            result[key] = deep_merge(dest_value, src_value)
        elif isinstance(dest_value, SequenceNode) and isinstance(src_value, SequenceNode):
            result[key] = SequenceNode(dest_value.items + src_value.items)
        else:
            result[key] = src_value

    return result


def merge_all(*trees: MappingNode) -> MappingNode:
    """Merge trees left to right (later trees win on conflicts)."""
    result = MappingNode()
    for tree in trees:
        result = deep_merge(result, tree)
    return result
