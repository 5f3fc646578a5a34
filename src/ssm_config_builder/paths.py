"""Parameter key helpers: relative path against a prefix, and last path segment."""


def extract_relative_path(full_key: str, base_path: str, strip_prefix: bool) -> str:
    """
    Return full_key relative to base_path.

    With strip_prefix, the prefix (trailing slash ignored) is removed from the
    front of the key and surrounding slashes are trimmed, so "/app/db/host"
    under "/app/" becomes "db/host" and the prefix itself becomes "".
    Without strip_prefix the raw key is returned unchanged.

    Args:
        full_key: Absolute parameter name, e.g. "/app/schema/types/User"
        base_path: Prefix the parameter was fetched under, e.g. "/app/schema"
        strip_prefix: Whether to make the key relative to base_path

    Returns:
        Relative path without leading/trailing slashes (strip_prefix) or full_key
    """
    if not strip_prefix:
        return full_key

    base_path = base_path.rstrip("/")
    relative = full_key[len(base_path):] if full_key.startswith(base_path) else full_key
    return relative.strip("/")


def last_path_segment(path: str) -> str:
    """Return the text after the final "/" ("/app/db/host" -> "host")."""
    return path.rsplit("/", 1)[-1]
