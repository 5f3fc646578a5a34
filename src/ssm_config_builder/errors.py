"""
Error types raised while building a configuration document.

Every failure aborts the whole build: the builder returns either a complete
serialized document or raises one of these. Each error keeps the offending
parameter path or type name as an attribute so callers can report it.
"""

from typing import Iterable, Optional


class BuildError(Exception):
    """Base class for all configuration build failures."""


class SourceFetchError(BuildError):
    """Fetching parameters from the parameter store failed for a path."""

    def __init__(self, path: str, cause: Optional[BaseException] = None) -> None:
        self.path = path
        self.cause = cause
        message = f"failed to fetch parameters under path {path}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class ValueParseError(BuildError):
    """A YAML rules value is neither a mapping nor a sequence."""

    def __init__(self, key: str, cause: Optional[BaseException] = None) -> None:
        self.key = key
        self.cause = cause
        message = f"could not parse YAML value as mapping or sequence at {key}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class UnsupportedNestingError(BuildError):
    """YAML rules mode only accepts parameters directly under the prefix."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"nested parameters are not supported for YAML rules: {key}")


class DuplicateKeyError(BuildError):
    """Two parameters resolve to the same top-level rule key."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"duplicate rule key: {key}")


class CyclicDependencyError(BuildError):
    """The types declared in a schema reference each other in a cycle."""

    def __init__(self, type_names: Iterable[str]) -> None:
        self.type_names = list(type_names)
        super().__init__(
            "circular reference between type definitions: "
            + ", ".join(self.type_names)
        )


class InvalidSchemaError(BuildError):
    """The document handed to the dependency sorter has no usable `types` list."""

    def __init__(self, reason: str, type_name: Optional[str] = None) -> None:
        self.reason = reason
        self.type_name = type_name
        message = reason if type_name is None else f"{reason}: {type_name}"
        super().__init__(message)
