"""Fatal analysis errors. Everything else is recovered where it happens."""
from __future__ import annotations


class MissingPackageEntryError(FileNotFoundError):
    """A required package entry (manifest or module metadata) is absent."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"{path} not found in the archive")


class UnresolvedDependencyError(ValueError):
    """A quiz/discussion <dependency> names a resource the manifest never declares."""

    def __init__(self, identifier: str, identifierref: str) -> None:
        self.identifier = identifier
        self.identifierref = identifierref
        super().__init__(
            f"resource {identifier!r} depends on undeclared resource {identifierref!r}"
        )
