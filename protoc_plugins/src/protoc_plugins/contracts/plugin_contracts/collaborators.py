from __future__ import annotations

from collections.abc import Collection, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from protoc_plugins.contracts.plugin_contracts.declarations import MavenCoordinate


@runtime_checkable
class ArtifactPathResolver(Protocol):
    """
    Facade over a package repository.

    Implementations must be safe to call from several threads at once.
    """

    def resolve_one(self, coordinate: MavenCoordinate) -> Path:
        """Resolve a single artifact, raising ArtifactNotFoundError if it is absent."""
        ...

    def resolve_transitive(
        self,
        coordinates: Sequence[MavenCoordinate],
        *,
        scopes: Collection[str],
    ) -> list[Path]:
        """
        Resolve coordinates and their dependency closure filtered by scope.

        The first path returned is always the first requested artifact.
        """
        ...


@runtime_checkable
class UrlResourceFetcher(Protocol):
    def fetch(self, url: str, default_extension: str) -> Path | None:
        """Fetch a URL to a local file, returning None if the resource does not exist."""
        ...
