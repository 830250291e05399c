from __future__ import annotations

import threading
from collections.abc import Collection, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from protoc_plugins.contracts import ArtifactNotFoundError, MavenCoordinate


@dataclass(frozen=True, slots=True)
class CollaboratorCall:
    """Record of a collaborator call for assertions in tests."""

    name: str
    args: tuple[Any, ...]
    kwargs: dict[str, Any]


class _RecordingFake:
    def __init__(self) -> None:
        # Resolution runs on worker threads.
        self._lock = threading.Lock()
        self._calls: list[CollaboratorCall] = []

    @property
    def calls(self) -> list[CollaboratorCall]:
        """Return the recorded calls in order."""
        with self._lock:
            return list(self._calls)

    def _record(self, name: str, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            self._calls.append(CollaboratorCall(name=name, args=args, kwargs=kwargs))


class FakeArtifactPathResolver(_RecordingFake):
    """
    In-memory ArtifactPathResolver for unit tests.

    `artifacts` maps coordinates to files; `closures` maps a root coordinate
    to the full list of paths `resolve_transitive` should return for it.
    """

    def __init__(
        self,
        artifacts: Mapping[MavenCoordinate, Path] | None = None,
        *,
        closures: Mapping[MavenCoordinate, Sequence[Path]] | None = None,
    ) -> None:
        super().__init__()
        self._artifacts = dict(artifacts or {})
        self._closures = {key: list(value) for key, value in (closures or {}).items()}

    def resolve_one(self, coordinate: MavenCoordinate) -> Path:
        self._record("resolve_one", coordinate)
        try:
            return self._artifacts[coordinate]
        except KeyError:
            raise ArtifactNotFoundError(f"Artifact {coordinate} was not found") from None

    def resolve_transitive(
        self,
        coordinates: Sequence[MavenCoordinate],
        *,
        scopes: Collection[str],
    ) -> list[Path]:
        self._record("resolve_transitive", tuple(coordinates), scopes=frozenset(scopes))
        paths: list[Path] = []
        for coordinate in coordinates:
            if coordinate in self._closures:
                paths.extend(self._closures[coordinate])
            elif coordinate in self._artifacts:
                paths.append(self._artifacts[coordinate])
            else:
                raise ArtifactNotFoundError(f"Artifact {coordinate} was not found")
        return paths


class FakeUrlResourceFetcher(_RecordingFake):
    """In-memory UrlResourceFetcher; unknown URLs behave as missing resources."""

    def __init__(self, resources: Mapping[str, Path] | None = None) -> None:
        super().__init__()
        self._resources = dict(resources or {})

    def fetch(self, url: str, default_extension: str) -> Path | None:
        self._record("fetch", url, default_extension)
        return self._resources.get(url)
