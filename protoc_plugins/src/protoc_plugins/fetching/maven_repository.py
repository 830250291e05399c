from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from collections import deque
from collections.abc import Collection, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from protoc_plugins.contracts.errors import ArtifactNotFoundError, ResolutionError
from protoc_plugins.contracts.plugin_contracts import MavenCoordinate

_PROPERTY_PATTERN = re.compile(r"\$\{([^}]+)\}")
_NON_TRANSITIVE_SCOPES = frozenset({"test", "provided"})
_TYPE_EXTENSIONS = {
    "jar": "jar",
    "test-jar": "jar",
    "bundle": "jar",
    "maven-plugin": "jar",
    "ejb": "jar",
}


@dataclass(frozen=True, slots=True)
class _PomDependency:
    coordinate: MavenCoordinate
    scope: str
    optional: bool
    system_path: str | None = None


@dataclass(slots=True)
class _Pom:
    properties: dict[str, str] = field(default_factory=dict)
    dependencies: list[_PomDependency] = field(default_factory=list)


class LocalRepositoryArtifactPathResolver:
    """
    Resolves Maven coordinates against a repository laid out on disk.

    Transitive resolution follows the `<dependencies>` of each POM with
    explicit versions; dependency management and remote downloads are the
    job of a real build tool and are not attempted here.
    """

    def __init__(
        self,
        repository_root: Path | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._root = (
            repository_root
            if repository_root is not None
            else Path.home() / ".m2" / "repository"
        )
        self._logger = logger or logging.getLogger("protoc_plugins.maven_repository")

    @property
    def repository_root(self) -> Path:
        return self._root

    def artifact_path(self, coordinate: MavenCoordinate) -> Path:
        extension = _TYPE_EXTENSIONS.get(coordinate.type or "jar", coordinate.type or "jar")
        classifier = f"-{coordinate.classifier}" if coordinate.classifier else ""
        file_name = f"{coordinate.artifact_id}-{coordinate.version}{classifier}.{extension}"
        return self._version_dir(coordinate) / file_name

    def resolve_one(self, coordinate: MavenCoordinate) -> Path:
        path = self.artifact_path(coordinate)
        self._logger.debug("Resolving %s to %s", coordinate, path)
        if not path.is_file():
            raise ArtifactNotFoundError(
                f"Artifact {coordinate} was not found in {self._root} (expected {path})"
            )
        return path

    def resolve_transitive(
        self,
        coordinates: Sequence[MavenCoordinate],
        *,
        scopes: Collection[str],
    ) -> list[Path]:
        allowed = frozenset(scopes)
        results: list[Path] = []
        seen: set[tuple[str, str, str | None]] = set()
        queue: deque[MavenCoordinate] = deque()

        for coordinate in coordinates:
            if _key(coordinate) not in seen:
                seen.add(_key(coordinate))
                queue.append(coordinate)

        while queue:
            coordinate = queue.popleft()
            results.append(self.resolve_one(coordinate))

            for dependency in self._read_pom(coordinate).dependencies:
                if dependency.scope not in allowed or dependency.optional:
                    continue
                if dependency.scope in _NON_TRANSITIVE_SCOPES:
                    continue
                key = _key(dependency.coordinate)
                if key in seen:
                    continue
                seen.add(key)
                if dependency.system_path is not None:
                    results.append(Path(dependency.system_path))
                    continue
                queue.append(dependency.coordinate)

        return results

    def _version_dir(self, coordinate: MavenCoordinate) -> Path:
        return (
            self._root.joinpath(*coordinate.group_id.split("."))
            / coordinate.artifact_id
            / coordinate.version
        )

    def _read_pom(self, coordinate: MavenCoordinate) -> _Pom:
        pom_path = (
            self._version_dir(coordinate) / f"{coordinate.artifact_id}-{coordinate.version}.pom"
        )
        if not pom_path.is_file():
            self._logger.debug("No POM for %s, assuming it has no dependencies", coordinate)
            return _Pom()

        try:
            root = ET.parse(pom_path).getroot()
        except (OSError, ET.ParseError) as exc:
            raise ResolutionError(f"Failed to read POM {pom_path}: {exc}") from exc

        _strip_namespaces(root)
        properties = {
            "project.groupId": coordinate.group_id,
            "project.artifactId": coordinate.artifact_id,
            "project.version": coordinate.version,
            "pom.version": coordinate.version,
        }
        props_element = root.find("properties")
        if props_element is not None:
            for prop in props_element:
                properties[prop.tag] = (prop.text or "").strip()

        pom = _Pom(properties=properties)
        deps_element = root.find("dependencies")
        if deps_element is None:
            return pom

        for dep in deps_element.findall("dependency"):
            parsed = self._parse_dependency(dep, properties, pom_path)
            if parsed is not None:
                pom.dependencies.append(parsed)
        return pom

    def _parse_dependency(
        self,
        element: ET.Element,
        properties: Mapping[str, str],
        pom_path: Path,
    ) -> _PomDependency | None:
        values = {
            name: _interpolate(_text(element, name), properties)
            for name in (
                "groupId",
                "artifactId",
                "version",
                "type",
                "classifier",
                "scope",
                "optional",
                "systemPath",
            )
        }
        group_id, artifact_id, version = (
            values["groupId"],
            values["artifactId"],
            values["version"],
        )
        if not group_id or not artifact_id or not version or "${" in version:
            self._logger.warning(
                "Ignoring dependency %s:%s in %s as it has no resolvable version",
                group_id,
                artifact_id,
                pom_path,
            )
            return None

        return _PomDependency(
            coordinate=MavenCoordinate(
                group_id=group_id,
                artifact_id=artifact_id,
                version=version,
                type=values["type"],
                classifier=values["classifier"],
            ),
            scope=values["scope"] or "compile",
            optional=(values["optional"] or "").lower() == "true",
            system_path=values["systemPath"],
        )


def _key(coordinate: MavenCoordinate) -> tuple[str, str, str | None]:
    return coordinate.group_id, coordinate.artifact_id, coordinate.classifier


def _text(element: ET.Element, tag: str) -> str | None:
    child = element.find(tag)
    if child is None or child.text is None:
        return None
    return child.text.strip() or None


def _interpolate(value: str | None, properties: Mapping[str, str]) -> str | None:
    if value is None:
        return None
    return _PROPERTY_PATTERN.sub(lambda m: properties.get(m.group(1), m.group(0)), value)


def _strip_namespaces(root: ET.Element) -> None:
    for element in root.iter():
        if isinstance(element.tag, str) and element.tag.startswith("{"):
            element.tag = element.tag.split("}", 1)[1]
