from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar, Literal

if TYPE_CHECKING:
    from protoc_plugins.digests import Digest

PluginKind = Literal["binary-maven", "path", "url", "jvm-maven"]

DEFAULT_ORDER = 100_000
PATH_VERSION_SENTINEL = "PATH"


@dataclass(frozen=True, slots=True)
class MavenCoordinate:
    group_id: str
    artifact_id: str
    version: str
    type: str | None = None
    classifier: str | None = None

    def __str__(self) -> str:
        parts = [self.group_id, self.artifact_id, self.version]
        if self.type is not None or self.classifier is not None:
            parts.append(self.type or "jar")
        if self.classifier is not None:
            parts.append(self.classifier)
        return "mvn:" + ":".join(parts)


@dataclass(frozen=True, slots=True, kw_only=True)
class _PluginDeclaration:
    """Scheduling fields shared by every plugin declaration kind."""

    order: int = DEFAULT_ORDER
    skip: bool = False
    options: str | None = None
    output_directory: Path | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class _MavenPluginDeclaration(_PluginDeclaration):
    group_id: str
    artifact_id: str
    version: str
    type: str | None = None
    classifier: str | None = None

    def __post_init__(self) -> None:
        if not self.version or self.version == PATH_VERSION_SENTINEL:
            raise ValueError(
                f"{self.group_id}:{self.artifact_id} must declare an explicit version"
            )

    def coordinate(self) -> MavenCoordinate:
        return MavenCoordinate(
            group_id=self.group_id,
            artifact_id=self.artifact_id,
            version=self.version,
            type=self.type,
            classifier=self.classifier,
        )

    def __str__(self) -> str:
        return str(self.coordinate())


@dataclass(frozen=True, slots=True, kw_only=True)
class BinaryMavenPlugin(_MavenPluginDeclaration):
    """Native executable published to a Maven repository."""

    kind: ClassVar[PluginKind] = "binary-maven"


@dataclass(frozen=True, slots=True, kw_only=True)
class PathPlugin(_PluginDeclaration):
    """Native executable looked up on the system PATH."""

    kind: ClassVar[PluginKind] = "path"

    name: str
    optional: bool = False

    def __str__(self) -> str:
        return f"path:{self.name}"


@dataclass(frozen=True, slots=True, kw_only=True)
class UrlPlugin(_PluginDeclaration):
    """Native executable fetched from a (possibly nested) URL."""

    kind: ClassVar[PluginKind] = "url"

    url: str
    digest: Digest | None = None
    optional: bool = False

    def __str__(self) -> str:
        return f"url:{self.url}"


@dataclass(frozen=True, slots=True, kw_only=True)
class JvmMavenPlugin(_MavenPluginDeclaration):
    """
    Java application published to a Maven repository.

    Gets wrapped in an OS-specific bootstrap script so it can be invoked like
    any native plugin.
    """

    kind: ClassVar[PluginKind] = "jvm-maven"

    # None means "sniff it from the JAR manifest".
    main_class: str | None = None
    jvm_args: Sequence[str] | None = None
    jvm_config_args: Sequence[str] | None = None


PluginDeclaration = BinaryMavenPlugin | PathPlugin | UrlPlugin | JvmMavenPlugin
