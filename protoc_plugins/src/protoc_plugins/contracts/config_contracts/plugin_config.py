from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from protoc_plugins.contracts.plugin_contracts import (
    DEFAULT_ORDER,
    BinaryMavenPlugin,
    JvmMavenPlugin,
    PathPlugin,
    PluginDeclaration,
    UrlPlugin,
)
from protoc_plugins.digests import Digest


class _PluginEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    order: int = DEFAULT_ORDER
    skip: bool = False
    options: str | None = None
    output_directory: Path | None = None

    def _common(self) -> dict[str, Any]:
        return {
            "order": self.order,
            "skip": self.skip,
            "options": self.options,
            "output_directory": self.output_directory,
        }


class _MavenPluginEntry(_PluginEntry):
    group_id: str = Field(min_length=1)
    artifact_id: str = Field(min_length=1)
    version: str = Field(min_length=1)
    type: str | None = None
    classifier: str | None = None

    @field_validator("version")
    @classmethod
    def _reject_path_sentinel(cls, value: str) -> str:
        if value == "PATH":
            raise ValueError("'PATH' is not a valid version for a Maven plugin, use kind 'path'")
        return value

    def _coordinate(self) -> dict[str, Any]:
        return {
            "group_id": self.group_id,
            "artifact_id": self.artifact_id,
            "version": self.version,
            "type": self.type,
            "classifier": self.classifier,
        }


class BinaryMavenPluginEntry(_MavenPluginEntry):
    kind: Literal["binary-maven"]

    def to_declaration(self) -> BinaryMavenPlugin:
        return BinaryMavenPlugin(**self._common(), **self._coordinate())


class PathPluginEntry(_PluginEntry):
    kind: Literal["path"]
    name: str = Field(min_length=1)
    optional: bool = False

    def to_declaration(self) -> PathPlugin:
        return PathPlugin(**self._common(), name=self.name, optional=self.optional)


class UrlPluginEntry(_PluginEntry):
    kind: Literal["url"]
    url: str = Field(min_length=1)
    digest: str | None = None
    optional: bool = False

    @field_validator("digest")
    @classmethod
    def _validate_digest(cls, value: str | None) -> str | None:
        if value is not None:
            Digest.parse(value)
        return value

    def to_declaration(self) -> UrlPlugin:
        return UrlPlugin(
            **self._common(),
            url=self.url,
            digest=Digest.parse(self.digest) if self.digest is not None else None,
            optional=self.optional,
        )


class JvmMavenPluginEntry(_MavenPluginEntry):
    kind: Literal["jvm-maven"]
    main_class: str | None = None
    jvm_args: list[str] | None = None
    jvm_config_args: list[str] | None = None

    def to_declaration(self) -> JvmMavenPlugin:
        return JvmMavenPlugin(
            **self._common(),
            **self._coordinate(),
            main_class=self.main_class,
            jvm_args=tuple(self.jvm_args) if self.jvm_args is not None else None,
            jvm_config_args=(
                tuple(self.jvm_config_args) if self.jvm_config_args is not None else None
            ),
        )


PluginEntry = Annotated[
    BinaryMavenPluginEntry | PathPluginEntry | UrlPluginEntry | JvmMavenPluginEntry,
    Field(discriminator="kind"),
]


class PluginConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    output_directory: Path
    plugins: list[PluginEntry] = Field(default_factory=list)

    @field_validator("plugins", mode="before")
    @classmethod
    def _coerce_plugins_list(cls, value: Any) -> list[Any]:
        if value is None:
            return []
        if isinstance(value, list):
            return value
        raise ValueError("plugins must be a list")

    def to_declarations(self) -> list[PluginDeclaration]:
        return [entry.to_declaration() for entry in self.plugins]
