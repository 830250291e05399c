from __future__ import annotations

import dataclasses
import logging
from collections.abc import Sequence
from concurrent.futures import Future
from pathlib import Path
from typing import assert_never

from protoc_plugins.contracts import (
    ArtifactPathResolver,
    BinaryMavenPlugin,
    JvmMavenPlugin,
    PathPlugin,
    PluginDeclaration,
    PluginResolutionError,
    ResolutionError,
    ResolvedPlugin,
    ResourceNotFoundError,
    UrlPlugin,
    UrlResourceFetcher,
)
from protoc_plugins.digests import Digest, sha1_hex
from protoc_plugins.resolution.java_apps import JavaApp, JavaAppToExecutableFactory
from protoc_plugins.resolution.platform import PlatformClassifierFactory
from protoc_plugins.resolution.system_path import SystemPathBinaryResolver
from protoc_plugins.runtime.concurrency import ConcurrentExecutor
from protoc_plugins.runtime.files import copy_atomically, make_executable
from protoc_plugins.runtime.host import HostSystem
from protoc_plugins.runtime.temporary_space import TemporarySpace

JVM_DEPENDENCY_SCOPES = frozenset({"compile", "runtime", "system"})
DEFAULT_BINARY_TYPE = "exe"
DEFAULT_URL_EXTENSION = ".exe"


class ProtocPluginResolver:
    """
    Resolves protoc plugin declarations of every kind into executable paths.

    Declarations are resolved concurrently; the returned list is always
    ordered by each plugin's `order`, ties keeping declaration order.
    """

    def __init__(
        self,
        artifact_resolver: ArtifactPathResolver,
        url_fetcher: UrlResourceFetcher,
        host: HostSystem,
        temporary_space: TemporarySpace,
        *,
        executor: ConcurrentExecutor,
        classifier_factory: PlatformClassifierFactory | None = None,
        path_resolver: SystemPathBinaryResolver | None = None,
        java_app_factory: JavaAppToExecutableFactory | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._artifact_resolver = artifact_resolver
        self._url_fetcher = url_fetcher
        self._temporary_space = temporary_space
        self._executor = executor
        self._logger = logger or logging.getLogger("protoc_plugins.resolver")
        self._classifier_factory = classifier_factory or PlatformClassifierFactory(host)
        self._path_resolver = path_resolver or SystemPathBinaryResolver(host)
        self._java_app_factory = java_app_factory or JavaAppToExecutableFactory(
            host, temporary_space, self._path_resolver
        )

    def resolve_plugins(
        self,
        plugins: Sequence[PluginDeclaration],
        default_output_directory: Path,
    ) -> list[ResolvedPlugin]:
        futures: list[Future[ResolvedPlugin | None]] = []
        for index, plugin in enumerate(plugins):
            if plugin.skip:
                self._logger.info("Skipping plugin %s", plugin)
                continue
            futures.append(
                self._executor.submit(self._resolve_task, plugin, default_output_directory, index)
            )

        results = self._executor.await_all(futures)
        resolved = [result for result in results if result is not None]
        # sorted() is stable, so equal orders keep their declaration order.
        return sorted(resolved, key=lambda resolved_plugin: resolved_plugin.order)

    def _resolve_task(
        self,
        plugin: PluginDeclaration,
        default_output_directory: Path,
        index: int,
    ) -> ResolvedPlugin | None:
        try:
            return self._resolve(plugin, default_output_directory, index)
        except Exception as exc:
            raise PluginResolutionError(plugin, index, exc) from exc

    def _resolve(
        self,
        plugin: PluginDeclaration,
        default_output_directory: Path,
        index: int,
    ) -> ResolvedPlugin | None:
        match plugin:
            case BinaryMavenPlugin():
                return self._resolve_binary_maven_plugin(plugin, default_output_directory, index)
            case PathPlugin():
                return self._resolve_path_plugin(plugin, default_output_directory, index)
            case UrlPlugin():
                return self._resolve_url_plugin(plugin, default_output_directory, index)
            case JvmMavenPlugin():
                return self._resolve_jvm_maven_plugin(plugin, default_output_directory, index)
            case _:
                assert_never(plugin)

    def _resolve_binary_maven_plugin(
        self,
        plugin: BinaryMavenPlugin,
        default_output_directory: Path,
        index: int,
    ) -> ResolvedPlugin:
        if plugin.classifier is None:
            plugin = dataclasses.replace(
                plugin, classifier=self._classifier_factory.classifier_for(plugin.artifact_id)
            )
        if plugin.type is None:
            plugin = dataclasses.replace(plugin, type=DEFAULT_BINARY_TYPE)

        self._logger.debug("Resolving binary Maven protoc plugin %s", plugin)
        cached_path = self._artifact_resolver.resolve_one(plugin.coordinate())

        # Never touch the shared repository copy: other builds may be reading it.
        with cached_path.open("rb") as handle:
            content_digest = Digest.compute("sha256", handle)
        scratch_dir = self._temporary_space.create("plugins", "binary-maven", content_digest)
        path = copy_atomically(cached_path, scratch_dir / cached_path.name)
        make_executable(path)

        return self._create_resolved_plugin(
            plugin, default_output_directory, path, _compute_id(str(path), index)
        )

    def _resolve_path_plugin(
        self,
        plugin: PathPlugin,
        default_output_directory: Path,
        index: int,
    ) -> ResolvedPlugin | None:
        self._logger.debug("Resolving binary path protoc plugin %s", plugin)
        path = self._path_resolver.resolve(plugin.name)

        if path is None:
            if plugin.optional:
                self._logger.info("Skipping unresolved missing plugin %s", plugin)
                return None
            raise ResourceNotFoundError(
                f"No plugin named '{plugin.name}' was found on the system path"
            )

        return self._create_resolved_plugin(
            plugin, default_output_directory, path, _compute_id(str(path), index)
        )

    def _resolve_url_plugin(
        self,
        plugin: UrlPlugin,
        default_output_directory: Path,
        index: int,
    ) -> ResolvedPlugin | None:
        self._logger.debug("Resolving binary URL protoc plugin %s", plugin)
        path = self._url_fetcher.fetch(plugin.url, DEFAULT_URL_EXTENSION)

        if path is None:
            if plugin.optional:
                self._logger.info("Skipping unresolved missing plugin %s", plugin)
                return None
            raise ResourceNotFoundError(f"Plugin at {plugin.url} does not exist")

        if plugin.digest is not None:
            self._logger.debug("Verifying digest of %s against %s", plugin.url, plugin.digest)
            try:
                with path.open("rb") as handle:
                    plugin.digest.verify(handle)
            except OSError as exc:
                raise ResolutionError(
                    f"Failed to compute digest of '{plugin.url}': {exc}"
                ) from exc

        make_executable(path)

        return self._create_resolved_plugin(
            plugin, default_output_directory, path, _compute_id(str(path), index)
        )

    def _resolve_jvm_maven_plugin(
        self,
        plugin: JvmMavenPlugin,
        default_output_directory: Path,
        index: int,
    ) -> ResolvedPlugin:
        self._logger.debug(
            "Resolving JVM-based Maven protoc plugin %s and generating bootstrap scripts", plugin
        )
        dependencies = self._artifact_resolver.resolve_transitive(
            [plugin.coordinate()], scopes=JVM_DEPENDENCY_SCOPES
        )
        if not dependencies:
            raise ResolutionError(f"No artifacts were resolved for JVM plugin {plugin}")

        plugin_id = _compute_id(_jvm_plugin_identity(plugin), index)
        app = JavaApp(
            unique_name=plugin_id,
            dependencies=tuple(dependencies),
            main_class=plugin.main_class,
            jvm_args=plugin.jvm_args,
            jvm_config_args=plugin.jvm_config_args,
        )
        path = self._java_app_factory.to_executable(app)

        return self._create_resolved_plugin(plugin, default_output_directory, path, plugin_id)

    @staticmethod
    def _create_resolved_plugin(
        plugin: PluginDeclaration,
        default_output_directory: Path,
        path: Path,
        plugin_id: str,
    ) -> ResolvedPlugin:
        return ResolvedPlugin(
            id=plugin_id,
            path=path,
            order=plugin.order,
            output_directory=plugin.output_directory or default_output_directory,
            options=plugin.options,
        )


def _compute_id(identity: str, index: int) -> str:
    # The index keeps repeated declarations of the same plugin apart.
    return f"{index}_{sha1_hex(identity)}"


def _jvm_plugin_identity(plugin: JvmMavenPlugin) -> str:
    # Every field that ends up in the generated script takes part.
    return repr(
        (
            str(plugin),
            plugin.main_class,
            None if plugin.jvm_args is None else tuple(plugin.jvm_args),
            None if plugin.jvm_config_args is None else tuple(plugin.jvm_config_args),
        )
    )
