from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from protoc_plugins.configuration import load_plugin_config
from protoc_plugins.contracts import (
    ArtifactPathResolver,
    PluginDeclaration,
    ResolvedPlugin,
    UrlResourceFetcher,
)
from protoc_plugins.resolution.resolver import ProtocPluginResolver
from protoc_plugins.runtime.concurrency import ConcurrentExecutor
from protoc_plugins.runtime.host import HostSystem
from protoc_plugins.runtime.temporary_space import TemporarySpace

_LOGGER = logging.getLogger("protoc_plugins.api")


def resolve_plugins(
    declarations: Sequence[PluginDeclaration],
    *,
    output_directory: Path,
    artifact_resolver: ArtifactPathResolver,
    url_fetcher: UrlResourceFetcher,
    host: HostSystem | None = None,
    temporary_space: TemporarySpace | None = None,
    max_workers: int | None = None,
    logger: logging.Logger | None = None,
) -> list[ResolvedPlugin]:
    """Resolve a batch of declarations using a thread pool scoped to this call."""
    host = host or HostSystem.detect()
    temporary_space = temporary_space or TemporarySpace()
    _LOGGER.debug(
        "Resolving %d plugin(s) on %s/%s with scratch root %s",
        len(declarations),
        host.operating_system,
        host.cpu_architecture,
        temporary_space.root,
    )

    with ConcurrentExecutor(max_workers) as executor:
        resolver = ProtocPluginResolver(
            artifact_resolver,
            url_fetcher,
            host,
            temporary_space,
            executor=executor,
            logger=logger,
        )
        return resolver.resolve_plugins(declarations, output_directory)


def resolve_plugins_from_yaml(
    path: str | Path,
    *,
    artifact_resolver: ArtifactPathResolver,
    url_fetcher: UrlResourceFetcher,
    host: HostSystem | None = None,
    temporary_space: TemporarySpace | None = None,
    max_workers: int | None = None,
    logger: logging.Logger | None = None,
) -> list[ResolvedPlugin]:
    config = load_plugin_config(path)
    return resolve_plugins(
        config.to_declarations(),
        output_directory=config.output_directory,
        artifact_resolver=artifact_resolver,
        url_fetcher=url_fetcher,
        host=host,
        temporary_space=temporary_space,
        max_workers=max_workers,
        logger=logger,
    )


def build_protoc_plugin_args(plugins: Iterable[ResolvedPlugin]) -> list[str]:
    """Flatten resolved plugins into protoc command-line arguments, keeping their order."""
    return [arg for plugin in plugins for arg in plugin.to_protoc_args()]
