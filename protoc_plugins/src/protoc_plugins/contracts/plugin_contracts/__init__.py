from .collaborators import ArtifactPathResolver, UrlResourceFetcher
from .declarations import (
    DEFAULT_ORDER,
    BinaryMavenPlugin,
    JvmMavenPlugin,
    MavenCoordinate,
    PathPlugin,
    PluginDeclaration,
    PluginKind,
    UrlPlugin,
)
from .resolved import ResolvedPlugin

__all__ = [
    "ArtifactPathResolver",
    "UrlResourceFetcher",
    "DEFAULT_ORDER",
    "BinaryMavenPlugin",
    "JvmMavenPlugin",
    "MavenCoordinate",
    "PathPlugin",
    "PluginDeclaration",
    "PluginKind",
    "UrlPlugin",
    "ResolvedPlugin",
]
