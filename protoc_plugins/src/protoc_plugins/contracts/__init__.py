from .errors import (
    ArtifactNotFoundError,
    IntegrityError,
    PluginResolutionError,
    ResolutionError,
    ResourceNotFoundError,
    UnsupportedPlatformError,
)
from .plugin_contracts import (
    DEFAULT_ORDER,
    ArtifactPathResolver,
    BinaryMavenPlugin,
    JvmMavenPlugin,
    MavenCoordinate,
    PathPlugin,
    PluginDeclaration,
    PluginKind,
    ResolvedPlugin,
    UrlPlugin,
    UrlResourceFetcher,
)

__all__ = [
    "ArtifactNotFoundError",
    "IntegrityError",
    "PluginResolutionError",
    "ResolutionError",
    "ResourceNotFoundError",
    "UnsupportedPlatformError",
    "DEFAULT_ORDER",
    "ArtifactPathResolver",
    "BinaryMavenPlugin",
    "JvmMavenPlugin",
    "MavenCoordinate",
    "PathPlugin",
    "PluginDeclaration",
    "PluginKind",
    "ResolvedPlugin",
    "UrlPlugin",
    "UrlResourceFetcher",
]
