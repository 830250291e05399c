from .maven_repository import LocalRepositoryArtifactPathResolver
from .url_fetcher import HttpUrlResourceFetcher

__all__ = [
    "HttpUrlResourceFetcher",
    "LocalRepositoryArtifactPathResolver",
]
