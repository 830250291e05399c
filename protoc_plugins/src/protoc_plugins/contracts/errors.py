from __future__ import annotations


class ResolutionError(Exception):
    pass


class ResourceNotFoundError(ResolutionError):
    """Raised when the thing being resolved does not exist."""


class ArtifactNotFoundError(ResourceNotFoundError):
    pass


class IntegrityError(ResolutionError):
    """Raised when a fetched resource does not match its declared digest."""


class UnsupportedPlatformError(ResolutionError):
    pass


class PluginResolutionError(ResolutionError):
    """
    First fatal failure of a resolution batch.

    Carries the offending declaration and its position in the batch so the
    build can report which plugin broke.
    """

    def __init__(self, plugin: object, index: int, cause: BaseException) -> None:
        kind = getattr(plugin, "kind", type(plugin).__name__)
        super().__init__(f"Failed to resolve {kind} plugin #{index} ({plugin}): {cause}")
        self.plugin = plugin
        self.index = index
        self.kind = kind
        self.cause = cause
