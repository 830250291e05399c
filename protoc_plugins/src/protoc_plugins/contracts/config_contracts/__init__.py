from .plugin_config import (
    BinaryMavenPluginEntry,
    JvmMavenPluginEntry,
    PathPluginEntry,
    PluginConfig,
    UrlPluginEntry,
)

__all__ = [
    "BinaryMavenPluginEntry",
    "JvmMavenPluginEntry",
    "PathPluginEntry",
    "PluginConfig",
    "UrlPluginEntry",
]
