from protoc_plugins.resolution.java_apps import JavaApp, JavaAppToExecutableFactory
from protoc_plugins.resolution.platform import PlatformClassifierFactory
from protoc_plugins.resolution.resolver import ProtocPluginResolver
from protoc_plugins.resolution.system_path import SystemPathBinaryResolver

__all__ = [
    "JavaApp",
    "JavaAppToExecutableFactory",
    "PlatformClassifierFactory",
    "ProtocPluginResolver",
    "SystemPathBinaryResolver",
]
