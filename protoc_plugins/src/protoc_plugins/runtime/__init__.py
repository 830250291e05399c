"""Host, filesystem and scheduling helpers for plugin resolution."""

from protoc_plugins.runtime.concurrency import ConcurrentExecutor
from protoc_plugins.runtime.files import make_executable
from protoc_plugins.runtime.host import HostSystem
from protoc_plugins.runtime.temporary_space import TemporarySpace, resolve_scratch_root

__all__ = [
    "ConcurrentExecutor",
    "HostSystem",
    "TemporarySpace",
    "make_executable",
    "resolve_scratch_root",
]
