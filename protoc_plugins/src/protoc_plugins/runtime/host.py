from __future__ import annotations

import os
import platform
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from protoc_plugins.runtime.files import normalize


@dataclass(frozen=True, slots=True)
class HostSystem:
    """
    Snapshot of the platform the build runs on.

    Construct it directly in tests; use `detect()` for the real host.
    """

    operating_system: str
    cpu_architecture: str
    system_path: tuple[Path, ...] = ()
    path_extensions: frozenset[str] = field(default_factory=frozenset)
    path_separator: str = os.pathsep
    java_home: Path | None = None

    @classmethod
    def detect(cls, environ: Mapping[str, str] | None = None) -> HostSystem:
        env = os.environ if environ is None else environ
        java_home = env.get("JAVA_HOME", "").strip()
        return cls(
            operating_system=platform.system(),
            cpu_architecture=platform.machine(),
            system_path=parse_system_path(env.get("PATH", "")),
            path_extensions=parse_path_extensions(env.get("PATHEXT", "")),
            path_separator=os.pathsep,
            java_home=normalize(java_home) if java_home else None,
        )

    def is_probably_linux(self) -> bool:
        return self.operating_system.lower().startswith("linux")

    def is_probably_mac_os(self) -> bool:
        name = self.operating_system.lower()
        return name.startswith("darwin") or name.startswith("mac")

    def is_probably_windows(self) -> bool:
        return self.operating_system.lower().startswith("windows")

    def java_executable(self) -> Path | None:
        if self.java_home is None:
            return None
        name = "java.exe" if self.is_probably_windows() else "java"
        return self.java_home / "bin" / name


def parse_system_path(raw: str, *, separator: str = os.pathsep) -> tuple[Path, ...]:
    """Split PATH into existing, de-duplicated directories, keeping their order."""
    seen: dict[Path, None] = {}
    for token in raw.split(separator):
        token = token.strip()
        if not token:
            continue
        candidate = normalize(token)
        if candidate.is_dir():
            seen.setdefault(candidate, None)
    return tuple(seen)


def parse_path_extensions(raw: str, *, separator: str = os.pathsep) -> frozenset[str]:
    return frozenset(token.strip().lower() for token in raw.split(separator) if token.strip())
