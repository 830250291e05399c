from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path

from protoc_plugins.contracts.errors import ResolutionError
from protoc_plugins.runtime.files import file_extension, file_name_without_extension
from protoc_plugins.runtime.host import HostSystem


class SystemPathBinaryResolver:
    """Finds executables on the host PATH using OS-specific matching rules."""

    def __init__(self, host: HostSystem, *, logger: logging.Logger | None = None) -> None:
        self._host = host
        self._logger = logger or logging.getLogger("protoc_plugins.system_path")

    def resolve(self, name: str) -> Path | None:
        self._logger.debug("Looking for executable matching name '%s' on PATH", name)
        if self._host.is_probably_windows():
            matches = self._windows_match(name)
        else:
            matches = _posix_match(name)

        for directory in self._host.system_path:
            try:
                # Sorted so the same PATH always yields the same answer.
                candidates = sorted(directory.iterdir())
            except PermissionError:
                self._logger.debug("Ignoring directory '%s' as access is denied", directory)
                continue
            except FileNotFoundError:
                continue
            except OSError as exc:
                raise ResolutionError(
                    f"An exception occurred while scanning the system PATH: {exc}"
                ) from exc

            for candidate in candidates:
                if matches(candidate):
                    self._logger.debug("Result for lookup of '%s' on PATH was %s", name, candidate)
                    return candidate

        self._logger.debug("No match found for '%s' on PATH", name)
        return None

    def _windows_match(self, name: str) -> Callable[[Path], bool]:
        expected = name.lower()

        def matches(path: Path) -> bool:
            extension = file_extension(path)
            return (
                file_name_without_extension(path).lower() == expected
                and extension is not None
                and extension.lower() in self._host.path_extensions
                and path.is_file()
            )

        return matches


def _posix_match(name: str) -> Callable[[Path], bool]:
    def matches(path: Path) -> bool:
        return path.name == name and path.is_file() and os.access(path, os.X_OK)

    return matches
