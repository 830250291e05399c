from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from protoc_plugins.digests import sha256_hex

_ENV_SCRATCH_ROOT = "PROTOC_PLUGINS_SCRATCH_ROOT"
_LOCAL_SCRATCH_DIRNAME = ".protoc-plugins"
_TEMP_SCRATCH_DIRNAME = "protoc-plugins-scratch"

_LOGGER = logging.getLogger("protoc_plugins.temporary_space")


def resolve_scratch_root() -> Path:
    """Resolve a writable scratch root directory and ensure it exists."""
    candidates: list[Path] = []

    env_value = os.environ.get(_ENV_SCRATCH_ROOT)
    if env_value:
        candidates.append(Path(env_value).expanduser())

    candidates.append(Path.cwd() / _LOCAL_SCRATCH_DIRNAME)
    candidates.append(Path(tempfile.gettempdir()) / _TEMP_SCRATCH_DIRNAME)

    for candidate in candidates:
        if _ensure_writable_dir(candidate):
            return candidate

    raise RuntimeError("Unable to resolve a writable scratch root directory.")


class TemporarySpace:
    """Build-scoped reusable scratch directories."""

    def __init__(self, root: Path | None = None) -> None:
        self._root = root if root is not None else resolve_scratch_root()

    @property
    def root(self) -> Path:
        return self._root

    def create(self, *bits: str) -> Path:
        # A digest of the fragments keeps the path short; long nested paths
        # break executable lookups on Windows.
        directory = self._root / sha256_hex("\0".join(bits))
        _LOGGER.debug("Creating scratch directory %s for <%s>", directory, ", ".join(bits))
        directory.mkdir(parents=True, exist_ok=True)
        return directory


def _ensure_writable_dir(path: Path) -> bool:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError:
        return False

    return _validate_writable(path)


def _validate_writable(path: Path) -> bool:
    test_file = path / ".write_test"
    try:
        with test_file.open("w", encoding="utf-8") as handle:
            handle.write("ok")
        test_file.unlink(missing_ok=True)
        return True
    except OSError:
        return False
