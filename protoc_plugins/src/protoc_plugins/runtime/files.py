from __future__ import annotations

import logging
import os
import shutil
import stat
import tempfile
from pathlib import Path

_LOGGER = logging.getLogger("protoc_plugins.files")


def normalize(path: str | Path) -> Path:
    return Path(os.path.abspath(Path(path).expanduser()))


def file_name_without_extension(path: Path) -> str:
    name = path.name
    dot = name.rfind(".")
    # A leading dot (".profile") is part of the name, not an extension.
    return name if dot <= 0 else name[:dot]


def file_extension(path: Path) -> str | None:
    name = path.name
    dot = name.rfind(".")
    return None if dot <= 0 else name[dot:]


def make_executable(path: Path) -> None:
    """Add the owner execute bit to a file; safe to call repeatedly."""
    _LOGGER.debug("Ensuring %s is executable", path)
    if os.name == "nt":
        # Windows decides executability by extension, not by mode bits.
        return
    mode = path.stat().st_mode
    if mode & stat.S_IXUSR:
        return
    path.chmod(mode | stat.S_IXUSR)


def copy_atomically(source: Path, target: Path) -> Path:
    """
    Copy a file so that concurrent readers never observe a partial target.

    The copy is staged next to the target and then renamed over it.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, staging_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=target.parent)
    staging = Path(staging_name)
    try:
        with os.fdopen(fd, "wb") as out_handle, source.open("rb") as in_handle:
            shutil.copyfileobj(in_handle, out_handle)
        shutil.copymode(source, staging)
        os.replace(staging, target)
    except BaseException:
        staging.unlink(missing_ok=True)
        raise
    return target


def write_text_atomically(
    target: Path, content: str, *, encoding: str, executable: bool = False
) -> Path:
    """Write text through a staging file renamed over the target."""
    data = content.encode(encoding)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, staging_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=target.parent)
    staging = Path(staging_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        if executable:
            make_executable(staging)
        os.replace(staging, target)
    except BaseException:
        staging.unlink(missing_ok=True)
        raise
    return target
