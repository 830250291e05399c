from __future__ import annotations

import bz2
import gzip
import logging
import os
import shutil
import tarfile
import tempfile
import zipfile
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path, PurePosixPath
from typing import BinaryIO
from urllib.parse import urlparse
from urllib.request import url2pathname

import httpx

from protoc_plugins.contracts.errors import ResolutionError
from protoc_plugins.digests import sha256_hex
from protoc_plugins.runtime.temporary_space import TemporarySpace

_DECOMPRESSORS: dict[str, Callable[[BinaryIO], BinaryIO]] = {
    "gz": lambda stream: gzip.GzipFile(fileobj=stream),  # type: ignore[dict-item]
    "bz2": lambda stream: bz2.BZ2File(stream),  # type: ignore[dict-item]
}
_ARCHIVE_SCHEMES = frozenset({"zip", "jar", "tar", "tgz"})
_CHUNK_SIZE = 64 * 1024


class HttpUrlResourceFetcher:
    """
    Fetches plugin executables from URLs into build-scoped scratch space.

    Supports `file:`, `http:` and `https:` URLs, optionally nested inside
    decompression (`gz:`, `bz2:`) or archive member (`zip:`, `jar:`, `tar:`,
    `tgz:` with a `!/member` suffix) wrappers, e.g.
    `zip:https://example.com/plugins.zip!/bin/protoc-gen-foo`.
    """

    def __init__(
        self,
        temporary_space: TemporarySpace,
        *,
        client: httpx.Client | None = None,
        timeout: float = 30.0,
        logger: logging.Logger | None = None,
    ) -> None:
        self._temporary_space = temporary_space
        self._client = client
        self._timeout = timeout
        self._logger = logger or logging.getLogger("protoc_plugins.url_fetcher")

    def fetch(self, url: str, default_extension: str) -> Path | None:
        target_dir = self._temporary_space.create("url-fetches")
        target = target_dir / (sha256_hex(url) + _guess_extension(url, default_extension))
        self._logger.debug("Fetching %s to %s", url, target)

        with self._staging_file(target_dir) as staging:
            if not self._fetch_into(url, staging):
                self._logger.debug("Resource %s does not exist", url)
                return None
            os.replace(staging, target)
        return target

    def _fetch_into(self, url: str, destination: Path) -> bool:
        scheme, _, rest = url.partition(":")
        scheme = scheme.lower()

        if scheme in _DECOMPRESSORS:
            return self._fetch_decompressed(scheme, rest, destination)
        if scheme in _ARCHIVE_SCHEMES:
            return self._fetch_archive_member(scheme, rest, destination)
        if scheme == "file":
            return _copy_local_file(url, destination)
        if scheme in ("http", "https"):
            return self._download(url, destination)
        raise ResolutionError(f"Unsupported URL scheme '{scheme}' in {url}")

    def _fetch_decompressed(self, scheme: str, inner_url: str, destination: Path) -> bool:
        with self._staging_file(destination.parent) as compressed:
            if not self._fetch_into(inner_url, compressed):
                return False
            try:
                with compressed.open("rb") as raw, _DECOMPRESSORS[scheme](raw) as stream:
                    with destination.open("wb") as out:
                        shutil.copyfileobj(stream, out, _CHUNK_SIZE)
            except (OSError, EOFError) as exc:
                raise ResolutionError(f"Failed to decompress {inner_url}: {exc}") from exc
        return True

    def _fetch_archive_member(self, scheme: str, nested: str, destination: Path) -> bool:
        inner_url, sep, member = nested.rpartition("!/")
        if not sep or not member:
            raise ResolutionError(f"Archive URL '{scheme}:{nested}' must end with '!/<member>'")

        with self._staging_file(destination.parent) as archive:
            if not self._fetch_into(inner_url, archive):
                return False
            try:
                if scheme in ("zip", "jar"):
                    return _extract_zip_member(archive, member, destination)
                return _extract_tar_member(archive, member, destination)
            except (OSError, zipfile.BadZipFile, tarfile.TarError) as exc:
                raise ResolutionError(
                    f"Failed to extract '{member}' from {inner_url}: {exc}"
                ) from exc

    def _download(self, url: str, destination: Path) -> bool:
        try:
            with self._http_client() as client, client.stream("GET", url) as response:
                if response.status_code == httpx.codes.NOT_FOUND:
                    return False
                response.raise_for_status()
                with destination.open("wb") as out:
                    for chunk in response.iter_bytes(_CHUNK_SIZE):
                        out.write(chunk)
        except httpx.HTTPStatusError as exc:
            raise ResolutionError(
                f"Error response {exc.response.status_code} while requesting {url}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ResolutionError(f"An error occurred while requesting {url}: {exc}") from exc
        return True

    @contextmanager
    def _http_client(self) -> Iterator[httpx.Client]:
        if self._client is not None:
            yield self._client
            return
        with httpx.Client(timeout=self._timeout, follow_redirects=True) as client:
            yield client

    @staticmethod
    @contextmanager
    def _staging_file(directory: Path) -> Iterator[Path]:
        fd, name = tempfile.mkstemp(prefix=".fetch-", suffix=".part", dir=directory)
        os.close(fd)
        staging = Path(name)
        try:
            yield staging
        finally:
            staging.unlink(missing_ok=True)


def _copy_local_file(url: str, destination: Path) -> bool:
    source = Path(url2pathname(urlparse(url).path))
    if not source.is_file():
        return False
    shutil.copyfile(source, destination)
    return True


def _extract_zip_member(archive: Path, member: str, destination: Path) -> bool:
    with zipfile.ZipFile(archive) as zf:
        try:
            info = zf.getinfo(member)
        except KeyError:
            return False
        with zf.open(info) as stream, destination.open("wb") as out:
            shutil.copyfileobj(stream, out, _CHUNK_SIZE)
    return True


def _extract_tar_member(archive: Path, member: str, destination: Path) -> bool:
    with tarfile.open(archive, mode="r:*") as tf:
        try:
            info = tf.getmember(member)
        except KeyError:
            return False
        stream = tf.extractfile(info)
        if stream is None:
            return False
        with stream, destination.open("wb") as out:
            shutil.copyfileobj(stream, out, _CHUNK_SIZE)
    return True


def _guess_extension(url: str, default_extension: str) -> str:
    scheme, _, rest = url.partition(":")
    if scheme.lower() in _DECOMPRESSORS:
        # The compression suffix says nothing about the payload.
        inner = PurePosixPath(urlparse(rest.rsplit("!/", 1)[-1]).path)
        return PurePosixPath(inner.stem).suffix or default_extension
    candidate = url.rsplit("!/", 1)[-1] if "!/" in url else urlparse(url).path
    return PurePosixPath(candidate).suffix or default_extension
