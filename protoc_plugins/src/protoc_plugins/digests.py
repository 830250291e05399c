from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from typing import BinaryIO

from protoc_plugins.contracts.errors import IntegrityError

_DIGEST_PATTERN = re.compile(r"^(?P<algorithm>[-a-z0-9]+):(?P<digest>[0-9a-f]+)$", re.IGNORECASE)
_ALIASES = {
    "sha1": "sha1",
    "sha-1": "sha1",
    "sha224": "sha224",
    "sha-224": "sha224",
    "sha256": "sha256",
    "sha-256": "sha256",
    "sha384": "sha384",
    "sha-384": "sha384",
    "sha512": "sha512",
    "sha-512": "sha512",
}
_CHUNK_SIZE = 4096


@dataclass(frozen=True, slots=True)
class Digest:
    algorithm: str
    expected_hex: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "algorithm", _canonical_algorithm(self.algorithm))
        object.__setattr__(self, "expected_hex", self.expected_hex.lower())

    def __str__(self) -> str:
        return f"{self.algorithm}:{self.expected_hex}"

    @classmethod
    def parse(cls, raw: str) -> Digest:
        """Parse `<algorithm>:<hex>`; whitespace anywhere is ignored."""
        compact = "".join(raw.split())
        match = _DIGEST_PATTERN.match(compact)
        if match is None:
            raise ValueError(
                f"Failed to parse digest '{compact}'. Ensure that the digest is in a format "
                "such as 'sha512:1a2b3c4d', where the digest is a hexadecimal-encoded string."
            )
        return cls(algorithm=match.group("algorithm"), expected_hex=match.group("digest"))

    @staticmethod
    def compute(algorithm: str, data: bytes | BinaryIO) -> str:
        hasher = hashlib.new(_canonical_algorithm(algorithm))
        if isinstance(data, bytes):
            hasher.update(data)
        else:
            for chunk in iter(lambda: data.read(_CHUNK_SIZE), b""):
                hasher.update(chunk)
        return hasher.hexdigest()

    def matches(self, stream: BinaryIO) -> bool:
        return self.compute(self.algorithm, stream) == self.expected_hex

    def verify(self, stream: BinaryIO) -> None:
        actual = self.compute(self.algorithm, stream)
        if actual != self.expected_hex:
            raise IntegrityError(
                f"Digest mismatch: expected {self.algorithm}:{self.expected_hex}, "
                f"got {self.algorithm}:{actual}"
            )


def sha1_hex(text: str) -> str:
    return hashlib.sha1(text.encode("utf-8")).hexdigest()


def sha256_hex(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def _canonical_algorithm(algorithm: str) -> str:
    try:
        return _ALIASES[algorithm.strip().lower()]
    except KeyError as e:
        raise ValueError(f"No digest named {algorithm} is supported") from e
