from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ResolvedPlugin:
    """
    A plugin that protoc can invoke directly.

    `path` is always an executable file: either the native binary itself or a
    generated bootstrap script.
    """

    id: str
    path: Path
    order: int
    output_directory: Path
    options: str | None = None

    def to_protoc_args(self) -> list[str]:
        # protoc maps `--xxx_out` to a plugin registered as `protoc-gen-xxx`.
        args = [
            f"--plugin=protoc-gen-{self.id}={self.path}",
            f"--{self.id}_out={self.output_directory}",
        ]
        if self.options is not None:
            args.append(f"--{self.id}_opt={self.options}")
        return args
