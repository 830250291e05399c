from .fakes import CollaboratorCall, FakeArtifactPathResolver, FakeUrlResourceFetcher
from .scripts import (
    script_command_args,
    split_argfile_args,
    split_batch_args,
    split_shell_args,
)

__all__ = [
    "CollaboratorCall",
    "FakeArtifactPathResolver",
    "FakeUrlResourceFetcher",
    "script_command_args",
    "split_argfile_args",
    "split_batch_args",
    "split_shell_args",
]
