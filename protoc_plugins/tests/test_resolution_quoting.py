import os
import shutil
import subprocess

import pytest

from protoc_plugins.resolution.quoting import (
    quote_argfile_arg,
    quote_argfile_args,
    quote_batch_arg,
    quote_batch_args,
    quote_shell_arg,
    quote_shell_args,
)
from protoc_plugins.testkit.scripts import (
    split_argfile_args,
    split_batch_args,
    split_shell_args,
)

TRICKY_ARGS = [
    "/usr/lib/jvm/java 17/bin/java",
    "it's",
    "$HOME",
    "`id`",
    "semi;colon && echo pwned",
    'double "quoted"',
    "back\\slash",
    "",
    "-Dgreeting=hello world",
    "line\nbreak",
    "tab\there",
    "carriage\rreturn",
]


def test_quote_shell_arg_escapes_single_quotes_and_control_characters():
    assert quote_shell_arg("plain") == "'plain'"
    assert quote_shell_arg("") == "''"
    assert quote_shell_arg("it's") == "'it'\\''s'"
    assert quote_shell_arg("a\nb") == "'a'$'\\n''b'"
    assert quote_shell_arg("a\tb\r") == "'a'$'\\t''b'$'\\r'''"


def test_quote_batch_arg_doubles_quotes():
    assert quote_batch_arg("C:\\Program Files\\Java") == '"C:\\Program Files\\Java"'
    assert quote_batch_arg('say "hi"') == '"say """hi""""'


def test_shell_quoting_round_trips_through_a_shell_splitter():
    assert split_shell_args(quote_shell_args(TRICKY_ARGS)) == TRICKY_ARGS


def test_batch_quoting_round_trips_through_a_batch_splitter():
    assert split_batch_args(quote_batch_args(TRICKY_ARGS)) == TRICKY_ARGS


def test_long_command_lines_wrap_with_continuations():
    args = [f"/some/long/path/to/dependency-{index}.jar" for index in range(20)]

    shell = quote_shell_args(args)
    batch = quote_batch_args(args)

    shell_lines = shell.split("\n")
    batch_lines = batch.split("\r\n")
    assert len(shell_lines) > 1
    assert len(batch_lines) > 1
    for line in shell_lines[:-1]:
        assert line.endswith(" \\")
    for line in batch_lines[:-1]:
        assert line.endswith(" ^")
    for line in shell_lines[1:]:
        assert line.startswith("    '")
    for line in shell_lines:
        assert len(line.removesuffix(" \\")) <= 99
    assert split_shell_args(shell) == args
    assert split_batch_args(batch) == args


def test_empty_argument_list_quotes_to_nothing():
    assert quote_shell_args([]) == ""
    assert quote_batch_args([]) == ""


def test_quote_argfile_arg_only_quotes_when_needed():
    assert quote_argfile_arg("-classpath") == "-classpath"
    assert quote_argfile_arg("C:\\Users\\me\\gen.jar") == "C:\\Users\\me\\gen.jar"
    assert quote_argfile_arg("") == '""'
    assert quote_argfile_arg("C:\\Program Files\\gen.jar") == '"C:\\\\Program Files\\\\gen.jar"'
    assert quote_argfile_arg("it's") == '"it\\\'s"'
    assert quote_argfile_arg("#hash") == '"#hash"'
    assert quote_argfile_arg("a\nb\tc") == '"a\\nb\\tc"'


def test_argfile_quoting_round_trips_through_an_argfile_splitter():
    rendered = quote_argfile_args(TRICKY_ARGS)

    assert rendered.count("\n") == len(TRICKY_ARGS)
    assert split_argfile_args(rendered) == TRICKY_ARGS


def test_argfile_splitter_skips_comments():
    assert split_argfile_args("# launcher args\n-cp\n'a b'\n") == ["-cp", "a b"]


@pytest.mark.skipif(os.name == "nt" or shutil.which("bash") is None, reason="needs bash")
def test_shell_quoting_survives_a_real_shell():
    script = "printf '%s\\0' " + quote_shell_args(TRICKY_ARGS)

    completed = subprocess.run(["bash", "-c", script], capture_output=True, check=True)

    assert completed.stdout.decode("utf-8").split("\0")[:-1] == TRICKY_ARGS
