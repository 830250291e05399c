"""
Shell, batch and Java argument file quoting for generated bootstrap scripts.

Every script argument is quoted unconditionally so paths and options
containing spaces or shell metacharacters survive unchanged. Long command
lines are wrapped with line continuations to keep the scripts readable.

The JVM command line itself goes into a Java `@argfile`, since a realistic
classpath easily exceeds the 8191 character limit of cmd.exe.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

_LINE_LENGTH_TARGET = 99
_INDENT = " " * 4

_SHELL_REPLACEMENTS = {
    "'": "'\\''",
    "\n": "'$'\\n''",
    "\r": "'$'\\r''",
    "\t": "'$'\\t''",
}

_ARGFILE_REPLACEMENTS = {
    '"': '\\"',
    "'": "\\'",
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}
# Outside quotes the launcher splits on whitespace and reads '#' as a comment.
_ARGFILE_SPECIAL_CHARS = frozenset(" \n\r\t\f'\"#")


def quote_shell_arg(arg: str) -> str:
    return "'" + "".join(_SHELL_REPLACEMENTS.get(char, char) for char in arg) + "'"


def quote_batch_arg(arg: str) -> str:
    # Characters batch treats specially are already illegal in Windows file
    # names, so only the quote itself needs escaping.
    return '"' + arg.replace('"', '"""') + '"'


def quote_argfile_arg(arg: str) -> str:
    # Unquoted backslashes are literal, which keeps Windows paths readable.
    if arg and not _ARGFILE_SPECIAL_CHARS.intersection(arg):
        return arg
    return '"' + "".join(_ARGFILE_REPLACEMENTS.get(char, char) for char in arg) + '"'


def quote_shell_args(args: Iterable[str]) -> str:
    return _join(args, quote_shell_arg, " \\\n")


def quote_batch_args(args: Iterable[str]) -> str:
    return _join(args, quote_batch_arg, " ^\r\n")


def quote_argfile_args(args: Iterable[str]) -> str:
    """Render arguments as a Java argument file, one argument per line."""
    return "".join(quote_argfile_arg(arg) + "\n" for arg in args)


def _join(args: Iterable[str], quoter: Callable[[str], str], continuation: str) -> str:
    quoted = [quoter(arg) for arg in args]
    if not quoted:
        return ""

    parts = [quoted[0]]
    line_length = len(quoted[0])
    for item in quoted[1:]:
        if line_length + len(item) >= _LINE_LENGTH_TARGET:
            parts.append(continuation + _INDENT)
            line_length = len(_INDENT)
        else:
            parts.append(" ")
            line_length += 1
        parts.append(item)
        line_length += len(item)
    return "".join(parts)
