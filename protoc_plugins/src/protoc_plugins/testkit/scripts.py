from __future__ import annotations

_ANSI_C_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "\\": "\\", "'": "'"}
_ARGFILE_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "f": "\f"}


def split_shell_args(text: str) -> list[str]:
    """
    Split a quoted POSIX command line the way bash would.

    Understands single quotes, `$'...'` strings with their backslash escapes
    and backslash-newline continuations; variable expansion is not performed.
    """
    text = text.replace("\\\n", "")
    args: list[str] = []
    current: list[str] | None = None
    index = 0
    while index < len(text):
        char = text[index]
        if char.isspace():
            if current is not None:
                args.append("".join(current))
                current = None
            index += 1
            continue

        if current is None:
            current = []
        if char == "'":
            end = text.find("'", index + 1)
            if end < 0:
                raise ValueError("Unterminated single-quoted shell argument")
            current.append(text[index + 1 : end])
            index = end + 1
        elif text.startswith("$'", index):
            index += 2
            while True:
                if index >= len(text):
                    raise ValueError("Unterminated $'...' shell argument")
                if text[index] == "'":
                    index += 1
                    break
                if text[index] == "\\" and index + 1 < len(text):
                    escaped = text[index + 1]
                    current.append(_ANSI_C_ESCAPES.get(escaped, "\\" + escaped))
                    index += 2
                else:
                    current.append(text[index])
                    index += 1
        elif char == "\\" and index + 1 < len(text):
            current.append(text[index + 1])
            index += 2
        else:
            current.append(char)
            index += 1

    if current is not None:
        args.append("".join(current))
    return args


def split_batch_args(text: str) -> list[str]:
    """
    Split a batch command line whose arguments are all double-quoted.

    Inside quotes, `\"\"\"` stands for one literal quote; ` ^` + CRLF continues
    the line.
    """
    text = text.replace(" ^\r\n", " ")
    args: list[str] = []
    index = 0
    while index < len(text):
        if text[index].isspace():
            index += 1
            continue
        if text[index] != '"':
            raise ValueError(f"Unquoted batch argument at offset {index}: {text[index:]!r}")
        index += 1
        current: list[str] = []
        while True:
            if index >= len(text):
                raise ValueError("Unterminated quoted batch argument")
            if text.startswith('"""', index):
                current.append('"')
                index += 3
            elif text[index] == '"':
                index += 1
                break
            else:
                current.append(text[index])
                index += 1
        args.append("".join(current))
    return args


def split_argfile_args(text: str) -> list[str]:
    """
    Split a Java `@argfile` the way the `java` launcher reads it.

    Arguments are separated by whitespace; quoted arguments may contain
    whitespace and backslash escapes. Backslashes outside quotes are literal.
    """
    args: list[str] = []
    current: list[str] | None = None
    quote: str | None = None
    index = 0
    while index < len(text):
        char = text[index]
        if quote is not None:
            if char == quote:
                quote = None
            elif char == "\\" and index + 1 < len(text):
                index += 1
                escaped = text[index]
                current.append(_ARGFILE_ESCAPES.get(escaped, escaped))
            else:
                current.append(char)
        elif char.isspace():
            if current is not None:
                args.append("".join(current))
                current = None
        elif char == "#" and current is None:
            newline = text.find("\n", index)
            index = len(text) if newline < 0 else newline
            continue
        elif char in "'\"":
            quote = char
            if current is None:
                current = []
        else:
            if current is None:
                current = []
            current.append(char)
        index += 1

    if quote is not None:
        raise ValueError("Unterminated quoted argument in argument file")
    if current is not None:
        args.append("".join(current))
    return args


def script_command_args(script: str) -> list[str]:
    """Extract the launched command line from a generated bootstrap script."""
    if script.startswith("@echo off\r\n"):
        body = script.split("\r\n", 2)[2]
        return split_batch_args(body.removesuffix("\r\n"))
    return split_shell_args(script.split("\nexec ", 1)[1])
