"""Find make sub-invocations in recipe lines.

This is a textual heuristic: it knows nothing about shell quoting and does not
recognize ``$(MAKE)`` or other variables used as the make program.
"""

import logging
import os
import re
from collections.abc import Iterator

from makedot.core.models import MakeInvocation

logger = logging.getLogger(__name__)

# The word "make" and its arguments up to a comment, pipe, "&", redirect or ";".
MAKE_COMMAND = re.compile(r"\bmake((?:[ \t]|\\\r?\n)(?:\\\r?\n|[^\r\n#|&>;])*)")
CONTINUATION = re.compile(r"\\\r?\n")
ARGUMENT = re.compile(r"(?:\\ |\S)+")
POSITIONAL = re.compile(r"\w[^=:/\s]*")
NUMBER = re.compile(r"\d+(?:\.\d+)?")

DIRECTORY_OPTIONS = ("-C", "--directory")
FILE_OPTIONS = ("-f", "--file", "--makefile")
# Options whose value is the next argument.
VALUE_OPTIONS = (
    "-I",
    "-o",
    "-W",
    "--include-dir",
    "--old-file",
    "--assume-old",
    "--new-file",
    "--assume-new",
    "--what-if",
)
# Options that take an optional numeric value.
NUMERIC_OPTIONS = ("-j", "--jobs", "-l", "--load-average", "--max-load")


def _long_value(argument: str, options: tuple[str, ...]) -> str | None:
    for option in options:
        if option.startswith("--") and argument.startswith(f"{option}="):
            return argument[len(option) + 1 :]
    return None


def parse_arguments(arguments: str) -> MakeInvocation | None:
    """Extract the target path and requested tasks from make's arguments."""
    words = [word.replace("\\ ", " ") for word in ARGUMENT.findall(CONTINUATION.sub(" ", arguments))]
    directories: list[str] = []
    makefile: str | None = None
    tasks: list[str] = []

    index = 0
    while index < len(words):
        word = words[index]
        index += 1
        if word in DIRECTORY_OPTIONS or word in FILE_OPTIONS:
            if index < len(words):
                if word in DIRECTORY_OPTIONS:
                    directories.append(words[index])
                else:
                    makefile = words[index]
                index += 1
        elif (value := _long_value(word, DIRECTORY_OPTIONS)) is not None:
            directories.append(value)
        elif (value := _long_value(word, FILE_OPTIONS)) is not None:
            makefile = value
        elif word.startswith("-C") and not word.startswith("--"):
            directories.append(word[2:])
        elif word.startswith("-f") and not word.startswith("--"):
            makefile = word[2:]
        elif word in VALUE_OPTIONS:
            index += 1
        elif word in NUMERIC_OPTIONS:
            if index < len(words) and NUMBER.fullmatch(words[index]):
                index += 1
        elif word.startswith("-"):
            continue
        elif POSITIONAL.fullmatch(word):
            tasks.append(word)

    if not directories and makefile is None:
        return None

    parts = [*directories, makefile] if makefile is not None else directories
    return MakeInvocation(path=os.path.join(*parts), tasks=tuple(tasks))


def scan_all(command: str) -> Iterator[MakeInvocation]:
    """Yield every make invocation with a -C/-f target in a recipe line."""
    for match in MAKE_COMMAND.finditer(command):
        invocation = parse_arguments(match.group(1))
        if invocation is None:
            continue
        logger.debug(f"Parsed make invocation {invocation.path!r} {list(invocation.tasks)!r}")
        yield invocation


def scan(command: str) -> MakeInvocation | None:
    """Return the first make invocation in a recipe line, if any."""
    return next(scan_all(command), None)
