"""Custom exceptions for makedot."""


class MakedotError(Exception):
    """Base exception for all makedot errors."""

    pass


class MakefileNotFoundError(MakedotError):
    """Makefile not found at specified path."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Makefile not found: {path}")


class MakefileParseError(MakedotError):
    """Error reading or parsing a Makefile."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"Failed to parse {path}: {message}")


class MakefileSyntaxError(MakedotError):
    """Makefile text does not match the grammar."""

    def __init__(self, line: int, column: int, expected: str, context: list[str]) -> None:
        self.line = line
        self.column = column
        self.expected = expected
        self.context = context
        where = " > ".join(context) if context else "makefile"
        super().__init__(f"line {line}, column {column}: expected {expected} (in {where})")


class PathResolutionError(MakedotError):
    """External Makefile path could not be canonicalized."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"Cannot resolve {path}: {message}")


class TaskNotFoundError(MakedotError):
    """Task not found in any parsed Makefile."""

    def __init__(self, task: str) -> None:
        self.task = task
        super().__init__(f"Task not found: {task}")
