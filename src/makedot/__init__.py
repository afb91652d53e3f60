"""makedot - Turn Makefiles and the Makefiles they invoke into one task graph."""

from makedot.core.emitter import render_dot
from makedot.core.graph import IDGenerator, build_graph
from makedot.core.grammar import parse
from makedot.core.models import (
    ExternalEdge,
    Makefile,
    ParsedMakefile,
    Task,
    TaskGraph,
    Variable,
    WalkResult,
)
from makedot.core.parser import GrammarMakefileParser, MakefileParser
from makedot.core.walker import MakefileWalker
from makedot.exceptions import (
    MakedotError,
    MakefileNotFoundError,
    MakefileParseError,
    MakefileSyntaxError,
    PathResolutionError,
    TaskNotFoundError,
)

__version__ = "0.1.0"

__all__ = [
    "parse",
    "Task",
    "Variable",
    "ParsedMakefile",
    "Makefile",
    "ExternalEdge",
    "WalkResult",
    "TaskGraph",
    "MakefileParser",
    "GrammarMakefileParser",
    "MakefileWalker",
    "IDGenerator",
    "build_graph",
    "render_dot",
    "MakedotError",
    "MakefileNotFoundError",
    "MakefileParseError",
    "MakefileSyntaxError",
    "PathResolutionError",
    "TaskNotFoundError",
]
