"""Data models for Makefile parsing and graph assembly."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# Syntactic terms produced by the grammar, one per logical line or span.


@dataclass
class TaskTerm:
    """A rule: target name, prerequisites and recipe lines."""

    name: str
    dependencies: list[str] = field(default_factory=list)
    commands: list[str] = field(default_factory=list)


@dataclass
class VariableTerm:
    """A variable assignment."""

    name: str
    operator: str
    value: str


@dataclass
class EmptyTerm:
    """Blank line or comment-only line."""


@dataclass
class UnimplementedTerm:
    """Construct that is recognized but not interpreted."""

    reason: str


Term = TaskTerm | VariableTerm | EmptyTerm | UnimplementedTerm


@dataclass
class Task:
    """A task after all rules for the same name have been merged."""

    name: str
    dependencies: list[str] = field(default_factory=list)
    commands: list[str] = field(default_factory=list)
    is_phony: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "name": self.name,
            "dependencies": self.dependencies,
            "commands": self.commands,
            "is_phony": self.is_phony,
        }


@dataclass
class Variable:
    """A variable definition, last assignment wins."""

    name: str
    operator: str
    value: str


@dataclass
class ParsedMakefile:
    """One file after parsing and term assembly, keyed by task name."""

    path: Path
    tasks: dict[str, Task] = field(default_factory=dict)
    variables: dict[str, Variable] = field(default_factory=dict)

    def get_phony_tasks(self) -> dict[str, Task]:
        """Get tasks declared in .PHONY."""
        return {name: task for name, task in self.tasks.items() if task.is_phony}


@dataclass
class Makefile:
    """A walked file whose tasks are keyed by their global ID."""

    file: Path
    variables: dict[str, Variable] = field(default_factory=dict)
    tasks: dict[str, Task] = field(default_factory=dict)

    def get_id(self, name: str) -> str | None:
        """Get the ID of the task with the given name."""
        for task_id, task in self.tasks.items():
            if task.name == name:
                return task_id
        return None

    def default_goal(self) -> str | None:
        """ID of the task make would build when no target is requested.

        A non-empty ``.DEFAULT_GOAL`` assignment names the goal; otherwise it
        is the first task that is neither special (``.NAME``) nor a pattern.
        """
        goal = self.variables.get(".DEFAULT_GOAL")
        if goal is not None and goal.value:
            return self.get_id(goal.value)
        for task_id, task in self.tasks.items():
            if not task.name.startswith(".") and "%" not in task.name:
                return task_id
        return None


@dataclass(frozen=True)
class ExternalEdge:
    """A recipe invoking make on another file.

    ``path`` holds the raw text (with ``${VAR}`` references) while pending and
    the canonical Makefile path once resolved.
    """

    path: str | Path
    source_id: str
    target_names: tuple[str, ...] = ()


@dataclass(frozen=True)
class MakeInvocation:
    """A make sub-command found in a recipe line."""

    path: str
    tasks: tuple[str, ...] = ()


@dataclass
class Diagnostic:
    """A recoverable problem reported alongside the result."""

    kind: str
    message: str

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


@dataclass
class WalkResult:
    """Every Makefile reached from the entry file and the edges between them."""

    makefiles: list[Makefile] = field(default_factory=list)
    externals: list[ExternalEdge] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def get_makefile(self, file: Path) -> Makefile | None:
        """Get a walked Makefile by canonical path."""
        for makefile in self.makefiles:
            if makefile.file == file:
                return makefile
        return None


@dataclass
class GraphNode:
    """A task node."""

    id: str
    label: str
    is_phony: bool = False


@dataclass
class GraphEdge:
    """A dependency edge, external when it crosses files."""

    source: str
    target: str
    external: bool = False


@dataclass
class GraphCluster:
    """The tasks of one Makefile."""

    id: str
    label: str
    node_ids: list[str] = field(default_factory=list)


@dataclass
class TaskGraph:
    """The unified cross-file task graph."""

    clusters: list[GraphCluster] = field(default_factory=list)
    nodes: dict[str, GraphNode] = field(default_factory=dict)
    edges: list[GraphEdge] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
