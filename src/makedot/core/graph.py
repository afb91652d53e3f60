"""Task ID generation and cross-file graph assembly."""

import logging
from pathlib import Path

from makedot.core.models import (
    Diagnostic,
    GraphCluster,
    GraphEdge,
    GraphNode,
    Makefile,
    TaskGraph,
    WalkResult,
)
from makedot.exceptions import TaskNotFoundError

logger = logging.getLogger(__name__)


class IDGenerator:
    """Hands out ``prefix0``, ``prefix1``, ... never repeating a value."""

    def __init__(self, prefix: str) -> None:
        self.prefix = prefix
        self.counter = 0

    def next_id(self) -> str:
        """Return the next unused ID."""
        id_ = f"{self.prefix}{self.counter}"
        self.counter += 1
        return id_


def _report(graph: TaskGraph, kind: str, message: str) -> None:
    logger.warning(message)
    graph.diagnostics.append(Diagnostic(kind=kind, message=message))


def build_graph(result: WalkResult, cluster_ids: IDGenerator | None = None) -> TaskGraph:
    """Pair every dependency and external invocation with a task ID.

    Names that do not match a task in their scope are reported as diagnostics
    and left out of the graph.
    """
    cluster_ids = cluster_ids or IDGenerator("cluster")
    graph = TaskGraph(diagnostics=list(result.diagnostics))

    for makefile in result.makefiles:
        cluster = GraphCluster(id=cluster_ids.next_id(), label=str(makefile.file))
        graph.clusters.append(cluster)

        for task_id, task in makefile.tasks.items():
            cluster.node_ids.append(task_id)
            graph.nodes[task_id] = GraphNode(id=task_id, label=task.name, is_phony=task.is_phony)

        for task_id, task in makefile.tasks.items():
            for dependency in task.dependencies:
                dependency_id = makefile.get_id(dependency)
                if dependency_id is None:
                    _report(
                        graph,
                        "unresolved-dependency",
                        f"{makefile.file}: dependency '{dependency}' of '{task.name}' is not a task",
                    )
                    continue
                graph.edges.append(GraphEdge(source=task_id, target=dependency_id))

    for external in result.externals:
        target = result.get_makefile(Path(external.path))
        if target is None:
            _report(graph, "unresolved-external-path", f"{external.path} was not parsed")
            continue

        if not external.target_names:
            goal = target.default_goal()
            if goal is None:
                _report(graph, "unresolved-external-task", f"{target.file}: no default goal")
            else:
                graph.edges.append(GraphEdge(source=external.source_id, target=goal, external=True))
            continue

        for name in external.target_names:
            target_id = target.get_id(name)
            if target_id is None:
                _report(graph, "unresolved-external-task", f"{target.file}: task '{name}' not found")
                continue
            graph.edges.append(GraphEdge(source=external.source_id, target=target_id, external=True))

    return graph


def find_tasks(result: WalkResult, name: str) -> list[tuple[Makefile, str]]:
    """All (Makefile, task ID) pairs for tasks with the given name."""
    matches = []
    for makefile in result.makefiles:
        for task_id, task in makefile.tasks.items():
            if task.name == name:
                matches.append((makefile, task_id))
    if not matches:
        raise TaskNotFoundError(name)
    return matches
