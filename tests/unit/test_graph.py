"""Tests for ID generation and graph assembly."""

from pathlib import Path

import pytest

from makedot.core.graph import IDGenerator, build_graph, find_tasks
from makedot.core.models import GraphEdge
from makedot.core.walker import MakefileWalker
from makedot.exceptions import TaskNotFoundError

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


class TestIDGenerator:
    """Tests for IDGenerator."""

    def test_sequence(self) -> None:
        """IDs are the prefix followed by a counter."""
        generator = IDGenerator("task")

        assert [generator.next_id() for _ in range(3)] == ["task0", "task1", "task2"]

    def test_generators_are_independent(self) -> None:
        """Each generator has its own counter."""
        tasks = IDGenerator("task")
        clusters = IDGenerator("cluster")

        tasks.next_id()
        tasks.next_id()

        assert clusters.next_id() == "cluster0"
        assert tasks.next_id() == "task2"


class TestBuildGraph:
    """Tests for build_graph."""

    def test_project_graph(self) -> None:
        """Clusters, nodes, internal and external edges for a walked project."""
        result = MakefileWalker().walk(FIXTURES_DIR / "project")

        graph = build_graph(result)

        assert [c.id for c in graph.clusters] == ["cluster0", "cluster1", "cluster2"]
        assert [c.label for c in graph.clusters] == [str(m.file) for m in result.makefiles]
        assert graph.clusters[0].node_ids == ["task0", "task1", "task2"]
        assert graph.nodes["task6"].label == "test"
        assert graph.nodes["task6"].is_phony is True
        assert graph.edges == [
            GraphEdge(source="task0", target="task1"),
            GraphEdge(source="task6", target="task5"),
            GraphEdge(source="task0", target="task3", external=True),
            GraphEdge(source="task1", target="task5", external=True),
            GraphEdge(source="task1", target="task6", external=True),
            GraphEdge(source="task2", target="task7", external=True),
            GraphEdge(source="task2", target="task4", external=True),
            GraphEdge(source="task3", target="task5", external=True),
        ]
        assert graph.diagnostics == []

    def test_unresolved_dependency_is_a_diagnostic(self) -> None:
        """A dependency that is not a task is reported, not drawn."""
        result = MakefileWalker().walk(FIXTURES_DIR / "simple.mk")

        graph = build_graph(result)

        assert len(graph.nodes) == 3
        assert [d.kind for d in graph.diagnostics] == ["unresolved-dependency"]
        assert "main.c" in graph.diagnostics[0].message
        assert all(edge.target != "main.c" for edge in graph.edges)

    def test_unresolved_external_task(self, tmp_path: Path) -> None:
        """Unknown task names in the invoked file are reported and skipped."""
        _write(tmp_path / "sub" / "Makefile", "build:\n")
        makefile = _write(tmp_path / "Makefile", "all:\n\tmake -C sub nope build\n")

        graph = build_graph(MakefileWalker().walk(makefile))

        assert graph.edges == [GraphEdge(source="task0", target="task1", external=True)]
        assert [d.kind for d in graph.diagnostics] == ["unresolved-external-task"]
        assert "nope" in graph.diagnostics[0].message

    def test_invocation_without_tasks_uses_default_goal(self, tmp_path: Path) -> None:
        """No requested task means the first ordinary task of the file."""
        _write(tmp_path / "sub" / "Makefile", ".PHONY: first\n%.o: %.c\n.DEFAULT:\nfirst:\nsecond:\n")
        makefile = _write(tmp_path / "Makefile", "all:\n\tmake -C sub\n")

        result = MakefileWalker().walk(makefile)
        graph = build_graph(result)

        first_id = result.makefiles[1].get_id("first")
        assert graph.edges == [GraphEdge(source="task0", target=first_id, external=True)]

    def test_invocation_without_tasks_honours_default_goal_variable(self, tmp_path: Path) -> None:
        """.DEFAULT_GOAL overrides the first-task rule."""
        _write(tmp_path / "sub" / "Makefile", "first:\n.DEFAULT_GOAL := second\nsecond:\n")
        makefile = _write(tmp_path / "Makefile", "all:\n\tmake -C sub\n")

        result = MakefileWalker().walk(makefile)
        graph = build_graph(result)

        second_id = result.makefiles[1].get_id("second")
        assert graph.edges == [GraphEdge(source="task0", target=second_id, external=True)]

    def test_walk_diagnostics_are_carried(self, tmp_path: Path) -> None:
        """Diagnostics from the walk appear in the graph."""
        makefile = _write(tmp_path / "Makefile", "all:\n\tmake -C missing\n")

        graph = build_graph(MakefileWalker().walk(makefile))

        assert [d.kind for d in graph.diagnostics] == ["unresolved-external-path"]

    def test_custom_cluster_ids(self) -> None:
        """Cluster IDs come from their own generator."""
        result = MakefileWalker().walk(FIXTURES_DIR / "cycle" / "a")

        graph = build_graph(result, cluster_ids=IDGenerator("cluster_file"))

        assert [c.id for c in graph.clusters] == ["cluster_file0", "cluster_file1"]


class TestFindTasks:
    """Tests for find_tasks."""

    def test_finds_tasks_in_every_file(self) -> None:
        """Tasks with the same name in different files are all returned."""
        result = MakefileWalker().walk(FIXTURES_DIR / "project")

        matches = find_tasks(result, "build")

        assert [task_id for _, task_id in matches] == ["task3", "task5"]

    def test_unknown_task(self) -> None:
        """An unknown name raises TaskNotFoundError."""
        result = MakefileWalker().walk(FIXTURES_DIR / "project")

        with pytest.raises(TaskNotFoundError):
            find_tasks(result, "deploy")
