"""Breadth-first walk over Makefiles connected by make sub-invocations."""

import logging
from collections import deque
from dataclasses import replace
from pathlib import Path

from makedot.core.graph import IDGenerator
from makedot.core.models import Diagnostic, ExternalEdge, Makefile, WalkResult
from makedot.core.parser import GrammarMakefileParser, MakefileParser
from makedot.core.resolver import resolve_variables
from makedot.core.scanner import scan_all
from makedot.exceptions import MakefileNotFoundError, PathResolutionError

logger = logging.getLogger(__name__)

DEFAULT_MAKEFILE = "Makefile"


def canonical_makefile(path: Path) -> Path:
    """Absolute, symlink-free path of a Makefile or of a directory's Makefile."""
    try:
        resolved = path.resolve(strict=True)
        if resolved.is_dir():
            resolved = (resolved / DEFAULT_MAKEFILE).resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise PathResolutionError(str(path), str(e)) from e
    return resolved


def resolve_makefile(makefile: Makefile, raw_path: str) -> Path:
    """Resolve a path taken from one of makefile's recipes.

    ``${VAR}`` references are substituted from the file's variables and the
    result is taken relative to the file's directory.
    """
    return canonical_makefile(makefile.file.parent / resolve_variables(raw_path, makefile.variables))


class MakefileWalker:
    """Parse a Makefile and every Makefile its recipes invoke with make -C/-f."""

    def __init__(self, parser: MakefileParser | None = None, id_generator: IDGenerator | None = None) -> None:
        self.parser = parser or GrammarMakefileParser()
        self.id_generator = id_generator or IDGenerator("task")

    def walk(self, entry: Path) -> WalkResult:
        """Walk from the entry Makefile until no unseen Makefile is left.

        Read and syntax errors abort the walk. Invocations whose path cannot
        be resolved are dropped with a diagnostic.
        """
        try:
            start = canonical_makefile(entry)
        except PathResolutionError as e:
            raise MakefileNotFoundError(str(entry)) from e

        result = WalkResult()
        queue: deque[Path] = deque([start])
        seen: set[Path] = {start}
        recorded: set[ExternalEdge] = set()

        while queue:
            path = queue.popleft()
            logger.info(f"Parsing {path}")
            makefile = self._ingest(path)

            for external in self._externals(makefile):
                try:
                    target = resolve_makefile(makefile, str(external.path))
                except PathResolutionError as e:
                    message = f"{makefile.file}: {e}"
                    logger.warning(message)
                    result.diagnostics.append(Diagnostic(kind="unresolved-external-path", message=message))
                    continue

                resolved = replace(external, path=target)
                if resolved not in recorded:
                    recorded.add(resolved)
                    result.externals.append(resolved)
                if target not in seen:
                    seen.add(target)
                    queue.append(target)

            result.makefiles.append(makefile)

        logger.info(f"Walked {len(result.makefiles)} Makefiles, {len(result.externals)} external invocations")
        return result

    def _ingest(self, path: Path) -> Makefile:
        """Parse one file and give each of its tasks a fresh ID."""
        parsed = self.parser.parse(path)
        makefile = Makefile(file=path, variables=parsed.variables)
        for task in parsed.tasks.values():
            makefile.tasks[self.id_generator.next_id()] = task
        return makefile

    def _externals(self, makefile: Makefile) -> list[ExternalEdge]:
        """Unresolved edges for every make invocation in the file's recipes."""
        externals = []
        for task_id, task in makefile.tasks.items():
            for command in task.commands:
                for invocation in scan_all(command):
                    externals.append(
                        ExternalEdge(path=invocation.path, source_id=task_id, target_names=invocation.tasks)
                    )
        return externals
