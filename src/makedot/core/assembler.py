"""Assemble grammar terms into the per-file task and variable tables."""

import logging
from collections.abc import Iterable

from makedot.core.models import Task, TaskTerm, Term, Variable, VariableTerm

logger = logging.getLogger(__name__)

PHONY = ".PHONY"


def collect_phony(terms: Iterable[Term]) -> set[str]:
    """Union of the prerequisites of every .PHONY rule."""
    phony: set[str] = set()
    for term in terms:
        if isinstance(term, TaskTerm) and term.name == PHONY:
            phony.update(term.dependencies)
    return phony


def assemble(terms: list[Term]) -> tuple[dict[str, Task], dict[str, Variable]]:
    """Build name->Task and name->Variable maps from one file's terms.

    Rules for an already seen task append their prerequisites, and replace the
    recipe only when they carry one. ``.PHONY`` is consumed into the tasks'
    ``is_phony`` flags and never stored.
    """
    phony = collect_phony(terms)
    tasks: dict[str, Task] = {}
    variables: dict[str, Variable] = {}

    for term in terms:
        if isinstance(term, VariableTerm):
            existing = variables.get(term.name)
            if term.operator == "+=" and existing is not None:
                value = f"{existing.value} {term.value}" if existing.value else term.value
                variables[term.name] = Variable(name=term.name, operator=existing.operator, value=value)
            else:
                variables[term.name] = Variable(name=term.name, operator=term.operator, value=term.value)
        elif isinstance(term, TaskTerm):
            if term.name == PHONY:
                continue
            task = tasks.get(term.name)
            if task is None:
                tasks[term.name] = Task(
                    name=term.name,
                    dependencies=list(term.dependencies),
                    commands=list(term.commands),
                    is_phony=term.name in phony,
                )
                continue
            task.dependencies.extend(term.dependencies)
            if term.commands:
                if task.commands:
                    logger.debug(f"Recipe for '{term.name}' overridden by a later rule")
                task.commands = list(term.commands)

    return tasks, variables
