"""Makefile parsing functionality."""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

from makedot.core import grammar
from makedot.core.assembler import assemble
from makedot.core.models import ParsedMakefile
from makedot.exceptions import MakefileNotFoundError, MakefileParseError, MakefileSyntaxError

logger = logging.getLogger(__name__)


class MakefileParser(ABC):
    """Abstract base class for Makefile parsing."""

    @abstractmethod
    def parse(self, makefile_path: Path) -> ParsedMakefile:
        """Parse Makefile and return its tasks and variables."""
        pass

    @abstractmethod
    def parse_string(self, content: str, path: Path | None = None) -> ParsedMakefile:
        """Parse Makefile from string content."""
        pass


class GrammarMakefileParser(MakefileParser):
    """Parse Makefile with the makedot grammar and assemble its terms."""

    def parse(self, makefile_path: Path) -> ParsedMakefile:
        """Parse Makefile from file."""
        # Validate file exists
        if not makefile_path.exists():
            raise MakefileNotFoundError(str(makefile_path))

        # Validate it's a file, not a directory
        if not makefile_path.is_file():
            raise MakefileParseError(str(makefile_path), f"Path is not a file: {makefile_path}")

        # Validate file is readable
        if not os.access(makefile_path, os.R_OK):
            raise MakefileParseError(str(makefile_path), f"File is not readable: {makefile_path}")

        try:
            content = makefile_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise MakefileParseError(str(makefile_path), f"File is not valid UTF-8: {e}") from e
        except PermissionError as e:
            raise MakefileParseError(str(makefile_path), f"Permission denied reading file: {e}") from e
        except OSError as e:
            logger.exception("Failed to read Makefile")
            raise MakefileParseError(str(makefile_path), f"Failed to read file: {e}") from e

        try:
            return self.parse_string(content, makefile_path)
        except MakefileSyntaxError as e:
            raise MakefileParseError(str(makefile_path), str(e)) from e

    def parse_string(self, content: str, path: Path | None = None) -> ParsedMakefile:
        """Parse Makefile from string content."""
        path = path or Path("Makefile")
        terms = grammar.parse(content)
        tasks, variables = assemble(terms)
        parsed = ParsedMakefile(path=path, tasks=tasks, variables=variables)

        logger.debug(
            f"Parsed {path}: {len(terms)} terms, {len(tasks)} tasks "
            f"({len(parsed.get_phony_tasks())} phony), {len(variables)} variables"
        )

        if not tasks:
            logger.warning(f"No tasks found in {path}")

        return parsed
