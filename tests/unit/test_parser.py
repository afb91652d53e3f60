"""Tests for Makefile parser."""

import os
from pathlib import Path

import pytest

from makedot.core.parser import GrammarMakefileParser
from makedot.exceptions import MakefileNotFoundError, MakefileParseError, MakefileSyntaxError

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


class TestGrammarMakefileParser:
    """Tests for GrammarMakefileParser."""

    def test_parse_simple_makefile(self) -> None:
        """Parse simple Makefile with 3 tasks and 2 variables."""
        parser = GrammarMakefileParser()
        makefile = FIXTURES_DIR / "simple.mk"

        parsed = parser.parse(makefile)

        assert parsed.path == makefile
        assert list(parsed.tasks) == ["all", "build", "test"]
        assert parsed.tasks["all"].dependencies == ["build", "test"]
        assert parsed.tasks["build"].commands == ["$(CC) $(CFLAGS) -o app main.c"]
        assert parsed.variables["CC"].value == "gcc"
        assert parsed.variables["CFLAGS"].operator == "?="

    def test_parse_phony_declarations(self) -> None:
        """Parse .PHONY declarations."""
        parser = GrammarMakefileParser()

        parsed = parser.parse(FIXTURES_DIR / "simple.mk")

        assert set(parsed.get_phony_tasks()) == {"all", "test"}
        assert parsed.tasks["build"].is_phony is False

    def test_parse_empty_makefile(self) -> None:
        """Handle empty Makefile (returns empty result, no error)."""
        parser = GrammarMakefileParser()

        parsed = parser.parse_string("", Path("Empty.mk"))

        assert parsed.tasks == {}
        assert parsed.variables == {}

    def test_parse_string_default_path(self) -> None:
        """parse_string without a path uses ./Makefile."""
        parsed = GrammarMakefileParser().parse_string("test:\n\tpytest\n")

        assert parsed.path == Path("Makefile")
        assert parsed.tasks["test"].commands == ["pytest"]

    def test_parse_string_syntax_error(self) -> None:
        """parse_string lets the grammar error through."""
        with pytest.raises(MakefileSyntaxError):
            GrammarMakefileParser().parse_string("build:\n  echo no tab\n")

    def test_parse_syntax_error(self) -> None:
        """A grammar error is reported with the file path and position."""
        parser = GrammarMakefileParser()
        makefile = FIXTURES_DIR / "broken.mk"

        with pytest.raises(MakefileParseError) as exc_info:
            parser.parse(makefile)

        assert exc_info.value.path == str(makefile)
        assert "line 2, column 22" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, MakefileSyntaxError)

    def test_parse_nonexistent_file(self) -> None:
        """Handle non-existent file (raises MakefileNotFoundError)."""
        parser = GrammarMakefileParser()
        makefile = Path("/nonexistent/Makefile")

        with pytest.raises(MakefileNotFoundError) as exc_info:
            parser.parse(makefile)

        assert exc_info.value.path == str(makefile)

    def test_parse_directory_path(self, tmp_path: Path) -> None:
        """Parsing a directory raises MakefileParseError."""
        parser = GrammarMakefileParser()
        directory = tmp_path / "some_dir"
        directory.mkdir()

        with pytest.raises(MakefileParseError, match="not a file"):
            parser.parse(directory)

    @pytest.mark.skipif(hasattr(os, "geteuid") and os.geteuid() == 0, reason="root can read any file")
    def test_parse_unreadable_file(self, tmp_path: Path) -> None:
        """Parsing an unreadable file raises MakefileParseError."""
        parser = GrammarMakefileParser()
        makefile = tmp_path / "Makefile"
        makefile.write_text("test:\n\techo test\n")
        makefile.chmod(0o000)  # Remove all permissions

        try:
            with pytest.raises(MakefileParseError, match="not readable|Permission denied"):
                parser.parse(makefile)
        finally:
            makefile.chmod(0o644)  # Restore permissions for cleanup

    def test_parse_non_utf8_file(self, tmp_path: Path) -> None:
        """Parsing a non-UTF-8 file raises MakefileParseError."""
        parser = GrammarMakefileParser()
        makefile = tmp_path / "Makefile"
        # Write invalid UTF-8 bytes
        makefile.write_bytes(b"test:\n\techo \xff\xfe\n")

        with pytest.raises(MakefileParseError, match="not valid UTF-8"):
            parser.parse(makefile)
