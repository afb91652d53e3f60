"""Grammar for Makefile text.

Turns the raw text of one file into an ordered list of terms. The parser is a
hand-written recursive descent over character offsets: every rule takes a
position and either returns the position after the construct or raises an
internal failure carrying the position, what was expected and the stack of
constructs being parsed. Alternatives backtrack, and when every alternative of
a term fails the failure that got furthest into the text is reported.

Only the shape of the file is recognized here. Conditionals, ``define`` blocks
and ``include`` lines are skipped as opaque spans.
"""

import re
import string
from collections.abc import Iterator
from contextlib import contextmanager
from typing import NoReturn

from makedot.core.models import EmptyTerm, TaskTerm, Term, UnimplementedTerm, VariableTerm
from makedot.exceptions import MakefileSyntaxError

IDENTIFIER_CHARS = frozenset(string.ascii_letters + string.digits + "._-%/")

# Longest first so "::=" is not read as ":" followed by ":=".
OPERATORS = ("::=", ":=", "?=", "+=", "!=", "=")

CONDITIONAL_KEYWORDS = ("ifeq", "ifneq", "ifdef", "ifndef")
INCLUDE_KEYWORDS = ("include", "-include", "sinclude")
EXPORT_KEYWORDS = ("export", "unexport", "override")

_KEYWORD_END = " \t\r\n("
_DIRECTIVE_WORD = re.compile(r"-?[A-Za-z]+")
_CONTINUATION = re.compile(r"[ \t]*\\\r?\n[ \t]*")
_BLANK_LINES_BEFORE_RECIPE = re.compile(r"(?:[ \t]*\r?\n)+(?=\t)")


class _Failure(Exception):
    """Backtracking signal, converted to MakefileSyntaxError at the top."""

    def __init__(self, pos: int, expected: str, context: list[str]) -> None:
        super().__init__(expected)
        self.pos = pos
        self.expected = expected
        self.context = context


class _Grammar:
    def __init__(self, text: str) -> None:
        self.text = text
        self.length = len(text)
        self.context: list[str] = []

    # Infrastructure

    @contextmanager
    def within(self, name: str) -> Iterator[None]:
        self.context.append(name)
        try:
            yield
        finally:
            self.context.pop()

    def fail(self, pos: int, expected: str) -> NoReturn:
        raise _Failure(min(pos, self.length), expected, list(self.context))

    def location(self, pos: int) -> tuple[int, int]:
        line = self.text.count("\n", 0, pos) + 1
        column = pos - (self.text.rfind("\n", 0, pos) + 1) + 1
        return line, column

    # Lexical rules

    def newline(self, pos: int) -> int | None:
        if self.text.startswith("\r\n", pos):
            return pos + 2
        if self.text.startswith("\n", pos):
            return pos + 1
        return None

    def escaped_newline(self, pos: int) -> int | None:
        if self.text.startswith("\\", pos):
            return self.newline(pos + 1)
        return None

    def hspace(self, pos: int) -> int:
        """Skip spaces, tabs and escaped newlines."""
        while pos < self.length:
            if self.text[pos] in " \t":
                pos += 1
                continue
            end = self.escaped_newline(pos)
            if end is None:
                break
            pos = end
        return pos

    def eol(self, pos: int) -> int:
        if pos >= self.length:
            return pos
        end = self.newline(pos)
        if end is None:
            self.fail(pos, "end of line")
        return end

    def at_line_end(self, pos: int) -> bool:
        return pos >= self.length or self.text[pos] in "#\r\n"

    def comment(self, pos: int) -> int:
        """Consume a comment, leaving its line terminator in place."""
        with self.within("comment"):
            if not self.text.startswith("#", pos):
                self.fail(pos, "'#'")
            pos += 1
            while pos < self.length:
                end = self.escaped_newline(pos)
                if end is not None:
                    pos = end
                    continue
                if self.text[pos] in "\r\n":
                    break
                pos += 1
            return pos

    def optional_comment_eol(self, pos: int) -> int:
        if self.text.startswith("#", pos):
            pos = self.comment(pos)
        return self.eol(pos)

    def reference(self, pos: int) -> int | None:
        """End of a balanced ``$(...)`` or ``${...}`` starting at pos."""
        opener = self.text[pos + 1]
        closer = ")" if opener == "(" else "}"
        depth = 0
        index = pos + 1
        while index < self.length:
            char = self.text[index]
            if char in "\r\n":
                return None
            if char == opener:
                depth += 1
            elif char == closer:
                depth -= 1
                if depth == 0:
                    return index + 1 if index > pos + 2 else None
            index += 1
        return None

    def starts_identifier(self, pos: int) -> bool:
        if pos >= self.length:
            return False
        return self.text[pos] in IDENTIFIER_CHARS or self.text.startswith(("$(", "${"), pos)

    def identifier(self, pos: int) -> tuple[str, int]:
        with self.within("identifier"):
            start = pos
            while pos < self.length:
                if self.text.startswith(("$(", "${"), pos):
                    end = self.reference(pos)
                    if end is None:
                        break
                    pos = end
                elif self.text[pos] in IDENTIFIER_CHARS:
                    pos += 1
                else:
                    break
            if pos == start:
                self.fail(pos, "identifier")
            return self.text[start:pos], pos

    def rest(self, pos: int) -> tuple[str, int]:
        """Text up to a comment or line terminator, continuations included."""
        start = pos
        while pos < self.length:
            end = self.escaped_newline(pos)
            if end is not None:
                pos = end
                continue
            if self.text.startswith("\\#", pos):
                pos += 2
                continue
            if self.text[pos] in "\r\n#":
                break
            pos += 1
        return self.text[start:pos], pos

    def keyword(self, pos: int, words: tuple[str, ...]) -> tuple[str, int] | None:
        for word in words:
            end = pos + len(word)
            if self.text.startswith(word, pos) and (end >= self.length or self.text[end] in _KEYWORD_END):
                return word, end
        return None

    def block(self, pos: int, openers: tuple[str, ...], closer: str) -> int:
        """Skip whole lines from an opening keyword to its matching closer."""
        depth = 0
        while pos < self.length:
            newline = self.text.find("\n", pos)
            line_end = self.length if newline == -1 else newline
            match = _DIRECTIVE_WORD.match(self.text[pos:line_end].strip())
            word = match.group(0) if match else ""
            if word in openers:
                depth += 1
            elif word == closer:
                depth -= 1
                if depth == 0:
                    return line_end if newline == -1 else newline + 1
            pos = line_end + 1
        self.fail(pos, f"'{closer}'")

    # Terms

    def empty(self, pos: int) -> tuple[list[Term], int]:
        return [EmptyTerm()], self.eol(self.hspace(pos))

    def comment_line(self, pos: int) -> tuple[list[Term], int]:
        return [EmptyTerm()], self.eol(self.comment(pos))

    def define(self, pos: int) -> tuple[list[Term], int]:
        with self.within("define"):
            if self.keyword(pos, ("define",)) is None:
                self.fail(pos, "'define'")
            return [UnimplementedTerm("define")], self.block(pos, ("define",), "endef")

    def conditional(self, pos: int) -> tuple[list[Term], int]:
        with self.within("conditional"):
            if self.keyword(pos, CONDITIONAL_KEYWORDS) is None:
                self.fail(pos, "conditional directive")
            return [UnimplementedTerm("conditional")], self.block(pos, CONDITIONAL_KEYWORDS, "endif")

    def include(self, pos: int) -> tuple[list[Term], int]:
        with self.within("include"):
            keyword = self.keyword(pos, INCLUDE_KEYWORDS)
            if keyword is None:
                self.fail(pos, "'include'")
            _, pos = self.rest(keyword[1])
            return [UnimplementedTerm("include")], self.optional_comment_eol(pos)

    def export(self, pos: int) -> tuple[list[Term], int]:
        keyword = self.keyword(pos, EXPORT_KEYWORDS)
        if keyword is None:
            self.fail(pos, "directive")
        word, pos = keyword
        pos = self.hspace(pos)
        if word != "unexport":
            if self.keyword(pos, ("define",)) is not None:
                return self.define(pos)
            try:
                return self.variable(pos)
            except _Failure:
                if word == "override":
                    raise
        with self.within(word):
            _, pos = self.rest(pos)
            return [UnimplementedTerm("export")], self.optional_comment_eol(pos)

    def variable(self, pos: int) -> tuple[list[Term], int]:
        with self.within("variable"):
            name, pos = self.identifier(pos)
            pos = self.hspace(pos)
            operator = next((op for op in OPERATORS if self.text.startswith(op, pos)), None)
            if operator is None:
                self.fail(pos, "'=' or '?='")
            value, pos = self.rest(self.hspace(pos + len(operator)))
            pos = self.optional_comment_eol(pos)
            return [VariableTerm(name=name, operator=operator, value=_clean_value(value))], pos

    def task(self, pos: int) -> tuple[list[Term], int]:
        with self.within("task"):
            names = []
            while True:
                name, pos = self.identifier(pos)
                names.append(name)
                pos = self.hspace(pos)
                if self.text.startswith(":", pos):
                    break
                if not self.starts_identifier(pos):
                    self.fail(pos, "':'")
            pos += 2 if self.text.startswith("::", pos) else 1

            dependencies = []
            commands = []
            with self.within("dependencies"):
                pos = self.hspace(pos)
                while not self.at_line_end(pos):
                    if self.text.startswith("|", pos):
                        pos = self.hspace(pos + 1)
                        continue
                    if self.text.startswith(";", pos):
                        command, pos = self.rest(pos + 1)
                        if command.strip():
                            commands.append(command.strip())
                        break
                    dependency, pos = self.identifier(pos)
                    dependencies.append(dependency)
                    pos = self.hspace(pos)
                pos = self.optional_comment_eol(pos)

            with self.within("recipe"):
                while pos < self.length:
                    if self.text.startswith("\t", pos):
                        command, pos = self.rest(pos + 1)
                        pos = self.optional_comment_eol(pos)
                        if command.strip():
                            commands.append(command.strip())
                    elif self.text.startswith("#", self.hspace(pos)):
                        pos = self.eol(self.comment(self.hspace(pos)))
                    elif self.keyword(self.hspace(pos), CONDITIONAL_KEYWORDS) is not None:
                        # Both branches are dropped; recipe lines after endif still belong here.
                        pos = self.block(self.hspace(pos), CONDITIONAL_KEYWORDS, "endif")
                    else:
                        blank = _BLANK_LINES_BEFORE_RECIPE.match(self.text, pos)
                        if blank is None:
                            break
                        pos = blank.end()

            terms: list[Term] = [
                TaskTerm(name=name, dependencies=list(dependencies), commands=list(commands)) for name in names
            ]
            return terms, pos

    def term(self, pos: int) -> tuple[list[Term], int]:
        alternatives = (
            self.empty,
            self.define,
            self.include,
            self.conditional,
            self.export,
            self.variable,
            self.comment_line,
            self.task,
        )
        with self.within("term"):
            furthest: _Failure | None = None
            for alternative in alternatives:
                try:
                    return alternative(pos)
                except _Failure as failure:
                    if furthest is None or failure.pos >= furthest.pos:
                        furthest = failure
            assert furthest is not None
            raise furthest

    def makefile(self) -> list[Term]:
        terms: list[Term] = []
        pos = 0
        while True:
            pos = self.hspace(pos)
            if pos >= self.length:
                return terms
            parsed, pos = self.term(pos)
            terms.extend(parsed)


def _clean_value(value: str) -> str:
    return _CONTINUATION.sub(" ", value).replace("\\#", "#").rstrip()


def parse(text: str) -> list[Term]:
    """Parse Makefile text into terms.

    Raises MakefileSyntaxError with the line, column and construct context of
    the first position no rule could match. The whole text is rejected.
    """
    grammar = _Grammar(text.removeprefix("\ufeff"))
    try:
        return grammar.makefile()
    except _Failure as failure:
        line, column = grammar.location(failure.pos)
        raise MakefileSyntaxError(line, column, failure.expected, failure.context) from None
