"""Tests for variable substitution."""

from makedot.core.models import Variable
from makedot.core.resolver import resolve_variables


def _variables(**values: str) -> dict[str, Variable]:
    return {name: Variable(name=name, operator="=", value=value) for name, value in values.items()}


class TestResolveVariables:
    """Tests for resolve_variables."""

    def test_substitutes_reference(self) -> None:
        """${DIR}/sub with DIR=lib becomes lib/sub."""
        assert resolve_variables("${DIR}/sub", _variables(DIR="lib")) == "lib/sub"

    def test_multiple_references(self) -> None:
        """Every reference is replaced."""
        variables = _variables(ROOT="..", DIR="lib")

        assert resolve_variables("${ROOT}/${DIR}/${DIR}", variables) == "../lib/lib"

    def test_unknown_reference_stays_literal(self) -> None:
        """Only the undefined reference is left as written, not the whole input."""
        assert resolve_variables("${A}/${MISSING}", _variables(A="x")) == "x/${MISSING}"

    def test_no_recursive_expansion(self) -> None:
        """A substituted value is not expanded again."""
        variables = _variables(A="${B}", B="b")

        assert resolve_variables("${A}", variables) == "${B}"

    def test_parenthesized_references_untouched(self) -> None:
        """Only the ${NAME} form is substituted."""
        assert resolve_variables("$(DIR)/x", _variables(DIR="lib")) == "$(DIR)/x"

    def test_text_without_references(self) -> None:
        """Plain text is returned unchanged."""
        assert resolve_variables("sub/dir", {}) == "sub/dir"
