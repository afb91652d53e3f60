"""Variable substitution for paths found in recipes."""

import re
from collections.abc import Mapping

from makedot.core.models import Variable

VARIABLE_REFERENCE = re.compile(r"\$\{([^}]+)\}")


def resolve_variables(text: str, variables: Mapping[str, Variable]) -> str:
    """Replace every ``${NAME}`` in text with the variable's value.

    Single pass: substituted values are not expanded again. A reference to an
    undefined name is left as written.
    """

    def substitute(match: re.Match[str]) -> str:
        variable = variables.get(match.group(1))
        if variable is None:
            return match.group(0)
        return variable.value

    return VARIABLE_REFERENCE.sub(substitute, text)
