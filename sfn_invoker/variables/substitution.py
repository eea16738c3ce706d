"""
Variable interpolation for step inputs.
Resolves ${NAME} and $NAME placeholders against build variables.
"""

import re
from typing import List, Mapping, Optional, Protocol, Union


class VariableResolver(Protocol):
    """Anything that can look up a variable by name."""

    def lookup(self, name: str) -> Optional[str]:
        ...


class MappingResolver:
    """Adapts a plain name -> value mapping to the resolver interface."""

    def __init__(self, variables: Optional[Mapping[str, str]] = None):
        self.variables = variables or {}

    def lookup(self, name: str) -> Optional[str]:
        return self.variables.get(name)


Variables = Union[Mapping[str, str], VariableResolver]


class VariableInterpolator:
    """
    Replaces placeholders in template strings.

    Supported forms:
    - ${NAME}: NAME is any run of characters up to the closing brace
    - $NAME: NAME is a run of letters, digits and underscores

    All placeholders are matched in a single pass and each name is looked up
    on its own, so inserted values are never interpolated again and the
    result does not depend on the order of the variables. Placeholders whose
    name cannot be resolved are left as written.
    """

    VAR_PATTERN = re.compile(r'\$\{([^}]+)\}|\$([A-Za-z0-9_]+)')

    def interpolate(self, template: Optional[str], variables: Variables) -> str:
        """
        Interpolate variables into a template.

        Args:
            template: String that may contain placeholders
            variables: Mapping or resolver providing variable values

        Returns:
            Template with every resolvable placeholder replaced
        """
        if not template:
            return ""

        resolver = as_resolver(variables)

        def replace_var(match):
            name = match.group(1) if match.group(1) is not None else match.group(2)
            value = resolver.lookup(name)
            if value is None:
                return match.group(0)
            return str(value)

        return self.VAR_PATTERN.sub(replace_var, template)

    def find_unresolved(self, template: Optional[str], variables: Variables) -> List[str]:
        """Return the placeholder names in a template that do not resolve."""
        if not template:
            return []

        resolver = as_resolver(variables)
        missing = []
        for match in self.VAR_PATTERN.finditer(template):
            name = match.group(1) if match.group(1) is not None else match.group(2)
            if resolver.lookup(name) is None and name not in missing:
                missing.append(name)
        return missing


def as_resolver(variables: Optional[Variables]) -> VariableResolver:
    """Wrap a mapping in a MappingResolver; pass resolvers through."""
    if variables is None:
        return MappingResolver()
    if hasattr(variables, 'lookup'):
        return variables
    return MappingResolver(variables)


def interpolate(template: Optional[str], variables: Variables) -> str:
    """Convenience wrapper around VariableInterpolator.interpolate."""
    return VariableInterpolator().interpolate(template, variables)
