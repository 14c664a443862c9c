"""Resolution of nested custom property references.

Expands ``var(--name)`` tokens recursively until the value stops changing.
Names are looked up in a caller-supplied local table first (declarations
from the same stylesheet) and then in the registry, taking the lowest
specificity declaration. A reference back to a name already being expanded
is left literal and logged, so cyclic declarations always terminate.
"""

import re
from collections.abc import Mapping, Sequence

from ..indexer_logging import LogCategory, get_category_logger
from ..models import VariableDeclaration
from ..registry import Registry

logger = get_category_logger(LogCategory.INDEXER)

VAR_REFERENCE_PATTERN = re.compile(r"var\(\s*(--[\w-]+)\s*\)")

# Upper bound on whole-string passes; each pass already expands recursively
MAX_PASSES = 16

LocalDeclarations = Mapping[str, Sequence[VariableDeclaration]]


class VariableResolver:
    """Expands ``var()`` references against local declarations and a registry."""

    def __init__(self, registry: Registry):
        self.registry = registry

    def preferred_declaration(
        self,
        name: str,
        local_declarations: LocalDeclarations | None = None,
    ) -> VariableDeclaration | None:
        """The declaration a reference to ``name`` resolves to.

        Local declarations win over the registry; within each, the lowest
        specificity entry is used.
        """
        if local_declarations:
            local = local_declarations.get(name)
            if local:
                return local[0]

        declarations = self.registry.get_variables_sorted(name)
        if declarations:
            return declarations[0]
        return None

    def resolve(
        self,
        value: str,
        local_declarations: LocalDeclarations | None = None,
        visited: frozenset[str] = frozenset(),
    ) -> str:
        """Expand every resolvable ``var()`` reference in ``value``.

        Args:
            value: Raw declaration value.
            local_declarations: Optional name -> declarations table consulted
                before the registry, lists sorted by specificity.
            visited: Names already being expanded on the current path.

        Returns:
            The expanded value. Unknown names and cycle points stay literal.
        """
        resolved = value
        for _ in range(MAX_PASSES):
            updated = VAR_REFERENCE_PATTERN.sub(
                lambda match: self._expand(match, local_declarations, visited),
                resolved,
            )
            if updated == resolved:
                break
            resolved = updated
        return resolved

    def resolve_declaration(
        self,
        declaration: VariableDeclaration,
        local_declarations: LocalDeclarations | None = None,
    ) -> str:
        """Resolved value of a declaration, using its cached value if present."""
        if declaration.resolved_value is not None:
            return declaration.resolved_value
        return self.resolve(
            declaration.value, local_declarations, frozenset({declaration.name})
        )

    def _expand(
        self,
        match: re.Match[str],
        local_declarations: LocalDeclarations | None,
        visited: frozenset[str],
    ) -> str:
        name = match.group(1)
        if name in visited:
            logger.warning(f"Circular CSS variable reference detected: {name}")
            return match.group(0)

        declaration = self.preferred_declaration(name, local_declarations)
        if declaration is None:
            return match.group(0)

        return self.resolve(declaration.value, local_declarations, visited | {name})
