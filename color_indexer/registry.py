"""In-memory registry of custom property and class color declarations.

Declarations are keyed by name and partitioned by source (the identity of
the stylesheet they came from). Replacing or removing one source's
contribution never disturbs another source's declarations of the same name,
so stylesheets can be re-indexed independently.

Per-name variable lists are kept sorted by selector specificity, ties in
insertion order, so the first entry is the default pick. Class lists keep
insertion order and the first entry always wins.
"""

import bisect
from collections.abc import Iterable

from .models import ClassColorDeclaration, VariableDeclaration


class Registry:
    """Store of declarations, owned and injected by its users."""

    def __init__(self) -> None:
        self._variables: dict[str, list[VariableDeclaration]] = {}
        self._classes: dict[str, list[ClassColorDeclaration]] = {}

    # Variables

    def add_variable(self, name: str, declaration: VariableDeclaration) -> None:
        """Add a declaration, keeping the name's list sorted by specificity."""
        declarations = self._variables.setdefault(name, [])
        keys = [decl.context.specificity for decl in declarations]
        index = bisect.bisect_right(keys, declaration.context.specificity)
        declarations.insert(index, declaration)

    def get_variable(self, name: str) -> list[VariableDeclaration] | None:
        """The stored declarations of a variable, or None if it is unknown.

        The store is kept in specificity order on insert, so the copy returned
        here is already ascending; no further sorting is applied.
        """
        declarations = self._variables.get(name)
        return list(declarations) if declarations else None

    def get_variables_sorted(self, name: str) -> list[VariableDeclaration]:
        """Declarations of a variable sorted by ascending specificity."""
        declarations = self._variables.get(name)
        if not declarations:
            return []
        return sorted(declarations, key=lambda decl: decl.context.specificity)

    def has_variable(self, name: str) -> bool:
        return name in self._variables

    def replace_variables_for_source(
        self, source_id: str, declarations: Iterable[VariableDeclaration]
    ) -> None:
        """Swap one source's variable declarations for a new set."""
        self._remove_from(self._variables, source_id)
        for declaration in declarations:
            self.add_variable(declaration.name, declaration)

    # Classes

    def add_class(self, name: str, declaration: ClassColorDeclaration) -> None:
        self._classes.setdefault(name, []).append(declaration)

    def get_class(self, name: str) -> list[ClassColorDeclaration] | None:
        """All declarations of a class in registration order, or None."""
        declarations = self._classes.get(name)
        return list(declarations) if declarations else None

    def has_class(self, name: str) -> bool:
        return name in self._classes

    def replace_classes_for_source(
        self, source_id: str, declarations: Iterable[ClassColorDeclaration]
    ) -> None:
        """Swap one source's class declarations for a new set."""
        self._remove_from(self._classes, source_id)
        for declaration in declarations:
            self.add_class(declaration.class_name, declaration)

    # Sources

    def replace_for_source(
        self,
        source_id: str,
        variables: Iterable[VariableDeclaration] = (),
        classes: Iterable[ClassColorDeclaration] = (),
    ) -> None:
        """Replace everything a source contributes in one call."""
        variables = list(variables)
        classes = list(classes)
        self.replace_variables_for_source(source_id, variables)
        self.replace_classes_for_source(source_id, classes)

    def remove_source(self, source_id: str) -> None:
        """Drop every declaration contributed by a source."""
        self._remove_from(self._variables, source_id)
        self._remove_from(self._classes, source_id)

    def sources(self) -> set[str]:
        """Identities of all sources with at least one declaration."""
        found = {
            decl.source_id
            for declarations in self._variables.values()
            for decl in declarations
        }
        found.update(
            decl.source_id
            for declarations in self._classes.values()
            for decl in declarations
        )
        return found

    def clear(self) -> None:
        """Remove all variables and classes."""
        self._variables.clear()
        self._classes.clear()

    @staticmethod
    def _remove_from(store: dict, source_id: str) -> None:
        for name in list(store):
            declarations = store[name]
            kept = [decl for decl in declarations if decl.source_id != source_id]
            if not kept:
                del store[name]
            elif len(kept) != len(declarations):
                store[name] = kept

    # Introspection

    @property
    def variable_count(self) -> int:
        """Number of distinct variable names."""
        return len(self._variables)

    @property
    def class_count(self) -> int:
        """Number of distinct class names."""
        return len(self._classes)

    def all_variable_names(self) -> list[str]:
        return list(self._variables)

    def all_class_names(self) -> list[str]:
        return list(self._classes)

    def class_names_sorted(self) -> list[str]:
        return sorted(self._classes)
