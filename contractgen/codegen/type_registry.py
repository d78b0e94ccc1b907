"""Declaration registry for a single generation run.

This module provides the Declaration dataclass and the DedupRegistry that
tracks every declaration materialized during a run, together with the
signature indexes used to deduplicate enums and parameter shapes.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Literal

logger = logging.getLogger(__name__)

DeclarationKind = Literal['interface', 'alias', 'enum']


@dataclass(frozen=True)
class Declaration:
    """A named, emitted TypeScript type definition.

    Attributes:
        name: The declaration name, unique within a run.
        kind: ``interface``, ``alias`` or ``enum``.
        body: The rendered member lines (interface, enum) or the right-hand
            side of the alias.
        depends_on: Names of other declarations referenced by the body.
    """

    name: str
    kind: DeclarationKind
    body: tuple[str, ...] | str
    depends_on: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self):
        if self.name in self.depends_on:
            object.__setattr__(self, 'depends_on', self.depends_on - {self.name})

    @property
    def source(self) -> str:
        """The full ``export ...`` text block for this declaration."""
        if self.kind == 'alias':
            return f'export type {self.name} = {self.body};'

        keyword = 'interface' if self.kind == 'interface' else 'enum'
        lines = [f'export {keyword} {self.name} {{']
        lines.extend(f'  {line}' for line in self.body)
        lines.append('}')
        return '\n'.join(lines)


class DedupRegistry:
    """Run-scoped deduplication state and declaration store.

    A fresh registry is created for every generation run, so names and
    signatures from a previous run can never suppress declarations in the
    next one.

    Attributes:
        seen_names: Every declaration name claimed so far, including names
            whose declaration is still being built.
        enum_signature_index: Canonical enum value signature -> declaration name.
        parameter_signature_index: Canonical parameter-shape signature ->
            declaration name.
        references: ``$ref`` pointer -> declaration name.

    Example:
        >>> registry = DedupRegistry()
        >>> registry.claim('Pet')
        >>> registry.add(Declaration('Pet', 'interface', ('id: number;',)))
        >>> [d.name for d in registry.in_dependency_order()]
        ['Pet']
    """

    def __init__(self):
        """Initialize an empty registry."""
        self.seen_names: set[str] = set()
        self.enum_signature_index: dict[str, str] = {}
        self.parameter_signature_index: dict[str, str] = {}
        self.references: dict[str, str] = {}
        self._declarations: dict[str, Declaration] = {}

    def claim(self, name: str) -> None:
        """Mark ``name`` as taken before its declaration is built.

        Raises:
            ValueError: If the name is already taken.
        """
        if name in self.seen_names:
            raise ValueError(f"Declaration name '{name}' is already taken")
        self.seen_names.add(name)

    def is_taken(self, name: str) -> bool:
        return name in self.seen_names

    def unique_name(self, name: str) -> str:
        """Return ``name`` or the first free ``name1``, ``name2``, ..."""
        if name not in self.seen_names:
            return name
        counter = 1
        while f'{name}{counter}' in self.seen_names:
            counter += 1
        logger.debug(f"Name '{name}' is taken, using '{name}{counter}'")
        return f'{name}{counter}'

    def add(self, declaration: Declaration) -> Declaration:
        """Store a finished declaration.

        The name must have been claimed (or is claimed now) and must not
        already hold a declaration.

        Raises:
            ValueError: If a declaration with the same name is already stored.
        """
        if declaration.name in self._declarations:
            raise ValueError(f"Declaration '{declaration.name}' is already registered")
        self.seen_names.add(declaration.name)
        self._declarations[declaration.name] = declaration
        return declaration

    def get(self, name: str) -> Declaration | None:
        return self._declarations.get(name)

    @property
    def declarations(self) -> list[Declaration]:
        """Declarations in discovery (completion) order."""
        return list(self._declarations.values())

    def names(self) -> list[str]:
        """All declaration names, sorted alphabetically."""
        return sorted(self._declarations)

    def in_dependency_order(self) -> list[Declaration]:
        """Get all declarations sorted so that dependencies come first.

        Names are visited alphabetically for a stable result. Back-edges of
        reference cycles are skipped; cyclic declarations still import each
        other by name.
        """
        result: list[Declaration] = []
        visited: set[str] = set()
        visiting: set[str] = set()

        def visit(name: str) -> None:
            if name in visited or name in visiting:
                return
            if name not in self._declarations:
                return

            visiting.add(name)
            declaration = self._declarations[name]

            for dep in sorted(declaration.depends_on):
                visit(dep)

            visiting.remove(name)
            visited.add(name)
            result.append(declaration)

        for name in sorted(self._declarations):
            visit(name)

        return result

    def clear(self) -> None:
        """Forget every name, signature and declaration."""
        self.seen_names.clear()
        self.enum_signature_index.clear()
        self.parameter_signature_index.clear()
        self.references.clear()
        self._declarations.clear()

    def __len__(self) -> int:
        return len(self._declarations)

    def __iter__(self) -> Iterator[Declaration]:
        return iter(self._declarations.values())

    def __contains__(self, name: str) -> bool:
        return name in self._declarations
