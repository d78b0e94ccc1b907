"""Emission of generated declarations as TypeScript files.

This module provides the DeclarationEmitter, which turns the flat set of
synthesized declarations into one file per declaration plus an index, and the
FileWriter that puts emitted files on disk.
"""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from upath import UPath

from contractgen.codegen.type_registry import Declaration
from contractgen.exceptions import NamingCollisionWarning, OutputError

logger = logging.getLogger(__name__)

__all__ = [
    'DeclarationEmitter',
    'EmittedFile',
    'FileWriter',
    'GENERATED_HEADER',
    'extract_type_dependencies',
]

GENERATED_HEADER = '// This file is generated by contractgen. Do not edit it by hand.'

INDEX_FILE = 'index.ts'

PROPERTY_TYPE_PATTERN = re.compile(r':\s*([A-Z][A-Za-z0-9]*(?:\[\])*)')
TYPE_ALIAS_PATTERN = re.compile(r'=\s*([A-Z][A-Za-z0-9]*(?:\[\])*)')

# Capitalized names that are TypeScript or library types, never declarations
LIBRARY_TYPES = frozenset(
    {
        'Array',
        'Boolean',
        'Date',
        'Map',
        'Number',
        'Object',
        'Partial',
        'Promise',
        'Record',
        'Set',
        'String',
    }
)


@dataclass(frozen=True)
class EmittedFile:
    """A generated file.

    Attributes:
        path: Path of the file relative to its output folder.
        content: The file content.
    """

    path: str
    content: str


def extract_type_dependencies(source: str) -> set[str]:
    """Find capitalized type-name tokens in a rendered declaration.

    Tokens in property type positions (``: Name``) and alias right-hand
    sides (``= Name``) are collected with their ``[]`` suffixes removed.
    Enum member values are lower-case literals or quoted strings and never
    match. Only simple references are found; type arguments such as the
    ``Pet`` in ``Record<string, Pet>`` are not.
    """
    dependencies: set[str] = set()
    for pattern in (PROPERTY_TYPE_PATTERN, TYPE_ALIAS_PATTERN):
        for match in pattern.finditer(source):
            token = match.group(1)
            while token.endswith('[]'):
                token = token[:-2]
            dependencies.add(token)
    return dependencies


class DeclarationEmitter:
    """Assembles per-declaration files and an index.

    Dependencies of a declaration are the names it records explicitly plus
    the names found by lexical scanning of its text, restricted to the
    declarations being emitted. A token that cannot be matched to a
    declaration is logged as a NamingCollisionWarning and collected in
    ``warnings``; import inference is best effort and never aborts emission.

    Example:
        >>> emitter = DeclarationEmitter()
        >>> files = emitter.emit(registry.in_dependency_order())
        >>> files[-1].path
        'index.ts'
    """

    def __init__(self, header: str = GENERATED_HEADER):
        self.header = header
        self.warnings: list[NamingCollisionWarning] = []

    def dependencies_of(
        self, declaration: Declaration, known_names: set[str]
    ) -> list[str]:
        """Sorted declaration names ``declaration`` must import."""
        candidates = set(declaration.depends_on)

        # Enum bodies hold only literals, whose text may look like a type
        tokens = set()
        if declaration.kind != 'enum':
            tokens = extract_type_dependencies(declaration.source)
        for token in tokens:
            if token in known_names:
                candidates.add(token)
            elif token not in LIBRARY_TYPES:
                self._warn(NamingCollisionWarning(declaration.name, token))

        candidates.discard(declaration.name)
        return sorted(name for name in candidates if name in known_names)

    def emit(self, declarations: Iterable[Declaration]) -> list[EmittedFile]:
        """Render one file per declaration followed by ``index.ts``.

        Declarations keep their order; a name seen twice is emitted once.

        Returns:
            The emitted files; the index is always last.
        """
        self.warnings = []
        unique: dict[str, Declaration] = {}
        for declaration in declarations:
            unique.setdefault(declaration.name, declaration)

        known_names = set(unique)
        files = [
            self.emit_declaration(declaration, known_names)
            for declaration in unique.values()
        ]
        files.append(self.emit_index(known_names))
        logger.info(f'Emitted {len(unique)} declarations')
        return files

    def emit_declaration(
        self, declaration: Declaration, known_names: set[str]
    ) -> EmittedFile:
        lines = [self.header, '']

        dependencies = self.dependencies_of(declaration, known_names)
        if dependencies:
            lines.extend(f"import {{ {dep} }} from './{dep}';" for dep in dependencies)
            lines.append('')

        lines.append(declaration.source)
        return EmittedFile(path=f'{declaration.name}.ts', content='\n'.join(lines) + '\n')

    def emit_index(self, names: Iterable[str]) -> EmittedFile:
        """Re-export every declaration, sorted by name."""
        lines = [self.header, '']
        lines.extend(f"export {{ {name} }} from './{name}';" for name in sorted(names))
        return EmittedFile(path=INDEX_FILE, content='\n'.join(lines) + '\n')

    def _warn(self, warning: NamingCollisionWarning) -> None:
        self.warnings.append(warning)
        logger.warning(str(warning))


class FileWriter:
    """Writes emitted files below an output directory.

    Example:
        >>> writer = FileWriter('./generated/models')
        >>> writer.write_all(files)
    """

    def __init__(self, output_dir: str | Path | UPath):
        self.output_dir = UPath(output_dir)
        self._written_files: list[str] = []

    def write(self, emitted: EmittedFile) -> str:
        """Write one file, creating parent directories as needed.

        Raises:
            OutputError: If the file cannot be written.
        """
        file_path = self.output_dir / emitted.path
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(emitted.content, encoding='utf-8')
        except OSError as e:
            raise OutputError(str(file_path), cause=e)

        self._written_files.append(str(file_path))
        logger.debug(f'Wrote {file_path}')
        return str(file_path)

    def write_all(self, files: Iterable[EmittedFile]) -> list[str]:
        return [self.write(emitted) for emitted in files]

    def get_written_files(self) -> list[str]:
        """Get list of all files written by this writer."""
        return self._written_files.copy()
