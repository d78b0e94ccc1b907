"""Schema loading and reference resolution for OpenAPI documents.

This module provides utilities for:
- Loading OpenAPI documents from URLs or local files (YAML or JSON)
- Resolving local ``$ref`` pointers to the schema nodes they designate
- Extracting canonical type names from pointers
"""

import json
import logging
from pathlib import Path
from typing import Any

import httpx
import yaml

from contractgen.codegen.utils import is_url
from contractgen.exceptions import (
    MalformedReferenceError,
    SchemaLoadError,
    UnresolvedReferenceError,
)

logger = logging.getLogger(__name__)

__all__ = [
    'SchemaLoader',
    'SchemaResolver',
    'schema_kind',
    'schema_type',
]


# =============================================================================
# Schema Loader
# =============================================================================


class SchemaLoader:
    """Loads OpenAPI documents from URLs or file paths.

    The document is returned as plain Python data (dicts and lists), the
    untyped tree the type synthesizer walks. Only minimal structural checks
    are made; validating the full OpenAPI grammar is out of scope.

    Example:
        >>> loader = SchemaLoader()
        >>> document = loader.load('https://api.example.com/openapi.json')
        >>> # or
        >>> document = loader.load('/path/to/openapi.yaml')
    """

    def __init__(
        self,
        http_client: httpx.Client | None = None,
        base_path: str | Path | None = None,
    ):
        """Initialize the schema loader.

        Args:
            http_client: Optional HTTP client to use for URL requests.
            base_path: Base path for resolving relative file paths.
                      Defaults to current working directory.
        """
        self._http_client = http_client
        self._base_path = Path(base_path) if base_path else Path.cwd()

    def load(self, source: str) -> dict:
        """Load an OpenAPI document from a URL or file path.

        Args:
            source: URL or file path to the document.

        Returns:
            The parsed document.

        Raises:
            SchemaLoadError: If the document cannot be loaded or is not a
                mapping with a ``paths`` section.
        """
        try:
            if is_url(source):
                content = self._load_from_url(source)
            else:
                content = self._load_from_file(source)
        except SchemaLoadError:
            raise
        except Exception as e:
            raise SchemaLoadError(source, cause=e)

        if not isinstance(content, dict):
            raise SchemaLoadError(
                source, cause=ValueError('document root must be a mapping')
            )
        if not isinstance(content.get('paths', {}), dict):
            raise SchemaLoadError(source, cause=ValueError("'paths' must be a mapping"))

        content.setdefault('paths', {})
        logger.debug(f'Loaded schema from {source} ({len(content["paths"])} paths)')
        return content

    def _load_from_url(self, url: str) -> dict:
        """Load document content from a URL."""
        try:
            if self._http_client:
                response = self._http_client.get(url)
            else:
                response = httpx.get(url, follow_redirects=True, timeout=30.0)

            response.raise_for_status()
            content_type = response.headers.get('content-type', '')
            content = response.text

            if 'yaml' in content_type or url.endswith(('.yaml', '.yml')):
                return yaml.safe_load(content)
            else:
                return json.loads(content)

        except httpx.HTTPError as e:
            raise SchemaLoadError(url, cause=e)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise SchemaLoadError(url, cause=e)

    def _load_from_file(self, file_path: str) -> dict:
        """Load document content from a file."""
        path = Path(file_path)
        if not path.is_absolute():
            path = self._base_path / path

        if not path.exists():
            raise SchemaLoadError(
                str(file_path), cause=FileNotFoundError(f'File not found: {path}')
            )

        try:
            content = path.read_text(encoding='utf-8')
            if path.suffix.lower() == '.json':
                return json.loads(content)
            # YAML is a superset of JSON, so unknown suffixes go through it
            return yaml.safe_load(content)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise SchemaLoadError(str(file_path), cause=e)
        except OSError as e:
            raise SchemaLoadError(str(file_path), cause=e)


# =============================================================================
# Schema Resolver
# =============================================================================


def schema_type(node: Any) -> str | None:
    """Return the declared ``type`` of a node.

    OpenAPI 3.1 type lists such as ``['string', 'null']`` yield their first
    non-null entry.
    """
    if not isinstance(node, dict):
        return None
    declared = node.get('type')
    if isinstance(declared, list):
        return next((t for t in declared if t != 'null'), None)
    return declared if isinstance(declared, str) else None


def schema_kind(node: Any) -> str:
    """Classify a schema node.

    Returns one of ``reference``, ``enum``, ``array``, ``object`` or
    ``primitive``, checked in that order.
    """
    if not isinstance(node, dict):
        return 'primitive'
    if '$ref' in node:
        return 'reference'
    if isinstance(node.get('enum'), list) and node['enum']:
        return 'enum'
    declared = schema_type(node)
    if declared == 'array':
        return 'array'
    if declared == 'object' or 'properties' in node:
        return 'object'
    return 'primitive'


class SchemaResolver:
    """Resolves local ``$ref`` pointers in an OpenAPI document.

    ``resolve`` and ``name_from_pointer`` are pure static operations; an
    instance binds a document and caches resolved pointers.

    Example:
        >>> resolver = SchemaResolver(document)
        >>> schema = resolver.resolve_reference('#/components/schemas/Pet')
        >>> SchemaResolver.name_from_pointer('#/components/schemas/Pet')
        'Pet'
    """

    def __init__(self, document: dict):
        """Initialize the schema resolver.

        Args:
            document: The OpenAPI document to resolve pointers against.
        """
        self.document = document
        self._cache: dict[str, Any] = {}

    @staticmethod
    def resolve(pointer: str, document: dict) -> Any:
        """Walk ``document`` along ``pointer`` and return the node found.

        Args:
            pointer: A local JSON pointer, e.g. ``#/components/schemas/Pet``.
            document: The document to walk.

        Raises:
            UnresolvedReferenceError: If the pointer is not local or any
                segment is missing.
        """
        if not isinstance(pointer, str) or not pointer.startswith('#'):
            raise UnresolvedReferenceError(
                str(pointer),
                'Only local references (starting with #) are supported',
            )

        path = pointer[1:].lstrip('/')
        if not path:
            return document

        current = document
        for raw_part in path.split('/'):
            part = raw_part.replace('~1', '/').replace('~0', '~')
            if isinstance(current, dict):
                if part not in current:
                    raise UnresolvedReferenceError(
                        pointer, f"segment '{part}' not found"
                    )
                current = current[part]
            elif isinstance(current, list):
                try:
                    current = current[int(part)]
                except (ValueError, IndexError):
                    raise UnresolvedReferenceError(
                        pointer, f"segment '{part}' is not a valid index"
                    )
            else:
                raise UnresolvedReferenceError(
                    pointer, f"segment '{part}' does not address a container"
                )

        return current

    @staticmethod
    def name_from_pointer(pointer: str) -> str:
        """Extract the terminal segment of ``pointer`` as the type name.

        Raises:
            MalformedReferenceError: If the pointer has no terminal segment.
        """
        if not isinstance(pointer, str):
            raise MalformedReferenceError(str(pointer))

        name = pointer.rsplit('/', 1)[-1].replace('~1', '/').replace('~0', '~')
        if not name or name == '#' or '/' not in pointer:
            raise MalformedReferenceError(pointer)
        return name

    def resolve_reference(self, pointer: str) -> Any:
        """Resolve ``pointer`` against the bound document, with caching."""
        if pointer not in self._cache:
            self._cache[pointer] = self.resolve(pointer, self.document)
        return self._cache[pointer]

    def deref(self, node: Any) -> Any:
        """Follow ``$ref`` chains until a non-reference node is reached."""
        seen: set[str] = set()
        while isinstance(node, dict) and '$ref' in node:
            pointer = node['$ref']
            if pointer in seen:
                raise UnresolvedReferenceError(pointer, 'reference chain loops')
            seen.add(pointer)
            node = self.resolve_reference(pointer)
        return node

    def get_all_schemas(self) -> dict[str, Any]:
        """Get all schemas defined in the components/schemas section."""
        components = self.document.get('components') or {}
        return dict(components.get('schemas') or {})

    def clear_cache(self) -> None:
        """Clear the reference resolution cache."""
        self._cache.clear()
