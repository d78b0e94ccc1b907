"""Type synthesis from OpenAPI schema nodes.

This module provides the TypeSynthesizer, which converts schema nodes into
TypeScript type references and registers a named declaration for every
referenced schema and every inline object, array or enum shape it meets.

Naming follows the enclosing path: a property ``address`` of ``User`` is
synthesized as ``UserAddressItem``. Objects are deduplicated by that derived
name only, never by structure, so two same-shaped objects at different paths
stay distinct types. Enums are deduplicated by their value set.
"""

import logging
from typing import Any

from contractgen.codegen.enums import EnumSynthesizer
from contractgen.codegen.schema import SchemaResolver, schema_kind, schema_type
from contractgen.codegen.type_registry import Declaration, DedupRegistry
from contractgen.codegen.utils import quote_property_name, to_pascal_case
from contractgen.exceptions import MalformedReferenceError

logger = logging.getLogger(__name__)

__all__ = [
    'OPEN_MAP_TYPE',
    'UNKNOWN_TYPE',
    'TypeSynthesizer',
    'primitive_type',
]

UNKNOWN_TYPE = 'unknown'
OPEN_MAP_TYPE = 'Record<string, unknown>'

_PRIMITIVE_TYPE_MAP = {
    'integer': 'number',
    'number': 'number',
    'string': 'string',
    'boolean': 'boolean',
}


def primitive_type(node: Any) -> str:
    """Map a primitive schema node to its TypeScript type."""
    if not isinstance(node, dict):
        return UNKNOWN_TYPE
    return _PRIMITIVE_TYPE_MAP.get(schema_type(node), UNKNOWN_TYPE)


def _unwrap_composition(node: Any) -> Any:
    # A single-element allOf is a common way to attach a description to a $ref
    if isinstance(node, dict) and set(node) & {'allOf', 'anyOf', 'oneOf'}:
        all_of = node.get('allOf')
        if isinstance(all_of, list) and len(all_of) == 1 and 'properties' not in node:
            return all_of[0]
    return node


def _is_composition(node: Any) -> bool:
    return (
        isinstance(node, dict)
        and bool(set(node) & {'allOf', 'anyOf', 'oneOf'})
        and '$ref' not in node
        and 'properties' not in node
        and 'type' not in node
        and 'enum' not in node
    )


class TypeSynthesizer:
    """Converts schema nodes into type references and declarations.

    All state lives in the DedupRegistry passed in; one synthesizer (and one
    registry) serves one generation run.

    Attributes:
        document: The OpenAPI document being processed.
        registry: The run's deduplication registry.
        enums: The enum synthesizer sharing the same registry.

    Example:
        >>> registry = DedupRegistry()
        >>> synthesizer = TypeSynthesizer(document, registry)
        >>> synthesizer.to_type_ref({'$ref': '#/components/schemas/Pet'}, 'Pet')
        'Pet'
        >>> [d.name for d in registry.declarations]
        ['Pet']
    """

    def __init__(self, document: dict, registry: DedupRegistry):
        self.document = document
        self.registry = registry
        self.resolver = SchemaResolver(document)
        self.enums = EnumSynthesizer(registry)

    def to_type_ref(
        self,
        node: Any,
        path_name: str,
        dependencies: set[str] | None = None,
    ) -> str:
        """Convert ``node`` into a TypeScript type reference.

        Args:
            node: The schema node.
            path_name: The PascalCase name of the enclosing path, used to name
                inline shapes.
            dependencies: If given, receives every declaration name the
                returned reference mentions.

        Returns:
            A type reference such as ``Pet``, ``UserAddressItem[]`` or
            ``string``.

        Raises:
            UnresolvedReferenceError: If a ``$ref`` cannot be resolved.
            MalformedReferenceError: If a ``$ref`` has no terminal name.
            InvalidEnumValueError: If an enum contains a null value.
        """
        if dependencies is None:
            dependencies = set()

        node = _unwrap_composition(node)
        kind = schema_kind(node)

        if kind == 'reference':
            name = self._reference(node['$ref'])
            dependencies.add(name)
            return name

        if kind == 'enum':
            name = self._enum(path_name, node)
            dependencies.add(name)
            return name

        if kind == 'array':
            return self._array(node, path_name, dependencies)

        if kind == 'object':
            if not node.get('properties'):
                return self._open_map(node, path_name, dependencies)

            name = f'{path_name}Item'
            if not self.registry.is_taken(name):
                self._build_interface(name, node)
            dependencies.add(name)
            return name

        if _is_composition(node):
            logger.debug(f"Composition at '{path_name}' is not supported, using unknown")
        return primitive_type(node)

    def declare(
        self,
        name: str,
        node: Any,
        dependencies: set[str] | None = None,
    ) -> str:
        """Type an operation-level root schema (request or response body).

        References, arrays of references, primitives and open objects are
        returned as plain type references. Inline objects, enums and other
        arrays get a declaration named exactly ``name``.

        Returns:
            The type reference to use for the root.
        """
        if dependencies is None:
            dependencies = set()

        node = _unwrap_composition(node)
        kind = schema_kind(node)

        if kind == 'array':
            items = _unwrap_composition(node.get('items'))
            if schema_kind(items) == 'reference' or (
                schema_kind(items) == 'primitive' and not _is_composition(items)
            ):
                return self.to_type_ref(node, name, dependencies)
        elif kind == 'object':
            if not node.get('properties'):
                return self._open_map(node, name, dependencies)
        elif kind != 'enum':
            return self.to_type_ref(node, name, dependencies)

        if kind != 'enum' and self.registry.is_taken(name):
            dependencies.add(name)
            return name

        declared = self._build_declaration(name, node)
        dependencies.add(declared)
        return declared

    def _reference(self, pointer: str) -> str:
        mapped = self.registry.references.get(pointer)
        if mapped is not None:
            return mapped

        target = self.resolver.resolve_reference(pointer)
        name = to_pascal_case(SchemaResolver.name_from_pointer(pointer))
        if not name:
            raise MalformedReferenceError(pointer)

        # Distinct schemas may collapse to one PascalCase name (pet, Pet)
        if name in self.registry.references.values():
            unique = self.registry.unique_name(name)
            logger.warning(
                f"'{pointer}' maps to '{name}' which another schema already uses, "
                f"declaring it as '{unique}'"
            )
            name = unique

        if schema_kind(_unwrap_composition(target)) == 'enum':
            declared = self._enum(name, _unwrap_composition(target))
            self.registry.references[pointer] = declared
            return declared

        self.registry.references[pointer] = name
        if self.registry.is_taken(name):
            logger.debug(f"'{pointer}' maps to already declared name '{name}'")
            return name

        self._build_declaration(name, target)
        return name

    def _enum(self, name: str, node: dict) -> str:
        declaration = self.enums.synthesize(
            name, node['enum'], node.get('x-enum-varnames')
        )
        return declaration.name

    def _array(self, node: dict, path_name: str, dependencies: set[str]) -> str:
        items = node.get('items')
        if items is None:
            return f'{UNKNOWN_TYPE}[]'

        # Inline object items append their own Item suffix
        item_kind = schema_kind(_unwrap_composition(items))
        item_path = f'{path_name}Item' if item_kind in ('enum', 'array') else path_name
        item_ref = self.to_type_ref(items, item_path, dependencies)
        if ' ' in item_ref or '<' in item_ref:
            return f'Array<{item_ref}>'
        return f'{item_ref}[]'

    def _open_map(self, node: dict, path_name: str, dependencies: set[str]) -> str:
        additional = node.get('additionalProperties')
        if isinstance(additional, dict) and additional:
            value_ref = self.to_type_ref(additional, f'{path_name}Value', dependencies)
            return f'Record<string, {value_ref}>'
        return OPEN_MAP_TYPE

    def _build_declaration(self, name: str, node: Any) -> str:
        """Build a declaration named ``name`` for a non-reference node.

        The name is claimed before recursing into children, so a cycle that
        leads back here finds the name taken and emits a plain reference.

        Returns:
            The declared name (enums may resolve to an existing declaration).
        """
        node = _unwrap_composition(node)
        kind = schema_kind(node)

        if kind == 'enum':
            return self._enum(name, node)

        self.registry.seen_names.add(name)

        if kind == 'object' and node.get('properties'):
            self._build_interface(name, node, claimed=True)
            return name

        dependencies: set[str] = set()
        if kind in ('array', 'reference'):
            target = self.to_type_ref(node, name, dependencies)
        elif kind == 'object':
            target = self._open_map(node, name, dependencies)
        else:
            target = primitive_type(node)

        self.registry.add(
            Declaration(
                name=name,
                kind='alias',
                body=target,
                depends_on=frozenset(dependencies),
            )
        )
        logger.debug(f"Declared alias '{name}' = {target}")
        return name

    def _build_interface(self, name: str, node: dict, claimed: bool = False) -> None:
        if not claimed:
            self.registry.claim(name)

        required = set(node.get('required') or [])
        dependencies: set[str] = set()
        members = []
        for prop, prop_schema in (node.get('properties') or {}).items():
            prop_type = self.to_type_ref(
                prop_schema, f'{name}{to_pascal_case(prop) if prop else ""}', dependencies
            )
            optional = '' if prop in required else '?'
            members.append(f'{quote_property_name(prop)}{optional}: {prop_type};')

        self.registry.add(
            Declaration(
                name=name,
                kind='interface',
                body=tuple(members),
                depends_on=frozenset(dependencies),
            )
        )
        logger.debug(f"Declared interface '{name}' with {len(members)} members")
