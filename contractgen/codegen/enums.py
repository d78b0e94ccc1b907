"""Enum declaration synthesis.

Turns an OpenAPI enumeration into a TypeScript ``enum`` declaration and
collapses enumerations with identical value sets into a single declaration.
"""

import json
import logging
from collections.abc import Sequence
from typing import Any

from contractgen.codegen.type_registry import Declaration, DedupRegistry
from contractgen.codegen.utils import is_identifier, sanitize_enum_key
from contractgen.exceptions import InvalidEnumValueError

logger = logging.getLogger(__name__)

__all__ = [
    'EnumSynthesizer',
    'enum_signature',
    'render_enum_value',
    'validate_enum_names',
]


def validate_enum_names(enum_names: Any, enum_values: Sequence[Any]) -> list[str]:
    """Validate caller-supplied member names (``x-enum-varnames``).

    The names are accepted only as a whole: same length as the values, every
    entry an identifier, no duplicates. Any violation rejects the entire list
    and an empty list is returned so that every member falls back to a
    sanitized name.
    """
    if not isinstance(enum_names, (list, tuple)) or len(enum_names) != len(
        enum_values
    ):
        return []

    used: set[str] = set()
    for name in enum_names:
        if not is_identifier(name) or name in used:
            return []
        used.add(name)

    return list(enum_names)


def render_enum_value(value: Any) -> str:
    """Render an enum value as a TypeScript literal.

    Raises:
        ValueError: If the value is None.
    """
    if value is None:
        raise ValueError('null is not allowed as an enum value')
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (int, float)):
        return repr(value)

    escaped = (
        str(value)
        .replace('\\', '\\\\')
        .replace("'", "\\'")
        .replace('\n', '\\n')
        .replace('\r', '\\r')
        .replace('\t', '\\t')
    )
    return f"'{escaped}'"


def enum_signature(enum_values: Sequence[Any]) -> str:
    """Order-independent signature of an enum's value set.

    Each value is encoded together with its type, so ``[1, 2]`` and
    ``['1', '2']`` get different signatures.
    """
    return json.dumps(sorted(json.dumps([type(v).__name__, v], default=str) for v in enum_values))


class EnumSynthesizer:
    """Creates and deduplicates enum declarations.

    Example:
        >>> registry = DedupRegistry()
        >>> enums = EnumSynthesizer(registry)
        >>> enums.synthesize('Color', ['RED', 'GREEN']).name
        'Color'
        >>> enums.synthesize('PetColor', ['GREEN', 'RED']).name
        'Color'
    """

    def __init__(self, registry: DedupRegistry):
        self.registry = registry

    def synthesize(
        self,
        name: str,
        enum_values: Sequence[Any],
        enum_names: Sequence[str] | None = None,
    ) -> Declaration:
        """Return the enum declaration for ``enum_values``.

        Args:
            name: The preferred declaration name.
            enum_values: Literal values (strings, numbers, booleans).
            enum_names: Optional caller-supplied member names.

        Returns:
            The existing declaration when an enum with the same value set was
            already created in this run, otherwise a new one.

        Raises:
            InvalidEnumValueError: If the list is empty or contains None. Nothing
                is registered in that case.
        """
        if not enum_values:
            raise InvalidEnumValueError(name, None)

        members = self._render_members(name, enum_values, enum_names)

        signature = enum_signature(enum_values)
        existing = self.registry.enum_signature_index.get(signature)
        if existing is not None:
            logger.debug(f"Enum '{name}' has the same values as '{existing}', reusing it")
            return self.registry.get(existing)

        final_name = self.registry.unique_name(name)
        declaration = self.registry.add(
            Declaration(name=final_name, kind='enum', body=tuple(members))
        )
        self.registry.enum_signature_index[signature] = final_name
        return declaration

    def _render_members(
        self,
        name: str,
        enum_values: Sequence[Any],
        enum_names: Sequence[str] | None,
    ) -> list[str]:
        valid_names = validate_enum_names(enum_names, enum_values)
        if enum_names is not None and not valid_names:
            logger.debug(f"Ignoring invalid member names for enum '{name}'")

        used_keys: set[str] = set(valid_names)
        members = []
        for index, value in enumerate(enum_values):
            try:
                literal = render_enum_value(value)
            except ValueError:
                raise InvalidEnumValueError(name, index, value)

            key = valid_names[index] if valid_names else sanitize_enum_key(value, used_keys)
            separator = ',' if index < len(enum_values) - 1 else ''
            members.append(f'{key} = {literal}{separator}')

        return members
