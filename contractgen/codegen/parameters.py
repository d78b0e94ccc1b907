"""Parameter extraction and reusable parameter types.

This module provides the ParameterRegistry that extracts path and query
parameter sets from operations and deduplicates them by shape across the
whole document, so that every operation taking ``id: string`` as its only
path parameter shares one ``IdPathParams`` declaration.
"""

import logging
from typing import TYPE_CHECKING, Literal

from contractgen.codegen.type_registry import Declaration
from contractgen.codegen.utils import quote_property_name, to_pascal_case

if TYPE_CHECKING:
    from contractgen.codegen.types import TypeSynthesizer

logger = logging.getLogger(__name__)

__all__ = [
    'MAX_PARAM_NAME_COMBINATION',
    'ParameterRegistry',
    'ParameterSet',
    'param_signature',
]

ParameterCategory = Literal['path', 'query']
ParameterSet = dict[str, str]

# Above this many parameters the operation-derived fallback name is used
MAX_PARAM_NAME_COMBINATION = 3

OPTIONAL_MARKER = '?'


def param_signature(params: ParameterSet) -> str:
    """Key-order independent signature of a parameter set."""
    return '|'.join(f'{key}:{params[key]}' for key in sorted(params))


def _strip_marker(key: str) -> str:
    return key[: -len(OPTIONAL_MARKER)] if key.endswith(OPTIONAL_MARKER) else key


class ParameterRegistry:
    """Extracts parameter sets and assigns reusable declaration names.

    Example:
        >>> params = ParameterRegistry(synthesizer)
        >>> params.reusable_name({'id': 'string'}, 'path', 'GetPetPathParams')
        'IdPathParams'
        >>> params.reusable_name({'id': 'string'}, 'path', 'DeletePetPathParams')
        'IdPathParams'
    """

    def __init__(self, synthesizer: 'TypeSynthesizer'):
        self.synthesizer = synthesizer
        self.registry = synthesizer.registry
        self._type_dependencies: dict[str, frozenset[str]] = {}

    def extract_parameters(
        self,
        operation: dict,
        category: ParameterCategory,
        path_item: dict | None = None,
    ) -> ParameterSet:
        """Collect the ``category`` parameters of an operation.

        Path-item level parameters are merged in; an operation parameter
        with the same name and location overrides them. Query parameters
        that are not required get the ``?`` key suffix.

        Returns:
            Mapping of (possibly suffixed) parameter name to type reference.
        """
        merged: dict[tuple[str, str], dict] = {}
        declared = [
            *((path_item or {}).get('parameters') or []),
            *(operation.get('parameters') or []),
        ]
        for raw in declared:
            param = self.synthesizer.resolver.deref(raw)
            if not isinstance(param, dict) or not param.get('name'):
                logger.debug(f'Skipping parameter without a name: {raw!r}')
                continue
            merged[(param['name'], param.get('in'))] = param

        params: ParameterSet = {}
        for (name, location), param in merged.items():
            if location != category:
                continue

            dependencies: set[str] = set()
            type_ref = self.synthesizer.to_type_ref(
                param.get('schema') or {},
                f'{to_pascal_case(name)}{to_pascal_case(category)}Param',
                dependencies,
            )
            required = category == 'path' or bool(param.get('required'))
            key = name if required else f'{name}{OPTIONAL_MARKER}'
            params[key] = type_ref
            self._type_dependencies[type_ref] = frozenset(dependencies)

        return params

    def reusable_name(
        self,
        params: ParameterSet,
        category: str,
        fallback_name: str,
    ) -> str:
        """Find or create the reusable declaration name for ``params``.

        Args:
            params: The parameter set.
            category: ``path`` or ``query``.
            fallback_name: Name to use when the set is too large to name
                after its parameters (derived from the operation id).

        Returns:
            The declaration name; identical shapes always get the same name.
        """
        signature = param_signature(params)
        existing = self.registry.parameter_signature_index.get(signature)
        if existing is not None:
            logger.debug(f"Reusing parameter type '{existing}' for {signature}")
            return existing

        keys = sorted(params)
        suffix = f'{to_pascal_case(category)}Params'

        if len(keys) == 1:
            name = f'{to_pascal_case(_strip_marker(keys[0]))}{suffix}'
        elif 1 < len(keys) <= MAX_PARAM_NAME_COMBINATION:
            name = ''.join(to_pascal_case(_strip_marker(k)) for k in keys) + suffix
        else:
            name = fallback_name

        if self.registry.is_taken(name):
            logger.warning(
                f"Parameter type name '{name}' is already used by another shape, "
                f"falling back to '{fallback_name}'"
            )
            name = self.registry.unique_name(fallback_name)

        self.registry.parameter_signature_index[signature] = name
        self._declare(name, params)
        return name

    def _declare(self, name: str, params: ParameterSet) -> None:
        members = []
        for key, type_ref in params.items():
            optional = key.endswith(OPTIONAL_MARKER)
            prop = quote_property_name(_strip_marker(key))
            members.append(f'{prop}{OPTIONAL_MARKER if optional else ""}: {type_ref};')

        dependencies: set[str] = set()
        for type_ref in params.values():
            dependencies.update(self._type_dependencies.get(type_ref, ()))

        self.registry.add(
            Declaration(
                name=name,
                kind='interface',
                body=tuple(members),
                depends_on=frozenset(dependencies),
            )
        )

