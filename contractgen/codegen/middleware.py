"""Middleware selection for generated routes.

A middleware policy decides which middleware guards each route and how each
middleware is imported in a routes file. Policies come either from a rule
file (YAML or JSON) or from a Python module exposing ``get_middleware`` and
``get_middleware_import``.
"""

import importlib.util
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from contractgen.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

__all__ = [
    'MiddlewarePolicy',
    'MiddlewareProvider',
    'ModuleMiddlewarePolicy',
    'load_middleware_policy',
]

RULE_FILE_SUFFIXES = ('.yaml', '.yml', '.json')


@runtime_checkable
class MiddlewareProvider(Protocol):
    """Anything the route generator can ask for middleware."""

    def get_middleware(self, fn_name: str, method: str, tags: list[str]) -> list[str]:
        ...

    def get_middleware_import(self, name: str) -> str | None:
        ...


class MiddlewarePolicy(BaseModel):
    """Rule-based middleware policy.

    Middleware for a route is collected from ``default``, then the rule for
    the HTTP method, then the rules of every tag, then the rule of the
    operation itself. Names listed in ``exclude`` for the operation are
    dropped and duplicates are removed, keeping the first occurrence.

    Example:
        >>> policy = MiddlewarePolicy(
        ...     default=['authenticate'],
        ...     methods={'POST': ['validateBody']},
        ...     imports={'authenticate': "require('../middleware/auth')"},
        ... )
        >>> policy.get_middleware('createPet', 'POST', ['Pets'])
        ['authenticate', 'validateBody']
    """

    default: list[str] = Field(
        default_factory=list, description='Middleware applied to every route.'
    )
    methods: dict[str, list[str]] = Field(
        default_factory=dict, description='Middleware per HTTP method.'
    )
    tags: dict[str, list[str]] = Field(
        default_factory=dict, description='Middleware per operation tag.'
    )
    operations: dict[str, list[str]] = Field(
        default_factory=dict, description='Middleware per operation id.'
    )
    exclude: dict[str, list[str]] = Field(
        default_factory=dict,
        description='Middleware removed from specific operations.',
    )
    imports: dict[str, str] = Field(
        default_factory=dict,
        description='Import expression per middleware name.',
    )

    @field_validator('methods')
    @classmethod
    def _upper_case_methods(cls, value: dict[str, list[str]]) -> dict[str, list[str]]:
        return {method.upper(): names for method, names in value.items()}

    def get_middleware(self, fn_name: str, method: str, tags: list[str]) -> list[str]:
        candidates = [
            *self.default,
            *self.methods.get(method.upper(), []),
            *(name for tag in tags for name in self.tags.get(tag, [])),
            *self.operations.get(fn_name, []),
        ]
        excluded = set(self.exclude.get(fn_name, []))
        return [name for name in dict.fromkeys(candidates) if name not in excluded]

    def get_middleware_import(self, name: str) -> str | None:
        return self.imports.get(name)


class ModuleMiddlewarePolicy:
    """Adapts a loaded Python module to the MiddlewareProvider protocol."""

    def __init__(self, module, source: str):
        self.module = module
        self.source = source

    def get_middleware(self, fn_name: str, method: str, tags: list[str]) -> list[str]:
        return list(self.module.get_middleware(fn_name, method, tags) or [])

    def get_middleware_import(self, name: str) -> str | None:
        return self.module.get_middleware_import(name)


def _load_rule_file(path: Path) -> MiddlewarePolicy:
    try:
        data = yaml.safe_load(path.read_text(encoding='utf-8')) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f'Cannot read middleware config: {e}', str(path))

    try:
        return MiddlewarePolicy.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f'Invalid middleware config: {e}', str(path))


def _load_module(path: Path) -> ModuleMiddlewarePolicy:
    spec = importlib.util.spec_from_file_location(f'_contractgen_middleware_{path.stem}', path)
    if spec is None or spec.loader is None:
        raise ConfigurationError('Cannot import middleware module', str(path))

    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        raise ConfigurationError(f'Middleware module failed to import: {e}', str(path))

    for attr in ('get_middleware', 'get_middleware_import'):
        if not callable(getattr(module, attr, None)):
            raise ConfigurationError(
                'Middleware module must define a callable', str(path), field=attr
            )

    return ModuleMiddlewarePolicy(module, str(path))


def load_middleware_policy(path: str | Path | None = None) -> MiddlewareProvider:
    """Load a middleware policy.

    Args:
        path: A ``.yaml``/``.yml``/``.json`` rule file or a ``.py`` module.
            Without a path, an empty policy is returned and routes carry no
            middleware.

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid.
    """
    if path is None:
        return MiddlewarePolicy()

    path = Path(path)
    if not path.exists():
        raise ConfigurationError('Middleware config not found', str(path))

    suffix = path.suffix.lower()
    if suffix == '.py':
        policy = _load_module(path)
    elif suffix in RULE_FILE_SUFFIXES:
        policy = _load_rule_file(path)
    else:
        raise ConfigurationError(
            f"Unsupported middleware config type '{suffix}'", str(path)
        )

    logger.debug(f'Loaded middleware policy from {path}')
    return policy
