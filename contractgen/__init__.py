"""contractgen - Generate TypeScript contracts from OpenAPI specifications.

contractgen turns an OpenAPI 3 document into a deduplicated set of
TypeScript declarations (one file per declaration, plus an index), Express
controller interfaces and route factories.

Quick Start:
    >>> from contractgen import Codegen, DocumentConfig
    >>>
    >>> config = DocumentConfig(source='./openapi.yaml', output='./generated')
    >>> Codegen(config).generate()

CLI Usage:
    $ contractgen generate --source ./openapi.yaml --output ./generated
    $ contractgen generate --config contractgen.yaml
"""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _package_version

from contractgen.codegen.codegen import Codegen, GenerationResult
from contractgen.codegen.schema import SchemaLoader, SchemaResolver
from contractgen.codegen.type_registry import Declaration, DedupRegistry
from contractgen.codegen.types import TypeSynthesizer
from contractgen.config import CodegenConfig, DocumentConfig, get_config
from contractgen.exceptions import (
    CodeGenerationError,
    ConfigurationError,
    ContractGenError,
    InvalidEnumValueError,
    MalformedReferenceError,
    NamingCollisionWarning,
    OutputError,
    SchemaError,
    SchemaLoadError,
    UnresolvedReferenceError,
)

__all__ = [
    # Main classes
    'Codegen',
    'GenerationResult',
    'SchemaLoader',
    'SchemaResolver',
    'Declaration',
    'DedupRegistry',
    'TypeSynthesizer',
    # Configuration
    'CodegenConfig',
    'DocumentConfig',
    'get_config',
    # Exceptions
    'ContractGenError',
    'SchemaError',
    'SchemaLoadError',
    'UnresolvedReferenceError',
    'MalformedReferenceError',
    'CodeGenerationError',
    'InvalidEnumValueError',
    'ConfigurationError',
    'OutputError',
    'NamingCollisionWarning',
]

try:
    __version__ = _package_version('contractgen')
except PackageNotFoundError:
    __version__ = 'unknown'
