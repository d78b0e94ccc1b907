"""Code generation module for contractgen.

This module provides the engine that turns an OpenAPI document into
TypeScript declarations, Express controller interfaces and route factories.

Main Components:
    - Codegen: The orchestrator for one document
    - TypeSynthesizer: Converts schema nodes into types and declarations
    - EnumSynthesizer: Creates and deduplicates enum declarations
    - ParameterRegistry: Assigns reusable names to parameter shapes
    - DedupRegistry: Run-scoped names, signatures and declarations
    - DeclarationEmitter: Renders one file per declaration plus an index

Example:
    >>> from contractgen.codegen import Codegen
    >>> from contractgen.config import DocumentConfig
    >>>
    >>> config = DocumentConfig(source='./openapi.yaml', output='./generated')
    >>> Codegen(config).generate()
"""

from contractgen.codegen.codegen import Codegen, GenerationResult
from contractgen.codegen.controllers import ControllerGenerator
from contractgen.codegen.emitter import (
    DeclarationEmitter,
    EmittedFile,
    FileWriter,
    extract_type_dependencies,
)
from contractgen.codegen.enums import EnumSynthesizer
from contractgen.codegen.middleware import (
    MiddlewarePolicy,
    MiddlewareProvider,
    load_middleware_policy,
)
from contractgen.codegen.operations import OperationCollector, OperationInfo
from contractgen.codegen.parameters import ParameterRegistry
from contractgen.codegen.routes import (
    RouteGenerator,
    convert_path_to_express_route,
    find_common_path_prefix,
)
from contractgen.codegen.schema import SchemaLoader, SchemaResolver
from contractgen.codegen.type_registry import Declaration, DedupRegistry
from contractgen.codegen.types import TypeSynthesizer

__all__ = [
    # Main codegen class
    'Codegen',
    'GenerationResult',
    # Type synthesis
    'Declaration',
    'DedupRegistry',
    'EnumSynthesizer',
    'ParameterRegistry',
    'TypeSynthesizer',
    # Schema handling
    'SchemaLoader',
    'SchemaResolver',
    # Operations
    'OperationCollector',
    'OperationInfo',
    # Emission
    'ControllerGenerator',
    'DeclarationEmitter',
    'EmittedFile',
    'FileWriter',
    'RouteGenerator',
    'convert_path_to_express_route',
    'extract_type_dependencies',
    'find_common_path_prefix',
    # Middleware
    'MiddlewarePolicy',
    'MiddlewareProvider',
    'load_middleware_policy',
]
