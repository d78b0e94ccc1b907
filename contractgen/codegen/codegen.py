import logging
from dataclasses import dataclass, field

from upath import UPath

from contractgen.codegen.controllers import ControllerGenerator
from contractgen.codegen.emitter import DeclarationEmitter, EmittedFile, FileWriter
from contractgen.codegen.middleware import MiddlewareProvider, load_middleware_policy
from contractgen.codegen.operations import OperationCollector, OperationInfo
from contractgen.codegen.parameters import ParameterRegistry
from contractgen.codegen.routes import RouteGenerator
from contractgen.codegen.schema import SchemaLoader
from contractgen.codegen.type_registry import Declaration, DedupRegistry
from contractgen.codegen.types import TypeSynthesizer
from contractgen.config import DocumentConfig
from contractgen.exceptions import NamingCollisionWarning

logger = logging.getLogger(__name__)

__all__ = ['Codegen', 'GenerationResult']


def _schema_pointer(name: str) -> str:
    escaped = name.replace('~', '~0').replace('/', '~1')
    return f'#/components/schemas/{escaped}'


@dataclass
class GenerationResult:
    """Everything one generation run produced.

    Attributes:
        declarations: Declarations in dependency order.
        operations: Typed operations in document order.
        operations_by_tag: Operations grouped by tag, tags in first-seen order.
        parameter_types: Parameter signature -> reusable type name.
        model_files: Model files, ending with ``index.ts``.
        controller_files: One controller interface file per tag.
        route_files: One route file per tag.
        warnings: Non-fatal naming collisions found while emitting models.
        written_files: Paths written by ``generate()``; empty for ``build()``.
    """

    declarations: list[Declaration]
    operations: list[OperationInfo]
    operations_by_tag: dict[str, list[OperationInfo]]
    parameter_types: dict[str, str]
    model_files: list[EmittedFile] = field(default_factory=list)
    controller_files: list[EmittedFile] = field(default_factory=list)
    route_files: list[EmittedFile] = field(default_factory=list)
    warnings: list[NamingCollisionWarning] = field(default_factory=list)
    written_files: list[str] = field(default_factory=list)

    @property
    def declaration_names(self) -> list[str]:
        return sorted(d.name for d in self.declarations)


class Codegen:
    """Generates TypeScript contracts for one OpenAPI document.

    Every call to ``build`` uses a fresh DedupRegistry, so repeated runs on
    the same document give identical results.

    Example:
        >>> config = DocumentConfig(source='openapi.yaml', output='./generated')
        >>> result = Codegen(config).generate()
        >>> result.declaration_names
        ['Color', 'IdPathParams', 'Pet']
    """

    def __init__(
        self,
        config: DocumentConfig,
        schema_loader: SchemaLoader | None = None,
        middleware_policy: MiddlewareProvider | None = None,
    ):
        self.config = config
        self.document: dict | None = None
        self._schema_loader = schema_loader or SchemaLoader()
        self._middleware_policy = middleware_policy

    def _load_schema(self) -> dict:
        if self.document is None:
            self.document = self._schema_loader.load(self.config.source)
        return self.document

    def _group_by_tag(
        self, operations: list[OperationInfo]
    ) -> dict[str, list[OperationInfo]]:
        grouped: dict[str, list[OperationInfo]] = {}
        for operation in operations:
            for tag in operation.tags:
                grouped.setdefault(tag, []).append(operation)
        return grouped

    def build(self) -> GenerationResult:
        """Synthesize and render everything without touching the filesystem.

        Raises:
            SchemaLoadError: If the document cannot be loaded.
            UnresolvedReferenceError: If a ``$ref`` does not resolve.
            InvalidEnumValueError: If an enum contains null.
            ConfigurationError: If the middleware policy cannot be loaded.
        """
        document = self._load_schema()

        registry = DedupRegistry()
        synthesizer = TypeSynthesizer(document, registry)
        parameters = ParameterRegistry(synthesizer)

        operations = OperationCollector(synthesizer, parameters).collect()
        if not operations:
            logger.warning(f'No operations found in {self.config.source}')

        if self.config.include_all_schemas:
            for name in synthesizer.resolver.get_all_schemas():
                synthesizer.to_type_ref({'$ref': _schema_pointer(name)}, name)

        declarations = registry.in_dependency_order()
        grouped = self._group_by_tag(operations)

        emitter = DeclarationEmitter()
        result = GenerationResult(
            declarations=declarations,
            operations=operations,
            operations_by_tag=grouped,
            parameter_types=dict(registry.parameter_signature_index),
            model_files=emitter.emit(declarations),
        )
        result.warnings = list(emitter.warnings)

        if self.config.generate_controllers:
            controllers = ControllerGenerator(models_folder=self.config.models_folder)
            result.controller_files = [
                controllers.generate(tag, ops) for tag, ops in grouped.items()
            ]

        if self.config.generate_routes:
            policy = self._middleware_policy
            if policy is None:
                policy = load_middleware_policy(self.config.middleware_config)
            routes = RouteGenerator(
                policy, controllers_folder=self.config.controllers_folder
            )
            result.route_files = [routes.generate(tag, ops) for tag, ops in grouped.items()]

        logger.info(
            f'Synthesized {len(declarations)} declarations for '
            f'{len(operations)} operations in {len(grouped)} tags'
        )
        return result

    def generate(self) -> GenerationResult:
        """Build and write models, controllers and routes below the output directory.

        Raises:
            OutputError: If a file cannot be written.
        """
        result = self.build()

        directory = UPath(self.config.output)
        outputs = [
            (self.config.models_folder, result.model_files),
            (self.config.controllers_folder, result.controller_files),
            (self.config.routes_folder, result.route_files),
        ]
        for folder, files in outputs:
            if not files:
                continue
            writer = FileWriter(directory / folder)
            writer.write_all(files)
            result.written_files.extend(writer.get_written_files())

        logger.info(f'Wrote {len(result.written_files)} files to {directory}')
        return result
