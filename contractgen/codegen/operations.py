"""Operation extraction from OpenAPI path items.

This module walks the ``paths`` section of a document and types every
operation's parameters and bodies through the type synthesizer, producing the
OperationInfo records consumed by the controller and route generators.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

from contractgen.codegen.parameters import ParameterRegistry
from contractgen.codegen.types import TypeSynthesizer
from contractgen.codegen.utils import is_identifier, to_pascal_case

logger = logging.getLogger(__name__)

__all__ = [
    'DEFAULT_TAG',
    'HTTP_METHODS',
    'HTTP_SUCCESS_STATUSES',
    'JSON_CONTENT_TYPE',
    'OperationCollector',
    'OperationInfo',
    'function_name',
]

HTTP_METHODS = ('get', 'put', 'post', 'delete', 'options', 'head', 'patch', 'trace')

HTTP_SUCCESS_STATUSES = ('200', '201', '202', '204', '205', '206', '207', '208')

JSON_CONTENT_TYPE = 'application/json'

DEFAULT_TAG = 'Default'

VOID_TYPE = 'void'


@dataclass
class OperationInfo:
    """A typed operation.

    Attributes:
        fn_name: The controller method name (the operation id).
        method: Lower-case HTTP method.
        path: The OpenAPI path template.
        tags: Operation tags, ``['Default']`` when the operation has none.
        path_params_type: Reusable path parameter type, or None.
        query_params_type: Reusable query parameter type, or None.
        request_type: Request body type, ``void`` without a JSON body.
        response_type: Success response type, ``void`` without a JSON body.
        type_deps: Every declaration name the operation's types mention.
    """

    fn_name: str
    method: str
    path: str
    tags: list[str] = field(default_factory=list)
    path_params_type: str | None = None
    query_params_type: str | None = None
    request_type: str = VOID_TYPE
    response_type: str = VOID_TYPE
    type_deps: frozenset[str] = field(default_factory=frozenset)


def function_name(operation_id: str | None, method: str, path: str) -> str:
    """Return a usable method name for an operation.

    A valid identifier ``operationId`` is used as-is. Anything else is
    camel-cased, and a missing id is derived from method and path
    (``get /pets/{id}`` gives ``getPetsId``).
    """
    if operation_id and is_identifier(operation_id):
        return operation_id

    if operation_id:
        pascal = to_pascal_case(operation_id)
        name = pascal[:1].lower() + pascal[1:]
    else:
        stripped = ''.join(c if c.isalnum() else ' ' for c in path).strip()
        name = method.lower() + (to_pascal_case(stripped) if stripped else '')

    if not name:
        name = method.lower()
    if name[0].isdigit():
        name = f'_{name}'
    return name


class OperationCollector:
    """Types every operation of a document.

    Within an operation the order of synthesis is path parameters, query
    parameters, request body, response body, which fixes discovery order and
    therefore the names given to colliding shapes.

    Example:
        >>> collector = OperationCollector(synthesizer, ParameterRegistry(synthesizer))
        >>> [op.fn_name for op in collector.collect()]
        ['listPets', 'createPet', 'getPet']
    """

    def __init__(self, synthesizer: TypeSynthesizer, parameters: ParameterRegistry):
        self.synthesizer = synthesizer
        self.parameters = parameters
        self.resolver = synthesizer.resolver

    def iter_operations(self) -> Iterator[tuple[str, str, dict, dict]]:
        """Yield ``(path, method, operation, path_item)`` in document order."""
        paths = self.synthesizer.document.get('paths') or {}
        for path, path_item in paths.items():
            path_item = self.resolver.deref(path_item)
            if not isinstance(path_item, dict):
                logger.warning(f"Skipping path '{path}': not a mapping")
                continue

            for method, operation in path_item.items():
                if method.lower() not in HTTP_METHODS:
                    continue
                if not isinstance(operation, dict):
                    logger.warning(f"Skipping {method.upper()} {path}: not a mapping")
                    continue
                yield path, method.lower(), operation, path_item

    def collect(self) -> list[OperationInfo]:
        return [
            self.process(path, method, operation, path_item)
            for path, method, operation, path_item in self.iter_operations()
        ]

    def process(
        self, path: str, method: str, operation: dict, path_item: dict | None = None
    ) -> OperationInfo:
        """Type a single operation.

        Raises:
            UnresolvedReferenceError: If any ``$ref`` cannot be resolved.
            InvalidEnumValueError: If an enum in the operation contains null.
        """
        fn_name = function_name(operation.get('operationId'), method, path)
        if not operation.get('operationId'):
            logger.debug(f"No operationId for {method.upper()} {path}, using '{fn_name}'")

        base_name = to_pascal_case(fn_name)
        deps: set[str] = set()

        path_params_type = self._params_type(
            operation, path_item, 'path', f'{base_name}PathParams', deps
        )
        query_params_type = self._params_type(
            operation, path_item, 'query', f'{base_name}QueryParams', deps
        )

        request_type = VOID_TYPE
        request_schema = self._request_schema(operation)
        if request_schema is not None:
            request_type = self.synthesizer.declare(
                f'{base_name}Request', request_schema, deps
            )

        response_type = VOID_TYPE
        response_schema = self._response_schema(operation)
        if response_schema is not None:
            response_type = self.synthesizer.declare(
                f'{base_name}Response', response_schema, deps
            )

        return OperationInfo(
            fn_name=fn_name,
            method=method,
            path=path,
            tags=list(operation.get('tags') or [DEFAULT_TAG]),
            path_params_type=path_params_type,
            query_params_type=query_params_type,
            request_type=request_type,
            response_type=response_type,
            type_deps=frozenset(deps),
        )

    def _params_type(
        self,
        operation: dict,
        path_item: dict | None,
        category: str,
        fallback_name: str,
        deps: set[str],
    ) -> str | None:
        params = self.parameters.extract_parameters(operation, category, path_item)
        if not params:
            return None
        name = self.parameters.reusable_name(params, category, fallback_name)
        deps.add(name)
        return name

    def _json_schema(self, container) -> dict | None:
        container = self.resolver.deref(container)
        if not isinstance(container, dict):
            return None
        media = (container.get('content') or {}).get(JSON_CONTENT_TYPE) or {}
        schema = media.get('schema')
        return schema if isinstance(schema, dict) else None

    def _request_schema(self, operation: dict) -> dict | None:
        if 'requestBody' not in operation:
            return None
        return self._json_schema(operation['requestBody'])

    def _response_schema(self, operation: dict) -> dict | None:
        # YAML parses unquoted status codes as integers
        responses = {
            str(status): response
            for status, response in (operation.get('responses') or {}).items()
        }
        # A success status without content ends the search; one with only
        # non-JSON content defers to the next status
        for status in HTTP_SUCCESS_STATUSES:
            if status not in responses:
                continue
            schema = self._json_schema(responses[status])
            if schema is not None:
                return schema
            response = self.resolver.deref(responses[status])
            if not isinstance(response, dict) or not response.get('content'):
                return None
        return None
