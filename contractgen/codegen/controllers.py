"""Express controller interface generation."""

import logging
from collections.abc import Sequence

from contractgen.codegen.emitter import GENERATED_HEADER, EmittedFile
from contractgen.codegen.operations import OperationInfo
from contractgen.codegen.utils import to_kebab_case, to_pascal_case

logger = logging.getLogger(__name__)

__all__ = ['ControllerGenerator', 'controller_file_base', 'interface_name']

EMPTY_PARAMS_TYPE = '{}'


def interface_name(tag: str) -> str:
    return f'{to_pascal_case(tag)}Interface'


def controller_file_base(tag: str) -> str:
    return f'{to_kebab_case(tag)}-interface'


class ControllerGenerator:
    """Generates one controller interface per tag.

    Every operation becomes a method taking the Express request typed with
    its path parameters, response body, request body and query parameters:

        listPets(req: Request<{}, Pet[], void, LimitQueryParams>, res: Response<Pet[]>): Promise<void>;

    Example:
        >>> generator = ControllerGenerator(models_folder='models')
        >>> generator.generate('Pets', operations).path
        'pets-interface.ts'
    """

    def __init__(self, models_folder: str = 'models', header: str = GENERATED_HEADER):
        self.models_folder = models_folder
        self.header = header

    def method_signature(self, operation: OperationInfo) -> str:
        path_params = operation.path_params_type or EMPTY_PARAMS_TYPE
        query_params = operation.query_params_type or EMPTY_PARAMS_TYPE
        req = operation.request_type
        res = operation.response_type
        return (
            f'{operation.fn_name}(req: Request<{path_params}, {res}, {req}, {query_params}>, '
            f'res: Response<{res}>): Promise<void>;'
        )

    def generate(self, tag: str, operations: Sequence[OperationInfo]) -> EmittedFile:
        used_types = sorted({name for op in operations for name in op.type_deps})

        lines = [self.header, '', "import { Request, Response } from 'express';"]
        if used_types:
            lines.append(
                f"import {{ {', '.join(used_types)} }} from '../{self.models_folder}';"
            )
        lines.append('')

        lines.append(f'export interface {interface_name(tag)} {{')
        lines.extend(f'  {self.method_signature(op)}' for op in operations)
        lines.append('}')

        logger.debug(f"Generated controller interface for tag '{tag}' ({len(operations)} operations)")
        return EmittedFile(
            path=f'{controller_file_base(tag)}.ts', content='\n'.join(lines) + '\n'
        )
