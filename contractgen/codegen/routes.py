"""Express route generation.

For each tag a ``createRoutes`` factory is generated that wires every
operation of the tag to the injected controller, with the middleware chosen
by the middleware policy in front of it.
"""

import logging
import re
from collections.abc import Sequence

from contractgen.codegen.controllers import controller_file_base, interface_name
from contractgen.codegen.emitter import GENERATED_HEADER, EmittedFile
from contractgen.codegen.middleware import MiddlewarePolicy, MiddlewareProvider
from contractgen.codegen.operations import OperationInfo
from contractgen.codegen.utils import to_kebab_case, to_pascal_case

logger = logging.getLogger(__name__)

__all__ = [
    'RouteGenerator',
    'convert_path_to_express_route',
    'find_common_path_prefix',
]

_PATH_TEMPLATE_RE = re.compile(r'{([^}]+)}')


def convert_path_to_express_route(openapi_path: str) -> str:
    """Convert ``/messages/{id}`` into the Express form ``/messages/:id``."""
    return _PATH_TEMPLATE_RE.sub(r':\1', openapi_path)


def _static_segments(path: str) -> list[str]:
    return [segment for segment in path.split('/') if segment and '{' not in segment]


def find_common_path_prefix(paths: Sequence[str]) -> str:
    """Return the first static segment shared by all paths, e.g. ``/messages``.

    An empty string is returned when the paths share no first segment.
    """
    if not paths:
        return ''

    segments = [_static_segments(path) for path in paths]
    first = segments[0][0] if segments[0] else None
    if first is None or not all(s and s[0] == first for s in segments):
        return ''
    return f'/{first}'


def _strip_prefix(route: str, prefix: str) -> str:
    if prefix and (route == prefix or route.startswith(f'{prefix}/')):
        return route[len(prefix):] or '/'
    return route


class RouteGenerator:
    """Generates one Express router factory per tag.

    Example:
        >>> generator = RouteGenerator(policy, controllers_folder='controllers')
        >>> print(generator.generate('Pets', operations).content)
    """

    def __init__(
        self,
        policy: MiddlewareProvider | None = None,
        controllers_folder: str = 'controllers',
        header: str = GENERATED_HEADER,
    ):
        self.policy = policy if policy is not None else MiddlewarePolicy()
        self.controllers_folder = controllers_folder
        self.header = header

    def generate(self, tag: str, operations: Sequence[OperationInfo]) -> EmittedFile:
        controller = f'{to_pascal_case(tag).lower()}Controller'
        iface = interface_name(tag)

        middleware = [
            self.policy.get_middleware(op.fn_name, op.method.upper(), [tag])
            for op in operations
        ]

        lines = [
            self.header,
            '',
            "import { Router } from 'express';",
            f"import {{ {iface} }} from '../{self.controllers_folder}/{controller_file_base(tag)}';",
            '',
        ]

        imports = []
        for name in sorted({mw for names in middleware for mw in names}):
            statement = self.policy.get_middleware_import(name)
            if statement:
                imports.append(f'const {name} = {statement};')
            else:
                logger.debug(f"No import for middleware '{name}', assuming it is in scope")
        if imports:
            lines.append('// Middleware imports')
            lines.extend(imports)
            lines.append('')

        lines.extend(
            [
                '// The controller instance is injected by the caller',
                f'// Example: const router = createRoutes({controller});',
                f'export function createRoutes({controller}: {iface}): Router {{',
                '  const router = Router();',
                '',
            ]
        )

        prefix = find_common_path_prefix([op.path for op in operations])
        for op, names in zip(operations, middleware):
            route = _strip_prefix(convert_path_to_express_route(op.path), prefix)
            chain = ''.join(f'{name}, ' for name in names)
            lines.append(f'  // {op.method.upper()} {op.path} - {op.fn_name}')
            lines.append(
                f"  router.{op.method.lower()}('{route}', {chain}"
                f'{controller}.{op.fn_name}.bind({controller}));'
            )
            lines.append('')

        lines.append('  return router;')
        lines.append('}')

        logger.debug(f"Generated routes for tag '{tag}' mounted at '{prefix or '/'}'")
        return EmittedFile(
            path=f'{to_kebab_case(tag)}-routes.ts', content='\n'.join(lines) + '\n'
        )
