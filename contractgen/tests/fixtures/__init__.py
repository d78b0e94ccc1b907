"""Test fixtures for contractgen tests.

This module provides sample OpenAPI documents and utilities for testing
the contract generation functionality.
"""

import json

import yaml


def _json_response(schema: dict, description: str = 'OK') -> dict:
    return {
        'description': description,
        'content': {'application/json': {'schema': schema}},
    }


def _ref(name: str) -> dict:
    return {'$ref': f'#/components/schemas/{name}'}


# Minimal OpenAPI 3.0 spec for basic testing
MINIMAL_OPENAPI_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Minimal API', 'version': '1.0.0'},
    'paths': {},
}

ID_PATH_PARAM = {
    'name': 'id',
    'in': 'path',
    'required': True,
    'schema': {'type': 'string'},
}

# Petstore-like API with models, a shared enum and reused path parameters
PETSTORE_SPEC = {
    'openapi': '3.0.0',
    'info': {
        'title': 'Petstore API',
        'version': '1.0.0',
        'description': 'A sample Petstore API for testing',
    },
    'paths': {
        '/pets': {
            'get': {
                'operationId': 'listPets',
                'tags': ['Pets'],
                'parameters': [
                    {
                        'name': 'limit',
                        'in': 'query',
                        'required': False,
                        'schema': {'type': 'integer'},
                    }
                ],
                'responses': {
                    '200': _json_response({'type': 'array', 'items': _ref('Pet')})
                },
            },
            'post': {
                'operationId': 'createPet',
                'tags': ['Pets'],
                'requestBody': {
                    'required': True,
                    'content': {'application/json': {'schema': _ref('NewPet')}},
                },
                'responses': {'201': _json_response(_ref('Pet'), 'Created')},
            },
        },
        '/pets/{id}': {
            'get': {
                'operationId': 'getPet',
                'tags': ['Pets'],
                'parameters': [ID_PATH_PARAM],
                'responses': {'200': _json_response(_ref('Pet'))},
            },
            'delete': {
                'operationId': 'deletePet',
                'tags': ['Pets'],
                'parameters': [ID_PATH_PARAM],
                'responses': {'204': {'description': 'Deleted'}},
            },
        },
    },
    'components': {
        'schemas': {
            'Pet': {
                'type': 'object',
                'required': ['id', 'name'],
                'properties': {
                    'id': {'type': 'string'},
                    'name': {'type': 'string'},
                    'color': _ref('Color'),
                    'tags': {'type': 'array', 'items': {'type': 'string'}},
                },
            },
            'NewPet': {
                'type': 'object',
                'required': ['name'],
                'properties': {
                    'name': {'type': 'string'},
                    'color': _ref('Color'),
                },
            },
            'Color': {'type': 'string', 'enum': ['RED', 'GREEN']},
        }
    },
}

# Two schemas referencing each other
CYCLE_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Cycle API', 'version': '1.0.0'},
    'paths': {
        '/nodes': {
            'get': {
                'operationId': 'getNode',
                'tags': ['Nodes'],
                'responses': {'200': _json_response(_ref('A'))},
            }
        }
    },
    'components': {
        'schemas': {
            'A': {'type': 'object', 'properties': {'b': _ref('B')}},
            'B': {'type': 'object', 'properties': {'a': _ref('A')}},
        }
    },
}

# Inline object nested in a named schema
NESTED_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Users API', 'version': '1.0.0'},
    'paths': {
        '/users': {
            'get': {
                'operationId': 'listUsers',
                'tags': ['Users'],
                'responses': {
                    '200': _json_response({'type': 'array', 'items': _ref('User')})
                },
            }
        }
    },
    'components': {
        'schemas': {
            'User': {
                'type': 'object',
                'required': ['name'],
                'properties': {
                    'name': {'type': 'string'},
                    'address': {
                        'type': 'object',
                        'properties': {'street': {'type': 'string'}},
                    },
                },
            }
        }
    },
}

# Inline enums with the same values in different orders, and no tags
ENUM_DEDUP_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Tickets API', 'version': '1.0.0'},
    'paths': {
        '/tickets': {
            'get': {
                'operationId': 'listTickets',
                'parameters': [
                    {
                        'name': 'status',
                        'in': 'query',
                        'schema': {'type': 'string', 'enum': ['open', 'closed']},
                    }
                ],
                'responses': {'200': {'description': 'OK'}},
            }
        },
        '/archive': {
            'get': {
                'operationId': 'listArchive',
                'parameters': [
                    {
                        'name': 'state',
                        'in': 'query',
                        'schema': {'type': 'string', 'enum': ['closed', 'open']},
                    }
                ],
                'responses': {'200': {'description': 'OK'}},
            }
        },
    },
}

# Enum containing a null value
NULL_ENUM_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Broken API', 'version': '1.0.0'},
    'paths': {
        '/things': {
            'get': {
                'operationId': 'listThings',
                'responses': {'200': _json_response(_ref('Kind'))},
            }
        }
    },
    'components': {'schemas': {'Kind': {'type': 'string', 'enum': ['a', None]}}},
}


def get_spec_as_json(spec: dict) -> str:
    """Convert a spec dictionary to a JSON string."""
    return json.dumps(spec, indent=2)


def get_spec_as_yaml(spec: dict) -> str:
    """Convert a spec dictionary to a YAML string."""
    return yaml.safe_dump(spec, sort_keys=False)
