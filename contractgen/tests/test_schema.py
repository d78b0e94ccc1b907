"""Tests for schema loading and reference resolution."""

import httpx
import pytest

from contractgen.codegen.schema import (
    SchemaLoader,
    SchemaResolver,
    schema_kind,
    schema_type,
)
from contractgen.exceptions import (
    MalformedReferenceError,
    SchemaLoadError,
    UnresolvedReferenceError,
)

from .fixtures import PETSTORE_SPEC, get_spec_as_json, get_spec_as_yaml


class TestSchemaLoader:
    """Tests for the SchemaLoader class."""

    def test_load_json_file(self, tmp_path):
        spec_file = tmp_path / 'petstore.json'
        spec_file.write_text(get_spec_as_json(PETSTORE_SPEC))

        document = SchemaLoader().load(str(spec_file))

        assert document['info']['title'] == 'Petstore API'
        assert '/pets' in document['paths']

    def test_load_yaml_file_relative_to_base_path(self, tmp_path):
        (tmp_path / 'petstore.yaml').write_text(get_spec_as_yaml(PETSTORE_SPEC))

        document = SchemaLoader(base_path=tmp_path).load('petstore.yaml')

        assert document == PETSTORE_SPEC

    def test_missing_file(self, tmp_path):
        with pytest.raises(SchemaLoadError) as exc_info:
            SchemaLoader().load(str(tmp_path / 'missing.yaml'))
        assert 'missing.yaml' in exc_info.value.source

    def test_invalid_json(self, tmp_path):
        spec_file = tmp_path / 'broken.json'
        spec_file.write_text('{not json')

        with pytest.raises(SchemaLoadError):
            SchemaLoader().load(str(spec_file))

    def test_root_must_be_mapping(self, tmp_path):
        spec_file = tmp_path / 'list.yaml'
        spec_file.write_text('- a\n- b\n')

        with pytest.raises(SchemaLoadError, match='mapping'):
            SchemaLoader().load(str(spec_file))

    def test_missing_paths_defaults_to_empty(self, tmp_path):
        spec_file = tmp_path / 'empty.yaml'
        spec_file.write_text('openapi: 3.0.0\n')

        assert SchemaLoader().load(str(spec_file))['paths'] == {}

    def test_load_from_url(self):
        """Test loading through an injected HTTP client."""

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == '/openapi.json'
            return httpx.Response(200, json=PETSTORE_SPEC)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        document = SchemaLoader(http_client=client).load(
            'https://api.example.com/openapi.json'
        )

        assert document['info']['title'] == 'Petstore API'

    def test_load_from_url_http_error(self):
        client = httpx.Client(
            transport=httpx.MockTransport(lambda request: httpx.Response(404))
        )

        with pytest.raises(SchemaLoadError) as exc_info:
            SchemaLoader(http_client=client).load('https://api.example.com/openapi.json')
        assert isinstance(exc_info.value.cause, httpx.HTTPStatusError)


class TestSchemaKind:
    """Tests for schema node classification."""

    def test_kinds(self):
        assert schema_kind({'$ref': '#/components/schemas/Pet'}) == 'reference'
        assert schema_kind({'type': 'string', 'enum': ['a']}) == 'enum'
        assert schema_kind({'type': 'array', 'items': {}}) == 'array'
        assert schema_kind({'type': 'object'}) == 'object'
        assert schema_kind({'properties': {'a': {}}}) == 'object'
        assert schema_kind({'type': 'string'}) == 'primitive'

    def test_empty_enum_is_not_enum(self):
        assert schema_kind({'type': 'string', 'enum': []}) == 'primitive'

    def test_reference_wins(self):
        assert schema_kind({'$ref': '#/x', 'type': 'object'}) == 'reference'

    def test_type_list(self):
        """OpenAPI 3.1 type lists use their first non-null entry."""
        assert schema_type({'type': ['null', 'integer']}) == 'integer'
        assert schema_kind({'type': ['array', 'null'], 'items': {}}) == 'array'


class TestSchemaResolver:
    """Tests for the SchemaResolver class."""

    def test_resolve(self):
        node = SchemaResolver.resolve('#/components/schemas/Pet', PETSTORE_SPEC)
        assert node is PETSTORE_SPEC['components']['schemas']['Pet']

    def test_resolve_escaped_segments(self):
        document = {'paths': {'/pets/{id}': {'get': {'x': 1}}}, 'a~b': {'c': 2}}

        assert SchemaResolver.resolve('#/paths/~1pets~1{id}/get', document) == {'x': 1}
        assert SchemaResolver.resolve('#/a~0b/c', document) == 2

    def test_resolve_list_index(self):
        document = {'items': [{'a': 1}, {'b': 2}]}
        assert SchemaResolver.resolve('#/items/1', document) == {'b': 2}

    def test_missing_segment(self):
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            SchemaResolver.resolve('#/components/schemas/Missing', PETSTORE_SPEC)
        assert exc_info.value.reference == '#/components/schemas/Missing'

    def test_external_reference_rejected(self):
        with pytest.raises(UnresolvedReferenceError):
            SchemaResolver.resolve('other.yaml#/components/schemas/Pet', PETSTORE_SPEC)

    def test_name_from_pointer(self):
        assert SchemaResolver.name_from_pointer('#/components/schemas/Pet') == 'Pet'
        assert SchemaResolver.name_from_pointer('#/definitions/a~1b') == 'a/b'

    def test_name_from_malformed_pointer(self):
        for pointer in ('#/components/schemas/', 'Pet', '#'):
            with pytest.raises(MalformedReferenceError):
                SchemaResolver.name_from_pointer(pointer)

    def test_resolve_reference_is_cached(self):
        resolver = SchemaResolver(PETSTORE_SPEC)

        first = resolver.resolve_reference('#/components/schemas/Color')
        second = resolver.resolve_reference('#/components/schemas/Color')

        assert first is second
        resolver.clear_cache()
        assert resolver.resolve_reference('#/components/schemas/Color') == first

    def test_deref_follows_chains(self):
        document = {
            'components': {
                'parameters': {
                    'Id': {'$ref': '#/components/parameters/RealId'},
                    'RealId': {'name': 'id', 'in': 'path'},
                }
            }
        }
        resolver = SchemaResolver(document)

        node = resolver.deref({'$ref': '#/components/parameters/Id'})

        assert node == {'name': 'id', 'in': 'path'}

    def test_deref_detects_loops(self):
        document = {'a': {'$ref': '#/b'}, 'b': {'$ref': '#/a'}}

        with pytest.raises(UnresolvedReferenceError, match='loops'):
            SchemaResolver(document).deref({'$ref': '#/a'})

    def test_get_all_schemas(self):
        schemas = SchemaResolver(PETSTORE_SPEC).get_all_schemas()
        assert set(schemas) == {'Pet', 'NewPet', 'Color'}
