"""Tests for enum declaration synthesis."""

import pytest

from contractgen.codegen.enums import (
    EnumSynthesizer,
    enum_signature,
    render_enum_value,
    validate_enum_names,
)
from contractgen.codegen.type_registry import DedupRegistry
from contractgen.exceptions import InvalidEnumValueError


@pytest.fixture
def registry():
    return DedupRegistry()


@pytest.fixture
def enums(registry):
    return EnumSynthesizer(registry)


class TestValidateEnumNames:
    """Caller-supplied member names are accepted as a whole or not at all."""

    def test_valid_names(self):
        assert validate_enum_names(['Low', 'High'], [1, 2]) == ['Low', 'High']

    def test_length_mismatch(self):
        assert validate_enum_names(['Low'], [1, 2]) == []

    def test_duplicate_names_reject_all(self):
        assert validate_enum_names(['A', 'A'], ['x', 'y']) == []

    def test_invalid_identifier_rejects_all(self):
        assert validate_enum_names(['ok', 'not-ok'], ['x', 'y']) == []

    def test_not_a_list(self):
        assert validate_enum_names(None, ['x']) == []
        assert validate_enum_names('AB', ['x', 'y']) == []


class TestRenderEnumValue:
    """Tests for literal rendering."""

    def test_strings_are_quoted_and_escaped(self):
        assert render_enum_value('RED') == "'RED'"
        assert render_enum_value("it's") == "'it\\'s'"
        assert render_enum_value('a\\b') == "'a\\\\b'"
        assert render_enum_value('line\nbreak') == "'line\\nbreak'"

    def test_numbers_and_booleans(self):
        assert render_enum_value(1) == '1'
        assert render_enum_value(1.5) == '1.5'
        assert render_enum_value(False) == 'false'

    def test_none_rejected(self):
        with pytest.raises(ValueError):
            render_enum_value(None)


class TestEnumSignature:
    def test_order_independent(self):
        assert enum_signature(['RED', 'GREEN']) == enum_signature(['GREEN', 'RED'])

    def test_different_values_differ(self):
        assert enum_signature(['RED']) != enum_signature(['GREEN'])

    def test_value_type_is_part_of_signature(self):
        assert enum_signature([1, 2]) != enum_signature(['1', '2'])
        assert enum_signature([True]) != enum_signature(['true'])

    def test_separator_inside_value_does_not_collide(self):
        assert enum_signature(['a|b']) != enum_signature(['a', 'b'])


class TestEnumSynthesizer:
    """Tests for the EnumSynthesizer class."""

    def test_creates_declaration(self, enums, registry):
        declaration = enums.synthesize('Color', ['RED', 'GREEN'])

        assert declaration.name == 'Color'
        assert declaration.kind == 'enum'
        assert declaration.source == (
            "export enum Color {\n  RED = 'RED',\n  GREEN = 'GREEN'\n}"
        )
        assert 'Color' in registry

    def test_same_values_any_order_share_declaration(self, enums, registry):
        first = enums.synthesize('Color', ['RED', 'GREEN'])
        second = enums.synthesize('PetColor', ['GREEN', 'RED'])

        assert second is first
        assert len(registry) == 1

    def test_caller_names_used_when_valid(self, enums):
        declaration = enums.synthesize('Priority', [1, 2], ['Low', 'High'])
        assert declaration.body == ('Low = 1,', 'High = 2')

    def test_duplicate_caller_names_fall_back_for_every_member(self, enums):
        declaration = enums.synthesize('Size', ['s', 'm'], ['Small', 'Small'])
        assert declaration.body == ("s = 's',", "m = 'm'")

    def test_sanitized_keys_are_unique(self, enums):
        declaration = enums.synthesize('Mode', ['a-b', 'a b', '1x'])
        assert declaration.body == ("a_b = 'a-b',", "a_b_1 = 'a b',", "_1x = '1x'")

    def test_null_value_rejected_without_registering(self, enums, registry):
        with pytest.raises(InvalidEnumValueError) as exc_info:
            enums.synthesize('Kind', ['a', None])

        assert exc_info.value.declaration_name == 'Kind'
        assert exc_info.value.index == 1
        assert len(registry) == 0
        assert registry.enum_signature_index == {}

    def test_empty_enum_rejected(self, enums):
        with pytest.raises(InvalidEnumValueError) as exc_info:
            enums.synthesize('Empty', [])
        assert exc_info.value.index is None

    def test_taken_name_gets_numeric_suffix(self, enums, registry):
        registry.claim('Status')

        declaration = enums.synthesize('Status', ['on', 'off'])

        assert declaration.name == 'Status1'
        assert registry.enum_signature_index[enum_signature(['off', 'on'])] == 'Status1'

    def test_numbers_and_numeric_strings_not_merged(self, enums, registry):
        code = enums.synthesize('Code', [1, 2])
        label = enums.synthesize('Label', ['1', '2'])

        assert code.name == 'Code'
        assert label.name == 'Label'
        assert label.body == ("_1 = '1',", "_2 = '2'")
        assert len(registry) == 2

    def test_values_containing_separator_not_merged(self, enums):
        pipe = enums.synthesize('Pipe', ['a|b'])
        split = enums.synthesize('Split', ['a', 'b'])

        assert split.name == 'Split'
        assert len(split.body) == 2
        assert pipe.body == ("a_b = 'a|b'",)
