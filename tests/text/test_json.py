"""Tests for JSON-flavored output."""

import json

import pytest

import yamlgraph
from yamlgraph.error import EmitterError
from yamlgraph.tags import TagRegistry


class Vector:
    def __init__(self, x, y):
        self.x = x
        self.y = y


class TestToJson:
    """Test to_json() and the json emitter flag."""

    def test_nested_structure(self):
        """Collections, strings, numbers, booleans and null map to JSON."""
        value = {'name': 'demo', 'items': [1, 2.5, True, None],
                 'nested': {'empty': [], 'also': {}}}
        assert json.loads(yamlgraph.to_json(value)) == value

    def test_flow_output(self):
        """Output is a single flow collection with double-quoted strings."""
        text = yamlgraph.to_json({'a': ['b']})
        assert text.strip() == '{"a": ["b"]}'

    def test_number_like_strings_stay_strings(self):
        """Strings that look like numbers are quoted."""
        assert json.loads(yamlgraph.to_json(['123', 'true', ''])) == ['123', 'true', '']

    def test_non_string_keys_quoted(self):
        """Mapping keys are always JSON strings."""
        assert json.loads(yamlgraph.to_json({1: 'one', None: 'none'})) == {
            '1': 'one', 'null': 'none'}

    def test_tags_dropped(self):
        """Registered objects lose their tag."""
        registry = TagRegistry()
        registry.register('!vector', Vector)
        text = yamlgraph.to_json(Vector(1, 2), registry=registry)
        assert '!' not in text
        assert json.loads(text) == {'x': 1, 'y': 2}

    def test_tuple_as_array(self):
        """Tuples become plain arrays."""
        assert json.loads(yamlgraph.to_json({'t': (1, 2)})) == {'t': [1, 2]}

    def test_long_strings_not_folded(self):
        """Long strings stay on one line."""
        value = ['word ' * 100]
        assert json.loads(yamlgraph.to_json(value)) == value

    def test_shared_reference_rejected(self):
        """Shared references have no JSON form."""
        shared = [1]
        with pytest.raises(EmitterError):
            yamlgraph.to_json([shared, shared])

    def test_loads_as_yaml(self):
        """JSON output is also valid YAML for load()."""
        value = {'a': [1, 'x', None]}
        assert yamlgraph.load(yamlgraph.to_json(value)) == value

    @pytest.mark.parametrize('value', [float('inf'), float('-inf'), float('nan')])
    def test_non_finite_float_rejected(self, value):
        """Infinities and NaN have no JSON form."""
        with pytest.raises(EmitterError):
            yamlgraph.to_json([value])
