"""Tests for dumping values to YAML text and loading them back."""

import collections
import datetime
import io

import pytest

import yamlgraph
from yamlgraph.error import (
    DepthExceeded,
    MalformedScalar,
    ParserError,
    UnknownAnchor,
    UnknownTag,
)
from yamlgraph.nodes import MappingNode, ScalarNode, SequenceNode
from yamlgraph.tags import TagRegistry


class Vector:
    def __init__(self, x, y):
        self.x = x
        self.y = y


class Grid:
    DIMENSIONS = 2

    def __init__(self, width, height):
        self.width = width
        self.height = height


class TestDumpLoad:
    """Test value round trips through text."""

    @pytest.mark.parametrize('value', [
        None,
        True,
        42,
        -3.5,
        'hello',
        '',
        [1, 'two', 3.0, None, False],
        {'name': 'demo', 'items': [1, 2, 3], 'nested': {'a': {'b': 'c'}}},
        (1, 2),
        {'a', 'b'},
        b'\x00\x01binary\xff',
        datetime.date(2001, 12, 14),
        datetime.datetime(2001, 12, 14, 21, 59, 43, 100000),
        'ünïcødé',
        'multi\nline\ntext\n',
    ])
    def test_round_trip(self, value):
        """Values come back equal and of the same type."""
        result = yamlgraph.load(yamlgraph.dump(value))
        assert result == value
        assert type(result) is type(value)

    @pytest.mark.parametrize('text', ['123', 'yes', 'null', '~', '1.5', '0x10',
                                      '2001-12-14', 'true'])
    def test_ambiguous_strings(self, text):
        """Strings that look like other types stay strings."""
        assert yamlgraph.load(yamlgraph.dump([text])) == [text]

    def test_simple_output(self):
        """A plain mapping dumps as plain YAML."""
        assert yamlgraph.dump({'foo': 'bar'}) == 'foo: bar\n'

    def test_sort_keys(self):
        """sort_keys orders the output."""
        assert yamlgraph.dump({'b': 1, 'a': 2}, sort_keys=True) == 'a: 2\nb: 1\n'

    def test_dump_to_stream(self):
        """Dumping to a stream writes the text and returns None."""
        stream = io.StringIO()
        assert yamlgraph.dump([1, 2], stream) is None
        assert yamlgraph.load(stream.getvalue()) == [1, 2]

    def test_load_bytes_and_stream(self):
        """load accepts bytes and readable streams."""
        assert yamlgraph.load(b'a: 1') == {'a': 1}
        assert yamlgraph.load(io.StringIO('a: 1')) == {'a': 1}

    def test_explicit_start(self):
        """explicit_start writes a document marker."""
        assert yamlgraph.dump([1], explicit_start=True).startswith('---')

    def test_unicode_unescaped(self):
        """Non-ASCII text is written as is by default."""
        assert 'ünï' in yamlgraph.dump('ünï')

    def test_registered_object(self):
        """Registered objects round-trip through their tag."""
        registry = TagRegistry()
        registry.register('!vector', Vector)
        text = yamlgraph.dump(Vector(1, 2), registry=registry)
        assert text.startswith('!vector')
        value = yamlgraph.load(text, registry=registry)
        assert isinstance(value, Vector)
        assert (value.x, value.y) == (1, 2)

    def test_builtin_subclasses(self):
        """Subclasses of dict and list load back as the plain types."""
        value = {'counts': collections.Counter('aab'),
                 'groups': collections.defaultdict(list, {'x': [1]})}
        assert yamlgraph.load(yamlgraph.dump(value)) == {
            'counts': {'a': 2, 'b': 1}, 'groups': {'x': [1]}}

    def test_frozenset_key(self):
        """Frozensets keep their type and can be mapping keys."""
        value = {frozenset(['a', 'b']): 'pair'}
        text = yamlgraph.dump(value)
        assert '!!python/frozenset' in text
        assert yamlgraph.load(text) == value

    def test_class_constant(self):
        """A class constant does not stop attributes from round-tripping."""
        registry = TagRegistry()
        registry.register('!grid', Grid)
        value = yamlgraph.load(yamlgraph.dump(Grid(3, 4), registry=registry),
                               registry=registry)
        assert (value.width, value.height) == (3, 4)


class TestSharedReferences:
    """Test anchors and aliases in text."""

    def test_self_referential_list(self):
        """A list containing itself survives a text round trip."""
        data = []
        data.append(data)
        text = yamlgraph.dump(data)
        assert '&id001' in text
        assert '*id001' in text
        result = yamlgraph.load(text)
        assert result[0] is result

    def test_self_referential_dict(self):
        """A dict containing itself survives a text round trip."""
        data = {}
        data['self'] = data
        result = yamlgraph.load(yamlgraph.dump(data))
        assert result['self'] is result

    def test_shared_values(self):
        """Values referenced twice are the same object after loading."""
        shared = {'k': [1, 2]}
        result = yamlgraph.load(yamlgraph.dump({'a': shared, 'b': shared}))
        assert result['a'] is result['b']

    def test_shared_registered_object(self):
        """A registered object referenced twice is loaded once."""
        registry = TagRegistry()
        registry.register('!vector', Vector)
        vector = Vector(1, 2)
        result = yamlgraph.load(yamlgraph.dump([vector, vector], registry=registry),
                                registry=registry)
        assert result[0] is result[1]

    def test_redefined_anchor(self):
        """An anchor defined twice refers to its latest definition."""
        assert yamlgraph.load('[&a 1, &a 2, *a]') == [1, 2, 2]

    def test_undefined_alias(self):
        """An alias to no anchor is rejected on load."""
        with pytest.raises(UnknownAnchor):
            yamlgraph.load('[*nothing]')


class TestDocuments:
    """Test multi-document streams."""

    def test_dump_all_load_all(self):
        """Each value becomes one document."""
        text = yamlgraph.dump_all([{'a': 1}, [2], 'three'])
        assert text.count('---') >= 2
        assert yamlgraph.load_all(text) == [{'a': 1}, [2], 'three']

    def test_anchors_do_not_cross_documents(self):
        """An alias cannot name an anchor of an earlier document."""
        with pytest.raises(UnknownAnchor):
            yamlgraph.load_all('--- &a [1]\n--- *a\n')

    def test_load_first_document(self):
        """load returns the first document."""
        assert yamlgraph.load('--- 1\n--- 2\n') == 1

    def test_empty_stream(self):
        """An empty stream loads as None."""
        assert yamlgraph.load('') is None
        assert yamlgraph.load_all('') == []


class TestErrors:
    """Test failures reported while loading text."""

    def test_syntax_error(self):
        """Invalid YAML raises ParserError with a position."""
        with pytest.raises(ParserError) as excinfo:
            yamlgraph.load('a: [1, 2')
        assert excinfo.value.problem_mark is not None

    def test_unknown_tag(self):
        """Unknown local tags are rejected."""
        with pytest.raises(UnknownTag) as excinfo:
            yamlgraph.load('!no-such-type {a: 1}')
        assert excinfo.value.tag == '!no-such-type'

    def test_explicit_int_tag(self):
        """An explicit int tag parses quoted text."""
        assert yamlgraph.load('!!int "10"') == 10

    def test_malformed_explicit_scalar(self):
        """An explicit tag on text of the wrong shape is an error."""
        with pytest.raises(MalformedScalar) as excinfo:
            yamlgraph.load('!!int abc')
        assert excinfo.value.problem_mark is not None

    def test_depth_exceeded(self):
        """Deeply nested text is rejected."""
        text = '[' * 120 + ']' * 120
        with pytest.raises(DepthExceeded):
            yamlgraph.load(text, max_depth=100)

    def test_depth_exceeded_by_default(self):
        """Very deep text raises DepthExceeded, not RecursionError."""
        text = '[' * 5000 + ']' * 5000
        with pytest.raises(DepthExceeded):
            yamlgraph.load(text)


class TestParse:
    """Test parsing text into syntax trees."""

    def test_parse_returns_root(self):
        """parse returns the first document's root node."""
        node = yamlgraph.parse("a: 'x'\nb: [1, 2]\n")
        assert isinstance(node, MappingNode)
        (key_a, value_a), (key_b, value_b) = node.value
        assert value_a.style == ScalarNode.SINGLE_QUOTED
        assert isinstance(value_b, SequenceNode)
        assert value_b.style == SequenceNode.FLOW

    def test_parse_keeps_tags(self):
        """Tags written in the text are kept and marked explicit."""
        node = yamlgraph.parse('!thing {a: 1}')
        assert node.tag == '!thing'
        assert node.implicit is False
        key, value = node.value[0]
        assert value.tag is None

    def test_parse_stream(self):
        """parse_stream returns every document."""
        tree = yamlgraph.parse_stream('--- 1\n--- 2\n')
        assert len(tree.documents) == 2
        assert tree.documents[1].root.value == '2'

    def test_parse_empty(self):
        """Parsing an empty stream returns None."""
        assert yamlgraph.parse('') is None

    def test_parse_aliases(self):
        """Aliases stay aliases in the tree."""
        node = yamlgraph.parse('- &a [1]\n- *a\n')
        assert node.value[0].anchor == 'a'
        assert node.value[1].id == 'alias'
