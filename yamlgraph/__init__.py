"""Object-graph serialization through a tagged YAML syntax tree.

yamlgraph converts live Python values, including custom classes, shared
references and cycles, into a tree of tagged nodes and back.  YAML text is
read and written by PyYAML's event parser and emitter.

Usage:
    import yamlgraph

    text = yamlgraph.dump({'name': 'demo', 'items': [1, 2, 3]})
    data = yamlgraph.load(text)

    tree = yamlgraph.encode(data)        # value -> StreamNode
    same = yamlgraph.decode(tree)        # StreamNode -> value

Custom types:
    - register(tag, cls) / @yaml_tag(tag) / YAMLGraphObject subclasses
    - register_domain(prefix, callback) for whole tag families
    - encode_with(coder) / init_with(coder) hooks for full control
"""

import logging

from yamlgraph.coder import Coder
from yamlgraph.composer import Composer
from yamlgraph.constructor import Constructor
from yamlgraph.emitter import Emitter, parse_events
from yamlgraph.error import (
    DEFAULT_MAX_DEPTH,
    ComposerError,
    ConstructorError,
    DepthExceeded,
    EmitterError,
    MalformedScalar,
    MarkedYAMLGraphError,
    ParserError,
    RepresenterError,
    SerializerError,
    UnknownAnchor,
    UnknownTag,
    UnsupportedValue,
    YAMLGraphError,
)
from yamlgraph.nodes import (
    AliasNode,
    DocumentNode,
    MappingNode,
    ScalarNode,
    SequenceNode,
    StreamNode,
)
from yamlgraph.representer import Representer
from yamlgraph.serializer import Serializer
from yamlgraph.tags import (
    TagRegistry,
    YAMLGraphObject,
    register,
    register_domain,
    registry,
    yaml_tag,
)


__version__ = '0.1.0'

logging.getLogger(__name__).addHandler(logging.NullHandler())


def encode(value, registry=None, **options):
    """Represent ``value`` as a single-document StreamNode.

    Args:
        value: Any value the representer understands
        registry: TagRegistry to use instead of the process-wide one
        **options: Representer options (``max_depth``, ``sort_keys``)

    Raises:
        UnsupportedValue: If some reachable value cannot be represented
    """
    return Representer(registry=registry, **options).represent(value)


def encode_all(values, registry=None, **options):
    """Represent each of ``values`` as its own document."""
    return Representer(registry=registry, **options).represent_all(values)


def decode(tree, registry=None, **options):
    """Construct the value of the first document of ``tree``.

    Args:
        tree: A StreamNode, a DocumentNode or a bare node
        registry: TagRegistry to use instead of the process-wide one
        **options: Constructor options (``max_depth``, ``strict_fields``)

    Returns:
        The constructed value, or None if the stream has no documents
    """
    return Constructor(registry=registry, **options).construct(tree)


def decode_all(tree, registry=None, **options):
    """Construct every document of ``tree``; returns a list."""
    return Constructor(registry=registry, **options).construct_all(tree)


def serialize(tree):
    """Return an iterator over the events of ``tree``."""
    return Serializer().serialize(tree)


def compose(events, max_depth=DEFAULT_MAX_DEPTH):
    """Build a StreamNode from an iterable of events."""
    return Composer(events, max_depth=max_depth).compose_stream()


def emit(events, stream=None, **emitter_options):
    """Write events as YAML text; see Emitter for the options."""
    return Emitter(**emitter_options).emit(events, stream)


def parse_stream(source, max_depth=DEFAULT_MAX_DEPTH):
    """Parse YAML text into a StreamNode.

    Args:
        source: A ``str``, ``bytes`` or readable stream (not a file path)
        max_depth: Deepest nesting accepted before DepthExceeded
    """
    return compose(parse_events(source), max_depth=max_depth)


def parse(source, max_depth=DEFAULT_MAX_DEPTH):
    """Parse YAML text and return the root node of its first document.

    Returns None for a stream without documents.
    """
    tree = parse_stream(source, max_depth=max_depth)
    if not tree.documents:
        return None
    return tree.documents[0].root


def dump(value, stream=None, registry=None, sort_keys=False,
         max_depth=None, **emitter_options):
    """Serialize ``value`` to YAML text.

    Args:
        value: Value to serialize
        stream: Writable stream (optional)
        registry: TagRegistry to use instead of the process-wide one
        sort_keys: Sort mapping keys
        max_depth: Nesting bound (Representer default when None)
        **emitter_options: ``indent``, ``width``, ``allow_unicode``,
            ``canonical``, ``line_break``, ``explicit_start``,
            ``explicit_end``, ``json``

    Returns:
        The YAML text if stream is None, otherwise None

    Example:
        >>> dump({'foo': 'bar'})
        'foo: bar\\n'
    """
    return dump_all([value], stream, registry=registry, sort_keys=sort_keys,
                    max_depth=max_depth, **emitter_options)


def dump_all(values, stream=None, registry=None, sort_keys=False,
             max_depth=None, **emitter_options):
    """Serialize each of ``values`` as one document of a YAML stream."""
    options = {'sort_keys': sort_keys}
    if max_depth is not None:
        options['max_depth'] = max_depth
    tree = encode_all(values, registry=registry, **options)
    return emit(serialize(tree), stream, **emitter_options)


def load(source, registry=None, **options):
    """Parse YAML text and construct the value of its first document.

    Example:
        >>> load('foo: [1, 2]')
        {'foo': [1, 2]}
    """
    tree = parse_stream(source, options.get('max_depth', DEFAULT_MAX_DEPTH))
    return decode(tree, registry=registry, **options)


def load_all(source, registry=None, **options):
    """Parse YAML text and construct every document; returns a list."""
    tree = parse_stream(source, options.get('max_depth', DEFAULT_MAX_DEPTH))
    return decode_all(tree, registry=registry, **options)


def to_json(value, registry=None, **options):
    """Serialize ``value`` as JSON-compatible flow YAML.

    Shared references are not representable in JSON and raise EmitterError.
    """
    return dump(value, registry=registry, json=True, **options)


__all__ = [
    'AliasNode', 'Coder', 'ComposerError', 'Composer', 'Constructor',
    'ConstructorError', 'DepthExceeded', 'DocumentNode', 'Emitter',
    'EmitterError', 'MalformedScalar', 'MappingNode', 'MarkedYAMLGraphError',
    'ParserError', 'Representer', 'RepresenterError', 'ScalarNode',
    'SequenceNode', 'Serializer', 'SerializerError', 'StreamNode',
    'TagRegistry', 'UnknownAnchor', 'UnknownTag', 'UnsupportedValue',
    'YAMLGraphError', 'YAMLGraphObject', 'compose', 'decode', 'decode_all',
    'dump', 'dump_all', 'emit', 'encode', 'encode_all', 'load', 'load_all',
    'parse', 'parse_stream', 'register', 'register_domain', 'registry',
    'serialize', 'to_json', 'yaml_tag',
]
