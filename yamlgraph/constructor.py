"""Constructor: rebuilds Python values from a syntax tree.

Core tags are handled by ``yaml_constructors``; every other tag goes through
the tag registry.  Collections and registered objects are built in two
phases by generators: the empty value is allocated and bound to its anchor
first, then filled in, so aliases inside a value (including to itself)
resolve to the very same object.
"""

import base64
import datetime
import logging
import re
import types

from yamlgraph import tags
from yamlgraph.anchors import DecodeAnchors
from yamlgraph.coder import Coder
from yamlgraph.error import (
    DEFAULT_MAX_DEPTH,
    ConstructorError,
    DepthExceeded,
    MalformedScalar,
    UnknownTag,
)
from yamlgraph.nodes import (
    AliasNode,
    DocumentNode,
    MappingNode,
    ScalarNode,
    SequenceNode,
    StreamNode,
)
from yamlgraph.resolver import (
    BINARY_TAG,
    BOOL_TAG,
    FLOAT_TAG,
    FROZENSET_TAG,
    INT_TAG,
    MAP_TAG,
    NULL_TAG,
    SEQ_TAG,
    SET_TAG,
    STR_TAG,
    TIMESTAMP_TAG,
    TUPLE_TAG,
    Resolver,
)


logger = logging.getLogger(__name__)

_TIMESTAMP_DATE = re.compile(r'^(\d{4})-(\d{1,2})-(\d{1,2})$')
_TIMESTAMP_FULL = re.compile(
    r'^(\d{4})-(\d{1,2})-(\d{1,2})'
    r'(?:[Tt]|[ \t]+)(\d{1,2}):(\d{2}):(\d{2})'
    r'(?:\.(\d*))?'
    r'(?:[ \t]*(Z|[-+]\d{1,2}(?::\d{2})?))?$')


class BaseConstructor:
    """Base class for constructors.

    Args:
        registry: TagRegistry to consult (the process-wide one by default)
        resolver: Resolver used to infer missing tags
        max_depth: Deepest nesting accepted before DepthExceeded
        strict_fields: Raise ConstructorError for mapping keys that are not
            fields of the target class instead of dropping them
    """

    yaml_constructors = {}

    def __init__(self, registry=None, resolver=None,
                 max_depth=DEFAULT_MAX_DEPTH, strict_fields=False):
        self.registry = registry if registry is not None else tags.registry
        self.resolver = resolver if resolver is not None else Resolver()
        self.max_depth = max_depth
        self.strict_fields = strict_fields
        self.anchors = DecodeAnchors()
        self.pending = set()
        self.state_generators = []
        self.deep_construct = False
        self._depth = 0

    @classmethod
    def add_constructor(cls, tag, constructor):
        """Add a constructor for a specific tag."""
        if 'yaml_constructors' not in cls.__dict__:
            cls.yaml_constructors = cls.yaml_constructors.copy()
        cls.yaml_constructors[tag] = constructor

    def construct(self, tree):
        """Construct the first document of ``tree``, or None if it has none.

        ``tree`` may be a StreamNode, a DocumentNode or a bare node.
        """
        documents = _documents(tree)
        if not documents:
            return None
        return self.construct_document(documents[0])

    def construct_all(self, tree):
        """Construct every document of ``tree`` into a list."""
        return [self.construct_document(document) for document in _documents(tree)]

    def construct_document(self, document):
        """Construct a Python object from a document or root node."""
        node = document.root if isinstance(document, DocumentNode) else document
        if node is None:
            return None
        self.anchors = DecodeAnchors()
        self._depth = 0
        try:
            data = self.construct_object(node, deep=True)
            # Run any pending generators (for two-phase construction)
            while self.state_generators:
                state_generators = self.state_generators
                self.state_generators = []
                for generator in state_generators:
                    for dummy in generator:
                        pass
        except RecursionError as exc:
            raise DepthExceeded(self.max_depth) from exc
        finally:
            self.anchors = DecodeAnchors()
            self.pending = set()
            self.state_generators = []
            self.deep_construct = False
        return data

    def construct_object(self, node, deep=False):
        """Construct a Python object from a node, dispatching by tag."""
        if isinstance(node, AliasNode):
            if node.anchor in self.pending:
                raise ConstructorError(
                    None, None,
                    "found a recursive alias %r inside a value that cannot "
                    "refer to itself" % node.anchor, node.start_mark)
            return self.anchors.lookup(node.anchor, node.start_mark)
        if node.anchor is not None:
            self.pending.add(node.anchor)
        if deep:
            old_deep = self.deep_construct
            self.deep_construct = True
        self._depth += 1
        try:
            if self._depth > self.max_depth:
                raise DepthExceeded(self.max_depth)
            tag = self.resolver.resolve_node(node)
            if tag in self.yaml_constructors:
                data = self.yaml_constructors[tag](self, node)
            else:
                data = self.construct_tagged(tag, node)
            if isinstance(data, types.GeneratorType):
                generator = data
                data = next(generator)
                self._bind(node, data)
                if self.deep_construct:
                    for dummy in generator:
                        pass
                else:
                    self.state_generators.append(generator)
            else:
                self._bind(node, data)
        finally:
            self._depth -= 1
            if deep:
                self.deep_construct = old_deep
        return data

    def _bind(self, node, data):
        if node.anchor is not None:
            self.pending.discard(node.anchor)
            self.anchors.bind(node.anchor, data)

    def construct_tagged(self, tag, node):
        """Construct a node whose tag is not a core tag."""
        resolution = self.registry.resolve_for_decode(tag)
        if resolution.kind == tags.TYPE:
            return self.construct_registered(tag, node, resolution.type,
                                             resolution.exact)
        if resolution.kind == tags.DOMAIN:
            value = self.construct_untagged(node)
            return resolution.callback(resolution.suffix, value)
        raise UnknownTag(tag, node.start_mark)

    def construct_untagged(self, node):
        """Construct a node as if it carried no tag."""
        if isinstance(node, ScalarNode):
            tag = self.resolver.resolve(ScalarNode, node.value,
                                        (node.plain, not node.plain))
            return self.yaml_constructors[tag](self, node)
        if isinstance(node, SequenceNode):
            return self.construct_sequence(node, deep=True)
        return self.construct_mapping(node, deep=True)

    def construct_registered(self, tag, node, cls, exact):
        hooked = callable(getattr(cls, 'init_with', None))
        if isinstance(node, ScalarNode):
            if not hooked and not exact:
                return node.value
            return self.construct_yaml_object(tag, node, cls)
        if isinstance(node, SequenceNode) and not hooked:
            return self.construct_sequence(node, deep=True)
        if isinstance(node, MappingNode) and not hooked:
            return self.construct_object_fields(node, cls)
        return self.construct_yaml_object(tag, node, cls)

    def allocate(self, cls):
        """Create an instance of ``cls`` without running ``__init__``."""
        return cls.__new__(cls)

    def construct_yaml_object(self, tag, node, cls):
        """Construct an instance and hand its contents to ``init_with``."""
        instance = self.allocate(cls)
        yield instance
        init_with = getattr(instance, 'init_with', None)
        if not callable(init_with):
            return
        coder = Coder(tag, style=node.style, implicit=node.implicit)
        if isinstance(node, ScalarNode):
            coder.scalar = node.value
        elif isinstance(node, SequenceNode):
            coder.seq = self.construct_sequence(node, deep=True)
        else:
            coder.map = self.construct_mapping(node, deep=True)
        init_with(coder)

    def construct_object_fields(self, node, cls):
        """Construct an instance by assigning mapping entries to its fields."""
        instance = self.allocate(cls)
        yield instance
        fields = self.registry.fields_for(cls)
        for key_node, value_node in node.value:
            key = self.construct_object(key_node, deep=True)
            value = self.construct_object(value_node, deep=True)
            if fields is None:
                known = isinstance(key, str) and key.isidentifier() \
                    and not key.startswith('_')
            else:
                known = isinstance(key, str) and key in fields
            if not known:
                if self.strict_fields:
                    raise ConstructorError(
                        "while constructing %s" % cls.__qualname__,
                        node.start_mark,
                        "found unknown field %r" % (key,), key_node.start_mark)
                logger.debug('dropping unknown field %r of %s',
                             key, cls.__qualname__)
                continue
            setattr(instance, key, value)

    def construct_scalar(self, node):
        """Construct a scalar value from a node."""
        if not isinstance(node, ScalarNode):
            raise ConstructorError(
                None, None,
                "expected a scalar node, but found %s" % node.id,
                node.start_mark,
            )
        return node.value

    def construct_sequence(self, node, deep=False):
        """Construct a sequence from a node."""
        if not isinstance(node, SequenceNode):
            raise ConstructorError(
                None, None,
                "expected a sequence node, but found %s" % node.id,
                node.start_mark,
            )
        return [self.construct_object(child, deep=deep) for child in node.value]

    def construct_mapping(self, node, deep=False):
        """Construct a mapping from a node."""
        if not isinstance(node, MappingNode):
            raise ConstructorError(
                None, None,
                "expected a mapping node, but found %s" % node.id,
                node.start_mark,
            )
        mapping = {}
        for key_node, value_node in node.value:
            key = self.construct_object(key_node, deep=deep)
            try:
                hash(key)
            except TypeError as exc:
                raise ConstructorError(
                    "while constructing a mapping", node.start_mark,
                    "found unhashable key", key_node.start_mark,
                ) from exc
            value = self.construct_object(value_node, deep=deep)
            mapping[key] = value
        return mapping

    def malformed(self, tag, node, reason=None):
        """Handle a scalar that does not parse as ``tag``.

        A scalar explicitly tagged ``tag`` is an error; one whose tag was
        only inferred from its text falls back to the text itself.
        """
        if node.tag == tag:
            raise MalformedScalar(tag, node.value, node.start_mark, reason)
        logger.debug('scalar %r does not parse as %s, keeping it as a string',
                     node.value, tag)
        return node.value


class Constructor(BaseConstructor):
    """Constructor for the core YAML tags, Python tuples and frozensets."""

    def construct_yaml_null(self, node):
        value = self.construct_scalar(node)
        if value not in ('', '~', 'null', 'Null', 'NULL'):
            return self.malformed(NULL_TAG, node)
        return None

    def construct_yaml_bool(self, node):
        value = self.construct_scalar(node).lower()
        if value in ('true', 'yes', 'on'):
            return True
        if value in ('false', 'no', 'off'):
            return False
        return self.malformed(BOOL_TAG, node)

    def construct_yaml_int(self, node):
        value = self.construct_scalar(node)
        value = value.replace('_', '')
        sign = 1
        if value.startswith('-'):
            sign = -1
            value = value[1:]
        elif value.startswith('+'):
            value = value[1:]
        try:
            if value == '0':
                return 0
            elif value.startswith(('0x', '0X')):
                return sign * int(value[2:], 16)
            elif value.startswith(('0b', '0B')):
                return sign * int(value[2:], 2)
            elif value.startswith(('0o', '0O')):
                return sign * int(value[2:], 8)
            elif value.startswith('0') and len(value) > 1:
                # YAML 1.1 octal
                return sign * int(value, 8)
            return sign * int(value)
        except ValueError as exc:
            return self.malformed(INT_TAG, node, str(exc))

    def construct_yaml_float(self, node):
        value = self.construct_scalar(node)
        value = value.replace('_', '').lower()
        if value in ('.inf', '+.inf'):
            return float('inf')
        elif value == '-.inf':
            return float('-inf')
        elif value == '.nan':
            return float('nan')
        try:
            return float(value)
        except ValueError as exc:
            return self.malformed(FLOAT_TAG, node, str(exc))

    def construct_yaml_str(self, node):
        return self.construct_scalar(node)

    def construct_yaml_binary(self, node):
        value = ''.join(self.construct_scalar(node).split())
        try:
            return base64.b64decode(value, validate=True)
        except ValueError as exc:
            return self.malformed(BINARY_TAG, node, str(exc))

    def construct_yaml_timestamp(self, node):
        value = self.construct_scalar(node)
        try:
            match = _TIMESTAMP_DATE.match(value)
            if match:
                return datetime.date(int(match.group(1)), int(match.group(2)),
                                     int(match.group(3)))
            match = _TIMESTAMP_FULL.match(value)
            if match is None:
                return self.malformed(TIMESTAMP_TAG, node)
            year, month, day = int(match.group(1)), int(match.group(2)), int(match.group(3))
            hour, minute, second = int(match.group(4)), int(match.group(5)), int(match.group(6))
            fraction = 0
            if match.group(7):
                fraction = int(match.group(7)[:6].ljust(6, '0'))
            tz = None
            if match.group(8):
                if match.group(8) == 'Z':
                    tz = datetime.timezone.utc
                else:
                    tz_str = match.group(8)
                    tz_sign = -1 if tz_str[0] == '-' else 1
                    parts = tz_str[1:].split(':')
                    tz_hour = int(parts[0])
                    tz_min = int(parts[1]) if len(parts) > 1 else 0
                    tz = datetime.timezone(datetime.timedelta(
                        hours=tz_sign * tz_hour, minutes=tz_sign * tz_min))
            return datetime.datetime(year, month, day, hour, minute, second,
                                     fraction, tz)
        except ValueError as exc:
            return self.malformed(TIMESTAMP_TAG, node, str(exc))

    def construct_yaml_seq(self, node):
        if not isinstance(node, SequenceNode):
            raise ConstructorError(
                None, None,
                "expected a sequence node, but found %s" % node.id,
                node.start_mark,
            )
        data = []
        yield data
        data.extend(self.construct_sequence(node, deep=True))

    def construct_yaml_map(self, node):
        if not isinstance(node, MappingNode):
            raise ConstructorError(
                None, None,
                "expected a mapping node, but found %s" % node.id,
                node.start_mark,
            )
        data = {}
        yield data
        data.update(self.construct_mapping(node, deep=True))

    def construct_yaml_set(self, node):
        data = set()
        yield data
        data.update(self.construct_mapping(node, deep=True))

    def construct_python_tuple(self, node):
        return tuple(self.construct_sequence(node, deep=True))

    def construct_python_frozenset(self, node):
        return frozenset(self.construct_mapping(node, deep=True))


Constructor.add_constructor(NULL_TAG, Constructor.construct_yaml_null)
Constructor.add_constructor(BOOL_TAG, Constructor.construct_yaml_bool)
Constructor.add_constructor(INT_TAG, Constructor.construct_yaml_int)
Constructor.add_constructor(FLOAT_TAG, Constructor.construct_yaml_float)
Constructor.add_constructor(STR_TAG, Constructor.construct_yaml_str)
Constructor.add_constructor(BINARY_TAG, Constructor.construct_yaml_binary)
Constructor.add_constructor(TIMESTAMP_TAG, Constructor.construct_yaml_timestamp)
Constructor.add_constructor(SEQ_TAG, Constructor.construct_yaml_seq)
Constructor.add_constructor(MAP_TAG, Constructor.construct_yaml_map)
Constructor.add_constructor(SET_TAG, Constructor.construct_yaml_set)
Constructor.add_constructor(TUPLE_TAG, Constructor.construct_python_tuple)
Constructor.add_constructor(FROZENSET_TAG, Constructor.construct_python_frozenset)


def _documents(tree):
    if isinstance(tree, StreamNode):
        return list(tree.documents)
    if tree is None:
        return []
    return [tree]
