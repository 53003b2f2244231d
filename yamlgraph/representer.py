"""Representer: turns live Python values into a syntax tree.

Values are dispatched on their exact type through ``yaml_representers``;
anything not found there is represented through its ``encode_with`` hook,
or, for classes registered without a hook, through its attributes.
Unregistered subclasses of the built-in types fall back to
``yaml_multi_representers``, looked up along the class MRO.  Every
non-scalar value is tracked by identity, so an object reached twice is
written once with an anchor and referenced by aliases afterwards; cycles
terminate the same way.
"""

import base64
import collections
import datetime
import logging

from yamlgraph import tags
from yamlgraph.anchors import EncodeAnchors
from yamlgraph.coder import Coder
from yamlgraph.error import (
    DEFAULT_MAX_DEPTH,
    DepthExceeded,
    RepresenterError,
    UnsupportedValue,
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

_SCALAR_TYPES = (str, bytes, bool, int, float, datetime.date, datetime.datetime)


class BaseRepresenter:
    """Base class for representers.

    Args:
        registry: TagRegistry to consult (the process-wide one by default)
        resolver: Resolver used to detect ambiguous strings
        max_depth: Deepest nesting accepted before DepthExceeded
        sort_keys: Emit mapping keys sorted instead of in iteration order
    """

    yaml_representers = {}
    yaml_multi_representers = {}

    ANCHOR_TEMPLATE = 'id%03d'

    def __init__(self, registry=None, resolver=None,
                 max_depth=DEFAULT_MAX_DEPTH, sort_keys=False):
        self.registry = registry if registry is not None else tags.registry
        self.resolver = resolver if resolver is not None else Resolver()
        self.max_depth = max_depth
        self.sort_keys = sort_keys
        self.anchors = None
        self.alias_key = None
        self._depth = 0

    @classmethod
    def add_representer(cls, data_type, representer):
        """Add a representer for a specific type."""
        if 'yaml_representers' not in cls.__dict__:
            cls.yaml_representers = cls.yaml_representers.copy()
        cls.yaml_representers[data_type] = representer

    @classmethod
    def add_multi_representer(cls, data_type, representer):
        """Add a representer for a type and its subclasses."""
        if 'yaml_multi_representers' not in cls.__dict__:
            cls.yaml_multi_representers = cls.yaml_multi_representers.copy()
        cls.yaml_multi_representers[data_type] = representer

    def represent(self, data):
        """Represent ``data`` as a single-document stream."""
        return StreamNode([self.represent_document(data)])

    def represent_all(self, documents):
        """Represent each value as its own document."""
        return StreamNode([self.represent_document(data) for data in documents])

    def represent_document(self, data):
        self.anchors = EncodeAnchors(self.ANCHOR_TEMPLATE)
        self._depth = 0
        try:
            root = self.represent_data(data)
        except RecursionError as exc:
            raise DepthExceeded(self.max_depth) from exc
        finally:
            anchored = len(self.anchors)
            self.anchors = None
            self.alias_key = None
        if anchored:
            logger.debug('represented document with %d anchors', anchored)
        return DocumentNode(root)

    def ignore_aliases(self, data):
        """Return True if aliases should not be used for this data."""
        if data is None:
            return True
        if isinstance(data, tuple) and data == ():
            return True
        return isinstance(data, _SCALAR_TYPES)

    def represent_data(self, data):
        if self.ignore_aliases(data):
            alias_key = None
        else:
            first, anchor = self.anchors.note_visit(data)
            if not first:
                return AliasNode(anchor)
            alias_key = data
        self._depth += 1
        if self._depth > self.max_depth:
            raise DepthExceeded(self.max_depth)
        try:
            self.alias_key = alias_key
            node = self.represent_value(data)
            if self.alias_key is not None:
                self._attach(node)
        finally:
            self._depth -= 1
        return node

    def represent_value(self, data):
        """Dispatch ``data`` to the representer for its type."""
        data_type = type(data)
        if data_type in self.yaml_representers:
            return self.yaml_representers[data_type](self, data)
        if callable(getattr(data_type, 'encode_with', None)):
            return self.represent_coder(data)
        tag = self.registry.resolve_for_encode(data)
        if tag is not None:
            return self.represent_object(tag, data)
        for base_type in data_type.__mro__[1:]:
            if base_type in self.yaml_multi_representers:
                return self.yaml_multi_representers[base_type](self, data)
        raise UnsupportedValue(data)

    def _attach(self, node):
        if self.alias_key is not None:
            self.anchors.attach(self.alias_key, node)
            self.alias_key = None

    def represent_scalar(self, tag, value, style=None, implicit=True):
        return ScalarNode(value, tag=tag, style=style, implicit=implicit)

    def represent_sequence(self, tag, sequence, style=None, implicit=True):
        """Represent a sequence as a SequenceNode."""
        value = []
        node = SequenceNode(value, tag=tag, style=style, implicit=implicit)
        self._attach(node)
        for item in sequence:
            value.append(self.represent_data(item))
        return node

    def represent_mapping(self, tag, mapping, style=None, implicit=True):
        """Represent a mapping as a MappingNode.

        ``mapping`` is a dict or an iterable of ``(key, value)`` pairs.
        """
        value = []
        node = MappingNode(value, tag=tag, style=style, implicit=implicit)
        self._attach(node)
        if hasattr(mapping, 'items'):
            mapping = list(mapping.items())
        if self.sort_keys:
            try:
                mapping = sorted(mapping, key=lambda pair: pair[0])
            except TypeError:
                pass
        for item_key, item_value in mapping:
            node_key = self.represent_data(item_key)
            node_value = self.represent_data(item_value)
            value.append((node_key, node_value))
        return node

    def represent_coder(self, data):
        """Represent an object through its ``encode_with`` hook."""
        coder = Coder(self.registry.tag_for(type(data)))
        data.encode_with(coder)
        if coder.type == Coder.SCALAR:
            if not isinstance(coder.scalar, str):
                raise RepresenterError(
                    "%s.encode_with set a non-string scalar: %r"
                    % (type(data).__qualname__, coder.scalar))
            return self.represent_scalar(coder.tag, coder.scalar,
                                         style=coder.style,
                                         implicit=coder.implicit)
        style = coder.style if coder.style is not None else SequenceNode.BLOCK
        if coder.type == Coder.SEQ:
            return self.represent_sequence(coder.tag, coder.seq, style=style,
                                           implicit=coder.implicit)
        return self.represent_mapping(coder.tag, coder.map, style=style,
                                      implicit=coder.implicit)

    def represent_object(self, tag, data):
        """Represent a registered object without a hook by its fields."""
        fields = self.registry.fields_for(type(data))
        if fields is None:
            if not hasattr(data, '__dict__'):
                raise UnsupportedValue(data)
            state = {key: value for key, value in vars(data).items()
                     if not key.startswith('_')}
        else:
            missing = object()
            state = {}
            for name in fields:
                value = getattr(data, name, missing)
                if value is not missing:
                    state[name] = value
        return self.represent_mapping(tag, state, style=MappingNode.BLOCK,
                                      implicit=False)


class Representer(BaseRepresenter):
    """Representer for the built-in Python types."""

    def represent_none(self, data):
        return self.represent_scalar(NULL_TAG, 'null')

    def represent_bool(self, data):
        return self.represent_scalar(BOOL_TAG, 'true' if data else 'false')

    def represent_int(self, data):
        return self.represent_scalar(INT_TAG, int.__repr__(data))

    def represent_float(self, data):
        if data != data:
            value = '.nan'
        elif data == float('inf'):
            value = '.inf'
        elif data == float('-inf'):
            value = '-.inf'
        else:
            value = float.__repr__(data).lower()
            # repr(1e17) is '1e+17'; the float resolver wants a dot.
            if '.' not in value and 'e' in value:
                value = value.replace('e', '.0e', 1)
        return self.represent_scalar(FLOAT_TAG, value)

    def represent_str(self, data):
        """Represent a string, tagging it only if it reads as another type."""
        if type(data) is not str:
            data = str.__str__(data)
        if self.resolver.is_ambiguous(data):
            return self.represent_scalar(STR_TAG, data)
        return self.represent_scalar(None, data)

    def represent_binary(self, data):
        """Represent bytes as base64-encoded binary with literal block style."""
        encoded = base64.encodebytes(data).decode('ascii')
        return self.represent_scalar(BINARY_TAG, encoded, style=ScalarNode.LITERAL)

    def represent_date(self, data):
        return self.represent_scalar(TIMESTAMP_TAG, data.isoformat())

    def represent_datetime(self, data):
        if data.tzinfo is not None:
            value = data.isoformat()
        else:
            value = data.strftime('%Y-%m-%d %H:%M:%S')
            if data.microsecond:
                value += '.%06d' % data.microsecond
        return self.represent_scalar(TIMESTAMP_TAG, value)

    def represent_list(self, data):
        return self.represent_sequence(SEQ_TAG, data)

    def represent_tuple(self, data):
        return self.represent_sequence(TUPLE_TAG, data)

    def represent_dict(self, data):
        return self.represent_mapping(MAP_TAG, data)

    def represent_set(self, data):
        """Represent a set as a tagged mapping with null values."""
        return self.represent_mapping(SET_TAG, [(item, None) for item in data])

    def represent_frozenset(self, data):
        return self.represent_mapping(FROZENSET_TAG, [(item, None) for item in data])


Representer.add_representer(type(None), Representer.represent_none)
Representer.add_representer(bool, Representer.represent_bool)
Representer.add_representer(int, Representer.represent_int)
Representer.add_representer(float, Representer.represent_float)
Representer.add_representer(str, Representer.represent_str)
Representer.add_representer(bytes, Representer.represent_binary)
Representer.add_representer(datetime.date, Representer.represent_date)
Representer.add_representer(datetime.datetime, Representer.represent_datetime)
Representer.add_representer(list, Representer.represent_list)
Representer.add_representer(tuple, Representer.represent_tuple)
Representer.add_representer(dict, Representer.represent_dict)
Representer.add_representer(collections.OrderedDict, Representer.represent_dict)
Representer.add_representer(set, Representer.represent_set)
Representer.add_representer(frozenset, Representer.represent_frozenset)

Representer.add_multi_representer(int, Representer.represent_int)
Representer.add_multi_representer(float, Representer.represent_float)
Representer.add_multi_representer(str, Representer.represent_str)
Representer.add_multi_representer(bytes, Representer.represent_binary)
Representer.add_multi_representer(datetime.date, Representer.represent_date)
Representer.add_multi_representer(datetime.datetime, Representer.represent_datetime)
Representer.add_multi_representer(list, Representer.represent_list)
Representer.add_multi_representer(tuple, Representer.represent_tuple)
Representer.add_multi_representer(dict, Representer.represent_dict)
Representer.add_multi_representer(set, Representer.represent_set)
Representer.add_multi_representer(frozenset, Representer.represent_frozenset)
