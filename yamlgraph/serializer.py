"""Serializer: flattens a syntax tree into an event sequence.

Tags that the text layer can reconstruct on its own are marked implicit so
the emitter leaves them out: default collection tags, scalars whose core
tag matches what their plain text resolves to, and strings that only need
quoting.
"""

import logging

from yamlgraph.error import SerializerError
from yamlgraph.events import (
    AliasEvent,
    DocumentEndEvent,
    DocumentStartEvent,
    MappingEndEvent,
    MappingStartEvent,
    ScalarEvent,
    SequenceEndEvent,
    SequenceStartEvent,
    StreamEndEvent,
    StreamStartEvent,
)
from yamlgraph.nodes import (
    AliasNode,
    DocumentNode,
    MappingNode,
    ScalarNode,
    SequenceNode,
    StreamNode,
)
from yamlgraph.resolver import MAP_TAG, SEQ_TAG, STR_TAG, YAML_TAG_PREFIX, Resolver


logger = logging.getLogger(__name__)


class Serializer:
    """Turns StreamNode trees into events."""

    def __init__(self, resolver=None):
        self.resolver = resolver if resolver is not None else Resolver()
        self.anchors = set()

    def serialize(self, tree):
        """Yield the events of ``tree`` (a stream, a document or a node)."""
        if isinstance(tree, StreamNode):
            documents = tree.documents
        elif isinstance(tree, DocumentNode):
            documents = [tree]
        else:
            documents = [DocumentNode(tree)]
        yield StreamStartEvent()
        for document in documents:
            yield from self.serialize_document(document)
        yield StreamEndEvent()

    def serialize_document(self, document):
        self.anchors = set()
        yield DocumentStartEvent(explicit=document.explicit_start,
                                 version=document.version,
                                 tags=document.tags)
        yield from self.serialize_node(document.root)
        yield DocumentEndEvent(explicit=document.explicit_end)
        self.anchors = set()

    def serialize_node(self, node):
        if isinstance(node, AliasNode):
            if node.anchor not in self.anchors:
                raise SerializerError(
                    'alias %r refers to an anchor not defined earlier in the document'
                    % node.anchor)
            yield AliasEvent(node.anchor)
            return
        if node.anchor is not None:
            self.anchors.add(node.anchor)
        if isinstance(node, ScalarNode):
            yield ScalarEvent(node.anchor, node.tag, self.scalar_implicit(node),
                              node.value, style=node.style)
        elif isinstance(node, SequenceNode):
            implicit = self.collection_implicit(node, SEQ_TAG)
            yield SequenceStartEvent(node.anchor, node.tag, implicit,
                                     style=node.style)
            for item in node.value:
                yield from self.serialize_node(item)
            yield SequenceEndEvent()
        elif isinstance(node, MappingNode):
            implicit = self.collection_implicit(node, MAP_TAG)
            yield MappingStartEvent(node.anchor, node.tag, implicit,
                                    style=node.style)
            for key_node, value_node in node.value:
                yield from self.serialize_node(key_node)
                yield from self.serialize_node(value_node)
            yield MappingEndEvent()
        else:
            raise SerializerError('expected a node, but found %r' % (node,))

    def scalar_implicit(self, node):
        """Return the ``(plain, quoted)`` implicit pair for a scalar."""
        tag = node.tag
        if tag is None:
            return (True, True)
        if not node.implicit:
            return (False, False)
        if tag.startswith(YAML_TAG_PREFIX):
            resolved = self.resolver.resolve(ScalarNode, node.value, (True, False))
            return (tag == resolved, tag == STR_TAG)
        return (True, True)

    def collection_implicit(self, node, default_tag):
        tag = node.tag
        if tag is None or tag == default_tag:
            return True
        # Core tags other than the default (sets, tuples) are always written.
        return bool(node.implicit) and not tag.startswith(YAML_TAG_PREFIX)
