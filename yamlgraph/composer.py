"""Composer: builds a syntax tree from an event sequence.

Aliases stay in the tree as AliasNode references; binding them to values,
and rejecting those that name no earlier anchor, is left to the constructor.
An anchor may be defined again later in a document; aliases after the new
definition refer to it.  Tags the text did not spell out are left as None
so the constructor can infer them.
"""

from yamlgraph.error import DEFAULT_MAX_DEPTH, ComposerError, DepthExceeded
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
from yamlgraph.resolver import STR_TAG


class Composer:
    """Converts an iterable of events into a StreamNode.

    Args:
        events: Iterable of ``yamlgraph.events`` events
        max_depth: Deepest collection nesting accepted before DepthExceeded
    """

    def __init__(self, events, max_depth=DEFAULT_MAX_DEPTH):
        self._events = iter(events)
        self._current = None
        self.max_depth = max_depth
        self._depth = 0

    def peek_event(self):
        if self._current is None:
            self._current = next(self._events, None)
        return self._current

    def check_event(self, *choices):
        event = self.peek_event()
        if event is None:
            return False
        if not choices:
            return True
        return isinstance(event, choices)

    def get_event(self):
        event = self.peek_event()
        if event is None:
            raise ComposerError(None, None, "unexpected end of the event stream")
        self._current = None
        return event

    def expect_event(self, choice):
        event = self.get_event()
        if not isinstance(event, choice):
            raise ComposerError(
                None, None,
                "expected %s, but found %s" % (choice.__name__,
                                               event.__class__.__name__),
                event.start_mark)
        return event

    def compose_stream(self):
        start_event = self.expect_event(StreamStartEvent)
        documents = []
        while not self.check_event(StreamEndEvent):
            documents.append(self.compose_document())
        end_event = self.get_event()
        return StreamNode(documents, start_mark=start_event.start_mark,
                          end_mark=end_event.end_mark)

    def compose_document(self):
        start_event = self.expect_event(DocumentStartEvent)
        self._depth = 0
        root = self.compose_node()
        end_event = self.expect_event(DocumentEndEvent)
        return DocumentNode(root,
                            explicit_start=start_event.explicit,
                            explicit_end=end_event.explicit,
                            version=start_event.version,
                            tags=start_event.tags,
                            start_mark=start_event.start_mark,
                            end_mark=end_event.end_mark)

    def compose_node(self):
        if self.check_event(AliasEvent):
            event = self.get_event()
            return AliasNode(event.anchor, event.start_mark, event.end_mark)
        self._depth += 1
        try:
            if self._depth > self.max_depth:
                raise DepthExceeded(self.max_depth)
            if self.check_event(ScalarEvent):
                return self.compose_scalar_node()
            elif self.check_event(SequenceStartEvent):
                return self.compose_sequence_node()
            elif self.check_event(MappingStartEvent):
                return self.compose_mapping_node()
            event = self.get_event()
            raise ComposerError(
                None, None,
                "expected a node, but found %s" % event.__class__.__name__,
                event.start_mark)
        finally:
            self._depth -= 1

    def compose_scalar_node(self):
        event = self.get_event()
        tag = event.tag
        if tag == '!':
            tag = STR_TAG
        return ScalarNode(event.value, tag=tag, style=event.style,
                          anchor=event.anchor, implicit=tag is None,
                          start_mark=event.start_mark,
                          end_mark=event.end_mark)

    def compose_sequence_node(self):
        start_event = self.get_event()
        tag = None if start_event.tag == '!' else start_event.tag
        node = SequenceNode([], tag=tag, style=start_event.style,
                            anchor=start_event.anchor, implicit=tag is None,
                            start_mark=start_event.start_mark)
        while not self.check_event(SequenceEndEvent):
            node.value.append(self.compose_node())
        end_event = self.get_event()
        node.end_mark = end_event.end_mark
        return node

    def compose_mapping_node(self):
        start_event = self.get_event()
        tag = None if start_event.tag == '!' else start_event.tag
        node = MappingNode([], tag=tag, style=start_event.style,
                           anchor=start_event.anchor, implicit=tag is None,
                           start_mark=start_event.start_mark)
        while not self.check_event(MappingEndEvent):
            key_node = self.compose_node()
            value_node = self.compose_node()
            node.value.append((key_node, value_node))
        end_event = self.get_event()
        node.end_mark = end_event.end_mark
        return node
