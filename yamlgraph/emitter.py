"""Text layer adapter.

Reading and writing YAML text is delegated to PyYAML's event parser and
emitter.  This module converts between PyYAML events and ``yamlgraph.events``
and maps PyYAML failures onto ParserError and EmitterError.  The JSON flag
rewrites the event stream so the emitter produces JSON-compatible flow
output.
"""

import logging

import yaml

from yamlgraph.error import EmitterError, ParserError
from yamlgraph.events import (
    AliasEvent,
    CollectionEndEvent,
    CollectionStartEvent,
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
from yamlgraph.nodes import CollectionNode, ScalarNode
from yamlgraph.resolver import (
    BOOL_TAG,
    FLOAT_TAG,
    INT_TAG,
    NULL_TAG,
    Resolver,
)


logger = logging.getLogger(__name__)

_FLOW_STYLE = {CollectionNode.FLOW: True, CollectionNode.BLOCK: False}

# Wide enough that the emitter never folds a JSON string across lines.
_JSON_WIDTH = 2 ** 30


def _collection_style(flow_style):
    if flow_style is None:
        return None
    return CollectionNode.FLOW if flow_style else CollectionNode.BLOCK


def _from_yaml_event(event):
    """Convert a PyYAML event to a yamlgraph event."""
    sm, em = event.start_mark, event.end_mark
    if isinstance(event, yaml.ScalarEvent):
        return ScalarEvent(event.anchor, event.tag, event.implicit, event.value,
                           start_mark=sm, end_mark=em, style=event.style)
    elif isinstance(event, yaml.SequenceStartEvent):
        return SequenceStartEvent(event.anchor, event.tag, event.implicit,
                                  start_mark=sm, end_mark=em,
                                  style=_collection_style(event.flow_style))
    elif isinstance(event, yaml.MappingStartEvent):
        return MappingStartEvent(event.anchor, event.tag, event.implicit,
                                 start_mark=sm, end_mark=em,
                                 style=_collection_style(event.flow_style))
    elif isinstance(event, yaml.SequenceEndEvent):
        return SequenceEndEvent(sm, em)
    elif isinstance(event, yaml.MappingEndEvent):
        return MappingEndEvent(sm, em)
    elif isinstance(event, yaml.AliasEvent):
        return AliasEvent(event.anchor, sm, em)
    elif isinstance(event, yaml.DocumentStartEvent):
        return DocumentStartEvent(sm, em, explicit=event.explicit,
                                  version=event.version, tags=event.tags)
    elif isinstance(event, yaml.DocumentEndEvent):
        return DocumentEndEvent(sm, em, explicit=event.explicit)
    elif isinstance(event, yaml.StreamStartEvent):
        return StreamStartEvent(sm, em, encoding=event.encoding)
    elif isinstance(event, yaml.StreamEndEvent):
        return StreamEndEvent(sm, em)
    raise ParserError(None, None, "unexpected event %r" % (event,), sm)


def _to_yaml_event(event):
    """Convert a yamlgraph event to a PyYAML event."""
    if isinstance(event, ScalarEvent):
        return yaml.ScalarEvent(event.anchor, event.tag, event.implicit,
                                event.value, style=event.style)
    elif isinstance(event, SequenceStartEvent):
        return yaml.SequenceStartEvent(event.anchor, event.tag, event.implicit,
                                       flow_style=_FLOW_STYLE.get(event.style))
    elif isinstance(event, MappingStartEvent):
        return yaml.MappingStartEvent(event.anchor, event.tag, event.implicit,
                                      flow_style=_FLOW_STYLE.get(event.style))
    elif isinstance(event, SequenceEndEvent):
        return yaml.SequenceEndEvent()
    elif isinstance(event, MappingEndEvent):
        return yaml.MappingEndEvent()
    elif isinstance(event, AliasEvent):
        return yaml.AliasEvent(event.anchor)
    elif isinstance(event, DocumentStartEvent):
        return yaml.DocumentStartEvent(explicit=event.explicit,
                                       version=event.version, tags=event.tags)
    elif isinstance(event, DocumentEndEvent):
        return yaml.DocumentEndEvent(explicit=event.explicit)
    elif isinstance(event, StreamStartEvent):
        return yaml.StreamStartEvent(encoding=event.encoding)
    elif isinstance(event, StreamEndEvent):
        return yaml.StreamEndEvent()
    raise EmitterError('expected an event, but found %r' % (event,))


def parse_events(source):
    """Parse YAML text into a list of events.

    Args:
        source: A ``str``, ``bytes`` or a readable text/binary stream
    """
    try:
        return [_from_yaml_event(event)
                for event in yaml.parse(source, Loader=yaml.SafeLoader)]
    except yaml.MarkedYAMLError as exc:
        raise ParserError(exc.context, exc.context_mark, exc.problem,
                          exc.problem_mark, exc.note) from exc
    except yaml.YAMLError as exc:
        raise ParserError(None, None, str(exc)) from exc


class Emitter:
    """Writes events as YAML (or JSON) text through PyYAML.

    Args:
        indent: Indentation width
        width: Preferred line width
        allow_unicode: Write non-ASCII characters unescaped
        canonical: Write the canonical YAML form
        line_break: Line break to use (``'\\n'``, ``'\\r'`` or ``'\\r\\n'``)
        explicit_start: Force (True) or suppress (False) ``---`` markers
        explicit_end: Force (True) or suppress (False) ``...`` markers
        json: Produce JSON-compatible output
    """

    def __init__(self, indent=None, width=None, allow_unicode=True,
                 canonical=False, line_break=None, explicit_start=None,
                 explicit_end=None, json=False):
        self.indent = indent
        self.width = width
        self.allow_unicode = allow_unicode
        self.canonical = canonical
        self.line_break = line_break
        self.explicit_start = explicit_start
        self.explicit_end = explicit_end
        self.json = json
        self.resolver = Resolver()

    def emit(self, events, stream=None):
        """Emit events; return the text, or None when written to ``stream``."""
        if self.json:
            events = self.jsonify(events)
        yaml_events = []
        for event in events:
            if isinstance(event, DocumentStartEvent) and self.explicit_start is not None:
                event = DocumentStartEvent(explicit=self.explicit_start,
                                           version=event.version, tags=event.tags)
            elif isinstance(event, DocumentEndEvent) and self.explicit_end is not None:
                event = DocumentEndEvent(explicit=self.explicit_end)
            yaml_events.append(_to_yaml_event(event))
        width = self.width
        if self.json and width is None:
            width = _JSON_WIDTH
        try:
            return yaml.emit(yaml_events, stream=stream,
                             canonical=self.canonical, indent=self.indent,
                             width=width, allow_unicode=self.allow_unicode,
                             line_break=self.line_break)
        except yaml.YAMLError as exc:
            raise EmitterError(str(exc)) from exc

    def jsonify(self, events):
        """Rewrite events so the emitted text is JSON.

        Collections become flow style; tags and anchors are dropped; mapping
        keys and strings are double-quoted; null, booleans and numbers are
        written plain.  Aliases, infinities and NaN have no JSON form and
        raise EmitterError.
        """
        # One entry per open collection: [is_mapping, items_seen]
        stack = []
        for event in events:
            is_key = bool(stack) and stack[-1][0] and stack[-1][1] % 2 == 0
            if isinstance(event, CollectionEndEvent):
                stack.pop()
                yield event.__class__()
                continue
            if stack and isinstance(event, (ScalarEvent, CollectionStartEvent,
                                            AliasEvent)):
                stack[-1][1] += 1
            if isinstance(event, AliasEvent):
                raise EmitterError('cannot write the alias %r as JSON' % event.anchor)
            elif isinstance(event, CollectionStartEvent):
                if is_key:
                    raise EmitterError('JSON mapping keys must be scalars')
                stack.append([isinstance(event, MappingStartEvent), 0])
                yield event.__class__(None, None, True, style=CollectionNode.FLOW)
            elif isinstance(event, ScalarEvent):
                yield self.json_scalar(event, is_key)
            else:
                yield event

    def json_scalar(self, event, is_key):
        tag = event.tag
        if tag is None:
            plain = event.style in (ScalarNode.ANY, ScalarNode.PLAIN)
            tag = self.resolver.resolve(ScalarNode, event.value, (plain, not plain))
        value = event.value
        if not is_key:
            if tag == NULL_TAG:
                return ScalarEvent(None, None, (True, True), 'null')
            if tag == BOOL_TAG:
                value = 'true' if value.lower() in ('true', 'yes', 'on') else 'false'
                return ScalarEvent(None, None, (True, True), value)
            if tag == FLOAT_TAG and value.lower().lstrip('+-') in ('.inf', '.nan'):
                raise EmitterError('cannot write the float %s as JSON' % value)
            if tag in (INT_TAG, FLOAT_TAG):
                return ScalarEvent(None, None, (True, True), value.replace('_', ''))
        return ScalarEvent(None, None, (True, True), value,
                           style=ScalarNode.DOUBLE_QUOTED)
