"""Syntax tree (STree) node classes.

The tree is the shared vocabulary of the two directions: the representer
builds it from live values and the constructor turns it back into values.
Scalars, sequences and mappings carry an optional tag, a style hint that
only the text layer interprets, and an optional anchor label.  Aliases
refer back to an anchor label defined earlier in the same document.
"""


class Node:
    """Base class for YAML nodes."""

    def __init__(self, tag=None, value=None, style=None, anchor=None,
                 implicit=True, start_mark=None, end_mark=None):
        self.tag = tag
        self.value = value
        self.style = style
        self.anchor = anchor
        self.implicit = implicit
        self.start_mark = start_mark
        self.end_mark = end_mark

    def __repr__(self):
        return '%s(tag=%r, value=%r, anchor=%r)' % (
            self.__class__.__name__, self.tag, self.value, self.anchor)


class ScalarNode(Node):
    """Scalar node (strings, numbers, etc.)."""
    id = 'scalar'

    # Style hints, same spelling the YAML emitter uses.
    ANY = None
    PLAIN = ''
    SINGLE_QUOTED = "'"
    DOUBLE_QUOTED = '"'
    LITERAL = '|'
    FOLDED = '>'

    def __init__(self, value, tag=None, style=None, anchor=None,
                 implicit=True, start_mark=None, end_mark=None):
        super().__init__(tag, value, style, anchor, implicit,
                         start_mark, end_mark)

    @property
    def plain(self):
        """True when the scalar is unquoted (its tag may be inferred)."""
        return self.style in (self.ANY, self.PLAIN)


class CollectionNode(Node):
    """Base class for collection nodes."""

    ANY = None
    BLOCK = 'block'
    FLOW = 'flow'


class SequenceNode(CollectionNode):
    """Sequence node (lists/arrays)."""
    id = 'sequence'

    def __init__(self, children=None, tag=None, style=None, anchor=None,
                 implicit=True, start_mark=None, end_mark=None):
        if children is None:
            children = []
        super().__init__(tag, children, style, anchor, implicit,
                         start_mark, end_mark)

    @property
    def children(self):
        return self.value


class MappingNode(CollectionNode):
    """Mapping node (dicts/objects).

    ``value`` is a list of ``(key_node, value_node)`` pairs, so keys may be
    any kind of node and duplicate or unhashable keys survive in the tree.
    """
    id = 'mapping'

    def __init__(self, pairs=None, tag=None, style=None, anchor=None,
                 implicit=True, start_mark=None, end_mark=None):
        if pairs is None:
            pairs = []
        super().__init__(tag, pairs, style, anchor, implicit,
                         start_mark, end_mark)

    @property
    def pairs(self):
        return self.value


class AliasNode(Node):
    """Reference to a node anchored earlier in the document."""
    id = 'alias'

    def __init__(self, anchor, start_mark=None, end_mark=None):
        super().__init__(anchor=anchor, start_mark=start_mark,
                         end_mark=end_mark)

    def __repr__(self):
        return 'AliasNode(anchor=%r)' % (self.anchor,)


class DocumentNode:
    """A document wraps exactly one root node.

    ``explicit_start``, ``explicit_end``, ``version`` and ``tags`` are passed
    through to the text layer untouched; ``None`` lets the emitter choose.
    """
    id = 'document'

    def __init__(self, root, explicit_start=None, explicit_end=None,
                 version=None, tags=None, start_mark=None, end_mark=None):
        self.root = root
        self.explicit_start = explicit_start
        self.explicit_end = explicit_end
        self.version = version
        self.tags = tags
        self.start_mark = start_mark
        self.end_mark = end_mark

    def __repr__(self):
        return 'DocumentNode(root=%r)' % (self.root,)


class StreamNode:
    """Outermost container: an ordered list of documents."""
    id = 'stream'

    def __init__(self, documents=None, start_mark=None, end_mark=None):
        if documents is None:
            documents = []
        self.documents = documents
        self.start_mark = start_mark
        self.end_mark = end_mark

    def __iter__(self):
        return iter(self.documents)

    def __len__(self):
        return len(self.documents)

    def __repr__(self):
        return 'StreamNode(documents=%r)' % (self.documents,)
