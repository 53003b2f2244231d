"""Tests for the encode and decode anchor tables."""

import pytest

from yamlgraph.anchors import DecodeAnchors, EncodeAnchors
from yamlgraph.error import UnknownAnchor
from yamlgraph.nodes import SequenceNode


class TestEncodeAnchors:
    """Test identity-keyed anchor allocation."""

    def test_first_visit(self):
        """The first visit only records the object."""
        anchors = EncodeAnchors()
        assert anchors.note_visit([]) == (True, None)
        assert len(anchors) == 0

    def test_repeat_visit_allocates_label(self):
        """A repeated visit allocates a label and stamps the first node."""
        anchors = EncodeAnchors()
        data = []
        node = SequenceNode()
        anchors.note_visit(data)
        anchors.attach(data, node)
        assert anchors.note_visit(data) == (False, 'id001')
        assert node.anchor == 'id001'

    def test_label_allocated_once(self):
        """Later visits reuse the same label."""
        anchors = EncodeAnchors()
        data = {}
        anchors.note_visit(data)
        anchors.note_visit(data)
        assert anchors.note_visit(data) == (False, 'id001')
        assert len(anchors) == 1

    def test_labels_are_sequential(self):
        """Labels count up in the order repeats are found."""
        anchors = EncodeAnchors()
        first, second = [], []
        anchors.note_visit(first)
        anchors.note_visit(second)
        assert anchors.note_visit(second) == (False, 'id001')
        assert anchors.note_visit(first) == (False, 'id002')

    def test_repeat_before_attach(self):
        """A cycle found while the node is being built stamps it on attach."""
        anchors = EncodeAnchors()
        data = []
        anchors.note_visit(data)
        anchors.note_visit(data)
        node = SequenceNode()
        anchors.attach(data, node)
        assert node.anchor == 'id001'

    def test_equal_objects_are_distinct(self):
        """Identity, not equality, decides sharing."""
        anchors = EncodeAnchors()
        anchors.note_visit([1])
        assert anchors.note_visit([1]) == (True, None)

    def test_custom_template(self):
        """The label template is configurable."""
        anchors = EncodeAnchors('ref%d')
        data = []
        anchors.note_visit(data)
        assert anchors.note_visit(data) == (False, 'ref1')


class TestDecodeAnchors:
    """Test label-keyed binding."""

    def test_bind_and_lookup(self):
        """A bound value is returned by identity."""
        anchors = DecodeAnchors()
        value = []
        anchors.bind('a', value)
        assert anchors.lookup('a') is value
        assert 'a' in anchors

    def test_rebind(self):
        """Binding a label again replaces the earlier value."""
        anchors = DecodeAnchors()
        anchors.bind('a', 1)
        anchors.bind('a', 2)
        assert anchors.lookup('a') == 2

    def test_unknown_anchor(self):
        """Looking up an unbound label raises UnknownAnchor."""
        anchors = DecodeAnchors()
        with pytest.raises(UnknownAnchor) as excinfo:
            anchors.lookup('missing')
        assert excinfo.value.anchor == 'missing'
        assert 'missing' in str(excinfo.value)
