"""Anchor tables for one encode or decode run.

Encoding keys the table by object identity: the first visit of an object
only records it, and a repeated visit allocates a label (once) and stamps it
on the node built for the first visit, so the caller can emit an alias
instead of walking the object again.  Decoding binds each anchored value as
soon as it is allocated, before its contents are filled in, so aliases
inside the value itself resolve to it.
"""

from yamlgraph.error import UnknownAnchor


class EncodeAnchors:
    """Identity-keyed anchor table used by the representer."""

    def __init__(self, template='id%03d'):
        self.template = template
        self._count = 0
        # id(obj) -> [obj, node, label]; holding obj keeps its id unique
        self._seen = {}

    def note_visit(self, data):
        """Record a visit of ``data``.

        Returns:
            ``(True, None)`` on the first visit; ``(False, label)`` on a
            repeated one, allocating the label if needed.
        """
        entry = self._seen.get(id(data))
        if entry is None:
            self._seen[id(data)] = [data, None, None]
            return True, None
        if entry[2] is None:
            self._count += 1
            entry[2] = self.template % self._count
            if entry[1] is not None:
                entry[1].anchor = entry[2]
        return False, entry[2]

    def attach(self, data, node):
        """Remember ``node`` as the representation of ``data``."""
        entry = self._seen[id(data)]
        entry[1] = node
        if entry[2] is not None:
            node.anchor = entry[2]

    def __len__(self):
        return self._count


class DecodeAnchors:
    """Label-keyed anchor table used by the constructor."""

    def __init__(self):
        self._bound = {}

    def bind(self, label, value):
        self._bound[label] = value

    def lookup(self, label, mark=None):
        try:
            return self._bound[label]
        except KeyError:
            raise UnknownAnchor(label, mark) from None

    def __contains__(self, label):
        return label in self._bound
