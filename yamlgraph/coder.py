"""The coder passed to ``encode_with`` and ``init_with`` hooks.

A type customises its representation by defining::

    def encode_with(self, coder):
        coder['x'] = self.x          # map mode (the default)

    def init_with(self, coder):
        self.x = coder['x']

The hook picks one of three modes: map (``coder[key] = value`` or
``coder.map = {...}``), scalar (``coder.scalar = 'text'``) or sequence
(``coder.seq = [...]``).  Choosing a mode discards whatever the other modes
held.  ``tag``, ``style`` and ``implicit`` decorate the node that is built
and are reported back, as found in the tree, to ``init_with``.
"""


class Coder:
    """Mediator between a custom type and the node representing it."""

    MAP = 'map'
    SCALAR = 'scalar'
    SEQ = 'seq'

    def __init__(self, tag, style=None, implicit=False):
        self.tag = tag
        self.style = style
        self.implicit = implicit
        self.type = self.MAP
        self._map = {}
        self._scalar = None
        self._seq = None

    def __repr__(self):
        return 'Coder(tag=%r, type=%r)' % (self.tag, self.type)

    def __getitem__(self, key):
        if self.type != self.MAP:
            return None
        return self._map.get(key)

    def __setitem__(self, key, value):
        if self.type != self.MAP:
            self._switch(self.MAP)
        self._map[key] = value

    def __contains__(self, key):
        return self.type == self.MAP and key in self._map

    def _switch(self, mode):
        self.type = mode
        self._map = {}
        self._scalar = None
        self._seq = None

    @property
    def map(self):
        return self._map if self.type == self.MAP else None

    @map.setter
    def map(self, mapping):
        self._switch(self.MAP)
        self._map = dict(mapping)

    @property
    def scalar(self):
        return self._scalar

    @scalar.setter
    def scalar(self, value):
        self._switch(self.SCALAR)
        self._scalar = value

    @property
    def seq(self):
        return self._seq

    @seq.setter
    def seq(self, items):
        self._switch(self.SEQ)
        self._seq = list(items)

    def represent_scalar(self, tag, value):
        self.tag = tag
        self.scalar = value

    def represent_seq(self, tag, items):
        self.tag = tag
        self.seq = items

    def represent_map(self, tag, mapping):
        self.tag = tag
        self.map = mapping
