"""Default tag inference for untagged nodes.

Plain scalars without a tag are matched against the YAML 1.1 implicit
resolvers (null, bool, int, float, timestamp); quoted scalars are always
strings; collections get the default sequence/mapping tags.  The
representer uses the same rules to find strings that would be misread.
"""

import re

from yamlgraph.nodes import ScalarNode, SequenceNode, MappingNode


YAML_TAG_PREFIX = 'tag:yaml.org,2002:'

NULL_TAG = YAML_TAG_PREFIX + 'null'
BOOL_TAG = YAML_TAG_PREFIX + 'bool'
INT_TAG = YAML_TAG_PREFIX + 'int'
FLOAT_TAG = YAML_TAG_PREFIX + 'float'
STR_TAG = YAML_TAG_PREFIX + 'str'
BINARY_TAG = YAML_TAG_PREFIX + 'binary'
TIMESTAMP_TAG = YAML_TAG_PREFIX + 'timestamp'
SEQ_TAG = YAML_TAG_PREFIX + 'seq'
MAP_TAG = YAML_TAG_PREFIX + 'map'
SET_TAG = YAML_TAG_PREFIX + 'set'
TUPLE_TAG = YAML_TAG_PREFIX + 'python/tuple'
FROZENSET_TAG = YAML_TAG_PREFIX + 'python/frozenset'


class BaseResolver:
    """Base YAML tag resolver."""
    yaml_implicit_resolvers = {}

    DEFAULT_SCALAR_TAG = STR_TAG
    DEFAULT_SEQUENCE_TAG = SEQ_TAG
    DEFAULT_MAPPING_TAG = MAP_TAG

    @classmethod
    def add_implicit_resolver(cls, tag, regexp, first):
        """Add an implicit resolver.

        Args:
            tag: Tag assigned to plain scalars matching ``regexp``
            regexp: Compiled pattern the whole scalar must match
            first: Characters a matching scalar may start with, or None
                to try the pattern on every scalar
        """
        if 'yaml_implicit_resolvers' not in cls.__dict__:
            cls.yaml_implicit_resolvers = {
                key: list(value)
                for key, value in cls.yaml_implicit_resolvers.items()}
        if first is None:
            first = [None]
        for ch in first:
            cls.yaml_implicit_resolvers.setdefault(ch, []).append((tag, regexp))

    def resolve(self, kind, value, implicit):
        """Resolve a tag for a node based on its kind and value.

        Args:
            kind: ScalarNode, SequenceNode or MappingNode
            value: Scalar text (ignored for collections)
            implicit: ``(plain, quoted)`` pair; implicit resolvers only run
                for plain scalars
        """
        if kind is ScalarNode and implicit[0]:
            if value == '':
                resolvers = self.yaml_implicit_resolvers.get('', [])
            else:
                resolvers = self.yaml_implicit_resolvers.get(value[0], [])
            resolvers = resolvers + self.yaml_implicit_resolvers.get(None, [])
            for tag, regexp in resolvers:
                if regexp.match(value):
                    return tag
            return self.DEFAULT_SCALAR_TAG
        elif kind is SequenceNode:
            return self.DEFAULT_SEQUENCE_TAG
        elif kind is MappingNode:
            return self.DEFAULT_MAPPING_TAG
        return self.DEFAULT_SCALAR_TAG

    def resolve_node(self, node):
        """Return the node's tag, inferring it when absent."""
        if node.tag is not None:
            return node.tag
        if isinstance(node, ScalarNode):
            return self.resolve(ScalarNode, node.value,
                                (node.plain, not node.plain))
        return self.resolve(type(node), None, (False, False))

    def is_ambiguous(self, text):
        """True when a plain ``text`` would not read back as a string."""
        return self.resolve(ScalarNode, text, (True, False)) != STR_TAG


class Resolver(BaseResolver):
    """Standard YAML 1.1 resolver with implicit resolvers for common types."""
    yaml_implicit_resolvers = {}


Resolver.add_implicit_resolver(
    BOOL_TAG,
    re.compile(r'''^(?:yes|Yes|YES|no|No|NO
                    |true|True|TRUE|false|False|FALSE
                    |on|On|ON|off|Off|OFF)$''', re.X),
    list('yYnNtTfFoO'))

Resolver.add_implicit_resolver(
    FLOAT_TAG,
    re.compile(r'''^(?:[-+]?(?:[0-9][0-9_]*)\.[0-9_]*(?:[eE][-+]?[0-9]+)?
                    |[-+]?(?:[0-9][0-9_]*)(?:[eE][-+]?[0-9]+)
                    |\.[0-9][0-9_]*(?:[eE][-+]?[0-9]+)?
                    |[-+]?\.(?:inf|Inf|INF)
                    |\.(?:nan|NaN|NAN))$''', re.X),
    list('-+0123456789.'))

Resolver.add_implicit_resolver(
    INT_TAG,
    re.compile(r'''^(?:[-+]?0b[0-1_]+
                    |[-+]?0o[0-7_]+
                    |[-+]?0[0-7_]+
                    |[-+]?(?:0|[1-9][0-9_]*)
                    |[-+]?0x[0-9a-fA-F_]+)$''', re.X),
    list('-+0123456789'))

Resolver.add_implicit_resolver(
    NULL_TAG,
    re.compile(r'''^(?:~|null|Null|NULL|)$''', re.X),
    ['~', 'n', 'N', ''])

Resolver.add_implicit_resolver(
    TIMESTAMP_TAG,
    re.compile(r'^(?:[0-9][0-9][0-9][0-9]-[0-9][0-9]-[0-9][0-9]|[0-9][0-9][0-9][0-9]-[0-9][0-9]?-[0-9][0-9]?(?:[Tt]|[ \t]+)[0-9][0-9]?:[0-9][0-9]:[0-9][0-9](?:\.[0-9]*)?(?:[ \t]*(?:Z|[-+][0-9][0-9]?(?::[0-9][0-9])?))?)$'),
    list('0123456789'))
