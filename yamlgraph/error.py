"""Exception hierarchy.

Every failure raised by the engine derives from YAMLGraphError.  Errors that
can point at a position in parsed text derive from MarkedYAMLGraphError and
render the marks the text layer attached to the offending node.
"""


DEFAULT_MAX_DEPTH = 200


class YAMLGraphError(Exception):
    """Base exception for yamlgraph errors."""
    pass


class MarkedYAMLGraphError(YAMLGraphError):
    """Error with optional position marks.

    Attributes:
        context: Description of the enclosing operation
        context_mark: Mark pointing to the context
        problem: Description of the problem
        problem_mark: Mark pointing to the problem
        note: Additional note about the error
    """

    def __init__(self, context=None, context_mark=None,
                 problem=None, problem_mark=None, note=None):
        super().__init__(context, context_mark, problem, problem_mark, note)
        self.context = context
        self.context_mark = context_mark
        self.problem = problem
        self.problem_mark = problem_mark
        self.note = note

    def __str__(self):
        lines = []
        if self.context is not None:
            lines.append(self.context)
        if self.context_mark is not None \
                and (self.problem is None or self.problem_mark is None
                     or self.context_mark.name != self.problem_mark.name
                     or self.context_mark.line != self.problem_mark.line
                     or self.context_mark.column != self.problem_mark.column):
            lines.append(str(self.context_mark))
        if self.problem is not None:
            lines.append(self.problem)
        if self.problem_mark is not None:
            lines.append(str(self.problem_mark))
        if self.note is not None:
            lines.append(self.note)
        return '\n'.join(lines)


class RepresenterError(YAMLGraphError):
    """Encode-time failure."""
    pass


class UnsupportedValue(RepresenterError):
    """A value has no built-in mapping, no registered tag and no encode hook."""

    def __init__(self, value):
        self.value = value
        self.type = type(value)
        if isinstance(value, type):
            what = 'the class %s.%s' % (value.__module__, value.__qualname__)
        else:
            what = 'an object of type %s.%s' % (
                self.type.__module__, self.type.__qualname__)
        super().__init__('cannot represent %s' % what)


class ConstructorError(MarkedYAMLGraphError):
    """Decode-time failure."""
    pass


class UnknownTag(ConstructorError):
    """A node's tag matches no built-in, registered or domain type."""

    def __init__(self, tag, mark=None):
        self.tag = tag
        super().__init__(
            None, None,
            "could not determine a constructor for the tag %r" % tag, mark)


class UnknownAnchor(ConstructorError):
    """An alias refers to an anchor that was never bound."""

    def __init__(self, anchor, mark=None):
        self.anchor = anchor
        super().__init__(None, None, "found undefined alias %r" % anchor, mark)


class MalformedScalar(ConstructorError):
    """An explicitly tagged scalar does not parse per its tag's grammar."""

    def __init__(self, tag, value, mark=None, reason=None):
        self.tag = tag
        self.value = value
        problem = "cannot construct %r from the scalar %r" % (tag, value)
        if reason:
            problem += " (%s)" % reason
        super().__init__(None, None, problem, mark)


class DepthExceeded(YAMLGraphError):
    """The value graph or tree nests deeper than the configured bound."""

    def __init__(self, limit):
        self.limit = limit
        super().__init__('maximum nesting depth of %d exceeded' % limit)


class SerializerError(YAMLGraphError):
    """A tree cannot be turned into a valid event stream."""
    pass


class ComposerError(MarkedYAMLGraphError):
    """An event stream does not describe a well-formed tree."""
    pass


class ParserError(MarkedYAMLGraphError):
    """The text layer rejected its input."""
    pass


class EmitterError(YAMLGraphError):
    """The text layer could not write an event stream."""
    pass
