"""Tag registry: associations between tags and Python types.

The registry answers two questions.  When encoding: which tag names the
type of this value?  When decoding: what does this tag construct?  Decode
lookups try, in order, an exact tag registration, the longest registered
domain prefix, and finally the generic ``!python/object/<module>.<qualname>``
tag that names a class directly.

A single process-wide registry backs the module-level ``register`` and
``register_domain`` functions.  Registrations take a writer lock; lookups
take a reader lock, so registering while other threads encode or decode is
safe.
"""

import collections
import dataclasses
import importlib
import logging
import sys
import threading


logger = logging.getLogger(__name__)

GENERIC_PREFIX = 'python/object'

# Resolution kinds returned by TagRegistry.resolve_for_decode().
TYPE = 'type'
DOMAIN = 'domain'
UNKNOWN = 'unknown'

Resolution = collections.namedtuple(
    'Resolution', ['kind', 'type', 'callback', 'suffix', 'exact'])

_UNKNOWN = Resolution(UNKNOWN, None, None, None, False)


class ReadWriteLock:
    """Many concurrent readers or a single writer."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False

    def acquire_read(self):
        with self._cond:
            while self._writer:
                self._cond.wait()
            self._readers += 1

    def release_read(self):
        with self._cond:
            self._readers -= 1
            if not self._readers:
                self._cond.notify_all()

    def acquire_write(self):
        with self._cond:
            while self._writer or self._readers:
                self._cond.wait()
            self._writer = True

    def release_write(self):
        with self._cond:
            self._writer = False
            self._cond.notify_all()


class _Reading:
    def __init__(self, lock):
        self._lock = lock

    def __enter__(self):
        self._lock.acquire_read()

    def __exit__(self, *exc_info):
        self._lock.release_read()


class _Writing(_Reading):
    def __enter__(self):
        self._lock.acquire_write()

    def __exit__(self, *exc_info):
        self._lock.release_write()


class TagRegistry:
    """Bidirectional tag/type table plus domain-prefix callbacks.

    Args:
        generic_prefix: Prefix of tags derived from qualified class names
        import_modules: Whether resolving a generic tag may import the
            module it names; by default only modules already imported are
            searched
    """

    def __init__(self, generic_prefix=GENERIC_PREFIX, import_modules=False):
        self.generic_prefix = generic_prefix
        self.import_modules = import_modules
        self._load_tags = {}
        self._dump_tags = {}
        self._fields = {}
        self._domains = {}
        self._lock = ReadWriteLock()

    def reading(self):
        return _Reading(self._lock)

    def writing(self):
        return _Writing(self._lock)

    @property
    def generic_tag_prefix(self):
        return '!%s/' % self.generic_prefix

    def register(self, tag, cls, fields=None):
        """Associate ``tag`` with the class ``cls``.

        The last registration wins in each direction: a tag registered twice
        decodes to the newer class, and a class registered twice encodes
        with the newer tag.

        Args:
            tag: Tag string, e.g. ``'!point'``
            cls: Class constructed for nodes carrying ``tag``
            fields: Optional names of the attributes that a mapping
                without a decode hook may assign
        """
        if not isinstance(cls, type):
            raise TypeError('expected a class, got %r' % (cls,))
        with self.writing():
            self._load_tags[tag] = cls
            self._dump_tags[cls] = tag
            if fields is not None:
                self._fields[cls] = tuple(fields)
        logger.debug('registered tag %r for %s.%s',
                     tag, cls.__module__, cls.__qualname__)

    def register_domain(self, prefix, callback):
        """Register ``callback(suffix, value)`` for tags starting with ``prefix``."""
        with self.writing():
            self._domains[prefix] = callback
        logger.debug('registered domain prefix %r', prefix)

    def resolve_for_encode(self, data):
        """Return the tag registered for the exact type of ``data``, or None."""
        with self.reading():
            return self._dump_tags.get(type(data))

    def tag_for(self, cls):
        """Return the registered tag for ``cls``, or its generic tag."""
        with self.reading():
            tag = self._dump_tags.get(cls)
        if tag is None:
            tag = self.generic_tag(cls)
        return tag

    def generic_tag(self, cls):
        return '%s%s.%s' % (self.generic_tag_prefix,
                            cls.__module__, cls.__qualname__)

    def resolve_for_decode(self, tag):
        """Find what constructs nodes tagged ``tag``.

        Returns:
            A Resolution.  For ``TYPE`` the ``type`` field holds the class
            and ``exact`` tells an exact registration from a generic tag;
            for ``DOMAIN`` the ``callback`` and the unmatched ``suffix`` are
            set; ``UNKNOWN`` means nothing matched.
        """
        if tag is None:
            return _UNKNOWN
        with self.reading():
            cls = self._load_tags.get(tag)
            if cls is not None:
                return Resolution(TYPE, cls, None, None, True)
            best = None
            for prefix in self._domains:
                if tag.startswith(prefix) and (best is None or len(prefix) > len(best)):
                    best = prefix
            if best is not None:
                return Resolution(DOMAIN, None, self._domains[best],
                                  tag[len(best):], False)
        if tag.startswith(self.generic_tag_prefix):
            cls = self._find_class(tag[len(self.generic_tag_prefix):])
            if cls is not None:
                return Resolution(TYPE, cls, None, None, False)
        return _UNKNOWN

    def _find_class(self, name):
        """Resolve ``module.Qual.Name`` to a class, or None."""
        parts = name.split('.')
        for split in range(len(parts) - 1, 0, -1):
            module_name = '.'.join(parts[:split])
            module = sys.modules.get(module_name)
            if module is None and self.import_modules:
                try:
                    module = importlib.import_module(module_name)
                except ImportError:
                    continue
            if module is None:
                continue
            obj = module
            for attr in parts[split:]:
                obj = getattr(obj, attr, None)
                if obj is None:
                    break
            if isinstance(obj, type):
                logger.debug('resolved generic tag to %s.%s',
                             module_name, '.'.join(parts[split:]))
                return obj
        return None

    def fields_for(self, cls):
        """Return the declared field names of ``cls``, or None if open.

        Fields given at registration are combined with the dataclass fields
        and ``__slots__`` of the class.  Annotations and class attributes do
        not declare anything; a class declaring nothing is open.
        """
        with self.reading():
            names = list(self._fields.get(cls, ()))
        if dataclasses.is_dataclass(cls):
            names.extend(field.name for field in dataclasses.fields(cls))
        for klass in reversed(cls.__mro__[:-1]):
            slots = klass.__dict__.get('__slots__', ())
            if isinstance(slots, str):
                slots = (slots,)
            names.extend(slot for slot in slots if slot not in ('__dict__', '__weakref__'))
        if not names:
            return None
        return tuple(dict.fromkeys(names))


registry = TagRegistry()


def register(tag, cls, fields=None):
    """Register ``cls`` under ``tag`` in the process-wide registry."""
    registry.register(tag, cls, fields)


def register_domain(prefix, callback):
    """Register a domain-type callback in the process-wide registry.

    Example:
        >>> register_domain('tag:example.com,2010:',
        ...                 lambda suffix, value: Widget(**value))
    """
    registry.register_domain(prefix, callback)


def yaml_tag(tag, fields=None):
    """Class decorator registering the class under ``tag``."""
    def decorator(cls):
        register(tag, cls, fields)
        return cls
    return decorator


class YAMLGraphObjectMetaclass(type):
    """Metaclass that registers classes defining ``yaml_tag``."""

    def __init__(cls, name, bases, kwds):
        super().__init__(name, bases, kwds)
        if kwds.get('yaml_tag') is not None:
            target = cls.yaml_registry or registry
            target.register(cls.yaml_tag, cls, kwds.get('yaml_fields'))


class YAMLGraphObject(metaclass=YAMLGraphObjectMetaclass):
    """Base class for tagged objects.

    Subclasses set ``yaml_tag`` (and optionally ``yaml_fields`` or
    ``yaml_registry``) and are registered when the class is created.
    """
    yaml_tag = None
    yaml_fields = None
    yaml_registry = None
