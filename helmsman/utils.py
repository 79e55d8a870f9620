"""
Small helpers shared by the record, argument and dispatcher layers.

- Unset: "not given" marker for keyword defaults where None already means
  something (an action tag without an explicit sub-name, for instance).
- coalesce(): swap Unset for a fallback, leave everything else alone.
- rename(): give generated callables a readable name in tracebacks.
- mirror(): read-only record field backed by "_<name>"; containers come out
  frozen so a context or entry cannot be edited through its public view.
- replace(): copy a record with some fields changed (via __replace__).

    >>> coalesce(Unset, "here")
    'here'
    >>> coalesce(None, "here") is None
    True
"""
import builtins
import functools
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker; there is exactly one instance.

    Unset is falsy, prints as "Unset" and can take part in PEP 604 unions so
    that isinstance(name, str | Unset) reads naturally in argument checks.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __or__(self, other, /):
        try:
            return UnsetType | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | UnsetType
        except TypeError:
            return NotImplemented

    def __init_subclass__(cls, **options):
        raise TypeError("UnsetType cannot be subclassed")


def coalesce(object, default=None, /):
    """
    Return default when object is Unset, object otherwise (None included).
    """
    if object is Unset:
        return default
    return object


def rename(*parameters):
    """
    rename(callable, name) sets __name__ and __qualname__ and returns the callable;
    rename(name) returns a decorator doing the same.
    """
    match parameters:
        case (target, str() as name):
            if not builtins.callable(target):
                raise TypeError("rename() first argument must be callable")
            try:
                target.__name__ = target.__qualname__ = name
            except (AttributeError, TypeError):
                raise TypeError(f"cannot rename {target!r}") from None
            return target
        case (str() as name,):
            return rename(lambda target: rename(target, name), "rename")
        case (_, _) | (_,):
            raise TypeError("rename() name must be a string")
        case _:
            raise TypeError(f"rename() takes 1 or 2 arguments ({len(parameters)} given)")


def _freeze(object):
    if isinstance(object, (str, bytes, bytearray)):
        return object
    if isinstance(object, Sequence):
        return tuple(object)
    if isinstance(object, Mapping):
        return MappingProxyType(dict(object))
    if isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Build a read-only property returning a frozen view of self._<name>.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")
    field = "_" + name

    def getter(self):
        return _freeze(getattr(self, field))

    return property(rename(getter, name))


def replace(object, /, **changes):
    """
    Copy a record with the given fields changed; object must define __replace__.
    """
    method = getattr(object, "__replace__", None)
    if not callable(method):
        raise TypeError(f"replace() argument must define __replace__, not {type(object).__name__!r}")
    return method(**changes)


Unset = UnsetType()


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "replace",
    "UnsetType",
    "Unset",
)
