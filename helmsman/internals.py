"""
Internal record plumbing (implementation detail).

Every value object of the package (arguments, actions, entries, contexts,
results) is built on the RecordType metaclass defined here. It gives them a
uniform, introspectable and read-only shape:

- __typename__ is the kebab-case form of the class name (CommandAction →
  command-action), used in reprs and fault messages.
- Every name listed in __introspectable__ becomes a read-only property that
  mirrors the private "_<name>" field (containers are frozen on access).
- __repr__/__rich_repr__ are stable and list the __displayable__ names, or the
  __introspectable__ ones when __displayable__ is not set.
- __replace__ rebuilds the record with overrides; fields are assigned through
  __populate__ so construction-time validation is not re-run.
"""
import functools
import operator
import re

from .utils import *


class RecordType(type):
    """
    Metaclass that turns plain classes into read-only, introspectable records.

    Conventions
    - __introspectable__: tuple of public field names, each backed by "_<name>".
    - __displayable__ (optional): narrows the fields shown by __rich_repr__.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ()) if name not in namespace
            },
            **options,
        )

        @rename("__repr__")
        def __repr__(self):
            """
            typename(field=value, ...) over the displayed fields.

            Example
            - command-action(name='here', arity=0, main=False, ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers such as rich.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        @rename("__replace__")
        def __replace__(self, **changes):
            """
            Return a new record of the same type with some fields replaced.
            """
            fields = type(self).__introspectable__
            if unknown := set(changes) - set(fields):
                raise TypeError(f"{type(self).__typename__} got unexpected field(s) {", ".join(sorted(unknown))}")
            return type(self).__populate__(**{
                name: getattr(self, "_" + name) for name in fields
            } | changes)
        self.__replace__ = __replace__

        return self

    def __populate__(cls, **fields):
        """
        Build an instance without calling __new__/__init__ validation.

        Only used internally to materialize already-validated records.
        """
        self = object.__new__(cls)
        for name in cls.__introspectable__:
            setattr(self, "_" + name, fields.get(name))
        return self


__all__ = (
    "RecordType",
)
