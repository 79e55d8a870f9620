"""
Helmsman command layer: declare actions and model what the dispatcher resolves.

What this module provides
- action(...): mark a function or method as a command action. The callable is
  left untouched; an ActionTag is attached to it as __action__.
- Records (read-only, introspectable, rich-aware):
  • Parameter: one text-bound parameter of an action, shape resolved once.
  • CommandAction: one invokable action (sub-name, callback, parameters, flags).
  • CommandEntry: the registered unit, main actions plus sub-name overloads.
  • CommandContext: the outcome of resolving a line of text.
  • CommandResult: the context, the bound arguments and the success flag.

Declaring actions
    class Teleport:
        @action(main=True)
        def teleport(self, sender: Player, target: Player) -> bool: ...

        @action("here")
        def here(self, sender: Player) -> None: ...

        @action("here", permission=True)
        def here_other(self, sender: Player, target: Player) -> None: ...

- The first parameter receives the sender and must be annotated with a Sender.
- Every other positional parameter is bound from one text token through the
  parser bound to its annotation. Argument[T] receives the Argument itself
  instead of its value; T | None is read as T.
- A trailing list[T], tuple[T, ...], Iterable/Collection/Sequence[T] or *args: T
  consumes every remaining token.
- Actions sharing a sub-name are overloads told apart by their arity.

Scanning (see _process_source)
- Modules are scanned in namespace order, classes and instances along their
  MRO from the base down, so overload ties resolve to the first declared one.
- All shape checks raise InvalidRegistrationError kinds; nothing is bound
  until the whole source passed.
"""
import inspect
import types
from collections.abc import Iterable, Collection, Sequence, MutableSequence
from inspect import Parameter as Signature
from typing import Union, get_args, get_origin

from .arguments import Argument
from .faults import *
from .internals import RecordType
from .senders import Sender
from .utils import *

_containers = {
    list: list,
    tuple: tuple,
    Iterable: list,
    Collection: list,
    Sequence: list,
    MutableSequence: list,
}


class ActionTag(metaclass=RecordType):
    """
    Declaration-time metadata attached by @action.
    """

    __introspectable__ = (
        "name",
        "main",
        "permission",
    )

    def __new__(cls, name=Unset, /, main=False, permission=False):
        if not isinstance(name, str | Unset):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif isinstance(name, str) and not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
        return cls.__populate__(name=coalesce(name), main=bool(main), permission=bool(permission))


class Parameter(metaclass=RecordType):
    """
    Shape of one text-bound parameter.

    Properties
    - name: parameter name in the callback signature.
    - type: effective type used for parser/completer lookup (element type for
      collections, inner type for Argument[T]).
    - wrapped: hand the Argument itself instead of its value.
    - collection: consumes every remaining token.
    - container: list, tuple or "*" (star-args tail) for collections, else None.
    """

    __introspectable__ = (
        "name",
        "type",
        "wrapped",
        "collection",
        "container",
    )

    def __new__(cls, name, type, /, wrapped=False, collection=False, container=None):
        return cls.__populate__(
            name=name,
            type=type,
            wrapped=bool(wrapped),
            collection=bool(collection),
            container=container,
        )


class CommandAction(metaclass=RecordType):
    """
    One invokable action.

    arity is the declared parameter count excluding the sender; a trailing
    collection counts as one parameter.
    """

    __introspectable__ = (
        "name",
        "callback",
        "parameters",
        "main",
        "permission",
    )
    __displayable__ = (
        "name",
        "arity",
        "collection",
        "main",
        "permission",
    )

    def __new__(cls, name, callback, parameters=(), /, main=False, permission=False):
        if not callable(callback):
            raise TypeError(f"{cls.__typename__} 'callback' must be callable")
        return cls.__populate__(
            name=name,
            callback=callback,
            parameters=tuple(parameters),
            main=bool(main),
            permission=bool(permission),
        )

    @property
    def callback(self):
        return self._callback

    @property
    def arity(self):
        return len(self._parameters)

    @property
    def collection(self):
        return bool(self._parameters) and self._parameters[-1].collection


class CommandEntry(metaclass=RecordType):
    """
    The registered unit behind one or more command names.

    - name: canonical (lowercased, first registered) name.
    - source: the object the actions were scanned from (opaque).
    - mains: actions run when no sub-name is given.
    - actions: sub-name → overloads in declaration order (mains included under
      their own sub-name).
    """

    __introspectable__ = (
        "name",
        "source",
        "mains",
        "actions",
    )
    __displayable__ = (
        "name",
        "mains",
        "actions",
    )

    def __new__(cls, name, source, mains=(), actions=None, /):
        return cls.__populate__(
            name=name,
            source=source,
            mains=tuple(mains),
            actions={key: tuple(value) for key, value in (actions or {}).items()},
        )

    @property
    def source(self):
        return self._source

    def overloads(self, name, /):
        return self._actions.get(name, ())


class CommandContext(metaclass=RecordType):
    """
    Resolved outcome of one line of text.

    - command: canonical command name.
    - action_name: sub-name used, None when a main action ran or nothing resolved.
    - action: the chosen CommandAction, or None.
    - args: raw tokens left after the command (and sub-name).
    - entry: the CommandEntry that matched.
    - sender: who typed the line.
    """

    __introspectable__ = (
        "command",
        "action_name",
        "action",
        "args",
        "entry",
        "sender",
    )
    __displayable__ = (
        "command",
        "action_name",
        "action",
        "args",
    )

    def __new__(cls, command, action_name, action, args, entry, sender=None, /):
        return cls.__populate__(
            command=command,
            action_name=action_name,
            action=action,
            args=tuple(args),
            entry=entry,
            sender=sender,
        )

    @property
    def sender(self):
        return self._sender


class CommandResult(metaclass=RecordType):
    """
    Outcome of Dispatcher.call(): truthy when the action reported success.
    """

    __introspectable__ = (
        "context",
        "arguments",
        "success",
    )

    def __new__(cls, context, arguments=(), success=True, /):
        return cls.__populate__(context=context, arguments=tuple(arguments), success=bool(success))

    def __bool__(self):
        return self._success


def _optional(annotation):
    """
    Read T | None (and Optional[T]) as T; anything else is returned unchanged.
    """
    if get_origin(annotation) in (Union, types.UnionType):
        members = [member for member in get_args(annotation) if member is not types.NoneType]
        if len(members) == 1 and len(get_args(annotation)) == 2:
            return members[0]
    return annotation


def _label(callback):
    return getattr(callback, "__qualname__", None) or repr(callback)


def _resolve_parameter(parameter, last, label, parsers):
    """
    Resolve one parameter into a Parameter record, enforcing placement and parser rules.
    """
    name = parameter.name
    annotation = _optional(parameter.annotation)
    origin = get_origin(annotation) or annotation
    collection = False
    container = None

    if parameter.kind is Signature.VAR_POSITIONAL:
        collection, container, element = True, "*", annotation
    elif _hashable(origin) and origin in _containers:
        if not last:
            raise MisplacedCollectionError(
                f"action {label!r} collection parameter {name!r} must be the last parameter",
                action=label,
                parameter=name,
            )
        collection, container = True, _containers[origin]
        match get_args(annotation):
            case (element,):
                pass
            case (element, builtin) if builtin is Ellipsis:
                pass
            case _:
                element = Signature.empty
    else:
        element = annotation

    element = _optional(element)
    wrapped = element is Argument or get_origin(element) is Argument
    if wrapped:
        element = next(iter(get_args(element)), Signature.empty)

    if element is Signature.empty or not _hashable(element) or element not in parsers:
        shown = "no annotation" if parameter.annotation is Signature.empty else repr(parameter.annotation)
        raise MissingParserError(
            f"action {label!r} parameter {name!r} has no type parser for {shown}",
            action=label,
            parameter=name,
        )

    return Parameter(name, element, wrapped, collection, container)


def _hashable(object):
    try:
        hash(object)
    except TypeError:
        return False
    return True


def _process_action(name, callback, tag, parsers):
    """
    Validate one tagged callable and build its CommandAction.

    Checks (in order)
    - return annotation: missing, None, bool or bool | None.
    - first parameter: positional and annotated with a Sender type.
    - remaining positional parameters (and a *args tail): collection placement
      and parser availability, see _resolve_parameter.
    Keyword-only parameters and **kwargs are left to their defaults.
    """
    label = _label(callback)
    try:
        signature = inspect.signature(callback, eval_str=True)
    except (TypeError, ValueError, NameError) as exception:
        raise InvalidRegistrationError(f"action {label!r} signature cannot be inspected", action=label) from exception

    returns = _optional(signature.return_annotation)
    if returns not in (Signature.empty, None, types.NoneType, bool):
        raise InvalidReturnError(f"action {label!r} must return None or bool", action=label)

    positionals = [
        parameter for parameter in signature.parameters.values()
        if parameter.kind in (Signature.POSITIONAL_ONLY, Signature.POSITIONAL_OR_KEYWORD, Signature.VAR_POSITIONAL)
    ]

    match positionals:
        case [sender, *rest] if (
            sender.kind is not Signature.VAR_POSITIONAL and
            isinstance(sender.annotation, type) and
            issubclass(sender.annotation, Sender)
        ):
            pass
        case _:
            raise MissingSenderError(f"action {label!r} must declare a sender as first parameter", action=label)

    parameters = [
        _resolve_parameter(parameter, index == len(rest) - 1, label, parsers)
        for index, parameter in enumerate(rest)
    ]

    subname = coalesce(tag.name, name).lower()
    if any(char.isspace() for char in subname):
        raise InvalidNameError(f"action {label!r} name {subname!r} cannot contain whitespace", action=label)

    return CommandAction(subname, callback, parameters, tag.main, tag.permission)


def _namespaces(source):
    """
    Yield the namespaces to scan for a source, base-first.
    """
    if isinstance(source, types.ModuleType):
        yield vars(source)
        return
    cls = source if isinstance(source, type) else type(source)
    for base in reversed(cls.__mro__):
        yield vars(base)
    if not isinstance(source, type) and hasattr(source, "__dict__"):
        yield vars(source)


def _process_source(source, parsers):
    """
    Scan a source for tagged actions and return (mains, actions).

    Errors
    - Any InvalidRegistrationError raised by _process_action.
    - EmptySourceError when no tagged action is found.
    """
    members = {}
    for namespace in _namespaces(source):
        members.update(namespace)

    mains = []
    actions = {}

    for name, member in members.items():
        function = member.__func__ if isinstance(member, (staticmethod, classmethod)) else member
        if not isinstance(tag := getattr(function, "__action__", None), ActionTag):
            continue
        built = _process_action(name, getattr(source, name), tag, parsers)
        if built.main:
            mains.append(built)
        actions.setdefault(built.name, []).append(built)

    if not actions:
        raise EmptySourceError(f"source {source!r} has no action marked with @action", source=source)

    return mains, actions


def action(source=Unset, /, name=Unset, *, main=False, permission=False):
    """
    Mark a callable as a command action, or return a decorator doing so.

    Invocation modes
    - @action                      sub-name is the function name
    - @action("here")              explicit sub-name (overloads share it)
    - @action(main=True)           default action when no sub-name is typed
    - @action(permission=True)     ask Sender.can_use() before running

    Returns
    - The callable itself (unchanged apart from __action__), or a decorator.
    """
    if isinstance(source, str):
        source, name = Unset, source

    tag = ActionTag(name, main=main, permission=permission)

    @rename("action")
    def wrapper(source, /):
        function = source.__func__ if isinstance(source, (staticmethod, classmethod)) else source
        if not callable(function):
            raise TypeError("@action() must be applied to a callable")
        function.__action__ = tag
        return source

    return wrapper(source) if source is not Unset else wrapper


__all__ = (
    "ActionTag",
    "Parameter",
    "CommandAction",
    "CommandEntry",
    "CommandContext",
    "CommandResult",
    "action",
)
