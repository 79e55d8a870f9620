"""
Helmsman dispatcher: registries, resolution, invocation and completion.

What this module provides
- Dispatcher: one instance per host. It owns three registries
  • parsers: type → ArgumentParser
  • completers: type → Completer
  • commands: lowercased name → CommandEntry (one shared entry per source)
  and runs the two paths over them:
  • call(sender, text) → CommandResult    (validate, bind, invoke)
  • complete(sender, text) → list[str]    (validate defensively, suggest)

Resolution (validate)
1. Strip the configured prefix, split on single spaces, drop trailing empties.
2. Token 0 selects the entry (case-insensitive); unknown → CommandNotFoundError.
3. Token 1 naming a sub-action consumes it and picks an overload by arity:
   the smallest arity still >= the remaining tokens, else the largest one;
   ties keep the first declared, a lone overload is always chosen.
4. Otherwise the main action(s) apply, chosen by the same rule, or nothing.
5. Permission-required actions ask sender.can_use(command, sub-name or None).

Binding (call)
- Parameter i takes token i; a trailing collection takes every token from i on,
  even none. A missing scalar token is parsed as None (the parser decides).
- Every Argument produced is reported in the result, in binding order.
- None returned by the action means success; anything raised is wrapped into
  CommandInvocationError.

Completion (complete) never raises: resolution failures fall back to matching
command names, and per-parameter suggestions come from the completer bound to
the parameter's type.

Concurrency
- No locking. Registration is expected to happen at startup/plugin-load time,
  serialized by the host against dispatching.
"""
import warnings
from types import MappingProxyType

from .arguments import *
from .commands import CommandContext, CommandEntry, CommandResult, _process_source
from .faults import *
from .internals import RecordType
from .utils import *


def _split(text):
    """
    Split on single spaces and drop trailing empty tokens (inner ones are kept).
    """
    tokens = text.split(" ")
    while tokens and not tokens[-1]:
        tokens.pop()
    return tokens


def _select(actions, count):
    """
    Pick the overload for count remaining tokens.

    - a single overload is chosen unconditionally;
    - else the smallest arity >= count;
    - else the largest arity available;
    ties keep the first declared one.
    """
    if len(actions) == 1:
        return actions[0]

    selected = None
    for action in actions:
        if action.arity >= count and (selected is None or action.arity < selected.arity):
            selected = action
    if selected is not None:
        return selected

    for action in actions:
        if selected is None or action.arity > selected.arity:
            selected = action
    return selected


class Dispatcher(metaclass=RecordType):
    """
    Command registry and router for line-oriented text commands.

    Options
    - prefix: characters accepted (and stripped) in front of a command line,
      e.g. "/" or "/!". Empty means no prefix handling.
    - defaults: bind the built-in parsers (str, int, float, bool) and the bool
      completer on construction.
    - shell: dispatch() prints faults instead of raising them and warnings are
      printed instead of emitted through the warnings module.
    - fancy / colorful: rendering options for printed faults.

    Usage
        dispatcher = Dispatcher("/")
        dispatcher.register(Teleport(), "tp", "teleport")

        result = dispatcher.call(sender, "/tp here")
        suggestions = dispatcher.complete(sender, "/tp h")
    """

    __introspectable__ = (
        "prefix",
        "shell",
        "fancy",
        "colorful",
    )
    __displayable__ = (
        "prefix",
        "commands",
        "parsers",
        "completers",
    )

    def __new__(cls, prefix="", /, *, defaults=True, shell=False, fancy=False, colorful=True):
        if not isinstance(prefix, str) or any(char.isspace() for char in prefix):
            raise TypeError(f"{cls.__typename__} 'prefix' must be a string without whitespace")
        self = cls.__populate__(prefix=prefix, shell=bool(shell), fancy=bool(fancy), colorful=bool(colorful))
        self._commands = {}
        self._parsers = {}
        self._completers = {}

        if defaults:
            self.bind_parser(str, StringParser())
            self.bind_parser(int, IntegerParser())
            self.bind_parser(float, FloatParser())
            self.bind_parser(bool, BooleanParser())
            self.bind_completer(bool, BooleanCompleter())

        return self

    @property
    def commands(self):
        return MappingProxyType(self._commands)

    @property
    def parsers(self):
        return MappingProxyType(self._parsers)

    @property
    def completers(self):
        return MappingProxyType(self._completers)

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this dispatcher's rendering options merged in.
        """
        trigger(fault, **{"shell": self.shell, "fancy": self.fancy, "colorful": self.colorful} | options)

    def bind_parser(self, type, parser, /):
        """
        Bind the parser used for parameters annotated with type.

        Rebinding an already bound type replaces it and emits ParserReboundWarning.
        """
        if not isinstance(parser, ArgumentParser):
            raise TypeError("bind_parser() second argument must be an argument parser")
        if type in self._parsers and self._parsers[type] is not parser:
            self.trigger(ParserReboundWarning(
                f"parser for {type!r} replaced by {parser!r}",
                type=type,
                stacklevel=5,
            ))
        self._parsers[type] = parser
        return parser

    def bind_completer(self, type, completer, /):
        """
        Bind the completer used for parameters annotated with type.

        Rebinding an already bound type replaces it and emits CompleterReboundWarning.
        """
        if not isinstance(completer, Completer):
            raise TypeError("bind_completer() second argument must be a completer")
        if type in self._completers and self._completers[type] is not completer:
            self.trigger(CompleterReboundWarning(
                f"completer for {type!r} replaced by {completer!r}",
                type=type,
                stacklevel=5,
            ))
        self._completers[type] = completer
        return completer

    def register(self, source, /, *names):
        """
        Scan source for @action callables and bind them under every name.

        Errors (raised before anything is bound)
        - InvalidNameError: no names, a non-string/empty name, or whitespace in it.
        - DuplicateNameError: a name already registered, or repeated in names
          (case-insensitive).
        - InvalidReturnError, MissingSenderError, MisplacedCollectionError,
          MissingParserError, EmptySourceError: see helmsman.commands.

        Returns
        - The CommandEntry shared by all names.
        """
        if not names:
            raise InvalidNameError("please provide valid command name", source=source)

        seen = set()
        for name in names:
            if not isinstance(name, str) or not name:
                raise InvalidNameError("please provide valid command name", source=source, input=name)
            if any(char.isspace() for char in name):
                raise InvalidNameError(f"command name {name!r} cannot contain whitespace", source=source, input=name)
            if (lowered := name.lower()) in self._commands or lowered in seen:
                raise DuplicateNameError(f"command with name {name!r} already exists", source=source, input=name)
            seen.add(lowered)

        mains, actions = _process_source(source, self._parsers)
        entry = CommandEntry(names[0].lower(), source, mains, actions)

        self._commands.update(dict.fromkeys((name.lower() for name in names), entry))
        return entry

    def unregister(self, source, /):
        """
        Remove every name bound to an entry owned by source.

        When source is a class, entries whose source is an instance of it are
        removed too. Returns the removed names.
        """
        def owned(entry):
            if entry.source is source:
                return True
            return isinstance(source, type) and isinstance(entry.source, source)

        removed = tuple(name for name, entry in self._commands.items() if owned(entry))
        for name in removed:
            del self._commands[name]
        return removed

    def _strip(self, text):
        """
        Split off an accepted prefix character; returns (prefix, rest).
        """
        if self.prefix and text and text[0] in self.prefix:
            return text[0], text[1:]
        return "", text

    def validate(self, sender, text, /):
        """
        Resolve text into a CommandContext without binding any argument.

        Raises
        - CommandNotFoundError: empty text or unknown command name.
        - CommandAccessError: the resolved action needs a permission the sender lacks.
        """
        if text is None:
            raise CommandNotFoundError("please provide a command line", input=text)
        if not isinstance(text, str):
            raise TypeError("validate() second argument must be a string")

        _, body = self._strip(text)
        tokens = _split(body)
        if not tokens:
            raise CommandNotFoundError("please provide a command line", input=text)

        entry = self._commands.get(tokens[0].lower())
        if entry is None:
            raise CommandNotFoundError(f"command {tokens[0]!r} does not exist", input=text)

        action = None
        action_name = None

        if len(tokens) > 1 and (overloads := entry.overloads(tokens[1].lower())):
            args = tokens[2:]
            action = _select(overloads, len(args))
            action_name = None if action.main else action.name
        else:
            args = tokens[1:]
            if entry.mains:
                action = _select(entry.mains, len(args))

        if action is not None and action.permission and not sender.can_use(entry.name, action_name):
            raise CommandAccessError(
                f"you are not allowed to use {" ".join(filter(None, (entry.name, action_name)))!r}",
                input=text,
                command=entry.name,
                action=action_name,
            )

        return CommandContext(entry.name, action_name, action, args, entry, sender)

    def _parser(self, type):
        try:
            return self._parsers[type]
        except KeyError:
            raise LookupError(f"no parser bound for {type!r}") from None

    def _parse(self, parser, token):
        argument = parser.parse(token)
        if argument is None:
            argument = Argument.fail()
        if token is not None and argument.text is None:
            argument = replace(argument, text=token)
        return argument

    def call(self, sender, text, /):
        """
        Resolve, bind and run the action named by text.

        Raises
        - CommandNotFoundError: see validate(), or no action resolved.
        - CommandAccessError: see validate().
        - CommandInvocationError: the action raised; its exception is chained.
        """
        context = self.validate(sender, text)
        action = context.action

        if action is None:
            raise CommandNotFoundError(
                f"command {context.command!r} needs a sub-action",
                code=FaultCode.ACTION_NOT_FOUND,
                input=text,
                command=context.command,
            )

        args = context.args
        arguments = []
        values = []

        for index, parameter in enumerate(action.parameters):
            parser = self._parser(parameter.type)

            if parameter.collection:
                collection = []
                for token in args[index:]:
                    argument = self._parse(parser, token)
                    arguments.append(argument)
                    collection.append(argument if parameter.wrapped else argument.value)
                if parameter.container == "*":
                    values.extend(collection)
                else:
                    values.append(parameter.container(collection))
            else:
                argument = self._parse(parser, args[index] if index < len(args) else None)
                arguments.append(argument)
                values.append(argument if parameter.wrapped else argument.value)

        try:
            result = action.callback(sender, *values)
        except Exception as exception:
            raise CommandInvocationError(
                f"action {action.name!r} of {context.command!r} failed: {exception}",
                input=text,
                command=context.command,
                action=context.action_name,
            ) from exception

        return CommandResult(context, arguments, result is None or bool(result))

    def dispatch(self, sender, text, /):
        """
        Host convenience around call().

        In shell mode faults are printed through the rich console and None is
        returned; otherwise they propagate exactly as from call().
        """
        try:
            return self.call(sender, text)
        except CommandException as exception:
            if not self.shell:
                raise
            self.trigger(exception)
        return None

    def _names(self, text):
        """
        Fallback suggestions: command names matching the typed partial name.
        """
        prefix, body = self._strip(text or "")
        partial = body.lower()
        return [prefix + name for name in self._commands if name.startswith(partial)]

    def _advise(self, message, /, **options):
        """
        Report a failure met while completing; never raised, whatever the warnings filters.
        """
        with warnings.catch_warnings():
            warnings.simplefilter("always", CompletionFailureWarning)
            self.trigger(CompletionFailureWarning(message, **options))

    def _suggest(self, completer, context, partial):
        try:
            return list(completer.complete(context, partial))
        except Exception as exception:
            self._advise(f"completer {completer!r} failed: {exception}", command=context.command, stacklevel=7)
            return []

    def complete(self, sender, text, /):
        """
        Suggest candidates for the token being typed at the end of text.

        - Unresolvable text → command names matching it (all when empty).
        - Still on the command name → nothing.
        - On the token after the name → matching sub-names when the entry has a
          main action or no sub-action was consumed; when none match, fall
          through to parameter completion.
        - Nothing resolved and no main action → every sub-name.
        - Otherwise → the completer bound to the current parameter's type
          (a trailing collection keeps completing its element type).
        - A raising permission check or completer → CompletionFailureWarning and
          the fallback above, or nothing.
        """
        if not isinstance(text, str):
            text = ""

        try:
            context = self.validate(sender, text)
        except CommandException:
            return self._names(text)
        except Exception as exception:
            self._advise(f"resolving {text!r} failed: {exception}", input=text, stacklevel=6)
            return self._names(text)

        entry = context.entry
        action = context.action
        trailing = text.endswith(" ")
        following = _split(self._strip(text)[1])[1:]

        if not following and not trailing:
            return []

        # cursor on the token right after the command name
        if (len(following) == 1 and not trailing or not following and trailing) and (
            context.action_name is None or entry.mains
        ):
            partial = following[0].lower() if following else ""
            if matches := [name for name in entry.actions if name.startswith(partial)]:
                return matches

        if action is None:
            return list(entry.actions)

        args = context.args
        if args and not trailing:
            index, partial = len(args) - 1, args[-1]
        else:
            index, partial = len(args), ""

        parameters = action.parameters
        if not parameters:
            return []
        if index >= len(parameters):
            if not parameters[-1].collection:
                return []
            index = len(parameters) - 1

        completer = self._completers.get(parameters[index].type)
        if completer is None:
            return []
        return self._suggest(completer, context, partial)


__all__ = (
    "Dispatcher",
)
