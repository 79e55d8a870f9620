r"""
Helmsman argument values, parsers and completers.

Overview
- Values
  • Result: SUCCESS / FAIL outcome of one parse.
  • Argument[_T]: one resolved parameter, the typed value (None on failure)
    paired with the raw text that produced it.

- Parsers (text → Argument)
  • ArgumentParser[_T]: abstract protocol; parse(value) receives the raw token,
    or None when the sender supplied fewer tokens than the action declares.
    What an absent token means (default, failure) is up to the parser.
  • @parser: turn a plain function into an ArgumentParser.
  • Built-ins: StringParser, IntegerParser, FloatParser, BooleanParser, EnumParser.

- Completers (partial text → suggestions)
  • Completer: abstract protocol; complete(context, partial) returns an ordered
    list of candidate strings for the token being typed.
  • @completer: turn a plain function into a Completer.
  • Built-ins: ChoiceCompleter, EnumCompleter, BooleanCompleter.

Parsers may leave Argument.text unset; the dispatcher then records the token it
handed to the parser. A parser returning None is treated as a failed parse.

Example
    >>> @parser
    ... def region(value):
    ...     return Region(value) if value else None
    ...
    >>> dispatcher.bind_parser(Region, region)
"""
from abc import ABC, abstractmethod
from enum import Enum

from .internals import RecordType
from .utils import *


class Result(Enum):
    """
    outcome of a single parse.
    """
    SUCCESS = "success"
    FAIL = "fail"

    def __bool__(self):
        return self is Result.SUCCESS


class Argument[_T](metaclass=RecordType):
    """
    One resolved parameter of an invocation.

    Properties
    - result: Result of the parse.
    - value: the typed value, None when the parse failed (unless the parser
      supplied a default).
    - text: the literal token that produced the value, None until known.
    """

    __introspectable__ = (
        "result",
        "value",
        "text",
    )

    def __new__(cls, result, /, value=None, text=None):
        if not isinstance(result, Result):
            raise TypeError(f"{cls.__typename__} 'result' must be a result")
        if text is not None and not isinstance(text, str):
            raise TypeError(f"{cls.__typename__} 'text' must be a string")
        return cls.__populate__(result=result, value=value, text=text)

    @classmethod
    def success(cls, value, /, text=None):
        return cls(Result.SUCCESS, value, text)

    @classmethod
    def fail(cls, value=None, /, text=None):
        return cls(Result.FAIL, value, text)

    @property
    def value(self):
        return self._value

    @property
    def ok(self):
        return self.result is Result.SUCCESS

    def __eq__(self, other):
        if not isinstance(other, Argument):
            return NotImplemented
        return (self.result, self.value, self.text) == (other.result, other.value, other.text)

    __hash__ = None


class ArgumentParser[_T](ABC):
    """
    Protocol of a text → value converter bound to one type.

    Contract
    - parse(value) receives the raw token, or None when absent.
    - It returns an Argument; returning None is read as a failure.
    - It must not raise for malformed input: report FAIL instead.
    """

    @abstractmethod
    def parse(self, value, /):
        ...

    def __repr__(self):
        return f"{type(self).__name__}()"


class _FunctionParser(ArgumentParser):
    def __init__(self, function):
        self._function = function

    def parse(self, value, /):
        result = self._function(value)
        if result is None or isinstance(result, Argument):
            return result
        return Argument.success(result)

    def __repr__(self):
        return f"parser({self._function.__qualname__})"


def parser(function, /):
    """
    Wrap a plain function into an ArgumentParser.

    The function receives the raw token (or None) and returns either an
    Argument, a plain value (read as a success) or None (read as a failure).
    """
    if not callable(function):
        raise TypeError("@parser must be applied to a callable")
    return _FunctionParser(function)


class StringParser(ArgumentParser[str]):
    """
    Identity parser; an absent token fails with the configured default.
    """

    def __init__(self, default=None):
        self.default = default

    def parse(self, value, /):
        if value is None:
            return Argument.fail(self.default)
        return Argument.success(value, value)


class IntegerParser(ArgumentParser[int]):
    def __init__(self, default=None):
        self.default = default

    def parse(self, value, /):
        if value is None:
            return Argument.fail(self.default)
        try:
            return Argument.success(int(value, 10), value)
        except ValueError:
            return Argument.fail(self.default, value)


class FloatParser(ArgumentParser[float]):
    def __init__(self, default=None):
        self.default = default

    def parse(self, value, /):
        if value is None:
            return Argument.fail(self.default)
        try:
            return Argument.success(float(value), value)
        except ValueError:
            return Argument.fail(self.default, value)


class BooleanParser(ArgumentParser[bool]):
    """
    Accepts true/yes/on/1 and false/no/off/0, case-insensitively.
    """
    truthy = frozenset(("true", "yes", "on", "1"))
    falsy = frozenset(("false", "no", "off", "0"))

    def __init__(self, default=None):
        self.default = default

    def parse(self, value, /):
        if value is None:
            return Argument.fail(self.default)
        if (lowered := value.lower()) in self.truthy:
            return Argument.success(True, value)
        if lowered in self.falsy:
            return Argument.success(False, value)
        return Argument.fail(self.default, value)


class EnumParser(ArgumentParser):
    """
    Resolves an enumeration member by name, case-insensitively.
    """

    def __init__(self, enum, /, default=None):
        if not isinstance(enum, type) or not issubclass(enum, Enum):
            raise TypeError("EnumParser() argument must be an enumeration")
        self.enum = enum
        self.default = default

    def parse(self, value, /):
        if value is None:
            return Argument.fail(self.default)
        for name, member in self.enum.__members__.items():
            if name.lower() == value.lower():
                return Argument.success(member, value)
        return Argument.fail(self.default, value)

    def __repr__(self):
        return f"{type(self).__name__}({self.enum.__name__})"


class Completer(ABC):
    """
    Protocol of a per-type suggestion provider.

    Contract
    - complete(context, partial) returns an ordered list of candidate strings
      for the token currently typed; partial may be empty.
    - context is the CommandContext resolved so far (sender included).
    """

    @abstractmethod
    def complete(self, context, partial, /):
        ...

    def __repr__(self):
        return f"{type(self).__name__}()"


class _FunctionCompleter(Completer):
    def __init__(self, function):
        self._function = function

    def complete(self, context, partial, /):
        return list(self._function(context, partial))

    def __repr__(self):
        return f"completer({self._function.__qualname__})"


def completer(function, /):
    """
    Wrap a plain function (context, partial) -> Iterable[str] into a Completer.
    """
    if not callable(function):
        raise TypeError("@completer must be applied to a callable")
    return _FunctionCompleter(function)


class ChoiceCompleter(Completer):
    """
    Suggests the fixed choices that start with the partial token (case-insensitive).
    """

    def __init__(self, choices, /):
        if isinstance(choices, str):
            raise TypeError("ChoiceCompleter() argument must be an iterable of strings")
        self.choices = tuple(choices)
        if not all(isinstance(choice, str) for choice in self.choices):
            raise TypeError("ChoiceCompleter() argument must be an iterable of strings")

    def complete(self, context, partial, /):
        return [choice for choice in self.choices if choice.lower().startswith(partial.lower())]

    def __repr__(self):
        return f"{type(self).__name__}({self.choices!r})"


class EnumCompleter(ChoiceCompleter):
    """
    Suggests the lowercased member names of an enumeration.
    """

    def __init__(self, enum, /):
        if not isinstance(enum, type) or not issubclass(enum, Enum):
            raise TypeError("EnumCompleter() argument must be an enumeration")
        super().__init__(name.lower() for name in enum.__members__)


class BooleanCompleter(ChoiceCompleter):
    def __init__(self):
        super().__init__(("false", "true"))


__all__ = (
    "Result",
    "Argument",
    "ArgumentParser",
    "parser",
    "StringParser",
    "IntegerParser",
    "FloatParser",
    "BooleanParser",
    "EnumParser",
    "Completer",
    "completer",
    "ChoiceCompleter",
    "EnumCompleter",
    "BooleanCompleter",
)
