"""
Arguments module behavioral tests (values, parsers, completers).

Scope
- Validate Argument construction, factories, equality and replacement.
- Validate the built-in parsers on valid, malformed and absent input.
- Validate the @parser/@completer adapters and the choice-based completers.

Conventions
- Test method names follow CamelCase per project convention.
- Completers are exercised without a context; the built-ins never read it.
"""
import enum
import unittest
from unittest import TestCase

from helmsman import (
    Argument,
    ArgumentParser,
    BooleanCompleter,
    BooleanParser,
    ChoiceCompleter,
    Completer,
    EnumCompleter,
    EnumParser,
    FloatParser,
    IntegerParser,
    Result,
    StringParser,
    completer,
    parser,
)
from helmsman.utils import replace


class Color(enum.Enum):
    RED = "red"
    DARK_GREEN = "dark-green"


class TestArgument(TestCase):
    """Behavioral tests for Argument values."""

    def testSuccessFactory(self):
        argument = Argument.success(3, "3")
        self.assertIs(argument.result, Result.SUCCESS)
        self.assertEqual(argument.value, 3)
        self.assertEqual(argument.text, "3")
        self.assertTrue(argument.ok)

    def testFailFactoryDefaults(self):
        argument = Argument.fail()
        self.assertIs(argument.result, Result.FAIL)
        self.assertIsNone(argument.value)
        self.assertIsNone(argument.text)
        self.assertFalse(argument.ok)

    def testResultTruthiness(self):
        self.assertTrue(Result.SUCCESS)
        self.assertFalse(Result.FAIL)

    def testResultMustBeResult(self):
        with self.assertRaises(TypeError):
            Argument("success", 3)

    def testTextMustBeString(self):
        with self.assertRaises(TypeError):
            Argument.success(3, 3)

    def testEquality(self):
        self.assertEqual(Argument.success(1, "1"), Argument.success(1, "1"))
        self.assertNotEqual(Argument.success(1, "1"), Argument.fail(1, "1"))
        self.assertNotEqual(Argument.success(1, "1"), 1)

    def testUnhashable(self):
        with self.assertRaises(TypeError):
            hash(Argument.success(1))

    def testValueIsNotFrozen(self):
        values = [1, 2]
        self.assertIs(Argument.success(values).value, values)

    def testReplaceText(self):
        argument = replace(Argument.success(3), text="3")
        self.assertEqual(argument, Argument.success(3, "3"))

    def testReplaceUnknownField(self):
        with self.assertRaises(TypeError):
            replace(Argument.success(3), raw="3")

    def testReadOnly(self):
        with self.assertRaises(AttributeError):
            Argument.success(3).text = "x"  # type: ignore[misc]

    def testRepr(self):
        self.assertEqual(
            repr(Argument.success(3, "3")),
            "argument(result=<Result.SUCCESS: 'success'>, value=3, text='3')",
        )


class TestParsers(TestCase):
    """Behavioral tests for the built-in parsers."""

    def testStringParser(self):
        self.assertEqual(StringParser().parse("Alex"), Argument.success("Alex", "Alex"))
        self.assertEqual(StringParser().parse(None), Argument.fail())
        self.assertEqual(StringParser("none").parse(None), Argument.fail("none"))

    def testIntegerParser(self):
        self.assertEqual(IntegerParser().parse("-12"), Argument.success(-12, "-12"))
        self.assertEqual(IntegerParser().parse("1.5"), Argument.fail(None, "1.5"))
        self.assertEqual(IntegerParser(0).parse(None), Argument.fail(0))

    def testFloatParser(self):
        self.assertEqual(FloatParser().parse("1.5"), Argument.success(1.5, "1.5"))
        self.assertEqual(FloatParser(1.0).parse("one"), Argument.fail(1.0, "one"))

    def testBooleanParser(self):
        for text in ("true", "YES", "on", "1"):
            with self.subTest(text=text):
                self.assertIs(BooleanParser().parse(text).value, True)
        for text in ("false", "No", "off", "0"):
            with self.subTest(text=text):
                self.assertIs(BooleanParser().parse(text).value, False)
        self.assertFalse(BooleanParser().parse("maybe").ok)
        self.assertEqual(BooleanParser(True).parse(None), Argument.fail(True))

    def testEnumParser(self):
        self.assertEqual(EnumParser(Color).parse("dark_green").value, Color.DARK_GREEN)
        self.assertEqual(EnumParser(Color).parse("RED").value, Color.RED)
        self.assertEqual(EnumParser(Color, Color.RED).parse("blue"), Argument.fail(Color.RED, "blue"))

    def testEnumParserRequiresEnum(self):
        with self.assertRaises(TypeError):
            EnumParser(str)

    def testParsersAreArgumentParsers(self):
        for instance in (StringParser(), IntegerParser(), FloatParser(), BooleanParser(), EnumParser(Color)):
            with self.subTest(parser=instance):
                self.assertIsInstance(instance, ArgumentParser)

    def testParserDecoratorWrapsPlainValues(self):
        @parser
        def upper(value):
            return value.upper() if value else None

        self.assertIsInstance(upper, ArgumentParser)
        self.assertEqual(upper.parse("abc"), Argument.success("ABC"))
        self.assertIsNone(upper.parse(None))

    def testParserDecoratorKeepsArguments(self):
        @parser
        def strict(value):
            return Argument.fail(text=value)

        self.assertEqual(strict.parse("x"), Argument.fail(None, "x"))

    def testParserDecoratorRequiresCallable(self):
        with self.assertRaises(TypeError):
            parser("nope")


class TestCompleters(TestCase):
    """Behavioral tests for the built-in completers."""

    def testChoiceCompleter(self):
        choices = ChoiceCompleter(("Alpha", "beta", "alpine"))
        self.assertEqual(choices.complete(None, "al"), ["Alpha", "alpine"])
        self.assertEqual(choices.complete(None, ""), ["Alpha", "beta", "alpine"])

    def testChoiceCompleterRejectsString(self):
        with self.assertRaises(TypeError):
            ChoiceCompleter("abc")

    def testEnumCompleter(self):
        self.assertEqual(EnumCompleter(Color).complete(None, "d"), ["dark_green"])

    def testBooleanCompleter(self):
        self.assertEqual(BooleanCompleter().complete(None, ""), ["false", "true"])

    def testCompleterDecorator(self):
        @completer
        def letters(context, partial):
            return iter(partial * 2)

        self.assertIsInstance(letters, Completer)
        self.assertEqual(letters.complete(None, "ab"), ["a", "b", "a", "b"])


if __name__ == "__main__":
    unittest.main()
