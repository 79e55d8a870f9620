"""
Completion behavioral tests.

Scope
- Validate the fallback to command names when the line does not resolve.
- Validate sub-name suggestions right after the command name.
- Validate delegation to the completer bound to the current parameter type,
  collections included.
- Validate that completion degrades instead of raising.

Conventions
- Test method names follow CamelCase per project convention.
"""
import enum
import unittest
import warnings
from unittest import TestCase

from helmsman import (
    CompletionFailureWarning,
    CompleterReboundWarning,
    Dispatcher,
    EnumCompleter,
    EnumParser,
    Sender,
    action,
    completer,
    parser,
)

PLAYERS = ("alex", "bob", "bobby", "steve")


class Player(Sender):
    def __init__(self, name="steve", permissions=()):
        self.name = name
        self.permissions = set(permissions)

    def can_use(self, command, action, /):
        return f"{command}.{action or 'main'}" in self.permissions


class Mode(enum.Enum):
    SURVIVAL = 0
    CREATIVE = 1
    SPECTATOR = 2


@parser
def player(value):
    if value in PLAYERS:
        return Player(value)
    return None


@completer
def players(context, partial):
    return [name for name in PLAYERS if name.startswith(partial)]


class Teleport:
    @action("here")
    def here(self, sender: Player) -> None:
        pass

    @action("player")
    def player(self, sender: Player, target: Player) -> None:
        pass


class GameMode:
    @action(main=True)
    def set(self, sender: Player, mode: Mode, target: Player) -> None:
        pass

    @action("list")
    def list(self, sender: Player) -> None:
        pass


class Party:
    @action(main=True)
    def invite(self, sender: Player, members: list[Player]) -> None:
        pass


class Secret:
    @action("reveal", permission=True)
    def reveal(self, sender: Player, target: Player) -> None:
        pass


class Offline(Player):
    """Sender whose permission backend is unreachable."""

    def can_use(self, command, action, /):
        raise RuntimeError("permission backend offline")


class Toggle:
    @action("set")
    def set(self, sender: Player, enabled: bool, note: str) -> None:
        pass


class TestCompletion(TestCase):
    """Behavioral tests for Dispatcher.complete."""

    def setUp(self):
        self.dispatcher = Dispatcher("/")
        self.dispatcher.bind_parser(Player, player)
        self.dispatcher.bind_completer(Player, players)
        self.dispatcher.bind_parser(Mode, EnumParser(Mode))
        self.dispatcher.bind_completer(Mode, EnumCompleter(Mode))
        self.dispatcher.register(Teleport(), "tp", "teleport")
        self.dispatcher.register(GameMode(), "gamemode")
        self.dispatcher.register(Party(), "party")
        self.dispatcher.register(Toggle(), "toggle")
        self.sender = Player()

    def complete(self, text):
        return self.dispatcher.complete(self.sender, text)

    def testEmptyListsAllCommands(self):
        self.assertEqual(self.complete(""), ["tp", "teleport", "gamemode", "party", "toggle"])

    def testPartialCommandName(self):
        self.assertEqual(self.complete("t"), ["tp", "teleport", "toggle"])
        self.assertEqual(self.complete("TE"), ["teleport"])

    def testPartialCommandNameKeepsPrefix(self):
        self.assertEqual(self.complete("/te"), ["/teleport"])

    def testUnknownCommandYieldsNothing(self):
        self.assertEqual(self.complete("warp "), [])

    def testAbsentTextListsAllCommands(self):
        self.assertEqual(len(self.complete(None)), 5)

    def testFullCommandNameWithoutSpaceYieldsNothing(self):
        self.assertEqual(self.complete("tp"), [])

    def testSubNamePrefix(self):
        self.assertEqual(self.complete("tp h"), ["here"])

    def testTrailingSpaceListsSubNames(self):
        self.assertEqual(self.complete("tp "), ["here", "player"])

    def testCompleterForParameter(self):
        self.assertEqual(self.complete("tp player bo"), ["bob", "bobby"])

    def testCompleterWithEmptyPartial(self):
        self.assertEqual(self.complete("tp player "), list(PLAYERS))

    def testTooManyTokensYieldsNothing(self):
        self.assertEqual(self.complete("tp player bob "), [])

    def testNoParametersYieldsNothing(self):
        self.assertEqual(self.complete("tp here "), [])

    def testUnknownSubNameWithoutMainListsSubNames(self):
        self.assertEqual(self.complete("tp x"), ["here", "player"])

    def testMainEntrySubNamesFirst(self):
        self.assertEqual(self.complete("gamemode l"), ["list"])

    def testMainEntryFallsThroughToParameter(self):
        self.assertEqual(self.complete("gamemode c"), ["creative"])

    def testMainEntrySecondParameter(self):
        self.assertEqual(self.complete("gamemode creative a"), ["alex"])

    def testMainEntryTrailingSpaceListsSubNames(self):
        self.assertEqual(self.complete("gamemode "), ["set", "list"])

    def testCollectionKeepsCompletingElements(self):
        self.assertEqual(self.complete("party alex bob st"), ["steve"])
        self.assertEqual(self.complete("party alex "), list(PLAYERS))

    def testBuiltinBooleanCompleter(self):
        self.assertEqual(self.complete("toggle set t"), ["true"])

    def testNoCompleterYieldsNothing(self):
        self.assertEqual(self.complete("toggle set true "), [])

    def testAccessDeniedFallsBackToNames(self):
        self.dispatcher.register(Secret(), "secret")
        self.assertEqual(self.complete("secret reveal "), [])
        self.assertEqual(
            self.dispatcher.complete(Player(permissions={"secret.reveal"}), "secret reveal a"),
            ["alex"],
        )

    def testFailingCompleterWarnsAndYieldsNothing(self):
        @completer
        def broken(context, partial):
            raise RuntimeError("boom")

        with self.assertWarns(CompleterReboundWarning):
            self.dispatcher.bind_completer(Player, broken)
        with self.assertWarns(CompletionFailureWarning):
            self.assertEqual(self.complete("tp player b"), [])

    def testRaisingPermissionCheckWarnsAndFallsBack(self):
        self.dispatcher.register(Secret(), "secret")
        with self.assertWarns(CompletionFailureWarning):
            self.assertEqual(self.dispatcher.complete(Offline(), "secret reveal "), [])
        with self.assertWarns(CompletionFailureWarning):
            self.assertEqual(self.dispatcher.complete(Offline(), "secret reveal a"), [])

    def testRaisingPermissionCheckOnlyAffectsGuardedActions(self):
        self.dispatcher.register(Secret(), "secret")
        self.assertEqual(self.dispatcher.complete(Offline(), "tp player bo"), ["bob", "bobby"])

    def testFailuresNeverRaiseUnderErrorFilter(self):
        @completer
        def broken(context, partial):
            raise RuntimeError("boom")

        self.dispatcher.register(Secret(), "secret")
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", CompleterReboundWarning)
            self.dispatcher.bind_completer(Player, broken)
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            self.assertEqual(self.complete("tp player b"), [])
            self.assertEqual(self.dispatcher.complete(Offline(), "secret reveal a"), [])

    def testCompleterReceivesContext(self):
        seen = []

        @completer
        def spy(context, partial):
            seen.append((context.command, context.action_name, context.sender, partial))
            return []

        with self.assertWarns(CompleterReboundWarning):
            self.dispatcher.bind_completer(Player, spy)
        self.complete("teleport player Al")
        self.assertEqual(seen, [("tp", "player", self.sender, "Al")])


if __name__ == "__main__":
    unittest.main()
