from rich.pretty import pprint

from helmsman import *

__prog__ = "helmsman-demo"


class Player(Sender):
    def __init__(self, name, *permissions):
        self.name = name
        self.permissions = set(permissions)

    def can_use(self, command, action, /):
        return f"{command}.{action or 'main'}" in self.permissions


class Teleport:
    @action("here")
    def here(self, sender: Player) -> None:
        print(f"{sender.name} teleported here")

    @action("player", permission=True)
    def player(self, sender: Player, target: str, *others: str) -> bool:
        print(f"{sender.name} teleported to {", ".join((target, *others))}")
        return True


if __name__ == '__main__':
    dispatcher = Dispatcher("/", shell=True, fancy=True)
    dispatcher.register(Teleport(), "tp", "teleport")
    pprint(dispatcher)

    alex = Player("alex", "tp.player")
    pprint(dispatcher.dispatch(alex, "/tp player steve"))
    pprint(dispatcher.complete(alex, "/tp "))
    dispatcher.dispatch(Player("steve"), "/tp player alex")
    dispatcher.dispatch(alex, "/warp")
