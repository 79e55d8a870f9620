"""
Sender capability.

A sender is whoever typed the command line (a chat user, the console, an admin
channel). The dispatcher needs a single thing from it: a permission check for
actions declared with permission=True.

    class Player(Sender):
        def can_use(self, command, action, /):
            return f"{command}.{action or 'main'}" in self.permissions

Any class defining can_use is accepted as a sender, even without inheriting
from Sender (see __subclasshook__); this is what the first parameter of every
action is checked against at registration time.
"""
from abc import ABC, abstractmethod


class Sender(ABC):
    """
    Abstract sender; subclass it or just provide can_use().
    """

    @abstractmethod
    def can_use(self, command, action, /):
        """
        Return True when this sender may run the action.

        - command: canonical (lowercased) command name.
        - action: resolved sub-action name, or None for main actions.
        """
        ...

    @classmethod
    def __subclasshook__(cls, other):
        if cls is Sender:
            for base in other.__mro__:
                if "can_use" in base.__dict__:
                    return callable(base.__dict__["can_use"]) or NotImplemented
        return NotImplemented


__all__ = (
    "Sender",
)
