"""Construction-proof singletons backed by an enumeration."""

from enum import Enum
from typing import Type, TypeVar

E = TypeVar("E", bound="SingletonEnum")


class SingletonEnum(Enum):
    """
    Enumeration with exactly one member that serves as the singleton.

    The member is allocated when the class body executes and is owned by the
    enum machinery: calling the class looks a member up instead of creating
    one, copying and pickling return the same member, and an enum with
    members cannot be subclassed. There is no lazy construction, and in
    exchange there is no path to a second instance.

    Example::

        class Clock(SingletonEnum):
            INSTANCE = "clock"

            def now(self):
                ...

        Clock.get_instance() is Clock.INSTANCE
    """

    @classmethod
    def get_instance(cls: Type[E]) -> E:
        """
        Return the only member.

        Raises:
            TypeError: If the enumeration does not define exactly one member
        """
        members = list(cls)
        if len(members) != 1:
            raise TypeError(
                f"{cls.__name__} must define exactly one member to act as a singleton, "
                f"found {len(members)}"
            )
        return members[0]
