"""Abstract message bus the game core talks through."""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

BusHandler = Callable[[Any], Awaitable[None]]
Unsubscribe = Callable[[], None]


class BusProtocol(ABC):
    """
    Named-event pub/sub channel scoped to one room.

    This abstraction allows the session synchronizer to be tested without a
    real Socket.IO connection. Delivery is at-least-once: handlers must
    tolerate duplicates and reordering. Whether an emitter receives its own
    events back depends on the transport.
    """

    @abstractmethod
    async def emit(self, event: str, data: dict[str, Any]) -> None:
        """
        Publish data under the named event.
        """
        ...

    @abstractmethod
    def on(self, event: str, handler: BusHandler) -> Unsubscribe:
        """
        Subscribe a handler to the named event.

        Returns a callable that removes exactly this subscription.
        """
        ...

    @abstractmethod
    def off(self, event: str, handler: BusHandler) -> None:
        """
        Remove a handler; a no-op if it is not subscribed.
        """
        ...
