"""
Event bus for notifying the presentation layer
"""

from typing import Callable, List
from pydantic import BaseModel
from tasq.utils.logger import logger

EventHandler = Callable[[BaseModel], None]


class EventBus:
    """Synchronous fan-out of core events to subscribed handlers"""

    def __init__(self):
        self.logger = logger
        self._handlers: List[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> Callable[[], None]:
        """
        Register a handler for all events

        Args:
            handler: Function that takes an event model

        Returns:
            Function that unsubscribes the handler
        """
        self._handlers.append(handler)

        def unsubscribe():
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def emit(self, event: BaseModel) -> None:
        """Deliver an event to every handler; a failing handler does not stop the others"""
        self.logger.debug(f"[EventBus] {type(event).__name__}")
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception as e:
                self.logger.error(f"[EventBus] Handler failed for {type(event).__name__}: {e}", exc_info=True)
