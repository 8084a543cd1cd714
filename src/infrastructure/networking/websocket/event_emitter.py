"""
Event Emitter

Minimal publish/subscribe used by the session manager and the auto-trade
engine. Handlers may be plain callables or coroutine functions; they run
in registration order and a failing handler never stops the others.

Registering the same handler twice yields two invocations per event.
off() removes only the first registration that is the exact same object,
so removing a handler requires the reference used in on().
"""

import inspect
from collections import defaultdict
from typing import Any, Callable, DefaultDict, Generic, Hashable, List, Optional, TypeVar

from infrastructure.logging import get_logger, HFTLoggerInterface

K = TypeVar('K', bound=Hashable)
Handler = Callable[..., Any]


class EventEmitter(Generic[K]):

    def __init__(self, name: str = "events", logger: Optional[HFTLoggerInterface] = None):
        self.name = name
        self.logger = logger or get_logger(f"events.{name}")
        self._handlers: DefaultDict[K, List[Handler]] = defaultdict(list)

    def on(self, event: K, handler: Handler) -> Handler:
        """Register handler for event. Returns the handler for later off()."""
        if not callable(handler):
            raise TypeError(f"Handler for {event!r} must be callable, got {type(handler).__name__}")
        self._handlers[event].append(handler)
        return handler

    def once(self, event: K, handler: Handler) -> Handler:
        """Register a handler that removes itself after the first call. Returns the wrapper."""
        def wrapper(*args):
            self.off(event, wrapper)
            return handler(*args)

        return self.on(event, wrapper)

    def off(self, event: K, handler: Handler) -> bool:
        """Remove the first registration of this exact handler object."""
        handlers = self._handlers.get(event)
        if not handlers:
            return False
        for index, registered in enumerate(handlers):
            if registered is handler:
                del handlers[index]
                if not handlers:
                    del self._handlers[event]
                return True
        return False

    def remove_all_listeners(self, event: Optional[K] = None) -> None:
        if event is None:
            self._handlers.clear()
        else:
            self._handlers.pop(event, None)

    def listener_count(self, event: K) -> int:
        return len(self._handlers.get(event, ()))

    async def emit(self, event: K, *args: Any) -> int:
        """
        Invoke handlers for event in registration order.

        Coroutine results are awaited before the next handler runs.
        Returns the number of handlers invoked.
        """
        handlers = list(self._handlers.get(event, ()))
        for handler in handlers:
            try:
                result = handler(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self.logger.error("Event handler failed",
                                  event=getattr(event, 'value', event),
                                  handler=getattr(handler, '__qualname__', repr(handler)),
                                  error_type=type(e).__name__,
                                  error_message=str(e))
        return len(handlers)
