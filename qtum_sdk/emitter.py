"""
Process-local publish/subscribe.
"""
import inspect
from collections import defaultdict
from typing import Any, Callable, Dict, List

Listener = Callable[..., Any]


class EventEmitter:
    """
    Maps topics to lists of listeners.

    Listeners may be plain functions or coroutine functions; ``emit`` awaits
    awaitable results in registration order.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)
        self._once: Dict[str, List[Listener]] = defaultdict(list)

    def on(self, topic: str, listener: Listener) -> None:
        self._listeners[topic].append(listener)

    def once(self, topic: str, listener: Listener) -> None:
        self._listeners[topic].append(listener)
        self._once[topic].append(listener)

    def off(self, topic: str, listener: Listener) -> None:
        if listener in self._listeners.get(topic, []):
            self._listeners[topic].remove(listener)
        if listener in self._once.get(topic, []):
            self._once[topic].remove(listener)

    def listeners(self, topic: str) -> List[Listener]:
        return list(self._listeners.get(topic, []))

    def remove_all_listeners(self, topic: str = None) -> None:
        if topic is None:
            self._listeners.clear()
            self._once.clear()
        else:
            self._listeners.pop(topic, None)
            self._once.pop(topic, None)

    async def emit(self, topic: str, *args: Any) -> bool:
        """
        Deliver ``args`` to every listener of ``topic``.

        Returns:
            True if the topic had listeners
        """
        listeners = self.listeners(topic)
        for listener in listeners:
            if listener in self._once.get(topic, []):
                self.off(topic, listener)
            result = listener(*args)
            if inspect.isawaitable(result):
                await result
        return bool(listeners)
