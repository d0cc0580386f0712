from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

Listener = Callable[["Event"], Any]


@dataclass
class Event:
    type: str
    target: Any = None
    detail: Any = None


class EventTarget:
    """Minimal DOM-style event target.

    Listeners run synchronously, in registration order, on the thread that
    dispatches. Code running off the event loop must marshal onto it first.
    """

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = {}

    def add_event_listener(self, event_type: str, listener: Listener) -> None:
        listeners = self._listeners.setdefault(event_type, [])
        if listener not in listeners:
            listeners.append(listener)

    def remove_event_listener(self, event_type: str, listener: Listener) -> None:
        listeners = self._listeners.get(event_type)
        if not listeners:
            return
        try:
            listeners.remove(listener)
        except ValueError:
            return
        if not listeners:
            del self._listeners[event_type]

    def listener_count(self, event_type: Optional[str] = None) -> int:
        if event_type is None:
            return sum(len(v) for v in self._listeners.values())
        return len(self._listeners.get(event_type, ()))

    def dispatch_event(self, event: Union[Event, str], detail: Any = None) -> Event:
        if isinstance(event, str):
            event = Event(type=event, target=self, detail=detail)
        elif event.target is None:
            event.target = self

        for listener in list(self._listeners.get(event.type, ())):
            # Removed by an earlier listener during this dispatch.
            if listener not in self._listeners.get(event.type, ()):
                continue
            listener(event)
        return event
