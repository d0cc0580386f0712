from typing import Any, List, Optional

from .events import Event, Listener


class Binding:
    """One listener registered on one target for one event type."""

    def __init__(self, target: Any, event_type: str, listener: Listener) -> None:
        self.target = target
        self.type = event_type
        self.listener = listener
        self.active = True
        # Registered through a per-binding trampoline so two bindings of the
        # same callable never collapse into one target-side listener.
        target.add_event_listener(event_type, self._on_event)

    def _on_event(self, event: Event) -> None:
        if self.active:
            self.listener(event)

    def unlisten(self) -> None:
        if not self.active:
            return
        self.active = False
        self.target.remove_event_listener(self.type, self._on_event)

    def __repr__(self) -> str:
        state = "active" if self.active else "removed"
        return f"<Binding {self.type!r} on {type(self.target).__name__} ({state})>"


class EventManager:
    """Tracks listeners so they can be removed per target/type or all at once.

    Targets only need `add_event_listener` and `remove_event_listener`.
    """

    def __init__(self) -> None:
        self._bindings: List[Binding] = []

    def listen(self, target: Any, event_type: str, listener: Listener) -> Binding:
        binding = Binding(target, event_type, listener)
        self._bindings.append(binding)
        return binding

    def listen_once(self, target: Any, event_type: str, listener: Listener) -> Binding:
        binding: Optional[Binding] = None

        def once(event: Event) -> None:
            assert binding is not None
            self.unlisten_binding(binding)
            listener(event)

        binding = self.listen(target, event_type, once)
        return binding

    def unlisten(self, target: Any, event_type: str) -> None:
        for binding in self._matching(target, event_type):
            self.unlisten_binding(binding)

    def unlisten_binding(self, binding: Binding) -> None:
        binding.unlisten()
        try:
            self._bindings.remove(binding)
        except ValueError:
            pass

    def remove_all(self) -> None:
        bindings, self._bindings = self._bindings, []
        for binding in bindings:
            binding.unlisten()

    def release(self) -> None:
        self.remove_all()

    def binding_count(self, target: Any = None, event_type: Optional[str] = None) -> int:
        return len(self._matching(target, event_type))

    def _matching(self, target: Any, event_type: Optional[str]) -> List[Binding]:
        return [
            b
            for b in self._bindings
            if (target is None or b.target is target) and (event_type is None or b.type == event_type)
        ]
