"""Tests for event targets and the event manager."""

from playwait.event_manager import EventManager
from playwait.events import Event, EventTarget


class TestEventTarget:
    def test_dispatch_calls_listeners_in_order(self):
        target = EventTarget()
        calls = []
        target.add_event_listener("x", lambda e: calls.append(("a", e.type)))
        target.add_event_listener("x", lambda e: calls.append(("b", e.type)))

        event = target.dispatch_event("x", detail=42)

        assert calls == [("a", "x"), ("b", "x")]
        assert event.target is target
        assert event.detail == 42

    def test_duplicate_listener_added_once(self):
        target = EventTarget()
        calls = []
        target.add_event_listener("x", calls.append)
        target.add_event_listener("x", calls.append)
        target.dispatch_event("x")
        assert len(calls) == 1

    def test_listener_removed_during_dispatch_is_skipped(self):
        target = EventTarget()
        calls = []

        def second(event):
            calls.append("second")

        def first(event):
            calls.append("first")
            target.remove_event_listener("x", second)

        target.add_event_listener("x", first)
        target.add_event_listener("x", second)
        target.dispatch_event("x")

        assert calls == ["first"]

    def test_removing_unknown_listener_is_noop(self):
        target = EventTarget()
        target.remove_event_listener("x", print)
        assert target.listener_count() == 0

    def test_dispatch_event_object_keeps_target(self):
        target = EventTarget()
        other = object()
        seen = []
        target.add_event_listener("x", seen.append)
        target.dispatch_event(Event(type="x", target=other))
        assert seen[0].target is other


class TestEventManager:
    def test_listen_and_unlisten(self):
        manager = EventManager()
        target = EventTarget()
        calls = []
        manager.listen(target, "x", calls.append)

        target.dispatch_event("x")
        manager.unlisten(target, "x")
        target.dispatch_event("x")

        assert len(calls) == 1
        assert target.listener_count() == 0
        assert manager.binding_count() == 0

    def test_unlisten_only_touches_matching_type_and_target(self):
        manager = EventManager()
        a, b = EventTarget(), EventTarget()
        manager.listen(a, "x", lambda e: None)
        manager.listen(a, "y", lambda e: None)
        manager.listen(b, "x", lambda e: None)

        manager.unlisten(a, "x")

        assert a.listener_count("x") == 0
        assert a.listener_count("y") == 1
        assert b.listener_count("x") == 1
        assert manager.binding_count() == 2
        assert manager.binding_count(target=a) == 1

    def test_unlisten_leaves_foreign_listeners(self):
        manager = EventManager()
        target = EventTarget()
        calls = []
        target.add_event_listener("x", calls.append)
        manager.listen(target, "x", lambda e: None)

        manager.unlisten(target, "x")
        target.dispatch_event("x")

        assert len(calls) == 1

    def test_same_callable_in_two_managers(self):
        first, second = EventManager(), EventManager()
        target = EventTarget()
        calls = []
        first.listen(target, "x", calls.append)
        second.listen(target, "x", calls.append)

        first.unlisten(target, "x")
        target.dispatch_event("x")

        assert len(calls) == 1

    def test_listen_once_fires_once(self):
        manager = EventManager()
        target = EventTarget()
        calls = []
        manager.listen_once(target, "x", calls.append)

        target.dispatch_event("x")
        target.dispatch_event("x")

        assert len(calls) == 1
        assert target.listener_count() == 0
        assert manager.binding_count() == 0

    def test_binding_unlisten(self):
        manager = EventManager()
        target = EventTarget()
        binding = manager.listen(target, "x", lambda e: None)
        assert binding.active

        manager.unlisten_binding(binding)
        manager.unlisten_binding(binding)

        assert not binding.active
        assert target.listener_count() == 0
        assert "removed" in repr(binding)

    def test_release_removes_everything(self):
        manager = EventManager()
        targets = [EventTarget() for _ in range(3)]
        for t in targets:
            manager.listen(t, "x", lambda e: None)
            manager.listen_once(t, "y", lambda e: None)

        manager.release()

        assert manager.binding_count() == 0
        assert all(t.listener_count() == 0 for t in targets)
