import asyncio
import traceback
from typing import Any, Awaitable, Callable, Optional

from .config import (
    DEFAULT_FAIL_ON_TIMEOUT,
    DEFAULT_TIMEOUT_SECONDS,
    EVENT_ENDED,
    EVENT_TIMEUPDATE,
    MOVEMENT_DELTA_SECONDS,
)
from .errors import WaitTimeoutError
from .event_manager import EventManager
from .events import Event
from .logger import get_logger
from .media import MediaElement

logger = get_logger("waiter")


def _format_time(value: float) -> str:
    # 2.0 -> "2", so goal names read "movement from 2 to 3".
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _resolved() -> "asyncio.Future[None]":
    future = asyncio.get_running_loop().create_future()
    future.set_result(None)
    return future


def _race(*branches: "asyncio.Future[Any]") -> "asyncio.Future[Any]":
    """Settle with whichever branch settles first and cancel the rest."""

    winner = asyncio.get_running_loop().create_future()

    def settle(branch: "asyncio.Future[Any]") -> None:
        if winner.done():
            return
        if branch.cancelled():
            winner.cancel()
        elif branch.exception() is not None:
            winner.set_exception(branch.exception())
        else:
            winner.set_result(branch.result())

    def cancel_losers(_: "asyncio.Future[Any]") -> None:
        for branch in branches:
            if not branch.done():
                branch.cancel()

    for branch in branches:
        branch.add_done_callback(settle)
    winner.add_done_callback(cancel_losers)
    return winner


class Waiter:
    """Waits for playback conditions in tests, bounded by a timeout.

    Every `wait_*` method registers its listeners immediately and returns an
    `asyncio.Future` that resolves to None, so it must be called from code
    running on the event loop::

        waiter = Waiter(EventManager()).timeout_after(2)
        await waiter.wait_for_movement(media)

    On timeout the future raises `WaitTimeoutError`, unless
    `fail_on_timeout(False)` was set, in which case it resolves quietly.
    Settings are read when a wait starts; changing them later does not
    affect waits already in flight.
    """

    def __init__(self, event_manager: Optional[EventManager] = None) -> None:
        self._event_manager = event_manager if event_manager is not None else EventManager()
        self._fail_on_timeout = DEFAULT_FAIL_ON_TIMEOUT
        self._timeout_seconds = DEFAULT_TIMEOUT_SECONDS

    @property
    def event_manager(self) -> EventManager:
        return self._event_manager

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds

    @property
    def fails_on_timeout(self) -> bool:
        return self._fail_on_timeout

    # TODO: take these as per-call keyword arguments instead of sticky state,
    # so one test's timeout does not leak into its next wait.
    def timeout_after(self, timeout_seconds: float) -> "Waiter":
        """Change the timeout for subsequent waits."""

        if timeout_seconds < 0:
            raise ValueError("timeout_seconds must not be negative")
        self._timeout_seconds = float(timeout_seconds)
        return self

    def fail_on_timeout(self, should_fail_on_timeout: bool) -> "Waiter":
        """Change whether subsequent waits fail (True) or pass (False) on timeout."""

        self._fail_on_timeout = bool(should_fail_on_timeout)
        return self

    def wait_for_movement(self, media: MediaElement) -> "asyncio.Future[None]":
        """Wait for the playhead to move forward by a meaningful delta, or the media to end."""

        if media.ended:
            raise AssertionError("Media should not be ended!")
        time_goal = media.current_time + MOVEMENT_DELTA_SECONDS
        return self.wait_until_playhead_reaches(media, time_goal)

    def wait_for_movement_or_fail_on_timeout(self, media: MediaElement, timeout: float) -> "asyncio.Future[None]":
        self.timeout_after(timeout).fail_on_timeout(True)
        return self.wait_for_movement(media)

    def wait_until_playhead_reaches(self, media: MediaElement, time_goal: float) -> "asyncio.Future[None]":
        """Wait for the playhead to reach `time_goal`, or the media to end."""

        goal_name = f"movement from {_format_time(media.current_time)} to {_format_time(time_goal)}"
        reached: "asyncio.Future[None]" = asyncio.get_running_loop().create_future()

        def on_time_update(_event: Event) -> None:
            if media.current_time >= time_goal or media.ended:
                self._event_manager.unlisten(media, EVENT_TIMEUPDATE)
                if not reached.done():
                    reached.set_result(None)

        self._event_manager.listen(media, EVENT_TIMEUPDATE, on_time_update)

        def cleanup() -> None:
            self._event_manager.unlisten(media, EVENT_TIMEUPDATE)

        return self._wait_until_generic(goal_name, reached, cleanup, media)

    def wait_until_playhead_reaches_or_fail_on_timeout(
        self, media: MediaElement, time_goal: float, timeout: float
    ) -> "asyncio.Future[None]":
        self.timeout_after(timeout).fail_on_timeout(True)
        return self.wait_until_playhead_reaches(media, time_goal)

    def wait_for_end(self, media: MediaElement) -> "asyncio.Future[None]":
        """Wait for the media to end.

        The ended flag, the `ended` event and the playhead reaching the
        duration are each enough on their own; players do not always produce
        all three.
        """

        if media.ended or media.current_time >= media.duration:
            return _resolved()

        goal_name = "end of media"
        finished: "asyncio.Future[None]" = asyncio.get_running_loop().create_future()

        def cleanup() -> None:
            self._event_manager.unlisten(media, EVENT_TIMEUPDATE)
            self._event_manager.unlisten(media, EVENT_ENDED)

        def done() -> None:
            cleanup()
            if not finished.done():
                finished.set_result(None)

        def on_time_update(_event: Event) -> None:
            if media.current_time >= media.duration or media.ended:
                done()

        self._event_manager.listen(media, EVENT_TIMEUPDATE, on_time_update)
        self._event_manager.listen(media, EVENT_ENDED, lambda _event: done())

        return self._wait_until_generic(goal_name, finished, cleanup, media)

    def wait_for_end_or_timeout(self, media: MediaElement, timeout: float) -> "asyncio.Future[None]":
        """Wait for the media to end or `timeout` seconds to pass; neither is an error."""

        self.fail_on_timeout(False).timeout_after(timeout)
        return self.wait_for_end(media)

    def wait_for_event(self, target: Any, event_type: str) -> "asyncio.Future[None]":
        goal_name = f"event {event_type}"
        fired: "asyncio.Future[None]" = asyncio.get_running_loop().create_future()

        def on_event(_event: Event) -> None:
            if not fired.done():
                fired.set_result(None)

        self._event_manager.listen_once(target, event_type, on_event)

        def cleanup() -> None:
            self._event_manager.unlisten(target, event_type)

        return self._wait_until_generic(goal_name, fired, cleanup, target)

    def wait_for_future(self, awaitable: Awaitable[Any], label: str) -> "asyncio.Future[None]":
        """Wait for `awaitable` to complete, or time out; `label` names it in errors."""

        return self._wait_until_generic(label, asyncio.ensure_future(awaitable), lambda: None, None)

    def _wait_until_generic(
        self,
        goal_name: str,
        success: "asyncio.Future[Any]",
        cleanup_on_timeout: Callable[[], None],
        target: Any,
    ) -> "asyncio.Future[None]":
        loop = asyncio.get_running_loop()
        goal_met = False
        start_time = loop.time()
        logger.debug("Waiting for %s", goal_name)

        # Snapshot the settings in case they change while we wait.
        fail_on_timeout = self._fail_on_timeout
        timeout_seconds = self._timeout_seconds

        # The timeout fires from its own task, whose traceback says nothing
        # about the test that started the wait. Record that here.
        error = WaitTimeoutError(goal_name, timeout_seconds)
        error.add_note("Wait started at:\n" + "".join(traceback.format_stack(limit=8)[:-1]))

        async def on_success() -> None:
            nonlocal goal_met
            # Shielded: losing the race must not cancel the caller's future.
            await asyncio.shield(success)
            goal_met = True
            logger.debug("%s after %.2f seconds", goal_name, loop.time() - start_time)

        async def on_timeout() -> None:
            await asyncio.sleep(timeout_seconds)
            # Avoid error logs and the cleanup callback if we already met the goal.
            if goal_met:
                return
            # Settled in the same loop pass the timer fired, before the success
            # branch resumed. Its outcome wins; a failure is re-raised as is.
            if success.done() and not success.cancelled():
                success.result()
                return

            cleanup_on_timeout()

            if isinstance(target, MediaElement):
                error.diagnostics = target.debug_info()
                self._log_debug_info_for_media(str(error), target)

            if fail_on_timeout:
                raise error
            logger.debug("%s after %.2f seconds, not treated as a failure", error, timeout_seconds)

        result = _race(loop.create_task(on_success()), loop.create_task(on_timeout()))

        def on_done(fut: "asyncio.Future[None]") -> None:
            if fut.cancelled():
                cleanup_on_timeout()

        result.add_done_callback(on_done)
        return result

    def _log_debug_info_for_media(self, message: str, media: MediaElement) -> None:
        info = media.debug_info()
        logger.error(
            "%s current time %s duration %s ready state %s playback rate %s paused %s ended %s buffered %s",
            message,
            info["current time"],
            info["duration"],
            info["ready state"],
            info["playback rate"],
            info["paused"],
            info["ended"],
            info["buffered"],
        )
