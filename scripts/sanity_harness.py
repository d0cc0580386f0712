import asyncio

from playwait.errors import WaitTimeoutError
from playwait.event_manager import EventManager
from playwait.events import EventTarget
from playwait.media import MediaElement
from playwait.waiter import Waiter


def _playing(current_time: float, duration: float) -> MediaElement:
    media = MediaElement(current_time=current_time, duration=duration)
    media.play()
    return media


async def test_movement() -> None:
    waiter = Waiter(EventManager())
    media = _playing(2.0, 10.0)
    asyncio.get_running_loop().call_later(0.1, media.seek, 3.0)
    await waiter.timeout_after(5).wait_for_movement(media)
    assert media.listener_count() == 0


async def test_timeout_modes() -> None:
    waiter = Waiter(EventManager()).timeout_after(0.1)
    media = _playing(2.0, 10.0)
    try:
        await waiter.wait_for_movement(media)
    except WaitTimeoutError as exc:
        assert "movement from 2 to 3" in str(exc)
    else:
        raise AssertionError("expected a timeout")

    await waiter.wait_for_end_or_timeout(media, 0.1)
    assert media.listener_count() == 0


async def test_event() -> None:
    waiter = Waiter(EventManager())
    target = EventTarget()
    wait = waiter.wait_for_event(target, "loaded")
    target.dispatch_event("loaded")
    await wait


async def main() -> None:
    await test_movement()
    await test_timeout_modes()
    await test_event()
    print("Sanity harness passed")


if __name__ == "__main__":
    asyncio.run(main())
