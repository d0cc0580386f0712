import asyncio
import math
import threading
from typing import Optional

import discord

from .logger import get_logger
from .media import MediaElement, ReadyState

logger = get_logger("playback")

# discord voice sends one Opus frame per FRAME_LENGTH milliseconds.
FRAME_SECONDS = discord.opus.Encoder.FRAME_LENGTH / 1000.0


class TrackedAudioSource(discord.AudioSource):
    """Wraps an audio source and mirrors its progress onto a MediaElement.

    `read` runs on discord's audio player thread, so every media update is
    posted to the event loop rather than applied directly.
    """

    def __init__(
        self,
        original: discord.AudioSource,
        media: MediaElement,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        self.original = original
        self.media = media
        self._loop = loop
        self._lock = threading.Lock()
        self._frames = 0
        self._exhausted = False

    @property
    def frames_read(self) -> int:
        with self._lock:
            return self._frames

    def read(self) -> bytes:
        data = self.original.read()
        if data:
            with self._lock:
                self._frames += 1
            self._post(self.media.advance, FRAME_SECONDS)
            return data

        with self._lock:
            first_empty = not self._exhausted
            self._exhausted = True
        if first_empty:
            self._post(self.media.finish)
        return data

    def is_opus(self) -> bool:
        return self.original.is_opus()

    def cleanup(self) -> None:
        self.original.cleanup()

    def _post(self, callback, *args) -> None:
        if self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(callback, *args)


def play_tracked(
    voice_client: discord.VoiceClient,
    source: discord.AudioSource,
    *,
    duration: float = math.inf,
) -> MediaElement:
    """Start playing `source` on `voice_client` and return a MediaElement that follows it.

    The element ends when the source runs dry or the player stops, so
    `Waiter.wait_for_end` works on live playback.
    """

    loop = asyncio.get_running_loop()
    media = MediaElement(duration=duration, ready_state=ReadyState.HAVE_ENOUGH_DATA)
    tracked = TrackedAudioSource(source, media, loop)

    def after_playback(err: Optional[Exception]) -> None:
        if err is not None:
            logger.warning("Playback stopped with error: %s", err)
        if not loop.is_closed():
            loop.call_soon_threadsafe(media.finish)

    media.play()
    voice_client.play(tracked, after=after_playback)
    logger.debug("Started tracked playback (duration %s)", duration)
    return media
