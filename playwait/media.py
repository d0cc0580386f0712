"""Media-like targets the waiter can watch.

`MediaElement` mirrors the parts of HTMLMediaElement the waiter reads
(`current_time`, `duration`, `ended`, ...) and fires the same events. Tests
drive it with `play`, `advance`, `seek` and `finish`; `playback.py` drives it
from a live discord voice playback.
"""

import math
from enum import IntEnum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from .config import (
    EVENT_ENDED,
    EVENT_PAUSE,
    EVENT_PLAY,
    EVENT_SEEKED,
    EVENT_SEEKING,
    EVENT_TIMEUPDATE,
)
from .events import EventTarget


class ReadyState(IntEnum):
    HAVE_NOTHING = 0
    HAVE_METADATA = 1
    HAVE_CURRENT_DATA = 2
    HAVE_FUTURE_DATA = 3
    HAVE_ENOUGH_DATA = 4


class TimeRanges:
    """Sorted, non-overlapping [start, end] ranges in seconds."""

    def __init__(self, ranges: Iterable[Tuple[float, float]] = ()) -> None:
        merged: List[Tuple[float, float]] = []
        for start, end in sorted((float(s), float(e)) for s, e in ranges):
            if end < start:
                raise ValueError(f"range end {end} is before start {start}")
            if merged and start <= merged[-1][1]:
                prev_start, prev_end = merged[-1]
                merged[-1] = (prev_start, max(prev_end, end))
            else:
                merged.append((start, end))
        self._ranges: Tuple[Tuple[float, float], ...] = tuple(merged)

    @property
    def length(self) -> int:
        return len(self._ranges)

    def start(self, index: int) -> float:
        return self._get(index)[0]

    def end(self, index: int) -> float:
        return self._get(index)[1]

    def _get(self, index: int) -> Tuple[float, float]:
        if index < 0 or index >= len(self._ranges):
            raise IndexError(f"index {index} out of range for {len(self._ranges)} buffered ranges")
        return self._ranges[index]

    def __len__(self) -> int:
        return len(self._ranges)

    def __iter__(self) -> Iterator[Tuple[float, float]]:
        return iter(self._ranges)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimeRanges):
            return NotImplemented
        return self._ranges == other._ranges

    def __repr__(self) -> str:
        return f"TimeRanges({list(self._ranges)!r})"


def get_buffered_info(ranges: Optional[TimeRanges]) -> List[Dict[str, float]]:
    if ranges is None:
        return []
    return [{"start": ranges.start(i), "end": ranges.end(i)} for i in range(ranges.length)]


class MediaElement(EventTarget):
    def __init__(
        self,
        *,
        current_time: float = 0.0,
        duration: float = math.nan,
        playback_rate: float = 1.0,
        ready_state: ReadyState = ReadyState.HAVE_NOTHING,
        buffered: Optional[TimeRanges] = None,
    ) -> None:
        super().__init__()
        self.current_time = float(current_time)
        self.duration = float(duration)
        self.playback_rate = float(playback_rate)
        self.ready_state = ReadyState(ready_state)
        self.buffered = buffered if buffered is not None else TimeRanges()
        self.paused = True
        self.ended = False

    def play(self) -> None:
        if not self.paused:
            return
        self.paused = False
        if self.ended:
            # Playing an ended element restarts it, as browsers do.
            self.ended = False
            self.current_time = 0.0
        self.dispatch_event(EVENT_PLAY)

    def pause(self) -> None:
        if self.paused:
            return
        self.paused = True
        self.dispatch_event(EVENT_PAUSE)

    def seek(self, position: float) -> None:
        position = max(0.0, float(position))
        if not math.isnan(self.duration):
            position = min(position, self.duration)
        self.dispatch_event(EVENT_SEEKING)
        self.current_time = position
        if self.ended and not self._at_end():
            self.ended = False
        self.dispatch_event(EVENT_SEEKED)
        self.dispatch_event(EVENT_TIMEUPDATE)

    def advance(self, seconds: float) -> None:
        """Move the playhead as if `seconds` of wall time were played."""

        if self.paused or self.ended:
            return
        self.current_time += seconds * self.playback_rate
        if math.isfinite(self.duration) and self.current_time >= self.duration:
            self.finish()
            return
        self.dispatch_event(EVENT_TIMEUPDATE)

    def finish(self) -> None:
        """End playback: timeupdate (with `ended` already set), then pause and ended."""

        if self.ended:
            return
        if math.isfinite(self.duration):
            self.current_time = self.duration
        self.ended = True
        self.dispatch_event(EVENT_TIMEUPDATE)
        if not self.paused:
            self.paused = True
            self.dispatch_event(EVENT_PAUSE)
        self.dispatch_event(EVENT_ENDED)

    def _at_end(self) -> bool:
        return self.current_time >= self.duration

    def debug_info(self) -> Dict[str, Any]:
        return {
            "current time": self.current_time,
            "duration": self.duration,
            "ready state": int(self.ready_state),
            "playback rate": self.playback_rate,
            "paused": self.paused,
            "ended": self.ended,
            "buffered": get_buffered_info(self.buffered),
        }

    def __repr__(self) -> str:
        return (
            f"<MediaElement current_time={self.current_time} duration={self.duration} "
            f"paused={self.paused} ended={self.ended}>"
        )
