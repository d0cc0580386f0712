import os


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, "").strip() or default)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, "").strip() or default)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


DEFAULT_TIMEOUT_SECONDS = _env_float("PLAYWAIT_TIMEOUT_SECONDS", 5.0)
DEFAULT_FAIL_ON_TIMEOUT = _env_bool("PLAYWAIT_FAIL_ON_TIMEOUT", True)
LOG_MAX_LINES = _env_int("PLAYWAIT_LOG_MAX_LINES", 1000)

# How far the playhead has to move for wait_for_movement to count it.
MOVEMENT_DELTA_SECONDS = 1.0

# Media event names, as fired by HTMLMediaElement.
EVENT_TIMEUPDATE = "timeupdate"
EVENT_ENDED = "ended"
EVENT_PLAY = "play"
EVENT_PAUSE = "pause"
EVENT_SEEKING = "seeking"
EVENT_SEEKED = "seeked"
