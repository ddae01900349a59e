"""Time conversion utilities (timeline times are float seconds)."""

from functools import lru_cache

# Tolerance used when comparing timeline positions built from float arithmetic.
TIME_EPSILON = 1e-9


@lru_cache(maxsize=4096)
def seconds_to_display(seconds: float) -> str:
    """Convert seconds to display string 'MM:SS.mmm'."""
    if seconds < 0:
        seconds = 0.0
    minutes = int(seconds // 60)
    rest = seconds % 60
    return f"{minutes:02d}:{rest:06.3f}"


def frame_duration(fps: int) -> float:
    """Length of one frame in seconds.

    Raises:
        ValueError: If *fps* is not positive.
    """
    if fps <= 0:
        raise ValueError(f"fps must be positive, got {fps}")
    return 1.0 / fps


@lru_cache(maxsize=2048)
def seconds_to_frame(seconds: float, fps: int) -> int:
    """Convert seconds to frame number.

    Example:
        >>> seconds_to_frame(1.0, 30)
        30
    """
    return int(round(seconds * fps))


def seconds_to_timecode(seconds: float, fps: int) -> str:
    """Convert seconds to HH:MM:SS:FF timecode format.

    Example:
        >>> seconds_to_timecode(83.5, 30)
        '00:01:23:15'
    """
    if seconds < 0:
        seconds = 0.0

    total_frames = seconds_to_frame(seconds, fps)
    frames = total_frames % fps
    total_seconds = total_frames // fps
    secs = total_seconds % 60
    total_minutes = total_seconds // 60
    minutes = total_minutes % 60
    hours = total_minutes // 60

    return f"{hours:02d}:{minutes:02d}:{secs:02d}:{frames:02d}"


def clamp(value: float, low: float, high: float) -> float:
    return min(max(low, value), high)
