"""
voxline.timecode - Subtitle timestamp math.

Converts engine centiseconds into the HH:MM:SS,mmm (SRT) and
HH:MM:SS.mmm (WebVTT) timestamp forms.
"""

from __future__ import annotations

CENTISECONDS_PER_SECOND = 100


def split_centiseconds(centiseconds: int) -> tuple[int, int, int, int]:
    """Split centiseconds into hours, minutes, seconds and milliseconds.

    Args:
        centiseconds: Time in hundredths of a second (non-negative)

    Returns:
        Tuple of (hours, minutes, seconds, milliseconds)
    """
    if centiseconds < 0:
        raise ValueError(f"Timestamp must be non-negative, got {centiseconds}")

    total_ms = centiseconds * 10
    ms = total_ms % 1000
    total_seconds = total_ms // 1000
    ss = total_seconds % 60
    mm = (total_seconds // 60) % 60
    hh = total_seconds // 3600

    return hh, mm, ss, ms


def centiseconds_to_timestamp(centiseconds: int, separator: str = ",") -> str:
    """Format centiseconds as HH:MM:SS<separator>mmm.

    Hours are zero-padded to two digits and grow wider past 99.

    Args:
        centiseconds: Time in hundredths of a second
        separator: Character between seconds and milliseconds

    Returns:
        Timestamp string
    """
    hh, mm, ss, ms = split_centiseconds(centiseconds)
    return f"{hh:02d}:{mm:02d}:{ss:02d}{separator}{ms:03d}"


def srt_timestamp(centiseconds: int) -> str:
    """SRT timestamp, e.g. 00:00:01,500."""
    return centiseconds_to_timestamp(centiseconds, ",")


def vtt_timestamp(centiseconds: int) -> str:
    """WebVTT timestamp, e.g. 00:00:01.500."""
    return centiseconds_to_timestamp(centiseconds, ".")


def seconds_to_centiseconds(seconds: float) -> int:
    """Convert engine float seconds to whole centiseconds, rounding to nearest."""
    return max(0, round(seconds * CENTISECONDS_PER_SECOND))

