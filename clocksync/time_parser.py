"""Turn raw OCR text from the stopwatch overlay into elapsed seconds."""

import re
from typing import Callable, List, Optional, Tuple

# Characters OCR commonly reads in place of digits, applied in this order
CONFUSIONS: List[Tuple[str, str]] = [
    ("O", "0"),
    ("o", "0"),
    ("l", "1"),
    ("I", "1"),
    ("S", "5"),
    ("B", "8"),
    ("Z", "2"),
    ("z", "2"),
]

_WHITESPACE = re.compile(r"\s+")


def correct_confusions(text: str) -> str:
    """
    Remove whitespace and replace letters that OCR confuses with digits.

    The output contains none of the replaced letters, so applying this twice
    gives the same result as applying it once.
    """
    text = _WHITESPACE.sub("", text)
    for wrong, right in CONFUSIONS:
        text = text.replace(wrong, right)
    return text


def _hms(match: "re.Match") -> Tuple[int, int, int, int]:
    hours, minutes, seconds, millis = (int(g) for g in match.groups())
    return hours, minutes, seconds, millis


def _ms(match: "re.Match") -> Tuple[int, int, int, int]:
    minutes, seconds, millis = (int(g) for g in match.groups())
    return 0, minutes, seconds, millis


# Tried in order; the first grammar that matches and passes range checks wins.
# ASCII digits only, so other scripts' digits are never read as a time.
GRAMMARS: List[Tuple[str, "re.Pattern", Callable[["re.Match"], Tuple[int, int, int, int]]]] = [
    ("HH:MM:SS.mmm", re.compile(r"(\d{2}):(\d{2}):(\d{2})\.(\d{3})", re.ASCII), _hms),
    ("H:M:S.mmm", re.compile(r"(\d{1,2}):(\d{1,2}):(\d{1,2})\.(\d{3})", re.ASCII), _hms),
    ("MM:SS.mmm", re.compile(r"(\d{2}):(\d{2})\.(\d{3})", re.ASCII), _ms),
]


def _in_range(minutes: int, seconds: int, millis: int) -> bool:
    return minutes < 60 and seconds < 60 and millis < 1000


def parse_clock_time(text: Optional[str]) -> Optional[float]:
    """
    Parse stopwatch text into elapsed seconds.

    Args:
        text: Raw OCR output, possibly with whitespace and misread characters

    Returns:
        Elapsed seconds, or None if no grammar yields an in-range time.
        Never returns a partial guess.
    """
    if not text:
        return None

    cleaned = correct_confusions(text)
    for _name, pattern, fields in GRAMMARS:
        match = pattern.search(cleaned)
        if not match:
            continue
        hours, minutes, seconds, millis = fields(match)
        if not _in_range(minutes, seconds, millis):
            continue
        return hours * 3600 + minutes * 60 + seconds + millis / 1000.0

    return None


def format_clock_time(seconds: float) -> str:
    """Render elapsed seconds as HH:MM:SS.mmm, the stopwatch overlay format."""
    if seconds < 0:
        raise ValueError(f"Elapsed time cannot be negative: {seconds}")
    total_ms = int(round(seconds * 1000))
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, millis = divmod(rest, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}.{millis:03d}"
