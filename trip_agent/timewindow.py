"""Daily time window parsing and normalisation.

Two readers of the same "HH:MM-HH:MM" string live here: the lenient budget
parser used by the feasibility check, and the normaliser that turns free
text such as "9am to midnight" into the canonical 24-hour form.
"""
import logging
import re
from typing import Optional, Tuple

logger = logging.getLogger("time-window")

# 9am-7pm
DEFAULT_BUDGET_MIN = 600

_SEPARATORS = r"to|-|until"
_WORD_HOURS = {"midnight": 0, "noon": 12}


def _parse_hour(part: str) -> int:
    for word, hour in _WORD_HOURS.items():
        if word in part:
            return hour

    match = re.search(r"\d+", part)
    if not match:
        raise ValueError(f"No hour in {part!r}")

    hour = int(match.group())
    if hour > 24:
        raise ValueError(f"Hour out of range: {hour}")
    if "pm" in part and hour < 12:
        hour += 12
    if "am" in part and hour == 12:
        hour = 0
    return hour


def parse_time_window(window: Optional[str]) -> int:
    """Return the number of minutes available per day.

    Falls back to DEFAULT_BUDGET_MIN whenever the window cannot be read.
    A window ending at 00:00 ends at midnight.
    """
    try:
        normalized = re.sub(r"\s+", "", (window or "").lower())
        parts = re.split(_SEPARATORS, normalized)
        if len(parts) != 2:
            return DEFAULT_BUDGET_MIN
        start = _parse_hour(parts[0])
        end = _parse_hour(parts[1])
    except ValueError:
        logger.warning(f'Time window parse failed for "{window}", using default 10h')
        return DEFAULT_BUDGET_MIN

    if end == 0 and start > 0:
        end = 24

    total = (end - start) * 60
    return total if total > 0 else DEFAULT_BUDGET_MIN


_TOKEN = r"(?:\d{1,2}(?::\d{2})?\s*(?:a\.?m\.?|p\.?m\.?)?|midnight|noon)"
_WINDOW_RE = re.compile(
    rf"({_TOKEN})\s*(?:to|-|–|until|till)\s*({_TOKEN})(?![\d:]|\s*(?:days?|nights?|weeks?|hours?|hrs?|min))"
)


def _clock(token: str) -> Tuple[int, int, Optional[str]]:
    token = token.strip()
    if token in _WORD_HOURS:
        return _WORD_HOURS[token], 0, "word"

    match = re.match(r"(\d{1,2})(?::(\d{2}))?\s*([ap])?", token)
    hour, minute = int(match.group(1)), int(match.group(2) or 0)
    meridiem = match.group(3)
    if hour > 23 or minute > 59:
        raise ValueError(f"Invalid clock time: {token}")

    if meridiem == "p" and hour < 12:
        hour += 12
    if meridiem == "a" and hour == 12:
        hour = 0
    return hour, minute, meridiem


def _is_clock(token: str) -> bool:
    return ":" in token or token in _WORD_HOURS or re.search(r"[ap]\.?m", token) is not None


def normalize_time_window(text: Optional[str], strict: bool = False) -> Optional[str]:
    """Convert a free-text time range to "HH:MM-HH:MM" or return None.

    "9am to midnight" -> "09:00-00:00"; a trailing 00:00 is always midnight.
    With ``strict`` a bare "2 to 4" is ignored: one side needs am/pm, a
    minutes part or midnight/noon, or the range must follow "from".
    """
    if not text:
        return None

    lowered = text.lower()
    for match in _WINDOW_RE.finditer(lowered):
        if strict and not (
            _is_clock(match.group(1))
            or _is_clock(match.group(2))
            or re.search(r"\bfrom\s*$", lowered[:match.start()])
        ):
            continue
        try:
            start_h, start_m, start_mer = _clock(match.group(1))
            end_h, end_m, end_mer = _clock(match.group(2))
        except ValueError:
            return None
        break
    else:
        return None

    # "9 to 6" means 9am to 6pm
    if end_mer is None and 0 < end_h < start_h and end_h < 12:
        end_h += 12
    # "2 to 6pm" means 2pm to 6pm
    if start_mer is None and end_mer == "p" and start_h < 12 and start_h + 12 < end_h:
        start_h += 12

    return f"{start_h:02d}:{start_m:02d}-{end_h:02d}:{end_m:02d}"
