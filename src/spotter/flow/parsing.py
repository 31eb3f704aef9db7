"""Input parsers for flow steps.

Each parser returns the typed value or raises InputError carrying the
re-prompt to show the user.
"""

import math
import re
from datetime import date

from spotter.core.errors import InputError

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_CLOCK_TIME = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_number(text: str, prompt: str = "Send a number.") -> float:
    """
    Parse a finite positive number.

    Args:
        text: Raw user input
        prompt: Re-prompt used when parsing fails

    Returns:
        Parsed value

    Raises:
        InputError: If the input is not a finite number greater than zero
    """
    try:
        value = float(text.strip())
    except ValueError:
        raise InputError(prompt, value=text) from None
    if not math.isfinite(value) or value <= 0:
        raise InputError(prompt, value=text)
    return value


def parse_whole_number(text: str, prompt: str = "Send a whole number.") -> int:
    """Parse a positive integer; `29.0` is accepted, `29.5` is not."""
    value = parse_number(text, prompt)
    if not value.is_integer():
        raise InputError(prompt, value=text)
    return int(value)


def parse_index(text: str, size: int, prompt: str = "Invalid number.") -> int:
    """
    Parse a 1-based position in a list of `size` items.

    Returns:
        Zero-based index
    """
    try:
        position = int(text.strip())
    except ValueError:
        raise InputError(prompt, value=text) from None
    if position < 1 or position > size:
        raise InputError(prompt, value=text, size=size)
    return position - 1


def parse_date(text: str, prompt: str = "Send date as YYYY-MM-DD") -> date:
    """Parse a strict calendar date in YYYY-MM-DD form."""
    candidate = text.strip()
    if not _ISO_DATE.match(candidate):
        raise InputError(prompt, value=text)
    try:
        return date.fromisoformat(candidate)
    except ValueError:
        raise InputError(prompt, value=text) from None


def parse_list(text: str) -> list[str]:
    """Split comma-separated tokens, trimming and dropping empty ones."""
    return [token.strip() for token in text.split(",") if token.strip()]


def normalize_clock_time(text: str) -> str | None:
    """Return `HH:MM` for a valid `H:MM`/`HH:MM` wall-clock time, else None."""
    match = _CLOCK_TIME.match(text.strip())
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return f"{hours:02d}:{minutes:02d}"


def parse_clock_time(text: str, prompt: str = "Time format HH:MM") -> str:
    """Parse a single wall-clock time."""
    normalized = normalize_clock_time(text)
    if normalized is None:
        raise InputError(prompt, value=text)
    return normalized


def parse_clock_times(
    text: str, prompt: str = "Send times separated by comma in HH:MM format."
) -> list[str]:
    """
    Parse a comma-separated list of times.

    Invalid tokens are dropped; duplicates collapse. At least one valid time
    is required.
    """
    times: list[str] = []
    for token in parse_list(text):
        normalized = normalize_clock_time(token)
        if normalized is not None and normalized not in times:
            times.append(normalized)
    if not times:
        raise InputError(prompt, value=text)
    return times
