"""
Duration encoding for connection strings and configuration values.
"""

import re
from datetime import timedelta

from ..exceptions import ConfigurationError
from ..models.enums import DurationStyle

_SECOND = timedelta(seconds=1)
_MILLISECOND = timedelta(milliseconds=1)
_MICROSECOND = timedelta(microseconds=1)

_BARE_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")
_TOKEN_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(h|ms|us|µs|m|s)")
_UNIT_MICROSECONDS = {
    "h": 3_600_000_000,
    "m": 60_000_000,
    "s": 1_000_000,
    "ms": 1_000,
    "us": 1,
    "µs": 1,
}


def format_duration(value: timedelta, style: DurationStyle) -> str:
    """
    Render a duration in one of the connection-string encodings.

    Integer styles truncate any remainder below the unit; they never round.

    Args:
        value: Duration to render
        style: Target encoding

    Returns:
        str: e.g. "5" (SECONDS), "5000" (MILLISECONDS), "5s" (TOKEN)
    """
    if style is DurationStyle.SECONDS:
        return str(value // _SECOND)
    if style is DurationStyle.MILLISECONDS:
        return str(value // _MILLISECOND)
    return _format_token(value)


def _format_token(value: timedelta) -> str:
    total = value // _MICROSECOND
    if total == 0:
        return "0s"
    sign = "-" if total < 0 else ""
    total = abs(total)

    if total < 1_000:
        return f"{sign}{total}µs"
    if total < 1_000_000:
        return f"{sign}{_decimal(total, 1_000)}ms"

    hours, rest = divmod(total, 3_600_000_000)
    minutes, rest = divmod(rest, 60_000_000)
    text = f"{_decimal(rest, 1_000_000)}s"
    if hours or minutes:
        text = f"{minutes}m{text}"
    if hours:
        text = f"{hours}h{text}"
    return sign + text


def _decimal(amount: int, unit: int) -> str:
    whole, fraction = divmod(amount, unit)
    if not fraction:
        return str(whole)
    width = len(str(unit)) - 1
    digits = str(fraction).rjust(width, "0").rstrip("0")
    return f"{whole}.{digits}"


def parse_duration(text: str) -> timedelta:
    """
    Parse a duration token such as "1m30s", "250ms" or a bare number of seconds.

    Raises:
        ConfigurationError: If the text is not a valid duration
    """
    raw = text.strip()
    if not raw:
        raise ConfigurationError("empty duration")

    sign = 1
    body = raw
    if body[0] in "+-":
        sign = -1 if body[0] == "-" else 1
        body = body[1:]

    if _BARE_NUMBER.fullmatch(body):
        return sign * timedelta(seconds=float(body))

    position = 0
    microseconds = 0.0
    for match in _TOKEN_PART.finditer(body):
        if match.start() != position:
            break
        number, unit = match.groups()
        microseconds += float(number) * _UNIT_MICROSECONDS[unit]
        position = match.end()

    if position == 0 or position != len(body):
        raise ConfigurationError(f"invalid duration {text!r}")
    return sign * timedelta(microseconds=microseconds)
