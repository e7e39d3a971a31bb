"""Timestamp parsing and formatting.

Timestamps follow a fixed RFC3339 profile: a full date, an uppercase
"T", a time of day with optional fractional seconds and a mandatory
zone offset ("Z" or "+hh:mm"/"-hh:mm"). Fractions beyond microseconds
are truncated.
"""

__all__ = ["parse_time", "format_time", "unix_nanos", "duration_nanos"]

import datetime

import lark

from . import _error, _parse


EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)


def parse_time(text):
    """Parse an RFC3339 timestamp.

    Args:
        text: (str) Timestamp text like "2012-05-23T18:30:00.000-05:00"

    Returns:
        (datetime.datetime) Timezone aware timestamp

    Raises:
        InvalidTimeError: If the text is not in the timestamp profile or
            names an impossible date, time or offset
    """
    parser = _parse._lark_parser("rfc3339")
    try:
        tree = parser.parse(text)
    except lark.exceptions.LarkError as err:
        raise _error.InvalidTimeError(f"not an RFC3339 timestamp: {text!r}") from err

    date, clock, offset = tree.children
    year, month, day = (int(token) for token in date.children)
    hour, minute, second = (int(token) for token in clock.children[:3])
    micro = 0
    if len(clock.children) == 4:
        digits = str(clock.children[3])[1:7]
        micro = int(digits.ljust(6, "0"))

    try:
        zone = _zone(offset)
        return datetime.datetime(year, month, day, hour, minute, second, micro, tzinfo=zone)
    except ValueError as err:
        raise _error.InvalidTimeError(f"invalid timestamp {text!r}: {err}") from err


def _zone(offset):
    """Build the timezone for a parsed offset node."""
    if offset.data == "utc":
        return datetime.timezone.utc
    hours, minutes = (int(token) for token in offset.children)
    if minutes >= 60:
        raise ValueError(f"offset minutes out of range: {minutes}")
    shift = datetime.timedelta(hours=hours, minutes=minutes)
    if offset.data == "west":
        shift = -shift
    return datetime.timezone(shift)


def format_time(moment):
    """Format a timestamp in the RFC3339 profile.

    Naive timestamps are treated as UTC.

    Args:
        moment: (datetime.datetime) Timestamp

    Returns:
        (str) Formatted timestamp, parseable with `parse_time`
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=datetime.timezone.utc)
    text = moment.isoformat()
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


def unix_nanos(moment):
    """Nanoseconds between the Unix epoch and a timestamp.

    Args:
        moment: (datetime.datetime) Timestamp, naive timestamps are UTC

    Returns:
        (int) Signed nanosecond count
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=datetime.timezone.utc)
    return (moment - EPOCH) // datetime.timedelta(microseconds=1) * 1000


def duration_nanos(delta):
    """(int) Length of a timedelta in nanoseconds."""
    return delta // datetime.timedelta(microseconds=1) * 1000
