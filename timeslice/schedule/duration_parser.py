"""Parse human-readable run durations such as '30s', '2H' or '1M'."""

import re

from timeslice.models.duration import DurationSpec, DurationUnit

# Case-sensitive: 'm' is minutes, 'M' is a 30-day month
DURATION_PATTERN = re.compile(r"([0-9]+)([smHDWM])")

USAGE_HINT = "Use format like '30s', '30m', '2H', '1D', '1W', or '1M'"


class InvalidDurationFormat(ValueError):
    """Raised when a duration expression does not match the grammar."""

    def __init__(self, text: object):
        super().__init__(f"Invalid duration format {text!r}. {USAGE_HINT}")
        self.text = text


def parse_duration(text: str) -> DurationSpec:
    """Parse a duration expression into a DurationSpec.

    The whole string must be digits followed by exactly one unit symbol;
    surrounding whitespace is not stripped.
    """
    if not isinstance(text, str):
        raise InvalidDurationFormat(text)
    match = DURATION_PATTERN.fullmatch(text)
    if match is None:
        raise InvalidDurationFormat(text)
    return DurationSpec(magnitude=int(match.group(1)), unit=DurationUnit(match.group(2)))


def format_seconds(total_seconds: int) -> str:
    """Render a span of seconds compactly, e.g. 93784 -> '1d02h03m04s'."""
    days, rem = divmod(total_seconds, 86400)
    hours, rem = divmod(rem, 3600)
    minutes, seconds = divmod(rem, 60)
    if days:
        return f"{days}d{hours:02d}h{minutes:02d}m{seconds:02d}s"
    if hours:
        return f"{hours}h{minutes:02d}m{seconds:02d}s"
    if minutes:
        return f"{minutes}m{seconds:02d}s"
    return f"{seconds}s"
