"""
Formatting helpers for console output of the Space to Teams migration tool
"""

from __future__ import annotations

from space_migrator.constants import MESSAGE_SLEEP, MESSAGES_PER_SECOND


def format_number(number: int) -> str:
    """Format an integer with dots as thousands separators (``12.345``)."""
    return f"{number:,}".replace(",", ".")


def to_simple_time(seconds: float) -> str:
    """Render a duration in seconds as ``HH:MM:SS``."""
    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def estimate_import_duration(
    quantity: int,
    messages_per_second: int = MESSAGES_PER_SECOND,
    message_sleep: float = MESSAGE_SLEEP,
) -> str:
    """Estimate how long importing ``quantity`` messages will take.

    Each group of ``messages_per_second`` messages is followed by a
    ``message_sleep`` pause on the import side.

    Args:
        quantity: Number of messages to import.
        messages_per_second: Throttle group size.
        message_sleep: Pause after each throttle group, in seconds.

    Returns:
        The estimate formatted as ``HH:MM:SS``.
    """
    pauses = quantity // messages_per_second
    total_seconds = quantity / messages_per_second + pauses * message_sleep
    return to_simple_time(total_seconds)
