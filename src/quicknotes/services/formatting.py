"""
Formatting Helpers

Pure text and date helpers shared by the note schema, the store and the
API layer. No I/O, no state.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta

# Title shown for a note whose first line is empty
UNTITLED: str = "New Note"

# List preview shown when a note has no second line
EMPTY_PREVIEW: str = "No additional text"

WEEKDAYS: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


def derive_title(content: str) -> str:
    """Return the first line of ``content``, or the placeholder if it is empty."""
    first_line = content.split("\n", 1)[0]
    return first_line or UNTITLED


def preview_line(content: str) -> str:
    """Return the second line of ``content`` for list rows."""
    lines = content.split("\n")
    if len(lines) > 1 and lines[1]:
        return lines[1]
    return EMPTY_PREVIEW


def format_note_date(when: datetime, now: datetime) -> str:
    """
    Format a note timestamp for the note list.

    The day offset is the number of whole 24h periods between ``when``
    and ``now`` (not calendar days):

        0      -> "HH:MM"
        1      -> "Yesterday"
        2..6   -> weekday name
        else   -> "YYYY/MM/DD"

    Args:
        when: Note's updated_at.
        now: Reference time; must share ``when``'s timezone awareness.
    """
    diff_days = math.floor((now - when) / timedelta(days=1))
    if diff_days == 0:
        return when.strftime("%H:%M")
    if diff_days == 1:
        return "Yesterday"
    if 1 < diff_days < 7:
        return WEEKDAYS[when.weekday()]
    return when.strftime("%Y/%m/%d")


def format_full_date(when: datetime) -> str:
    """Long form used in the editor header, e.g. 'October 18, 2026 at 09:05'."""
    return f"{when.strftime('%B')} {when.day}, {when.year} at {when.strftime('%H:%M')}"
