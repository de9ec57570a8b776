"""Tagged metadata inside free-text notes, and layover arithmetic.

A tag is written at the front of the notes as "<tag><value>", followed by
" | <user notes>" when there are any. Values must not contain "|".
"""

from datetime import datetime
from typing import Optional, Tuple

from dateutil import parser as dateutil_parser

from travel_segments.config import LAYOVER_TAG, PAYMENT_TAG, TAG_SEPARATOR


def encode_tag(notes: str, tag: str, value: str) -> str:
    notes = notes or ""
    if not value:
        return notes
    if notes:
        return f"{tag}{value}{TAG_SEPARATOR}{notes}"
    return f"{tag}{value}"


def _split_tag(notes: str, tag: str) -> Optional[Tuple[str, str, str]]:
    """(text before tag, tag value, text after tag), or None if the tag is absent."""
    if not notes:
        return None
    idx = notes.find(tag)
    if idx == -1:
        return None
    body = notes[idx + len(tag):]
    pipe = body.find("|")
    if pipe == -1:
        value, after = body, ""
    else:
        value, after = body[:pipe], body[pipe + 1:]
        # the separator's own spaces
        if value.endswith(" "):
            value = value[:-1]
        if after.startswith(" "):
            after = after[1:]
    before = notes[:idx]
    if before.endswith(TAG_SEPARATOR):
        before = before[:-len(TAG_SEPARATOR)]
    return before, value, after


def decode_tag(notes: str, tag: str) -> str:
    parts = _split_tag(notes, tag)
    return parts[1] if parts else ""


def strip_tag(notes: str, tag: str) -> str:
    parts = _split_tag(notes, tag)
    if parts is None:
        return notes or ""
    before, _, after = parts
    if before and after:
        return f"{before}{TAG_SEPARATOR}{after}"
    return before or after


def encode_layover(notes: str, duration: str) -> str:
    return encode_tag(notes, LAYOVER_TAG, duration)


def decode_layover(notes: str) -> str:
    return decode_tag(notes, LAYOVER_TAG)


def strip_layover(notes: str) -> str:
    return strip_tag(notes, LAYOVER_TAG)


def encode_payment(notes: str, status: str) -> str:
    return encode_tag(notes, PAYMENT_TAG, status)


def decode_payment(notes: str) -> str:
    return decode_tag(notes, PAYMENT_TAG)


def strip_payment(notes: str) -> str:
    return strip_tag(notes, PAYMENT_TAG)


def _parse_clock(raw: str) -> Optional[datetime]:
    if not raw or not raw.strip():
        return None
    try:
        return dateutil_parser.parse(raw.strip(), default=datetime(2000, 1, 1))
    except (ValueError, OverflowError):
        return None


def calculate_layover(arrival_time: str, departure_time: str) -> str:
    """Time on the ground between two legs, e.g. "2h 30min". Wraps past midnight."""
    arrival = _parse_clock(arrival_time)
    departure = _parse_clock(departure_time)
    if arrival is None or departure is None:
        return ""

    minutes = (departure.hour * 60 + departure.minute) - (arrival.hour * 60 + arrival.minute)
    if minutes < 0:
        minutes += 24 * 60

    hours, mins = divmod(minutes, 60)
    if hours == 0:
        return f"{mins}min"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}min"
