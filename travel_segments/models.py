"""Data models for the segment-based journey representation."""

from __future__ import annotations
import random
import string
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Mapping, Union

from travel_segments.config import SEGMENT_ID_PREFIX, SEGMENT_ID_SUFFIX_LEN


class SegmentType(str, Enum):
    FLIGHT = "flight"
    TRAIN = "train"
    BUS = "bus"
    FERRY = "ferry"
    TAXI = "taxi"
    PRIVATE_TRANSFER = "private_transfer"
    PRIVATE_CAR = "private_car"  # legacy taxi-item transfer type
    SHUTTLE = "shuttle"
    CAR_RENTAL = "car_rental"
    OTHER = "other"

    @classmethod
    def parse(cls, raw: Any) -> "SegmentType":
        """Read a stored type string; anything unrecognised becomes OTHER."""
        if isinstance(raw, SegmentType):
            return raw
        try:
            return cls(str(raw or "").strip().lower())
        except ValueError:
            return cls.OTHER


class SegmentRole(str, Enum):
    MAIN = "main"
    TRANSFER = "transfer"
    ADDITIONAL = "additional"
    UNKNOWN = "unknown"  # stored before roles existed; see resolve_role()

    @classmethod
    def parse(cls, raw: Any) -> "SegmentRole":
        if isinstance(raw, SegmentRole):
            return raw
        try:
            return cls(str(raw or "").strip().lower())
        except ValueError:
            return cls.UNKNOWN


# Ground transport that the legacy taxi arrays can hold
ROAD_TYPES = frozenset({
    SegmentType.TAXI,
    SegmentType.PRIVATE_CAR,
    SegmentType.SHUTTLE,
    SegmentType.BUS,
    SegmentType.OTHER,
})

RAIL_TYPES = frozenset({SegmentType.TRAIN})

TRANSFER_CAPABLE_TYPES = ROAD_TYPES | RAIL_TYPES


# camelCase record key -> attribute name
_KEY_TO_ATTR = {
    "id": "id",
    "role": "role",
    "type": "type",
    "fromLocation": "from_location",
    "toLocation": "to_location",
    "date": "date",
    "departureTime": "departure_time",
    "arrivalTime": "arrival_time",
    "flightNumber": "flight_number",
    "airline": "airline",
    "company": "company",
    "bookingReference": "booking_reference",
    "confirmationNumber": "confirmation_number",
    "contactDetails": "contact_details",
    "price": "price",
    "notes": "notes",
    "passengersSeats": "passengers_seats",
}

_REQUIRED_KEYS = ("id", "type", "fromLocation", "toLocation", "date")


def generate_segment_id() -> str:
    """Time prefix plus a short random base36 suffix. Unique enough per session."""
    alphabet = string.digits + string.ascii_lowercase
    suffix = "".join(random.choice(alphabet) for _ in range(SEGMENT_ID_SUFFIX_LEN))
    return f"{SEGMENT_ID_PREFIX}-{int(time.time() * 1000)}-{suffix}"


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


@dataclass
class TravelSegment:
    """One leg of a journey, whatever the mode of transport."""
    type: SegmentType
    from_location: str = ""
    to_location: str = ""
    date: str = ""
    id: str = field(default_factory=generate_segment_id)
    role: SegmentRole = SegmentRole.UNKNOWN
    departure_time: str = ""
    arrival_time: str = ""
    # Flight only
    flight_number: str = ""
    airline: str = ""
    passengers_seats: str = ""
    # General
    company: str = ""
    booking_reference: str = ""
    confirmation_number: str = ""
    contact_details: str = ""
    price: str = ""
    notes: str = ""
    # Stored keys this model doesn't know about, written back untouched
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TravelSegment":
        """Build a segment from its stored camelCase form."""
        kwargs: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, value in data.items():
            attr = _KEY_TO_ATTR.get(key)
            if attr is None:
                extra[key] = value
            elif attr == "type":
                kwargs[attr] = SegmentType.parse(value)
            elif attr == "role":
                kwargs[attr] = SegmentRole.parse(value)
            elif attr == "id":
                if value:
                    kwargs[attr] = _text(value)
            else:
                kwargs[attr] = _text(value)
        kwargs.setdefault("type", SegmentType.OTHER)
        return cls(extra=extra, **kwargs)

    @classmethod
    def coerce(cls, value: Union["TravelSegment", Mapping[str, Any]]) -> "TravelSegment":
        if isinstance(value, TravelSegment):
            return value
        return cls.from_dict(value)

    def to_dict(self) -> Dict[str, Any]:
        """Stored camelCase form. Required keys and role always; empty optionals omitted."""
        out: Dict[str, Any] = dict(self.extra)
        for key, attr in _KEY_TO_ATTR.items():
            value = getattr(self, attr)
            if isinstance(value, Enum):
                value = value.value
            if key in _REQUIRED_KEYS or key == "role" or value:
                out[key] = value
        return out

    def with_role(self, role: SegmentRole) -> "TravelSegment":
        return replace(self, role=role, extra=dict(self.extra))


def resolve_role(segment: TravelSegment) -> SegmentRole:
    """Known role for a segment; UNKNOWN is inferred from the transport type."""
    if segment.role != SegmentRole.UNKNOWN:
        return segment.role
    if segment.type == SegmentType.FLIGHT:
        return SegmentRole.MAIN
    if segment.type in TRANSFER_CAPABLE_TYPES:
        return SegmentRole.TRANSFER
    return SegmentRole.ADDITIONAL
