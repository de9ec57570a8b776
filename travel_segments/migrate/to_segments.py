"""Legacy journey record → ordered TravelSegment list.

Output order is always: transfers to the departure point, main segment(s),
transfers to the destination (accommodation or home), then the remaining
additional segments. Additional segments saved with a slot and order go back
into that slot at that position. Malformed parts of the record are
skipped; nothing here raises on bad data.
"""

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from travel_segments.legacy.details import (
    merge_unique_transfers,
    normalize_taxi_transfer,
    normalize_train_transfer,
    parse_details_array,
    split_transfer_details,
)
from travel_segments.legacy.schema import (
    FLIGHT_TEXT_FIELDS,
    OUTBOUND_LAYOUT,
    PLACEMENT_ORDER_KEY,
    PLACEMENT_SLOT_KEY,
    PLACEMENT_SLOTS,
    RETURN_LAYOUT,
    SLOT_ARRIVAL,
    SLOT_DEPARTURE,
    SLOT_MAIN,
    TAXI_SCALAR_SUFFIXES,
    TRAIN_SCALAR_SUFFIXES,
    TRANSFER_TYPE_NONE,
    TRANSFER_TYPE_TAXI,
    TRANSFER_TYPE_TRAIN,
    JourneyLayout,
    TransferGroup,
)
from travel_segments.migrate.notes import encode_layover, encode_payment
from travel_segments.models import (
    SegmentRole,
    SegmentType,
    TravelSegment,
    generate_segment_id,
)

_LOGGER = logging.getLogger(__name__)


def _text(record: Mapping[str, Any], key: str) -> str:
    value = record.get(key)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _flag(value: Any) -> bool:
    """Stored booleans show up as True, 1, "1" or "true"."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


def _as_record(value: Any) -> Optional[Mapping[str, Any]]:
    if isinstance(value, Mapping):
        return value
    if isinstance(value, str) and value.strip():
        try:
            parsed = json.loads(value)
        except (json.JSONDecodeError, ValueError):
            _LOGGER.debug("Legacy travel record is not valid JSON")
            return None
        return parsed if isinstance(parsed, Mapping) else None
    return None


# ---------------------------------------------------------------------------
# Transfers
# ---------------------------------------------------------------------------

def resolve_transfer_type(legacy: Mapping[str, Any], group: TransferGroup) -> str:
    """The group's discriminator, migrating the old TaxiBooked flag."""
    transfer_type = str(legacy.get(group.type_key) or TRANSFER_TYPE_NONE).lower()
    if transfer_type == TRANSFER_TYPE_NONE and legacy.get(group.taxi_booked_key) == 1:
        return TRANSFER_TYPE_TAXI
    return transfer_type


def _segment_id(item: Mapping[str, Any]) -> str:
    return item.get("id") or generate_segment_id()


def _taxi_item_segment(item: Dict[str, Any], flight_date: str) -> TravelSegment:
    return TravelSegment(
        id=_segment_id(item),
        role=SegmentRole.TRANSFER,
        type=SegmentType.parse(item["transferType"]),
        from_location=item["pickupLocation"],
        to_location=item["dropoffLocation"],
        date=flight_date,
        departure_time=item["collectionTime"],
        company=item["company"],
        contact_details=item["contact"],
        confirmation_number=item["vehicleRegistration"],
        notes=encode_payment(item["notes"], item["paymentStatus"]),
    )


def _train_item_segment(item: Dict[str, Any], flight_date: str) -> TravelSegment:
    return TravelSegment(
        id=_segment_id(item),
        role=SegmentRole.TRANSFER,
        type=SegmentType.TRAIN,
        from_location=item["departingStation"],
        to_location=item["arrivalStation"],
        date=flight_date,
        departure_time=item["departureTime"],
        company=item["provider"],
        booking_reference=item["bookingRef"],
        notes=encode_payment(item["notes"], item["paymentStatus"]),
    )


def _scalar_taxi_segment(legacy: Mapping[str, Any], group: TransferGroup) -> Optional[TravelSegment]:
    populated = any(_text(legacy, group.key(s)) for s in TAXI_SCALAR_SUFFIXES)
    if not populated and not _flag(legacy.get(group.taxi_booked_key)):
        return None

    pickup = _text(legacy, group.key("PickupLocation"))
    if group.before_main:
        from_location = pickup or group.taxi_from
        to_location = _text(legacy, "departureAirport") or group.taxi_to
    else:
        from_location = pickup or _text(legacy, "arrivalAirport") or group.taxi_from
        to_location = group.taxi_to

    return TravelSegment(
        role=SegmentRole.TRANSFER,
        type=SegmentType.TAXI,
        from_location=from_location,
        to_location=to_location,
        date=_text(legacy, "flightDate"),
        departure_time=_text(legacy, group.key("CollectionTime")),
        company=_text(legacy, group.key("Company")),
        contact_details=_text(legacy, group.key("Contact")),
        notes=encode_payment("", _text(legacy, group.key("PaymentStatus"))),
    )


def _scalar_train_segment(legacy: Mapping[str, Any], group: TransferGroup) -> Optional[TravelSegment]:
    if not any(_text(legacy, group.key(s)) for s in TRAIN_SCALAR_SUFFIXES):
        return None

    arrival_station = _text(legacy, group.key("TrainArrivalStation"))
    if not arrival_station and group.before_main:
        arrival_station = _text(legacy, "departureAirport")

    return TravelSegment(
        role=SegmentRole.TRANSFER,
        type=SegmentType.TRAIN,
        from_location=_text(legacy, group.key("TrainDepartingStation")) or group.train_from,
        to_location=arrival_station or group.train_to,
        date=_text(legacy, "flightDate"),
        departure_time=_text(legacy, group.key("TrainDepartureTime")),
        company=_text(legacy, group.key("TrainProvider")),
        booking_reference=_text(legacy, group.key("TrainBookingRef")),
        notes=encode_payment(
            _text(legacy, group.key("TrainNotes")),
            _text(legacy, group.key("TrainPaymentStatus")),
        ),
    )


Entry = Tuple[Optional[int], TravelSegment]


def _sort_by_order(entries: List[Entry]) -> List[TravelSegment]:
    # Stable: entries without an order keep their position after ordered ones.
    ranked = sorted(
        entries,
        key=lambda e: (0, e[0]) if e[0] is not None else (1, 0),
    )
    return [segment for _, segment in ranked]


def _transfer_entries(legacy: Mapping[str, Any], group: TransferGroup) -> List[Entry]:
    """(order, segment) pairs for one transfer group; order is None when not stored."""
    flight_date = _text(legacy, "flightDate")
    road_details, rail_details = split_transfer_details(legacy.get(group.details_key))

    taxis = merge_unique_transfers(
        [t for t in parse_details_array(legacy.get(group.taxis_key)) if t],
        road_details,
    )
    trains = merge_unique_transfers(
        [t for t in parse_details_array(legacy.get(group.trains_key)) if t],
        rail_details,
    )

    if taxis or trains:
        entries = []
        for raw in taxis:
            if not isinstance(raw, dict):
                _LOGGER.debug("Skipping non-object taxi transfer in %s", group.taxis_key)
                continue
            item = normalize_taxi_transfer(raw)
            entries.append((item.get("order"), _taxi_item_segment(item, flight_date)))
        for raw in trains:
            if not isinstance(raw, dict):
                _LOGGER.debug("Skipping non-object train transfer in %s", group.trains_key)
                continue
            item = normalize_train_transfer(raw)
            entries.append((item.get("order"), _train_item_segment(item, flight_date)))
        return entries

    transfer_type = resolve_transfer_type(legacy, group)
    if transfer_type == TRANSFER_TYPE_TAXI:
        segment = _scalar_taxi_segment(legacy, group)
    elif transfer_type == TRANSFER_TYPE_TRAIN:
        segment = _scalar_train_segment(legacy, group)
    else:
        segment = None
    return [(None, segment)] if segment else []


# ---------------------------------------------------------------------------
# Main flight(s)
# ---------------------------------------------------------------------------

def _leg_segments(legacy: Mapping[str, Any], legs: List[Dict[str, Any]]) -> List[TravelSegment]:
    shared = dict(
        date=_text(legacy, "flightDate"),
        airline=_text(legacy, "airline"),
        booking_reference=_text(legacy, "bookingReference"),
        contact_details=_text(legacy, "contact"),
    )
    segments = []
    for index, leg in enumerate(legs):
        flight_number = _text(leg, "flightNumber")
        if index == 0:
            notes = _text(legacy, "thingsToRemember")
            seats = _text(legacy, "passengersSeats")
            flight_number = flight_number or _text(legacy, "flightNumber")
        else:
            notes = encode_layover("", _text(leg, "layoverDuration"))
            seats = ""
        segments.append(TravelSegment(
            id=_text(leg, "id") or generate_segment_id(),
            role=SegmentRole.MAIN,
            type=SegmentType.FLIGHT,
            from_location=_text(leg, "departureAirport"),
            to_location=_text(leg, "arrivalAirport"),
            departure_time=_text(leg, "departureTime"),
            arrival_time=_text(leg, "arrivalTime"),
            flight_number=flight_number,
            passengers_seats=seats,
            notes=notes,
            **shared,
        ))
    return segments


def _main_segments(legacy: Mapping[str, Any]) -> List[TravelSegment]:
    legs = [leg for leg in parse_details_array(legacy.get("legs")) if isinstance(leg, dict)]
    if _flag(legacy.get("isMultiLeg")) and legs:
        return _leg_segments(legacy, legs)

    if not any(_text(legacy, name) for name in FLIGHT_TEXT_FIELDS):
        return []

    return [TravelSegment(
        role=SegmentRole.MAIN,
        type=SegmentType.FLIGHT,
        from_location=_text(legacy, "departureAirport"),
        to_location=_text(legacy, "arrivalAirport"),
        date=_text(legacy, "flightDate"),
        departure_time=_text(legacy, "departureTime"),
        arrival_time=_text(legacy, "arrivalTime"),
        flight_number=_text(legacy, "flightNumber"),
        airline=_text(legacy, "airline"),
        booking_reference=_text(legacy, "bookingReference"),
        contact_details=_text(legacy, "contact"),
        passengers_seats=_text(legacy, "passengersSeats"),
        notes=_text(legacy, "thingsToRemember"),
    )]


# ---------------------------------------------------------------------------
# Additional segments
# ---------------------------------------------------------------------------

def _placement(raw: Mapping[str, Any]) -> Tuple[Optional[str], Optional[int]]:
    slot = raw.get(PLACEMENT_SLOT_KEY)
    order = raw.get(PLACEMENT_ORDER_KEY)
    if slot not in PLACEMENT_SLOTS:
        return None, None
    if not isinstance(order, int) or isinstance(order, bool) or order < 0:
        _LOGGER.debug("Ignoring bad placement order %r on additional segment", order)
        return None, None
    return slot, order


def _additional_segments(
    legacy: Mapping[str, Any],
) -> Tuple[Dict[str, List[Entry]], List[TravelSegment]]:
    """Split additionalSegments into placed entries per slot and the rest."""
    placed: Dict[str, List[Entry]] = {slot: [] for slot in PLACEMENT_SLOTS}
    rest: List[TravelSegment] = []
    for raw in parse_details_array(legacy.get("additionalSegments")):
        if not isinstance(raw, Mapping):
            _LOGGER.debug("Skipping non-object additional segment: %r", raw)
            continue
        slot, order = _placement(raw)
        if slot is not None:
            raw = {k: v for k, v in raw.items() if k not in (PLACEMENT_SLOT_KEY, PLACEMENT_ORDER_KEY)}
        segment = TravelSegment.from_dict(raw)
        if segment.role == SegmentRole.UNKNOWN:
            segment.role = SegmentRole.ADDITIONAL
        if slot is None:
            rest.append(segment)
        else:
            placed[slot].append((order, segment))
    return placed, rest


def _insert_placed(segments: List[TravelSegment], entries: List[Entry]) -> List[TravelSegment]:
    # Orders are final positions, so inserting in ascending order rebuilds the list.
    merged = list(segments)
    for order, segment in sorted(entries, key=lambda e: e[0]):
        merged.insert(min(order, len(merged)), segment)
    return merged


def journey_to_segments(legacy: Any, layout: JourneyLayout) -> List[TravelSegment]:
    record = _as_record(legacy)
    if record is None:
        return []

    placed, rest = _additional_segments(record)
    mains = _insert_placed(_main_segments(record), placed[SLOT_MAIN])
    # Non-flight main transport has to stay between the two transfer slots.
    mains.extend(s for s in rest if s.role == SegmentRole.MAIN)

    segments: List[TravelSegment] = []
    segments.extend(_sort_by_order(_transfer_entries(record, layout.departure) + placed[SLOT_DEPARTURE]))
    segments.extend(mains)
    segments.extend(_sort_by_order(_transfer_entries(record, layout.arrival) + placed[SLOT_ARRIVAL]))
    segments.extend(s for s in rest if s.role != SegmentRole.MAIN)

    _LOGGER.debug(
        "%s -> %d segments (%s)",
        layout.name,
        len(segments),
        ", ".join(s.type.value for s in segments),
    )
    return segments


def outbound_to_segments(outbound: Any) -> List[TravelSegment]:
    """Convert a legacy outboundTravel record into an ordered segment list."""
    return journey_to_segments(outbound, OUTBOUND_LAYOUT)


def return_to_segments(return_travel: Any) -> List[TravelSegment]:
    """Convert a legacy returnTravel record into an ordered segment list."""
    return journey_to_segments(return_travel, RETURN_LAYOUT)
