"""TravelSegment list → legacy journey record.

The result always carries every legacy field, because readers that predate
segments index straight into the record. Transfers are assigned to the
departure or arrival slot by their position relative to the first main
segment of the input list. Segments with no legacy field of their own go to
additionalSegments tagged with their slot and position, so a reload puts them
back where they were.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from travel_segments.legacy.schema import (
    OUTBOUND_LAYOUT,
    PLACEMENT_ORDER_KEY,
    PLACEMENT_SLOT_KEY,
    RETURN_LAYOUT,
    SLOT_ARRIVAL,
    SLOT_DEPARTURE,
    SLOT_MAIN,
    TRANSFER_TYPE_TAXI,
    TRANSFER_TYPE_TRAIN,
    JourneyLayout,
    TransferGroup,
    empty_record,
)
from travel_segments.migrate.notes import (
    decode_layover,
    decode_payment,
    strip_layover,
    strip_payment,
)
from travel_segments.models import (
    TRANSFER_CAPABLE_TYPES,
    SegmentRole,
    SegmentType,
    TravelSegment,
    resolve_role,
)

_LOGGER = logging.getLogger(__name__)

SegmentLike = Union[TravelSegment, Mapping[str, Any]]


def _coerce_all(segments: Optional[Iterable[SegmentLike]]) -> List[TravelSegment]:
    coerced = []
    for value in segments or []:
        if isinstance(value, (TravelSegment, Mapping)):
            coerced.append(TravelSegment.coerce(value))
        else:
            _LOGGER.debug("Skipping non-segment value: %r", value)
    return coerced


def _is_departure_side(segment: TravelSegment, index: int, first_main: Optional[int]) -> bool:
    if first_main is not None:
        return index < first_main
    # No main segment to anchor on: fall back to the location text.
    return "airport" in segment.to_location.lower()


# ---------------------------------------------------------------------------
# Flights
# ---------------------------------------------------------------------------

def _leg(segment: TravelSegment, index: int) -> Dict[str, Any]:
    return {
        "departureAirport": segment.from_location,
        "departureTime": segment.departure_time,
        "arrivalAirport": segment.to_location,
        "arrivalTime": segment.arrival_time,
        "id": segment.id,
        "flightNumber": segment.flight_number,
        # nothing precedes the first leg
        "layoverDuration": decode_layover(segment.notes) if index else "",
    }


def _flight_fields(flights: List[TravelSegment]) -> Dict[str, Any]:
    if not flights:
        return {}
    first, last = flights[0], flights[-1]
    multi_leg = len(flights) > 1
    return {
        "flightNumber": first.flight_number,
        "flightDate": first.date,
        "departureAirport": first.from_location,
        "arrivalAirport": last.to_location,
        "departureTime": first.departure_time,
        "arrivalTime": last.arrival_time,
        "airline": first.airline,
        "bookingReference": first.booking_reference,
        "contact": first.contact_details,
        "passengersSeats": first.passengers_seats,
        "thingsToRemember": strip_layover(first.notes),
        "isMultiLeg": 1 if multi_leg else 0,
        "legs": [_leg(f, i) for i, f in enumerate(flights)] if multi_leg else [],
    }


# ---------------------------------------------------------------------------
# Transfers
# ---------------------------------------------------------------------------

def _taxi_item(segment: TravelSegment, order: int) -> Dict[str, Any]:
    return {
        "id": segment.id,
        "order": order,
        "transferType": segment.type.value,
        "company": segment.company,
        "contact": segment.contact_details,
        "vehicleRegistration": segment.confirmation_number,
        "collectionTime": segment.departure_time,
        "pickupLocation": segment.from_location,
        "dropoffLocation": segment.to_location,
        "paymentStatus": decode_payment(segment.notes),
        "notes": strip_payment(segment.notes),
    }


def _train_item(segment: TravelSegment, order: int) -> Dict[str, Any]:
    return {
        "id": segment.id,
        "order": order,
        "departingStation": segment.from_location,
        "arrivalStation": segment.to_location,
        "departureTime": segment.departure_time,
        "provider": segment.company,
        "bookingRef": segment.booking_reference,
        "paymentStatus": decode_payment(segment.notes),
        "notes": strip_payment(segment.notes),
    }


def _group_fields(group: TransferGroup, transfers: List[Tuple[int, TravelSegment]]) -> Dict[str, Any]:
    taxis: List[Dict[str, Any]] = []
    trains: List[Dict[str, Any]] = []
    for order, segment in transfers:
        if segment.type == SegmentType.TRAIN:
            trains.append(_train_item(segment, order))
        else:
            taxis.append(_taxi_item(segment, order))

    fields: Dict[str, Any] = {group.taxis_key: taxis, group.trains_key: trains}

    # Singular fields mirror the first item for readers that know only one transfer.
    if trains:
        train = trains[0]
        fields[group.type_key] = TRANSFER_TYPE_TRAIN
        fields[group.key("TrainDepartingStation")] = train["departingStation"]
        fields[group.key("TrainArrivalStation")] = train["arrivalStation"]
        fields[group.key("TrainDepartureTime")] = train["departureTime"]
        fields[group.key("TrainProvider")] = train["provider"]
        fields[group.key("TrainBookingRef")] = train["bookingRef"]
        fields[group.key("TrainPaymentStatus")] = train["paymentStatus"]
        fields[group.key("TrainNotes")] = train["notes"]
    if taxis:
        taxi = taxis[0]
        fields[group.type_key] = TRANSFER_TYPE_TAXI
        fields[group.taxi_booked_key] = 1
        fields[group.key("Company")] = taxi["company"]
        fields[group.key("Contact")] = taxi["contact"]
        fields[group.key("CollectionTime")] = taxi["collectionTime"]
        fields[group.key("PickupLocation")] = taxi["pickupLocation"]
        fields[group.key("PaymentStatus")] = taxi["paymentStatus"]
    return fields


def _placed(segment: TravelSegment, role: SegmentRole, slot: str, order: int) -> Dict[str, Any]:
    stored = segment.with_role(role).to_dict()
    stored[PLACEMENT_SLOT_KEY] = slot
    stored[PLACEMENT_ORDER_KEY] = order
    return stored


def journey_from_segments(segments: Optional[Iterable[SegmentLike]], layout: JourneyLayout) -> Dict[str, Any]:
    items = _coerce_all(segments)
    roles = [resolve_role(s) for s in items]
    first_main = next((i for i, role in enumerate(roles) if role == SegmentRole.MAIN), None)

    flights: List[TravelSegment] = []
    departure: List[Tuple[int, TravelSegment]] = []
    arrival: List[Tuple[int, TravelSegment]] = []
    additional: List[Dict[str, Any]] = []
    # next free position in each slot
    positions = {SLOT_DEPARTURE: 0, SLOT_MAIN: 0, SLOT_ARRIVAL: 0}

    for index, (segment, role) in enumerate(zip(items, roles)):
        if role == SegmentRole.MAIN:
            order = positions[SLOT_MAIN]
            positions[SLOT_MAIN] += 1
            if segment.type == SegmentType.FLIGHT:
                flights.append(segment)
            else:
                additional.append(_placed(segment, role, SLOT_MAIN, order))
        elif role == SegmentRole.TRANSFER:
            slot = SLOT_DEPARTURE if _is_departure_side(segment, index, first_main) else SLOT_ARRIVAL
            order = positions[slot]
            positions[slot] += 1
            if segment.type in TRANSFER_CAPABLE_TYPES:
                (departure if slot == SLOT_DEPARTURE else arrival).append((order, segment))
            else:
                # no legacy field holds this type
                additional.append(_placed(segment, role, slot, order))
        else:
            stored = segment.with_role(role).to_dict()
            # additional-role segments load back at the end, wherever they came from
            if stored.pop(PLACEMENT_SLOT_KEY, None) is not None:
                stored.pop(PLACEMENT_ORDER_KEY, None)
            additional.append(stored)

    record = empty_record(layout)
    record.update(_flight_fields(flights))
    record.update(_group_fields(layout.departure, departure))
    record.update(_group_fields(layout.arrival, arrival))
    record["additionalSegments"] = additional

    _LOGGER.debug(
        "%s <- %d flights, %d/%d transfers, %d additional",
        layout.name, len(flights), len(departure), len(arrival), len(additional),
    )
    return record


def segments_to_outbound(segments: Optional[Iterable[SegmentLike]]) -> Dict[str, Any]:
    """Flatten an outbound segment list into a complete legacy outboundTravel record."""
    return journey_from_segments(segments, OUTBOUND_LAYOUT)


def segments_to_return(segments: Optional[Iterable[SegmentLike]]) -> Dict[str, Any]:
    """Flatten a return segment list into a complete legacy returnTravel record."""
    return journey_from_segments(segments, RETURN_LAYOUT)
