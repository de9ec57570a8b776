"""Field layout of the legacy outboundTravel / returnTravel records.

The key names are the storage contract with the persistence layer and with
readers that predate segments, so they are spelled out here once and every
builder goes through this module.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from travel_segments.config import (
    PLACEHOLDER_ACCOMMODATION,
    PLACEHOLDER_AIRPORT,
    PLACEHOLDER_HOME,
    PLACEHOLDER_HOME_OR_HOTEL,
    PLACEHOLDER_STATION,
)

FLIGHT_TEXT_FIELDS = (
    "flightNumber",
    "flightDate",
    "departureAirport",
    "arrivalAirport",
    "departureTime",
    "arrivalTime",
    "airline",
    "bookingReference",
    "contact",
    "passengersSeats",
    "thingsToRemember",
)

# Suffixes appended to a transfer group prefix, e.g. "transferToAirport" + "Company"
TAXI_SCALAR_SUFFIXES = (
    "Company",
    "Contact",
    "CollectionTime",
    "PickupLocation",
    "PaymentStatus",
)

TRAIN_SCALAR_SUFFIXES = (
    "TrainDepartingStation",
    "TrainArrivalStation",
    "TrainDepartureTime",
    "TrainProvider",
    "TrainBookingRef",
    "TrainPaymentStatus",
    "TrainNotes",
)

TRANSFER_TYPE_NONE = "none"
TRANSFER_TYPE_TAXI = "taxi"
TRANSFER_TYPE_TRAIN = "train"

# An additionalSegments entry standing in a transfer slot or among the main
# segments records where it goes: "slot" plus "order", its position there.
PLACEMENT_SLOT_KEY = "slot"
PLACEMENT_ORDER_KEY = "order"
SLOT_DEPARTURE = "departure"
SLOT_MAIN = "main"
SLOT_ARRIVAL = "arrival"
PLACEMENT_SLOTS = (SLOT_DEPARTURE, SLOT_MAIN, SLOT_ARRIVAL)


@dataclass(frozen=True)
class TransferGroup:
    """One transfer slot of a journey: the fields sharing a key prefix."""
    prefix: str
    before_main: bool
    # Placeholders used when a single legacy scalar transfer has no location text
    taxi_from: str
    taxi_to: str
    train_from: str
    train_to: str

    def key(self, suffix: str) -> str:
        return f"{self.prefix}{suffix}"

    @property
    def type_key(self) -> str:
        return self.key("Type")

    @property
    def taxi_booked_key(self) -> str:
        return self.key("TaxiBooked")

    @property
    def taxis_key(self) -> str:
        return self.key("Taxis")

    @property
    def trains_key(self) -> str:
        return self.key("Trains")

    @property
    def details_key(self) -> str:
        return self.key("Details")


@dataclass(frozen=True)
class JourneyLayout:
    name: str
    departure: TransferGroup
    arrival: TransferGroup

    @property
    def groups(self) -> Tuple[TransferGroup, TransferGroup]:
        return (self.departure, self.arrival)


OUTBOUND_LAYOUT = JourneyLayout(
    name="outboundTravel",
    departure=TransferGroup(
        prefix="transferToAirport",
        before_main=True,
        taxi_from=PLACEHOLDER_HOME_OR_HOTEL,
        taxi_to=PLACEHOLDER_AIRPORT,
        train_from=PLACEHOLDER_STATION,
        train_to=PLACEHOLDER_AIRPORT,
    ),
    arrival=TransferGroup(
        prefix="transferToAccom",
        before_main=False,
        taxi_from=PLACEHOLDER_AIRPORT,
        taxi_to=PLACEHOLDER_ACCOMMODATION,
        train_from=PLACEHOLDER_STATION,
        train_to=PLACEHOLDER_ACCOMMODATION,
    ),
)

RETURN_LAYOUT = JourneyLayout(
    name="returnTravel",
    departure=TransferGroup(
        prefix="transferToAirport",
        before_main=True,
        taxi_from=PLACEHOLDER_HOME_OR_HOTEL,
        taxi_to=PLACEHOLDER_AIRPORT,
        train_from=PLACEHOLDER_STATION,
        train_to=PLACEHOLDER_AIRPORT,
    ),
    arrival=TransferGroup(
        prefix="transferHome",
        before_main=False,
        taxi_from=PLACEHOLDER_AIRPORT,
        taxi_to=PLACEHOLDER_HOME,
        train_from=PLACEHOLDER_STATION,
        train_to=PLACEHOLDER_HOME,
    ),
)


def _empty_group(group: TransferGroup) -> Dict[str, Any]:
    fields: Dict[str, Any] = {
        group.type_key: TRANSFER_TYPE_NONE,
        group.taxi_booked_key: 0,
    }
    for suffix in TAXI_SCALAR_SUFFIXES + TRAIN_SCALAR_SUFFIXES:
        fields[group.key(suffix)] = ""
    fields[group.taxis_key] = []
    fields[group.trains_key] = []
    fields[group.details_key] = []
    return fields


def empty_record(layout: JourneyLayout) -> Dict[str, Any]:
    """A legacy record with every field present and empty."""
    record: Dict[str, Any] = {}
    record.update(_empty_group(layout.departure))
    for name in FLIGHT_TEXT_FIELDS:
        record[name] = ""
    record["isMultiLeg"] = 0
    record["legs"] = []
    record.update(_empty_group(layout.arrival))
    record["additionalSegments"] = []
    return record


def empty_outbound_record() -> Dict[str, Any]:
    return empty_record(OUTBOUND_LAYOUT)


def empty_return_record() -> Dict[str, Any]:
    return empty_record(RETURN_LAYOUT)
