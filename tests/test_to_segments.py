"""Tests for legacy record -> segment conversion."""

import json

import pytest

from travel_segments.migrate.to_segments import outbound_to_segments, return_to_segments
from travel_segments.models import SegmentRole, SegmentType


def _kinds(segments):
    return [(s.role.value, s.type.value) for s in segments]


class TestDefensiveInput:
    """Absent or malformed records never raise."""

    @pytest.mark.parametrize("value", [None, "", "not json", 42, [], {}])
    def test_outbound_degrades_to_empty(self, value):
        assert outbound_to_segments(value) == []

    @pytest.mark.parametrize("value", [None, "", "not json", 42, [], {}])
    def test_return_degrades_to_empty(self, value):
        assert return_to_segments(value) == []

    def test_garbage_fields_are_skipped(self):
        segments = outbound_to_segments({
            "flightNumber": "BA123",
            "isMultiLeg": 1,
            "legs": "{broken",
            "transferToAirportTaxis": {"not": "a list"},
            "transferToAirportTrains": ["string item", 5],
            "transferToAirportDetails": "[[[",
            "additionalSegments": ["nope", None],
        })
        assert _kinds(segments) == [("main", "flight")]

    def test_json_encoded_record(self):
        segments = outbound_to_segments(json.dumps({"flightNumber": "BA123"}))
        assert segments[0].flight_number == "BA123"


class TestSingleFlight:

    def test_single_flight_fields(self):
        segments = outbound_to_segments({
            "flightNumber": "BA123",
            "flightDate": "2024-06-01",
            "departureAirport": "LHR",
            "arrivalAirport": "FAO",
            "departureTime": "07:00",
            "arrivalTime": "09:45",
            "airline": "British Airways",
            "bookingReference": "XYZ789",
            "contact": "0344 493 0787",
            "passengersSeats": "12A, 12B",
            "thingsToRemember": "Online check-in opens 24h before",
            "isMultiLeg": 0,
        })
        assert len(segments) == 1
        flight = segments[0]
        assert flight.role == SegmentRole.MAIN
        assert flight.type == SegmentType.FLIGHT
        assert flight.from_location == "LHR"
        assert flight.to_location == "FAO"
        assert flight.date == "2024-06-01"
        assert flight.flight_number == "BA123"
        assert flight.airline == "British Airways"
        assert flight.booking_reference == "XYZ789"
        assert flight.contact_details == "0344 493 0787"
        assert flight.passengers_seats == "12A, 12B"
        assert flight.notes == "Online check-in opens 24h before"

    def test_no_flight_fields_no_flight(self):
        assert outbound_to_segments({"isMultiLeg": 0, "legs": []}) == []

    def test_multi_leg_flag_without_legs_uses_scalars(self):
        segments = outbound_to_segments({"isMultiLeg": 1, "legs": [], "flightNumber": "TP1"})
        assert [s.flight_number for s in segments] == ["TP1"]


class TestMultiLeg:

    def setup_method(self):
        self.record = {
            "flightNumber": "TP1351",
            "flightDate": "2024-06-01",
            "bookingReference": "PNR42",
            "contact": "TAP desk",
            "airline": "TAP",
            "thingsToRemember": "Pack adapters",
            "isMultiLeg": True,
            "legs": [
                {"departureAirport": "LHR", "arrivalAirport": "LIS", "departureTime": "06:00",
                 "arrivalTime": "08:40", "flightNumber": "", "layoverDuration": "ignored"},
                {"departureAirport": "LIS", "arrivalAirport": "FAO", "departureTime": "11:10",
                 "arrivalTime": "11:55", "flightNumber": "TP1901", "layoverDuration": "2h 30m"},
            ],
        }

    def test_one_main_segment_per_leg(self):
        segments = outbound_to_segments(self.record)
        assert _kinds(segments) == [("main", "flight"), ("main", "flight")]
        assert [(s.from_location, s.to_location) for s in segments] == [("LHR", "LIS"), ("LIS", "FAO")]

    def test_shared_fields_on_every_leg(self):
        for seg in outbound_to_segments(self.record):
            assert seg.date == "2024-06-01"
            assert seg.booking_reference == "PNR42"
            assert seg.contact_details == "TAP desk"

    def test_layover_goes_into_later_leg_notes(self):
        first, second = outbound_to_segments(self.record)
        assert "Layover: 2h 30m" in second.notes
        assert first.notes == "Pack adapters"

    def test_first_leg_falls_back_to_record_flight_number(self):
        first, second = outbound_to_segments(self.record)
        assert first.flight_number == "TP1351"
        assert second.flight_number == "TP1901"

    def test_string_flag_zero_means_single(self):
        self.record["isMultiLeg"] = "0"
        assert len(outbound_to_segments(self.record)) == 1


class TestTransfers:

    def test_document_order(self):
        segments = outbound_to_segments({
            "transferToAirportTaxis": [{"id": "t1", "company": "Cabs"}],
            "flightNumber": "BA1",
            "transferToAccomTrains": [{"id": "r1", "departingStation": "Faro", "arrivalStation": "Lagos"}],
        })
        assert [s.id for s in segments[::2]] == ["t1", "r1"]
        assert _kinds(segments) == [
            ("transfer", "taxi"),
            ("main", "flight"),
            ("transfer", "train"),
        ]

    def test_taxi_item_mapping(self):
        taxi, flight = outbound_to_segments({
            "flightDate": "2024-06-01",
            "flightNumber": "BA123",
            "transferToAirportTaxis": [{
                "id": "t1",
                "transferType": "shuttle",
                "company": "Airport Cabs",
                "contact": "555-1234",
                "vehicleRegistration": "AB12 CDE",
                "collectionTime": "04:30",
                "pickupLocation": "Home",
                "dropoffLocation": "LHR T5",
                "paymentStatus": "Paid",
            }],
        })
        assert taxi.id == "t1"
        assert taxi.type == SegmentType.SHUTTLE
        assert taxi.from_location == "Home"
        assert taxi.to_location == "LHR T5"
        assert taxi.date == "2024-06-01"
        assert taxi.departure_time == "04:30"
        assert taxi.company == "Airport Cabs"
        assert taxi.contact_details == "555-1234"
        assert taxi.confirmation_number == "AB12 CDE"
        assert taxi.notes == "Payment: Paid"

    def test_duplicate_taxi_in_details_blob_emitted_once(self):
        taxi = {"company": "Airport Cabs", "collectionTime": "04:30", "pickupLocation": "Home"}
        segments = outbound_to_segments({
            "transferToAirportTaxis": [taxi],
            "transferToAirportDetails": json.dumps([taxi]),
        })
        assert _kinds(segments) == [("transfer", "taxi")]

    def test_details_blob_is_classified(self):
        segments = outbound_to_segments({
            "transferToAirportDetails": json.dumps([
                {"company": "Cabs"},
                {"departingStation": "Paddington", "arrivalStation": "Heathrow", "provider": "HEx"},
            ]),
        })
        assert _kinds(segments) == [("transfer", "taxi"), ("transfer", "train")]
        assert segments[1].company == "HEx"

    def test_order_field_interleaves_taxis_and_trains(self):
        segments = outbound_to_segments({
            "transferToAirportTaxis": [{"id": "a", "order": 0}, {"id": "c", "order": 2}],
            "transferToAirportTrains": [{"id": "b", "order": 1}],
        })
        assert [s.id for s in segments] == ["a", "b", "c"]

    def test_arrays_win_over_singular_fields(self):
        segments = outbound_to_segments({
            "transferToAirportType": "taxi",
            "transferToAirportCompany": "Old Cabs",
            "transferToAirportTaxis": [{"company": "New Cabs"}],
        })
        assert [s.company for s in segments] == ["New Cabs"]


class TestSingularLegacyTransfer:

    def test_taxi_scalars(self):
        (taxi, flight) = outbound_to_segments({
            "transferToAirportType": "taxi",
            "transferToAirportCompany": "Cabs",
            "transferToAirportCollectionTime": "05:00",
            "transferToAirportPaymentStatus": "Pay driver",
            "departureAirport": "LGW",
            "flightNumber": "EZY1",
        })
        assert taxi.type == SegmentType.TAXI
        assert taxi.role == SegmentRole.TRANSFER
        assert taxi.from_location == "Home/Hotel"
        assert taxi.to_location == "LGW"
        assert taxi.departure_time == "05:00"
        assert taxi.notes == "Payment: Pay driver"
        assert flight.type == SegmentType.FLIGHT

    def test_taxi_booked_flag_migrates_missing_type(self):
        segments = outbound_to_segments({"transferToAirportTaxiBooked": 1})
        assert _kinds(segments) == [("transfer", "taxi")]

    def test_type_without_populated_fields_emits_nothing(self):
        assert outbound_to_segments({"transferToAirportType": "train"}) == []

    def test_train_scalars_on_accommodation_side(self):
        (flight, train) = outbound_to_segments({
            "flightNumber": "BA1",
            "transferToAccomType": "train",
            "transferToAccomTrainDepartingStation": "Faro",
            "transferToAccomTrainProvider": "CP",
            "transferToAccomTrainBookingRef": "CP-1",
            "transferToAccomTrainNotes": "Quiet coach",
        })
        assert train.from_location == "Faro"
        assert train.to_location == "Hotel/Accommodation"
        assert train.company == "CP"
        assert train.booking_reference == "CP-1"
        assert train.notes == "Quiet coach"

    def test_return_home_taxi(self):
        (flight, taxi) = return_to_segments({
            "flightNumber": "BA2",
            "arrivalAirport": "LHR",
            "transferHomeType": "taxi",
            "transferHomeTaxiBooked": 1,
        })
        assert taxi.from_location == "LHR"
        assert taxi.to_location == "Home"


class TestAdditionalSegments:

    def test_pass_through_with_defaults(self):
        segments = outbound_to_segments({
            "flightNumber": "BA1",
            "additionalSegments": [
                {"type": "ferry", "fromLocation": "Dover", "toLocation": "Calais", "date": "2024-06-02",
                 "destinationId": "d1"},
                {"id": "keep", "role": "transfer", "type": "car_rental", "fromLocation": "FAO",
                 "toLocation": "FAO", "date": "2024-06-01"},
            ],
        })
        ferry, rental = segments[1:]
        assert ferry.role == SegmentRole.ADDITIONAL
        assert ferry.id.startswith("segment-")
        assert ferry.extra == {"destinationId": "d1"}
        assert rental.id == "keep"
        assert rental.role == SegmentRole.TRANSFER

    def test_main_role_additional_stays_between_transfers(self):
        segments = outbound_to_segments({
            "transferToAirportTaxis": [{"id": "before"}],
            "transferToAccomTaxis": [{"id": "after"}],
            "additionalSegments": [{"id": "ferry", "role": "main", "type": "ferry"}],
        })
        assert [s.id for s in segments] == ["before", "ferry", "after"]

    def test_input_is_not_mutated(self):
        record = {
            "flightNumber": "BA1",
            "transferToAirportTaxis": [{"company": "Cabs"}],
            "additionalSegments": [{"type": "ferry"}],
        }
        snapshot = json.dumps(record, sort_keys=True)
        outbound_to_segments(record)
        assert json.dumps(record, sort_keys=True) == snapshot


class TestPlacedAdditionalSegments:
    """additionalSegments entries saved with a slot load back into that slot."""

    def test_departure_slot_interleaves_with_taxis(self):
        segments = outbound_to_segments({
            "flightNumber": "BA1",
            "transferToAirportTaxis": [{"id": "a", "order": 0}, {"id": "b", "order": 2}],
            "additionalSegments": [
                {"id": "ferry", "role": "additional", "type": "ferry"},
                {"id": "pt", "role": "transfer", "type": "private_transfer",
                 "slot": "departure", "order": 1},
            ],
        })
        assert [s.id for s in segments if s.role != SegmentRole.MAIN] == ["a", "pt", "b", "ferry"]
        assert segments[3].type == SegmentType.FLIGHT

    def test_arrival_slot_goes_after_main(self):
        segments = outbound_to_segments({
            "flightNumber": "BA1",
            "additionalSegments": [
                {"id": "rent", "role": "transfer", "type": "car_rental", "slot": "arrival", "order": 0},
            ],
        })
        assert _kinds(segments) == [("main", "flight"), ("transfer", "car_rental")]

    def test_main_slot_inserted_among_legs(self):
        segments = outbound_to_segments({
            "isMultiLeg": 1,
            "legs": [
                {"id": "l1", "departureAirport": "LHR", "arrivalAirport": "CDG"},
                {"id": "l2", "departureAirport": "NCE", "arrivalAirport": "FCO"},
            ],
            "additionalSegments": [
                {"id": "tgv", "role": "main", "type": "train", "slot": "main", "order": 1},
            ],
        })
        assert [s.id for s in segments] == ["l1", "tgv", "l2"]

    def test_placement_keys_do_not_leak_into_extra(self):
        (segment,) = outbound_to_segments({
            "additionalSegments": [
                {"id": "pt", "role": "transfer", "type": "private_transfer",
                 "slot": "departure", "order": 0, "destinationId": "d1"},
            ],
        })
        assert segment.extra == {"destinationId": "d1"}

    @pytest.mark.parametrize("slot, order", [("sideways", 0), ("departure", -1), ("departure", "1")])
    def test_bad_placement_falls_back_to_end(self, slot, order):
        segments = outbound_to_segments({
            "transferToAccomTaxis": [{"id": "cab"}],
            "additionalSegments": [
                {"id": "pt", "role": "transfer", "type": "private_transfer", "slot": slot, "order": order},
            ],
        })
        assert [s.id for s in segments] == ["cab", "pt"]


def test_leg_ids_are_kept():
    segments = outbound_to_segments({
        "isMultiLeg": 1,
        "legs": [{"id": "l1", "departureAirport": "LHR"}, {"departureAirport": "LIS"}],
    })
    assert segments[0].id == "l1"
    assert segments[1].id.startswith("segment-")
