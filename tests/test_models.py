"""Tests for the segment model: ids, role resolution, dict conversion."""

import re

from travel_segments.models import (
    SegmentRole,
    SegmentType,
    TravelSegment,
    generate_segment_id,
    resolve_role,
)


def test_generate_segment_id_shape():
    segment_id = generate_segment_id()
    assert re.fullmatch(r"segment-\d+-[0-9a-z]{5}", segment_id)


def test_generate_segment_id_is_fresh():
    ids = {generate_segment_id() for _ in range(50)}
    assert len(ids) == 50


def test_new_segment_gets_an_id():
    a = TravelSegment(type=SegmentType.TAXI)
    b = TravelSegment(type=SegmentType.TAXI)
    assert a.id and b.id and a.id != b.id


class TestResolveRole:
    """Explicit roles win; missing roles are inferred from the transport type."""

    def test_explicit_role_wins(self):
        seg = TravelSegment(type=SegmentType.FLIGHT, role=SegmentRole.ADDITIONAL)
        assert resolve_role(seg) == SegmentRole.ADDITIONAL

    def test_flight_without_role_is_main(self):
        assert resolve_role(TravelSegment(type=SegmentType.FLIGHT)) == SegmentRole.MAIN

    def test_ground_types_without_role_are_transfers(self):
        for seg_type in (SegmentType.TAXI, SegmentType.SHUTTLE, SegmentType.BUS,
                         SegmentType.OTHER, SegmentType.TRAIN, SegmentType.PRIVATE_CAR):
            assert resolve_role(TravelSegment(type=seg_type)) == SegmentRole.TRANSFER

    def test_unrepresentable_types_without_role_are_additional(self):
        for seg_type in (SegmentType.FERRY, SegmentType.CAR_RENTAL, SegmentType.PRIVATE_TRANSFER):
            assert resolve_role(TravelSegment(type=seg_type)) == SegmentRole.ADDITIONAL


class TestDictConversion:
    """Stored camelCase records <-> TravelSegment."""

    def test_from_dict_reads_camel_case_keys(self):
        seg = TravelSegment.from_dict({
            "id": "s1",
            "role": "main",
            "type": "flight",
            "fromLocation": "LHR",
            "toLocation": "FAO",
            "date": "2024-06-01",
            "flightNumber": "BA123",
            "contactDetails": "+44 20",
        })
        assert seg.id == "s1"
        assert seg.role == SegmentRole.MAIN
        assert seg.type == SegmentType.FLIGHT
        assert seg.from_location == "LHR"
        assert seg.flight_number == "BA123"
        assert seg.contact_details == "+44 20"

    def test_missing_role_is_unknown(self):
        seg = TravelSegment.from_dict({"type": "ferry", "fromLocation": "A", "toLocation": "B", "date": ""})
        assert seg.role == SegmentRole.UNKNOWN

    def test_unknown_type_degrades_to_other(self):
        seg = TravelSegment.from_dict({"type": "hovercraft"})
        assert seg.type == SegmentType.OTHER

    def test_missing_id_is_generated(self):
        seg = TravelSegment.from_dict({"type": "ferry", "id": ""})
        assert seg.id.startswith("segment-")

    def test_unknown_keys_survive(self):
        data = {
            "id": "x",
            "role": "additional",
            "type": "ferry",
            "fromLocation": "Dover",
            "toLocation": "Calais",
            "date": "2024-07-01",
            "destinationId": "dest-9",
        }
        assert TravelSegment.from_dict(data).to_dict() == data

    def test_to_dict_omits_empty_optionals(self):
        out = TravelSegment(id="t", type=SegmentType.TAXI, role=SegmentRole.TRANSFER).to_dict()
        assert out == {
            "id": "t",
            "role": "transfer",
            "type": "taxi",
            "fromLocation": "",
            "toLocation": "",
            "date": "",
        }

    def test_coerce_passes_segments_through(self):
        seg = TravelSegment(type=SegmentType.BUS)
        assert TravelSegment.coerce(seg) is seg

    def test_with_role_copies(self):
        seg = TravelSegment(type=SegmentType.FERRY, extra={"k": 1})
        copy = seg.with_role(SegmentRole.ADDITIONAL)
        assert copy.role == SegmentRole.ADDITIONAL
        assert seg.role == SegmentRole.UNKNOWN
        assert copy.extra == {"k": 1} and copy.extra is not seg.extra
