"""Load-time migration of a stored travel record into a complete legacy record."""

import json
import logging
from typing import Any, Dict, Mapping, Optional

from travel_segments.legacy.details import (
    infer_transfer_details_type,
    merge_unique_transfers,
    normalize_taxi_transfers,
    normalize_train_transfers,
    parse_details_array,
    split_transfer_details,
)
from travel_segments.legacy.schema import (
    FLIGHT_TEXT_FIELDS,
    OUTBOUND_LAYOUT,
    RETURN_LAYOUT,
    TAXI_SCALAR_SUFFIXES,
    TRAIN_SCALAR_SUFFIXES,
    TRANSFER_TYPE_NONE,
    TRANSFER_TYPE_TAXI,
    TRANSFER_TYPE_TRAIN,
    JourneyLayout,
    TransferGroup,
    empty_record,
)

_LOGGER = logging.getLogger(__name__)


def _load(data: Any) -> Optional[Mapping[str, Any]]:
    if isinstance(data, Mapping):
        return data
    if isinstance(data, str) and data.strip():
        try:
            parsed = json.loads(data)
        except (json.JSONDecodeError, ValueError):
            _LOGGER.debug("Stored travel record is not valid JSON")
            return None
        if isinstance(parsed, Mapping):
            return parsed
    return None


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _migrate_type(data: Mapping[str, Any], group: TransferGroup, road: list, rail: list) -> str:
    stored = data.get(group.type_key)
    transfer_type = str(stored or TRANSFER_TYPE_NONE).lower()
    if transfer_type == TRANSFER_TYPE_NONE and data.get(group.taxi_booked_key) == 1:
        transfer_type = TRANSFER_TYPE_TAXI
    if transfer_type != TRANSFER_TYPE_NONE:
        return transfer_type

    if parse_details_array(data.get(group.trains_key)) or rail:
        return TRANSFER_TYPE_TRAIN
    if parse_details_array(data.get(group.taxis_key)) or road:
        return TRANSFER_TYPE_TAXI
    if infer_transfer_details_type(data.get(group.details_key)) == TRANSFER_TYPE_TAXI:
        return TRANSFER_TYPE_TAXI
    return TRANSFER_TYPE_NONE


def _group(data: Mapping[str, Any], group: TransferGroup, key_prefix: str) -> Dict[str, Any]:
    road, rail = split_transfer_details(data.get(group.details_key))

    fields: Dict[str, Any] = {
        group.type_key: _migrate_type(data, group, road, rail),
        group.taxi_booked_key: data.get(group.taxi_booked_key) or 0,
    }
    for suffix in TAXI_SCALAR_SUFFIXES + TRAIN_SCALAR_SUFFIXES:
        fields[group.key(suffix)] = _text(data, group.key(suffix))

    taxis = merge_unique_transfers(parse_details_array(data.get(group.taxis_key)), road)
    trains = merge_unique_transfers(parse_details_array(data.get(group.trains_key)), rail)
    fields[group.taxis_key] = normalize_taxi_transfers(taxis, key_prefix)
    fields[group.trains_key] = normalize_train_transfers(trains, key_prefix)
    # The details blob has been folded into the arrays above.
    fields[group.details_key] = []
    return fields


def normalize_record(data: Any, layout: JourneyLayout, key_prefix: str) -> Dict[str, Any]:
    """Fill every legacy field, migrating old transfer encodings along the way."""
    stored = _load(data)
    record = empty_record(layout)
    if stored is None:
        return record

    for group in layout.groups:
        record.update(_group(stored, group, f"{key_prefix}-{group.prefix}"))
    for name in FLIGHT_TEXT_FIELDS:
        record[name] = _text(stored, name)
    record["isMultiLeg"] = stored.get("isMultiLeg") or 0
    record["legs"] = [leg for leg in parse_details_array(stored.get("legs")) if isinstance(leg, dict)]
    record["additionalSegments"] = [
        s for s in parse_details_array(stored.get("additionalSegments")) if isinstance(s, dict)
    ]
    return record


def normalize_outbound_record(data: Any) -> Dict[str, Any]:
    return normalize_record(data, OUTBOUND_LAYOUT, "outbound")


def normalize_return_record(data: Any) -> Dict[str, Any]:
    return normalize_record(data, RETURN_LAYOUT, "return")
