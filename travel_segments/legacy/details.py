"""Transfer detail arrays: parsing, road/rail classification, dedup, item normalization.

Old records kept taxi and train transfers mixed together in one JSON-encoded
"details" array with no type tag; newer ones use separate per-item arrays.
Records written while both code paths were live can hold the same transfer in
both places.
"""

import json
import logging
from typing import Any, Dict, List, Tuple

from travel_segments.legacy.schema import (
    TRANSFER_TYPE_NONE,
    TRANSFER_TYPE_TAXI,
    TRANSFER_TYPE_TRAIN,
)

_LOGGER = logging.getLogger(__name__)

_RAIL_HINT_KEYS = ("departingStation", "arrivalStation", "provider", "bookingRef")

_ROAD_TRANSFER_TYPES = {"taxi", "private_car", "shuttle", "bus", "other"}


def parse_details_array(value: Any) -> List[Any]:
    """Return value as a list. Accepts a list or a JSON-encoded list; anything else is []."""
    if not value:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except (json.JSONDecodeError, ValueError):
            _LOGGER.debug("Ignoring unparseable details blob: %.60r", value)
            return []
        return parsed if isinstance(parsed, list) else []
    return []


def is_train_transfer_detail(detail: Any) -> bool:
    """Sniff whether an untyped transfer detail describes a train.

    Explicit transferType == 'train' wins; otherwise any rail-only field
    marks it as a train. Everything else is road transport.
    """
    if not isinstance(detail, dict):
        return False
    transfer_type = str(detail.get("transferType") or "").lower()
    if transfer_type == TRANSFER_TYPE_TRAIN:
        return True
    return any(detail.get(key) for key in _RAIL_HINT_KEYS)


def split_transfer_details(details: Any) -> Tuple[List[Any], List[Any]]:
    """Split a details array into (road, rail), dropping empty entries."""
    safe = [d for d in parse_details_array(details) if d]
    road = [d for d in safe if not is_train_transfer_detail(d)]
    rail = [d for d in safe if is_train_transfer_detail(d)]
    return road, rail


def _identity_key(item: Any) -> str:
    return json.dumps(item or {}, sort_keys=True, default=str)


def merge_unique_transfers(primary: Any, fallback: Any) -> List[Any]:
    """Concatenate primary then fallback, dropping structurally identical repeats."""
    merged: List[Any] = []
    seen = set()
    primary = primary if isinstance(primary, list) else []
    fallback = fallback if isinstance(fallback, list) else []
    for item in primary + fallback:
        key = _identity_key(item)
        if key in seen:
            continue
        seen.add(key)
        merged.append(item)
    return merged


def infer_transfer_details_type(details: Any) -> str:
    """Guess the transfer type of a whole details array from its first entry."""
    items = parse_details_array(details)
    if not items:
        return TRANSFER_TYPE_NONE
    first = next((d for d in items if d), {})
    if is_train_transfer_detail(first):
        return TRANSFER_TYPE_TRAIN
    return TRANSFER_TYPE_TAXI


def _first(item: Dict[str, Any], *keys: str) -> str:
    for key in keys:
        value = item.get(key)
        if value:
            return value if isinstance(value, str) else str(value)
    return ""


def _order(item: Dict[str, Any]) -> Any:
    order = item.get("order")
    if isinstance(order, int) and not isinstance(order, bool):
        return order
    return None


def normalize_taxi_transfer(item: Any, fallback_id: str = "") -> Dict[str, Any]:
    """Read a road transfer written by any historical form into the taxi item shape."""
    item = item if isinstance(item, dict) else {}
    transfer_type = str(item.get("transferType") or "").lower()
    taxi: Dict[str, Any] = {
        "id": _first(item, "id") or fallback_id,
        "transferType": transfer_type if transfer_type in _ROAD_TRANSFER_TYPES else TRANSFER_TYPE_TAXI,
        "company": _first(item, "company", "provider"),
        "contact": _first(item, "contact", "contactDetails"),
        "vehicleRegistration": _first(item, "vehicleRegistration", "confirmationNumber"),
        "collectionTime": _first(item, "collectionTime", "pickupTime", "departureTime"),
        "pickupLocation": _first(item, "pickupLocation", "fromLocation", "departingFrom"),
        "dropoffLocation": _first(item, "dropoffLocation", "toLocation", "destination"),
        "paymentStatus": _first(item, "paymentStatus"),
        "notes": _first(item, "notes"),
    }
    order = _order(item)
    if order is not None:
        taxi["order"] = order
    return taxi


def normalize_train_transfer(item: Any, fallback_id: str = "") -> Dict[str, Any]:
    """Read a rail transfer written by any historical form into the train item shape."""
    item = item if isinstance(item, dict) else {}
    train: Dict[str, Any] = {
        "id": _first(item, "id") or fallback_id,
        "departingStation": _first(item, "departingStation", "fromLocation", "departureStation"),
        "arrivalStation": _first(item, "arrivalStation", "toLocation", "destination"),
        "departureTime": _first(item, "departureTime", "collectionTime"),
        "provider": _first(item, "provider", "company"),
        "bookingRef": _first(item, "bookingRef", "bookingReference"),
        "paymentStatus": _first(item, "paymentStatus"),
        "notes": _first(item, "notes"),
    }
    order = _order(item)
    if order is not None:
        train["order"] = order
    return train


def normalize_taxi_transfers(items: Any, key_prefix: str) -> List[Dict[str, Any]]:
    return [
        normalize_taxi_transfer(item, f"{key_prefix}-taxi-{index}")
        for index, item in enumerate(d for d in parse_details_array(items) if d)
    ]


def normalize_train_transfers(items: Any, key_prefix: str) -> List[Dict[str, Any]]:
    return [
        normalize_train_transfer(item, f"{key_prefix}-train-{index}")
        for index, item in enumerate(d for d in parse_details_array(items) if d)
    ]
