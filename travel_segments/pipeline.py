"""Loads both journeys of a stored itinerary into segments and flattens them back."""

import json
import sys
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from travel_segments.legacy.normalize import normalize_outbound_record, normalize_return_record
from travel_segments.migrate.to_legacy import segments_to_outbound, segments_to_return
from travel_segments.migrate.to_segments import outbound_to_segments, return_to_segments
from travel_segments.models import TravelSegment

OUTBOUND_KEY = "outboundTravel"
RETURN_KEY = "returnTravel"

# (record key, normalizer, legacy -> segments, segments -> legacy)
_JOURNEYS: Tuple[Tuple[str, Callable, Callable, Callable], ...] = (
    (OUTBOUND_KEY, normalize_outbound_record, outbound_to_segments, segments_to_outbound),
    (RETURN_KEY, normalize_return_record, return_to_segments, segments_to_return),
)


def _itinerary(data: Any) -> Mapping[str, Any]:
    if isinstance(data, Mapping):
        return data
    if isinstance(data, str):
        try:
            parsed = json.loads(data)
        except (json.JSONDecodeError, ValueError):
            return {}
        if isinstance(parsed, Mapping):
            return parsed
    return {}


def load_journeys(
    itinerary: Any,
    verbose: bool = False,
) -> Tuple[List[TravelSegment], List[TravelSegment]]:
    """Stored itinerary record -> (outbound segments, return segments)."""
    def log(msg):
        if verbose:
            print(msg, file=sys.stderr)

    record = _itinerary(itinerary)
    loaded = []
    for key, normalize, to_segments, _ in _JOURNEYS:
        segments = to_segments(normalize(record.get(key)))
        log(f"  {key}: {len(segments)} segments")
        loaded.append(segments)
    return loaded[0], loaded[1]


def save_journeys(
    itinerary: Any,
    outbound: Optional[Iterable[Any]],
    return_segments: Optional[Iterable[Any]],
) -> Dict[str, Any]:
    """Copy of the itinerary with both legacy travel records rebuilt from segments."""
    saved = dict(_itinerary(itinerary))
    saved[OUTBOUND_KEY] = segments_to_outbound(outbound)
    saved[RETURN_KEY] = segments_to_return(return_segments)
    return saved


def _equivalent(a: Any, b: Any) -> bool:
    # None and "" are the same absent value to every reader of these records
    if a in (None, "") and b in (None, ""):
        return True
    return a == b


def round_trip_differences(itinerary: Any) -> List[str]:
    """Fields whose stored value would change after a load + save cycle."""
    record = _itinerary(itinerary)
    differences = []
    for key, normalize, to_segments, to_legacy in _JOURNEYS:
        before = normalize(record.get(key))
        after = to_legacy(to_segments(before))
        for name in sorted(set(before) | set(after)):
            if not _equivalent(before.get(name), after.get(name)):
                differences.append(f"{key}.{name}")
    return differences
