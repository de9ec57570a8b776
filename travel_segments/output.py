"""Output formatters: JSON and a human-readable journey listing."""

import json
from pathlib import Path
from typing import Any, Iterable, List

from travel_segments.migrate.notes import calculate_layover, decode_layover
from travel_segments.models import SegmentType, TravelSegment


def segments_to_dicts(segments: Iterable[TravelSegment]) -> List[dict]:
    return [s.to_dict() for s in segments]


def to_json(data: Any, path: Path):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


# ---------------------------------------------------------------------------
# Human-readable listing
# ---------------------------------------------------------------------------

def _route(segment: TravelSegment) -> str:
    origin = segment.from_location or "?"
    destination = segment.to_location or "?"
    return f"{origin} → {destination}"


def _when(segment: TravelSegment) -> str:
    parts = [segment.date or "?"]
    if segment.departure_time or segment.arrival_time:
        parts.append(f"{segment.departure_time or '?'}-{segment.arrival_time or '?'}")
    return " ".join(parts)


def _is_connection(previous, segment: TravelSegment) -> bool:
    return (
        previous is not None
        and previous.type == SegmentType.FLIGHT
        and segment.type == SegmentType.FLIGHT
    )


def format_journey(title: str, segments: List[TravelSegment]) -> str:
    """One line per segment, in journey order."""
    lines = []
    lines.append("=" * 72)
    lines.append(f"  {title}")
    lines.append("=" * 72)

    if not segments:
        lines.append("  (no segments)")
        return "\n".join(lines)

    previous = None
    for i, seg in enumerate(segments, start=1):
        label = f"{seg.role.value}/{seg.type.value}"
        line = f"  {i:>2}. [{label:<20}] {_when(seg):<20} {_route(seg)}"
        if seg.flight_number:
            line += f"  ({seg.flight_number})"
        lines.append(line)
        if seg.company:
            lines.append(f"      Company: {seg.company}")
        if seg.notes:
            lines.append(f"      Notes: {seg.notes}")
        if _is_connection(previous, seg) and not decode_layover(seg.notes):
            layover = calculate_layover(previous.arrival_time, seg.departure_time)
            if layover:
                lines.append(f"      Layover: {layover} (calculated)")
        previous = seg

    return "\n".join(lines)
