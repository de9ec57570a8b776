#!/usr/bin/env python3
"""CLI entry point for migrating exported itinerary records.

Usage:
    python migrate_itinerary.py INPUT.json [--to segments|legacy] [--check] [--output PATH]

Options:
    INPUT             JSON file holding one itinerary record or a list of them
    --to FORMAT       segments: write outboundJourney/returnJourney segment lists
                      legacy:   rewrite outboundTravel/returnTravel via segments
    --check           Report fields a load + save cycle would change; exit 1 if any
    --output PATH     Write the converted JSON here instead of printing a listing
    --dry-run         Show stats without writing files
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from travel_segments.config import LOG_LEVEL
from travel_segments.output import format_journey, segments_to_dicts, to_json
from travel_segments.pipeline import load_journeys, round_trip_differences, save_journeys


def _read_itineraries(path: Path, parser: argparse.ArgumentParser) -> list:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        parser.error(f"cannot read {path}: {e}")
    if isinstance(data, dict):
        return [data]
    if isinstance(data, list):
        return [d for d in data if isinstance(d, dict)]
    parser.error(f"{path} must hold an itinerary object or a list of them")


def main():
    parser = argparse.ArgumentParser(
        description="Convert itinerary travel records between legacy fields and segments.",
    )
    parser.add_argument("input", help="Path to the exported itinerary JSON")
    parser.add_argument(
        "--to",
        choices=["segments", "legacy"],
        default="segments",
        help="Target representation (segments, legacy)",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Report round-trip differences instead of converting",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Output JSON file",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show stats only, don't write files",
    )
    args = parser.parse_args()

    logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")

    itineraries = _read_itineraries(Path(args.input), parser)
    print(f"Loaded {len(itineraries)} itineraries from {args.input}", file=sys.stderr)

    if args.check:
        changed = 0
        for i, itinerary in enumerate(itineraries):
            differences = round_trip_differences(itinerary)
            if differences:
                changed += 1
                title = itinerary.get("title") or f"#{i}"
                print(f"{title}: {', '.join(differences)}")
        print(f"\n{changed} of {len(itineraries)} itineraries change on save.")
        sys.exit(1 if changed else 0)

    results = []
    for itinerary in itineraries:
        outbound, return_segments = load_journeys(itinerary, verbose=True)
        if args.to == "segments":
            results.append({
                "title": itinerary.get("title", ""),
                "outboundJourney": segments_to_dicts(outbound),
                "returnJourney": segments_to_dicts(return_segments),
            })
        else:
            results.append(save_journeys(itinerary, outbound, return_segments))

        if not args.output and not args.dry_run:
            title = itinerary.get("title") or "Itinerary"
            print(format_journey(f"{title}: outbound", outbound))
            print(format_journey(f"{title}: return", return_segments))

    if args.dry_run:
        print(f"\nDry run complete. {len(results)} itineraries converted.")
        return

    if args.output:
        output_path = Path(args.output)
        to_json(results if len(results) != 1 else results[0], output_path)
        print(f"JSON written to: {output_path}")


if __name__ == "__main__":
    main()
