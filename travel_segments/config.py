"""Configuration: .env loading, paths, constants."""

import os
from pathlib import Path
from dotenv import load_dotenv

# Project root = parent of travel_segments/
PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(PROJECT_ROOT / ".env")

# --- Logging ---
LOG_LEVEL = os.getenv("TRAVEL_SEGMENTS_LOG_LEVEL", "WARNING")

# --- Notes tags ---
# Metadata smuggled through free-text notes fields: "<tag><value> | <user notes>"
LAYOVER_TAG = "Layover: "
PAYMENT_TAG = "Payment: "
TAG_SEPARATOR = " | "

# --- Placeholder locations for single legacy transfers ---
PLACEHOLDER_AIRPORT = "Airport"
PLACEHOLDER_STATION = "Station"
PLACEHOLDER_HOME = "Home"
PLACEHOLDER_HOME_OR_HOTEL = "Home/Hotel"
PLACEHOLDER_ACCOMMODATION = "Hotel/Accommodation"

# --- Segment ids ---
SEGMENT_ID_PREFIX = "segment"
SEGMENT_ID_SUFFIX_LEN = 5
