"""Configuration constants, environment overrides, and logging setup."""

import os
import logging

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# ── Projection ──────────────────────────────────────────────────────────
# Metres per degree at the equator.  The projector, the buffer, the sample
# grid, the synthetic fallback and the re-gridder all convert through this
# one value; a second literal would skew the buffer against its outline.
METERS_PER_DEGREE = 111320.0

# ── Pipeline defaults ───────────────────────────────────────────────────
DEFAULT_BUFFER_DISTANCE = float(os.environ.get("FLIGHTTERRAIN_BUFFER_DISTANCE", "100"))
DEFAULT_RESOLUTION = float(os.environ.get("FLIGHTTERRAIN_RESOLUTION", "10"))

# Segments per quarter circle on buffer caps and joins
BUFFER_QUAD_SEGS = 8

# Re-gridder averages samples within this many resolutions of a cell
NEIGHBOR_WINDOW_FACTOR = 2.0

# ── Elevation service ───────────────────────────────────────────────────
# Set FLIGHTTERRAIN_ELEVATION_URL= (empty) to run on synthetic terrain only
ELEVATION_API_URL = os.environ.get(
    "FLIGHTTERRAIN_ELEVATION_URL", "https://api.open-elevation.com/api/v1/lookup")
ELEVATION_BATCH_SIZE = int(os.environ.get("FLIGHTTERRAIN_BATCH_SIZE", "100"))
ELEVATION_BATCH_DELAY = float(os.environ.get("FLIGHTTERRAIN_BATCH_DELAY", "0.1"))

_timeout = os.environ.get("FLIGHTTERRAIN_ELEVATION_TIMEOUT", "").strip()
ELEVATION_TIMEOUT = float(_timeout) if _timeout else None  # None = transport default

DEGRADED_NOTICE = "Failed to fetch elevation data. Using simulated terrain instead."

# ── Synthetic terrain ───────────────────────────────────────────────────
# Fallback terrain: (frequency per metre, amplitude in metres)
FALLBACK_TERRAIN_WAVES = (
    (0.005, 30.0),  # large features
    (0.02, 10.0),   # medium features
    (0.05, 5.0),    # small details
)

# Preview terrain: (frequency per metre, amplitude in metres, phase)
PREVIEW_TERRAIN_WAVES = (
    (0.01, 30.0, 0.0),  # large hills
    (0.05, 10.0, 0.5),  # medium features
    (0.2, 3.0, 1.0),    # small details
)
DEFAULT_PREVIEW_RESOLUTION = 5.0
DEFAULT_PREVIEW_EXTENT = 120.0

# ── Sample data ─────────────────────────────────────────────────────────
# (latitude, longitude, altitude) of a short flight over San Francisco
SAMPLE_TRACK = [
    (37.7749, -122.4194, 5),
    (37.7750, -122.4190, 20),
    (37.7752, -122.4185, 35),
    (37.7756, -122.4180, 50),
    (37.7760, -122.4175, 65),
    (37.7765, -122.4170, 80),
    (37.7770, -122.4165, 75),
    (37.7775, -122.4160, 85),
    (37.7780, -122.4155, 90),
    (37.7785, -122.4150, 70),
    (37.7790, -122.4145, 50),
    (37.7795, -122.4140, 30),
]

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)
