import os

# Comma-separated list of origins allowed to call the API
CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get(
        "FLIGHTTERRAIN_CORS_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173",
    ).split(",")
    if origin.strip()
]

# Set FLIGHTTERRAIN_SNAP=1 to snap samples to the resolution lattice by default
SNAP_DEFAULT = os.environ.get("FLIGHTTERRAIN_SNAP", "").strip() in ("1", "true", "yes")
