"""Track loading and scene/height-field JSON export."""

import csv
import json
import logging
import pathlib
from typing import List

from .exceptions import InputError
from .models import FlightScene, HeightField, TrackPoint

logger = logging.getLogger(__name__)


def _load_json_track(path: pathlib.Path) -> List[TrackPoint]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except UnicodeDecodeError as e:
        raise InputError(f"{path.name} is not UTF-8 text: {e}") from e
    except json.JSONDecodeError as e:
        raise InputError(f"{path.name} is not valid JSON: {e}") from e

    if isinstance(data, dict):
        data = data.get("track", data.get("points"))
    if not isinstance(data, list):
        raise InputError(f"{path.name} must hold a list of track points")
    points = []
    for item in data:
        # [latitude, longitude, altitude?] rows
        if isinstance(item, (list, tuple)) and len(item) >= 2:
            item = {"latitude": item[0], "longitude": item[1],
                    "altitude": item[2] if len(item) > 2 else 0.0}
        if not isinstance(item, dict):
            raise InputError(f"Invalid track point {item!r} in {path.name}")
        points.append(TrackPoint.from_dict(item))
    return points


def _load_csv_track(path: pathlib.Path) -> List[TrackPoint]:
    try:
        return _read_csv_rows(path)
    except UnicodeDecodeError as e:
        raise InputError(f"{path.name} is not UTF-8 text: {e}") from e
    except csv.Error as e:
        raise InputError(f"{path.name} is not valid CSV: {e}") from e


def _read_csv_rows(path: pathlib.Path) -> List[TrackPoint]:
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            raise InputError(f"{path.name} has no header row")
        rows = []
        for row in reader:
            row = {k.strip().lower(): v for k, v in row.items() if k is not None}
            rows.append(TrackPoint.from_dict(row))
    return rows


def load_track(path) -> List[TrackPoint]:
    """Read a flight track from a .json or .csv file."""
    path = pathlib.Path(path)
    if not path.exists():
        raise InputError(f"Track file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".json":
        track = _load_json_track(path)
    elif suffix == ".csv":
        track = _load_csv_track(path)
    else:
        raise InputError(f"Unsupported track format: {suffix or path.name}")

    logger.info(f"Loaded {len(track)} track points from {path.name}")
    return track


def _write_json(data: dict, path) -> pathlib.Path:
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    size_kb = path.stat().st_size / 1024
    logger.info(f"Wrote {path.name} ({size_kb:.1f} KB)")
    return path


def write_scene(scene: FlightScene, path) -> pathlib.Path:
    """Write the renderer-facing scene as JSON."""
    return _write_json(scene.to_dict(), path)


def write_height_field(field: HeightField, path) -> pathlib.Path:
    return _write_json(field.to_dict(), path)


def write_track(track: List[TrackPoint], path) -> pathlib.Path:
    return _write_json({"track": [p.to_dict() for p in track]}, path)
