"""Data classes shared by the pipeline stages."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import numpy as np

from .exceptions import InputError


@dataclass(frozen=True)
class TrackPoint:
    """One recorded drone position: WGS84 degrees plus altitude in metres."""
    latitude: float
    longitude: float
    altitude: float = 0.0

    @classmethod
    def from_dict(cls, data: dict) -> "TrackPoint":
        """Build a point from a mapping, accepting lat/lon/lng aliases."""
        try:
            lat = data["latitude"] if "latitude" in data else data["lat"]
            if "longitude" in data:
                lon = data["longitude"]
            elif "lon" in data:
                lon = data["lon"]
            else:
                lon = data["lng"]
            alt = data.get("altitude", data.get("alt", 0.0))
            return cls(latitude=float(lat), longitude=float(lon),
                       altitude=float(alt if alt is not None else 0.0))
        except (KeyError, TypeError, ValueError) as e:
            raise InputError(f"Invalid track point {data!r}: {e}") from e

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude,
                "altitude": self.altitude}


@dataclass(frozen=True)
class Centroid:
    """Projection origin: mean latitude and longitude of a track."""
    latitude: float
    longitude: float


@dataclass(frozen=True)
class LocalPoint:
    """Position in local metres east (x), north (y) and up (z) of the centroid."""
    x: float
    y: float
    z: float

    def as_tuple(self) -> tuple:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class ElevationSample:
    longitude: float
    latitude: float
    elevation: float

    def to_dict(self) -> dict:
        return {"longitude": self.longitude, "latitude": self.latitude,
                "elevation": self.elevation}


@dataclass
class HeightField:
    """Rectangular elevation matrix over two sorted local axes.

    ``z`` has shape ``(len(ys), len(xs))`` and is indexed ``z[yi, xi]``.
    The empty field has no axes and a single empty row.
    """
    xs: np.ndarray
    ys: np.ndarray
    z: np.ndarray

    @classmethod
    def empty(cls) -> "HeightField":
        return cls(xs=np.empty(0), ys=np.empty(0), z=np.empty((1, 0)))

    @property
    def is_empty(self) -> bool:
        return len(self.xs) == 0 or len(self.ys) == 0

    @property
    def shape(self) -> tuple:
        """(rows, columns) of the height matrix."""
        return (len(self.ys), len(self.xs))

    def to_dict(self) -> dict:
        return {
            "x": [float(v) for v in self.xs],
            "y": [float(v) for v in self.ys],
            "z": [[float(v) for v in row] for row in self.z],
        }


class ResolveStatus(str, Enum):
    pending = "pending"
    ready = "ready"
    failed = "failed"


@dataclass
class ElevationResult:
    """Outcome of one elevation resolve.

    ``failed`` still carries a full set of synthetic samples; ``notice`` is
    the message a UI shows while running in degraded mode.
    """
    status: ResolveStatus
    samples: List[ElevationSample] = field(default_factory=list)
    reason: Optional[str] = None
    notice: Optional[str] = None
    token: Optional[int] = None

    @classmethod
    def pending(cls, token: Optional[int] = None) -> "ElevationResult":
        return cls(status=ResolveStatus.pending, token=token)

    @property
    def degraded(self) -> bool:
        return self.status == ResolveStatus.failed


@dataclass
class FlightScene:
    """Everything the renderer needs, sharing one centroid."""
    centroid: Centroid
    path: List[LocalPoint]
    labels: List[str] = field(default_factory=list)
    outline: List[LocalPoint] = field(default_factory=list)
    terrain: Optional[HeightField] = None
    elevation: Optional[ElevationResult] = None
    token: Optional[int] = None

    @property
    def notice(self) -> Optional[str]:
        return self.elevation.notice if self.elevation is not None else None

    def to_dict(self) -> dict:
        elevation = None
        if self.elevation is not None:
            elevation = {
                "status": self.elevation.status.value,
                "samples": len(self.elevation.samples),
                "reason": self.elevation.reason,
                "notice": self.elevation.notice,
            }
        return {
            "centroid": {"latitude": self.centroid.latitude,
                         "longitude": self.centroid.longitude},
            "path": [list(p.as_tuple()) for p in self.path],
            "labels": list(self.labels),
            "outline": [list(p.as_tuple()) for p in self.outline],
            "terrain": self.terrain.to_dict() if self.terrain is not None else None,
            "elevation": elevation,
        }
