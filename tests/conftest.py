import asyncio

import pytest

from flightterrain.constants import SAMPLE_TRACK
from flightterrain.models import ElevationSample, TrackPoint


class FakeResponse:
    def __init__(self, status_code=200, payload=None, json_error=False):
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self._payload = payload
        self._json_error = json_error

    def json(self):
        if self._json_error:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class FakeSession:
    """Stands in for requests.Session; echoes locations back with elevations.

    ``fail_on`` maps a 1-based call number to a FakeResponse (or exception)
    returned instead of the echo.
    """

    def __init__(self, fail_on=None):
        self.calls = []
        self.fail_on = fail_on or {}
        self.closed = False

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append(json["locations"])
        failure = self.fail_on.get(len(self.calls))
        if isinstance(failure, Exception):
            raise failure
        if failure is not None:
            return failure
        results = [
            {"latitude": loc["latitude"], "longitude": loc["longitude"],
             "elevation": 100.0 + len(self.calls)}
            for loc in json["locations"]
        ]
        return FakeResponse(200, {"results": results})

    def close(self):
        self.closed = True


class EchoProvider:
    """Provider returning a fixed elevation for every point."""

    def __init__(self, elevation=42.0):
        self.elevation = elevation
        self.calls = 0

    async def fetch(self, points):
        self.calls += 1
        return [ElevationSample(float(lon), float(lat), self.elevation) for lon, lat in points]


class GatedProvider:
    """First fetch blocks until ``release()``; later fetches return at once."""

    def __init__(self):
        self.calls = 0
        self.gate = None

    def release(self):
        self.gate.set()

    async def fetch(self, points):
        self.calls += 1
        call = self.calls
        if call == 1:
            self.gate = asyncio.Event()
            await self.gate.wait()
        return [ElevationSample(float(lon), float(lat), float(call)) for lon, lat in points]


@pytest.fixture
def sample_track():
    return [TrackPoint(lat, lon, alt) for lat, lon, alt in SAMPLE_TRACK]


@pytest.fixture
def straight_track():
    """East-west line roughly 550 m long."""
    return [
        TrackPoint(37.0, -122.000, 10.0),
        TrackPoint(37.0, -121.9975, 20.0),
        TrackPoint(37.0, -121.995, 30.0),
    ]
