"""Exception hierarchy for the terrain pipeline."""


class FlightTerrainError(Exception):
    """Base class for every error raised by flightterrain."""


class InputError(FlightTerrainError, ValueError):
    """Empty or malformed track, or an invalid pipeline parameter."""


class DegenerateBufferError(FlightTerrainError):
    """Buffering the path produced no usable polygon."""


class ElevationFetchError(FlightTerrainError):
    """Transport error or non-success status from the elevation service."""


class MalformedResponseError(ElevationFetchError):
    """The elevation service answered with an unexpected payload."""
