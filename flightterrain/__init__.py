"""flightterrain package — terrain scenes from drone GPS flight tracks.

Import constants FIRST so environment overrides and logging are set up
before any other module reads them.
"""

from flightterrain import constants as _constants  # noqa: F401

from flightterrain.builder import TerrainBuilder
from flightterrain.models import TrackPoint
