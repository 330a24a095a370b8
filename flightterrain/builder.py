"""TerrainBuilder — thin orchestrator that delegates to focused modules."""

import logging
import time
from typing import Optional, Sequence

from .constants import DEFAULT_BUFFER_DISTANCE, DEFAULT_RESOLUTION
from .elevation import ElevationProvider, OpenElevationProvider, resolve_elevations
from .exceptions import DegenerateBufferError, InputError
from .geometry import (
    buffer_outline,
    build_buffer,
    build_sample_grid,
    compute_centroid,
    project_ring,
    project_track,
    track_labels,
)
from .models import ElevationResult, FlightScene, ResolveStatus, TrackPoint
from .terrain import rebuild_height_field

logger = logging.getLogger(__name__)


class TerrainBuilder:
    def __init__(self, provider: Optional[ElevationProvider] = None,
                 buffer_distance: float = DEFAULT_BUFFER_DISTANCE,
                 resolution: float = DEFAULT_RESOLUTION,
                 snap: bool = False):
        """
        provider: elevation source; defaults to the Open-Elevation service.
        buffer_distance, resolution: metres, used when build() is not given
            explicit values.
        snap: snap samples to the resolution lattice before re-gridding.
        """
        self.provider = provider if provider is not None else OpenElevationProvider()
        self.buffer_distance = buffer_distance
        self.resolution = resolution
        self.snap = snap

        self.latest_token = 0
        self.state: Optional[ElevationResult] = None
        self.scene: Optional[FlightScene] = None

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def status(self) -> Optional[ResolveStatus]:
        return self.state.status if self.state is not None else None

    @property
    def notice(self) -> Optional[str]:
        return self.state.notice if self.state is not None else None

    def is_current(self, token: int) -> bool:
        return token == self.latest_token

    def _publish(self, token: int, scene: Optional[FlightScene]) -> Optional[FlightScene]:
        """Apply *scene* only if no newer build has started since *token*."""
        if not self.is_current(token):
            logger.info(f"Discarding stale result for build {token} "
                        f"(latest is {self.latest_token})")
            return scene
        self.scene = scene
        if scene is not None and scene.elevation is not None:
            self.state = scene.elevation
        else:
            self.state = ElevationResult(status=ResolveStatus.ready, token=token)
        return scene

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def build(self, track: Sequence[TrackPoint],
                    buffer_distance: Optional[float] = None,
                    resolution: Optional[float] = None) -> Optional[FlightScene]:
        """Run the full pipeline for *track*.

        Returns the scene for this call (``None`` for an empty track).  The
        builder's ``scene``/``state`` only change if this call is still the
        most recently started one when it finishes.  An unexpected error
        still settles ``state`` (as ``failed``) before it propagates.
        """
        self.latest_token += 1
        token = self.latest_token
        self.state = ElevationResult.pending(token)

        distance = self.buffer_distance if buffer_distance is None else buffer_distance
        res = self.resolution if resolution is None else resolution

        try:
            return await self._run(token, track, distance, res)
        except Exception as e:
            logger.error(f"Build {token} failed: {e}")
            if self.is_current(token):
                self.state = ElevationResult(status=ResolveStatus.failed,
                                             reason=str(e) or type(e).__name__,
                                             token=token)
            raise

    async def _run(self, token: int, track: Sequence[TrackPoint],
                   distance: float, res: float) -> Optional[FlightScene]:
        try:
            if res <= 0:
                raise InputError(f"Resolution must be positive, got {res}")
            centroid = compute_centroid(track)
        except InputError as e:
            logger.warning(f"Skipping terrain build: {e}")
            return self._publish(token, None)

        t0 = time.perf_counter()
        logger.info(f"Build {token}: {len(track)} track points, buffer={distance:g}m, "
                    f"resolution={res:g}m")

        scene = FlightScene(
            centroid=centroid,
            path=project_track(track, centroid),
            labels=track_labels(track),
            token=token,
        )

        # ── Buffer ───────────────────────────────────────────────
        try:
            polygon = build_buffer(track, distance)
        except DegenerateBufferError as e:
            logger.warning(f"No buffer for this track, skipping terrain: {e}")
            return self._publish(token, scene)

        scene.outline = project_ring(buffer_outline(polygon), centroid)

        # ── Sample grid ──────────────────────────────────────────
        grid = build_sample_grid(polygon, res)
        if len(grid) == 0:
            logger.warning("Sample grid is empty, skipping terrain")
            return self._publish(token, scene)

        # ── Elevation + re-grid ──────────────────────────────────
        result = await resolve_elevations(grid, centroid, self.provider)
        result.token = token
        scene.elevation = result
        scene.terrain = rebuild_height_field(result.samples, centroid, res, snap=self.snap)

        elapsed = time.perf_counter() - t0
        logger.info(f"Build {token} finished in {elapsed:.1f}s "
                    f"({result.status.value}, terrain {scene.terrain.shape[1]}x"
                    f"{scene.terrain.shape[0]})")
        return self._publish(token, scene)
