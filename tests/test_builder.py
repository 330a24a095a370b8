import asyncio

import numpy as np
import pytest

from flightterrain import builder as builder_module
from flightterrain.builder import TerrainBuilder
from flightterrain.constants import DEGRADED_NOTICE
from flightterrain.elevation import OpenElevationProvider
from flightterrain.models import ResolveStatus, TrackPoint

from tests.conftest import EchoProvider, FakeResponse, FakeSession, GatedProvider


def test_build_produces_full_scene(sample_track):
    provider = EchoProvider(elevation=12.5)
    builder = TerrainBuilder(provider, buffer_distance=100, resolution=10)

    scene = asyncio.run(builder.build(sample_track))

    assert builder.scene is scene
    assert builder.status == ResolveStatus.ready
    assert provider.calls == 1
    assert [p.z for p in scene.path] == [p.altitude for p in sample_track]
    assert len(scene.labels) == len(sample_track)
    assert len(scene.outline) > 4
    assert all(p.z == 0.0 for p in scene.outline)
    assert scene.terrain is not None and not scene.terrain.is_empty
    # lattice corners far from the corridor have no neighbours and stay 0
    assert set(np.unique(scene.terrain.z)) <= {0.0, 12.5}
    assert (scene.terrain.z == 12.5).any()
    assert scene.notice is None


def test_server_error_yields_fallback_terrain_and_notice(sample_track):
    session = FakeSession(fail_on={1: FakeResponse(500)})
    provider = OpenElevationProvider(url="http://elevation.test/lookup",
                                     batch_delay=0, session=session)
    builder = TerrainBuilder(provider, buffer_distance=60, resolution=10)

    scene = asyncio.run(builder.build(sample_track))

    assert scene.elevation.status == ResolveStatus.failed
    assert builder.notice == DEGRADED_NOTICE
    assert scene.notice == DEGRADED_NOTICE
    assert len(session.calls) == 1
    assert len(scene.elevation.samples) > 100
    assert not scene.terrain.is_empty


def test_zero_buffer_skips_terrain_but_keeps_path(sample_track):
    provider = EchoProvider()
    builder = TerrainBuilder(provider)

    scene = asyncio.run(builder.build(sample_track, buffer_distance=0, resolution=10))

    assert scene.terrain is None
    assert scene.outline == []
    assert len(scene.path) == len(sample_track)
    assert provider.calls == 0


def test_empty_track_builds_nothing():
    builder = TerrainBuilder(EchoProvider())
    assert asyncio.run(builder.build([])) is None
    assert builder.scene is None
    assert builder.status == ResolveStatus.ready


def test_invalid_resolution_builds_nothing(sample_track):
    builder = TerrainBuilder(EchoProvider())
    assert asyncio.run(builder.build(sample_track, resolution=0)) is None


def test_stale_build_does_not_overwrite_newer(sample_track):
    shifted = [TrackPoint(p.latitude + 0.001, p.longitude, p.altitude) for p in sample_track]

    async def scenario():
        provider = GatedProvider()
        builder = TerrainBuilder(provider, buffer_distance=50, resolution=10)

        first = asyncio.create_task(builder.build(sample_track))
        await asyncio.sleep(0)
        assert builder.status == ResolveStatus.pending

        newer = await builder.build(shifted)
        provider.release()
        stale = await first
        return builder, stale, newer

    builder, stale, newer = asyncio.run(scenario())

    assert stale.token == 1 and newer.token == 2
    assert not builder.is_current(stale.token)
    assert builder.scene is newer
    assert builder.state.token == 2
    # second fetch tags its samples with elevation 2.0
    assert set(np.unique(builder.scene.terrain.z)) <= {0.0, 2.0}
    assert (builder.scene.terrain.z == 2.0).any()


@pytest.mark.parametrize("snap", [False, True])
def test_snap_option_reaches_regridder(sample_track, snap):
    builder = TerrainBuilder(EchoProvider(), buffer_distance=40, resolution=10, snap=snap)
    scene = asyncio.run(builder.build(sample_track))
    rows, cols = scene.terrain.shape
    assert rows > 1 and cols > 1


def test_provider_key_error_yields_fallback_scene(sample_track):
    class KeyErrorProvider:
        async def fetch(self, points):
            raise KeyError("results")

    builder = TerrainBuilder(KeyErrorProvider(), buffer_distance=50, resolution=10)
    scene = asyncio.run(builder.build(sample_track))

    assert builder.status == ResolveStatus.failed
    assert scene.notice == DEGRADED_NOTICE
    assert not scene.terrain.is_empty


def test_unexpected_error_settles_state(monkeypatch, sample_track):
    def broken_regrid(*args, **kwargs):
        raise RuntimeError("regrid bug")

    monkeypatch.setattr(builder_module, "rebuild_height_field", broken_regrid)
    builder = TerrainBuilder(EchoProvider(), buffer_distance=50, resolution=10)

    with pytest.raises(RuntimeError):
        asyncio.run(builder.build(sample_track))

    assert builder.status == ResolveStatus.failed
    assert builder.state.reason == "regrid bug"
    assert builder.scene is None
