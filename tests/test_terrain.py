import math

import numpy as np
import pytest

from flightterrain.constants import METERS_PER_DEGREE
from flightterrain.exceptions import InputError
from flightterrain.models import Centroid, ElevationSample, HeightField
from flightterrain.terrain import preview_height_field, rebuild_height_field

ORIGIN = Centroid(latitude=0.0, longitude=0.0)
RES = 10.0
STEP = RES / METERS_PER_DEGREE


def _lattice(cols, rows, elevation=lambda j, i: 10.0 * i + j):
    return [
        ElevationSample(longitude=j * STEP, latitude=i * STEP, elevation=elevation(j, i))
        for i in range(rows) for j in range(cols)
    ]


def test_empty_samples_give_empty_field():
    field = rebuild_height_field([], ORIGIN, RES)
    assert field.is_empty
    assert len(field.xs) == 0 and len(field.ys) == 0
    assert field.to_dict() == {"x": [], "y": [], "z": [[]]}


def test_single_sample_gives_one_by_one_field():
    field = rebuild_height_field([ElevationSample(0.001, 0.002, 57.5)], ORIGIN, RES)
    assert field.shape == (1, 1)
    assert field.z[0, 0] == 57.5


def test_full_lattice_uses_exact_matches():
    samples = _lattice(3, 2)
    field = rebuild_height_field(samples, ORIGIN, RES)

    assert field.shape == (2, 3)
    assert list(field.xs) == sorted(field.xs)
    assert list(field.ys) == sorted(field.ys)
    np.testing.assert_array_equal(field.z, [[0.0, 1.0, 2.0], [10.0, 11.0, 12.0]])


def test_missing_cell_is_neighbour_average():
    samples = [s for s in _lattice(2, 2) if (s.longitude, s.latitude) != (0.0, 0.0)]
    field = rebuild_height_field(samples, ORIGIN, RES)

    assert field.shape == (2, 2)
    assert field.z[0, 0] == pytest.approx((1.0 + 10.0 + 11.0) / 3)
    assert field.z[1, 1] == 11.0


def test_cell_without_neighbours_is_zero():
    samples = [
        ElevationSample(0.0, 0.0, 5.0),
        ElevationSample(10 * STEP, 10 * STEP, 7.0),
    ]
    field = rebuild_height_field(samples, ORIGIN, RES)

    assert field.shape == (2, 2)
    assert field.z[0, 0] == 5.0
    assert field.z[1, 1] == 7.0
    assert field.z[0, 1] == 0.0
    assert field.z[1, 0] == 0.0


def test_every_cell_is_filled():
    rng = np.random.default_rng(7)
    samples = [ElevationSample(float(lon), float(lat), float(e))
               for lon, lat, e in zip(rng.uniform(0, 20 * STEP, 60),
                                      rng.uniform(0, 20 * STEP, 60),
                                      rng.uniform(0, 100, 60))]
    field = rebuild_height_field(samples, ORIGIN, RES)

    assert len(field.z) == len(field.ys)
    assert all(len(row) == len(field.xs) for row in field.z)
    assert np.all(np.isfinite(field.z))


def test_snap_collapses_jittered_samples_onto_lattice():
    samples = [
        ElevationSample(s.longitude + 1e-10 * k, s.latitude - 1e-10 * k, s.elevation)
        for k, s in enumerate(_lattice(2, 2), start=1)
    ]
    loose = rebuild_height_field(samples, ORIGIN, RES)
    snapped = rebuild_height_field(samples, ORIGIN, RES, snap=True)

    assert loose.shape == (4, 4)
    assert snapped.shape == (2, 2)
    np.testing.assert_allclose(snapped.xs, [0.0, RES])
    np.testing.assert_array_equal(snapped.z, [[0.0, 1.0], [10.0, 11.0]])


def test_non_positive_resolution_raises():
    with pytest.raises(InputError):
        rebuild_height_field(_lattice(2, 2), ORIGIN, 0)


def test_preview_field_dimensions_and_centre():
    field = preview_height_field(resolution=5, extent=120)

    assert field.shape == (48, 48)
    assert field.xs[0] == -120.0
    assert field.xs[24] == 0.0
    expected = (math.sin(0.5) * math.cos(0.5) * 10 +
                math.sin(1.0) * math.cos(1.0) * 3)
    assert field.z[24, 24] == pytest.approx(expected)


def test_preview_rejects_bad_parameters():
    with pytest.raises(InputError):
        preview_height_field(resolution=0)


def test_height_field_to_dict_is_plain_lists():
    field = HeightField(xs=np.array([0.0, 1.0]), ys=np.array([2.0]), z=np.array([[3.0, 4.0]]))
    assert field.to_dict() == {"x": [0.0, 1.0], "y": [2.0], "z": [[3.0, 4.0]]}
