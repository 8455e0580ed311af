"""Unit tests for the bulk shallow water solver."""

import numpy as np
import pytest

from pyfastwave.wave import ShallowWaterSolver


def set_bulk_height(store, h):
    store.from_numpy("height_low", h)
    store.from_numpy("height_low_prev", h)


@pytest.mark.unit
def test_lake_at_rest_over_slope(make_store, config):
    store = make_store(32, 32)
    slope = np.tile(np.linspace(-4.0, -1.0, 32), (32, 1))
    store.from_numpy("terrain", slope)
    set_bulk_height(store, np.zeros((32, 32)))

    solver = ShallowWaterSolver(store, config)
    for _ in range(5):
        solver.step(0.05)

    np.testing.assert_allclose(store.to_numpy("height_low"), 0.0, atol=1e-5)
    assert np.abs(store.to_numpy("qx_low")).max() < 1e-4
    assert np.abs(store.to_numpy("qy_low")).max() < 1e-4


@pytest.mark.unit
def test_bump_drives_outward_flow(make_store, config, test_data_manager):
    store = make_store(32, 32)
    set_bulk_height(store, test_data_manager.bump(32, 32, level=2.0, amplitude=0.1))

    ShallowWaterSolver(store, config).step(0.05)

    qx = store.to_numpy("qx_low")
    qy = store.to_numpy("qy_low")
    assert qx[16, 20] > 0.0
    assert qx[16, 12] < 0.0
    assert qy[20, 16] > 0.0
    assert qy[12, 16] < 0.0
    # mirror symmetry of the response
    assert qx[16, 20] == pytest.approx(-qx[16, 12], rel=1e-4)


@pytest.mark.unit
def test_continuity_conserves_volume(make_store, config, test_data_manager):
    store = make_store(32, 32)
    h0 = 2.0 + test_data_manager.random_field(32, 32, 0.0, 0.2, seed=1)
    set_bulk_height(store, h0)
    store.from_numpy("qx_low", test_data_manager.random_field(32, 32, -0.5, 0.5, seed=2))
    store.from_numpy("qy_low", test_data_manager.random_field(32, 32, -0.5, 0.5, seed=3))

    ShallowWaterSolver(store, config).step(0.05)

    before = h0.astype(np.float32).astype(np.float64).sum()
    after = store.to_numpy("height_low").astype(np.float64).sum()
    assert after == pytest.approx(before, rel=1e-5)
    # the previous bulk height was snapshotted
    np.testing.assert_allclose(store.to_numpy("height_low_prev"), h0, atol=1e-6)


@pytest.mark.unit
def test_dry_cells_carry_no_flow(make_store, config):
    store = make_store(16, 16)
    terrain = np.zeros((16, 16))
    terrain[:, 8:] = 3.0
    h = np.where(np.arange(16)[None, :] < 8, 1.0, 3.0) * np.ones((16, 16))
    store.from_numpy("terrain", terrain)
    set_bulk_height(store, h)
    store.fill("qx_low", 0.2)

    ShallowWaterSolver(store, config).step(0.05)

    qx = store.to_numpy("qx_low")
    ux = store.to_numpy("ux")
    assert np.all(np.isfinite(qx))
    np.testing.assert_allclose(ux[:, 9:], 0.0)
    np.testing.assert_allclose(qx[:, 9:], 0.0)


@pytest.mark.unit
def test_velocity_clamped(make_store, config):
    store = make_store(16, 16)
    set_bulk_height(store, np.full((16, 16), 1.0))
    store.fill("qx_low", 1000.0)

    ShallowWaterSolver(store, config).step(0.01)

    assert np.abs(store.to_numpy("ux")).max() <= config.max_velocity + 1e-4
