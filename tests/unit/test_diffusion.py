"""Unit tests for the bulk/surface decomposition."""

import numpy as np
import pytest

from pyfastwave import WaveConfig
from pyfastwave.wave import DiffusionDecomposer


def height_decomposer(store, config):
    return DiffusionDecomposer(
        store, config, "height", "height_low", "height_high", "terrain", height_like=True
    )


def flux_decomposer(store, config):
    return DiffusionDecomposer(
        store, config, "qx", "qx_low", "qx_high", "zero_terrain", height_like=False
    )


@pytest.mark.unit
def test_reconstruction(make_store, config, test_data_manager):
    store = make_store(32, 32)
    h0 = 1.0 + test_data_manager.random_field(32, 32)
    store.from_numpy("height", h0)

    low, high = height_decomposer(store, config).decompose(0.25)

    low = low.to_numpy()
    high = high.to_numpy()
    np.testing.assert_allclose(low + high, h0, atol=1e-5)
    np.testing.assert_allclose(store.to_numpy("height"), h0, atol=1e-5)


@pytest.mark.unit
def test_mean_preserved_on_flux(make_store, config):
    store = make_store(32, 32)
    q0 = np.random.default_rng(3).normal(0.0, 1.0, size=(32, 32))
    store.from_numpy("qx", q0)

    low, _ = flux_decomposer(store, config).decompose(0.25)
    low = low.to_numpy().astype(np.float64)

    assert low.mean() == pytest.approx(q0.astype(np.float32).mean(), abs=1e-5)
    # the filter actually smooths
    assert low.var() < 0.5 * q0.var()


@pytest.mark.unit
def test_uniform_field_is_pure_bulk(make_store, config):
    store = make_store(16, 16)
    store.fill("qx", 3.0)

    low, high = flux_decomposer(store, config).decompose(0.1)

    np.testing.assert_allclose(low.to_numpy(), 3.0)
    np.testing.assert_allclose(high.to_numpy(), 0.0)


@pytest.mark.unit
def test_pingpong_ends_on_primary(make_store, config):
    store = make_store(16, 16)
    store.fill("height", 2.0)
    height_decomposer(store, config).decompose(0.1)
    pair = store.pingpong("height_low")
    assert pair.parity == 0
    assert pair.front is pair.primary


@pytest.mark.unit
def test_dry_cells_are_not_smeared(make_store, config, test_data_manager):
    store = make_store(32, 32)
    terrain = np.zeros((32, 32))
    terrain[:, 16:] = 5.0
    height = 2.0 + test_data_manager.random_field(32, 32, 0.0, 0.5)
    # right half dry: surface sits on the terrain
    height[:, 16:] = 5.0
    store.from_numpy("terrain", terrain)
    store.from_numpy("height", height)

    low, _ = height_decomposer(store, config).decompose(0.25)
    low = low.to_numpy().astype(np.float64)

    np.testing.assert_allclose(low[:, 16:], 5.0)
    # the wet side keeps its own volume
    wet = height[:, :16].astype(np.float32).astype(np.float64)
    assert low[:, :16].sum() == pytest.approx(wet.sum(), rel=1e-5)


@pytest.mark.unit
def test_terrain_step_reduces_exchange(make_store, test_data_manager):
    cfg = WaveConfig(terrain_sharpness=50.0)
    store = make_store(32, 32, cfg)
    terrain = np.zeros((32, 32))
    terrain[:, 16:] = -1.0
    height = np.where(np.arange(32)[None, :] < 16, 2.0, 1.0) * np.ones((32, 32))
    store.from_numpy("terrain", terrain)
    store.from_numpy("height", height)

    low, _ = height_decomposer(store, cfg).decompose(0.25)
    low = low.to_numpy()

    # exp(-50) conductance: the step between both halves survives
    np.testing.assert_allclose(low[:, :16], 2.0, atol=1e-5)
    np.testing.assert_allclose(low[:, 16:], 1.0, atol=1e-5)


@pytest.mark.unit
def test_odd_iteration_count_rejected(make_store, config):
    store = make_store(16, 16)
    config.diffusion_iterations = 3
    with pytest.raises(ValueError):
        height_decomposer(store, config)
