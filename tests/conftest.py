"""
Pytest configuration and fixtures for PyFastWave test suite.

This file contains shared fixtures, test configuration, and utilities
used across the test suite.
"""
import os
import sys

import numpy as np
import pytest


def pytest_configure(config):
    """Configure pytest with custom settings."""
    # Add the package root to Python path for testing
    package_root = os.path.dirname(os.path.dirname(__file__))
    if package_root not in sys.path:
        sys.path.insert(0, package_root)

    for marker, description in (
        ("unit", "fast tests of a single component"),
        ("integration", "full simulations"),
        ("slow", "long running tests"),
        ("gpu", "tests needing a GPU backend"),
        ("importtest", "module import checks"),
    ):
        config.addinivalue_line("markers", f"{marker}: {description}")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers."""
    for item in items:
        if "gpu" in item.keywords:
            item.add_marker("slow")

        # Mark import tests for easy selection
        if "test_imports.py" in str(item.fspath):
            item.add_marker("importtest")


@pytest.fixture(scope="session", autouse=True)
def taichi_runtime():
    """Initialise Taichi on the CPU once for the whole session."""
    try:
        import taichi as ti

        ti.init(arch=ti.cpu, offline_cache=False)
    except Exception:
        pytest.skip("Taichi not available or initialization failed")
    return True


@pytest.fixture
def config():
    """Default simulation parameters."""
    from pyfastwave import WaveConfig

    return WaveConfig()


@pytest.fixture
def make_store():
    """Factory building water stores, destroyed at teardown."""
    from pyfastwave.fields import create_water_store

    stores = []

    def _make(nx=32, ny=32, config=None):
        from pyfastwave import WaveConfig

        store = create_water_store(nx, ny, WaveConfig() if config is None else config)
        stores.append(store)
        return store

    yield _make

    for store in stores:
        store.destroy()


@pytest.fixture
def make_simulator():
    """Factory building simulators, destroyed at teardown."""
    from pyfastwave import Simulator

    sims = []

    def _make(nx=32, ny=32, **kwargs):
        sim = Simulator(nx, ny, **kwargs)
        sims.append(sim)
        return sim

    yield _make

    for sim in sims:
        sim.destroy()


class TestDataManager:
    """Helper class for building water states."""

    @staticmethod
    def sine_wave(nx, ny, mode=4, amplitude=0.1, axis=0, phase="sin"):
        """Single Fourier mode along x (axis=0) or y (axis=1)."""
        n = nx if axis == 0 else ny
        k = 2.0 * np.pi * mode / n
        coord = np.arange(n, dtype=np.float64)
        wave = np.sin(k * coord) if phase == "sin" else np.cos(k * coord)
        wave = amplitude * wave
        if axis == 0:
            return np.tile(wave, (ny, 1)), k
        return np.tile(wave[:, None], (1, nx)), k

    @staticmethod
    def bump(nx, ny, level=2.0, amplitude=0.1, radius=3.0):
        """Flat lake with a central Gaussian bump."""
        jj, ii = np.mgrid[0:ny, 0:nx]
        r2 = (ii - nx // 2) ** 2 + (jj - ny // 2) ** 2
        return level + amplitude * np.exp(-r2 / (2.0 * radius * radius))

    @staticmethod
    def random_field(nx, ny, low=0.0, high=1.0, seed=42):
        rng = np.random.default_rng(seed)
        return rng.uniform(low, high, size=(ny, nx))


@pytest.fixture
def test_data_manager():
    """Provide access to test data creation utilities."""
    return TestDataManager()
