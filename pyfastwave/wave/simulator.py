"""
Water simulation orchestrator.

The Simulator owns the FieldStore and every solver stage, and advances the
state through a fixed pipeline each sub-step:

1. Snapshot height -> height_prev and height_high -> height_high_prev
2. Decompose height (terrain-aware) and both flux channels (flat reference)
   into bulk and surface layers
3. Bulk shallow water step
4. Spectral (Airy) step of the surface layer
5. Bulk velocity recomputation
6. Transport of the three surface-layer fields by the bulk velocity
7. Recombination of the fluxes, then of the height

Every stage runs on every sub-step. External time steps larger than the
configured maximum are consumed in several equal sub-steps.

Author: B.G.
"""

import math
import time

import numpy as np
import taichi as ti

from .. import constants as cte
from ..config import DisplayParams, WaveConfig
from ..fields import add_array_into, add_gaussian, create_water_store, scale_field
from .airy import SpectralWaveSolver
from .diffusion import DiffusionDecomposer
from .recombine import Recombiner
from .shallow_water import ShallowWaterSolver
from .transport import TransportAdvector
from .velocity import VelocityField

STAGES = (
    "snapshot",
    "decompose",
    "shallow",
    "airy",
    "velocity",
    "transport",
    "recombine",
)


class Simulator:
    """
    High-level interface to the height-field water engine.

    Args:
            nx (int): Number of columns (power of two)
            ny (int): Number of rows (power of two)
            config (WaveConfig, optional): Simulation parameters. Default: WaveConfig()
            terrain (numpy.ndarray, optional): Terrain elevation (ny, nx). Default: flat 0
            height (numpy.ndarray, optional): Initial water surface elevation (ny, nx).
                    Default: equal to the terrain (dry domain)
            display (DisplayParams, optional): World-space mapping handed to
                    consumers, not used by the simulation

    Attributes:
            store (FieldStore): Every simulation field
            time (float): Simulated time
            n_steps (int): Number of sub-steps taken
            verbose (bool): If True, simulate() times each stage
            timer (dict): Accumulated seconds per stage (filled when verbose)

    Raises:
            ValueError: If the grid is not a power of two or an array has the
                    wrong shape

    Example:
            sim = Simulator(128, 128, height=np.full((128, 128), 2.0))
            sim.add_local_perturbation(64, 64, radius=4.0, amplitude=0.2)
            for _ in range(60):
                sim.simulate(1 / 60)
            h = sim.get_height()

    Author: B.G.
    """

    def __init__(self, nx, ny, config=None, terrain=None, height=None, display=None):
        self.config = WaveConfig() if config is None else config
        if not isinstance(self.config, WaveConfig):
            raise TypeError("config must be a WaveConfig instance")
        self.config.validate()

        self.display = DisplayParams() if display is None else display

        self.store = create_water_store(nx, ny, self.config)

        try:
            self.decomposers = (
                DiffusionDecomposer(
                    self.store, self.config, "height", "height_low", "height_high",
                    "terrain", height_like=True,
                ),
                DiffusionDecomposer(
                    self.store, self.config, "qx", "qx_low", "qx_high",
                    "zero_terrain", height_like=False,
                ),
                DiffusionDecomposer(
                    self.store, self.config, "qy", "qy_low", "qy_high",
                    "zero_terrain", height_like=False,
                ),
            )
            self.shallow = ShallowWaterSolver(self.store, self.config)
            self.airy = SpectralWaveSolver(self.store, self.config)
            self.velocity = VelocityField(self.store, self.config)
            self.transports = (
                TransportAdvector(self.store, self.config, "qx_high", "qx_high_t", flux_like=True),
                TransportAdvector(self.store, self.config, "qy_high", "qy_high_t", flux_like=True),
                TransportAdvector(
                    self.store, self.config, "height_high", "height_high_t", flux_like=False
                ),
            )
            self.recombiner = Recombiner(self.store, self.config)

            self.time = 0.0
            self.n_steps = 0

            self.verbose = False
            self.reset_timings()

            if terrain is not None:
                self.set_terrain(terrain)
            self.set_height(self.get_terrain() if height is None else height)
        except Exception:
            self.store.destroy()
            raise

    @property
    def nx(self):
        return self.store.nx

    @property
    def ny(self):
        return self.store.ny

    @property
    def dx(self):
        return self.config.grid_scale

    @property
    def rshp(self):
        return self.store.rshp

    # ====== TIME STEPPING ======

    def substeps(self, dt):
        """
        Split an external time step into sub-steps.

        Args:
                dt (float): External time step

        Returns:
                tuple: (number of sub-steps, sub-step size). (0, 0.0) if dt <= 0.

        Author: B.G.
        """
        if dt <= 0:
            return 0, 0.0
        max_dt = self.config.max_dt
        if not self.config.substep:
            return 1, min(dt, max_dt)
        n = min(max(int(math.ceil(dt / max_dt - 1e-9)), 1), self.config.max_substeps)
        return n, min(dt / n, max_dt)

    def simulate(self, dt):
        """
        Advance the simulation by an external time step.

        With config.substep (default), dt is consumed in ceil(dt / max_dt)
        equal sub-steps, capped to config.max_substeps. Otherwise a single
        sub-step of min(dt, max_dt) is taken. Non-positive dt does nothing.

        Args:
                dt (float): Time step in seconds

        Author: B.G.
        """
        n, sub_dt = self.substeps(dt)
        for _ in range(n):
            self.step(sub_dt)

    def _tick(self, stage, st):
        if not self.verbose:
            return st
        ti.sync()
        now = time.time()
        self.timer[stage] += now - st
        return now

    def step(self, dt):
        """
        Run the full pipeline once with time step ``dt``.

        Args:
                dt (float): Sub-step size, assumed <= config.max_dt

        Author: B.G.
        """
        st = time.time()

        self.store.copy("height", "height_prev")
        self.store.copy("height_high", "height_high_prev")
        st = self._tick("snapshot", st)

        for decomposer in self.decomposers:
            decomposer.decompose(dt)
        st = self._tick("decompose", st)

        self.shallow.step(dt)
        st = self._tick("shallow", st)

        self.airy.step(dt)
        st = self._tick("airy", st)

        self.velocity.step()
        st = self._tick("velocity", st)

        for transport in self.transports:
            transport.step(dt)
        st = self._tick("transport", st)

        self.recombiner.recombine_flow()
        self.recombiner.recombine_height(dt)
        self._tick("recombine", st)

        self.time += dt
        self.n_steps += 1

    def reset_timings(self):
        self.timer = {key: 0.0 for key in STAGES}

    def print_timings(self):
        """
        Print accumulated per-stage timings (requires verbose=True while simulating).

        Author: B.G.
        """
        N = max(self.n_steps, 1)
        total = sum(self.timer.values())
        print(f"===== {self.n_steps} sub-steps, {total} s in total =====")
        for key, val in self.timer.items():
            print(f"= Stage {key} took {val} s in total ({val / N} per step)")
        print("======================================")

    # ====== EXTERNAL INPUTS ======

    def _check_array(self, arr, name):
        arr = np.asarray(arr, dtype=cte.FLOAT_TYPE_NP)
        if arr.shape != self.rshp:
            raise ValueError(f"{name} must have shape {self.rshp}, got {arr.shape}")
        return arr

    def add_local_perturbation(self, x, y, radius, amplitude):
        """
        Add a Gaussian bump of water centred on (x, y) in cell coordinates.

        The bump is added to the total height and to its bulk counterparts
        (current and previous), so that the next step sees it as a genuine
        change of state. Call it between two simulate() calls.

        Args:
                x (float): Centre column
                y (float): Centre row
                radius (float): Standard deviation of the bump in cells (> 0)
                amplitude (float): Peak height (negative digs a depression)

        Author: B.G.
        """
        if radius <= 0:
            raise ValueError(f"radius must be > 0, got {radius}")
        for name in ("height", "height_prev", "height_low", "height_low_prev"):
            add_gaussian(self.store[name], x, y, radius, amplitude)

    def add_height(self, arr):
        """
        Add an array of water height to the state (e.g. a source map).

        Author: B.G.
        """
        arr = self._check_array(arr, "added height")
        for name in ("height", "height_prev", "height_low", "height_low_prev"):
            add_array_into(self.store[name], arr)

    def set_height(self, arr):
        """
        Replace the water surface elevation and reset the layers to it.

        The surface layer and every flux are zeroed.

        Author: B.G.
        """
        arr = self._check_array(arr, "height")
        for name in ("height", "height_prev", "height_low", "height_low_prev"):
            self.store.from_numpy(name, arr)
        for name in (
            "height_high",
            "height_high_prev",
            "height_high_t",
            "qx",
            "qy",
            "qx_low",
            "qy_low",
            "qx_high",
            "qy_high",
            "qx_high_t",
            "qy_high_t",
            "ux",
            "uy",
        ):
            self.store.fill(name, 0.0)

    def set_terrain(self, arr, scale=1.0):
        """
        Replace the terrain elevation, optionally scaled by ``scale``.

        Author: B.G.
        """
        self.store.from_numpy("terrain", self._check_array(arr, "terrain"))
        if scale != 1.0:
            scale_field(self.store["terrain"], scale)

    def set_flux(self, qx, qy):
        """Set the total fluxes, the next step decomposes them."""
        self.store.from_numpy("qx", self._check_array(qx, "qx"))
        self.store.from_numpy("qy", self._check_array(qy, "qy"))

    # ====== GETTERS ======

    def get_height(self):
        return self.store.to_numpy("height")

    def get_terrain(self):
        return self.store.to_numpy("terrain")

    def get_depth(self):
        """Water depth, height - terrain, floored at 0."""
        return np.maximum(self.get_height() - self.get_terrain(), 0.0)

    def get_qx(self):
        return self.store.to_numpy("qx")

    def get_qy(self):
        return self.store.to_numpy("qy")

    def get_height_low(self):
        return self.store.to_numpy("height_low")

    def get_height_high(self):
        return self.store.to_numpy("height_high")

    def get_velocity(self):
        """Bulk velocity components (ux, uy)."""
        return self.store.to_numpy("ux"), self.store.to_numpy("uy")

    def destroy(self):
        """
        Release every field of the simulation.

        Author: B.G.
        """
        if hasattr(self, "store") and self.store is not None:
            self.store.destroy()
            self.store = None
