"""
Configuration objects for the water engine.

Every tunable of the simulation lives in a ``WaveConfig`` instance that is
validated once at construction of the simulator and handed to each stage.
Stages read the values they need and pass them to their Taichi kernels as
arguments (scalars) or as ``ti.template()`` parameters (compile-time modes),
so no kernel depends on module-level mutable state.

``DisplayParams`` carries the world-space mapping of the height field. The
engine stores it alongside the state and hands it to consumers (renderers,
exporters) untouched.

Author: B.G.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from . import constants as cte


def is_power_of_two(n):
    """Return True if ``n`` is a strictly positive power of two."""
    return isinstance(n, (int, np.integer)) and n > 0 and (n & (n - 1)) == 0


@dataclass
class WaveConfig:
    """
    Tunable parameters of the water engine.

    Attributes:
            grid_scale (float): Size of one cell in world units (dx = dy)
            gravity (float): Gravitational acceleration
            max_dt (float): Largest time step a single sub-step may take
            substep (bool): If True, simulate() consumes the whole external dt
                    in equal sub-steps no larger than max_dt. If False, the
                    external dt is clamped to max_dt and the remainder dropped.
            max_substeps (int): Upper bound on the number of sub-steps per call
            diffusion_iterations (int): Number of low-pass diffusion passes.
                    Must be even so the ping-pong pair ends on its primary buffer.
            diffusion_rate (float): Diffusion coefficient of the low-pass filter
            terrain_sharpness (float): Conductance falloff with terrain steps
            depth_eps (float): Depth floor for wet/dry tests and dispersion
            velocity_eps (float): Denominator guard of the bulk velocity
            max_velocity (float): Clamp on bulk velocity magnitude per axis
            depth_samples (tuple): Strictly increasing depths at which the
                    spectral solver is evaluated
            transport_damping (float): Weight of the donor-cell estimate in the
                    surface-layer transport (0 = pure semi-Lagrangian)

    Author: B.G.
    """

    grid_scale: float = cte.GRID_SCALE
    gravity: float = cte.GRAVITY
    max_dt: float = cte.MAX_DT
    substep: bool = True
    max_substeps: int = cte.MAX_SUBSTEPS
    diffusion_iterations: int = cte.DIFFUSION_ITERATIONS
    diffusion_rate: float = cte.DIFFUSION_RATE
    terrain_sharpness: float = cte.TERRAIN_SHARPNESS
    depth_eps: float = cte.DEPTH_EPS
    velocity_eps: float = cte.VELOCITY_EPS
    max_velocity: float = cte.MAX_VELOCITY
    depth_samples: tuple = field(default_factory=lambda: tuple(cte.DEPTH_SAMPLES))
    transport_damping: float = cte.TRANSPORT_DAMPING

    def __post_init__(self):
        self.depth_samples = tuple(float(d) for d in self.depth_samples)
        self.validate()

    def validate(self):
        """
        Check every parameter and raise ValueError on the first invalid one.

        Author: B.G.
        """
        for name in (
            "grid_scale",
            "gravity",
            "max_dt",
            "depth_eps",
            "velocity_eps",
            "max_velocity",
        ):
            if not getattr(self, name) > 0:
                raise ValueError(f"{name} must be > 0, got {getattr(self, name)}")

        if self.diffusion_rate < 0:
            raise ValueError(
                f"diffusion_rate must be >= 0, got {self.diffusion_rate}"
            )
        if self.terrain_sharpness < 0:
            raise ValueError(
                f"terrain_sharpness must be >= 0, got {self.terrain_sharpness}"
            )

        if int(self.diffusion_iterations) != self.diffusion_iterations:
            raise ValueError("diffusion_iterations must be an integer")
        if self.diffusion_iterations < 2 or self.diffusion_iterations % 2 != 0:
            raise ValueError(
                "diffusion_iterations must be a positive even number "
                f"(ping-pong buffers), got {self.diffusion_iterations}"
            )

        if self.max_substeps < 1:
            raise ValueError(f"max_substeps must be >= 1, got {self.max_substeps}")

        if len(self.depth_samples) == 0:
            raise ValueError("depth_samples cannot be empty")
        if any(d <= 0 for d in self.depth_samples):
            raise ValueError("depth_samples must all be > 0")
        if any(b <= a for a, b in zip(self.depth_samples, self.depth_samples[1:])):
            raise ValueError("depth_samples must be strictly increasing")

        if not 0.0 <= self.transport_damping <= 1.0:
            raise ValueError(
                f"transport_damping must be in [0, 1], got {self.transport_damping}"
            )

    @property
    def n_depths(self):
        return len(self.depth_samples)

    def diffusion_alpha(self, dt):
        """Per-pass diffusion coefficient for a step of ``dt``, capped at 1."""
        return min(self.diffusion_rate * dt / (self.grid_scale * self.grid_scale), 1.0)


@dataclass
class DisplayParams:
    """
    World-space mapping of the height field for consumers of the state.

    Attributes:
            world_scale (tuple): Horizontal extent (x, y) of the grid in world units
            height_scale (float): Multiplier applied to heights
            base_level (float): Vertical offset added after scaling

    Author: B.G.
    """

    world_scale: tuple = (500.0, 500.0)
    height_scale: float = 10.0
    base_level: float = 0.0

    def to_world(self, height):
        """Map a height array to world-space vertical displacement."""
        return self.base_level + self.height_scale * np.asarray(height)
