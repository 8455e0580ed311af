"""
Numerical defaults and data types shared across PyFastWave.

These are the reference values of the water engine. They seed the fields of
``pyfastwave.config.WaveConfig`` and are never mutated at runtime: anything
that changes per simulation travels through the config object and reaches the
kernels as arguments.

Author: B.G.
"""

import numpy as np
import taichi as ti

# Floating point precision of every simulation field
FLOAT_TYPE_TI = ti.f32
FLOAT_TYPE_NP = np.float32

# Gravitational acceleration (m/s^2)
GRAVITY = 9.81

# Largest time step a single sub-step is allowed to take
MAX_DT = 0.25

# Upper bound on sub-steps per simulate() call
MAX_SUBSTEPS = 8

# Size of a grid cell in world units
GRID_SCALE = 1.0

# Low-pass filter: number of diffusion passes (must stay even) and rate
DIFFUSION_ITERATIONS = 128
DIFFUSION_RATE = 60.0

# Terrain-aware conductance falloff used by the decomposition
TERRAIN_SHARPNESS = 1.0

# Depth floor when dividing or evaluating the dispersion relation
DEPTH_EPS = 0.01

# Denominator guard of the bulk velocity recomputation
VELOCITY_EPS = 1e-3

# Velocity clamp applied to bulk velocities
MAX_VELOCITY = 20.0

# Depths at which the spectral solver is evaluated
DEPTH_SAMPLES = (1.0, 4.0, 16.0, 64.0)

# Share of the donor-cell estimate blended into the advected surface layer
TRANSPORT_DAMPING = 0.25

# Wavenumbers below this squared magnitude are treated as the DC mode
K2_EPS = 1e-12
