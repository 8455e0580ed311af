"""
Height-field water simulation module for PyFastWave.

Splits the water state into a bulk layer advanced by a nonlinear shallow
water solver and a surface layer advanced by a closed-form spectral (Airy)
solver, transports the surface layer on the bulk current and recombines both
into a single height/flux state.

Core Components:
- DiffusionDecomposer: bulk/surface split by iterated terrain-aware diffusion
- ShallowWaterSolver: bulk continuity and momentum
- SpectralWaveSolver: dispersive propagation of surface waves
- VelocityField: bulk velocity from bulk flux and depth
- TransportAdvector: semi-Lagrangian / donor-cell blend transport
- Recombiner: bulk + surface recombination with volume conservation
- Simulator: owns the fields and runs the pipeline

Usage:
    import numpy as np
    import taichi as ti
    import pyfastwave as pw

    ti.init(ti.gpu)
    sim = pw.wave.Simulator(256, 256, height=np.full((256, 256), 2.0))
    sim.add_local_perturbation(128, 128, radius=5.0, amplitude=0.3)
    sim.simulate(1 / 60)

Author: B.G.
"""

from .airy import SpectralWaveSolver, omega_table, wavenumbers
from .diffusion import DiffusionDecomposer
from .recombine import Recombiner
from .shallow_water import ShallowWaterSolver
from .simulator import Simulator
from .transport import TransportAdvector
from .velocity import VelocityField

__all__ = [
    "DiffusionDecomposer",
    "ShallowWaterSolver",
    "SpectralWaveSolver",
    "VelocityField",
    "TransportAdvector",
    "Recombiner",
    "Simulator",
    "wavenumbers",
    "omega_table",
]
