"""
PyFastWave: GPU height-field water simulation with Taichi.

Interactive water on a regular grid over arbitrary terrain. The water state
is split into a smooth bulk layer, advanced with the nonlinear shallow water
equations, and a surface layer of short waves, advanced with the exact linear
(Airy) dispersion relation in Fourier space. The surface layer is carried by
the bulk current and both layers are recombined into one height and flux
state every step.

Submodules:
- config: WaveConfig and DisplayParams
- constants: numerical defaults
- fields: FieldStore and elementwise kernels
- grid: neighbour and boundary helpers
- wave: solvers and the Simulator
- scenarios: initial conditions (lakes, bumps, beaches, noise)
- cli: command line tools

Author: B.G.
"""

__version__ = "0.0.1"

from . import cli, config, constants, fields, grid, scenarios, wave
from .config import DisplayParams, WaveConfig
from .wave import Simulator

__all__ = [
    "cli",
    "config",
    "constants",
    "fields",
    "grid",
    "scenarios",
    "wave",
    "WaveConfig",
    "DisplayParams",
    "Simulator",
]
