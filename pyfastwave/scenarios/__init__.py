"""
Scenario builders for PyFastWave.

Numpy helpers producing terrains and initial water surfaces: flat lakes,
Gaussian bumps, sloping beaches and red-noise surface chop.

Usage:
    import pyfastwave as pw

    terrain = pw.scenarios.beach_terrain(256, 256, depth=4.0)
    height = pw.scenarios.lake_over_terrain(terrain, level=0.0)
    height += pw.scenarios.red_noise(256, 256, amplitude=0.05)

Author: B.G.
"""

from .initial_conditions import beach_terrain, flat_lake, gaussian_bump, lake_over_terrain
from .red_noise import red_noise

__all__ = [
    "flat_lake",
    "gaussian_bump",
    "beach_terrain",
    "lake_over_terrain",
    "red_noise",
]
