"""
Initial terrain and water surfaces for simulations and tests.

All builders return float32 numpy arrays of shape (ny, nx).

Author: B.G.
"""

import numpy as np

from .. import constants as cte


def flat_lake(nx, ny, level=2.0):
    """Water surface at a constant elevation."""
    return np.full((ny, nx), level, dtype=cte.FLOAT_TYPE_NP)


def gaussian_bump(nx, ny, x, y, radius, amplitude):
    """
    Gaussian bump centred on (x, y) in cell coordinates.

    Args:
        nx, ny: Grid dimensions
        x, y: Centre column and row
        radius: Standard deviation in cells (> 0)
        amplitude: Peak value

    Returns:
        numpy.ndarray: The bump alone (zero far from the centre)
    """
    if radius <= 0:
        raise ValueError(f"radius must be > 0, got {radius}")
    jj, ii = np.mgrid[0:ny, 0:nx]
    r2 = (ii - x) ** 2 + (jj - y) ** 2
    return (amplitude * np.exp(-r2 / (2.0 * radius * radius))).astype(cte.FLOAT_TYPE_NP)


def beach_terrain(nx, ny, depth=4.0, shore_fraction=0.25, beach_height=1.0):
    """
    Sloping beach rising along +x.

    The terrain sits at ``-depth`` on the open-water side, then ramps linearly
    over the last ``shore_fraction`` of the domain up to ``beach_height``.
    With a water level of 0 the shore line lies inside the ramp.

    Args:
        nx, ny: Grid dimensions
        depth: Depth of the flat sea floor below 0
        shore_fraction: Fraction of the domain width covered by the ramp (0-1)
        beach_height: Terrain elevation at the far edge

    Returns:
        numpy.ndarray: Terrain elevation
    """
    if not 0.0 < shore_fraction <= 1.0:
        raise ValueError(f"shore_fraction must be in (0, 1], got {shore_fraction}")
    x = np.arange(nx, dtype=np.float64)
    start = nx * (1.0 - shore_fraction)
    ramp = np.clip((x - start) / max(nx - 1 - start, 1.0), 0.0, 1.0)
    profile = -depth + ramp * (depth + beach_height)
    return np.tile(profile, (ny, 1)).astype(cte.FLOAT_TYPE_NP)


def lake_over_terrain(terrain, level=0.0):
    """
    Water surface at ``level`` wherever the terrain is below it, dry elsewhere.

    Returns:
        numpy.ndarray: Water surface elevation, max(level, terrain)
    """
    terrain = np.asarray(terrain, dtype=cte.FLOAT_TYPE_NP)
    return np.maximum(terrain, cte.FLOAT_TYPE_NP(level))
