"""
Grid navigation helpers for PyFastWave.

Taichi functions for neighbour lookup and boundary-aware sampling on regular
2D grids indexed [row, column].

Author: B.G.
"""

from .neighbourer import (
    BOUNDARY_CLAMP,
    BOUNDARY_ZERO,
    clamp_index,
    in_domain,
    neighbour_clamped,
    sample,
    sample_bilinear,
)

__all__ = [
    "BOUNDARY_CLAMP",
    "BOUNDARY_ZERO",
    "clamp_index",
    "in_domain",
    "neighbour_clamped",
    "sample",
    "sample_bilinear",
]
