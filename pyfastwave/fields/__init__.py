"""
Field storage module for PyFastWave.

Provides the FieldStore that allocates and owns every simulation field, the
PingPong pair used by iterative filters, and small elementwise kernels.

Usage:
    import pyfastwave as pw

    store = pw.fields.create_water_store(128, 128, pw.WaveConfig())
    store.from_numpy("height", h0)
    store.copy("height", "height_prev")

Author: B.G.
"""

from .field_ops import add_array_into, add_gaussian, add_into, average_into, scale_field
from .field_store import (
    SPECTRAL_FIELDS,
    WATER_FIELDS,
    WATER_PINGPONGS,
    FieldStore,
    PingPong,
    create_water_store,
)

__all__ = [
    "FieldStore",
    "PingPong",
    "create_water_store",
    "WATER_FIELDS",
    "WATER_PINGPONGS",
    "SPECTRAL_FIELDS",
    "add_into",
    "add_array_into",
    "scale_field",
    "average_into",
    "add_gaussian",
]
