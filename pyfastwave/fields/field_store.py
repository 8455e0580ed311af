"""
Field storage for the water engine.

The FieldStore owns every 2D field of a simulation. Fields are declared by
name, then allocated in one go through a single ``ti.FieldsBuilder`` so that
the whole state lives in one SNode tree that can be released explicitly.
Once finalised the layout is frozen: fields have a fixed size and the store
never resizes or reallocates them.

Low-pass fields that are filtered iteratively are stored as PingPong pairs:
two owned buffers and a parity bit selecting which one is the current
("front") buffer. An even number of swaps always lands back on the buffer the
pair was seeded in.

Author: B.G.
"""

import numpy as np
import taichi as ti

from .. import constants as cte


class PingPong:
    """
    Pair of same-shaped fields alternated by a parity bit.

    Attributes:
            front (ti.field): Buffer holding the current values
            back (ti.field): Scratch buffer written by the next pass
            parity (int): 0 when ``front`` is the primary buffer

    Author: B.G.
    """

    def __init__(self, primary, secondary):
        self._buffers = (primary, secondary)
        self.parity = 0

    @property
    def front(self):
        return self._buffers[self.parity]

    @property
    def back(self):
        return self._buffers[1 - self.parity]

    @property
    def primary(self):
        return self._buffers[0]

    def swap(self):
        self.parity = 1 - self.parity

    def reset(self):
        self.parity = 0


class FieldStore:
    """
    Named collection of Taichi fields allocated once for a fixed grid.

    Usage is two-phased: declare fields with ``add`` / ``add_pingpong``, then
    call ``finalize`` to allocate all of them. Declaring only records names
    and shapes; no Taichi field or builder exists before ``finalize``, so an
    abandoned store never leaves a pending SNode tree behind. Reading before
    finalisation or declaring after it raises RuntimeError.

    Args:
            nx (int): Number of columns
            ny (int): Number of rows
            dtype: Taichi data type of the fields (default: cte.FLOAT_TYPE_TI)

    Example:
            store = FieldStore(64, 64)
            store.add("height")
            store.add_pingpong("height_low")
            store.finalize()
            store.from_numpy("height", np.ones((64, 64)))

    Author: B.G.
    """

    def __init__(self, nx, ny, dtype=cte.FLOAT_TYPE_TI):
        if nx < 2 or ny < 2:
            raise ValueError(f"Grid must be at least 2x2, got {nx}x{ny}")

        self._nx = int(nx)
        self._ny = int(ny)
        self.dtype = dtype

        self.snodetree = None
        self._destroyed = False

        # name -> True for ping-pong pairs, False for single fields
        self._declared = {}
        self._shapes = {}
        self._fields = {}
        self._pairs = {}

    @property
    def nx(self):
        return self._nx

    @property
    def ny(self):
        return self._ny

    @property
    def rshp(self):
        return (self._ny, self._nx)

    @property
    def finalized(self):
        return self.snodetree is not None

    @property
    def names(self):
        return list(self._declared.keys())

    def _check_declarable(self, name):
        if self.finalized or self._destroyed:
            raise RuntimeError("FieldStore is finalized or destroyed, fields cannot be added")
        if name in self._declared:
            raise ValueError(f"Field '{name}' already declared")

    def add(self, name, shape=None):
        """
        Declare a field.

        Args:
                name (str): Unique field name
                shape (tuple, optional): Field shape, default (ny, nx). A leading
                        extra axis (n, ny, nx) is allowed for stacked fields.

        Author: B.G.
        """
        self._check_declarable(name)
        shape = self.rshp if shape is None else tuple(int(s) for s in shape)
        if len(shape) not in (2, 3):
            raise ValueError(f"Only 2D and 3D fields are supported, got {shape}")
        self._declared[name] = False
        self._shapes[name] = shape

    def add_pingpong(self, name):
        """Declare a ping-pong pair of (ny, nx) fields."""
        self._check_declarable(name)
        self._declared[name] = True
        self._shapes[name] = self.rshp

    def _place(self, fb, shape):
        f = ti.field(self.dtype)
        axes = ti.ij if len(shape) == 2 else ti.ijk
        fb.dense(axes, shape).place(f)
        return f

    def finalize(self):
        """
        Allocate every declared field in one SNode tree and zero-initialise it.

        Author: B.G.
        """
        if self.finalized or self._destroyed:
            raise RuntimeError("FieldStore is already finalized or destroyed")
        if not self._declared:
            raise RuntimeError("FieldStore has no declared fields")

        fb = ti.FieldsBuilder()
        fields = {}
        pairs = {}
        for name, is_pair in self._declared.items():
            shape = self._shapes[name]
            if is_pair:
                pairs[name] = PingPong(self._place(fb, shape), self._place(fb, shape))
            else:
                fields[name] = self._place(fb, shape)
        self.snodetree = fb.finalize()

        self._fields = fields
        self._pairs = pairs
        for f in self._fields.values():
            f.fill(0.0)
        for pair in self._pairs.values():
            pair.primary.fill(0.0)
            pair.back.fill(0.0)

    def _require_finalized(self):
        if not self.finalized:
            raise RuntimeError("FieldStore must be finalized before use")

    def __contains__(self, name):
        return name in self._declared

    def __getitem__(self, name):
        """Return the field ``name`` (the front buffer for ping-pong pairs)."""
        self._require_finalized()
        if name in self._fields:
            return self._fields[name]
        if name in self._pairs:
            return self._pairs[name].front
        raise KeyError(f"Unknown field '{name}'")

    def pingpong(self, name):
        self._require_finalized()
        if name not in self._pairs:
            raise KeyError(f"'{name}' is not a ping-pong pair")
        return self._pairs[name]

    def shape(self, name):
        if name not in self._shapes:
            raise KeyError(f"Unknown field '{name}'")
        return self._shapes[name]

    def copy(self, src, dst):
        """Copy the full content of field ``src`` into field ``dst``."""
        if self.shape(src) != self.shape(dst):
            raise ValueError(
                f"Cannot copy '{src}' {self.shape(src)} into '{dst}' {self.shape(dst)}"
            )
        self[dst].copy_from(self[src])

    def fill(self, name, value):
        self[name].fill(value)

    def to_numpy(self, name):
        return self[name].to_numpy()

    def from_numpy(self, name, arr):
        """
        Upload a numpy array into field ``name``.

        Raises:
                ValueError: If the array shape does not match the field shape

        Author: B.G.
        """
        arr = np.asarray(arr)
        if arr.shape != self.shape(name):
            raise ValueError(
                f"Shape mismatch for '{name}': expected {self.shape(name)}, got {arr.shape}"
            )
        self[name].from_numpy(np.ascontiguousarray(arr, dtype=cte.FLOAT_TYPE_NP))

    def destroy(self):
        """
        Release the SNode tree holding every field of the store.

        The store is unusable afterwards.

        Author: B.G.
        """
        if self.snodetree is not None:
            self.snodetree.destroy()
            self.snodetree = None
        self._destroyed = True
        self._declared = {}
        self._fields = {}
        self._pairs = {}
        self._shapes = {}


# Bulk/surface slots of the simulation state
WATER_FIELDS = (
    # authoritative state
    "terrain",
    "height",
    "height_prev",
    "qx",
    "qy",
    # flux channels decomposed against a flat reference
    "zero_terrain",
    # surface layer (high frequency)
    "height_high",
    "height_high_prev",
    "qx_high",
    "qy_high",
    # bulk layer bookkeeping
    "height_low_prev",
    "ux",
    "uy",
    "dux",
    "duy",
    # transported surface layer
    "height_high_t",
    "qx_high_t",
    "qy_high_t",
    # spectral solver scratch
    "depth_smooth",
    "height_mid",
    # recombination scratch
    "outflow_limit",
)

WATER_PINGPONGS = ("height_low", "qx_low", "qy_low")

SPECTRAL_FIELDS = ("qx_samples", "qy_samples")


def create_water_store(nx, ny, config):
    """
    Build and finalise the FieldStore layout used by the water simulator.

    Args:
            nx (int): Number of columns
            ny (int): Number of rows
            config (WaveConfig): Simulation parameters (depth sample count)

    Returns:
            FieldStore: Finalised store with every simulation slot zeroed

    Author: B.G.
    """
    store = FieldStore(nx, ny)
    for name in WATER_FIELDS:
        store.add(name)
    for name in WATER_PINGPONGS:
        store.add_pingpong(name)
    for name in SPECTRAL_FIELDS:
        store.add(name, shape=(config.n_depths, ny, nx))
    store.finalize()
    return store
