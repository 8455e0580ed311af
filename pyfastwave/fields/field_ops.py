"""
Elementwise Taichi kernels operating on whole 2D fields.

Author: B.G.
"""

import taichi as ti


@ti.kernel
def add_into(base: ti.template(), add: ti.template()):
    """
    Add field ``add`` to field ``base`` in place.

    Author: B.G.
    """
    for j, i in base:
        base[j, i] += add[j, i]


@ti.kernel
def add_array_into(base: ti.template(), add: ti.types.ndarray()):
    """Add a numpy array of matching shape to ``base`` in place."""
    for j, i in base:
        base[j, i] += add[j, i]


@ti.kernel
def scale_field(base: ti.template(), factor: ti.f32):
    for j, i in base:
        base[j, i] *= factor


@ti.kernel
def average_into(a: ti.template(), b: ti.template(), out: ti.template()):
    for j, i in out:
        out[j, i] = 0.5 * (a[j, i] + b[j, i])


@ti.kernel
def add_gaussian(
    f: ti.template(), cx: ti.f32, cy: ti.f32, radius: ti.f32, amplitude: ti.f32
):
    """
    Add a Gaussian bump centred on (cx, cy) in cell coordinates.

    Args:
            f: Field to modify in place
            cx, cy: Centre column and row (fractional)
            radius: Standard deviation of the bump in cells
            amplitude: Peak height of the bump

    Author: B.G.
    """
    inv = 1.0 / (2.0 * radius * radius)
    for j, i in f:
        r2 = (i - cx) * (i - cx) + (j - cy) * (j - cy)
        f[j, i] += amplitude * ti.exp(-r2 * inv)
