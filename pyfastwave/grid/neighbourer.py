"""
Boundary-aware neighbour access for 2D simulation fields.

All fields are indexed [j, i] (row, column) with shape (ny, nx). Neighbours
are numbered like in the rest of the codebase:
- k=0: top (j - 1)
- k=1: left (i - 1)
- k=2: right (i + 1)
- k=3: bottom (j + 1)

Two boundary policies are available when reading outside the domain:
- BOUNDARY_CLAMP: replicate the edge cell (walls, no wraparound)
- BOUNDARY_ZERO: return 0, used for flux-like quantities so that nothing
  flows in through the walls

Author: B.G.
"""

import taichi as ti

BOUNDARY_CLAMP = 0
BOUNDARY_ZERO = 1

_DJ = (-1, 0, 0, 1)
_DI = (0, -1, 1, 0)


@ti.func
def clamp_index(i: ti.i32, n: ti.i32) -> ti.i32:
    return ti.min(ti.max(i, 0), n - 1)


@ti.func
def in_domain(j: ti.i32, i: ti.i32, ny: ti.i32, nx: ti.i32):
    """
    Check whether (j, i) lies inside a (ny, nx) grid.

    Author: B.G.
    """
    return 0 <= j and j < ny and 0 <= i and i < nx


@ti.func
def neighbour_clamped(j: ti.i32, i: ti.i32, k: ti.template(), ny: ti.i32, nx: ti.i32):
    """
    Row and column of neighbour k, replicated at the grid edges.

    On an edge the neighbour across the wall resolves to the cell itself, so
    any difference-based exchange with it vanishes.

    Args:
            j, i: Cell coordinates
            k: Neighbour number (0-3), compile-time
            ny, nx: Grid dimensions

    Returns:
            tuple: (row, col) of the neighbour

    Author: B.G.
    """
    return clamp_index(j + ti.static(_DJ[k]), ny), clamp_index(i + ti.static(_DI[k]), nx)


@ti.func
def sample(f: ti.template(), j: ti.i32, i: ti.i32, mode: ti.template()):
    """
    Read a 2D field at (j, i) honouring a boundary policy.

    Args:
            f: 2D Taichi field of shape (ny, nx)
            j, i: Possibly out-of-domain coordinates
            mode: BOUNDARY_CLAMP or BOUNDARY_ZERO, compile-time

    Returns:
            The field value, the replicated edge value or 0

    Author: B.G.
    """
    ny = f.shape[0]
    nx = f.shape[1]
    val = ti.cast(0.0, f.dtype)
    if ti.static(mode == BOUNDARY_CLAMP):
        val = f[clamp_index(j, ny), clamp_index(i, nx)]
    else:
        if in_domain(j, i, ny, nx):
            val = f[j, i]
    return val


@ti.func
def sample_bilinear(f: ti.template(), y: ti.f32, x: ti.f32, mode: ti.template()):
    """
    Bilinear interpolation of a 2D field at fractional coordinates.

    Args:
            f: 2D Taichi field
            y, x: Fractional row and column
            mode: Boundary policy used for the four corner reads

    Returns:
            Interpolated value

    Author: B.G.
    """
    x0 = ti.cast(ti.floor(x), ti.i32)
    y0 = ti.cast(ti.floor(y), ti.i32)
    fx = x - x0
    fy = y - y0

    v00 = sample(f, y0, x0, mode)
    v01 = sample(f, y0, x0 + 1, mode)
    v10 = sample(f, y0 + 1, x0, mode)
    v11 = sample(f, y0 + 1, x0 + 1, mode)

    return (
        (1.0 - fx) * (1.0 - fy) * v00
        + fx * (1.0 - fy) * v01
        + (1.0 - fx) * fy * v10
        + fx * fy * v11
    )
