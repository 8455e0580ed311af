"""
Recombination of bulk and surface layers into the authoritative state.

Flow: q = q_low + q_high_transported.

Height: the total height is advanced from its start-of-step value by the
divergence of the total effective flux, q + u * h_high_transported, so that
surface-layer height carried by the current also moves volume. Face fluxes
are centred averages and edge faces carry nothing, so the total volume of the
height field is conserved.

A face flux leaving a cell is scaled by that cell's outflow limiter, the
fraction of its requested outflow that its water column can supply. A cell
therefore never drains below its terrain, and both cells sharing a face still
see the same flux.

Author: B.G.
"""

import taichi as ti


@ti.kernel
def recombine_flow_kernel(low: ti.template(), high: ti.template(), out: ti.template()):
    for j, i in out:
        out[j, i] = low[j, i] + high[j, i]


@ti.func
def effective_flux(q: ti.template(), vel: ti.template(), h_surf: ti.template(), j: ti.i32, i: ti.i32):
    return q[j, i] + vel[j, i] * h_surf[j, i]


@ti.func
def face_fluxes(
    qx: ti.template(),
    qy: ti.template(),
    h_surf: ti.template(),
    ux: ti.template(),
    uy: ti.template(),
    j: ti.i32,
    i: ti.i32,
):
    """
    Centred fluxes through the right, left, bottom and top faces of (j, i).

    Faces on the domain edge carry nothing.

    Author: B.G.
    """
    ny = h_surf.shape[0]
    nx = h_surf.shape[1]
    fc_x = effective_flux(qx, ux, h_surf, j, i)
    fc_y = effective_flux(qy, uy, h_surf, j, i)

    f_right = 0.0
    f_left = 0.0
    f_bottom = 0.0
    f_top = 0.0
    if i < nx - 1:
        f_right = 0.5 * (fc_x + effective_flux(qx, ux, h_surf, j, i + 1))
    if i > 0:
        f_left = 0.5 * (effective_flux(qx, ux, h_surf, j, i - 1) + fc_x)
    if j < ny - 1:
        f_bottom = 0.5 * (fc_y + effective_flux(qy, uy, h_surf, j + 1, i))
    if j > 0:
        f_top = 0.5 * (effective_flux(qy, uy, h_surf, j - 1, i) + fc_y)
    return f_right, f_left, f_bottom, f_top


@ti.kernel
def outflow_limiter(
    h_prev: ti.template(),
    terrain: ti.template(),
    qx: ti.template(),
    qy: ti.template(),
    h_surf: ti.template(),
    ux: ti.template(),
    uy: ti.template(),
    limit: ti.template(),
    dt: ti.f32,
    dx: ti.f32,
):
    """
    Fraction in [0, 1] of each cell's requested outflow its water can supply.

    Author: B.G.
    """
    for j, i in limit:
        f_right, f_left, f_bottom, f_top = face_fluxes(qx, qy, h_surf, ux, uy, j, i)
        outflow = (
            ti.max(f_right, 0.0) + ti.max(-f_left, 0.0) + ti.max(f_bottom, 0.0) + ti.max(-f_top, 0.0)
        ) * dt / dx
        available = ti.max(h_prev[j, i] - terrain[j, i], 0.0)
        r = 1.0
        if outflow > available:
            r = available / outflow
        limit[j, i] = r


@ti.func
def limited(f: ti.f32, limit: ti.template(), j0: ti.i32, i0: ti.i32, j1: ti.i32, i1: ti.i32):
    # (j0, i0) is upstream of a positive flux, (j1, i1) of a negative one
    r = limit[j1, i1]
    if f > 0.0:
        r = limit[j0, i0]
    return f * r


@ti.kernel
def recombine_height_kernel(
    h_prev: ti.template(),
    qx: ti.template(),
    qy: ti.template(),
    h_surf: ti.template(),
    ux: ti.template(),
    uy: ti.template(),
    limit: ti.template(),
    h: ti.template(),
    dt: ti.f32,
    dx: ti.f32,
):
    """
    h = h_prev - dt/dx * div(q + u * h_surf) with closed walls and limited outflow.

    Author: B.G.
    """
    for j, i in h:
        f_right, f_left, f_bottom, f_top = face_fluxes(qx, qy, h_surf, ux, uy, j, i)
        f_right = limited(f_right, limit, j, i, j, ti.min(i + 1, h.shape[1] - 1))
        f_left = limited(f_left, limit, j, ti.max(i - 1, 0), j, i)
        f_bottom = limited(f_bottom, limit, j, i, ti.min(j + 1, h.shape[0] - 1), i)
        f_top = limited(f_top, limit, ti.max(j - 1, 0), i, j, i)

        h[j, i] = h_prev[j, i] - dt / dx * (f_right - f_left + f_bottom - f_top)


class Recombiner:
    """
    Writes the authoritative qx, qy and height from the two layers.

    Args:
            store (FieldStore): Finalised water store
            config (WaveConfig): Simulation parameters

    Author: B.G.
    """

    def __init__(self, store, config):
        self.store = store
        self.config = config

    def recombine_flow(self):
        s = self.store
        recombine_flow_kernel(s["qx_low"], s["qx_high_t"], s["qx"])
        recombine_flow_kernel(s["qy_low"], s["qy_high_t"], s["qy"])

    def recombine_height(self, dt):
        """
        Advance the total height over ``dt`` from the recombined fluxes.

        Must run after recombine_flow. Outgoing face fluxes are scaled down
        where a cell holds less water than they would remove.

        Author: B.G.
        """
        s = self.store
        gs = self.config.grid_scale
        outflow_limiter(
            s["height_prev"],
            s["terrain"],
            s["qx"],
            s["qy"],
            s["height_high_t"],
            s["ux"],
            s["uy"],
            s["outflow_limit"],
            dt,
            gs,
        )
        recombine_height_kernel(
            s["height_prev"],
            s["qx"],
            s["qy"],
            s["height_high_t"],
            s["ux"],
            s["uy"],
            s["outflow_limit"],
            s["height"],
            dt,
            gs,
        )
