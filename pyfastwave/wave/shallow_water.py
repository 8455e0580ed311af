"""
Nonlinear shallow water solver for the bulk (low frequency) layer.

Advances the bulk height and the bulk fluxes by one step on a collocated
grid with closed walls:

1. Initial velocities u = q / depth from the previous bulk height
2. Snapshot of the bulk height into height_low_prev
3. Continuity: height update from upwinded face fluxes
4. Velocity change in two axis sub-steps per component (advection along
   each axis, then gravity acting on the depth and terrain gradients)
5. Velocity update and flux re-derivation q = u * depth

The scheme is explicit and does not limit its own time step: the caller is
responsible for keeping dt small enough (see WaveConfig.max_dt).

Author: B.G.
"""

import taichi as ti

AXIS_X = 0
AXIS_Y = 1


@ti.kernel
def initial_velocity(
    h: ti.template(),
    q: ti.template(),
    terrain: ti.template(),
    vel: ti.template(),
    eps: ti.f32,
):
    """
    Velocity u = q / depth, set to 0 in cells shallower than ``eps``.

    Author: B.G.
    """
    for j, i in vel:
        depth = h[j, i] - terrain[j, i]
        u = 0.0
        if depth > eps:
            u = q[j, i] / depth
        vel[j, i] = u


@ti.func
def upwind_face_flux(
    h: ti.template(),
    terrain: ti.template(),
    vel: ti.template(),
    j0: ti.i32,
    i0: ti.i32,
    j1: ti.i32,
    i1: ti.i32,
):
    """
    Volume flux through the face between cell 0 and its positive-side neighbour 1.

    The face velocity is the average of both cells, the transported depth is
    taken from the upwind cell.

    Author: B.G.
    """
    uf = 0.5 * (vel[j0, i0] + vel[j1, i1])
    d0 = ti.max(h[j0, i0] - terrain[j0, i0], 0.0)
    d1 = ti.max(h[j1, i1] - terrain[j1, i1], 0.0)
    d = d0 if uf > 0.0 else d1
    return uf * d


@ti.kernel
def continuity(
    h_prev: ti.template(),
    ux: ti.template(),
    uy: ti.template(),
    terrain: ti.template(),
    h: ti.template(),
    dt: ti.f32,
    dx: ti.f32,
):
    """
    Height update from the divergence of upwinded face fluxes.

    Faces on the domain edge carry no flux, so the total volume is conserved.

    Args:
            h_prev: Bulk height at the start of the step
            ux, uy: Bulk velocities
            terrain: Terrain elevation
            h: Bulk height written by the update
            dt: Time step
            dx: Grid spacing

    Author: B.G.
    """
    ny = h.shape[0]
    nx = h.shape[1]
    for j, i in h:
        f_right = 0.0
        f_left = 0.0
        f_bottom = 0.0
        f_top = 0.0
        if i < nx - 1:
            f_right = upwind_face_flux(h_prev, terrain, ux, j, i, j, i + 1)
        if i > 0:
            f_left = upwind_face_flux(h_prev, terrain, ux, j, i - 1, j, i)
        if j < ny - 1:
            f_bottom = upwind_face_flux(h_prev, terrain, uy, j, i, j + 1, i)
        if j > 0:
            f_top = upwind_face_flux(h_prev, terrain, uy, j - 1, i, j, i)

        h[j, i] = h_prev[j, i] - dt / dx * (f_right - f_left + f_bottom - f_top)


@ti.kernel
def velocity_substep(
    vel: ti.template(),
    carrier: ti.template(),
    h: ti.template(),
    terrain: ti.template(),
    dvel: ti.template(),
    dt: ti.f32,
    gravity: ti.f32,
    dx: ti.f32,
    axis: ti.template(),
    pressure: ti.template(),
    accumulate: ti.template(),
):
    """
    Velocity change of one component along one axis.

    Upwinded advection of ``vel`` by the ``carrier`` velocity along ``axis``.
    When ``pressure`` is set (component aligned with the axis), the gravity
    term g * (d depth/ds + d terrain/ds) is added with central differences
    on the freshly updated height.

    Args:
            vel: Velocity component being updated
            carrier: Velocity component along ``axis``
            h: Bulk height after the continuity update
            terrain: Terrain elevation
            dvel: Velocity change, overwritten or accumulated
            dt, gravity, dx: Time step, gravity and grid spacing
            axis: AXIS_X or AXIS_Y, compile-time
            pressure: Add the gravity term, compile-time
            accumulate: Add to ``dvel`` instead of overwriting it, compile-time

    Author: B.G.
    """
    ny = vel.shape[0]
    nx = vel.shape[1]
    for j, i in vel:
        jm = j
        im = i
        jp = j
        ip = i
        if ti.static(axis == AXIS_X):
            im = ti.max(i - 1, 0)
            ip = ti.min(i + 1, nx - 1)
        else:
            jm = ti.max(j - 1, 0)
            jp = ti.min(j + 1, ny - 1)

        c = carrier[j, i]
        grad = 0.0
        if c > 0.0:
            grad = (vel[j, i] - vel[jm, im]) / dx
        else:
            grad = (vel[jp, ip] - vel[j, i]) / dx
        change = -dt * c * grad

        if ti.static(pressure):
            # one-sided on the walls
            span = ti.cast(ti.max(ip - im + jp - jm, 1), ti.f32) * dx
            d_m = ti.max(h[jm, im] - terrain[jm, im], 0.0)
            d_p = ti.max(h[jp, ip] - terrain[jp, ip], 0.0)
            slope = (d_p - d_m + terrain[jp, ip] - terrain[jm, im]) / span
            change -= dt * gravity * slope

        if ti.static(accumulate):
            dvel[j, i] += change
        else:
            dvel[j, i] = change


@ti.kernel
def update_velocity_and_flux(
    dvel: ti.template(),
    h: ti.template(),
    terrain: ti.template(),
    vel: ti.template(),
    q: ti.template(),
    eps: ti.f32,
    vmax: ti.f32,
):
    """
    Apply the velocity change and re-derive the flux q = u * depth.

    Dry cells get zero velocity.

    Author: B.G.
    """
    for j, i in vel:
        depth = h[j, i] - terrain[j, i]
        u = vel[j, i] + dvel[j, i]
        if depth <= eps:
            u = 0.0
        u = ti.min(ti.max(u, -vmax), vmax)
        vel[j, i] = u
        q[j, i] = u * ti.max(depth, 0.0)


class ShallowWaterSolver:
    """
    Bulk-layer shallow water step on the fields of a water FieldStore.

    Reads and writes height_low, height_low_prev, qx_low, qy_low and uses
    ux, uy, dux, duy as velocity and velocity-change slots.

    Args:
            store (FieldStore): Finalised water store
            config (WaveConfig): Simulation parameters

    Author: B.G.
    """

    def __init__(self, store, config):
        self.store = store
        self.config = config

    def step(self, dt):
        """
        Advance the bulk layer by ``dt``.

        Args:
                dt (float): Time step (not limited internally)

        Author: B.G.
        """
        s = self.store
        cfg = self.config
        terrain = s["terrain"]
        h = s["height_low"]
        h_prev = s["height_low_prev"]
        qx, qy = s["qx_low"], s["qy_low"]
        ux, uy = s["ux"], s["uy"]
        dux, duy = s["dux"], s["duy"]

        # velocities from the previous bulk state
        initial_velocity(h_prev, qx, terrain, ux, cfg.depth_eps)
        initial_velocity(h_prev, qy, terrain, uy, cfg.depth_eps)

        s.copy("height_low", "height_low_prev")

        continuity(h_prev, ux, uy, terrain, h, dt, cfg.grid_scale)

        g = cfg.gravity
        dx = cfg.grid_scale
        velocity_substep(ux, ux, h, terrain, dux, dt, g, dx, AXIS_X, True, False)
        velocity_substep(ux, uy, h, terrain, dux, dt, g, dx, AXIS_Y, False, True)
        velocity_substep(uy, ux, h, terrain, duy, dt, g, dx, AXIS_X, False, False)
        velocity_substep(uy, uy, h, terrain, duy, dt, g, dx, AXIS_Y, True, True)

        update_velocity_and_flux(dux, h, terrain, ux, qx, cfg.depth_eps, cfg.max_velocity)
        update_velocity_and_flux(duy, h, terrain, uy, qy, cfg.depth_eps, cfg.max_velocity)
