"""
Bulk velocity recomputation.

After the bulk and surface layers have been advanced, the velocity used to
transport the surface layer is re-derived from the bulk state:
u = q_low / max(depth_low, eps). The denominator guard keeps dry and nearly
dry cells finite, and the result is clamped to the configured maximum.

Author: B.G.
"""

import taichi as ti


@ti.kernel
def bulk_velocity(
    q: ti.template(),
    h: ti.template(),
    terrain: ti.template(),
    vel: ti.template(),
    eps: ti.f32,
    vmax: ti.f32,
):
    for j, i in vel:
        depth = ti.max(h[j, i] - terrain[j, i], eps)
        vel[j, i] = ti.min(ti.max(q[j, i] / depth, -vmax), vmax)


class VelocityField:
    """
    Recomputes ux, uy from qx_low, qy_low and height_low.

    Args:
            store (FieldStore): Finalised water store
            config (WaveConfig): Simulation parameters

    Author: B.G.
    """

    def __init__(self, store, config):
        self.store = store
        self.config = config

    def step(self):
        s = self.store
        eps = self.config.velocity_eps
        vmax = self.config.max_velocity
        bulk_velocity(s["qx_low"], s["height_low"], s["terrain"], s["ux"], eps, vmax)
        bulk_velocity(s["qy_low"], s["height_low"], s["terrain"], s["uy"], eps, vmax)
