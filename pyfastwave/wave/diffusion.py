"""
Low/high frequency decomposition of simulation fields by iterated diffusion.

A field is split into a smooth bulk layer (low) and a surface layer (high)
such that field = low + high. The low layer is obtained by running a fixed,
even number of explicit diffusion passes over a ping-pong pair seeded with
the field. Each pass exchanges mass between 4-neighbours through a symmetric
conductance, so the mean of the field is preserved exactly (up to float
rounding) and edges act as closed walls.

The conductance drops across terrain steps and, for height-like fields, is
zero whenever one side of a face is dry. Water resting behind a ridge or on a
dry shore is therefore not smeared into its surroundings.

Author: B.G.
"""

import taichi as ti

from ..grid import neighbour_clamped


@ti.func
def conductance(
    src: ti.template(),
    terrain: ti.template(),
    j: ti.i32,
    i: ti.i32,
    jn: ti.i32,
    in_: ti.i32,
    sharpness: ti.f32,
    eps: ti.f32,
    height_like: ti.template(),
):
    """
    Symmetric exchange weight between cell (j, i) and its neighbour (jn, in_).

    Author: B.G.
    """
    w = ti.exp(-sharpness * ti.abs(terrain[jn, in_] - terrain[j, i]))
    if ti.static(height_like):
        depth_c = src[j, i] - terrain[j, i]
        depth_n = src[jn, in_] - terrain[jn, in_]
        if ti.min(depth_c, depth_n) <= eps:
            w = 0.0
    return w


@ti.kernel
def diffuse_step(
    src: ti.template(),
    dst: ti.template(),
    terrain: ti.template(),
    alpha: ti.f32,
    sharpness: ti.f32,
    eps: ti.f32,
    height_like: ti.template(),
):
    """
    One explicit diffusion pass from ``src`` into ``dst``.

    dst = src + alpha/4 * sum_n w(c, n) * (src[n] - src[c])

    With alpha <= 1 and w <= 1 each output is a convex combination of its
    inputs, so the pass is unconditionally stable.

    Args:
            src: Field read by the pass
            dst: Field written by the pass
            terrain: Terrain elevation (all zeros for flux channels)
            alpha: Diffusion coefficient in [0, 1]
            sharpness: Terrain conductance falloff
            eps: Depth below which a cell is considered dry
            height_like: Compile-time flag enabling wet/dry gating

    Author: B.G.
    """
    ny = src.shape[0]
    nx = src.shape[1]
    for j, i in src:
        c = src[j, i]
        acc = 0.0
        for k in ti.static(range(4)):
            jn, in_ = neighbour_clamped(j, i, k, ny, nx)
            w = conductance(src, terrain, j, i, jn, in_, sharpness, eps, height_like)
            acc += w * (src[jn, in_] - c)
        dst[j, i] = c + 0.25 * alpha * acc


@ti.kernel
def reconstruct(field: ti.template(), low: ti.template(), high: ti.template()):
    """
    Set high = field - low, then re-derive field = low + high.

    Author: B.G.
    """
    for j, i in field:
        hi = field[j, i] - low[j, i]
        high[j, i] = hi
        field[j, i] = low[j, i] + hi


class DiffusionDecomposer:
    """
    Splits one field into bulk (low) and surface (high) layers.

    Each instance is bound to one source field of the store, its ping-pong low
    pair, its high field and the terrain it is filtered against (the real
    terrain for heights, a flat zero terrain for fluxes).

    Args:
            store (FieldStore): Finalised field store
            config (WaveConfig): Simulation parameters
            source (str): Name of the field to decompose
            low (str): Name of the ping-pong pair receiving the bulk layer
            high (str): Name of the field receiving the surface layer
            terrain (str): Name of the terrain field to filter against
            height_like (bool): Enable wet/dry gating of the conductance

    Author: B.G.
    """

    def __init__(self, store, config, source, low, high, terrain, height_like=True):
        if config.diffusion_iterations % 2 != 0:
            raise ValueError("Diffusion iteration count must be even")
        self.store = store
        self.config = config
        self.source = source
        self.low = low
        self.high = high
        self.terrain = terrain
        self.height_like = bool(height_like)

    def decompose(self, dt):
        """
        Compute low and high layers of the source field for a step of ``dt``.

        The source field is left equal to low + high.

        Args:
                dt (float): Time step, scales the diffusion strength

        Returns:
                tuple: (low field, high field)

        Author: B.G.
        """
        pair = self.store.pingpong(self.low)
        pair.reset()
        pair.front.copy_from(self.store[self.source])

        alpha = self.config.diffusion_alpha(dt)
        terrain = self.store[self.terrain]

        for _ in range(self.config.diffusion_iterations):
            diffuse_step(
                pair.front,
                pair.back,
                terrain,
                alpha,
                self.config.terrain_sharpness,
                self.config.depth_eps,
                self.height_like,
            )
            pair.swap()

        # even iteration count: the result sits in the primary buffer
        reconstruct(self.store[self.source], pair.front, self.store[self.high])

        return pair.front, self.store[self.high]
