"""
Spectral (Airy) wave solver for the surface (high frequency) layer.

Linear water waves obey the dispersion relation

    omega(k, H) = sqrt(g * |k| * tanh(|k| * H))

which has a closed-form solution in Fourier space: each flux mode rotates
against the matching height-gradient mode by the phase omega * dt. The
rotation is exact for any dt and any depth, so short waves travel at their
correct (dispersive) speed, which finite differences cannot achieve at
practical resolutions.

Depth varies in space while the Fourier basis does not, so the rotation is
evaluated for a small set of reference depths and every cell blends the two
results bracketing its local bulk depth.

Transforms run on the host with numpy's FFT; the per-depth spatial results
are uploaded to a stacked Taichi field and blended on the device.

Author: B.G.
"""

import numpy as np
import taichi as ti

from .. import constants as cte
from ..config import is_power_of_two
from ..fields import average_into


def wavenumbers(n, extent):
    """
    Angular wavenumbers of an n-point FFT over a periodic domain of length ``extent``.

    Indices up to n/2 map to themselves, higher indices to index - n (the
    Nyquist index keeps its positive sign).

    Args:
            n (int): Number of samples along the axis
            extent (float): Physical length of the axis

    Returns:
            numpy.ndarray: float64 wavenumbers of shape (n,)

    Author: B.G.
    """
    idx = np.arange(n)
    idx = np.where(idx > n // 2, idx - n, idx)
    return idx.astype(np.float64) * (2.0 * np.pi / extent)


def omega_table(kx, ky, depth_samples, gravity=cte.GRAVITY):
    """
    Angular frequency of every Fourier mode at every reference depth.

    Args:
            kx (numpy.ndarray): Wavenumbers along x, shape (nx,)
            ky (numpy.ndarray): Wavenumbers along y, shape (ny,)
            depth_samples (sequence): Reference depths
            gravity (float): Gravitational acceleration

    Returns:
            numpy.ndarray: omega of shape (n_depths, ny, nx), 0 for the DC mode

    Author: B.G.
    """
    KX, KY = np.meshgrid(kx, ky, indexing="xy")
    k = np.sqrt(KX**2 + KY**2)
    depths = np.asarray(depth_samples, dtype=np.float64)[:, None, None]
    omega = np.sqrt(gravity * k[None, :, :] * np.tanh(k[None, :, :] * depths))
    omega[:, k * k < cte.K2_EPS] = 0.0
    return omega


@ti.kernel
def bulk_depth(h: ti.template(), terrain: ti.template(), depth: ti.template(), eps: ti.f32):
    for j, i in depth:
        depth[j, i] = ti.max(h[j, i] - terrain[j, i], eps)


@ti.kernel
def interpolate_depth_samples(
    samples: ti.template(),
    depth: ti.template(),
    depth_samples: ti.types.ndarray(),
    out: ti.template(),
    eps: ti.f32,
):
    """
    Blend per-depth results into one field according to the local depth.

    Depths below the first or above the last reference use the nearest
    sample; in between, the two bracketing samples are linearly interpolated.
    Dry cells, whose depth sits on the floor eps, carry no surface flux.

    Args:
            samples: Stacked results of shape (n_depths, ny, nx)
            depth: Local depth, shape (ny, nx)
            depth_samples: Strictly increasing reference depths
            out: Blended result, shape (ny, nx)
            eps: Depth floor marking dry cells

    Author: B.G.
    """
    n = depth_samples.shape[0]
    for j, i in out:
        d = depth[j, i]
        val = samples[0, j, i]
        if d >= depth_samples[n - 1]:
            val = samples[n - 1, j, i]
        elif d > depth_samples[0]:
            for s in range(n - 1):
                lo = depth_samples[s]
                hi = depth_samples[s + 1]
                if lo <= d and d < hi:
                    t = (d - lo) / (hi - lo)
                    val = (1.0 - t) * samples[s, j, i] + t * samples[s + 1, j, i]
        if d <= eps:
            val = 0.0
        out[j, i] = val


class SpectralWaveSolver:
    """
    Closed-form dispersive propagation of the surface-layer fluxes.

    Reads height_high, height_high_prev, height_low and terrain, and updates
    qx_high and qy_high in place. The grid must be a power of two along both
    axes.

    Args:
            store (FieldStore): Finalised water store
            config (WaveConfig): Simulation parameters

    Attributes:
            kx, ky (numpy.ndarray): Angular wavenumbers along each axis
            omega (numpy.ndarray): Frequency table (n_depths, ny, nx)

    Raises:
            ValueError: If nx or ny is not a power of two

    Author: B.G.
    """

    def __init__(self, store, config):
        if not (is_power_of_two(store.nx) and is_power_of_two(store.ny)):
            raise ValueError(
                f"Spectral solver needs power-of-two grid sizes, got {store.nx}x{store.ny}"
            )

        self.store = store
        self.config = config

        self.kx = wavenumbers(store.nx, store.nx * config.grid_scale)
        self.ky = wavenumbers(store.ny, store.ny * config.grid_scale)
        KX, KY = np.meshgrid(self.kx, self.ky, indexing="xy")
        self._ikx = 1j * KX
        self._iky = 1j * KY
        k2 = KX**2 + KY**2

        self.omega = omega_table(self.kx, self.ky, config.depth_samples, config.gravity)

        # modes left untouched by the rotation
        self._active = (k2[None, :, :] >= cte.K2_EPS) & (self.omega > 0.0)
        self._coupling = np.zeros_like(self.omega)
        np.divide(
            self.omega,
            np.broadcast_to(k2, self.omega.shape),
            out=self._coupling,
            where=self._active,
        )

        self._depth_samples = np.asarray(config.depth_samples, dtype=cte.FLOAT_TYPE_NP)

    def rotate(self, h_hat, q_hat, ik, dt):
        """
        Advance one flux mode set by ``dt`` at every reference depth.

        q' = cos(omega dt) q - sin(omega dt) (omega / |k|^2) (i k h)

        Args:
                h_hat (numpy.ndarray): Spectrum of the mid-step height (ny, nx)
                q_hat (numpy.ndarray): Spectrum of the flux (ny, nx)
                ik (numpy.ndarray): i * k along the flux axis (ny, nx)
                dt (float): Time step

        Returns:
                numpy.ndarray: Rotated spectra of shape (n_depths, ny, nx)

        Author: B.G.
        """
        phase = self.omega * dt
        rotated = np.cos(phase) * q_hat[None] - np.sin(phase) * self._coupling * (ik * h_hat)[None]
        return np.where(self._active, rotated, q_hat[None])

    def step(self, dt):
        """
        Propagate the surface-layer fluxes by ``dt``. Does nothing if dt <= 0.

        Author: B.G.
        """
        if dt <= 0:
            return

        s = self.store

        average_into(s["height_high_prev"], s["height_high"], s["height_mid"])
        bulk_depth(s["height_low"], s["terrain"], s["depth_smooth"], self.config.depth_eps)

        h_hat = np.fft.fft2(s["height_mid"].to_numpy().astype(np.float64))

        for flux, ik, stacked in (
            ("qx_high", self._ikx, "qx_samples"),
            ("qy_high", self._iky, "qy_samples"),
        ):
            q_hat = np.fft.fft2(s[flux].to_numpy().astype(np.float64))
            q_depths = np.fft.ifft2(self.rotate(h_hat, q_hat, ik, dt)).real
            s.from_numpy(stacked, q_depths)
            interpolate_depth_samples(
                s[stacked], s["depth_smooth"], self._depth_samples, s[flux], self.config.depth_eps
            )
