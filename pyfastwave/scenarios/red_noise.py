"""
Red noise (Brownian noise) generation for initial water surfaces.

Produces isotropic, zero-mean surface chop with a 1/f² power spectrum by
spectral shaping of white noise. Useful to seed the surface layer with a
broadband sea state.

Author: B.G.
"""

import numpy as np

from .. import constants as cte


def red_noise(nx, ny, amplitude=1.0, seed=42, eps=1e-12):
    """
    Generate true 2D red noise with 1/f² power spectrum using spectral shaping.

    White noise is transformed to the frequency domain, filtered by
    1 / max(eps, |f|) with the DC component removed, and transformed back.

    Args:
        nx: Number of cells in x direction
        ny: Number of cells in y direction
        amplitude: Maximum absolute value of the result (default: 1.0)
        seed: Random seed for reproducible results (default: 42)
        eps: Small value to avoid division by zero at DC component

    Returns:
        numpy.ndarray: Zero-mean red noise of shape (ny, nx)

    Example:
        chop = red_noise(256, 256, amplitude=0.05, seed=7)
    """
    rng = np.random.default_rng(seed)
    W = rng.standard_normal((ny, nx))

    F = np.fft.fft2(W)

    kx = np.fft.fftfreq(nx, d=1.0)
    ky = np.fft.fftfreq(ny, d=1.0)
    KX, KY = np.meshgrid(kx, ky, indexing="xy")
    K = np.sqrt(KX**2 + KY**2)

    A = 1.0 / np.maximum(eps, K)
    A[0, 0] = 0.0  # Kill DC component
    F *= A

    R = np.fft.ifft2(F).real
    R -= np.mean(R)

    R_max = np.max(np.abs(R))
    if R_max > eps:
        R *= amplitude / R_max

    return R.astype(cte.FLOAT_TYPE_NP)
