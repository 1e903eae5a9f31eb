# crystalkit/utils/spectrum_math.py
import numpy as np


# ======= Angle helpers =======

def deg2rad(deg: float) -> float:
    """Degrees to radians."""
    return float(np.radians(deg))


def rad2deg(rad: float) -> float:
    """Radians to degrees."""
    return float(np.degrees(rad))


def half_angle_rad(two_theta: float) -> float:
    """Bragg angle θ (rad) from a 2θ position in degrees."""
    return deg2rad(two_theta / 2)


def normalize_to_max(values, scale: float = 100.0) -> np.ndarray:
    """
    Scale values so that the largest one equals ``scale``.

    Empty input or a non-positive maximum gives back a zero array of the same length.
    """
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return arr
    peak = float(arr.max())
    if not np.isfinite(peak) or peak <= 0:
        return np.zeros_like(arr)
    return arr / peak * scale


# ======= Width conversions =======

def gaussian_sigma(fwhm: float) -> float:
    """Gaussian σ from FWHM: σ = FWHM / (2 * sqrt(2 ln 2))."""
    return fwhm / (2 * np.sqrt(2 * np.log(2)))


def lorentzian_gamma(fwhm: float) -> float:
    """Lorentzian HWHM γ = FWHM / 2."""
    return fwhm / 2
