# crystalkit/utils/peak_profiles.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

from crystalkit.utils.spectrum_math import gaussian_sigma, lorentzian_gamma


class ProfileShape(str, Enum):
    GAUSSIAN = "Gaussian"
    LORENTZIAN = "Lorentzian"
    PSEUDO_VOIGT = "Pseudo-Voigt"


def gaussian(x, amplitude, center, sigma):
    """
    Gaussian peak.

    amplitude : peak height
    center    : position of the maximum
    sigma     : width parameter
    """
    return amplitude * np.exp(-((x - center) ** 2) / (2 * sigma**2))


def lorentzian(x, amplitude, center, gamma):
    """
    Lorentzian peak.

    gamma : half width at half maximum (HWHM).
    """
    return amplitude * (gamma**2) / ((x - center) ** 2 + gamma**2)


def pseudo_voigt(x, amplitude, center, sigma, gamma, eta):
    """
    Pseudo-Voigt as a linear mix of Gaussian and Lorentzian.

    eta in [0, 1] is the Lorentzian weight. This is a pointwise mixture of the
    two shapes, not their convolution.
    """
    g = gaussian(x, 1.0, center, sigma)
    l = lorentzian(x, 1.0, center, gamma)
    profile = eta * l + (1 - eta) * g
    return amplitude * profile


def integral_breadth(area: float, max_intensity: float) -> float:
    """Integral breadth β = area / peak height (same units as the 2θ axis)."""
    return area / max_intensity


def shape_factor(fwhm: float, breadth: float) -> float:
    """φ = FWHM / β: 0.9394 for a pure Gaussian, 0.6366 for a pure Lorentzian."""
    return fwhm / breadth


@dataclass(frozen=True)
class ProfilePoint:
    x: float
    y: float


@dataclass(frozen=True)
class LineProfileStats:
    fwhm: float
    integral_breadth: float
    shape_factor: float
    area: float
    max_intensity: float


@dataclass(frozen=True)
class PeakSimulation:
    points: list[ProfilePoint]
    stats: LineProfileStats

    @property
    def x(self) -> np.ndarray:
        return np.array([p.x for p in self.points])

    @property
    def y(self) -> np.ndarray:
        return np.array([p.y for p in self.points])


def _profile_area(shape: ProfileShape, amplitude: float, sigma: float, gamma: float, eta: float) -> float:
    area_g = amplitude * sigma * np.sqrt(2 * np.pi)
    area_l = amplitude * np.pi * gamma
    if shape is ProfileShape.GAUSSIAN:
        return float(area_g)
    if shape is ProfileShape.LORENTZIAN:
        return float(area_l)
    if shape is ProfileShape.PSEUDO_VOIGT:
        return float((1 - eta) * area_g + eta * area_l)
    raise ValueError(f"Unknown profile shape: {shape!r}")


def _profile_values(
    shape: ProfileShape, x: np.ndarray, amplitude: float, center: float, sigma: float, gamma: float, eta: float
) -> np.ndarray:
    if shape is ProfileShape.GAUSSIAN:
        return gaussian(x, amplitude, center, sigma)
    if shape is ProfileShape.LORENTZIAN:
        return lorentzian(x, amplitude, center, gamma)
    if shape is ProfileShape.PSEUDO_VOIGT:
        return pseudo_voigt(x, amplitude, center, sigma, gamma, eta)
    raise ValueError(f"Unknown profile shape: {shape!r}")


def simulate_peak(
    shape: ProfileShape | str,
    center: float,
    fwhm: float,
    eta: float,
    amplitude: float,
    value_range: tuple[float, float],
    steps: int = 200,
) -> PeakSimulation:
    """
    Sample a single line profile and derive its breadth statistics.

    Returns ``steps + 1`` evenly spaced points over ``value_range``. Areas are
    analytic (full, untruncated profile), not integrated from the samples.
    ``eta`` only matters for the Pseudo-Voigt shape.
    """
    shape = ProfileShape(shape)
    if fwhm <= 0:
        raise ValueError(f"simulate_peak: fwhm must be positive, got {fwhm}")
    if amplitude <= 0:
        raise ValueError(f"simulate_peak: amplitude must be positive, got {amplitude}")
    if not 0 <= eta <= 1:
        raise ValueError(f"simulate_peak: eta must lie in [0, 1], got {eta}")
    if steps < 1:
        raise ValueError(f"simulate_peak: steps must be >= 1, got {steps}")

    start, end = value_range
    sigma = gaussian_sigma(fwhm)
    gamma = lorentzian_gamma(fwhm)

    x = start + np.arange(steps + 1) * ((end - start) / steps)
    y = _profile_values(shape, x, amplitude, center, sigma, gamma, eta)
    points = [ProfilePoint(x=float(xi), y=float(yi)) for xi, yi in zip(x, y)]

    area = _profile_area(shape, amplitude, sigma, gamma, eta)
    breadth = integral_breadth(area, amplitude)
    stats = LineProfileStats(
        fwhm=fwhm,
        integral_breadth=breadth,
        shape_factor=shape_factor(fwhm, breadth),
        area=area,
        max_intensity=amplitude,
    )
    return PeakSimulation(points=points, stats=stats)
