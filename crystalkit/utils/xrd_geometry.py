"""
Geometry helpers for diffraction: Bragg's law, Q and cubic d-spacings.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from crystalkit.utils.parsing import is_valid_two_theta, split_fields, to_floats
from crystalkit.utils.spectrum_math import half_angle_rad, rad2deg


@dataclass(frozen=True)
class BraggResult:
    """
    Scalars derived from one peak position.

    two_theta            : peak position (deg)
    d_spacing            : interplanar spacing (Å)
    q_vector             : |Q| = 4π sinθ / λ (Å⁻¹)
    sin_theta_over_lambda: sinθ / λ (Å⁻¹)
    """

    two_theta: float
    d_spacing: float
    q_vector: float
    sin_theta_over_lambda: float


def calculate_bragg(wavelength: float, two_theta: float) -> BraggResult | None:
    """
    Apply Bragg's law (n = 1) to a single 2θ position.

    Returns None for a non-positive wavelength, 2θ outside (0, 180) or sinθ == 0.
    """
    if wavelength <= 0 or two_theta <= 0 or two_theta >= 180:
        return None
    sin_theta = float(np.sin(half_angle_rad(two_theta)))
    if sin_theta == 0:
        return None
    return BraggResult(
        two_theta=two_theta,
        d_spacing=wavelength / (2 * sin_theta),
        q_vector=4 * np.pi * sin_theta / wavelength,
        sin_theta_over_lambda=sin_theta / wavelength,
    )


def calculate_bragg_list(wavelength: float, peaks) -> list[BraggResult]:
    """Bragg results for every peak that yields a valid result."""
    results = []
    for two_theta in peaks:
        res = calculate_bragg(wavelength, two_theta)
        if res is not None:
            results.append(res)
    return results


def bragg_2theta_from_d(d_spacing: float, wavelength: float) -> float | None:
    """
    2θ (deg) for a given d_hkl (Å): 2θ = 2 arcsin(λ / (2 d)).

    None if the reflection is not reachable (λ / 2d > 1) or the input is non-physical.
    """
    if d_spacing <= 0 or wavelength <= 0:
        return None
    sin_theta = wavelength / (2 * d_spacing)
    if sin_theta > 1:
        return None
    return 2 * rad2deg(np.arcsin(sin_theta))


def cubic_d_spacing(a: float, hkl: tuple[int, int, int]) -> float:
    """d = a / sqrt(h² + k² + l²) for a cubic cell."""
    h, k, l = hkl
    return float(a / np.sqrt(h * h + k * k + l * l))


def parse_peak_string(text: str) -> list[float]:
    """
    Peak positions (2θ, deg) from free text.

    Splits on commas/whitespace, keeps values in (0, 180) and sorts ascending.
    Unparsable tokens are ignored.
    """
    values = to_floats(split_fields(text))
    return sorted(v for v in values if is_valid_two_theta(v))
