"""
Crystallite size / microstrain from line broadening.

Scherrer, Williamson–Hall (FWHM and integral-breadth variants), single-peak
integral breadth and the Warren–Averbach Fourier method.

Wavelengths are in Å; sizes are reported in nm (hence the final / 10).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

import numpy as np
from scipy import stats

from crystalkit.utils.parsing import is_valid_two_theta, iter_records
from crystalkit.utils.peak_profiles import integral_breadth, shape_factor
from crystalkit.utils.spectrum_math import deg2rad, half_angle_rad, rad2deg

NON_PHYSICAL_BROADENING = (
    "Corrected FWHM is zero or negative, cannot calculate size for this peak."
)


# ======= Records =======

@dataclass(frozen=True)
class ScherrerPeak:
    two_theta: float
    fwhm_obs: float


@dataclass(frozen=True)
class ScherrerResult:
    two_theta: float
    fwhm_obs: float
    beta_corrected: float  # deg
    size_nm: float
    error: str | None = None


@dataclass(frozen=True)
class WHPoint:
    x: float  # 4 sinθ
    y: float  # β cosθ
    two_theta: float
    beta_sample: float | None = None  # deg, IB-Advanced only


@dataclass(frozen=True)
class Regression:
    slope: float
    intercept: float
    r_squared: float


@dataclass(frozen=True)
class SizeStrainResult:
    strain_percent: float
    size_intercept_nm: float
    regression: Regression
    points: list[WHPoint] = field(default_factory=list)


@dataclass(frozen=True)
class IntegralBreadthPeak:
    two_theta: float
    area: float
    i_max: float
    fwhm: float | None = None


@dataclass(frozen=True)
class IntegralBreadthResult:
    two_theta: float
    integral_breadth_deg: float
    shape_factor_phi: float | None
    size_nm: float


@dataclass(frozen=True)
class WAPoint:
    length_nm: float
    a1: float
    a2: float


@dataclass(frozen=True)
class WASizePoint:
    length_nm: float
    a_size: float


@dataclass(frozen=True)
class WAStrainPoint:
    length_nm: float
    rms_strain: float


@dataclass(frozen=True)
class WAResult:
    size_distribution: list[WASizePoint]
    strain_distribution: list[WAStrainPoint]


# ======= Text parsers =======

def parse_scherrer_input(text: str) -> list[ScherrerPeak]:
    """
    One peak per line: ``2θ, FWHM`` (deg). Extra fields are ignored.

    Lines with 2θ outside (0, 180) or a non-positive FWHM are dropped.
    """
    peaks = []
    for rec in iter_records(text, min_fields=2):
        two_theta, fwhm = rec[0], rec[1]
        if is_valid_two_theta(two_theta) and fwhm > 0:
            peaks.append(ScherrerPeak(two_theta=two_theta, fwhm_obs=fwhm))
    return peaks


def parse_integral_breadth_input(text: str) -> list[IntegralBreadthPeak]:
    """
    One peak per line, either ``2θ, FWHM, area, Imax`` or ``2θ, area, Imax``.
    """
    peaks = []
    for rec in iter_records(text, min_fields=3):
        if not is_valid_two_theta(rec[0]):
            continue
        if len(rec) >= 4:
            peaks.append(IntegralBreadthPeak(two_theta=rec[0], fwhm=rec[1], area=rec[2], i_max=rec[3]))
        else:
            peaks.append(IntegralBreadthPeak(two_theta=rec[0], area=rec[1], i_max=rec[2]))
    return peaks


def parse_ib_advanced_input(text: str) -> list[IntegralBreadthPeak]:
    """One peak per line: ``2θ, area, Imax``."""
    return [
        IntegralBreadthPeak(two_theta=rec[0], area=rec[1], i_max=rec[2])
        for rec in iter_records(text, min_fields=3)
        if is_valid_two_theta(rec[0])
    ]


def parse_wa_input(text: str) -> list[WAPoint]:
    """One Fourier length per line: ``L (nm), A1(L), A2(L)``."""
    return [WAPoint(length_nm=rec[0], a1=rec[1], a2=rec[2]) for rec in iter_records(text, min_fields=3)]


# ======= Scherrer =======

def calculate_scherrer(
    wavelength: float,
    k: float,
    inst_fwhm: float,
    peak: ScherrerPeak,
) -> ScherrerResult | None:
    """
    Scherrer size D = Kλ / (β cosθ), with β² = β_obs² − β_inst² (radians).

    A peak no broader than the instrument gives a zero-size result carrying
    ``error`` instead of being dropped.
    """
    if wavelength <= 0:
        return None
    two_theta, fwhm_obs = peak.two_theta, peak.fwhm_obs
    if not is_valid_two_theta(two_theta) or fwhm_obs <= 0:
        return None

    theta = half_angle_rad(two_theta)
    beta_obs = deg2rad(fwhm_obs)
    beta_inst = deg2rad(inst_fwhm)

    if beta_obs <= beta_inst:
        return ScherrerResult(
            two_theta=two_theta,
            fwhm_obs=fwhm_obs,
            beta_corrected=0.0,
            size_nm=0.0,
            error=NON_PHYSICAL_BROADENING,
        )

    beta_sample = float(np.sqrt(max(0.0, beta_obs**2 - beta_inst**2)))
    if beta_sample == 0:
        return ScherrerResult(
            two_theta=two_theta,
            fwhm_obs=fwhm_obs,
            beta_corrected=0.0,
            size_nm=0.0,
            error="Zero physical broadening detected, size cannot be determined.",
        )

    cos_theta = float(np.cos(theta))
    if abs(cos_theta) < 1e-10:
        return None

    return ScherrerResult(
        two_theta=two_theta,
        fwhm_obs=fwhm_obs,
        beta_corrected=rad2deg(beta_sample),
        size_nm=(k * wavelength) / (beta_sample * cos_theta) / 10,
    )


def calculate_scherrer_list(
    wavelength: float, k: float, inst_fwhm: float, peaks: Iterable[ScherrerPeak]
) -> list[ScherrerResult]:
    results = (calculate_scherrer(wavelength, k, inst_fwhm, pk) for pk in peaks)
    return [res for res in results if res is not None]


def mean_scherrer_size(results: Iterable[ScherrerResult]) -> float:
    """Mean size over results without an error and with positive size; 0 if none."""
    sizes = [r.size_nm for r in results if r.error is None and r.size_nm > 0]
    if not sizes:
        return 0.0
    return float(np.mean(sizes))


# ======= Williamson–Hall =======

def _fit_size_strain(points: list[WHPoint], wavelength: float, k: float) -> SizeStrainResult | None:
    """
    OLS fit of β cosθ = ε · 4 sinθ + Kλ / D.

    R² is reported as 0 when all y values are equal.
    """
    if len(points) < 2:
        return None
    x = np.array([p.x for p in points])
    y = np.array([p.y for p in points])
    if np.ptp(x) == 0:
        return None

    fit = stats.linregress(x, y)
    slope, intercept = float(fit.slope), float(fit.intercept)

    ss_tot = float(np.sum((y - y.mean()) ** 2))
    ss_res = float(np.sum((y - (slope * x + intercept)) ** 2))
    r_squared = 0.0 if ss_tot == 0 else 1 - ss_res / ss_tot

    return SizeStrainResult(
        strain_percent=slope * 100,
        size_intercept_nm=(k * wavelength) / intercept / 10 if intercept > 0 else 0.0,
        regression=Regression(slope=slope, intercept=intercept, r_squared=r_squared),
        points=points,
    )


def calculate_williamson_hall(
    wavelength: float,
    k: float,
    inst_fwhm: float,
    peaks: Iterable[ScherrerPeak],
) -> SizeStrainResult | None:
    """
    Williamson–Hall from FWHM with quadratic instrument correction.

    Peaks with no sample broadening left after correction are skipped; fewer
    than two remaining points gives None.
    """
    if wavelength <= 0:
        return None
    beta_inst = deg2rad(inst_fwhm)
    points: list[WHPoint] = []
    for pk in peaks:
        theta = half_angle_rad(pk.two_theta)
        beta_obs = deg2rad(pk.fwhm_obs)
        beta_sample = float(np.sqrt(max(0.0, beta_obs**2 - beta_inst**2)))
        if beta_sample <= 0:
            continue
        points.append(
            WHPoint(x=4 * float(np.sin(theta)), y=beta_sample * float(np.cos(theta)), two_theta=pk.two_theta)
        )
    return _fit_size_strain(points, wavelength, k)


# ======= Integral breadth =======

def calculate_integral_breadth(
    wavelength: float,
    k: float,
    peak: IntegralBreadthPeak,
) -> IntegralBreadthResult | None:
    """
    Scherrer size from the integral breadth β = area / Imax of a single peak.

    No instrument correction; φ = FWHM / β is given when the FWHM is known.
    """
    if wavelength <= 0 or peak.i_max <= 0:
        return None
    breadth_deg = integral_breadth(peak.area, peak.i_max)
    beta = deg2rad(breadth_deg)
    if beta <= 0:
        return None
    cos_theta = float(np.cos(half_angle_rad(peak.two_theta)))
    if abs(cos_theta) < 1e-10:
        return None
    phi = shape_factor(peak.fwhm, breadth_deg) if peak.fwhm is not None else None
    return IntegralBreadthResult(
        two_theta=peak.two_theta,
        integral_breadth_deg=breadth_deg,
        shape_factor_phi=phi,
        size_nm=(k * wavelength) / (beta * cos_theta) / 10,
    )


def calculate_integral_breadth_list(
    wavelength: float, k: float, peaks: Iterable[IntegralBreadthPeak]
) -> list[IntegralBreadthResult]:
    results = (calculate_integral_breadth(wavelength, k, pk) for pk in peaks)
    return [res for res in results if res is not None]


def calculate_ib_advanced(
    wavelength: float,
    k: float,
    inst_beta_ib: float,
    peaks: Iterable[IntegralBreadthPeak],
) -> SizeStrainResult | None:
    """
    Williamson–Hall on integral breadths with linear instrument subtraction.

    β_sample = max(0, β_obs − β_inst) (Lorentzian assumption), unlike the
    quadratic correction used by ``calculate_williamson_hall``.
    """
    if wavelength <= 0:
        return None
    beta_inst = deg2rad(inst_beta_ib)
    points: list[WHPoint] = []
    for pk in peaks:
        if pk.i_max == 0:
            continue
        theta = half_angle_rad(pk.two_theta)
        beta_obs = deg2rad(integral_breadth(pk.area, pk.i_max))
        beta_sample = max(0.0, beta_obs - beta_inst)
        if beta_sample <= 0:
            continue
        points.append(
            WHPoint(
                x=4 * float(np.sin(theta)),
                y=beta_sample * float(np.cos(theta)),
                two_theta=pk.two_theta,
                beta_sample=rad2deg(beta_sample),
            )
        )
    return _fit_size_strain(points, wavelength, k)


# ======= Warren–Averbach =======

def calculate_warren_averbach(d1: float, d2: float, points: Iterable[WAPoint]) -> WAResult:
    """
    Separate size and strain Fourier coefficients from two orders of one reflection.

    For each L: ln A(L) = ln A_size(L) − 2π² L² ⟨ε²⟩ / d², a straight line in 1/d².
    Points with non-positive coefficients are skipped; equal spacings give an
    empty result.
    """
    size_dist: list[WASizePoint] = []
    strain_dist: list[WAStrainPoint] = []
    if d1 <= 0 or d2 <= 0:
        return WAResult(size_dist, strain_dist)

    x1 = 1 / (d1 * d1)
    x2 = 1 / (d2 * d2)
    dx = x2 - x1
    if abs(dx) < 1e-9:
        return WAResult(size_dist, strain_dist)

    for pt in points:
        if pt.a1 <= 0 or pt.a2 <= 0:
            continue
        slope = (np.log(pt.a2) - np.log(pt.a1)) / dx
        intercept = np.log(pt.a1) - slope * x1
        size_dist.append(WASizePoint(length_nm=pt.length_nm, a_size=float(np.exp(intercept))))
        if pt.length_nm > 0:
            ms_strain = -slope / (2 * np.pi**2 * pt.length_nm**2)
            rms = float(np.sqrt(ms_strain)) if ms_strain > 0 else 0.0
            strain_dist.append(WAStrainPoint(length_nm=pt.length_nm, rms_strain=rms))
        else:
            strain_dist.append(WAStrainPoint(length_nm=0.0, rms_strain=0.0))
    return WAResult(size_dist, strain_dist)
