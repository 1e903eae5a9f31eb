"""
Kinematic powder patterns for cubic cells: neutron, X-ray and magnetic neutron.

All three engines walk the same (h k l) box, sum a complex structure factor
over the atoms, apply a Lorentz(-polarization) factor and normalise the
surviving reflections to the strongest one (= 100).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterator, Sequence

import numpy as np

from crystalkit.config import CONFIG
from crystalkit.diffraction.tables import atomic_number, magnetic_form_factor
from crystalkit.utils.spectrum_math import half_angle_rad, normalize_to_max, rad2deg
from crystalkit.utils.xrd_geometry import cubic_d_spacing

HKL = tuple[int, int, int]


@dataclass(frozen=True)
class Lattice:
    """Cell parameters. The engines only use ``a`` (cubic d-spacings)."""

    a: float
    b: float | None = None
    c: float | None = None
    alpha: float | None = None
    beta: float | None = None
    gamma: float | None = None


@dataclass(frozen=True)
class Atom:
    """
    One site of the unit cell.

    x, y, z           : fractional coordinates
    b_iso             : isotropic displacement B (Å²)
    scattering_length : neutron b (fm); required by the neutron engines
    atomic_number     : X-ray Z override; looked up from ``element`` if None
    """

    element: str
    x: float
    y: float
    z: float
    b_iso: float = 0.0
    scattering_length: float | None = None
    atomic_number: int | None = None


@dataclass(frozen=True)
class MagneticAtom(Atom):
    """Atom carrying an ordered moment (Bohr magnetons, Cartesian = cell axes)."""

    mx: float = 0.0
    my: float = 0.0
    mz: float = 0.0
    ion: str | None = None  # key into MAGNETIC_FORM_FACTORS, e.g. "Mn2+"


@dataclass(frozen=True)
class Reflection:
    hkl: HKL
    d_spacing: float
    two_theta: float
    f_squared: float
    intensity: float  # 0–100 after normalisation


@dataclass(frozen=True)
class MagneticReflection:
    hkl: HKL
    d_spacing: float
    two_theta: float
    nuclear_intensity: float
    magnetic_intensity: float
    total_intensity: float

    @property
    def intensity(self) -> float:
        return self.total_intensity


# ======= Shared geometry =======

def _iter_reflections(
    wavelength: float, a: float, max_two_theta: float
) -> Iterator[tuple[HKL, float, float, float]]:
    """
    Yield (hkl, d, sinθ, 2θ) for every reflection of the positive octant
    reachable below ``max_two_theta``.
    """
    max_sin_theta = float(np.sin(half_angle_rad(max_two_theta)))
    max_index = int(np.floor(2 * a * max_sin_theta / wavelength))
    for h in range(max_index + 1):
        for k in range(max_index + 1):
            for l in range(max_index + 1):
                if h == 0 and k == 0 and l == 0:
                    continue
                d = cubic_d_spacing(a, (h, k, l))
                sin_theta = wavelength / (2 * d)
                if sin_theta > 1 or sin_theta > max_sin_theta:
                    continue
                two_theta = 2 * rad2deg(np.arcsin(sin_theta))
                yield (h, k, l), d, sin_theta, two_theta


def _phases(atoms: Sequence[Atom], hkl: HKL) -> np.ndarray:
    """exp(2πi (hx + ky + lz)) for every atom."""
    xyz = np.array([[at.x, at.y, at.z] for at in atoms], dtype=float).reshape(-1, 3)
    return np.exp(2j * np.pi * (xyz @ np.asarray(hkl, dtype=float)))


def _debye_waller(atoms: Sequence[Atom], s: float) -> np.ndarray:
    """exp(-B s²) per atom, s = sinθ/λ."""
    b_iso = np.array([at.b_iso for at in atoms], dtype=float)
    return np.exp(-b_iso * s * s)


def _lorentz(sin_theta: float) -> float:
    return 1.0 / (sin_theta * np.sin(2 * np.arcsin(sin_theta)))


def _lorentz_polarization(sin_theta: float) -> float:
    two_theta = 2 * np.arcsin(sin_theta)
    return (1 + np.cos(two_theta) ** 2) / (sin_theta * np.sin(two_theta))


def _scattering_lengths(atoms: Sequence[Atom]) -> np.ndarray:
    lengths = []
    for at in atoms:
        if at.scattering_length is None:
            raise ValueError(
                f"neutron scattering length missing for atom '{at.element}' at ({at.x}, {at.y}, {at.z})"
            )
        lengths.append(at.scattering_length)
    return np.array(lengths, dtype=float)


def _valid_setup(wavelength: float, lattice: Lattice, atoms: Sequence[Atom]) -> bool:
    return wavelength > 0 and lattice.a > 0 and len(atoms) > 0


def _normalise(reflections: list[Reflection]) -> list[Reflection]:
    if not reflections:
        return []
    ordered = sorted(reflections, key=lambda r: r.two_theta)
    scaled = normalize_to_max([r.intensity for r in ordered])
    return [replace(r, intensity=float(v)) for r, v in zip(ordered, scaled)]


# ======= Engines =======

def calculate_neutron_diffraction(
    wavelength: float,
    lattice: Lattice,
    atoms: Sequence[Atom],
    max_two_theta: float | None = None,
    intensity_floor: float | None = None,
) -> list[Reflection]:
    """
    Nuclear neutron powder pattern.

    F = Σ b exp(-B s²) exp(2πi h·r), I = |F|² / (sinθ sin2θ).
    Every atom must carry an explicit ``scattering_length``.
    """
    max_two_theta = CONFIG.max_two_theta if max_two_theta is None else max_two_theta
    floor = CONFIG.intensity_floor if intensity_floor is None else intensity_floor
    if not _valid_setup(wavelength, lattice, atoms):
        return []
    lengths = _scattering_lengths(atoms)

    results: list[Reflection] = []
    for hkl, d, sin_theta, two_theta in _iter_reflections(wavelength, lattice.a, max_two_theta):
        s = sin_theta / wavelength
        f = complex(np.sum(lengths * _debye_waller(atoms, s) * _phases(atoms, hkl)))
        f_sq = abs(f) ** 2
        intensity = f_sq * _lorentz(sin_theta)
        if intensity > floor:
            results.append(Reflection(hkl, d, two_theta, f_sq, intensity))
    return _normalise(results)


def calculate_xray_diffraction(
    wavelength: float,
    lattice: Lattice,
    atoms: Sequence[Atom],
    max_two_theta: float | None = None,
    intensity_floor: float | None = None,
) -> list[Reflection]:
    """
    X-ray powder pattern with an empirical form factor f0(s) = Z exp(-2 s²).

    I = |F|² (1 + cos² 2θ) / (sinθ sin2θ).
    """
    max_two_theta = CONFIG.max_two_theta if max_two_theta is None else max_two_theta
    floor = CONFIG.intensity_floor if intensity_floor is None else intensity_floor
    if not _valid_setup(wavelength, lattice, atoms):
        return []
    z = np.array(
        [at.atomic_number if at.atomic_number is not None else atomic_number(at.element) for at in atoms],
        dtype=float,
    )

    results: list[Reflection] = []
    for hkl, d, sin_theta, two_theta in _iter_reflections(wavelength, lattice.a, max_two_theta):
        s = sin_theta / wavelength
        f0 = z * np.exp(-2 * s * s)
        f = complex(np.sum(f0 * _debye_waller(atoms, s) * _phases(atoms, hkl)))
        f_sq = abs(f) ** 2
        intensity = f_sq * _lorentz_polarization(sin_theta)
        if intensity > floor:
            results.append(Reflection(hkl, d, two_theta, f_sq, intensity))
    return _normalise(results)


def calculate_magnetic_diffraction(
    wavelength: float,
    lattice: Lattice,
    atoms: Sequence[MagneticAtom],
    max_two_theta: float | None = None,
    intensity_floor: float | None = None,
) -> list[MagneticReflection]:
    """
    Nuclear + magnetic neutron pattern for collinear or non-collinear moments.

    Only the moment component perpendicular to Q scatters:
    q = M − (M·Q̂)Q̂. The magnetic amplitude per atom is
    p · f_mag(s) · T · q with p = CONFIG.magnetic_scattering_length and the
    nuclear Debye–Waller factor T reused for the magnetic term.
    Intensities are normalised to the strongest total intensity.
    """
    max_two_theta = CONFIG.max_two_theta if max_two_theta is None else max_two_theta
    floor = CONFIG.intensity_floor if intensity_floor is None else intensity_floor
    if not _valid_setup(wavelength, lattice, atoms):
        return []
    lengths = _scattering_lengths(atoms)
    moments = np.array([[at.mx, at.my, at.mz] for at in atoms], dtype=float)
    p = CONFIG.magnetic_scattering_length

    rows = []
    for hkl, d, sin_theta, two_theta in _iter_reflections(wavelength, lattice.a, max_two_theta):
        s = sin_theta / wavelength
        t = _debye_waller(atoms, s)
        phases = _phases(atoms, hkl)

        f_nuc = complex(np.sum(lengths * t * phases))

        q_hat = np.asarray(hkl, dtype=float) / np.linalg.norm(hkl)
        m_perp = moments - np.outer(moments @ q_hat, q_hat)
        f_mag = np.array([magnetic_form_factor(at.ion, s) for at in atoms])
        weight = p * f_mag * t * phases
        f_mag_vec = weight @ m_perp  # complex 3-vector

        i_nuc = abs(f_nuc) ** 2
        i_mag = float(np.sum(np.abs(f_mag_vec) ** 2))
        if i_nuc + i_mag > floor:
            lor = _lorentz(sin_theta)
            rows.append((hkl, d, two_theta, i_nuc * lor, i_mag * lor))

    if not rows:
        return []
    rows.sort(key=lambda r: r[2])
    max_total = max(r[3] + r[4] for r in rows)
    return [
        MagneticReflection(
            hkl=hkl,
            d_spacing=d,
            two_theta=two_theta,
            nuclear_intensity=i_nuc / max_total * 100,
            magnetic_intensity=i_mag / max_total * 100,
            total_intensity=(i_nuc + i_mag) / max_total * 100,
        )
        for hkl, d, two_theta, i_nuc, i_mag in rows
    ]
