"""
Starting point for a Rietveld refinement: initial parameters and refinement order.

No refinement is performed here.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from itertools import product
from typing import Iterable

from crystalkit.utils.xrd_geometry import bragg_2theta_from_d, cubic_d_spacing

REFINEMENT_STRATEGY = (
    "1. Scale",
    "2. Background",
    "3. Lattice",
    "4. Peak Profile",
    "5. Atomic",
    "6. ADP",
)

CUBIC_SYSTEMS = ("Cubic", "SC", "BCC", "FCC", "Diamond")


class BackgroundModel(str, Enum):
    CHEBYSHEV_6 = "Chebyshev_6_term"
    LINEAR_INTERPOLATION = "Linear_Interpolation"
    POLYNOMIAL_4 = "Polynomial_4_term"


class ProfileModel(str, Enum):
    TCH = "Thompson-Cox-Hastings"
    PSEUDO_VOIGT = "Pseudo-Voigt"
    PEARSON_VII = "Pearson-VII"


@dataclass(frozen=True)
class RietveldPhase:
    name: str
    crystal_system: str
    a: float
    b: float | None = None
    c: float | None = None
    alpha: float | None = None
    beta: float | None = None
    gamma: float | None = None


@dataclass(frozen=True)
class PhaseParameters:
    name: str
    scale_guess: float
    lattice: dict
    first_reflections: list[dict] = field(default_factory=list)


@dataclass(frozen=True)
class RietveldSetup:
    phases: list[PhaseParameters]
    background_model: str
    profile_shape: str
    refinement_strategy: list[str]
    module: str = "Rietveld-Setup"

    def to_dict(self) -> dict:
        phases = []
        for ph in self.phases:
            entry = {"name": ph.name, "scale_guess": ph.scale_guess, "lattice": ph.lattice}
            if ph.first_reflections:
                entry["first_reflections"] = ph.first_reflections
            phases.append(entry)
        return {
            "module": self.module,
            "initial_parameters": {
                "phases": phases,
                "background_model": self.background_model,
                "profile_shape": self.profile_shape,
            },
            "refinement_strategy": list(self.refinement_strategy),
        }

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


def scale_guess(max_obs_intensity: float) -> float:
    """max(I_obs) / 1000 rounded to 5 significant figures, or 1.0 without data."""
    guess = max_obs_intensity / 1000 if max_obs_intensity > 0 else 1.0
    return float(f"{guess:.4e}")


def _lattice_with_defaults(phase: RietveldPhase) -> dict:
    return {
        "a": phase.a,
        "b": phase.b or phase.a,
        "c": phase.c or phase.a,
        "alpha": phase.alpha or 90.0,
        "beta": phase.beta or 90.0,
        "gamma": phase.gamma or 90.0,
    }


def cubic_reflection_preview(a: float, wavelength: float, count: int = 5, max_index: int = 4) -> list[dict]:
    """
    First ``count`` distinct cubic d-spacings with their 2θ positions.

    No extinction rules are applied: this is a positional guide only.
    """
    by_n: dict[int, tuple[int, int, int]] = {}
    for hkl in product(range(max_index + 1), repeat=3):
        n = hkl[0] ** 2 + hkl[1] ** 2 + hkl[2] ** 2
        if n == 0 or n in by_n:
            continue
        by_n[n] = tuple(sorted(hkl, reverse=True))

    preview = []
    for n in sorted(by_n):
        hkl = by_n[n]
        d = cubic_d_spacing(a, hkl)
        two_theta = bragg_2theta_from_d(d, wavelength)
        if two_theta is None:
            break
        preview.append({"hkl": list(hkl), "d_spacing": round(d, 4), "two_theta": round(two_theta, 3)})
        if len(preview) == count:
            break
    return preview


def generate_rietveld_setup(
    phases: Iterable[RietveldPhase],
    max_obs_intensity: float,
    background_model: BackgroundModel | str = BackgroundModel.CHEBYSHEV_6,
    profile_shape: ProfileModel | str = ProfileModel.TCH,
    wavelength: float | None = None,
) -> RietveldSetup:
    """
    Initial refinement parameters for each phase.

    Missing b/c default to a and missing angles to 90°. With ``wavelength``
    set, cubic phases also get a preview of their first reflection positions;
    other systems are carried as labels only.
    """
    background_model = BackgroundModel(background_model)
    profile_shape = ProfileModel(profile_shape)
    guess = scale_guess(max_obs_intensity)

    params = []
    for ph in phases:
        preview = []
        if wavelength is not None and wavelength > 0 and ph.crystal_system in CUBIC_SYSTEMS and ph.a > 0:
            preview = cubic_reflection_preview(ph.a, wavelength)
        params.append(
            PhaseParameters(
                name=ph.name,
                scale_guess=guess,
                lattice=_lattice_with_defaults(ph),
                first_reflections=preview,
            )
        )

    return RietveldSetup(
        phases=params,
        background_model=background_model.value,
        profile_shape=profile_shape.value,
        refinement_strategy=list(REFINEMENT_STRATEGY),
    )
