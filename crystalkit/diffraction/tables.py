"""
Static lookup tables: neutron scattering lengths, atomic numbers and
magnetic form-factor coefficients.

All tables are read-only mappings built once at import.
"""

from __future__ import annotations

from types import MappingProxyType

import numpy as np

from crystalkit.config import CONFIG

# Coherent neutron scattering lengths b (fm).
NEUTRON_SCATTERING_LENGTHS = MappingProxyType({
    "H": -3.74, "D": 6.67, "Li": -1.90, "B": 5.30, "C": 6.65, "N": 9.36, "O": 5.80,
    "F": 5.65, "Na": 3.63, "Mg": 5.38, "Al": 3.45, "Si": 4.15, "P": 5.13, "S": 2.85,
    "Cl": 9.58, "K": 3.67, "Ca": 4.70, "Ti": -3.44, "V": -0.38, "Cr": 3.64, "Mn": -3.73,
    "Fe": 9.45, "Co": 2.49, "Ni": 10.3, "Cu": 7.72, "Zn": 5.68, "Zr": 7.16, "Ag": 5.92,
    "Cd": 4.87, "Au": 7.63, "Pb": 9.40, "U": 8.42,
})

ATOMIC_NUMBERS = MappingProxyType({
    "H": 1, "He": 2, "Li": 3, "Be": 4, "B": 5, "C": 6, "N": 7, "O": 8, "F": 9, "Ne": 10,
    "Na": 11, "Mg": 12, "Al": 13, "Si": 14, "P": 15, "S": 16, "Cl": 17, "Ar": 18,
    "K": 19, "Ca": 20, "Sc": 21, "Ti": 22, "V": 23, "Cr": 24, "Mn": 25, "Fe": 26,
    "Co": 27, "Ni": 28, "Cu": 29, "Zn": 30, "Ga": 31, "Ge": 32, "As": 33, "Se": 34,
    "Br": 35, "Sr": 38, "Y": 39, "Zr": 40, "Nb": 41, "Mo": 42, "Ag": 47, "Cd": 48,
    "Sn": 50, "Sb": 51, "I": 53, "Ba": 56, "La": 57, "Ce": 58, "W": 74, "Pt": 78,
    "Au": 79, "Pb": 82, "Bi": 83, "U": 92,
})

# <j0> form factor: A·exp(-a s²) + B·exp(-b s²) + C·exp(-c s²) + D, s = sinθ/λ.
# Coefficients (A, a, B, b, C, c, D) per ion.
MAGNETIC_FORM_FACTORS = MappingProxyType({
    "Cr3+": (-0.3094, 0.0274, 0.3680, 17.0355, 0.6559, 6.5236, 0.2856),
    "Mn2+": (0.4220, 17.6840, 0.5948, 6.0050, 0.0043, -0.6090, -0.0219),
    "Mn3+": (0.4198, 14.2829, 0.6054, 5.4689, 0.9241, -0.0088, -0.9498),
    "Fe": (0.0706, 35.0085, 0.3589, 15.3583, 0.5819, 5.5606, -0.0114),
    "Fe2+": (0.0263, 34.9597, 0.3668, 15.9435, 0.6188, 5.5935, -0.0119),
    "Fe3+": (0.3972, 13.2442, 0.6295, 4.9034, -0.0314, 0.3496, 0.0044),
    "Co": (0.4139, 16.1616, 0.6013, 4.7805, -0.1518, 0.0210, 0.1345),
    "Co2+": (0.4332, 14.3553, 0.5857, 4.6077, -0.0382, 0.1338, 0.0179),
    "Co3+": (0.3902, 12.5078, 0.6324, 4.4574, -0.1500, 0.0343, 0.1272),
    "Ni": (-0.0172, 35.7392, 0.3174, 14.2689, 0.7136, 4.5661, -0.0143),
    "Ni2+": (0.0163, 35.8826, 0.3916, 13.2233, 0.6052, 4.3388, -0.0133),
    "Cu2+": (0.0232, 34.9686, 0.4023, 11.5640, 0.5882, 3.8428, -0.0137),
})


def neutron_scattering_length(element: str) -> float:
    """Tabulated b (fm). Unknown elements raise KeyError: there is no default."""
    try:
        return NEUTRON_SCATTERING_LENGTHS[element]
    except KeyError as exc:
        raise KeyError(f"neutron_scattering_length: no tabulated b for element '{element}'") from exc


def atomic_number(element: str) -> int:
    """Z for the X-ray form factor, falling back to CONFIG.default_atomic_number."""
    return ATOMIC_NUMBERS.get(element, CONFIG.default_atomic_number)


def magnetic_form_factor(ion: str | None, s: float) -> float:
    """
    Spherical magnetic form factor <j0>(s).

    Unknown or missing ions fall back to the Gaussian approximation exp(-4 s²).
    """
    coeffs = MAGNETIC_FORM_FACTORS.get(ion) if ion else None
    s2 = s * s
    if coeffs is None:
        return float(np.exp(-4 * s2))
    a_, a, b_, b, c_, c, d = coeffs
    return float(a_ * np.exp(-a * s2) + b_ * np.exp(-b * s2) + c_ * np.exp(-c * s2) + d)
