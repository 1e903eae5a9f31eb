"""
Built-in reference patterns (Cu Kα, λ = 1.5406 Å) for quick phase identification.

Peak lists are (2θ in degrees, relative intensity 0–100) of the strongest lines.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ReferencePhase:
    name: str
    formula: str
    reference_id: str
    peaks: tuple[tuple[float, float], ...]


REFERENCE_PHASES: tuple[ReferencePhase, ...] = (
    ReferencePhase(
        "Silicon", "Si", "COD-9008566",
        ((28.44, 100), (47.30, 55), (56.12, 30), (69.13, 6), (76.38, 11), (88.03, 12)),
    ),
    ReferencePhase(
        "Gold", "Au", "COD-9008463",
        ((38.18, 100), (44.39, 52), (64.57, 32), (77.54, 36), (81.72, 12)),
    ),
    ReferencePhase(
        "Quartz", "SiO2", "COD-1011097",
        ((20.86, 22), (26.64, 100), (36.54, 8), (39.47, 8), (50.14, 14), (59.96, 9)),
    ),
    ReferencePhase(
        "Hydroxyapatite", "Ca5(PO4)3(OH)", "COD-9010051",
        (
            (25.87, 40), (31.77, 100), (32.19, 60), (32.90, 60),
            (34.04, 25), (39.81, 20), (46.71, 30), (49.46, 35),
        ),
    ),
    ReferencePhase(
        "Zinc Oxide", "ZnO", "COD-9008877",
        ((31.77, 57), (34.42, 44), (36.25, 100), (47.54, 23), (56.60, 32), (62.86, 29), (67.96, 23)),
    ),
    ReferencePhase(
        "Silver", "Ag", "COD-9008459",
        ((38.12, 100), (44.28, 40), (64.43, 25), (77.47, 26)),
    ),
    ReferencePhase(
        "Copper", "Cu", "COD-9008468",
        ((43.30, 100), (50.43, 46), (74.13, 20), (89.93, 17)),
    ),
    ReferencePhase(
        "Aluminium", "Al", "COD-9008460",
        ((38.47, 100), (44.74, 47), (65.13, 22), (78.23, 24)),
    ),
    ReferencePhase(
        "Iron (alpha)", "Fe", "COD-9008536",
        ((44.67, 100), (65.02, 20), (82.33, 30)),
    ),
    ReferencePhase(
        "Rutile", "TiO2", "COD-9004141",
        ((27.45, 100), (36.09, 50), (41.23, 25), (54.32, 60), (56.64, 20)),
    ),
    ReferencePhase(
        "Anatase", "TiO2", "COD-9008213",
        ((25.28, 100), (37.80, 20), (48.05, 35), (53.89, 20), (55.06, 20), (62.69, 14)),
    ),
    ReferencePhase(
        "Halite", "NaCl", "COD-9008678",
        ((27.37, 13), (31.70, 100), (45.45, 55), (56.48, 15), (66.23, 6), (75.30, 11)),
    ),
    ReferencePhase(
        "Corundum", "Al2O3", "COD-1000032",
        ((25.58, 45), (35.15, 100), (37.78, 21), (43.36, 66), (52.55, 34), (57.50, 89)),
    ),
    ReferencePhase(
        "Magnetite", "Fe3O4", "COD-9002318",
        ((30.10, 30), (35.42, 100), (43.05, 20), (53.39, 10), (56.94, 30), (62.52, 40)),
    ),
    ReferencePhase(
        "Calcite", "CaCO3", "COD-9000965",
        ((23.06, 8), (29.41, 100), (35.97, 14), (39.40, 18), (43.16, 18), (47.49, 17), (48.51, 17)),
    ),
)


def find_reference_phase(name: str, database=REFERENCE_PHASES) -> ReferencePhase:
    for phase in database:
        if phase.name == name:
            return phase
    raise KeyError(f"find_reference_phase: unknown reference phase '{name}'")
