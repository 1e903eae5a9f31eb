from dataclasses import dataclass


@dataclass
class DiffractionConfig:
    wavelength: float = 1.5406  # Cu Kα, Å
    scherrer_k: float = 0.9
    instrument_fwhm: float = 0.1  # deg 2θ, quadratic subtraction (Scherrer / W-H)
    instrument_beta_ib: float = 0.1  # deg 2θ, linear subtraction (IB-Advanced)
    profile_steps: int = 200
    max_two_theta: float = 100.0  # upper bound of the (hkl) search, deg
    intensity_floor: float = 1e-4  # raw intensity below this is treated as numerical noise
    phase_tolerance: float = 0.5  # deg 2θ window for reference peak matching
    phase_min_confidence: float = 15.0
    default_atomic_number: int = 10  # X-ray Z for elements missing from the table
    magnetic_scattering_length: float = 2.696  # fm per Bohr magneton
    wa_d1: float = 2.35  # Au (111)
    wa_d2: float = 1.175  # Au (222)


CONFIG = DiffractionConfig()


STANDARD_WAVELENGTHS = {
    "Cu": 1.5406,
    "Mo": 0.7107,
    "Co": 1.7890,
    "Fe": 1.9360,
    "Cr": 2.2897,
    "Ag": 0.5594,
    "thermal": 1.54,  # neutron
    "cold": 3.96,  # neutron, Be filter
}
