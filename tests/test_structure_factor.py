import numpy as np
import pytest

from crystalkit.diffraction.structure_factor import (
    Atom,
    Lattice,
    MagneticAtom,
    calculate_magnetic_diffraction,
    calculate_neutron_diffraction,
    calculate_xray_diffraction,
)
from crystalkit.diffraction.tables import (
    atomic_number,
    magnetic_form_factor,
    neutron_scattering_length,
)

DIAMOND_SITES = [
    (0, 0, 0), (0, 0.5, 0.5), (0.5, 0, 0.5), (0.5, 0.5, 0),
    (0.25, 0.25, 0.25), (0.25, 0.75, 0.75), (0.75, 0.25, 0.75), (0.75, 0.75, 0.25),
]


def _by_hkl(reflections):
    return {r.hkl: r for r in reflections}


def test_xray_silicon_diamond():
    atoms = [Atom("Si", *xyz) for xyz in DIAMOND_SITES]
    refl = calculate_xray_diffraction(1.5406, Lattice(a=5.431), atoms)
    hkls = {r.hkl for r in refl}

    assert refl[0].hkl == (1, 1, 1)
    assert np.isclose(refl[0].two_theta, 28.44, atol=0.02)
    assert (2, 0, 0) not in hkls
    assert (2, 2, 2) not in hkls
    assert (2, 2, 0) in hkls
    assert np.isclose(max(r.intensity for r in refl), 100.0)
    two_thetas = [r.two_theta for r in refl]
    assert two_thetas == sorted(two_thetas)
    assert max(two_thetas) <= 100.0


def test_neutron_bcc_iron_absences():
    atoms = [Atom("Fe", 0, 0, 0, scattering_length=9.45), Atom("Fe", 0.5, 0.5, 0.5, scattering_length=9.45)]
    refl = _by_hkl(calculate_neutron_diffraction(1.54, Lattice(a=2.866), atoms))

    assert (1, 0, 0) not in refl
    assert (1, 1, 1) not in refl
    assert (1, 1, 0) in refl
    assert np.isclose(max(r.intensity for r in refl.values()), 100.0)


def test_neutron_requires_scattering_length():
    with pytest.raises(ValueError):
        calculate_neutron_diffraction(1.54, Lattice(a=2.866), [Atom("Fe", 0, 0, 0)])


def test_engines_empty_on_invalid_setup():
    atoms = [Atom("Fe", 0, 0, 0, scattering_length=9.45)]
    assert calculate_neutron_diffraction(1.54, Lattice(a=2.866), []) == []
    assert calculate_neutron_diffraction(0.0, Lattice(a=2.866), atoms) == []
    assert calculate_xray_diffraction(1.54, Lattice(a=-1.0), atoms) == []


def test_debye_waller_lowers_high_angle_lines():
    cold = [Atom("Fe", 0, 0, 0, scattering_length=9.45)]
    warm = [Atom("Fe", 0, 0, 0, b_iso=2.0, scattering_length=9.45)]
    lat = Lattice(a=2.866)
    r_cold = calculate_neutron_diffraction(1.54, lat, cold)
    r_warm = calculate_neutron_diffraction(1.54, lat, warm)

    assert r_warm[-1].f_squared < r_cold[-1].f_squared
    s = np.sin(np.radians(r_warm[0].two_theta / 2)) / 1.54
    assert np.isclose(r_warm[0].f_squared / r_cold[0].f_squared, np.exp(-2 * 2.0 * s**2))


def test_magnetic_antiferromagnet():
    atoms = [
        MagneticAtom("Mn", 0, 0, 0, scattering_length=-3.73, mz=4.0),
        MagneticAtom("Mn", 0.5, 0.5, 0.5, scattering_length=-3.73, mz=-4.0),
    ]
    refl = _by_hkl(calculate_magnetic_diffraction(2.4, Lattice(a=4.0), atoms))

    assert np.isclose(refl[(1, 0, 0)].nuclear_intensity, 0.0, atol=1e-9)
    assert refl[(1, 0, 0)].magnetic_intensity > 0
    assert np.isclose(refl[(1, 1, 0)].magnetic_intensity, 0.0, atol=1e-9)
    assert refl[(1, 1, 0)].nuclear_intensity > 0
    # moment parallel to Q and no nuclear term
    assert (0, 0, 1) not in refl
    for r in refl.values():
        assert np.isclose(r.total_intensity, r.nuclear_intensity + r.magnetic_intensity)
    assert np.isclose(max(r.intensity for r in refl.values()), 100.0)


def test_magnetic_only_perpendicular_component_scatters():
    atoms = [MagneticAtom("Fe", 0, 0, 0, scattering_length=9.45, mz=2.2, ion="Fe3+")]
    refl = _by_hkl(calculate_magnetic_diffraction(2.4, Lattice(a=2.87), atoms))

    assert np.isclose(refl[(0, 0, 1)].magnetic_intensity, 0.0, atol=1e-9)
    assert refl[(1, 0, 0)].magnetic_intensity > 0


def test_tables():
    assert neutron_scattering_length("Fe") == 9.45
    with pytest.raises(KeyError):
        neutron_scattering_length("Xx")
    assert atomic_number("Si") == 14
    assert atomic_number("Xx") == 10
    assert np.isclose(magnetic_form_factor(None, 0.2), np.exp(-4 * 0.04))
    assert np.isclose(magnetic_form_factor("Fe3+", 0.0), 1.0, atol=0.01)
    assert magnetic_form_factor("Fe3+", 0.5) < magnetic_form_factor("Fe3+", 0.1)


def _engine_runs():
    lat = Lattice(a=2.866)
    fe = [
        Atom("Fe", 0, 0, 0, b_iso=0.4, scattering_length=9.45),
        Atom("Fe", 0.5, 0.5, 0.5, b_iso=0.4, scattering_length=9.45),
    ]
    mn = [
        MagneticAtom("Mn", 0, 0, 0, scattering_length=-3.73, mx=1.0, mz=4.0, ion="Mn2+"),
        MagneticAtom("Mn", 0.5, 0.5, 0.5, scattering_length=-3.73, mx=-1.0, mz=-4.0, ion="Mn2+"),
    ]
    return [
        (calculate_neutron_diffraction, (1.54, lat, fe)),
        (calculate_xray_diffraction, (1.5406, lat, fe)),
        (calculate_magnetic_diffraction, (2.4, Lattice(a=4.0), mn)),
    ]


def test_engines_normalised_and_ordered():
    for engine, args in _engine_runs():
        refl = engine(*args)
        assert refl
        assert all(0 <= r.intensity <= 100 for r in refl)
        assert np.isclose(max(r.intensity for r in refl), 100.0)
        two_thetas = [r.two_theta for r in refl]
        assert all(a <= b for a, b in zip(two_thetas, two_thetas[1:]))


def test_engines_are_repeatable():
    for engine, args in _engine_runs():
        assert engine(*args) == engine(*args)
