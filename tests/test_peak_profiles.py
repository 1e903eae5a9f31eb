import numpy as np
import pytest

from crystalkit.utils.peak_profiles import (
    ProfileShape,
    gaussian,
    lorentzian,
    simulate_peak,
)
from crystalkit.utils.spectrum_math import gaussian_sigma, lorentzian_gamma


def test_widths_give_half_maximum_at_fwhm():
    fwhm = 0.5
    g = gaussian(30.25, 100, 30.0, gaussian_sigma(fwhm))
    l = lorentzian(30.25, 100, 30.0, lorentzian_gamma(fwhm))
    assert np.isclose(g, 50.0)
    assert np.isclose(l, 50.0)


def test_gaussian_shape_factor():
    sim = simulate_peak("Gaussian", 30.0, 0.5, 0.0, 100.0, (28.0, 32.0), steps=200)

    assert len(sim.points) == 201
    assert np.isclose(sim.x[0], 28.0)
    assert np.isclose(sim.x[-1], 32.0)
    assert np.isclose(sim.y.max(), 100.0)
    assert np.isclose(sim.stats.shape_factor, 0.9394, atol=1e-4)


def test_lorentzian_shape_factor():
    sim = simulate_peak(ProfileShape.LORENTZIAN, 30.0, 0.5, 0.0, 100.0, (28.0, 32.0))
    assert np.isclose(sim.stats.shape_factor, 2 / np.pi)
    assert np.isclose(sim.stats.area, 100.0 * np.pi * 0.25)


def test_pseudo_voigt_is_weighted_mixture():
    eta = 0.3
    pv = simulate_peak("Pseudo-Voigt", 30.0, 0.5, eta, 10.0, (29.0, 31.0), steps=50)
    g = simulate_peak("Gaussian", 30.0, 0.5, eta, 10.0, (29.0, 31.0), steps=50)
    l = simulate_peak("Lorentzian", 30.0, 0.5, eta, 10.0, (29.0, 31.0), steps=50)

    assert np.allclose(pv.y, (1 - eta) * g.y + eta * l.y)
    assert np.isclose(pv.stats.area, (1 - eta) * g.stats.area + eta * l.stats.area)
    assert g.stats.shape_factor > pv.stats.shape_factor > l.stats.shape_factor


def test_simulate_peak_rejects_bad_input():
    with pytest.raises(ValueError):
        simulate_peak("Gaussian", 30.0, 0.0, 0.5, 100.0, (28.0, 32.0))
    with pytest.raises(ValueError):
        simulate_peak("Gaussian", 30.0, 0.5, 0.5, -1.0, (28.0, 32.0))
    with pytest.raises(ValueError):
        simulate_peak("Pseudo-Voigt", 30.0, 0.5, 1.5, 100.0, (28.0, 32.0))
    with pytest.raises(ValueError):
        simulate_peak("Gaussian", 30.0, 0.5, 0.5, 100.0, (28.0, 32.0), steps=0)
    with pytest.raises(ValueError):
        simulate_peak("Voigt", 30.0, 0.5, 0.5, 100.0, (28.0, 32.0))


def test_simulate_peak_is_repeatable():
    args = ("Pseudo-Voigt", 30.0, 0.5, 0.4, 100.0, (28.0, 32.0))
    assert simulate_peak(*args) == simulate_peak(*args)
