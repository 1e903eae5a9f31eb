import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt

from crystalkit.analysis.size_strain import (
    ScherrerPeak,
    WAPoint,
    calculate_warren_averbach,
    calculate_williamson_hall,
)
from crystalkit.diffraction.structure_factor import (
    Atom,
    Lattice,
    MagneticAtom,
    calculate_magnetic_diffraction,
    calculate_xray_diffraction,
)
from crystalkit.outputting.report import save_fig
from crystalkit.plotting.plots import (
    plot_profile,
    plot_stick_pattern,
    plot_warren_averbach,
    plot_williamson_hall,
)
from crystalkit.utils.peak_profiles import simulate_peak


def test_plot_profile(tmp_path):
    sim = simulate_peak("Pseudo-Voigt", 30.0, 0.5, 0.5, 100.0, (28.0, 32.0))
    fig, ax = plot_profile(sim, show=False)

    assert ax.get_xlabel() == "2θ, deg"
    assert len(ax.lines) == 1

    path = tmp_path / "figs" / "profile.png"
    save_fig(fig, path)
    assert path.exists()


def test_plot_stick_pattern_xray_and_magnetic():
    atoms = [Atom("Fe", 0, 0, 0), Atom("Fe", 0.5, 0.5, 0.5)]
    refl = calculate_xray_diffraction(1.5406, Lattice(a=2.866), atoms)
    fig, ax = plot_stick_pattern(refl, show=False)
    assert ax.get_ylim()[1] == 110
    plt.close(fig)

    mag_atoms = [MagneticAtom("Fe", 0, 0, 0, scattering_length=9.45, mz=2.2)]
    mag = calculate_magnetic_diffraction(2.4, Lattice(a=2.87), mag_atoms)
    fig, ax = plot_stick_pattern(mag, show=False)
    assert ax.get_legend() is not None
    plt.close(fig)

    fig, ax = plot_stick_pattern([], show=False)
    assert len(ax.texts) == 1
    plt.close(fig)


def test_plot_williamson_hall():
    peaks = [ScherrerPeak(28.4, 0.3), ScherrerPeak(47.3, 0.35), ScherrerPeak(56.1, 0.4)]
    result = calculate_williamson_hall(1.5406, 0.9, 0.1, peaks)
    fig, ax = plot_williamson_hall(result, show=False)

    assert ax.get_xlabel() == "4 sinθ"
    assert len(ax.collections) == 1
    plt.close(fig)


def test_plot_warren_averbach():
    result = calculate_warren_averbach(2.35, 1.175, [WAPoint(1.0, 0.9, 0.8), WAPoint(2.0, 0.8, 0.6)])
    fig, (ax_size, ax_strain) = plot_warren_averbach(result, show=False)

    assert ax_size.get_xlabel() == "L, nm"
    assert len(ax_strain.lines) == 1
    plt.close(fig)
