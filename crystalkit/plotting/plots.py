"""
Reusable plotting utilities for profiles, calculated patterns and size–strain plots.
"""

from __future__ import annotations

from typing import Sequence

import matplotlib.pyplot as plt
import numpy as np

from crystalkit.analysis.size_strain import SizeStrainResult, WAResult
from crystalkit.diffraction.structure_factor import MagneticReflection, Reflection
from crystalkit.utils.peak_profiles import PeakSimulation


def plot_profile(
    simulation: PeakSimulation,
    title: str = "Line profile",
    show: bool = True,
):
    """
    Plot a simulated line profile with its FWHM marked.
    """
    stats = simulation.stats
    x, y = simulation.x, simulation.y
    center = float(x[np.argmax(y)])

    fig, ax = plt.subplots(figsize=(6, 4))
    ax.plot(x, y, linewidth=1.2, label="Profile")
    ax.hlines(
        stats.max_intensity / 2,
        center - stats.fwhm / 2,
        center + stats.fwhm / 2,
        colors="C3",
        linestyles="--",
        label=f"FWHM = {stats.fwhm:.3f}",
    )
    ax.set_xlabel("2θ, deg", fontsize=12)
    ax.set_ylabel("Intensity, a.u.", fontsize=12)
    ax.tick_params(axis="both", which="major", labelsize=10)
    if title:
        ax.set_title(f"{title} (φ = {stats.shape_factor:.4f})", fontsize=12)
    ax.legend(fontsize=10)
    fig.tight_layout()
    if show:
        plt.show()
    return fig, ax


def plot_stick_pattern(
    reflections: Sequence[Reflection] | Sequence[MagneticReflection],
    title: str = "Calculated pattern",
    label_top: int = 8,
    show: bool = True,
):
    """
    Stick pattern of normalised intensities with (hkl) labels on the strongest lines.

    Magnetic reflections are drawn as stacked nuclear + magnetic sticks.
    """
    fig, ax = plt.subplots(figsize=(8, 4))
    if not reflections:
        ax.text(0.5, 0.5, "No reflections", ha="center", va="center", transform=ax.transAxes)
    else:
        two_theta = np.array([r.two_theta for r in reflections])
        if isinstance(reflections[0], MagneticReflection):
            nuc = np.array([r.nuclear_intensity for r in reflections])
            mag = np.array([r.magnetic_intensity for r in reflections])
            ax.vlines(two_theta, 0, nuc, colors="C0", linewidth=2, label="Nuclear")
            ax.vlines(two_theta, nuc, nuc + mag, colors="C3", linewidth=2, label="Magnetic")
            ax.legend(fontsize=10)
            heights = nuc + mag
        else:
            heights = np.array([r.intensity for r in reflections])
            ax.vlines(two_theta, 0, heights, colors="C0", linewidth=2)

        for idx in np.argsort(heights)[::-1][:label_top]:
            h, k, l = reflections[idx].hkl
            ax.annotate(
                f"({h}{k}{l})",
                (two_theta[idx], heights[idx]),
                textcoords="offset points",
                xytext=(0, 4),
                ha="center",
                fontsize=8,
            )
        ax.set_ylim(0, 110)

    ax.set_xlabel("2θ, deg", fontsize=12)
    ax.set_ylabel("Relative intensity, %", fontsize=12)
    ax.tick_params(axis="both", which="major", labelsize=10)
    if title:
        ax.set_title(title, fontsize=12)
    fig.tight_layout()
    if show:
        plt.show()
    return fig, ax


def plot_williamson_hall(
    result: SizeStrainResult,
    title: str = "Williamson–Hall",
    show: bool = True,
):
    """
    β cosθ versus 4 sinθ with the fitted line.
    """
    reg = result.regression
    x = np.array([p.x for p in result.points])
    y = np.array([p.y for p in result.points])
    x_line = np.linspace(0, float(x.max()) * 1.05, 50)

    fig, ax = plt.subplots(figsize=(6, 4))
    ax.scatter(x, y, color="C0", zorder=3, label="Peaks")
    ax.plot(
        x_line,
        reg.slope * x_line + reg.intercept,
        color="C1",
        label=f"Fit (R² = {reg.r_squared:.3f})",
    )
    ax.set_xlabel("4 sinθ", fontsize=12)
    ax.set_ylabel("β cosθ, rad", fontsize=12)
    ax.tick_params(axis="both", which="major", labelsize=10)
    if title:
        ax.set_title(
            f"{title}: ε = {result.strain_percent:.3f} %, D = {result.size_intercept_nm:.1f} nm",
            fontsize=11,
        )
    ax.legend(fontsize=10)
    ax.grid(alpha=0.3)
    fig.tight_layout()
    if show:
        plt.show()
    return fig, ax


def plot_warren_averbach(
    result: WAResult,
    title: str = "Warren–Averbach",
    show: bool = True,
):
    """
    Size coefficients A_size(L) and rms strain versus Fourier length L.
    """
    fig, (ax_size, ax_strain) = plt.subplots(1, 2, figsize=(9, 4))
    ax_size.plot(
        [p.length_nm for p in result.size_distribution],
        [p.a_size for p in result.size_distribution],
        marker="o",
    )
    ax_size.set_xlabel("L, nm", fontsize=12)
    ax_size.set_ylabel("A_size(L)", fontsize=12)

    ax_strain.plot(
        [p.length_nm for p in result.strain_distribution],
        [p.rms_strain for p in result.strain_distribution],
        marker="s",
        color="C3",
    )
    ax_strain.set_xlabel("L, nm", fontsize=12)
    ax_strain.set_ylabel("<ε²>^½", fontsize=12)

    if title:
        fig.suptitle(title, fontsize=12)
    fig.tight_layout()
    if show:
        plt.show()
    return fig, (ax_size, ax_strain)
