import argparse
import sys
from pathlib import Path

import pandas as pd

from crystalkit.analysis.phase_id import identify_phases, parse_xy_data
from crystalkit.analysis.rietveld_setup import (
    BackgroundModel,
    ProfileModel,
    RietveldPhase,
    generate_rietveld_setup,
)
from crystalkit.analysis.selection_rules import SUPPORTED_SYSTEMS, validate_hkl_list
from crystalkit.analysis.size_strain import (
    calculate_ib_advanced,
    calculate_integral_breadth_list,
    calculate_scherrer_list,
    calculate_warren_averbach,
    calculate_williamson_hall,
    mean_scherrer_size,
    parse_ib_advanced_input,
    parse_integral_breadth_input,
    parse_scherrer_input,
    parse_wa_input,
)
from crystalkit.config import CONFIG, STANDARD_WAVELENGTHS
from crystalkit.diffraction.structure_factor import (
    Lattice,
    calculate_magnetic_diffraction,
    calculate_neutron_diffraction,
    calculate_xray_diffraction,
)
from crystalkit.outputting.report import results_to_frame, save_fig, save_json, save_table
from crystalkit.plotting.plots import (
    plot_profile,
    plot_stick_pattern,
    plot_warren_averbach,
    plot_williamson_hall,
)
from crystalkit.reading.data_from import atoms_from_csv, peaks_from_csv
from crystalkit.utils.peak_profiles import ProfileShape, simulate_peak
from crystalkit.utils.xrd_geometry import calculate_bragg_list, parse_peak_string

MODULES = [
    "bragg",
    "profile",
    "rules",
    "scherrer",
    "wh",
    "ib",
    "ib-advanced",
    "wa",
    "neutron",
    "xray",
    "magnetic",
    "phase-id",
    "rietveld",
]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Powder diffraction toolkit: geometry, line profiles, size/strain, patterns and phase ID."
    )
    parser.add_argument("module", help="Calculation to run", type=str, choices=MODULES)
    parser.add_argument("-i", "--input", help="Inline input text (peaks, hkl list, Fourier coefficients)", type=str)
    parser.add_argument(
        "-f",
        "--file",
        help="Read input from a file (phase-id expects a 2θ,intensity CSV)",
        type=str,
    )
    parser.add_argument("-w", "--wavelength", help="Wavelength, Å", type=float, default=None)
    parser.add_argument(
        "--anode",
        help="Named wavelength used when -w is not given",
        type=str,
        choices=sorted(STANDARD_WAVELENGTHS),
        default=None,
    )
    parser.add_argument("-k", help="Scherrer shape constant", type=float, default=CONFIG.scherrer_k)
    parser.add_argument(
        "--inst-fwhm",
        help="Instrumental broadening, deg 2θ (quadratic for Scherrer/W-H, linear for ib-advanced)",
        type=float,
        default=None,
    )
    parser.add_argument("--system", help="Lattice label for selection rules", type=str, default="FCC")

    # Structure-factor engines
    parser.add_argument("-a", "--lattice-a", help="Cubic lattice parameter a, Å", type=float, default=None)
    parser.add_argument("--atoms", help="CSV with unit-cell sites", type=str, default=None)
    parser.add_argument("--max-two-theta", help="Upper 2θ bound of the pattern, deg", type=float, default=None)

    # Line profile
    parser.add_argument("--shape", type=str, choices=[s.value for s in ProfileShape], default="Gaussian")
    parser.add_argument("--center", type=float, default=30.0)
    parser.add_argument("--fwhm", type=float, default=0.5)
    parser.add_argument("--eta", help="Lorentzian fraction of the Pseudo-Voigt", type=float, default=0.5)
    parser.add_argument("--amplitude", type=float, default=100.0)
    parser.add_argument("--range", help="2θ window (start end)", type=float, nargs=2, default=None)

    # Warren–Averbach
    parser.add_argument("--d1", help="d of the first order, Å", type=float, default=CONFIG.wa_d1)
    parser.add_argument("--d2", help="d of the second order, Å", type=float, default=CONFIG.wa_d2)

    # Rietveld setup
    parser.add_argument(
        "--phase",
        help="Phase as NAME:SYSTEM:a[:b:c:alpha:beta:gamma]; repeatable",
        action="append",
        default=[],
    )
    parser.add_argument("--max-intensity", help="Largest observed intensity", type=float, default=None)
    parser.add_argument(
        "--background", type=str, choices=[m.value for m in BackgroundModel], default=BackgroundModel.CHEBYSHEV_6.value
    )
    parser.add_argument(
        "--profile-shape", type=str, choices=[m.value for m in ProfileModel], default=ProfileModel.TCH.value
    )

    # Output
    parser.add_argument("--out", help="Directory for CSV/JSON/PNG output", type=str, default=None)
    parser.add_argument("--plot", help="Draw the result where a plot exists", action="store_true")
    parser.add_argument("-v", "--verbose", help="Print score components for phase-id", action="store_true")
    return parser.parse_args(argv)


def resolve_wavelength(args: argparse.Namespace) -> float:
    if args.wavelength is not None:
        return args.wavelength
    if args.anode is not None:
        return STANDARD_WAVELENGTHS[args.anode]
    return CONFIG.wavelength


def read_input(args: argparse.Namespace) -> str:
    if args.input is not None:
        return args.input
    if args.file is not None:
        path = Path(args.file)
        if not path.is_file():
            raise FileNotFoundError(f"read_input: file not found: {args.file}")
        return path.read_text(encoding="utf-8")
    return ""


def parse_phase_arg(text: str) -> RietveldPhase:
    parts = [p.strip() for p in text.split(":")]
    if len(parts) < 3:
        raise ValueError(f"parse_phase_arg: expected NAME:SYSTEM:a[...], got '{text}'")
    name, system = parts[0], parts[1]
    values = [float(v) if v else None for v in parts[2:8]]
    values += [None] * (6 - len(values))
    return RietveldPhase(name, system, *values)


def emit(df: pd.DataFrame, out_dir: Path | None, name: str) -> None:
    if df.empty:
        print(f"[WARN] {name}: no results.", file=sys.stderr)
        return
    print(df.to_string(index=False))
    if out_dir is not None:
        save_table(df, out_dir / f"{name}.csv")


def finish_plot(fig, out_dir: Path | None, name: str) -> None:
    if out_dir is not None:
        save_fig(fig, out_dir / f"{name}.png")


def run_module(args: argparse.Namespace) -> int:
    out_dir = Path(args.out) if args.out else None
    show = args.plot and out_dir is None
    wavelength = resolve_wavelength(args)
    module = args.module

    if module == "bragg":
        results = calculate_bragg_list(wavelength, parse_peak_string(read_input(args)))
        emit(results_to_frame(results), out_dir, module)

    elif module == "profile":
        value_range = tuple(args.range) if args.range else (args.center - 5 * args.fwhm, args.center + 5 * args.fwhm)
        sim = simulate_peak(
            args.shape, args.center, args.fwhm, args.eta, args.amplitude, value_range, steps=CONFIG.profile_steps
        )
        print(results_to_frame([sim.stats]).to_string(index=False))
        if out_dir is not None:
            save_table(results_to_frame(sim.points), out_dir / "profile.csv")
        if args.plot:
            fig, _ = plot_profile(sim, title=args.shape, show=show)
            finish_plot(fig, out_dir, module)

    elif module == "rules":
        emit(results_to_frame(validate_hkl_list(args.system, read_input(args))), out_dir, module)
        if args.system not in SUPPORTED_SYSTEMS:
            print(f"[WARN] No selection rules for '{args.system}'; every reflection reported allowed.", file=sys.stderr)

    elif module == "scherrer":
        inst = CONFIG.instrument_fwhm if args.inst_fwhm is None else args.inst_fwhm
        results = calculate_scherrer_list(wavelength, args.k, inst, parse_scherrer_input(read_input(args)))
        emit(results_to_frame(results), out_dir, module)
        if results:
            print(f"Mean crystallite size: {mean_scherrer_size(results):.2f} nm")

    elif module in ("wh", "ib-advanced"):
        text = read_input(args)
        if module == "wh":
            inst = CONFIG.instrument_fwhm if args.inst_fwhm is None else args.inst_fwhm
            result = calculate_williamson_hall(wavelength, args.k, inst, parse_scherrer_input(text))
        else:
            inst = CONFIG.instrument_beta_ib if args.inst_fwhm is None else args.inst_fwhm
            result = calculate_ib_advanced(wavelength, args.k, inst, parse_ib_advanced_input(text))
        if result is None:
            print(f"[WARN] {module}: need at least two usable peaks at distinct angles.", file=sys.stderr)
            return 0
        emit(results_to_frame(result.points), out_dir, module)
        print(
            f"Strain: {result.strain_percent:.4f} %  Size: {result.size_intercept_nm:.2f} nm  "
            f"R²: {result.regression.r_squared:.4f}"
        )
        if args.plot:
            fig, _ = plot_williamson_hall(result, show=show)
            finish_plot(fig, out_dir, module)

    elif module == "ib":
        results = calculate_integral_breadth_list(wavelength, args.k, parse_integral_breadth_input(read_input(args)))
        emit(results_to_frame(results), out_dir, module)

    elif module == "wa":
        result = calculate_warren_averbach(args.d1, args.d2, parse_wa_input(read_input(args)))
        emit(results_to_frame(result.size_distribution), out_dir, "wa_size")
        emit(results_to_frame(result.strain_distribution), out_dir, "wa_strain")
        if args.plot and result.size_distribution:
            fig, _ = plot_warren_averbach(result, show=show)
            finish_plot(fig, out_dir, module)

    elif module in ("neutron", "xray", "magnetic"):
        if args.atoms is None or args.lattice_a is None:
            print(f"[ERROR] {module}: --atoms and --lattice-a are required.", file=sys.stderr)
            return 2
        atoms = atoms_from_csv(args.atoms, magnetic=module == "magnetic", lookup_b=module != "xray")
        lattice = Lattice(a=args.lattice_a)
        engine = {
            "neutron": calculate_neutron_diffraction,
            "xray": calculate_xray_diffraction,
            "magnetic": calculate_magnetic_diffraction,
        }[module]
        reflections = engine(wavelength, lattice, atoms, max_two_theta=args.max_two_theta)
        emit(results_to_frame(reflections), out_dir, module)
        if args.plot and reflections:
            fig, _ = plot_stick_pattern(reflections, title=f"{module} pattern, λ = {wavelength} Å", show=show)
            finish_plot(fig, out_dir, module)

    elif module == "phase-id":
        if args.file is not None:
            observed = peaks_from_csv(args.file)
        else:
            observed = parse_xy_data(read_input(args))
        result = identify_phases(observed, log_components=args.verbose)
        emit(results_to_frame(result.candidates), out_dir, module)

    elif module == "rietveld":
        phases = [parse_phase_arg(p) for p in args.phase]
        if not phases:
            print("[ERROR] rietveld: at least one --phase is required.", file=sys.stderr)
            return 2
        max_obs = args.max_intensity
        if max_obs is None:
            text = read_input(args)
            observed = parse_xy_data(text) if text else []
            max_obs = max((p.intensity for p in observed), default=0.0)
        setup = generate_rietveld_setup(
            phases,
            max_obs,
            background_model=args.background,
            profile_shape=args.profile_shape,
            wavelength=wavelength,
        )
        print(setup.to_json())
        if out_dir is not None:
            save_json(setup.to_dict(), out_dir / "rietveld_setup.json")

    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        return run_module(args)
    except (FileNotFoundError, KeyError, ValueError) as exc:
        print(f"[ERROR] {args.module}: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
