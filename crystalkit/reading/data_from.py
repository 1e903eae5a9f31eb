import os

import pandas as pd

from crystalkit.diffraction.structure_factor import Atom, MagneticAtom
from crystalkit.diffraction.tables import neutron_scattering_length
from crystalkit.analysis.phase_id import ObservedPeak
from crystalkit.utils.parsing import is_valid_two_theta

ATOM_COLUMNS = ["element", "x", "y", "z"]
MOMENT_COLUMNS = ["mx", "my", "mz"]


def _optional(row: pd.Series, name: str, cast=float):
    if name not in row or pd.isna(row[name]):
        return None
    return cast(row[name])


def _scattering_length(row: pd.Series, lookup_b: bool):
    b = _optional(row, "b")
    if b is None and lookup_b:
        return neutron_scattering_length(str(row["element"]).strip())
    return b


def atoms_from_csv(
    file_path: str,
    sep: str = ",",
    magnetic: bool = False,
    lookup_b: bool = False,
) -> list[Atom]:
    """
    Load unit-cell sites from a CSV with a header row.

    Required columns: element, x, y, z (plus mx, my, mz when ``magnetic``).
    Optional columns:
        b_iso : isotropic B (Å²), 0 if absent
        b     : neutron scattering length (fm)
        Z     : atomic number override for X-ray
        ion   : magnetic form-factor key, e.g. 'Mn2+'

    With ``lookup_b`` a missing b is taken from the neutron scattering table.
    """
    if not os.path.isfile(file_path):
        raise FileNotFoundError(f"atoms_from_csv: file not found: {file_path}")

    df = pd.read_csv(file_path, sep=sep, skipinitialspace=True)
    df.columns = [str(c).strip() for c in df.columns]

    required = ATOM_COLUMNS + (MOMENT_COLUMNS if magnetic else [])
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise KeyError(f"atoms_from_csv: missing columns {missing} in {file_path}")

    atoms: list[Atom] = []
    for _, row in df.iterrows():
        common = dict(
            element=str(row["element"]).strip(),
            x=float(row["x"]),
            y=float(row["y"]),
            z=float(row["z"]),
            b_iso=_optional(row, "b_iso") or 0.0,
            scattering_length=_scattering_length(row, lookup_b),
            atomic_number=_optional(row, "Z", cast=int),
        )
        if magnetic:
            ion = _optional(row, "ion", cast=str)
            atoms.append(
                MagneticAtom(
                    **common,
                    mx=float(row["mx"]),
                    my=float(row["my"]),
                    mz=float(row["mz"]),
                    ion=ion.strip() if ion else None,
                )
            )
        else:
            atoms.append(Atom(**common))
    return atoms


def peaks_from_csv(
    file_path: str,
    sep: str = ",",
    has_header: bool = False,
    theta_col: int | str = 0,
    int_col: int | str = 1,
) -> list[ObservedPeak]:
    """
    Load an observed peak list (2θ, intensity) from CSV.

    Default format (no header):
        col0: two_theta (degrees)
        col1: intensity (arb. units)

    Rows with non-numeric values or 2θ outside (0, 180) are dropped.
    """
    if not os.path.isfile(file_path):
        raise FileNotFoundError(f"peaks_from_csv: file not found: {file_path}")

    header = 0 if has_header else None
    df = pd.read_csv(file_path, sep=sep, header=header)

    try:
        df = df[[theta_col, int_col]].copy()
    except KeyError as exc:
        raise KeyError(
            f"peaks_from_csv: cannot find columns '{theta_col}'/'{int_col}' in {file_path}"
        ) from exc

    df.columns = ["two_theta", "intensity"]
    df = df.apply(pd.to_numeric, errors="coerce").dropna()

    return [
        ObservedPeak(two_theta=float(t), intensity=float(i))
        for t, i in zip(df["two_theta"], df["intensity"])
        if is_valid_two_theta(float(t))
    ]
