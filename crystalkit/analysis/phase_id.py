"""
Heuristic phase identification against the built-in reference database.

The confidence is a similarity score tuned by hand (weights 10, /3, 1.2/0.8,
0.5/0.2, 0.4), not a probability.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

import numpy as np

from crystalkit.config import CONFIG
from crystalkit.diffraction.phase_db import REFERENCE_PHASES, ReferencePhase
from crystalkit.utils.parsing import is_valid_two_theta, parse_number, split_fields

MATCH_SCORE = 10.0
SCORE_NORM_PER_PEAK = 3.0
HIGH_COVERAGE, HIGH_COVERAGE_BOOST = 0.8, 1.2
LOW_COVERAGE, LOW_COVERAGE_DAMPING = 0.2, 0.5
IMPURITY_PENALTY = 0.4
MAX_CONFIDENCE = 99.9


@dataclass(frozen=True)
class ObservedPeak:
    two_theta: float
    intensity: float = 100.0


@dataclass(frozen=True)
class PhaseCandidate:
    name: str
    formula: str
    reference_id: str
    confidence_score: float
    matched_peaks: list[float] = field(default_factory=list)  # reference 2θ positions


@dataclass(frozen=True)
class PhaseIdResult:
    candidates: list[PhaseCandidate]
    module: str = "Phase-ID"

    @property
    def best(self) -> PhaseCandidate | None:
        return self.candidates[0] if self.candidates else None


def parse_xy_data(text: str) -> list[ObservedPeak]:
    """
    Observed peaks, one ``2θ, intensity`` pair per line.

    Fields are positional: a missing, unparsable or zero intensity becomes 100.
    Lines whose first field is not a position in (0, 180) are dropped.
    """
    peaks = []
    for line in text.splitlines():
        fields = split_fields(line)
        if not fields:
            continue
        two_theta = parse_number(fields[0])
        if two_theta is None or not is_valid_two_theta(two_theta):
            continue
        intensity = parse_number(fields[1]) if len(fields) > 1 else None
        peaks.append(ObservedPeak(two_theta=two_theta, intensity=intensity or 100.0))
    return peaks


def _impurity_ratio(obs_t: np.ndarray, obs_i: np.ndarray, ref_t: np.ndarray, tolerance: float) -> float:
    """Fraction of observed intensity with no reference line within tolerance."""
    total = float(obs_i.sum())
    if total <= 0 or ref_t.size == 0:
        return 0.0
    unexplained = np.array([np.min(np.abs(ref_t - t)) > tolerance for t in obs_t])
    return float(obs_i[unexplained].sum() / total)


def score_phase(
    observed: Sequence[ObservedPeak],
    phase: ReferencePhase,
    tolerance: float | None = None,
    log_components: bool = False,
) -> PhaseCandidate:
    """
    Confidence (0–99.9) that ``phase`` is present in the observed peak list.
    """
    tolerance = CONFIG.phase_tolerance if tolerance is None else tolerance
    n_ref = len(phase.peaks)
    matched: list[float] = []
    raw_score = 0.0

    obs_t = np.array([p.two_theta for p in observed], dtype=float)
    obs_i = np.array([p.intensity for p in observed], dtype=float)

    if obs_t.size and n_ref:
        for ref_t, ref_i in phase.peaks:
            delta = float(np.min(np.abs(obs_t - ref_t)))
            if delta <= tolerance:
                position_weight = 1 - delta / tolerance
                intensity_weight = np.log10(ref_i + 10) / 2
                raw_score += MATCH_SCORE * position_weight * intensity_weight
                matched.append(ref_t)

    coverage = len(matched) / n_ref if n_ref else 0.0
    confidence = raw_score / (n_ref * SCORE_NORM_PER_PEAK) * 100 if n_ref else 0.0
    if coverage > HIGH_COVERAGE:
        confidence *= HIGH_COVERAGE_BOOST
    elif coverage < LOW_COVERAGE:
        confidence *= LOW_COVERAGE_DAMPING

    ref_positions = np.array([t for t, _ in phase.peaks], dtype=float)
    impurity = _impurity_ratio(obs_t, obs_i, ref_positions, tolerance)
    confidence *= 1 - impurity * IMPURITY_PENALTY
    confidence = float(np.clip(confidence, 0.0, MAX_CONFIDENCE))

    if log_components:
        print(
            f"{phase.name}: raw={raw_score:.3f} matched={len(matched)}/{n_ref} "
            f"coverage={coverage:.2f} impurity={impurity:.2f} confidence={confidence:.1f}"
        )

    return PhaseCandidate(
        name=phase.name,
        formula=phase.formula,
        reference_id=phase.reference_id,
        confidence_score=confidence,
        matched_peaks=matched,
    )


def identify_phases(
    observed: Iterable[ObservedPeak],
    database: Iterable[ReferencePhase] = REFERENCE_PHASES,
    tolerance: float | None = None,
    min_confidence: float | None = None,
    log_components: bool = False,
) -> PhaseIdResult:
    """
    Score every reference phase and keep those above ``min_confidence``,
    best first.
    """
    min_confidence = CONFIG.phase_min_confidence if min_confidence is None else min_confidence
    observed = list(observed)
    scored = [score_phase(observed, ph, tolerance=tolerance, log_components=log_components) for ph in database]
    kept = [c for c in scored if c.confidence_score > min_confidence]
    kept.sort(key=lambda c: c.confidence_score, reverse=True)
    return PhaseIdResult(candidates=kept)
