import numpy as np
import pytest

from crystalkit.analysis.phase_id import (
    ObservedPeak,
    identify_phases,
    parse_xy_data,
    score_phase,
)
from crystalkit.diffraction.phase_db import REFERENCE_PHASES, find_reference_phase


def _observed(pairs):
    return [ObservedPeak(t, i) for t, i in pairs]


def test_silicon_identified_first():
    silicon = find_reference_phase("Silicon")
    result = identify_phases(_observed(silicon.peaks))

    assert result.best.name == "Silicon"
    assert result.best.confidence_score > 90
    assert np.isclose(result.best.confidence_score, 99.9)
    assert len(result.best.matched_peaks) == len(silicon.peaks)
    scores = [c.confidence_score for c in result.candidates]
    assert scores == sorted(scores, reverse=True)
    assert all(s > 15 for s in scores)


def test_mixture_reports_both_phases():
    observed = _observed([(20.86, 40), (26.64, 100), (38.18, 50), (44.39, 25), (50.14, 15), (64.57, 20)])
    names = {c.name for c in identify_phases(observed).candidates}
    assert {"Gold", "Quartz"} <= names


def test_no_candidates_for_empty_or_unrelated_data():
    assert identify_phases([]).candidates == []
    assert identify_phases([]).best is None
    assert identify_phases(_observed([(5.0, 100), (6.0, 50)])).candidates == []


def test_position_weight_scales_linearly():
    silicon = find_reference_phase("Silicon")
    exact = score_phase(_observed([(28.44, 100)]), silicon)
    offset = score_phase(_observed([(28.69, 100)]), silicon)

    assert exact.confidence_score < 99.9
    assert np.isclose(exact.confidence_score, 2 * offset.confidence_score)


def test_unexplained_intensity_is_penalised():
    silicon = find_reference_phase("Silicon")
    clean = score_phase(_observed([(28.44, 100)]), silicon)
    dirty = score_phase(_observed([(28.44, 100), (5.0, 100)]), silicon)
    assert np.isclose(dirty.confidence_score, clean.confidence_score * (1 - 0.5 * 0.4))


def test_log_components_prints(capsys):
    score_phase(_observed([(28.44, 100)]), find_reference_phase("Silicon"), log_components=True)
    assert "Silicon:" in capsys.readouterr().out


def test_parse_xy_data_defaults_intensity():
    peaks = parse_xy_data("28.44, 100\n47.3\n200, 5\n\nfoo")
    assert peaks == [ObservedPeak(28.44, 100.0), ObservedPeak(47.3, 100.0)]


def test_reference_database():
    names = {ph.name for ph in REFERENCE_PHASES}
    assert {"Silicon", "Gold", "Quartz", "Hydroxyapatite", "Zinc Oxide"} <= names
    with pytest.raises(KeyError):
        find_reference_phase("Unobtainium")


def test_parse_xy_data_positional_fields():
    peaks = parse_xy_data("28.44°, 100\n47.30, abc\n56.12, 0\n  69.13  6")
    assert peaks == [
        ObservedPeak(28.44, 100.0),
        ObservedPeak(47.30, 100.0),
        ObservedPeak(56.12, 100.0),
        ObservedPeak(69.13, 6.0),
    ]
    assert parse_xy_data("abc, 28.44, 100") == []


def test_identify_phases_is_repeatable():
    observed = _observed(find_reference_phase("Quartz").peaks)
    assert identify_phases(observed) == identify_phases(observed)
