import numpy as np

from crystalkit.utils.xrd_geometry import (
    bragg_2theta_from_d,
    calculate_bragg,
    calculate_bragg_list,
    cubic_d_spacing,
    parse_peak_string,
)


def test_bragg_silicon_111():
    res = calculate_bragg(1.5406, 28.44)

    assert res is not None
    assert np.isclose(res.d_spacing, 3.1358, atol=1e-3)
    assert np.isclose(res.q_vector, 2.0037, atol=1e-3)
    assert np.isclose(res.q_vector, 2 * np.pi / res.d_spacing)
    assert np.isclose(res.sin_theta_over_lambda, 1 / (2 * res.d_spacing))


def test_bragg_roundtrip():
    for center_deg in (12.5, 30.0, 75.0, 150.0):
        res = calculate_bragg(1.5406, center_deg)
        two_theta_back = bragg_2theta_from_d(res.d_spacing, 1.5406)
        assert np.isclose(two_theta_back, center_deg, atol=1e-6)


def test_bragg_invalid_inputs():
    assert calculate_bragg(0.0, 30.0) is None
    assert calculate_bragg(-1.0, 30.0) is None
    assert calculate_bragg(1.5406, 0.0) is None
    assert calculate_bragg(1.5406, 180.0) is None
    assert bragg_2theta_from_d(0.5, 1.5406) is None


def test_bragg_list_skips_invalid():
    results = calculate_bragg_list(1.5406, [28.44, 0.0, 47.30])
    assert [r.two_theta for r in results] == [28.44, 47.30]


def test_parse_peak_string_sorts_and_filters():
    peaks = parse_peak_string("40.1, 28.4 abc 200 -5\n 47.3")
    assert peaks == [28.4, 40.1, 47.3]
    assert parse_peak_string("") == []


def test_cubic_d_spacing():
    assert np.isclose(cubic_d_spacing(4.0, (1, 1, 0)), 4.0 / np.sqrt(2))
    assert np.isclose(cubic_d_spacing(5.431, (1, 1, 1)), 3.1356, atol=1e-4)


def test_parse_peak_string_reads_leading_numbers():
    assert parse_peak_string("28.44°, 47.30°") == [28.44, 47.30]
    assert parse_peak_string("1_0") == [1.0]
    assert parse_peak_string(".5e1 deg, 3.") == [3.0, 5.0]


def test_bragg_is_repeatable():
    assert calculate_bragg(1.5406, 28.44) == calculate_bragg(1.5406, 28.44)
