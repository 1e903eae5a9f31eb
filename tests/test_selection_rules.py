from crystalkit.analysis.selection_rules import (
    RuleStatus,
    parse_hkl_string,
    validate_hkl_list,
    validate_selection_rule,
)


def _allowed(system, hkl):
    return validate_selection_rule(system, hkl).allowed


def test_fcc_unmixed_parity():
    assert _allowed("FCC", (1, 1, 1))
    assert _allowed("FCC", (2, 0, 0))
    assert _allowed("FCC", (-1, 1, 1))
    assert not _allowed("FCC", (1, 0, 0))
    assert not _allowed("FCC", (2, 1, 0))


def test_bcc_even_sum():
    assert _allowed("BCC", (1, 1, 0))
    assert _allowed("Tetragonal-I", (2, 0, 0))
    assert not _allowed("BCC", (1, 0, 0))
    assert not _allowed("BCC", (1, 1, 1))


def test_diamond_rules():
    assert _allowed("Diamond", (1, 1, 1))
    assert _allowed("Diamond", (2, 2, 0))
    assert _allowed("Diamond", (4, 0, 0))
    assert not _allowed("Diamond", (2, 0, 0))
    assert not _allowed("Diamond", (2, 2, 2))
    assert not _allowed("Diamond", (1, 1, 0))


def test_hexagonal_and_c_centred():
    assert not _allowed("Hexagonal", (0, 0, 1))
    assert _allowed("Hexagonal", (0, 0, 2))
    assert _allowed("Hexagonal", (1, 0, 0))
    assert not _allowed("Orthorhombic-C", (1, 0, 0))
    assert _allowed("Orthorhombic-C", (1, 1, 0))


def test_primitive_and_unknown_system():
    assert _allowed("SC", (1, 0, 0))
    res = validate_selection_rule("Triclinic", (1, 0, 0))
    assert res.status is RuleStatus.ALLOWED
    assert "not implemented" in res.reason


def test_parse_hkl_string_groups_triples():
    assert parse_hkl_string("(1 1 1), 2 0 0; 2 2") == [(1, 1, 1), (2, 0, 0)]
    assert parse_hkl_string("-1 0 2") == [(-1, 0, 2)]
    assert parse_hkl_string("no indices") == []


def test_validate_hkl_list():
    results = validate_hkl_list("FCC", "1 0 0\n1 1 1")
    assert [r.status for r in results] == [RuleStatus.FORBIDDEN, RuleStatus.ALLOWED]
    assert results[1].hkl == (1, 1, 1)
