"""
Reflection conditions (systematic absences) for a handful of lattice types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from crystalkit.utils.parsing import scan_integers

HKL = tuple[int, int, int]


class RuleStatus(str, Enum):
    ALLOWED = "Allowed"
    FORBIDDEN = "Forbidden"


@dataclass(frozen=True)
class SelectionRuleResult:
    hkl: HKL
    status: RuleStatus
    reason: str

    @property
    def allowed(self) -> bool:
        return self.status is RuleStatus.ALLOWED


# Label -> rule family. Labels not listed fall through to "not implemented".
_RULE_FAMILY = {
    "SC": "primitive",
    "Cubic": "primitive",
    "Cubic(P)": "primitive",
    "BCC": "body_centred",
    "Tetragonal-I": "body_centred",
    "FCC": "face_centred",
    "Orthorhombic-F": "face_centred",
    "Diamond": "diamond",
    "Orthorhombic-C": "c_centred",
    "Hexagonal": "hexagonal",
}

SUPPORTED_SYSTEMS = tuple(_RULE_FAMILY)


def _unmixed_parity(ah: int, ak: int, al: int) -> tuple[bool, bool]:
    all_even = ah % 2 == 0 and ak % 2 == 0 and al % 2 == 0
    all_odd = ah % 2 == 1 and ak % 2 == 1 and al % 2 == 1
    return all_even, all_odd


def validate_selection_rule(system: str, hkl: HKL) -> SelectionRuleResult:
    """
    Check whether (h k l) is allowed for the given lattice label.

    Conditions are evaluated on |h|, |k|, |l|. Unrecognised systems are reported
    as Allowed, flagged as having no implemented rules.
    """
    hkl = (int(hkl[0]), int(hkl[1]), int(hkl[2]))
    ah, ak, al = (abs(v) for v in hkl)
    total = ah + ak + al
    family = _RULE_FAMILY.get(system)

    def allowed(reason: str) -> SelectionRuleResult:
        return SelectionRuleResult(hkl, RuleStatus.ALLOWED, reason)

    def forbidden(reason: str) -> SelectionRuleResult:
        return SelectionRuleResult(hkl, RuleStatus.FORBIDDEN, reason)

    if family == "primitive":
        return allowed("Primitive lattice allows all reflections")

    if family == "body_centred":
        if total % 2 == 0:
            return allowed("Sum is even")
        return forbidden("Sum is odd (h+k+l must be even)")

    if family == "face_centred":
        all_even, all_odd = _unmixed_parity(ah, ak, al)
        if all_even or all_odd:
            return allowed("Unmixed parity")
        return forbidden("Mixed parity")

    if family == "diamond":
        all_even, all_odd = _unmixed_parity(ah, ak, al)
        if not (all_even or all_odd):
            return forbidden("Mixed parity")
        if all_odd:
            return allowed("All odd allowed")
        if total % 4 == 0:
            return allowed("All even & sum divisible by 4")
        return forbidden("All even but sum not divisible by 4")

    if family == "c_centred":
        if (ah + ak) % 2 == 0:
            return allowed("h+k is even")
        return forbidden("h+k is odd (C-centring requires h+k even)")

    if family == "hexagonal":
        if al % 2 == 1 and (ah + 2 * ak) % 3 == 0:
            return forbidden("l is odd and h+2k is divisible by 3")
        return allowed("Not an h+2k=3n, l odd reflection")

    return allowed(f"Selection rules for '{system}' not implemented")


def parse_hkl_string(text: str) -> list[HKL]:
    """
    Miller indices from free text, e.g. "1 0 0, 1 1 0; (1 1 1)".

    Every integer is collected in order and grouped into consecutive triples;
    a trailing incomplete triple is discarded.
    """
    ints = scan_integers(text)
    return [(ints[i], ints[i + 1], ints[i + 2]) for i in range(0, len(ints) - 2, 3)]


def validate_hkl_list(system: str, text: str) -> list[SelectionRuleResult]:
    """Parse a list of (h k l) and validate each against ``system``."""
    return [validate_selection_rule(system, hkl) for hkl in parse_hkl_string(text)]
