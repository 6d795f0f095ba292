"""Covenant lookup and evaluation"""

from collections import defaultdict
from typing import Dict, Iterable, List

from loanbook.domain.models import Covenant, Loan


def normalize_state(state: str | None) -> str | None:
    if state is None:
        return None
    state = state.strip().upper()
    return state or None


def is_violated(covenant: Covenant, loan: Loan) -> bool:
    """
    Check a single covenant against a loan.

    A covenant is violated when:
    - it bans a state and the loan originates there
    - it sets a nonzero max default rate and the loan's default rate is above it

    A covenant with neither restriction never fails.
    """
    banned = normalize_state(covenant.banned_state)
    if banned is not None and normalize_state(loan.state) == banned:
        return True

    if covenant.max_default_rate and loan.default_rate > covenant.max_default_rate:
        return True

    return False


class CovenantIndex:
    """Covenants grouped by facility and by bank"""

    def __init__(self, covenants: Iterable[Covenant] = ()):
        self._by_facility: Dict[int, List[Covenant]] = defaultdict(list)
        self._by_bank: Dict[int, List[Covenant]] = defaultdict(list)
        for covenant in covenants:
            self.add(covenant)

    def add(self, covenant: Covenant) -> None:
        if covenant.bank_wide:
            self._by_bank[covenant.bank_id].append(covenant)
        else:
            self._by_facility[covenant.facility_id].append(covenant)

    def applicable(self, facility_id: int, bank_id: int) -> List[Covenant]:
        """Facility-specific covenants followed by bank-wide ones"""
        return self._by_facility.get(facility_id, []) + self._by_bank.get(bank_id, [])

    def violations(self, loan: Loan, facility_id: int, bank_id: int) -> List[Covenant]:
        # Evaluates every applicable covenant; no early exit
        return [c for c in self.applicable(facility_id, bank_id) if is_violated(c, loan)]

    def is_eligible(self, loan: Loan, facility_id: int, bank_id: int) -> bool:
        return not self.violations(loan, facility_id, bank_id)

    def __len__(self) -> int:
        return sum(len(v) for v in self._by_facility.values()) + sum(
            len(v) for v in self._by_bank.values()
        )
