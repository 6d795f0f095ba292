"""Expected yield calculation and per-facility accumulation"""

from decimal import Decimal
from typing import Dict, List

from loanbook.domain.models import Facility, FacilityYield, Loan
from loanbook.utils.money import round_minor_units


def expected_yield(loan: Loan, facility: Facility) -> Decimal:
    """
    Expected yield of funding a loan from a facility.

    (1 - default) * loan_rate * amount   interest earned if the loan survives
    - default * amount                   expected principal loss
    - facility_rate * amount             cost of the borrowed capital, always paid

    Exact in Decimal; may be negative for a single loan.

    Example:
        amount 500, loan rate 0.08, default 0.02, facility rate 0.05
        0.98 * 0.08 * 500 - 0.02 * 500 - 0.05 * 500 = 39.2 - 10 - 25 = 4.2
    """
    amount = Decimal(loan.amount)
    survival = Decimal(1) - loan.default_rate
    return (
        survival * loan.interest_rate * amount
        - loan.default_rate * amount
        - facility.interest_rate * amount
    )


class YieldAccumulator:
    """Running expected yield per facility, kept exact until reported"""

    def __init__(self, rounding: str = "half_up"):
        self.rounding = rounding
        self._totals: Dict[int, Decimal] = {}

    def add(self, facility_id: int, amount: Decimal) -> Decimal:
        total = self._totals.get(facility_id, Decimal(0)) + amount
        self._totals[facility_id] = total
        return total

    def total(self, facility_id: int) -> Decimal:
        return self._totals.get(facility_id, Decimal(0))

    def report(self) -> List[FacilityYield]:
        """Rounded totals for facilities that funded at least one loan, by facility id"""
        return [
            FacilityYield(facility_id=fid, expected_yield=round_minor_units(total, self.rounding))
            for fid, total in sorted(self._totals.items())
        ]

    def __contains__(self, facility_id: int) -> bool:
        return facility_id in self._totals
