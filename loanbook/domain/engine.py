"""Assignment engine - core allocation logic for loans and facilities"""

from typing import Iterable, List, Set

from loanbook.domain.covenants import CovenantIndex
from loanbook.domain.exceptions import DuplicateRecordError
from loanbook.domain.ledger import FacilityLedger
from loanbook.domain.models import (
    AllocationResult,
    Assignment,
    AssignmentOutcome,
    Covenant,
    Facility,
    Loan,
    UnassignedReason,
)
from loanbook.domain.yields import YieldAccumulator, expected_yield


class AssignmentEngine:
    """
    Places loans on facilities one at a time, in arrival order.

    Owns every piece of mutable run state: the ledger's remaining capacity, the
    yield totals and the assignment list. Build one engine per batch run.
    """

    def __init__(
        self,
        ledger: FacilityLedger,
        covenants: CovenantIndex,
        rounding: str = "half_up",
        reject_negative_yield: bool = False,
    ):
        self.ledger = ledger
        self.covenants = covenants
        self.yields = YieldAccumulator(rounding)
        self.reject_negative_yield = reject_negative_yield

        self.assignments: List[Assignment] = []
        self.unassigned: List[AssignmentOutcome] = []
        self._seen_loans: Set[int] = set()

    @classmethod
    def from_records(
        cls,
        facilities: Iterable[Facility],
        covenants: Iterable[Covenant],
        order: str = "cost_ascending",
        rounding: str = "half_up",
        reject_negative_yield: bool = False,
    ) -> "AssignmentEngine":
        return cls(
            FacilityLedger(facilities, order=order),
            CovenantIndex(covenants),
            rounding=rounding,
            reject_negative_yield=reject_negative_yield,
        )

    def assign(self, loan: Loan) -> AssignmentOutcome:
        """
        Offer a loan to each candidate facility, first fit wins.

        For each facility in ledger order:
        1. Skip if remaining capacity is below the loan amount
        2. Skip if any covenant on the facility or its bank is violated
        3. Optionally skip if the loan's yield on this facility is negative
        4. Otherwise reserve capacity, record the assignment and add the yield

        A loan no facility accepts gets an unassigned outcome; that is not an error.
        """
        if loan.id in self._seen_loans:
            raise DuplicateRecordError(f"Loan {loan.id} offered more than once")
        self._seen_loans.add(loan.id)

        had_capacity = False
        passed_covenants = False
        yield_rejected = False

        for facility in self.ledger.candidates():
            if facility.remaining_capacity < loan.amount:
                continue
            had_capacity = True

            if not self.covenants.is_eligible(loan, facility.id, facility.bank_id):
                continue
            passed_covenants = True

            loan_yield = expected_yield(loan, facility)
            if self.reject_negative_yield and loan_yield < 0:
                yield_rejected = True
                continue

            if not self.ledger.reserve(facility.id, loan.amount):
                continue

            self.assignments.append(Assignment(loan_id=loan.id, facility_id=facility.id))
            self.yields.add(facility.id, loan_yield)
            return AssignmentOutcome(loan_id=loan.id, facility_id=facility.id, loan_yield=loan_yield)

        if yield_rejected:
            reason = UnassignedReason.NEGATIVE_YIELD
        elif passed_covenants:
            # capacity taken between the check and the reservation
            reason = UnassignedReason.INSUFFICIENT_CAPACITY
        elif had_capacity:
            reason = UnassignedReason.COVENANT_VIOLATION
        else:
            reason = UnassignedReason.INSUFFICIENT_CAPACITY

        outcome = AssignmentOutcome(loan_id=loan.id, reason=reason)
        self.unassigned.append(outcome)
        return outcome

    def run(self, loans: Iterable[Loan]) -> AllocationResult:
        """Assign every loan in the order given and return the final state"""
        for loan in loans:
            self.assign(loan)
        return self.result()

    def result(self) -> AllocationResult:
        return AllocationResult(
            assignments=list(self.assignments),
            yields=self.yields.report(),
            unassigned=list(self.unassigned),
            remaining_capacity=self.ledger.remaining_capacity(),
        )
