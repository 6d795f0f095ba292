"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional


@dataclass(frozen=True)
class Bank:
    """Bank supplying one or more debt facilities"""

    id: int
    name: str


@dataclass
class Facility:
    """Credit line from a bank; remaining_capacity is mutated by the ledger only"""

    id: int
    bank_id: int
    interest_rate: Decimal  # cost charged to us on every unit drawn
    capacity: int  # minor units
    remaining_capacity: Optional[int] = None

    def __post_init__(self) -> None:
        if self.remaining_capacity is None:
            self.remaining_capacity = self.capacity
        if not 0 <= self.remaining_capacity <= self.capacity:
            raise ValueError(f"Facility {self.id}: remaining capacity outside [0, {self.capacity}]")


@dataclass(frozen=True)
class Covenant:
    """Restriction on one facility, or on every facility of a bank when facility_id is None"""

    bank_id: int
    facility_id: Optional[int] = None
    max_default_rate: Optional[Decimal] = None  # None or 0 means no limit
    banned_state: Optional[str] = None

    @property
    def bank_wide(self) -> bool:
        return self.facility_id is None


@dataclass(frozen=True)
class Loan:
    """Loan origination, processed once in arrival order"""

    id: int
    amount: int  # minor units
    interest_rate: Decimal
    default_rate: Decimal
    state: str


@dataclass(frozen=True)
class Assignment:
    """Loan funded by a facility"""

    loan_id: int
    facility_id: int


@dataclass(frozen=True)
class FacilityYield:
    """Reported expected yield of a facility, rounded to minor units"""

    facility_id: int
    expected_yield: int


class UnassignedReason(str, Enum):
    INSUFFICIENT_CAPACITY = "insufficient_capacity"
    COVENANT_VIOLATION = "covenant_violation"
    NEGATIVE_YIELD = "negative_yield"


@dataclass(frozen=True)
class AssignmentOutcome:
    """Result of offering one loan to the ledger"""

    loan_id: int
    facility_id: Optional[int] = None
    loan_yield: Optional[Decimal] = None
    reason: Optional[UnassignedReason] = None

    @property
    def assigned(self) -> bool:
        return self.facility_id is not None


@dataclass
class AllocationResult:
    """Final state of one batch run"""

    assignments: List[Assignment]
    yields: List[FacilityYield]
    unassigned: List[AssignmentOutcome]
    remaining_capacity: Dict[int, int]

    @property
    def negative_yield_facilities(self) -> List[int]:
        return [y.facility_id for y in self.yields if y.expected_yield < 0]
