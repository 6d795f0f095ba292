"""Pydantic schemas for API request/response validation"""

from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from loanbook.domain.models import Bank, Covenant, Facility, Loan


class BankIn(BaseModel):
    id: int
    name: str = Field(..., min_length=1)

    def to_domain(self) -> Bank:
        return Bank(id=self.id, name=self.name)


class FacilityIn(BaseModel):
    id: int
    bank_id: int
    interest_rate: Decimal = Field(..., ge=0, le=1)
    amount: int = Field(..., ge=0, description="Total capacity in cents")

    def to_domain(self) -> Facility:
        return Facility(id=self.id, bank_id=self.bank_id, interest_rate=self.interest_rate, capacity=self.amount)


class CovenantIn(BaseModel):
    bank_id: int
    facility_id: Optional[int] = Field(None, description="Omit for a bank-wide covenant")
    max_default_likelihood: Optional[Decimal] = Field(None, ge=0, le=1)
    banned_state: Optional[str] = Field(None, min_length=1)

    def to_domain(self) -> Covenant:
        return Covenant(
            bank_id=self.bank_id,
            facility_id=self.facility_id,
            max_default_rate=self.max_default_likelihood,
            banned_state=self.banned_state.strip().upper() if self.banned_state else None,
        )


class LoanIn(BaseModel):
    id: int
    amount: int = Field(..., gt=0, description="Loan size in cents")
    interest_rate: Decimal = Field(..., ge=0, le=1)
    default_likelihood: Decimal = Field(..., ge=0, le=1)
    state: str = Field(..., min_length=1)

    def to_domain(self) -> Loan:
        return Loan(
            id=self.id,
            amount=self.amount,
            interest_rate=self.interest_rate,
            default_rate=self.default_likelihood,
            state=self.state.strip().upper(),
        )


class AllocationRequest(BaseModel):
    """Request body for POST /v1/allocations; loans are processed in list order"""

    banks: List[BankIn]
    facilities: List[FacilityIn]
    covenants: List[CovenantIn] = []
    loans: List[LoanIn]


class AssignmentItem(BaseModel):
    loan_id: int
    facility_id: int


class YieldItem(BaseModel):
    facility_id: int
    expected_yield: int


class UnassignedItem(BaseModel):
    loan_id: int
    reason: str


class AllocationResponse(BaseModel):
    """Response for POST /v1/allocations"""

    run_id: str
    assignments: List[AssignmentItem]
    yields: List[YieldItem]
    unassigned: List[UnassignedItem]
    remaining_capacity: Dict[int, int]
