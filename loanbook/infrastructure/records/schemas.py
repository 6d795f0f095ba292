"""Pydantic schemas for input record validation"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from loanbook.domain.models import Bank, Covenant, Facility, Loan
from loanbook.utils.money import parse_minor_units, parse_rate


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class RecordSchema(BaseModel):
    """Base for one input row; unknown columns are ignored"""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)


class BankRecord(RecordSchema):
    id: int
    name: str = Field(..., min_length=1)

    def to_domain(self) -> Bank:
        return Bank(id=self.id, name=self.name)


class FacilityRecord(RecordSchema):
    id: int
    bank_id: int
    interest_rate: Decimal
    amount: int = Field(..., ge=0, description="Total capacity in minor units")

    @field_validator("interest_rate", mode="before")
    @classmethod
    def _rate(cls, value):
        return parse_rate(value)

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, value):
        return parse_minor_units(value)

    def to_domain(self) -> Facility:
        return Facility(
            id=self.id,
            bank_id=self.bank_id,
            interest_rate=self.interest_rate,
            capacity=self.amount,
        )


class CovenantRecord(RecordSchema):
    bank_id: int
    facility_id: Optional[int] = None
    max_default_likelihood: Optional[Decimal] = None
    banned_state: Optional[str] = None

    @field_validator("facility_id", "banned_state", mode="before")
    @classmethod
    def _optional(cls, value):
        return _blank_to_none(value)

    @field_validator("max_default_likelihood", mode="before")
    @classmethod
    def _max_default(cls, value):
        value = _blank_to_none(value)
        return None if value is None else parse_rate(value)

    def to_domain(self) -> Covenant:
        return Covenant(
            bank_id=self.bank_id,
            facility_id=self.facility_id,
            max_default_rate=self.max_default_likelihood,
            banned_state=self.banned_state.upper() if self.banned_state else None,
        )


class LoanRecord(RecordSchema):
    id: int
    amount: int = Field(..., gt=0, description="Loan size in minor units")
    interest_rate: Decimal
    default_likelihood: Decimal
    state: str = Field(..., min_length=1)

    @field_validator("interest_rate", "default_likelihood", mode="before")
    @classmethod
    def _rate(cls, value):
        return parse_rate(value)

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, value):
        return parse_minor_units(value)

    def to_domain(self) -> Loan:
        return Loan(
            id=self.id,
            amount=self.amount,
            interest_rate=self.interest_rate,
            default_rate=self.default_likelihood,
            state=self.state.upper(),
        )
