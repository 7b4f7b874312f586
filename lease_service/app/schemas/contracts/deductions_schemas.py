import datetime as dt
from decimal import Decimal
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from shared.core.types import Money
from shared.helpers.date_helper import parse_iso_date
from ...enum.contracts_enum import DeductionStatus


class DailyDeductionLog(BaseModel):
    """One calendar day's due amount inside a contract's active window."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    date: dt.date
    amount: Money
    # older rows were written with the camelCase key
    paid_amount: Money = Field(
        default=Decimal("0"),
        validation_alias=AliasChoices("paid_amount", "paidAmount"),
    )
    status: DeductionStatus

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v):
        parsed = parse_iso_date(v)
        if parsed is None:
            raise ValueError("deduction date is required")
        return parsed

    @field_validator("paid_amount", mode="before")
    @classmethod
    def missing_paid_amount_is_zero(cls, v):
        return Decimal("0") if v is None else v

    @model_validator(mode="after")
    def check_amounts(self):
        if self.amount < 0:
            raise ValueError(f"deduction {self.id}: amount must not be negative")
        if self.paid_amount < 0 or self.paid_amount > self.amount:
            raise ValueError(
                f"deduction {self.id}: paid_amount must be between 0 and amount")

        if self.status == DeductionStatus.paid and self.paid_amount != self.amount:
            raise ValueError(f"deduction {self.id}: paid record must be fully paid")
        if self.status == DeductionStatus.partial and not (0 < self.paid_amount < self.amount):
            raise ValueError(f"deduction {self.id}: partial record needs 0 < paid_amount < amount")
        if self.status in (DeductionStatus.unpaid, DeductionStatus.pending) and self.paid_amount != 0:
            raise ValueError(f"deduction {self.id}: {self.status.value} record cannot carry a payment")
        return self


class PaymentCreate(BaseModel):
    # sign and finiteness are checked by the allocator before anything is touched
    amount: Money


class PaymentResult(BaseModel):
    contract_id: str
    daily_deductions: List[DailyDeductionLog]
    unpaid_balance: Money
    applied_amount: Money
    unallocated_amount: Money


class DeductionUpdateResult(BaseModel):
    contract_id: str
    deduction_id: Optional[str] = None
    daily_deductions: List[DailyDeductionLog]
    unpaid_balance: Money
