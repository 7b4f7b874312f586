from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from shared.core.schemas import CommonQueryParams
from shared.core.types import Money
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.contracts_enum import (
    ContractStatus, ProcurementStatus, SettlementStatus, ShippingStatus
)
from .deductions_schemas import DailyDeductionLog


class ContractFields(EmptyStringModel):
    partner_id: Optional[str] = None
    device_name: Optional[str] = None
    color: Optional[str] = None

    contract_date: Optional[date] = None
    execution_date: Optional[date] = None
    duration_days: Optional[int] = Field(default=None, ge=0)

    # per unit
    total_amount: Optional[Money] = Field(default=None, ge=0)
    daily_deduction: Optional[Money] = Field(default=None, ge=0)
    contract_initial_deduction: Optional[Money] = Field(default=None, ge=0)
    units_required: Optional[int] = Field(default=None, ge=1)
    units_secured: Optional[int] = Field(default=None, ge=0)

    status: Optional[ContractStatus] = None
    settlement_status: Optional[SettlementStatus] = None
    settlement_round: Optional[int] = None
    settlement_request_date: Optional[date] = None
    settlement_date: Optional[date] = None
    settlement_document_url: Optional[str] = None
    is_lessee_contract_signed: Optional[bool] = None
    contract_file_url: Optional[str] = None

    shipping_status: Optional[ShippingStatus] = None
    shipping_date: Optional[date] = None
    shipping_company: Optional[str] = None
    tracking_number: Optional[str] = None

    procurement_status: Optional[ProcurementStatus] = None
    procurement_source: Optional[str] = None
    procurement_cost: Optional[Money] = None
    delivery_method_to_lessee: Optional[str] = None

    manager_name: Optional[str] = None
    lessee_name: Optional[str] = None
    lessee_contact: Optional[str] = None
    lessee_business_number: Optional[str] = None
    lessee_business_address: Optional[str] = None
    distributor_name: Optional[str] = None
    distributor_contact: Optional[str] = None
    distributor_business_number: Optional[str] = None
    distributor_address: Optional[str] = None

    @field_validator("partner_id", mode="before")
    @classmethod
    def uuid_to_str(cls, v):
        return str(v) if isinstance(v, UUID) else v


class ContractCreate(ContractFields):
    contract_date: date
    duration_days: int = Field(gt=0)
    # device_name is built from these when not given, and they pick the price tier
    model: Optional[str] = None
    storage: Optional[str] = None


class ContractUpdate(ContractFields):
    id: UUID


class ContractRecord(ContractFields):
    """
    A contract row as persisted, parsed strictly. Everything the schedule and
    status logic reads is validated here, malformed rows raise.
    """

    id: str
    contract_number: int
    device_name: str
    expiry_date: Optional[date] = None
    duration_days: int = 0
    total_amount: Money = Decimal("0")
    daily_deduction: Money = Decimal("0")
    units_required: int = 1
    daily_deductions: List[DailyDeductionLog] = []
    status: ContractStatus = ContractStatus.active
    settlement_status: SettlementStatus = SettlementStatus.not_ready
    is_lessee_contract_signed: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def id_to_str(cls, v):
        return str(v) if isinstance(v, UUID) else v

    @field_validator("units_required", mode="before")
    @classmethod
    def default_units(cls, v):
        return 1 if v is None else v

    @field_validator("duration_days", mode="before")
    @classmethod
    def default_duration(cls, v):
        return 0 if v is None else v

    @field_validator("total_amount", "daily_deduction", mode="before")
    @classmethod
    def default_amount(cls, v):
        return Decimal("0") if v is None else v

    @field_validator("daily_deductions", mode="before")
    @classmethod
    def default_schedule(cls, v):
        return [] if v is None else v

    @field_validator("is_lessee_contract_signed", mode="before")
    @classmethod
    def default_signed(cls, v):
        return False if v is None else v

    @field_validator("status", "settlement_status", mode="before")
    @classmethod
    def default_status(cls, v, info):
        if v is None:
            return cls.model_fields[info.field_name].default
        return v

    @model_validator(mode="after")
    def check_record(self):
        if self.units_required < 1:
            raise ValueError(f"contract #{self.contract_number}: units_required must be at least 1")
        if self.duration_days < 0:
            raise ValueError(f"contract #{self.contract_number}: duration_days must not be negative")
        if self.total_amount < 0 or self.daily_deduction < 0:
            raise ValueError(f"contract #{self.contract_number}: amounts must not be negative")

        if self.execution_date is None:
            self.execution_date = self.contract_date

        seen = set()
        for record in self.daily_deductions:
            if record.date in seen:
                raise ValueError(
                    f"contract #{self.contract_number}: duplicate deduction date {record.date.isoformat()}")
            seen.add(record.date)
        return self


class ContractOut(ContractRecord):
    """Enriched contract. Amounts are scaled by units_required."""

    unpaid_balance: Money
    total_paid: Money
    remaining_amount: Money
    overdue_days: int = 0
    overdue_charge: Money = Decimal("0")
    partner_name: Optional[str] = None


class ContractRequest(CommonQueryParams):
    status: Optional[str] = None               # "all" | "active" | ...
    settlement_status: Optional[str] = None
    settlement_round: Optional[int] = None
    partner_id: Optional[UUID] = None


class ContractListResponse(BaseModel):
    contracts: List[ContractOut]
    total: int


class ContractOverview(BaseModel):
    total_receivables: Money
    total_paid: Money
    total_unpaid_balance: Money
    active_contracts: int
    settlement_requested_total: Money


class StatusRefreshResult(BaseModel):
    checked: int
    changed: int


class SettlementPrerequisitesUpdate(EmptyStringModel):
    shipping_status: Optional[ShippingStatus] = None
    is_lessee_contract_signed: bool
    settlement_document_url: Optional[str] = None


class BulkSettlementRequest(BaseModel):
    contract_ids: List[UUID] = Field(min_length=1)


class BulkSettlementResult(BaseModel):
    succeeded: List[str]


class SettlementTabCount(BaseModel):
    settlement_status: SettlementStatus
    count: int
