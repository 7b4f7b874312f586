import datetime as dt
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from shared.core.types import Money
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel


class GreenwichSettlementBase(EmptyStringModel):
    settlement_round: Optional[int] = Field(default=None, ge=1)
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None


class GreenwichSettlementCreate(GreenwichSettlementBase):
    settlement_round: int = Field(ge=1)
    start_date: dt.date
    end_date: dt.date


class GreenwichSettlementUpdate(GreenwichSettlementBase):
    id: UUID


class GreenwichSettlementOut(GreenwichSettlementBase):
    id: UUID
    settlement_round: int
    start_date: dt.date
    end_date: dt.date
    # snapshot from the last save
    total_daily_deduction_amount: Optional[Money] = None
    # recomputed from the round's contracts on every read
    live_total_amount: Money = Decimal("0")
    contract_count: int = 0
    created_at: Optional[datetime] = None


class GreenwichSettlementListResponse(BaseModel):
    settlements: List[GreenwichSettlementOut]
    total: int


class TodayTotal(BaseModel):
    date: dt.date
    total_amount: Money
    rounds: List[int]
