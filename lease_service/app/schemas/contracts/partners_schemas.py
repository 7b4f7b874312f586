from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from shared.core.schemas import CommonQueryParams
from shared.core.types import Money
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel


class PriceTierBase(BaseModel):
    # price lists saved by the old client use camelCase keys
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    model: str = Field(min_length=1)
    storage: str = Field(min_length=1)
    duration_days: int = Field(
        gt=0, validation_alias=AliasChoices("duration_days", "durationDays"))
    total_amount: Money = Field(
        gt=0, validation_alias=AliasChoices("total_amount", "totalAmount"))
    daily_deduction: Money = Field(
        ge=0, validation_alias=AliasChoices("daily_deduction", "dailyDeduction"))


class PriceTierCreate(PriceTierBase):
    pass


class PriceTier(PriceTierBase):
    id: str

    def key(self):
        return (self.model, self.storage, self.duration_days)


class PartnerBase(EmptyStringModel):
    name: Optional[str] = None
    business_number: Optional[str] = None
    address: Optional[str] = None
    is_template: Optional[bool] = None


class PartnerCreate(PartnerBase):
    name: str
    price_list: Optional[List[PriceTierCreate]] = None


class PartnerUpdate(PartnerBase):
    id: UUID


class PartnerOut(PartnerBase):
    id: UUID
    name: str
    is_template: bool = False
    price_list: List[PriceTier] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("price_list", mode="before")
    @classmethod
    def default_price_list(cls, v):
        return [] if v is None else v


class PartnerRequest(CommonQueryParams):
    is_template: Optional[bool] = None


class PartnerListResponse(BaseModel):
    partners: List[PartnerOut]
    total: int


class CopyTemplateRequest(BaseModel):
    template_id: UUID


