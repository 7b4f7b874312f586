import uuid
from sqlalchemy import JSON, Boolean, Column, Integer, String, Date, Numeric, ForeignKey, DateTime, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from shared.core.database import Base

from ...enum.contracts_enum import ContractStatus, ProcurementStatus, SettlementStatus, ShippingStatus

JsonColumn = JSON().with_variant(JSONB(), "postgresql")


class Contract(Base):
    __tablename__ = "contracts"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # human facing, allocated as max + 1 under this constraint
    contract_number = Column(Integer, nullable=False, unique=True, index=True)
    partner_id = Column(Uuid(as_uuid=True), ForeignKey(
        "partners.id"), nullable=True)

    device_name = Column(String(200), nullable=False)
    color = Column(String(64), nullable=True)

    contract_date = Column(Date, nullable=False)
    execution_date = Column(Date, nullable=True)
    expiry_date = Column(Date, nullable=True)
    duration_days = Column(Integer, nullable=False, default=0)

    # stored per unit, scaled by units_required when loaded
    total_amount = Column(Numeric(14, 2), nullable=False, default=0)
    daily_deduction = Column(Numeric(14, 2), nullable=False, default=0)
    contract_initial_deduction = Column(Numeric(14, 2), nullable=True)
    units_required = Column(Integer, nullable=True, default=1)
    units_secured = Column(Integer, nullable=True, default=0)

    # inline schedule: [{id, date, amount, paid_amount, status}, ...]
    daily_deductions = Column(JsonColumn, nullable=True)

    status = Column(String(16), nullable=False,
                    default=ContractStatus.active.value)
    settlement_status = Column(String(16), nullable=False,
                               default=SettlementStatus.not_ready.value)
    settlement_round = Column(Integer, nullable=True)
    settlement_request_date = Column(Date, nullable=True)
    settlement_date = Column(Date, nullable=True)
    settlement_document_url = Column(String(500), nullable=True)
    is_lessee_contract_signed = Column(Boolean, nullable=False, default=False)
    contract_file_url = Column(String(500), nullable=True)

    # shipping
    shipping_status = Column(String(16), nullable=True,
                             default=ShippingStatus.preparing.value)
    shipping_date = Column(Date, nullable=True)
    shipping_company = Column(String(100), nullable=True)
    tracking_number = Column(String(100), nullable=True)

    # procurement
    procurement_status = Column(String(16), nullable=True,
                                default=ProcurementStatus.unsecured.value)
    procurement_source = Column(String(200), nullable=True)
    procurement_cost = Column(Numeric(14, 2), nullable=True)
    delivery_method_to_lessee = Column(String(64), nullable=True)

    # people
    manager_name = Column(String(100), nullable=True)
    lessee_name = Column(String(100), nullable=True)
    lessee_contact = Column(String(64), nullable=True)
    lessee_business_number = Column(String(64), nullable=True)
    lessee_business_address = Column(String(300), nullable=True)
    distributor_name = Column(String(100), nullable=True)
    distributor_contact = Column(String(64), nullable=True)
    distributor_business_number = Column(String(64), nullable=True)
    distributor_address = Column(String(300), nullable=True)

    created_at = Column(DateTime(timezone=True),
                        server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    partner = relationship("Partner", back_populates="contracts")
