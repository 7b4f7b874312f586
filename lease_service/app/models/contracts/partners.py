import uuid
from sqlalchemy import Boolean, Column, DateTime, String, Uuid, func
from sqlalchemy.orm import relationship
from shared.core.database import Base

from .contracts import JsonColumn


class Partner(Base):
    __tablename__ = "partners"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    business_number = Column(String(64), nullable=True)
    address = Column(String(300), nullable=True)
    # [{id, model, storage, duration_days, total_amount, daily_deduction}, ...]
    price_list = Column(JsonColumn, nullable=True)
    is_template = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    contracts = relationship("Contract", back_populates="partner")
