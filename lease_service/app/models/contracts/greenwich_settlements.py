import uuid
from sqlalchemy import Column, Date, DateTime, Integer, Numeric, Uuid
from sqlalchemy.sql import func
from shared.core.database import Base


class GreenwichSettlement(Base):
    __tablename__ = "greenwich_settlements"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    settlement_round = Column(Integer, nullable=False, unique=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    # snapshot taken on save, live totals are recomputed from contracts
    total_daily_deduction_amount = Column(Numeric(14, 2), nullable=True)
    created_at = Column(DateTime(timezone=True),
                        server_default=func.now(), nullable=False)
