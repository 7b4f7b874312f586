import uuid
from sqlalchemy import Column, Date, String, Uuid
from shared.core.database import Base


class CalendarEvent(Base):
    __tablename__ = "calendar_events"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    date = Column(Date, nullable=False, index=True)
    user = Column(String(100), nullable=False)
    color = Column(String(32), nullable=True)
