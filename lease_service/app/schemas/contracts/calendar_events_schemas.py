import datetime as dt
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from shared.wrappers.empty_string_model_wrapper import EmptyStringModel


class CalendarEventBase(EmptyStringModel):
    title: Optional[str] = None
    date: Optional[dt.date] = None
    user: Optional[str] = None
    color: Optional[str] = None


class CalendarEventCreate(CalendarEventBase):
    title: str = Field(min_length=1)
    date: dt.date
    user: str = Field(min_length=1)


class CalendarEventUpdate(CalendarEventBase):
    id: UUID


class CalendarEventOut(CalendarEventBase):
    id: UUID
    title: str
    date: dt.date
    user: str


class CalendarEventRequest(EmptyStringModel):
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None


class CalendarEventListResponse(BaseModel):
    events: List[CalendarEventOut]
    total: int
