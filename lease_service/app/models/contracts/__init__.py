from .contracts import Contract
from .partners import Partner
from .calendar_events import CalendarEvent
from .greenwich_settlements import GreenwichSettlement
