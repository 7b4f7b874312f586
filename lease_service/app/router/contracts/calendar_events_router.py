from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.database import get_lease_db as get_db
from ...crud.contracts import calendar_events_crud as crud
from ...schemas.contracts.calendar_events_schemas import (
    CalendarEventCreate, CalendarEventListResponse, CalendarEventOut, CalendarEventRequest, CalendarEventUpdate
)

router = APIRouter(
    prefix="/api/calendar-events",
    tags=["calendar events"],
)


@router.get("/all", response_model=CalendarEventListResponse)
def get_events(
    params: CalendarEventRequest = Depends(),
    db: Session = Depends(get_db),
):
    return crud.get_list(db, params)


@router.post("/", response_model=CalendarEventOut)
def create_event(payload: CalendarEventCreate, db: Session = Depends(get_db)):
    return crud.create(db, payload)


@router.put("/", response_model=CalendarEventOut)
def update_event(payload: CalendarEventUpdate, db: Session = Depends(get_db)):
    return crud.update(db, payload)


@router.delete("/{event_id}", response_model=None)
def delete_event(
    event_id: str,
    db: Session = Depends(get_db),
): return crud.delete(db, event_id)
