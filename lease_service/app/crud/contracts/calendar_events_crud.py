# lease_service/app/crud/contracts/calendar_events_crud.py
from uuid import UUID

from sqlalchemy.orm import Session

from shared.helpers.json_response_helper import error_response
from shared.utils.app_status_code import AppStatusCode

from ...models.contracts.calendar_events import CalendarEvent
from ...schemas.contracts.calendar_events_schemas import (
    CalendarEventCreate, CalendarEventListResponse, CalendarEventOut, CalendarEventRequest, CalendarEventUpdate
)


def build_filters(params: CalendarEventRequest):
    filters = []

    if params.start_date and params.end_date and params.end_date < params.start_date:
        error_response(message="end_date must not be before start_date")

    if params.start_date:
        filters.append(CalendarEvent.date >= params.start_date)

    if params.end_date:
        filters.append(CalendarEvent.date <= params.end_date)

    return filters


def get_list(db: Session, params: CalendarEventRequest) -> CalendarEventListResponse:
    rows = (
        db.query(CalendarEvent)
        .filter(*build_filters(params))
        .order_by(CalendarEvent.date, CalendarEvent.title)
        .all()
    )
    return {"events": [CalendarEventOut.model_validate(r) for r in rows], "total": len(rows)}


def get_or_404(db: Session, event_id) -> CalendarEvent:
    try:
        key = event_id if isinstance(event_id, UUID) else UUID(str(event_id))
    except ValueError:
        key = None

    obj = db.query(CalendarEvent).filter(CalendarEvent.id == key).first() if key else None
    if not obj:
        error_response(
            message="Calendar event not found",
            status_code=AppStatusCode.RECORD_NOT_FOUND,
            http_status=404,
        )
    return obj


def create(db: Session, payload: CalendarEventCreate) -> CalendarEventOut:
    obj = CalendarEvent(**payload.model_dump())
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return CalendarEventOut.model_validate(obj)


def update(db: Session, payload: CalendarEventUpdate) -> CalendarEventOut:
    obj = get_or_404(db, payload.id)

    for k, v in payload.model_dump(exclude_unset=True, exclude={"id"}).items():
        # title, date and user are required on the row
        if v is None and k != "color":
            continue
        setattr(obj, k, v)

    db.commit()
    db.refresh(obj)
    return CalendarEventOut.model_validate(obj)


def delete(db: Session, event_id) -> dict:
    obj = get_or_404(db, event_id)
    db.delete(obj)
    db.commit()
    return {"success": True, "message": "Calendar event deleted successfully"}
