# lease_service/app/crud/contracts/greenwich_settlements_crud.py
from datetime import date
from decimal import Decimal
from typing import Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from shared.helpers.json_response_helper import error_response
from shared.utils.app_status_code import AppStatusCode

from ...models.contracts.contracts import Contract
from ...models.contracts.greenwich_settlements import GreenwichSettlement
from ...schemas.contracts.greenwich_settlements_schemas import (
    GreenwichSettlementCreate, GreenwichSettlementListResponse, GreenwichSettlementOut,
    GreenwichSettlementUpdate, TodayTotal
)
from .contracts_crud import to_record


def round_total(db: Session, settlement_round: int) -> Tuple[Decimal, int]:
    """
    Live total for one round. A contract contributes its initial deduction
    when it has one, otherwise its daily deduction, both scaled by units.
    """
    rows = db.query(Contract).filter(Contract.settlement_round == settlement_round).all()

    total = Decimal("0")
    for row in rows:
        record = to_record(row)
        initial = record.contract_initial_deduction or Decimal("0")
        per_unit = initial if initial > 0 else record.daily_deduction
        total += per_unit * record.units_required
    return total, len(rows)


def to_out(db: Session, obj: GreenwichSettlement) -> GreenwichSettlementOut:
    total, count = round_total(db, obj.settlement_round)
    out = GreenwichSettlementOut.model_validate(obj)
    return out.model_copy(update={"live_total_amount": total, "contract_count": count})


def get_list(db: Session) -> GreenwichSettlementListResponse:
    rows = db.query(GreenwichSettlement).order_by(GreenwichSettlement.settlement_round).all()
    return {"settlements": [to_out(db, r) for r in rows], "total": len(rows)}


def get_or_404(db: Session, settlement_id) -> GreenwichSettlement:
    try:
        key = settlement_id if isinstance(settlement_id, UUID) else UUID(str(settlement_id))
    except ValueError:
        key = None

    obj = db.query(GreenwichSettlement).filter(GreenwichSettlement.id == key).first() if key else None
    if not obj:
        error_response(
            message="Settlement round not found",
            status_code=AppStatusCode.RECORD_NOT_FOUND,
            http_status=404,
        )
    return obj


def _validate(db: Session, settlement_round: int, start_date: date, end_date: date, exclude_id=None):
    if end_date < start_date:
        error_response(
            message="end_date must not be before start_date",
            status_code=AppStatusCode.INVALID_INPUT,
        )

    q = db.query(GreenwichSettlement.id).filter(
        GreenwichSettlement.settlement_round == settlement_round)
    if exclude_id is not None:
        q = q.filter(GreenwichSettlement.id != exclude_id)
    if q.first():
        error_response(
            message=f"Settlement round {settlement_round} already exists",
            status_code=AppStatusCode.DUPLICATE_RECORD,
        )


def create(db: Session, payload: GreenwichSettlementCreate) -> GreenwichSettlementOut:
    _validate(db, payload.settlement_round, payload.start_date, payload.end_date)

    obj = GreenwichSettlement(**payload.model_dump())
    obj.total_daily_deduction_amount = round_total(db, payload.settlement_round)[0]
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return to_out(db, obj)


def update(db: Session, payload: GreenwichSettlementUpdate) -> GreenwichSettlementOut:
    obj = get_or_404(db, payload.id)

    changes = {
        k: v for k, v in payload.model_dump(exclude_unset=True, exclude={"id"}).items()
        if v is not None
    }
    _validate(
        db,
        changes.get("settlement_round", obj.settlement_round),
        changes.get("start_date", obj.start_date),
        changes.get("end_date", obj.end_date),
        exclude_id=obj.id,
    )

    for k, v in changes.items():
        setattr(obj, k, v)
    obj.total_daily_deduction_amount = round_total(db, obj.settlement_round)[0]

    db.commit()
    db.refresh(obj)
    return to_out(db, obj)


def delete(db: Session, settlement_id) -> dict:
    obj = get_or_404(db, settlement_id)
    db.delete(obj)
    db.commit()
    return {"success": True, "message": "Settlement round deleted successfully"}


def today_total(db: Session, today: date) -> TodayTotal:
    """Sum of live totals over the rounds whose window contains today."""
    rows = (
        db.query(GreenwichSettlement)
        .filter(GreenwichSettlement.start_date <= today, GreenwichSettlement.end_date >= today)
        .order_by(GreenwichSettlement.settlement_round)
        .all()
    )

    total = sum((round_total(db, r.settlement_round)[0] for r in rows), Decimal("0"))
    return TodayTotal(date=today, total_amount=total, rounds=[r.settlement_round for r in rows])
