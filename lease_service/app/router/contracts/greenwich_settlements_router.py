from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.database import get_lease_db as get_db
from shared.helpers.date_helper import utc_today
from ...crud.contracts import greenwich_settlements_crud as crud
from ...schemas.contracts.greenwich_settlements_schemas import (
    GreenwichSettlementCreate, GreenwichSettlementListResponse, GreenwichSettlementOut,
    GreenwichSettlementUpdate, TodayTotal
)

router = APIRouter(
    prefix="/api/greenwich-settlements",
    tags=["greenwich settlements"],
)


@router.get("/all", response_model=GreenwichSettlementListResponse)
def get_rounds(db: Session = Depends(get_db)):
    return crud.get_list(db)


@router.get("/today-total", response_model=TodayTotal)
def get_today_total(
    db: Session = Depends(get_db),
    today: date = Depends(utc_today),
):
    return crud.today_total(db, today)


@router.get("/{settlement_id}", response_model=GreenwichSettlementOut)
def get_round(settlement_id: str, db: Session = Depends(get_db)):
    return crud.to_out(db, crud.get_or_404(db, settlement_id))


@router.post("/", response_model=GreenwichSettlementOut)
def create_round(payload: GreenwichSettlementCreate, db: Session = Depends(get_db)):
    return crud.create(db, payload)


@router.put("/", response_model=GreenwichSettlementOut)
def update_round(payload: GreenwichSettlementUpdate, db: Session = Depends(get_db)):
    return crud.update(db, payload)


@router.delete("/{settlement_id}", response_model=None)
def delete_round(
    settlement_id: str,
    db: Session = Depends(get_db),
): return crud.delete(db, settlement_id)
