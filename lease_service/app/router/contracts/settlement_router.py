from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from shared.core.database import get_lease_db as get_db
from shared.helpers.date_helper import utc_today
from ...crud.contracts import settlement_crud as crud
from ...enum.contracts_enum import SettlementStatus
from ...schemas.contracts.contracts_schemas import (
    BulkSettlementRequest, BulkSettlementResult, ContractListResponse, ContractOut, ContractRequest,
    SettlementPrerequisitesUpdate, SettlementTabCount,
)

router = APIRouter(
    prefix="/api/settlements",
    tags=["settlements"],
)


@router.get("/counts", response_model=List[SettlementTabCount])
def get_tab_counts(
    params: ContractRequest = Depends(),
    db: Session = Depends(get_db),
    today: date = Depends(utc_today),
):
    return crud.get_tab_counts(db, params, today)


@router.get("/tab/{settlement_status}", response_model=ContractListResponse)
def get_tab(
    settlement_status: SettlementStatus,
    params: ContractRequest = Depends(),
    db: Session = Depends(get_db),
    today: date = Depends(utc_today),
):
    return crud.get_tab(db, settlement_status, params, today)


@router.post("/bulk/request", response_model=BulkSettlementResult)
def bulk_request_settlement(
    payload: BulkSettlementRequest,
    db: Session = Depends(get_db),
    today: date = Depends(utc_today),
):
    return crud.bulk_request_settlement(db, payload.contract_ids, today)


@router.post("/bulk/complete", response_model=BulkSettlementResult)
def bulk_complete_settlement(
    payload: BulkSettlementRequest,
    db: Session = Depends(get_db),
    today: date = Depends(utc_today),
):
    return crud.bulk_complete_settlement(db, payload.contract_ids, today)


@router.put("/{contract_id}/prerequisites", response_model=ContractOut)
def update_prerequisites(
    contract_id: str,
    payload: SettlementPrerequisitesUpdate,
    db: Session = Depends(get_db),
    today: date = Depends(utc_today),
):
    return crud.update_prerequisites(db, contract_id, payload, today)


@router.post("/{contract_id}/request", response_model=ContractOut)
def request_settlement(
    contract_id: str,
    db: Session = Depends(get_db),
    today: date = Depends(utc_today),
):
    try:
        return crud.request_settlement(db, contract_id, today)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/{contract_id}/complete", response_model=ContractOut)
def complete_settlement(
    contract_id: str,
    db: Session = Depends(get_db),
    today: date = Depends(utc_today),
):
    try:
        return crud.complete_settlement(db, contract_id, today)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
