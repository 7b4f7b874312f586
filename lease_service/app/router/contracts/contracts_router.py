from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from shared.core.database import get_lease_db as get_db
from shared.helpers.date_helper import utc_today
from ...crud.contracts import contracts_crud as crud
from ...crud.contracts import deductions_crud
from ...crud.scheduler.scheduler_service import process_contract_statuses
from ...schemas.contracts.contracts_schemas import (
    ContractCreate, ContractListResponse, ContractOut, ContractOverview, ContractRequest, ContractUpdate,
    StatusRefreshResult,
)
from ...schemas.contracts.deductions_schemas import DeductionUpdateResult, PaymentCreate, PaymentResult
from ...services.errors import InvalidPaymentAmount

router = APIRouter(
    prefix="/api/contracts",
    tags=["contracts"],
)


@router.get("/all", response_model=ContractListResponse)
def get_contracts(
    params: ContractRequest = Depends(),
    db: Session = Depends(get_db),
    today: date = Depends(utc_today),
):
    return crud.get_list(db, params, today)


@router.get("/overview", response_model=ContractOverview)
def get_contract_overview(
    params: ContractRequest = Depends(),
    db: Session = Depends(get_db),
    today: date = Depends(utc_today),
):
    return crud.get_overview(db, params, today)


@router.get("/deduction-board", response_model=List[ContractOut])
def get_deduction_board(
    params: ContractRequest = Depends(),
    db: Session = Depends(get_db),
    today: date = Depends(utc_today),
):
    return crud.get_deduction_board(db, params, today)


@router.post("/refresh-statuses", response_model=StatusRefreshResult)
def refresh_statuses(
    db: Session = Depends(get_db),
    today: date = Depends(utc_today),
):
    return process_contract_statuses(db, today)


@router.get("/{contract_id}", response_model=ContractOut)
def get_contract(
    contract_id: str,
    db: Session = Depends(get_db),
    today: date = Depends(utc_today),
):
    return crud.get_contract(db, contract_id, today)


@router.post("/", response_model=ContractOut)
def create_contract(
    payload: ContractCreate,
    db: Session = Depends(get_db),
    today: date = Depends(utc_today),
):
    try:
        return crud.create(db, payload, today)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/", response_model=ContractOut)
def update_contract(
    payload: ContractUpdate,
    db: Session = Depends(get_db),
    today: date = Depends(utc_today),
):
    try:
        return crud.update(db, payload, today)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/{contract_id}/duplicate", response_model=ContractOut)
def duplicate_contract(
    contract_id: str,
    db: Session = Depends(get_db),
    today: date = Depends(utc_today),
):
    return crud.duplicate(db, contract_id, today)


@router.delete("/{contract_id}", response_model=None)
def delete_contract(
    contract_id: str,
    db: Session = Depends(get_db),
): return crud.delete(db, contract_id)


# ----------------------------------------------------
# Daily deductions
# ----------------------------------------------------
@router.post("/{contract_id}/payments", response_model=PaymentResult)
def add_payment(
    contract_id: str,
    payload: PaymentCreate,
    db: Session = Depends(get_db),
    today: date = Depends(utc_today),
):
    try:
        return deductions_crud.add_payment(db, contract_id, payload.amount, today)
    except InvalidPaymentAmount as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/{contract_id}/deductions/{deduction_id}/settle", response_model=DeductionUpdateResult)
def settle_deduction(
    contract_id: str,
    deduction_id: str,
    db: Session = Depends(get_db),
    today: date = Depends(utc_today),
):
    return deductions_crud.settle_deduction(db, contract_id, deduction_id, today)


@router.post("/{contract_id}/deductions/{deduction_id}/cancel", response_model=DeductionUpdateResult)
def cancel_deduction(
    contract_id: str,
    deduction_id: str,
    db: Session = Depends(get_db),
    today: date = Depends(utc_today),
):
    return deductions_crud.cancel_deduction(db, contract_id, deduction_id, today)
