# lease_service/app/crud/contracts/deductions_crud.py
import logging
from datetime import date
from decimal import Decimal
from typing import List

from sqlalchemy.orm import Session

from shared.helpers.json_response_helper import error_response
from shared.utils.app_status_code import AppStatusCode

from ...models.contracts.contracts import Contract
from ...schemas.contracts.deductions_schemas import (
    DailyDeductionLog, DeductionUpdateResult, PaymentResult
)
from ...services import deduction_schedule
from ...services.errors import DeductionNotFound
from .contracts_crud import get_or_404, to_out

logger = logging.getLogger(__name__)


def _save_schedule(db: Session, obj: Contract, schedule: List[DailyDeductionLog]):
    # the column is written whole, never patched in place
    obj.daily_deductions = [r.model_dump(mode="json") for r in schedule]
    db.commit()
    db.refresh(obj)


def add_payment(db: Session, contract_id, amount, today: date) -> PaymentResult:
    value = deduction_schedule.validate_payment_amount(amount)

    obj = get_or_404(db, contract_id)
    contract = to_out(obj, today)

    schedule, remainder = deduction_schedule.allocate(contract.daily_deductions, value)
    _save_schedule(db, obj, schedule)

    applied = value - remainder
    logger.info("Applied payment %s to contract #%s", applied, obj.contract_number)
    if remainder > 0:
        logger.warning(
            "Payment to contract #%s exceeded the outstanding schedule, %s left unallocated",
            obj.contract_number, remainder)

    return PaymentResult(
        contract_id=str(obj.id),
        daily_deductions=schedule,
        unpaid_balance=deduction_schedule.unpaid_balance(schedule),
        applied_amount=applied,
        unallocated_amount=remainder if remainder > 0 else Decimal("0"),
    )


def _update_one(db: Session, contract_id, deduction_id: str, today: date, apply) -> DeductionUpdateResult:
    obj = get_or_404(db, contract_id)
    contract = to_out(obj, today)

    try:
        schedule = apply(contract.daily_deductions)
    except DeductionNotFound as e:
        error_response(
            message=str(e),
            status_code=AppStatusCode.RECORD_NOT_FOUND,
            http_status=404,
        )

    _save_schedule(db, obj, schedule)
    return DeductionUpdateResult(
        contract_id=str(obj.id),
        deduction_id=deduction_id,
        daily_deductions=schedule,
        unpaid_balance=deduction_schedule.unpaid_balance(schedule),
    )


def settle_deduction(db: Session, contract_id, deduction_id: str, today: date) -> DeductionUpdateResult:
    return _update_one(
        db, contract_id, deduction_id, today,
        lambda schedule: deduction_schedule.settle_deduction(schedule, deduction_id),
    )


def cancel_deduction(db: Session, contract_id, deduction_id: str, today: date) -> DeductionUpdateResult:
    return _update_one(
        db, contract_id, deduction_id, today,
        lambda schedule: deduction_schedule.cancel_deduction(schedule, deduction_id, today),
    )
