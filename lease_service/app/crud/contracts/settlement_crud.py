# lease_service/app/crud/contracts/settlement_crud.py
import logging
from datetime import date
from typing import Callable, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.core.errors import BulkOperationError

from ...enum.contracts_enum import ContractStatus, SettlementStatus
from ...models.contracts.contracts import Contract
from ...schemas.contracts.contracts_schemas import (
    ContractListResponse, ContractOut, ContractRequest, SettlementPrerequisitesUpdate
)
from ...services.contract_status import derive_statuses
from ...services.errors import InvalidSettlementTransition
from .contracts_crud import get_by_id, get_enriched, get_or_404, paginate, to_out, to_record

logger = logging.getLogger(__name__)


# ----------------------------------------------------
# Tabs
# ----------------------------------------------------
def get_tab(db: Session, settlement_status: SettlementStatus, params: ContractRequest,
            today: date) -> ContractListResponse:
    """Contracts whose derived settlement status matches the tab."""
    contracts = [
        c for c in get_enriched(db, params, today, Contract.contract_number.desc())
        if c.settlement_status == settlement_status
    ]
    return paginate(contracts, params)


def get_tab_counts(db: Session, params: ContractRequest, today: date):
    counts = {s: 0 for s in SettlementStatus}
    for contract in get_enriched(db, params, today):
        counts[contract.settlement_status] += 1
    return [{"settlement_status": s, "count": n} for s, n in counts.items()]


# ----------------------------------------------------
# Prerequisites and transitions
# ----------------------------------------------------
def update_prerequisites(db: Session, contract_id, payload: SettlementPrerequisitesUpdate,
                         today: date) -> ContractOut:
    obj = get_or_404(db, contract_id)

    for k, v in payload.model_dump(exclude_unset=True).items():
        setattr(obj, k, v.value if hasattr(v, "value") else v)

    # persist the automatic not_ready <-> ready move right away
    obj.settlement_status = derive_statuses(to_record(obj), today).settlement_status.value

    db.commit()
    db.refresh(obj)
    return to_out(obj, today)


def _request(obj: Contract, today: date):
    current = derive_statuses(to_record(obj), today).settlement_status
    if current != SettlementStatus.ready:
        raise InvalidSettlementTransition(
            f"Contract #{obj.contract_number} is {current.value}, only ready contracts can be requested")
    obj.settlement_status = SettlementStatus.requested.value
    obj.settlement_request_date = today


def _complete(obj: Contract, today: date):
    current = derive_statuses(to_record(obj), today).settlement_status
    if current != SettlementStatus.requested:
        raise InvalidSettlementTransition(
            f"Contract #{obj.contract_number} is {current.value}, only requested contracts can be completed")
    obj.settlement_status = SettlementStatus.completed.value
    obj.settlement_date = today
    obj.status = ContractStatus.settled.value


def request_settlement(db: Session, contract_id, today: date) -> ContractOut:
    obj = get_or_404(db, contract_id)
    _request(obj, today)
    db.commit()
    db.refresh(obj)
    logger.info("Settlement requested for contract #%s", obj.contract_number)
    return to_out(obj, today)


def complete_settlement(db: Session, contract_id, today: date) -> ContractOut:
    obj = get_or_404(db, contract_id)
    _complete(obj, today)
    db.commit()
    db.refresh(obj)
    logger.info("Settlement completed for contract #%s", obj.contract_number)
    return to_out(obj, today)


# ----------------------------------------------------
# Bulk
# ----------------------------------------------------
def _bulk(db: Session, operation: str, contract_ids: List, today: date,
          transition: Callable[[Contract, date], None]):
    """
    Attempt every id, committing each success on its own. Failures are
    collected and raised together once all ids have been tried; earlier
    successes are not rolled back.
    """
    succeeded = []
    failed = {}

    for contract_id in contract_ids:
        obj = get_by_id(db, contract_id)
        if obj is None:
            failed[contract_id] = "Contract not found"
            continue

        try:
            transition(obj, today)
            db.commit()
        except (ValueError, SQLAlchemyError) as e:
            db.rollback()
            failed[contract_id] = str(e)
            continue

        succeeded.append(contract_id)

    logger.info("%s: %s succeeded, %s failed", operation, len(succeeded), len(failed))
    if failed:
        raise BulkOperationError(operation, succeeded, failed)

    return {"succeeded": [str(i) for i in succeeded]}


def bulk_request_settlement(db: Session, contract_ids: List, today: date):
    return _bulk(db, "bulk_request_settlement", contract_ids, today, _request)


def bulk_complete_settlement(db: Session, contract_ids: List, today: date):
    return _bulk(db, "bulk_complete_settlement", contract_ids, today, _complete)
