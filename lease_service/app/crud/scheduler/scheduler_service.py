import logging
from datetime import date

from sqlalchemy.orm import Session

from lease_service.app.crud.contracts.contracts_crud import to_record
from lease_service.app.models.contracts.contracts import Contract
from lease_service.app.services.contract_status import derive_statuses

logger = logging.getLogger(__name__)


def process_contract_statuses(db: Session, today: date):
    """
    Persist the automatic transitions (active -> expired, not_ready <-> ready)
    for every contract. Returns how many rows were checked and changed.
    """
    contracts = db.query(Contract).all()

    changed = 0
    try:
        for contract in contracts:
            derived = derive_statuses(to_record(contract), today)

            status = derived.contract_status.value
            settlement_status = derived.settlement_status.value
            if contract.status == status and contract.settlement_status == settlement_status:
                continue

            contract.status = status
            contract.settlement_status = settlement_status
            changed += 1

        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Contract status sweep failed")
        raise

    logger.info("Contract status sweep: %s checked, %s changed", len(contracts), changed)
    return {"checked": len(contracts), "changed": changed}
