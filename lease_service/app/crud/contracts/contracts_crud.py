# lease_service/app/crud/contracts/contracts_crud.py
import logging
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy import String, cast, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from shared.core.config import settings
from shared.core.errors import SequenceConflictError
from shared.helpers.json_response_helper import error_response
from shared.utils.app_status_code import AppStatusCode

from ...enum.contracts_enum import ContractStatus, SettlementStatus
from ...models.contracts.contracts import Contract
from ...models.contracts.partners import Partner
from ...schemas.contracts.contracts_schemas import (
    ContractCreate, ContractListResponse, ContractOut, ContractRecord, ContractRequest, ContractUpdate
)
from ...services.contract_enricher import enrich_contract, expiry_for
from . import partners_crud

logger = logging.getLogger(__name__)

# fields that are never copied or written from a payload
IMMUTABLE_FIELDS = {"id", "contract_number", "daily_deductions", "created_at", "updated_at"}


# ----------------------------------------------------
# Load + enrich
# ----------------------------------------------------
def to_record(row: Contract) -> ContractRecord:
    return ContractRecord.model_validate(row)


def to_out(row: Contract, today: date) -> ContractOut:
    partner_name = row.partner.name if row.partner is not None else None
    return enrich_contract(to_record(row), today, partner_name=partner_name)


def build_filters(params: ContractRequest):
    # status and settlement_status are derived per request, see matches_statuses
    filters = []

    if params.settlement_round is not None:
        filters.append(Contract.settlement_round == params.settlement_round)

    if params.partner_id:
        filters.append(Contract.partner_id == params.partner_id)

    # Search by device, lessee, distributor or contract number
    if params.search:
        like = f"%{params.search}%"
        filters.append(
            or_(
                Contract.device_name.ilike(like),
                Contract.lessee_name.ilike(like),
                Contract.distributor_name.ilike(like),
                cast(Contract.contract_number, String).ilike(like),
            )
        )

    return filters


def base_query(db: Session, params: ContractRequest):
    return (
        db.query(Contract)
        .options(joinedload(Contract.partner).load_only(Partner.id, Partner.name))
        .filter(*build_filters(params))
    )


def matches_statuses(contract: ContractOut, params: ContractRequest) -> bool:
    if params.status and params.status.lower() != "all":
        if contract.status.value != params.status.lower():
            return False

    if params.settlement_status and params.settlement_status.lower() != "all":
        if contract.settlement_status.value != params.settlement_status.lower():
            return False

    return True


def get_enriched(db: Session, params: ContractRequest, today: date, *order_by) -> List[ContractOut]:
    """Enrich every matching row, then filter on the derived statuses."""
    rows = base_query(db, params).order_by(*order_by).all()
    return [c for c in (to_out(row, today) for row in rows) if matches_statuses(c, params)]


def paginate(contracts: List[ContractOut], params: ContractRequest) -> ContractListResponse:
    start = params.skip or 0
    end = start + params.limit if params.limit is not None else None
    return {"contracts": contracts[start:end], "total": len(contracts)}


def get_list(db: Session, params: ContractRequest, today: date) -> ContractListResponse:
    contracts = get_enriched(
        db, params, today, Contract.contract_date.desc(), Contract.contract_number.desc())
    return paginate(contracts, params)


def get_overview(db: Session, params: ContractRequest, today: date):
    contracts = get_enriched(db, params, today)

    total_receivables = sum((c.total_amount for c in contracts), Decimal("0"))
    total_paid = sum((c.total_paid for c in contracts), Decimal("0"))
    total_unpaid = sum((c.unpaid_balance for c in contracts), Decimal("0"))
    active = sum(1 for c in contracts if c.status == ContractStatus.active)
    requested_total = sum(
        (c.total_amount for c in contracts
         if c.settlement_status in (SettlementStatus.requested, SettlementStatus.completed)),
        Decimal("0"),
    )

    return {
        "total_receivables": total_receivables,
        "total_paid": total_paid,
        "total_unpaid_balance": total_unpaid,
        "active_contracts": active,
        "settlement_requested_total": requested_total,
    }


def get_deduction_board(db: Session, params: ContractRequest, today: date) -> List[ContractOut]:
    """Active contracts, largest unpaid balance first."""
    contracts = get_enriched(db, params, today)
    active = [c for c in contracts if c.status == ContractStatus.active]
    return sorted(active, key=lambda c: c.unpaid_balance, reverse=True)


def get_by_id(db: Session, contract_id) -> Optional[Contract]:
    return db.query(Contract).filter(Contract.id == _as_uuid(contract_id)).first()


def get_or_404(db: Session, contract_id) -> Contract:
    obj = get_by_id(db, contract_id)
    if not obj:
        error_response(
            message="Contract not found",
            status_code=AppStatusCode.RECORD_NOT_FOUND,
            http_status=404,
        )
    return obj


def get_contract(db: Session, contract_id, today: date) -> ContractOut:
    return to_out(get_or_404(db, contract_id), today)


# ----------------------------------------------------
# Sequential contract numbers
# ----------------------------------------------------
def next_contract_number(db: Session) -> int:
    current = db.query(func.coalesce(func.max(Contract.contract_number), 0)).scalar()
    return int(current) + 1


def insert_with_next_number(db: Session, obj: Contract) -> Contract:
    """
    Allocate max + 1 and insert. The UNIQUE constraint on contract_number
    turns a concurrent allocation into an IntegrityError; we retry with a
    fresh number and give up loudly after the configured attempts.
    """
    attempts = settings.CONTRACT_NUMBER_MAX_RETRIES
    for attempt in range(1, attempts + 1):
        number = next_contract_number(db)
        obj.contract_number = number
        db.add(obj)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            taken = db.query(Contract.id).filter(
                Contract.contract_number == number).first()
            if not taken:
                raise
            logger.warning(
                "Contract number %s was taken concurrently (attempt %s/%s)",
                number, attempt, attempts)
            continue

        db.refresh(obj)
        return obj

    raise SequenceConflictError(
        f"Could not allocate a contract number after {attempts} attempts, please retry")


# ----------------------------------------------------
# Create / update / duplicate / delete
# ----------------------------------------------------
def create(db: Session, payload: ContractCreate, today: date) -> ContractOut:
    data = payload.model_dump(exclude={"model", "storage"})

    if payload.partner_id:
        partners_crud.get_or_404(db, payload.partner_id)

    if payload.total_amount is None or payload.daily_deduction is None:
        if not (payload.partner_id and payload.model and payload.storage):
            error_response(
                message="total_amount and daily_deduction are required when no price tier can be resolved")
        tier = partners_crud.resolve_price_tier(
            db, payload.partner_id, payload.model, payload.storage, payload.duration_days)
        if tier is None:
            error_response(
                message=f"No price tier for {payload.model} {payload.storage} / {payload.duration_days} days")
        if payload.total_amount is None:
            data["total_amount"] = tier.total_amount
        if payload.daily_deduction is None:
            data["daily_deduction"] = tier.daily_deduction

    if not payload.device_name:
        device_name = " ".join(p for p in (payload.model, payload.storage) if p).strip()
        if not device_name:
            error_response(message="device_name or model is required")
        data["device_name"] = device_name

    data["execution_date"] = payload.execution_date or payload.contract_date
    data["expiry_date"] = expiry_for(data["execution_date"], payload.duration_days)
    data["partner_id"] = _as_uuid(payload.partner_id) if payload.partner_id else None
    data["units_required"] = payload.units_required or 1
    data["status"] = (payload.status or ContractStatus.active).value
    data["settlement_status"] = (payload.settlement_status or SettlementStatus.not_ready).value
    data["is_lessee_contract_signed"] = bool(payload.is_lessee_contract_signed)
    data["daily_deductions"] = []

    obj = Contract(**{k: v for k, v in _column_values(data).items() if v is not None})
    obj = insert_with_next_number(db, obj)
    logger.info("Created contract #%s (%s)", obj.contract_number, obj.id)
    return to_out(obj, today)


def update(db: Session, payload: ContractUpdate, today: date) -> ContractOut:
    obj = get_or_404(db, payload.id)

    changes = payload.model_dump(exclude_unset=True, exclude={"id"})
    if "partner_id" in changes and changes["partner_id"]:
        partners_crud.get_or_404(db, changes["partner_id"])
        changes["partner_id"] = _as_uuid(changes["partner_id"])

    for k, v in _column_values(changes).items():
        setattr(obj, k, v)

    if obj.execution_date is None:
        obj.execution_date = obj.contract_date
    # expiry always follows the window, it is not edited on its own
    obj.expiry_date = expiry_for(obj.execution_date, obj.duration_days)

    # the edited row must still parse before anything is written
    try:
        to_record(obj)
    except ValidationError:
        db.rollback()
        raise

    db.commit()
    db.refresh(obj)
    return to_out(obj, today)


def duplicate(db: Session, contract_id, today: date) -> ContractOut:
    source = get_or_404(db, contract_id)

    values = {
        c.name: getattr(source, c.name)
        for c in Contract.__table__.columns
        if c.name not in IMMUTABLE_FIELDS
    }
    values.update({
        "daily_deductions": [],
        "status": ContractStatus.active.value,
        "settlement_status": SettlementStatus.not_ready.value,
        "settlement_request_date": None,
        "settlement_date": None,
    })

    obj = insert_with_next_number(db, Contract(**values))
    logger.info("Duplicated contract #%s into #%s",
                source.contract_number, obj.contract_number)
    return to_out(obj, today)


def delete(db: Session, contract_id) -> dict:
    obj = get_or_404(db, contract_id)
    number = obj.contract_number
    db.delete(obj)
    db.commit()
    logger.info("Deleted contract #%s", number)
    return {"success": True, "message": f"Contract #{number} deleted successfully"}


def _column_values(data: dict) -> dict:
    columns = Contract.__table__.columns
    values = {}
    for k, v in data.items():
        if k == "daily_deductions":
            values[k] = v
        elif k in columns and k not in IMMUTABLE_FIELDS:
            # NOT NULL columns keep their value when a payload clears them
            if v is None and not columns[k].nullable:
                continue
            values[k] = v.value if isinstance(v, Enum) else v
    return values


def _as_uuid(value) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        error_response(
            message=f"Invalid id: {value}",
            status_code=AppStatusCode.INVALID_INPUT,
        )
