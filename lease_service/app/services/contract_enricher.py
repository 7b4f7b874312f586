from datetime import date, timedelta
from typing import Optional

from ..enum.contracts_enum import ContractStatus
from ..schemas.contracts.contracts_schemas import ContractOut, ContractRecord
from .contract_status import derive_statuses
from .deduction_schedule import materialize, total_paid, unpaid_balance


def expiry_for(execution_date: Optional[date], duration_days: Optional[int]) -> Optional[date]:
    if execution_date is None or not duration_days or duration_days <= 0:
        return None
    return execution_date + timedelta(days=duration_days)


def enrich_contract(record: ContractRecord, today: date, partner_name: Optional[str] = None) -> ContractOut:
    """
    Turn a parsed storage row into the in-memory contract the UI works with:
    amounts scaled by units, full deduction schedule, unpaid balance and the
    automatically advanced statuses. Nothing here is persisted.
    """
    units = record.units_required
    scaled_total = record.total_amount * units
    scaled_daily = record.daily_deduction * units

    schedule = materialize(
        record.daily_deductions,
        record.execution_date,
        record.expiry_date,
        scaled_daily,
        today,
        contract_id=record.id,
    )

    derived = derive_statuses(record, today)
    paid = total_paid(schedule)

    overdue_days = 0
    if (
        record.expiry_date is not None
        and record.expiry_date < today
        and derived.contract_status != ContractStatus.settled
    ):
        overdue_days = (today - record.expiry_date).days

    return ContractOut.model_validate({
        **record.model_dump(exclude={"daily_deductions"}),
        "daily_deductions": schedule,
        "total_amount": scaled_total,
        "daily_deduction": scaled_daily,
        "status": derived.contract_status,
        "settlement_status": derived.settlement_status,
        "unpaid_balance": unpaid_balance(schedule),
        "total_paid": paid,
        "remaining_amount": scaled_total - paid,
        "overdue_days": overdue_days,
        "overdue_charge": scaled_daily * overdue_days,
        "partner_name": partner_name,
    })
