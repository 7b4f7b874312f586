"""
Daily deduction schedule: materialization, balance aggregation and payment
allocation.

Every function here is pure. Records coming in are never mutated, updated
copies are returned instead. ``today`` is always an explicit argument so one
computation sees one consistent date.
"""
from datetime import date, timedelta
from decimal import Decimal
from numbers import Number
from typing import Iterable, List, Mapping, NamedTuple, Optional, Union

from ..schemas.contracts.deductions_schemas import DailyDeductionLog
from ..enum.contracts_enum import DeductionStatus
from .errors import DeductionNotFound, InvalidPaymentAmount

ONE_DAY = timedelta(days=1)

Schedule = List[DailyDeductionLog]
ExistingRecords = Union[Mapping[date, DailyDeductionLog], Iterable[DailyDeductionLog]]


class Allocation(NamedTuple):
    schedule: Schedule
    remainder: Decimal


def deduction_id_for(contract_id, day: date) -> str:
    """Stable id, so re-materializing the same day yields the same record."""
    return f"{contract_id}-{day.isoformat()}"


def to_decimal(value) -> Decimal:
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def unpaid_or_pending(day: date, today: date) -> DeductionStatus:
    return DeductionStatus.unpaid if day < today else DeductionStatus.pending


def index_by_date(records: ExistingRecords) -> dict:
    if isinstance(records, Mapping):
        return dict(records)

    indexed = {}
    for record in records:
        if record.date in indexed:
            raise ValueError(f"Duplicate deduction date {record.date.isoformat()}")
        indexed[record.date] = record
    return indexed


def sort_by_date(records: Iterable[DailyDeductionLog]) -> Schedule:
    return sorted(records, key=lambda r: r.date)


def _carry_forward(record: DailyDeductionLog, today: date) -> DailyDeductionLog:
    # an untouched pending day ages into arrears once it is in the past
    if (
        record.status == DeductionStatus.pending
        and record.paid_amount == 0
        and record.date < today
    ):
        return record.model_copy(update={"status": DeductionStatus.unpaid})
    return record.model_copy()


def materialize(
    existing: ExistingRecords,
    execution_date: Optional[date],
    expiry_date: Optional[date],
    daily_amount: Decimal,
    today: date,
    contract_id=None,
) -> Schedule:
    """
    Build one record per day from the day after ``execution_date`` through
    the later of ``expiry_date`` and ``today``.

    Days that already have a record keep it (payment history included); days
    without one get a fresh record for ``daily_amount``. Without both window
    dates the existing records are returned as they are, sorted by date.
    """
    by_date = index_by_date(existing)

    if execution_date is None or expiry_date is None:
        return sort_by_date(r.model_copy() for r in by_date.values())

    amount = to_decimal(daily_amount)
    last_day = max(expiry_date, today)

    schedule = []
    current = execution_date + ONE_DAY
    while current <= last_day:
        record = by_date.get(current)
        if record is not None:
            schedule.append(_carry_forward(record, today))
        else:
            schedule.append(DailyDeductionLog(
                id=deduction_id_for(contract_id, current),
                date=current,
                amount=amount,
                paid_amount=Decimal("0"),
                status=unpaid_or_pending(current, today),
            ))
        current += ONE_DAY

    return sort_by_date(schedule)


def unpaid_balance(schedule: Iterable[DailyDeductionLog]) -> Decimal:
    """Sum of what is still owed; partial records count only their remainder."""
    return sum(
        (r.amount - r.paid_amount for r in schedule if r.status != DeductionStatus.paid),
        Decimal("0"),
    )


def total_paid(schedule: Iterable[DailyDeductionLog]) -> Decimal:
    return sum((r.paid_amount for r in schedule), Decimal("0"))


def validate_payment_amount(amount) -> Decimal:
    if isinstance(amount, bool) or not isinstance(amount, (Number, Decimal)):
        raise InvalidPaymentAmount(f"Payment amount must be numeric, got {amount!r}")

    value = to_decimal(amount)
    if not value.is_finite():
        raise InvalidPaymentAmount(f"Payment amount must be finite, got {amount!r}")
    if value <= 0:
        raise InvalidPaymentAmount("Payment amount must be greater than zero")
    return value


def allocate(schedule: Iterable[DailyDeductionLog], amount) -> Allocation:
    """
    Apply ``amount`` oldest day first. Each unpaid day is topped up until the
    money runs out; what is left after every day is paid comes back as
    ``remainder``.
    """
    remaining = validate_payment_amount(amount)

    updated = []
    for record in sort_by_date(schedule):
        if remaining <= 0 or record.status == DeductionStatus.paid:
            updated.append(record.model_copy())
            continue

        needed = record.amount - record.paid_amount
        payment = min(needed, remaining)
        paid_amount = record.paid_amount + payment
        remaining -= payment

        updated.append(record.model_copy(update={
            "paid_amount": paid_amount,
            "status": DeductionStatus.paid if paid_amount >= record.amount else DeductionStatus.partial,
        }))

    return Allocation(updated, remaining)


def _replace(schedule, deduction_id: str, changes) -> Schedule:
    updated = []
    found = False
    for record in schedule:
        if record.id == deduction_id:
            found = True
            updated.append(record.model_copy(update=changes(record)))
        else:
            updated.append(record.model_copy())

    if not found:
        raise DeductionNotFound(f"Deduction {deduction_id} not found")
    return sort_by_date(updated)


def settle_deduction(schedule: Iterable[DailyDeductionLog], deduction_id: str) -> Schedule:
    """Force one record to fully paid. Other records are left alone."""
    return _replace(
        schedule, deduction_id,
        changes=lambda r: {"paid_amount": r.amount, "status": DeductionStatus.paid},
    )


def cancel_deduction(schedule: Iterable[DailyDeductionLog], deduction_id: str, today: date) -> Schedule:
    """Wipe the payment on one record. The cancelled money is not redistributed."""
    return _replace(
        schedule, deduction_id,
        changes=lambda r: {"paid_amount": Decimal("0"), "status": unpaid_or_pending(r.date, today)},
    )
