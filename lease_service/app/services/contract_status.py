from datetime import date
from typing import NamedTuple

from ..enum.contracts_enum import ContractStatus, SettlementStatus, ShippingStatus


class DerivedStatuses(NamedTuple):
    contract_status: ContractStatus
    settlement_status: SettlementStatus


def is_settlement_ready(contract) -> bool:
    """Delivered, lessee signed, and a settlement document on file."""
    return (
        contract.shipping_status == ShippingStatus.delivered
        and contract.is_lessee_contract_signed is True
        and bool((contract.settlement_document_url or "").strip())
    )


def derive_statuses(contract, today: date) -> DerivedStatuses:
    """
    Apply the automatic transitions only:

    - active -> expired once the expiry date has passed
    - not_ready <-> ready following the settlement prerequisites

    settled, requested and completed are reached by explicit user action and
    are never produced or left here.
    """
    contract_status = ContractStatus(contract.status)
    if (
        contract_status == ContractStatus.active
        and contract.expiry_date is not None
        and contract.expiry_date < today
    ):
        contract_status = ContractStatus.expired

    settlement_status = SettlementStatus(contract.settlement_status)
    ready = is_settlement_ready(contract)
    if settlement_status == SettlementStatus.not_ready and ready:
        settlement_status = SettlementStatus.ready
    elif settlement_status == SettlementStatus.ready and not ready:
        settlement_status = SettlementStatus.not_ready

    return DerivedStatuses(contract_status, settlement_status)
