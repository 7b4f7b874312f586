# lease_service/app/crud/contracts/partners_crud.py
import uuid
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from shared.core.schemas import Lookup
from shared.helpers.json_response_helper import error_response
from shared.utils.app_status_code import AppStatusCode

from ...models.contracts.contracts import Contract
from ...models.contracts.partners import Partner
from ...schemas.contracts.partners_schemas import (
    PartnerCreate, PartnerListResponse, PartnerOut, PartnerRequest, PartnerUpdate,
    PriceTier, PriceTierCreate
)


def build_filters(params: PartnerRequest):
    filters = []

    if params.is_template is not None:
        filters.append(Partner.is_template == params.is_template)

    if params.search:
        filters.append(Partner.name.ilike(f"%{params.search}%"))

    return filters


def get_list(db: Session, params: PartnerRequest) -> PartnerListResponse:
    q = db.query(Partner).filter(*build_filters(params)).order_by(Partner.name)

    total = q.count()
    rows = q.offset(params.skip).limit(params.limit).all()

    return {"partners": [PartnerOut.model_validate(r) for r in rows], "total": total}


def partner_lookup(db: Session) -> List[Lookup]:
    rows = (
        db.query(Partner.id, Partner.name)
        .filter(Partner.is_template == False)
        .order_by(Partner.name)
        .all()
    )
    return [Lookup(id=r.id, name=r.name) for r in rows]


def get_by_id(db: Session, partner_id) -> Optional[Partner]:
    try:
        key = partner_id if isinstance(partner_id, UUID) else UUID(str(partner_id))
    except ValueError:
        return None
    return db.query(Partner).filter(Partner.id == key).first()


def get_or_404(db: Session, partner_id) -> Partner:
    obj = get_by_id(db, partner_id)
    if not obj:
        error_response(
            message="Partner not found",
            status_code=AppStatusCode.RECORD_NOT_FOUND,
            http_status=404,
        )
    return obj


def create(db: Session, payload: PartnerCreate) -> PartnerOut:
    tiers = [_new_tier(t) for t in (payload.price_list or [])]
    _ensure_unique_tiers(tiers)

    obj = Partner(
        name=payload.name,
        business_number=payload.business_number,
        address=payload.address,
        is_template=bool(payload.is_template),
        price_list=_dump_tiers(tiers),
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return PartnerOut.model_validate(obj)


def update(db: Session, payload: PartnerUpdate) -> PartnerOut:
    obj = get_or_404(db, payload.id)

    for k, v in payload.model_dump(exclude_unset=True, exclude={"id"}).items():
        if v is None and k in ("name", "is_template"):
            continue
        setattr(obj, k, v)

    db.commit()
    db.refresh(obj)
    return PartnerOut.model_validate(obj)


def delete(db: Session, partner_id) -> dict:
    obj = get_or_404(db, partner_id)

    in_use = db.query(Contract.id).filter(Contract.partner_id == obj.id).count()
    if in_use:
        error_response(
            message=f"Partner has {in_use} contract(s) and cannot be deleted",
        )

    db.delete(obj)
    db.commit()
    return {"success": True, "message": "Partner deleted successfully"}


# ----------------------------------------------------
# Price tiers
# ----------------------------------------------------
def get_price_list(obj: Partner) -> List[PriceTier]:
    return [PriceTier.model_validate(t) for t in (obj.price_list or [])]


def add_price_tier(db: Session, partner_id, payload: PriceTierCreate) -> PartnerOut:
    obj = get_or_404(db, partner_id)
    tiers = get_price_list(obj)
    tiers.append(_new_tier(payload))
    _ensure_unique_tiers(tiers)
    return _save_tiers(db, obj, tiers)


def update_price_tier(db: Session, partner_id, tier_id: str, payload: PriceTierCreate) -> PartnerOut:
    obj = get_or_404(db, partner_id)
    tiers = get_price_list(obj)

    for i, tier in enumerate(tiers):
        if tier.id == tier_id:
            tiers[i] = PriceTier(id=tier_id, **payload.model_dump())
            break
    else:
        error_response(
            message="Price tier not found",
            status_code=AppStatusCode.RECORD_NOT_FOUND,
            http_status=404,
        )

    _ensure_unique_tiers(tiers)
    return _save_tiers(db, obj, tiers)


def delete_price_tier(db: Session, partner_id, tier_id: str) -> PartnerOut:
    obj = get_or_404(db, partner_id)
    tiers = get_price_list(obj)
    remaining = [t for t in tiers if t.id != tier_id]
    if len(remaining) == len(tiers):
        error_response(
            message="Price tier not found",
            status_code=AppStatusCode.RECORD_NOT_FOUND,
            http_status=404,
        )
    return _save_tiers(db, obj, remaining)


def copy_from_template(db: Session, partner_id, template_id) -> PartnerOut:
    """Append the template's tiers, skipping model/storage/duration combos already priced."""
    obj = get_or_404(db, partner_id)
    template = get_or_404(db, template_id)
    if not template.is_template:
        error_response(message="Selected partner is not a price template")

    tiers = get_price_list(obj)
    existing = {t.key() for t in tiers}
    for tier in get_price_list(template):
        if tier.key() not in existing:
            tiers.append(_new_tier(tier))
            existing.add(tier.key())

    return _save_tiers(db, obj, tiers)


def model_lookup(db: Session, partner_id) -> List[str]:
    tiers = get_price_list(get_or_404(db, partner_id))
    return _unique(t.model for t in tiers)


def storage_lookup(db: Session, partner_id, model: str) -> List[str]:
    tiers = get_price_list(get_or_404(db, partner_id))
    return _unique(t.storage for t in tiers if t.model == model)


def duration_lookup(db: Session, partner_id, model: str, storage: str) -> List[int]:
    tiers = get_price_list(get_or_404(db, partner_id))
    return _unique(t.duration_days for t in tiers if t.model == model and t.storage == storage)


def resolve_price_tier(db: Session, partner_id, model: str, storage: str, duration_days: int) -> Optional[PriceTier]:
    obj = get_or_404(db, partner_id)
    for tier in get_price_list(obj):
        if tier.key() == (model, storage, duration_days):
            return tier
    return None


def _new_tier(payload) -> PriceTier:
    return PriceTier(id=str(uuid.uuid4()), **PriceTierCreate.model_validate(payload.model_dump()).model_dump())


def _ensure_unique_tiers(tiers: List[PriceTier]):
    seen = set()
    for tier in tiers:
        if tier.key() in seen:
            error_response(
                message=f"Price tier {tier.model} {tier.storage} / {tier.duration_days} days already exists",
                status_code=AppStatusCode.DUPLICATE_RECORD,
            )
        seen.add(tier.key())


def _dump_tiers(tiers: List[PriceTier]) -> list:
    return [t.model_dump(mode="json") for t in tiers]


def _save_tiers(db: Session, obj: Partner, tiers: List[PriceTier]) -> PartnerOut:
    obj.price_list = _dump_tiers(tiers)
    db.commit()
    db.refresh(obj)
    return PartnerOut.model_validate(obj)


def _unique(values) -> list:
    seen = []
    for v in values:
        if v not in seen:
            seen.append(v)
    return seen
