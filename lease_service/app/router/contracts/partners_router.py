from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from shared.core.database import get_lease_db as get_db
from shared.core.schemas import Lookup
from ...crud.contracts import partners_crud as crud
from ...schemas.contracts.partners_schemas import (
    CopyTemplateRequest, PartnerCreate, PartnerListResponse, PartnerOut, PartnerRequest, PartnerUpdate,
    PriceTier, PriceTierCreate,
)

router = APIRouter(
    prefix="/api/partners",
    tags=["partners"],
)


@router.get("/all", response_model=PartnerListResponse)
def get_partners(
    params: PartnerRequest = Depends(),
    db: Session = Depends(get_db),
):
    return crud.get_list(db, params)


@router.get("/partner-lookup", response_model=List[Lookup])
def partner_lookup(db: Session = Depends(get_db)):
    return crud.partner_lookup(db)


@router.get("/{partner_id}", response_model=PartnerOut)
def get_partner(partner_id: str, db: Session = Depends(get_db)):
    return PartnerOut.model_validate(crud.get_or_404(db, partner_id))


@router.post("/", response_model=PartnerOut)
def create_partner(payload: PartnerCreate, db: Session = Depends(get_db)):
    try:
        return crud.create(db, payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/", response_model=PartnerOut)
def update_partner(payload: PartnerUpdate, db: Session = Depends(get_db)):
    return crud.update(db, payload)


@router.delete("/{partner_id}", response_model=None)
def delete_partner(
    partner_id: str,
    db: Session = Depends(get_db),
): return crud.delete(db, partner_id)


# ----------------------------------------------------
# Price tiers
# ----------------------------------------------------
@router.post("/{partner_id}/price-tiers", response_model=PartnerOut)
def add_price_tier(partner_id: str, payload: PriceTierCreate, db: Session = Depends(get_db)):
    return crud.add_price_tier(db, partner_id, payload)


@router.put("/{partner_id}/price-tiers/{tier_id}", response_model=PartnerOut)
def update_price_tier(partner_id: str, tier_id: str, payload: PriceTierCreate, db: Session = Depends(get_db)):
    return crud.update_price_tier(db, partner_id, tier_id, payload)


@router.delete("/{partner_id}/price-tiers/{tier_id}", response_model=PartnerOut)
def delete_price_tier(partner_id: str, tier_id: str, db: Session = Depends(get_db)):
    return crud.delete_price_tier(db, partner_id, tier_id)


@router.post("/{partner_id}/copy-template", response_model=PartnerOut)
def copy_from_template(partner_id: str, payload: CopyTemplateRequest, db: Session = Depends(get_db)):
    return crud.copy_from_template(db, partner_id, payload.template_id)


@router.get("/{partner_id}/model-lookup", response_model=List[str])
def model_lookup(partner_id: str, db: Session = Depends(get_db)):
    return crud.model_lookup(db, partner_id)


@router.get("/{partner_id}/storage-lookup", response_model=List[str])
def storage_lookup(
    partner_id: str,
    model: str = Query(),
    db: Session = Depends(get_db),
):
    return crud.storage_lookup(db, partner_id, model)


@router.get("/{partner_id}/duration-lookup", response_model=List[int])
def duration_lookup(
    partner_id: str,
    model: str = Query(),
    storage: str = Query(),
    db: Session = Depends(get_db),
):
    return crud.duration_lookup(db, partner_id, model, storage)


@router.get("/{partner_id}/price-tier", response_model=PriceTier)
def resolve_price_tier(
    partner_id: str,
    model: str = Query(),
    storage: str = Query(),
    duration_days: int = Query(gt=0),
    db: Session = Depends(get_db),
):
    tier = crud.resolve_price_tier(db, partner_id, model, storage, duration_days)
    if tier is None:
        raise HTTPException(status_code=404, detail="Price tier not found")
    return tier
