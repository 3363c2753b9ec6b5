"""
Booster shop endpoints.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_current_user_id, get_db
from app.core.booster_catalog import list_catalog
from app.schemas.booster import (
    ActiveBoosterResponse,
    BoosterResponse,
    PurchaseBoosterRequest,
    PurchaseBoosterResponse,
)
from app.services.booster_service import list_active_boosters, purchase_booster

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/boosters", tags=["Boosters"])


@router.get("", response_model=List[BoosterResponse])
def get_available_boosters():
    """Full booster catalog."""
    return [BoosterResponse.from_booster(b) for b in list_catalog()]


@router.get("/active", response_model=List[ActiveBoosterResponse])
def get_active_boosters(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Boosters the authenticated user currently holds."""
    return [ActiveBoosterResponse.from_active(a) for a in list_active_boosters(db, user_id)]


@router.post("/purchase", response_model=PurchaseBoosterResponse, status_code=status.HTTP_201_CREATED)
def purchase(
    request: PurchaseBoosterRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Buy a booster from the catalog.

    Returns 400 when the booster does not exist or the balance does not
    cover the price (unless useExternalPayment is set).
    """
    success = purchase_booster(
        db,
        user_id,
        request.booster_id,
        use_external_payment=request.use_external_payment,
    )
    if not success:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Failed to purchase booster"
        )
    return PurchaseBoosterResponse(success=True)
