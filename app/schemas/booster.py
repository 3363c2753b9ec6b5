"""
Pydantic schemas for booster endpoints.
"""
from typing import Optional
from pydantic import BaseModel, Field

from app.core.booster_catalog import Booster
from app.core.clock import to_epoch_ms
from app.services.booster_service import ActiveBooster


class BoosterResponse(BaseModel):
    """Catalog entry as shown in the booster shop."""
    id: str = Field(..., description="Catalog id")
    name: str = Field(..., description="Display name")
    description: str = Field(..., description="Display description")
    multiplier: float = Field(..., description="Earnings multiplier while active")
    duration: int = Field(..., description="Duration in milliseconds, 0 for one-time and permanent")
    price: float = Field(..., description="Price in balance units")
    type: str = Field(..., description="oneTime | duration | permanent")

    class Config:
        json_schema_extra = {
            "example": {
                "id": "hour-boost",
                "name": "Hour Power",
                "description": "1.5x multiplier for 1 hour",
                "multiplier": 1.5,
                "duration": 3600000,
                "price": 250,
                "type": "duration"
            }
        }

    @classmethod
    def from_booster(cls, booster: Booster) -> "BoosterResponse":
        return cls(
            id=booster.id,
            name=booster.name,
            description=booster.description,
            multiplier=booster.multiplier,
            duration=booster.duration,
            price=booster.price,
            type=booster.type,
        )


class ActiveBoosterResponse(BoosterResponse):
    """A booster the user holds, merged with its catalog entry."""
    activated_at: int = Field(..., alias="activatedAt", description="Activation time (epoch ms)")
    expires_at: Optional[int] = Field(None, alias="expiresAt", description="Expiry (epoch ms), duration boosters only")
    user_id: int = Field(..., alias="userId", description="Owner")

    class Config:
        populate_by_name = True

    @classmethod
    def from_active(cls, active: ActiveBooster) -> "ActiveBoosterResponse":
        booster = active.booster
        return cls(
            id=booster.id,
            name=booster.name,
            description=booster.description,
            multiplier=booster.multiplier,
            duration=booster.duration,
            price=booster.price,
            type=booster.type,
            activated_at=to_epoch_ms(active.activated_at),
            expires_at=to_epoch_ms(active.expires_at) if active.expires_at else None,
            user_id=active.user_id,
        )


class PurchaseBoosterRequest(BaseModel):
    """Request schema for buying a booster."""
    booster_id: str = Field(..., alias="boosterId", min_length=1, description="Catalog id")
    use_external_payment: bool = Field(
        default=False,
        alias="useExternalPayment",
        description="Payment already settled outside the app balance"
    )

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "boosterId": "quick-boost",
                "useExternalPayment": False
            }
        }


class PurchaseBoosterResponse(BaseModel):
    success: bool
