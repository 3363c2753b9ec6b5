"""
Pydantic schemas for plan endpoints.
"""
from datetime import datetime
from pydantic import BaseModel, Field


class PlanResponse(BaseModel):
    """Response schema for GET /api/get-plan."""
    plan_type: str = Field(..., alias="planType", description="free | basic | premium")
    plan_duration: str = Field(..., alias="planDuration", description="monthly | yearly")
    start_date: datetime = Field(..., alias="startDate")
    end_date: datetime = Field(..., alias="endDate")
    status: str = Field(..., description="active | cancelled | expired")
    multiplier: float = Field(..., description="Earnings multiplier of the tier")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "planType": "free",
                "planDuration": "monthly",
                "startDate": "2026-10-01T00:00:00",
                "endDate": "2026-10-31T00:00:00",
                "status": "active",
                "multiplier": 0.1
            }
        }
