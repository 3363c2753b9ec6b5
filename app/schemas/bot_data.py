"""
Pydantic schemas for simulated bot data.
"""
from pydantic import BaseModel, Field


class DataPointResponse(BaseModel):
    """One accrual event for the earnings chart."""
    timestamp: int = Field(..., description="Unix timestamp in milliseconds")
    value: float = Field(..., description="Profit/loss credited to the balance")

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "timestamp": 1760695200000,
                "value": 0.0042
            }
        }
