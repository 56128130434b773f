"""Fleet domain schemas - Pydantic models for B2B fleet leads"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...models import FleetLeadStatus
from ...shared.validators import validate_phone


class FleetLeadCreate(BaseModel):
    """Schema for the business page lead form"""

    company_name: str = Field(..., min_length=1, max_length=255)
    contact_person: str = Field(..., min_length=1, max_length=255)
    phone: str
    status: FleetLeadStatus = FleetLeadStatus.NEW
    notes: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_phone(v)


class FleetLeadUpdate(BaseModel):
    status: Optional[FleetLeadStatus] = None
    notes: Optional[str] = None


class FleetLeadResponse(BaseModel):
    id: int
    company_name: str
    contact_person: str
    phone: str
    status: FleetLeadStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
