"""Customer domain schemas - Pydantic models for customer identity"""

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_phone


class CustomerInput(BaseModel):
    """Customer details entered in the booking wizard"""

    name: str = Field(..., min_length=1, max_length=255)
    phone: str

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be blank")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_phone(v)
