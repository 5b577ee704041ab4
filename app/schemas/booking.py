"""
Pydantic schemas for public booking and business-side appointment updates
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.models.appointment import AppointmentStatus

CANCELLATION_REASON_MIN = 5
CANCELLATION_REASON_MAX = 500


class CustomerInfo(BaseModel):
    """Customer details supplied with a public booking"""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=6, max_length=20)
    email: Optional[EmailStr] = None

    @field_validator("first_name", "last_name", "phone")
    @classmethod
    def strip_text(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        digits = v.replace("+", "").replace(" ", "").replace("-", "")
        if not digits.isdigit():
            raise ValueError("Phone must contain digits, spaces, dashes or a leading +")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.lower() if v else v


class BookingRequest(BaseModel):
    service_id: UUID
    appointment_datetime: datetime
    customer: CustomerInfo
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("appointment_datetime")
    @classmethod
    def drop_timezone(cls, v: datetime):
        # appointment times are wall-clock times of the business
        return v.replace(tzinfo=None, second=0, microsecond=0)


class CancelRequest(BaseModel):
    reason: str = Field(..., min_length=CANCELLATION_REASON_MIN, max_length=CANCELLATION_REASON_MAX)


class StatusUpdateRequest(BaseModel):
    status: AppointmentStatus
    reason: Optional[str] = Field(None, min_length=CANCELLATION_REASON_MIN, max_length=CANCELLATION_REASON_MAX)
