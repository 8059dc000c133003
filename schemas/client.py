"""
Pydantic schemas for client records.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, ConfigDict, field_validator

from .common import blank_to_none

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class ClientCreate(BaseModel):
     """Schema for registering a client."""
     first_name: str = Field(..., min_length=1, max_length=100)
     last_name: str = Field(..., min_length=1, max_length=100)
     email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
     phone: str = Field(..., min_length=1, max_length=30)
     is_trusted: bool = False

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "first_name": "Jane",
                    "last_name": "Doe",
                    "email": "jane.doe@example.com",
                    "phone": "+33 6 12 34 56 78",
                    "is_trusted": False,
               }
          }
     )

     @field_validator("first_name", "last_name", "email", "phone", mode="before")
     @classmethod
     def strip_text(cls, value):
          return value.strip() if isinstance(value, str) else value


class ClientUpdate(ClientCreate):
     client_id: UUID


class ClientDeleteRequest(BaseModel):
     client_id: UUID
     reason: Optional[str] = Field(None, max_length=500)

     @field_validator("reason", mode="before")
     @classmethod
     def blank_reason_to_none(cls, value):
          return blank_to_none(value)


class ClientResponse(BaseModel):
     """Schema for client response."""
     id: UUID
     tenant_id: UUID
     first_name: str
     last_name: str
     email: Optional[str] = None
     phone: Optional[str] = None
     is_trusted: bool
     created_at: datetime
     updated_at: Optional[datetime] = None

     model_config = ConfigDict(from_attributes=True)
