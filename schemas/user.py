"""
Pydantic schemas for staff user management and audit log reads.
"""
from datetime import datetime
from typing import Any, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class UserResponse(BaseModel):
     id: UUID
     email: str
     name: str
     role: str
     is_active: bool
     created_at: datetime

     model_config = ConfigDict(from_attributes=True)


class UserRoleUpdate(BaseModel):
     user_id: UUID
     role: Literal["admin", "agent", "viewer"]


class UserActiveToggle(BaseModel):
     user_id: UUID


class AuditLogEntry(BaseModel):
     id: UUID
     user_id: Optional[UUID] = None
     user_name: Optional[str] = None
     entity_type: str
     entity_id: UUID
     action: str
     changes: Optional[Any] = None
     metadata: Optional[Any] = None
     created_at: datetime


class AuditLogQuery(BaseModel):
     entity_type: Literal["vehicle", "client", "contract", "inspection", "invoice", "user"]
     entity_id: UUID
     limit: int = Field(50, ge=1, le=200)
