"""
Pydantic schemas for maintenance records.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from models.maintenance import MaintenanceType, MaintenanceUrgency
from .common import blank_to_none


class MaintenanceCreate(BaseModel):
     vehicle_id: UUID
     type: MaintenanceType
     description: str = Field(..., min_length=1, max_length=2000)
     start_date: datetime
     estimated_cost: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
     mechanic_name: Optional[str] = Field(None, max_length=255)
     urgency: MaintenanceUrgency = MaintenanceUrgency.MEDIUM
     notes: Optional[str] = Field(None, max_length=2000)

     @field_validator("estimated_cost", "mechanic_name", "notes", mode="before")
     @classmethod
     def blank_strings(cls, value):
          return blank_to_none(value)


class MaintenanceClose(BaseModel):
     maintenance_id: UUID
     end_date: datetime
     final_cost: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
     notes: Optional[str] = Field(None, max_length=2000)

     @field_validator("final_cost", "notes", mode="before")
     @classmethod
     def blank_strings(cls, value):
          return blank_to_none(value)


class MaintenanceResponse(BaseModel):
     id: UUID
     vehicle_id: UUID
     status: str
     vehicle_status: str
