"""
Pydantic schemas for departure / return inspections.
"""
from typing import Literal, Optional, List
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from models.inspection import FuelLevel, InspectionType
from .common import blank_to_none


class InspectionDamageInput(BaseModel):
     zone: Literal["front", "rear", "left_side", "right_side", "roof", "interior"]
     type: Literal["scratch", "dent", "broken", "stain", "other"]
     severity: Literal["low", "medium", "high"]
     description: Optional[str] = Field(None, max_length=1000)
     is_pre_existing: bool = True

     @field_validator("description", mode="before")
     @classmethod
     def blank_description(cls, value):
          return blank_to_none(value)


class InspectionDraftCreate(BaseModel):
     """Open a draft inspection for a contract."""
     contract_id: UUID
     type: InspectionType = InspectionType.DEPARTURE


class InspectionSubmit(BaseModel):
     """Finalize a draft inspection."""
     inspection_id: UUID
     mileage: int = Field(..., ge=0, description="Odometer reading in km")
     fuel_level: FuelLevel
     notes: Optional[str] = Field(None, max_length=5000)
     damages: List[InspectionDamageInput] = Field(default_factory=list)

     @field_validator("notes", mode="before")
     @classmethod
     def blank_notes(cls, value):
          return blank_to_none(value)


class InspectionResponse(BaseModel):
     inspection_id: UUID
     contract_id: UUID
     type: InspectionType
     is_draft: bool
     mileage: int
     damage_count: int = 0
