"""
Pydantic schemas for vehicle records, status changes and vehicle reads.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from models.maintenance import MaintenanceType
from models.vehicle import VehicleStatus
from .common import blank_to_none


class VehicleCreate(BaseModel):
     """Schema for adding a vehicle to the fleet."""
     category_id: UUID = Field(..., description="Category of the tenant")
     brand: str = Field(..., min_length=1, max_length=100)
     model: str = Field(..., min_length=1, max_length=100)
     plate_number: str = Field(..., min_length=1, max_length=20)
     mileage: int = Field(0, ge=0)
     daily_rate_override: Optional[Decimal] = Field(
          None, gt=0, max_digits=10, decimal_places=2, description="Replaces the category rate"
     )

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "category_id": "7c9e6679-7425-40de-944b-e07fc1f90ae7",
                    "brand": "Peugeot",
                    "model": "208",
                    "plate_number": "AB-123-CD",
                    "mileage": 12000,
               }
          }
     )

     @field_validator("brand", "model", mode="before")
     @classmethod
     def strip_text(cls, value):
          return value.strip() if isinstance(value, str) else value

     @field_validator("plate_number", mode="before")
     @classmethod
     def normalize_plate(cls, value):
          return value.strip().upper() if isinstance(value, str) else value

     @field_validator("daily_rate_override", mode="before")
     @classmethod
     def blank_rate_to_none(cls, value):
          return blank_to_none(value)


class VehicleUpdate(VehicleCreate):
     """Full update of a vehicle record; status is changed separately."""
     vehicle_id: UUID


class VehicleStatusChangeRequest(BaseModel):
     """Schema for a manual vehicle status change."""
     vehicle_id: UUID = Field(..., description="Vehicle to update")
     new_status: VehicleStatus = Field(..., description="Target status")
     reason: Optional[str] = Field(None, max_length=500, description="Why the status changes")
     create_maintenance_record: bool = Field(False, description="Open a maintenance record in the same transaction")
     maintenance_description: Optional[str] = Field(None, max_length=2000)
     maintenance_type: Optional[MaintenanceType] = None

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "vehicle_id": "0f8fad5b-d9cb-469f-a165-70867728950e",
                    "new_status": "maintenance",
                    "reason": "Brake noise reported by client",
                    "create_maintenance_record": True,
                    "maintenance_description": "Check front brake pads",
                    "maintenance_type": "repair",
               }
          }
     )

     @field_validator("reason", "maintenance_description", mode="before")
     @classmethod
     def blank_strings_to_none(cls, value):
          return blank_to_none(value)

     @model_validator(mode="after")
     def maintenance_fields_required(self):
          if self.create_maintenance_record and not self.maintenance_description:
               raise ValueError("Maintenance description is required")
          if self.create_maintenance_record and self.maintenance_type is None:
               raise ValueError("Maintenance type is required")
          return self


class VehicleStatusChangeResponse(BaseModel):
     id: UUID
     previous_status: VehicleStatus
     new_status: VehicleStatus
     maintenance_record_id: Optional[UUID] = None


class VehicleResponse(BaseModel):
     """Schema for vehicle response."""
     id: UUID
     tenant_id: UUID
     category_id: Optional[UUID] = None
     brand: str
     model: str
     plate_number: str
     mileage: int
     daily_rate_override: Optional[Decimal] = None
     status: VehicleStatus
     created_at: datetime

     model_config = ConfigDict(from_attributes=True)


class VehicleListParams(BaseModel):
     page: int = Field(1, ge=1)
     page_size: int = Field(20, ge=1, le=100)
     status: Optional[VehicleStatus] = None


class VehicleListResponse(BaseModel):
     vehicles: List[VehicleResponse]
     total: int
     page: int = 1
     page_size: int = 20
