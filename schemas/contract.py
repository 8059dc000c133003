"""
Pydantic schemas for rental contract API request/response validation.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from models.contract import ContractStatus, PaymentMethod
from .common import blank_to_none


class ContractCreate(BaseModel):
     """Schema for creating a draft rental contract."""
     vehicle_id: UUID = Field(..., description="Vehicle to rent")
     client_id: UUID = Field(..., description="Renting client")
     start_date: datetime = Field(..., description="Pickup date and time")
     end_date: datetime = Field(..., description="Planned return date and time")
     payment_method: PaymentMethod = Field(default=PaymentMethod.INVOICE)
     selected_option_ids: List[UUID] = Field(default_factory=list)
     included_km_per_day: Optional[int] = Field(None, ge=0, le=10000)
     excess_km_rate: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
     deposit_amount: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
     terms_accepted: bool = Field(False, description="Client accepted the general conditions")
     notes: Optional[str] = Field(None, max_length=2000)

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "vehicle_id": "0f8fad5b-d9cb-469f-a165-70867728950e",
                    "client_id": "7c9e6679-7425-40de-944b-e07fc1f90ae7",
                    "start_date": "2026-03-02T09:00:00",
                    "end_date": "2026-03-05T09:00:00",
                    "payment_method": "invoice",
                    "selected_option_ids": [],
                    "included_km_per_day": 200,
                    "excess_km_rate": 0.35,
               }
          }
     )

     @field_validator("notes", mode="before")
     @classmethod
     def blank_notes(cls, value):
          return blank_to_none(value)

     @model_validator(mode="after")
     def end_after_start(self):
          if self.end_date <= self.start_date:
               raise ValueError("End date must be after start date")
          return self


class ContractApproveRequest(BaseModel):
     """
     Schema for approving a draft contract. When terms_accepted is omitted
     the value stored on the contract is used.
     """
     contract_id: UUID
     terms_accepted: Optional[bool] = None


class ContractCancelRequest(BaseModel):
     contract_id: UUID
     reason: Optional[str] = Field(None, max_length=500)


class ContractOptionResponse(BaseModel):
     name: str
     daily_price: Decimal
     quantity: int
     total_price: Decimal

     model_config = ConfigDict(from_attributes=True)


class ContractResponse(BaseModel):
     """Schema for rental contract response."""
     id: UUID
     tenant_id: UUID
     contract_number: str
     client_id: UUID
     vehicle_id: UUID
     status: ContractStatus
     start_date: datetime
     end_date: datetime
     actual_return_date: Optional[datetime] = None
     daily_rate: Decimal
     total_days: int
     base_amount: Decimal
     options_amount: Decimal
     adjustment_amount: Decimal
     excess_km_amount: Optional[Decimal] = None
     damages_amount: Optional[Decimal] = None
     total_amount: Decimal
     deposit_amount: Optional[Decimal] = None
     departure_mileage: Optional[int] = None
     return_mileage: Optional[int] = None
     terms_accepted: bool
     payment_method: PaymentMethod
     options: List[ContractOptionResponse] = []
     created_at: datetime

     model_config = ConfigDict(from_attributes=True)


class ContractStatusResponse(BaseModel):
     """Schema returned by lifecycle transitions."""
     contract_id: UUID
     previous_status: ContractStatus
     status: ContractStatus
