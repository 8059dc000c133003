"""
Pydantic schemas for contract closing and Invoice API request/response validation.
"""
from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional, List
from uuid import UUID

from pydantic import BaseModel, Field, ConfigDict, field_validator

from models.contract import PaymentMethod
from models.invoice import InvoiceStatus
from .common import blank_to_none


class ContractCloseRequest(BaseModel):
     """Schema for closing an active contract with explicit return data."""
     contract_id: UUID = Field(..., description="Contract to close")
     actual_return_date: datetime = Field(..., description="When the vehicle came back")
     return_mileage: int = Field(..., ge=0, description="Odometer reading at return")
     damages_amount: Decimal = Field(Decimal("0"), ge=0, le=100000, decimal_places=2)
     adjustment_amount: Decimal = Field(
          Decimal("0"),
          ge=0,
          le=100000,
          decimal_places=2,
          description="Pre-negotiated reduction subtracted from the total",
     )
     notes: Optional[str] = Field(None, max_length=2000)

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "contract_id": "1b4e28ba-2fa1-11d2-883f-0016d3cca427",
                    "actual_return_date": "2026-03-05T10:15:00",
                    "return_mileage": 48210,
                    "damages_amount": 250.00,
               }
          }
     )

     @field_validator("notes", mode="before")
     @classmethod
     def blank_notes(cls, value):
          return blank_to_none(value)

     @field_validator("damages_amount", "adjustment_amount", mode="before")
     @classmethod
     def missing_amount_is_zero(cls, value):
          return Decimal("0") if value in (None, "") else value


class ReturnValidationRequest(BaseModel):
     """Schema for validating a return from its submitted return inspection."""
     contract_id: UUID
     damages_amount: Decimal = Field(Decimal("0"), ge=0, le=100000, decimal_places=2)

     @field_validator("damages_amount", mode="before")
     @classmethod
     def missing_amount_is_zero(cls, value):
          return Decimal("0") if value in (None, "") else value


class InvoiceLineItem(BaseModel):
     description: str
     quantity: int
     unit_price: str
     total_price: str
     type: Literal["base_rental", "option", "excess_km", "damages", "adjustment"]


class ContractCloseResponse(BaseModel):
     contract_id: UUID
     invoice_id: UUID
     invoice_number: str
     excess_km: int
     excess_km_amount: Decimal
     damages_amount: Decimal
     total_amount: Decimal


class InvoiceStatusUpdate(BaseModel):
     """Schema for a manual invoice status change."""
     invoice_id: UUID
     new_status: Literal["invoiced", "cancelled"]


class InvoicePaymentSummary(BaseModel):
     id: UUID
     amount: Decimal
     method: PaymentMethod
     paid_at: datetime
     reference: Optional[str] = None

     model_config = ConfigDict(from_attributes=True)


class InvoiceResponse(BaseModel):
     """Schema for invoice response."""
     id: UUID
     tenant_id: UUID
     contract_id: UUID
     client_id: UUID
     invoice_number: str
     status: InvoiceStatus
     subtotal: Decimal
     total_amount: Decimal
     paid_amount: Decimal
     balance: Decimal
     line_items: List[InvoiceLineItem] = []
     issued_at: Optional[datetime] = None
     created_at: datetime
     payments: List[InvoicePaymentSummary] = []

     model_config = ConfigDict(from_attributes=True)


class InvoiceListParams(BaseModel):
     page: int = Field(1, ge=1)
     page_size: int = Field(20, ge=1, le=100)
     status: Optional[InvoiceStatus] = None


class InvoiceListResponse(BaseModel):
     """Schema for paginated invoice list response."""
     invoices: List[InvoiceResponse]
     total: int
     page: int = 1
     page_size: int = 20

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "invoices": [],
                    "total": 0,
                    "page": 1,
                    "page_size": 20
               }
          }
     )


class ReturnDamage(BaseModel):
     id: UUID
     zone: str
     type: str
     severity: str
     description: Optional[str] = None

     model_config = ConfigDict(from_attributes=True)


class ReturnValidationPreview(BaseModel):
     """What closing an active contract would bill, before the agent confirms it."""
     contract_id: UUID
     contract_number: str
     departure_mileage: int
     return_mileage: int
     total_km_driven: int
     included_km_per_day: Optional[int] = None
     total_days: int
     included_km: int
     excess_km: int
     excess_km_rate: Optional[Decimal] = None
     excess_km_amount: Decimal
     base_amount: Decimal
     options_amount: Decimal
     current_total_amount: Decimal
     new_damages: List[ReturnDamage] = []
     new_damages_count: int = 0


class InvoiceStatusCounts(BaseModel):
     """Number of the tenant's invoices in each status; every status is present."""
     counts: dict
     total: int
