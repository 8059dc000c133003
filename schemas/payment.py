"""
Pydantic schemas for payment processing API.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, ConfigDict, field_validator

from models.contract import PaymentMethod
from .common import blank_to_none


class PaymentCreate(BaseModel):
     """Request body for POST /api/payments."""

     invoice_id: UUID = Field(..., description="Invoice the payment settles")
     amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2, description="Amount received")
     method: PaymentMethod = Field(..., description="How the money was received")
     paid_at: datetime = Field(..., description="When the money was received")
     reference: Optional[str] = Field(None, max_length=255, description="Receipt or bank reference")
     notes: Optional[str] = Field(None, max_length=2000)

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "invoice_id": "6fa459ea-ee8a-3ca4-894e-db77e160355e",
                    "amount": 420.00,
                    "method": "card",
                    "paid_at": "2026-03-05T10:30:00",
                    "reference": "POS-000184",
               }
          }
     )

     @field_validator("reference", "notes", mode="before")
     @classmethod
     def blank_strings(cls, value):
          return blank_to_none(value)


class PaymentResponse(BaseModel):
     """Response for POST /api/payments."""

     payment_id: UUID = Field(..., description="Created payment")
     invoice_id: UUID = Field(..., description="Invoice that was paid")
     transaction_hash: str = Field(..., description="Ledger hash for client verification")
     balance: Decimal = Field(..., description="Outstanding balance after this payment")
     invoice_status: str = Field(..., description="Invoice status after the payment")


class PaymentChainVerification(BaseModel):
     verified: bool
     message: str
     entries_checked: int
