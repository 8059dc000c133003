# routers/payments.py
"""
Payment API.

POST /api/payments: record money received against an invoice (admins only).
Appends a hash-chained payment record and marks the invoice PAID once settled.
GET /api/payments/verify: recheck the tenant's payment chain.
"""
from typing import Any

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_session_resolver
from services import payment_service
from .responses import unwrap

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.post("", status_code=status.HTTP_201_CREATED, summary="Record a payment")
def process_payment(
     body: Any = Body(None, description="PaymentCreate"),
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     return unwrap(payment_service.process_payment(db, resolve_user, body))


@router.get("/verify", summary="Verify the payment chain")
def verify_payments(
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     return unwrap(payment_service.verify_payments(db, resolve_user))
