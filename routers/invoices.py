# routers/invoices.py
"""
Invoice API routes for the rental backend.

Invoices are created by closing a contract (see routers/contracts.py);
here they are listed, counted, read and moved to invoiced / cancelled.
"""
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_session_resolver
from models.invoice import InvoiceStatus
from services import invoice_service
from .responses import unwrap, with_fields

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


@router.get("", summary="List invoices")
def list_invoices(
     page: int = Query(1, ge=1, description="Page number"),
     page_size: int = Query(20, ge=1, le=100, description="Items per page"),
     status: Optional[InvoiceStatus] = Query(None, description="Filter by status"),
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     """
     Retrieve a paginated list of the tenant's invoices, newest first.
     """
     params = {"page": page, "page_size": page_size, "status": status}
     return unwrap(invoice_service.list_invoices(db, resolve_user, params))


@router.get("/status-counts", summary="Count invoices per status")
def get_invoice_status_counts(
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     return unwrap(invoice_service.get_invoice_status_counts(db, resolve_user))


@router.get("/{invoice_id}", summary="Get invoice by ID")
def get_invoice(
     invoice_id: str,
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     """Invoice with its line items, payments and outstanding balance."""
     return unwrap(invoice_service.get_invoice(db, resolve_user, invoice_id))


@router.patch("/{invoice_id}/status", summary="Change invoice status")
def update_invoice_status(
     invoice_id: str,
     body: Any = Body(None, description='{"new_status": "invoiced" | "cancelled"}'),
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     payload = with_fields(body, invoice_id=invoice_id)
     return unwrap(invoice_service.update_invoice_status(db, resolve_user, payload))
