# routers/contracts.py
"""
Rental contract API routes: lifecycle transitions, closing and return validation.
"""
from typing import Any

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_session_resolver
from services import contract_service, invoice_service
from .responses import unwrap, with_fields

router = APIRouter(prefix="/api/contracts", tags=["contracts"])


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a draft contract")
def create_contract(
     body: Any = Body(None, description="ContractCreate"),
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     return unwrap(contract_service.create_draft_contract(db, resolve_user, body))


@router.post("/close", summary="Close an active contract and generate its invoice")
def close_contract(
     body: Any = Body(None, description="ContractCloseRequest"),
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     return unwrap(invoice_service.close_contract_and_generate_invoice(db, resolve_user, body))


@router.post("/validate-return", summary="Validate a return from its return inspection")
def validate_return(
     body: Any = Body(None, description="ReturnValidationRequest"),
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     return unwrap(invoice_service.validate_return(db, resolve_user, body))


@router.get("/{contract_id}", summary="Get a contract")
def get_contract(
     contract_id: str,
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     return unwrap(contract_service.get_contract(db, resolve_user, contract_id))


@router.get("/{contract_id}/return-preview", summary="Preview the billing of a return")
def get_return_validation_preview(
     contract_id: str,
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     """Excess kilometres and new damages of an active contract, before it is closed."""
     return unwrap(invoice_service.get_return_validation_preview(db, resolve_user, contract_id))


@router.post("/{contract_id}/approve", summary="Approve a draft contract")
def approve_contract(
     contract_id: str,
     body: Any = Body(None, description='{"terms_accepted": bool}'),
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     payload = with_fields(body, contract_id=contract_id)
     return unwrap(contract_service.approve_contract(db, resolve_user, payload))


@router.post("/{contract_id}/activate", summary="Activate an approved contract")
def activate_contract(
     contract_id: str,
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     return unwrap(contract_service.activate_contract(db, resolve_user, contract_id))


@router.post("/{contract_id}/cancel", summary="Cancel a contract")
def cancel_contract(
     contract_id: str,
     body: Any = Body(None, description='{"reason": str}'),
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     payload = with_fields(body, contract_id=contract_id)
     return unwrap(contract_service.cancel_contract(db, resolve_user, payload))
