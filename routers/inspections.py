# routers/inspections.py
"""
Inspection API routes. Submitting a departure inspection activates its contract.
"""
from typing import Any

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_session_resolver
from services import inspection_service
from .responses import unwrap

router = APIRouter(prefix="/api/inspections", tags=["inspections"])


@router.post("", status_code=status.HTTP_201_CREATED, summary="Open a draft inspection")
def create_draft_inspection(
     body: Any = Body(None, description="InspectionDraftCreate"),
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     return unwrap(inspection_service.create_draft_inspection(db, resolve_user, body))


@router.post("/departure/submit", summary="Submit a departure inspection")
def submit_departure_inspection(
     body: Any = Body(None, description="InspectionSubmit"),
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     return unwrap(inspection_service.submit_departure_inspection(db, resolve_user, body))


@router.post("/return/submit", summary="Submit a return inspection")
def submit_return_inspection(
     body: Any = Body(None, description="InspectionSubmit"),
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     return unwrap(inspection_service.submit_return_inspection(db, resolve_user, body))
