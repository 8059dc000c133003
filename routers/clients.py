# routers/clients.py
"""
Client API routes: registration, edits, trust flag and soft deletion.
"""
from typing import Any

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_session_resolver
from services import client_service
from .responses import unwrap, with_fields

router = APIRouter(prefix="/api/clients", tags=["clients"])


@router.post("", status_code=status.HTTP_201_CREATED, summary="Register a client")
def create_client(
     body: Any = Body(None, description="ClientCreate"),
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     return unwrap(client_service.create_client(db, resolve_user, body))


@router.get("/{client_id}", summary="Get a client")
def get_client(
     client_id: str,
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     return unwrap(client_service.get_client(db, resolve_user, client_id))


@router.put("/{client_id}", summary="Update a client")
def update_client(
     client_id: str,
     body: Any = Body(None, description="ClientUpdate without client_id"),
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     return unwrap(client_service.update_client(db, resolve_user, with_fields(body, client_id=client_id)))


@router.post("/{client_id}/toggle-trusted", summary="Flip the client's trust flag")
def toggle_client_trusted(
     client_id: str,
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     return unwrap(client_service.toggle_client_trusted(db, resolve_user, client_id))


@router.delete("/{client_id}", summary="Soft-delete a client")
def soft_delete_client(
     client_id: str,
     reason: str = None,
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     """Refused while the client has a contract that is neither completed nor cancelled."""
     payload = {"client_id": client_id, "reason": reason}
     return unwrap(client_service.soft_delete_client(db, resolve_user, payload))
