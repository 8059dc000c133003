# routers/users.py
"""
Staff user API routes: listing, role changes and (de)activation.
"""
from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_session_resolver
from services import user_service
from .responses import unwrap, with_fields

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", summary="List users of the tenant")
def list_users(
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     return unwrap(user_service.list_users(db, resolve_user))


@router.patch("/{user_id}/role", summary="Change a user's role")
def update_user_role(
     user_id: str,
     body: Any = Body(None, description='{"role": "admin" | "agent" | "viewer"}'),
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     return unwrap(user_service.update_user_role(db, resolve_user, with_fields(body, user_id=user_id)))


@router.post("/{user_id}/toggle-active", summary="Activate or deactivate a user")
def toggle_user_active(
     user_id: str,
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     return unwrap(user_service.toggle_user_active(db, resolve_user, {"user_id": user_id}))
