# routers/audit_logs.py
"""
Audit log read API.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_session_resolver
from services import audit_service
from .responses import unwrap

router = APIRouter(prefix="/api/audit-logs", tags=["audit-logs"])


@router.get("/{entity_type}/{entity_id}", summary="History of an entity")
def get_entity_audit_logs(
     entity_type: str,
     entity_id: str,
     limit: int = Query(50, ge=1, le=200),
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     payload = {"entity_type": entity_type, "entity_id": entity_id, "limit": limit}
     return unwrap(audit_service.get_entity_audit_logs(db, resolve_user, payload))
