"""
Audit log service.

Entries are written inside the caller's transaction (flush only) as the
last step of a workflow, so they commit or roll back with the change they
describe.
"""
import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from models import AuditLog, User
from schemas.user import AuditLogEntry, AuditLogQuery
from .guards import require_permission
from .rbac import Action, Capability, Resource, has_special_permission
from .results import parse, workflow

logger = logging.getLogger(__name__)


def _jsonable(value: Any) -> Any:
     if isinstance(value, dict):
          return {str(k): _jsonable(v) for k, v in value.items()}
     if isinstance(value, (list, tuple)):
          return [_jsonable(v) for v in value]
     if value is None or isinstance(value, (bool, int, float)):
          return value
     if hasattr(value, "value") and isinstance(getattr(value, "value"), str):
          return value.value
     if hasattr(value, "isoformat"):
          return value.isoformat()
     return str(value)


def create_audit_log(
     db: Session,
     tenant_id,
     user_id,
     action: str,
     entity_type: str,
     entity_id,
     changes: Optional[dict] = None,
     metadata: Optional[dict] = None,
) -> AuditLog:
     """Append an audit entry. Enums, decimals, ids and dates are stored as strings."""
     entry = AuditLog(
          tenant_id=tenant_id,
          user_id=user_id,
          action=action,
          entity_type=entity_type,
          entity_id=entity_id,
          changes=_jsonable(changes) if changes is not None else None,
          metadata_=_jsonable(metadata) if metadata is not None else None,
     )
     db.add(entry)
     db.flush()
     logger.debug("Audit %s %s:%s", action, entity_type, entity_id)
     return entry


@workflow("get_entity_audit_logs", "Failed to load the history")
def get_entity_audit_logs(db: Session, resolve_user, payload):
     """
     Newest-first history of one entity, restricted to the caller's tenant.
     Only admins (view_all_audit_logs) see the user name behind each entry.
     """
     user = require_permission(resolve_user, Resource.VEHICLES, Action.READ)
     query = parse(AuditLogQuery, payload)
     show_users = has_special_permission(user.role, Capability.VIEW_ALL_AUDIT_LOGS)

     rows = (
          db.query(AuditLog, User.name)
          .outerjoin(User, AuditLog.user_id == User.id)
          .filter(
               AuditLog.tenant_id == user.tenant_id,
               AuditLog.entity_type == query.entity_type,
               AuditLog.entity_id == query.entity_id,
          )
          .order_by(AuditLog.created_at.desc())
          .limit(query.limit)
          .all()
     )
     return [
          AuditLogEntry(
               id=entry.id,
               user_id=entry.user_id,
               user_name=user_name if show_users else None,
               entity_type=entry.entity_type,
               entity_id=entry.entity_id,
               action=entry.action,
               changes=entry.changes,
               metadata=entry.metadata_,
               created_at=entry.created_at,
          ).model_dump(mode="json")
          for entry, user_name in rows
     ]
