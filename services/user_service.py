"""
User Service - staff accounts of a tenant: role and active flag.
"""
import logging

from sqlalchemy.orm import Session

from models import User
from schemas.user import UserActiveToggle, UserResponse, UserRoleUpdate
from .audit_service import create_audit_log
from .errors import NotFoundError, ValidationError
from .guards import require_permission, require_special_permission
from .rbac import Action, Capability, Resource
from .results import parse, workflow

logger = logging.getLogger(__name__)


def _get_tenant_user(db: Session, tenant_id, user_id) -> User:
     user = db.query(User).filter(User.id == user_id, User.tenant_id == tenant_id).first()
     if user is None:
          raise NotFoundError("User not found")
     return user


@workflow("list_users", "Failed to load users")
def list_users(db: Session, resolve_user):
     current = require_permission(resolve_user, Resource.USERS, Action.READ)
     users = (
          db.query(User)
          .filter(User.tenant_id == current.tenant_id)
          .order_by(User.name)
          .all()
     )
     return [UserResponse.model_validate(u).model_dump(mode="json") for u in users]


@workflow("update_user_role", "Failed to update the role")
def update_user_role(db: Session, resolve_user, payload):
     current = require_special_permission(resolve_user, Capability.MANAGE_USERS)
     data = parse(UserRoleUpdate, payload)

     if data.user_id == current.id:
          raise ValidationError("You cannot change your own role")
     user = _get_tenant_user(db, current.tenant_id, data.user_id)

     previous = user.role
     user.role = data.role
     db.flush()

     create_audit_log(
          db,
          tenant_id=current.tenant_id,
          user_id=current.id,
          action="user_role_changed",
          entity_type="user",
          entity_id=user.id,
          changes={"from": previous, "to": data.role},
     )
     return UserResponse.model_validate(user).model_dump(mode="json")


@workflow("toggle_user_active", "Failed to update the user")
def toggle_user_active(db: Session, resolve_user, payload):
     current = require_special_permission(resolve_user, Capability.MANAGE_USERS)
     data = parse(UserActiveToggle, payload)

     if data.user_id == current.id:
          raise ValidationError("You cannot deactivate your own account")
     user = _get_tenant_user(db, current.tenant_id, data.user_id)

     user.is_active = not user.is_active
     db.flush()

     create_audit_log(
          db,
          tenant_id=current.tenant_id,
          user_id=current.id,
          action="user_active_toggled",
          entity_type="user",
          entity_id=user.id,
          changes={"is_active": user.is_active},
     )
     return UserResponse.model_validate(user).model_dump(mode="json")
