"""
Authorization guard called first by every workflow.

A session resolver is any zero-argument callable returning the CurrentUser
of the request, or None when nobody is signed in.
"""
import logging
from typing import Callable, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from .errors import AuthenticationError, AuthorizationError
from .rbac import has_permission, has_special_permission

logger = logging.getLogger(__name__)


class CurrentUser(BaseModel):
     """Identity resolved by the external authentication collaborator."""
     id: UUID
     tenant_id: UUID
     role: str
     email: str
     name: str
     is_active: bool = True

     model_config = ConfigDict(frozen=True, from_attributes=True)


SessionResolver = Callable[[], Optional[CurrentUser]]


def _authenticated_user(resolve_user: SessionResolver) -> CurrentUser:
     user = resolve_user()
     if user is None:
          raise AuthenticationError("User is not authenticated")
     if not user.is_active:
          raise AuthenticationError("User account is inactive")
     return user


def require_permission(resolve_user: SessionResolver, resource, action) -> CurrentUser:
     """
     Return the signed-in user when their role grants `action` on `resource`.

     Raises:
          AuthenticationError: no user, or an inactive one
          AuthorizationError: the role lacks the permission
     """
     user = _authenticated_user(resolve_user)
     if not has_permission(user.role, resource, action):
          logger.warning(
               "Permission denied: user=%s role=%s resource=%s action=%s",
               user.id, user.role, getattr(resource, "value", resource), getattr(action, "value", action),
          )
          raise AuthorizationError("Access denied: insufficient permissions")
     return user


def require_special_permission(resolve_user: SessionResolver, capability) -> CurrentUser:
     """Same as require_permission, for a named capability."""
     user = _authenticated_user(resolve_user)
     if not has_special_permission(user.role, capability):
          logger.warning(
               "Capability denied: user=%s role=%s capability=%s",
               user.id, user.role, getattr(capability, "value", capability),
          )
          raise AuthorizationError("Access denied: insufficient permissions")
     return user
