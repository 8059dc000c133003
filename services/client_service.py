"""
Client Service - the tenant's renters.

Clients are never removed: deleting one sets deleted_at, which hides it
from new contracts while its past contracts keep pointing at it.
"""
import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from models import Client, RentalContract
from models.base import utcnow
from models.contract import TERMINAL_CONTRACT_STATUSES
from schemas.client import ClientCreate, ClientDeleteRequest, ClientResponse, ClientUpdate
from .audit_service import create_audit_log
from .errors import NotFoundError, StateConflictError
from .guards import require_permission
from .rbac import Action, Resource
from .results import parse, parse_id, workflow

logger = logging.getLogger(__name__)

CLIENT_NOT_FOUND = "Client not found"
OPEN_CONTRACTS_MESSAGE = "Client has open contracts and cannot be deleted"


def get_tenant_client(db: Session, tenant_id, client_id) -> Client:
     """Live client of the tenant."""
     client = (
          db.query(Client)
          .filter(
               Client.id == client_id,
               Client.tenant_id == tenant_id,
               Client.deleted_at.is_(None),
          )
          .first()
     )
     if client is None:
          raise NotFoundError(CLIENT_NOT_FOUND)
     return client


def _client_data(client: Client) -> dict:
     return ClientResponse.model_validate(client).model_dump(mode="json")


@workflow("create_client", "Failed to create the client")
def create_client(db: Session, resolve_user, payload):
     user = require_permission(resolve_user, Resource.CLIENTS, Action.CREATE)
     data = parse(ClientCreate, payload)

     client = Client(tenant_id=user.tenant_id, **data.model_dump())
     db.add(client)
     db.flush()

     create_audit_log(
          db,
          tenant_id=user.tenant_id,
          user_id=user.id,
          action="client_created",
          entity_type="client",
          entity_id=client.id,
          changes=data.model_dump(),
     )
     logger.info("Client %s created (tenant=%s)", client.id, user.tenant_id)
     return _client_data(client)


@workflow("get_client", "Failed to load the client")
def get_client(db: Session, resolve_user, client_id):
     user = require_permission(resolve_user, Resource.CLIENTS, Action.READ)
     return _client_data(get_tenant_client(db, user.tenant_id, parse_id(client_id)))


@workflow("update_client", "Failed to update the client")
def update_client(db: Session, resolve_user, payload):
     user = require_permission(resolve_user, Resource.CLIENTS, Action.UPDATE)
     data = parse(ClientUpdate, payload)
     client = get_tenant_client(db, user.tenant_id, data.client_id)

     fields = data.model_dump(exclude={"client_id"})
     changes = {
          name: {"from": getattr(client, name), "to": value}
          for name, value in fields.items()
          if getattr(client, name) != value
     }
     for name, value in fields.items():
          setattr(client, name, value)
     db.flush()

     if changes:
          create_audit_log(
               db,
               tenant_id=user.tenant_id,
               user_id=user.id,
               action="client_updated",
               entity_type="client",
               entity_id=client.id,
               changes=changes,
          )
     return _client_data(client)


@workflow("toggle_client_trusted", "Failed to update the client")
def toggle_client_trusted(db: Session, resolve_user, client_id):
     """
     Flip the trust flag. The write is conditional on the value that was
     read; a concurrent toggle in between is reported as a conflict.
     """
     user = require_permission(resolve_user, Resource.CLIENTS, Action.UPDATE)
     client = get_tenant_client(db, user.tenant_id, parse_id(client_id))
     previous = client.is_trusted

     result = db.execute(
          update(Client)
          .where(
               Client.id == client.id,
               Client.tenant_id == user.tenant_id,
               Client.deleted_at.is_(None),
               Client.is_trusted == previous,
          )
          .values(is_trusted=not previous, updated_at=utcnow())
          .execution_options(synchronize_session="fetch")
     )
     if result.rowcount == 0:
          raise StateConflictError("Client was changed by another user; reload and try again")

     create_audit_log(
          db,
          tenant_id=user.tenant_id,
          user_id=user.id,
          action="client_trust_changed",
          entity_type="client",
          entity_id=client.id,
          changes={"is_trusted": {"from": previous, "to": not previous}},
     )
     return {"id": str(client.id), "is_trusted": not previous}


@workflow("soft_delete_client", "Failed to delete the client")
def soft_delete_client(db: Session, resolve_user, payload):
     """Hide a client that has no contract left in progress."""
     user = require_permission(resolve_user, Resource.CLIENTS, Action.DELETE)
     data = parse(ClientDeleteRequest, payload)
     client = get_tenant_client(db, user.tenant_id, data.client_id)

     open_contract = (
          db.query(RentalContract.id)
          .filter(
               RentalContract.tenant_id == user.tenant_id,
               RentalContract.client_id == client.id,
               RentalContract.status.notin_(TERMINAL_CONTRACT_STATUSES),
          )
          .first()
     )
     if open_contract is not None:
          raise StateConflictError(OPEN_CONTRACTS_MESSAGE)

     deleted_at = utcnow()
     result = db.execute(
          update(Client)
          .where(
               Client.id == client.id,
               Client.tenant_id == user.tenant_id,
               Client.deleted_at.is_(None),
          )
          .values(deleted_at=deleted_at, updated_at=deleted_at)
          .execution_options(synchronize_session="fetch")
     )
     if result.rowcount == 0:
          raise NotFoundError(CLIENT_NOT_FOUND)

     create_audit_log(
          db,
          tenant_id=user.tenant_id,
          user_id=user.id,
          action="client_deleted",
          entity_type="client",
          entity_id=client.id,
          metadata={"reason": data.reason} if data.reason else None,
     )
     logger.info("Client %s soft-deleted (tenant=%s)", client.id, user.tenant_id)
     return {"id": str(client.id), "deleted_at": deleted_at.isoformat()}
