"""
Vehicle Service - fleet records, reads and the manual status state machine.

Rented vehicles are only released by the contract workflows (closing,
cancellation); a manual status change never touches them.
"""
import logging
from types import MappingProxyType

from sqlalchemy.orm import Session

from models import MaintenanceRecord, Vehicle, VehicleCategory, VehicleStatus
from models.maintenance import MaintenanceStatus
from schemas.vehicle import (
     VehicleCreate,
     VehicleListParams,
     VehicleListResponse,
     VehicleResponse,
     VehicleStatusChangeRequest,
     VehicleStatusChangeResponse,
     VehicleUpdate,
)
from .audit_service import create_audit_log
from .errors import NotFoundError, StateConflictError, ValidationError
from .guards import require_permission
from .rbac import Action, Resource
from .results import parse, parse_id, workflow
from .transitions import transition_status

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = MappingProxyType({
     VehicleStatus.AVAILABLE: frozenset({VehicleStatus.MAINTENANCE, VehicleStatus.OUT_OF_SERVICE}),
     VehicleStatus.RENTED: frozenset(),
     VehicleStatus.MAINTENANCE: frozenset({VehicleStatus.AVAILABLE, VehicleStatus.OUT_OF_SERVICE}),
     VehicleStatus.OUT_OF_SERVICE: frozenset({VehicleStatus.AVAILABLE, VehicleStatus.MAINTENANCE}),
})

RENTED_MESSAGE = "Vehicle is currently rented; close its contract first"
VEHICLE_NOT_FOUND = "Vehicle not found"
PLATE_EXISTS_MESSAGE = "A vehicle with this plate number already exists"


def can_transition(current: VehicleStatus, new: VehicleStatus) -> bool:
     return new in ALLOWED_TRANSITIONS.get(current, frozenset())


def get_tenant_vehicle(db: Session, tenant_id, vehicle_id) -> Vehicle:
     """Vehicle of the tenant, soft-deleted ones excluded."""
     vehicle = (
          db.query(Vehicle)
          .filter(
               Vehicle.id == vehicle_id,
               Vehicle.tenant_id == tenant_id,
               Vehicle.deleted_at.is_(None),
          )
          .first()
     )
     if vehicle is None:
          raise NotFoundError(VEHICLE_NOT_FOUND)
     return vehicle


@workflow("change_vehicle_status", "Failed to change the vehicle status")
def change_vehicle_status(db: Session, resolve_user, payload):
     """
     Manually move a vehicle along ALLOWED_TRANSITIONS.

     The status update, the optional maintenance record and the audit
     entry are written in one transaction.
     """
     user = require_permission(resolve_user, Resource.VEHICLES, Action.UPDATE)
     data = parse(VehicleStatusChangeRequest, payload)

     if data.new_status == VehicleStatus.RENTED:
          raise ValidationError("A vehicle is only rented through a contract")

     vehicle = get_tenant_vehicle(db, user.tenant_id, data.vehicle_id)
     current = vehicle.status

     if current == VehicleStatus.RENTED:
          raise StateConflictError(RENTED_MESSAGE)
     if current == data.new_status:
          raise StateConflictError(f"Vehicle is already {current.value}")
     if not can_transition(current, data.new_status):
          raise StateConflictError(
               f"Cannot change vehicle status from {current.value} to {data.new_status.value}"
          )

     transition_status(
          db, Vehicle, user.tenant_id, vehicle.id,
          expected=current,
          new_status=data.new_status,
          conflict_message="Vehicle status was changed by another user; reload and try again",
     )

     maintenance_record_id = None
     if (
          data.create_maintenance_record
          and data.new_status == VehicleStatus.MAINTENANCE
          and data.maintenance_description
          and data.maintenance_type
     ):
          record = MaintenanceRecord(
               tenant_id=user.tenant_id,
               vehicle_id=vehicle.id,
               created_by_user_id=user.id,
               type=data.maintenance_type,
               description=data.maintenance_description,
               status=MaintenanceStatus.OPEN,
          )
          db.add(record)
          db.flush()
          maintenance_record_id = record.id

     create_audit_log(
          db,
          tenant_id=user.tenant_id,
          user_id=user.id,
          action="status_change",
          entity_type="vehicle",
          entity_id=vehicle.id,
          changes={"from": current, "to": data.new_status},
          metadata={"reason": data.reason} if data.reason else None,
     )

     logger.info(
          "Vehicle %s status %s -> %s (tenant=%s)",
          vehicle.id, current.value, data.new_status.value, user.tenant_id,
     )
     return VehicleStatusChangeResponse(
          id=vehicle.id,
          previous_status=current,
          new_status=data.new_status,
          maintenance_record_id=maintenance_record_id,
     ).model_dump(mode="json")


@workflow("list_vehicles", "Failed to load vehicles")
def list_vehicles(db: Session, resolve_user, payload=None):
     user = require_permission(resolve_user, Resource.VEHICLES, Action.READ)
     params = parse(VehicleListParams, payload or {})

     query = db.query(Vehicle).filter(
          Vehicle.tenant_id == user.tenant_id,
          Vehicle.deleted_at.is_(None),
     )
     if params.status:
          query = query.filter(Vehicle.status == params.status)

     total = query.count()
     vehicles = (
          query.order_by(Vehicle.brand, Vehicle.model, Vehicle.plate_number)
          .offset((params.page - 1) * params.page_size)
          .limit(params.page_size)
          .all()
     )
     return VehicleListResponse(
          vehicles=[VehicleResponse.model_validate(v) for v in vehicles],
          total=total,
          page=params.page,
          page_size=params.page_size,
     ).model_dump(mode="json")


@workflow("get_vehicle", "Failed to load the vehicle")
def get_vehicle(db: Session, resolve_user, vehicle_id):
     user = require_permission(resolve_user, Resource.VEHICLES, Action.READ)
     vehicle = get_tenant_vehicle(db, user.tenant_id, parse_id(vehicle_id))
     return VehicleResponse.model_validate(vehicle).model_dump(mode="json")


def _check_plate_and_category(db: Session, tenant_id, data: VehicleCreate, exclude_id=None) -> None:
     """Plates are unique among the tenant's live vehicles; the category must be the tenant's."""
     plate_query = db.query(Vehicle.id).filter(
          Vehicle.tenant_id == tenant_id,
          Vehicle.plate_number == data.plate_number,
          Vehicle.deleted_at.is_(None),
     )
     if exclude_id is not None:
          plate_query = plate_query.filter(Vehicle.id != exclude_id)
     if plate_query.first() is not None:
          raise StateConflictError(PLATE_EXISTS_MESSAGE)

     category = (
          db.query(VehicleCategory.id)
          .filter(VehicleCategory.id == data.category_id, VehicleCategory.tenant_id == tenant_id)
          .first()
     )
     if category is None:
          raise NotFoundError("Vehicle category not found")


@workflow("create_vehicle", "Failed to create the vehicle")
def create_vehicle(db: Session, resolve_user, payload):
     """Add an available vehicle to the caller's fleet."""
     user = require_permission(resolve_user, Resource.VEHICLES, Action.CREATE)
     data = parse(VehicleCreate, payload)
     _check_plate_and_category(db, user.tenant_id, data)

     vehicle = Vehicle(
          tenant_id=user.tenant_id,
          category_id=data.category_id,
          brand=data.brand,
          model=data.model,
          plate_number=data.plate_number,
          mileage=data.mileage,
          daily_rate_override=data.daily_rate_override,
          status=VehicleStatus.AVAILABLE,
     )
     db.add(vehicle)
     db.flush()

     create_audit_log(
          db,
          tenant_id=user.tenant_id,
          user_id=user.id,
          action="vehicle_created",
          entity_type="vehicle",
          entity_id=vehicle.id,
          changes=data.model_dump(),
     )
     logger.info("Vehicle %s (%s) created (tenant=%s)", vehicle.id, vehicle.plate_number, user.tenant_id)
     return VehicleResponse.model_validate(vehicle).model_dump(mode="json")


@workflow("update_vehicle", "Failed to update the vehicle")
def update_vehicle(db: Session, resolve_user, payload):
     """
     Replace the descriptive fields of a vehicle. Status only moves through
     the status workflows, never through an edit.
     """
     user = require_permission(resolve_user, Resource.VEHICLES, Action.UPDATE)
     data = parse(VehicleUpdate, payload)
     vehicle = get_tenant_vehicle(db, user.tenant_id, data.vehicle_id)
     _check_plate_and_category(db, user.tenant_id, data, exclude_id=vehicle.id)

     fields = data.model_dump(exclude={"vehicle_id"})
     changes = {
          name: {"from": getattr(vehicle, name), "to": value}
          for name, value in fields.items()
          if getattr(vehicle, name) != value
     }
     for name, value in fields.items():
          setattr(vehicle, name, value)
     db.flush()

     if changes:
          create_audit_log(
               db,
               tenant_id=user.tenant_id,
               user_id=user.id,
               action="vehicle_updated",
               entity_type="vehicle",
               entity_id=vehicle.id,
               changes=changes,
          )
     return VehicleResponse.model_validate(vehicle).model_dump(mode="json")
