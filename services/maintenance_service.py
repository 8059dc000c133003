"""
Maintenance Service - workshop visits and their effect on vehicle status.
"""
import logging

from sqlalchemy.orm import Session

from models import MaintenanceRecord, MaintenanceStatus, Vehicle, VehicleStatus
from models.maintenance import OPEN_MAINTENANCE_STATUSES
from schemas.maintenance import MaintenanceClose, MaintenanceCreate, MaintenanceResponse
from .audit_service import create_audit_log
from .errors import NotFoundError, StateConflictError
from .guards import require_permission
from .rbac import Action, Resource
from .results import parse, workflow
from .transitions import transition_status
from .vehicle_service import RENTED_MESSAGE, get_tenant_vehicle

logger = logging.getLogger(__name__)


@workflow("create_maintenance_record", "Failed to create the maintenance record")
def create_maintenance_record(db: Session, resolve_user, payload):
     """
     Open a maintenance record and put the vehicle in maintenance.

     A rented vehicle is refused; a vehicle already in maintenance keeps
     its status and simply gets one more open record.
     """
     user = require_permission(resolve_user, Resource.VEHICLES, Action.CREATE)
     data = parse(MaintenanceCreate, payload)

     vehicle = get_tenant_vehicle(db, user.tenant_id, data.vehicle_id)
     if vehicle.status == VehicleStatus.RENTED:
          raise StateConflictError(RENTED_MESSAGE)

     record = MaintenanceRecord(
          tenant_id=user.tenant_id,
          vehicle_id=vehicle.id,
          created_by_user_id=user.id,
          type=data.type,
          description=data.description,
          status=MaintenanceStatus.OPEN,
          urgency=data.urgency,
          start_date=data.start_date,
          estimated_cost=data.estimated_cost,
          mechanic_name=data.mechanic_name,
          notes=data.notes,
     )
     db.add(record)
     db.flush()

     if vehicle.status != VehicleStatus.MAINTENANCE:
          transition_status(
               db, Vehicle, user.tenant_id, vehicle.id,
               expected=vehicle.status,
               new_status=VehicleStatus.MAINTENANCE,
               conflict_message="Vehicle status was changed by another user; reload and try again",
          )

     create_audit_log(
          db,
          tenant_id=user.tenant_id,
          user_id=user.id,
          action="maintenance_created",
          entity_type="vehicle",
          entity_id=vehicle.id,
          changes={"maintenance_id": record.id, "type": record.type},
          metadata={"description": record.description},
     )

     return MaintenanceResponse(
          id=record.id,
          vehicle_id=vehicle.id,
          status=record.status.value,
          vehicle_status=VehicleStatus.MAINTENANCE.value,
     ).model_dump(mode="json")


@workflow("close_maintenance_record", "Failed to close the maintenance record")
def close_maintenance_record(db: Session, resolve_user, payload):
     """
     Complete a maintenance record. The vehicle goes back to available only
     when no other record is still open for it and it is still in
     maintenance.
     """
     user = require_permission(resolve_user, Resource.VEHICLES, Action.CREATE)
     data = parse(MaintenanceClose, payload)

     record = (
          db.query(MaintenanceRecord)
          .filter(
               MaintenanceRecord.id == data.maintenance_id,
               MaintenanceRecord.tenant_id == user.tenant_id,
          )
          .first()
     )
     if record is None:
          raise NotFoundError("Maintenance record not found")
     if record.status == MaintenanceStatus.COMPLETED:
          raise StateConflictError("Maintenance record is already closed")

     values = {"end_date": data.end_date, "final_cost": data.final_cost}
     if data.notes:
          values["notes"] = data.notes
     transition_status(
          db, MaintenanceRecord, user.tenant_id, record.id,
          expected=OPEN_MAINTENANCE_STATUSES,
          new_status=MaintenanceStatus.COMPLETED,
          conflict_message="Maintenance record is already closed",
          **values
     )

     other_open = (
          db.query(MaintenanceRecord.id)
          .filter(
               MaintenanceRecord.tenant_id == user.tenant_id,
               MaintenanceRecord.vehicle_id == record.vehicle_id,
               MaintenanceRecord.id != record.id,
               MaintenanceRecord.status.in_(OPEN_MAINTENANCE_STATUSES),
          )
          .first()
     )

     vehicle = get_tenant_vehicle(db, user.tenant_id, record.vehicle_id)
     vehicle_status = vehicle.status
     if other_open is None and vehicle.status == VehicleStatus.MAINTENANCE:
          transition_status(
               db, Vehicle, user.tenant_id, vehicle.id,
               expected=VehicleStatus.MAINTENANCE,
               new_status=VehicleStatus.AVAILABLE,
          )
          vehicle_status = VehicleStatus.AVAILABLE

     create_audit_log(
          db,
          tenant_id=user.tenant_id,
          user_id=user.id,
          action="maintenance_closed",
          entity_type="vehicle",
          entity_id=vehicle.id,
          changes={"maintenance_id": record.id, "final_cost": data.final_cost},
     )

     return MaintenanceResponse(
          id=record.id,
          vehicle_id=vehicle.id,
          status=MaintenanceStatus.COMPLETED.value,
          vehicle_status=vehicle_status.value,
     ).model_dump(mode="json")
