"""
Inspection Service - departure and return condition reports.

Submitting the departure inspection activates the contract in the same
transaction; the submitted return inspection is what validate_return reads.
"""
import logging

from sqlalchemy.orm import Session

from models import ContractStatus, Inspection, InspectionDamage, InspectionType, RentalContract
from models.base import utcnow
from schemas.inspection import InspectionDraftCreate, InspectionResponse, InspectionSubmit
from .audit_service import create_audit_log
from .contract_service import activate_contract_in_transaction, get_tenant_contract
from .errors import NotFoundError, StateConflictError, ValidationError
from .guards import require_permission
from .rbac import Action, Resource
from .results import parse, workflow

logger = logging.getLogger(__name__)

_REQUIRED_CONTRACT_STATUS = {
     InspectionType.DEPARTURE: (ContractStatus.APPROVED, ContractStatus.PENDING_CG),
     InspectionType.RETURN: (ContractStatus.ACTIVE,),
}


def _response(inspection: Inspection) -> dict:
     return InspectionResponse(
          inspection_id=inspection.id,
          contract_id=inspection.contract_id,
          type=inspection.type,
          is_draft=inspection.is_draft,
          mileage=inspection.mileage,
          damage_count=len(inspection.damages),
     ).model_dump(mode="json")


def _get_tenant_inspection(db: Session, tenant_id, inspection_id) -> Inspection:
     inspection = (
          db.query(Inspection)
          .filter(Inspection.id == inspection_id, Inspection.tenant_id == tenant_id)
          .first()
     )
     if inspection is None:
          raise NotFoundError("Inspection not found")
     return inspection


@workflow("create_draft_inspection", "Failed to create the inspection")
def create_draft_inspection(db: Session, resolve_user, payload):
     user = require_permission(resolve_user, Resource.INSPECTIONS, Action.CREATE)
     data = parse(InspectionDraftCreate, payload)

     contract = get_tenant_contract(db, user.tenant_id, data.contract_id)
     if contract.status not in _REQUIRED_CONTRACT_STATUS[data.type]:
          if data.type == InspectionType.DEPARTURE:
               raise StateConflictError("Departure inspection requires an approved contract")
          raise StateConflictError("Return inspection requires an active contract")

     existing = (
          db.query(Inspection.id)
          .filter(
               Inspection.tenant_id == user.tenant_id,
               Inspection.contract_id == contract.id,
               Inspection.type == data.type,
          )
          .first()
     )
     if existing:
          raise StateConflictError(f"A {data.type.value} inspection already exists for this contract")

     inspection = Inspection(
          tenant_id=user.tenant_id,
          contract_id=contract.id,
          vehicle_id=contract.vehicle_id,
          conducted_by_user_id=user.id,
          type=data.type,
          is_draft=True,
     )
     db.add(inspection)
     db.flush()
     return _response(inspection)


def _finalize(db: Session, user, inspection: Inspection, data: InspectionSubmit) -> None:
     if not inspection.is_draft:
          raise StateConflictError("Inspection is already submitted")
     inspection.mileage = data.mileage
     inspection.fuel_level = data.fuel_level
     inspection.notes = data.notes
     inspection.conducted_by_user_id = user.id
     inspection.conducted_at = utcnow()
     inspection.is_draft = False
     for damage in data.damages:
          inspection.damages.append(InspectionDamage(**damage.model_dump()))
     db.flush()


@workflow("submit_departure_inspection", "Failed to submit the inspection")
def submit_departure_inspection(db: Session, resolve_user, payload):
     """Finalize the departure inspection and activate its contract."""
     user = require_permission(resolve_user, Resource.INSPECTIONS, Action.CREATE)
     data = parse(InspectionSubmit, payload)

     inspection = _get_tenant_inspection(db, user.tenant_id, data.inspection_id)
     if inspection.type != InspectionType.DEPARTURE:
          raise ValidationError("Not a departure inspection")
     contract = get_tenant_contract(db, user.tenant_id, inspection.contract_id)

     _finalize(db, user, inspection, data)
     create_audit_log(
          db,
          tenant_id=user.tenant_id,
          user_id=user.id,
          action="departure_inspection_submitted",
          entity_type="inspection",
          entity_id=inspection.id,
          changes={"mileage": inspection.mileage, "fuel_level": inspection.fuel_level},
          metadata={"contract_id": contract.id, "damage_count": len(data.damages)},
     )
     activate_contract_in_transaction(db, user, contract)
     return _response(inspection)


@workflow("submit_return_inspection", "Failed to submit the inspection")
def submit_return_inspection(db: Session, resolve_user, payload):
     """Finalize the return inspection and record the return mileage on the contract."""
     user = require_permission(resolve_user, Resource.INSPECTIONS, Action.CREATE)
     data = parse(InspectionSubmit, payload)

     inspection = _get_tenant_inspection(db, user.tenant_id, data.inspection_id)
     if inspection.type != InspectionType.RETURN:
          raise ValidationError("Not a return inspection")
     contract = get_tenant_contract(db, user.tenant_id, inspection.contract_id)
     if contract.status != ContractStatus.ACTIVE:
          raise StateConflictError("Return inspection requires an active contract")
     if contract.departure_mileage is not None and data.mileage < contract.departure_mileage:
          raise ValidationError("Return mileage cannot be lower than departure mileage")

     _finalize(db, user, inspection, data)
     db.query(RentalContract).filter(
          RentalContract.id == contract.id,
          RentalContract.tenant_id == user.tenant_id,
     ).update({RentalContract.return_mileage: data.mileage}, synchronize_session="fetch")

     create_audit_log(
          db,
          tenant_id=user.tenant_id,
          user_id=user.id,
          action="return_inspection_submitted",
          entity_type="inspection",
          entity_id=inspection.id,
          changes={"mileage": inspection.mileage, "fuel_level": inspection.fuel_level},
          metadata={"contract_id": contract.id, "damage_count": len(data.damages)},
     )
     return _response(inspection)
