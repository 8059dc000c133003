"""
Contract Service - rental contract lifecycle.

draft -> approved | pending_cg -> active -> completed, with cancelled
reachable from every non-terminal state. Closing lives in
invoice_service because it produces the invoice.
"""
import enum
import logging
import os
from decimal import Decimal
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy.orm import Session

from models import (
     Client,
     ContractOption,
     ContractStatus,
     Inspection,
     InspectionType,
     RentalContract,
     RentalOption,
     Vehicle,
     VehicleStatus,
)
from models.contract import BLOCKING_CONTRACT_STATUSES, TERMINAL_CONTRACT_STATUSES
from schemas.contract import (
     ContractApproveRequest,
     ContractCancelRequest,
     ContractCreate,
     ContractResponse,
     ContractStatusResponse,
)
from .audit_service import create_audit_log
from .errors import NotFoundError, StateConflictError, ValidationError
from .guards import CurrentUser, require_permission
from .numbering import next_document_number
from .pricing import compute_rental_days, money
from .rbac import Action, Resource
from .results import parse, parse_id, workflow
from .transitions import transition_status
from .vehicle_service import get_tenant_vehicle

load_dotenv()

logger = logging.getLogger(__name__)

CONTRACT_NOT_FOUND = "Contract not found"
OVERLAP_MESSAGE = "Vehicle is already booked for this period"


class ApprovalPolicy(str, enum.Enum):
     """Decides between `approved` and `pending_cg` when a draft is approved."""
     TERMS_ACCEPTANCE = "terms_acceptance"
     TRUSTED_CLIENT = "trusted_client"


def get_approval_policy() -> ApprovalPolicy:
     value = os.getenv("CONTRACT_APPROVAL_POLICY", ApprovalPolicy.TERMS_ACCEPTANCE.value)
     try:
          return ApprovalPolicy(value.strip().lower())
     except ValueError:
          logger.warning("Unknown CONTRACT_APPROVAL_POLICY %r, using terms_acceptance", value)
          return ApprovalPolicy.TERMS_ACCEPTANCE


def approval_target(policy: ApprovalPolicy, terms_accepted: bool, client_trusted: bool) -> ContractStatus:
     """
     terms_acceptance: accepted general conditions go straight to approved,
     otherwise the contract waits for them in pending_cg.
     trusted_client: trusted clients still go through pending_cg, everyone
     else is approved.
     """
     if policy == ApprovalPolicy.TRUSTED_CLIENT:
          return ContractStatus.PENDING_CG if client_trusted else ContractStatus.APPROVED
     return ContractStatus.APPROVED if terms_accepted else ContractStatus.PENDING_CG


def get_tenant_contract(db: Session, tenant_id, contract_id) -> RentalContract:
     contract = (
          db.query(RentalContract)
          .filter(
               RentalContract.id == contract_id,
               RentalContract.tenant_id == tenant_id,
          )
          .first()
     )
     if contract is None:
          raise NotFoundError(CONTRACT_NOT_FOUND)
     return contract


def find_overlapping_contract(db: Session, tenant_id, vehicle_id, start_date, end_date, statuses, exclude_id=None):
     query = db.query(RentalContract.id).filter(
          RentalContract.tenant_id == tenant_id,
          RentalContract.vehicle_id == vehicle_id,
          RentalContract.status.in_(statuses),
          RentalContract.start_date < end_date,
          RentalContract.end_date > start_date,
     )
     if exclude_id is not None:
          query = query.filter(RentalContract.id != exclude_id)
     return query.first()


def _contract_data(contract: RentalContract) -> dict:
     return ContractResponse.model_validate(contract).model_dump(mode="json")


@workflow("create_draft_contract", "Failed to create the contract")
def create_draft_contract(db: Session, resolve_user, payload):
     """
     Create a draft contract with its pricing snapshot.

     The daily rate comes from the vehicle override, else its category.
     Selected options are copied onto the contract so later price changes
     do not alter it.
     """
     user = require_permission(resolve_user, Resource.CONTRACTS, Action.CREATE)
     data = parse(ContractCreate, payload)

     vehicle = get_tenant_vehicle(db, user.tenant_id, data.vehicle_id)
     if vehicle.status == VehicleStatus.OUT_OF_SERVICE:
          raise StateConflictError("Vehicle is out of service")

     client = (
          db.query(Client)
          .filter(
               Client.id == data.client_id,
               Client.tenant_id == user.tenant_id,
               Client.deleted_at.is_(None),
          )
          .first()
     )
     if client is None:
          raise NotFoundError("Client not found")

     if find_overlapping_contract(
          db, user.tenant_id, vehicle.id, data.start_date, data.end_date, BLOCKING_CONTRACT_STATUSES
     ):
          raise StateConflictError(OVERLAP_MESSAGE)

     if vehicle.daily_rate_override is not None:
          daily_rate = Decimal(vehicle.daily_rate_override)
     elif vehicle.category is not None:
          daily_rate = Decimal(vehicle.category.daily_rate)
     else:
          raise ValidationError("Vehicle has no daily rate")

     days = compute_rental_days(data.start_date, data.end_date)
     if days is None:
          raise ValidationError("End date must be after start date")

     base_amount = money(daily_rate * days.billed_days)

     options = []
     if data.selected_option_ids:
          rows = (
               db.query(RentalOption)
               .filter(
                    RentalOption.tenant_id == user.tenant_id,
                    RentalOption.id.in_(data.selected_option_ids),
                    RentalOption.is_active.is_(True),
               )
               .all()
          )
          if len(rows) != len(set(data.selected_option_ids)):
               raise NotFoundError("Rental option not found")
          for option in rows:
               quantity = days.billed_days if option.is_per_day else 1
               options.append(ContractOption(
                    rental_option_id=option.id,
                    name=option.name,
                    daily_price=option.daily_price,
                    quantity=quantity,
                    total_price=money(Decimal(option.daily_price) * quantity),
               ))
     options_amount = money(sum((o.total_price for o in options), Decimal("0")))

     contract = RentalContract(
          tenant_id=user.tenant_id,
          contract_number=next_document_number(
               db, RentalContract.contract_number, RentalContract.tenant_id, user.tenant_id, "CTR", data.start_date
          ),
          client_id=client.id,
          vehicle_id=vehicle.id,
          created_by_user_id=user.id,
          status=ContractStatus.DRAFT,
          start_date=data.start_date,
          end_date=data.end_date,
          daily_rate=money(daily_rate),
          total_days=days.billed_days,
          base_amount=base_amount,
          options_amount=options_amount,
          adjustment_amount=money(0),
          total_amount=money(base_amount + options_amount),
          deposit_amount=data.deposit_amount,
          included_km_per_day=data.included_km_per_day,
          excess_km_rate=data.excess_km_rate,
          terms_accepted=data.terms_accepted,
          payment_method=data.payment_method,
          notes=data.notes,
          options=options,
     )
     db.add(contract)
     db.flush()

     create_audit_log(
          db,
          tenant_id=user.tenant_id,
          user_id=user.id,
          action="contract_created",
          entity_type="contract",
          entity_id=contract.id,
          changes={"status": ContractStatus.DRAFT, "total_amount": contract.total_amount},
          metadata={"contract_number": contract.contract_number, "vehicle_id": vehicle.id},
     )
     return _contract_data(contract)


@workflow("approve_contract", "Failed to approve the contract")
def approve_contract(db: Session, resolve_user, payload, policy: Optional[ApprovalPolicy] = None):
     """
     Approve a draft. The next state depends on the approval policy (env
     CONTRACT_APPROVAL_POLICY unless `policy` is given).
     """
     user = require_permission(resolve_user, Resource.CONTRACTS, Action.UPDATE)
     data = parse(ContractApproveRequest, payload)

     contract = get_tenant_contract(db, user.tenant_id, data.contract_id)
     if contract.status != ContractStatus.DRAFT:
          raise StateConflictError("Contract is not in draft state")

     if find_overlapping_contract(
          db, user.tenant_id, contract.vehicle_id, contract.start_date, contract.end_date,
          (ContractStatus.APPROVED, ContractStatus.PENDING_CG, ContractStatus.ACTIVE),
          exclude_id=contract.id,
     ):
          raise StateConflictError(OVERLAP_MESSAGE)

     terms_accepted = contract.terms_accepted if data.terms_accepted is None else data.terms_accepted
     client = db.query(Client).filter(
          Client.id == contract.client_id,
          Client.tenant_id == user.tenant_id,
     ).first()
     target = approval_target(
          policy or get_approval_policy(),
          terms_accepted=terms_accepted,
          client_trusted=bool(client and client.is_trusted),
     )

     transition_status(
          db, RentalContract, user.tenant_id, contract.id,
          expected=ContractStatus.DRAFT,
          new_status=target,
          conflict_message="Contract is not in draft state",
          terms_accepted=terms_accepted,
     )

     create_audit_log(
          db,
          tenant_id=user.tenant_id,
          user_id=user.id,
          action="contract_approved",
          entity_type="contract",
          entity_id=contract.id,
          changes={"from": ContractStatus.DRAFT, "to": target},
          metadata={"terms_accepted": terms_accepted},
     )
     return ContractStatusResponse(
          contract_id=contract.id, previous_status=ContractStatus.DRAFT, status=target
     ).model_dump(mode="json")


def activate_contract_in_transaction(db: Session, user: CurrentUser, contract: RentalContract) -> ContractStatusResponse:
     """
     Flip an approved contract to active and its vehicle to rented.

     Requires a submitted departure inspection; its mileage becomes the
     contract departure mileage. Runs inside the caller's transaction.
     """
     if contract.status not in (ContractStatus.APPROVED, ContractStatus.PENDING_CG):
          raise StateConflictError("Only approved contracts can be activated")

     departure = (
          db.query(Inspection)
          .filter(
               Inspection.tenant_id == user.tenant_id,
               Inspection.contract_id == contract.id,
               Inspection.type == InspectionType.DEPARTURE,
               Inspection.is_draft.is_(False),
          )
          .first()
     )
     if departure is None:
          raise StateConflictError("A submitted departure inspection is required before activation")

     previous = contract.status
     transition_status(
          db, RentalContract, user.tenant_id, contract.id,
          expected=(ContractStatus.APPROVED, ContractStatus.PENDING_CG),
          new_status=ContractStatus.ACTIVE,
          conflict_message="Contract was changed by another user; reload and try again",
          departure_mileage=departure.mileage,
     )
     transition_status(
          db, Vehicle, user.tenant_id, contract.vehicle_id,
          expected=VehicleStatus.AVAILABLE,
          new_status=VehicleStatus.RENTED,
          conflict_message="Vehicle is not available",
          mileage=departure.mileage,
     )

     create_audit_log(
          db,
          tenant_id=user.tenant_id,
          user_id=user.id,
          action="contract_activated",
          entity_type="contract",
          entity_id=contract.id,
          changes={"from": previous, "to": ContractStatus.ACTIVE},
          metadata={"departure_mileage": departure.mileage, "inspection_id": departure.id},
     )
     return ContractStatusResponse(contract_id=contract.id, previous_status=previous, status=ContractStatus.ACTIVE)


@workflow("activate_contract", "Failed to activate the contract")
def activate_contract(db: Session, resolve_user, contract_id):
     user = require_permission(resolve_user, Resource.CONTRACTS, Action.UPDATE)
     contract = get_tenant_contract(db, user.tenant_id, parse_id(contract_id))
     return activate_contract_in_transaction(db, user, contract).model_dump(mode="json")


@workflow("cancel_contract", "Failed to cancel the contract")
def cancel_contract(db: Session, resolve_user, payload):
     """Cancel a non-terminal contract. An active one releases its vehicle."""
     user = require_permission(resolve_user, Resource.CONTRACTS, Action.UPDATE)
     data = parse(ContractCancelRequest, payload)

     contract = get_tenant_contract(db, user.tenant_id, data.contract_id)
     if contract.status in TERMINAL_CONTRACT_STATUSES:
          raise StateConflictError(f"Contract is already {contract.status.value}")

     previous = contract.status
     transition_status(
          db, RentalContract, user.tenant_id, contract.id,
          expected=previous,
          new_status=ContractStatus.CANCELLED,
          conflict_message="Contract was changed by another user; reload and try again",
     )
     if previous == ContractStatus.ACTIVE:
          transition_status(
               db, Vehicle, user.tenant_id, contract.vehicle_id,
               expected=VehicleStatus.RENTED,
               new_status=VehicleStatus.AVAILABLE,
               conflict_message="Vehicle is not rented",
          )

     create_audit_log(
          db,
          tenant_id=user.tenant_id,
          user_id=user.id,
          action="contract_cancelled",
          entity_type="contract",
          entity_id=contract.id,
          changes={"from": previous, "to": ContractStatus.CANCELLED},
          metadata={"reason": data.reason} if data.reason else None,
     )
     return ContractStatusResponse(
          contract_id=contract.id, previous_status=previous, status=ContractStatus.CANCELLED
     ).model_dump(mode="json")


@workflow("get_contract", "Failed to load the contract")
def get_contract(db: Session, resolve_user, contract_id):
     user = require_permission(resolve_user, Resource.CONTRACTS, Action.READ)
     return _contract_data(get_tenant_contract(db, user.tenant_id, parse_id(contract_id)))
