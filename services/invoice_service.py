"""
Invoice Service - Business logic layer for contract closing and invoices.

Closing a contract completes it, creates its single invoice and releases
the vehicle in one transaction. The invoice rows themselves are built by
InvoiceService so the API layer never touches them directly.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from models import (
     ContractStatus,
     Inspection,
     InspectionDamage,
     InspectionType,
     Invoice,
     InvoiceStatus,
     RentalContract,
     Vehicle,
     VehicleStatus,
)
from models.base import utcnow
from models.invoice import PAYABLE_INVOICE_STATUSES
from schemas.invoice import (
     ContractCloseRequest,
     ContractCloseResponse,
     InvoiceListParams,
     InvoiceListResponse,
     InvoiceResponse,
     InvoiceStatusCounts,
     InvoiceStatusUpdate,
     ReturnDamage,
     ReturnValidationPreview,
     ReturnValidationRequest,
)
from .audit_service import create_audit_log
from .contract_service import get_tenant_contract
from .errors import NotFoundError, StateConflictError, ValidationError
from .guards import CurrentUser, require_permission
from .numbering import next_document_number
from .pricing import calculate_excess_km, money
from .rbac import Action, Resource
from .results import parse, parse_id, workflow
from .transitions import transition_status

logger = logging.getLogger(__name__)

INVOICE_EXISTS_MESSAGE = "An invoice already exists for this contract"
PAID_CANCEL_MESSAGE = "An invoice with payments cannot be cancelled"


def _line_item(description: str, quantity: int, unit_price, total_price, item_type: str) -> dict:
     return {
          "description": description,
          "quantity": quantity,
          "unit_price": str(money(unit_price)),
          "total_price": str(money(total_price)),
          "type": item_type,
     }


class InvoiceService:
     """Service class for invoice-related business logic."""

     @staticmethod
     def build_line_items(contract: RentalContract, excess_km: int) -> list:
          """
          Line items of a closed contract, in display order: base rental,
          each option, excess kilometres, damages, adjustment.
          """
          items = [
               _line_item(
                    f"Rental {contract.contract_number} ({contract.total_days} day(s))",
                    contract.total_days,
                    contract.daily_rate,
                    contract.base_amount,
                    "base_rental",
               )
          ]
          for option in contract.options:
               items.append(_line_item(option.name, option.quantity, option.daily_price, option.total_price, "option"))
          if excess_km > 0:
               items.append(_line_item(
                    f"Excess mileage ({excess_km} km)",
                    excess_km,
                    contract.excess_km_rate,
                    contract.excess_km_amount,
                    "excess_km",
               ))
          if contract.damages_amount and Decimal(contract.damages_amount) > 0:
               items.append(_line_item("Damages", 1, contract.damages_amount, contract.damages_amount, "damages"))
          if contract.adjustment_amount and Decimal(contract.adjustment_amount) > 0:
               adjustment = -Decimal(contract.adjustment_amount)
               items.append(_line_item("Adjustment", 1, adjustment, adjustment, "adjustment"))
          return items

     @staticmethod
     def create_invoice_for_contract(
          db: Session,
          contract: RentalContract,
          excess_km: int = 0,
          issued_at: Optional[datetime] = None
     ) -> Invoice:
          """
          Create the invoice of a closed contract.

          Args:
               db: SQLAlchemy database session
               contract: contract whose closing amounts are already set
               excess_km: kilometres billed beyond the allowance
               issued_at: invoice date (default: now)

          Returns:
               Created Invoice object

          Raises:
               StateConflictError: If the contract already has an invoice
          """
          existing = db.query(Invoice.id).filter(Invoice.contract_id == contract.id).first()
          if existing:
               raise StateConflictError(INVOICE_EXISTS_MESSAGE)

          issued_at = issued_at or utcnow()
          subtotal = money(
               Decimal(contract.base_amount)
               + Decimal(contract.options_amount or 0)
               + Decimal(contract.excess_km_amount or 0)
               + Decimal(contract.damages_amount or 0)
          )
          invoice = Invoice(
               tenant_id=contract.tenant_id,
               contract_id=contract.id,
               client_id=contract.client_id,
               invoice_number=next_document_number(
                    db, Invoice.invoice_number, Invoice.tenant_id, contract.tenant_id, "FAC", issued_at
               ),
               status=InvoiceStatus.PENDING,
               subtotal=subtotal,
               total_amount=contract.total_amount,
               line_items=InvoiceService.build_line_items(contract, excess_km),
               issued_at=issued_at,
          )

          db.add(invoice)
          db.flush()  # Flush to get the ID without committing

          return invoice


def close_contract_in_transaction(
     db: Session,
     user: CurrentUser,
     contract_id,
     actual_return_date: datetime,
     return_mileage: int,
     damages_amount: Decimal,
     adjustment_amount: Decimal = Decimal("0"),
     notes: Optional[str] = None,
     audit_action: str = "contract_closed",
) -> ContractCloseResponse:
     """
     Complete an active contract, invoice it and release its vehicle.

     Steps, all inside the caller's transaction: contract active ->
     completed with the return data and final amounts, invoice creation,
     vehicle rented -> available with the return mileage, audit entry.
     """
     contract = get_tenant_contract(db, user.tenant_id, contract_id)

     # checked before the status so a repeated close reports the invoice
     if db.query(Invoice.id).filter(Invoice.contract_id == contract.id).first():
          raise StateConflictError(INVOICE_EXISTS_MESSAGE)
     if contract.status != ContractStatus.ACTIVE:
          raise StateConflictError("Only active contracts can be closed")

     departure_mileage = contract.departure_mileage or 0
     if return_mileage < departure_mileage:
          raise ValidationError("Return mileage cannot be lower than departure mileage")

     excess_km, excess_km_amount = calculate_excess_km(
          departure_mileage,
          return_mileage,
          contract.included_km_per_day,
          contract.total_days,
          contract.excess_km_rate,
     )
     damages_amount = money(damages_amount)
     adjustment_amount = money(adjustment_amount)
     total_amount = money(max(
          Decimal("0"),
          Decimal(contract.base_amount)
          + Decimal(contract.options_amount or 0)
          + excess_km_amount
          + damages_amount
          - adjustment_amount,
     ))

     values = dict(
          actual_return_date=actual_return_date,
          return_mileage=return_mileage,
          excess_km_amount=excess_km_amount,
          damages_amount=damages_amount,
          adjustment_amount=adjustment_amount,
          total_amount=total_amount,
     )
     if notes:
          values["notes"] = notes
     transition_status(
          db, RentalContract, user.tenant_id, contract.id,
          expected=ContractStatus.ACTIVE,
          new_status=ContractStatus.COMPLETED,
          conflict_message="Only active contracts can be closed",
          **values
     )

     invoice = InvoiceService.create_invoice_for_contract(db, contract, excess_km=excess_km)

     transition_status(
          db, Vehicle, user.tenant_id, contract.vehicle_id,
          expected=VehicleStatus.RENTED,
          new_status=VehicleStatus.AVAILABLE,
          conflict_message="Vehicle is not rented",
          mileage=return_mileage,
     )

     create_audit_log(
          db,
          tenant_id=user.tenant_id,
          user_id=user.id,
          action=audit_action,
          entity_type="contract",
          entity_id=contract.id,
          changes={
               "from": ContractStatus.ACTIVE,
               "to": ContractStatus.COMPLETED,
               "total_amount": total_amount,
          },
          metadata={
               "invoice_id": invoice.id,
               "invoice_number": invoice.invoice_number,
               "return_mileage": return_mileage,
               "excess_km": excess_km,
               "damages_amount": damages_amount,
          },
     )
     logger.info(
          "Contract %s closed, invoice %s for %s (tenant=%s)",
          contract.contract_number, invoice.invoice_number, total_amount, user.tenant_id,
     )
     return ContractCloseResponse(
          contract_id=contract.id,
          invoice_id=invoice.id,
          invoice_number=invoice.invoice_number,
          excess_km=excess_km,
          excess_km_amount=excess_km_amount,
          damages_amount=damages_amount,
          total_amount=total_amount,
     )


@workflow("close_contract_and_generate_invoice", "Failed to close the contract")
def close_contract_and_generate_invoice(db: Session, resolve_user, payload):
     user = require_permission(resolve_user, Resource.CONTRACTS, Action.UPDATE)
     data = parse(ContractCloseRequest, payload)
     return close_contract_in_transaction(
          db,
          user,
          data.contract_id,
          actual_return_date=data.actual_return_date,
          return_mileage=data.return_mileage,
          damages_amount=data.damages_amount,
          adjustment_amount=data.adjustment_amount,
          notes=data.notes,
     ).model_dump(mode="json")


@workflow("validate_return", "Failed to validate the return")
def validate_return(db: Session, resolve_user, payload):
     """
     Close a contract from its submitted return inspection: the return
     mileage and date come from the inspection, the damages from the agent.
     """
     user = require_permission(resolve_user, Resource.CONTRACTS, Action.UPDATE)
     data = parse(ReturnValidationRequest, payload)

     contract = get_tenant_contract(db, user.tenant_id, data.contract_id)
     return_inspection = (
          db.query(Inspection)
          .filter(
               Inspection.tenant_id == user.tenant_id,
               Inspection.contract_id == contract.id,
               Inspection.type == InspectionType.RETURN,
               Inspection.is_draft.is_(False),
          )
          .first()
     )
     if return_inspection is None:
          raise StateConflictError("A submitted return inspection is required")

     return close_contract_in_transaction(
          db,
          user,
          contract.id,
          actual_return_date=return_inspection.conducted_at or utcnow(),
          return_mileage=return_inspection.mileage,
          damages_amount=data.damages_amount,
          audit_action="contract_return_validated",
     ).model_dump(mode="json")


def _invoice_data(invoice: Invoice) -> dict:
     return InvoiceResponse.model_validate(invoice).model_dump(mode="json")


def _get_tenant_invoice(db: Session, tenant_id, invoice_id) -> Invoice:
     invoice = (
          db.query(Invoice)
          .filter(Invoice.id == invoice_id, Invoice.tenant_id == tenant_id)
          .first()
     )
     if invoice is None:
          raise NotFoundError("Invoice not found")
     return invoice


@workflow("list_invoices", "Failed to load invoices")
def list_invoices(db: Session, resolve_user, payload=None):
     user = require_permission(resolve_user, Resource.INVOICES, Action.READ)
     params = parse(InvoiceListParams, payload or {})

     query = db.query(Invoice).filter(Invoice.tenant_id == user.tenant_id)
     if params.status:
          query = query.filter(Invoice.status == params.status)

     total = query.count()
     invoices = (
          query.order_by(Invoice.created_at.desc())
          .offset((params.page - 1) * params.page_size)
          .limit(params.page_size)
          .all()
     )
     return InvoiceListResponse(
          invoices=[InvoiceResponse.model_validate(inv) for inv in invoices],
          total=total,
          page=params.page,
          page_size=params.page_size,
     ).model_dump(mode="json")


@workflow("get_invoice", "Failed to load the invoice")
def get_invoice(db: Session, resolve_user, invoice_id):
     user = require_permission(resolve_user, Resource.INVOICES, Action.READ)
     return _invoice_data(_get_tenant_invoice(db, user.tenant_id, parse_id(invoice_id)))


@workflow("update_invoice_status", "Failed to update the invoice")
def update_invoice_status(db: Session, resolve_user, payload):
     """pending -> invoiced, or pending/invoiced -> cancelled while nothing is paid."""
     user = require_permission(resolve_user, Resource.INVOICES, Action.UPDATE)
     data = parse(InvoiceStatusUpdate, payload)
     new_status = InvoiceStatus(data.new_status)

     invoice = _get_tenant_invoice(db, user.tenant_id, data.invoice_id)
     previous = invoice.status

     if new_status == InvoiceStatus.INVOICED:
          expected = (InvoiceStatus.PENDING,)
          values = {"issued_at": utcnow()}
          conditions = ()
     else:
          expected = PAYABLE_INVOICE_STATUSES
          values = {}
          if invoice.paid_amount > 0:
               raise StateConflictError(PAID_CANCEL_MESSAGE)
          conditions = (Invoice.paid_amount == 0,)
     if previous not in expected:
          raise StateConflictError(
               f"Cannot change invoice status from {previous.value} to {new_status.value}"
          )

     transition_status(
          db, Invoice, user.tenant_id, invoice.id,
          expected=expected,
          new_status=new_status,
          conflict_message="Invoice was changed by another user; reload and try again",
          conditions=conditions,
          **values
     )
     create_audit_log(
          db,
          tenant_id=user.tenant_id,
          user_id=user.id,
          action="invoice_status_changed",
          entity_type="invoice",
          entity_id=invoice.id,
          changes={"from": previous, "to": new_status},
     )
     return _invoice_data(invoice)


@workflow("get_return_validation_preview", "Failed to load the return preview")
def get_return_validation_preview(db: Session, resolve_user, contract_id):
     """
     Excess kilometres and new damages of an active contract whose return
     mileage is known. Nothing is written; closing stays a separate step.
     """
     user = require_permission(resolve_user, Resource.CONTRACTS, Action.READ)
     contract = get_tenant_contract(db, user.tenant_id, parse_id(contract_id))
     if contract.status != ContractStatus.ACTIVE:
          raise StateConflictError("Only active contracts can be previewed")
     if contract.departure_mileage is None or contract.return_mileage is None:
          raise StateConflictError("Departure and return mileage must be recorded first")

     new_damages = (
          db.query(InspectionDamage)
          .join(Inspection, InspectionDamage.inspection_id == Inspection.id)
          .filter(
               Inspection.tenant_id == user.tenant_id,
               Inspection.contract_id == contract.id,
               Inspection.type == InspectionType.RETURN,
               InspectionDamage.is_pre_existing.is_(False),
          )
          .all()
     )
     excess_km, excess_km_amount = calculate_excess_km(
          contract.departure_mileage,
          contract.return_mileage,
          contract.included_km_per_day,
          contract.total_days,
          contract.excess_km_rate,
     )
     return ReturnValidationPreview(
          contract_id=contract.id,
          contract_number=contract.contract_number,
          departure_mileage=contract.departure_mileage,
          return_mileage=contract.return_mileage,
          total_km_driven=contract.return_mileage - contract.departure_mileage,
          included_km_per_day=contract.included_km_per_day,
          total_days=contract.total_days,
          included_km=(contract.included_km_per_day or 0) * contract.total_days,
          excess_km=excess_km,
          excess_km_rate=contract.excess_km_rate,
          excess_km_amount=excess_km_amount,
          base_amount=contract.base_amount,
          options_amount=contract.options_amount or 0,
          current_total_amount=contract.total_amount,
          new_damages=[ReturnDamage.model_validate(d) for d in new_damages],
          new_damages_count=len(new_damages),
     ).model_dump(mode="json")


@workflow("get_invoice_status_counts", "Failed to count invoices")
def get_invoice_status_counts(db: Session, resolve_user):
     user = require_permission(resolve_user, Resource.INVOICES, Action.READ)
     rows = (
          db.query(Invoice.status, func.count(Invoice.id))
          .filter(Invoice.tenant_id == user.tenant_id)
          .group_by(Invoice.status)
          .all()
     )
     counts = {status.value: 0 for status in InvoiceStatus}
     for status, count in rows:
          counts[InvoiceStatus(status).value] = count
     return InvoiceStatusCounts(counts=counts, total=sum(counts.values())).model_dump()
