"""
Payment Service - recording money received against invoices.
"""
import logging
from decimal import Decimal

from sqlalchemy import update
from sqlalchemy.orm import Session

from models import Invoice, InvoiceStatus
from models.base import utcnow
from models.invoice import PAYABLE_INVOICE_STATUSES
from schemas.payment import PaymentChainVerification, PaymentCreate, PaymentResponse
from .audit_service import create_audit_log
from .errors import NotFoundError, StateConflictError, ValidationError
from .guards import require_permission, require_special_permission
from .ledger_service import append_payment_record, verify_payment_chain
from .pricing import money
from .rbac import Action, Capability, Resource
from .results import parse, workflow
from .transitions import transition_status

logger = logging.getLogger(__name__)

CHANGED_MESSAGE = "Invoice was changed by another user; reload and try again"


def claim_invoice_amount(db: Session, tenant_id, invoice_id, amount: Decimal) -> None:
     """
     Add amount to the invoice's paid_amount in one conditional UPDATE.

     The row only moves while the invoice is payable and the new sum stays
     within total_amount, so of two payments racing for the same balance
     the second matches no row and is refused.
     """
     result = db.execute(
          update(Invoice)
          .where(
               Invoice.id == invoice_id,
               Invoice.tenant_id == tenant_id,
               Invoice.status.in_(PAYABLE_INVOICE_STATUSES),
               Invoice.paid_amount + amount <= Invoice.total_amount,
          )
          .values(paid_amount=Invoice.paid_amount + amount, updated_at=utcnow())
          .execution_options(synchronize_session="fetch")
     )
     if result.rowcount == 0:
          raise StateConflictError(CHANGED_MESSAGE)


@workflow("process_payment", "Failed to record the payment")
def process_payment(db: Session, resolve_user, payload):
     """
     Append a payment to an open invoice. The invoice becomes paid once
     its balance reaches zero; payments never exceed the invoice total.
     """
     user = require_special_permission(resolve_user, Capability.PROCESS_PAYMENT)
     data = parse(PaymentCreate, payload)

     invoice = (
          db.query(Invoice)
          .filter(Invoice.id == data.invoice_id, Invoice.tenant_id == user.tenant_id)
          .first()
     )
     if invoice is None:
          raise NotFoundError("Invoice not found")
     if invoice.status == InvoiceStatus.PAID:
          raise StateConflictError("Invoice is already paid")
     if invoice.status not in PAYABLE_INVOICE_STATUSES:
          raise StateConflictError(f"Invoice with status {invoice.status.value} cannot be paid")

     amount = money(data.amount)
     balance = money(invoice.balance)
     if amount > balance:
          raise ValidationError(f"Amount exceeds the outstanding balance ({balance})")

     claim_invoice_amount(db, user.tenant_id, invoice.id, amount)
     db.refresh(invoice)

     payment = append_payment_record(
          db,
          invoice_id=invoice.id,
          tenant_id=user.tenant_id,
          amount=amount,
          method=data.method,
          paid_at=data.paid_at,
          processed_by_user_id=user.id,
          reference=data.reference,
          notes=data.notes,
     )
     db.expire(invoice, ["payments"])

     new_balance = money(invoice.balance)
     invoice_status = invoice.status
     if new_balance == Decimal("0"):
          transition_status(
               db, Invoice, user.tenant_id, invoice.id,
               expected=PAYABLE_INVOICE_STATUSES,
               new_status=InvoiceStatus.PAID,
               conflict_message=CHANGED_MESSAGE,
          )
          invoice_status = InvoiceStatus.PAID

     create_audit_log(
          db,
          tenant_id=user.tenant_id,
          user_id=user.id,
          action="payment_processed",
          entity_type="invoice",
          entity_id=invoice.id,
          changes={"amount": amount, "method": data.method, "balance": new_balance, "status": invoice_status},
          metadata={"payment_id": payment.id, "transaction_hash": payment.transaction_hash},
     )
     logger.info("Payment %s of %s on invoice %s", payment.id, amount, invoice.invoice_number)
     return PaymentResponse(
          payment_id=payment.id,
          invoice_id=invoice.id,
          transaction_hash=payment.transaction_hash,
          balance=new_balance,
          invoice_status=invoice_status.value,
     ).model_dump(mode="json")


@workflow("verify_payments", "Failed to verify payments")
def verify_payments(db: Session, resolve_user):
     """Recheck the caller's tenant payment chain."""
     user = require_permission(resolve_user, Resource.PAYMENTS, Action.READ)
     verified, message, checked = verify_payment_chain(db, user.tenant_id)
     return PaymentChainVerification(verified=verified, message=message, entries_checked=checked).model_dump()
