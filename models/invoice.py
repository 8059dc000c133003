import enum
import uuid
from decimal import Decimal

from sqlalchemy import Column, String, Numeric, Text, DateTime, ForeignKey, JSON, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from .base import Base, enum_column, utcnow


class InvoiceStatus(str, enum.Enum):
     """Enumeration for invoice status."""
     PENDING = "pending"
     INVOICED = "invoiced"
     VERIFICATION = "verification"
     PAID = "paid"
     CONFLICT = "conflict"
     CANCELLED = "cancelled"


PAYABLE_INVOICE_STATUSES = (InvoiceStatus.PENDING, InvoiceStatus.INVOICED)


class Invoice(Base):
     """
     Invoice model - final billing of a rental contract.

     Exactly one invoice exists per contract (unique contract_id); it is
     created when the contract is closed. Payments are appended against it
     and paid_amount keeps their running sum.
     """
     __tablename__ = "invoices"
     __table_args__ = (
          UniqueConstraint("tenant_id", "invoice_number", name="uq_invoices_tenant_invoice_number"),
     )

     id = Column(Uuid, primary_key=True, default=uuid.uuid4)

     # Foreign keys
     tenant_id = Column(
          Uuid,
          ForeignKey("tenants.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     contract_id = Column(
          Uuid,
          ForeignKey("rental_contracts.id", ondelete="RESTRICT"),
          nullable=False,
          unique=True,  # One invoice per contract
          index=True
     )
     client_id = Column(Uuid, ForeignKey("clients.id"), nullable=False, index=True)

     # Invoice details
     invoice_number = Column(String(20), nullable=False, index=True)
     status = Column(
          enum_column(InvoiceStatus, "invoice_status"),
          default=InvoiceStatus.PENDING,
          nullable=False,
          index=True
     )
     subtotal = Column(Numeric(12, 2), nullable=False)
     total_amount = Column(Numeric(12, 2), nullable=False)
     # Running sum of payments; only moved by a guarded UPDATE
     paid_amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
     line_items = Column(JSON, nullable=False, default=list)
     notes = Column(Text, nullable=True)

     # Timestamps
     issued_at = Column(DateTime, nullable=True)
     created_at = Column(DateTime, default=utcnow, nullable=False)
     updated_at = Column(DateTime, onupdate=utcnow, nullable=True)

     # Relationships
     contract = relationship("RentalContract", back_populates="invoice")
     payments = relationship(
          "Payment",
          back_populates="invoice",
          order_by="Payment.paid_at",
     )

     def __repr__(self):
          return f"<Invoice(id={self.id}, number='{self.invoice_number}', status='{self.status.value}', total={self.total_amount})>"

     @property
     def balance(self) -> Decimal:
          """Outstanding amount: total_amount minus paid_amount."""
          return Decimal(self.total_amount) - Decimal(self.paid_amount or 0)

     @property
     def is_payable(self) -> bool:
          return self.status in PAYABLE_INVOICE_STATUSES
