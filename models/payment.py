"""
Payment model - append-only record of money received against an invoice.

Each record stores a SHA-256 hash of (invoice_id + tenant_id + amount + paid_at)
and the previous payment's hash within the same tenant, forming a chain.
Records are never updated or deleted by the application.
"""
import uuid

from sqlalchemy import Column, String, Numeric, Text, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from .base import Base, enum_column, utcnow
from .contract import PaymentMethod


class Payment(Base):
     """
     Immutable payment entry. Chain is formed per tenant via previous_hash.
     """
     __tablename__ = "payments"

     id = Column(Uuid, primary_key=True, default=uuid.uuid4)
     tenant_id = Column(
          Uuid,
          ForeignKey("tenants.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     invoice_id = Column(
          Uuid,
          ForeignKey("invoices.id", ondelete="RESTRICT"),  # Prevent delete if payments exist
          nullable=False,
          index=True
     )
     processed_by_user_id = Column(Uuid, ForeignKey("users.id"), nullable=True)

     amount = Column(Numeric(12, 2), nullable=False)
     method = Column(enum_column(PaymentMethod, "payment_method"), nullable=False)
     reference = Column(String(255), nullable=True)
     notes = Column(Text, nullable=True)
     paid_at = Column(DateTime, nullable=False)

     transaction_hash = Column(String(64), nullable=False, unique=True, index=True)  # SHA-256 hex length
     previous_hash = Column(String(64), nullable=False, index=True)  # "0" for the first payment of a tenant
     created_at = Column(DateTime, default=utcnow, nullable=False)

     # Relationships
     invoice = relationship("Invoice", back_populates="payments")

     def __repr__(self):
          return f"<Payment(id={self.id}, invoice_id={self.invoice_id}, amount={self.amount}, hash={self.transaction_hash[:16]}...)>"
