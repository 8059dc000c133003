# models/contract.py
import enum
import uuid

from sqlalchemy import (
     Column, String, Integer, Numeric, Boolean, Text, DateTime, ForeignKey, UniqueConstraint, Uuid,
)
from sqlalchemy.orm import relationship
from .base import Base, enum_column, utcnow


class ContractStatus(str, enum.Enum):
     """Rental contract lifecycle states."""
     DRAFT = "draft"
     APPROVED = "approved"
     PENDING_CG = "pending_cg"
     ACTIVE = "active"
     COMPLETED = "completed"
     CANCELLED = "cancelled"


TERMINAL_CONTRACT_STATUSES = (ContractStatus.COMPLETED, ContractStatus.CANCELLED)

# Statuses in which a contract still holds its vehicle for its period
BLOCKING_CONTRACT_STATUSES = (
     ContractStatus.DRAFT,
     ContractStatus.APPROVED,
     ContractStatus.PENDING_CG,
     ContractStatus.ACTIVE,
)


class PaymentMethod(str, enum.Enum):
     CASH_DEPARTURE = "cash_departure"
     CASH_RETURN = "cash_return"
     INVOICE = "invoice"
     CARD = "card"


class RentalContract(Base):
     """
     Rental contract - the aggregate linking a client, a vehicle, the
     inspections and the final invoice.

     Amounts are snapshotted at creation (daily_rate, total_days,
     base_amount, options_amount) and completed at closing
     (excess_km_amount, damages_amount, total_amount).
     """
     __tablename__ = "rental_contracts"
     __table_args__ = (
          UniqueConstraint("tenant_id", "contract_number", name="uq_rental_contracts_tenant_contract_number"),
     )

     id = Column(Uuid, primary_key=True, default=uuid.uuid4)
     tenant_id = Column(
          Uuid,
          ForeignKey("tenants.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     contract_number = Column(String(20), nullable=False, index=True)

     # Foreign keys
     client_id = Column(Uuid, ForeignKey("clients.id"), nullable=False, index=True)
     vehicle_id = Column(Uuid, ForeignKey("vehicles.id"), nullable=False, index=True)
     created_by_user_id = Column(Uuid, ForeignKey("users.id"), nullable=True)

     status = Column(
          enum_column(ContractStatus, "contract_status"),
          default=ContractStatus.DRAFT,
          nullable=False,
          index=True
     )

     # Rental period
     start_date = Column(DateTime, nullable=False)
     end_date = Column(DateTime, nullable=False)
     actual_return_date = Column(DateTime, nullable=True)

     # Pricing
     daily_rate = Column(Numeric(10, 2), nullable=False)
     total_days = Column(Integer, nullable=False)
     base_amount = Column(Numeric(12, 2), nullable=False)
     options_amount = Column(Numeric(12, 2), default=0, nullable=False)
     adjustment_amount = Column(Numeric(12, 2), default=0, nullable=False)
     excess_km_amount = Column(Numeric(12, 2), nullable=True)
     damages_amount = Column(Numeric(12, 2), nullable=True)
     total_amount = Column(Numeric(12, 2), nullable=False)
     deposit_amount = Column(Numeric(12, 2), nullable=True)

     # Mileage
     included_km_per_day = Column(Integer, nullable=True)
     excess_km_rate = Column(Numeric(10, 2), nullable=True)
     departure_mileage = Column(Integer, nullable=True)
     return_mileage = Column(Integer, nullable=True)

     # Terms
     terms_accepted = Column(Boolean, default=False, nullable=False)
     payment_method = Column(
          enum_column(PaymentMethod, "contract_payment_method"),
          default=PaymentMethod.INVOICE,
          nullable=False
     )
     notes = Column(Text, nullable=True)

     # Timestamps
     created_at = Column(DateTime, default=utcnow, nullable=False)
     updated_at = Column(DateTime, onupdate=utcnow, nullable=True)

     # Relationships
     options = relationship("ContractOption", back_populates="contract", cascade="all, delete-orphan")
     inspections = relationship("Inspection", back_populates="contract")
     invoice = relationship("Invoice", back_populates="contract", uselist=False)

     def __repr__(self):
          return f"<RentalContract(id={self.id}, number='{self.contract_number}', status='{self.status.value}')>"

     @property
     def is_terminal(self) -> bool:
          return self.status in TERMINAL_CONTRACT_STATUSES


class RentalOption(Base):
     """
     Rental option - a priced extra (child seat, GPS, extra driver...)
     offered by a tenant.
     """
     __tablename__ = "rental_options"

     id = Column(Uuid, primary_key=True, default=uuid.uuid4)
     tenant_id = Column(
          Uuid,
          ForeignKey("tenants.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     name = Column(String(100), nullable=False)
     daily_price = Column(Numeric(10, 2), nullable=False)
     is_per_day = Column(Boolean, default=True, nullable=False)
     is_active = Column(Boolean, default=True, nullable=False)

     def __repr__(self):
          return f"<RentalOption(id={self.id}, name='{self.name}')>"


class ContractOption(Base):
     """
     Snapshot of a rental option as priced on a given contract.
     """
     __tablename__ = "contract_options"

     id = Column(Uuid, primary_key=True, default=uuid.uuid4)
     contract_id = Column(
          Uuid,
          ForeignKey("rental_contracts.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     rental_option_id = Column(Uuid, ForeignKey("rental_options.id"), nullable=True)
     name = Column(String(100), nullable=False)
     daily_price = Column(Numeric(10, 2), nullable=False)
     quantity = Column(Integer, default=1, nullable=False)
     total_price = Column(Numeric(12, 2), nullable=False)

     # Relationships
     contract = relationship("RentalContract", back_populates="options")
