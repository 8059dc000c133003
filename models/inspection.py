# models/inspection.py
import enum
import uuid

from sqlalchemy import Column, String, Integer, Boolean, Text, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from .base import Base, enum_column, utcnow


class InspectionType(str, enum.Enum):
     DEPARTURE = "departure"
     RETURN = "return"


class FuelLevel(str, enum.Enum):
     EMPTY = "empty"
     QUARTER = "quarter"
     HALF = "half"
     THREE_QUARTER = "three_quarter"
     FULL = "full"


class Inspection(Base):
     """
     Vehicle condition snapshot taken at departure or return.

     A draft inspection can still be edited; a submitted one
     (is_draft=False) gates the contract transitions.
     """
     __tablename__ = "inspections"

     id = Column(Uuid, primary_key=True, default=uuid.uuid4)
     tenant_id = Column(
          Uuid,
          ForeignKey("tenants.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     contract_id = Column(
          Uuid,
          ForeignKey("rental_contracts.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     vehicle_id = Column(Uuid, ForeignKey("vehicles.id"), nullable=False)
     conducted_by_user_id = Column(Uuid, ForeignKey("users.id"), nullable=True)

     type = Column(enum_column(InspectionType, "inspection_type"), nullable=False)
     is_draft = Column(Boolean, default=True, nullable=False)
     mileage = Column(Integer, default=0, nullable=False)
     fuel_level = Column(
          enum_column(FuelLevel, "fuel_level"),
          default=FuelLevel.EMPTY,
          nullable=False
     )
     notes = Column(Text, nullable=True)

     # Timestamps
     conducted_at = Column(DateTime, nullable=True)
     created_at = Column(DateTime, default=utcnow, nullable=False)

     # Relationships
     contract = relationship("RentalContract", back_populates="inspections")
     damages = relationship("InspectionDamage", back_populates="inspection", cascade="all, delete-orphan")

     def __repr__(self):
          return f"<Inspection(id={self.id}, type='{self.type.value}', is_draft={self.is_draft})>"


class InspectionDamage(Base):
     """One damage noted during an inspection."""
     __tablename__ = "inspection_damages"

     id = Column(Uuid, primary_key=True, default=uuid.uuid4)
     inspection_id = Column(
          Uuid,
          ForeignKey("inspections.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     zone = Column(String(20), nullable=False)  # front, rear, left_side, right_side, roof, interior
     type = Column(String(20), nullable=False)  # scratch, dent, broken, stain, other
     severity = Column(String(10), nullable=False)  # low, medium, high
     description = Column(String(1000), nullable=True)
     is_pre_existing = Column(Boolean, default=True, nullable=False)

     # Relationships
     inspection = relationship("Inspection", back_populates="damages")
