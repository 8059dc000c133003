# models/vehicle.py
import enum
import uuid

from sqlalchemy import Column, String, Integer, Numeric, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from .base import Base, enum_column, utcnow


class VehicleStatus(str, enum.Enum):
     """Fleet availability states."""
     AVAILABLE = "available"
     RENTED = "rented"
     MAINTENANCE = "maintenance"
     OUT_OF_SERVICE = "out_of_service"


class VehicleCategory(Base):
     """
     Vehicle category - groups vehicles sharing a default daily rate.
     """
     __tablename__ = "vehicle_categories"

     id = Column(Uuid, primary_key=True, default=uuid.uuid4)
     tenant_id = Column(
          Uuid,
          ForeignKey("tenants.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     name = Column(String(100), nullable=False)
     daily_rate = Column(Numeric(10, 2), nullable=False)
     created_at = Column(DateTime, default=utcnow, nullable=False)

     # Relationships
     vehicles = relationship("Vehicle", back_populates="category")

     def __repr__(self):
          return f"<VehicleCategory(id={self.id}, name='{self.name}', daily_rate={self.daily_rate})>"


class Vehicle(Base):
     """
     Vehicle model - one car of the tenant's fleet.

     `status` is only moved through the status workflows (direct status
     change, maintenance, contract activation and closing).
     """
     __tablename__ = "vehicles"

     id = Column(Uuid, primary_key=True, default=uuid.uuid4)
     tenant_id = Column(
          Uuid,
          ForeignKey("tenants.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     category_id = Column(Uuid, ForeignKey("vehicle_categories.id"), nullable=True)

     # Identification
     brand = Column(String(100), nullable=False)
     model = Column(String(100), nullable=False)
     plate_number = Column(String(20), nullable=False)
     mileage = Column(Integer, default=0, nullable=False)

     # Pricing
     daily_rate_override = Column(Numeric(10, 2), nullable=True)

     status = Column(
          enum_column(VehicleStatus, "vehicle_status"),
          default=VehicleStatus.AVAILABLE,
          nullable=False,
          index=True
     )

     # Timestamps
     deleted_at = Column(DateTime, nullable=True)
     created_at = Column(DateTime, default=utcnow, nullable=False)
     updated_at = Column(DateTime, onupdate=utcnow, nullable=True)

     # Relationships
     category = relationship("VehicleCategory", back_populates="vehicles")

     def __repr__(self):
          return f"<Vehicle(id={self.id}, plate='{self.plate_number}', status='{self.status.value}')>"

     @property
     def display_name(self) -> str:
          return f"{self.brand} {self.model} ({self.plate_number})"
