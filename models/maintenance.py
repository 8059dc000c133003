# models/maintenance.py
import enum
import uuid

from sqlalchemy import Column, String, Numeric, Text, DateTime, ForeignKey, Uuid
from .base import Base, enum_column, utcnow


class MaintenanceType(str, enum.Enum):
     REGULAR_SERVICE = "regular_service"
     REPAIR = "repair"
     TECHNICAL_INSPECTION = "technical_inspection"
     TIRES = "tires"
     OTHER = "other"


class MaintenanceStatus(str, enum.Enum):
     OPEN = "open"
     IN_PROGRESS = "in_progress"
     COMPLETED = "completed"


OPEN_MAINTENANCE_STATUSES = (MaintenanceStatus.OPEN, MaintenanceStatus.IN_PROGRESS)


class MaintenanceUrgency(str, enum.Enum):
     LOW = "low"
     MEDIUM = "medium"
     HIGH = "high"


class MaintenanceRecord(Base):
     """
     Maintenance record - a workshop visit for a vehicle.
     While any record is open the vehicle stays in `maintenance`.
     """
     __tablename__ = "maintenance_records"

     id = Column(Uuid, primary_key=True, default=uuid.uuid4)
     tenant_id = Column(
          Uuid,
          ForeignKey("tenants.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     vehicle_id = Column(
          Uuid,
          ForeignKey("vehicles.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     created_by_user_id = Column(Uuid, ForeignKey("users.id"), nullable=True)

     type = Column(enum_column(MaintenanceType, "maintenance_type"), nullable=False)
     description = Column(Text, nullable=False)
     status = Column(
          enum_column(MaintenanceStatus, "maintenance_status"),
          default=MaintenanceStatus.OPEN,
          nullable=False,
          index=True
     )
     urgency = Column(
          enum_column(MaintenanceUrgency, "maintenance_urgency"),
          default=MaintenanceUrgency.MEDIUM,
          nullable=False
     )

     # Costs
     estimated_cost = Column(Numeric(10, 2), nullable=True)
     final_cost = Column(Numeric(10, 2), nullable=True)

     mechanic_name = Column(String(255), nullable=True)
     notes = Column(Text, nullable=True)

     # Period
     start_date = Column(DateTime, default=utcnow, nullable=False)
     end_date = Column(DateTime, nullable=True)

     created_at = Column(DateTime, default=utcnow, nullable=False)
     updated_at = Column(DateTime, onupdate=utcnow, nullable=True)

     def __repr__(self):
          return f"<MaintenanceRecord(id={self.id}, vehicle_id={self.vehicle_id}, status='{self.status.value}')>"
