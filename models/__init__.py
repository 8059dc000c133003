from .base import Base
from .tenant import Tenant
from .user import User
from .vehicle import Vehicle, VehicleCategory, VehicleStatus
from .client import Client
from .contract import ContractOption, ContractStatus, PaymentMethod, RentalContract, RentalOption
from .inspection import FuelLevel, Inspection, InspectionDamage, InspectionType
from .invoice import Invoice, InvoiceStatus
from .payment import Payment
from .maintenance import MaintenanceRecord, MaintenanceStatus, MaintenanceType, MaintenanceUrgency
from .audit_log import AuditLog

__all__ = [
     "Base",
     "Tenant",
     "User",
     "Vehicle",
     "VehicleCategory",
     "VehicleStatus",
     "Client",
     "ContractOption",
     "ContractStatus",
     "PaymentMethod",
     "RentalContract",
     "RentalOption",
     "FuelLevel",
     "Inspection",
     "InspectionDamage",
     "InspectionType",
     "Invoice",
     "InvoiceStatus",
     "Payment",
     "MaintenanceRecord",
     "MaintenanceStatus",
     "MaintenanceType",
     "MaintenanceUrgency",
     "AuditLog",
]
