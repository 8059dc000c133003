from .common import ActionResult
from .contract import ContractCreate, ContractApproveRequest, ContractResponse
from .invoice import (
     ContractCloseRequest,
     ReturnValidationRequest,
     InvoiceResponse,
     InvoiceListResponse,
)
from .vehicle import VehicleStatusChangeRequest

__all__ = [
     "ActionResult",
     "ContractCreate",
     "ContractApproveRequest",
     "ContractResponse",
     "ContractCloseRequest",
     "ReturnValidationRequest",
     "InvoiceResponse",
     "InvoiceListResponse",
     "VehicleStatusChangeRequest",
]
