from .errors import (
     ServiceError,
     AuthenticationError,
     AuthorizationError,
     ValidationError,
     StateConflictError,
     NotFoundError,
)
from .guards import CurrentUser, require_permission, require_special_permission
from .invoice_service import InvoiceService
from .ledger_service import (
     compute_transaction_hash,
     get_previous_hash,
     append_payment_record,
     verify_payment_entry,
     verify_payment_chain,
     GENESIS_HASH,
)
from .pricing import RentalDays, compute_rental_days
from .rbac import has_permission, has_special_permission

__all__ = [
     "ServiceError",
     "AuthenticationError",
     "AuthorizationError",
     "ValidationError",
     "StateConflictError",
     "NotFoundError",
     "CurrentUser",
     "require_permission",
     "require_special_permission",
     "InvoiceService",
     "compute_transaction_hash",
     "get_previous_hash",
     "append_payment_record",
     "verify_payment_entry",
     "verify_payment_chain",
     "GENESIS_HASH",
     "RentalDays",
     "compute_rental_days",
     "has_permission",
     "has_special_permission",
]
