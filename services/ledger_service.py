"""
Payment Ledger Service - blockchain-like immutable payment records.

When a payment is recorded:
1. Compute SHA-256 hash from invoice_id + tenant_id + amount + paid_at + previous hash
2. Store record with reference to previous record's hash (one chain per tenant)
3. Payment records are append-only; no update/delete

Verification: recompute every hash and walk the chain from the genesis link.
"""
import hashlib
from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple

from sqlalchemy.orm import Session, aliased

from models import Payment
from models.base import utcnow
from models.contract import PaymentMethod


# Genesis block: no previous record
GENESIS_HASH = "0"


def _normalize_amount(amount: Decimal) -> str:
     """Normalize amount to canonical string for hashing (2 decimal places)."""
     return f"{Decimal(amount):.2f}"


def _normalize_timestamp(ts: datetime) -> str:
     """Normalize timestamp to ISO format for deterministic hashing."""
     return ts.replace(tzinfo=None).isoformat()


def compute_transaction_hash(
     invoice_id,
     tenant_id,
     amount: Decimal,
     timestamp: datetime,
     previous_hash: str = GENESIS_HASH
) -> str:
     """
     Compute SHA-256 hash for a payment record.

     Input string: invoice_id|tenant_id|amount|timestamp|previous_hash (canonical format).
     Including the previous hash makes two identical payments hash differently.
     Returns 64-char hex string.
     """
     payload = "|".join([
          str(invoice_id),
          str(tenant_id),
          _normalize_amount(amount),
          _normalize_timestamp(timestamp),
          previous_hash,
     ])
     return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def get_previous_hash(db: Session, tenant_id) -> str:
     """Hash of the tenant's chain tip (the payment nobody points to yet), or GENESIS_HASH if empty."""
     successor = aliased(Payment)
     last = (
          db.query(Payment.transaction_hash)
          .filter(Payment.tenant_id == tenant_id)
          .filter(
               ~db.query(successor.id)
               .filter(
                    successor.tenant_id == tenant_id,
                    successor.previous_hash == Payment.transaction_hash,
               )
               .exists()
          )
          .first()
     )
     if last is None:
          return GENESIS_HASH
     return last.transaction_hash


def append_payment_record(
     db: Session,
     invoice_id,
     tenant_id,
     amount: Decimal,
     method: PaymentMethod,
     paid_at: Optional[datetime] = None,
     processed_by_user_id=None,
     reference: Optional[str] = None,
     notes: Optional[str] = None
) -> Payment:
     """
     Append an immutable payment record to the tenant's chain.

     - Sets previous_hash to the chain tip's transaction_hash (or "0")
     - Computes transaction_hash over the payment fields and previous_hash
     - Does NOT update or delete existing records (immutability)
     """
     # whole seconds; DATETIME columns do not keep microseconds exactly
     paid_at = (paid_at or utcnow()).replace(microsecond=0, tzinfo=None)

     previous_hash = get_previous_hash(db, tenant_id)
     transaction_hash = compute_transaction_hash(invoice_id, tenant_id, amount, paid_at, previous_hash)

     entry = Payment(
          tenant_id=tenant_id,
          invoice_id=invoice_id,
          processed_by_user_id=processed_by_user_id,
          amount=amount,
          method=method,
          reference=reference,
          notes=notes,
          paid_at=paid_at,
          transaction_hash=transaction_hash,
          previous_hash=previous_hash
     )
     db.add(entry)
     db.flush()
     return entry


def verify_payment_entry(db: Session, tenant_id, payment_id) -> Tuple[bool, str]:
     """
     Verify one payment by recomputing its hash and checking its chain link.

     Returns:
          (success: bool, message: str)
     """
     entry = (
          db.query(Payment)
          .filter(Payment.id == payment_id, Payment.tenant_id == tenant_id)
          .first()
     )
     if entry is None:
          return False, "Payment not found"

     computed = compute_transaction_hash(
          entry.invoice_id, entry.tenant_id, entry.amount, entry.paid_at, entry.previous_hash
     )
     if computed != entry.transaction_hash:
          return False, f"Hash mismatch: stored={entry.transaction_hash[:16]}..., computed={computed[:16]}..."

     if entry.previous_hash != GENESIS_HASH:
          prev_entry = (
               db.query(Payment.id)
               .filter(Payment.tenant_id == tenant_id, Payment.transaction_hash == entry.previous_hash)
               .first()
          )
          if prev_entry is None:
               return False, "Chain broken: previous_hash does not match any payment"

     return True, "Verification passed"


def verify_payment_chain(db: Session, tenant_id) -> Tuple[bool, str, int]:
     """
     Verify the tenant's whole chain, from the genesis link to the tip.

     Returns:
          (all_valid: bool, message: str, entries_checked: int)
     """
     entries = db.query(Payment).filter(Payment.tenant_id == tenant_id).all()
     if not entries:
          return True, "Chain is empty (no entries)", 0

     by_previous = {}
     for entry in entries:
          if entry.previous_hash in by_previous:
               return False, f"Chain forked at previous_hash={entry.previous_hash[:16]}...", 0
          by_previous[entry.previous_hash] = entry

     prev_hash = GENESIS_HASH
     checked = 0
     while prev_hash in by_previous:
          entry = by_previous[prev_hash]
          computed = compute_transaction_hash(
               entry.invoice_id, entry.tenant_id, entry.amount, entry.paid_at, entry.previous_hash
          )
          if computed != entry.transaction_hash:
               return False, f"Hash mismatch at payment id={entry.id}", checked
          prev_hash = entry.transaction_hash
          checked += 1

     if checked != len(entries):
          return False, f"Chain broken: {len(entries) - checked} payment(s) not linked to the chain", checked

     return True, "Full chain verification passed", checked
