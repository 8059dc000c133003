import os
import shutil
import tempfile
import uuid
from datetime import datetime
from decimal import Decimal
from unittest import mock

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from models import Invoice, InvoiceStatus, Payment
from services.ledger_service import (
     GENESIS_HASH,
     compute_transaction_hash,
     verify_payment_chain,
     verify_payment_entry,
)
from services.invoice_service import close_contract_and_generate_invoice
from services import payment_service
from services.payment_service import process_payment, verify_payments
from tests.base import DatabaseTestCase

PAID_AT = datetime(2026, 3, 5, 10, 30)


class PaymentTestCase(DatabaseTestCase):

     def setUp(self):
          super().setUp()
          self.invoice = self.closed_invoice()

     def closed_invoice(self):
          contract, _ = self.make_active_contract()
          result = close_contract_and_generate_invoice(self.db, self.as_user(self.admin), {
               "contract_id": contract.id,
               "actual_return_date": datetime(2026, 3, 5, 10, 0),
               "return_mileage": 10200,
          })
          self.assertTrue(result.success, result.error)
          return self.db.get(Invoice, uuid.UUID(result.data["invoice_id"]))

     def pay(self, amount, invoice=None, user=None, paid_at=PAID_AT):
          return process_payment(self.db, self.as_user(user or self.admin), {
               "invoice_id": (invoice or self.invoice).id,
               "amount": amount,
               "method": "card",
               "paid_at": paid_at,
          })


class ProcessPaymentTests(PaymentTestCase):

     def test_partial_payment_keeps_invoice_open(self):
          result = self.pay("100.00")

          self.assertTrue(result.success, result.error)
          self.assertEqual(Decimal(result.data["balance"]), Decimal("50.00"))
          self.assertEqual(result.data["invoice_status"], "pending")
          self.assertEqual(self.reload(self.invoice).status, InvoiceStatus.PENDING)

     def test_full_payment_marks_invoice_paid(self):
          self.pay("100.00")
          result = self.pay("50.00", paid_at=datetime(2026, 3, 6, 8, 0))

          self.assertTrue(result.success, result.error)
          self.assertEqual(result.data["invoice_status"], "paid")
          invoice = self.reload(self.invoice)
          self.assertEqual(invoice.status, InvoiceStatus.PAID)
          self.assertEqual(invoice.balance, Decimal("0.00"))
          self.assertEqual(self.audit_actions(self.invoice.id), ["payment_processed", "payment_processed"])

     def test_overpayment_is_refused(self):
          result = self.pay("150.01")

          self.assertEqual(result.code, "validation")
          self.assertEqual(self.db.query(Payment).count(), 0)

     def test_paid_invoice_takes_no_more_payments(self):
          self.pay("150.00")
          result = self.pay("1.00")
          self.assertEqual(result.code, "conflict")
          self.assertEqual(result.error, "Invoice is already paid")

     def test_cancelled_invoice_cannot_be_paid(self):
          self.invoice.status = InvoiceStatus.CANCELLED
          self.db.commit()
          result = self.pay("10.00")
          self.assertEqual(result.code, "conflict")

     def test_agent_lacks_payment_capability(self):
          result = self.pay("10.00", user=self.agent)
          self.assertEqual(result.code, "forbidden")
          self.assertEqual(self.db.query(Payment).count(), 0)

     def test_zero_amount_is_invalid(self):
          self.assertEqual(self.pay("0").code, "validation")

     def test_other_tenant_invoice(self):
          outsider = self.make_user(self.make_tenant("other"), "admin")
          result = self.pay("10.00", user=outsider)
          self.assertEqual(result.code, "not_found")


class PaymentChainTests(PaymentTestCase):

     def test_payments_are_chained_per_tenant(self):
          first = self.pay("50.00").data
          second = self.pay("50.00").data

          first_row = self.db.get(Payment, uuid.UUID(first["payment_id"]))
          second_row = self.db.get(Payment, uuid.UUID(second["payment_id"]))
          self.assertEqual(first_row.previous_hash, GENESIS_HASH)
          self.assertEqual(second_row.previous_hash, first_row.transaction_hash)
          self.assertNotEqual(first_row.transaction_hash, second_row.transaction_hash)

     def test_hash_covers_payment_fields(self):
          result = self.pay("25.00")
          payment = self.db.get(Payment, uuid.UUID(result.data["payment_id"]))
          expected = compute_transaction_hash(
               self.invoice.id, self.tenant.id, Decimal("25.00"), PAID_AT, GENESIS_HASH
          )
          self.assertEqual(payment.transaction_hash, expected)
          self.assertEqual(verify_payment_entry(self.db, self.tenant.id, payment.id), (True, "Verification passed"))

     def test_chain_verifies(self):
          self.pay("50.00")
          self.pay("60.00")
          other_invoice = self.closed_invoice()
          self.pay("10.00", invoice=other_invoice)

          result = verify_payments(self.db, self.as_user(self.agent))

          self.assertTrue(result.success, result.error)
          self.assertTrue(result.data["verified"])
          self.assertEqual(result.data["entries_checked"], 3)

     def test_tampered_amount_is_detected(self):
          self.pay("50.00")
          payment_id = uuid.UUID(self.pay("60.00").data["payment_id"])
          self.db.query(Payment).filter(Payment.id == payment_id).update({Payment.amount: Decimal("6.00")})
          self.db.commit()

          verified, message, _ = verify_payment_chain(self.db, self.tenant.id)

          self.assertFalse(verified)
          self.assertIn("Hash mismatch", message)
          self.assertFalse(verify_payment_entry(self.db, self.tenant.id, payment_id)[0])

     def test_chains_are_independent_across_tenants(self):
          other = self.make_tenant("other")
          self.pay("50.00")
          self.assertEqual(verify_payment_chain(self.db, other.id), (True, "Chain is empty (no entries)", 0))

     def test_viewer_cannot_verify(self):
          self.assertEqual(verify_payments(self.db, self.as_user(self.viewer)).code, "forbidden")


class ConcurrentPaymentTests(PaymentTestCase):
     """Two sessions paying the same invoice, interleaved after the balance check."""

     def build_engine(self):
          directory = tempfile.mkdtemp()
          self.addCleanup(shutil.rmtree, directory, True)
          return create_engine(f"sqlite:///{os.path.join(directory, 'rental.db')}")

     def setUp(self):
          super().setUp()
          self.other_db = sessionmaker(bind=self.engine)()
          self.addCleanup(self.other_db.close)

     def pay_from_other_session(self, amount):
          return process_payment(self.other_db, self.as_user(self.admin), {
               "invoice_id": self.invoice.id,
               "amount": amount,
               "method": "cash_return",
               "paid_at": datetime(2026, 3, 5, 11, 0),
          })

     def interleave(self, amount):
          """Run a payment in the other session right before this session's claim."""
          claim = payment_service.claim_invoice_amount
          pending = [amount]
          results = []

          def claim_after_other_payment(*args, **kwargs):
               if pending:
                    results.append(self.pay_from_other_session(pending.pop()))
               return claim(*args, **kwargs)

          patcher = mock.patch.object(
               payment_service, "claim_invoice_amount", side_effect=claim_after_other_payment
          )
          patcher.start()
          self.addCleanup(patcher.stop)
          return results

     def test_second_payment_cannot_overshoot_the_total(self):
          results = self.interleave("100.00")

          result = self.pay("100.00")

          self.assertTrue(results[0].success, results[0].error)
          self.assertEqual(result.code, "conflict")
          invoice = self.reload(self.invoice)
          self.assertEqual(invoice.paid_amount, Decimal("100.00"))
          self.assertEqual(invoice.balance, Decimal("50.00"))
          self.assertEqual(invoice.status, InvoiceStatus.PENDING)
          self.assertEqual(self.db.query(Payment).count(), 1)

     def test_payments_that_fit_both_succeed(self):
          results = self.interleave("50.00")

          result = self.pay("100.00")

          self.assertTrue(results[0].success, results[0].error)
          self.assertTrue(result.success, result.error)
          self.assertEqual(result.data["invoice_status"], "paid")
          invoice = self.reload(self.invoice)
          self.assertEqual(invoice.paid_amount, Decimal("150.00"))
          self.assertEqual(invoice.status, InvoiceStatus.PAID)
          self.assertTrue(verify_payment_chain(self.db, self.tenant.id)[0])
