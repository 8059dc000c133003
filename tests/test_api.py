import uuid
from decimal import Decimal

from fastapi.testclient import TestClient
from jose import jwt

import dependencies
from database import get_session
from main import app
from models import Client, ContractStatus, Invoice, VehicleStatus
from services.guards import CurrentUser
from tests.base import END, START, DatabaseTestCase


class ApiTestCase(DatabaseTestCase):

     def setUp(self):
          super().setUp()

          def override_session():
               yield self.db

          app.dependency_overrides[get_session] = override_session
          self.client = TestClient(app)

     def tearDown(self):
          app.dependency_overrides.clear()
          super().tearDown()

     def sign_in(self, user):
          current = CurrentUser.model_validate(user)
          app.dependency_overrides[dependencies.get_current_user] = lambda: current


class AuthenticationTests(ApiTestCase):

     def bearer(self, claims, secret=None):
          token = jwt.encode(claims, secret or dependencies.SECRET_KEY, algorithm=dependencies.ALGORITHM)
          return {"Authorization": f"Bearer {token}"}

     def test_missing_token_is_401(self):
          response = self.client.get("/api/vehicles")
          self.assertEqual(response.status_code, 401)
          self.assertEqual(response.json()["detail"]["code"], "not_authenticated")

     def test_valid_token(self):
          self.make_vehicle()
          response = self.client.get("/api/vehicles", headers=self.bearer({"id": str(self.viewer.id)}))
          self.assertEqual(response.status_code, 200, response.text)
          self.assertEqual(response.json()["total"], 1)

     def test_token_signed_with_other_secret(self):
          headers = self.bearer({"id": str(self.viewer.id)}, secret="not-the-secret")
          self.assertEqual(self.client.get("/api/vehicles", headers=headers).status_code, 401)

     def test_token_for_unknown_user(self):
          headers = self.bearer({"id": "00000000-0000-0000-0000-000000000000"})
          self.assertEqual(self.client.get("/api/vehicles", headers=headers).status_code, 401)


class VehicleApiTests(ApiTestCase):

     def test_status_change(self):
          self.sign_in(self.agent)
          vehicle = self.make_vehicle()

          response = self.client.post("/api/vehicles/status", json={
               "vehicle_id": str(vehicle.id), "new_status": "maintenance", "reason": "Oil leak"
          })

          self.assertEqual(response.status_code, 200, response.text)
          self.assertEqual(self.reload(vehicle).status, VehicleStatus.MAINTENANCE)

     def test_rented_vehicle_is_409(self):
          self.sign_in(self.admin)
          _, vehicle = self.make_active_contract()

          response = self.client.post("/api/vehicles/status", json={
               "vehicle_id": str(vehicle.id), "new_status": "available"
          })

          self.assertEqual(response.status_code, 409)
          self.assertEqual(response.json()["detail"]["code"], "conflict")

     def test_viewer_is_403(self):
          self.sign_in(self.viewer)
          vehicle = self.make_vehicle()
          response = self.client.post("/api/vehicles/status", json={
               "vehicle_id": str(vehicle.id), "new_status": "maintenance"
          })
          self.assertEqual(response.status_code, 403)

     def test_missing_vehicle_is_404_with_detail(self):
          self.sign_in(self.viewer)
          response = self.client.get("/api/vehicles/00000000-0000-0000-0000-000000000000")
          self.assertEqual(response.status_code, 404)
          self.assertEqual(response.json()["detail"]["code"], "not_found")


class ContractApiTests(ApiTestCase):

     def test_rental_from_draft_to_paid_invoice(self):
          self.sign_in(self.admin)
          vehicle = self.make_vehicle(mileage=5000)
          client = self.make_client()

          created = self.client.post("/api/contracts", json={
               "vehicle_id": str(vehicle.id),
               "client_id": str(client.id),
               "start_date": START.isoformat(),
               "end_date": END.isoformat(),
          })
          self.assertEqual(created.status_code, 201, created.text)
          contract_id = created.json()["id"]

          approved = self.client.post(f"/api/contracts/{contract_id}/approve", json={"terms_accepted": True})
          self.assertEqual(approved.json()["status"], "approved")

          inspection = self.client.post("/api/inspections", json={"contract_id": contract_id, "type": "departure"})
          self.assertEqual(inspection.status_code, 201, inspection.text)
          submitted = self.client.post("/api/inspections/departure/submit", json={
               "inspection_id": inspection.json()["inspection_id"], "mileage": 5000, "fuel_level": "full",
          })
          self.assertEqual(submitted.status_code, 200, submitted.text)
          self.assertEqual(self.reload(vehicle).status, VehicleStatus.RENTED)

          closed = self.client.post("/api/contracts/close", json={
               "contract_id": contract_id,
               "actual_return_date": END.isoformat(),
               "return_mileage": 5400,
          })
          self.assertEqual(closed.status_code, 200, closed.text)
          invoice_id = closed.json()["invoice_id"]

          again = self.client.post("/api/contracts/close", json={
               "contract_id": contract_id,
               "actual_return_date": END.isoformat(),
               "return_mileage": 5400,
          })
          self.assertEqual(again.status_code, 409)

          paid = self.client.post("/api/payments", json={
               "invoice_id": invoice_id, "amount": "150.00", "method": "card", "paid_at": END.isoformat(),
          })
          self.assertEqual(paid.status_code, 201, paid.text)
          self.assertEqual(paid.json()["invoice_status"], "paid")

          invoice = self.client.get(f"/api/invoices/{invoice_id}")
          self.assertEqual(invoice.json()["status"], "paid")
          self.assertEqual(self.client.get("/api/payments/verify").json()["verified"], True)

          history = self.client.get(f"/api/audit-logs/contract/{contract_id}")
          self.assertEqual(
               [entry["action"] for entry in history.json()],
               ["contract_closed", "contract_activated", "contract_approved", "contract_created"],
          )

     def test_approval_without_terms_waits_for_conditions(self):
          self.sign_in(self.admin)
          contract = self.make_contract(self.make_vehicle(), self.make_client())

          response = self.client.post(f"/api/contracts/{contract.id}/approve", json={"terms_accepted": False})

          self.assertEqual(response.status_code, 200, response.text)
          self.assertEqual(response.json()["status"], "pending_cg")
          self.assertEqual(self.reload(contract).status, ContractStatus.PENDING_CG)

     def test_malformed_body_is_422(self):
          self.sign_in(self.admin)
          response = self.client.post("/api/contracts/close", json={"contract_id": "nope"})
          self.assertEqual(response.status_code, 422)
          self.assertEqual(response.json()["detail"]["code"], "validation")

     def test_return_preview(self):
          self.sign_in(self.viewer)
          contract, _ = self.make_active_contract(included_km_per_day=100, excess_km_rate=Decimal("0.20"))
          contract.return_mileage = 10450
          self.db.commit()

          response = self.client.get(f"/api/contracts/{contract.id}/return-preview")

          self.assertEqual(response.status_code, 200, response.text)
          self.assertEqual(response.json()["excess_km"], 150)
          self.assertEqual(Decimal(response.json()["excess_km_amount"]), Decimal("30.00"))


class FleetAndClientApiTests(ApiTestCase):

     def test_create_then_update_vehicle(self):
          self.sign_in(self.agent)
          created = self.client.post("/api/vehicles", json={
               "category_id": str(self.category.id),
               "brand": "Renault",
               "model": "Clio",
               "plate_number": "gh-456-ij",
               "mileage": 500,
          })
          self.assertEqual(created.status_code, 201, created.text)
          self.assertEqual(created.json()["plate_number"], "GH-456-IJ")

          updated = self.client.put(f"/api/vehicles/{created.json()['id']}", json={
               "category_id": str(self.category.id),
               "brand": "Renault",
               "model": "Clio V",
               "plate_number": "GH-456-IJ",
               "mileage": 650,
          })
          self.assertEqual(updated.status_code, 200, updated.text)
          self.assertEqual(updated.json()["model"], "Clio V")
          self.assertEqual(updated.json()["status"], "available")

     def test_client_lifecycle(self):
          self.sign_in(self.agent)
          created = self.client.post("/api/clients", json={
               "first_name": "Ada", "last_name": "Lovelace", "email": "ada.com", "phone": "0102030405",
          })
          self.assertEqual(created.status_code, 201, created.text)
          client_id = created.json()["id"]

          toggled = self.client.post(f"/api/clients/{client_id}/toggle-trusted")
          self.assertEqual(toggled.json()["is_trusted"], True)

          deleted = self.client.delete(f"/api/clients/{client_id}")
          self.assertEqual(deleted.status_code, 200, deleted.text)
          self.db.expire_all()
          self.assertIsNotNone(self.db.get(Client, uuid.UUID(client_id)).deleted_at)
          self.assertEqual(self.client.get(f"/api/clients/{client_id}").status_code, 404)

     def test_invoice_status_counts(self):
          self.sign_in(self.viewer)
          contract, _ = self.make_active_contract()
          self.db.add(Invoice(
               tenant_id=self.tenant.id,
               contract_id=contract.id,
               client_id=contract.client_id,
               invoice_number="FAC-2026-0001",
               subtotal=Decimal("150.00"),
               total_amount=Decimal("150.00"),
               line_items=[],
          ))
          self.db.commit()

          response = self.client.get("/api/invoices/status-counts")

          self.assertEqual(response.status_code, 200, response.text)
          self.assertEqual(response.json()["counts"]["pending"], 1)
          self.assertEqual(response.json()["counts"]["paid"], 0)
          self.assertEqual(response.json()["total"], 1)


class GuardBeforeValidationTests(ApiTestCase):
     """An anonymous caller is told to authenticate whatever the request looks like."""

     def test_anonymous_malformed_body_is_401(self):
          response = self.client.post("/api/contracts/close", json={"contract_id": "nope"})
          self.assertEqual(response.status_code, 401)
          self.assertEqual(response.json()["detail"]["code"], "not_authenticated")

     def test_anonymous_missing_body_is_401(self):
          self.assertEqual(self.client.post("/api/payments").status_code, 401)

     def test_anonymous_non_object_body_is_401(self):
          self.assertEqual(self.client.post("/api/vehicles/status", json=[1, 2]).status_code, 401)

     def test_anonymous_malformed_path_id_is_401(self):
          self.assertEqual(self.client.get("/api/contracts/not-a-uuid").status_code, 401)

     def test_signed_in_non_object_body_is_422(self):
          self.sign_in(self.agent)
          response = self.client.post("/api/vehicles/status", json=[1, 2])
          self.assertEqual(response.status_code, 422)
          self.assertEqual(response.json()["detail"]["code"], "validation")

     def test_signed_in_malformed_path_id_is_422(self):
          self.sign_in(self.viewer)
          self.assertEqual(self.client.get("/api/invoices/not-a-uuid").status_code, 422)


class AppTests(ApiTestCase):

     def test_health(self):
          response = self.client.get("/health")
          self.assertEqual(response.status_code, 200)
          self.assertEqual(response.json()["status"], "ok")

     def test_unknown_route(self):
          response = self.client.get("/api/spaceships")
          self.assertEqual(response.status_code, 404)
          self.assertEqual(response.json(), {"error": "Route not found"})
