from models import ContractStatus, Inspection, InspectionType, VehicleStatus
from services.inspection_service import (
     create_draft_inspection,
     submit_departure_inspection,
     submit_return_inspection,
)
from tests.base import DatabaseTestCase


class DepartureInspectionTests(DatabaseTestCase):

     def setUp(self):
          super().setUp()
          self.vehicle = self.make_vehicle(mileage=20000)
          self.contract = self.make_contract(self.vehicle, self.make_client(), status=ContractStatus.APPROVED)

     def open_draft(self):
          result = create_draft_inspection(self.db, self.as_user(self.agent), {
               "contract_id": self.contract.id, "type": "departure"
          })
          self.assertTrue(result.success, result.error)
          return result.data["inspection_id"]

     def test_draft_requires_approved_contract(self):
          draft = self.make_contract(self.make_vehicle(), self.make_client())
          result = create_draft_inspection(self.db, self.as_user(self.agent), {"contract_id": draft.id})
          self.assertEqual(result.code, "conflict")

     def test_only_one_departure_inspection(self):
          self.open_draft()
          result = create_draft_inspection(self.db, self.as_user(self.agent), {"contract_id": self.contract.id})
          self.assertEqual(result.code, "conflict")
          self.assertEqual(self.db.query(Inspection).count(), 1)

     def test_submit_activates_contract(self):
          inspection_id = self.open_draft()
          result = submit_departure_inspection(self.db, self.as_user(self.agent), {
               "inspection_id": inspection_id,
               "mileage": 20050,
               "fuel_level": "full",
               "damages": [{"zone": "front", "type": "scratch", "severity": "low"}],
          })

          self.assertTrue(result.success, result.error)
          self.assertFalse(result.data["is_draft"])
          self.assertEqual(result.data["damage_count"], 1)
          contract = self.reload(self.contract)
          self.assertEqual(contract.status, ContractStatus.ACTIVE)
          self.assertEqual(contract.departure_mileage, 20050)
          vehicle = self.reload(self.vehicle)
          self.assertEqual(vehicle.status, VehicleStatus.RENTED)
          self.assertEqual(vehicle.mileage, 20050)

     def test_failed_activation_keeps_inspection_draft(self):
          inspection_id = self.open_draft()
          self.vehicle.status = VehicleStatus.MAINTENANCE
          self.db.commit()

          result = submit_departure_inspection(self.db, self.as_user(self.agent), {
               "inspection_id": inspection_id, "mileage": 20050, "fuel_level": "half",
          })

          self.assertEqual(result.code, "conflict")
          self.db.expire_all()
          inspection = self.db.query(Inspection).one()
          self.assertTrue(inspection.is_draft)
          self.assertEqual(self.reload(self.contract).status, ContractStatus.APPROVED)

     def test_cannot_submit_twice(self):
          inspection = self.make_inspection(self.contract, InspectionType.DEPARTURE)
          result = submit_departure_inspection(self.db, self.as_user(self.agent), {
               "inspection_id": inspection.id, "mileage": 20050, "fuel_level": "full",
          })
          self.assertEqual(result.code, "conflict")

     def test_viewer_cannot_inspect(self):
          result = create_draft_inspection(self.db, self.as_user(self.viewer), {"contract_id": self.contract.id})
          self.assertEqual(result.code, "forbidden")

     def test_unknown_fuel_level(self):
          inspection_id = self.open_draft()
          result = submit_departure_inspection(self.db, self.as_user(self.agent), {
               "inspection_id": inspection_id, "mileage": 20050, "fuel_level": "overflowing",
          })
          self.assertEqual(result.code, "validation")


class ReturnInspectionTests(DatabaseTestCase):

     def setUp(self):
          super().setUp()
          self.contract, self.vehicle = self.make_active_contract(departure_mileage=30000)
          result = create_draft_inspection(self.db, self.as_user(self.agent), {
               "contract_id": self.contract.id, "type": "return"
          })
          self.assertTrue(result.success, result.error)
          self.inspection_id = result.data["inspection_id"]

     def test_submit_records_return_mileage(self):
          result = submit_return_inspection(self.db, self.as_user(self.agent), {
               "inspection_id": self.inspection_id, "mileage": 30420, "fuel_level": "quarter",
          })

          self.assertTrue(result.success, result.error)
          contract = self.reload(self.contract)
          self.assertEqual(contract.return_mileage, 30420)
          self.assertEqual(contract.status, ContractStatus.ACTIVE)
          self.assertEqual(self.reload(self.vehicle).status, VehicleStatus.RENTED)

     def test_mileage_below_departure(self):
          result = submit_return_inspection(self.db, self.as_user(self.agent), {
               "inspection_id": self.inspection_id, "mileage": 29999, "fuel_level": "full",
          })
          self.assertEqual(result.code, "validation")
          self.assertIsNone(self.reload(self.contract).return_mileage)

     def test_departure_workflow_rejects_return_inspection(self):
          result = submit_departure_inspection(self.db, self.as_user(self.agent), {
               "inspection_id": self.inspection_id, "mileage": 30420, "fuel_level": "full",
          })
          self.assertEqual(result.code, "validation")
