from decimal import Decimal

from models import Vehicle, VehicleStatus
from services.vehicle_service import PLATE_EXISTS_MESSAGE, create_vehicle, update_vehicle
from tests.base import DatabaseTestCase


class VehicleRecordTestCase(DatabaseTestCase):

     def payload(self, **extra):
          data = {
               "category_id": self.category.id,
               "brand": "Renault",
               "model": "Clio",
               "plate_number": "GH-456-IJ",
               "mileage": 500,
          }
          data.update(extra)
          return data


class CreateVehicleTests(VehicleRecordTestCase):

     def test_new_vehicle_is_available(self):
          result = create_vehicle(self.db, self.as_user(self.agent), self.payload(plate_number=" gh-456-ij "))

          self.assertTrue(result.success, result.error)
          self.assertEqual(result.data["status"], "available")
          self.assertEqual(result.data["plate_number"], "GH-456-IJ")
          vehicle = self.db.query(Vehicle).one()
          self.assertEqual(vehicle.tenant_id, self.tenant.id)
          self.assertEqual(self.audit_actions(vehicle.id), ["vehicle_created"])

     def test_plate_already_used(self):
          self.make_vehicle()

          result = create_vehicle(self.db, self.as_user(self.agent), self.payload(plate_number="AB-123-CD"))

          self.assertEqual(result.code, "conflict")
          self.assertEqual(result.error, PLATE_EXISTS_MESSAGE)
          self.assertEqual(self.db.query(Vehicle).count(), 1)

     def test_plate_of_a_deleted_vehicle_is_free(self):
          vehicle = self.make_vehicle()
          vehicle.deleted_at = vehicle.created_at
          self.db.commit()

          result = create_vehicle(self.db, self.as_user(self.agent), self.payload(plate_number="AB-123-CD"))

          self.assertTrue(result.success, result.error)

     def test_plate_used_in_another_tenant(self):
          self.make_vehicle(self.make_tenant("other"))
          result = create_vehicle(self.db, self.as_user(self.agent), self.payload(plate_number="AB-123-CD"))
          self.assertTrue(result.success, result.error)

     def test_category_of_another_tenant(self):
          foreign = self.make_category(self.make_tenant("other"), Decimal("30.00"))
          result = create_vehicle(self.db, self.as_user(self.agent), self.payload(category_id=foreign.id))
          self.assertEqual(result.code, "not_found")

     def test_negative_mileage(self):
          result = create_vehicle(self.db, self.as_user(self.agent), self.payload(mileage=-1))
          self.assertEqual(result.code, "validation")

     def test_viewer_cannot_create(self):
          result = create_vehicle(self.db, self.as_user(self.viewer), self.payload())
          self.assertEqual(result.code, "forbidden")


class UpdateVehicleTests(VehicleRecordTestCase):

     def test_update_keeps_status(self):
          vehicle = self.make_vehicle(status=VehicleStatus.MAINTENANCE)

          result = update_vehicle(self.db, self.as_user(self.agent), self.payload(
               vehicle_id=vehicle.id, plate_number="AB-123-CD", daily_rate_override="65.00",
          ))

          self.assertTrue(result.success, result.error)
          vehicle = self.reload(vehicle)
          self.assertEqual(vehicle.brand, "Renault")
          self.assertEqual(vehicle.daily_rate_override, Decimal("65.00"))
          self.assertEqual(vehicle.status, VehicleStatus.MAINTENANCE)
          self.assertEqual(self.audit_actions(vehicle.id), ["vehicle_updated"])

     def test_status_in_payload_is_ignored(self):
          vehicle = self.make_vehicle()
          update_vehicle(self.db, self.as_user(self.agent), self.payload(vehicle_id=vehicle.id, status="rented"))
          self.assertEqual(self.reload(vehicle).status, VehicleStatus.AVAILABLE)

     def test_plate_taken_by_another_vehicle(self):
          self.make_vehicle()
          other = self.make_vehicle()
          other.plate_number = "ZZ-999-ZZ"
          self.db.commit()

          result = update_vehicle(self.db, self.as_user(self.agent), self.payload(
               vehicle_id=other.id, plate_number="AB-123-CD",
          ))

          self.assertEqual(result.code, "conflict")
          self.assertEqual(self.reload(other).plate_number, "ZZ-999-ZZ")

     def test_other_tenant_vehicle(self):
          vehicle = self.make_vehicle()
          outsider = self.make_user(self.make_tenant("other"), "agent")
          result = update_vehicle(self.db, self.as_user(outsider), self.payload(vehicle_id=vehicle.id))
          self.assertEqual(result.code, "not_found")

     def test_unchanged_record_writes_no_audit_entry(self):
          vehicle = self.make_vehicle()
          payload = {
               "vehicle_id": vehicle.id,
               "category_id": vehicle.category_id,
               "brand": vehicle.brand,
               "model": vehicle.model,
               "plate_number": vehicle.plate_number,
               "mileage": vehicle.mileage,
          }

          result = update_vehicle(self.db, self.as_user(self.agent), payload)

          self.assertTrue(result.success, result.error)
          self.assertEqual(self.audit_actions(vehicle.id), [])
