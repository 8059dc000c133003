from services.user_service import list_users, toggle_user_active, update_user_role
from services.vehicle_service import list_vehicles
from tests.base import DatabaseTestCase


class UserManagementTests(DatabaseTestCase):

     def test_list_is_tenant_scoped(self):
          self.make_user(self.make_tenant("other"), "admin")
          result = list_users(self.db, self.as_user(self.viewer))

          self.assertTrue(result.success, result.error)
          self.assertEqual(len(result.data), 3)

     def test_admin_changes_role(self):
          result = update_user_role(self.db, self.as_user(self.admin), {
               "user_id": self.viewer.id, "role": "agent"
          })

          self.assertTrue(result.success, result.error)
          self.assertEqual(self.reload(self.viewer).role, "agent")
          self.assertEqual(self.audit_actions(self.viewer.id), ["user_role_changed"])

     def test_unknown_role(self):
          result = update_user_role(self.db, self.as_user(self.admin), {
               "user_id": self.viewer.id, "role": "owner"
          })
          self.assertEqual(result.code, "validation")

     def test_agent_cannot_manage_users(self):
          result = update_user_role(self.db, self.as_user(self.agent), {
               "user_id": self.viewer.id, "role": "admin"
          })
          self.assertEqual(result.code, "forbidden")
          self.assertEqual(self.reload(self.viewer).role, "viewer")

     def test_admin_cannot_change_own_role(self):
          result = update_user_role(self.db, self.as_user(self.admin), {
               "user_id": self.admin.id, "role": "viewer"
          })
          self.assertEqual(result.code, "validation")

     def test_deactivated_user_loses_access(self):
          result = toggle_user_active(self.db, self.as_user(self.admin), {"user_id": self.agent.id})

          self.assertTrue(result.success, result.error)
          self.assertFalse(result.data["is_active"])
          blocked = list_vehicles(self.db, self.as_user(self.reload(self.agent)))
          self.assertEqual(blocked.code, "not_authenticated")
          self.assertEqual(blocked.error, "User account is inactive")

     def test_toggle_twice_reactivates(self):
          toggle_user_active(self.db, self.as_user(self.admin), {"user_id": self.agent.id})
          result = toggle_user_active(self.db, self.as_user(self.admin), {"user_id": self.agent.id})
          self.assertTrue(result.data["is_active"])

     def test_cannot_toggle_other_tenant_user(self):
          outsider = self.make_user(self.make_tenant("other"), "agent")
          result = toggle_user_active(self.db, self.as_user(self.admin), {"user_id": outsider.id})
          self.assertEqual(result.code, "not_found")
