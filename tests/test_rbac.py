import itertools
import unittest

from services.rbac import (
     Action,
     Capability,
     Resource,
     Role,
     ROLE_PERMISSIONS,
     SPECIAL_PERMISSIONS,
     has_permission,
     has_special_permission,
)


class PermissionMatrixTests(unittest.TestCase):

     def test_every_triple_returns_a_bool(self):
          roles = [r.value for r in Role] + ["owner", "", None]
          resources = [r.value for r in Resource] + ["spaceships", None]
          actions = [a.value for a in Action] + ["approve", None]
          for role, resource, action in itertools.product(roles, resources, actions):
               with self.subTest(role=role, resource=resource, action=action):
                    self.assertIsInstance(has_permission(role, resource, action), bool)

     def test_spot_checks(self):
          self.assertFalse(has_permission("viewer", "vehicles", "delete"))
          self.assertTrue(has_permission("admin", "vehicles", "delete"))
          self.assertTrue(has_permission("agent", "contracts", "update"))
          self.assertFalse(has_permission("agent", "invoices", "update"))
          self.assertTrue(has_permission("agent", "invoices", "read"))
          self.assertFalse(has_permission("agent", "settings", "read"))
          self.assertFalse(has_permission("viewer", "payments", "read"))
          self.assertTrue(has_permission("viewer", "contracts", "read"))

     def test_accepts_enum_members(self):
          self.assertTrue(has_permission(Role.ADMIN, Resource.SETTINGS, Action.UPDATE))

     def test_unknown_values_are_denied(self):
          self.assertFalse(has_permission("superuser", "vehicles", "read"))
          self.assertFalse(has_permission("admin", "spaceships", "read"))
          self.assertFalse(has_permission("admin", "vehicles", "launch"))

     def test_admin_has_everything(self):
          for resource, action in itertools.product(Resource, Action):
               self.assertTrue(has_permission("admin", resource, action))

     def test_table_covers_every_role_and_resource(self):
          for role in Role:
               self.assertEqual(set(ROLE_PERMISSIONS[role]), set(Resource))

     def test_table_is_read_only(self):
          with self.assertRaises(TypeError):
               ROLE_PERMISSIONS[Role.VIEWER] = {}


class SpecialPermissionTests(unittest.TestCase):

     def test_capabilities_are_admin_only(self):
          for capability in Capability:
               self.assertTrue(has_special_permission("admin", capability))
               self.assertFalse(has_special_permission("agent", capability))
               self.assertFalse(has_special_permission("viewer", capability))

     def test_unknown_capability(self):
          self.assertFalse(has_special_permission("admin", "launch_rockets"))
          self.assertFalse(has_special_permission(None, "process_payment"))
          self.assertEqual(SPECIAL_PERMISSIONS[Role.AGENT], frozenset())
