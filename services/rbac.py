"""
Role based access control tables.

ROLE_PERMISSIONS maps role -> resource -> allowed actions. Every
(role, resource, action) triple is spelled out; there is no role
inheritance. SPECIAL_PERMISSIONS lists the capabilities that are not
plain CRUD on a resource.
"""
import enum
from types import MappingProxyType


class Role(str, enum.Enum):
     ADMIN = "admin"
     AGENT = "agent"
     VIEWER = "viewer"


class Resource(str, enum.Enum):
     VEHICLES = "vehicles"
     CLIENTS = "clients"
     CONTRACTS = "contracts"
     INSPECTIONS = "inspections"
     INVOICES = "invoices"
     PAYMENTS = "payments"
     USERS = "users"
     SETTINGS = "settings"


class Action(str, enum.Enum):
     CREATE = "create"
     READ = "read"
     UPDATE = "update"
     DELETE = "delete"


class Capability(str, enum.Enum):
     PROCESS_PAYMENT = "process_payment"
     MANAGE_USERS = "manage_users"
     VIEW_ALL_AUDIT_LOGS = "view_all_audit_logs"


_ALL = frozenset(Action)
_READ = frozenset({Action.READ})
_NONE = frozenset()


def _table(rows: dict) -> MappingProxyType:
     return MappingProxyType({
          role: MappingProxyType({resource: rows[role].get(resource, _NONE) for resource in Resource})
          for role in Role
     })


ROLE_PERMISSIONS = _table({
     Role.ADMIN: {resource: _ALL for resource in Resource},
     Role.AGENT: {
          Resource.VEHICLES: _ALL,
          Resource.CLIENTS: _ALL,
          Resource.CONTRACTS: _ALL,
          Resource.INSPECTIONS: _ALL,
          Resource.INVOICES: _READ,
          Resource.PAYMENTS: _READ,
          Resource.USERS: _READ,
     },
     Role.VIEWER: {
          Resource.VEHICLES: _READ,
          Resource.CLIENTS: _READ,
          Resource.CONTRACTS: _READ,
          Resource.INSPECTIONS: _READ,
          Resource.INVOICES: _READ,
          Resource.USERS: _READ,
     },
})

SPECIAL_PERMISSIONS = MappingProxyType({
     Role.ADMIN: frozenset(Capability),
     Role.AGENT: frozenset(),
     Role.VIEWER: frozenset(),
})


def _coerce(enum_cls, value):
     try:
          return enum_cls(value)
     except (TypeError, ValueError):
          return None


def has_permission(role, resource, action) -> bool:
     """True when `role` may perform `action` on `resource`. Unknown values are denied."""
     role, resource, action = _coerce(Role, role), _coerce(Resource, resource), _coerce(Action, action)
     if role is None or resource is None or action is None:
          return False
     return action in ROLE_PERMISSIONS[role][resource]


def has_special_permission(role, capability) -> bool:
     role, capability = _coerce(Role, role), _coerce(Capability, capability)
     if role is None or capability is None:
          return False
     return capability in SPECIAL_PERMISSIONS[role]
