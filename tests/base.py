"""
Shared fixtures: a fresh SQLite schema per test and seeding helpers.
"""
import unittest
from datetime import datetime
from decimal import Decimal

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from models import (
     AuditLog,
     Base,
     Client,
     ContractStatus,
     Inspection,
     InspectionType,
     RentalContract,
     RentalOption,
     Tenant,
     User,
     Vehicle,
     VehicleCategory,
     VehicleStatus,
)
from services.guards import CurrentUser

START = datetime(2026, 3, 2, 9, 0)
END = datetime(2026, 3, 5, 9, 0)


class DatabaseTestCase(unittest.TestCase):

     def setUp(self):
          self.engine = self.build_engine()
          Base.metadata.create_all(self.engine)
          self.db = sessionmaker(bind=self.engine, autoflush=False)()

          self.tenant = self.make_tenant("acme")
          self.admin = self.make_user(self.tenant, "admin")
          self.agent = self.make_user(self.tenant, "agent")
          self.viewer = self.make_user(self.tenant, "viewer")
          self.category = self.make_category(self.tenant, Decimal("50.00"))

     def tearDown(self):
          self.db.close()
          Base.metadata.drop_all(self.engine)
          self.engine.dispose()

     def build_engine(self):
          return create_engine(
               "sqlite://",
               connect_args={"check_same_thread": False},
               poolclass=StaticPool,
          )

     # -- identities --------------------------------------------------------

     def as_user(self, user):
          current = CurrentUser.model_validate(user)
          return lambda: current

     def anonymous(self):
          return None

     # -- seeding -----------------------------------------------------------

     def make_tenant(self, slug):
          tenant = Tenant(name=slug.title(), slug=slug)
          self.db.add(tenant)
          self.db.commit()
          return tenant

     def make_user(self, tenant, role, is_active=True):
          user = User(
               tenant_id=tenant.id,
               email=f"{role}-{tenant.slug}-{len(tenant.users)}@example.com",
               name=f"{role.title()} {tenant.slug}",
               role=role,
               is_active=is_active,
          )
          self.db.add(user)
          self.db.commit()
          return user

     def make_category(self, tenant, daily_rate):
          category = VehicleCategory(tenant_id=tenant.id, name="Compact", daily_rate=daily_rate)
          self.db.add(category)
          self.db.commit()
          return category

     def make_vehicle(self, tenant=None, status=VehicleStatus.AVAILABLE, mileage=10000, daily_rate_override=None):
          tenant = tenant or self.tenant
          category = self.category if tenant is self.tenant else self.make_category(tenant, Decimal("40.00"))
          vehicle = Vehicle(
               tenant_id=tenant.id,
               category_id=category.id,
               brand="Peugeot",
               model="208",
               plate_number="AB-123-CD",
               mileage=mileage,
               daily_rate_override=daily_rate_override,
               status=status,
          )
          self.db.add(vehicle)
          self.db.commit()
          return vehicle

     def make_client(self, tenant=None, is_trusted=False):
          tenant = tenant or self.tenant
          client = Client(tenant_id=tenant.id, first_name="Jane", last_name="Doe", is_trusted=is_trusted)
          self.db.add(client)
          self.db.commit()
          return client

     def make_option(self, name="GPS", daily_price=Decimal("5.00"), is_per_day=True, tenant=None):
          option = RentalOption(
               tenant_id=(tenant or self.tenant).id,
               name=name,
               daily_price=daily_price,
               is_per_day=is_per_day,
          )
          self.db.add(option)
          self.db.commit()
          return option

     def make_contract(
          self,
          vehicle,
          client,
          status=ContractStatus.DRAFT,
          start=START,
          end=END,
          terms_accepted=False,
          departure_mileage=None,
          included_km_per_day=None,
          excess_km_rate=None,
     ):
          contract = RentalContract(
               tenant_id=vehicle.tenant_id,
               contract_number=self.next_contract_number(vehicle.tenant_id),
               client_id=client.id,
               vehicle_id=vehicle.id,
               status=status,
               start_date=start,
               end_date=end,
               daily_rate=Decimal("50.00"),
               total_days=3,
               base_amount=Decimal("150.00"),
               options_amount=Decimal("0.00"),
               adjustment_amount=Decimal("0.00"),
               total_amount=Decimal("150.00"),
               terms_accepted=terms_accepted,
               departure_mileage=departure_mileage,
               included_km_per_day=included_km_per_day,
               excess_km_rate=excess_km_rate,
          )
          self.db.add(contract)
          self.db.commit()
          return contract

     def next_contract_number(self, tenant_id):
          count = self.db.query(RentalContract).filter(RentalContract.tenant_id == tenant_id).count()
          return f"CTR-2026-{count + 1:04d}"

     def make_inspection(self, contract, type=InspectionType.DEPARTURE, is_draft=False, mileage=10000):
          inspection = Inspection(
               tenant_id=contract.tenant_id,
               contract_id=contract.id,
               vehicle_id=contract.vehicle_id,
               type=type,
               is_draft=is_draft,
               mileage=mileage,
               conducted_at=None if is_draft else datetime(2026, 3, 5, 10, 0),
          )
          self.db.add(inspection)
          self.db.commit()
          return inspection

     def make_active_contract(self, departure_mileage=10000, **kwargs):
          """Rented vehicle with an active contract and a submitted departure inspection."""
          vehicle = self.make_vehicle(status=VehicleStatus.RENTED, mileage=departure_mileage)
          client = self.make_client()
          contract = self.make_contract(
               vehicle, client, status=ContractStatus.ACTIVE, departure_mileage=departure_mileage, **kwargs
          )
          self.make_inspection(contract, InspectionType.DEPARTURE, mileage=departure_mileage)
          return contract, vehicle

     # -- reads -------------------------------------------------------------

     def reload(self, instance):
          self.db.expire_all()
          return self.db.get(type(instance), instance.id)

     def audit_actions(self, entity_id):
          self.db.expire_all()
          return [
               entry.action
               for entry in self.db.query(AuditLog)
               .filter(AuditLog.entity_id == entity_id)
               .order_by(AuditLog.created_at)
          ]
