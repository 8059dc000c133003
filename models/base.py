# models/base.py
from datetime import datetime, timezone

from sqlalchemy import Enum
from sqlalchemy.orm import DeclarativeBase, declared_attr


def utcnow() -> datetime:
     """Naive UTC timestamp, the format every DateTime column stores."""
     return datetime.now(timezone.utc).replace(tzinfo=None)


def enum_column(enum_cls, name: str) -> Enum:
     """
     SQLAlchemy Enum type that persists the enum *values* (lowercase strings)
     instead of the member names.
     """
     return Enum(
          enum_cls,
          name=name,
          create_constraint=True,
          values_callable=lambda members: [m.value for m in members],
          validate_strings=True,
     )


class Base(DeclarativeBase):
     """
     Base class for all SQLAlchemy models.
     Provides common configuration and mixins.
     """

     @declared_attr.directive
     def __tablename__(cls) -> str:
          """
          Automatically generate table name from class name.
          Example: VehicleCategory -> vehicle_categories
          """
          import re
          name = re.sub(r'(?<!^)(?=[A-Z])', '_', cls.__name__).lower()
          # Pluralize (simple version)
          if name.endswith('y'):
               return name[:-1] + 'ies'
          elif name.endswith('s'):
               return name + 'es'
          return name + 's'
