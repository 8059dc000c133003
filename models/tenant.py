# models/tenant.py
import uuid

from sqlalchemy import Column, String, DateTime, Uuid
from sqlalchemy.orm import relationship
from .base import Base, utcnow


class Tenant(Base):
     """
     Tenant model - one rental company using the platform.
     Every other table carries a tenant_id pointing here; it is the
     isolation boundary for all reads and writes.
     """
     __tablename__ = "tenants"

     id = Column(Uuid, primary_key=True, default=uuid.uuid4)
     name = Column(String(255), nullable=False)
     slug = Column(String(100), nullable=False, unique=True, index=True)

     # Timestamps
     created_at = Column(DateTime, default=utcnow, nullable=False)

     # Relationships
     users = relationship("User", back_populates="tenant")

     def __repr__(self):
          return f"<Tenant(id={self.id}, slug='{self.slug}')>"
