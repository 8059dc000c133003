# models/user.py
import uuid

from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from .base import Base, utcnow


class User(Base):
     """
     User model - staff account of a tenant.
     Credentials live with the external identity provider; this table only
     keeps what authorization needs (tenant, role, active flag).
     """
     __tablename__ = "users"

     id = Column(Uuid, primary_key=True, default=uuid.uuid4)
     tenant_id = Column(
          Uuid,
          ForeignKey("tenants.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     email = Column(String(255), unique=True, nullable=False, index=True)
     name = Column(String(200), nullable=False)
     role = Column(String(50), default="agent", nullable=False)  # admin, agent, viewer
     is_active = Column(Boolean, default=True, nullable=False)
     created_at = Column(DateTime, default=utcnow, nullable=False)

     # Relationships
     tenant = relationship("Tenant", back_populates="users")

     def __repr__(self):
          return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
