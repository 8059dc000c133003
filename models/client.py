# models/client.py
import uuid

from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Uuid
from .base import Base, utcnow


class Client(Base):
     """
     Client model - a renter. Contracts reference it by id and read the
     trust flag; a soft-deleted client keeps its contract history.
     """
     __tablename__ = "clients"

     id = Column(Uuid, primary_key=True, default=uuid.uuid4)
     tenant_id = Column(
          Uuid,
          ForeignKey("tenants.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )

     # Personal info
     first_name = Column(String(100), nullable=False)
     last_name = Column(String(100), nullable=False)
     email = Column(String(255), nullable=True)
     phone = Column(String(50), nullable=True)

     is_trusted = Column(Boolean, default=False, nullable=False)

     # Timestamps
     deleted_at = Column(DateTime, nullable=True)
     created_at = Column(DateTime, default=utcnow, nullable=False)
     updated_at = Column(DateTime, onupdate=utcnow, nullable=True)

     def __repr__(self):
          return f"<Client(id={self.id}, name='{self.first_name} {self.last_name}')>"

     @property
     def full_name(self) -> str:
          return f"{self.first_name} {self.last_name}"
