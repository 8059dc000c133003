# models/audit_log.py
import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey, JSON, Uuid
from .base import Base, utcnow


class AuditLog(Base):
     """
     Audit log - who changed which entity, from what to what, and why.
     Rows are only ever inserted.
     """
     __tablename__ = "audit_logs"

     id = Column(Uuid, primary_key=True, default=uuid.uuid4)
     tenant_id = Column(
          Uuid,
          ForeignKey("tenants.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

     entity_type = Column(String(50), nullable=False, index=True)
     entity_id = Column(Uuid, nullable=False, index=True)
     action = Column(String(100), nullable=False)
     changes = Column(JSON, nullable=True)
     # "metadata" is reserved on declarative classes
     metadata_ = Column("metadata", JSON, nullable=True)

     created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

     def __repr__(self):
          return f"<AuditLog(id={self.id}, entity='{self.entity_type}:{self.entity_id}', action='{self.action}')>"
