"""Human readable document numbers: <PREFIX>-<year>-<seq>, sequential per tenant and year."""
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session


def next_document_number(db: Session, column, tenant_column, tenant_id, prefix: str, when: datetime = None) -> str:
     year = (when or datetime.now()).year
     year_prefix = f"{prefix}-{year}-"
     count = (
          db.query(func.count())
          .select_from(column.class_)
          .filter(tenant_column == tenant_id, column.like(f"{year_prefix}%"))
          .scalar()
     )
     return f"{year_prefix}{count + 1:04d}"
