"""
Conditional status updates.

A transition is a single `UPDATE ... WHERE id = :id AND tenant_id = :tenant
AND status IN (:expected)`. When no row matches, somebody else moved the
row first (or it belongs to another tenant) and the caller gets a
StateConflictError instead of a silent success.
"""
import logging
from typing import Iterable, Union

from sqlalchemy import update
from sqlalchemy.orm import Session

from models.base import utcnow
from .errors import StateConflictError

logger = logging.getLogger(__name__)


def transition_status(
     db: Session,
     model,
     tenant_id,
     entity_id,
     expected: Union[object, Iterable],
     new_status,
     conflict_message: str = None,
     conditions: Iterable = (),
     **values
) -> None:
     """
     Move `model` row `entity_id` from one of `expected` to `new_status`.

     `conditions` are extra WHERE clauses the row must also satisfy. Extra
     keyword arguments are written in the same statement.

     Raises:
          StateConflictError: zero rows matched
     """
     if isinstance(expected, (str, bytes)) or not isinstance(expected, Iterable):
          expected = (expected,)
     expected = tuple(expected)

     if hasattr(model, "updated_at"):
          values.setdefault("updated_at", utcnow())

     stmt = (
          update(model)
          .where(
               model.id == entity_id,
               model.tenant_id == tenant_id,
               model.status.in_(expected),
               *conditions,
          )
          .values(status=new_status, **values)
          .execution_options(synchronize_session="fetch")
     )
     result = db.execute(stmt)
     if result.rowcount == 0:
          logger.info(
               "Conditional update matched no row: %s id=%s expected=%s",
               model.__tablename__, entity_id, [getattr(s, "value", s) for s in expected],
          )
          raise StateConflictError(conflict_message)
