"""
Workflow boundary: transaction ownership and result normalization.

A workflow function raises ServiceError subclasses (or pydantic
ValidationError while parsing its payload) and returns plain data. The
`workflow` decorator commits on success, rolls back on any failure and
always returns an ActionResult.
"""
import functools
import logging
import uuid

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from schemas.common import ActionResult, first_error_message
from .errors import AuthorizationError, ServiceError, ValidationError

logger = logging.getLogger(__name__)

GENERIC_ERROR = "An error occurred"
DUPLICATE_ERROR = "The record conflicts with existing data; reload and try again"


def workflow(operation: str, failure_message: str = GENERIC_ERROR):
     """
     Decorate `fn(db, resolve_user, ...)` so it returns an ActionResult.

     Args:
          operation: name used in log lines
          failure_message: user-visible message for unexpected errors
     """
     def decorator(fn):
          @functools.wraps(fn)
          def wrapper(db: Session, *args, **kwargs) -> ActionResult:
               try:
                    data = fn(db, *args, **kwargs)
                    db.commit()
               except AuthorizationError as exc:
                    db.rollback()
                    logger.warning("%s rejected: %s", operation, exc.message)
                    return ActionResult.fail(exc.message, exc.code)
               except ServiceError as exc:
                    db.rollback()
                    logger.info("%s failed: %s (%s)", operation, exc.message, exc.code)
                    return ActionResult.fail(exc.message, exc.code)
               except SchemaValidationError as exc:
                    db.rollback()
                    message = first_error_message(exc)
                    logger.info("%s failed validation: %s", operation, message)
                    return ActionResult.fail(message, "validation")
               except IntegrityError:
                    db.rollback()
                    logger.warning("%s hit a uniqueness or integrity constraint", operation, exc_info=True)
                    return ActionResult.fail(DUPLICATE_ERROR, "conflict")
               except Exception:
                    db.rollback()
                    logger.exception("%s failed unexpectedly", operation)
                    return ActionResult.fail(failure_message, "unknown")

               logger.info("%s succeeded", operation)
               return ActionResult.ok(data)

          return wrapper

     return decorator


def parse_id(value) -> uuid.UUID:
     """Coerce a path or form id to UUID."""
     if isinstance(value, uuid.UUID):
          return value
     try:
          return uuid.UUID(str(value))
     except ValueError:
          raise ValidationError("Invalid identifier")


def parse(schema, payload):
     """Validate a dict (or an already built schema instance) against `schema`."""
     if isinstance(payload, schema):
          return payload
     if isinstance(payload, dict):
          return schema.model_validate(payload)
     return schema.model_validate(payload, from_attributes=True)
