"""
Shared schemas: the result envelope returned by every workflow.
"""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError


class ActionResult(BaseModel):
     """
     Outcome of a workflow call.

     Either {"success": true, "data": ...} or
     {"success": false, "error": "...", "code": "..."}.
     """
     success: bool
     data: Any = None
     error: Optional[str] = None
     code: Optional[str] = None

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "success": False,
                    "error": "Vehicle is currently rented; close its contract first",
                    "code": "conflict",
               }
          }
     )

     @classmethod
     def ok(cls, data: Any = None) -> "ActionResult":
          return cls(success=True, data=data)

     @classmethod
     def fail(cls, error: str, code: str = "unknown") -> "ActionResult":
          return cls(success=False, error=error, code=code)


def first_error_message(exc: ValidationError) -> str:
     """Message of the first failing field, prefixed with its location."""
     errors = exc.errors()
     if not errors:
          return "Invalid data"
     first = errors[0]
     message = first.get("msg", "Invalid data")
     if message.startswith("Value error, "):
          message = message[len("Value error, "):]
     location = ".".join(str(part) for part in first.get("loc", ()))
     if location:
          return f"{location}: {message}"
     return message


def blank_to_none(value):
     """Form fields send "" for untouched optional inputs."""
     if isinstance(value, str) and value.strip() == "":
          return None
     return value
