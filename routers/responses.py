# routers/responses.py
"""
Translation of workflow results into HTTP responses.
"""
from fastapi import HTTPException, status

from schemas.common import ActionResult

STATUS_BY_CODE = {
     "not_authenticated": status.HTTP_401_UNAUTHORIZED,
     "forbidden": status.HTTP_403_FORBIDDEN,
     "validation": status.HTTP_422_UNPROCESSABLE_ENTITY,
     "conflict": status.HTTP_409_CONFLICT,
     "not_found": status.HTTP_404_NOT_FOUND,
}


def unwrap(result: ActionResult):
     """Return the data of a successful result, raise HTTPException otherwise."""
     if result.success:
          return result.data
     raise HTTPException(
          status_code=STATUS_BY_CODE.get(result.code, status.HTTP_500_INTERNAL_SERVER_ERROR),
          detail={"error": result.error, "code": result.code},
     )


def with_fields(body, **fields):
     """Merge path values into a JSON object body; anything else is left for the workflow to reject."""
     if body is None:
          return dict(fields)
     if isinstance(body, dict):
          return {**body, **fields}
     return body
