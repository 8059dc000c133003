"""
Domain errors raised inside services.

They never leave a workflow: services.results.workflow converts them into
a failed ActionResult carrying the error's code and message.
"""


class ServiceError(Exception):
     """Base class for expected, user-visible failures."""

     code = "unknown"
     default_message = "An error occurred"

     def __init__(self, message: str = None):
          self.message = message or self.default_message
          super().__init__(self.message)


class AuthorizationError(ServiceError):
     code = "forbidden"
     default_message = "Access denied: insufficient permissions"


class AuthenticationError(AuthorizationError):
     """No resolved user, or the user account is inactive."""
     code = "not_authenticated"
     default_message = "User is not authenticated"


class ValidationError(ServiceError):
     code = "validation"
     default_message = "Invalid data"


class StateConflictError(ServiceError):
     """Entity is not in the state the operation expects."""
     code = "conflict"
     default_message = "The record was modified by another operation"


class NotFoundError(ServiceError):
     """
     Referenced id does not resolve inside the caller's tenant. Rows of
     other tenants produce the same error.
     """
     code = "not_found"
     default_message = "Not found"
