"""
Domain exceptions.

Services raise these; career_api.main renders every one of them as
{"success": false, "error": message} with the class's status code.
"""


class CareerAPIError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(CareerAPIError):
    status_code = 400


class AuthenticationFailed(CareerAPIError):
    status_code = 401


class PermissionDenied(CareerAPIError):
    status_code = 403


class NotFound(CareerAPIError):
    status_code = 404


class BusinessRuleViolation(CareerAPIError):
    """Deadline passed, already applied, illegal status change, ..."""
    status_code = 400


class CapacityExceeded(BusinessRuleViolation):
    pass


class Conflict(CareerAPIError):
    status_code = 409


class StaleWriteError(Conflict):
    """A batch mutation's precondition no longer matched the stored record."""

    def __init__(self, collection: str, doc_id: str):
        super().__init__("The record was changed by another request. Please retry.")
        self.collection = collection
        self.doc_id = doc_id


class DuplicateRecord(Conflict):
    """An insert collided with a unique index."""

    def __init__(self, collection: str):
        super().__init__("This record already exists")
        self.collection = collection
