class IAMException(Exception):
    """Base exception for the IAM service"""

    pass


class UnauthorizedException(IAMException):
    """Raised when no valid principal can be established (JWT invalid, unknown user)"""

    pass


class NotFoundException(IAMException):
    """Raised when a referenced role, permission, policy or association does not exist"""

    pass


class AccessDeniedException(IAMException):
    """Raised by the authorization gate when a requirement is not met"""

    pass


class ValidationException(IAMException):
    """Raised for malformed input and cross-landlord mismatches"""

    pass


class ConflictException(IAMException):
    """Raised on duplicate creation or deletion of an entity that still has dependents"""

    pass


class DataIntegrityError(IAMException):
    """
    Raised when stored data violates an invariant the resolver relies on.

    Example: a role-permission association whose override policy row is gone.
    """

    pass
