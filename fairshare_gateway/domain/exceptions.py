"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class NotAuthenticatedError(DomainException):
    """Request carries no user context"""

    pass


class FetchFailureError(DomainException):
    """Document store unreachable or returned malformed data"""

    pass


class ReferenceNotFoundError(DomainException):
    """A referenced user or document does not exist"""

    pass


class InvalidTransitionError(DomainException):
    """Friend request status change other than pending -> accepted"""

    pass


class TransportUnavailableError(DomainException):
    """Mail transport is not configured"""

    pass


class TransportFailureError(DomainException):
    """Mail transport rejected the message or could not be reached"""

    pass
