"""
Domain exceptions raised by services; app.main maps them to HTTP errors
"""


class DutchThriftError(Exception):
    """Base class for domain errors"""


class NotFoundError(DutchThriftError):
    """Requested record does not exist"""


class CommissionError(DutchThriftError, ValueError):
    """Invalid input to the commission calculator"""


class IneligibleItemError(DutchThriftError):
    """Item value is below the consignment threshold"""

    def __init__(self, message: str, reason: str = None):
        super().__init__(message)
        self.message = message
        self.reason = reason


class InvalidStatusTransition(DutchThriftError):
    """Status change not allowed from the current state"""

    def __init__(self, entity: str, current: str, target: str):
        super().__init__(f"Cannot move {entity} from '{current}' to '{target}'")
        self.entity = entity
        self.current = current
        self.target = target


class DuplicateError(DutchThriftError):
    """Unique value (email, order number) already taken"""


class InvalidInputError(DutchThriftError, ValueError):
    """Request data a service cannot act on (unknown status, wrong owner, empty submission)"""
