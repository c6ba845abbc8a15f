"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidArgumentError(DomainException):
    """Argument is malformed, out of range or empty"""

    pass


class DuplicateMonthError(DomainException):
    """Capacity plan already has an entry for the month"""

    pass


class MonthNotFoundError(DomainException):
    """Capacity plan has no entry for the month"""

    pass


class ItemNotFoundError(DomainException):
    """No cost-of-service item with the given id"""

    pass


class EmptyPlanError(DomainException):
    """Operation needs at least one capacity entry"""

    pass


class InvalidRangeError(DomainException):
    """Period start is after period end"""

    pass


class CurrencyMismatchError(DomainException):
    """Money value is not in the service rate currency"""

    pass


class ServiceNotFoundError(DomainException):
    """No service registered under the given id"""

    pass


class DuplicateServiceError(DomainException):
    """A service with the same id is already registered"""

    pass
