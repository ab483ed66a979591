"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class RatesUnavailable(DomainException):
    """Rate cache is empty, no conversion possible yet"""

    def __init__(self, message: str = "Exchange rates not available; please try again later"):
        super().__init__(message)


class RateNotFound(DomainException):
    """Rate table has no entry for the requested currency"""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Exchange rate not available for currency {code}")


class RefreshFailed(DomainException):
    """Rate provider fetch or parse failed"""

    pass


class PersistenceError(DomainException):
    """Write to the record store failed"""

    pass
