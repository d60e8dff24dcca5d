"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidTransactionError(DomainException):
    """Transaction amount or type is malformed"""

    def __init__(self, message: str, transaction_id=None):
        super().__init__(message)
        self.transaction_id = transaction_id


class CustomerNotFoundError(DomainException):
    """Referenced customer does not exist"""

    pass


class ProductNotFoundError(DomainException):
    """Referenced product does not exist"""

    pass


class DuplicateEntryError(DomainException):
    """Entity already exists"""

    pass
