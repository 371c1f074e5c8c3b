"""
Exceptions raised by the record stores and services
"""


class BudgetWatchError(Exception):
    """Base application exception"""
    def __init__(self, message: str, details: str = None):
        self.message = message
        self.details = details
        super().__init__(self.message)


class NotFoundError(BudgetWatchError):
    """Raised when a record id is not in the store"""
    pass


class ValidationError(BudgetWatchError):
    """Raised when transaction or budget data is rejected"""
    def __init__(self, message: str, details: str = None, error_code: str = None):
        super().__init__(message, details)
        self.error_code = error_code


class StoreError(BudgetWatchError):
    """Raised when a record store cannot be read or written"""
    pass
