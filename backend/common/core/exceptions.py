class AppException(Exception):
    """Base application exception."""

    pass


class NotFoundError(AppException):
    """A referenced record (transaction, intent, plan) does not exist."""

    pass


class ValidationError(AppException):
    """Caller-supplied data is insufficient to start or price a payment."""

    pass
