"""Domain errors raised by services and mapped to HTTP responses"""


class BibformsError(Exception):
    """Base error carrying the HTTP status it maps to"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BibformsError):
    """Caller input failed a precondition (missing field, wrong form status)"""

    status_code = 400


class NotFoundError(BibformsError):
    """Referenced entity does not exist"""

    status_code = 404


class ForbiddenError(BibformsError):
    """Caller is authenticated but not allowed to touch the entity"""

    status_code = 403


class TransientUnavailable(BibformsError):
    """A just-written row is still not visible after the polling budget"""

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


class DeliveryFailure(BibformsError):
    """The outbound webhook call did not complete"""

    status_code = 502
