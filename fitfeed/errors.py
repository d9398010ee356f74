# fitfeed/errors.py


class ServiceError(Exception):
    """Base class for errors that are rendered to the client as {"message": ...}."""

    status_code = 400

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {"message": self.message}


class ValidationError(ServiceError):
    status_code = 400


class NotFound(ServiceError):
    status_code = 404


class Forbidden(ServiceError):
    status_code = 403


class MembershipRequired(ServiceError):
    """The user has no group, so today's first post cannot be credited."""

    status_code = 403

    def __init__(self, message: str = "user must belong to a group to post today"):
        super().__init__(message)


class RankingFinalized(ServiceError):
    """The quarterly ranking row is closed and must not be mutated."""

    status_code = 409

    def __init__(self, message: str = "quarterly ranking is already finalized"):
        super().__init__(message)


class Unauthorized(ServiceError):
    status_code = 401
