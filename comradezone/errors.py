"""Domain exceptions raised by the service layer."""


class ComradeZoneError(Exception):
    """Base class for domain errors."""


class NotAuthorizedError(ComradeZoneError):
    """The acting user lacks the role required for the operation."""


class NotFoundError(ComradeZoneError):
    """A referenced record does not exist."""


class AlreadyExistsError(ComradeZoneError):
    """A record with the same unique key is already stored."""
