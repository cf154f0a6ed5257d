"""Domain errors raised by the service layer.

Each error carries the HTTP status code the API layer responds with, so
endpoints can translate any ``PlanetError`` uniformly.
"""


class PlanetError(Exception):
    """Base class for all domain errors."""

    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__


class UnauthorizedError(PlanetError):
    """No identity could be resolved for the request."""

    status_code = 401


class ForbiddenError(PlanetError):
    """The node or workspace belongs to someone else."""

    status_code = 403


class PermissionDeniedError(PlanetError):
    """A mutation was attempted without an active editing session."""

    status_code = 403

    def __init__(self, message: str = "Editing mode not enabled. Please start an editing session."):
        super().__init__(message)


class NotFoundError(PlanetError):
    """A session, node, workspace or user does not exist."""

    status_code = 404


class ValidationError(PlanetError):
    """Missing or malformed input."""

    status_code = 400


class ConflictError(PlanetError):
    """The request collides with existing state."""

    status_code = 409


class AlreadyExistsError(ConflictError):
    """A row with the same identity is already stored."""
