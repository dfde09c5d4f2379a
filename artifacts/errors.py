"""Error taxonomy for the interview resume artifact subsystem.

Every failure carries an HTTP status and an opaque public message. The
precise reason (``detail``) is for logs only, so a caller that is not allowed
to see an interview learns nothing about whether it or its artifact exists.
"""


class ArtifactError(Exception):
    """Base class. ``detail`` is logged, ``public_message`` is returned."""

    status_code = 500
    public_message = "Internal error"

    def __init__(self, detail: str, public_message: str = None):
        super().__init__(detail)
        self.detail = detail
        if public_message:
            self.public_message = public_message


class UnauthorizedError(ArtifactError):
    """Missing, malformed, expired or revoked bearer token."""

    status_code = 401
    public_message = "Access token required"


class ForbiddenError(ArtifactError):
    """Authenticated, but neither the owner nor an admin."""

    status_code = 403
    public_message = "Scheduled resume not available"


class NotFoundError(ArtifactError):
    """Interview, saved resume or artifact absent."""

    status_code = 404
    public_message = "Scheduled resume not available"

    def __init__(self, kind: str, identifier: str, public_message: str = None):
        super().__init__(f"{kind} not found: {identifier}", public_message)
        self.kind = kind
        self.identifier = identifier


class ArtifactInternalError(ArtifactError):
    """I/O failure, malformed source content or PDF rendering failure."""

    status_code = 500
    public_message = "Failed to load scheduled resume"
