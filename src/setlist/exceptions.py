"""Domain exceptions for authentication, authorization and storage."""


class SetlistError(Exception):
    """Base class for application errors."""

    pass


class MalformedInputError(SetlistError):
    """Input is missing or empty (blank email, blank token)."""

    pass


class AuthenticationError(SetlistError):
    """A token could not be exchanged for an identity.

    Subclasses record the internal reason for logging. Callers must report all
    of them with the same :attr:`public_message` so a client cannot tell a
    missing token from an expired or consumed one.
    """

    public_message = "Invalid or expired token"


class InvalidTokenError(AuthenticationError):
    """No magic link or session matches the token."""

    pass


class TokenExpiredError(AuthenticationError):
    """The token exists but its validity window has passed."""

    pass


class TokenAlreadyUsedError(AuthenticationError):
    """The magic link has already been consumed."""

    pass


class UserNotFoundError(AuthenticationError):
    """The credential points at a user record that no longer exists."""

    pass


class UnauthenticatedError(SetlistError):
    """No valid session accompanies the request."""

    pass


class ForbiddenError(SetlistError):
    """Authenticated, but lacking the required membership or role."""

    pass


class NotFoundError(SetlistError):
    """A referenced band or member does not exist."""

    pass


class StorageError(SetlistError):
    """The credential store failed. Never shown to clients in detail."""

    pass
