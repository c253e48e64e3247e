"""Error taxonomy for the account and child-profile endpoints.

Each error is an ``HTTPException`` so services can raise it directly and the
application handler in ``tinymath.main`` renders it as ``{"message": ...}``.
"""

import uuid

from fastapi import HTTPException, status


class ConflictError(HTTPException):
    """Duplicate email or an account that is already verified."""

    def __init__(self, message: str = "User already exists") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


class NotFoundError(HTTPException):
    def __init__(self, message: str = "User not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=message)


class InvalidCredentialsError(HTTPException):
    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


class InvalidCodeError(HTTPException):
    """Wrong or expired one-time code."""

    def __init__(self, message: str = "Invalid or expired code") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


class AccountNotVerifiedError(HTTPException):
    def __init__(self, message: str = "Account not verified. Please verify your email.") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


class BadRequestError(HTTPException):
    def __init__(self, message: str = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


class EmailDeliveryFailure(HTTPException):
    """A code email could not be delivered and the operation treats that as fatal."""

    def __init__(self, message: str = "Failed to send email.") -> None:
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)


def parse_identifier(raw: str | None, message: str = "Invalid user ID") -> uuid.UUID:
    """Parse a path identifier, rejecting missing or malformed values.

    Clients have been seen sending the literal strings ``undefined`` and
    ``null``; those are rejected like any other malformed value.
    """
    if not raw or raw in ("undefined", "null"):
        raise BadRequestError(message)
    try:
        return uuid.UUID(raw)
    except ValueError:
        raise BadRequestError(message)
