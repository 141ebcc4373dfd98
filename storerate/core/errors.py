"""Application error taxonomy. Services raise these; storerate.main renders them as JSON."""

from __future__ import annotations


class AppError(Exception):
    """Base error carrying an HTTP status code and a user-facing message."""

    status_code = 500

    def __init__(
        self,
        message: str,
        errors: list[dict[str, str]] | None = None,
    ) -> None:
        self.message = message
        self.errors = errors
        super().__init__(message)


class ValidationError(AppError):
    """Malformed or out-of-range input, or a violated business rule."""

    status_code = 400

    @classmethod
    def for_field(cls, field: str, message: str) -> ValidationError:
        return cls("Validation error", errors=[{"field": field, "message": message}])


class UnauthorizedError(AppError):
    """Missing or invalid credential."""

    status_code = 401


class ForbiddenError(AppError):
    """Valid credential, insufficient role or ownership."""

    status_code = 403


class NotFoundError(AppError):
    """Referenced entity does not exist."""

    status_code = 404


class ConflictError(AppError):
    """Uniqueness violation (e.g. duplicate user or store email)."""

    status_code = 409


def mark_logged(exc: BaseException) -> None:
    """Flag an exception whose traceback was already logged where it was caught."""
    exc.storerate_logged = True


def is_logged(exc: BaseException) -> bool:
    return getattr(exc, "storerate_logged", False)
