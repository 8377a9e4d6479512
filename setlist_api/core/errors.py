"""
Error taxonomy shared by every service.

Services raise subclasses of these four families; the HTTP layer maps
``status_code`` to the response and nothing inside the core retries.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for failures surfaced to callers."""

    status_code = 400
    default_message = "Richiesta non valida"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ConflictError(ServiceError):
    status_code = 409
    default_message = "Conflitto"


class AuthenticationError(ServiceError):
    status_code = 401
    default_message = "Autenticazione richiesta"


class NotFoundError(ServiceError):
    status_code = 404
    default_message = "Risorsa non trovata"


class ForbiddenError(ServiceError):
    status_code = 403
    default_message = "Operazione non consentita"
