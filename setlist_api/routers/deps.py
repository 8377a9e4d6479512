"""Request-scoped dependencies shared by every router."""
from __future__ import annotations

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from setlist_api.services.auth_service import InvalidSessionError, UserProfile
from setlist_api.services.container import Services

bearer = HTTPBearer(auto_error=False)


def get_services(request: Request) -> Services:
    return request.app.state.services


def current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    services: Services = Depends(get_services),
) -> UserProfile:
    if credentials is None:
        raise InvalidSessionError("Autenticazione richiesta")
    return services.auth.authenticate(credentials.credentials)
