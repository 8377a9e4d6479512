from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, status

from setlist_api.routers.deps import current_user, get_services
from setlist_api.routers.schemas import (
    AuthOut,
    ChangePasswordBody,
    EmailBody,
    LoginBody,
    MessageOut,
    RegisterBody,
    RegisterOut,
    ResetPasswordBody,
    TokenBody,
    UserOut,
    VerifyOut,
)
from setlist_api.services.auth_service import UserProfile
from setlist_api.services.container import Services

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=RegisterOut)
def register(body: RegisterBody, services: Services = Depends(get_services)):
    result = services.auth.register(body.email, body.password, body.name)
    return {"user": result.user, "access_token": None, "message": result.message}


@router.post("/login", response_model=AuthOut)
def login(body: LoginBody, services: Services = Depends(get_services)):
    return services.auth.login(body.email, body.password)


@router.post("/verify-email", response_model=VerifyOut)
def verify_email(body: TokenBody, services: Services = Depends(get_services)):
    return services.auth.verify_email(body.token)


@router.post("/resend-verification", response_model=MessageOut)
def resend_verification(
    body: EmailBody,
    background: BackgroundTasks,
    services: Services = Depends(get_services),
):
    return services.auth.resend_verification(body.email, defer=background.add_task)


@router.post("/forgot-password", response_model=MessageOut)
def forgot_password(
    body: EmailBody,
    background: BackgroundTasks,
    services: Services = Depends(get_services),
):
    return services.auth.forgot_password(body.email, defer=background.add_task)


@router.post("/reset-password", response_model=MessageOut)
def reset_password(body: ResetPasswordBody, services: Services = Depends(get_services)):
    return services.auth.reset_password(body.token, body.new_password)


@router.post("/change-password", response_model=MessageOut)
def change_password(
    body: ChangePasswordBody,
    user: UserProfile = Depends(current_user),
    services: Services = Depends(get_services),
):
    return services.auth.change_password(user.id, body.current_password, body.new_password)


@router.post("/check-email")
def check_email(body: EmailBody, services: Services = Depends(get_services)):
    return {"exists": services.auth.check_email_exists(body.email)}


@router.get("/me", response_model=UserOut)
def me(user: UserProfile = Depends(current_user)):
    return user
