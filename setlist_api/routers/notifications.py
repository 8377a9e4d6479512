from __future__ import annotations

from fastapi import APIRouter, Depends, status

from setlist_api.routers.deps import current_user, get_services
from setlist_api.routers.schemas import DeviceOut, RegisterDeviceBody, UnregisterDeviceBody
from setlist_api.services.auth_service import UserProfile
from setlist_api.services.container import Services

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=DeviceOut)
def register_device(
    body: RegisterDeviceBody,
    user: UserProfile = Depends(current_user),
    services: Services = Depends(get_services),
):
    return services.notifications.register_device(user.id, body.fcm_token, body.device_info, body.platform)


@router.post("/unregister")
def unregister_device(
    body: UnregisterDeviceBody,
    user: UserProfile = Depends(current_user),
    services: Services = Depends(get_services),
):
    removed = services.notifications.unregister_device(body.fcm_token, user_id=user.id)
    return {"removed": removed}
