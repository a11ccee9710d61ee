from typing import List

from fastapi import APIRouter, Depends, Query

from nirapod_auth.api.v1.deps import (
    get_admin_service,
    get_auth_service,
    get_current_user,
    get_user_service,
)
from nirapod_auth.core.exceptions import ServiceError, internal_error
from nirapod_auth.schemas.auth_schema import Message
from nirapod_auth.schemas.user_schema import AdminUserOut, ChangePassword, UserOut, UserUpdate
from nirapod_auth.services.admin_service import AdminService
from nirapod_auth.services.auth_services import AuthService
from nirapod_auth.services.user_service import UserService

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("", response_model=List[AdminUserOut])
async def list_users(
        verified: str = Query("all"),
        current_user: dict = Depends(get_current_user),
        admin_svc: AdminService = Depends(get_admin_service),
):
    try:
        return await admin_svc.list_users(current_user, verified)
    except ServiceError as e:
        raise e.to_http()
    except Exception as e:
        raise internal_error("list_users", e)


@router.patch("/me", response_model=UserOut)
async def update_own_info(
        body: UserUpdate,
        current_user: dict = Depends(get_current_user),
        user_svc: UserService = Depends(get_user_service),
):
    try:
        return await user_svc.update_own_profile(current_user, body)
    except ServiceError as e:
        raise e.to_http()
    except Exception as e:
        raise internal_error("update_own_info", e)


@router.post("/me/change-password", response_model=Message)
async def change_password(
        body: ChangePassword,
        current_user: dict = Depends(get_current_user),
        auth_svc: AuthService = Depends(get_auth_service),
):
    try:
        await auth_svc.change_password(current_user, body.current_password, body.new_password)
    except ServiceError as e:
        raise e.to_http()
    except Exception as e:
        raise internal_error("change_password", e)
    return Message(message="Password changed successfully")


@router.patch("/{user_id}/verify", response_model=AdminUserOut)
async def verify_user(
        user_id: str,
        approve: bool = Query(...),
        current_user: dict = Depends(get_current_user),
        admin_svc: AdminService = Depends(get_admin_service),
):
    try:
        return await admin_svc.set_verification(current_user, user_id, approve)
    except ServiceError as e:
        raise e.to_http()
    except Exception as e:
        raise internal_error("verify_user", e)
