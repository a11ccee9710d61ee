import base64
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.security import OAuth2PasswordRequestForm

from nirapod_auth.api.v1.deps import get_auth_service, get_current_user
from nirapod_auth.core.config import settings
from nirapod_auth.core.exceptions import ServiceError, internal_error
from nirapod_auth.schemas.auth_schema import (
    AccessToken,
    Message,
    OtpVerify,
    ResetPassword,
    ResetRequest,
    Token,
    UserLogin,
    UserRegister,
)
from nirapod_auth.schemas.user_schema import UserOut
from nirapod_auth.services.auth_services import AuthService

router = APIRouter(tags=["auth"], prefix="/api/v1/auth")


async def _encode_upload(upload: Optional[UploadFile]) -> str:
    if upload is None:
        return ""
    return base64.b64encode(await upload.read()).decode("ascii")


@router.post("/register", response_model=Message, status_code=status.HTTP_201_CREATED)
async def register(
        name: str = Form(""),
        email: str = Form(""),
        phone: str = Form(""),
        password: str = Form(""),
        photo: str = Form(""),
        nid_front: Optional[UploadFile] = File(None, alias="nidFront"),
        nid_back: Optional[UploadFile] = File(None, alias="nidBack"),
        auth_svc: AuthService = Depends(get_auth_service),
):
    try:
        user_in = UserRegister(
            name=name,
            email=email,
            phone=phone,
            password=password,
            photo=photo,
            nid_front=await _encode_upload(nid_front),
            nid_back=await _encode_upload(nid_back),
        )
        message = await auth_svc.register_user(user_in)
    except ServiceError as e:
        raise e.to_http()
    except Exception as e:
        raise internal_error("register", e)
    return Message(message=message)


@router.post("/login", response_model=Token)
async def login(body: UserLogin, auth_svc: AuthService = Depends(get_auth_service)):
    try:
        user = await auth_svc.authenticate(body.email_or_phone, body.password)
    except ServiceError as e:
        raise e.to_http()
    except Exception as e:
        raise internal_error("login", e)
    token = auth_svc.create_token_for_user(user)
    return Token(token=token, is_verified=user["is_verified"], name=user["name"])


@router.post("/token", response_model=AccessToken)
async def login_for_access_token(form_data: OAuth2PasswordRequestForm = Depends(),
                                 auth_svc: AuthService = Depends(get_auth_service)):
    """OAuth2 password flow for the OpenAPI "Authorize" dialog; username is email or phone."""
    try:
        user = await auth_svc.authenticate(form_data.username, form_data.password)
    except ServiceError as e:
        raise e.to_http()
    except Exception as e:
        raise internal_error("login_for_access_token", e)
    return AccessToken(access_token=auth_svc.create_token_for_user(user))


@router.get("/me", response_model=UserOut)
async def read_current_user(current_user: dict = Depends(get_current_user)):
    return current_user


# ------------------ Password reset (OTP) ------------------ #

@router.post("/request-reset", response_model=Message)
async def request_password_reset(body: ResetRequest, auth_svc: AuthService = Depends(get_auth_service)):
    try:
        await auth_svc.generate_and_send_otp(body.email)
    except ServiceError as e:
        raise e.to_http()
    except Exception as e:
        raise internal_error("request_password_reset", e)
    return Message(message=f"OTP sent to your email (valid for {settings.OTP_EXPIRE_MINUTES} minutes)")


@router.post("/verify-otp", response_model=Message)
async def verify_otp(body: OtpVerify, auth_svc: AuthService = Depends(get_auth_service)):
    if not await auth_svc.verify_otp(body.email, body.otp):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired OTP")
    return Message(message="OTP verified")


@router.post("/reset-password", response_model=Message)
async def reset_password(body: ResetPassword, auth_svc: AuthService = Depends(get_auth_service)):
    try:
        await auth_svc.reset_password_with_otp(body.email, body.otp, body.new_password)
    except ServiceError as e:
        raise e.to_http()
    except Exception as e:
        raise internal_error("reset_password", e)
    return Message(message="Password reset successful")
