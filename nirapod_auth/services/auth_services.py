import logging
import uuid
from datetime import datetime, timedelta, timezone
from nirapod_auth.repositories.user_repo import UserRepository
from nirapod_auth.schemas.auth_schema import UserRegister
from nirapod_auth.services.otp_service import OtpManager
from nirapod_auth.services.mailer import SmtpMailNotifier
from nirapod_auth.core.security import hash_password, verify_password, create_access_token
from nirapod_auth.core.config import settings
from nirapod_auth.core.exceptions import (
    AuthError,
    NotFoundError,
    ValidationError,
    UserAlreadyExistsException,
)

logger = logging.getLogger(__name__)

REGISTRATION_MESSAGE = "Registration successful! Please wait for admin verification."


class AuthService:
    def __init__(self, user_repo: UserRepository, otp_manager: OtpManager, mailer: SmtpMailNotifier):
        self.user_repo = user_repo
        self.otp_manager = otp_manager
        self.mailer = mailer

    async def register_user(self, user_in: UserRegister) -> str:
        name = user_in.name.strip()
        email = user_in.email.strip()
        phone = user_in.phone.strip()
        required = {
            "name": name,
            "email": email,
            "phone": phone,
            "password": user_in.password,
            "nidFront": user_in.nid_front,
            "nidBack": user_in.nid_back,
            "photo": user_in.photo,
        }
        missing = [field for field, value in required.items() if not value]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        if "@" not in email:
            raise ValidationError("Invalid email address")

        if await self.user_repo.get_by_email(email):
            raise UserAlreadyExistsException("email")
        if await self.user_repo.get_by_phone(phone):
            raise UserAlreadyExistsException("phone")

        user = {
            "id": uuid.uuid4().hex,
            "name": name,
            "email": email,
            "phone": phone,
            "hashed_password": hash_password(user_in.password),
            "nid_front": user_in.nid_front,
            "nid_back": user_in.nid_back,
            "photo": user_in.photo,
            "is_verified": False,
            "is_admin": False,
            "created_at": datetime.now(timezone.utc),
        }
        await self.user_repo.create(user)
        logger.info("Registered user %s", user["id"])
        return REGISTRATION_MESSAGE

    async def authenticate(self, email_or_phone: str, password: str) -> dict:
        user = await self.user_repo.get_by_email(email_or_phone)
        if not user:
            user = await self.user_repo.get_by_phone(email_or_phone)
        if not user or not verify_password(password or "", user.get("hashed_password", "")):
            raise AuthError("Invalid credentials")
        return user

    def create_token_for_user(self, user: dict) -> str:
        access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        return create_access_token(subject=user["email"], expires_delta=access_token_expires)

    # ------------------ Password reset ------------------ #

    async def generate_and_send_otp(self, email: str) -> None:
        user = await self.user_repo.get_by_email(email)
        if not user:
            raise NotFoundError("No user found with this email")
        code = await self.otp_manager.issue(email)
        # DeliveryError propagates, the client has to ask again
        await self.mailer.send_otp(email, code)

    async def verify_otp(self, email: str, code: str) -> bool:
        return await self.otp_manager.is_valid(email, code)

    async def reset_password_with_otp(self, email: str, code: str, new_password: str) -> None:
        if not await self.otp_manager.is_valid(email, code):
            raise ValidationError("Invalid or expired OTP")
        if not new_password:
            raise ValidationError("New password must not be empty")
        user = await self.user_repo.get_by_email(email)
        if not user:
            raise NotFoundError("No user found with this email")
        hashed = hash_password(new_password)
        # a concurrent reset may have used the code since the check above
        if not await self.otp_manager.redeem(email, code):
            raise ValidationError("Invalid or expired OTP")
        await self.user_repo.update_password(user["id"], hashed)
        logger.info("Password reset for user %s", user["id"])

    async def change_password(self, user: dict, current_password: str, new_password: str) -> None:
        if not verify_password(current_password or "", user.get("hashed_password", "")):
            raise AuthError("Current password is incorrect")
        if not new_password:
            raise ValidationError("New password must not be empty")
        await self.user_repo.update_password(user["id"], hash_password(new_password))
