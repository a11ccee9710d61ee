from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from asyncpg import Connection

from nirapod_auth.core.exceptions import TokenError
from nirapod_auth.core.security import validate_access_token
from nirapod_auth.db.session import get_db_connection
from nirapod_auth.repositories.otp_repo import OtpRepository
from nirapod_auth.repositories.user_repo import UserRepository
from nirapod_auth.services.admin_service import AdminService
from nirapod_auth.services.auth_services import AuthService
from nirapod_auth.services.mailer import SmtpMailNotifier
from nirapod_auth.services.otp_service import OtpManager
from nirapod_auth.services.user_service import UserService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")


def get_user_repo(conn: Connection = Depends(get_db_connection)) -> UserRepository:
    return UserRepository(conn)

def get_otp_repo(conn: Connection = Depends(get_db_connection)) -> OtpRepository:
    return OtpRepository(conn)

def get_mailer() -> SmtpMailNotifier:
    return SmtpMailNotifier()

def get_otp_manager(otp_repo: OtpRepository = Depends(get_otp_repo)) -> OtpManager:
    return OtpManager(otp_repo)

def get_auth_service(
        user_repo: UserRepository = Depends(get_user_repo),
        otp_manager: OtpManager = Depends(get_otp_manager),
        mailer: SmtpMailNotifier = Depends(get_mailer),
) -> AuthService:
    return AuthService(user_repo, otp_manager, mailer)

def get_admin_service(
        user_repo: UserRepository = Depends(get_user_repo),
        mailer: SmtpMailNotifier = Depends(get_mailer),
) -> AdminService:
    return AdminService(user_repo, mailer)

def get_user_service(user_repo: UserRepository = Depends(get_user_repo)) -> UserService:
    return UserService(user_repo)


async def get_current_user(
        token: str = Depends(oauth2_scheme),
        user_repo: UserRepository = Depends(get_user_repo),
) -> dict:
    """Resolve the bearer token to the stored user, once per request."""
    try:
        email = validate_access_token(token)
    except TokenError as e:
        raise e.to_http()

    user_data = await user_repo.get_by_email(email)
    if user_data is None:
        raise TokenError("Could not validate credentials").to_http()

    return user_data
