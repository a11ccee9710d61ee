from datetime import datetime
from typing import Optional

from nirapod_auth.schemas.auth_schema import CamelModel


class UserOut(CamelModel):
    """Profile as the user sees it, without credentials or documents."""
    id: str
    name: str
    email: str
    phone: str
    is_verified: bool
    is_admin: bool
    created_at: datetime
    photo: Optional[str] = None


class AdminUserOut(UserOut):
    """What an admin reviews: the profile plus both identity documents."""
    nid_front: str
    nid_back: str


class UserUpdate(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class ChangePassword(CamelModel):
    current_password: str
    new_password: str
