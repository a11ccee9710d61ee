from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserRegister(CamelModel):
    name: str
    email: str
    phone: str
    password: str
    nid_front: str
    nid_back: str
    photo: str


class UserLogin(CamelModel):
    email_or_phone: str
    password: str


class Token(CamelModel):
    token: str
    is_verified: bool
    name: str


class ResetRequest(CamelModel):
    email: str


class OtpVerify(CamelModel):
    email: str
    otp: str


class ResetPassword(CamelModel):
    email: str
    otp: str
    new_password: str


class Message(BaseModel):
    message: str


class AccessToken(BaseModel):
    """OAuth2 password-flow response, field names fixed by the OAuth2 standard."""
    access_token: str
    token_type: str = "bearer"
