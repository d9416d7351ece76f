from pydantic import BaseModel, Field, field_validator
from typing import Literal, Optional
import uuid
from datetime import datetime

from store_ratings.utils.validators import validate_name, validate_address, validate_email

UserRole = Literal["admin", "user", "store_owner"]

ROLE_ADMIN = "admin"
ROLE_USER = "user"
ROLE_STORE_OWNER = "store_owner"

ROLE_LABELS = {
    ROLE_ADMIN: "Administrator",
    ROLE_STORE_OWNER: "Store Owner",
    ROLE_USER: "Normal User",
}


def _check(error: Optional[str], value):
    if error:
        raise ValueError(error)
    return value


class ProfileFields(BaseModel):
    """Name/email/address with the same rules as the registration form."""
    name: str
    email: str
    address: str

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        return _check(validate_name(v), v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return _check(validate_email(v), v)

    @field_validator("address")
    @classmethod
    def check_address(cls, v):
        return _check(validate_address(v), v)


# Authentication models
class UserCreate(ProfileFields):
    # Password strength is checked by the identity provider (auth/weak-password)
    password: str

class UserLogin(BaseModel):
    email: str
    password: str

class AdminUserCreate(UserCreate):
    role: UserRole = ROLE_USER
    store_name: Optional[str] = None

class AdminUserUpdate(BaseModel):
    name: str
    address: str
    role: UserRole
    store_name: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        return _check(validate_name(v), v)

    @field_validator("address")
    @classmethod
    def check_address(cls, v):
        return _check(validate_address(v), v)

class PasswordUpdateRequest(BaseModel):
    # Optional only for sessions that signed in recently
    current_password: Optional[str] = None
    new_password: str

class User(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    email: str
    address: str
    role: UserRole = ROLE_USER
    created_at: datetime = Field(default_factory=datetime.utcnow)

class Identity(BaseModel):
    """What the identity provider knows about a signed-in account."""
    uid: str
    email: str
    token_id: Optional[str] = None
    issued_at: Optional[datetime] = None

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: Optional[User] = None

class SessionInfo(BaseModel):
    identity: Optional[Identity] = None
    profile: Optional[User] = None
    is_admin: bool = False
    is_store_owner: bool = False
    is_normal_user: bool = False
    loading: bool = False
