"""User Schemas — registration, login, profile and admin update payloads.

Invariants:
    - Emails validated by EmailStr and lower-cased by the service
    - Role values restricted to the Role enum; invalid roles are 400 before reaching services
    - Passwords are never part of any response schema
"""

from pydantic import EmailStr, Field, field_validator

from app.core.domain_types import Role
from app.schemas.base import CamelModel


class RegisterRequest(CamelModel):
    """Registration. `name` is accepted as an alias of username."""
    username: str = Field(min_length=1, max_length=100, validation_alias="name")
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)
    role: Role | None = None

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("username cannot be empty or whitespace")
        return v


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ProfileUpdate(CamelModel):
    username: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None


class PasswordChange(CamelModel):
    current_password: str | None = None
    new_password: str | None = Field(None, max_length=128)


class UserUpdate(ProfileUpdate):
    role: Role | None = None
