"""Auth request and response models with validation."""

import re
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_PASSWORD_BYTES = 72


def _normalize_email(v: str) -> str:
    v = v.strip().lower()
    if not EMAIL_PATTERN.match(v):
        raise ValueError("Email address is not valid")
    return v


class RegisterRequest(BaseModel):
    """New account registration.

    Attributes:
        username: Display handle (non-blank, up to 100 chars)
        email: Login key, normalized to lower case
        password: Plain-text password (non-empty, at most 72 bytes)
    """

    username: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=320)
    password: str = Field(..., min_length=1)

    @field_validator("username")
    @classmethod
    def username_not_blank(cls, v: str) -> str:
        """Strip surrounding whitespace and reject blank usernames."""
        v = v.strip()
        if not v:
            raise ValueError("Username cannot be blank")
        return v

    @field_validator("email")
    @classmethod
    def email_valid(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        """Reject passwords bcrypt would silently truncate."""
        if len(v.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValueError(
                f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes"
            )
        return v


class LoginRequest(BaseModel):
    """Login credentials.

    Password length rules are deliberately not enforced here so that a bad
    password is reported the same way as an unknown email.
    """

    email: str = Field(..., max_length=320)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def email_valid(cls, v: str) -> str:
        return _normalize_email(v)


class RefreshRequest(BaseModel):
    """Request to exchange a refresh token for a new token pair.

    Accepts the token as a bare JSON string or as an object carrying
    ``refreshToken`` (or ``refresh_token``).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    refresh_token: str = Field(..., min_length=1, max_length=512)

    @model_validator(mode="before")
    @classmethod
    def wrap_bare_token(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"refresh_token": data}
        return data


class TokenResponse(BaseModel):
    """A freshly issued token pair, serialized with camelCase keys.

    Attributes:
        access_token: Short-lived signed JWT
        refresh_token: Long-lived opaque single-use token
        token_type: Always "bearer"
        expires_in: Access token lifetime in seconds
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(ge=1, description="Access token lifetime in seconds")


class AccessTokenClaims(BaseModel):
    """Verified claims carried by an access token."""

    sub: UUID
    email: str
    iss: str
    aud: str
    iat: int
    exp: int


class CurrentUser(BaseModel):
    """Identity resolved from a bearer access token."""

    id: UUID
    email: str
