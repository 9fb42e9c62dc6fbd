"""Request and response payloads for the identity endpoints."""

from pydantic import BaseModel, EmailStr

from studytrack.app.schemas.user import UserRead


class LoginRequest(BaseModel):
    """Payload for login attempts."""

    email: EmailStr
    password: str


class SetupRequest(BaseModel):
    name: str
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    name: str
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AuthResponse(TokenPair):
    user: UserRead
