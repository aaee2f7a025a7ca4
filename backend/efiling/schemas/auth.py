"""Auth request/response schemas."""
from efiling.schemas.base import CamelModel
from efiling.schemas.user import UserResponse


class LoginRequest(CamelModel):
    email: str
    password: str


class RefreshRequest(CamelModel):
    token: str


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str


class LoginResponse(TokenPair):
    user: UserResponse
