from typing import Literal, Optional

from pydantic import BaseModel, Field


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # access token lifetime in seconds


class TokenPayload(BaseModel):
    sub: Optional[str] = None
    type: Literal["access", "refresh"] = "access"
    exp: Optional[int] = None


class LoginRequest(BaseModel):
    username: str = Field(..., description="Username or email")
    password: str


class RefreshTokenRequest(BaseModel):
    refresh_token: str
