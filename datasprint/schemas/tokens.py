from pydantic import Field

from datasprint.schemas.users import CamelModel, UserResponse


class LoginRequest(CamelModel):
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=128)


class AuthResponse(CamelModel):
    message: str
    user: UserResponse
    token: str
    token_type: str = "bearer"
    expires_in_seconds: int
