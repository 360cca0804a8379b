from pydantic import BaseModel

from .technicians import TechnicianResponse


class LoginRequest(BaseModel):
    login: str
    password: str


class AdminLoginRequest(BaseModel):
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class TechnicianTokenResponse(TokenResponse):
    technician: TechnicianResponse
