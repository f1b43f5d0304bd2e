from pydantic import BaseModel
from typing import Optional


class Identity(BaseModel):
    id: str
    email: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRequest(BaseModel):
    email: str
    password: str


class RegisterResponse(BaseModel):
    user_id: Optional[str] = None
    email: str
    needs_confirmation: bool = False
