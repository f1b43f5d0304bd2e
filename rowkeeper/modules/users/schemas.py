from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Union
from datetime import datetime
from enum import Enum


class UserRow(BaseModel):
    id: Union[int, str]
    name: str
    email: str
    user_id: str
    created_at: datetime
    updated_at: Optional[datetime] = None


class UserRowInput(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr


class RowIntent(str, Enum):
    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"


class UserRowForm(BaseModel):
    intent: str = ""
    id: Optional[str] = None
    name: str = ""
    email: str = ""


class MutationResult(BaseModel):
    intent: Optional[RowIntent] = None
    ok: bool
    affected: int = 0
    message: str
