from typing import Optional
from uuid import UUID
from pydantic import BaseModel


class UserCredentials(BaseModel):
    # Presence is checked by the identity service so missing fields get a 400 with a clear reason.
    username: Optional[str] = None
    password: Optional[str] = None


class AuthUser(BaseModel):
    id: UUID
    username: str

    model_config = {"from_attributes": True}


class UserResponse(BaseModel):
    user: AuthUser


class AuthResponse(BaseModel):
    message: str
    user: AuthUser


class MessageResponse(BaseModel):
    message: str
