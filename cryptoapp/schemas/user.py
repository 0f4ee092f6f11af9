from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from cryptoapp.schemas.types import UTCDateTime


# --- INPUT (what the React client sends) ---
# Fields stay optional here: the Credential Store decides what is missing
# and answers with a proper InvalidInput message.
class UserCreate(BaseModel):
    username: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    password: Optional[str] = None


class UserLogin(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


# --- OUTPUT ---
# No password_hash here, ever.
class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    username: str
    email: str
    created_at: Optional[UTCDateTime] = None


class UserEnvelope(BaseModel):
    success: bool = True
    user: UserResponse
