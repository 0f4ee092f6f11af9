from pydantic import BaseModel

from .user import UserResponse


# Answer of /auth/register and /auth/login
class Token(BaseModel):
    success: bool = True
    user: UserResponse
    token: str
