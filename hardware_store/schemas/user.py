from pydantic import AliasChoices, BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional, Literal

UserRole = Literal["admin", "staff"]

# Schema for user authentication credentials
class UserLogin(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

# Schema for user registration requests
class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)
    email: Optional[EmailStr] = None
    role: UserRole = "staff"  # default role

# Output schema for user profile details
class UserResponse(BaseModel):
    id: int
    username: str
    role: str
    email: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# Schema for JWT authentication token response
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse

# Schema for JWT payload contents
class TokenData(BaseModel):
    username: Optional[str] = None
    role: Optional[str] = None

# Schema for password change requests
class PasswordChange(BaseModel):
    current_password: str = Field(..., min_length=1, validation_alias=AliasChoices("current_password", "currentPassword"))
    new_password: str = Field(..., min_length=6, validation_alias=AliasChoices("new_password", "newPassword"))
