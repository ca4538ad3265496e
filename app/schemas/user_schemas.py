from pydantic import BaseModel, EmailStr, model_validator
from typing import List, Optional


class UserRegister(BaseModel):
    full_name: Optional[str] = None
    email: EmailStr
    password: str
    confirm_password: str

    @model_validator(mode="after")
    def validate_passwords(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self

class UserResponse(BaseModel):
    message: str
    user_id: str
    email: EmailStr
    roles: List[str]

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class Token(BaseModel):
    access_token: str
    token_type: str

class RoleGrant(BaseModel):
    email: EmailStr
    role: str
