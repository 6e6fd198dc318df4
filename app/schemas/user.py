from pydantic import EmailStr, Field
from datetime import datetime
from app.schemas.common import CamelModel

USERNAME_PATTERN = r"^[A-Za-z0-9_]+$"
OTP_PATTERN = r"^\d{6}$"


class SendOtpRequest(CamelModel):
    email: EmailStr

class RegisterRequest(CamelModel):
    email: EmailStr
    username: str = Field(min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    password: str = Field(min_length=6)
    name: str = Field(min_length=1, max_length=100)
    otp: str = Field(pattern=OTP_PATTERN)

class VerifyEmailRequest(CamelModel):
    email: EmailStr
    otp: str = Field(pattern=OTP_PATTERN)

class LoginRequest(CamelModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)

class ForgotPasswordRequest(CamelModel):
    email: EmailStr

class ResetPasswordRequest(CamelModel):
    email: EmailStr
    otp: str = Field(pattern=OTP_PATTERN)
    new_password: str = Field(min_length=6)

class UserResponse(CamelModel):
    id: int
    email: str
    username: str
    name: str
    created_at: datetime

class UserEnvelope(CamelModel):
    success: bool = True
    message: str = ""
    user: UserResponse

class LoginResponse(CamelModel):
    success: bool = True
    message: str = "Login successful"
    token: str
    user: UserResponse
