from typing import Optional, Literal

from pydantic import EmailStr, Field, model_validator

from schemas import RequestSchema

Role = Literal["platform_admin", "company_admin", "employee"]


class LoginSchema(RequestSchema):
    email: EmailStr
    password: str = Field(min_length=6)


class RegisterUserSchema(RequestSchema):
    email: EmailStr
    password: str = Field(min_length=6)
    full_name: str = Field(min_length=2, max_length=200)
    phone: Optional[str] = Field(default=None, max_length=50)
    role: Role
    company_id: Optional[int] = None

    @model_validator(mode="after")
    def _company_required(self):
        if self.role != "platform_admin" and self.company_id is None:
            raise ValueError("company_id is required for company_admin and employee")
        return self


class UpdateProfileSchema(RequestSchema):
    full_name: Optional[str] = Field(default=None, min_length=2, max_length=200)
    phone: Optional[str] = Field(default=None, max_length=50)


class ChangePasswordSchema(RequestSchema):
    current_password: str
    new_password: str = Field(min_length=6)


class MobileRegisterSchema(RequestSchema):
    email: EmailStr
    password: str = Field(min_length=6)
    full_name: str = Field(min_length=2, max_length=200)
    phone: Optional[str] = Field(default=None, max_length=50)
    company_code: str = Field(max_length=20)
