from typing import Optional, Literal

from pydantic import EmailStr, Field

from schemas import RequestSchema
from schemas.auth import Role


class CreateCompanySchema(RequestSchema):
    name: str = Field(min_length=2, max_length=200)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(default=None, max_length=50)
    company_code: Optional[str] = Field(default=None, max_length=20)


class UpdateCompanySchema(RequestSchema):
    name: Optional[str] = Field(default=None, min_length=2, max_length=200)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(default=None, max_length=50)
    status: Optional[Literal["active", "inactive"]] = None


class CreateUserSchema(RequestSchema):
    full_name: str = Field(min_length=2, max_length=200)
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=50)
    role: Role
    company_id: Optional[int] = None
    password: str = Field(min_length=6, max_length=100)


class UpdateUserSchema(RequestSchema):
    full_name: Optional[str] = Field(default=None, min_length=2, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=50)
    role: Optional[Role] = None
    company_id: Optional[int] = None


class CreateCompanyAdminSchema(RequestSchema):
    full_name: str = Field(min_length=2, max_length=200)
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=50)
    password: str = Field(min_length=6, max_length=100)
    company_id: int


class UpdateCompanyAdminSchema(RequestSchema):
    full_name: Optional[str] = Field(default=None, min_length=2, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=50)
    is_active: Optional[bool] = None
