from typing import Optional

from pydantic import EmailStr, Field

from schemas import RequestSchema, Interest


class CreateVisitorSchema(RequestSchema):
    phone: str = Field(max_length=50)
    full_name: Optional[str] = Field(default=None, max_length=200)
    email: Optional[EmailStr] = None
    organization: Optional[str] = Field(default=None, max_length=200)
    designation: Optional[str] = Field(default=None, max_length=200)
    city: Optional[str] = Field(default=None, max_length=120)
    country: Optional[str] = Field(default=None, max_length=120)
    interests: Optional[Interest] = None


class UpdateVisitorSchema(RequestSchema):
    full_name: Optional[str] = Field(default=None, max_length=200)
    email: Optional[EmailStr] = None
    organization: Optional[str] = Field(default=None, max_length=200)
    designation: Optional[str] = Field(default=None, max_length=200)
    city: Optional[str] = Field(default=None, max_length=120)
    country: Optional[str] = Field(default=None, max_length=120)
    interests: Optional[Interest] = None
