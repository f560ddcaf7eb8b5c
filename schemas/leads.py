from datetime import date
from typing import Optional

from pydantic import Field, model_validator

from schemas import RequestSchema, Interest
from schemas.visitors import CreateVisitorSchema


class CreateLeadSchema(CreateVisitorSchema):
    visitor_id: Optional[int] = None
    phone: Optional[str] = Field(default=None, max_length=50)
    notes: Optional[str] = None
    follow_up_date: Optional[date] = None
    # Only read for platform admins; everyone else is pinned to their own company
    company_id: Optional[int] = None

    @model_validator(mode="after")
    def _visitor_identity(self):
        if self.visitor_id is None and (not self.phone or not self.full_name):
            raise ValueError("phone and full_name are required when visitor_id is not provided")
        return self


class UpdateLeadSchema(RequestSchema):
    interests: Optional[Interest] = None
    notes: Optional[str] = None
    follow_up_date: Optional[date] = None
