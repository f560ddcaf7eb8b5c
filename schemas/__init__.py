from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator

Interest = Literal["Hot", "Warm", "Cold"]


class RequestSchema(BaseModel):
    """Base for request bodies: unknown keys dropped, blank strings read as null."""
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

