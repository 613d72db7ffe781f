"""Request and response envelopes for the line-delimited JSON protocol."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, StrictStr


class Request(BaseModel):
    """A single protocol request."""

    method: StrictStr
    parameters: Any = None


class CityParams(BaseModel):
    """Parameters shared by every supported method."""

    model_config = ConfigDict(extra="ignore")

    city: StrictStr = ""
    country: StrictStr = ""


class ErrorContent(BaseModel):
    message: str


class Response(BaseModel):
    """Tagged response envelope written back to the caller."""

    type: Literal["success", "error"]
    content: Any

    @classmethod
    def success(cls, payload: BaseModel) -> "Response":
        return cls(type="success", content=payload.model_dump())

    @classmethod
    def error(cls, message: str) -> "Response":
        return cls(type="error", content=ErrorContent(message=message).model_dump())
