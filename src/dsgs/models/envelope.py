"""Request/response envelopes for the constraint protocol."""

from typing import Any

from pydantic import BaseModel, ConfigDict


PARSE_ERROR_ID = "parse-error"
METHOD_NOT_ALLOWED_ID = "method-not-allowed"
INVALID_REQUEST_ID = "invalid-request"
SERVER_ERROR_ID = "server-error"


class ErrorObject(BaseModel):
    code: int
    message: str


class Request(BaseModel):
    """Decoded request envelope.

    Unknown keys (``jsonrpc`` and the like) are tolerated and ignored.
    """

    model_config = ConfigDict(extra="ignore")

    method: Any = None
    params: Any = None
    id: Any = None


class Response(BaseModel):
    """Response envelope holding exactly one of ``result`` or ``error``."""

    result: dict[str, Any] | None = None
    error: ErrorObject | None = None
    id: Any = None

    @classmethod
    def success(cls, request_id: Any, result: dict[str, Any]) -> "Response":
        return cls(result=result, id=request_id)

    @classmethod
    def failure(cls, request_id: Any, code: int, message: str) -> "Response":
        return cls(error=ErrorObject(code=code, message=message), id=request_id)

    def to_dict(self) -> dict[str, Any]:
        if self.error is not None:
            return {"error": self.error.model_dump(), "id": self.id}
        return {"result": self.result, "id": self.id}
