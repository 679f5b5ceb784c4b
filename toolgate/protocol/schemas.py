"""Pydantic schemas for JSON-RPC 2.0 envelopes."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class RpcRequest(BaseModel):
    """JSON-RPC 2.0 request. Requests without an id are notifications.

    Attributes:
        jsonrpc: JSON-RPC version (always "2.0").
        id: Request identifier for correlation.
        method: The method to call (e.g., "tools/call").
        params: Method parameters.
    """

    jsonrpc: Literal["2.0"] = Field(default="2.0", description="JSON-RPC version")
    id: str | int | None = Field(default=None, description="Request ID for correlation")
    method: str = Field(..., description="Method to call")
    params: Any | None = Field(default=None, description="Method parameters")

    @property
    def is_notification(self) -> bool:
        return self.id is None


class RpcErrorDetail(BaseModel):
    """Error details in JSON-RPC format."""

    code: int = Field(..., description="Error code")
    message: str = Field(..., description="Error message")
    data: Any | None = Field(default=None, description="Additional error data")


class RpcSuccess(BaseModel):
    """JSON-RPC 2.0 success response."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: str | int | None = None
    result: Any


class RpcFailure(BaseModel):
    """JSON-RPC 2.0 error response."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: str | int | None = None
    error: RpcErrorDetail


RpcResponse = RpcSuccess | RpcFailure


class RpcErrorCodes:
    """Standard JSON-RPC error codes used on the wire."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # Tool execution failures (validation, unknown tool, upstream)
    SERVER_ERROR = -32000
