"""JSON-RPC 2.0 envelope codec shared by the gateway client and the managed endpoint."""

from .codec import (
    build_error,
    build_success,
    decode_response,
    encode_request,
    error_from_http_status,
    parse_request,
    raise_for_envelope,
)
from .exceptions import ProtocolError, RpcError
from .schemas import RpcErrorCodes, RpcErrorDetail, RpcFailure, RpcRequest, RpcResponse, RpcSuccess

__all__ = [
    "build_error",
    "build_success",
    "decode_response",
    "encode_request",
    "error_from_http_status",
    "parse_request",
    "raise_for_envelope",
    "ProtocolError",
    "RpcError",
    "RpcErrorCodes",
    "RpcErrorDetail",
    "RpcFailure",
    "RpcRequest",
    "RpcResponse",
    "RpcSuccess",
]
