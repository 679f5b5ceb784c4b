"""Encoding and decoding of JSON-RPC 2.0 envelopes.

Every payload crossing the network boundary is checked here before the rest of
the code touches it: a body is either a success envelope, an error envelope, or
a ProtocolError.
"""

import json
import uuid
from typing import Any

from pydantic import ValidationError

from .exceptions import ProtocolError, RpcError
from .schemas import RpcErrorCodes, RpcErrorDetail, RpcFailure, RpcRequest, RpcResponse, RpcSuccess


def encode_request(
    method: str,
    params: Any | None = None,
    wants_response: bool = True,
    request_id: str | int | None = None,
) -> bytes:
    """Serialize a request envelope.

    Requests that expect no response are sent as notifications and carry no id.
    """
    payload: dict[str, Any] = {"jsonrpc": "2.0", "method": method}
    if wants_response:
        payload["id"] = request_id if request_id is not None else str(uuid.uuid4())
    if params is not None:
        payload["params"] = params
    return json.dumps(payload).encode("utf-8")


def decode_response(body: bytes | str, expect_response: bool = True) -> RpcResponse | None:
    """Parse a response body into a success or failure envelope.

    Args:
        body: Raw response body.
        expect_response: Whether the request was sent with an id.

    Returns:
        The parsed envelope, or None for an empty body to a notification.

    Raises:
        ProtocolError: If the body is empty when a response was expected, is not
            JSON, or is not a JSON-RPC envelope.
    """
    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
    if not text.strip():
        if not expect_response:
            return None
        raise ProtocolError("MCP server returned no response")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ProtocolError(f"Invalid JSON-RPC response: {exc.msg}", RpcErrorCodes.PARSE_ERROR) from exc
    except RecursionError as exc:
        raise ProtocolError("Invalid JSON-RPC response: nesting too deep", RpcErrorCodes.PARSE_ERROR) from exc

    if not isinstance(data, dict):
        raise ProtocolError("Invalid JSON-RPC response: expected an object")

    try:
        if "error" in data and data["error"] is not None:
            return RpcFailure.model_validate(data)
        if "result" in data:
            return RpcSuccess.model_validate(data)
    except ValidationError as exc:
        raise ProtocolError(f"Invalid JSON-RPC response: {exc.errors()[0]['msg']}") from exc

    raise ProtocolError("Invalid JSON-RPC response: missing result and error")


def raise_for_envelope(envelope: RpcResponse | None) -> Any:
    """Return the result of a success envelope or raise the carried error."""
    if envelope is None:
        return None
    if isinstance(envelope, RpcFailure):
        raise RpcError(envelope.error.message, rpc_code=envelope.error.code)
    return envelope.result


def error_from_http_status(status_code: int, body: bytes | str) -> RpcError:
    """Build the error for a non-2xx HTTP answer.

    A JSON-RPC error carried in the body wins; otherwise the trimmed body text
    (or the bare status) is used as the reason.
    """
    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
    try:
        data = json.loads(text) if text.strip() else None
    except (json.JSONDecodeError, RecursionError):
        data = None

    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        error = data["error"]
        message = error.get("message")
        if isinstance(message, str) and message:
            code = error.get("code")
            return RpcError(
                message,
                rpc_code=code if isinstance(code, int) else None,
                status_code=status_code,
            )

    reason = text.strip() or f"HTTP {status_code}"
    return RpcError(f"MCP request failed ({status_code}): {reason}", status_code=status_code)


def parse_request(body: bytes | str) -> RpcRequest:
    """Parse an inbound request envelope (server side).

    Raises:
        ProtocolError: With rpc_code -32700 for invalid JSON, -32600 for an
            envelope that is not an object with a string method.
    """
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as exc:
        raise ProtocolError("Parse error", RpcErrorCodes.PARSE_ERROR) from exc

    if not isinstance(data, dict) or not isinstance(data.get("method"), str):
        raise ProtocolError("Invalid Request", RpcErrorCodes.INVALID_REQUEST)

    try:
        return RpcRequest.model_validate(data)
    except ValidationError as exc:
        raise ProtocolError("Invalid Request", RpcErrorCodes.INVALID_REQUEST) from exc


def build_success(request_id: str | int | None, result: Any) -> dict[str, Any]:
    return RpcSuccess(id=request_id, result=result).model_dump()


def build_error(request_id: str | int | None, code: int, message: str) -> dict[str, Any]:
    failure = RpcFailure(id=request_id, error=RpcErrorDetail(code=code, message=message))
    return failure.model_dump(exclude={"error": {"data"}})
