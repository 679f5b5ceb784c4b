"""Protocol-level exceptions."""

from toolgate.exceptions import ToolGateError


class ProtocolError(ToolGateError):
    """Raised when a JSON-RPC envelope is malformed or has an unexpected shape.

    Attributes:
        rpc_code: JSON-RPC error code to report when answering a peer.
    """

    def __init__(self, message: str, rpc_code: int = -32600):
        super().__init__(message=message, code="PROTOCOL_ERROR")
        self.rpc_code = rpc_code


class RpcError(ToolGateError):
    """Raised when a peer answers with a JSON-RPC error or a non-2xx status.

    Attributes:
        rpc_code: JSON-RPC error code, if the peer supplied one.
        status_code: HTTP status of the response, if relevant.
    """

    def __init__(self, message: str, rpc_code: int | None = None, status_code: int | None = None):
        super().__init__(message=message, code="RPC_ERROR")
        self.rpc_code = rpc_code
        self.status_code = status_code
