"""RPC-level exceptions.

Every per-request failure is an ``RPCError`` carrying the wire code;
``FramingError`` is the one failure that ends the session.
"""

from typing import Any, Optional

from websearch.exceptions import WebSearchError
from websearch.rpc.types import JSONRPCErrorCode, JSONRPCErrorData


class RPCError(WebSearchError):
  """Base exception for errors reported to the caller as a response.

  Args:
      message: Human-readable message placed in ``error.message``.
      code: JSON-RPC error code.
      data: Optional diagnostic payload placed in ``error.data``.
  """

  def __init__(
    self,
    message: str,
    code: int = JSONRPCErrorCode.INTERNAL_ERROR,
    data: Optional[Any] = None,
    status_code: int = 500,
  ):
    super().__init__(message, status_code)
    self.code = int(code)
    self.data = data
    self.type = "rpc_error"
    self.error_id = "rpc_error"

  def to_error_data(self) -> JSONRPCErrorData:
    return JSONRPCErrorData(code=self.code, message=self.message, data=self.data)


class ParseError(RPCError):
  """Raised when a frame's payload is not well-formed JSON."""

  def __init__(self, message: str = "Parse error", data: Optional[Any] = None):
    super().__init__(message, JSONRPCErrorCode.PARSE_ERROR, data, status_code=400)
    self.type = "parse_error"
    self.error_id = "parse_error"


class InvalidRequestError(RPCError):
  """Raised when the envelope is missing fields or has the wrong version tag."""

  def __init__(self, message: str, data: Optional[Any] = None):
    super().__init__(message, JSONRPCErrorCode.INVALID_REQUEST, data, status_code=400)
    self.type = "invalid_request_error"
    self.error_id = "invalid_request_error"


class MethodNotFoundError(RPCError):
  """Raised when no handler is registered for the requested method."""

  def __init__(self, method: str):
    super().__init__(f"Method not found: {method}", JSONRPCErrorCode.METHOD_NOT_FOUND, status_code=404)
    self.method = method
    self.type = "method_not_found_error"
    self.error_id = "method_not_found_error"


class InvalidParamsError(RPCError):
  """Raised when parameters are missing, mistyped or outside declared values."""

  def __init__(self, message: str, data: Optional[Any] = None):
    super().__init__(f"Invalid params: {message}", JSONRPCErrorCode.INVALID_PARAMS, data, status_code=422)
    self.type = "invalid_params_error"
    self.error_id = "invalid_params_error"


class UnsupportedCapabilityError(RPCError):
  """Raised for a valid option value this server does not implement."""

  def __init__(self, message: str, data: Optional[Any] = None):
    super().__init__(message, JSONRPCErrorCode.UNSUPPORTED_CAPABILITY, data, status_code=501)
    self.type = "unsupported_capability_error"
    self.error_id = "unsupported_capability_error"


class UpstreamError(RPCError):
  """Raised when the markup fetch fails, returns non-success or times out.

  This can happen due to:
  - Network errors (DNS, connection refused, TLS)
  - Non-2xx status from the search backend
  - The fetch deadline expiring
  """

  def __init__(self, message: str, data: Optional[Any] = None):
    super().__init__(message, JSONRPCErrorCode.UPSTREAM_FAILURE, data, status_code=502)
    self.type = "upstream_error"
    self.error_id = "upstream_error"


class FramingError(WebSearchError):
  """Raised when the byte stream can no longer be split into frames.

  This can happen due to:
  - Missing or malformed Content-Length header
  - The stream ending inside a header or body
  - A frame larger than the configured maximum
  """

  def __init__(self, message: str):
    super().__init__(message, status_code=400)
    self.type = "framing_error"
    self.error_id = "framing_error"


class ClientError(WebSearchError):
  """Base exception for client-side failures talking to a server process."""

  def __init__(self, message: str, status_code: int = 500, original_error: Optional[Exception] = None):
    super().__init__(message, status_code)
    self.original_error = original_error
    self.type = "client_error"
    self.error_id = "client_error"


class ClientConnectionError(ClientError):
  """Raised when the server process cannot be started or its stream is lost.

  This can happen due to:
  - Command not found or not executable
  - The server closing stdout mid-session
  - A fatal framing error on the server's output
  """

  def __init__(self, message: str, original_error: Optional[Exception] = None):
    super().__init__(message, status_code=503, original_error=original_error)
    self.type = "client_connection_error"
    self.error_id = "client_connection_error"


class ClientTimeoutError(ClientError):
  """Raised when starting the server or waiting for a response times out."""

  def __init__(self, message: str, timeout_seconds: Optional[float] = None):
    super().__init__(message, status_code=504)
    self.timeout_seconds = timeout_seconds
    self.type = "client_timeout_error"
    self.error_id = "client_timeout_error"


class ClientProtocolError(ClientError):
  """Raised when the server's output is not a valid JSON-RPC response."""

  def __init__(self, message: str, original_error: Optional[Exception] = None):
    super().__init__(message, status_code=502, original_error=original_error)
    self.type = "client_protocol_error"
    self.error_id = "client_protocol_error"
