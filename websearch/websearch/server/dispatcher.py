"""Request dispatch: envelope validation, method lookup and error mapping."""

import math
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from websearch.rpc.errors import InvalidRequestError, MethodNotFoundError, RPCError
from websearch.rpc.types import JSONRPCErrorCode, JSONRPCRequest, JSONRPCResponse, RequestId
from websearch.utils.log import log_debug, log_error, log_warning

Handler = Callable[[Any], Awaitable[Any]]

NOTIFICATION_PREFIX = "notifications/"


def _valid_id(value: Any) -> bool:
  if value is None or isinstance(value, str):
    return True
  if isinstance(value, bool):
    return False
  if isinstance(value, int):
    return True
  return isinstance(value, float) and math.isfinite(value)


def extract_request_id(message: Any) -> Optional[RequestId]:
  """Best-effort id of a raw message; None when absent or unusable."""
  if isinstance(message, dict):
    value = message.get("id")
    if _valid_id(value):
      return value
  return None


def validate_envelope(message: Any) -> JSONRPCRequest:
  """Check the protocol-level shape of a raw message.

  Raises:
      InvalidRequestError: Not an object, wrong version tag, missing or
        empty method, or an id of the wrong type.
  """
  if isinstance(message, list):
    raise InvalidRequestError("Invalid Request: batch requests are not supported")
  if not isinstance(message, dict):
    raise InvalidRequestError("Invalid Request: expected a JSON object")
  if message.get("jsonrpc") != "2.0":
    raise InvalidRequestError("Invalid Request: jsonrpc must be '2.0'")
  method = message.get("method")
  if not isinstance(method, str) or not method:
    raise InvalidRequestError("Invalid Request: 'method' must be a non-empty string")
  if not _valid_id(message.get("id")):
    raise InvalidRequestError("Invalid Request: 'id' must be a string, number or null")
  return JSONRPCRequest(method=method, params=message.get("params"), id=message.get("id"))


class Dispatcher:
  """Routes validated requests to handlers and always produces a response.

  ``handle`` never raises (other than cancellation): handler failures become
  error responses. Messages without an ``id`` whose method is a
  ``notifications/*`` method produce no response.

  Args:
      methods: Immutable method table mapping method names to async handlers
        that take the request's ``params`` and return the ``result``.
  """

  def __init__(self, methods: Mapping[str, Handler]) -> None:
    self._methods = methods

  @property
  def method_names(self) -> list:
    return sorted(self._methods)

  async def handle(self, message: Any) -> Optional[JSONRPCResponse]:
    """Dispatch one decoded message."""
    request_id = extract_request_id(message)

    try:
      request = validate_envelope(message)
    except InvalidRequestError as e:
      log_warning(f"Rejected request (id={request_id}): {e.message}")
      return JSONRPCResponse(id=request_id, error=e.to_error_data())

    if "id" not in message and request.method.startswith(NOTIFICATION_PREFIX):
      log_debug(f"Notification {request.method} accepted")
      return None

    log_debug(f"-> {request.method} (id={request_id})")
    try:
      handler = self._methods.get(request.method)
      if handler is None:
        raise MethodNotFoundError(request.method)
      result = await handler(request.params)
    except RPCError as e:
      log_debug(f"<- {request.method} (id={request_id}) error {e.code}: {e.message}")
      return JSONRPCResponse(id=request_id, error=e.to_error_data())
    except Exception as e:
      log_error(f"Unhandled error in {request.method} (id={request_id}): {e}", exc_info=True)
      return JSONRPCResponse.failure(
        request_id,
        JSONRPCErrorCode.INTERNAL_ERROR,
        "Unhandled server error",
        data=_internal_error_data(e),
      )

    log_debug(f"<- {request.method} (id={request_id}) ok")
    return JSONRPCResponse.success(request_id, result)


def _internal_error_data(exc: BaseException) -> Dict[str, Any]:
  return {"message": str(exc) or type(exc).__name__}
