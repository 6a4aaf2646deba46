"""JSON-RPC 2.0 envelopes, errors and frame codecs."""

from websearch.rpc.errors import (
  FramingError,
  InvalidParamsError,
  InvalidRequestError,
  MethodNotFoundError,
  ParseError,
  RPCError,
  UnsupportedCapabilityError,
  UpstreamError,
)
from websearch.rpc.framing import BaseFraming, ContentLengthFraming, FrameState, LineFraming, create_framing
from websearch.rpc.types import JSONRPCErrorCode, JSONRPCErrorData, JSONRPCRequest, JSONRPCResponse

__all__ = [
  # Framing
  "BaseFraming",
  "LineFraming",
  "ContentLengthFraming",
  "FrameState",
  "create_framing",
  # Envelopes
  "JSONRPCRequest",
  "JSONRPCResponse",
  "JSONRPCErrorData",
  "JSONRPCErrorCode",
  # Errors
  "RPCError",
  "ParseError",
  "InvalidRequestError",
  "MethodNotFoundError",
  "InvalidParamsError",
  "UnsupportedCapabilityError",
  "UpstreamError",
  "FramingError",
]
