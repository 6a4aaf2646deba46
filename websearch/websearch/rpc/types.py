"""JSON-RPC 2.0 and MCP type definitions.

Pydantic models for the envelopes exchanged over the stream and for the
tool descriptors served by ``tools/list``.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

RequestId = Union[str, int, float]


# =============================================================================
# JSON-RPC 2.0 Types
# =============================================================================


class JSONRPCRequest(BaseModel):
  """JSON-RPC 2.0 request message."""

  jsonrpc: Literal["2.0"] = "2.0"
  method: str
  params: Optional[Any] = None
  id: Optional[RequestId] = None


class JSONRPCErrorData(BaseModel):
  """JSON-RPC 2.0 error object."""

  code: int
  message: str
  data: Optional[Any] = None


class JSONRPCResponse(BaseModel):
  """JSON-RPC 2.0 response message.

  Exactly one of ``result`` / ``error`` is set. ``id`` is always
  serialized, as ``null`` when the request id could not be determined.
  """

  jsonrpc: Literal["2.0"] = "2.0"
  id: Optional[RequestId] = None
  result: Optional[Any] = None
  error: Optional[JSONRPCErrorData] = None

  @model_validator(mode="after")
  def _result_xor_error(self) -> "JSONRPCResponse":
    if self.error is not None and self.result is not None:
      raise ValueError("response carries both 'result' and 'error'")
    return self

  @property
  def is_error(self) -> bool:
    return self.error is not None

  def to_wire(self) -> Dict[str, Any]:
    """Plain dict ready for framing."""
    message: Dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
    if self.error is not None:
      message["error"] = self.error.model_dump(exclude_none=True)
    else:
      message["result"] = self.result
    return message

  @classmethod
  def success(cls, request_id: Optional[RequestId], result: Any) -> "JSONRPCResponse":
    return cls(id=request_id, result=result)

  @classmethod
  def failure(
    cls,
    request_id: Optional[RequestId],
    code: int,
    message: str,
    data: Optional[Any] = None,
  ) -> "JSONRPCResponse":
    return cls(id=request_id, error=JSONRPCErrorData(code=int(code), message=message, data=data))


class JSONRPCErrorCode(int, Enum):
  """Error codes returned by this server.

  The -327xx/-326xx values are the standard JSON-RPC 2.0 codes; the
  -320xx values are in the server-defined range.
  """

  PARSE_ERROR = -32700
  INVALID_REQUEST = -32600
  METHOD_NOT_FOUND = -32601
  INVALID_PARAMS = -32602
  UNSUPPORTED_CAPABILITY = -32000
  INTERNAL_ERROR = -32001
  UPSTREAM_FAILURE = -32002


# =============================================================================
# MCP Protocol Types
# =============================================================================


class MCPImplementation(BaseModel):
  """MCP implementation info."""

  name: str
  version: str


class MCPCapabilities(BaseModel):
  """MCP server capabilities."""

  tools: Optional[Dict[str, Any]] = None


class MCPServerInfo(BaseModel):
  """MCP server info returned from initialize."""

  protocolVersion: str
  capabilities: MCPCapabilities
  serverInfo: MCPImplementation


class MCPToolInputSchema(BaseModel):
  """JSON Schema for tool input parameters."""

  type: Literal["object"] = "object"
  properties: Dict[str, Any] = Field(default_factory=dict)
  required: Optional[List[str]] = None
  additionalProperties: Optional[bool] = None


class MCPToolDefinition(BaseModel):
  """MCP tool definition returned from tools/list."""

  name: str
  description: Optional[str] = None
  inputSchema: MCPToolInputSchema


class MCPToolListResult(BaseModel):
  """Result from tools/list."""

  tools: List[MCPToolDefinition]


class MCPTextContent(BaseModel):
  """Text content in tool results."""

  type: Literal["text"] = "text"
  text: str


class MCPToolCallResult(BaseModel):
  """Result from tools/call."""

  content: List[MCPTextContent]
  isError: Optional[bool] = None
