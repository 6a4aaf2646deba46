"""Built-in methods and the method table.

The ``search`` input schema served by ``tools/list`` and the validation in
``parse_search_params`` are both built from the constants below.
"""

import json
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping

from websearch.rpc.errors import InvalidParamsError, UnsupportedCapabilityError, UpstreamError
from websearch.rpc.types import (
  MCPCapabilities,
  MCPImplementation,
  MCPServerInfo,
  MCPTextContent,
  MCPToolCallResult,
  MCPToolDefinition,
  MCPToolInputSchema,
  MCPToolListResult,
)
from websearch.search.base import SearchProvider
from websearch.search.extractor import DEFAULT_LIMIT, MAX_LIMIT, MIN_LIMIT, clamp_limit
from websearch.server.dispatcher import Handler
from websearch.utils.log import log_info
from websearch.version import __version__

PROTOCOL_VERSION = "2025-06-18"
SERVER_NAME = "websearch"

SEARCH_TOOL_NAME = "search"
DEFAULT_ENGINE = "duckduckgo"
KNOWN_ENGINES = ("duckduckgo", "google", "bing")
SUPPORTED_ENGINES = frozenset({DEFAULT_ENGINE})

SEARCH_INPUT_SCHEMA = MCPToolInputSchema(
  properties={
    "query": {"type": "string", "minLength": 1},
    "engine": {"type": "string", "enum": list(KNOWN_ENGINES), "default": DEFAULT_ENGINE},
    "limit": {"type": "integer", "minimum": MIN_LIMIT, "maximum": MAX_LIMIT, "default": DEFAULT_LIMIT},
  },
  required=["query"],
  additionalProperties=False,
)

SEARCH_TOOL = MCPToolDefinition(
  name=SEARCH_TOOL_NAME,
  description="Perform a web search and return top N results",
  inputSchema=SEARCH_INPUT_SCHEMA,
)


@dataclass(frozen=True)
class SearchParams:
  """Validated ``search`` parameters."""

  query: str
  limit: int = DEFAULT_LIMIT
  engine: str = DEFAULT_ENGINE


def parse_search_params(params: Any) -> SearchParams:
  """Validate ``search`` params against ``SEARCH_INPUT_SCHEMA``.

  ``limit`` is clamped into range rather than rejected.

  Raises:
      InvalidParamsError: Wrong shape, missing query, unknown keys or an
        engine outside ``KNOWN_ENGINES``.
      UnsupportedCapabilityError: A known engine this server does not implement.
  """
  if params is None:
    params = {}
  if not isinstance(params, dict):
    raise InvalidParamsError("params must be an object")

  unexpected = sorted(set(params) - set(SEARCH_INPUT_SCHEMA.properties))
  if unexpected:
    raise InvalidParamsError(f"unexpected parameter(s): {', '.join(unexpected)}", data={"unexpected": unexpected})

  query = params.get("query")
  if not isinstance(query, str) or not query.strip():
    raise InvalidParamsError("'query' is required")

  limit = params.get("limit")
  if limit is None:
    limit = DEFAULT_LIMIT
  elif isinstance(limit, bool) or not isinstance(limit, (int, float)) or not math.isfinite(limit):
    raise InvalidParamsError("'limit' must be an integer")

  engine = params.get("engine")
  if engine is None:
    engine = DEFAULT_ENGINE
  elif not isinstance(engine, str) or engine not in KNOWN_ENGINES:
    raise InvalidParamsError(f"'engine' must be one of {', '.join(KNOWN_ENGINES)}")

  if engine not in SUPPORTED_ENGINES:
    raise UnsupportedCapabilityError(
      f"Engine '{engine}' not supported",
      data={"engine": engine, "supported": sorted(SUPPORTED_ENGINES)},
    )

  return SearchParams(query=query, limit=clamp_limit(int(limit)), engine=engine)


class BuiltinMethods:
  """Handlers for the methods this server exposes.

  Args:
      provider: Search backend used by ``search`` and ``tools/call``.
  """

  def __init__(self, provider: SearchProvider) -> None:
    self._provider = provider

  async def ping(self, params: Any) -> Dict[str, Any]:
    return {"pong": True}

  async def initialize(self, params: Any) -> Dict[str, Any]:
    if isinstance(params, dict):
      client = params.get("clientInfo")
      client_name = client.get("name", "unknown") if isinstance(client, dict) else "unknown"
      log_info(f"initialize from {client_name} (protocol {params.get('protocolVersion', 'unknown')})")
    info = MCPServerInfo(
      protocolVersion=PROTOCOL_VERSION,
      capabilities=MCPCapabilities(tools={"listChanged": False}),
      serverInfo=MCPImplementation(name=SERVER_NAME, version=__version__),
    )
    return info.model_dump(exclude_none=True)

  async def list_tools(self, params: Any) -> Dict[str, Any]:
    return MCPToolListResult(tools=[SEARCH_TOOL]).model_dump(exclude_none=True)

  async def search(self, params: Any) -> Dict[str, Any]:
    parsed = parse_search_params(params)
    results = await self._provider.search(parsed.query, parsed.limit)
    return {"results": [r.to_dict() for r in results]}

  async def call_tool(self, params: Any) -> Dict[str, Any]:
    """MCP ``tools/call``: runs ``search`` and wraps the results as text content.

    Upstream failures are reported in the result with ``isError`` set.
    """
    if not isinstance(params, dict):
      raise InvalidParamsError("params must be an object")
    name = params.get("name")
    if name != SEARCH_TOOL_NAME:
      raise InvalidParamsError(f"unknown tool: {name}")

    try:
      payload = await self.search(params.get("arguments"))
    except UpstreamError as e:
      result = MCPToolCallResult(content=[MCPTextContent(text=e.message)], isError=True)
      return result.model_dump(exclude_none=True)

    text = json.dumps(payload, ensure_ascii=False)
    return MCPToolCallResult(content=[MCPTextContent(text=text)]).model_dump(exclude_none=True)


def build_method_table(provider: SearchProvider) -> Mapping[str, Handler]:
  """Build the read-only method table served by the dispatcher."""
  methods = BuiltinMethods(provider)
  return MappingProxyType(
    {
      "ping": methods.ping,
      "initialize": methods.initialize,
      "tools/list": methods.list_tools,
      "tools/call": methods.call_tool,
      "search": methods.search,
    }
  )
