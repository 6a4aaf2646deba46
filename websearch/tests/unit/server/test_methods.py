"""Unit tests for the built-in methods and search parameter validation."""

import json

import pytest

from websearch.rpc.errors import InvalidParamsError, UnsupportedCapabilityError, UpstreamError
from websearch.server.methods import (
  KNOWN_ENGINES,
  PROTOCOL_VERSION,
  SEARCH_INPUT_SCHEMA,
  BuiltinMethods,
  SearchParams,
  build_method_table,
  parse_search_params,
)
from websearch.version import __version__


@pytest.mark.unit
class TestParseSearchParams:
  """Tests for parse_search_params()."""

  def test_defaults(self):
    assert parse_search_params({"query": "rust"}) == SearchParams(query="rust", limit=5, engine="duckduckgo")

  def test_explicit_values(self):
    assert parse_search_params({"query": "rust", "limit": 12, "engine": "duckduckgo"}) == SearchParams("rust", 12, "duckduckgo")

  @pytest.mark.parametrize("limit, expected", [(0, 1), (-5, 1), (51, 50), (10**9, 50), (7.8, 7), (None, 5)])
  def test_limit_clamped(self, limit, expected):
    assert parse_search_params({"query": "q", "limit": limit}).limit == expected

  @pytest.mark.parametrize("limit", ["5", True, [5], {"n": 5}, float("inf"), float("nan")])
  def test_limit_wrong_type(self, limit):
    with pytest.raises(InvalidParamsError, match="'limit' must be an integer"):
      parse_search_params({"query": "q", "limit": limit})

  @pytest.mark.parametrize("params", [{}, {"query": ""}, {"query": "   "}, {"query": 3}, {"query": None}, None])
  def test_query_required(self, params):
    with pytest.raises(InvalidParamsError, match="'query' is required"):
      parse_search_params(params)

  @pytest.mark.parametrize("params", [["rust"], "rust", 5])
  def test_params_must_be_object(self, params):
    with pytest.raises(InvalidParamsError, match="params must be an object"):
      parse_search_params(params)

  def test_unknown_keys_rejected(self):
    with pytest.raises(InvalidParamsError, match="unexpected parameter") as exc_info:
      parse_search_params({"query": "q", "safe": True, "region": "jp"})
    assert exc_info.value.data == {"unexpected": ["region", "safe"]}

  @pytest.mark.parametrize("engine", ["yahoo", "", 1, "DuckDuckGo"])
  def test_unknown_engine_is_invalid_params(self, engine):
    with pytest.raises(InvalidParamsError, match="'engine' must be one of"):
      parse_search_params({"query": "q", "engine": engine})

  @pytest.mark.parametrize("engine", ["google", "bing"])
  def test_known_unimplemented_engine_is_unsupported(self, engine):
    with pytest.raises(UnsupportedCapabilityError) as exc_info:
      parse_search_params({"query": "q", "engine": engine})
    assert exc_info.value.message == f"Engine '{engine}' not supported"
    assert exc_info.value.data == {"engine": engine, "supported": ["duckduckgo"]}

  def test_query_passed_through_unchanged(self):
    """Whitespace inside a non-blank query is preserved."""
    assert parse_search_params({"query": "  two  words "}).query == "  two  words "


@pytest.mark.unit
class TestInputSchema:
  """The advertised schema agrees with the validator."""

  def test_schema_properties_match_accepted_keys(self):
    assert set(SEARCH_INPUT_SCHEMA.properties) == {"query", "engine", "limit"}
    assert SEARCH_INPUT_SCHEMA.required == ["query"]
    assert SEARCH_INPUT_SCHEMA.additionalProperties is False

  def test_schema_engine_enum(self):
    assert SEARCH_INPUT_SCHEMA.properties["engine"]["enum"] == list(KNOWN_ENGINES)

  def test_schema_limit_bounds(self):
    limit = SEARCH_INPUT_SCHEMA.properties["limit"]
    assert (limit["minimum"], limit["maximum"], limit["default"]) == (1, 50, 5)


@pytest.mark.unit
class TestBuiltinMethods:
  """Tests for the individual method handlers."""

  @pytest.mark.asyncio
  async def test_ping_ignores_params(self, recording_provider):
    assert await BuiltinMethods(recording_provider()).ping({"anything": 1}) == {"pong": True}

  @pytest.mark.asyncio
  async def test_initialize(self, recording_provider):
    result = await BuiltinMethods(recording_provider()).initialize(
      {"protocolVersion": "2025-06-18", "clientInfo": {"name": "tester", "version": "1"}, "capabilities": {}}
    )
    assert result == {
      "protocolVersion": PROTOCOL_VERSION,
      "capabilities": {"tools": {"listChanged": False}},
      "serverInfo": {"name": "websearch", "version": __version__},
    }

  @pytest.mark.asyncio
  async def test_initialize_without_params(self, recording_provider):
    result = await BuiltinMethods(recording_provider()).initialize(None)
    assert result["protocolVersion"] == PROTOCOL_VERSION

  @pytest.mark.asyncio
  @pytest.mark.parametrize("client_info", ["tester", ["tester"], 7, None])
  async def test_initialize_tolerates_malformed_client_info(self, recording_provider, client_info):
    """clientInfo is only logged, so its shape never fails the call."""
    result = await BuiltinMethods(recording_provider()).initialize({"protocolVersion": "2025-06-18", "clientInfo": client_info})
    assert result["serverInfo"]["name"] == "websearch"

  @pytest.mark.asyncio
  async def test_list_tools(self, recording_provider):
    result = await BuiltinMethods(recording_provider()).list_tools(None)
    assert len(result["tools"]) == 1
    tool = result["tools"][0]
    assert tool["name"] == "search"
    assert tool["description"] == "Perform a web search and return top N results"
    assert tool["inputSchema"]["type"] == "object"
    assert tool["inputSchema"]["required"] == ["query"]
    json.dumps(result)

  @pytest.mark.asyncio
  async def test_search_passes_clamped_limit(self, recording_provider, sample_results):
    provider = recording_provider(sample_results)
    result = await BuiltinMethods(provider).search({"query": "rust", "limit": 99})
    assert provider.calls == [("rust", 50)]
    assert len(result["results"]) == 3
    assert result["results"][1] == {"title": "The Rust Book", "url": "https://doc.rust-lang.org/book/"}

  @pytest.mark.asyncio
  async def test_call_tool_wraps_results_as_text(self, recording_provider, sample_results):
    provider = recording_provider(sample_results)
    result = await BuiltinMethods(provider).call_tool({"name": "search", "arguments": {"query": "rust", "limit": 2}})
    assert "isError" not in result
    assert result["content"][0]["type"] == "text"
    payload = json.loads(result["content"][0]["text"])
    assert [r["title"] for r in payload["results"]] == ["Rust Programming Language", "The Rust Book"]

  @pytest.mark.asyncio
  async def test_call_tool_upstream_failure_is_error_result(self, recording_provider):
    provider = recording_provider(error=UpstreamError("Upstream responded with status 503"))
    result = await BuiltinMethods(provider).call_tool({"name": "search", "arguments": {"query": "rust"}})
    assert result == {"content": [{"type": "text", "text": "Upstream responded with status 503"}], "isError": True}

  @pytest.mark.asyncio
  async def test_call_tool_unknown_tool(self, recording_provider):
    with pytest.raises(InvalidParamsError, match="unknown tool: fetch"):
      await BuiltinMethods(recording_provider()).call_tool({"name": "fetch", "arguments": {}})

  @pytest.mark.asyncio
  async def test_call_tool_bad_arguments_raise(self, recording_provider):
    with pytest.raises(InvalidParamsError):
      await BuiltinMethods(recording_provider()).call_tool({"name": "search", "arguments": {"limit": 3}})

  @pytest.mark.asyncio
  async def test_call_tool_params_must_be_object(self, recording_provider):
    with pytest.raises(InvalidParamsError):
      await BuiltinMethods(recording_provider()).call_tool(None)


@pytest.mark.unit
class TestMethodTable:
  """Tests for build_method_table()."""

  def test_method_names(self, recording_provider):
    assert set(build_method_table(recording_provider())) == {"ping", "initialize", "tools/list", "tools/call", "search"}

  def test_table_is_read_only(self, recording_provider):
    table = build_method_table(recording_provider())
    with pytest.raises(TypeError):
      table["shutdown"] = None
