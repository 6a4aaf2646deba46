"""Integration tests: the server as a real subprocess over stdio.

Uses SearchClient to spawn ``python -m websearch``. No search request
reaches the network; only methods and error paths that are answered
locally are exercised.
"""

import asyncio
import os
import sys
from pathlib import Path

import pytest

import websearch
from websearch.client import SearchClient
from websearch.rpc.errors import ClientConnectionError, RPCError

SOURCE_ROOT = str(Path(websearch.__file__).resolve().parent.parent)


@pytest.mark.integration
class TestSearchClient:
  """Round trips through a spawned server."""

  @pytest.mark.asyncio
  @pytest.mark.parametrize("framing", ["line", "header"])
  async def test_ping(self, framing):
    async with SearchClient(framing=framing, cwd=SOURCE_ROOT, request_timeout=20) as client:
      assert client.connected is True
      assert await client.ping() is True

  @pytest.mark.asyncio
  async def test_list_tools(self):
    async with SearchClient(cwd=SOURCE_ROOT, request_timeout=20) as client:
      tools = await client.list_tools()
    assert [t.name for t in tools] == ["search"]
    assert tools[0].inputSchema.required == ["query"]

  @pytest.mark.asyncio
  async def test_unsupported_engine_error(self):
    async with SearchClient(cwd=SOURCE_ROOT, request_timeout=20) as client:
      with pytest.raises(RPCError) as exc_info:
        await client.search("x", engine="bing")
      assert exc_info.value.code == -32000
      assert await client.ping() is True

  @pytest.mark.asyncio
  async def test_request_ids_increase(self):
    async with SearchClient(cwd=SOURCE_ROOT, request_timeout=20) as client:
      first = await client.request("ping")
      second = await client.request("ping")
    assert (first.id, second.id) == (1, 2)

  @pytest.mark.asyncio
  async def test_request_after_disconnect(self):
    client = SearchClient(cwd=SOURCE_ROOT)
    await client.connect()
    await client.disconnect()
    await client.disconnect()
    with pytest.raises(ClientConnectionError):
      await client.request("ping")

  @pytest.mark.asyncio
  async def test_missing_command(self):
    client = SearchClient(command="/nonexistent/websearch-server")
    with pytest.raises(ClientConnectionError, match="Command not found"):
      await client.connect()

  def test_invalid_framing_rejected(self):
    with pytest.raises(ValueError):
      SearchClient(framing="xml")


@pytest.mark.integration
class TestProcessExit:
  """Exit codes of the server process."""

  async def _run(self, framing: str, stdin: bytes):
    process = await asyncio.create_subprocess_exec(
      sys.executable,
      "-m",
      "websearch",
      stdin=asyncio.subprocess.PIPE,
      stdout=asyncio.subprocess.PIPE,
      stderr=asyncio.subprocess.PIPE,
      cwd=SOURCE_ROOT,
      env={**os.environ, "WEBSEARCH_FRAMING": framing},
    )
    stdout, _ = await asyncio.wait_for(process.communicate(stdin), timeout=30)
    return process.returncode, stdout

  @pytest.mark.asyncio
  async def test_clean_eof_exits_zero(self):
    code, stdout = await self._run("line", b'{"jsonrpc":"2.0","id":1,"method":"ping"}\n')
    assert code == 0
    assert stdout == b'{"jsonrpc":"2.0","id":1,"result":{"pong":true}}\n'

  @pytest.mark.asyncio
  async def test_missing_content_length_exits_non_zero(self):
    code, stdout = await self._run("header", b'Content-Type: application/json\r\n\r\n{"jsonrpc":"2.0","id":1,"method":"ping"}')
    assert code != 0
    assert stdout == b""
