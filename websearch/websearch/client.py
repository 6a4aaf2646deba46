"""Client for a websearch server running as a subprocess.

Spawns ``python -m websearch`` (or a custom command) and exchanges framed
JSON-RPC messages over its stdin/stdout, one request at a time.

Example:
    async with SearchClient() as client:
        results = await client.search("python asyncio", limit=3)
"""

import asyncio
import os
import sys
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from websearch.rpc.errors import (
  ClientConnectionError,
  ClientProtocolError,
  ClientTimeoutError,
  FramingError,
  ParseError,
  RPCError,
)
from websearch.rpc.framing import BaseFraming, create_framing, deserialize
from websearch.rpc.types import JSONRPCRequest, JSONRPCResponse, MCPToolDefinition
from websearch.search.base import SearchResult
from websearch.utils.log import log_debug, log_error, log_warning


class SearchClient:
  """Talks to a websearch server over the subprocess's stdio.

  Args:
      command: Executable to launch (default: the current Python).
      args: Command arguments (default: ``["-m", "websearch"]``).
      framing: "line" or "header"; also passed to the server via
        ``WEBSEARCH_FRAMING``.
      env: Extra environment variables for the subprocess.
      cwd: Working directory for the subprocess.
      connect_timeout: Timeout for starting the subprocess.
      request_timeout: Default timeout for one request/response exchange.
  """

  def __init__(
    self,
    command: Optional[str] = None,
    args: Optional[List[str]] = None,
    framing: str = "line",
    env: Optional[Dict[str, str]] = None,
    cwd: Optional[str] = None,
    connect_timeout: float = 30.0,
    request_timeout: float = 60.0,
  ) -> None:
    if framing not in ("line", "header"):
      raise ValueError(f"framing must be 'line' or 'header', got {framing!r}")
    self._command: str = command or sys.executable
    self._args: List[str] = args if args is not None else ["-m", "websearch"]
    self._framing_mode = framing
    self._env: Optional[Dict[str, str]] = env
    self._cwd: Optional[str] = cwd
    self._connect_timeout = connect_timeout
    self._request_timeout = request_timeout

    self._process: Optional[asyncio.subprocess.Process] = None
    self._framing: Optional[BaseFraming] = None
    self._request_id = 0
    self._lock = asyncio.Lock()

  @property
  def connected(self) -> bool:
    return self._process is not None and self._process.returncode is None

  async def connect(self) -> None:
    """Start the server subprocess.

    Raises:
        ClientConnectionError: If the subprocess fails to start.
        ClientTimeoutError: If starting takes longer than ``connect_timeout``.
    """
    if self.connected:
      return

    process_env = os.environ.copy()
    process_env["WEBSEARCH_FRAMING"] = self._framing_mode
    if self._env:
      process_env.update(self._env)

    log_debug(f"Starting server: {self._command} {' '.join(self._args)}")
    try:
      self._process = await asyncio.wait_for(
        asyncio.create_subprocess_exec(
          self._command,
          *self._args,
          stdin=asyncio.subprocess.PIPE,
          stdout=asyncio.subprocess.PIPE,
          env=process_env,
          cwd=self._cwd,
        ),
        timeout=self._connect_timeout,
      )
    except asyncio.TimeoutError:
      raise ClientTimeoutError("Timeout starting websearch server", timeout_seconds=self._connect_timeout)
    except FileNotFoundError as e:
      raise ClientConnectionError(f"Command not found: {self._command}", original_error=e)
    except PermissionError as e:
      raise ClientConnectionError(f"Permission denied executing: {self._command}", original_error=e)

    assert self._process.stdout is not None
    self._framing = create_framing(self._framing_mode, self._process.stdout)
    log_debug(f"Server started (pid={self._process.pid})")

  async def disconnect(self) -> None:
    """Close stdin and wait for the server to exit. Idempotent."""
    process = self._process
    if process is None:
      return
    self._process = None
    self._framing = None

    if process.stdin and not process.stdin.is_closing():
      process.stdin.close()

    if process.returncode is None:
      try:
        await asyncio.wait_for(process.wait(), timeout=5.0)
      except asyncio.TimeoutError:
        log_warning(f"Server (pid={process.pid}) did not exit, terminating")
        try:
          process.terminate()
          await asyncio.wait_for(process.wait(), timeout=3.0)
        except asyncio.TimeoutError:
          log_error(f"Server (pid={process.pid}) did not terminate, killing")
          process.kill()
          await process.wait()
        except ProcessLookupError:
          pass

    log_debug(f"Server (pid={process.pid}) exited with code {process.returncode}")

  async def request(
    self,
    method: str,
    params: Optional[Any] = None,
    timeout: Optional[float] = None,
  ) -> JSONRPCResponse:
    """Send a request and wait for its response.

    Raises:
        ClientConnectionError: If not connected or the stream is lost.
        ClientTimeoutError: If no response arrives in time.
        ClientProtocolError: If the server's output is not a valid response.
    """
    async with self._lock:
      if not self.connected or self._framing is None:
        raise ClientConnectionError("websearch server not connected")
      assert self._process is not None and self._process.stdin is not None

      self._request_id += 1
      request_id = self._request_id
      request = JSONRPCRequest(method=method, params=params, id=request_id)

      try:
        log_debug(f"-> {method} (id={request_id})")
        self._process.stdin.write(self._framing.encode(request.model_dump(exclude_none=True)))
        await self._process.stdin.drain()
      except (BrokenPipeError, ConnectionResetError) as e:
        raise ClientConnectionError(f"Failed to send request: {e}", original_error=e)

      deadline = timeout or self._request_timeout
      try:
        return await asyncio.wait_for(self._read_response(request_id), timeout=deadline)
      except asyncio.TimeoutError:
        raise ClientTimeoutError(f"Request '{method}' timed out", timeout_seconds=deadline)

  async def _read_response(self, request_id: int) -> JSONRPCResponse:
    assert self._framing is not None
    while True:
      try:
        raw = await self._framing.read_frame()
      except FramingError as e:
        raise ClientConnectionError(f"Server stream is corrupt: {e}", original_error=e)

      if raw is None:
        raise ClientConnectionError("Server closed its output")

      try:
        message = deserialize(raw)
      except ParseError as e:
        raise ClientProtocolError(f"Invalid JSON from server: {e.data}", original_error=e)

      try:
        response = JSONRPCResponse.model_validate(message)
      except ValidationError as e:
        raise ClientProtocolError(f"Invalid response: {e}", original_error=e)

      if response.id == request_id:
        log_debug(f"<- response (id={request_id})")
        return response
      log_warning(f"Unexpected response id={response.id}")

  async def ping(self) -> bool:
    response = await self.request("ping")
    return not response.is_error and bool((response.result or {}).get("pong"))

  async def list_tools(self) -> List[MCPToolDefinition]:
    response = await self.request("tools/list")
    _raise_for_error(response)
    return [MCPToolDefinition.model_validate(t) for t in response.result.get("tools", [])]

  async def search(self, query: str, limit: Optional[int] = None, engine: Optional[str] = None) -> List[SearchResult]:
    """Run ``search`` on the server.

    Raises:
        RPCError: If the server answers with an error response.
    """
    params: Dict[str, Any] = {"query": query}
    if limit is not None:
      params["limit"] = limit
    if engine is not None:
      params["engine"] = engine
    response = await self.request("search", params)
    _raise_for_error(response)
    return [SearchResult.from_dict(item) for item in response.result.get("results", [])]

  async def __aenter__(self) -> "SearchClient":
    await self.connect()
    return self

  async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
    await self.disconnect()


def _raise_for_error(response: JSONRPCResponse) -> None:
  if response.error is not None:
    raise RPCError(response.error.message, code=response.error.code, data=response.error.data)
