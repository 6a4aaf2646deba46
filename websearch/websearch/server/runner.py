"""Server runtime: wires config, search backend, dispatcher and session."""

from typing import Optional, Tuple

from websearch.config import ServerConfig
from websearch.rpc.framing import ByteReader, create_framing
from websearch.rpc.stdio import ByteWriter, open_stdio_streams
from websearch.search.base import SearchProvider
from websearch.search.duckduckgo import DuckDuckGoSearchProvider
from websearch.search.fetcher import HttpxMarkupFetcher
from websearch.server.dispatcher import Dispatcher
from websearch.server.methods import build_method_table
from websearch.server.session import Session
from websearch.utils.log import log_info, set_log_level


def build_dispatcher(provider: SearchProvider) -> Dispatcher:
  """Dispatcher over the built-in method table."""
  return Dispatcher(build_method_table(provider))


async def serve(
  config: Optional[ServerConfig] = None,
  streams: Optional[Tuple[ByteReader, ByteWriter]] = None,
  provider: Optional[SearchProvider] = None,
) -> int:
  """Serve JSON-RPC on a byte stream until it closes.

  Args:
      config: Server configuration (defaults to ``ServerConfig()``).
      streams: (reader, writer) pair; the process stdio when omitted.
      provider: Search backend; DuckDuckGo over httpx when omitted.

  Returns:
      Process exit code (0 on clean close, non-zero on framing failure).
  """
  config = config or ServerConfig()
  set_log_level(config.log_level)

  fetcher: Optional[HttpxMarkupFetcher] = None
  if provider is None:
    fetcher = HttpxMarkupFetcher(config.search)
    provider = DuckDuckGoSearchProvider(fetcher, config.search)

  reader, writer = streams if streams is not None else await open_stdio_streams()
  framing = create_framing(config.framing, reader, config.max_frame_size)
  session = Session(framing, writer, build_dispatcher(provider))

  log_info(f"websearch serving on stdio ({config.framing} framing)")
  try:
    return await session.run()
  finally:
    if fetcher is not None:
      await fetcher.aclose()
