"""
websearch: JSON-RPC 2.0 web search server over stdio.

Serves ``ping``, ``initialize``, ``tools/list``, ``tools/call`` and ``search``
over line-delimited or Content-Length framed JSON-RPC, scraping
DuckDuckGo's HTML results page.

Quick Start (server):
    python -m websearch
    WEBSEARCH_FRAMING=header python -m websearch

Quick Start (client):
    from websearch import SearchClient

    async with SearchClient() as client:
        for result in await client.search("rust borrow checker", limit=3):
            print(result.title, result.url)

Embedding:
    from websearch import ServerConfig, serve

    exit_code = asyncio.run(serve(ServerConfig(framing="header")))
"""

from websearch.client import SearchClient
from websearch.config import SearchConfig, ServerConfig
from websearch.exceptions import WebSearchError
from websearch.rpc import (
  ContentLengthFraming,
  FramingError,
  JSONRPCErrorCode,
  JSONRPCRequest,
  JSONRPCResponse,
  LineFraming,
  RPCError,
  UpstreamError,
  create_framing,
)
from websearch.search import SearchResult, create_search_provider, extract_results
from websearch.server import Dispatcher, Session, build_method_table, serve
from websearch.version import __version__

__all__ = [
  "__version__",
  # Configuration
  "ServerConfig",
  "SearchConfig",
  # Server
  "serve",
  "Dispatcher",
  "Session",
  "build_method_table",
  # Client
  "SearchClient",
  # Framing
  "LineFraming",
  "ContentLengthFraming",
  "create_framing",
  # Envelopes
  "JSONRPCRequest",
  "JSONRPCResponse",
  "JSONRPCErrorCode",
  # Search
  "SearchResult",
  "create_search_provider",
  "extract_results",
  # Errors
  "WebSearchError",
  "RPCError",
  "UpstreamError",
  "FramingError",
]
