"""DuckDuckGo search backend via the HTML results page."""

import asyncio
from typing import List, Optional
from urllib.parse import quote

from websearch.config import SearchConfig
from websearch.rpc.errors import UpstreamError
from websearch.search.base import MarkupFetcher, SearchResult
from websearch.search.extractor import DEFAULT_LIMIT, clamp_limit, extract_results
from websearch.utils.log import log_debug, log_warning

ENGINE_NAME = "duckduckgo"

# Characters left unescaped by JavaScript's encodeURIComponent
_QUERY_SAFE = "-_.!~*'()"


class DuckDuckGoSearchProvider:
  """Search provider scraping DuckDuckGo's HTML endpoint (no API key required).

  Args:
    fetcher: Collaborator returning raw markup for a URL.
    config: Endpoint, origin, deadline and snippet window settings.
  """

  name = ENGINE_NAME

  def __init__(self, fetcher: MarkupFetcher, config: Optional[SearchConfig] = None):
    self._fetcher = fetcher
    self._config = config or SearchConfig()

  def build_url(self, query: str) -> str:
    return f"{self._config.endpoint}?q={quote(query, safe=_QUERY_SAFE)}"

  async def search(self, query: str, limit: int = DEFAULT_LIMIT) -> List[SearchResult]:
    """Search DuckDuckGo for the given query.

    Raises:
        UpstreamError: If the fetch fails or exceeds ``fetch_timeout``.
    """
    url = self.build_url(query)
    timeout = self._config.fetch_timeout
    try:
      markup = await asyncio.wait_for(self._fetcher.fetch(url), timeout=timeout)
    except asyncio.TimeoutError as e:
      log_warning(f"DuckDuckGo fetch for '{query}' timed out after {timeout}s")
      raise UpstreamError(
        f"Upstream request timed out after {timeout}s",
        data={"url": url, "timeout_seconds": timeout},
      ) from e

    results = extract_results(
      markup,
      clamp_limit(limit),
      origin=self._config.origin,
      snippet_window=self._config.snippet_window,
    )
    log_debug(f"DuckDuckGo returned {len(results)} result(s) for '{query}'")
    return results
