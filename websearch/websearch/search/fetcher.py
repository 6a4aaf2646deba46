"""HTTP markup fetcher backed by httpx."""

import contextlib
from typing import Dict, Optional

import httpx

from websearch.config import SearchConfig
from websearch.rpc.errors import UpstreamError
from websearch.utils.log import log_debug, log_warning


class HttpxMarkupFetcher:
  """Fetches raw markup over HTTP(S).

  The underlying ``httpx.AsyncClient`` is created lazily on first use and
  reused until ``aclose()``.

  Example:
      fetcher = HttpxMarkupFetcher(SearchConfig())
      async with fetcher:
          html = await fetcher.fetch("https://html.duckduckgo.com/html/?q=rust")
  """

  def __init__(
    self,
    config: Optional[SearchConfig] = None,
    client: Optional[httpx.AsyncClient] = None,
  ) -> None:
    self._config = config or SearchConfig()
    self._client: Optional[httpx.AsyncClient] = client
    self._owns_client = client is None

  @property
  def headers(self) -> Dict[str, str]:
    return {
      "User-Agent": self._config.user_agent,
      "Accept-Language": self._config.accept_language,
    }

  def _get_client(self) -> httpx.AsyncClient:
    if self._client is None:
      self._client = httpx.AsyncClient(
        headers=self.headers,
        follow_redirects=True,
        timeout=httpx.Timeout(self._config.fetch_timeout),
      )
    return self._client

  async def fetch(self, url: str) -> str:
    """GET ``url`` and return the response body as text.

    Raises:
        UpstreamError: On network failure or a non-success status.
    """
    client = self._get_client()
    log_debug(f"Fetching {url}")
    try:
      response = await client.get(url, headers=self.headers)
    except httpx.HTTPError as e:
      log_warning(f"Fetch failed for {url}: {e}")
      raise UpstreamError(f"Upstream request failed: {e}", data={"url": url, "message": str(e)}) from e

    if not response.is_success:
      log_warning(f"Upstream responded with status {response.status_code} for {url}")
      raise UpstreamError(
        f"Upstream responded with status {response.status_code}",
        data={"url": url, "status": response.status_code},
      )
    return response.text

  async def aclose(self) -> None:
    """Close the HTTP client if this fetcher created it. Idempotent."""
    if self._client is not None and self._owns_client:
      with contextlib.suppress(Exception):
        await self._client.aclose()
      self._client = None

  async def __aenter__(self) -> "HttpxMarkupFetcher":
    return self

  async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
    await self.aclose()
