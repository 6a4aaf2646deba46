"""Search provider factory and exports."""

from typing import Optional

from websearch.config import SearchConfig
from websearch.search.base import MarkupFetcher, SearchProvider, SearchResult
from websearch.search.extractor import canonicalize_url, clamp_limit, extract_results, to_plain_text


def create_search_provider(
  engine: str = "duckduckgo",
  fetcher: Optional[MarkupFetcher] = None,
  config: Optional[SearchConfig] = None,
) -> SearchProvider:
  """Create a search provider by engine name.

  Args:
    engine: Engine name. Only "duckduckgo" is implemented.
    fetcher: Markup fetcher; an ``HttpxMarkupFetcher`` is created if omitted.
    config: Search backend configuration.

  Returns:
    A SearchProvider instance.
  """
  config = config or SearchConfig()
  if engine == "duckduckgo":
    from websearch.search.duckduckgo import DuckDuckGoSearchProvider

    if fetcher is None:
      from websearch.search.fetcher import HttpxMarkupFetcher

      fetcher = HttpxMarkupFetcher(config)
    return DuckDuckGoSearchProvider(fetcher, config)

  raise ValueError(f"Unknown search engine: {engine!r}. Use 'duckduckgo'.")


__all__ = [
  "MarkupFetcher",
  "SearchProvider",
  "SearchResult",
  "canonicalize_url",
  "clamp_limit",
  "create_search_provider",
  "extract_results",
  "to_plain_text",
]
