"""Search provider protocol and base types."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class SearchResult:
  """A single search result extracted from a results page."""

  title: str
  url: str
  snippet: Optional[str] = None

  def to_dict(self) -> Dict[str, Any]:
    """Wire shape; ``snippet`` is omitted when absent."""
    data: Dict[str, Any] = {"title": self.title, "url": self.url}
    if self.snippet is not None:
      data["snippet"] = self.snippet
    return data

  @classmethod
  def from_dict(cls, data: Dict[str, Any]) -> "SearchResult":
    return cls(title=data.get("title", ""), url=data.get("url", ""), snippet=data.get("snippet"))


@runtime_checkable
class SearchProvider(Protocol):
  """Protocol for pluggable search backends."""

  async def search(self, query: str, limit: int = 5) -> List[SearchResult]: ...


@runtime_checkable
class MarkupFetcher(Protocol):
  """Returns the raw markup at a URL or raises ``UpstreamError``."""

  async def fetch(self, url: str) -> str: ...
