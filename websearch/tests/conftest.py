"""
Root conftest: shared fakes and fixtures for the test suite.

  ChunkedReader  → byte source that hands out pre-split chunks (partial reads)
  BufferWriter   → byte sink collecting everything written
  StaticFetcher  → markup fetcher returning canned HTML
  DDG_HTML       → trimmed DuckDuckGo results page with three results
"""

import asyncio
import json
from typing import Any, Iterable, List, Optional

import pytest

from websearch.rpc.errors import UpstreamError
from websearch.search.base import SearchResult

# ---------------------------------------------------------------------------
# Stream fakes
# ---------------------------------------------------------------------------


class ChunkedReader:
  """``read(n)`` returns the queued chunks one at a time, then b""."""

  def __init__(self, chunks: Iterable[bytes]):
    self._chunks: List[bytes] = [c for c in chunks if c]
    self.reads = 0

  async def read(self, n: int = -1) -> bytes:
    self.reads += 1
    if not self._chunks:
      return b""
    chunk = self._chunks.pop(0)
    if 0 < n < len(chunk):
      self._chunks.insert(0, chunk[n:])
      chunk = chunk[:n]
    return chunk


def split_every(data: bytes, size: int) -> List[bytes]:
  return [data[i : i + size] for i in range(0, len(data), size)]


class BufferWriter:
  def __init__(self) -> None:
    self.data = bytearray()
    self.writes = 0
    self.drains = 0

  def write(self, data: bytes) -> None:
    self.writes += 1
    self.data.extend(data)

  async def drain(self) -> None:
    self.drains += 1

  def lines(self) -> List[Any]:
    return [json.loads(line) for line in bytes(self.data).splitlines() if line.strip()]


# ---------------------------------------------------------------------------
# Search fakes
# ---------------------------------------------------------------------------


class StaticFetcher:
  def __init__(self, markup: str = ""):
    self.markup = markup
    self.urls: List[str] = []

  async def fetch(self, url: str) -> str:
    self.urls.append(url)
    return self.markup


class FailingFetcher:
  def __init__(self, status: int = 503):
    self.status = status

  async def fetch(self, url: str) -> str:
    raise UpstreamError(f"Upstream responded with status {self.status}", data={"url": url, "status": self.status})


class HangingFetcher:
  def __init__(self) -> None:
    self.cancelled = False

  async def fetch(self, url: str) -> str:
    try:
      await asyncio.sleep(3600)
    except asyncio.CancelledError:
      self.cancelled = True
      raise
    return ""


class RecordingProvider:
  def __init__(self, results: Optional[List[SearchResult]] = None, error: Optional[Exception] = None):
    self.results = results or []
    self.error = error
    self.calls: List[tuple] = []

  async def search(self, query: str, limit: int = 5) -> List[SearchResult]:
    self.calls.append((query, limit))
    if self.error is not None:
      raise self.error
    return self.results[:limit]


def _result_block(href: str, title: str, snippet: Optional[str]) -> str:
  snippet_html = f'<a class="result__snippet" href="{href}">{snippet}</a>' if snippet is not None else ""
  return f"""
  <div class="result results_links results_links_deep web-result">
    <div class="links_main links_deep result__body">
      <h2 class="result__title">
        <a rel="nofollow" class="result__a" href="{href}">{title}</a>
      </h2>
      <div class="result__extras">
        <div class="result__extras__url">
          <a class="result__url" href="{href}">example</a>
        </div>
      </div>
      {snippet_html}
    </div>
  </div>
  """


DDG_HTML = (
  "<html><head><title>rust at DuckDuckGo</title>"
  "<style>.result__a { color: blue; }</style></head><body>"
  + _result_block(
    "//duckduckgo.com/l/?uddg=https%3A%2F%2Fwww.rust-lang.org%2F&amp;rut=abc123",
    "Rust Programming <b>Language</b>",
    "A language empowering everyone to build reliable and efficient <b>software</b>.",
  )
  + _result_block(
    "https://doc.rust-lang.org/book/",
    "The Rust Programming Language &amp; Book",
    "by Steve Klabnik &amp; Carol Nichols",
  )
  + _result_block("/about", "About DuckDuckGo", None)
  + "</body></html>"
)


@pytest.fixture
def ddg_html() -> str:
  return DDG_HTML


@pytest.fixture
def writer() -> BufferWriter:
  return BufferWriter()


@pytest.fixture
def make_reader():
  """Factory: ``make_reader(data, chunk_size=None)`` → ChunkedReader.

  ``data`` is bytes (optionally split every ``chunk_size`` bytes) or a
  list of pre-split chunks.
  """

  def _create(data, chunk_size: Optional[int] = None) -> ChunkedReader:
    if isinstance(data, (bytes, bytearray)):
      chunks = split_every(bytes(data), chunk_size) if chunk_size else [bytes(data)]
    else:
      chunks = list(data)
    return ChunkedReader(chunks)

  return _create


@pytest.fixture
def static_fetcher():
  """Factory: ``static_fetcher(markup)`` → StaticFetcher."""
  return StaticFetcher


@pytest.fixture
def failing_fetcher() -> FailingFetcher:
  return FailingFetcher()


@pytest.fixture
def hanging_fetcher() -> HangingFetcher:
  return HangingFetcher()


@pytest.fixture
def sample_results() -> List[SearchResult]:
  return [
    SearchResult(title="Rust Programming Language", url="https://www.rust-lang.org/", snippet="Reliable and efficient software."),
    SearchResult(title="The Rust Book", url="https://doc.rust-lang.org/book/", snippet=None),
    SearchResult(title="Rust by Example", url="https://doc.rust-lang.org/rust-by-example/", snippet="Learn Rust with examples."),
  ]


@pytest.fixture
def recording_provider():
  """Factory: ``recording_provider(results=None, error=None)`` → RecordingProvider."""
  return RecordingProvider
