"""Result extraction from DuckDuckGo HTML result pages.

The scanner walks anchor start tags lazily and stops as soon as enough
results are collected. Snippet lookup is confined to a fixed window after
each result link. Malformed markup never raises; it only yields fewer results.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional
from urllib.parse import unquote, urljoin, urlsplit

from websearch.search.base import SearchResult

MIN_LIMIT = 1
MAX_LIMIT = 50
DEFAULT_LIMIT = 5

RESULT_LINK_CLASS = "result__a"
SNIPPET_CLASS = "result__snippet"
RELAY_PATH_PREFIX = "/l/"
RELAY_TARGET_PARAM = "uddg"

DEFAULT_ORIGIN = "https://duckduckgo.com"
DEFAULT_SNIPPET_WINDOW = 2000

_ANCHOR_OPEN_RE = re.compile(r"<a\b([^>]*)>", re.IGNORECASE)
_ANCHOR_CLOSE_RE = re.compile(r"</a\s*>", re.IGNORECASE)
_SNIPPET_OPEN_RE = re.compile(r"<(?:div|a)\b([^>]*)>", re.IGNORECASE)
_SNIPPET_CLOSE_RE = re.compile(r"</\s*(?:div|a)\s*>", re.IGNORECASE)
_ATTR_RE = re.compile(r"""([^\s=/>"']+)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'<>`]+)))?""")

_SCRIPT_STYLE_RE = re.compile(r"<(script|style)\b[^>]*>.*?(?:</\1\s*>|\Z)", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")
_ENTITY_RE = re.compile(r"&(?:amp|lt|gt|quot|#39|nbsp);")
_HTTP_URL_RE = re.compile(r"^https?:", re.IGNORECASE)

_ENTITIES: Dict[str, str] = {
  "&amp;": "&",
  "&lt;": "<",
  "&gt;": ">",
  "&quot;": '"',
  "&#39;": "'",
  "&nbsp;": " ",
}


@dataclass(frozen=True)
class ResultAnchor:
  """A qualifying result link found in the markup."""

  href: str
  inner: str
  start: int
  end: int


def clamp_limit(limit: Any, default: int = DEFAULT_LIMIT) -> int:
  """Clamp a requested result count into ``[MIN_LIMIT, MAX_LIMIT]``."""
  if limit is None:
    return default
  try:
    value = int(limit)
  except (TypeError, ValueError, OverflowError):
    return default
  return max(MIN_LIMIT, min(MAX_LIMIT, value))


def decode_entities(text: str) -> str:
  """Decode the small fixed set of entities used by the results page.

  Single pass, so ``&amp;lt;`` becomes ``&lt;`` rather than ``<``.
  Unrecognized entities are left as they are.
  """
  return _ENTITY_RE.sub(lambda m: _ENTITIES[m.group(0)], text)


def to_plain_text(markup: str) -> str:
  """Reduce a markup fragment to single-spaced, entity-decoded text."""
  text = _SCRIPT_STYLE_RE.sub("", markup)
  text = _TAG_RE.sub("", text)
  text = _WHITESPACE_RE.sub(" ", text).strip()
  return decode_entities(text)


def parse_attributes(raw: str) -> Dict[str, str]:
  """Parse the attribute section of a start tag. First occurrence wins."""
  attrs: Dict[str, str] = {}
  for match in _ATTR_RE.finditer(raw):
    name = match.group(1).lower()
    if name in attrs:
      continue
    value = next((g for g in match.group(2, 3, 4) if g is not None), "")
    attrs[name] = value
  return attrs


def _has_class(attrs: Dict[str, str], marker: str) -> bool:
  return marker in attrs.get("class", "").split()


def iter_result_anchors(markup: str) -> Iterator[ResultAnchor]:
  """Yield result links in document order.

  Only anchors whose class list holds ``result__a`` and whose href is
  non-empty qualify. The generator does no work beyond the anchor it is
  about to yield.
  """
  pos = 0
  while True:
    opening = _ANCHOR_OPEN_RE.search(markup, pos)
    if opening is None:
      return
    attrs = parse_attributes(opening.group(1))
    href = decode_entities(attrs.get("href", "")).strip()
    if not _has_class(attrs, RESULT_LINK_CLASS) or not href:
      pos = opening.end()
      continue

    closing = _ANCHOR_CLOSE_RE.search(markup, opening.end())
    if closing is None:
      # Nothing after this point can be a complete anchor.
      return
    yield ResultAnchor(
      href=href,
      inner=markup[opening.end() : closing.start()],
      start=opening.start(),
      end=closing.end(),
    )
    pos = closing.end()


def find_snippet(markup: str, start: int, window: int = DEFAULT_SNIPPET_WINDOW) -> Optional[str]:
  """Return the inner markup of the first snippet element in ``markup[start:start + window]``."""
  region = markup[start : start + window]
  for opening in _SNIPPET_OPEN_RE.finditer(region):
    if not _has_class(parse_attributes(opening.group(1)), SNIPPET_CLASS):
      continue
    closing = _SNIPPET_CLOSE_RE.search(region, opening.end())
    if closing is None:
      return None
    return region[opening.end() : closing.start()]
  return None


def _relay_target(query: str) -> Optional[str]:
  for pair in query.split("&"):
    name, sep, value = pair.partition("=")
    if name != RELAY_TARGET_PARAM or not sep or not value:
      continue
    try:
      target = unquote(value, errors="strict")
    except UnicodeDecodeError:
      return None
    return target if _HTTP_URL_RE.match(target) else None
  return None


def canonicalize_url(href: str, origin: str = DEFAULT_ORIGIN) -> str:
  """Turn a result href into an absolute URL with no relay indirection.

  - ``/l/?uddg=<encoded>`` relay links resolve to the decoded target; when
    that fails the href is treated as root-relative.
  - Root-relative hrefs are prefixed with ``origin``.
  - Protocol-relative hrefs take the origin's scheme.
  - Absolute URLs are returned unchanged.
  """
  href = href.strip()
  origin = origin.rstrip("/")
  try:
    origin_parts = urlsplit(origin)
    if href.startswith("//"):
      href = f"{origin_parts.scheme or 'https'}:{href}"
    parts = urlsplit(href)
  except ValueError:
    return origin + href if href.startswith("/") else href

  host = (parts.hostname or "").lower()
  origin_host = (origin_parts.hostname or "").lower()
  same_origin = not parts.scheme and not parts.netloc
  on_origin_host = bool(host) and (host == origin_host or host.endswith("." + origin_host))
  if parts.path.startswith(RELAY_PATH_PREFIX) and (same_origin or on_origin_host):
    target = _relay_target(parts.query)
    if target is not None:
      return target

  if href.startswith("/"):
    return origin + href
  if parts.scheme:
    return href
  return urljoin(origin + "/", href)


def extract_results(
  markup: str,
  limit: Any = DEFAULT_LIMIT,
  *,
  origin: str = DEFAULT_ORIGIN,
  snippet_window: int = DEFAULT_SNIPPET_WINDOW,
) -> List[SearchResult]:
  """Extract up to ``limit`` results from a results page, in document order.

  Args:
      markup: Raw HTML of the results page.
      limit: Requested count; clamped into ``[1, 50]``.
      origin: Origin used to absolutize relative links.
      snippet_window: Characters after each link searched for its snippet.

  Returns:
      List of SearchResult, possibly empty.
  """
  effective = clamp_limit(limit)
  results: List[SearchResult] = []
  if not isinstance(markup, str) or not markup:
    return results

  for anchor in iter_result_anchors(markup):
    snippet_markup = find_snippet(markup, anchor.end, snippet_window)
    snippet = to_plain_text(snippet_markup) if snippet_markup is not None else None
    results.append(
      SearchResult(
        title=to_plain_text(anchor.inner),
        url=canonicalize_url(anchor.href, origin),
        snippet=snippet or None,
      )
    )
    if len(results) >= effective:
      break
  return results
