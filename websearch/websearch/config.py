"""Server configuration dataclasses.

Configuration for the framing layer, logging and the search backend.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Optional, Union

FramingMode = Literal["line", "header"]

DEFAULT_USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"

ENV_PREFIX = "WEBSEARCH_"


@dataclass
class SearchConfig:
  """Settings for the DuckDuckGo HTML search backend.

  Example:
      SearchConfig(fetch_timeout=5.0, snippet_window=1500)
  """

  # Endpoint queried with ?q=<query>
  endpoint: str = "https://html.duckduckgo.com/html/"

  # Origin prefixed to root-relative and relay hrefs
  origin: str = "https://duckduckgo.com"

  # Request headers; a browser UA avoids the JS-only page
  user_agent: str = DEFAULT_USER_AGENT
  accept_language: str = "ja,en;q=0.9"

  # Deadline for one upstream fetch, in seconds
  fetch_timeout: float = 15.0

  # Characters scanned after each result link for its snippet
  snippet_window: int = 2000

  def __post_init__(self) -> None:
    """Validate configuration after initialization."""
    if not self.endpoint.startswith(("http://", "https://")):
      raise ValueError(f"SearchConfig: endpoint must be an http(s) URL, got {self.endpoint!r}")
    if not self.origin.startswith(("http://", "https://")):
      raise ValueError(f"SearchConfig: origin must be an http(s) URL, got {self.origin!r}")
    self.origin = self.origin.rstrip("/")
    if self.fetch_timeout <= 0:
      raise ValueError("SearchConfig: fetch_timeout must be positive")
    if self.snippet_window < 0:
      raise ValueError("SearchConfig: snippet_window must not be negative")

  def to_dict(self) -> Dict[str, Any]:
    """Convert to dictionary representation."""
    return {
      "endpoint": self.endpoint,
      "origin": self.origin,
      "user_agent": self.user_agent,
      "accept_language": self.accept_language,
      "fetch_timeout": self.fetch_timeout,
      "snippet_window": self.snippet_window,
    }

  @classmethod
  def from_dict(cls, data: Dict[str, Any]) -> "SearchConfig":
    """Create from dictionary representation."""
    defaults = cls()
    return cls(
      endpoint=data.get("endpoint", defaults.endpoint),
      origin=data.get("origin", defaults.origin),
      user_agent=data.get("user_agent", defaults.user_agent),
      accept_language=data.get("accept_language", defaults.accept_language),
      fetch_timeout=float(data.get("fetch_timeout", defaults.fetch_timeout)),
      snippet_window=int(data.get("snippet_window", defaults.snippet_window)),
    )


@dataclass
class ServerConfig:
  """Configuration for the stdio server.

  Example:
      config = ServerConfig(framing="header", log_level="DEBUG")

  Example file format:
      {
          "framing": "line",
          "max_frame_size": 4194304,
          "log_level": "INFO",
          "search": {"fetch_timeout": 10.0}
      }
  """

  # Byte framing on stdin/stdout
  # - "line": one JSON value per newline-terminated line
  # - "header": Content-Length header block, then the payload
  framing: FramingMode = "line"

  # Upper bound for a single frame payload, in bytes
  max_frame_size: int = 4 * 1024 * 1024

  # Level name for the package logger (stderr)
  log_level: str = "WARNING"

  search: SearchConfig = field(default_factory=SearchConfig)

  def __post_init__(self) -> None:
    """Validate configuration after initialization."""
    if self.framing not in ("line", "header"):
      raise ValueError(f"ServerConfig: framing must be 'line' or 'header', got {self.framing!r}")
    if self.max_frame_size <= 0:
      raise ValueError("ServerConfig: max_frame_size must be positive")

  def to_dict(self) -> Dict[str, Any]:
    """Convert to dictionary representation."""
    return {
      "framing": self.framing,
      "max_frame_size": self.max_frame_size,
      "log_level": self.log_level,
      "search": self.search.to_dict(),
    }

  @classmethod
  def from_dict(cls, data: Dict[str, Any]) -> "ServerConfig":
    """Create from dictionary representation."""
    return cls(
      framing=data.get("framing", "line"),
      max_frame_size=int(data.get("max_frame_size", 4 * 1024 * 1024)),
      log_level=data.get("log_level", "WARNING"),
      search=SearchConfig.from_dict(data.get("search") or {}),
    )

  @classmethod
  def from_file(cls, path: Union[str, Path]) -> "ServerConfig":
    """Load configuration from a JSON file.

    Raises:
        FileNotFoundError: If file doesn't exist.
        json.JSONDecodeError: If file isn't valid JSON.
        ValueError: If configuration is invalid.
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
      data = json.load(f)
    return cls.from_dict(data)

  @classmethod
  def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServerConfig":
    """Build configuration from ``WEBSEARCH_*`` environment variables.

    ``WEBSEARCH_CONFIG`` names a JSON file loaded first; the remaining
    variables override individual fields.
    """
    env = os.environ if environ is None else environ
    config_path = env.get(f"{ENV_PREFIX}CONFIG")
    data: Dict[str, Any] = {}
    if config_path:
      with Path(config_path).open("r", encoding="utf-8") as f:
        data = json.load(f)

    search: Dict[str, Any] = dict(data.get("search") or {})
    overrides = {
      "framing": env.get(f"{ENV_PREFIX}FRAMING"),
      "max_frame_size": env.get(f"{ENV_PREFIX}MAX_FRAME_SIZE"),
      "log_level": env.get(f"{ENV_PREFIX}LOG_LEVEL"),
    }
    for key, value in overrides.items():
      if value:
        data[key] = value
    search_overrides = {
      "endpoint": env.get(f"{ENV_PREFIX}ENDPOINT"),
      "fetch_timeout": env.get(f"{ENV_PREFIX}FETCH_TIMEOUT"),
    }
    for key, value in search_overrides.items():
      if value:
        search[key] = value
    data["search"] = search
    return cls.from_dict(data)
