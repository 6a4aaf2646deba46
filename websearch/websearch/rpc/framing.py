"""Frame codecs for JSON-RPC over a byte stream.

Two interchangeable framings share the ``BaseFraming`` interface:

- ``LineFraming``: one JSON value per ``\\n``-terminated line.
- ``ContentLengthFraming``: a ``Content-Length`` header block ending in
  ``\\r\\n\\r\\n``, followed by exactly that many payload bytes.

A codec is bound to one reader for its lifetime; ``encode`` is pure and
does not touch decode state.
"""

import json
import re
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional, Protocol

from websearch.rpc.errors import FramingError, ParseError
from websearch.utils.log import log_debug

DEFAULT_MAX_FRAME_SIZE = 4 * 1024 * 1024

_READ_CHUNK = 8192
_HEADER_TERMINATOR = b"\r\n\r\n"
_MAX_HEADER_SIZE = 8192
_CONTENT_LENGTH_RE = re.compile(rb"^\s*content-length\s*:\s*(\S*)\s*$", re.IGNORECASE)


class ByteReader(Protocol):
  """Anything with an ``asyncio.StreamReader``-style ``read``."""

  async def read(self, n: int = -1) -> bytes: ...


def serialize(payload: Any) -> bytes:
  """Compact UTF-8 JSON bytes for a payload."""
  return json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def deserialize(raw: bytes) -> Any:
  """Parse one payload, raising ``ParseError`` if it is not JSON."""
  try:
    text = raw.decode("utf-8")
  except UnicodeDecodeError as e:
    raise ParseError(data={"line": raw.decode("utf-8", errors="replace"), "reason": str(e)})
  try:
    return json.loads(text)
  except json.JSONDecodeError as e:
    raise ParseError(data={"line": text, "reason": str(e)})


class BaseFraming(ABC):
  """Abstract base class for frame codecs.

  Args:
      reader: Source of raw bytes.
      max_frame_size: Largest payload accepted, in bytes.
  """

  name: str = "base"

  def __init__(self, reader: ByteReader, max_frame_size: int = DEFAULT_MAX_FRAME_SIZE) -> None:
    self._reader = reader
    self._max_frame_size = max_frame_size
    self._buffer = bytearray()
    self._eof = False

  async def _fill(self) -> bool:
    """Read one more chunk into the buffer. Returns False at end of stream."""
    if self._eof:
      return False
    chunk = await self._reader.read(_READ_CHUNK)
    if not chunk:
      self._eof = True
      return False
    self._buffer.extend(chunk)
    return True

  async def decode(self) -> Optional[Any]:
    """Return the next parsed payload, or None at a clean end of stream.

    A JSON ``null`` payload also comes back as None. Callers that must tell
    the two apart use ``read_frame`` and ``deserialize``.

    Raises:
        ParseError: The frame was intact but its payload is not JSON.
          The frame is consumed; the next call continues after it.
        FramingError: The stream structure is broken; decoding cannot continue.
    """
    raw = await self.read_frame()
    if raw is None:
      return None
    return deserialize(raw)

  @abstractmethod
  async def read_frame(self) -> Optional[bytes]:
    """Return the next raw payload, or None at a clean end of stream."""
    pass

  @abstractmethod
  def encode(self, payload: Any) -> bytes:
    """Serialize a payload into one complete frame."""
    pass


class LineFraming(BaseFraming):
  """Newline-delimited JSON.

  Blank lines are skipped. A final line without a terminating newline is
  still returned when the stream ends.
  """

  name = "line"

  async def read_frame(self) -> Optional[bytes]:
    while True:
      newline = self._buffer.find(b"\n")
      if newline >= 0:
        line = bytes(self._buffer[:newline])
        del self._buffer[: newline + 1]
        if not line.strip():
          continue
        return line.strip()

      if len(self._buffer) > self._max_frame_size:
        raise FramingError(f"line exceeds maximum frame size of {self._max_frame_size} bytes")

      if not await self._fill():
        if self._buffer.strip():
          line = bytes(self._buffer).strip()
          self._buffer.clear()
          return line
        self._buffer.clear()
        return None

  def encode(self, payload: Any) -> bytes:
    return serialize(payload) + b"\n"


class FrameState(str, Enum):
  """Decode phase of ``ContentLengthFraming``."""

  AWAITING_HEADER = "awaiting_header"
  AWAITING_BODY = "awaiting_body"


class ContentLengthFraming(BaseFraming):
  """``Content-Length`` header-delimited framing (LSP/MCP style)."""

  name = "header"

  def __init__(self, reader: ByteReader, max_frame_size: int = DEFAULT_MAX_FRAME_SIZE) -> None:
    super().__init__(reader, max_frame_size)
    self.state: FrameState = FrameState.AWAITING_HEADER
    self._pending_length: Optional[int] = None

  async def read_frame(self) -> Optional[bytes]:
    if self.state is FrameState.AWAITING_HEADER:
      header = await self._read_header()
      if header is None:
        return None
      self._pending_length = self._parse_content_length(header)
      self.state = FrameState.AWAITING_BODY
      log_debug(f"Frame header parsed (content-length={self._pending_length})")

    assert self._pending_length is not None
    length = self._pending_length
    while len(self._buffer) < length:
      if not await self._fill():
        raise FramingError(f"stream ended mid-body ({len(self._buffer)} of {length} bytes received)")

    body = bytes(self._buffer[:length])
    del self._buffer[:length]
    self._pending_length = None
    self.state = FrameState.AWAITING_HEADER
    return body

  async def _read_header(self) -> Optional[bytes]:
    while True:
      end = self._buffer.find(_HEADER_TERMINATOR)
      if end >= 0:
        header = bytes(self._buffer[:end])
        del self._buffer[: end + len(_HEADER_TERMINATOR)]
        return header

      if len(self._buffer) > _MAX_HEADER_SIZE:
        raise FramingError(f"header block exceeds {_MAX_HEADER_SIZE} bytes without terminator")

      if not await self._fill():
        if not self._buffer.strip():
          self._buffer.clear()
          return None
        raise FramingError("stream ended mid-header")

  def _parse_content_length(self, header: bytes) -> int:
    for line in header.split(b"\r\n"):
      match = _CONTENT_LENGTH_RE.match(line)
      if match is None:
        continue
      value = match.group(1)
      if not value.isdigit():
        raise FramingError(f"malformed Content-Length value: {value.decode('ascii', errors='replace')!r}")
      length = int(value)
      if length > self._max_frame_size:
        raise FramingError(f"Content-Length {length} exceeds maximum frame size of {self._max_frame_size} bytes")
      return length
    raise FramingError("missing Content-Length header")

  def encode(self, payload: Any) -> bytes:
    body = serialize(payload)
    return f"Content-Length: {len(body)}\r\n\r\n".encode("ascii") + body


def create_framing(mode: str, reader: ByteReader, max_frame_size: int = DEFAULT_MAX_FRAME_SIZE) -> BaseFraming:
  """Create a frame codec by mode name ("line" or "header")."""
  if mode == "line":
    return LineFraming(reader, max_frame_size)
  if mode == "header":
    return ContentLengthFraming(reader, max_frame_size)
  raise ValueError(f"Unknown framing mode: {mode!r}. Use 'line' or 'header'.")
