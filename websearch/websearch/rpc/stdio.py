"""Process stdin/stdout as asyncio streams."""

import asyncio
import sys
from typing import BinaryIO, Optional, Protocol, Tuple


class ByteWriter(Protocol):
  """Anything with ``asyncio.StreamWriter``-style ``write`` and ``drain``."""

  def write(self, data: bytes) -> None: ...

  async def drain(self) -> None: ...


async def open_stdio_streams(
  stdin: Optional[BinaryIO] = None,
  stdout: Optional[BinaryIO] = None,
) -> Tuple[asyncio.StreamReader, asyncio.StreamWriter]:
  """Wrap the process's binary stdin/stdout in asyncio streams.

  Args:
      stdin: Readable binary file (default ``sys.stdin.buffer``).
      stdout: Writable binary file (default ``sys.stdout.buffer``).

  Returns:
      Tuple of (reader, writer).
  """
  loop = asyncio.get_running_loop()
  stdin = stdin or sys.stdin.buffer
  stdout = stdout or sys.stdout.buffer

  reader = asyncio.StreamReader()
  await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), stdin)

  transport, protocol = await loop.connect_write_pipe(asyncio.streams.FlowControlMixin, stdout)
  writer = asyncio.StreamWriter(transport, protocol, None, loop)
  return reader, writer
