"""Session loop: decode one message, dispatch it, write the response, repeat."""

from enum import Enum

from websearch.rpc.errors import FramingError, ParseError
from websearch.rpc.framing import BaseFraming, deserialize
from websearch.rpc.stdio import ByteWriter
from websearch.rpc.types import JSONRPCResponse
from websearch.server.dispatcher import Dispatcher
from websearch.utils.log import log_debug, log_error, log_warning

EXIT_OK = 0
EXIT_FRAMING_ERROR = 1


class SessionState(str, Enum):
  IDLE = "idle"
  AWAITING_MESSAGE = "awaiting_message"
  DISPATCHING = "dispatching"
  WRITING = "writing"
  CLOSED = "closed"


class Session:
  """Drives one framed stream until it closes.

  Requests are processed strictly one at a time, so responses leave in the
  order their requests were decoded. A malformed payload produces a parse
  error response and the loop continues; a framing failure ends it.

  Args:
      framing: Frame codec bound to the input stream.
      writer: Output stream.
      dispatcher: Request dispatcher.
  """

  def __init__(self, framing: BaseFraming, writer: ByteWriter, dispatcher: Dispatcher) -> None:
    self._framing = framing
    self._writer = writer
    self._dispatcher = dispatcher
    self.state = SessionState.IDLE
    self.handled = 0

  async def run(self) -> int:
    """Serve until end of stream.

    Returns:
        ``EXIT_OK`` on a clean close, ``EXIT_FRAMING_ERROR`` on a fatal
        framing failure.
    """
    log_debug(f"Session started ({self._framing.name} framing)")
    try:
      while True:
        self.state = SessionState.AWAITING_MESSAGE
        try:
          raw = await self._framing.read_frame()
        except FramingError as e:
          log_error(f"Framing failure, closing session: {e}")
          return EXIT_FRAMING_ERROR

        if raw is None:
          log_debug(f"Stream closed after {self.handled} message(s)")
          return EXIT_OK

        # A JSON null payload decodes to None; it is still a message.
        try:
          message = deserialize(raw)
        except ParseError as e:
          log_warning(f"Parse error: {e.data}")
          await self._write(JSONRPCResponse(id=None, error=e.to_error_data()))
          continue

        self.state = SessionState.DISPATCHING
        response = await self._dispatcher.handle(message)
        self.handled += 1
        if response is not None:
          await self._write(response)
    finally:
      self.state = SessionState.CLOSED

  async def _write(self, response: JSONRPCResponse) -> None:
    self.state = SessionState.WRITING
    self._writer.write(self._framing.encode(response.to_wire()))
    await self._writer.drain()
