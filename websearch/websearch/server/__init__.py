"""JSON-RPC server: dispatcher, built-in methods and the session loop."""

from websearch.server.dispatcher import Dispatcher
from websearch.server.methods import SEARCH_TOOL, BuiltinMethods, build_method_table, parse_search_params
from websearch.server.runner import build_dispatcher, serve
from websearch.server.session import EXIT_FRAMING_ERROR, EXIT_OK, Session, SessionState

__all__ = [
  "Dispatcher",
  "BuiltinMethods",
  "SEARCH_TOOL",
  "build_method_table",
  "parse_search_params",
  "build_dispatcher",
  "serve",
  "Session",
  "SessionState",
  "EXIT_OK",
  "EXIT_FRAMING_ERROR",
]
