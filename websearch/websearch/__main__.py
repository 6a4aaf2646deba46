"""Run the stdio server: ``python -m websearch``.

Configuration comes from ``WEBSEARCH_*`` environment variables
(see ``ServerConfig.from_env``).
"""

import asyncio
import sys

from websearch.config import ServerConfig
from websearch.server.runner import serve


def main() -> int:
  config = ServerConfig.from_env()
  try:
    return asyncio.run(serve(config))
  except KeyboardInterrupt:
    return 130


if __name__ == "__main__":
  sys.exit(main())
