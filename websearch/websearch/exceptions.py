"""Base exception for websearch."""

from typing import Optional


class WebSearchError(Exception):
  """Root of every error raised by websearch.

  Args:
    message: Human-readable description.
    status_code: HTTP-like status used for logging and classification.
  """

  def __init__(self, message: str, status_code: int = 500):
    super().__init__(message)
    self.message = message
    self.status_code = status_code
    self.type = "websearch_error"
    self.error_id: Optional[str] = "websearch_error"

  def __str__(self) -> str:
    return self.message
