# catalog/exceptions.py

from dataclasses import dataclass, asdict
from typing import List, Optional


@dataclass(frozen=True)
class ValidationIssue:
  """Single field-level problem. 'field' is a dotted path, empty for the whole payload."""
  field: str
  message: str


class CatalogError(Exception):
  """All catalog errors"""
  pass


class ValidationError(CatalogError):
  """Input or merged product state fails schema constraints"""
  def __init__(self, message: str = "Invalid product data", issues: Optional[List[ValidationIssue]] = None):
    self.message = message
    self.issues = list(issues or [])
    super().__init__(self.message)

  def to_dict(self) -> dict:
    return {
      "error": "ValidationError",
      "detail": self.message,
      "issues": [asdict(issue) for issue in self.issues],
    }


class NotFoundError(CatalogError):
  """Referenced product id has no entity"""
  def __init__(self, message: str = "Product not found"):
    self.message = message
    super().__init__(self.message)


### Client side (admin UI -> API)

class CatalogApiError(CatalogError):
  """HTTP status code 4xx or 5xx not mapped to a more specific error"""
  def __init__(self, status_code: Optional[int], message: str = None):
    self.status_code = status_code
    self.message = message or f"HTTP error {status_code}"
    super().__init__(self.message)


class CatalogConnectionError(CatalogError):
  """API is unreachable"""


class CatalogTimeoutError(CatalogError):
  """API request timed out"""
