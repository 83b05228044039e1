# catalog/client.py

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from typing import Any, Dict, List, Optional

from catalog.config import Settings, load_settings
from catalog.exceptions import (CatalogApiError, CatalogConnectionError, CatalogTimeoutError,
                                NotFoundError, ValidationError, ValidationIssue)
from catalog.models import Product, validate_product
from catalog.logger import get_logger

log = get_logger(__name__)


def make_session() -> requests.Session:
  """requests session retrying idempotent calls on gateway errors."""
  session = requests.Session()
  # POST and PATCH are not retried
  retries = Retry(total=3, backoff_factor=0.5, status_forcelist=[502, 503, 504],
                  allowed_methods=["GET", "DELETE"])
  session.mount("https://", HTTPAdapter(max_retries=retries))
  session.mount("http://", HTTPAdapter(max_retries=retries))
  return session


class ProductApiClient:
  """
  Thin client for the product catalog HTTP API.

  Maps responses back to catalog errors: 400 -> ValidationError,
  404 -> NotFoundError, any other failure -> CatalogApiError.
  """

  def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
               session: Optional[requests.Session] = None, settings: Optional[Settings] = None):
    settings = settings or load_settings()
    self.base_url = (base_url or settings.api_url).rstrip("/")
    self.timeout = timeout or settings.api_timeout
    self.session = session or make_session()

  def list_products(self) -> List[Product]:
    data = self._request("GET", "/products")
    return [validate_product(item) for item in data]

  def get_product(self, product_id: str) -> Product:
    return validate_product(self._request("GET", f"/products/{product_id}"))

  def create_product(self, payload: Dict[str, Any]) -> Product:
    return validate_product(self._request("POST", "/products", json=payload))

  def update_product(self, product_id: str, patch: Dict[str, Any]) -> Product:
    return validate_product(self._request("PATCH", f"/products/{product_id}", json=patch))

  def delete_product(self, product_id: str) -> None:
    self._request("DELETE", f"/products/{product_id}")

  def _request(self, method: str, path: str, json: Any = None) -> Any:
    url = f"{self.base_url}{path}"
    log.debug(f"{method} {url}")

    try:
      response = self.session.request(method, url, json=json, timeout=self.timeout)
    except requests.exceptions.Timeout as e:
      log.error(f"[CLIENT] Timeout for {method} {url}. Exception: {e}")
      raise CatalogTimeoutError(f"Request timed out: {method} {path}")
    except requests.exceptions.ConnectionError as e:
      log.error(f"[CLIENT] Connection error for {method} {url}. Exception: {e}")
      raise CatalogConnectionError(f"Unable to connect to API at {self.base_url}")
    except requests.exceptions.RequestException as e:
      log.error(f"[CLIENT] Request failed for {method} {url}. Exception: {e}")
      raise CatalogApiError(None, f"Request failed: {e}")

    if response.status_code == 204:
      return None
    if response.ok:
      return response.json()

    body = self._error_body(response)
    message = body.get("detail") or f"HTTP error {response.status_code}"
    if response.status_code == 400:
      issues = [ValidationIssue(field=i.get("field", ""), message=i.get("message", "")) for i in body.get("issues", [])]
      raise ValidationError(message, issues)
    if response.status_code == 404:
      raise NotFoundError(message)

    log.error(f"[CLIENT] {method} {url} returned {response.status_code}: {response.text}")
    raise CatalogApiError(response.status_code, message)

  @staticmethod
  def _error_body(response) -> dict:
    try:
      body = response.json()
    except ValueError:
      return {}
    return body if isinstance(body, dict) else {}
