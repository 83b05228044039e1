# tests/test_models.py

import math
import logging
import pytest
from datetime import datetime, timedelta, timezone

from catalog.exceptions import ValidationError
from catalog.models import MAX_STOCK, ProductCreate, validate_create, validate_patch, validate_product
from catalog.logger import configure_logging
configure_logging()

test_log = logging.getLogger("tests")


def _fields(error: ValidationError):
  return [issue.field for issue in error.issues]


def test_create_applies_defaults():
  data = validate_create({"name": "Widget", "price": 9.99})
  assert data.description == ""
  assert data.currency == "USD"
  assert data.stock == 0
  assert data.category is None
  assert data.image_url is None
  test_log.info("test_create_applies_defaults completed successfully.")


def test_create_accepts_camel_and_snake_case_url():
  assert validate_create({"name": "Widget", "price": 1, "imageUrl": "https://example.com/a.png"}).image_url == "https://example.com/a.png"
  assert validate_create({"name": "Widget", "price": 1, "image_url": "https://example.com/a.png"}).image_url == "https://example.com/a.png"


@pytest.mark.parametrize("payload, field", [
  ({"name": "W", "price": 1}, "name"),
  ({"name": "x" * 101, "price": 1}, "name"),
  ({"name": "Widget", "price": -0.01}, "price"),
  ({"name": "Widget", "price": math.inf}, "price"),
  ({"name": "Widget", "price": math.nan}, "price"),
  ({"name": "Widget", "price": "9.99"}, "price"),
  ({"name": "Widget", "price": 1, "currency": "US"}, "currency"),
  ({"name": "Widget", "price": 1, "currency": "EURO"}, "currency"),
  ({"name": "Widget", "price": 1, "stock": -1}, "stock"),
  ({"name": "Widget", "price": 1, "stock": 1.5}, "stock"),
  ({"name": "Widget", "price": 1, "stock": True}, "stock"),
  ({"name": "Widget", "price": 1, "stock": "3"}, "stock"),
  ({"name": "Widget", "price": 1, "stock": 2**63}, "stock"),
  ({"name": "Widget", "price": 1, "stock": 1e20}, "stock"),
  ({"name": "Widget", "price": 1, "description": "d" * 501}, "description"),
  ({"name": "Widget", "price": 1, "category": "c" * 51}, "category"),
  ({"name": "Widget", "price": 1, "imageUrl": "not a url"}, "imageUrl"),
])
def test_create_rejects_invalid_field(payload, field):
  with pytest.raises(ValidationError) as exc_info:
    validate_create(payload)
  assert field in _fields(exc_info.value)


@pytest.mark.parametrize("stock, expected", [(3, 3), (3.0, 3), (0.0, 0), (MAX_STOCK, MAX_STOCK)])
def test_create_accepts_whole_number_stock(stock, expected):
  data = validate_create({"name": "Widget", "price": 1, "stock": stock})
  assert data.stock == expected
  assert type(data.stock) is int


def test_create_accepts_null_optional_fields():
  data = validate_create({"name": "Widget", "price": 1, "category": None, "imageUrl": None})
  assert data.category is None
  assert data.image_url is None


def test_create_reports_every_failing_field():
  with pytest.raises(ValidationError) as exc_info:
    validate_create({"name": "W", "currency": "US"})
  assert sorted(_fields(exc_info.value)) == ["currency", "name", "price"]
  assert exc_info.value.message == "Invalid product data"


def test_create_rejects_non_object_payload():
  with pytest.raises(ValidationError) as exc_info:
    validate_create(["Widget", 9.99])
  assert _fields(exc_info.value) == [""]


def test_create_ignores_unknown_fields():
  data = validate_create({"name": "Widget", "price": 1, "id": "forced", "color": "red"})
  assert not hasattr(data, "color")
  assert "id" not in data.model_dump()


def test_patch_applies_no_defaults():
  patch = validate_patch({"price": 5})
  assert patch.model_fields_set == {"price"}
  assert patch.currency is None
  assert patch.stock is None


def test_patch_keeps_per_field_constraints():
  with pytest.raises(ValidationError) as exc_info:
    validate_patch({"currency": "US", "name": "W"})
  assert sorted(_fields(exc_info.value)) == ["currency", "name"]
  assert exc_info.value.message == "Invalid product update"


def test_patch_null_clears_optional_fields_only():
  patch = validate_patch({"category": None, "imageUrl": None})
  assert patch.model_fields_set == {"category", "image_url"}

  with pytest.raises(ValidationError) as exc_info:
    validate_patch({"name": None, "stock": None})
  assert sorted(_fields(exc_info.value)) == ["name", "stock"]


def test_patch_revalidation_keeps_set_fields():
  patch = validate_patch(validate_patch({"imageUrl": "https://example.com/x.png"}))
  assert patch.model_fields_set == {"image_url"}


def test_revalidating_create_model():
  data = validate_create(ProductCreate(name="Widget", price=2, stock=3))
  assert data.stock == 3
  assert data.currency == "USD"


def test_product_rejects_updated_before_created():
  now = datetime.now(timezone.utc)
  with pytest.raises(ValidationError) as exc_info:
    validate_product({"id": "abc", "name": "Widget", "price": 1,
                      "createdAt": now, "updatedAt": now - timedelta(seconds=1)})
  assert _fields(exc_info.value) == [""]


def test_product_to_json_uses_camel_case():
  now = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
  product = validate_product({"id": "abc", "name": "Widget", "price": 1, "imageUrl": "https://example.com/i.png",
                              "createdAt": now, "updatedAt": now})
  data = product.to_json()
  assert data["imageUrl"] == "https://example.com/i.png"
  assert data["createdAt"].startswith("2024-01-02T03:04:05")
  assert "created_at" not in data
  test_log.info("test_product_to_json_uses_camel_case completed successfully.")


def test_product_is_immutable():
  now = datetime.now(timezone.utc)
  product = validate_product({"id": "abc", "name": "Widget", "price": 1, "createdAt": now, "updatedAt": now})
  with pytest.raises(Exception):
    product.name = "Changed"
  assert product.name == "Widget"


@pytest.mark.parametrize("field", ["createdAt", "updatedAt"])
def test_product_rejects_naive_timestamps(field):
  aware = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
  data = {"id": "abc", "name": "Widget", "price": 1, "createdAt": aware, "updatedAt": aware}
  data[field] = aware.replace(tzinfo=None)
  with pytest.raises(ValidationError) as exc_info:
    validate_product(data)
  assert _fields(exc_info.value) == [field]
