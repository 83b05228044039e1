# tests/test_domain.py

import logging
import pytest
from datetime import datetime, timedelta, timezone

import catalog.domain as domain_module
from catalog.domain import create_product, update_product
from catalog.exceptions import ValidationError
from catalog.models import ProductCreate, ProductUpdate, validate_create, validate_patch, validate_product

test_log = logging.getLogger("tests")

T0 = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(monkeypatch):
  """Controllable replacement for the domain clock."""
  state = {"now": T0}
  monkeypatch.setattr(domain_module, "_now", lambda: state["now"])
  return state


def test_create_product_stamps_identity_and_time(clock):
  product = create_product(validate_create({"name": "Widget", "price": 9.99, "stock": 3}))
  assert product.id
  assert product.created_at == product.updated_at == T0
  assert product.name == "Widget"
  assert product.description == ""
  assert product.currency == "USD"
  assert product.stock == 3
  test_log.info("test_create_product_stamps_identity_and_time completed successfully.")


def test_create_product_generates_unique_ids():
  ids = {create_product(validate_create({"name": "Widget", "price": 1})).id for _ in range(200)}
  assert len(ids) == 200


def test_create_product_revalidates_input():
  # Bypass pydantic validation to simulate an unvalidated payload
  unchecked = ProductCreate.model_construct(name="W", price=1.0, currency="USD", stock=0, description="")
  with pytest.raises(ValidationError) as exc_info:
    create_product(unchecked)
  assert [issue.field for issue in exc_info.value.issues] == ["name"]


def test_update_product_merges_only_sent_fields(clock):
  existing = create_product(validate_create({"name": "Widget", "price": 5, "category": "tools"}))
  clock["now"] = T0 + timedelta(minutes=5)

  updated = update_product(existing, validate_patch({"price": 9.5}))

  assert updated.price == 9.5
  assert updated.name == "Widget"
  assert updated.category == "tools"
  assert updated.id == existing.id
  assert updated.created_at == T0
  assert updated.updated_at == T0 + timedelta(minutes=5)
  # Original entity is untouched
  assert existing.price == 5
  test_log.info("test_update_product_merges_only_sent_fields completed successfully.")


def test_update_product_clears_optional_field(clock):
  existing = create_product(validate_create({"name": "Widget", "price": 5, "category": "tools",
                                             "imageUrl": "https://example.com/w.png"}))
  updated = update_product(existing, validate_patch({"category": None}))
  assert updated.category is None
  assert updated.image_url == "https://example.com/w.png"


def test_update_product_rejects_invalid_currency():
  existing = create_product(validate_create({"name": "Widget", "price": 5}))
  # Unvalidated patch; update_product validates it again before merging
  patch = ProductUpdate.model_construct(_fields_set={"currency"}, currency="US")
  with pytest.raises(ValidationError) as exc_info:
    update_product(existing, patch)
  assert [issue.field for issue in exc_info.value.issues] == ["currency"]


def test_update_product_revalidates_merged_entity():
  # Stored entity built under looser rules (schema drift); an unrelated patch still fails
  drifted = validate_product({"id": "legacy", "name": "Widget", "price": 1,
                              "createdAt": T0, "updatedAt": T0}).model_copy(update={"name": "W"})
  with pytest.raises(ValidationError) as exc_info:
    update_product(drifted, validate_patch({"stock": 4}))
  assert [issue.field for issue in exc_info.value.issues] == ["name"]
  assert exc_info.value.message == "Invalid product update"


def test_update_product_never_moves_updated_at_backwards(clock):
  existing = create_product(validate_create({"name": "Widget", "price": 5}))
  clock["now"] = T0 - timedelta(seconds=30)
  updated = update_product(existing, validate_patch({"stock": 1}))
  assert updated.updated_at == T0
  assert updated.created_at <= updated.updated_at


def test_update_product_ignores_id_and_timestamps_in_patch(clock):
  existing = create_product(validate_create({"name": "Widget", "price": 5}))
  clock["now"] = T0 + timedelta(seconds=1)
  updated = update_product(existing, validate_patch({"id": "other", "createdAt": "2000-01-01T00:00:00Z", "name": "Gadget"}))
  assert updated.id == existing.id
  assert updated.created_at == T0
  assert updated.name == "Gadget"
