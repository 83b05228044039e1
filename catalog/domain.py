# catalog/domain.py

import uuid
from datetime import datetime, timezone

from catalog.models import Product, ProductCreate, ProductUpdate, validate_create, validate_patch, validate_product
from catalog.logger import get_logger

log = get_logger(__name__)


def _now() -> datetime:
  return datetime.now(timezone.utc)


def new_product_id() -> str:
  return uuid.uuid4().hex


def create_product(data: ProductCreate) -> Product:
  """
  Build a new Product from a create payload.

  The payload is validated again here even if the caller already did it.

  Args:
    data (ProductCreate): validated create payload

  Returns:
    Product: new entity with fresh id and created_at == updated_at
  """
  parsed = validate_create(data)
  now = _now()
  product = Product(
    id=new_product_id(),
    name=parsed.name,
    description=parsed.description,
    price=parsed.price,
    currency=parsed.currency,
    stock=parsed.stock,
    category=parsed.category,
    image_url=parsed.image_url,
    created_at=now,
    updated_at=now,
  )
  log.debug(f"Constructed product id={product.id} name='{product.name}'")
  return product


def _pick(patch: ProductUpdate, field: str, current):
  return getattr(patch, field) if field in patch.model_fields_set else current


def update_product(existing: Product, patch: ProductUpdate) -> Product:
  """
  Merge a patch over an existing Product and validate the result as a whole.

  Only fields the patch actually carries replace existing values. id and
  created_at are kept, updated_at is refreshed (never moved backwards).

  Args:
    existing (Product): stored entity
    patch (ProductUpdate): validated patch

  Returns:
    Product: merged entity

  Raises:
    ValidationError: if the patch or the merged entity breaks the full schema
  """
  parsed = validate_patch(patch)
  updated_at = max(_now(), existing.updated_at)

  merged = {
    "id": existing.id,
    "name": _pick(parsed, "name", existing.name),
    "description": _pick(parsed, "description", existing.description),
    "price": _pick(parsed, "price", existing.price),
    "currency": _pick(parsed, "currency", existing.currency),
    "stock": _pick(parsed, "stock", existing.stock),
    "category": _pick(parsed, "category", existing.category),
    "image_url": _pick(parsed, "image_url", existing.image_url),
    "created_at": existing.created_at,
    "updated_at": updated_at,
  }
  product = validate_product(merged, "Invalid product update")
  log.debug(f"Merged fields {sorted(parsed.model_fields_set)} into product id={existing.id}")
  return product
