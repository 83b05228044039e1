# catalog/service.py

from typing import Any, List

from catalog.domain import create_product, update_product
from catalog.exceptions import NotFoundError, ValidationError
from catalog.models import Product, validate_create, validate_patch
from catalog.repository import ProductRepository
from catalog.logger import get_logger

log = get_logger(__name__)


class ProductService:
  """
  Product use cases on top of a repository.

  Validation failures surface as ValidationError, missing ids as NotFoundError;
  anything else raised by the repository propagates unchanged.
  """

  def __init__(self, repository: ProductRepository):
    self.repository = repository

  def create(self, data: Any) -> Product:
    """
    Validate a create payload, build the entity and store it.

    Args:
      data: JSON object (dict) or ProductCreate

    Returns:
      Product: stored entity
    """
    try:
      product = create_product(validate_create(data))
    except ValidationError as e:
      log.info(f"Create rejected: {len(e.issues)} validation issue(s)")
      raise
    self.repository.add(product)
    log.info(f"Created product id={product.id} name='{product.name}'")
    return product

  def get(self, product_id: str) -> Product:
    product = self.repository.get(product_id)
    if product is None:
      log.info(f"Product not found: id={product_id}")
      raise NotFoundError("Product not found")
    return product

  def update(self, product_id: str, data: Any) -> Product:
    """
    Apply a partial update to an existing product.

    Args:
      product_id (str): id of the product to change
      data: JSON object (dict) or ProductUpdate; only sent fields change

    Returns:
      Product: merged and stored entity

    Raises:
      NotFoundError: no product with this id
      ValidationError: patch invalid, or merged product breaks the full schema
    """
    existing = self.get(product_id)
    try:
      updated = update_product(existing, validate_patch(data))
    except ValidationError as e:
      log.info(f"Update rejected for id={product_id}: {len(e.issues)} validation issue(s)")
      raise
    # A delete that ran since the get above must not be undone
    if not self.repository.replace(updated):
      log.info(f"Update lost to concurrent delete: id={product_id}")
      raise NotFoundError("Product not found")
    log.info(f"Updated product id={product_id}")
    return updated

  def delete(self, product_id: str) -> None:
    if not self.repository.delete(product_id):
      log.info(f"Delete failed, product not found: id={product_id}")
      raise NotFoundError("Product not found")
    log.info(f"Deleted product id={product_id}")

  def list(self) -> List[Product]:
    products = self.repository.list()
    log.debug(f"Listing {len(products)} products")
    return products
