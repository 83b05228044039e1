# catalog/repository.py

import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from itertools import count
from typing import Dict, List, Optional, Tuple

from sqlmodel import select, delete

from catalog.config import Settings
from catalog.database import make_engine, init_db, get_session
from catalog.db_models import ProductRecord
from catalog.models import Product, validate_product
from catalog.logger import get_logger

log = get_logger(__name__)


def _as_utc(value: datetime) -> datetime:
  # Older sqlmodel releases hand back naive values, newer ones aware ones
  if value.tzinfo is None:
    return value.replace(tzinfo=timezone.utc)
  return value.astimezone(timezone.utc)


class ProductRepository(ABC):
  """
  Storage contract for Product entities.

  Every operation is atomic with respect to the others. update() overwrites
  blindly while replace() only overwrites an entry that still exists.
  get() and delete() report absence instead of raising.
  """

  @abstractmethod
  def add(self, product: Product) -> None:
    """Insert or overwrite by product.id."""

  @abstractmethod
  def get(self, product_id: str) -> Optional[Product]:
    """Return the product, or None if not found."""

  @abstractmethod
  def update(self, product: Product) -> None:
    """Overwrite the entry for product.id."""

  @abstractmethod
  def replace(self, product: Product) -> bool:
    """Overwrite the entry for product.id only if it still exists; False otherwise."""

  @abstractmethod
  def delete(self, product_id: str) -> bool:
    """Remove the entry; True if something was removed."""

  @abstractmethod
  def list(self) -> List[Product]:
    """All products, oldest created_at first."""

  @abstractmethod
  def clear(self) -> None:
    """Remove all entries."""

  def close(self) -> None:
    """Release backend resources."""


class InMemoryProductRepository(ProductRepository):
  """Process-local store. Products are frozen, so stored instances can be handed out directly."""

  def __init__(self):
    self._lock = threading.RLock()
    self._items: Dict[str, Tuple[int, Product]] = {}
    self._sequence = count()

  def add(self, product: Product) -> None:
    with self._lock:
      self._put(product)

  def get(self, product_id: str) -> Optional[Product]:
    with self._lock:
      entry = self._items.get(product_id)
      return entry[1] if entry else None

  def update(self, product: Product) -> None:
    with self._lock:
      self._put(product)

  def replace(self, product: Product) -> bool:
    with self._lock:
      if product.id not in self._items:
        return False
      self._put(product)
      return True

  def delete(self, product_id: str) -> bool:
    with self._lock:
      return self._items.pop(product_id, None) is not None

  def list(self) -> List[Product]:
    with self._lock:
      entries = list(self._items.values())
    # Insertion sequence breaks created_at ties
    entries.sort(key=lambda entry: (entry[1].created_at, entry[0]))
    return [product for _, product in entries]

  def clear(self) -> None:
    with self._lock:
      self._items.clear()
    log.info("Cleared in-memory product repository")

  def _put(self, product: Product):
    # Overwrites keep their original insertion sequence
    entry = self._items.get(product.id)
    seq = entry[0] if entry else next(self._sequence)
    self._items[product.id] = (seq, product)


class SqlProductRepository(ProductRepository):
  """
  sqlite-backed store using sqlmodel.

  A single lock serializes operations; each one runs in its own session and
  is rolled back on failure before the error is re-raised.
  """

  def __init__(self, db_file: str = ":memory:"):
    self._lock = threading.RLock()
    self.engine = make_engine(db_file)
    init_db(self.engine)

  def add(self, product: Product) -> None:
    self._write(product, "add")

  def get(self, product_id: str) -> Optional[Product]:
    with self._lock:
      session = get_session(self.engine)
      try:
        record = session.get(ProductRecord, product_id)
        return self._to_product(record) if record else None
      finally:
        session.close()

  def update(self, product: Product) -> None:
    self._write(product, "update")

  def replace(self, product: Product) -> bool:
    with self._lock:
      session = get_session(self.engine)
      try:
        if session.get(ProductRecord, product.id) is None:
          return False
        session.merge(self._to_record(product))
        session.commit()
        return True
      except Exception as e:
        log.error(f"Error replacing product id={product.id}: {e}")
        session.rollback()
        raise
      finally:
        session.close()

  def delete(self, product_id: str) -> bool:
    with self._lock:
      session = get_session(self.engine)
      try:
        record = session.get(ProductRecord, product_id)
        if record is None:
          return False
        session.delete(record)
        session.commit()
        return True
      except Exception as e:
        log.error(f"Error deleting product id={product_id}: {e}")
        session.rollback()
        raise
      finally:
        session.close()

  def list(self) -> List[Product]:
    with self._lock:
      session = get_session(self.engine)
      try:
        statement = select(ProductRecord).order_by(ProductRecord.created_at.asc(), ProductRecord.id.asc())
        records = session.exec(statement).all()
        return [self._to_product(record) for record in records]
      finally:
        session.close()

  def clear(self) -> None:
    with self._lock:
      session = get_session(self.engine)
      try:
        session.exec(delete(ProductRecord))
        session.commit()
        log.info("Cleared all records from product database")
      except Exception as e:
        log.error(f"Error clearing product database: {e}")
        session.rollback()
        raise
      finally:
        session.close()

  def close(self) -> None:
    self.engine.dispose()

  def _write(self, product: Product, operation: str):
    with self._lock:
      session = get_session(self.engine)
      try:
        # merge() inserts or overwrites by primary key
        session.merge(self._to_record(product))
        session.commit()
      except Exception as e:
        log.error(f"Error on {operation} for product id={product.id}: {e}")
        session.rollback()
        raise
      finally:
        session.close()

  @staticmethod
  def _to_record(product: Product) -> ProductRecord:
    # Timestamps are stored in UTC and stay timezone-aware
    return ProductRecord(
      id=product.id,
      name=product.name,
      description=product.description,
      price=product.price,
      currency=product.currency,
      stock=product.stock,
      category=product.category,
      image_url=product.image_url,
      created_at=product.created_at.astimezone(timezone.utc),
      updated_at=product.updated_at.astimezone(timezone.utc),
    )

  @staticmethod
  def _to_product(record: ProductRecord) -> Product:
    return validate_product({
      "id": record.id,
      "name": record.name,
      "description": record.description,
      "price": record.price,
      "currency": record.currency,
      "stock": record.stock,
      "category": record.category,
      "image_url": record.image_url,
      "created_at": _as_utc(record.created_at),
      "updated_at": _as_utc(record.updated_at),
    }, "Stored product failed validation")


def build_repository(settings: Settings) -> ProductRepository:
  """
  Create the repository selected by settings.storage ('memory' or 'sqlite').
  """
  if settings.storage == "sqlite":
    log.info(f"Using sqlite product repository at {settings.db_file}")
    return SqlProductRepository(settings.db_file)
  log.info("Using in-memory product repository")
  return InMemoryProductRepository()
