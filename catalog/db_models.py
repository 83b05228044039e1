# catalog/db_models.py

from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime


class ProductRecord(SQLModel, table=True):
  """Row layout of the sqlite product store"""
  __tablename__ = "product"
  __table_args__ = {"extend_existing": True}

  id: str = Field(primary_key=True)
  name: str
  description: str = ""
  price: float
  currency: str = "USD"
  stock: int = 0
  category: Optional[str] = None
  image_url: Optional[str] = None
  created_at: datetime = Field(index=True) # Index for list ordering
  updated_at: datetime
