# catalog/models.py

from typing import Annotated, Any, List, Optional, Type, TypeVar

from pydantic import (AfterValidator, AnyUrl, AwareDatetime, BaseModel, BeforeValidator, ConfigDict,
                      Field, TypeAdapter, field_validator, model_validator)
from pydantic import ValidationError as PydanticValidationError

from catalog.exceptions import ValidationError, ValidationIssue


_url_adapter = TypeAdapter(AnyUrl)


def _check_url(value: str) -> str:
  # Validate syntax only, keep the caller's string untouched
  try:
    _url_adapter.validate_python(value)
  except PydanticValidationError:
    raise ValueError("Invalid url")
  return value


def _whole_number(value: Any) -> Any:
  # 3.0 counts as the integer 3; booleans and numeric strings do not
  if isinstance(value, (bool, str)):
    raise ValueError("Input should be a valid integer")
  if isinstance(value, float) and value.is_integer():
    return int(value)
  return value


# Largest value a SQLite INTEGER column holds
MAX_STOCK = 2**63 - 1


# Per-field constraints, shared by create, patch and full shapes
Name = Annotated[str, Field(min_length=2, max_length=100)]
Description = Annotated[str, Field(max_length=500)]
Price = Annotated[float, Field(ge=0, allow_inf_nan=False, strict=True)]
Currency = Annotated[str, Field(min_length=3, max_length=3)]
Stock = Annotated[int, BeforeValidator(_whole_number), Field(ge=0, le=MAX_STOCK)]
Category = Annotated[str, Field(max_length=50)]
ImageUrl = Annotated[str, AfterValidator(_check_url)]


class CatalogModel(BaseModel):
  # Unknown keys are dropped; both 'image_url' and 'imageUrl' are accepted
  model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ProductCreate(CatalogModel):
  name: Name
  description: Description = ""
  price: Price
  currency: Currency = "USD"
  stock: Stock = 0
  category: Optional[Category] = None
  image_url: Optional[ImageUrl] = Field(None, alias="imageUrl")


class ProductUpdate(CatalogModel):
  """
  Patch shape: every field optional, same constraints as ProductCreate, no defaults.
  Only fields in model_fields_set were sent by the caller.
  Explicit null clears 'category' and 'imageUrl'; it is rejected for the rest.
  """
  name: Optional[Name] = None
  description: Optional[Description] = None
  price: Optional[Price] = None
  currency: Optional[Currency] = None
  stock: Optional[Stock] = None
  category: Optional[Category] = None
  image_url: Optional[ImageUrl] = Field(None, alias="imageUrl")

  @field_validator("name", "description", "price", "currency", "stock", mode="before")
  @classmethod
  def _reject_null(cls, value: Any) -> Any:
    if value is None:
      raise ValueError("Field may not be null")
    return value


class Product(ProductCreate):
  """Stored entity. Frozen so callers cannot mutate repository state."""
  model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

  id: str = Field(min_length=1)
  created_at: AwareDatetime = Field(alias="createdAt")
  updated_at: AwareDatetime = Field(alias="updatedAt")

  @model_validator(mode="after")
  def _check_timestamps(self) -> "Product":
    if self.created_at > self.updated_at:
      raise ValueError("updatedAt must not be earlier than createdAt")
    return self

  def to_json(self) -> dict:
    """JSON-ready dict with camelCase keys."""
    return self.model_dump(mode="json", by_alias=True)


M = TypeVar("M", bound=CatalogModel)


def _issues(exc: PydanticValidationError) -> List[ValidationIssue]:
  return [
    ValidationIssue(field=".".join(str(part) for part in err["loc"]), message=err["msg"])
    for err in exc.errors()
  ]


def _validate(model: Type[M], data: Any, message: str) -> M:
  if isinstance(data, BaseModel):
    # Re-validate models too; exclude_unset keeps patch semantics intact
    data = data.model_dump(by_alias=True, exclude_unset=True)
  try:
    return model.model_validate(data)
  except PydanticValidationError as e:
    raise ValidationError(message, _issues(e)) from e


def validate_create(data: Any) -> ProductCreate:
  """
  Validate a create payload and apply defaults.

  Args:
    data: mapping (JSON object) or ProductCreate

  Returns:
    ProductCreate: normalized payload

  Raises:
    ValidationError: with one issue per failing field
  """
  return _validate(ProductCreate, data, "Invalid product data")


def validate_patch(data: Any) -> ProductUpdate:
  """Validate a partial update payload. No defaults are applied."""
  return _validate(ProductUpdate, data, "Invalid product update")


def validate_product(data: Any, message: str = "Invalid product") -> Product:
  """Validate a complete entity against the full schema."""
  return _validate(Product, data, message)
