# catalog/main.py

from contextlib import asynccontextmanager
from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalog.config import Settings, load_settings
from catalog.exceptions import NotFoundError, ValidationError, ValidationIssue
from catalog.logger import configure_logging, get_logger
from catalog.models import Product
from catalog.repository import ProductRepository, build_repository
from catalog.service import ProductService

log = get_logger(__name__)

router = APIRouter(prefix="/products", tags=["products"])


def get_service(request: Request) -> ProductService:
  return request.app.state.service


@router.get("", response_model=List[Product])
def list_products(service: ProductService = Depends(get_service)):
  """List all products, oldest first."""
  return service.list()


@router.post("", response_model=Product, status_code=201)
def create_product(payload: Any = Body(...), service: ProductService = Depends(get_service)):
  """Create a product. Missing description/currency/stock get their defaults."""
  log.info("POST /products called")
  return service.create(payload)


@router.get("/{product_id}", response_model=Product)
def get_product(product_id: str, service: ProductService = Depends(get_service)):
  """Get a specific product by ID."""
  return service.get(product_id)


@router.patch("/{product_id}", response_model=Product)
def update_product(product_id: str, payload: Any = Body(...), service: ProductService = Depends(get_service)):
  """Partially update a product; only the sent fields change."""
  log.info(f"PATCH /products/{product_id} called with fields {sorted(payload) if isinstance(payload, dict) else type(payload).__name__}")
  return service.update(product_id, payload)


@router.delete("/{product_id}", status_code=204)
def delete_product(product_id: str, service: ProductService = Depends(get_service)):
  """Delete a product."""
  log.info(f"DELETE /products/{product_id} called")
  service.delete(product_id)
  return Response(status_code=204)


async def validation_error_handler(request: Request, exc: ValidationError):
  log.warning(f"[API] {request.method} {request.url.path} rejected: {exc.message} {[issue.field for issue in exc.issues]}")
  return JSONResponse(status_code=400, content=exc.to_dict())


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
  # Malformed or missing JSON body; same 400 shape as schema failures
  issues = [
    ValidationIssue(field=".".join(str(part) for part in err["loc"] if part != "body"), message=err["msg"])
    for err in exc.errors()
  ]
  return await validation_error_handler(request, ValidationError("Invalid request body", issues))


async def not_found_handler(request: Request, exc: NotFoundError):
  log.info(f"[API] {request.method} {request.url.path}: {exc.message}")
  return JSONResponse(status_code=404, content={"error": "NotFound", "detail": exc.message})


async def global_exception_handler(request: Request, exc: Exception):
  log.error(f"Unhandled exception: {exc}", exc_info=True)
  return JSONResponse(
    status_code=500,
    content={"error": "ServerError", "detail": "Internal Server Error"},
  )


def create_app(repository: Optional[ProductRepository] = None, settings: Optional[Settings] = None) -> FastAPI:
  """
  Build the FastAPI application.

  Args:
    repository: store to use; built from settings on startup when omitted
    settings: configuration; read from the environment when omitted

  The repository is attached at startup (app.state.service) and closed on shutdown.
  """
  settings = settings or load_settings()
  configure_logging(settings)

  @asynccontextmanager
  async def lifespan(app: FastAPI):
    # Application startup
    repo = repository if repository is not None else build_repository(settings)
    app.state.service = ProductService(repo)
    log.info(f"Product catalog API started (env={settings.env}, storage={type(repo).__name__})")

    yield
    # Application shutdown
    repo.close()
    log.info("Product catalog API stopped")

  app = FastAPI(title="Product Catalog",
                lifespan=lifespan,
                description="CRUD API for the product catalog admin.",
                version="1.0.0")

  app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
  )

  app.include_router(router)
  app.add_exception_handler(ValidationError, validation_error_handler)
  app.add_exception_handler(RequestValidationError, request_validation_error_handler)
  app.add_exception_handler(NotFoundError, not_found_handler)
  app.add_exception_handler(Exception, global_exception_handler)

  @app.get("/")
  def root():
    return {"messages": "Product Catalog API - endpoints: /products, /products/{id}, /health"}

  @app.get("/health")
  def healthcheck():
    return {"status": "ok"}

  return app


app = create_app()
