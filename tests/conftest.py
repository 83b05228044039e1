# tests/conftest.py

import pytest

from catalog.repository import InMemoryProductRepository, SqlProductRepository
from catalog.service import ProductService


@pytest.fixture(autouse=True)
def set_test_env(monkeypatch):
  monkeypatch.setenv("APP_ENV", "testing")
  monkeypatch.setenv("CATALOG_STORAGE", "memory")


@pytest.fixture(params=["memory", "sqlite"])
def repository(request):
  """Both repository backends; torn down after each test."""
  repo = InMemoryProductRepository() if request.param == "memory" else SqlProductRepository(":memory:")
  yield repo
  repo.clear()
  repo.close()


@pytest.fixture
def service():
  repo = InMemoryProductRepository()
  yield ProductService(repo)
  repo.clear()
  repo.close()


@pytest.fixture
def backend_service(repository):
  """ProductService over each repository backend."""
  return ProductService(repository)
