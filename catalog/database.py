# catalog/database.py

from sqlmodel import SQLModel, create_engine, Session
from sqlalchemy.engine import Engine
import os
from catalog.logger import get_logger

log = get_logger(__name__)


def make_engine(db_file: str) -> Engine:
  """
  Create an engine for the sqlite product store.

  Args:
    db_file: str : path of the sqlite file, ':memory:' for a throwaway database
  """
  if db_file == ":memory:":
    from sqlalchemy.pool import StaticPool
    # One shared connection, otherwise every session sees an empty database
    return create_engine("sqlite://", echo=False, connect_args={"check_same_thread": False}, poolclass=StaticPool)

  # Ensure the db directory exists
  db_dir = os.path.dirname(db_file)
  if db_dir:
    os.makedirs(db_dir, exist_ok=True)
  return create_engine(f"sqlite:///{db_file}", echo=False, connect_args={"check_same_thread": False})


def init_db(engine: Engine):
  """Creates the product table if missing"""
  from catalog.db_models import ProductRecord

  SQLModel.metadata.create_all(engine, tables=[ProductRecord.__table__], checkfirst=True)
  log.info(f"Initialized product database ({engine.url})")


def get_session(engine: Engine) -> Session:
  """Create new session for the product database"""
  return Session(engine)
