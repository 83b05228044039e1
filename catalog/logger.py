# catalog/logger.py

import logging
from logging.handlers import RotatingFileHandler
import os
import sys
import json
from datetime import datetime, timezone
from typing import Optional

from catalog.config import Settings, load_settings


# One JSON object per line
class JsonFormatter(logging.Formatter):
  def format(self, record):
    log_record = {
      "timestamp": datetime.now(timezone.utc).isoformat(),
      "level": record.levelname,
      "logger": record.name,
      "message": record.getMessage(),
      "file": record.pathname,
      "line": record.lineno,
      "function": record.funcName
    }

    if record.exc_info:
      log_record["exception"] = self.formatException(record.exc_info)

    return json.dumps(log_record, default=str)


json_formatter = JsonFormatter()


def configure_logging(settings: Optional[Settings] = None):
  """
  Configure the root logger for API, admin UI and tests.

  development/testing -> DEBUG, production -> INFO.
  stdout only receives ERROR records; everything else goes to a rotating file
  (test.log while testing, app.log otherwise) under settings.log_dir.
  """
  settings = settings or load_settings()

  os.makedirs(settings.log_dir, exist_ok=True)
  app_log_file = os.path.join(settings.log_dir, "app.log")
  test_log_file = os.path.join(settings.log_dir, "test.log")

  # Root logger
  logger = logging.getLogger()
  if settings.env in ("testing", "development"):
    logger.setLevel(logging.DEBUG)
  else:
    logger.setLevel(logging.INFO)

  # Clear previous handlers, close files they hold
  for handler in list(logger.handlers):
    if isinstance(handler, RotatingFileHandler):
      logger.removeHandler(handler)
      handler.close()
    elif getattr(handler, "formatter", None) is json_formatter:
      logger.removeHandler(handler)

  # --- Console (stdout) logger ---
  console_handler = logging.StreamHandler(sys.stdout)
  console_handler.setFormatter(json_formatter)
  console_handler.setLevel(logging.ERROR)
  logger.addHandler(console_handler)

  if settings.env == "testing":
    file_handler = RotatingFileHandler(test_log_file, maxBytes=1*1024*1024, backupCount=1, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
  else:
    file_handler = RotatingFileHandler(app_log_file, maxBytes=5*1024*1024, backupCount=3, encoding="utf-8")
    file_handler.setLevel(logging.INFO)
  file_handler.setFormatter(json_formatter)
  logger.addHandler(file_handler)


def get_logger(name):
  """
  Returns a logger object with specific name.
  configure_logging() should be called once by the entry point before logging.
  """
  return logging.getLogger(name)
