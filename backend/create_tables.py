# create_tables.py: run once to create missing tables (development helper)
import logging
import sys

from expense_tracker.core.logging import configure_logging
from expense_tracker.db import models  # noqa: F401
from expense_tracker.db.base import Base
from expense_tracker.db.session import engine

configure_logging("INFO")
logger = logging.getLogger(__name__)

if __name__ == "__main__":
    logger.info("Creating tables in %s (if not exist)...", engine.url.render_as_string(hide_password=True))
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Done.")
    except Exception:
        logger.exception("Error creating tables:")
        sys.exit(1)
