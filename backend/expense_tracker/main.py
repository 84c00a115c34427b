# expense_tracker/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import OperationalError

from expense_tracker.api.v1 import (
    analytics,
    budgets,
    categories,
    currencies,
    expenses,
    health,
    receipts,
    settings as settings_api,
)
from expense_tracker.core import errors
from expense_tracker.core.config import settings
from expense_tracker.core.logging import configure_logging
from expense_tracker.db import models  # noqa: F401  (registers tables on Base)
from expense_tracker.db.base import Base
from expense_tracker.db.session import engine

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    logger.info("expense tracker API ready (db=%s)", engine.url.render_as_string(hide_password=True))
    yield


def create_app() -> FastAPI:
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title="Expense Tracker API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(errors.ReceiptError, errors.receipt_error_handler)
    app.add_exception_handler(OperationalError, errors.database_unavailable_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    app.include_router(health.router, prefix=API_PREFIX)
    app.include_router(currencies.router, prefix=f"{API_PREFIX}/currencies")
    app.include_router(expenses.router, prefix=f"{API_PREFIX}/expenses")
    app.include_router(categories.router, prefix=f"{API_PREFIX}/categories")
    app.include_router(budgets.router, prefix=f"{API_PREFIX}/budgets")
    app.include_router(analytics.router, prefix=f"{API_PREFIX}/analytics")
    app.include_router(settings_api.router, prefix=f"{API_PREFIX}/settings")
    app.include_router(receipts.router, prefix=f"{API_PREFIX}/receipts")

    @app.get("/")
    def root():
        return {"message": "Expense Tracker API - visit /api/v1/health"}

    return app


app = create_app()
