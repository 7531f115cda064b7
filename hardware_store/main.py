# hardware_store/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hardware_store import __version__
from hardware_store.config import Settings, settings as default_settings
from hardware_store.database import create_database
from hardware_store.errors import (
    AuthError,
    BackendError,
    CategoryInUse,
    DuplicateName,
    InsufficientStock,
    ItemInUse,
    NotFound,
    StoreError,
    ValidationError,
)
from hardware_store.schema import init_db

# Import routers
from hardware_store.routes.auth import router as auth_router
from hardware_store.routes.inventory import router as inventory_router
from hardware_store.routes.sales import router as sales_router
from hardware_store.routes.staff import router as staff_router
from hardware_store.routes.budget import router as budget_router
from hardware_store.routes.reports import router as reports_router
from hardware_store.routes.backup import router as backup_router

logger = logging.getLogger(__name__)

# HTTP status per error kind
STATUS_CODES = {
    NotFound: 404,
    ValidationError: 400,
    InsufficientStock: 400,
    DuplicateName: 400,
    CategoryInUse: 400,
    ItemInUse: 400,
    AuthError: 401,
    BackendError: 500,
}


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _store_error_handler(status_code: int):
    async def handler(request: Request, exc: StoreError):
        if isinstance(exc, BackendError) and exc.is_unique_violation:
            return JSONResponse(status_code=400, content={"error": "Already exists", "message": exc.message})
        if status_code >= 500:
            logger.error("%s on %s %s: %s", exc.kind, request.method, request.url.path, exc.message)
        return JSONResponse(status_code=status_code, content={"error": exc.kind, "message": exc.message})
    return handler


async def _request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": ValidationError.kind, "errors": jsonable_encoder(exc.errors())},
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.LOG_LEVEL)
        db = create_database(settings)
        # A backend that cannot be reached aborts startup
        db.ping()
        logger.info("DB connectivity OK (%s)", db.dialect)
        init_db(db, settings)
        app.state.db = db
        app.state.settings = settings
        yield
        db.close()
        logger.info("Database connections closed")

    app = FastAPI(title="Hardware Store Manager API", version=__version__, lifespan=lifespan)

    # CORS Configuration
    origins = ["http://localhost:3000", "http://127.0.0.1:3000"]
    if settings.FRONTEND_URL:
        origins.append(settings.FRONTEND_URL)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for error_class, status_code in STATUS_CODES.items():
        app.add_exception_handler(error_class, _store_error_handler(status_code))
    app.add_exception_handler(StoreError, _store_error_handler(500))
    app.add_exception_handler(RequestValidationError, _request_validation_handler)

    # Register routers
    app.include_router(auth_router)
    app.include_router(inventory_router)
    app.include_router(sales_router)
    app.include_router(staff_router)
    app.include_router(budget_router)
    app.include_router(reports_router)
    app.include_router(backup_router)

    @app.get("/")
    def read_root():
        return {"message": "Hardware Store Manager API is running", "version": __version__}

    return app


app = create_app()
