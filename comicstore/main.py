"""
Comic store — Backend API
FastAPI server for the catalog, cart, orders, cancellation requests,
user administration, statistics and payment links.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from comicstore.config import CORS_ORIGINS, DATABASE_URL, DEBUG, HOST, LOG_LEVEL, PORT
from comicstore.database import Database
from comicstore.errors import ShopError
from comicstore.payment_client import PaymentClient
from comicstore.routes import ROUTERS

logger = logging.getLogger(__name__)


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, **extra},
    )


# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------

def create_app(db: Database | None = None, payment_client: PaymentClient | None = None) -> FastAPI:
    """Build the API around an injected (or freshly opened) database."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = getattr(app.state, "db", None) is None
        if owned:
            app.state.db = Database(DATABASE_URL)
            logger.info(f"Opened database {app.state.db.path}")
        yield
        if owned:
            app.state.db.close()
            app.state.db = None

    app = FastAPI(title="Comic Store API", version="0.3.0", lifespan=lifespan)
    app.state.db = db
    app.state.payment_client = payment_client or PaymentClient()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------------------------------------------------------
    # Exception handlers
    # -----------------------------------------------------------------------

    @app.exception_handler(ShopError)
    async def shop_error_handler(request: Request, exc: ShopError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return _error(exc.status_code, exc.message, **exc.extra)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {"field": ".".join(str(p) for p in e["loc"][1:]), "message": e["msg"]}
            for e in exc.errors()
        ]
        return _error(400, "Invalid request", errors=errors)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return _error(500, "Internal server error", error=str(exc))

    # -----------------------------------------------------------------------
    # Endpoints
    # -----------------------------------------------------------------------

    for router in ROUTERS:
        app.include_router(router)

    @app.get("/health")
    def health():
        db_ok = app.state.db is not None
        return {"success": True, "status": "ok" if db_ok else "starting"}

    return app


def run() -> None:
    """Console entry point."""
    import uvicorn

    configure_logging()
    # With reload on, uvicorn needs an import string
    target = "comicstore.main:create_app" if DEBUG else create_app()
    uvicorn.run(
        target,
        factory=DEBUG,
        host=HOST,
        port=PORT,
        reload=DEBUG,
        workers=1,  # one process owns the SQLite connection
        log_level=LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
