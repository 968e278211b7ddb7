"""
FastAPI entrypoint for the paydoc service.

The service is stateless: every request builds or inspects a single pay
document and nothing is persisted. Download mechanics are left to the
client, which saves the returned bytes under the suggested filename.
"""

import logging
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError, version

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from paydoc.app.api.pay import router as pay_router
from paydoc.app.config import get_settings
from paydoc.app.services.builder import PayDocumentBuilder
from paydoc.app.services.crypto import SystemCryptoProvider

logger = logging.getLogger("paydoc.main")


def get_app_version() -> str:
    """
    Resolve application version from installed package metadata.

    Falls back to the source version when running from a checkout.
    """
    try:
        return version("paydoc")
    except PackageNotFoundError:
        return "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Guarantees:
    - Fail-fast startup if configuration is invalid
    - A single production crypto provider shared by all builds
    """
    try:
        settings = get_settings()
    except Exception:
        logger.exception("invalid_paydoc_configuration")
        raise

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger.info(
        "paydoc startup version=%s default_asset=%s timezone=%s",
        get_app_version(),
        settings.default_asset,
        settings.local_timezone or "platform-local",
    )

    app.state.settings = settings
    app.state.builder = PayDocumentBuilder(crypto=SystemCryptoProvider())

    yield

    logger.info("paydoc shutdown")


app = FastAPI(
    title="paydoc",
    description="Portable .pay document creation and inspection",
    version=get_app_version(),
    lifespan=lifespan,
)

app.include_router(pay_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Pay-Jti"],
)


@app.get(
    "/health",
    summary="Service health check",
)
def health_check() -> JSONResponse:
    """Simple health check endpoint."""
    return JSONResponse(
        content={
            "status": "ok",
            "service": "paydoc",
        }
    )
