import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

import superdate.core.db as db_module
from superdate.core.config import settings
from superdate.core.db import init_db
from superdate.routers import auth, discovery, matches, me, swipe

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging()
    init_db()
    logger.info("%s API started (env=%s)", settings.app_name, settings.env)
    yield


app = FastAPI(title="Superdate API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", include_in_schema=False)
def root() -> RedirectResponse:
    return RedirectResponse(url="/docs")  # Redirect the homepage to the Swagger UI


@app.get("/healthz")
def healthz() -> dict[str, bool]:
    return {"ok": True}


@app.get("/health", response_model=None)
def health() -> dict[str, Any] | JSONResponse:
    try:
        with db_module.engine.connect() as conn:
            now = conn.execute(text("SELECT CURRENT_TIMESTAMP")).scalar_one()
    except SQLAlchemyError:
        logger.exception("health check: database unreachable")
        return JSONResponse(status_code=503, content={"ok": False})
    return {"ok": True, "now": str(now)}


# Register routers
app.include_router(auth.router, prefix=settings.api_v1_str)
app.include_router(me.router, prefix=settings.api_v1_str)
app.include_router(discovery.router, prefix=settings.api_v1_str)
app.include_router(swipe.router, prefix=settings.api_v1_str)
app.include_router(matches.router, prefix=settings.api_v1_str)
