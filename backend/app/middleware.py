from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from fastapi.middleware.cors import CORSMiddleware

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from fastapi import FastAPI, Request, Response

    from app.config import Settings

logger = logging.getLogger(__name__)

_NO_STORE_PREFIXES = ("/toil/", "/users/")


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure CORS for the web client and per-request housekeeping."""
    app.add_middleware(
        CORSMiddleware,  # ty: ignore[invalid-argument-type]
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Content-Type", "X-User-Id", "X-Role"],
    )

    @app.middleware("http")
    async def no_store_toil_responses(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        path = request.url.path
        if path.startswith(_NO_STORE_PREFIXES):
            # Balances move on every save and approval.
            response.headers["Cache-Control"] = "no-store"
        logger.debug(
            "%s %s -> %d in %.1fms",
            request.method,
            path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response
