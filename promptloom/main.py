# Copyright (c) 2026 promptloom Contributors. All Rights Reserved.

"""
promptloom Service Entry Point.

Read-only FastAPI app over one corpus: listing, composition, lint.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from promptloom import __version__
from promptloom.api.documents import router as documents_router
from promptloom.api.errors import APIError, api_error_handler, loom_error_handler
from promptloom.api.lint import router as lint_router
from promptloom.api.middleware import TraceMiddleware
from promptloom.api.observability import router as observability_router
from promptloom.api.prompts import router as prompts_router
from promptloom.core.config import get_settings
from promptloom.core.context import init_loom_context
from promptloom.core.errors import LoomError

logger = logging.getLogger("loom.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Scan the configured corpus on startup."""
    settings = get_settings()
    ctx = init_loom_context(settings.DOCS_ROOT, settings)
    logger.info("[promptloom] Serving %d documents from %s", len(ctx.catalog), ctx.root)
    yield
    logger.info("[promptloom] Shutdown complete")


app = FastAPI(
    title="promptloom",
    description="Persona, instruction and prompt document service",
    version=__version__,
    lifespan=lifespan,
)

# ── Middleware ───────────────────────────────────────────────
app.add_middleware(TraceMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# ── Error Handlers ──────────────────────────────────────────
app.add_exception_handler(APIError, api_error_handler)
app.add_exception_handler(LoomError, loom_error_handler)

# ── Routes ──────────────────────────────────────────────────
app.include_router(documents_router, prefix="/api")
app.include_router(prompts_router, prefix="/api")
app.include_router(lint_router, prefix="/api")
app.include_router(observability_router)
