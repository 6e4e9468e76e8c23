# Copyright (c) 2026 promptloom Contributors. All Rights Reserved.

"""
Observability API — Health check and metrics.
"""

from __future__ import annotations

from fastapi import APIRouter

from promptloom import __version__
from promptloom.core.context import get_loom_context
from promptloom.core.metrics import loom_metrics

router = APIRouter(tags=["observability"])


@router.get("/health")
async def health_check():
    """Health check with catalog status."""
    ctx = get_loom_context()
    return {
        "status": "ok",
        "version": __version__,
        "root": str(ctx.root),
        "documents": len(ctx.catalog),
        "load_failures": len(ctx.catalog.failures),
        "metrics": loom_metrics.snapshot(),
    }


@router.get("/api/metrics")
async def get_metrics():
    """Return current metrics."""
    return loom_metrics.snapshot()
