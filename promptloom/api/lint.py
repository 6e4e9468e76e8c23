# Copyright (c) 2026 promptloom Contributors. All Rights Reserved.

"""
Lint API — Structural findings for the loaded corpus.
"""

from __future__ import annotations

from fastapi import APIRouter

from promptloom.core.context import get_loom_context
from promptloom.kernel.linter import has_errors

router = APIRouter(tags=["lint"])


@router.get("/lint")
async def lint_corpus():
    ctx = get_loom_context()
    findings = ctx.lint()
    return {
        "ok": not has_errors(findings),
        "count": len(findings),
        "findings": [f.to_dict() for f in findings],
    }
