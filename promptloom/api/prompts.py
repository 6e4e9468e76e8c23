# Copyright (c) 2026 promptloom Contributors. All Rights Reserved.

"""
Prompts API — Compose a prompt's context blob.
"""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter
from pydantic import BaseModel, Field

from promptloom.core.context import get_loom_context
from promptloom.kernel.composer import ComposedContext

router = APIRouter(prefix="/prompts", tags=["prompts"])


class ComposeRequest(BaseModel):
    params: Dict[str, Any] = Field(default_factory=dict)
    targets: List[str] = Field(default_factory=list)
    strict: bool = True


@router.post("/{prompt_id}/compose", response_model=ComposedContext)
async def compose_prompt(prompt_id: str, req: ComposeRequest):
    """Resolve and concatenate the prompt's persona, instructions and references."""
    ctx = get_loom_context()
    return ctx.composer.compose(
        prompt_id,
        params=req.params,
        targets=req.targets,
        strict=req.strict,
    )
