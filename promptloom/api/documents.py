# Copyright (c) 2026 promptloom Contributors. All Rights Reserved.

"""
Documents API — Catalog listing, lookup and reload.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from promptloom.api.errors import InvalidKindAPIError
from promptloom.core.context import get_loom_context
from promptloom.core.errors import DocumentNotFoundError
from promptloom.documents.models import DocumentKind

router = APIRouter(tags=["documents"])


class DocumentInfo(BaseModel):
    doc_id: str
    kind: str
    path: str
    description: str = ""


class ReloadResult(BaseModel):
    documents: int
    load_failures: int


def _parse_kind(kind: str) -> DocumentKind:
    try:
        return DocumentKind(kind)
    except ValueError:
        raise InvalidKindAPIError(kind)


@router.get("/documents", response_model=List[DocumentInfo])
async def list_documents(kind: Optional[str] = None):
    """List catalog documents, optionally of one kind."""
    ctx = get_loom_context()
    parsed = _parse_kind(kind) if kind else None
    return [DocumentInfo(**d.summary()) for d in ctx.catalog.list(parsed)]


@router.get("/documents/{kind}/{doc_id}")
async def get_document(kind: str, doc_id: str):
    """Full document: front matter, body and extracted fields."""
    ctx = get_loom_context()
    parsed = _parse_kind(kind)
    doc = ctx.catalog.get(parsed, doc_id)
    if doc is None:
        raise DocumentNotFoundError(parsed.value, doc_id)
    return doc.model_dump(mode="json")


@router.post("/catalog/reload", response_model=ReloadResult)
async def reload_catalog():
    """Rescan the corpus root."""
    ctx = get_loom_context()
    ctx.reload()
    return ReloadResult(documents=len(ctx.catalog), load_failures=len(ctx.catalog.failures))
