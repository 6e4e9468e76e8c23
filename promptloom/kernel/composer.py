# Copyright (c) 2026 promptloom Contributors. All Rights Reserved.

"""
ContextComposer — Concatenate a prompt and everything it references.

Section order is fixed so two runs over the same corpus produce the same
blob:

  persona → referenced instructions → applyTo-matched instructions
          → reference documents → prompt body

Each section is introduced by an HTML comment naming its source file, which
the assistant ignores but a human reading the blob can trace back.
"""

from __future__ import annotations

import logging
import re
import time
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import BaseModel, Field

from promptloom.core.errors import (
    DocumentNotFoundError,
    EmptyContextError,
    UnresolvedPlaceholderError,
)
from promptloom.core.metrics import loom_metrics
from promptloom.documents.loader import (
    INPUT_VAR_RE,
    MUSTACHE_RE,
    extract_placeholders,
    map_prose_lines,
)
from promptloom.documents.models import Document, DocumentKind, PromptDocument
from promptloom.kernel.resolver import ReferenceResolver

logger = logging.getLogger("loom.composer")

SECTION_HEADER = "<!-- source: {path} ({kind}) -->"
PLACEHOLDER_RE = re.compile(f"{MUSTACHE_RE.pattern}|{INPUT_VAR_RE.pattern}")


class ComposedContext(BaseModel):
    prompt_id: str
    text: str
    sources: List[Dict[str, str]] = Field(default_factory=list)
    unresolved: List[str] = Field(default_factory=list)
    char_count: int = 0


def substitute(text: str, params: Mapping[str, Any]) -> str:
    """Replace ``{{ name }}`` and ``${input:name}`` tokens that have a value.

    One pass over prose lines only; fenced code is copied verbatim.
    """

    def _replace(m):
        name = m.group(1) or m.group(2)
        if name in params:
            return str(params[name])
        return m.group(0)

    return map_prose_lines(text, lambda line: PLACEHOLDER_RE.sub(_replace, line))


class ContextComposer:
    """
    Builds a single context blob for a prompt.

    Usage:
        composer = ContextComposer(resolver)
        ctx = composer.compose("helm-review", {"branch": "main"})
    """

    def __init__(self, resolver: ReferenceResolver) -> None:
        self._resolver = resolver

    @property
    def catalog(self):
        return self._resolver.catalog

    def get_prompt(self, prompt_id: str) -> PromptDocument:
        doc = self.catalog.get(DocumentKind.PROMPT, prompt_id)
        if doc is None:
            raise DocumentNotFoundError(DocumentKind.PROMPT.value, prompt_id)
        return doc

    def compose(
        self,
        prompt_id: str,
        params: Optional[Mapping[str, Any]] = None,
        targets: Iterable[str] = (),
        strict: bool = True,
    ) -> ComposedContext:
        start = time.time()
        params = dict(params or {})
        prompt = self.get_prompt(prompt_id)

        # Resolution errors always propagate in strict mode; in lenient mode
        # they are logged and the missing pieces are left out.
        resolution = self._resolver.resolve_prompt(prompt, targets, strict=strict)
        for err in resolution.errors:
            logger.warning("%s", err.message, extra={"document": prompt.path})

        documents: List[Document] = resolution.documents() + [prompt]

        sections: List[str] = []
        emitted: List[Document] = []
        unresolved: List[str] = []
        for doc in documents:
            body = doc.body.strip()
            if not body:
                continue
            emitted.append(doc)
            for name in extract_placeholders(body):
                if name not in params and name not in unresolved:
                    unresolved.append(name)
            header = SECTION_HEADER.format(path=doc.path, kind=doc.kind.value)
            sections.append(f"{header}\n{substitute(body, params)}")

        if unresolved and strict:
            raise UnresolvedPlaceholderError(prompt_id, unresolved)

        text = "\n\n".join(sections).strip()
        if not text:
            raise EmptyContextError(prompt_id)
        text += "\n"

        elapsed = (time.time() - start) * 1000
        loom_metrics.inc("compositions")
        loom_metrics.observe("compose_ms", elapsed)
        logger.info(
            "Composed %s from %d documents (%d chars, %.1fms)",
            prompt_id, len(emitted), len(text), elapsed,
            extra={"document": prompt.path},
        )

        return ComposedContext(
            prompt_id=prompt_id,
            text=text,
            sources=[
                {"path": d.path, "kind": d.kind.value, "doc_id": d.doc_id}
                for d in emitted
            ],
            unresolved=unresolved,
            char_count=len(text),
        )
