# Copyright (c) 2026 promptloom Contributors. All Rights Reserved.

"""
Reference Resolver — Follow a prompt's references through the catalog.

Path lookup order for a reference written in ``prompts/a.prompt.md``:

  1. relative to the referencing file's directory (``prompts/``)
  2. relative to the corpus root

A leading ``/`` means "from the corpus root". Paths that climb out of the
root are never resolved. References to non-markdown files (``values.yaml``,
a Dockerfile) resolve to an attachment: a reference document whose body is
the raw file content.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Set

from promptloom.core.errors import (
    DocumentOutsideRootError,
    DocumentReadError,
    DocumentTooLargeError,
    LoomError,
    PersonaNotFoundError,
    ReferenceNotFoundError,
)
from promptloom.documents.models import (
    Document,
    DocumentKind,
    DocumentReference,
    InstructionDocument,
    PersonaDocument,
    PromptDocument,
    ReferenceDocument,
)
from promptloom.kernel.catalog import DocumentCatalog
from promptloom.kernel.globs import any_match

logger = logging.getLogger("loom.resolver")

DEFAULT_MAX_DEPTH = 8
DEFAULT_BUILTIN_MODES = ("ask", "edit", "agent")


@dataclass
class Resolution:
    """Everything a prompt pulls in, in composition order."""

    prompt: PromptDocument
    persona: Optional[PersonaDocument] = None
    instructions: List[InstructionDocument] = field(default_factory=list)
    matched_instructions: List[InstructionDocument] = field(default_factory=list)
    references: List[Document] = field(default_factory=list)
    errors: List[LoomError] = field(default_factory=list)

    def documents(self) -> List[Document]:
        """persona → referenced instructions → applyTo matches → references."""
        docs: List[Document] = []
        if self.persona is not None:
            docs.append(self.persona)
        docs.extend(self.instructions)
        docs.extend(self.matched_instructions)
        docs.extend(self.references)
        return docs


def _normalize(path: str) -> Optional[str]:
    """Collapse ``.``/``..``; None when the path leaves the corpus root."""
    norm = posixpath.normpath(path)
    if norm == ".." or norm.startswith("../") or norm.startswith("/"):
        return None
    return norm


class ReferenceResolver:
    """Resolves reference targets, personas and applyTo scopes against a catalog."""

    def __init__(
        self,
        catalog: DocumentCatalog,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        builtin_modes: Iterable[str] = DEFAULT_BUILTIN_MODES,
        max_bytes: Optional[int] = None,
    ) -> None:
        self.catalog = catalog
        self.max_bytes = max_bytes if max_bytes is not None else catalog.max_bytes
        self.max_depth = max_depth
        self.builtin_modes = set(builtin_modes)

    # ── Single references ───────────────────────────────────────

    def candidates(self, target: str, source_path: str) -> List[str]:
        """Corpus-relative paths tried for ``target``, in lookup order."""
        target = target.strip().replace("\\", "/")
        if target.startswith("/"):
            raw = [target.lstrip("/")]
        else:
            raw = [posixpath.join(posixpath.dirname(source_path), target), target]

        tried: List[str] = []
        for candidate in raw:
            norm = _normalize(candidate)
            if norm is not None and norm not in tried:
                tried.append(norm)
        return tried

    def resolve_path(self, target: str, source_path: str) -> Document:
        tried = self.candidates(target, source_path)
        for rel_path in tried:
            doc = self.catalog.get_by_path(rel_path)
            if doc is not None:
                return doc
            attachment = self._attachment(rel_path)
            if attachment is not None:
                return attachment
        raise ReferenceNotFoundError(target, source_path, tried)

    def resolve_reference(self, ref: DocumentReference, source_path: str) -> Document:
        """Resolve one reference; front-matter entries may also name an instruction id."""
        target = ref.target
        if ref.marker == "front_matter" and "/" not in target and not target.lower().endswith(".md"):
            doc = self.catalog.get(DocumentKind.INSTRUCTION, target)
            if doc is not None:
                return doc
        return self.resolve_path(target, source_path)

    def _attachment(self, rel_path: str) -> Optional[ReferenceDocument]:
        if rel_path.lower().endswith(".md"):
            return None
        path = self.catalog.root / rel_path
        if not path.is_file():
            return None
        if not path.resolve().is_relative_to(self.catalog.root):
            raise DocumentOutsideRootError(rel_path, str(path.resolve()))
        try:
            size = path.stat().st_size
            if self.max_bytes is not None and size > self.max_bytes:
                raise DocumentTooLargeError(rel_path, size, self.max_bytes)
            body = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise DocumentReadError(rel_path, e.strerror or str(e)) from e
        return ReferenceDocument(doc_id=Path(rel_path).name, path=rel_path, body=body)

    def resolve_persona(self, mode: str, source_path: str) -> PersonaDocument:
        if mode.lower().endswith(".md") or "/" in mode:
            try:
                doc = self.resolve_path(mode, source_path)
            except ReferenceNotFoundError:
                doc = None
        else:
            doc = self.catalog.get(DocumentKind.PERSONA, mode)
        if not isinstance(doc, PersonaDocument):
            raise PersonaNotFoundError(mode, source_path)
        return doc

    def is_builtin_mode(self, mode: Optional[str]) -> bool:
        return mode is not None and mode in self.builtin_modes

    # ── Scope matching ──────────────────────────────────────────

    def matching_instructions(self, targets: Iterable[str]) -> List[InstructionDocument]:
        """Instructions whose applyTo matches any target, sorted by path."""
        targets = [t.replace("\\", "/") for t in targets]
        if not targets:
            return []
        matched: List[InstructionDocument] = []
        for doc in self.catalog.list(DocumentKind.INSTRUCTION):
            if doc.apply_to and any(any_match(doc.apply_to, t) for t in targets):
                matched.append(doc)
        return matched

    # ── Whole prompts ───────────────────────────────────────────

    def resolve_prompt(
        self,
        prompt: PromptDocument,
        targets: Iterable[str] = (),
        strict: bool = True,
    ) -> Resolution:
        """
        Resolve a prompt's persona, instructions and references.

        With strict=True the first failure is raised; otherwise failures are
        collected in ``Resolution.errors`` and resolution continues.
        """
        res = Resolution(prompt=prompt)

        def fail(err: LoomError) -> None:
            if strict:
                raise err
            res.errors.append(err)

        if prompt.mode and not self.is_builtin_mode(prompt.mode):
            try:
                res.persona = self.resolve_persona(prompt.mode, prompt.path)
            except PersonaNotFoundError as e:
                fail(e)

        seen: Set[str] = {prompt.path}
        if res.persona is not None:
            seen.add(res.persona.path)

        def visit(doc: Document, depth: int) -> None:
            for ref in doc.references:
                try:
                    target = self.resolve_reference(ref, doc.path)
                except LoomError as e:
                    fail(e)
                    continue
                if target.path in seen:
                    continue
                seen.add(target.path)

                if isinstance(target, InstructionDocument):
                    res.instructions.append(target)
                elif isinstance(target, PersonaDocument) and res.persona is None:
                    res.persona = target
                else:
                    res.references.append(target)

                if depth < self.max_depth:
                    visit(target, depth + 1)
                else:
                    logger.debug("Reference depth limit hit at %s", target.path)

        visit(prompt, 1)

        for doc in self.matching_instructions(targets):
            if doc.path not in seen:
                seen.add(doc.path)
                res.matched_instructions.append(doc)

        return res
