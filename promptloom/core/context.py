# Copyright (c) 2026 promptloom Contributors. All Rights Reserved.

"""
Loom Context — Holds the catalog, resolver and composer for one corpus.

Initialized at startup (service lifespan or CLI entry), looked up by API
routes through get_loom_context().
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from promptloom.core.config import LoomSettings, get_settings
from promptloom.kernel.catalog import DocumentCatalog
from promptloom.kernel.composer import ContextComposer
from promptloom.kernel.linter import LintFinding, lint_catalog, lint_paths
from promptloom.kernel.resolver import ReferenceResolver


class LoomContext:
    """All runtime references for one corpus root."""

    def __init__(self, root: str | Path, settings: Optional[LoomSettings] = None) -> None:
        self.settings = settings or get_settings()
        self.catalog = DocumentCatalog(
            root,
            exclude_dirs=self.settings.exclude_dirs_list,
            max_bytes=self.settings.MAX_DOCUMENT_BYTES,
        )
        self.resolver = ReferenceResolver(
            self.catalog,
            max_depth=self.settings.MAX_REFERENCE_DEPTH,
            builtin_modes=self.settings.builtin_modes_list,
            max_bytes=self.settings.MAX_DOCUMENT_BYTES,
        )
        self.composer = ContextComposer(self.resolver)

    @property
    def root(self) -> Path:
        return self.catalog.root

    def scan(self) -> "LoomContext":
        self.catalog.scan()
        return self

    def reload(self) -> "LoomContext":
        self.catalog.reload()
        return self

    def lint(self, paths: Optional[List[str]] = None) -> List[LintFinding]:
        if paths:
            return lint_paths(
                self.catalog,
                paths,
                self.resolver,
                disabled=self.settings.disabled_rules_list,
            )
        return lint_catalog(
            self.catalog,
            self.resolver,
            disabled=self.settings.disabled_rules_list,
        )


# ── Global singleton ────────────────────────────────────────

_ctx: Optional[LoomContext] = None


def init_loom_context(root: str | Path, settings: Optional[LoomSettings] = None) -> LoomContext:
    global _ctx
    _ctx = LoomContext(root, settings).scan()
    return _ctx


def get_loom_context() -> LoomContext:
    if _ctx is None:
        raise RuntimeError("LoomContext not initialized. Call init_loom_context() first.")
    return _ctx
