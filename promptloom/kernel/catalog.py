# Copyright (c) 2026 promptloom Contributors. All Rights Reserved.

"""
Document Catalog — In-memory index of every document in a corpus tree.

The catalog is a snapshot: ``scan()`` walks the tree once, and ``reload()``
builds a new snapshot and swaps it in. Files that fail to load are kept
as ``LoadFailure`` entries rather than aborting the scan.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from promptloom.core.errors import LoomError
from promptloom.core.metrics import loom_metrics
from promptloom.documents.loader import load_document
from promptloom.documents.models import Document, DocumentKind

logger = logging.getLogger("loom.catalog")

# Hidden directories that still hold documents (VS Code's .github layout).
VISIBLE_HIDDEN_DIRS = {".github"}


@dataclass
class LoadFailure:
    """A file that exists in the tree but could not be turned into a document."""

    path: str
    code: str
    message: str
    line: Optional[int] = None


@dataclass
class DuplicateEntry:
    kind: DocumentKind
    doc_id: str
    kept: str
    ignored: str


class DocumentCatalog:
    """Index of documents by (kind, id) and by corpus-relative path."""

    def __init__(
        self,
        root: str | Path,
        exclude_dirs: Iterable[str] = (),
        max_bytes: Optional[int] = None,
    ) -> None:
        self.root = Path(root).resolve()
        self._exclude_dirs = set(exclude_dirs)
        self._max_bytes = max_bytes
        self._by_key: Dict[Tuple[DocumentKind, str], Document] = {}
        self._by_path: Dict[str, Document] = {}
        self.failures: List[LoadFailure] = []
        self.duplicates: List[DuplicateEntry] = []
        self.all_paths: List[str] = []

    # ── Scanning ────────────────────────────────────────────────

    def _walk(self) -> List[Path]:
        found: List[Path] = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(
                d for d in dirnames
                if d not in self._exclude_dirs
                and (not d.startswith(".") or d in VISIBLE_HIDDEN_DIRS)
            )
            for name in sorted(filenames):
                if name.lower().endswith(".md"):
                    found.append(Path(dirpath) / name)
        return found

    def scan(self) -> "DocumentCatalog":
        if not self.root.is_dir():
            raise LoomError(
                f"Corpus root '{self.root}' is not a directory",
                {"root": str(self.root)},
            )

        for path in sorted(self._walk(), key=lambda p: p.relative_to(self.root).as_posix()):
            rel_path = path.relative_to(self.root).as_posix()
            self.all_paths.append(rel_path)
            try:
                doc = load_document(path, self.root, self._max_bytes, rel_path=rel_path)
            except LoomError as e:
                self._record_failure(rel_path, e.code, e.message, e.details.get("line"))
                continue
            except (OSError, UnicodeDecodeError) as e:
                self._record_failure(rel_path, "READ_FAILED", str(e))
                continue
            self.add(doc)

        loom_metrics.set_gauge("documents_indexed", len(self._by_path))
        logger.info(
            "Scanned %s: %d documents, %d failures",
            self.root, len(self._by_path), len(self.failures),
        )
        return self

    def reload(self) -> "DocumentCatalog":
        """
        Scan into a fresh snapshot and swap it in.

        If the scan raises, the current snapshot is left untouched.
        """
        fresh = DocumentCatalog(self.root, self._exclude_dirs, self._max_bytes).scan()
        self._by_key = fresh._by_key
        self._by_path = fresh._by_path
        self.failures = fresh.failures
        self.duplicates = fresh.duplicates
        self.all_paths = fresh.all_paths
        loom_metrics.inc("catalog_reloads")
        return self

    @property
    def max_bytes(self) -> Optional[int]:
        return self._max_bytes

    def _record_failure(self, rel_path: str, code: str, message: str, line: Optional[int] = None) -> None:
        self.failures.append(LoadFailure(path=rel_path, code=code, message=message, line=line))
        loom_metrics.inc("documents_failed")
        logger.warning("Failed to load %s: %s", rel_path, message, extra={"document": rel_path})

    # ── Registration ────────────────────────────────────────────

    def add(self, doc: Document) -> None:
        """Index a document. On an id clash the earlier path wins."""
        self._by_path[doc.path] = doc
        key = (doc.kind, doc.doc_id)
        existing = self._by_key.get(key)
        if existing is not None and existing.path != doc.path:
            self.duplicates.append(DuplicateEntry(
                kind=doc.kind, doc_id=doc.doc_id, kept=existing.path, ignored=doc.path,
            ))
            logger.warning(
                "Duplicate %s id '%s': keeping %s, ignoring %s",
                doc.kind.value, doc.doc_id, existing.path, doc.path,
            )
        else:
            self._by_key[key] = doc
        loom_metrics.inc("documents_loaded")

    # ── Lookup ──────────────────────────────────────────────────

    def get(self, kind: DocumentKind | str, doc_id: str) -> Optional[Document]:
        return self._by_key.get((DocumentKind(kind), doc_id))

    def get_by_path(self, rel_path: str) -> Optional[Document]:
        return self._by_path.get(rel_path)

    def list(self, kind: Optional[DocumentKind | str] = None) -> List[Document]:
        """All documents (sorted by path), optionally filtered by kind."""
        docs = sorted(self._by_path.values(), key=lambda d: d.path)
        if kind is not None:
            kind = DocumentKind(kind)
            docs = [d for d in docs if d.kind is kind]
        return docs

    def __contains__(self, rel_path: str) -> bool:
        return rel_path in self._by_path

    def __len__(self) -> int:
        return len(self._by_path)
