# Copyright (c) 2026 promptloom Contributors. All Rights Reserved.

"""
Corpus Linter — Structural checks over a catalog.

Returns a list of findings (empty = clean). Checks:
  1. every file loaded (front matter closed, valid YAML mapping)
  2. personas, instructions and prompts carry front matter
  3. ... with a non-empty string ``description``
  4. instructions carry a non-empty string ``applyTo``
  5. ``tools`` is a list of strings; scalar keys are strings
  6. every reference in every document resolves
  7. a prompt's ``mode`` names a persona or a host built-in mode
  8. no two files share a (kind, id)
  9. no document has an empty body
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional

from promptloom.core.errors import LoomError, PersonaNotFoundError, ReferenceNotFoundError
from promptloom.core.metrics import loom_metrics
from promptloom.documents.models import FRONT_MATTER_KINDS, Document, DocumentKind, PromptDocument
from promptloom.kernel.catalog import DocumentCatalog
from promptloom.kernel.resolver import ReferenceResolver

logger = logging.getLogger("loom.linter")

ERROR = "error"
WARNING = "warning"

RULES: Dict[str, str] = {
    "LOAD_FAILED": ERROR,
    "MISSING_FRONT_MATTER": ERROR,
    "MISSING_DESCRIPTION": ERROR,
    "MISSING_APPLY_TO": ERROR,
    "INVALID_TOOLS": ERROR,
    "INVALID_FIELD_TYPE": ERROR,
    "DANGLING_REFERENCE": ERROR,
    "UNKNOWN_PERSONA": ERROR,
    "DUPLICATE_ID": WARNING,
    "EMPTY_BODY": WARNING,
}

STRING_FIELDS = ("description", "applyTo", "mode", "chatmode", "model")


@dataclass
class LintFinding:
    code: str
    path: str
    message: str
    line: int = 0

    @property
    def severity(self) -> str:
        return RULES.get(self.code, ERROR)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["severity"] = self.severity
        return data

    def __str__(self) -> str:
        loc = f"{self.path}:{self.line}" if self.line else self.path
        return f"{loc}: {self.severity} {self.code} {self.message}"


def _check_front_matter(doc: Document) -> List[LintFinding]:
    findings: List[LintFinding] = []
    meta = doc.front_matter

    if doc.kind in FRONT_MATTER_KINDS and not doc.has_front_matter:
        findings.append(LintFinding(
            "MISSING_FRONT_MATTER", doc.path,
            f"{doc.kind.value} document has no front matter block", 1,
        ))

    for key in STRING_FIELDS:
        if key in meta and meta[key] is not None and not isinstance(meta[key], str):
            findings.append(LintFinding(
                "INVALID_FIELD_TYPE", doc.path,
                f"'{key}' must be a string, got {type(meta[key]).__name__}",
            ))

    if doc.kind in FRONT_MATTER_KINDS and not doc.description:
        findings.append(LintFinding(
            "MISSING_DESCRIPTION", doc.path,
            "front matter has no non-empty 'description'",
        ))

    if doc.kind is DocumentKind.INSTRUCTION:
        apply_to = meta.get("applyTo")
        if not isinstance(apply_to, str) or not apply_to.strip():
            findings.append(LintFinding(
                "MISSING_APPLY_TO", doc.path,
                "instruction front matter has no non-empty 'applyTo'",
            ))

    if "tools" in meta:
        tools = meta["tools"]
        if not isinstance(tools, list) or not all(isinstance(t, str) for t in tools):
            findings.append(LintFinding(
                "INVALID_TOOLS", doc.path, "'tools' must be a list of strings",
            ))

    return findings


def _check_references(doc: Document, resolver: ReferenceResolver) -> List[LintFinding]:
    findings: List[LintFinding] = []
    for ref in doc.references:
        try:
            resolver.resolve_reference(ref, doc.path)
        except ReferenceNotFoundError as e:
            findings.append(LintFinding(
                "DANGLING_REFERENCE", doc.path,
                f"'{ref.target}' not found (tried {', '.join(e.tried) or 'nothing'})",
                ref.line,
            ))
        except LoomError as e:
            findings.append(LintFinding("LOAD_FAILED", doc.path, e.message, ref.line))
    return findings


def _check_persona(doc: PromptDocument, resolver: ReferenceResolver) -> List[LintFinding]:
    if not doc.mode or resolver.is_builtin_mode(doc.mode):
        return []
    try:
        resolver.resolve_persona(doc.mode, doc.path)
    except PersonaNotFoundError:
        return [LintFinding(
            "UNKNOWN_PERSONA", doc.path, f"mode '{doc.mode}' names no persona document",
        )]
    return []


def _rel(path: str) -> str:
    path = path.replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    return path


def lint_catalog(
    catalog: DocumentCatalog,
    resolver: Optional[ReferenceResolver] = None,
    disabled: Iterable[str] = (),
    paths: Optional[Iterable[str]] = None,
) -> List[LintFinding]:
    """Run every enabled rule over the catalog, optionally limited to ``paths``."""
    resolver = resolver or ReferenceResolver(catalog)
    disabled = {d.upper() for d in disabled}
    findings: List[LintFinding] = []

    for failure in catalog.failures:
        findings.append(LintFinding(
            "LOAD_FAILED", failure.path, failure.message, failure.line or 0,
        ))

    for dup in catalog.duplicates:
        findings.append(LintFinding(
            "DUPLICATE_ID", dup.ignored,
            f"{dup.kind.value} id '{dup.doc_id}' already defined by {dup.kept}",
        ))

    for doc in catalog.list():
        findings.extend(_check_front_matter(doc))
        findings.extend(_check_references(doc, resolver))
        if isinstance(doc, PromptDocument):
            findings.extend(_check_persona(doc, resolver))
        if not doc.body.strip():
            findings.append(LintFinding("EMPTY_BODY", doc.path, "document body is empty"))

    if paths is not None:
        wanted = {_rel(p) for p in paths}
        findings = [f for f in findings if f.path in wanted]

    findings = [f for f in findings if f.code not in disabled]
    findings.sort(key=lambda f: (f.path, f.line, f.code))

    loom_metrics.inc("lint_runs")
    loom_metrics.set_gauge("lint_findings", len(findings))
    logger.info("Lint finished: %d findings over %d documents", len(findings), len(catalog))
    return findings


def has_errors(findings: Iterable[LintFinding], warnings_as_errors: bool = False) -> bool:
    for f in findings:
        if f.severity == ERROR or warnings_as_errors:
            return True
    return False


def lint_paths(
    catalog: DocumentCatalog,
    paths: Iterable[str],
    resolver: Optional[ReferenceResolver] = None,
    disabled: Iterable[str] = (),
) -> List[LintFinding]:
    """Findings for the given corpus-relative files only."""
    return lint_catalog(catalog, resolver, disabled=disabled, paths=list(paths))
