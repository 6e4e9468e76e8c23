# Copyright (c) 2026 promptloom Contributors. All Rights Reserved.

"""
Domain errors raised by the loader, resolver and composer.

Every error carries a machine-readable ``code`` and a ``details`` dict so the
CLI and the HTTP layer can report it without string parsing.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional


class LoomError(Exception):
    """Base class for all promptloom errors."""

    code = "LOOM_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class FrontMatterError(LoomError):
    """Raised when a YAML front-matter block is unterminated or invalid."""

    code = "FRONT_MATTER_INVALID"

    def __init__(self, message: str, line: Optional[int] = None, path: Optional[str] = None):
        self.line = line
        self.path = path
        details: Dict[str, Any] = {}
        if line is not None:
            details["line"] = line
        if path is not None:
            details["path"] = path
        super().__init__(message, details)


class DocumentTooLargeError(LoomError):
    code = "DOCUMENT_TOO_LARGE"

    def __init__(self, path: str, size: int, limit: int):
        super().__init__(
            f"Document '{path}' is {size} bytes, limit is {limit}",
            {"path": path, "size": size, "limit": limit},
        )


class DocumentReadError(LoomError):
    """The file exists but could not be read."""

    code = "READ_FAILED"

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot read '{path}': {reason}", {"path": path, "reason": reason})


class DocumentOutsideRootError(LoomError):
    """A symlink inside the corpus points at a file outside it."""

    code = "OUTSIDE_ROOT"

    def __init__(self, path: str, target: str):
        super().__init__(
            f"'{path}' links to '{target}', which is outside the corpus root",
            {"path": path, "target": target},
        )


class DocumentNotFoundError(LoomError):
    code = "DOCUMENT_NOT_FOUND"

    def __init__(self, kind: str, doc_id: str):
        self.kind = kind
        self.doc_id = doc_id
        super().__init__(
            f"No {kind} document with id '{doc_id}'",
            {"kind": kind, "doc_id": doc_id},
        )


class ReferenceNotFoundError(LoomError):
    """A referenced file does not exist in the corpus."""

    code = "REFERENCE_NOT_FOUND"

    def __init__(self, target: str, source: str, tried: Optional[List[str]] = None):
        self.target = target
        self.source = source
        self.tried = tried or []
        super().__init__(
            f"Reference '{target}' in '{source}' does not resolve",
            {"target": target, "source": source, "tried": self.tried},
        )


class PersonaNotFoundError(LoomError):
    code = "PERSONA_NOT_FOUND"

    def __init__(self, mode: str, source: str):
        self.mode = mode
        self.source = source
        super().__init__(
            f"Persona '{mode}' named by '{source}' does not exist",
            {"mode": mode, "source": source},
        )


class UnresolvedPlaceholderError(LoomError):
    code = "UNRESOLVED_PLACEHOLDER"

    def __init__(self, prompt_id: str, names: Iterable[str]):
        self.names = list(names)
        super().__init__(
            f"Prompt '{prompt_id}' has unresolved placeholders: {', '.join(self.names)}",
            {"prompt_id": prompt_id, "placeholders": self.names},
        )


class EmptyContextError(LoomError):
    code = "EMPTY_CONTEXT"

    def __init__(self, prompt_id: str):
        super().__init__(
            f"Composing '{prompt_id}' produced an empty context",
            {"prompt_id": prompt_id},
        )
