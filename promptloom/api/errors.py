# Copyright (c) 2026 promptloom Contributors. All Rights Reserved.

"""
API Error Handling — Unified error structure.
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from promptloom.core.errors import LoomError

# LoomError code → HTTP status. Unlisted codes map to 400.
STATUS_BY_CODE: Dict[str, int] = {
    "DOCUMENT_NOT_FOUND": 404,
    "REFERENCE_NOT_FOUND": 422,
    "PERSONA_NOT_FOUND": 422,
    "UNRESOLVED_PLACEHOLDER": 422,
    "EMPTY_CONTEXT": 422,
    "FRONT_MATTER_INVALID": 422,
    "DOCUMENT_TOO_LARGE": 422,
    "READ_FAILED": 422,
    "OUTSIDE_ROOT": 422,
}


class APIError(Exception):
    """Base API error with structured response."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None,
        trace_id: Optional[str] = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.trace_id = trace_id or str(uuid.uuid4())
        super().__init__(message)


class InvalidKindAPIError(APIError):
    def __init__(self, kind: str, trace_id: str = None):
        super().__init__(
            code="INVALID_KIND",
            message=f"Unknown document kind '{kind}'",
            status_code=400,
            details={"kind": kind},
            trace_id=trace_id,
        )


def _body(code: str, message: str, trace_id: str, details: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "code": code,
        "message": message,
        "trace_id": trace_id,
        "details": details,
    }


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Global exception handler for APIError."""
    trace_id = getattr(request.state, "trace_id", None) or exc.trace_id
    return JSONResponse(
        status_code=exc.status_code,
        content=_body(exc.code, exc.message, trace_id, exc.details),
    )


async def loom_error_handler(request: Request, exc: LoomError) -> JSONResponse:
    """Map domain errors raised inside routes onto the same structure."""
    trace_id = getattr(request.state, "trace_id", None) or str(uuid.uuid4())
    return JSONResponse(
        status_code=STATUS_BY_CODE.get(exc.code, 400),
        content=_body(exc.code, exc.message, trace_id, exc.details),
    )
