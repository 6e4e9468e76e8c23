# Copyright (c) 2026 promptloom Contributors. All Rights Reserved.

"""
Document models — typed views over markdown files with YAML front matter.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class DocumentKind(str, Enum):
    PERSONA = "persona"
    INSTRUCTION = "instruction"
    PROMPT = "prompt"
    REFERENCE = "reference"


# File suffix → kind. Anything else ending in .md is a reference document.
KIND_SUFFIXES: Dict[str, DocumentKind] = {
    ".chatmode.md": DocumentKind.PERSONA,
    ".instructions.md": DocumentKind.INSTRUCTION,
    ".prompt.md": DocumentKind.PROMPT,
}

# Kinds that are expected to carry front matter.
FRONT_MATTER_KINDS = (
    DocumentKind.PERSONA,
    DocumentKind.INSTRUCTION,
    DocumentKind.PROMPT,
)


class DocumentReference(BaseModel):
    """A pointer from one document to another file, as written."""

    target: str
    marker: str  # "file" | "link" | "front_matter"
    line: int = 0


class Document(BaseModel):
    doc_id: str
    kind: DocumentKind
    path: str
    front_matter: Dict[str, Any] = Field(default_factory=dict)
    body: str = ""
    has_front_matter: bool = False
    description: str = ""
    references: List[DocumentReference] = Field(default_factory=list)

    def summary(self) -> Dict[str, Any]:
        return {
            "doc_id": self.doc_id,
            "kind": self.kind.value,
            "path": self.path,
            "description": self.description,
        }


class PersonaDocument(Document):
    kind: DocumentKind = DocumentKind.PERSONA
    tools: List[str] = Field(default_factory=list)
    model: Optional[str] = None
    directives: List[str] = Field(default_factory=list)
    output_templates: List[str] = Field(default_factory=list)


class InstructionDocument(Document):
    kind: DocumentKind = DocumentKind.INSTRUCTION
    apply_to: List[str] = Field(default_factory=list)


class PromptDocument(Document):
    kind: DocumentKind = DocumentKind.PROMPT
    mode: Optional[str] = None
    tools: List[str] = Field(default_factory=list)
    placeholders: List[str] = Field(default_factory=list)


class ReferenceDocument(Document):
    kind: DocumentKind = DocumentKind.REFERENCE
    headings: List[str] = Field(default_factory=list)
