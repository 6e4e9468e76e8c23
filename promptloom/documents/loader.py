# Copyright (c) 2026 promptloom Contributors. All Rights Reserved.

"""
Document Loader — Build typed documents from markdown files.

Kind is decided by filename convention (``*.chatmode.md``,
``*.instructions.md``, ``*.prompt.md``, anything else is a reference).
Loading never follows references; it only records them so the resolver and
linter can check them later.
"""

from __future__ import annotations

import re
from pathlib import Path, PurePosixPath
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from promptloom.core.errors import (
    DocumentOutsideRootError,
    DocumentTooLargeError,
    FrontMatterError,
)
from promptloom.documents.frontmatter import parse_front_matter
from promptloom.documents.models import (
    KIND_SUFFIXES,
    Document,
    DocumentKind,
    DocumentReference,
    InstructionDocument,
    PersonaDocument,
    PromptDocument,
    ReferenceDocument,
)

FILE_MARKER_RE = re.compile(r"#file:([^\s`)\],;]+)")
LINK_RE = re.compile(r"(?<!!)\[[^\]]*\]\(\s*<?([^)\s>]+)>?(?:\s+\"[^\"]*\")?\s*\)")
SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")
FENCE_RE = re.compile(r"^\s*(```|~~~)")
BULLET_RE = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+(.+)$")
HEADING_RE = re.compile(r"^(#{1,6})\s+(.+?)\s*#*\s*$")

# `${{ expr }}` is a GitHub Actions expression, not a placeholder
MUSTACHE_RE = re.compile(r"(?<!\$)\{\{\s*([A-Za-z_][\w-]*)\s*\}\}")
INPUT_VAR_RE = re.compile(r"\$\{input:([A-Za-z_][\w-]*)(?::[^}]*)?\}")


# ── Classification ──────────────────────────────────────────

def classify(path: str | Path) -> DocumentKind:
    """Return the document kind implied by a file name."""
    name = PurePosixPath(str(path).replace("\\", "/")).name.lower()
    for suffix, kind in KIND_SUFFIXES.items():
        if name.endswith(suffix):
            return kind
    return DocumentKind.REFERENCE


def doc_id_for(path: str | Path) -> str:
    """``security-review.chatmode.md`` → ``security-review``."""
    name = PurePosixPath(str(path).replace("\\", "/")).name
    lower = name.lower()
    for suffix in KIND_SUFFIXES:
        if lower.endswith(suffix):
            return name[: -len(suffix)]
    if lower.endswith(".md"):
        return name[:-3]
    return name


# ── Body scanning ───────────────────────────────────────────

def _prose_mask(lines: List[str]) -> List[bool]:
    """True for each line outside a fenced code block (fence lines are False)."""
    mask: List[bool] = []
    fence: Optional[str] = None
    for line in lines:
        m = FENCE_RE.match(line)
        if m:
            if fence is None:
                fence = m.group(1)
            elif m.group(1) == fence:
                fence = None
            mask.append(False)
            continue
        mask.append(fence is None)
    return mask


def _iter_prose_lines(body: str) -> Iterator[Tuple[int, str]]:
    """Yield (1-based line, text) for lines outside fenced code blocks."""
    lines = body.splitlines()
    for lineno, (line, prose) in enumerate(zip(lines, _prose_mask(lines)), start=1):
        if prose:
            yield lineno, line


def map_prose_lines(body: str, fn: Callable[[str], str]) -> str:
    """Apply ``fn`` to every line outside fenced code, leaving fences untouched."""
    lines = body.split("\n")
    return "\n".join(
        fn(line) if prose else line
        for line, prose in zip(lines, _prose_mask(lines))
    )


def _fenced_blocks(body: str) -> List[str]:
    blocks: List[str] = []
    fence: Optional[str] = None
    current: List[str] = []
    for line in body.splitlines():
        m = FENCE_RE.match(line)
        if m and fence is None:
            fence = m.group(1)
            current = []
            continue
        if m and m.group(1) == fence:
            blocks.append("\n".join(current))
            fence = None
            continue
        if fence is not None:
            current.append(line)
    return blocks


def _matches(body: str, regex: re.Pattern, group: int) -> List[str]:
    found: List[str] = []
    for _, line in _iter_prose_lines(body):
        m = regex.match(line)
        if m:
            found.append(m.group(group).strip())
    return found


def _link_target(raw: str) -> Optional[str]:
    """Return the local .md path a markdown link points at, if any."""
    if raw.startswith("#") or SCHEME_RE.match(raw):
        return None
    target = raw.split("#", 1)[0].split("?", 1)[0]
    if not target.lower().endswith(".md"):
        return None
    return target


def extract_references(
    body: str,
    front_matter: Optional[Dict[str, Any]] = None,
    line_offset: int = 0,
) -> List[DocumentReference]:
    """
    Collect ``#file:`` markers, relative .md links and front-matter
    ``references`` / ``instructions`` entries, in order of appearance.
    """
    refs: List[DocumentReference] = []

    for key in ("references", "instructions"):
        value = (front_matter or {}).get(key)
        if isinstance(value, str):
            value = [value]
        if isinstance(value, list):
            for item in value:
                if isinstance(item, str) and item.strip():
                    refs.append(DocumentReference(
                        target=item.strip(), marker="front_matter", line=0,
                    ))

    for lineno, line in _iter_prose_lines(body):
        for m in FILE_MARKER_RE.finditer(line):
            target = m.group(1).rstrip(".")
            if target:
                refs.append(DocumentReference(
                    target=target, marker="file", line=lineno + line_offset,
                ))
        for m in LINK_RE.finditer(line):
            target = _link_target(m.group(1))
            if target:
                refs.append(DocumentReference(
                    target=target, marker="link", line=lineno + line_offset,
                ))
    return refs


def extract_placeholders(text: str) -> List[str]:
    """
    Placeholder names (``{{ name }}`` or ``${input:name}``), first-seen order.

    Fenced code is skipped: quoted Helm, Go or Actions templates are content.
    """
    found: List[Tuple[int, int, str]] = []
    for lineno, line in _iter_prose_lines(text):
        for regex in (MUSTACHE_RE, INPUT_VAR_RE):
            found.extend((lineno, m.start(), m.group(1)) for m in regex.finditer(line))
    names: List[str] = []
    for _, _, name in sorted(found):
        if name not in names:
            names.append(name)
    return names


def split_patterns(value: str) -> List[str]:
    """Split a comma-separated ``applyTo`` value, keeping ``{a,b}`` groups intact."""
    patterns: List[str] = []
    depth = 0
    current = ""
    for ch in value:
        if ch == "{":
            depth += 1
        elif ch == "}" and depth:
            depth -= 1
        if ch == "," and depth == 0:
            if current.strip():
                patterns.append(current.strip())
            current = ""
            continue
        current += ch
    if current.strip():
        patterns.append(current.strip())
    return patterns


# ── Field helpers ───────────────────────────────────────────

def _str_field(meta: Dict[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = meta.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _str_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    if isinstance(value, list):
        return [v for v in value if isinstance(v, str)]
    return []


def _apply_to(value: Any) -> List[str]:
    if isinstance(value, str):
        return split_patterns(value)
    if isinstance(value, list):
        patterns: List[str] = []
        for item in value:
            if isinstance(item, str):
                patterns.extend(split_patterns(item))
        return patterns
    return []


# ── Loading ─────────────────────────────────────────────────

def load_document_from_string(text: str, rel_path: str) -> Document:
    """Build a typed document from file content and its corpus-relative path."""
    rel_path = str(rel_path).replace("\\", "/")
    try:
        meta, body, present = parse_front_matter(text)
    except FrontMatterError as e:
        e.path = rel_path
        e.details["path"] = rel_path
        raise

    # body is always a suffix of text; lines before it belong to front matter
    offset = text[: len(text) - len(body)].count("\n")
    kind = classify(rel_path)
    common = dict(
        doc_id=doc_id_for(rel_path),
        path=rel_path,
        front_matter=meta,
        body=body,
        has_front_matter=present,
        description=_str_field(meta, "description") or "",
        references=extract_references(body, meta, offset),
    )

    if kind is DocumentKind.PERSONA:
        return PersonaDocument(
            **common,
            tools=_str_list(meta.get("tools")),
            model=_str_field(meta, "model"),
            directives=_matches(body, BULLET_RE, 1),
            output_templates=_fenced_blocks(body),
        )
    if kind is DocumentKind.INSTRUCTION:
        return InstructionDocument(**common, apply_to=_apply_to(meta.get("applyTo")))
    if kind is DocumentKind.PROMPT:
        return PromptDocument(
            **common,
            mode=_str_field(meta, "mode", "chatmode"),
            tools=_str_list(meta.get("tools")),
            placeholders=extract_placeholders(body),
        )
    return ReferenceDocument(
        **common,
        headings=_matches(body, HEADING_RE, 2),
    )


def load_document(
    path: str | Path,
    root: str | Path,
    max_bytes: Optional[int] = None,
    rel_path: Optional[str] = None,
) -> Document:
    """
    Read ``path`` (inside ``root``) and return its typed document.

    The document is keyed by ``rel_path``, the path it was found under, so a
    symlink keeps its own name. A link whose target leaves ``root`` raises
    ``DocumentOutsideRootError``.
    """
    path = Path(path)
    root = Path(root)
    if rel_path is None:
        rel_path = path.absolute().relative_to(root.absolute()).as_posix()
    target = path.resolve()
    if not target.is_relative_to(root.resolve()):
        raise DocumentOutsideRootError(rel_path, str(target))
    if max_bytes is not None:
        size = path.stat().st_size
        if size > max_bytes:
            raise DocumentTooLargeError(rel_path, size, max_bytes)
    text = path.read_text(encoding="utf-8")
    return load_document_from_string(text, rel_path)
