# Copyright (c) 2026 promptloom Contributors. All Rights Reserved.

"""
Front matter — split and parse the YAML block at the top of a markdown file.

A block opens with a ``---`` line at the very start of the file and closes at
the next line that is exactly ``---`` or ``...``. Unlike a lenient
``str.split("---")`` this never mistakes a horizontal rule in the body for
the closing delimiter.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import yaml

from promptloom.core.errors import FrontMatterError

OPEN_DELIMITER = "---"
CLOSE_DELIMITERS = ("---", "...")
BOM = "\ufeff"


def split_front_matter(text: str) -> Tuple[Optional[str], str]:
    """
    Split ``text`` into (yaml_text, body).

    yaml_text is None when the file has no front matter.
    """
    if text.startswith(BOM):
        text = text[len(BOM):]

    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip() != OPEN_DELIMITER:
        return None, text

    for idx in range(1, len(lines)):
        if lines[idx].rstrip() in CLOSE_DELIMITERS:
            yaml_text = "".join(lines[1:idx])
            body = "".join(lines[idx + 1:])
            return yaml_text, body

    raise FrontMatterError("Front matter opened on line 1 is never closed", line=1)


def parse_front_matter(text: str) -> Tuple[Dict[str, Any], str, bool]:
    """
    Parse the front matter of ``text``.

    Returns (metadata, body, present). Raises FrontMatterError on invalid YAML
    or when the block is not a mapping.
    """
    yaml_text, body = split_front_matter(text)
    if yaml_text is None:
        return {}, body, False

    try:
        meta = yaml.safe_load(yaml_text) if yaml_text.strip() else {}
    except yaml.YAMLError as e:
        line = None
        mark = getattr(e, "problem_mark", None)
        if mark is not None:
            # +2: the opening delimiter line, and 0-based marks
            line = mark.line + 2
        raise FrontMatterError(f"Invalid YAML in front matter: {e}", line=line) from e

    if meta is None:
        meta = {}
    if not isinstance(meta, dict):
        raise FrontMatterError(
            f"Front matter must be a mapping, got {type(meta).__name__}", line=2,
        )
    return meta, body, True
