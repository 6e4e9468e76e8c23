# Copyright (c) 2026 promptloom Contributors. All Rights Reserved.

"""
applyTo glob matching.

Supported syntax: ``**`` (any number of path segments), ``*`` (anything
within one segment), ``?`` (one character within a segment), ``[...]``
character classes and ``{a,b}`` alternation. A pattern without a slash
matches the file name in any directory, as editors do for ``*.go``.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, List


def _translate(pattern: str) -> str:
    out: List[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        ch = pattern[i]
        if ch == "*":
            if pattern.startswith("**", i):
                i += 2
                if i < n and pattern[i] == "/":
                    # "**/" matches zero or more whole segments
                    out.append("(?:.*/)?")
                    i += 1
                else:
                    out.append(".*")
                continue
            out.append("[^/]*")
        elif ch == "?":
            out.append("[^/]")
        elif ch == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                out.append(re.escape(ch))
            else:
                body = pattern[i + 1:end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append(f"[{body}]")
                i = end
        elif ch == "{":
            end = pattern.find("}", i + 1)
            if end == -1:
                out.append(re.escape(ch))
            else:
                options = pattern[i + 1:end].split(",")
                out.append("(?:" + "|".join(_translate(o) for o in options) + ")")
                i = end
        else:
            out.append(re.escape(ch))
        i += 1
    return "".join(out)


@lru_cache(maxsize=512)
def compile_glob(pattern: str) -> re.Pattern:
    pattern = pattern.strip().replace("\\", "/")
    if pattern.startswith("./"):
        pattern = pattern[2:]
    if "/" not in pattern and pattern != "**":
        pattern = "**/" + pattern
    return re.compile(_translate(pattern) + r"\Z")


def glob_match(pattern: str, path: str) -> bool:
    """True when the corpus-relative ``path`` matches ``pattern``."""
    path = path.replace("\\", "/")
    if path.startswith("./"):
        path = path[2:]
    return compile_glob(pattern).match(path) is not None


def any_match(patterns: Iterable[str], path: str) -> bool:
    return any(glob_match(p, path) for p in patterns)
