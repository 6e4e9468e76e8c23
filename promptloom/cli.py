# Copyright (c) 2026 promptloom Contributors. All Rights Reserved.

"""
promptloom command line.

    promptloom [--root DIR] list [--kind KIND] [--json]
    promptloom [--root DIR] show KIND ID
    promptloom [--root DIR] compose PROMPT_ID [-p NAME=VALUE ...] [--target PATH ...]
    promptloom [--root DIR] lint [PATH ...] [--json] [--warnings-as-errors]
    promptloom [--root DIR] serve [--host H] [--port P] [--reload]

Exit codes: 0 ok, 1 lint errors or a resolution/composition failure,
2 usage error.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import yaml

from promptloom import __version__
from promptloom.core.config import get_settings, reset_settings
from promptloom.core.context import LoomContext, init_loom_context
from promptloom.core.errors import DocumentNotFoundError, LoomError
from promptloom.core.logging import setup_logging
from promptloom.documents.models import DocumentKind
from promptloom.kernel.linter import has_errors

logger = logging.getLogger("loom.cli")

EXIT_OK = 0
EXIT_FAILURE = 1


def _parse_params(parser: argparse.ArgumentParser, pairs: Sequence[str]) -> Dict[str, str]:
    params: Dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name.strip():
            parser.error(f"parameter '{pair}' must look like NAME=VALUE")
        params[name.strip()] = value
    return params


def _to_corpus_path(arg: str, root: Path) -> str:
    """Accept paths relative to the cwd or to the corpus root."""
    p = Path(arg)
    if p.is_absolute() or p.exists():
        try:
            return p.resolve().relative_to(root).as_posix()
        except ValueError:
            pass
    return arg.replace("\\", "/")


# ── Commands ────────────────────────────────────────────────

def cmd_list(ctx: LoomContext, args: argparse.Namespace) -> int:
    docs = ctx.catalog.list(args.kind)
    if args.json:
        print(json.dumps([d.summary() for d in docs], indent=2, ensure_ascii=False))
        return EXIT_OK
    for doc in docs:
        print(f"{doc.kind.value:<12} {doc.doc_id:<32} {doc.path}")
    return EXIT_OK


def cmd_show(ctx: LoomContext, args: argparse.Namespace) -> int:
    doc = ctx.catalog.get(args.kind, args.doc_id)
    if doc is None:
        raise DocumentNotFoundError(args.kind, args.doc_id)
    print(f"# {doc.path}")
    if doc.front_matter:
        print("---")
        print(yaml.safe_dump(doc.front_matter, sort_keys=False, allow_unicode=True).rstrip())
        print("---")
    print(doc.body.rstrip())
    return EXIT_OK


def cmd_compose(ctx: LoomContext, args: argparse.Namespace) -> int:
    result = ctx.composer.compose(
        args.prompt_id,
        params=args.params,
        targets=args.target,
        strict=not args.allow_unresolved,
    )
    if args.output:
        Path(args.output).write_text(result.text, encoding="utf-8")
        logger.info("Wrote %d chars to %s", result.char_count, args.output)
    else:
        sys.stdout.write(result.text)
    if result.unresolved:
        print(
            f"warning: unresolved placeholders: {', '.join(result.unresolved)}",
            file=sys.stderr,
        )
    return EXIT_OK


def cmd_lint(ctx: LoomContext, args: argparse.Namespace) -> int:
    paths = [_to_corpus_path(p, ctx.root) for p in args.paths] or None
    findings = ctx.lint(paths)
    if args.json:
        print(json.dumps([f.to_dict() for f in findings], indent=2, ensure_ascii=False))
    else:
        for finding in findings:
            print(str(finding))
        errors = sum(1 for f in findings if f.severity == "error")
        print(f"{len(findings)} findings ({errors} errors) in {len(ctx.catalog)} documents")
    return EXIT_FAILURE if has_errors(findings, args.warnings_as_errors) else EXIT_OK


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    # The app builds its own context from settings in its lifespan.
    os.environ["LOOM_DOCS_ROOT"] = str(Path(args.root).resolve())
    reset_settings()
    settings = get_settings()
    uvicorn.run(
        "promptloom.main:app",
        host=args.host or settings.HOST,
        port=args.port or settings.PORT,
        reload=args.reload,
        log_level=settings.LOG_LEVEL.lower(),
    )
    return EXIT_OK


# ── Parser ──────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    kinds = [k.value for k in DocumentKind]

    parser = argparse.ArgumentParser(
        prog="promptloom",
        description="Resolve, compose and lint chat-mode / instruction / prompt documents",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--root", help="Corpus root directory (default: LOOM_DOCS_ROOT)")
    parser.add_argument("--log-level", help="Override LOOM_LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="List documents")
    p_list.add_argument("--kind", choices=kinds)
    p_list.add_argument("--json", action="store_true")

    p_show = sub.add_parser("show", help="Print one document")
    p_show.add_argument("kind", choices=kinds)
    p_show.add_argument("doc_id")

    p_compose = sub.add_parser("compose", help="Compose a prompt's context blob")
    p_compose.add_argument("prompt_id")
    p_compose.add_argument(
        "-p", "--param", action="append", default=[], metavar="NAME=VALUE",
        help="Placeholder value (repeatable)",
    )
    p_compose.add_argument(
        "--target", action="append", default=[], metavar="PATH",
        help="File the prompt will work on; pulls in matching applyTo instructions",
    )
    p_compose.add_argument("--allow-unresolved", action="store_true")
    p_compose.add_argument("-o", "--output", help="Write the blob to a file instead of stdout")

    p_lint = sub.add_parser("lint", help="Check the corpus structure")
    p_lint.add_argument("paths", nargs="*", help="Limit findings to these files")
    p_lint.add_argument("--json", action="store_true")
    p_lint.add_argument("--warnings-as-errors", action="store_true")

    p_serve = sub.add_parser("serve", help="Run the HTTP service")
    p_serve.add_argument("--host")
    p_serve.add_argument("--port", type=int)
    p_serve.add_argument("--reload", action="store_true", help="Enable auto-reload")

    return parser


COMMANDS = {
    "list": cmd_list,
    "show": cmd_show,
    "compose": cmd_compose,
    "lint": cmd_lint,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(args.log_level or settings.LOG_LEVEL, settings.LOG_FORMAT)
    args.root = args.root or settings.DOCS_ROOT

    if args.command == "compose":
        args.params = _parse_params(parser, args.param)

    if args.command == "serve":
        return cmd_serve(args)

    try:
        ctx = init_loom_context(args.root, settings)
        return COMMANDS[args.command](ctx, args)
    except LoomError as e:
        logger.debug("Command failed", exc_info=True, extra={"command": args.command})
        print(f"error: [{e.code}] {e.message}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
