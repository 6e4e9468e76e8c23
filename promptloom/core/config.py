# Copyright (c) 2026 promptloom Contributors. All Rights Reserved.

"""
promptloom Configuration — Environment-driven settings.

All configuration is loaded from environment variables (or .env file).
Uses LOOM_ prefix so a shared .env with other services stays harmless.
"""

from __future__ import annotations

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


def _split_csv(value: str) -> List[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


class LoomSettings(BaseSettings):
    """Corpus tooling configuration loaded from environment."""

    # ── Corpus ────────────────────────────────────────────────
    DOCS_ROOT: str = Field(
        default="library",
        description="Root directory of the document corpus",
    )
    EXCLUDE_DIRS: str = Field(
        default="node_modules,__pycache__,venv,.venv,build,dist",
        description="Comma-separated directory names skipped during scans",
    )
    MAX_DOCUMENT_BYTES: int = Field(
        default=1024 * 1024,
        description="Documents larger than this are refused by the loader",
    )
    MAX_REFERENCE_DEPTH: int = Field(
        default=8,
        description="How deep nested references are followed during resolution",
    )

    # ── Lint ──────────────────────────────────────────────────
    DISABLED_RULES: str = Field(
        default="",
        description="Comma-separated lint rule codes to skip",
    )
    BUILTIN_MODES: str = Field(
        default="ask,edit,agent",
        description="Chat modes provided by the host, accepted without a persona file",
    )

    # ── Service ───────────────────────────────────────────────
    HOST: str = Field(default="127.0.0.1", description="Bind host")
    PORT: int = Field(default=8300, description="Bind port")

    # ── Platform ──────────────────────────────────────────────
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(
        default="json",
        description="Log output: json | text",
    )

    # ── Helpers ───────────────────────────────────────────────

    @property
    def exclude_dirs_list(self) -> List[str]:
        return _split_csv(self.EXCLUDE_DIRS)

    @property
    def disabled_rules_list(self) -> List[str]:
        """Parse comma-separated rule codes, upper-cased."""
        return [r.upper() for r in _split_csv(self.DISABLED_RULES)]

    @property
    def builtin_modes_list(self) -> List[str]:
        return _split_csv(self.BUILTIN_MODES)

    model_config = {
        "env_prefix": "LOOM_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }


_settings_singleton: LoomSettings | None = None


def get_settings() -> LoomSettings:
    """Return a cached LoomSettings singleton."""
    global _settings_singleton
    if _settings_singleton is None:
        _settings_singleton = LoomSettings()
    return _settings_singleton


def reset_settings() -> None:
    """Drop the cached singleton so the next call re-reads the environment."""
    global _settings_singleton
    _settings_singleton = None
