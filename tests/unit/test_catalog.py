# Copyright (c) 2026 promptloom Contributors. All Rights Reserved.
"""Unit tests for DocumentCatalog."""

import shutil

import pytest

from promptloom.core.errors import LoomError
from promptloom.core.metrics import loom_metrics
from promptloom.documents.models import DocumentKind
from promptloom.kernel.catalog import DocumentCatalog


class TestDocumentCatalog:
    def test_scan_indexes_all_kinds(self, catalog):
        assert len(catalog) == 7
        assert [d.doc_id for d in catalog.list(DocumentKind.PERSONA)] == ["security"]
        assert [d.doc_id for d in catalog.list("instruction")] == ["go", "yaml"]
        assert [d.doc_id for d in catalog.list(DocumentKind.PROMPT)] == ["helm", "plain"]
        assert [d.doc_id for d in catalog.list(DocumentKind.REFERENCE)] == ["sop-helm", "sop-secrets"]
        assert catalog.failures == []

    def test_get_and_get_by_path(self, catalog):
        doc = catalog.get(DocumentKind.PROMPT, "helm")
        assert doc.path == "prompts/helm.prompt.md"
        assert catalog.get_by_path("prompts/helm.prompt.md") is doc
        assert catalog.get("prompt", "missing") is None
        assert "prompts/helm.prompt.md" in catalog
        assert "nope.md" not in catalog

    def test_list_is_sorted_by_path(self, catalog):
        paths = [d.path for d in catalog.list()]
        assert paths == sorted(paths)

    def test_load_failures_do_not_abort(self, make_corpus):
        root = make_corpus({
            "prompts/broken.prompt.md": "---\ndescription: [\n---\nx\n",
            "prompts/open.prompt.md": "---\ndescription: x\n",
        })
        catalog = DocumentCatalog(root).scan()
        assert len(catalog) == 7
        failed = {f.path: f.code for f in catalog.failures}
        assert failed == {
            "prompts/broken.prompt.md": "FRONT_MATTER_INVALID",
            "prompts/open.prompt.md": "FRONT_MATTER_INVALID",
        }
        assert loom_metrics.get_counter("documents_failed") == 2

    def test_size_limit_recorded_as_failure(self, make_corpus):
        root = make_corpus({"notes/huge.md": "x" * 2048})
        catalog = DocumentCatalog(root, max_bytes=1024).scan()
        assert [f.code for f in catalog.failures] == ["DOCUMENT_TOO_LARGE"]

    def test_duplicate_ids_first_path_wins(self, make_corpus):
        root = make_corpus({"extra/helm.prompt.md": "---\ndescription: dup\n---\nx\n"})
        catalog = DocumentCatalog(root).scan()
        assert catalog.get("prompt", "helm").path == "extra/helm.prompt.md"
        assert len(catalog.duplicates) == 1
        assert catalog.duplicates[0].ignored == "prompts/helm.prompt.md"

    def test_hidden_and_excluded_dirs(self, make_corpus):
        root = make_corpus({
            ".github/prompts/gh.prompt.md": "---\ndescription: d\n---\nx\n",
            ".git/info.md": "# no\n",
            "node_modules/pkg/readme.md": "# no\n",
        })
        catalog = DocumentCatalog(root, exclude_dirs=["node_modules"]).scan()
        assert catalog.get("prompt", "gh") is not None
        assert catalog.get_by_path(".git/info.md") is None
        assert catalog.get_by_path("node_modules/pkg/readme.md") is None

    def test_reload_picks_up_changes(self, corpus):
        catalog = DocumentCatalog(corpus).scan()
        (corpus / "prompts" / "new.prompt.md").write_text(
            "---\ndescription: n\n---\nnew\n", encoding="utf-8",
        )
        assert catalog.get("prompt", "new") is None
        catalog.reload()
        assert catalog.get("prompt", "new") is not None
        assert len(catalog) == 8

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(LoomError):
            DocumentCatalog(tmp_path / "nope").scan()

    def test_gauge_set(self, catalog):
        assert loom_metrics.get_gauge("documents_indexed") == 7

    def test_failed_reload_keeps_snapshot(self, make_corpus):
        root = make_corpus()
        catalog = DocumentCatalog(root).scan()
        shutil.rmtree(root)
        with pytest.raises(LoomError):
            catalog.reload()
        assert len(catalog) == 7
        assert catalog.get("prompt", "helm") is not None

    def test_symlink_outside_root_recorded(self, make_corpus, tmp_path):
        root = make_corpus()
        outside = tmp_path / "shared.md"
        outside.write_text("# Shared\n", encoding="utf-8")
        (root / "prompts" / "references" / "shared.md").symlink_to(outside)
        catalog = DocumentCatalog(root).scan()
        assert len(catalog) == 7
        assert [(f.path, f.code) for f in catalog.failures] == [
            ("prompts/references/shared.md", "OUTSIDE_ROOT"),
        ]

    def test_symlink_inside_root_keeps_link_path(self, make_corpus):
        root = make_corpus()
        (root / "prompts" / "alias.md").symlink_to(root / "prompts" / "references" / "sop-helm.md")
        catalog = DocumentCatalog(root).scan()
        assert "prompts/alias.md" in catalog
        assert "prompts/references/sop-helm.md" in catalog
        assert catalog.get_by_path("prompts/alias.md").doc_id == "alias"
        assert catalog.failures == []
