# Copyright (c) 2026 promptloom Contributors. All Rights Reserved.
"""Unit tests for document loading and reference extraction."""

import pytest

from promptloom.core.errors import (
    DocumentOutsideRootError,
    DocumentTooLargeError,
    FrontMatterError,
)
from promptloom.documents.loader import (
    classify,
    doc_id_for,
    extract_placeholders,
    extract_references,
    load_document,
    load_document_from_string,
    split_patterns,
)
from promptloom.documents.models import (
    DocumentKind,
    InstructionDocument,
    PersonaDocument,
    PromptDocument,
    ReferenceDocument,
)


class TestClassify:
    @pytest.mark.parametrize("name,kind", [
        ("chatmodes/security.chatmode.md", DocumentKind.PERSONA),
        ("go.instructions.md", DocumentKind.INSTRUCTION),
        ("prompts/helm.prompt.md", DocumentKind.PROMPT),
        ("prompts/references/sop-helm.md", DocumentKind.REFERENCE),
        ("README.MD", DocumentKind.REFERENCE),
    ])
    def test_kind_by_suffix(self, name, kind):
        assert classify(name) is kind

    def test_doc_id_strips_kind_suffix(self):
        assert doc_id_for("chatmodes/security-review.chatmode.md") == "security-review"
        assert doc_id_for("a/b/go.instructions.md") == "go"
        assert doc_id_for("sop-helm.md") == "sop-helm"


class TestExtractReferences:
    def test_file_markers(self):
        refs = extract_references("Use #file:./references/sop-helm.md, then go.\n")
        assert [(r.target, r.marker, r.line) for r in refs] == [
            ("./references/sop-helm.md", "file", 1),
        ]

    def test_marker_in_backticks_and_trailing_period(self):
        refs = extract_references("See `#file:a.md` and #file:b.md.\n")
        assert [r.target for r in refs] == ["a.md", "b.md"]

    def test_markdown_links(self):
        body = (
            "[sop](../sop.md#layout) [site](https://example.com/x.md) "
            "[anchor](#top) ![img](pic.md) [mail](mailto:a@b.c) [yaml](values.yaml)\n"
        )
        refs = extract_references(body)
        assert [(r.target, r.marker) for r in refs] == [("../sop.md", "link")]

    def test_fenced_code_is_skipped(self):
        body = "```\n#file:ignored.md\n[x](ignored.md)\n```\n#file:kept.md\n"
        refs = extract_references(body)
        assert [r.target for r in refs] == ["kept.md"]
        assert refs[0].line == 5

    def test_front_matter_keys(self):
        refs = extract_references("", {"references": "a.md", "instructions": ["go", 3, ""]})
        assert [(r.target, r.marker, r.line) for r in refs] == [
            ("a.md", "front_matter", 0),
            ("go", "front_matter", 0),
        ]

    def test_line_offset(self):
        refs = extract_references("\n#file:x.md\n", line_offset=4)
        assert refs[0].line == 6


class TestPlaceholders:
    def test_both_syntaxes_in_order(self):
        text = "${input:branch} {{ chart }} ${input:branch:hint} {{chart}} ${input:base:x y}"
        assert extract_placeholders(text) == ["branch", "chart", "base"]

    def test_go_templates_are_not_placeholders(self):
        text = '{{ .Values.image }} {{ include "name" . }} {{- end }}'
        assert extract_placeholders(text) == []

    def test_actions_expressions_are_not_placeholders(self):
        text = "Set ${{ secrets.GITHUB_TOKEN }} and ${{ env }} for {{ user_name }}"
        assert extract_placeholders(text) == ["user_name"]

    def test_fenced_code_is_skipped(self):
        text = "Review {{chart}}.\n\n```yaml\ntoken: {{ token }}\n{{ end }}\n```\n${input:branch}\n"
        assert extract_placeholders(text) == ["chart", "branch"]


class TestSplitPatterns:
    def test_braces_keep_commas(self):
        assert split_patterns("**/*.{yaml,yml}, **/Dockerfile") == [
            "**/*.{yaml,yml}", "**/Dockerfile",
        ]

    def test_blank_entries_dropped(self):
        assert split_patterns(" a , ,b ") == ["a", "b"]


class TestLoadDocument:
    def test_persona(self):
        doc = load_document_from_string(
            "---\ndescription: Sec\ntools: ['a', 'b']\nmodel: gpt\n---\n"
            "- rule one\n* rule two\n\n```md\n### tpl\n```\n",
            "chatmodes/sec.chatmode.md",
        )
        assert isinstance(doc, PersonaDocument)
        assert doc.doc_id == "sec"
        assert doc.tools == ["a", "b"]
        assert doc.model == "gpt"
        assert doc.directives == ["rule one", "rule two"]
        assert doc.output_templates == ["### tpl"]

    def test_instruction_apply_to(self):
        doc = load_document_from_string(
            "---\napplyTo: '**/*.{yaml,yml}, **/Dockerfile'\ndescription: d\n---\nx\n",
            "instructions/k8s.instructions.md",
        )
        assert isinstance(doc, InstructionDocument)
        assert doc.apply_to == ["**/*.{yaml,yml}", "**/Dockerfile"]

    def test_prompt(self):
        doc = load_document_from_string(
            "---\nchatmode: sec\ndescription: d\n---\n\nReview {{path}} with #file:./r.md\n",
            "prompts/p.prompt.md",
        )
        assert isinstance(doc, PromptDocument)
        assert doc.mode == "sec"
        assert doc.placeholders == ["path"]
        assert doc.references[0].target == "./r.md"
        # line numbers count the front matter lines
        assert doc.references[0].line == 6

    def test_reference_headings(self):
        doc = load_document_from_string("# SOP\n\n## Layout ##\ntext\n", "sop.md")
        assert isinstance(doc, ReferenceDocument)
        assert doc.headings == ["SOP", "Layout"]
        assert doc.has_front_matter is False

    def test_invalid_tools_are_kept_raw(self):
        doc = load_document_from_string(
            "---\ndescription: d\ntools: 5\n---\nx\n", "a.chatmode.md",
        )
        assert doc.tools == []
        assert doc.front_matter["tools"] == 5

    def test_front_matter_error_carries_path(self):
        with pytest.raises(FrontMatterError) as exc:
            load_document_from_string("---\na: [\n---\n", "bad.prompt.md")
        assert exc.value.path == "bad.prompt.md"

    def test_load_from_disk(self, tmp_path):
        (tmp_path / "p").mkdir()
        path = tmp_path / "p" / "x.prompt.md"
        path.write_text("---\ndescription: d\n---\nhello\n", encoding="utf-8")
        doc = load_document(path, tmp_path)
        assert doc.path == "p/x.prompt.md"
        assert doc.body == "hello\n"

    def test_size_limit(self, tmp_path):
        path = tmp_path / "big.md"
        path.write_text("x" * 100, encoding="utf-8")
        with pytest.raises(DocumentTooLargeError):
            load_document(path, tmp_path, max_bytes=10)

    def test_rel_path_is_kept_for_symlinks(self, tmp_path):
        (tmp_path / "refs").mkdir()
        target = tmp_path / "refs" / "sop.md"
        target.write_text("# SOP\n", encoding="utf-8")
        link = tmp_path / "alias.md"
        link.symlink_to(target)
        doc = load_document(link, tmp_path, rel_path="alias.md")
        assert doc.path == "alias.md"
        assert doc.doc_id == "alias"

    def test_symlink_outside_root(self, tmp_path):
        (tmp_path / "corpus").mkdir()
        outside = tmp_path / "shared.md"
        outside.write_text("# Shared\n", encoding="utf-8")
        link = tmp_path / "corpus" / "shared.md"
        link.symlink_to(outside)
        with pytest.raises(DocumentOutsideRootError) as exc:
            load_document(link, tmp_path / "corpus")
        assert exc.value.details["path"] == "shared.md"
