# Copyright (c) 2026 promptloom Contributors. All Rights Reserved.
"""Unit tests for front matter parsing."""

import pytest

from promptloom.core.errors import FrontMatterError
from promptloom.documents.frontmatter import parse_front_matter, split_front_matter


class TestSplitFrontMatter:
    def test_no_front_matter(self):
        yaml_text, body = split_front_matter("# Title\n\ntext\n")
        assert yaml_text is None
        assert body == "# Title\n\ntext\n"

    def test_basic_block(self):
        yaml_text, body = split_front_matter("---\na: 1\n---\nbody\n")
        assert yaml_text == "a: 1\n"
        assert body == "body\n"

    def test_horizontal_rule_in_body_is_kept(self):
        text = "---\na: 1\n---\nintro\n\n---\n\nmore\n"
        _, body = split_front_matter(text)
        assert body == "intro\n\n---\n\nmore\n"

    def test_dots_close_block(self):
        yaml_text, body = split_front_matter("---\na: 1\n...\nbody")
        assert yaml_text == "a: 1\n"
        assert body == "body"

    def test_bom_is_ignored(self):
        yaml_text, _ = split_front_matter("\ufeff---\na: 1\n---\n")
        assert yaml_text == "a: 1\n"

    def test_crlf_line_endings(self):
        yaml_text, body = split_front_matter("---\r\na: 1\r\n---\r\nbody\r\n")
        assert yaml_text == "a: 1\r\n"
        assert body == "body\r\n"

    def test_unterminated_block_raises(self):
        with pytest.raises(FrontMatterError) as exc:
            split_front_matter("---\na: 1\nbody\n")
        assert exc.value.line == 1

    def test_delimiter_not_on_first_line(self):
        yaml_text, _ = split_front_matter("\n---\na: 1\n---\n")
        assert yaml_text is None


class TestParseFrontMatter:
    def test_mapping(self):
        meta, body, present = parse_front_matter(
            "---\ndescription: d\napplyTo: '**/*.go'\n---\n# Go\n"
        )
        assert present is True
        assert meta == {"description": "d", "applyTo": "**/*.go"}
        assert body == "# Go\n"

    def test_empty_block(self):
        meta, body, present = parse_front_matter("---\n---\nbody")
        assert meta == {}
        assert present is True
        assert body == "body"

    def test_absent(self):
        meta, _, present = parse_front_matter("just text")
        assert meta == {}
        assert present is False

    def test_invalid_yaml_has_line(self):
        with pytest.raises(FrontMatterError) as exc:
            parse_front_matter("---\ndescription: ok\ntools: [a, b\n---\n")
        assert exc.value.code == "FRONT_MATTER_INVALID"
        assert exc.value.line is not None

    def test_non_mapping_rejected(self):
        with pytest.raises(FrontMatterError) as exc:
            parse_front_matter("---\n- a\n- b\n---\n")
        assert "mapping" in exc.value.message
