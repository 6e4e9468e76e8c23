# Copyright (c) 2026 promptloom Contributors. All Rights Reserved.

"""
Shared test fixtures for all promptloom tests.
"""

from pathlib import Path
from typing import Dict

import pytest

from promptloom.core.config import LoomSettings
from promptloom.core.context import init_loom_context
from promptloom.core.metrics import loom_metrics
from promptloom.kernel.catalog import DocumentCatalog
from promptloom.kernel.resolver import ReferenceResolver

LIBRARY_ROOT = Path(__file__).parent.parent / "library"

CORPUS: Dict[str, str] = {
    "chatmodes/security.chatmode.md": """---
description: Security reviewer
tools: ['codebase', 'search']
---

# Security

- Treat input as hostile.
- Report secrets.

```markdown
### [SEVERITY] title
```
""",
    "instructions/go.instructions.md": """---
applyTo: '**/*.go'
description: Go rules
---

- Wrap errors with %w.
""",
    "instructions/yaml.instructions.md": """---
applyTo: '**/*.{yaml,yml}'
description: YAML rules
---

- Pin image tags. See [helm](../prompts/references/sop-helm.md).
""",
    "prompts/helm.prompt.md": """---
mode: security
description: Review a chart
---

Review `{{chart}}` on ${input:branch:branch name}.

Use #file:./references/sop-helm.md and #file:../instructions/yaml.instructions.md.
""",
    "prompts/plain.prompt.md": """---
mode: agent
description: No persona file needed
---

Summarize the repository.
""",
    "prompts/references/sop-helm.md": """# Helm SOP

## Layout

Charts have `values.yaml`. See [secrets](sop-secrets.md).

```yaml
name: {{ include "chart.fullname" . }}
```
""",
    "prompts/references/sop-secrets.md": """# Secrets SOP

Never inline secrets.
""",
}


def write_corpus(root: Path, files: Dict[str, str]) -> Path:
    for rel_path, content in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture(autouse=True)
def reset_metrics():
    loom_metrics.reset()
    yield


@pytest.fixture
def test_settings() -> LoomSettings:
    return LoomSettings(_env_file=None)


@pytest.fixture
def corpus(tmp_path) -> Path:
    """A small valid corpus in a temp directory."""
    return write_corpus(tmp_path / "corpus", CORPUS)


@pytest.fixture
def make_corpus(tmp_path):
    """Build a corpus from the default files plus overrides (None deletes a file)."""

    def _make(overrides: Dict[str, str] = None, base: bool = True) -> Path:
        files = dict(CORPUS) if base else {}
        for rel_path, content in (overrides or {}).items():
            if content is None:
                files.pop(rel_path, None)
            else:
                files[rel_path] = content
        return write_corpus(tmp_path / "custom", files)

    return _make


@pytest.fixture
def library_root() -> Path:
    return LIBRARY_ROOT


@pytest.fixture
def catalog(corpus) -> DocumentCatalog:
    return DocumentCatalog(corpus).scan()


@pytest.fixture
def resolver(catalog) -> ReferenceResolver:
    return ReferenceResolver(catalog)


@pytest.fixture
def loom_ctx(corpus, test_settings):
    """Initialize the global LoomContext over the temp corpus."""
    return init_loom_context(corpus, test_settings)
