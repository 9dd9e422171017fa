"""Playbook rendering (Jinja2).

Why in adapters:
- Templates and files on disk are infrastructure; the Core only builds `PlaybookData`.
- One template per compute type keeps the data plane steps apart.

Playbooks are markdown, so templates are rendered without HTML escaping:
backticks, quotes and `<PLACEHOLDER>` values must come out verbatim.
"""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from core.domain.models import PlaybookData
from core.errors import PlaybookError

_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

COMPUTE_TEMPLATES: dict[str, str] = {
    "eks": "eks-managed-nodegroup.md.j2",
    "self": "self-managed-nodegroup.md.j2",
    "fargate": "fargate-profile.md.j2",
}


def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=False,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def render_playbook(*, data: PlaybookData) -> str:
    """Render the playbook markdown."""

    try:
        template = _get_env().get_template("playbook.md.j2")
        return template.render(
            **data.model_dump(),
            compute_templates=[COMPUTE_TEMPLATES[c] for c in data.compute],
        )
    except TemplateError as exc:
        raise PlaybookError(f"Could not render playbook: {exc}") from exc


def export_playbook(*, data: PlaybookData, output_path: Path) -> Path:
    """Render the playbook and write it as UTF-8 markdown."""

    markdown = render_playbook(data=data)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(markdown, encoding="utf-8")
    except OSError as exc:
        raise PlaybookError(f"Could not write playbook {output_path}: {exc}") from exc
    return output_path
