"""Checklist progress reports (HTML/PDF).

Why in adapters:
- HTML/PDF are infrastructure details (Jinja2/WeasyPrint).
- The Core only knows the parsed `ChecklistDocument` and its `ChecklistSummary`.

HTML is autoescaped (unlike playbooks). PDF is WeasyPrint on top of the same
HTML; WeasyPrint is loaded on demand so a host without Pango can still write
HTML.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from core.domain.models import ChecklistDocument, ChecklistSummary
from core.errors import ExportError, PdfBackendError
from core.services.summary import summarize

_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
    )


def render_checklist_html(*, document: ChecklistDocument, summary: ChecklistSummary | None = None) -> str:
    """Render a self-contained HTML report of the checklist and its progress."""

    summary = summary or summarize(document)
    generated_at = datetime.now(timezone.utc).isoformat(timespec="seconds")

    template = _get_env().get_template("report.html")
    return template.render(
        document=document,
        summary=summary,
        title=document.title or "Checklist",
        generated_at=generated_at,
    )


def export_checklist_html(*, document: ChecklistDocument, output_path: Path, source: str | None = None) -> Path:
    """Export the checklist report as HTML.

    Also used as the fallback when PDF rendering is not supported by the
    environment.
    """

    html = render_checklist_html(document=document, summary=summarize(document, source=source))
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(html, encoding="utf-8")
    except OSError as exc:
        raise ExportError(f"Could not write HTML report {output_path}: {exc}") from exc
    return output_path


def export_checklist_pdf(*, document: ChecklistDocument, output_path: Path, source: str | None = None) -> Path:
    """Export the checklist report as PDF.

    Raises:
        PdfBackendError: WeasyPrint cannot be imported on this host.
        ExportError: the PDF could not be written.
    """

    try:
        from weasyprint import HTML  # noqa: PLC0415
    except (ImportError, OSError) as exc:
        raise PdfBackendError(f"PDF export is not available: {exc}") from exc

    html = render_checklist_html(document=document, summary=summarize(document, source=source))
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        HTML(string=html, base_url=str(_TEMPLATES_DIR)).write_pdf(str(output_path))
    except OSError as exc:
        raise ExportError(f"Could not write PDF report {output_path}: {exc}") from exc
    return output_path
