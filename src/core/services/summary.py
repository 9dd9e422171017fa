"""Checklist progress summaries."""

from __future__ import annotations

from core.domain.models import ChecklistDocument, ChecklistSummary, SectionProgress


def summarize(document: ChecklistDocument, *, source: str | None = None) -> ChecklistSummary:
    """Count ticked items overall and per section (sections include their subsections)."""

    done, total = document.progress()
    sections = [
        SectionProgress(title=section.title, level=section.level, done=section.done, total=section.total)
        for section in document.iter_sections()
    ]
    return ChecklistSummary(
        title=document.title,
        source=source,
        done=done,
        total=total,
        sections=sections,
    )
