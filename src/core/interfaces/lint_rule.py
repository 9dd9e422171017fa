"""Checklist lint rule contract.

Each rule is a small object with a stable `name` and a `check` method; the
lint service runs every registered rule over the same classified lines.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Protocol, runtime_checkable

from core.domain.models import ChecklistDocument, LintIssue

if TYPE_CHECKING:
    from core.services.checklist_parser import MarkdownLine


@runtime_checkable
class LintRule(Protocol):
    """Minimal contract for a documentation lint rule."""

    name: str

    def check(self, document: ChecklistDocument, lines: list[MarkdownLine]) -> Iterable[LintIssue]:
        """Yield the issues found in `document` (parsed from `lines`)."""

        ...
