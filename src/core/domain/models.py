"""Domain models (Pydantic v2).

These describe *what* a checklist, a lint finding or a release is; parsing,
rendering and exporting live in services and adapters.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, Literal

from pydantic import BaseModel, Field, computed_field

Severity = Literal["error", "warning"]


class ChecklistItem(BaseModel):
    """A GitHub-flavored task-list item (`- [ ] text` / `- [x] text`)."""

    text: str = Field(..., description="Item text after the checkbox.")
    checked: bool = Field(default=False, description="Whether the box is ticked.")
    line: int = Field(..., ge=1, description="1-based line number in the source.")
    marker: str = Field(default="-", pattern=r"^[-*+]$", description="List marker.")
    indent: int = Field(default=0, ge=0, description="Leading spaces before the marker.")


class ChecklistSection(BaseModel):
    """A heading with the items and subsections that follow it."""

    title: str
    level: int = Field(..., ge=1, le=6)
    line: int = Field(..., ge=1)
    items: list[ChecklistItem] = Field(default_factory=list)
    children: list[ChecklistSection] = Field(default_factory=list)

    def iter_sections(self) -> Iterator[ChecklistSection]:
        yield self
        for child in self.children:
            yield from child.iter_sections()

    def iter_items(self) -> Iterator[ChecklistItem]:
        for section in self.iter_sections():
            yield from section.items

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total(self) -> int:
        return sum(1 for _ in self.iter_items())

    @computed_field  # type: ignore[prop-decorator]
    @property
    def done(self) -> int:
        return sum(1 for item in self.iter_items() if item.checked)


class ChecklistDocument(BaseModel):
    """Parsed checklist: a heading tree plus items found before any heading."""

    title: str | None = Field(default=None, description="Text of the first level-1 heading.")
    sections: list[ChecklistSection] = Field(default_factory=list)
    preamble_items: list[ChecklistItem] = Field(default_factory=list)

    def iter_sections(self) -> Iterator[ChecklistSection]:
        for section in self.sections:
            yield from section.iter_sections()

    def iter_items(self) -> Iterator[ChecklistItem]:
        yield from self.preamble_items
        for section in self.sections:
            yield from section.iter_items()

    def find_section(self, title: str) -> ChecklistSection | None:
        wanted = title.strip().casefold()
        for section in self.iter_sections():
            if section.title.strip().casefold() == wanted:
                return section
        return None

    def progress(self) -> tuple[int, int]:
        items = list(self.iter_items())
        return sum(1 for item in items if item.checked), len(items)


class LintIssue(BaseModel):
    rule: str = Field(..., min_length=1)
    severity: Severity = "error"
    line: int = Field(default=0, ge=0, description="1-based line, 0 for whole-document issues.")
    message: str = Field(..., min_length=1)


class LintReport(BaseModel):
    """Result of linting one checklist."""

    path: str | None = None
    issues: list[LintIssue] = Field(default_factory=list)

    @property
    def errors(self) -> list[LintIssue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> list[LintIssue]:
        return [i for i in self.issues if i.severity == "warning"]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def ok(self) -> bool:
        return not self.errors


class SectionProgress(BaseModel):
    title: str
    level: int
    done: int = Field(..., ge=0)
    total: int = Field(..., ge=0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def percent(self) -> float:
        if self.total == 0:
            return 0.0
        return round(100.0 * self.done / self.total, 1)


class ChecklistSummary(BaseModel):
    """Progress of a checklist, overall and per section."""

    title: str | None = None
    source: str | None = None
    done: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)
    sections: list[SectionProgress] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def percent(self) -> float:
        if self.total == 0:
            return 0.0
        return round(100.0 * self.done / self.total, 1)


class Release(BaseModel):
    """Links associated with a Kubernetes release."""

    release_url: str = Field(..., min_length=8)
    deprecation_url: str | None = None


class PlaybookData(BaseModel):
    """Everything the playbook templates need, in one place."""

    region: str = Field(..., min_length=1)
    cluster_name: str = Field(..., min_length=1)
    current_version: str
    target_version: str
    strategy: str
    custom_ami: bool = False
    k8s_release_url: str
    k8s_deprecation_url: str | None = None
    compute: list[str] = Field(
        ...,
        min_length=1,
        max_length=3,
        description="Data plane compute types, in the order they are rendered.",
    )


class PlaybookFile(BaseModel):
    """A playbook written to disk."""

    path: Path
    cluster_name: str
    current_version: str
    target_version: str
