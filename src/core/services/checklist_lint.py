"""Documentation lint for markdown checklists.

The lint answers three questions about a checklist file: does it decode as
UTF-8 markdown, is every list item under a heading a task item, and is the
heading nesting consistent. A few hygiene rules (empty sections, empty or
duplicated items, trailing whitespace) are reported as warnings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Sequence

from core.domain.models import ChecklistDocument, LintIssue, LintReport
from core.errors import ChecklistReadError
from core.interfaces.lint_rule import LintRule
from core.log import get_logger
from core.services.checklist_parser import MarkdownLine, build_document, scan_lines

log = get_logger(__name__)

DEFAULT_REQUIRED_SECTIONS: tuple[str, ...] = ("Control Plane", "Data Plane", "Addons", "Misc")


def _headings(lines: list[MarkdownLine]) -> list[MarkdownLine]:
    return [line for line in lines if line.kind == "heading"]


def _first_heading_line(lines: list[MarkdownLine]) -> int | None:
    for line in lines:
        if line.kind == "heading":
            return line.number
    return None


class HeadingStartRule:
    name = "heading-start"

    def check(self, document: ChecklistDocument, lines: list[MarkdownLine]) -> Iterable[LintIssue]:
        headings = _headings(lines)
        if headings and headings[0].level != 1:
            first = headings[0]
            yield LintIssue(
                rule=self.name,
                line=first.number,
                message=f"First heading should be level 1, found h{first.level}",
            )


class HeadingIncrementRule:
    name = "heading-increment"

    def check(self, document: ChecklistDocument, lines: list[MarkdownLine]) -> Iterable[LintIssue]:
        previous: int | None = None
        for heading in _headings(lines):
            if previous is not None and heading.level > previous + 1:
                yield LintIssue(
                    rule=self.name,
                    line=heading.number,
                    message=f"Heading level jumps from h{previous} to h{heading.level}",
                )
            previous = heading.level


class HeadingSpaceRule:
    name = "heading-space"

    def check(self, document: ChecklistDocument, lines: list[MarkdownLine]) -> Iterable[LintIssue]:
        for line in lines:
            if line.kind == "bad-heading":
                yield LintIssue(
                    rule=self.name,
                    line=line.number,
                    message=f"Missing space after '#' in heading: {line.text!r}",
                )


class EmptyHeadingRule:
    name = "empty-heading"

    def check(self, document: ChecklistDocument, lines: list[MarkdownLine]) -> Iterable[LintIssue]:
        for heading in _headings(lines):
            if not heading.text:
                yield LintIssue(rule=self.name, line=heading.number, message="Heading has no text")


class SingleTitleRule:
    name = "single-title"

    def check(self, document: ChecklistDocument, lines: list[MarkdownLine]) -> Iterable[LintIssue]:
        titles = [h for h in _headings(lines) if h.level == 1]
        for extra in titles[1:]:
            yield LintIssue(
                rule=self.name,
                severity="warning",
                line=extra.number,
                message=f"Additional level 1 heading: {extra.text!r}",
            )


class ListItemCheckboxRule:
    name = "list-item-checkbox"

    def check(self, document: ChecklistDocument, lines: list[MarkdownLine]) -> Iterable[LintIssue]:
        first = _first_heading_line(lines)
        if first is None:
            return
        for line in lines:
            if line.kind == "list" and line.number > first:
                yield LintIssue(
                    rule=self.name,
                    line=line.number,
                    message=f"List item is not a task item ('- [ ] ...'): {line.text!r}",
                )


class CheckboxSyntaxRule:
    name = "checkbox-syntax"

    def check(self, document: ChecklistDocument, lines: list[MarkdownLine]) -> Iterable[LintIssue]:
        for line in lines:
            if line.kind == "bad-checkbox":
                yield LintIssue(
                    rule=self.name,
                    line=line.number,
                    message=f"Malformed checkbox, expected '{line.marker or '-'} [ ] ' or '- [x] ': {line.text!r}",
                )


class ItemBeforeHeadingRule:
    name = "item-before-heading"

    def check(self, document: ChecklistDocument, lines: list[MarkdownLine]) -> Iterable[LintIssue]:
        first = _first_heading_line(lines)
        for line in lines:
            if first is not None and line.number > first:
                break
            if line.kind in ("task", "list", "bad-checkbox"):
                yield LintIssue(
                    rule=self.name,
                    line=line.number,
                    message="List item appears before any heading",
                )


class EmptySectionRule:
    name = "empty-section"

    def check(self, document: ChecklistDocument, lines: list[MarkdownLine]) -> Iterable[LintIssue]:
        for section in document.iter_sections():
            if not section.items and not section.children:
                yield LintIssue(
                    rule=self.name,
                    severity="warning",
                    line=section.line,
                    message=f"Section {section.title!r} has no items",
                )


class EmptyItemRule:
    name = "empty-item"

    def check(self, document: ChecklistDocument, lines: list[MarkdownLine]) -> Iterable[LintIssue]:
        for item in document.iter_items():
            if not item.text:
                yield LintIssue(
                    rule=self.name,
                    severity="warning",
                    line=item.line,
                    message="Task item has no text",
                )


class DuplicateItemRule:
    name = "duplicate-item"

    def check(self, document: ChecklistDocument, lines: list[MarkdownLine]) -> Iterable[LintIssue]:
        for section in document.iter_sections():
            seen: set[str] = set()
            for item in section.items:
                key = " ".join(item.text.split()).casefold()
                if not key:
                    continue
                if key in seen:
                    yield LintIssue(
                        rule=self.name,
                        severity="warning",
                        line=item.line,
                        message=f"Duplicate item in {section.title!r}: {item.text!r}",
                    )
                seen.add(key)


class RequiredSectionsRule:
    name = "required-section"

    def __init__(self, titles: Sequence[str] = DEFAULT_REQUIRED_SECTIONS) -> None:
        self.titles = tuple(titles)

    def check(self, document: ChecklistDocument, lines: list[MarkdownLine]) -> Iterable[LintIssue]:
        for title in self.titles:
            if document.find_section(title) is None:
                yield LintIssue(
                    rule=self.name,
                    line=0,
                    message=f"Missing required section: {title!r}",
                )


class TrailingWhitespaceRule:
    name = "trailing-whitespace"

    def check(self, document: ChecklistDocument, lines: list[MarkdownLine]) -> Iterable[LintIssue]:
        for line in lines:
            if line.kind in ("code", "blank"):
                continue
            if line.raw != line.raw.rstrip(" \t"):
                yield LintIssue(
                    rule=self.name,
                    severity="warning",
                    line=line.number,
                    message="Trailing whitespace",
                )


def default_rules(required_sections: Sequence[str] = DEFAULT_REQUIRED_SECTIONS) -> list[LintRule]:
    """The rule registry, in reporting order."""

    rules: list[LintRule] = [
        HeadingStartRule(),
        HeadingIncrementRule(),
        HeadingSpaceRule(),
        EmptyHeadingRule(),
        SingleTitleRule(),
        ListItemCheckboxRule(),
        CheckboxSyntaxRule(),
        ItemBeforeHeadingRule(),
        EmptySectionRule(),
        EmptyItemRule(),
        DuplicateItemRule(),
        TrailingWhitespaceRule(),
    ]
    if required_sections:
        rules.append(RequiredSectionsRule(required_sections))
    return rules


def lint_checklist(
    text: str,
    *,
    required_sections: Sequence[str] = DEFAULT_REQUIRED_SECTIONS,
    path: str | None = None,
    rules: Sequence[LintRule] | None = None,
) -> LintReport:
    """Run the lint rules over markdown `text`."""

    lines = list(scan_lines(text))
    document = build_document(lines)
    active = list(rules) if rules is not None else default_rules(required_sections)

    issues: list[LintIssue] = []
    for rule in active:
        found = list(rule.check(document, lines))
        if found:
            log.debug("lint rule matched", rule=rule.name, count=len(found), path=path)
        issues.extend(found)

    issues.sort(key=lambda issue: (issue.line, issue.rule))
    return LintReport(path=path, issues=issues)


def lint_file(
    path: Path,
    *,
    required_sections: Sequence[str] = DEFAULT_REQUIRED_SECTIONS,
) -> LintReport:
    """Lint a checklist file.

    A file that is not valid UTF-8 yields a single `encoding` error instead of
    raising. Missing or unreadable files raise `ChecklistReadError`.
    """

    try:
        raw = path.read_bytes()
    except FileNotFoundError as exc:
        raise ChecklistReadError(f"Checklist not found: {path}") from exc
    except OSError as exc:
        raise ChecklistReadError(f"Could not read checklist {path}: {exc}") from exc

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        return LintReport(
            path=str(path),
            issues=[
                LintIssue(
                    rule="encoding",
                    line=raw.count(b"\n", 0, exc.start) + 1,
                    message=f"File is not valid UTF-8 (byte {exc.start})",
                )
            ],
        )

    return lint_checklist(text, required_sections=required_sections, path=str(path))
