"""Markdown checklist parsing.

Only the subset of markdown a checklist uses is understood: ATX headings,
list items (task items in particular) and fenced code blocks, which are
skipped. Everything else is kept as plain text lines.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Literal

from core.domain.models import ChecklistDocument, ChecklistItem, ChecklistSection
from core.errors import ChecklistReadError

LineKind = Literal[
    "blank",
    "text",
    "heading",
    "bad-heading",
    "task",
    "bad-checkbox",
    "list",
    "fence",
    "code",
]

# Columns per tab in list indentation.
TAB_WIDTH = 4

_HEADING_RE = re.compile(r"^ {0,3}(?P<hashes>#{1,6})(?:[ \t]+(?P<text>.*?))?[ \t]*$")
_BAD_HEADING_RE = re.compile(r"^ {0,3}#{1,6}[^#\s]")
_CLOSING_HASHES_RE = re.compile(r"(?:^|[ \t]+)#+$")
_FENCE_RE = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})")
_THEMATIC_BREAK_RE = re.compile(r"^ {0,3}([-*_])(?:[ \t]*\1){2,}[ \t]*$")
_LIST_RE = re.compile(r"^(?P<indent>[ \t]*)(?P<marker>[-*+]|\d{1,9}[.)])(?:[ \t]+(?P<rest>.*))?$")
_TASK_RE = re.compile(r"^\[(?P<box>[ xX])\](?:[ \t]+(?P<text>.*))?$")
_BAD_CHECKBOX_RE = re.compile(r"^\[[^\]]{0,3}\](?!\()")


@dataclass(frozen=True)
class MarkdownLine:
    """One classified source line."""

    number: int
    raw: str
    kind: LineKind
    level: int = 0
    text: str = ""
    marker: str = ""
    indent: int = 0
    checked: bool = False


def _classify(number: int, raw: str) -> MarkdownLine:
    if not raw.strip():
        return MarkdownLine(number, raw, "blank")

    heading = _HEADING_RE.match(raw)
    if heading:
        text = _CLOSING_HASHES_RE.sub("", heading.group("text") or "").strip()
        return MarkdownLine(number, raw, "heading", level=len(heading.group("hashes")), text=text)
    if _BAD_HEADING_RE.match(raw):
        return MarkdownLine(number, raw, "bad-heading", text=raw.strip())

    if _THEMATIC_BREAK_RE.match(raw):
        return MarkdownLine(number, raw, "text", text=raw.strip())

    listed = _LIST_RE.match(raw)
    if listed:
        indent = len(listed.group("indent").expandtabs(TAB_WIDTH))
        marker = listed.group("marker")
        rest = (listed.group("rest") or "").rstrip()
        task = _TASK_RE.match(rest)
        if task and marker in "-*+":
            return MarkdownLine(
                number,
                raw,
                "task",
                text=(task.group("text") or "").strip(),
                marker=marker,
                indent=indent,
                checked=task.group("box") in "xX",
            )
        if _BAD_CHECKBOX_RE.match(rest) or task:
            return MarkdownLine(number, raw, "bad-checkbox", text=rest, marker=marker, indent=indent)
        return MarkdownLine(number, raw, "list", text=rest, marker=marker, indent=indent)

    return MarkdownLine(number, raw, "text", text=raw.strip())


def scan_lines(text: str) -> Iterator[MarkdownLine]:
    """Classify each line of `text`; lines inside fenced code are `code`."""

    if text.startswith("\ufeff"):
        text = text[1:]

    fence: str | None = None
    for number, raw in enumerate(text.splitlines(), start=1):
        opening = _FENCE_RE.match(raw)
        if fence is None:
            if opening:
                fence = opening.group("fence")
                yield MarkdownLine(number, raw, "fence")
                continue
            yield _classify(number, raw)
            continue

        if opening and opening.group("fence")[0] == fence[0] and len(opening.group("fence")) >= len(fence):
            if not raw.strip().lstrip(fence[0]):
                fence = None
                yield MarkdownLine(number, raw, "fence")
                continue
        yield MarkdownLine(number, raw, "code")


def build_document(lines: list[MarkdownLine]) -> ChecklistDocument:
    """Assemble the heading tree from classified lines."""

    document = ChecklistDocument()
    stack: list[ChecklistSection] = []

    for line in lines:
        if line.kind == "heading":
            section = ChecklistSection(title=line.text, level=line.level, line=line.number)
            if line.level == 1 and document.title is None:
                document.title = line.text
            while stack and stack[-1].level >= line.level:
                stack.pop()
            if stack:
                stack[-1].children.append(section)
            else:
                document.sections.append(section)
            stack.append(section)
        elif line.kind == "task":
            item = ChecklistItem(
                text=line.text,
                checked=line.checked,
                line=line.number,
                marker=line.marker,
                indent=line.indent,
            )
            if stack:
                stack[-1].items.append(item)
            else:
                document.preamble_items.append(item)

    return document


def parse_checklist(text: str) -> ChecklistDocument:
    """Parse markdown text into a `ChecklistDocument`."""

    return build_document(list(scan_lines(text)))


def read_checklist_text(path: Path) -> str:
    """Read a checklist as UTF-8 text.

    Raises:
        ChecklistReadError: the file is missing, unreadable or not UTF-8.
    """

    try:
        return path.read_bytes().decode("utf-8")
    except FileNotFoundError as exc:
        raise ChecklistReadError(f"Checklist not found: {path}") from exc
    except UnicodeDecodeError as exc:
        raise ChecklistReadError(f"Checklist is not valid UTF-8: {path} (byte {exc.start})") from exc
    except OSError as exc:
        raise ChecklistReadError(f"Could not read checklist {path}: {exc}") from exc


def load_checklist(path: Path) -> ChecklistDocument:
    return parse_checklist(read_checklist_text(path))
