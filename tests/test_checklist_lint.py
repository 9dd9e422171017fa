from __future__ import annotations

from pathlib import Path

import pytest

from core.domain.models import LintIssue
from core.errors import ChecklistReadError
from core.interfaces.lint_rule import LintRule
from core.services.checklist_lint import default_rules, lint_checklist, lint_file

from conftest import REPO_CHECKLIST


def _rules(report) -> list[str]:
    return [issue.rule for issue in report.issues]


def test_repository_checklist_is_clean() -> None:
    report = lint_file(REPO_CHECKLIST)

    assert report.issues == []
    assert report.ok


def test_sample_checklist_is_clean(sample_text: str) -> None:
    assert lint_checklist(sample_text).issues == []


def test_every_registered_rule_satisfies_the_protocol() -> None:
    rules = default_rules()
    assert all(isinstance(rule, LintRule) for rule in rules)
    assert len({rule.name for rule in rules}) == len(rules)


def test_plain_list_item_under_heading() -> None:
    report = lint_checklist("# T\n\n- [ ] ok\n- not a task\n", required_sections=())

    assert _rules(report) == ["list-item-checkbox"]
    assert report.issues[0].line == 4
    assert not report.ok


@pytest.mark.parametrize("line", ["- [] empty", "- [ x] spaced", "- [v] letter", "- [x]glued", "1. [ ] ordered"])
def test_malformed_checkboxes(line: str) -> None:
    report = lint_checklist(f"# T\n\n- [ ] ok\n{line}\n", required_sections=())

    assert _rules(report) == ["checkbox-syntax"]


def test_links_in_list_items_are_not_checkboxes() -> None:
    report = lint_checklist("# T\n\n- [ ] ok\n- [docs](https://example.com)\n", required_sections=())

    assert _rules(report) == ["list-item-checkbox"]


def test_tab_indented_items_are_linted() -> None:
    report = lint_checklist("# T\n\n- [ ] parent\n\t- [ ] nested\n\t- plain nested\n", required_sections=())

    assert _rules(report) == ["list-item-checkbox"]
    assert report.issues[0].line == 5


def test_empty_task_item_is_a_warning() -> None:
    report = lint_checklist("# T\n\n- [ ] ok\n- [ ]\n- [x]   \n", required_sections=())

    empty = [i for i in report.issues if i.rule == "empty-item"]
    assert [i.line for i in empty] == [4, 5]
    assert all(i.severity == "warning" for i in empty)
    assert report.ok


def test_heading_nesting() -> None:
    report = lint_checklist("## Start\n\n- [ ] a\n\n#### Deep\n\n- [ ] b\n", required_sections=())

    assert _rules(report) == ["heading-start", "heading-increment"]
    assert [i.line for i in report.issues] == [1, 5]


def test_heading_without_space_and_empty_heading() -> None:
    report = lint_checklist("# T\n\n#Broken\n\n- [ ] a\n\n##\n", required_sections=())

    assert "heading-space" in _rules(report)
    assert "empty-heading" in _rules(report)


def test_item_before_heading() -> None:
    report = lint_checklist("- [ ] early\n- also early\n\n# T\n\n- [ ] a\n", required_sections=())

    assert _rules(report) == ["item-before-heading", "item-before-heading"]


def test_warnings_do_not_fail_the_report() -> None:
    text = "# T\n\n## Empty\n\n## Dupes\n\n- [ ] same\n- [x] Same \n\n# Second\n\n- [ ] z\n"
    report = lint_checklist(text, required_sections=())

    assert sorted(_rules(report)) == ["duplicate-item", "empty-section", "single-title", "trailing-whitespace"]
    assert report.errors == []
    assert report.ok


def test_required_sections_are_case_insensitive_and_configurable() -> None:
    text = "# T\n\n## control plane\n\n- [ ] a\n\n## Addons\n\n- [ ] b\n"
    report = lint_checklist(text)

    missing = [i.message for i in report.issues if i.rule == "required-section"]
    assert missing == ["Missing required section: 'Data Plane'", "Missing required section: 'Misc'"]
    assert all(i.line == 0 for i in report.issues)

    assert lint_checklist(text, required_sections=("Control Plane",)).ok


def test_empty_document_only_misses_sections() -> None:
    report = lint_checklist("")

    assert _rules(report) == ["required-section"] * 4


def test_code_blocks_are_skipped() -> None:
    text = "# T\n\n- [ ] a\n\n```\n- plain   \n#bad\n```\n"
    assert lint_checklist(text, required_sections=()).issues == []


def test_issues_are_sorted_by_line() -> None:
    report = lint_checklist("# T\n\n- b\n\n#### x\n\n- [ ] c \n", required_sections=())
    lines = [i.line for i in report.issues]
    assert lines == sorted(lines)


def test_custom_rule_registry() -> None:
    class NoTodoRule:
        name = "no-todo"

        def check(self, document, lines):
            for item in document.iter_items():
                if "TODO" in item.text:
                    yield LintIssue(rule=self.name, severity="warning", line=item.line, message="Unresolved TODO")

    rule = NoTodoRule()
    assert isinstance(rule, LintRule)

    report = lint_checklist("# T\n\n- [ ] TODO fill in\n- plain\n", rules=[rule])

    assert _rules(report) == ["no-todo"]
    assert report.issues[0].line == 3


def test_non_utf8_file_reports_encoding(tmp_path: Path) -> None:
    path = tmp_path / "bad.md"
    path.write_bytes(b"# T\n\n- [ ] caf\xe9\n")

    report = lint_file(path)

    assert _rules(report) == ["encoding"]
    assert report.issues[0].line == 3
    assert report.path == str(path)


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ChecklistReadError):
        lint_file(tmp_path / "nope.md")
