from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

from cli import main as cli_main
from cli.main import app
from core.errors import ExportError, PdfBackendError
from core.services.checklist_lint import lint_file

from conftest import REPO_CHECKLIST

runner = CliRunner()


def test_help_lists_commands() -> None:
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    for command in ("create-playbook", "lint", "summary", "releases", "doctor"):
        assert command in result.output


def test_create_playbook(isolated_env: Path) -> None:
    result = runner.invoke(
        app,
        [
            "create-playbook",
            "--cluster-version",
            "1.23",
            "--compute",
            "eks",
            "--compute",
            "fargate",
            "--cluster-name",
            "prod",
            "--region",
            "us-east-1",
        ],
    )

    assert result.exit_code == 0, result.output
    playbook = isolated_env / "prod_v1.24_upgrade.md"
    assert playbook.is_file()
    report = lint_file(playbook)
    assert report.issues == []
    assert "### Fargate Profiles" in playbook.read_text(encoding="utf-8")


def test_create_playbook_uses_configured_output_dir(isolated_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EKSUP_OUTPUT_DIR", str(isolated_env / "playbooks"))

    result = runner.invoke(
        app,
        ["create-playbook", "--cluster-version", "1.20", "--compute", "self", "--custom-ami", "-f", "upgrade.md"],
    )

    assert result.exit_code == 0, result.output
    content = (isolated_env / "playbooks" / "upgrade.md").read_text(encoding="utf-8")
    assert "<CLUSTER_NAME>" in content
    assert "Build a custom AMI for Kubernetes v1.21" in content


def test_create_playbook_at_latest_version(isolated_env: Path) -> None:
    result = runner.invoke(app, ["create-playbook", "--cluster-version", "1.24", "--compute", "eks"])

    assert result.exit_code == 0
    assert "already at the latest supported version: 1.24" in result.output
    assert list(isolated_env.iterdir()) == []


@pytest.mark.parametrize(
    "args",
    [
        ["create-playbook", "--cluster-version", "1.19", "--compute", "eks"],
        ["create-playbook", "--cluster-version", "1.23", "--compute", "ec2"],
        ["create-playbook", "--cluster-version", "1.23"],
        ["create-playbook", "--cluster-version", "1.23", "--compute", "eks", "--strategy", "blue-green"],
    ],
)
def test_create_playbook_rejects_bad_input(args: list[str]) -> None:
    result = runner.invoke(app, args)
    assert result.exit_code == 2


def test_create_playbook_missing_release_data(isolated_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    data = isolated_env / "releases.yaml"
    data.write_text('"1.22":\n  release_url: https://example.com/1.22\n', encoding="utf-8")
    monkeypatch.setenv("EKSUP_RELEASE_DATA_PATH", str(data))

    result = runner.invoke(app, ["create-playbook", "--cluster-version", "1.23", "--compute", "eks"])

    assert result.exit_code == 2
    assert "No release data for Kubernetes 1.24" in result.output
    assert not (isolated_env / "playbook.md").exists()


def test_lint_repository_checklist() -> None:
    result = runner.invoke(app, ["lint", str(REPO_CHECKLIST)])

    assert result.exit_code == 0, result.output
    assert "0 error(s), 0 warning(s)" in result.output


def test_lint_defaults_to_configured_checklist(sample_file: Path) -> None:
    result = runner.invoke(app, ["lint"])
    assert result.exit_code == 0, result.output


def test_lint_json_and_failure_exit_code(isolated_env: Path) -> None:
    bad = isolated_env / "bad.md"
    bad.write_text("# T\n\n- [ ] ok\n- plain\n", encoding="utf-8")

    result = runner.invoke(app, ["lint", str(bad), "--format", "json", "--no-required-sections"])

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload[0]["ok"] is False
    assert [i["rule"] for i in payload[0]["issues"]] == ["list-item-checkbox"]


def test_lint_strict_fails_on_warnings(isolated_env: Path) -> None:
    warn = isolated_env / "warn.md"
    warn.write_text("# T\n\n- [ ] ok \n", encoding="utf-8")

    relaxed = runner.invoke(app, ["lint", str(warn), "--no-required-sections"])
    strict = runner.invoke(app, ["lint", str(warn), "--no-required-sections", "--strict"])

    assert relaxed.exit_code == 0
    assert strict.exit_code == 1


def test_lint_missing_file(isolated_env: Path) -> None:
    result = runner.invoke(app, ["lint", str(isolated_env / "missing.md")])

    assert result.exit_code == 2
    assert "not found" in result.output


def test_summary_json(sample_file: Path) -> None:
    result = runner.invoke(app, ["summary", str(sample_file), "--format", "json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert (payload["done"], payload["total"]) == (2, 6)


def test_summary_table_and_exports(sample_file: Path, isolated_env: Path) -> None:
    result = runner.invoke(
        app,
        [
            "summary",
            "--export-json",
            str(isolated_env / "out" / "summary.json"),
            "--export-html",
            str(isolated_env / "out" / "summary.html"),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Control Plane" in result.output
    assert json.loads((isolated_env / "out" / "summary.json").read_text(encoding="utf-8"))["total"] == 6
    assert "Check version skew" in (isolated_env / "out" / "summary.html").read_text(encoding="utf-8")


def test_summary_pdf_falls_back_to_html(
    sample_file: Path, isolated_env: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _no_pdf(**kwargs):
        raise PdfBackendError("PDF export is not available: cannot load library 'pango'")

    monkeypatch.setattr(cli_main, "export_checklist_pdf", _no_pdf)

    result = runner.invoke(app, ["summary", str(sample_file), "--export-pdf", str(isolated_env / "report.pdf")])

    assert result.exit_code == 0, result.output
    assert (isolated_env / "report.html").is_file()
    assert not (isolated_env / "report.pdf").exists()


def test_summary_pdf_write_failure_does_not_fall_back(
    sample_file: Path, isolated_env: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _write_fails(**kwargs):
        raise ExportError("Could not write PDF report: permission denied")

    monkeypatch.setattr(cli_main, "export_checklist_pdf", _write_fails)

    result = runner.invoke(app, ["summary", str(sample_file), "--export-pdf", str(isolated_env / "report.pdf")])

    assert result.exit_code == 2
    assert "permission denied" in result.output
    assert not (isolated_env / "report.html").exists()


@pytest.mark.parametrize("option", ["--export-json", "--export-html"])
def test_summary_unwritable_export_path(sample_file: Path, isolated_env: Path, option: str) -> None:
    blocker = isolated_env / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    result = runner.invoke(app, ["summary", str(sample_file), "--format", "json", option, str(blocker / "out")])

    assert result.exit_code == 2
    assert "Could not write" in result.output
    assert result.exception is None or isinstance(result.exception, SystemExit)


def test_invalid_log_level_setting(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EKSUP_LOG_LEVEL", "verbose")

    result = runner.invoke(app, ["releases"])

    assert result.exit_code == 2
    assert "EKSUP_LOG_LEVEL" in result.output


def test_summary_missing_file(isolated_env: Path) -> None:
    result = runner.invoke(app, ["summary", str(isolated_env / "missing.md")])
    assert result.exit_code == 2


def test_releases_json() -> None:
    result = runner.invoke(app, ["releases", "--format", "json"])

    assert result.exit_code == 0, result.output
    rows = json.loads(result.stdout)
    assert [(r["current_version"], r["target_version"]) for r in rows] == [
        ("1.20", "1.21"),
        ("1.21", "1.22"),
        ("1.22", "1.23"),
        ("1.23", "1.24"),
    ]
    assert all(r["release_url"] for r in rows)


def test_releases_table() -> None:
    result = runner.invoke(app, ["releases"])

    assert result.exit_code == 0, result.output
    assert "Latest supported version: 1.24" in result.output


def test_doctor_run(sample_file: Path) -> None:
    result = runner.invoke(app, ["doctor", "run"])

    assert result.exit_code == 0, result.output
    assert "Release data" in result.output


def test_doctor_run_fails_without_checklist() -> None:
    result = runner.invoke(app, ["doctor", "run"])
    assert result.exit_code == 1


@pytest.mark.skipif(not sys.platform.startswith("linux"), reason="XDG config dir is Linux only")
def test_doctor_set_defaults(tmp_path: Path) -> None:
    result = runner.invoke(app, ["doctor", "set-defaults"], input="eu-north-1\nplaybooks\nCHECKLIST.md\n")

    assert result.exit_code == 0, result.output
    env = (tmp_path / "xdg" / "eksup" / ".env").read_text(encoding="utf-8")
    assert "EKSUP_REGION=eu-north-1" in env
    assert "EKSUP_OUTPUT_DIR=playbooks" in env


def test_verbose_flag_is_accepted(sample_file: Path) -> None:
    result = runner.invoke(app, ["--verbose", "summary", "--format", "json"])
    assert result.exit_code == 0, result.output
