"""Doctor command for environment diagnostics."""

from __future__ import annotations

import tempfile
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from adapters.playbook_renderer import render_playbook
from core.config import AppSettings, write_user_env_vars
from core.domain.versions import LATEST, Compute, KubernetesVersion, get_target_version
from core.errors import EksupError
from core.resources_loader import get_release_data_path, load_release_data
from core.services.checklist_lint import lint_checklist, lint_file
from core.services.playbook import PlaybookRequest, build_playbook_data

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_release_data(settings: AppSettings) -> tuple[bool, str]:
    try:
        releases = load_release_data(settings.release_data_path)
    except EksupError as exc:
        return False, str(exc)
    targets = {get_target_version(v.value) for v in KubernetesVersion if v.value != LATEST}
    missing = sorted(targets - set(releases))
    if missing:
        return False, f"missing targets: {', '.join(missing)}"
    return True, f"{len(releases)} releases ({get_release_data_path(settings.release_data_path)})"


def _check_templates(settings: AppSettings) -> tuple[bool, str]:
    """Render a playbook for every upgrade path and lint the result."""

    try:
        releases = load_release_data(settings.release_data_path)
        rendered = 0
        for version in KubernetesVersion:
            if version.value == LATEST:
                continue
            for custom_ami in (False, True):
                request = PlaybookRequest(
                    cluster_version=version,
                    compute=list(Compute),
                    custom_ami=custom_ami,
                )
                markdown = render_playbook(data=build_playbook_data(request, releases))
                report = lint_checklist(markdown, path=f"playbook v{version.value}")
                if not report.ok:
                    first = report.errors[0]
                    return False, f"v{version.value}: line {first.line}: {first.message}"
                rendered += 1
    except EksupError as exc:
        return False, str(exc)
    return True, f"{rendered} playbooks rendered and linted"


def _check_checklist(settings: AppSettings) -> tuple[bool, str]:
    path = settings.checklist_path
    if not path.exists():
        return False, f"{path} not found"
    try:
        report = lint_file(path)
    except EksupError as exc:
        return False, str(exc)
    if not report.ok:
        return False, f"{len(report.errors)} lint error(s) in {path}"
    return True, f"{path} ({len(report.warnings)} warning(s))"


def _check_output_dir(settings: AppSettings) -> tuple[bool, str]:
    out = settings.output_dir
    try:
        out.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(dir=out, prefix=".eksup-doctor-"):
            pass
    except OSError as exc:
        return False, str(exc)
    return True, str(out.resolve())


def _check_pdf() -> tuple[bool, str]:
    """Import WeasyPrint to detect missing system libraries (Pango)."""

    try:
        import weasyprint  # noqa: PLC0415
    except (ImportError, OSError) as exc:
        return False, str(exc)
    return True, f"WeasyPrint {weasyprint.__version__}"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="eksup doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    if settings.region:
        table.add_row("Region", "OK", settings.region)
    else:
        table.add_row("Region", "OPTIONAL", "Not set -> playbooks use <REGION>")

    checks = [
        ("Release data", _check_release_data(settings)),
        ("Playbook templates", _check_templates(settings)),
        ("Checklist", _check_checklist(settings)),
        ("Output directory", _check_output_dir(settings)),
    ]
    for name, (ok, detail) in checks:
        table.add_row(name, "OK" if ok else "FAIL", detail)

    ok_pdf, detail_pdf = _check_pdf()
    table.add_row("WeasyPrint PDF", "OK" if ok_pdf else "OPTIONAL", detail_pdf)

    _console.print(table)

    if not ok_pdf:
        _console.print(
            "\n[yellow]Note:[/yellow] When PDF export fails, `summary --export-pdf` falls back to HTML."
        )

    if not all(ok for _, (ok, _detail) in checks):
        raise typer.Exit(code=1)


@app.command(name="set-defaults")
def set_defaults() -> None:
    """Interactive setup of user defaults (stored in the user config .env).

    An empty answer removes the stored value.
    """

    settings = AppSettings()

    region = typer.prompt("AWS region", default=settings.region or "", show_default=True).strip()
    output_dir = typer.prompt("Playbook output directory", default=str(settings.output_dir), show_default=True).strip()
    checklist = typer.prompt("Checklist path", default=str(settings.checklist_path), show_default=True).strip()

    if output_dir and Path(output_dir).exists() and not Path(output_dir).is_dir():
        raise typer.BadParameter(f"{output_dir} is not a directory")

    env_path = write_user_env_vars(
        {
            "EKSUP_REGION": region,
            "EKSUP_OUTPUT_DIR": output_dir,
            "EKSUP_CHECKLIST_PATH": checklist,
        }
    )

    _console.print(f"[green]Saved defaults to:[/green] {env_path}")
