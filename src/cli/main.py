"""eksup command line interface (Typer + Rich)."""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from adapters.json_exporter import export_json, to_json, to_json_list
from adapters.report_exporter import export_checklist_html, export_checklist_pdf
from cli import doctor
from cli.ui_components import build_lint_table, build_releases_table, build_summary_table, print_banner
from core.config import AppSettings
from core.domain.models import LintReport
from core.domain.versions import LATEST, Compute, KubernetesVersion, Strategy, get_target_version
from core.errors import EksupError, PdfBackendError
from core.log import configure_logging, get_logger
from core.resources_loader import load_release_data
from core.services.checklist_lint import DEFAULT_REQUIRED_SECTIONS, lint_file
from core.services.checklist_parser import load_checklist
from core.services.playbook import CLUSTER_NAME_PLACEHOLDER, PlaybookRequest, create_playbook
from core.services.summary import summarize

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Amazon EKS upgrade readiness: checklists, lint and upgrade playbooks.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)

log = get_logger(__name__)

EXIT_LINT_FAILED = 1
EXIT_ERROR = 2


class OutputFormat(str, Enum):
    TABLE = "table"
    JSON = "json"


def _fail(exc: EksupError) -> typer.Exit:
    _err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
    return typer.Exit(code=EXIT_ERROR)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs on stderr."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show error logs."),
) -> None:
    try:
        settings = AppSettings()
    except ValidationError as exc:
        for error in exc.errors():
            field = "EKSUP_" + "_".join(str(part) for part in error["loc"]).upper()
            _err_console.print(f"[red]Invalid configuration:[/red] {field}: {escape(error['msg'])}")
        raise typer.Exit(code=EXIT_ERROR) from exc

    level = settings.log_level
    if verbose:
        level = "DEBUG"
    elif quiet:
        level = "ERROR"
    configure_logging(level, json_logs=settings.json_logs)


@app.command("create-playbook")
def create_playbook_command(
    cluster_version: KubernetesVersion = typer.Option(
        ...,
        "--cluster-version",
        help="The cluster's current Kubernetes version.",
    ),
    compute: List[Compute] = typer.Option(
        ...,
        "--compute",
        help="Compute types used in the data plane (repeatable: eks, self, fargate).",
    ),
    cluster_name: str = typer.Option(
        CLUSTER_NAME_PLACEHOLDER,
        "--cluster-name",
        "--name",
        help="The name of the cluster.",
    ),
    region: Optional[str] = typer.Option(
        None,
        "--region",
        help="AWS region of the cluster (default: EKSUP_REGION).",
    ),
    custom_ami: bool = typer.Option(
        False,
        "--custom-ami",
        help="Nodes run a custom AMI rather than an EKS optimized AMI.",
    ),
    filename: Optional[str] = typer.Option(
        None,
        "--filename",
        "-f",
        help="Output file (default: <cluster>_v<target>_upgrade.md).",
    ),
    strategy: Strategy = typer.Option(
        Strategy.IN_PLACE,
        "--strategy",
        "-s",
        help="The cluster upgrade strategy.",
    ),
) -> None:
    """Create a checklist playbook for upgrading an Amazon EKS cluster."""

    if cluster_version.value == LATEST:
        _console.print(f"Cluster is already at the latest supported version: {cluster_version.value}")
        _console.print("Nothing to upgrade at this time")
        return

    request = PlaybookRequest(
        cluster_version=cluster_version,
        compute=compute,
        cluster_name=cluster_name,
        region=region,
        custom_ami=custom_ami,
        strategy=strategy,
        filename=filename,
    )
    try:
        result = create_playbook(request, settings=AppSettings())
    except EksupError as exc:
        raise _fail(exc) from exc

    if result is None:
        return
    _console.print(
        f"[green]Playbook written:[/green] {result.path} "
        f"(v{result.current_version} -> v{result.target_version})"
    )
    _console.print("Data plane: " + ", ".join(c.label() for c in dict.fromkeys(compute)), style="dim")


@app.command()
def lint(
    paths: Optional[List[Path]] = typer.Argument(
        None,
        help="Checklist files to lint (default: EKSUP_CHECKLIST_PATH or CHECKLIST.md).",
    ),
    output_format: OutputFormat = typer.Option(OutputFormat.TABLE, "--format", help="Output format."),
    required_sections: bool = typer.Option(
        True,
        "--required-sections/--no-required-sections",
        help="Require the Control Plane, Data Plane, Addons and Misc sections.",
    ),
    strict: bool = typer.Option(False, "--strict", help="Fail on warnings too."),
) -> None:
    """Lint markdown checklists: checkbox syntax, heading nesting, required sections."""

    settings = AppSettings()
    targets = list(paths or [settings.checklist_path])
    sections = DEFAULT_REQUIRED_SECTIONS if required_sections else ()

    reports: list[LintReport] = []
    for target in targets:
        try:
            reports.append(lint_file(target, required_sections=sections))
        except EksupError as exc:
            raise _fail(exc) from exc

    if output_format is OutputFormat.JSON:
        typer.echo(to_json_list(reports), nl=False)
    else:
        for report in reports:
            if report.issues:
                _console.print(build_lint_table(report))
            else:
                _console.print(f"[green]OK[/green] {report.path}: no issues")
        errors = sum(len(r.errors) for r in reports)
        warnings = sum(len(r.warnings) for r in reports)
        _console.print(f"{len(reports)} file(s) checked: {errors} error(s), {warnings} warning(s)")

    failed = any(not r.ok for r in reports) or (strict and any(r.warnings for r in reports))
    if failed:
        raise typer.Exit(code=EXIT_LINT_FAILED)


@app.command()
def summary(
    path: Optional[Path] = typer.Argument(
        None,
        help="Checklist file (default: EKSUP_CHECKLIST_PATH or CHECKLIST.md).",
    ),
    output_format: OutputFormat = typer.Option(OutputFormat.TABLE, "--format", help="Output format."),
    export_json_path: Optional[Path] = typer.Option(None, "--export-json", help="Also write the summary as JSON."),
    export_html_path: Optional[Path] = typer.Option(None, "--export-html", help="Write an HTML report."),
    export_pdf_path: Optional[Path] = typer.Option(None, "--export-pdf", help="Write a PDF report."),
) -> None:
    """Show checklist progress per section."""

    settings = AppSettings()
    target = path or settings.checklist_path
    try:
        document = load_checklist(target)
    except EksupError as exc:
        raise _fail(exc) from exc

    result = summarize(document, source=str(target))

    if output_format is OutputFormat.JSON:
        typer.echo(to_json(result), nl=False)
    else:
        if _console.is_terminal:
            print_banner(_console)
        _console.print(build_summary_table(result))

    try:
        if export_json_path:
            export_json(model=result, output_path=export_json_path)
            _err_console.print(f"[green]JSON written:[/green] {export_json_path}")
        if export_html_path:
            export_checklist_html(document=document, output_path=export_html_path, source=str(target))
            _err_console.print(f"[green]HTML written:[/green] {export_html_path}")
        if export_pdf_path:
            try:
                export_checklist_pdf(document=document, output_path=export_pdf_path, source=str(target))
                _err_console.print(f"[green]PDF written:[/green] {export_pdf_path}")
            except PdfBackendError as exc:
                log.warning("pdf backend unavailable", error=str(exc))
                fallback = export_pdf_path.with_suffix(".html")
                export_checklist_html(document=document, output_path=fallback, source=str(target))
                _err_console.print(f"[yellow]{escape(str(exc))}; HTML written instead:[/yellow] {fallback}")
    except EksupError as exc:
        raise _fail(exc) from exc


@app.command()
def releases(
    output_format: OutputFormat = typer.Option(OutputFormat.TABLE, "--format", help="Output format."),
) -> None:
    """List the supported upgrade paths and their Kubernetes release links."""

    settings = AppSettings()
    try:
        data = load_release_data(settings.release_data_path)
    except EksupError as exc:
        raise _fail(exc) from exc

    paths = [(v.value, get_target_version(v.value)) for v in KubernetesVersion if v.value != LATEST]

    if output_format is OutputFormat.JSON:
        rows = []
        for current, target in paths:
            release = data.get(target)
            rows.append(
                {
                    "current_version": current,
                    "target_version": target,
                    "release_url": release.release_url if release else None,
                    "deprecation_url": release.deprecation_url if release else None,
                }
            )
        typer.echo(json.dumps(rows, indent=2, sort_keys=True))
        return

    _console.print(build_releases_table(data, paths))
    _console.print(f"Latest supported version: {LATEST}")


def run() -> None:
    app()
