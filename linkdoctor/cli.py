"""CLI entry point: linkdoctor.

Subcommands:
    linkdoctor check                  # audit file:/link: dependencies, offer a fix
    linkdoctor check --yes            # audit and fix without asking
    linkdoctor check --no-fix --json  # machine-readable report only
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import click

from linkdoctor.config import Settings
from linkdoctor.core.logging import setup_logging
from linkdoctor.exceptions import InstallError, ManifestError
from linkdoctor.fs import LocalFileSystem
from linkdoctor.installer import run_command
from linkdoctor.manifest import load_dependencies
from linkdoctor.reconcile.engine import Reconciler
from linkdoctor.reconcile.models import PassStatus, ReconciliationReport, Verdict

EXIT_CLEAN = 0
EXIT_ISSUES = 1
EXIT_PRECONDITION = 2


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """linkdoctor: find and fix stale locally-linked dependencies."""
    setup_logging("DEBUG" if verbose else None)


@main.command("check")
@click.option(
    "-p",
    "--project",
    default=".",
    type=click.Path(exists=True, file_okay=False),
    help="Project directory containing package.json",
)
@click.option("--fix/--no-fix", default=None, help="Repair mismatched links (default: ask)")
@click.option(
    "--install/--no-install",
    default=None,
    help="Run the install command when the dependency store is missing (default: ask)",
)
@click.option("-y", "--yes", is_flag=True, help="Answer yes to every question")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
def check(
    project: str,
    fix: bool | None,
    install: bool | None,
    yes: bool,
    as_json: bool,
) -> None:
    """Check that every file: dependency resolves to its declared path."""
    settings = Settings.from_env()
    project_root = Path(project).resolve()

    try:
        dependencies = load_dependencies(project_root)
    except ManifestError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_PRECONDITION)

    store_root = settings.store_root(project_root)
    if not store_root.exists():
        _echo("Dependencies are not installed!", as_json)
        if not _decide(
            install,
            yes,
            as_json,
            f"Do you want to install dependencies using '{settings.install_command}'?",
        ):
            _echo("OK!", as_json)
            sys.exit(EXIT_ISSUES)
        try:
            output = asyncio.run(run_command(settings.install_command, cwd=project_root))
        except InstallError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(EXIT_ISSUES)
        if output:
            _echo(output, as_json)

    reconciler = Reconciler(
        LocalFileSystem(),
        project_root,
        settings.registry_root,
        store_root=store_root,
        schemes=settings.local_schemes,
    )
    report = asyncio.run(reconciler.inspect(dependencies))

    if not as_json:
        _print_unavailable(report)

    if report.can_repair:
        if not as_json:
            _print_mismatched(report)
        if _decide(fix, yes, as_json, "Do you want to fix them?"):
            report = asyncio.run(reconciler.repair(report))
            if not as_json:
                _print_repairs(report)
        else:
            reconciler.progress.skip("repair", "declined")

    if as_json:
        payload = report.to_dict()
        payload["progress"] = reconciler.progress.get_summary()
        click.echo(json.dumps(payload, indent=2))
    elif report.status is PassStatus.CLEAN and not report.repairs:
        click.echo("no issues found! you are good to go!")

    sys.exit(EXIT_CLEAN if report.status is PassStatus.CLEAN else EXIT_ISSUES)


def _echo(message: str, as_json: bool) -> None:
    # Keep stdout pure JSON in --json mode
    click.echo(message, err=as_json)


def _decide(flag: bool | None, yes: bool, as_json: bool, question: str) -> bool:
    if flag is not None:
        return flag
    if yes:
        return True
    if as_json:
        return False
    return click.confirm(question, default=False)


def _print_unavailable(report: ReconciliationReport) -> None:
    for u in report.unavailable:
        dep = u.dependency
        if u.verdict is Verdict.MISSING_DECLARED_TARGET:
            click.echo(f"Dependency does not exist: {dep.name} -> {dep.specifier}", err=True)
        else:
            click.echo(f"Dependency is not installed: {dep.name}", err=True)
            if u.detail:
                click.echo(click.style(f"  {u.detail}", dim=True), err=True)


def _print_mismatched(report: ReconciliationReport) -> None:
    mismatched = report.mismatched
    noun = "dependencies" if len(mismatched) > 1 else "dependency"
    click.echo(f"You have {len(mismatched)} {noun} with incorrect path!")
    for dep in mismatched:
        click.echo(dep.name)
        click.echo(f"your path: {click.style(str(dep.expected_installed_path), fg='yellow')}")
        click.echo(f"while, real path: {click.style(str(dep.canonical_path), fg='green')}")


def _print_repairs(report: ReconciliationReport) -> None:
    for outcome in report.repairs:
        if outcome.succeeded:
            click.echo(f"  [+] {outcome.dependency.name}")
        else:
            click.echo(
                f"  [!] {outcome.dependency.name}: {outcome.error} "
                f"(stopped at {outcome.state.value})",
                err=True,
            )
    if not report.failed_repairs:
        click.echo("done!")


if __name__ == "__main__":
    main()
