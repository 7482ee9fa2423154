"""CLI commands for inspectsonar."""

import json
from pathlib import Path

import typer
from rich.table import Table

from inspectsonar import __logo__
from inspectsonar.cli.core import app, console
from inspectsonar.rules.languages import Language


def _load_config(config_path: Path | None, validate: bool | None = None):
    from inspectsonar.config.loader import load_config

    config = load_config(config_path)
    if validate is not None:
        config.validation.enabled = validate
    return config


def _rule_payload(rule) -> dict:
    return {
        "key": rule.key,
        "name": rule.name,
        "type": rule.rule_type.value,
        "severity": rule.severity.value,
        "status": rule.status.value,
        "activatedByDefault": rule.activated_by_default,
        "categoryId": rule.category_id,
        "descriptionSyntax": rule.description_syntax.value,
        "description": rule.description,
    }


def _issue_payload(resolved) -> dict:
    issue = resolved.issue
    return {
        "repository": resolved.repository_key,
        "ruleKey": issue.rule_key,
        "file": issue.file_path,
        "path": str(resolved.absolute_path),
        "line": issue.text_range.line,
        "startOffset": issue.text_range.start_offset,
        "endOffset": issue.text_range.end_offset,
        "message": issue.message,
    }


# ============================================================================
# Rules
# ============================================================================


@app.command()
def rules(
    report: Path = typer.Argument(..., help="InspectCode XML report"),
    language: Language = typer.Option(Language.CSHARP, "--language", "-l", help="Rule repository language"),
    overrides: Path | None = typer.Option(None, "--overrides", "-o", help="Rule override document"),
    validate: bool | None = typer.Option(None, "--validate/--no-validate", help="Validate XML against the bundled schemas"),
    as_json: bool = typer.Option(False, "--json", help="Print rules as JSON"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
):
    """Derive SonarQube rules from the issue types of a report."""
    from inspectsonar.rules.repository import load_rule_repository

    if overrides is not None and not overrides.is_file():
        console.print(f"[red]Override file not found:[/red] {overrides}")
        raise typer.Exit(1)

    config = _load_config(config_path, validate)
    repository = load_rule_repository(report, language, config=config, overrides_path=overrides)

    if as_json:
        typer.echo(json.dumps([_rule_payload(rule) for rule in repository.rules], indent=2))
        return

    if not repository.rules:
        console.print(f"[yellow]No {repository.profile.display_name} rules found in {report}[/yellow]")
        raise typer.Exit(1)

    table = Table(title=f"{repository.name} ({repository.key})")
    table.add_column("Key", style="cyan")
    table.add_column("Type")
    table.add_column("Severity", style="yellow")
    table.add_column("Category")
    for rule in repository.rules:
        table.add_row(rule.key, rule.rule_type.value, rule.severity.value, rule.category_id or "")
    console.print(table)

    merge = repository.merge
    console.print(
        f"{len(repository.rules)} rules, {len(merge.category_hits)} category overrides, "
        f"{len(merge.rule_hits)} rule overrides applied"
        + (f" (from {repository.override_source})" if repository.override_source else "")
    )
    if merge.unused_rule_overrides:
        console.print(f"[dim]Unused rule overrides: {', '.join(merge.unused_rule_overrides)}[/dim]")


# ============================================================================
# Issues
# ============================================================================


@app.command()
def issues(
    report: Path = typer.Argument(..., help="InspectCode XML report"),
    project: str | None = typer.Option(None, "--project", "-p", help="Project name inside the report"),
    solution: str | None = typer.Option(None, "--solution", "-s", help="Solution file relative to --user-dir"),
    user_dir: str | None = typer.Option(None, "--user-dir", "-d", help="Base directory of the analysis"),
    language: Language = typer.Option(Language.CSHARP, "--language", "-l", help="Rule repository language"),
    active_rules: list[str] | None = typer.Option(
        None, "--active-rule", "-r", help="Active rule key (repeatable, defaults to every rule of the report)"
    ),
    validate: bool | None = typer.Option(None, "--validate/--no-validate", help="Validate XML against the bundled schemas"),
    as_json: bool = typer.Option(False, "--json", help="Print issues as JSON"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
):
    """List the issues of one project, restricted to active rules."""
    from inspectsonar.rules.repository import load_rule_repository
    from inspectsonar.sensors.issues import IssueSensor

    config = _load_config(config_path, validate)
    sensor = config.sensor
    if project is not None:
        sensor.project_name = project
    if solution is not None:
        sensor.solution_file = solution
    if user_dir is not None:
        sensor.user_dir = user_dir
    elif not sensor.user_dir:
        sensor.user_dir = str(Path.cwd())

    if active_rules:
        active = list(active_rules)
    else:
        active = [rule.key for rule in load_rule_repository(report, language, config=config).rules]

    result = IssueSensor(language, config=config).execute(report, active)

    if as_json:
        typer.echo(json.dumps([_issue_payload(item) for item in result.issues], indent=2))
        return

    table = Table(title=f"Issues of {sensor.project_name or '(unnamed project)'}")
    table.add_column("Rule", style="cyan")
    table.add_column("File")
    table.add_column("Line", justify="right")
    table.add_column("Message")
    for item in result.issues:
        issue = item.issue
        table.add_row(issue.rule_key, str(item.absolute_path), str(issue.text_range.line), issue.message)
    console.print(table)
    console.print(f"{len(result.issues)} issues, {len(result.skipped)} skipped")


# ============================================================================
# Validate
# ============================================================================


@app.command()
def validate(
    file: Path = typer.Argument(..., help="XML document to validate"),
    kind: str = typer.Option("report", "--kind", "-k", help="Document kind: report or overrides"),
):
    """Validate a report or override document against the bundled schema."""
    from inspectsonar.parsing.validator import overrides_validator, report_validator

    factories = {"report": report_validator, "overrides": overrides_validator}
    factory = factories.get(kind.strip().lower())
    if factory is None:
        console.print(f"[red]Unknown document kind:[/red] {kind} (expected report or overrides)")
        raise typer.Exit(2)
    if not file.is_file():
        console.print(f"[red]File not found:[/red] {file}")
        raise typer.Exit(1)

    with open(file, "rb") as stream:
        valid = factory().validate(stream)

    if valid:
        console.print(f"[green]✓[/green] {file} is a valid {kind} document")
        return
    console.print(f"[red]✗[/red] {file} is not a valid {kind} document")
    raise typer.Exit(1)


# ============================================================================
# Config
# ============================================================================


@app.command("config-path")
def config_path_command():
    """Print the default config file path."""
    from inspectsonar.config.loader import get_config_path

    typer.echo(str(get_config_path()))


@app.command()
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing config"),
):
    """Create the default configuration file."""
    from inspectsonar.config.loader import get_config_path, save_config
    from inspectsonar.config.schema import Config

    config_path = get_config_path()
    if config_path.exists() and not force:
        console.print(f"[yellow]Config already exists at {config_path}[/yellow]")
        if not typer.confirm("Overwrite?"):
            raise typer.Exit()

    save_config(Config(), config_path)
    console.print(f"[green]✓[/green] Created config at {config_path}")
    console.print(f"\n{__logo__} inspectsonar is ready!")
    console.print("\nNext steps:")
    console.print("  1. Run InspectCode: [cyan]inspectcode.exe MySolution.sln -o=report.xml[/cyan]")
    console.print("  2. List rules: [cyan]inspectsonar rules report.xml[/cyan]")
