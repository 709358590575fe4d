"""Main CLI entry point for the JBT importer."""

import sys
from typing import Any, Dict, Optional
from pathlib import Path

import click
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    BarColumn,
    TaskProgressColumn,
)
from rich.table import Table

from .. import __version__
from ..config.config import Config, RunMode
from ..exceptions import JBTImporterError
from ..migration.engine import PipelineEngine
from ..migration.orchestrator import RunSummary
from ..models.issue import IssueFileState
from ..models.outcome import OutcomeKind
from ..utils.logging import setup_logging

console = Console()

BUCKET_LABELS = {
    OutcomeKind.SUCCESS: 'Imported cleanly',
    OutcomeKind.FILE_ATTACHMENT_ERROR: 'File attachment errors',
    OutcomeKind.WORKFLOW_TRANSITION_ERROR: 'Transition errors',
    OutcomeKind.OTHER_ERROR: 'Other errors',
}

STATE_STYLES = {
    IssueFileState.ORIGINAL: 'green',
    IssueFileState.TRANSFORMED: 'yellow',
    IssueFileState.MISSING: 'red',
}

export_dir_option = click.option(
    '--export-dir',
    '-d',
    type=click.Path(file_okay=False),
    help='BugTrack export directory',
)


@click.group()
@click.version_option(version=__version__, prog_name='jbt-importer')
@click.option(
    '--config',
    '-c',
    type=click.Path(exists=True),
    help='Path to configuration file',
)
@click.option(
    '--verbose',
    '-v',
    is_flag=True,
    help='Enable verbose logging',
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], verbose: bool) -> None:
    """Jira BugTrack issue importer - import, transform or revert BugTrack exports."""
    ctx.ensure_object(dict)

    if config:
        ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose

    # Basic logging until the configuration has been read
    setup_logging('DEBUG' if verbose else 'INFO')


@cli.command()
@click.option(
    '--output',
    '-o',
    default='config.yaml',
    help='Output configuration file path',
)
def init(output: str) -> None:
    """Initialize a new configuration file."""
    console.print(
        Panel.fit(
            '[bold green]Jira BugTrack issue importer[/bold green]\n'
            'Initializing configuration...',
            border_style='green',
        )
    )

    try:
        Config.create_template(output)

        console.print(f'[green]✓[/green] Configuration template created at: {output}')
        console.print(
            f'[yellow]Please edit {output} with your Jira and export details[/yellow]'
        )

    except OSError as e:
        console.print(f'[red]✗[/red] Failed to create configuration: {e}')
        sys.exit(1)


@cli.command(name='import')
@click.option('--username', '-u', help='Jira username')
@click.option('--password', '-p', help='Jira password')
@click.option('--url', '-h', help='Jira base URL')
@export_dir_option
@click.pass_context
def import_issues(
    ctx: click.Context,
    username: Optional[str],
    password: Optional[str],
    url: Optional[str],
    export_dir: Optional[str],
) -> None:
    """Import every exported issue into Jira."""
    overrides = {
        'jira': {'url': url, 'username': username, 'password': password},
        'export': {'directory': export_dir, 'stylesheet': '', 'revert': False},
    }
    _run(ctx, overrides, RunMode.IMPORT)


@cli.command()
@click.option(
    '--stylesheet',
    '-x',
    type=click.Path(dir_okay=False),
    help='XSLT file to apply to every issue',
)
@export_dir_option
@click.pass_context
def transform(
    ctx: click.Context, stylesheet: Optional[str], export_dir: Optional[str]
) -> None:
    """Transform every exported issue file with an XSLT style sheet."""
    overrides = {
        'export': {'directory': export_dir, 'stylesheet': stylesheet, 'revert': False},
    }
    _run(ctx, overrides, RunMode.TRANSFORM)


@cli.command()
@export_dir_option
@click.pass_context
def revert(ctx: click.Context, export_dir: Optional[str]) -> None:
    """Restore the original issue files saved by a transform run."""
    overrides = {'export': {'directory': export_dir, 'revert': True}}
    _run(ctx, overrides, RunMode.REVERT)


@cli.command()
@export_dir_option
@click.pass_context
def status(ctx: click.Context, export_dir: Optional[str]) -> None:
    """Show every exported issue and the state of its file."""
    console.print(
        Panel.fit(
            '[bold magenta]Jira BugTrack issue importer[/bold magenta]\nExport Status',
            border_style='magenta',
        )
    )

    try:
        config = _load_config(ctx, {'export': {'directory': export_dir}})
        _setup_logging_with_config(ctx, config)

        engine = PipelineEngine(config)
        states = engine.issue_states()

        table = Table(title=f'Export: {config.export.directory}')
        table.add_column('Issue', style='cyan')
        table.add_column('File')
        table.add_column('State')

        for issue, state in states:
            style = STATE_STYLES[state]
            table.add_row(issue.id, issue.full_path, f'[{style}]{state.value}[/{style}]')

        console.print(table)

    except (JBTImporterError, OSError, ValueError, yaml.YAMLError) as e:
        console.print(f'[red]✗[/red] Failed to load status: {e}')
        if ctx.obj.get('verbose'):
            console.print_exception()
        sys.exit(1)


def _run(ctx: click.Context, overrides: Dict[str, Any], mode: RunMode) -> None:
    """Load configuration, run one operation and print its summary."""
    titles = {
        RunMode.IMPORT: ('blue', 'Beginning import...'),
        RunMode.TRANSFORM: ('cyan', 'Beginning transformation...'),
        RunMode.REVERT: ('yellow', 'Reverting transformation...'),
    }
    colour, message = titles[mode]
    console.print(
        Panel.fit(
            f'[bold {colour}]Jira BugTrack issue importer[/bold {colour}]\n{message}',
            border_style=colour,
        )
    )

    try:
        config = _load_config(ctx, overrides)
        _setup_logging_with_config(ctx, config)

        if config.run_mode != mode:
            raise click.UsageError(
                f'Configuration selects the {config.run_mode.value} mode, '
                f'not {mode.value}'
            )

        console.print(f'Export directory: {config.export.directory}')
        summary = _run_with_progress(PipelineEngine(config))
        _display_summary(summary)

    except (JBTImporterError, OSError, ValueError, yaml.YAMLError) as e:
        console.print(f'[red]✗[/red] {mode.value.capitalize()} failed: {e}')
        if ctx.obj.get('verbose'):
            console.print_exception()
        sys.exit(1)


def _load_config(ctx: click.Context, overrides: Dict[str, Any]) -> Config:
    """Load configuration from file or environment, applying CLI overrides."""
    ctx.ensure_object(dict)
    config_path = ctx.obj.get('config_path')

    if config_path:
        if not Path(config_path).exists():
            raise FileNotFoundError(f'Configuration file not found: {config_path}')
        return Config.from_file(config_path, overrides)

    # Try to load from default locations
    default_paths = ['config.yaml', 'config.yml', '.jbt-importer.yaml']
    for path in default_paths:
        if Path(path).exists():
            return Config.from_file(path, overrides)

    # Fall back to environment variables
    return Config.from_env(overrides)


def _setup_logging_with_config(ctx: click.Context, config: Config) -> None:
    """Setup logging with configuration from config file."""
    verbose = ctx.obj.get('verbose', False)

    # Verbose flag overrides the configured level
    log_level = 'DEBUG' if verbose else config.logging.level
    setup_logging(
        level=log_level, log_file=config.logging.file, log_format=config.logging.format
    )


def _run_with_progress(engine: PipelineEngine) -> RunSummary:
    """Run the engine with a progress bar."""
    with Progress(
        SpinnerColumn(),
        TextColumn('[progress.description]{task.description}'),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        task = progress.add_task(f'[blue]{engine.mode.value.capitalize()}...', total=None)

        def update_progress(current: int, total: int, description: str):
            progress.update(
                task, completed=current, total=total, description=description
            )

        return engine.run(progress_callback=update_progress)


def _display_summary(summary: RunSummary) -> None:
    """Display run summary results."""
    table = Table(title=f'{summary.mode.value.capitalize()} Summary')
    table.add_column('Outcome', style='cyan')
    table.add_column('Count', style='blue', justify='right')

    if summary.mode == RunMode.IMPORT:
        for kind, count in summary.counts.items():
            table.add_row(BUCKET_LABELS[kind], str(count))
    else:
        table.add_row('Processed', str(summary.successful))
        table.add_row('Errors', str(summary.failed))
    table.add_row('Total', str(summary.total))

    console.print(table)

    for kind, label in BUCKET_LABELS.items():
        if kind == OutcomeKind.SUCCESS:
            continue
        ids = summary.issue_ids(kind)
        if ids:
            console.print(f'\n[red]{label} ({len(ids)}):[/red] {", ".join(ids)}')

    failures = [outcome for outcome in summary.outcomes if not outcome.success]
    for outcome in failures[:5]:
        console.print(f'  • {outcome.issue_id} ({outcome.path}): {outcome.diagnostic}')
    if len(failures) > 5:
        console.print(f'  ... and {len(failures) - 5} more errors')

    if summary.completed_at:
        duration = summary.completed_at - summary.started_at
        console.print(f'\n[blue]Duration:[/blue] {duration}')


def main() -> None:
    """Main entry point for the CLI application."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print('\n[red]Run interrupted by user[/red]')
        sys.exit(1)


if __name__ == '__main__':
    main()
