"""validate command — check a listings repository from the command line."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from upforgrabs_core.formatters.command_line import print_report
from upforgrabs_core.reviewer import ProjectReviewer, validate_directory

console = Console()


@click.command("validate")
@click.argument(
    "root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
)
@click.option(
    "--projects-dir",
    default=None,
    help="Directory holding the project files, relative to ROOT. Overrides config file.",
)
@click.option(
    "--remote",
    is_flag=True,
    help="Also check each project's GitHub repository and label.",
)
@click.pass_context
def validate_cmd(ctx, root: Path, projects_dir: str | None, remote: bool):
    """Validate every project file under ROOT.

    Runs the schema, tag and link checks on each file, reports files that
    are in the wrong place or have the wrong extension, and exits with
    status 1 if anything needs fixing.

    \b
    Optional environment variables:
      GITHUB_TOKEN   Used by --remote (falls back to the gh CLI session)
    """
    from upforgrabs_cli.auth import resolve_github_token

    config = dict(ctx.obj["config"]) if ctx.obj else {}
    if projects_dir is not None:
        config["projects_dir"] = projects_dir

    if remote:
        token = resolve_github_token()
        if not token:
            console.print(
                "[yellow]No GitHub token found. Remote checks will run unauthenticated "
                "and are likely to be rate-limited.[/yellow]"
            )
        config["github_token"] = token

    reviewer = ProjectReviewer.from_config(config, remote=remote)
    report = validate_directory(root, reviewer, config.get("projects_dir", "_data/projects"))
    print_report(report, projects_dir=config.get("projects_dir", "_data/projects"))

    if report.has_errors:
        ctx.exit(1)
