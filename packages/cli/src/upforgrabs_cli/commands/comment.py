"""comment command — review a pull request's project files as a Markdown comment."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from upforgrabs_core.comment import generate_comment
from upforgrabs_core.gh.pull_request import (
    get_changed_project_files,
    get_pull,
    get_repo,
    has_previous_comment,
    post_comment,
)
from upforgrabs_core.reviewer import ProjectReviewer

# Status goes to stderr so stdout carries only the comment body.
console = Console(stderr=True)


@click.command("comment")
@click.argument("files", nargs=-1)
@click.option(
    "--dir",
    "directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Checkout of the pull request's head; FILES are relative to it.",
)
@click.option("--repo", default=None, help="GitHub repository in owner/name format.")
@click.option("--pr", "pr_number", type=int, default=None, help="Pull request number.")
@click.option(
    "--update/--initial",
    "update",
    default=None,
    help="Use the re-run header instead of the greeting. Detected from earlier comments when --pr is given.",
)
@click.option("--post", is_flag=True, help="Post the comment on the pull request.")
@click.option("--offline", is_flag=True, help="Skip the GitHub repository and label checks.")
@click.pass_context
def comment_cmd(
    ctx,
    files: tuple[str, ...],
    directory: Path,
    repo: str | None,
    pr_number: int | None,
    update: bool | None,
    post: bool,
    offline: bool,
):
    """Review changed project FILES and print the pull request comment.

    With --repo and --pr and no FILES, the changed files are taken from the
    pull request itself.

    \b
    Environment variables:
      GITHUB_TOKEN   Needed for --post; used by the remote checks
                     (falls back to the gh CLI session)
    """
    from upforgrabs_cli.auth import resolve_github_token

    if (repo is None) != (pr_number is None):
        raise click.UsageError("--repo and --pr must be given together.")
    if post and pr_number is None:
        raise click.UsageError("--post needs --repo and --pr to know where to comment.")

    config = dict(ctx.obj["config"]) if ctx.obj else {}
    projects_dir = config.get("projects_dir", "_data/projects")

    token = resolve_github_token()
    if post and not token:
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )
    config["github_token"] = token

    pr = None
    if repo is not None:
        pr = get_pull(get_repo(repo, token=token), pr_number)
        if not files:
            files = tuple(get_changed_project_files(pr, projects_dir))
        if update is None:
            update = has_previous_comment(pr)

    if not files:
        console.print("[yellow]No changed project files to review.[/yellow]")
        return

    reviewer = ProjectReviewer.from_config(config, remote=not offline)
    body = generate_comment(
        directory,
        list(files),
        initial_message=not update,
        reviewer=reviewer,
        projects_dir=projects_dir,
    )
    click.echo(body)

    if post:
        post_comment(pr, body)
        console.print(f"[green]Comment posted on {repo}#{pr_number}.[/green]")
