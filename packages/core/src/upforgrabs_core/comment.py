"""Pull request comment generation.

Builds the single Markdown comment posted on a pull request that touches
project files: a hidden marker, a greeting (or an update header on
re-runs), then the rendered review of the changed files.
"""

from __future__ import annotations

from pathlib import Path

from upforgrabs_core.config import DEFAULT_CONFIG
from upforgrabs_core.formatters.markdown import render_report
from upforgrabs_core.gh.pull_request import COMMENT_MARKER
from upforgrabs_core.reviewer import ProjectReviewer, load_projects, review_batch

GREETING_HEADER = (
    ":wave: I'm a robot checking the state of this pull request to save the human reviewers time. "
    "I noticed this PR added or modified the data files under `{projects_dir}/` so I had a look at what's changed."
    "\n\n"
    "As you make changes to this pull request, I'll re-run these checks."
)

UPDATE_HEADER = "Checking the latest changes to the pull request..."


def get_header(initial_message: bool, projects_dir: str = "_data/projects") -> str:
    if initial_message:
        return GREETING_HEADER.format(projects_dir=projects_dir)
    return UPDATE_HEADER


def generate_comment(
    directory: Path | str,
    files: list[str],
    initial_message: bool = True,
    reviewer: ProjectReviewer | None = None,
    projects_dir: str = "_data/projects",
) -> str:
    """Review the changed files under directory and return the comment body.

    Without a reviewer only the offline checks run, using the bundled schema.
    """
    if reviewer is None:
        reviewer = ProjectReviewer.from_config(DEFAULT_CONFIG)

    projects = load_projects(directory, files)
    report = review_batch(projects, reviewer)

    return f"{COMMENT_MARKER}\n\n{get_header(initial_message, projects_dir)}\n\n" + render_report(report, projects_dir)
