"""Markdown rendering of review results for pull request comments."""

from __future__ import annotations

from upforgrabs_core.models import PresentationStrategy, Report, ResultKind, ReviewResult


def _quote_list(items) -> str:
    return "\n".join(f"> - {item}" for item in items)


def get_validation_message(result: ReviewResult, projects_dir: str = "_data/projects") -> str:
    """Render one project's result as a Markdown block."""
    path = result.path

    if result.kind == ResultKind.VALID:
        return f"#### `{path}` :white_check_mark:\nNo problems found, everything should be good to merge!"

    if result.kind == ResultKind.SCHEMA_ERROR:
        return (
            f"#### `{path}` :x:\n"
            "I had some troubles parsing the project file, or there were fields that are missing that I need.\n\n"
            f"Here's the details:\n{_quote_list(result.details)}"
        )

    if result.kind == ResultKind.TAG_ERROR:
        return f"#### `{path}` :x:\nI have some suggestions about the tags used in the project:\n\n{_quote_list(result.details)}"

    if result.kind == ResultKind.URL_ERROR:
        return (
            f"#### `{path}` :x:\n"
            f"The `upforgrabs.link` value `{result.details}` is not a valid URL. "
            "It needs to be a full link starting with `http://` or `https://`."
        )

    if result.kind in (ResultKind.REPOSITORY_ERROR, ResultKind.LABEL_ERROR):
        return f"#### `{path}` :x:\n{result.details}"

    if result.kind == ResultKind.UNSUPPORTED_EXTENSION:
        return f"#### `{path}` :x:\nFiles under `{projects_dir}/` must end with `.yml` to be listed on the site."

    return (
        f"#### `{path}` :question:\n"
        f"I got a result of type '{result.kind.value}' that I don't know how to handle. "
        "A maintainer will need to take a look at this one."
    )


def render_report(report: Report, projects_dir: str = "_data/projects") -> str:
    """Render a pull request's report, choosing the layout from the batch shape."""
    strategy = report.strategy

    if strategy == PresentationStrategy.UNEXPECTED_FILES:
        listing = "\n".join(f" - `{path}`" for path in report.non_yaml_files)
        messages = [
            "#### Unexpected files found in project directory",
            listing,
            f"All files under `{projects_dir}/` must end with `.yml` to be listed on the site",
        ]
    elif strategy == PresentationStrategy.SUMMARY:
        flagged = report.flagged_results
        messages = [f"#### {len(report.valid_results)} projects without issues :white_check_mark:"]
        if flagged:
            messages.extend(get_validation_message(r, projects_dir) for r in flagged)
        else:
            messages.append("Everything should be good to merge!")
    else:
        messages = [get_validation_message(r, projects_dir) for r in report.results.values()]

    return "\n\n".join(messages)
