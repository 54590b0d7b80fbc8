"""Plain-text report for terminal runs."""

from __future__ import annotations

from rich.console import Console

from upforgrabs_core.models import Report, ResultKind, ReviewResult

console = Console(soft_wrap=True, highlight=False)


def result_messages(result: ReviewResult) -> list[str]:
    """Return the lines explaining why a result was flagged."""
    if result.kind in (ResultKind.SCHEMA_ERROR, ResultKind.TAG_ERROR):
        return list(result.details)
    if result.kind == ResultKind.URL_ERROR:
        return [f"The `upforgrabs.link` value '{result.details}' is not a valid http or https URL"]
    if result.kind in (ResultKind.REPOSITORY_ERROR, ResultKind.LABEL_ERROR):
        return [result.details]
    if result.kind == ResultKind.UNSUPPORTED_EXTENSION:
        return ["Project files must end with .yml to be listed on the site"]
    return [f"Unhandled result type '{result.kind.value}'"]


def print_report(report: Report, out: Console | None = None, projects_dir: str = "_data/projects") -> None:
    out = out or console

    flagged = report.flagged_results
    if flagged:
        out.print(f"{len(flagged)} projects contain errors:", style="bold red", markup=False)
        for result in flagged:
            out.print(f"  - {result.path}", markup=False)
            for message in result_messages(result):
                out.print(f"    - {message}", markup=False)
    elif report.results:
        out.print(f"{len(report.results)} files processed - no errors found!", style="green", markup=False)

    if report.stray_files:
        out.print()
        out.print(
            f"{len(report.stray_files)} files found in root which look like project files:",
            style="bold yellow",
            markup=False,
        )
        for path in report.stray_files:
            out.print(f"  - {path}", markup=False)
        out.print(f"Move these inside {projects_dir}/ to ensure they are listed on the site", markup=False)

    if report.non_yaml_files:
        out.print()
        out.print(
            f"{len(report.non_yaml_files)} files found in projects directory which are not YAML files:",
            style="bold yellow",
            markup=False,
        )
        for path in report.non_yaml_files:
            out.print(f"  - {path}", markup=False)
        out.print("Remove these from the repository as they will not be used by the site", markup=False)

    if not report.results and not report.stray_files and not report.non_yaml_files:
        out.print("No project files found.", style="yellow", markup=False)
