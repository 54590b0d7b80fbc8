"""Core project review orchestration."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable

from upforgrabs_core.gh.checks import GitHubChecks, RemoteBudget, RemoteChecks, StatusReason
from upforgrabs_core.models import (
    LabelErrorResult,
    Project,
    Report,
    RepositoryErrorResult,
    ReviewResult,
    SchemaErrorResult,
    TagErrorResult,
    UnsupportedExtensionResult,
    UrlErrorResult,
    ValidResult,
    load_project,
)
from upforgrabs_core.validators.directory import scan_directory
from upforgrabs_core.validators.schema import SchemaValidator
from upforgrabs_core.validators.tags import validate_tags
from upforgrabs_core.validators.url import is_valid_url

logger = logging.getLogger(__name__)

Validator = Callable[[Project], list[str]]


def repository_message(project: Project, remote: RemoteChecks) -> str | None:
    """Return an explanation when the project's repository is not usable, else None."""
    pair = project.owner_name_pair
    result = remote.check_repository(pair)

    if result.rate_limited:
        logger.info("Repository check for %s is inconclusive (rate-limited); treating as passed", pair)
        return None

    if result.reason == StatusReason.ARCHIVED:
        return f"The GitHub repository '{pair}' has been marked as archived, which suggests it is not active."

    if result.reason == StatusReason.MISSING:
        return f"The GitHub repository '{pair}' cannot be found. Please confirm the location of the project."

    if result.reason == StatusReason.REDIRECT:
        return (
            f"The GitHub repository '{result.old_location}' is now at '{result.location}'. "
            "Please update this project before this is merged."
        )

    if result.reason == StatusReason.ERROR:
        return f"The GitHub repository '{pair}' could not be confirmed. Error details: {result.error}"

    return None


def label_message(project: Project, remote: RemoteChecks) -> str | None:
    """Return an explanation when the project's label or link is wrong, else None."""
    pair = project.owner_name_pair
    label = project.label
    result = remote.check_label(pair, label)

    if result.rate_limited:
        logger.info("Label check for %s is inconclusive (rate-limited); treating as passed", pair)
        return None

    if result.reason == StatusReason.ERROR:
        return (
            f"The label '{label}' for GitHub repository '{pair}' could not be confirmed. "
            f"Error details: {result.error}"
        )

    if result.reason == StatusReason.REPOSITORY_MISSING:
        return (
            f"I couldn't find the GitHub repository '{pair}' that was used in the `upforgrabs.link` value. "
            "Please confirm this is correct or hasn't been mis-typed."
        )

    if result.reason == StatusReason.MISSING:
        return (
            f"The `upforgrabs.name` value '{label}' isn't in use on the project in GitHub. "
            "This might just be a mistake because of copy-pasting the reference template or be mis-typed. "
            f"Please check the list of labels at https://github.com/{pair}/labels "
            "and update the project file to use the correct label."
        )

    link = project.link
    if result.url and link != result.url and "/labels/" in link:
        return (
            f"The label '{label}' for GitHub repository '{pair}' does not match the specified "
            f"`upforgrabs.link` value. Please update it to `{result.url}`."
        )

    return None


class ProjectReviewer:
    """Classifies projects by running the checks in order, stopping at the first failure.

    Local checks (extension, schema, tags, link syntax) always run before the
    remote ones, so a project with local problems never causes a network
    call. ``remote=None`` means an offline run: remote-tracked projects that
    pass the local checks are reported as valid.
    """

    def __init__(
        self,
        validate_schema: Validator,
        validate_tags: Validator = validate_tags,
        remote: RemoteChecks | None = None,
        allowed_extensions: Iterable[str] = (".yml",),
        max_workers: int = 4,
    ):
        self._validate_schema = validate_schema
        self._validate_tags = validate_tags
        self._remote = remote
        self.allowed_extensions = tuple(allowed_extensions)
        self._max_workers = max_workers

    @classmethod
    def from_config(cls, config: dict, remote: bool = False) -> ProjectReviewer:
        checks = None
        if remote:
            budget = RemoteBudget(
                timeout=config.get("batch_timeout"),
                shared=config.get("share_rate_limit", True),
            )
            checks = GitHubChecks(
                token=config.get("github_token"),
                budget=budget,
                timeout=config.get("request_timeout", 15),
            )
        return cls(
            SchemaValidator.from_config(config).validate,
            remote=checks,
            allowed_extensions=config.get("allowed_extensions", (".yml",)),
            max_workers=config.get("max_workers", 4),
        )

    def supports(self, project: Project) -> bool:
        return project.extension in self.allowed_extensions

    def review(self, project: Project) -> ReviewResult:
        path = project.relative_path

        if not self.supports(project):
            return UnsupportedExtensionResult(path)

        schema_errors = self._validate_schema(project)
        if schema_errors:
            return SchemaErrorResult(path, tuple(schema_errors))

        tag_errors = self._validate_tags(project)
        if tag_errors:
            return TagErrorResult(path, tuple(tag_errors))

        if not is_valid_url(project.link):
            return UrlErrorResult(path, project.link)

        if self._remote is None or not project.is_remote_tracked:
            return ValidResult(path)

        message = repository_message(project, self._remote)
        if message is not None:
            return RepositoryErrorResult(path, message)

        message = label_message(project, self._remote)
        if message is not None:
            return LabelErrorResult(path, message)

        return ValidResult(path)

    def review_all(self, projects: list[Project]) -> dict[str, ReviewResult]:
        """Review projects in parallel; the mapping follows the input order."""
        if not projects:
            return {}
        workers = max(1, min(self._max_workers, len(projects)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(self.review, projects))
        return {r.path: r for r in results}


def load_projects(directory: Path | str, files: Iterable[str]) -> list[Project]:
    """Load each file relative to directory, dropping the ones that cannot be read.

    Deleted or renamed files show up in a pull request's change list but no
    longer exist in the working tree; they are not reviewed.
    """
    directory = Path(directory)
    projects = []
    for relative_path in files:
        full_path = directory / relative_path
        try:
            projects.append(load_project(relative_path, full_path))
        except OSError as e:
            logger.info("Skipping %s: %s", relative_path, e)
    return projects


def review_batch(projects: list[Project], reviewer: ProjectReviewer) -> Report:
    """Review a pull request's changed projects.

    A file with a disallowed extension makes the whole batch an
    "unexpected files" report: only those files are classified and the
    remaining projects are not reviewed at all.
    """
    unsupported = [p for p in projects if not reviewer.supports(p)]
    if unsupported:
        return Report(
            results={p.relative_path: reviewer.review(p) for p in unsupported},
            non_yaml_files=tuple(p.relative_path for p in unsupported),
        )
    return Report(results=reviewer.review_all(projects))


def validate_directory(root: Path | str, reviewer: ProjectReviewer, projects_dir: str = "_data/projects") -> Report:
    """Review every project file in a listings repository and check its layout."""
    root = Path(root)
    scan = scan_directory(root, projects_dir, reviewer.allowed_extensions)

    projects_path = root / projects_dir
    files = []
    if projects_path.is_dir():
        files = sorted(
            p.relative_to(root).as_posix()
            for p in projects_path.iterdir()
            if p.is_file() and p.suffix in reviewer.allowed_extensions
        )

    projects = load_projects(root, files)
    logger.debug("Reviewing %d project file(s) under %s", len(projects), projects_path)

    return Report(
        results=reviewer.review_all(projects),
        stray_files=scan.stray_files,
        non_yaml_files=scan.non_yaml_files,
    )
