"""Project records, review results and the aggregated report.

A review run builds one ``Project`` per changed file, classifies each into
exactly one ``ReviewResult`` variant and combines the results into a
``Report``. All three are immutable once constructed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Any, ClassVar

import yaml

_GITHUB_LINK_RE = re.compile(
    r"^https?://(?:www\.)?github\.com/(?P<owner>[^/\s?#]+)/(?P<name>[^/\s?#]+)",
    re.IGNORECASE,
)

# Above this many projects a batch is summarised instead of listed in full.
_DETAIL_LIMIT = 2


@dataclass(frozen=True)
class Project:
    """A parsed project listing file.

    ``data`` is whatever the YAML document contained; validators are
    responsible for rejecting documents that are not the expected mapping.
    """

    relative_path: str
    full_path: Path
    data: Any = None
    parse_error: str | None = None

    @property
    def extension(self) -> str:
        return PurePosixPath(self.relative_path).suffix

    @property
    def tags(self) -> list | None:
        if not isinstance(self.data, dict):
            return None
        return self.data.get("tags")

    @property
    def _upforgrabs(self) -> dict:
        if not isinstance(self.data, dict):
            return {}
        section = self.data.get("upforgrabs")
        return section if isinstance(section, dict) else {}

    @property
    def link(self) -> Any:
        return self._upforgrabs.get("link")

    @property
    def label(self) -> Any:
        return self._upforgrabs.get("name")

    @property
    def owner_name_pair(self) -> str | None:
        """Return ``owner/name`` when the link points at a GitHub repository."""
        if not isinstance(self.link, str):
            return None
        match = _GITHUB_LINK_RE.match(self.link)
        if not match:
            return None
        return f"{match.group('owner')}/{match.group('name')}"

    @property
    def is_remote_tracked(self) -> bool:
        return self.owner_name_pair is not None


def load_project(relative_path: str, full_path: Path | str) -> Project:
    """Read and parse one project file.

    YAML syntax errors and values the loader cannot construct are kept on
    the record so they can be reported as schema errors. ``OSError``
    propagates: a file that cannot be opened is not reviewed at all.
    """
    full_path = Path(full_path)
    raw = full_path.read_bytes()
    try:
        data = yaml.safe_load(raw.decode("utf-8"))
    except UnicodeDecodeError:
        return Project(relative_path, full_path, parse_error="Unable to parse the contents of file - not UTF-8 text")
    except yaml.MarkedYAMLError as e:
        mark = e.problem_mark
        line = mark.line + 1 if mark else "?"
        offset = mark.column + 1 if mark else "?"
        problem = e.problem or str(e)
        return Project(
            relative_path,
            full_path,
            parse_error=f"Unable to parse the contents of file - Line: {line}, Offset: {offset}, Problem: {problem}",
        )
    except yaml.YAMLError as e:
        return Project(relative_path, full_path, parse_error=f"Unable to parse the contents of file - {e}")
    except ValueError as e:
        # Raised by the constructors, e.g. an impossible timestamp like 2020-02-30.
        return Project(relative_path, full_path, parse_error=f"Unable to parse the contents of file - {e}")
    return Project(relative_path, full_path, data=data)


class ResultKind(str, Enum):
    VALID = "valid"
    SCHEMA_ERROR = "schema-error"
    TAG_ERROR = "tag-error"
    URL_ERROR = "url-error"
    REPOSITORY_ERROR = "repository-error"
    LABEL_ERROR = "label-error"
    UNSUPPORTED_EXTENSION = "unsupported-extension"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ReviewResult:
    """Classified outcome of reviewing one project.

    Each subclass corresponds to one ``ResultKind`` and carries only the
    fields that make sense for it.
    """

    path: str
    kind: ClassVar[ResultKind] = ResultKind.UNKNOWN

    @property
    def is_valid(self) -> bool:
        return self.kind is ResultKind.VALID

    @property
    def details(self) -> Any:
        return None


@dataclass(frozen=True)
class ValidResult(ReviewResult):
    kind: ClassVar[ResultKind] = ResultKind.VALID


@dataclass(frozen=True)
class SchemaErrorResult(ReviewResult):
    errors: tuple[str, ...] = ()
    kind: ClassVar[ResultKind] = ResultKind.SCHEMA_ERROR

    @property
    def details(self) -> tuple[str, ...]:
        return self.errors


@dataclass(frozen=True)
class TagErrorResult(ReviewResult):
    errors: tuple[str, ...] = ()
    kind: ClassVar[ResultKind] = ResultKind.TAG_ERROR

    @property
    def details(self) -> tuple[str, ...]:
        return self.errors


@dataclass(frozen=True)
class UrlErrorResult(ReviewResult):
    url: Any = None
    kind: ClassVar[ResultKind] = ResultKind.URL_ERROR

    @property
    def details(self) -> Any:
        return self.url


@dataclass(frozen=True)
class RepositoryErrorResult(ReviewResult):
    message: str = ""
    kind: ClassVar[ResultKind] = ResultKind.REPOSITORY_ERROR

    @property
    def details(self) -> str:
        return self.message


@dataclass(frozen=True)
class LabelErrorResult(ReviewResult):
    message: str = ""
    kind: ClassVar[ResultKind] = ResultKind.LABEL_ERROR

    @property
    def details(self) -> str:
        return self.message


@dataclass(frozen=True)
class UnsupportedExtensionResult(ReviewResult):
    kind: ClassVar[ResultKind] = ResultKind.UNSUPPORTED_EXTENSION


class PresentationStrategy(str, Enum):
    UNEXPECTED_FILES = "unexpected-files"
    SUMMARY = "summary"
    DETAILED = "detailed"


@dataclass(frozen=True)
class Report:
    """Aggregate of every result produced in one run.

    ``results`` keeps insertion order: presenters list projects in the order
    the files were given.
    """

    results: dict[str, ReviewResult] = field(default_factory=dict)
    stray_files: tuple[str, ...] = ()
    non_yaml_files: tuple[str, ...] = ()

    @property
    def valid_results(self) -> list[ReviewResult]:
        return [r for r in self.results.values() if r.is_valid]

    @property
    def flagged_results(self) -> list[ReviewResult]:
        return [r for r in self.results.values() if not r.is_valid]

    @property
    def has_errors(self) -> bool:
        return bool(self.flagged_results or self.stray_files or self.non_yaml_files)

    @property
    def strategy(self) -> PresentationStrategy:
        if self.non_yaml_files:
            return PresentationStrategy.UNEXPECTED_FILES
        if len(self.results) > _DETAIL_LIMIT:
            return PresentationStrategy.SUMMARY
        return PresentationStrategy.DETAILED
