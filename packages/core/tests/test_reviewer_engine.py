"""Tests for the per-project review engine."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from upforgrabs_core.gh.checks import RemoteChecks, RemoteStatus, StatusReason
from upforgrabs_core.models import Project, ResultKind, ValidResult
from upforgrabs_core.reviewer import ProjectReviewer

LABEL_URL = "https://github.com/owner/repo/labels/help%20wanted"


def make_project(path="_data/projects/repo.yml", link=LABEL_URL, label="help wanted"):
    data = {
        "name": "Repo",
        "desc": "A project",
        "site": "https://repo.dev",
        "tags": ["python"],
        "upforgrabs": {"name": label, "link": link},
    }
    return Project(path, Path(path), data=data)


class StubChecks(RemoteChecks):
    def __init__(self, repository=None, label=None):
        self.repository_status = repository or RemoteStatus(StatusReason.OK)
        self.label_status = label or RemoteStatus(StatusReason.OK, url=LABEL_URL)
        self.calls = []

    def check_repository(self, owner_name):
        self.calls.append(("repository", owner_name))
        return self.repository_status

    def check_label(self, owner_name, label):
        self.calls.append(("label", owner_name, label))
        return self.label_status


def make_reviewer(schema_errors=(), tag_errors=(), remote=None):
    return ProjectReviewer(
        validate_schema=MagicMock(return_value=list(schema_errors)),
        validate_tags=MagicMock(return_value=list(tag_errors)),
        remote=remote,
    )


# ---------------------------------------------------------------------------
# Local stages
# ---------------------------------------------------------------------------


class TestLocalStages:
    def test_clean_offline_project_is_valid(self):
        result = make_reviewer().review(make_project())
        assert result == ValidResult("_data/projects/repo.yml")

    def test_non_github_project_skips_remote_checks(self):
        remote = StubChecks()
        result = make_reviewer(remote=remote).review(make_project(link="https://gitlab.com/o/r/-/issues"))
        assert result.kind == ResultKind.VALID
        assert remote.calls == []

    def test_unsupported_extension_stops_everything(self):
        reviewer = make_reviewer(schema_errors=["bad"], remote=StubChecks())
        result = reviewer.review(make_project(path="_data/projects/repo.json"))
        assert result.kind == ResultKind.UNSUPPORTED_EXTENSION
        reviewer._validate_schema.assert_not_called()

    def test_schema_errors(self):
        reviewer = make_reviewer(schema_errors=["Required field 'desc' is missing"], tag_errors=["x"])
        result = reviewer.review(make_project())
        assert result.kind == ResultKind.SCHEMA_ERROR
        assert result.details == ("Required field 'desc' is missing",)
        reviewer._validate_tags.assert_not_called()

    def test_tag_errors_short_circuit_later_stages(self):
        remote = StubChecks()
        errors = ["Tag 'Web' contains invalid characters. Allowed characters: a-z, 0-9, +, #, . or -"]
        reviewer = make_reviewer(tag_errors=errors, remote=remote)

        result = reviewer.review(make_project(link="not a url"))

        assert result.kind == ResultKind.TAG_ERROR
        assert list(result.details) == errors
        assert remote.calls == []

    @pytest.mark.parametrize("link", ["github.com/owner/repo", "http://[::1", "ftp://example.com", None])
    def test_bad_link_is_url_error(self, link):
        remote = StubChecks()
        result = make_reviewer(remote=remote).review(make_project(link=link))
        assert result.kind == ResultKind.URL_ERROR
        assert result.details == link
        assert remote.calls == []


# ---------------------------------------------------------------------------
# Repository stage
# ---------------------------------------------------------------------------


class TestRepositoryStage:
    def test_archived(self):
        remote = StubChecks(repository=RemoteStatus(StatusReason.ARCHIVED))
        result = make_reviewer(remote=remote).review(make_project())
        assert result.kind == ResultKind.REPOSITORY_ERROR
        assert result.details == (
            "The GitHub repository 'owner/repo' has been marked as archived, which suggests it is not active."
        )
        assert ("label", "owner/repo", "help wanted") not in remote.calls

    def test_missing(self):
        remote = StubChecks(repository=RemoteStatus(StatusReason.MISSING))
        result = make_reviewer(remote=remote).review(make_project())
        assert result.details == (
            "The GitHub repository 'owner/repo' cannot be found. Please confirm the location of the project."
        )

    def test_redirect(self):
        status = RemoteStatus(StatusReason.REDIRECT, old_location="owner/repo", location="new/repo")
        result = make_reviewer(remote=StubChecks(repository=status)).review(make_project())
        assert result.details == (
            "The GitHub repository 'owner/repo' is now at 'new/repo'. Please update this project before this is merged."
        )

    def test_error_carries_detail(self):
        status = RemoteStatus(StatusReason.ERROR, error="500 boom")
        result = make_reviewer(remote=StubChecks(repository=status)).review(make_project())
        assert result.kind == ResultKind.REPOSITORY_ERROR
        assert result.details.endswith("Error details: 500 boom")

    def test_rate_limited_is_treated_as_passed(self):
        remote = StubChecks(repository=RemoteStatus.inconclusive())
        result = make_reviewer(remote=remote).review(make_project())
        assert result.kind == ResultKind.VALID
        assert ("label", "owner/repo", "help wanted") in remote.calls

    def test_rate_limited_ignores_advisory_reason(self):
        status = RemoteStatus(StatusReason.ARCHIVED, rate_limited=True)
        result = make_reviewer(remote=StubChecks(repository=status)).review(make_project())
        assert result.kind == ResultKind.VALID


# ---------------------------------------------------------------------------
# Label stage
# ---------------------------------------------------------------------------


class TestLabelStage:
    def test_matching_link_is_valid(self):
        result = make_reviewer(remote=StubChecks()).review(make_project())
        assert result.kind == ResultKind.VALID

    def test_error(self):
        status = RemoteStatus(StatusReason.ERROR, error="502 bad gateway")
        result = make_reviewer(remote=StubChecks(label=status)).review(make_project())
        assert result.kind == ResultKind.LABEL_ERROR
        assert "502 bad gateway" in result.details

    def test_repository_missing(self):
        status = RemoteStatus(StatusReason.REPOSITORY_MISSING)
        result = make_reviewer(remote=StubChecks(label=status)).review(make_project())
        assert result.kind == ResultKind.LABEL_ERROR
        assert "I couldn't find the GitHub repository 'owner/repo'" in result.details

    def test_label_missing_points_at_label_list(self):
        status = RemoteStatus(StatusReason.MISSING)
        result = make_reviewer(remote=StubChecks(label=status)).review(make_project())
        assert result.kind == ResultKind.LABEL_ERROR
        assert "'help wanted'" in result.details
        assert "https://github.com/owner/repo/labels" in result.details

    def test_label_link_mismatch_asks_for_canonical_url(self):
        project = make_project(link="https://github.com/owner/repo/labels/help-wanted")
        result = make_reviewer(remote=StubChecks()).review(project)
        assert result.kind == ResultKind.LABEL_ERROR
        assert f"Please update it to `{LABEL_URL}`." in result.details

    def test_non_label_link_mismatch_is_fine(self):
        project = make_project(link="https://github.com/owner/repo/issues?q=label%3A%22help+wanted%22")
        result = make_reviewer(remote=StubChecks()).review(project)
        assert result.kind == ResultKind.VALID

    def test_rate_limited_is_treated_as_passed(self):
        project = make_project(link="https://github.com/owner/repo/labels/other")
        result = make_reviewer(remote=StubChecks(label=RemoteStatus.inconclusive())).review(project)
        assert result.kind == ResultKind.VALID


# ---------------------------------------------------------------------------
# Determinism and fan-out
# ---------------------------------------------------------------------------


def test_repeated_reviews_are_identical():
    reviewer = make_reviewer(remote=StubChecks(label=RemoteStatus(StatusReason.MISSING)))
    project = make_project()
    assert reviewer.review(project) == reviewer.review(project)


def test_review_all_preserves_input_order():
    paths = [f"_data/projects/p{i}.yml" for i in (5, 1, 4, 2, 3)]
    reviewer = make_reviewer()
    results = reviewer.review_all([make_project(path=p) for p in paths])
    assert list(results) == paths


def test_review_all_empty():
    assert make_reviewer().review_all([]) == {}


def test_from_config_offline_has_no_remote():
    reviewer = ProjectReviewer.from_config({"allowed_extensions": [".yml"], "max_workers": 2})
    assert reviewer._remote is None
    assert reviewer.allowed_extensions == (".yml",)


def test_from_config_remote_builds_github_checks(mocker):
    github_checks = mocker.patch("upforgrabs_core.reviewer.GitHubChecks")
    ProjectReviewer.from_config({"github_token": "tok", "request_timeout": 5}, remote=True)
    kwargs = github_checks.call_args.kwargs
    assert kwargs["token"] == "tok"
    assert kwargs["timeout"] == 5
